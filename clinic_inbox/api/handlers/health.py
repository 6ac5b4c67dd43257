"""
Health check handler.
"""

from datetime import datetime, timezone
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ...config import get_settings
from ...core.exceptions import DatastoreError
from ...services.store import Datastore


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str
    timestamp: str
    version: str
    uptime: float


class HealthHandler:
    """Handler for health check endpoints."""

    def __init__(self, store: Datastore):
        self.settings = get_settings()
        self.store = store
        self.start_time = datetime.now(timezone.utc)
        self.router = APIRouter()
        self._setup_routes()

    def _setup_routes(self):
        """Setup health check routes."""

        @self.router.get("/", response_model=HealthResponse)
        async def health_check():
            """Basic health check endpoint."""
            now = datetime.now(timezone.utc)
            return HealthResponse(
                status="healthy",
                timestamp=now.isoformat(),
                version=self.settings.app_version,
                uptime=(now - self.start_time).total_seconds(),
            )

        @self.router.get("/ready")
        async def readiness_check():
            """Ready once the datastore answers queries."""
            try:
                await self.store.get_booking_staff()
            except DatastoreError as e:
                return JSONResponse(
                    status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                    content={"status": "not_ready", "error": str(e)},
                )
            return {"status": "ready"}

        @self.router.get("/live")
        async def liveness_check():
            return {"status": "alive"}
