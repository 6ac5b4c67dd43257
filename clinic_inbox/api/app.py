"""
FastAPI application factory and configuration.
"""

from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import Settings, get_settings
from ..logging import configure_logging, get_logger
from ..services.external import AIIntentClassifier, WhatsAppGateway
from ..services.inbound import InboundMessageService
from ..services.intent import IntentClassifier
from ..services.store import Datastore
from .middleware import SecurityHeaders, LoggingMiddleware
from .webhooks import WhatsAppWebhook
from .handlers import HealthHandler, MessagesHandler

logger = get_logger("clinic.app")


def build_service(settings: Optional[Settings] = None) -> InboundMessageService:
    """Wire the inbound service with its production collaborators."""
    settings = settings or get_settings()
    return InboundMessageService(
        store=Datastore(settings=settings),
        gateway=WhatsAppGateway(settings),
        classifier=IntentClassifier(AIIntentClassifier(settings)),
        settings=settings,
    )


def create_app(service: Optional[InboundMessageService] = None) -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()
    service = service or build_service(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level)
        await service.store.init_schema()
        logger.info(
            {
                "event": "startup",
                "database": service.store.path,
                "whatsapp": settings.is_whatsapp_configured(),
                "classifier": settings.is_classifier_configured(),
            }
        )
        yield

    app = FastAPI(
        title=settings.app_name,
        description=f"WhatsApp inbound webhook for {settings.clinic_name}",
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeaders)
    app.add_middleware(LoggingMiddleware)

    app.state.inbound_service = service

    health_handler = HealthHandler(service.store)
    whatsapp_webhook = WhatsAppWebhook(service)
    messages_handler = MessagesHandler(service)

    app.include_router(health_handler.router, prefix="/health", tags=["health"])
    app.include_router(whatsapp_webhook.router, prefix="/webhook", tags=["webhooks"])
    app.include_router(messages_handler.router, tags=["messages"])

    return app
