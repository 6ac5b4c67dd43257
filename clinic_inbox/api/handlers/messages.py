"""
Outbound messaging and follow-up control endpoints.
"""

from typing import Optional
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ...logging import get_logger
from ...services.inbound import InboundMessageService
from ..webhooks.whatsapp import CORS_HEADERS

logger = get_logger("clinic.messages")


class StopFollowupRequest(BaseModel):
    phone: Optional[str] = None
    appointment_id: Optional[str] = None


class SendMessageRequest(BaseModel):
    phone: Optional[str] = None
    message: Optional[str] = None
    patient_name: Optional[str] = None
    appointment_id: Optional[str] = None


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
        headers=CORS_HEADERS,
    )


class MessagesHandler:
    """Send messages on behalf of the clinic and stop follow-up sequences."""

    def __init__(self, service: InboundMessageService):
        self.service = service
        self.router = APIRouter()
        self._setup_routes()

    def _setup_routes(self):

        @self.router.post("/followup/stop")
        async def stop_followup(payload: StopFollowupRequest):
            """Stop active no-show follow-ups for a phone or an appointment."""
            if not payload.phone and not payload.appointment_id:
                return _error("phone or appointment_id required", status.HTTP_400_BAD_REQUEST)
            stopped = await self.service.stop_followups(
                phone=payload.phone, appointment_id=payload.appointment_id
            )
            logger.info({"event": "followup_stop", "stopped": stopped})
            return JSONResponse(content={"success": True, "stopped": stopped}, headers=CORS_HEADERS)

        @self.router.post("/messages/send")
        async def send_message(payload: SendMessageRequest):
            """Send a free-text WhatsApp message and record it in the log."""
            if not payload.phone:
                return _error("Missing phone", status.HTTP_400_BAD_REQUEST)
            if not payload.message:
                return _error("Missing message", status.HTTP_400_BAD_REQUEST)
            sent = await self.service.send_message(
                payload.phone,
                payload.message,
                patient_name=payload.patient_name,
                appointment_id=payload.appointment_id,
            )
            if not sent:
                return _error("Message not delivered", status.HTTP_502_BAD_GATEWAY)
            return JSONResponse(content={"success": True}, headers=CORS_HEADERS)
