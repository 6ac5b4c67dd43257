"""
WhatsApp inbound webhook handler.
"""

from fastapi import APIRouter, Request, Response, status
from fastapi.responses import JSONResponse

from ...core.exceptions import InvalidPayloadError
from ...core.models import InboundPayload, WebhookResponse
from ...logging import get_logger
from ...services.inbound import InboundMessageService

logger = get_logger("clinic.webhook")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


def envelope(result: WebhookResponse, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    return JSONResponse(content=result.to_json(), status_code=status_code, headers=CORS_HEADERS)


class WhatsAppWebhook:
    """Handler for inbound WhatsApp messages."""

    def __init__(self, service: InboundMessageService):
        self.service = service
        self.router = APIRouter()
        self._setup_routes()

    def _setup_routes(self):
        """Setup WhatsApp webhook routes."""

        @self.router.options("/wa")
        async def whatsapp_preflight():
            return Response(status_code=status.HTTP_200_OK, headers=CORS_HEADERS)

        @self.router.post("/wa")
        async def receive_whatsapp_message(request: Request):
            """Handle one inbound WhatsApp message."""
            try:
                body = await request.json()
            except ValueError:
                return envelope(
                    WebhookResponse(success=False, error="Invalid JSON body"),
                    status.HTTP_400_BAD_REQUEST,
                )

            try:
                message = InboundPayload.from_body(body).to_message()
            except InvalidPayloadError as e:
                logger.warning({"event": "wa_invalid_payload", "error": str(e)})
                return envelope(WebhookResponse(success=False, error=str(e)), status.HTTP_400_BAD_REQUEST)

            try:
                result = await self.service.handle(message)
            except Exception as e:
                logger.exception({"event": "wa_inbound_failed", "phone": message.phone})
                return envelope(
                    WebhookResponse(success=False, error=str(e) or type(e).__name__),
                    status.HTTP_500_INTERNAL_SERVER_ERROR,
                )

            return envelope(result)
