"""
WATI WhatsApp gateway.
"""

import asyncio
from typing import Optional
import httpx

from ...config import Settings, get_settings
from ...core.exceptions import WhatsAppAPIError
from ...logging import get_logger
from ...utils.phone import PhoneNumberParser
from ...utils.text import TextProcessor

logger = get_logger("clinic.whatsapp")

RETRYABLE_STATUS = {429}


class WhatsAppGateway:
    """Send session messages through the WATI API."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        backoff_base: float = 1.0,
    ):
        self.settings = settings or get_settings()
        self.transport = transport
        self.backoff_base = backoff_base
        self.phones = PhoneNumberParser(self.settings.country_code)

    def is_configured(self) -> bool:
        return self.settings.is_whatsapp_configured()

    def _url(self, phone: str) -> str:
        base = (self.settings.wati_api_url or "").rstrip("/")
        return f"{base}/api/v1/sendSessionMessage/{self.phones.for_gateway(phone)}"

    async def _send_chunk(self, client: httpx.AsyncClient, phone: str, chunk: str) -> None:
        """POST one chunk, retrying 429/5xx and transport errors with backoff."""
        retries = max(1, self.settings.wati_max_retries)
        backoff = self.backoff_base
        for attempt in range(1, retries + 1):
            try:
                resp = await client.post(
                    self._url(phone),
                    params={"messageText": chunk},
                    headers={"Authorization": f"Bearer {self.settings.wati_api_key}"},
                )
            except httpx.HTTPError as e:
                logger.warning(
                    {"event": "wa_send_error", "attempt": attempt, "error": str(e)}
                )
                if attempt < retries:
                    await asyncio.sleep(backoff)
                    backoff *= 2
                    continue
                raise WhatsAppAPIError(f"Request failed: {e}") from e

            if 200 <= resp.status_code < 300:
                return
            logger.error(
                {
                    "event": "wa_send_failed",
                    "status": resp.status_code,
                    "body": resp.text[:200],
                    "attempt": attempt,
                }
            )
            if (resp.status_code in RETRYABLE_STATUS or resp.status_code >= 500) and attempt < retries:
                await asyncio.sleep(backoff)
                backoff *= 2
                continue
            raise WhatsAppAPIError(f"HTTP error {resp.status_code}")

    async def send_message(self, phone: str, text: str) -> bool:
        """
        Send a text message, split into WhatsApp-sized chunks.

        Returns:
            True if every chunk was accepted. Failures are logged, never raised.
        """
        if not self.is_configured():
            logger.warning({"event": "wa_send_skipped", "reason": "gateway not configured"})
            return False

        chunks = TextProcessor.split_text_for_whatsapp(text, self.settings.wa_max_message_length)
        try:
            async with httpx.AsyncClient(
                timeout=self.settings.wati_timeout, transport=self.transport
            ) as client:
                for chunk in chunks:
                    await self._send_chunk(client, phone, chunk)
        except WhatsAppAPIError as e:
            logger.error({"event": "wa_send_gave_up", "phone": phone, "error": str(e)})
            return False

        logger.info({"event": "wa_outbound", "phone": phone, "chunks": len(chunks)})
        return True
