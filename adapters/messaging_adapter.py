"""Twilio adapter for outbound WhatsApp and SMS messages.
"""

import json
import logging
from functools import partial
from typing import Dict, Optional

import anyio
from twilio.rest import Client

from app.config import Settings

logger = logging.getLogger("freshalert.messaging")

WHATSAPP_PREFIX = "whatsapp:"


def whatsapp_address(phone: str) -> str:
    """Twilio addresses WhatsApp recipients as whatsapp:+<number>"""
    return phone if phone.startswith(WHATSAPP_PREFIX) else f"{WHATSAPP_PREFIX}{phone}"


class MessagingClient:
    """
    Thin async wrapper over the Twilio REST client.

    Every send returns the Twilio message SID or raises whatever the
    Twilio library raised (TwilioRestException, TwilioException, network
    errors). The blocking HTTP call runs in a worker thread.
    """

    def __init__(self, account_sid: str, auth_token: str, client: Optional[Client] = None):
        self._client = client or Client(account_sid, auth_token)

    async def _create(self, **kwargs) -> str:
        message = await anyio.to_thread.run_sync(
            partial(self._client.messages.create, **kwargs)
        )
        return message.sid

    async def send_freeform(self, from_: str, to: str, body: str) -> str:
        """Free-form WhatsApp message (only deliverable inside the 24h session window)"""
        return await self._create(from_=from_, to=whatsapp_address(to), body=body)

    async def send_template(
        self, from_: str, to: str, content_sid: str, variables: Dict[str, str]
    ) -> str:
        """Pre-approved WhatsApp content template"""
        return await self._create(
            from_=from_,
            to=whatsapp_address(to),
            content_sid=content_sid,
            content_variables=json.dumps(variables),
        )

    async def send_sms(self, from_: str, to: str, body: str) -> str:
        """Plain SMS"""
        return await self._create(from_=from_, to=to, body=body)


def connect(settings: Settings) -> Optional[MessagingClient]:
    """Build the messaging client, or None when credentials are missing."""
    if not settings.messaging_configured() or not settings.twilio_whatsapp_from:
        logger.warning(
            "Twilio settings missing. Set TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN, "
            "TWILIO_WHATSAPP_FROM in .env"
        )
    if not settings.messaging_configured():
        return None
    try:
        client = MessagingClient(settings.twilio_account_sid, settings.twilio_auth_token)
        logger.info("Twilio messaging client initialised")
        return client
    except Exception as exc:
        logger.warning("Could not initialise Twilio client; alerts will be skipped: %s", exc)
        return None
