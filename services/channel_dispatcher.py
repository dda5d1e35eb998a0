"""
Channel Dispatcher - delivers one alert through an ordered list of channels.

The default chain is WhatsApp free-form, then the pre-approved WhatsApp
template (needed when the recipient has no open 24h session), then SMS.
The first channel that succeeds wins; failures are logged and recorded, and
only exhausting every channel is an error.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from adapters.messaging_adapter import MessagingClient
from app.config import Settings
from app.exceptions import AllChannelsFailedError, ChannelError
from domain.enums import ChannelName, DispatchStatus
from domain.schemas.alert_schemas import AlertPayload, ChannelResult, DispatchResult

logger = logging.getLogger("freshalert.dispatcher")


class Channel(ABC):
    """One outbound transport. Subclasses implement _deliver()."""

    name: ChannelName

    def __init__(self, client: Optional[MessagingClient]):
        self.client = client

    @abstractmethod
    async def _deliver(self, phone: str, payload: AlertPayload) -> str:
        """Send and return the message SID. Raise on any failure."""

    def _require(self, value: Optional[str], what: str) -> str:
        if not value:
            raise ChannelError(self.name.value, f"No {what} configured.")
        return value

    async def send(self, phone: str, payload: AlertPayload) -> ChannelResult:
        """Attempt delivery; never raises, the failure reason goes in the result."""
        try:
            if self.client is None:
                raise ChannelError(self.name.value, "Messaging client not initialized.")
            sid = await self._deliver(phone, payload)
        except Exception as exc:
            return ChannelResult(channel=self.name, success=False, error=str(exc) or type(exc).__name__)
        return ChannelResult(channel=self.name, success=True, message_sid=sid)


class WhatsAppFreeformChannel(Channel):
    name = ChannelName.WHATSAPP_FREEFORM

    def __init__(self, client: Optional[MessagingClient], sender: Optional[str]):
        super().__init__(client)
        self.sender = sender

    async def _deliver(self, phone: str, payload: AlertPayload) -> str:
        sender = self._require(self.sender, "WhatsApp sender")
        return await self.client.send_freeform(sender, phone, payload.body)


class WhatsAppTemplateChannel(Channel):
    name = ChannelName.WHATSAPP_TEMPLATE

    def __init__(
        self,
        client: Optional[MessagingClient],
        sender: Optional[str],
        template_sid: Optional[str],
    ):
        super().__init__(client)
        self.sender = sender
        self.template_sid = template_sid

    async def _deliver(self, phone: str, payload: AlertPayload) -> str:
        sender = self._require(self.sender, "WhatsApp sender")
        template_sid = self._require(self.template_sid, "WhatsApp template SID")
        return await self.client.send_template(
            sender, phone, template_sid, payload.template_vars
        )


class SmsChannel(Channel):
    name = ChannelName.SMS

    def __init__(self, client: Optional[MessagingClient], sender: Optional[str]):
        super().__init__(client)
        self.sender = sender

    async def _deliver(self, phone: str, payload: AlertPayload) -> str:
        sender = self._require(self.sender, "SMS FROM number")
        return await self.client.send_sms(sender, phone, payload.body)


class ChannelDispatcher:
    """
    Tries channels in order, stopping at the first success.

    The dispatcher knows nothing about the concrete channels; it only needs
    to know whether a messaging client exists at all. Without one, dispatch
    is skipped instead of failing every channel in turn.
    """

    def __init__(self, channels: Sequence[Channel], client: Optional[MessagingClient]):
        self.channels: List[Channel] = list(channels)
        self.client = client

    @property
    def configured(self) -> bool:
        return self.client is not None

    async def dispatch(self, phone: str, payload: AlertPayload) -> DispatchResult:
        """
        Deliver one payload to one phone number.

        Returns:
            DispatchResult with status SENT (channel and SID set) or SKIPPED

        Raises:
            AllChannelsFailedError: every channel failed; carries each attempt
        """
        if not self.configured:
            logger.warning("Messaging client not initialized; alert to %s skipped.", phone)
            return DispatchResult(status=DispatchStatus.SKIPPED, phone=phone)

        attempts: List[ChannelResult] = []
        for channel in self.channels:
            result = await channel.send(phone, payload)
            attempts.append(result)
            if result.success:
                logger.info(
                    "%s sent to %s. SID: %s", channel.name.value, phone, result.message_sid
                )
                return DispatchResult(
                    status=DispatchStatus.SENT,
                    phone=phone,
                    channel=channel.name,
                    message_sid=result.message_sid,
                    attempts=attempts,
                )
            logger.warning("%s failed for %s: %s", channel.name.value, phone, result.error)

        error = AllChannelsFailedError(phone, attempts)
        logger.error(str(error))
        raise error


def build_default_dispatcher(
    settings: Settings, client: Optional[MessagingClient]
) -> ChannelDispatcher:
    """WhatsApp free-form -> WhatsApp template -> SMS"""
    channels = [
        WhatsAppFreeformChannel(client, settings.twilio_whatsapp_from),
        WhatsAppTemplateChannel(
            client, settings.twilio_whatsapp_from, settings.twilio_wa_template_sid
        ),
        SmsChannel(client, settings.twilio_sms_from),
    ]
    return ChannelDispatcher(channels, client)
