from typing import Any, Mapping, Optional, Sequence


class FreshAlertError(Exception):
    """Base class for errors raised by the expiry notification engine.

    Attributes:
        message: human-readable message
        details: optional mapping with extra context
        code: optional machine-readable error code
        http_status: suggested HTTP status code for handlers
    """

    http_status = 500
    default_message = "Internal error"

    def __init__(self, message: Optional[str] = None, details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"message": self.message}
        if self.code:
            payload["code"] = self.code
        if self.details:
            payload["details"] = self.details
        return payload

    def __str__(self) -> str:
        return self.message


class ServiceValidationError(FreshAlertError):
    """Raised when input is rejected before any store access or dispatch.

    Covers a non-positive user id and a phone number that does not match the
    international format. http_status is 400.
    """

    http_status = 400
    default_message = "Invalid input"


class NotFoundError(FreshAlertError):
    """Raised when a requested user was not found. http_status is 404."""

    http_status = 404
    default_message = "Not found"


class StoreError(FreshAlertError):
    """Raised when a read query against the inventory/user store fails.

    Fatal to the current job run or request; the next scheduled run retries.
    """

    http_status = 500
    default_message = "Database error"


class ChannelError(FreshAlertError):
    """A single messaging channel failed (network error or missing channel config).

    Always recovered by the dispatcher, which moves on to the next channel.
    """

    http_status = 502
    default_message = "Channel delivery failed"

    def __init__(self, channel: str, message: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.channel = channel


class AllChannelsFailedError(FreshAlertError):
    """Every channel in the fallback chain failed for one recipient."""

    http_status = 502
    default_message = "All alert channels failed"

    def __init__(self, phone: str, attempts: Sequence[Any] = (), message: Optional[str] = None):
        reasons = "; ".join(
            f"{a.channel}: {a.error}" for a in attempts if getattr(a, "error", None)
        )
        if message is None:
            message = f"All alert channels exhausted for {phone}"
            if reasons:
                message = f"{message} ({reasons})"
        super().__init__(message, details={"phone": phone}, code="ALL_CHANNELS_EXHAUSTED")
        self.phone = phone
        self.attempts = list(attempts)
