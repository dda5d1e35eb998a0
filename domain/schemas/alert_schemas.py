"""Schemas for expiry alerts: query groupings, payloads and dispatch outcomes"""

from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from datetime import date

from domain.enums import ChannelName, DispatchStatus, NotifyOutcome


class ExpiringItem(BaseModel):
    """The subset of a food item an alert needs"""

    item_name: str
    category: Optional[str] = None
    expiry_date: date

    model_config = {"from_attributes": True}


class ExpiryGroup(BaseModel):
    """Items qualifying under one query policy for a single user"""

    user_id: int
    name: str = ""
    phone: str
    items: List[ExpiringItem] = Field(default_factory=list)


class AlertPayload(BaseModel):
    """What gets sent: free-form body plus variables for the approved template"""

    body: str
    template_vars: Dict[str, str] = Field(
        ..., description='{"1": send date, "2": send time}'
    )


class ChannelResult(BaseModel):
    """Outcome of a single channel attempt"""

    channel: ChannelName
    success: bool
    message_sid: Optional[str] = None
    error: Optional[str] = None


class DispatchResult(BaseModel):
    """Outcome of the whole fallback chain for one recipient"""

    status: DispatchStatus
    phone: str
    channel: Optional[ChannelName] = None
    message_sid: Optional[str] = None
    attempts: List[ChannelResult] = Field(default_factory=list)


class JobReport(BaseModel):
    """Summary of one scheduled job run"""

    job: str
    users_considered: int = 0
    sent: int = 0
    skipped: int = 0
    failed: int = 0


class NotifyResult(BaseModel):
    """Result of the on-demand notifier (never carries the message body)"""

    outcome: NotifyOutcome
    user_id: int
    item_count: int = 0
    dispatch: Optional[DispatchResult] = None

    def as_text(self) -> str:
        if self.outcome == NotifyOutcome.NO_ITEMS:
            return "No expiring-soon items for this user."
        if self.outcome == NotifyOutcome.SKIPPED:
            return "Alert skipped: messaging client not configured."
        channel = self.dispatch.channel.value if self.dispatch and self.dispatch.channel else "unknown"
        return f"Alert sent via {channel}."


class TestAlertRequest(BaseModel):
    """Body of the manual test-alert endpoint"""

    __test__ = False

    phone: str = Field(..., description="Recipient, e.g. +911234567890")
    name: str = Field(default="", description="Display name used in the greeting")
