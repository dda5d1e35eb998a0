"""
Domain schemas package - Pydantic models for validation.
"""

from domain.schemas.alert_schemas import (
    ExpiringItem,
    ExpiryGroup,
    AlertPayload,
    ChannelResult,
    DispatchResult,
    JobReport,
    NotifyResult,
    TestAlertRequest,
)

__all__ = [
    "ExpiringItem",
    "ExpiryGroup",
    "AlertPayload",
    "ChannelResult",
    "DispatchResult",
    "JobReport",
    "NotifyResult",
    "TestAlertRequest",
]
