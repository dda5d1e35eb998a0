"""
App package - Application configuration and core utilities.
Contains settings and the exception taxonomy shared by services and routes.
"""

from app.config import settings
from app.exceptions import (
    FreshAlertError,
    ServiceValidationError,
    NotFoundError,
    StoreError,
    ChannelError,
    AllChannelsFailedError,
)

__all__ = [
    "settings",
    "FreshAlertError",
    "ServiceValidationError",
    "NotFoundError",
    "StoreError",
    "ChannelError",
    "AllChannelsFailedError",
]
