"""Services package - Business logic layer"""

from services.expiry_query_service import ExpiryQueryService
from services.channel_dispatcher import (
    Channel,
    ChannelDispatcher,
    WhatsAppFreeformChannel,
    WhatsAppTemplateChannel,
    SmsChannel,
    build_default_dispatcher,
)
from services.expiry_notifier import ExpiryNotifier
from services.alert_scheduler import AlertScheduler

# Note: expiry_time, alert_composer and validators contain plain functions, not classes

__all__ = [
    "ExpiryQueryService",
    "Channel",
    "ChannelDispatcher",
    "WhatsAppFreeformChannel",
    "WhatsAppTemplateChannel",
    "SmsChannel",
    "build_default_dispatcher",
    "ExpiryNotifier",
    "AlertScheduler",
]
