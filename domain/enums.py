"""
Domain enums for FreshAlert.
"""

import enum


class ExpiryStatus(str, enum.Enum):
    """Freshness of an item relative to a reference instant"""

    EXPIRED = "Expired"
    EXPIRING_SOON = "Expires Soon"
    FRESH = "Fresh"


class ChannelName(str, enum.Enum):
    """Outbound transports, in fallback order"""

    WHATSAPP_FREEFORM = "whatsapp_freeform"
    WHATSAPP_TEMPLATE = "whatsapp_template"
    SMS = "sms"


class DispatchStatus(str, enum.Enum):
    """Final outcome of one dispatch"""

    SENT = "sent"
    SKIPPED = "skipped"


class NotifyOutcome(str, enum.Enum):
    """Result of an on-demand notification request"""

    NO_ITEMS = "no_items"
    SENT = "sent"
    SKIPPED = "skipped"
