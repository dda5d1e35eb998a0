"""
Alert composition - turns a user's expiring items into message content.

Two shapes are produced for every alert: a free-form text body (WhatsApp and
SMS) and the two variables of the pre-approved WhatsApp template.
"""

from datetime import date, datetime
from typing import Dict, Iterable, Sequence

from domain.schemas.alert_schemas import AlertPayload, ExpiringItem, ExpiryGroup
from services.expiry_time import time_left_phrase

ALERT_HEADER = "⚠ Food Alert!"
CLOSING_LINE = "Please check your inventory."
BULLET = "•"

# Fixed English names; strftime("%b") follows the process locale
MONTH_ABBR = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def pretty_date(value: date) -> str:
    """Short month, day, year: "Oct 21, 2026"."""
    return f"{MONTH_ABBR[value.month - 1]} {value.day}, {value.year}"


def format_item_line(item: ExpiringItem, reference_time: datetime) -> str:
    category = f" ({item.category})" if item.category else ""
    left = time_left_phrase(reference_time, item.expiry_date)
    return f"{BULLET} {item.item_name}{category} — {pretty_date(item.expiry_date)} ({left})"


def compose_alert_text(
    items: Iterable[ExpiringItem], user_name: str = "", *, reference_time: datetime
) -> str:
    """Itemized alert body with one bullet per item, in the given order."""
    lines = [format_item_line(item, reference_time) for item in items]
    greeting = f"Hi {user_name}, " if user_name else ""
    return (
        f"{ALERT_HEADER}\n"
        f"{greeting}these item(s) will expire soon:\n\n"
        + "\n".join(lines)
        + f"\n\n{CLOSING_LINE}"
    )


def compose_nothing_expiring_text(user_name: str = "") -> str:
    """Daily confirmation sent by the expiring-today job when nothing qualifies."""
    return f"{ALERT_HEADER}\nHi {user_name} — No food is expiring today. ✅"


def build_template_vars(sent_at: datetime) -> Dict[str, str]:
    """
    Template variables stamped with the send instant, en-IN style.

    "1" is the date as D/M/YYYY and "2" the 12-hour time, e.g. "3:51 pm".
    """
    hour = sent_at.hour % 12 or 12
    meridiem = "am" if sent_at.hour < 12 else "pm"
    return {
        "1": f"{sent_at.day}/{sent_at.month}/{sent_at.year}",
        "2": f"{hour}:{sent_at.minute:02d} {meridiem}",
    }


def build_payload(
    group: ExpiryGroup, sent_at: datetime, *, today_exact: bool = False
) -> AlertPayload:
    """Compose the payload for one group at send time."""
    if today_exact and not group.items:
        body = compose_nothing_expiring_text(group.name)
    else:
        body = compose_alert_text(group.items, group.name, reference_time=sent_at)
    return AlertPayload(body=body, template_vars=build_template_vars(sent_at))


def sample_items(today: date) -> Sequence[ExpiringItem]:
    """Two dairy items expiring today, used by the manual test alert."""
    return [
        ExpiringItem(item_name="Milk", category="dairy", expiry_date=today),
        ExpiringItem(item_name="Yogurt", category="dairy", expiry_date=today),
    ]
