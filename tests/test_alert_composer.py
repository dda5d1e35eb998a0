"""
Tests for alert composition: itemized body, the nothing-expiring confirmation,
and the template variables stamped at send time.
"""

from datetime import date, datetime
from zoneinfo import ZoneInfo

from domain.schemas.alert_schemas import ExpiringItem, ExpiryGroup
from services.alert_composer import (
    BULLET,
    build_payload,
    build_template_vars,
    compose_alert_text,
    compose_nothing_expiring_text,
    pretty_date,
)

IST = ZoneInfo("Asia/Kolkata")
NOON = datetime(2026, 10, 19, 12, 0, tzinfo=IST)


def _items():
    return [
        ExpiringItem(item_name="Milk", category="dairy", expiry_date=date(2026, 10, 21)),
        ExpiringItem(item_name="Bread", category=None, expiry_date=date(2026, 10, 20)),
    ]


def test_pretty_date_short_month():
    assert pretty_date(date(2026, 10, 21)) == "Oct 21, 2026"
    assert pretty_date(date(2027, 1, 5)) == "Jan 5, 2027"


def test_compose_alert_text_layout():
    text = compose_alert_text(_items(), "Akriti", reference_time=NOON)
    lines = text.split("\n")

    assert lines[0] == "⚠ Food Alert!"
    assert lines[1] == "Hi Akriti, these item(s) will expire soon:"
    assert lines[2] == ""
    assert lines[3] == "• Milk (dairy) — Oct 21, 2026 (in 1 day)"
    assert lines[4] == "• Bread — Oct 20, 2026 (in 12 hours)"
    assert lines[5] == ""
    assert lines[6] == "Please check your inventory."


def test_compose_alert_text_without_name_has_no_greeting():
    text = compose_alert_text(_items()[:1], "", reference_time=NOON)
    assert "Hi" not in text
    assert text.split("\n")[1] == "these item(s) will expire soon:"


def test_nothing_expiring_differs_and_has_no_bullet():
    empty_today = build_payload(
        ExpiryGroup(user_id=1, name="Akriti", phone="+911234567890", items=[]),
        NOON,
        today_exact=True,
    )
    itemized = build_payload(
        ExpiryGroup(user_id=1, name="Akriti", phone="+911234567890", items=_items()),
        NOON,
        today_exact=True,
    )

    assert empty_today.body == compose_nothing_expiring_text("Akriti")
    assert empty_today.body != itemized.body
    assert BULLET not in empty_today.body
    assert "No food is expiring today" in empty_today.body
    assert BULLET in itemized.body


def test_template_vars_en_in_format():
    assert build_template_vars(datetime(2026, 10, 19, 15, 51)) == {
        "1": "19/10/2026",
        "2": "3:51 pm",
    }
    assert build_template_vars(datetime(2026, 3, 5, 0, 5))["2"] == "12:05 am"
    assert build_template_vars(datetime(2026, 3, 5, 12, 30))["2"] == "12:30 pm"


def test_payload_stamped_with_send_time_not_fetch_time():
    group = ExpiryGroup(user_id=1, name="", phone="+911234567890", items=_items())
    morning = build_payload(group, datetime(2026, 10, 19, 9, 0, tzinfo=IST))
    evening = build_payload(group, datetime(2026, 10, 19, 21, 15, tzinfo=IST))

    assert morning.template_vars["2"] == "9:00 am"
    assert evening.template_vars["2"] == "9:15 pm"
    assert "(in 15 hours)" in morning.body
    assert "(in 2 hours)" in evening.body


class _LocaleTrap(date):
    """A date that fails if formatted through strftime/format codes"""

    def __format__(self, spec):
        raise AssertionError("month name taken from the process locale")

    def strftime(self, fmt):
        raise AssertionError("month name taken from the process locale")


def test_pretty_date_does_not_depend_on_locale():
    assert pretty_date(_LocaleTrap(2026, 12, 3)) == "Dec 3, 2026"
    assert [pretty_date(date(2026, m, 1))[:3] for m in (1, 5, 9)] == ["Jan", "May", "Sep"]
