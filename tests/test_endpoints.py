"""
HTTP-level tests for the on-demand and health routes.

Each test builds its own app around a notifier backed by the in-memory
store and FakeMessagingClient; the recurring jobs are disabled.
"""

import pytest
from fastapi.testclient import TestClient

from main import create_app
from services.channel_dispatcher import build_default_dispatcher
from services.expiry_notifier import ExpiryNotifier
from test_fixtures import (
    FakeMessagingClient,
    db_session,
    dispatcher,
    fake_client,
    fixed_clock,
    make_food_item,
    make_settings,
    make_user,
    notifier,
    session_factory,
)


@pytest.fixture
def client(notifier):
    with TestClient(create_app(notifier=notifier, scheduler_enabled=False)) as test_client:
        yield test_client


class TestNotifyUserEndpoint:
    def test_zero_user_id_is_bad_request(self, client, fake_client):
        response = client.get("/notify/user/0")
        assert response.status_code == 400
        assert response.text == "Missing user_id"
        assert fake_client.calls == []

    def test_non_numeric_user_id_is_bad_request(self, client):
        response = client.get("/notify/user/abc")
        assert response.status_code == 400

    def test_unknown_user(self, client):
        response = client.get("/notify/user/9999")
        assert response.status_code == 404
        assert response.text == "User not found"

    def test_invalid_phone(self, client, db_session):
        user = make_user(db_session, phone="1234567890")
        response = client.get(f"/notify/user/{user.id}")
        assert response.status_code == 400
        assert response.text == "User phone is missing or invalid format."

    def test_no_items(self, client, fake_client, db_session):
        user = make_user(db_session)
        response = client.get(f"/notify/user/{user.id}")
        assert response.status_code == 200
        assert response.text == "No expiring-soon items for this user."
        assert fake_client.calls == []

    def test_alert_sent(self, client, fake_client, db_session):
        user = make_user(db_session)
        make_food_item(db_session, user, "Milk", days_from_today=1)

        response = client.get(f"/notify/user/{user.id}")

        assert response.status_code == 200
        assert response.text == "Alert sent via whatsapp_freeform."
        assert response.headers["content-type"].startswith("text/plain")
        assert fake_client.methods() == ["send_freeform"]

    def test_all_channels_failing(self, session_factory, db_session):
        failing = FakeMessagingClient(fail={"send_freeform", "send_template", "send_sms"})
        notifier = ExpiryNotifier(
            session_factory, build_default_dispatcher(make_settings(), failing), fixed_clock
        )
        user = make_user(db_session)
        make_food_item(db_session, user, days_from_today=0)

        with TestClient(create_app(notifier=notifier, scheduler_enabled=False)) as client:
            response = client.get(f"/notify/user/{user.id}")

        assert response.status_code == 500
        assert response.text.startswith("Failed to send alert:")
        assert "exhausted" in response.text


class TestTestAlertEndpoint:
    def test_sends_sample(self, client, fake_client):
        response = client.post("/notify/test", json={"phone": "+911234567890", "name": "Akriti"})
        assert response.status_code == 200
        assert response.text == (
            "Test alert sent via whatsapp_freeform. Check your phone and logs."
        )
        assert "Yogurt" in fake_client.calls[0][2]

    def test_bad_phone(self, client, fake_client):
        response = client.post("/notify/test", json={"phone": "12345"})
        assert response.status_code == 400
        assert fake_client.calls == []

    def test_missing_phone_is_validation_error(self, client):
        response = client.post("/notify/test", json={})
        assert response.status_code == 422
        assert response.json()["success"] is False


class TestHealthCheck:
    def test_health(self, client):
        response = client.get("/health-check")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["scheduler_running"] is False
        assert body["messaging_configured"] is True
        assert set(body["next_runs"]) == {"soon_window", "today_exact"}

    def test_unknown_route_is_404(self, client):
        response = client.get("/nope")
        assert response.status_code == 404
