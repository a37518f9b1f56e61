import json
from datetime import datetime, timedelta

import pytest

from habitat.core.errors import TransportError
from habitat.habitat_platform.outbox.models import OutboxMessage

pytestmark = pytest.mark.integration


def test_settings_report_consent_and_tokens(client, make_user, auth_header):
    user = make_user(allows_notifications=True, push_tokens=json.dumps(["A"]))
    body = client.get("/api/notifications/settings", headers=auth_header(user)).get_json()
    assert body["allowsNotifications"] is True
    assert body["hasTokens"] is True
    assert body["reservations"] is True


def test_update_settings(client, make_user, auth_header):
    user = make_user()
    resp = client.put(
        "/api/notifications/settings",
        json={"allowsNotifications": True},
        headers=auth_header(user),
    )
    assert resp.status_code == 200
    assert resp.get_json()["allowsNotifications"] is True


def test_settings_require_login(client):
    assert client.get("/api/notifications/settings").status_code == 401


def test_test_push_reaches_devices(client, make_user, auth_header, gateway):
    target = make_user(allows_notifications=True, push_tokens=json.dumps(["A", "B"]))
    admin = make_user(role="admin")
    resp = client.post(
        "/api/notifications/test-push",
        json={"userId": target.id, "title": "Salut", "body": "Test"},
        headers=auth_header(admin),
    )
    assert resp.status_code == 200
    assert resp.get_json()["delivered"] == 2
    assert [p.data["type"] for p in gateway.sent] == ["test", "test"]


def test_test_push_reports_partial_failure(client, make_user, auth_header, gateway):
    target = make_user(allows_notifications=True, push_tokens=json.dumps(["A", "B"]))
    gateway.fail_for["A"] = TransportError("timeout")
    resp = client.post(
        "/api/notifications/test-push",
        json={"userId": target.id, "title": "Salut", "body": "Test"},
        headers=auth_header(make_user(role="admin")),
    )
    body = resp.get_json()
    assert resp.status_code == 502
    assert body["error"] == "transport"
    assert body["attempted"] == 2
    assert body["delivered"] == 1


def test_test_push_without_consent_is_conflict(client, make_user, auth_header, gateway):
    target = make_user(allows_notifications=False)
    resp = client.post(
        "/api/notifications/test-push",
        json={"userId": target.id, "title": "Salut", "body": "Test"},
        headers=auth_header(make_user(role="admin")),
    )
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "not_permitted"
    assert gateway.attempts == []


def test_test_push_is_admin_only(client, make_user, auth_header):
    user = make_user()
    resp = client.post(
        "/api/notifications/test-push",
        json={"userId": user.id, "title": "x", "body": "y"},
        headers=auth_header(user),
    )
    assert resp.status_code == 403


def test_detailed_test_reports_token_count(client, make_user, auth_header, gateway):
    target = make_user(allows_notifications=True, push_tokens=json.dumps(["A", "B", "C"]))
    resp = client.post(
        f"/api/notifications/test-detailed/{target.id}",
        headers=auth_header(make_user(role="admin")),
    )
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["tokensCount"] == 3
    assert "3 tokens" in body["body"]


def test_welcome_is_scheduled_with_delay(app, client, make_user, auth_header, gateway):
    app.config["WELCOME_NOTIFICATION_DELAY_SECONDS"] = 2.0
    user = make_user(first_name="Mariem")
    before = datetime.utcnow()

    resp = client.post("/api/notifications/welcome", json={"userId": user.id}, headers=auth_header(user))

    assert resp.status_code == 202
    message = OutboxMessage.query.one()
    assert message.event_type == "notifications.welcome"
    assert message.payload == {"userId": user.id, "firstName": "Mariem"}
    assert message.available_at >= before + timedelta(seconds=2)
    assert gateway.attempts == []


def test_welcome_for_unknown_user(client, make_user, auth_header):
    resp = client.post(
        "/api/notifications/welcome",
        json={"userId": 987654},
        headers=auth_header(make_user(role="admin")),
    )
    assert resp.status_code == 404


def test_welcome_for_someone_else_is_forbidden(client, make_user, auth_header):
    target = make_user(first_name="Aicha")
    resp = client.post(
        "/api/notifications/welcome",
        json={"userId": target.id},
        headers=auth_header(make_user()),
    )
    assert resp.status_code == 403
    assert resp.get_json()["error"] == "forbidden"
    assert OutboxMessage.query.count() == 0


def test_admin_may_schedule_welcome_for_another_user(client, make_user, auth_header):
    target = make_user(first_name="Aicha")
    resp = client.post(
        "/api/notifications/welcome",
        json={"userId": target.id},
        headers=auth_header(make_user(role="admin")),
    )
    assert resp.status_code == 202
    assert OutboxMessage.query.one().payload["userId"] == target.id
