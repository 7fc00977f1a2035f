import smtplib

import pytest

from eventhire.core.config import Settings
from eventhire.main import app
from eventhire.services.notifications import NOTIFICATION_KINDS, Notifier, get_notifier


@pytest.fixture
def settings(monkeypatch):
    monkeypatch.setenv("EMAIL_USER", "mailer@example.com")
    monkeypatch.setenv("EMAIL_PASS", "app-password")
    return Settings()


def test_all_kinds_have_templates():
    assert set(NOTIFICATION_KINDS) == {
        "welcome", "password-reset", "booking-confirmed", "booking-received", "job-offer", "account-approved",
    }


def test_render_fills_template(settings):
    msg = Notifier(settings).render("account-approved", "ada@example.com", {"name": "Ada", "role": "vendor"})

    assert msg["To"] == "ada@example.com"
    assert msg["From"] == "mailer@example.com"
    assert "vendor account is approved" in msg.get_content()


def test_skipped_without_credentials(monkeypatch):
    monkeypatch.delenv("EMAIL_USER", raising=False)
    monkeypatch.delenv("EMAIL_PASS", raising=False)
    notifier = Notifier(Settings())

    def boom(msg):
        raise AssertionError("should not deliver")

    monkeypatch.setattr(notifier, "deliver", boom)
    assert notifier.notify("welcome", "x@example.com", {"name": "X", "role": "user", "approval_note": ""}) is False


def test_delivery_failure_is_swallowed(settings, monkeypatch):
    notifier = Notifier(settings)

    def refuse(msg):
        raise smtplib.SMTPAuthenticationError(535, b"bad credentials")

    monkeypatch.setattr(notifier, "deliver", refuse)
    assert notifier.notify("account-approved", "ada@example.com", {"name": "Ada", "role": "vendor"}) is False


def test_missing_payload_key_is_logged_not_raised(settings):
    assert Notifier(settings).notify("job-offer", "w@example.com", {"name": "W"}) is False


def test_failed_notification_does_not_fail_the_request(client, db, customer, vendor_user, order_details,
                                                       auth_headers, settings, monkeypatch):
    real = Notifier(settings)
    attempts = []

    def refuse(msg):
        attempts.append(msg["Subject"])
        raise smtplib.SMTPServerDisconnected("connection closed")

    monkeypatch.setattr(real, "deliver", refuse)
    app.dependency_overrides[get_notifier] = lambda: real
    details = order_details().model_dump(mode="json")

    resp = client.post(f"/api/vendors/{vendor_user.vendor_profile.id}/hire", headers=auth_headers(customer), json=details)

    assert resp.status_code == 201
    assert len(attempts) == 2
    db.refresh(vendor_user.vendor_profile)
    assert vendor_user.vendor_profile.total_transactions == 1
