# eventhire/services/notifications.py
"""
Outbound e-mail notifications.

Delivery is fire-and-forget: routes schedule ``Notifier.notify`` on
FastAPI ``BackgroundTasks`` after their own commit, and any delivery
failure is logged here and never reaches the caller.
"""
import logging
import smtplib
from email.message import EmailMessage
from functools import lru_cache

from eventhire.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

WELCOME = "welcome"
PASSWORD_RESET = "password-reset"
BOOKING_CONFIRMED = "booking-confirmed"
BOOKING_RECEIVED = "booking-received"
JOB_OFFER = "job-offer"
ACCOUNT_APPROVED = "account-approved"

TEMPLATES = {
    WELCOME: (
        "Welcome to EventHire",
        "Hi {name},\n\nYour {role} account has been created.{approval_note}\n",
    ),
    PASSWORD_RESET: (
        "Password reset request",
        "Hi {name},\n\nUse this link to reset your password: {reset_url}\n"
        "The link expires in 10 minutes.\n",
    ),
    BOOKING_CONFIRMED: (
        "Booking request sent: {event_title}",
        "Hi {name},\n\nYour booking #{order_id} with {vendor_name} for {event_date} "
        "({start_time}-{end_time}) has been received and is pending confirmation.\n",
    ),
    BOOKING_RECEIVED: (
        "New booking: {event_title}",
        "Hi {name},\n\n{customer_name} booked you for {event_title} on {event_date} "
        "({start_time}-{end_time}), {guest_count} guests, quoted {currency} {quoted_price}.\n",
    ),
    JOB_OFFER: (
        "New job offer: {position}",
        "Hi {name},\n\n{vendor_name} offered you a {position} job on {work_date} "
        "({start_time}-{end_time}) at {currency} {hourly_rate}/hour, {total_amount} total.\n",
    ),
    ACCOUNT_APPROVED: (
        "Your account has been approved",
        "Hi {name},\n\nYour {role} account is approved. You can now take bookings.\n",
    ),
}

NOTIFICATION_KINDS = tuple(TEMPLATES)


class Notifier:
    def __init__(self, settings: Settings):
        self.settings = settings

    def render(self, kind: str, recipient: str, payload: dict) -> EmailMessage:
        if kind not in TEMPLATES:
            raise ValueError(f"Unknown notification kind: {kind}")
        subject, body = TEMPLATES[kind]
        msg = EmailMessage()
        msg["Subject"] = subject.format(**payload)
        msg["From"] = self.settings.email_from
        msg["To"] = recipient
        msg.set_content(body.format(**payload))
        return msg

    def notify(self, kind: str, recipient: str, payload: dict) -> bool:
        """Send one notification. Returns False when skipped or failed."""
        try:
            msg = self.render(kind, recipient, payload)
        except (KeyError, ValueError):
            logger.exception("Could not render %s notification for %s", kind, recipient)
            return False

        if not self.settings.email_enabled:
            logger.info("Email credentials not configured, skipping %s notification to %s", kind, recipient)
            return False

        try:
            self.deliver(msg)
        except (smtplib.SMTPException, OSError) as exc:
            logger.warning("Failed to send %s notification to %s: %s", kind, recipient, exc)
            return False

        logger.info("Sent %s notification to %s", kind, recipient)
        return True

    def deliver(self, msg: EmailMessage) -> None:
        with smtplib.SMTP(self.settings.email_host, self.settings.email_port, timeout=10) as smtp:
            smtp.starttls()
            smtp.login(self.settings.email_user, self.settings.email_pass)
            smtp.send_message(msg)


@lru_cache
def get_notifier() -> Notifier:
    return Notifier(get_settings())
