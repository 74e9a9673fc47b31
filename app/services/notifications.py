# app/services/notifications.py
"""
SMS notifications through Twilio, plus the outbox that booking writes into.

Bookings enqueue a ``Notification`` row in the same transaction as the
appointment. Delivery runs after commit and only updates the outbox row (and
the reminder flag once a reminder goes out), so a failed SMS is recorded and
retryable but never touches the booking itself. Reminders go through the same
rows, which keeps one record per appointment reminder.
"""

import logging
from typing import Optional

import httpx
from sqlalchemy import update
from sqlmodel import Session, select

from app import config
from app.core import utcnow
from app.models import Appointment, Notification

logger = logging.getLogger(__name__)

CONFIRMATION = "confirmation"
REMINDER = "reminder"

SENDING = "sending"


def _twilio_configured() -> bool:
    return bool(
        config.TWILIO_ACCOUNT_SID
        and config.TWILIO_AUTH_TOKEN
        and (config.TWILIO_MESSAGING_SERVICE_SID or config.TWILIO_FROM_NUMBER)
    )


def send_sms(to_phone: str, body: str) -> tuple[bool, Optional[str]]:
    """
    Send one SMS via the Twilio Messages API.

    Returns:
        Tuple of (success: bool, error_message: Optional[str])
    """
    if not _twilio_configured():
        # Fail-open for development
        logger.info(f"[SMS] Would send to {to_phone}: {body}")
        return True, None

    data = {"To": to_phone, "Body": body}
    if config.TWILIO_MESSAGING_SERVICE_SID:
        data["MessagingServiceSid"] = config.TWILIO_MESSAGING_SERVICE_SID
    else:
        data["From"] = config.TWILIO_FROM_NUMBER

    try:
        response = httpx.post(
            f"{config.TWILIO_API_BASE}/Accounts/{config.TWILIO_ACCOUNT_SID}/Messages.json",
            auth=(config.TWILIO_ACCOUNT_SID, config.TWILIO_AUTH_TOKEN),
            data=data,
            timeout=10.0,
        )
    except httpx.HTTPError as e:
        logger.error(f"[SMS] Twilio request failed for {to_phone}: {e}")
        return False, str(e)

    if response.status_code in (200, 201):
        try:
            sid = response.json().get("sid")
        except ValueError:
            sid = None
        logger.info(f"[SMS] Sent to {to_phone} (SID: {sid})")
        return True, None

    try:
        error_data = response.json()
    except ValueError:
        error_data = {}
    error_message = error_data.get("message", f"HTTP {response.status_code}")
    error_code = error_data.get("code")
    logger.error(f"[SMS] Twilio API error [{error_code}]: {error_message}")
    return False, f"[{error_code}] {error_message}" if error_code else error_message


def confirmation_body(details: dict) -> str:
    return (
        "Your appointment is confirmed!\n"
        f"{details['service_name']}\n"
        f"{details['date']} at {details['time']}\n\n"
        "See you soon!"
    )


def reminder_body(details: dict) -> str:
    return (
        "Appointment reminder\n"
        f"{details['service_name']}\n"
        f"{details['date']} at {details['time']}\n\n"
        "See you soon!"
    )


def send_booking_confirmation(phone: str, details: dict) -> bool:
    sent, _ = send_sms(phone, confirmation_body(details))
    return sent


def send_reminder(phone: str, details: dict) -> bool:
    sent, _ = send_sms(phone, reminder_body(details))
    return sent


def enqueue(session: Session, kind: str, phone: str, payload: dict, appointment_id=None) -> Notification:
    # Caller owns the transaction
    notification = Notification(kind=kind, phone=phone, payload=payload, appointment_id=appointment_id)
    session.add(notification)
    return notification


def claim(session: Session, notification_id: int, statuses) -> bool:
    """Move one row to ``sending`` if it is still in ``statuses``.

    Only one dispatcher can win the conditional UPDATE, so a row claimed by the
    post-booking task is skipped by a concurrent admin dispatch and vice versa.
    """
    result = session.exec(
        update(Notification)
        .where(Notification.id == notification_id)
        .where(Notification.status.in_(statuses))
        .where(Notification.attempts < config.NOTIFICATION_MAX_ATTEMPTS)
        .values(status=SENDING)
    )
    session.commit()
    return result.rowcount == 1


def deliver_notification(session: Session, notification: Notification) -> bool:
    sender = send_booking_confirmation if notification.kind == CONFIRMATION else send_reminder
    error = None
    try:
        sent = sender(notification.phone, notification.payload)
    except Exception as e:
        logger.exception(f"[SMS] Unexpected error delivering notification {notification.id}")
        sent, error = False, str(e)

    notification.attempts += 1
    if sent:
        notification.status = "sent"
        notification.sent_at = utcnow()
        notification.last_error = None
        if notification.kind == REMINDER and notification.appointment_id is not None:
            appt = session.get(Appointment, notification.appointment_id)
            if appt is not None:
                appt.reminder_sent = True
                session.add(appt)
    else:
        notification.status = "failed"
        notification.last_error = error or "SMS provider did not accept the message"
        logger.warning(
            f"Notification {notification.id} ({notification.kind}) failed, attempt {notification.attempts}"
        )

    session.add(notification)
    session.commit()
    return sent


def dispatch_pending(bind, appointment_id: Optional[int] = None, retry_failed: bool = False) -> dict:
    # Runs after the request session is gone, so it opens its own
    statuses = ["pending", "failed"] if retry_failed else ["pending"]
    result = {"sent": 0, "failed": 0}

    with Session(bind) as session:
        stmt = (
            select(Notification.id)
            .where(Notification.status.in_(statuses))
            .where(Notification.attempts < config.NOTIFICATION_MAX_ATTEMPTS)
            .order_by(Notification.id)
        )
        if appointment_id is not None:
            stmt = stmt.where(Notification.appointment_id == appointment_id)

        for notification_id in session.exec(stmt).all():
            if not claim(session, notification_id, statuses):
                continue
            notification = session.get(Notification, notification_id)
            if deliver_notification(session, notification):
                result["sent"] += 1
            else:
                result["failed"] += 1

    return result
