# app/services/reminders.py

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlmodel import Session, select

from app.core import utcnow, to_utc
from app.models import Appointment, Notification
from app.services import notifications
from app.services.booking import notification_details
from app.services.calendar_settings import load_settings

logger = logging.getLogger(__name__)

# half-width of the window around the configured lead time
WINDOW_SLACK_MINUTES = 15


def send_due_reminders(session: Session, now: Optional[datetime] = None) -> dict:
    settings = load_settings(session)
    reminder_minutes = settings.sms_reminder_minutes
    now = to_utc(now) if now is not None else utcnow()

    window_start = now + timedelta(minutes=reminder_minutes - WINDOW_SLACK_MINUTES)
    window_end = now + timedelta(minutes=reminder_minutes + WINDOW_SLACK_MINUTES)

    # 1) Appointments entering the window that were never reminded
    appts = session.exec(
        select(Appointment)
        .where(Appointment.start_utc >= window_start)
        .where(Appointment.start_utc <= window_end)
        .where(Appointment.status != "cancelled")
        .where(Appointment.reminder_sent == False)  # noqa: E712
        .where(Appointment.is_blocked == False)  # noqa: E712
        .where(Appointment.guest_phone != None)  # noqa: E711
        .order_by(Appointment.start_utc)
    ).all()

    # 2) Send through the outbox; the flag is set only after a successful send
    results = []
    for appt in appts:
        if appt.service is None or not appt.guest_phone:
            continue

        notification = reminder_for(session, appt)
        if not notifications.claim(session, notification.id, ["pending", "failed"]):
            # already being sent, or out of attempts
            continue

        session.refresh(notification)
        sent = notifications.deliver_notification(session, notification)
        results.append({"id": appt.id, "phone": appt.guest_phone, "status": "sent" if sent else "failed"})

    logger.info(f"Reminder run: {len(results)} processed, window {window_start.isoformat()} - {window_end.isoformat()}")
    return {
        "reminder_minutes": reminder_minutes,
        "window_start": window_start,
        "window_end": window_end,
        "processed": len(results),
        "results": results,
    }


def reminder_for(session: Session, appt: Appointment) -> Notification:
    # Reuse an unsent reminder row so retries never stack up duplicates
    notification = session.exec(
        select(Notification)
        .where(Notification.appointment_id == appt.id)
        .where(Notification.kind == notifications.REMINDER)
        .where(Notification.status.in_(["pending", notifications.SENDING, "failed"]))
    ).first()
    if notification is None:
        notification = notifications.enqueue(
            session,
            notifications.REMINDER,
            appt.guest_phone,
            notification_details(appt, appt.service.title),
            appointment_id=appt.id,
        )
        session.commit()
        session.refresh(notification)
    return notification
