# app/services/booking.py

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app import config
from app.core import overlaps, to_utc, to_local, days_touched
from app.errors import NotFound, Conflict, BadRequest
from app.models import Appointment, BookingDayLock, Customer
from app.services import notifications
from app.services.catalog import get_service

logger = logging.getLogger(__name__)


def ensure_day_locks(session: Session, days) -> list:
    keys = sorted({d.isoformat() for d in days})
    for key in keys:
        if session.get(BookingDayLock, key) is not None:
            continue
        session.add(BookingDayLock(day=key))
        try:
            session.commit()
        except IntegrityError:
            # someone else created it first
            session.rollback()
    return keys


def lock_days(session: Session, keys) -> None:
    # The UPDATE takes the write lock; a concurrent booking on the same day waits here
    for key in keys:
        session.exec(
            update(BookingDayLock)
            .where(BookingDayLock.day == key)
            .values(version=BookingDayLock.version + 1)
        )


def find_conflict(session: Session, start: datetime, end: datetime) -> Optional[Appointment]:
    candidates = session.exec(
        select(Appointment)
        .where(Appointment.status != "cancelled")
        .where(Appointment.start_utc < end)
        .where(Appointment.end_utc > start)
    ).all()
    for a in candidates:
        if overlaps(start, end, a.start_utc, a.end_utc):
            return a
    return None


def resolve_customer(session: Session, phone: str, name: str) -> Customer:
    customer = session.exec(select(Customer).where(Customer.phone == phone)).first()
    if customer is None:
        customer = Customer(phone=phone, name=name)
    else:
        customer.name = name
    session.add(customer)
    session.flush()
    return customer


def _reserve(session: Session, start: datetime, end: datetime, build) -> Appointment:
    # 1) Serialize against other reservations touching the same days
    keys = ensure_day_locks(session, days_touched(start, end))
    try:
        lock_days(session, keys)

        # 2) Overlap check under the lock
        conflict = find_conflict(session, start, end)
        if conflict is not None:
            logger.info(f"Slot {start.isoformat()} conflicts with appointment {conflict.id}")
            raise Conflict("Slot already taken")

        # 3) Insert
        appt = build()
        session.commit()
    except IntegrityError:
        session.rollback()
        raise Conflict("Booking collided with a concurrent request, please retry")
    except Exception:
        session.rollback()
        raise

    session.refresh(appt)
    return appt


def notification_details(appt: Appointment, service_title: str) -> dict:
    local = to_local(appt.start_utc)
    return {
        "service_name": service_title,
        "date": f"{local.day} {local.strftime('%B')}",
        "time": local.strftime("%H:%M"),
    }


def book(session: Session, service_id: int, start_utc: datetime, guest_name: str, guest_phone: str) -> Appointment:
    # 1) Validate service
    service = get_service(session, service_id)
    duration = service.duration_min
    title = service.title

    # 2) Build appointment interval
    start = to_utc(start_utc)
    end = start + timedelta(minutes=duration)
    guest_phone = guest_phone.strip()

    def build():
        customer = resolve_customer(session, guest_phone, guest_name)
        appt = Appointment(
            service_id=service_id,
            customer_id=customer.id,
            start_utc=start,
            end_utc=end,
            status="confirmed",
            is_blocked=False,
            guest_name=guest_name,
            guest_phone=guest_phone,
        )
        session.add(appt)
        session.flush()  # fills appt.id

        notifications.enqueue(
            session,
            notifications.CONFIRMATION,
            guest_phone,
            notification_details(appt, title),
            appointment_id=appt.id,
        )
        return appt

    appt = _reserve(session, start, end, build)
    logger.info(f"Booked appointment {appt.id}: service {service_id} at {start.isoformat()} for {guest_phone}")
    return appt


def block_slot(session: Session, start_utc: datetime, duration_min: int, reason: Optional[str] = None) -> Appointment:
    start = to_utc(start_utc)
    end = start + timedelta(minutes=duration_min)

    def build():
        appt = Appointment(
            service_id=None,
            start_utc=start,
            end_utc=end,
            status="confirmed",
            is_blocked=True,
            block_reason=reason,
        )
        session.add(appt)
        return appt

    if config.BLOCK_OVERLAP_POLICY == "reject":
        appt = _reserve(session, start, end, build)
    else:
        # administrative override: blocks may stack on anything
        appt = build()
        session.commit()
        session.refresh(appt)

    logger.info(f"Blocked {start.isoformat()} - {end.isoformat()} ({reason or 'no reason'})")
    return appt


def get_appointment(session: Session, appt_id: int) -> Appointment:
    appt = session.get(Appointment, appt_id)
    if appt is None:
        raise NotFound("Appointment not found")
    return appt


def unblock_slot(session: Session, appt_id: int) -> None:
    appt = get_appointment(session, appt_id)
    if not appt.is_blocked:
        raise BadRequest("Appointment is not a blocked slot")

    # hard delete, unlike cancel
    session.delete(appt)
    session.commit()
    logger.info(f"Unblocked slot {appt_id}")


def cancel(session: Session, appt_id: int) -> Appointment:
    appt = get_appointment(session, appt_id)
    if appt.is_blocked:
        raise BadRequest("Blocked slots are removed with unblock, not cancelled")

    # cancelling twice is a no-op
    if appt.status == "cancelled":
        return appt

    appt.status = "cancelled"
    session.add(appt)
    session.commit()
    session.refresh(appt)
    logger.info(f"Cancelled appointment {appt_id}")
    return appt


def set_attendance(session: Session, appt_id: int, attendance_status: Optional[str]) -> Appointment:
    appt = get_appointment(session, appt_id)
    if appt.is_blocked:
        raise BadRequest("Attendance applies to customer bookings only")

    appt.attendance_status = attendance_status
    session.add(appt)
    session.commit()
    session.refresh(appt)
    return appt
