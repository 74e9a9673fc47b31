# app/routers/appointments_routes.py

from datetime import date as Date, datetime
from typing import Optional, List, Union

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlmodel import Session, select

from app.db import get_session
from app.models import Appointment
from app.schemas import (
    AppointmentPublic,
    AttendanceUpdate,
    AvailabilityResponse,
    BookingCreate,
)
from app.auth import get_current_user
from app.deps import get_admin_user
from app.core import day_bounds_utc, local_day
from app.services import booking, notifications
from app.services.availability import compute_availability
from app.services.calendar_settings import load_settings

router = APIRouter(
    tags=["appointments"],
)

STATUS_FILTERS = ("confirmed", "cancelled", "completed", "all")


def appointment_to_dict(appt: Appointment) -> dict:
    service = appt.service
    return {
        "id": appt.id,
        "service_id": appt.service_id,
        "start_utc": appt.start_utc,
        "end_utc": appt.end_utc,
        "status": appt.status,
        "is_blocked": appt.is_blocked,
        "block_reason": appt.block_reason,
        "guest_name": appt.guest_name,
        "guest_phone": appt.guest_phone,
        "attendance_status": appt.attendance_status,
        "reminder_sent": appt.reminder_sent,
        "service": None if service is None else {
            "id": service.id,
            "title": service.title,
            "duration_min": service.duration_min,
            "price": service.price,
        },
    }


@router.get("/availability", response_model=AvailabilityResponse)
def availability(
    service_id: int,
    # a calendar date, or any timestamp falling on the business-local day
    date: Union[Date, datetime],
    session: Session = Depends(get_session),
):
    settings = load_settings(session)
    result = compute_availability(session, service_id, date, settings)
    return {"service_id": service_id, "date": local_day(date), **result}


@router.post("/appointments", response_model=AppointmentPublic, status_code=201)
def book_appointment(
    appt: BookingCreate,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
):
    db_appt = booking.book(session, appt.service_id, appt.start_utc, appt.guest_name, appt.guest_phone)

    # Committed; the confirmation SMS goes out after the response
    background_tasks.add_task(notifications.dispatch_pending, session.get_bind(), db_appt.id)
    return appointment_to_dict(db_appt)


@router.get("/appointments", response_model=List[AppointmentPublic])
def list_appointments(
    status: Optional[str] = "all",
    on_date: Optional[Date] = None,
    session: Session = Depends(get_session),
    admin: dict = Depends(get_admin_user),
):
    if status not in STATUS_FILTERS:
        raise HTTPException(status_code=422, detail="status must be 'confirmed', 'cancelled', 'completed', or 'all'")

    stmt = select(Appointment)

    if on_date is not None:
        day_start, day_end = day_bounds_utc(on_date)
        stmt = stmt.where(Appointment.start_utc >= day_start).where(Appointment.start_utc < day_end)

    if status != "all":
        stmt = stmt.where(Appointment.status == status)

    stmt = stmt.order_by(Appointment.start_utc)

    return [appointment_to_dict(a) for a in session.exec(stmt).all()]


@router.get("/appointments/me", response_model=List[AppointmentPublic])
def list_my_appointments(
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    stmt = (
        select(Appointment)
        .where(Appointment.guest_phone == current_user["phone"])
        .order_by(Appointment.start_utc.desc())
    )
    return [appointment_to_dict(a) for a in session.exec(stmt).all()]


@router.patch("/appointments/{appt_id}/cancel", response_model=AppointmentPublic)
def cancel_appointment(
    appt_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    # 1) Find the appointment
    target = booking.get_appointment(session, appt_id)

    # 2) Authorization: the customer who booked OR an admin
    if current_user["role"] != "admin" and target.guest_phone != current_user["phone"]:
        raise HTTPException(status_code=403, detail="Forbidden")

    # 3) Cancel and persist
    return appointment_to_dict(booking.cancel(session, appt_id))


@router.patch("/appointments/{appt_id}/attendance", response_model=AppointmentPublic)
def mark_attendance(
    appt_id: int,
    attendance: AttendanceUpdate,
    session: Session = Depends(get_session),
    admin: dict = Depends(get_admin_user),
):
    status = attendance.attendance_status.value if attendance.attendance_status else None
    return appointment_to_dict(booking.set_attendance(session, appt_id, status))
