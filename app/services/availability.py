# app/services/availability.py

from datetime import datetime, date, timedelta
from typing import List, Sequence, Tuple, Union

from sqlmodel import Session, select

from app.core import overlaps, local_day, local_hour_utc, day_bounds_utc
from app.models import Appointment, Settings
from app.services.catalog import get_service


def busy_intervals(session: Session, start: datetime, end: datetime) -> List[Tuple[datetime, datetime]]:
    # Every non-cancelled row counts, blocked ones included
    rows = session.exec(
        select(Appointment)
        .where(Appointment.status != "cancelled")
        .where(Appointment.start_utc < end)
        .where(Appointment.end_utc > start)
    ).all()
    return [(a.start_utc, a.end_utc) for a in rows]


def grid_slots(
    work_start: datetime,
    work_end: datetime,
    duration_min: int,
    busy: Sequence[Tuple[datetime, datetime]],
) -> List[datetime]:
    """Walk the working window on a fixed grid of ``duration_min`` steps.

    The grid is anchored at opening time and advances by the full duration
    whether or not a candidate was taken, so displayed start times stay
    duration-aligned. A candidate ``[t, t + duration)`` is free when it ends by
    closing time and overlaps no busy interval.
    """
    if duration_min <= 0 or work_start >= work_end:
        return []

    step = timedelta(minutes=duration_min)
    available = []
    current = work_start
    while current < work_end:
        slot_start = current
        slot_end = current + step

        # Trailing slot may not spill past closing
        if slot_end > work_end:
            break

        taken = False
        for busy_start, busy_end in busy:
            if overlaps(slot_start, slot_end, busy_start, busy_end):
                taken = True
                break
        if not taken:
            available.append(slot_start)

        current += step

    return available


def compute_availability(
    session: Session,
    service_id: int,
    on: Union[date, datetime],
    settings: Settings,
) -> dict:
    # 1) Service decides the slot length
    service = get_service(session, service_id)
    day = local_day(on)

    # 2) Blackout days short-circuit
    if day.isoformat() in (settings.blackout_dates or []):
        return {"slots": [], "is_blackout": True, "slot_count": 0}

    # 3) Working window for the day
    if settings.work_start_hour >= settings.work_end_hour:
        return {"slots": [], "is_blackout": False, "slot_count": 0}
    work_start = local_hour_utc(day, settings.work_start_hour)
    work_end = local_hour_utc(day, settings.work_end_hour)

    # 4) Everything already holding time on that day
    day_start, day_end = day_bounds_utc(day)
    busy = busy_intervals(session, day_start, day_end)

    # 5) Fixed grid walk
    slots = grid_slots(work_start, work_end, service.duration_min, busy)
    return {"slots": slots, "is_blackout": False, "slot_count": len(slots)}
