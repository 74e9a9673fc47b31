from datetime import date, datetime, timedelta, timezone

import pytest
from sqlalchemy import DateTime
from sqlmodel import select

from app import config
from app.errors import BadRequest, Conflict, NotFound
from app.models import Appointment, BookingDayLock, Customer, Notification
from app.services import booking
from app.services.availability import compute_availability


def at(hour, minute=0):
    return datetime(2024, 6, 10, hour, minute)


def live_appointments(session):
    return session.exec(select(Appointment).where(Appointment.status != "cancelled")).all()


def test_book_creates_confirmed_appointment(session, haircut):
    appt = booking.book(session, haircut.id, at(10), "Dana", "+15551234")

    assert appt.id is not None
    assert appt.start_utc == at(10)
    assert appt.end_utc == at(10, 30)
    assert appt.status == "confirmed"
    assert appt.is_blocked is False
    assert appt.reminder_sent is False
    assert appt.service.title == "Haircut"
    assert session.get(BookingDayLock, "2024-06-10").version == 1


def test_book_resolves_customer_by_phone(session, haircut):
    first = booking.book(session, haircut.id, at(10), "Dana", "+15551234")
    second = booking.book(session, haircut.id, at(11), "Dana Levi", "+15551234")

    customers = session.exec(select(Customer)).all()
    assert len(customers) == 1
    assert customers[0].name == "Dana Levi"
    assert first.customer_id == second.customer_id == customers[0].id
    # display name on the earlier booking is kept as it was
    assert session.get(Appointment, first.id).guest_name == "Dana"


def test_book_enqueues_confirmation(session, haircut):
    appt = booking.book(session, haircut.id, at(10), "Dana", "+15551234")

    notification = session.exec(select(Notification)).one()
    assert notification.appointment_id == appt.id
    assert notification.kind == "confirmation"
    assert notification.status == "pending"
    assert notification.payload == {"service_name": "Haircut", "date": "10 June", "time": "10:00"}


def test_book_converts_aware_start_to_utc(session, haircut):
    start = datetime(2024, 6, 10, 13, 0, tzinfo=timezone(timedelta(hours=3)))

    appt = booking.book(session, haircut.id, start, "Dana", "+15551234")

    assert appt.start_utc == at(10)


def test_booking_taken_slot_conflicts_and_leaves_store_unchanged(session, haircut):
    booking.book(session, haircut.id, at(10), "Dana", "+15551234")

    with pytest.raises(Conflict):
        booking.book(session, haircut.id, at(10), "Omer", "+15559999")

    assert len(live_appointments(session)) == 1
    assert len(session.exec(select(Customer)).all()) == 1
    assert len(session.exec(select(Notification)).all()) == 1


def test_partial_overlap_conflicts(session, haircut, add_appointment):
    add_appointment(at(10, 15), at(10, 45), is_blocked=True)

    with pytest.raises(Conflict):
        booking.book(session, haircut.id, at(10), "Dana", "+15551234")


def test_adjacent_bookings_do_not_conflict(session, haircut):
    booking.book(session, haircut.id, at(10), "Dana", "+15551234")
    booking.book(session, haircut.id, at(10, 30), "Omer", "+15559999")
    booking.book(session, haircut.id, at(9, 30), "Noa", "+15558888")

    assert len(live_appointments(session)) == 3


def test_cancelled_appointment_frees_the_slot(session, haircut):
    appt = booking.book(session, haircut.id, at(10), "Dana", "+15551234")
    booking.cancel(session, appt.id)

    again = booking.book(session, haircut.id, at(10), "Omer", "+15559999")

    assert again.id != appt.id
    assert session.get(Appointment, appt.id).status == "cancelled"


def test_booked_slot_disappears_from_availability(session, settings, haircut):
    before = compute_availability(session, haircut.id, date(2024, 6, 10), settings)
    booking.book(session, haircut.id, at(14), "Dana", "+15551234")
    after = compute_availability(session, haircut.id, date(2024, 6, 10), settings)

    assert at(14) in before["slots"]
    assert at(14) not in after["slots"]
    assert after["slot_count"] == before["slot_count"] - 1


def test_book_unknown_service(session):
    with pytest.raises(NotFound):
        booking.book(session, 404, at(10), "Dana", "+15551234")

    assert session.exec(select(Appointment)).all() == []


def test_block_slot_may_overlap_by_default(session, haircut):
    booking.book(session, haircut.id, at(10), "Dana", "+15551234")

    block = booking.block_slot(session, at(10), 60, "Lunch")
    stacked = booking.block_slot(session, at(10, 30), 30)

    assert block.is_blocked is True
    assert block.service_id is None
    assert block.status == "confirmed"
    assert block.end_utc == at(11)
    assert block.block_reason == "Lunch"
    assert stacked.id != block.id


def test_block_slot_reject_policy(monkeypatch, session, haircut):
    monkeypatch.setattr(config, "BLOCK_OVERLAP_POLICY", "reject")
    booking.book(session, haircut.id, at(10), "Dana", "+15551234")

    with pytest.raises(Conflict):
        booking.block_slot(session, at(10), 60, "Lunch")

    block = booking.block_slot(session, at(11), 60, "Lunch")
    assert block.is_blocked is True


def test_unblock_hard_deletes(session):
    block = booking.block_slot(session, at(12), 60, "Lunch")

    booking.unblock_slot(session, block.id)

    assert session.get(Appointment, block.id) is None


def test_unblock_rejects_customer_bookings(session, haircut):
    appt = booking.book(session, haircut.id, at(10), "Dana", "+15551234")

    with pytest.raises(BadRequest):
        booking.unblock_slot(session, appt.id)
    with pytest.raises(NotFound):
        booking.unblock_slot(session, 12345)

    assert session.get(Appointment, appt.id).status == "confirmed"


def test_cancel_is_idempotent(session, haircut):
    appt = booking.book(session, haircut.id, at(10), "Dana", "+15551234")

    first = booking.cancel(session, appt.id)
    second = booking.cancel(session, appt.id)

    assert first.status == second.status == "cancelled"
    assert session.get(Appointment, appt.id) is not None


def test_cancel_rejects_blocked_slots(session):
    block = booking.block_slot(session, at(12), 60)

    with pytest.raises(BadRequest):
        booking.cancel(session, block.id)


def test_attendance_is_independent_of_status(session, haircut):
    appt = booking.book(session, haircut.id, at(10), "Dana", "+15551234")

    marked = booking.set_attendance(session, appt.id, "no_show")
    assert marked.attendance_status == "no_show"
    assert marked.status == "confirmed"

    cleared = booking.set_attendance(session, appt.id, None)
    assert cleared.attendance_status is None


def test_attendance_rejects_blocked_slots(session):
    block = booking.block_slot(session, at(12), 60)

    with pytest.raises(BadRequest):
        booking.set_attendance(session, block.id, "arrived")


def test_timestamps_are_stored_as_naive_utc(session, haircut):
    for model, column in [
        (Appointment, "start_utc"),
        (Appointment, "end_utc"),
        (Appointment, "created_at"),
        (Customer, "created_at"),
        (Notification, "created_at"),
        (Notification, "sent_at"),
    ]:
        column_type = model.__table__.c[column].type
        assert isinstance(column_type, DateTime)
        assert column_type.timezone is False

    paris_noon = datetime(2024, 6, 10, 12, tzinfo=timezone(timedelta(hours=2)))
    appt = booking.book(session, haircut.id, paris_noon, "Dana", "+15551234")
    session.expire_all()

    stored = session.get(Appointment, appt.id)
    assert stored.start_utc == at(10)
    assert stored.start_utc.tzinfo is None
    assert stored.created_at.tzinfo is None
