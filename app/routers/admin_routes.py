# app/routers/admin_routes.py

from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.db import get_session
from app.deps import get_admin_user
from app.schemas import AppointmentPublic, BlockCreate, DispatchResult
from app.services import booking, notifications
from app.routers.appointments_routes import appointment_to_dict

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
)


@router.post("/blocks", response_model=AppointmentPublic, status_code=201)
def block_slot(
    block: BlockCreate,
    session: Session = Depends(get_session),
    admin: dict = Depends(get_admin_user),
):
    appt = booking.block_slot(session, block.start_utc, block.duration_min, block.reason)
    return appointment_to_dict(appt)


@router.delete("/blocks/{appt_id}", status_code=204)
def unblock_slot(
    appt_id: int,
    session: Session = Depends(get_session),
    admin: dict = Depends(get_admin_user),
):
    booking.unblock_slot(session, appt_id)


@router.post("/notifications/dispatch", response_model=DispatchResult)
def dispatch_notifications(
    session: Session = Depends(get_session),
    admin: dict = Depends(get_admin_user),
):
    # Retries failed deliveries too, up to the attempt limit
    return notifications.dispatch_pending(session.get_bind(), retry_failed=True)
