# app/routers/settings_routes.py

from datetime import date

from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.db import get_session
from app.deps import get_admin_user
from app.schemas import BlackoutDateCreate, SettingsPublic, SettingsUpdate
from app.services import calendar_settings

router = APIRouter(
    prefix="/settings",
    tags=["settings"],
)


def _public(settings) -> dict:
    return {
        "work_start_hour": settings.work_start_hour,
        "work_end_hour": settings.work_end_hour,
        "blackout_dates": settings.blackout_dates,
        "sms_reminder_minutes": settings.sms_reminder_minutes,
    }


@router.get("", response_model=SettingsPublic)
def get_settings(session: Session = Depends(get_session)):
    return _public(calendar_settings.load_settings(session))


@router.patch("", response_model=SettingsPublic)
def update_settings(
    changes: SettingsUpdate,
    session: Session = Depends(get_session),
    admin: dict = Depends(get_admin_user),
):
    settings = calendar_settings.update_settings(session, changes.model_dump(exclude_unset=True, exclude_none=True))
    return _public(settings)


@router.post("/blackout-dates", response_model=SettingsPublic)
def add_blackout_date(
    blackout: BlackoutDateCreate,
    session: Session = Depends(get_session),
    admin: dict = Depends(get_admin_user),
):
    return _public(calendar_settings.add_blackout_date(session, blackout.date))


@router.delete("/blackout-dates/{day}", response_model=SettingsPublic)
def remove_blackout_date(
    day: date,
    session: Session = Depends(get_session),
    admin: dict = Depends(get_admin_user),
):
    return _public(calendar_settings.remove_blackout_date(session, day))
