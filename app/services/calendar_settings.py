# app/services/calendar_settings.py

import logging
from datetime import date

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from app.models import Settings

logger = logging.getLogger(__name__)

SETTINGS_ID = "default"


def load_settings(session: Session) -> Settings:
    settings = session.get(Settings, SETTINGS_ID)
    if settings is None:
        # First read: persist the configured defaults
        settings = Settings.default()
        session.add(settings)
        try:
            session.commit()
        except IntegrityError:
            # a concurrent first read created it
            session.rollback()
            return session.get(Settings, SETTINGS_ID)
        session.refresh(settings)
        logger.info("Created default calendar settings")
    return settings


def update_settings(session: Session, changes: dict) -> Settings:
    settings = load_settings(session)
    for field, value in changes.items():
        if field == "blackout_dates":
            value = sorted({_day_key(d) for d in value})
        setattr(settings, field, value)

    session.add(settings)
    session.commit()
    session.refresh(settings)
    return settings


def add_blackout_date(session: Session, day: date) -> Settings:
    settings = load_settings(session)
    key = _day_key(day)
    if key in settings.blackout_dates:
        return settings

    # reassign so the JSON column is flagged dirty
    settings.blackout_dates = sorted(settings.blackout_dates + [key])
    session.add(settings)
    session.commit()
    session.refresh(settings)
    return settings


def remove_blackout_date(session: Session, day: date) -> Settings:
    settings = load_settings(session)
    key = _day_key(day)
    if key not in settings.blackout_dates:
        return settings

    settings.blackout_dates = [d for d in settings.blackout_dates if d != key]
    session.add(settings)
    session.commit()
    session.refresh(settings)
    return settings


def _day_key(day) -> str:
    return day if isinstance(day, str) else day.isoformat()
