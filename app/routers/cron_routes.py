# app/routers/cron_routes.py

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from app import config
from app.db import get_session
from app.schemas import ReminderRun
from app.services.reminders import send_due_reminders

router = APIRouter(
    prefix="/cron",
    tags=["cron"],
)


@router.get("/send-reminders", response_model=ReminderRun)
def send_reminders(
    secret: Optional[str] = None,
    session: Session = Depends(get_session),
):
    # Secret only enforced in production
    if config.ENVIRONMENT == "production" and (not config.CRON_SECRET or secret != config.CRON_SECRET):
        raise HTTPException(status_code=401, detail="Unauthorized")

    return send_due_reminders(session)
