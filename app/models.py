# app/models.py

from typing import Optional, List
from datetime import datetime
from decimal import Decimal

from sqlalchemy.types import JSON, DateTime
from sqlmodel import SQLModel, Field, Column, Relationship

from app import config
from app.core import utcnow


class Service(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    duration_min: int
    price: Decimal = Field(default=0, max_digits=10, decimal_places=2)


class Settings(SQLModel, table=True):
    # singleton row
    id: str = Field(default="default", primary_key=True)
    work_start_hour: int = 9
    work_end_hour: int = 17
    blackout_dates: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    sms_reminder_minutes: int = 60

    @classmethod
    def default(cls) -> "Settings":
        return cls(
            id="default",
            work_start_hour=config.DEFAULT_WORK_START_HOUR,
            work_end_hour=config.DEFAULT_WORK_END_HOUR,
            blackout_dates=[],
            sms_reminder_minutes=config.DEFAULT_SMS_REMINDER_MINUTES,
        )


class Customer(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    phone: str = Field(index=True, unique=True)
    name: str
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime(timezone=False), nullable=False))


class Appointment(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)

    service_id: Optional[int] = Field(default=None, foreign_key="service.id")
    customer_id: Optional[int] = Field(default=None, foreign_key="customer.id")

    # naive UTC
    start_utc: datetime = Field(sa_column=Column(DateTime(timezone=False), index=True, nullable=False))
    end_utc: datetime = Field(sa_column=Column(DateTime(timezone=False), index=True, nullable=False))
    status: str = "confirmed"  # confirmed, cancelled, completed
    is_blocked: bool = False
    block_reason: Optional[str] = None

    guest_name: Optional[str] = None
    guest_phone: Optional[str] = Field(default=None, index=True)
    attendance_status: Optional[str] = None  # arrived, no_show
    reminder_sent: bool = False
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime(timezone=False), nullable=False))

    service: Optional[Service] = Relationship()


class BookingDayLock(SQLModel, table=True):
    # one row per business-local day; bookings bump it to serialize overlap checks
    day: str = Field(primary_key=True)
    version: int = 0


class Notification(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)

    kind: str  # confirmation, reminder
    phone: str
    appointment_id: Optional[int] = Field(default=None, foreign_key="appointment.id", index=True)
    payload: dict = Field(default_factory=dict, sa_column=Column(JSON))
    status: str = Field(default="pending", index=True)  # pending, sending, sent, failed
    attempts: int = 0
    last_error: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime(timezone=False), nullable=False))
    sent_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=False)))


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    phone: str = Field(index=True, unique=True)
    password_hash: str
    role: str  # admin or customer
