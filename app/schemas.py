# app/schemas.py

from pydantic import BaseModel, Field
from enum import Enum
from datetime import datetime, date
from decimal import Decimal
from typing import List, Optional


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserRole(str, Enum):
    admin = "admin"
    customer = "customer"


class AppointmentStatus(str, Enum):
    confirmed = "confirmed"
    cancelled = "cancelled"
    completed = "completed"


class AttendanceStatus(str, Enum):
    arrived = "arrived"
    no_show = "no_show"


class UserPublic(BaseModel):
    id: int
    phone: str
    role: UserRole


class UserCreate(BaseModel):
    phone: str = Field(min_length=3)
    password: str = Field(min_length=8, max_length=72)


class ServicePublic(BaseModel):
    id: int
    title: str
    duration_min: int
    price: Decimal


class ServiceCreate(BaseModel):
    title: str = Field(min_length=1)
    duration_min: int = Field(ge=5)
    price: Decimal = Field(ge=0)


class ServiceUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    duration_min: Optional[int] = Field(default=None, ge=5)
    price: Optional[Decimal] = Field(default=None, ge=0)


class SettingsPublic(BaseModel):
    work_start_hour: int
    work_end_hour: int
    blackout_dates: List[str]
    sms_reminder_minutes: int


class SettingsUpdate(BaseModel):
    work_start_hour: Optional[int] = Field(default=None, ge=0, le=23)
    work_end_hour: Optional[int] = Field(default=None, ge=0, le=23)
    blackout_dates: Optional[List[date]] = None
    sms_reminder_minutes: Optional[int] = Field(default=None, ge=15, le=1440)


class BlackoutDateCreate(BaseModel):
    date: date


class AvailabilityResponse(BaseModel):
    service_id: int
    date: date
    slots: List[datetime]
    is_blackout: bool
    slot_count: int


class BookingCreate(BaseModel):
    service_id: int
    start_utc: datetime
    guest_name: str = Field(min_length=1)
    guest_phone: str = Field(min_length=3)


class AppointmentPublic(BaseModel):
    id: int
    service_id: Optional[int]
    start_utc: datetime
    end_utc: datetime
    status: AppointmentStatus
    is_blocked: bool
    block_reason: Optional[str] = None
    guest_name: Optional[str] = None
    guest_phone: Optional[str] = None
    attendance_status: Optional[AttendanceStatus] = None
    reminder_sent: bool
    service: Optional[ServicePublic] = None


class BlockCreate(BaseModel):
    start_utc: datetime
    duration_min: int = Field(gt=0)
    reason: Optional[str] = None


class AttendanceUpdate(BaseModel):
    attendance_status: Optional[AttendanceStatus] = None


class ReminderResult(BaseModel):
    id: int
    phone: str
    status: str


class ReminderRun(BaseModel):
    reminder_minutes: int
    window_start: datetime
    window_end: datetime
    processed: int
    results: List[ReminderResult]


class DispatchResult(BaseModel):
    sent: int
    failed: int
