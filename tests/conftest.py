"""Shared pytest fixtures: in-memory database, API client and auth headers."""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from app import config
from app.auth import create_access_token, hash_password
from app.db import create_db_and_tables, get_session
from app.main import app
from app.models import Appointment, Service, Settings, User

ADMIN_PHONE = "+15550000001"
CUSTOMER_PHONE = "+15550000002"


@pytest.fixture(autouse=True)
def utc_business(monkeypatch):
    # Tests reason in UTC unless they opt into another zone
    monkeypatch.setattr(config, "BUSINESS_TIMEZONE", "UTC")
    monkeypatch.setattr(config, "BLOCK_OVERLAP_POLICY", "allow")
    monkeypatch.setattr(config, "TWILIO_ACCOUNT_SID", None)
    monkeypatch.setattr(config, "TWILIO_AUTH_TOKEN", None)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(session):
    app.dependency_overrides[get_session] = lambda: session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def settings(session):
    settings = Settings(id="default", work_start_hour=9, work_end_hour=17, blackout_dates=[], sms_reminder_minutes=60)
    session.add(settings)
    session.commit()
    session.refresh(settings)
    return settings


@pytest.fixture
def haircut(session):
    service = Service(title="Haircut", duration_min=30, price=25)
    session.add(service)
    session.commit()
    session.refresh(service)
    return service


def make_user(session, phone, role):
    user = User(phone=phone, password_hash=hash_password("secret-password"), role=role)
    session.add(user)
    session.commit()
    return {"Authorization": f"Bearer {create_access_token({'sub': phone})}"}


@pytest.fixture
def admin_headers(session):
    return make_user(session, ADMIN_PHONE, "admin")


@pytest.fixture
def customer_headers(session):
    return make_user(session, CUSTOMER_PHONE, "customer")


@pytest.fixture
def add_appointment(session):
    def _add(start, end, status="confirmed", is_blocked=False, service_id=None, phone=None):
        appt = Appointment(
            service_id=service_id,
            start_utc=start,
            end_utc=end,
            status=status,
            is_blocked=is_blocked,
            guest_name="Guest" if phone else None,
            guest_phone=phone,
        )
        session.add(appt)
        session.commit()
        session.refresh(appt)
        return appt

    return _add
