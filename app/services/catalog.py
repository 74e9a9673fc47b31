# app/services/catalog.py

import logging

from sqlmodel import Session, select

from app.errors import NotFound
from app.models import Service

logger = logging.getLogger(__name__)

DEFAULT_SERVICES = [
    ("Haircut", 30, 25),
    ("Beard Trim", 15, 15),
    ("Full Service", 60, 40),
]


def list_services(session: Session):
    return session.exec(select(Service).order_by(Service.title)).all()


def get_service(session: Session, service_id: int) -> Service:
    service = session.get(Service, service_id)
    if service is None:
        raise NotFound("Service not found")
    return service


def create_service(session: Session, title: str, duration_min: int, price) -> Service:
    service = Service(title=title, duration_min=duration_min, price=price)
    session.add(service)
    session.commit()
    session.refresh(service)
    logger.info(f"Created service {service.id} ({service.duration_min} min)")
    return service


def update_service(session: Session, service_id: int, changes: dict) -> Service:
    # Existing appointments keep their end_utc; only future bookings see the new duration
    service = get_service(session, service_id)
    for field, value in changes.items():
        setattr(service, field, value)

    session.add(service)
    session.commit()
    session.refresh(service)
    return service


def seed_default_services(session: Session) -> dict:
    if session.exec(select(Service)).first() is not None:
        return {"message": "Already seeded"}

    session.add_all(
        [Service(title=t, duration_min=d, price=p) for t, d, p in DEFAULT_SERVICES]
    )
    session.commit()
    logger.info(f"Seeded {len(DEFAULT_SERVICES)} default services")
    return {"message": "Seeded services"}
