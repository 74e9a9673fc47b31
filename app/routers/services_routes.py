# app/routers/services_routes.py

from typing import List

from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.db import get_session
from app.deps import get_admin_user
from app.schemas import ServiceCreate, ServicePublic, ServiceUpdate
from app.services import catalog

router = APIRouter(
    prefix="/services",
    tags=["services"],
)


@router.get("", response_model=List[ServicePublic])
def list_services(session: Session = Depends(get_session)):
    return catalog.list_services(session)


@router.post("/seed")
def seed_services(
    session: Session = Depends(get_session),
    admin: dict = Depends(get_admin_user),
):
    return catalog.seed_default_services(session)


@router.get("/{service_id}", response_model=ServicePublic)
def get_service(service_id: int, session: Session = Depends(get_session)):
    return catalog.get_service(session, service_id)


@router.post("", response_model=ServicePublic, status_code=201)
def create_service(
    service: ServiceCreate,
    session: Session = Depends(get_session),
    admin: dict = Depends(get_admin_user),
):
    return catalog.create_service(session, service.title, service.duration_min, service.price)


@router.patch("/{service_id}", response_model=ServicePublic)
def update_service(
    service_id: int,
    changes: ServiceUpdate,
    session: Session = Depends(get_session),
    admin: dict = Depends(get_admin_user),
):
    return catalog.update_service(session, service_id, changes.model_dump(exclude_unset=True, exclude_none=True))
