from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session

from app.core.config import settings
from app.database.database import get_db
from app.modules.auth.utils import get_current_user
from app.modules.services.service import ServiceCatalogService
from app.modules.services.schemas import ServiceCreate, ServiceUpdate, ServiceOut, ServiceList

services_router = APIRouter(
    prefix="/services",
    tags=["Services"],
    dependencies=[Depends(get_current_user)]
)


@services_router.post("/", response_model=ServiceOut, status_code=status.HTTP_201_CREATED)
def create_service(service: ServiceCreate, db: Session = Depends(get_db)):
    return ServiceCatalogService(db).create_service(service)


@services_router.get("/", response_model=ServiceList)
def list_services(
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    return ServiceCatalogService(db).get_services(limit, offset)


@services_router.get("/{service_id}", response_model=ServiceOut)
def get_service(service_id: int, db: Session = Depends(get_db)):
    return ServiceCatalogService(db).get_service_by_id(service_id)


@services_router.put("/{service_id}", response_model=ServiceOut)
def update_service(service_id: int, service: ServiceUpdate, db: Session = Depends(get_db)):
    return ServiceCatalogService(db).update_service(service_id, service)


@services_router.delete("/{service_id}")
def delete_service(service_id: int, db: Session = Depends(get_db)):
    return ServiceCatalogService(db).delete_service(service_id)
