import logging
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import Dict, Any

from app.core.config import settings
from app.common.exceptions import NotFoundError, ConflictError
from app.modules.services.models import Service
from app.modules.services.schemas import ServiceCreate, ServiceUpdate

logger = logging.getLogger(__name__)


class ServiceCatalogService:
    """CRUD for billable services"""

    def __init__(self, db: Session):
        self.db = db

    def create_service(self, service_data: ServiceCreate) -> Service:
        service = Service(name=service_data.name, price=service_data.price)
        self.db.add(service)
        self.db.commit()
        self.db.refresh(service)
        return service

    def get_services(self, limit: int = settings.DEFAULT_PAGE_SIZE, offset: int = 0) -> Dict[str, Any]:
        query = self.db.query(Service).order_by(Service.name)
        total = query.count()
        return {
            "services": query.offset(offset).limit(limit).all(),
            "total": total,
            "limit": limit,
            "offset": offset
        }

    def get_service_by_id(self, service_id: int) -> Service:
        service = self.db.query(Service).filter(Service.id == service_id).first()
        if not service:
            raise NotFoundError("Service not found")
        return service

    def update_service(self, service_id: int, service_data: ServiceUpdate) -> Service:
        service = self.get_service_by_id(service_id)
        service.name = service_data.name
        service.price = service_data.price
        self.db.commit()
        self.db.refresh(service)
        return service

    def delete_service(self, service_id: int) -> Dict[str, str]:
        service = self.get_service_by_id(service_id)
        try:
            self.db.delete(service)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Service is referenced by orders")
        return {"message": "Service deleted successfully"}
