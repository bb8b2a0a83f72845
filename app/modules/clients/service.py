import logging
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import Dict, Any

from app.core.config import settings
from app.common.exceptions import NotFoundError, ConflictError, internal_error
from app.modules.clients.models import Client
from app.modules.clients.schemas import ClientCreate, ClientUpdate

logger = logging.getLogger(__name__)


class ClientService:
    """Client directory"""

    def __init__(self, db: Session):
        self.db = db

    def create_client(self, client_data: ClientCreate) -> Client:
        client = Client(**client_data.model_dump())
        self.db.add(client)
        self.db.commit()
        self.db.refresh(client)
        return client

    def get_clients(self, limit: int = settings.DEFAULT_PAGE_SIZE, offset: int = 0) -> Dict[str, Any]:
        query = self.db.query(Client).order_by(Client.name)
        total = query.count()
        clients = query.offset(offset).limit(limit).all()

        return {
            "clients": clients,
            "total": total,
            "limit": limit,
            "offset": offset
        }

    def get_client_by_id(self, client_id: int) -> Client:
        client = self.db.query(Client).filter(Client.id == client_id).first()
        if not client:
            raise NotFoundError("Client not found")
        return client

    def update_client(self, client_id: int, update_data: ClientUpdate) -> Client:
        client = self.get_client_by_id(client_id)

        for field, value in update_data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(client, field, value)

        self.db.commit()
        self.db.refresh(client)
        return client

    def delete_client(self, client_id: int) -> Dict[str, str]:
        client = self.get_client_by_id(client_id)
        try:
            self.db.delete(client)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Client still has orders")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Could not delete client {client_id}: {e}")
            raise internal_error("deleting client", e)
        return {"message": "Client deleted"}
