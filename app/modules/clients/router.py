from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session

from app.core.config import settings
from app.database.database import get_db
from app.modules.auth.utils import get_current_user
from app.modules.clients.service import ClientService
from app.modules.clients.schemas import ClientCreate, ClientUpdate, ClientOut, ClientList

clients_router = APIRouter(
    prefix="/clients",
    tags=["Clients"],
    dependencies=[Depends(get_current_user)]
)


@clients_router.post("/", response_model=ClientOut, status_code=status.HTTP_201_CREATED)
def create_client(client: ClientCreate, db: Session = Depends(get_db)):
    return ClientService(db).create_client(client)


@clients_router.get("/", response_model=ClientList)
def list_clients(
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    return ClientService(db).get_clients(limit, offset)


@clients_router.get("/{client_id}", response_model=ClientOut)
def get_client(client_id: int, db: Session = Depends(get_db)):
    return ClientService(db).get_client_by_id(client_id)


@clients_router.put("/{client_id}", response_model=ClientOut)
def update_client(client_id: int, update: ClientUpdate, db: Session = Depends(get_db)):
    return ClientService(db).update_client(client_id, update)


@clients_router.delete("/{client_id}")
def delete_client(client_id: int, db: Session = Depends(get_db)):
    return ClientService(db).delete_client(client_id)
