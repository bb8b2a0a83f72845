from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import Optional

from app.core.config import settings
from app.database.database import get_db
from app.modules.auth.utils import get_current_user
from app.modules.orders.service import OrderService
from app.modules.orders.schemas import (
    OrderCreate, OrderUpdate, OrderOut, OrderList, OrderSummary
)

orders_router = APIRouter(
    prefix="/commandes",
    tags=["Orders"],
    dependencies=[Depends(get_current_user)]
)


@orders_router.post("/", response_model=OrderOut, status_code=status.HTTP_201_CREATED)
def create_order(order: OrderCreate, db: Session = Depends(get_db)):
    """
    Create an order for a client.

    - **items**: product lines; `unit_price` defaults to the catalogue price
    - **services**: service items; `price` defaults to the catalogue price
    - **global_discount**: absolute amount taken off the subtotal
    """
    return OrderService(db).create_order(order)


@orders_router.get("/", response_model=OrderList)
def list_orders(
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    is_paid: Optional[bool] = Query(None),
    client_id: Optional[int] = Query(None),
    db: Session = Depends(get_db)
):
    return OrderService(db).list_orders(limit, offset, is_paid, client_id)


@orders_router.put("/active/{order_id}", response_model=OrderOut)
def mark_order_paid(order_id: int, db: Session = Depends(get_db)):
    """Manually mark an order as paid."""
    return OrderService(db).mark_paid(order_id)


@orders_router.put("/desactive/{order_id}", response_model=OrderOut)
def mark_order_unpaid(order_id: int, db: Session = Depends(get_db)):
    """Manually mark an order as unpaid."""
    return OrderService(db).mark_unpaid(order_id)


@orders_router.get("/{order_id}", response_model=OrderOut)
def get_order(order_id: int, db: Session = Depends(get_db)):
    return OrderService(db).get_order(order_id)


@orders_router.get("/{order_id}/summary", response_model=OrderSummary)
def get_order_summary(order_id: int, db: Session = Depends(get_db)):
    """Subtotal, total, amount paid and remaining due."""
    return OrderService(db).get_summary(order_id)


@orders_router.put("/{order_id}", response_model=OrderOut)
def update_order(order_id: int, order: OrderUpdate, db: Session = Depends(get_db)):
    return OrderService(db).update_order(order_id, order)


@orders_router.delete("/{order_id}")
def delete_order(order_id: int, db: Session = Depends(get_db)):
    return OrderService(db).delete_order(order_id)
