from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from app.database.database import get_db
from app.modules.auth.utils import get_current_user
from app.modules.payments.models import PaymentMethod
from app.modules.payments.service import PaymentService
from app.modules.payments.schemas import PaymentCreate, PaymentUpdate, PaymentOut

payments_router = APIRouter(
    prefix="/paiements",
    tags=["Payments"],
    dependencies=[Depends(get_current_user)]
)


@payments_router.post("/", response_model=PaymentOut, status_code=status.HTTP_201_CREATED)
def record_payment(payment: PaymentCreate, db: Session = Depends(get_db)):
    """
    Record a payment on an order.

    - **method**: `cash` / `card` / `check` / `transfer` (also `Espèces`, `Carte`, `Chèque`, `Virement`)
    - Cash needs an open register (404 otherwise) and is deposited on it
    - The amount may not exceed what is left to pay
    """
    return PaymentService(db).record_payment(payment.order_id, payment.amount, payment.method)


@payments_router.get("/", response_model=List[PaymentOut])
def list_session_payments(
    method: Optional[PaymentMethod] = Query(None),
    db: Session = Depends(get_db)
):
    """Payments taken on the open register."""
    return PaymentService(db).list_for_active_session(method)


@payments_router.get("/commande/{order_id}", response_model=List[PaymentOut])
def list_order_payments(order_id: int, db: Session = Depends(get_db)):
    return PaymentService(db).list_for_order(order_id)


@payments_router.get("/{payment_id}", response_model=PaymentOut)
def get_payment(payment_id: int, db: Session = Depends(get_db)):
    return PaymentService(db).get_payment(payment_id)


@payments_router.put("/{payment_id}", response_model=PaymentOut)
def update_payment(payment_id: int, update: PaymentUpdate, db: Session = Depends(get_db)):
    return PaymentService(db).update_payment(payment_id, update)


@payments_router.delete("/{payment_id}")
def delete_payment(payment_id: int, db: Session = Depends(get_db)):
    """Delete a payment; cash is taken back out of the open register."""
    return PaymentService(db).delete_payment(payment_id)
