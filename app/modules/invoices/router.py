from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import Optional

from app.core.config import settings
from app.database.database import get_db
from app.modules.auth.utils import get_current_user
from app.modules.invoices.service import InvoiceService
from app.modules.invoices.schemas import InvoiceCreate, InvoiceOut, InvoiceList

invoices_router = APIRouter(
    prefix="/factures",
    tags=["Invoices"],
    dependencies=[Depends(get_current_user)]
)


@invoices_router.post("/", response_model=InvoiceOut, status_code=status.HTTP_201_CREATED)
def create_invoice(invoice: InvoiceCreate, db: Session = Depends(get_db)):
    """Issue an invoice for an order, freezing its current totals."""
    return InvoiceService(db).create_invoice(invoice.order_id)


@invoices_router.get("/", response_model=InvoiceList)
def list_invoices(
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    order_id: Optional[int] = Query(None),
    db: Session = Depends(get_db)
):
    return InvoiceService(db).get_invoices(limit, offset, order_id)


@invoices_router.get("/{invoice_id}", response_model=InvoiceOut)
def get_invoice(invoice_id: int, db: Session = Depends(get_db)):
    return InvoiceService(db).get_invoice_by_id(invoice_id)
