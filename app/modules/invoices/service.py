import logging
from typing import Dict, Any, Optional

from fastapi import HTTPException
from sqlalchemy import desc
from sqlalchemy.orm import Session

from app.core.config import settings
from app.common.exceptions import NotFoundError, internal_error
from app.modules.invoices.models import Invoice
from app.modules.orders import calculator
from app.modules.orders.service import OrderService

logger = logging.getLogger(__name__)

INVOICE_PREFIX = "F-"


class InvoiceService:
    """Invoices issued from orders"""

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def format_number(invoice_id: int) -> str:
        return f"{INVOICE_PREFIX}{invoice_id:06d}"

    def create_invoice(self, order_id: int) -> Invoice:
        """Freeze the order's subtotal, global discount and total into an invoice."""
        try:
            order = OrderService(self.db).get_order(order_id)
            subtotal = calculator.compute_subtotal(order)

            invoice = Invoice(
                order_id=order.id,
                subtotal=subtotal,
                discount=order.global_discount,
                total=calculator.compute_total(order)
            )
            self.db.add(invoice)
            self.db.flush()
            invoice.number = self.format_number(invoice.id)

            self.db.commit()
            self.db.refresh(invoice)
            logger.info(f"Invoice {invoice.number} issued for order {order.id}, total {invoice.total}")
            return invoice

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Issuing invoice for order {order_id} failed: {e}")
            raise internal_error("issuing invoice", e)

    def get_invoices(self, limit: int = settings.DEFAULT_PAGE_SIZE, offset: int = 0, order_id: Optional[int] = None) -> Dict[str, Any]:
        query = self.db.query(Invoice)
        if order_id is not None:
            query = query.filter(Invoice.order_id == order_id)

        total = query.count()
        invoices = query.order_by(desc(Invoice.id)).offset(offset).limit(limit).all()
        return {
            "invoices": invoices,
            "total": total,
            "limit": limit,
            "offset": offset
        }

    def get_invoice_by_id(self, invoice_id: int) -> Invoice:
        invoice = self.db.query(Invoice).filter(Invoice.id == invoice_id).first()
        if not invoice:
            raise NotFoundError("Invoice not found")
        return invoice
