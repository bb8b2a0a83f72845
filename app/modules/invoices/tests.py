"""
Tests for invoices issued from orders.
"""

import pytest
from decimal import Decimal
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.common.exceptions import NotFoundError, ConflictError
from app.modules.invoices.models import Invoice
from app.modules.invoices.service import InvoiceService
from app.modules.orders.schemas import OrderUpdate
from app.modules.orders.service import OrderService


class TestInvoices:

    def test_snapshot_of_order_totals(self, db_session: Session, make_order, sample_client, sample_product):
        order = make_order(quantity=4, global_discount=Decimal("10"))
        invoice = InvoiceService(db_session).create_invoice(order.id)

        assert invoice.number == f"F-{invoice.id:06d}"
        assert invoice.subtotal == Decimal("200")
        assert invoice.discount == Decimal("10")
        assert invoice.total == Decimal("190")

        OrderService(db_session).update_order(order.id, OrderUpdate(
            client_id=sample_client.id,
            items=[{"product_id": sample_product.id, "quantity": 1}]
        ))
        db_session.refresh(invoice)
        assert invoice.total == Decimal("190")

    def test_invoiced_order_cannot_be_deleted(self, db_session: Session, make_order):
        order = make_order(quantity=1)
        invoice = InvoiceService(db_session).create_invoice(order.id)

        with pytest.raises(ConflictError) as exc:
            OrderService(db_session).delete_order(order.id)
        assert exc.value.status_code == 409
        assert OrderService(db_session).get_order(order.id).id == order.id

        # The foreign key holds at the storage level too
        db_session.delete(order)
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()
        assert db_session.query(Invoice).filter(Invoice.id == invoice.id).one().order_id == order.id

    def test_unknown_order(self, db_session: Session):
        with pytest.raises(NotFoundError):
            InvoiceService(db_session).create_invoice(999)

    def test_api(self, client, auth_headers, make_order):
        order = make_order(quantity=1)
        response = client.post("/api/factures/", json={"commande": order.id}, headers=auth_headers)
        assert response.status_code == 201
        invoice_id = response.json()["id"]

        listed = client.get(f"/api/factures/?order_id={order.id}", headers=auth_headers).json()
        assert listed["total"] == 1
        assert client.get(f"/api/factures/{invoice_id}", headers=auth_headers).status_code == 200
        assert client.get("/api/factures/999", headers=auth_headers).status_code == 404
        assert client.delete(f"/api/commandes/{order.id}", headers=auth_headers).status_code == 409
