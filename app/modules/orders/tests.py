"""
Tests for order totals, the paid status and the orders API.

All discounts are absolute amounts; these tests pin that behaviour.
"""

import pytest
from decimal import Decimal
from types import SimpleNamespace
from sqlalchemy.orm import Session

from app.core.config import settings
from app.common.exceptions import NotFoundError, ValidationError
from app.modules.orders import calculator
from app.modules.orders.schemas import OrderCreate, OrderUpdate
from app.modules.orders.service import OrderService


def _line(unit_price, quantity, discount="0"):
    return SimpleNamespace(unit_price=Decimal(unit_price), quantity=quantity, discount=Decimal(discount))


def _service(price, discount="0"):
    return SimpleNamespace(price=Decimal(price), discount=Decimal(discount))


def _order(items=(), services=(), global_discount="0"):
    return SimpleNamespace(id=1, items=list(items), services=list(services), global_discount=Decimal(global_discount))


def _payment(amount):
    return SimpleNamespace(amount=Decimal(amount))


# ===== CALCULATOR =====

class TestCalculator:

    def test_line_discount_is_taken_once(self):
        order = _order(items=[_line("50", 4, "20")])
        assert calculator.compute_subtotal(order) == Decimal("180")

    def test_service_discount_is_absolute(self):
        order = _order(services=[_service("25", "5")])
        assert calculator.compute_subtotal(order) == Decimal("20")

    def test_global_discount_is_absolute(self):
        order = _order(items=[_line("100", 2)], global_discount="10")
        assert calculator.compute_subtotal(order) == Decimal("200")
        assert calculator.compute_total(order) == Decimal("190")

    def test_subtotal_200_discount_10_paid_190_is_settled(self):
        order = _order(items=[_line("100", 2)], global_discount="10")
        remaining = calculator.compute_remaining_due(order, [_payment("190")])
        assert remaining <= calculator.PAID_EPSILON
        assert calculator.is_settled(remaining) is True

    def test_remaining_due_is_pure(self):
        order = _order(items=[_line("19.99", 3)], services=[_service("10")], global_discount="2")
        payments = [_payment("20"), _payment("5.50")]
        first = calculator.compute_remaining_due(order, payments)
        second = calculator.compute_remaining_due(order, payments)
        assert first == second == Decimal("42.47")

    def test_overpayment_reported_as_negative(self):
        order = _order(items=[_line("10", 1)])
        remaining = calculator.compute_remaining_due(order, [_payment("15")])
        assert remaining == Decimal("-5")
        assert calculator.is_settled(remaining) is True

    def test_settled_threshold(self):
        assert calculator.is_settled(Decimal("0.001")) is True
        assert calculator.is_settled(Decimal("0.01")) is False

    def test_build_summary(self):
        order = _order(items=[_line("50", 2)], global_discount="10")
        summary = calculator.build_summary(order, [_payment("30")])
        assert summary["subtotal"] == Decimal("100")
        assert summary["total"] == Decimal("90")
        assert summary["paid"] == Decimal("30")
        assert summary["remaining_due"] == Decimal("60")
        assert summary["is_paid"] is False
        assert summary["payment_count"] == 1


# ===== SERVICE =====

class TestOrderService:

    def test_create_uses_catalogue_price(self, db_session: Session, make_order, sample_product):
        order = make_order(quantity=2)
        assert order.items[0].unit_price == sample_product.price
        assert order.total == Decimal("100")
        assert order.is_paid is False
        assert order.session_id is None

    def test_create_attaches_open_register(self, db_session: Session, open_register, make_order):
        order = make_order()
        assert order.session_id == open_register.id

    def test_create_with_services(self, db_session: Session, sample_client, sample_service):
        order = OrderService(db_session).create_order(OrderCreate(
            client_id=sample_client.id,
            services=[{"service_id": sample_service.id, "discount": "5"}]
        ))
        assert order.total == Decimal("20")
        assert order.services[0].price == Decimal("25")

    def test_create_requires_items(self, db_session: Session, sample_client):
        with pytest.raises(ValidationError):
            OrderService(db_session).create_order(OrderCreate(client_id=sample_client.id))

    def test_create_unknown_client(self, db_session: Session, sample_product):
        with pytest.raises(NotFoundError):
            OrderService(db_session).create_order(OrderCreate(
                client_id=999,
                items=[{"product_id": sample_product.id, "quantity": 1}]
            ))

    def test_global_discount_cannot_exceed_subtotal(self, db_session: Session, make_order):
        with pytest.raises(ValidationError):
            make_order(quantity=1, global_discount=Decimal("60"))

    def test_update_replaces_items_and_recomputes_status(self, db_session: Session, make_order, sample_client, sample_product):
        service = OrderService(db_session)
        order = make_order(quantity=1)
        service.mark_paid(order.id)

        updated = service.update_order(order.id, OrderUpdate(
            client_id=sample_client.id,
            items=[{"product_id": sample_product.id, "quantity": 3}]
        ))
        assert len(updated.items) == 1
        assert updated.items[0].quantity == 3
        assert updated.total == Decimal("150")
        assert updated.is_paid is False

    def test_manual_status_overrides(self, db_session: Session, make_order):
        service = OrderService(db_session)
        order = make_order()
        assert service.mark_paid(order.id).is_paid is True
        assert service.mark_unpaid(order.id).is_paid is False

    def test_schema_rounds_amounts_to_cents(self):
        order = OrderCreate.model_validate({
            "client_id": 1,
            "produits": [{"produit": 1, "quantite": 1, "prix": "19.999", "remise": "0.005"}],
            "remiseGlobale": "1.234"
        })
        assert order.items[0].unit_price == Decimal("20.00")
        assert order.items[0].discount == Decimal("0.01")
        assert order.global_discount == Decimal("1.23")

    def test_delete(self, db_session: Session, make_order):
        service = OrderService(db_session)
        order = make_order()
        service.delete_order(order.id)
        with pytest.raises(NotFoundError):
            service.get_order(order.id)


# ===== API =====

class TestOrdersAPI:

    def test_create_with_legacy_fields(self, client, auth_headers, sample_client, sample_product):
        response = client.post("/api/commandes/", json={
            "clientId": sample_client.id,
            "produits": [{"produit": sample_product.id, "quantite": 4, "prix": 50, "remise": 20}],
            "remiseGlobale": 10
        }, headers=auth_headers)

        assert response.status_code == 201
        body = response.json()
        assert Decimal(str(body["subtotal"])) == Decimal("180")
        assert Decimal(str(body["total"])) == Decimal("170")

    def test_summary_and_status_routes(self, client, auth_headers, make_order):
        order = make_order(quantity=2)

        summary = client.get(f"/api/commandes/{order.id}/summary", headers=auth_headers).json()
        assert Decimal(str(summary["remaining_due"])) == Decimal("100")
        assert summary["is_paid"] is False

        response = client.put(f"/api/commandes/active/{order.id}", headers=auth_headers)
        assert response.json()["is_paid"] is True
        response = client.put(f"/api/commandes/desactive/{order.id}", headers=auth_headers)
        assert response.json()["is_paid"] is False

    def test_list_filters_by_status(self, client, auth_headers, make_order):
        make_order()
        paid = make_order()
        client.put(f"/api/commandes/active/{paid.id}", headers=auth_headers)

        body = client.get("/api/commandes/?is_paid=true", headers=auth_headers).json()
        assert body["total"] == 1
        assert body["orders"][0]["id"] == paid.id

    def test_list_page_size_bounds(self, client, auth_headers, make_order):
        make_order()
        body = client.get("/api/commandes/", headers=auth_headers).json()
        assert body["limit"] == settings.DEFAULT_PAGE_SIZE

        too_many = settings.MAX_PAGE_SIZE + 1
        assert client.get(f"/api/commandes/?limit={too_many}", headers=auth_headers).status_code == 422
        assert client.get(f"/api/clients/?limit={too_many}", headers=auth_headers).status_code == 422
        assert client.get(f"/api/caisse/history?limit={too_many}", headers=auth_headers).status_code == 422

    def test_unknown_order_is_404(self, client, auth_headers):
        assert client.get("/api/commandes/999", headers=auth_headers).status_code == 404
