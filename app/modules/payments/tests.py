"""
Tests for the payment recorder and its effects on the register and the
order's paid status.
"""

import pytest
from decimal import Decimal
from sqlalchemy.orm import Session

from app.common.exceptions import NoOpenSessionError, ValidationError, NotFoundError
from app.modules.payments.models import Payment, PaymentMethod
from app.modules.payments.schemas import PaymentCreate, PaymentUpdate
from app.modules.payments.service import PaymentService
from app.modules.registers.models import LedgerEntry, EntryType
from app.modules.registers.service import LedgerEntryService
from app.modules.orders.service import OrderService


def _balance(db_session, register):
    db_session.refresh(register)
    return Decimal(register.closing_balance)


# ===== RECORD =====

class TestRecordPayment:

    def test_cash_payment_scenario(self, db_session: Session, open_register, make_order):
        """float 100, cash 40 -> 140, delete -> 100"""
        LedgerEntryService(db_session).record_entry(EntryType.DEPOSIT, Decimal("100"), "float")
        assert _balance(db_session, open_register) == Decimal("100")

        order = make_order(quantity=2)
        due_before = OrderService(db_session).get_summary(order.id)["remaining_due"]

        payments = PaymentService(db_session)
        payment = payments.record_payment(order.id, Decimal("40"), PaymentMethod.CASH)
        assert _balance(db_session, open_register) == Decimal("140")
        assert payment.session_id == open_register.id
        assert OrderService(db_session).get_summary(order.id)["remaining_due"] == due_before - Decimal("40")

        payments.delete_payment(payment.id)
        assert _balance(db_session, open_register) == Decimal("100")

    def test_cash_round_trip_restores_paid_status(self, db_session: Session, open_register, make_order):
        order = make_order(quantity=1)
        payments = PaymentService(db_session)

        payment = payments.record_payment(order.id, Decimal("50"), PaymentMethod.CASH)
        db_session.refresh(order)
        assert order.is_paid is True

        payments.delete_payment(payment.id)
        db_session.refresh(order)
        assert order.is_paid is False
        assert _balance(db_session, open_register) == Decimal("0")

        reasons = [e.reason for e in db_session.query(LedgerEntry).order_by(LedgerEntry.id)]
        assert reasons == ["order payment", "payment reversal"]

    def test_discounted_order_paid_in_full(self, db_session: Session, open_register, make_order):
        order = make_order(quantity=4, global_discount=Decimal("10"))
        assert order.total == Decimal("190")

        PaymentService(db_session).record_payment(order.id, Decimal("190"), PaymentMethod.CARD)
        db_session.refresh(order)
        assert order.is_paid is True

    def test_cash_without_open_register(self, db_session: Session, make_order):
        order = make_order()
        with pytest.raises(NoOpenSessionError):
            PaymentService(db_session).record_payment(order.id, Decimal("10"), PaymentMethod.CASH)

        assert db_session.query(Payment).count() == 0
        assert db_session.query(LedgerEntry).count() == 0
        db_session.refresh(order)
        assert order.is_paid is False

    def test_card_without_open_register(self, db_session: Session, make_order):
        order = make_order()
        payment = PaymentService(db_session).record_payment(order.id, Decimal("10"), PaymentMethod.CARD)
        assert payment.session_id is None

    def test_card_does_not_move_balance(self, db_session: Session, open_register, make_order):
        order = make_order()
        payment = PaymentService(db_session).record_payment(order.id, Decimal("30"), PaymentMethod.TRANSFER)
        assert payment.session_id == open_register.id
        assert _balance(db_session, open_register) == Decimal("0")
        assert db_session.query(LedgerEntry).count() == 0

    def test_amount_above_remaining_due(self, db_session: Session, open_register, make_order):
        order = make_order(quantity=1)
        with pytest.raises(ValidationError):
            PaymentService(db_session).record_payment(order.id, Decimal("50.01"), PaymentMethod.CASH)
        assert _balance(db_session, open_register) == Decimal("0")

    def test_cash_amount_rounded_to_cents(self, db_session: Session, open_register, make_order):
        order = make_order(quantity=1)
        payment = PaymentService(db_session).record_payment(order.id, Decimal("10.005"), PaymentMethod.CASH)
        db_session.expire_all()

        assert PaymentService(db_session).get_payment(payment.id).amount == Decimal("10.01")
        entry = db_session.query(LedgerEntry).one()
        assert entry.amount == Decimal("10.01")
        assert _balance(db_session, open_register) == Decimal("10.01")

    def test_amount_rounding_to_zero_is_rejected(self, db_session: Session, open_register, make_order):
        order = make_order()
        with pytest.raises(ValidationError):
            PaymentService(db_session).record_payment(order.id, Decimal("0.004"), PaymentMethod.CASH)

        assert db_session.query(Payment).count() == 0
        assert db_session.query(LedgerEntry).count() == 0
        assert _balance(db_session, open_register) == Decimal("0")

    def test_unknown_order(self, db_session: Session, open_register):
        with pytest.raises(NotFoundError):
            PaymentService(db_session).record_payment(999, Decimal("1"), PaymentMethod.CASH)

    def test_schema_accepts_legacy_labels(self):
        payment = PaymentCreate.model_validate({"commande": 3, "montant": "12", "methode": "Espèces"})
        assert payment.order_id == 3
        assert payment.method == PaymentMethod.CASH
        assert PaymentCreate.model_validate({"order_id": 1, "amount": 1, "method": "Chèque"}).method == PaymentMethod.CHECK
        assert PaymentCreate.model_validate({"order_id": 1, "amount": 1, "method": "Virement"}).method == PaymentMethod.TRANSFER

        with pytest.raises(ValueError):
            PaymentCreate.model_validate({"order_id": 1, "amount": -5, "method": "cash"})
        with pytest.raises(ValueError):
            PaymentCreate.model_validate({"order_id": 1, "amount": "0.004", "method": "cash"})
        with pytest.raises(ValueError):
            PaymentUpdate.model_validate({"montant": "0.001"})
        assert PaymentCreate.model_validate({"order_id": 1, "amount": "9.999", "method": "card"}).amount == Decimal("10.00")


# ===== UPDATE / DELETE =====

class TestEditPayment:

    def test_increase_cash_amount_deposits_difference(self, db_session: Session, open_register, make_order):
        order = make_order(quantity=2)
        payments = PaymentService(db_session)
        payment = payments.record_payment(order.id, Decimal("40"), PaymentMethod.CASH)

        payments.update_payment(payment.id, PaymentUpdate(amount=Decimal("100")))
        assert _balance(db_session, open_register) == Decimal("100")
        db_session.refresh(order)
        assert order.is_paid is True

    def test_switch_cash_to_card_withdraws(self, db_session: Session, open_register, make_order):
        order = make_order(quantity=2)
        payments = PaymentService(db_session)
        payment = payments.record_payment(order.id, Decimal("40"), PaymentMethod.CASH)

        updated = payments.update_payment(payment.id, PaymentUpdate(method=PaymentMethod.CARD))
        assert updated.method == PaymentMethod.CARD
        assert _balance(db_session, open_register) == Decimal("0")

        last = db_session.query(LedgerEntry).order_by(LedgerEntry.id.desc()).first()
        assert last.type == EntryType.WITHDRAWAL
        assert last.reason == "payment adjustment"

    def test_update_cannot_exceed_due(self, db_session: Session, open_register, make_order):
        order = make_order(quantity=1)
        payments = PaymentService(db_session)
        payment = payments.record_payment(order.id, Decimal("20"), PaymentMethod.CARD)

        with pytest.raises(ValidationError):
            payments.update_payment(payment.id, PaymentUpdate(amount=Decimal("60")))

    def test_delete_cash_without_open_register(self, db_session: Session, open_register, make_order):
        from app.modules.registers.service import RegisterSessionService

        order = make_order()
        payments = PaymentService(db_session)
        payment = payments.record_payment(order.id, Decimal("10"), PaymentMethod.CASH)
        RegisterSessionService(db_session).close_session()

        with pytest.raises(NoOpenSessionError):
            payments.delete_payment(payment.id)
        assert payments.get_payment(payment.id).amount == Decimal("10")

    def test_list_for_order_and_session(self, db_session: Session, open_register, make_order):
        order = make_order(quantity=2)
        payments = PaymentService(db_session)
        payments.record_payment(order.id, Decimal("10"), PaymentMethod.CASH)
        payments.record_payment(order.id, Decimal("20"), PaymentMethod.CARD)

        assert [p.amount for p in payments.list_for_order(order.id)] == [Decimal("10"), Decimal("20")]
        assert len(payments.list_for_active_session()) == 2
        assert len(payments.list_for_active_session(PaymentMethod.CASH)) == 1


# ===== API =====

class TestPaymentsAPI:

    def test_record_and_delete(self, client, auth_headers, open_register, make_order):
        order = make_order(quantity=2)
        response = client.post("/api/paiements/", json={
            "commande": order.id, "montant": 40, "methode": "Espèces"
        }, headers=auth_headers)
        assert response.status_code == 201
        payment_id = response.json()["id"]

        listed = client.get(f"/api/paiements/commande/{order.id}", headers=auth_headers).json()
        assert [p["id"] for p in listed] == [payment_id]

        assert client.delete(f"/api/paiements/{payment_id}", headers=auth_headers).status_code == 200
        assert client.get(f"/api/paiements/{payment_id}", headers=auth_headers).status_code == 404

    def test_cash_without_register_is_404(self, client, auth_headers, make_order):
        order = make_order()
        response = client.post("/api/paiements/", json={
            "order_id": order.id, "amount": 10, "method": "cash"
        }, headers=auth_headers)
        assert response.status_code == 404

    def test_overpayment_is_400(self, client, auth_headers, open_register, make_order):
        order = make_order(quantity=1)
        response = client.post("/api/paiements/", json={
            "order_id": order.id, "amount": 80, "method": "card"
        }, headers=auth_headers)
        assert response.status_code == 400

    def test_sub_cent_amount_is_422(self, client, auth_headers, open_register, make_order):
        order = make_order()
        for _ in range(3):
            response = client.post("/api/paiements/", json={
                "order_id": order.id, "amount": "0.004", "method": "cash"
            }, headers=auth_headers)
            assert response.status_code == 422

        listed = client.get(f"/api/paiements/commande/{order.id}", headers=auth_headers).json()
        assert listed == []

    def test_session_payments_need_open_register(self, client, auth_headers):
        assert client.get("/api/paiements/", headers=auth_headers).status_code == 404
