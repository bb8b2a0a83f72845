"""
Payment recorder.

Recording, editing or deleting a payment is one transaction covering:
- the payment row itself
- for cash, a ledger entry on the open register and its new balance
- the order's recomputed paid status

Non-cash payments never touch the register balance.
"""

import logging
from decimal import Decimal
from typing import Dict, List, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.common.exceptions import NotFoundError, ValidationError, internal_error
from app.common.validators import round_money
from app.modules.orders import calculator
from app.modules.orders.service import OrderService
from app.modules.payments.models import Payment, PaymentMethod
from app.modules.payments.schemas import PaymentUpdate
from app.modules.registers.models import EntryType
from app.modules.registers.service import RegisterSessionService, LedgerEntryService

logger = logging.getLogger(__name__)

PAYMENT_REASON = "order payment"
REVERSAL_REASON = "payment reversal"
ADJUSTMENT_REASON = "payment adjustment"


class PaymentService:
    """Payments against orders and their effect on the register"""

    def __init__(self, db: Session):
        self.db = db
        self.orders = OrderService(db)
        self.sessions = RegisterSessionService(db)
        self.ledger = LedgerEntryService(db)

    @staticmethod
    def _amount(amount) -> Decimal:
        """Amounts are kept in cents, like the ledger."""
        rounded = round_money(amount)
        if rounded <= 0:
            raise ValidationError(f"Payment amount must be at least 0.01, got {amount}")
        return rounded

    @staticmethod
    def _cash_part(amount: Decimal, method: PaymentMethod) -> Decimal:
        return Decimal(amount) if method == PaymentMethod.CASH else Decimal("0")

    def _check_within_due(self, order, amount: Decimal, other_payments) -> None:
        remaining = calculator.compute_remaining_due(order, other_payments)
        if amount > remaining + calculator.PAID_EPSILON:
            raise ValidationError(
                f"Payment of {amount} exceeds the remaining due of {remaining} on order {order.id}"
            )

    def record_payment(self, order_id: int, amount: Decimal, method: PaymentMethod) -> Payment:
        """
        Take a payment for an order.

        Cash needs an open register: the amount is deposited on it. Other
        methods are attached to the open register when there is one.
        """
        try:
            amount = self._amount(amount)
            order = self.orders.get_order(order_id)
            self._check_within_due(order, amount, order.payments)

            if method == PaymentMethod.CASH:
                session = self.sessions.require_active_session(lock=True)
            else:
                session = self.sessions.find_active_session()

            payment = Payment(
                amount=amount,
                method=method,
                session_id=session.id if session else None
            )
            order.payments.append(payment)

            if method == PaymentMethod.CASH:
                self.ledger.add_entry(session, EntryType.DEPOSIT, amount, PAYMENT_REASON)

            self.orders.recompute_status(order)
            self.db.commit()
            self.db.refresh(payment)

            logger.info(
                f"Payment {payment.id} of {amount} ({method.value}) on order {order.id}; "
                f"order paid: {order.is_paid}"
                + (f"; register balance {session.closing_balance}" if method == PaymentMethod.CASH else "")
            )
            return payment

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Recording payment on order {order_id} failed: {e}")
            raise internal_error("recording payment", e)

    def update_payment(self, payment_id: int, update_data: PaymentUpdate) -> Payment:
        """
        Change a payment's amount and/or method.

        The difference in cash taken before and after the edit is posted on
        the open register as a deposit or withdrawal.
        """
        try:
            payment = self.get_payment(payment_id)
            order = payment.order

            new_amount = self._amount(update_data.amount if update_data.amount is not None else payment.amount)
            new_method = update_data.method if update_data.method is not None else payment.method

            others = [p for p in order.payments if p.id != payment.id]
            self._check_within_due(order, new_amount, others)

            delta = self._cash_part(new_amount, new_method) - self._cash_part(payment.amount, payment.method)
            if delta != 0:
                session = self.sessions.require_active_session(lock=True)
                entry_type = EntryType.DEPOSIT if delta > 0 else EntryType.WITHDRAWAL
                self.ledger.add_entry(session, entry_type, abs(delta), ADJUSTMENT_REASON)
                if new_method == PaymentMethod.CASH:
                    payment.session_id = session.id
                logger.info(f"Payment {payment_id} edit moves register {session.id} by {delta}")

            payment.amount = new_amount
            payment.method = new_method
            self.orders.recompute_status(order)
            self.db.commit()
            self.db.refresh(payment)

            logger.info(f"Payment {payment_id} updated to {new_amount} ({new_method.value})")
            return payment

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Updating payment {payment_id} failed: {e}")
            raise internal_error("updating payment", e)

    def delete_payment(self, payment_id: int) -> Dict[str, str]:
        """
        Delete a payment. Cash is withdrawn again from the open register.
        """
        try:
            payment = self.get_payment(payment_id)
            order = payment.order

            if payment.is_cash:
                session = self.sessions.require_active_session(lock=True)
                self.ledger.add_entry(session, EntryType.WITHDRAWAL, Decimal(payment.amount), REVERSAL_REASON)

            order.payments.remove(payment)
            self.orders.recompute_status(order)
            self.db.commit()

            logger.info(f"Payment {payment_id} deleted; order {order.id} paid: {order.is_paid}")
            return {"message": "Payment deleted"}

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Deleting payment {payment_id} failed: {e}")
            raise internal_error("deleting payment", e)

    def get_payment(self, payment_id: int) -> Payment:
        payment = self.db.query(Payment).filter(Payment.id == payment_id).first()
        if not payment:
            raise NotFoundError("Payment not found")
        return payment

    def list_for_order(self, order_id: int) -> List[Payment]:
        self.orders.get_order(order_id)
        return self.db.query(Payment).filter(Payment.order_id == order_id).order_by(Payment.id).all()

    def list_for_active_session(self, method: Optional[PaymentMethod] = None) -> List[Payment]:
        """Payments taken on the open register."""
        session = self.sessions.get_active_session()
        query = self.db.query(Payment).filter(Payment.session_id == session.id)
        if method is not None:
            query = query.filter(Payment.method == method)
        return query.order_by(Payment.id).all()
