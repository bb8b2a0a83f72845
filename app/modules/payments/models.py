from app.database.database import Base
from sqlalchemy import Column, Integer, ForeignKey, Numeric, Enum, CheckConstraint
from sqlalchemy.orm import relationship
from app.common.mixins import TimestampMixin
import enum


class PaymentMethod(str, enum.Enum):
    """Accepted payment methods; only cash moves the register balance"""
    CASH = "cash"
    CARD = "card"
    CHECK = "check"
    TRANSFER = "transfer"


class Payment(Base, TimestampMixin):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Numeric(15, 2), nullable=False)
    method = Column(Enum(PaymentMethod), nullable=False, index=True)
    # Register open when the payment was taken; NULL for non-cash payments outside opening hours
    session_id = Column(Integer, ForeignKey("register_sessions.id"), nullable=True, index=True)

    order = relationship("Order", back_populates="payments")

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_payments_amount_positive"),
    )

    @property
    def is_cash(self) -> bool:
        return self.method == PaymentMethod.CASH
