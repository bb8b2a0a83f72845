"""
SQLAlchemy models for orders.

An order holds product lines and service items for one client. Its
payments live in app.modules.payments and hang off ``Order.payments``;
``is_paid`` is recomputed from them after every payment change.
"""

from app.database.database import Base
from sqlalchemy import Column, Integer, Boolean, ForeignKey, Numeric, CheckConstraint
from sqlalchemy.orm import relationship
from decimal import Decimal
from app.common.mixins import TimestampMixin
from app.modules.orders import calculator


class Order(Base, TimestampMixin):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    global_discount = Column(Numeric(15, 2), nullable=False, default=0)  # Absolute amount
    is_paid = Column(Boolean, nullable=False, default=False, index=True)
    session_id = Column(Integer, ForeignKey("register_sessions.id"), nullable=True, index=True)

    client = relationship("Client")
    items = relationship(
        "OrderLineItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderLineItem.position"
    )
    services = relationship(
        "OrderServiceItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderServiceItem.position"
    )
    payments = relationship(
        "Payment",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="Payment.id"
    )

    __table_args__ = (
        CheckConstraint("global_discount >= 0", name="ck_orders_global_discount_non_negative"),
    )

    @property
    def subtotal(self) -> Decimal:
        return calculator.compute_subtotal(self)

    @property
    def total(self) -> Decimal:
        return calculator.compute_total(self)


class OrderLineItem(Base):
    __tablename__ = "order_line_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    unit_price = Column(Numeric(15, 2), nullable=False)
    quantity = Column(Integer, nullable=False)
    discount = Column(Numeric(15, 2), nullable=False, default=0)  # Absolute, once per line
    position = Column(Integer, nullable=False, default=0)

    order = relationship("Order", back_populates="items")
    product = relationship("Product")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_line_items_quantity_positive"),
    )

    @property
    def total(self) -> Decimal:
        return calculator.line_total(self)


class OrderServiceItem(Base):
    __tablename__ = "order_service_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False)
    price = Column(Numeric(15, 2), nullable=False)
    discount = Column(Numeric(15, 2), nullable=False, default=0)
    position = Column(Integer, nullable=False, default=0)

    order = relationship("Order", back_populates="services")
    service = relationship("Service")

    @property
    def total(self) -> Decimal:
        return calculator.service_total(self)
