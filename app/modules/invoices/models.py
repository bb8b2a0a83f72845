from app.database.database import Base
from sqlalchemy import Column, Integer, String, ForeignKey, Numeric
from sqlalchemy.orm import relationship
from app.common.mixins import TimestampMixin


class Invoice(Base, TimestampMixin):
    """
    Snapshot of an order's figures at the time it was invoiced.

    Later edits to the order do not change an issued invoice.
    """
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, autoincrement=True)
    number = Column(String(50), nullable=True, unique=True)  # F-000001, assigned on creation
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    subtotal = Column(Numeric(15, 2), nullable=False)
    discount = Column(Numeric(15, 2), nullable=False, default=0)  # Order's global discount
    total = Column(Numeric(15, 2), nullable=False)

    order = relationship("Order")
