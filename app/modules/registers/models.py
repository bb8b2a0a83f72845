"""
SQLAlchemy models for the cash register ("caisse").

- RegisterSession: one day's (or shift's) register with its opening balance
  and the running closing balance.
- LedgerEntry: a deposit or withdrawal recorded against a session.

The running balance is stored on the session and moved by every entry; the
unique partial index keeps at most one session open at a time.
"""

from app.database.database import Base
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Numeric, Enum, Index, text
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from decimal import Decimal
import enum


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EntryType(str, enum.Enum):
    """Ledger entry kinds"""
    DEPOSIT = "deposit"         # Cash in
    WITHDRAWAL = "withdrawal"   # Cash out


class RegisterSession(Base):
    __tablename__ = "register_sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    opening_balance = Column(Numeric(15, 2), nullable=False, default=0)
    closing_balance = Column(Numeric(15, 2), nullable=False, default=0)
    opened_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    closed_at = Column(DateTime(timezone=True), nullable=True)
    is_open = Column(Boolean, nullable=False, default=True)

    entries = relationship(
        "LedgerEntry",
        back_populates="session",
        order_by="LedgerEntry.id"
    )

    __table_args__ = (
        Index(
            "uq_register_sessions_single_open",
            "is_open",
            unique=True,
            postgresql_where=text("is_open"),
            sqlite_where=text("is_open = 1"),
        ),
    )

    @property
    def net_change(self) -> Decimal:
        return Decimal(self.closing_balance or 0) - Decimal(self.opening_balance or 0)


class LedgerEntry(Base):
    __tablename__ = "ledger_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(Enum(EntryType), nullable=False, index=True)
    amount = Column(Numeric(15, 2), nullable=False)  # Always positive
    reason = Column(String(255), nullable=True)
    occurred_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    session_id = Column(Integer, ForeignKey("register_sessions.id"), nullable=False, index=True)

    session = relationship("RegisterSession", back_populates="entries")

    @property
    def signed_amount(self) -> Decimal:
        if self.type == EntryType.DEPOSIT:
            return abs(Decimal(self.amount))
        return -abs(Decimal(self.amount))
