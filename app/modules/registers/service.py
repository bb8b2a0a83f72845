"""
Business logic for the cash register.

- RegisterSessionService: opens and closes register sessions, finds the
  active one and is the only place that moves a session's running balance.
- LedgerEntryService: records and deletes deposits/withdrawals and keeps the
  session balance in step within the same transaction.

Every balance change is a read-modify-write on the session row, so the row
is loaded FOR UPDATE and the entry plus the new balance are committed
together.
"""

import logging
from decimal import Decimal
from typing import Dict, List, Optional, Any

from fastapi import HTTPException
from sqlalchemy import desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.common.exceptions import (
    NotFoundError, NoOpenSessionError, ConflictError, ValidationError, internal_error
)
from app.common.validators import round_money
from app.modules.registers.models import RegisterSession, LedgerEntry, EntryType, utcnow

logger = logging.getLogger(__name__)


class RegisterSessionService:
    """Lifecycle of register sessions"""

    def __init__(self, db: Session):
        self.db = db

    def _latest_first(self):
        return self.db.query(RegisterSession).order_by(
            desc(RegisterSession.opened_at), desc(RegisterSession.id)
        )

    def find_active_session(self, lock: bool = False) -> Optional[RegisterSession]:
        """The open session, or None. ``lock`` takes a row lock for balance updates."""
        query = self._latest_first().filter(RegisterSession.is_open.is_(True))
        if lock:
            query = query.with_for_update()
        return query.first()

    def get_active_session(self, lock: bool = False) -> RegisterSession:
        session = self.find_active_session(lock=lock)
        if not session:
            raise NotFoundError("No open register session")
        return session

    def require_active_session(self, lock: bool = True) -> RegisterSession:
        """Same lookup as get_active_session, for cash operations."""
        session = self.find_active_session(lock=lock)
        if not session:
            raise NoOpenSessionError()
        return session

    def get_latest_session(self) -> RegisterSession:
        session = self._latest_first().first()
        if not session:
            raise NotFoundError("No register session exists")
        return session

    def get_session(self, session_id: int) -> RegisterSession:
        session = self.db.query(RegisterSession).filter(RegisterSession.id == session_id).first()
        if not session:
            raise NotFoundError("Register session not found")
        return session

    def list_sessions(self, limit: int = settings.DEFAULT_PAGE_SIZE, offset: int = 0) -> Dict[str, Any]:
        query = self._latest_first()
        total = query.count()
        return {
            "sessions": query.offset(offset).limit(limit).all(),
            "total": total,
            "limit": limit,
            "offset": offset
        }

    @staticmethod
    def apply_to_balance(session: RegisterSession, entry_type: EntryType, amount: Decimal) -> Decimal:
        """Move the running balance by +amount (deposit) or -amount (withdrawal)."""
        current = Decimal(session.closing_balance or 0)
        amount = round_money(amount)
        if entry_type == EntryType.DEPOSIT:
            session.closing_balance = current + amount
        else:
            session.closing_balance = current - amount
        return session.closing_balance

    def open_session(self) -> RegisterSession:
        """
        Open a new register session.

        The opening balance carries forward the closing balance of the most
        recently opened session (0 for the very first one). A session that
        is still open is closed first.
        """
        try:
            previous = self._latest_first().with_for_update().first()

            still_open = self.db.query(RegisterSession).filter(
                RegisterSession.is_open.is_(True)
            ).with_for_update().all()
            for stale in still_open:
                stale.is_open = False
                stale.closed_at = utcnow()
                logger.info(f"Register session {stale.id} closed before opening a new one")
            self.db.flush()

            opening = Decimal(previous.closing_balance or 0) if previous else Decimal("0")
            new_session = RegisterSession(
                opening_balance=opening,
                closing_balance=opening,
                opened_at=utcnow(),
                is_open=True
            )
            self.db.add(new_session)
            self.db.commit()
            self.db.refresh(new_session)

            logger.info(f"Register session {new_session.id} opened with balance {opening}")
            return new_session

        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Another register session is already open")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Opening register session failed: {e}")
            raise internal_error("opening register session", e)

    def close_session(self) -> RegisterSession:
        """Close the open session. NotFoundError when none is open."""
        try:
            session = self.get_active_session(lock=True)
            session.is_open = False
            session.closed_at = utcnow()
            self.db.commit()
            self.db.refresh(session)

            logger.info(f"Register session {session.id} closed with balance {session.closing_balance}")
            return session

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Closing register session failed: {e}")
            raise internal_error("closing register session", e)


class LedgerEntryService:
    """Deposits and withdrawals against register sessions"""

    def __init__(self, db: Session):
        self.db = db
        self.sessions = RegisterSessionService(db)

    def add_entry(self, session: RegisterSession, entry_type: EntryType,
                  amount: Decimal, reason: Optional[str]) -> LedgerEntry:
        """
        Stage an entry and its balance change without committing.

        Callers (record_entry, the payment recorder) own the transaction.
        The amount is rounded to cents before it reaches the entry or the
        balance.
        """
        amount = round_money(abs(amount))
        if amount <= 0:
            raise ValidationError("Ledger entry amount must be at least 0.01")

        entry = LedgerEntry(
            session_id=session.id,
            type=entry_type,
            amount=amount,
            reason=reason,
            occurred_at=utcnow()
        )
        self.db.add(entry)
        RegisterSessionService.apply_to_balance(session, entry_type, amount)
        return entry

    def record_entry(self, entry_type: EntryType, amount: Decimal, reason: Optional[str] = None) -> LedgerEntry:
        """Record a deposit/withdrawal on the active session."""
        try:
            session = self.sessions.require_active_session(lock=True)
            entry = self.add_entry(session, entry_type, amount, reason)
            self.db.commit()
            self.db.refresh(entry)

            logger.info(
                f"Ledger entry {entry.id} ({entry_type.value} {entry.amount}) on session {session.id}; "
                f"balance {session.closing_balance}"
            )
            return entry

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Recording ledger entry failed: {e}")
            raise internal_error("recording ledger entry", e)

    def get_entry(self, entry_id: int) -> LedgerEntry:
        entry = self.db.query(LedgerEntry).filter(LedgerEntry.id == entry_id).first()
        if not entry:
            raise NotFoundError("Ledger entry not found")
        return entry

    def delete_entry(self, entry_id: int) -> Dict[str, str]:
        """Delete an entry and reverse its effect on its own session's balance."""
        try:
            entry = self.get_entry(entry_id)
            session = self.db.query(RegisterSession).filter(
                RegisterSession.id == entry.session_id
            ).with_for_update().one()

            reverse = EntryType.WITHDRAWAL if entry.type == EntryType.DEPOSIT else EntryType.DEPOSIT
            RegisterSessionService.apply_to_balance(session, reverse, Decimal(entry.amount))
            self.db.delete(entry)
            self.db.commit()

            logger.info(f"Ledger entry {entry_id} deleted; session {session.id} balance {session.closing_balance}")
            return {"message": "Ledger entry deleted"}

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Deleting ledger entry {entry_id} failed: {e}")
            raise internal_error("deleting ledger entry", e)

    def list_entries_for_session(self, session_id: int) -> List[LedgerEntry]:
        self.sessions.get_session(session_id)
        return self.db.query(LedgerEntry).filter(
            LedgerEntry.session_id == session_id
        ).order_by(LedgerEntry.id).all()

    def list_active_entries(self) -> List[LedgerEntry]:
        session = self.sessions.get_active_session()
        return self.list_entries_for_session(session.id)

    @staticmethod
    def summarize(entries: List[LedgerEntry]) -> Dict[str, Any]:
        total_deposits = Decimal("0")
        total_withdrawals = Decimal("0")
        for entry in entries:
            if entry.type == EntryType.DEPOSIT:
                total_deposits += Decimal(entry.amount)
            else:
                total_withdrawals += Decimal(entry.amount)

        return {
            "total_deposits": total_deposits,
            "total_withdrawals": total_withdrawals,
            "net": total_deposits - total_withdrawals,
            "count": len(entries)
        }
