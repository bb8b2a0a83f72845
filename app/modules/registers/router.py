from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import List

from app.core.config import settings
from app.database.database import get_db
from app.modules.auth.utils import get_current_user
from app.modules.registers.service import RegisterSessionService, LedgerEntryService
from app.modules.registers.schemas import (
    LedgerEntryCreate, LedgerEntryOut,
    RegisterSessionOut, RegisterSessionDetail, RegisterSessionList
)

caisse_router = APIRouter(
    prefix="/caisse",
    tags=["Register"],
    dependencies=[Depends(get_current_user)]
)

transactions_router = APIRouter(
    prefix="/transactions",
    tags=["Register"],
    dependencies=[Depends(get_current_user)]
)


def _session_detail(db: Session, session) -> dict:
    entries = LedgerEntryService(db).list_entries_for_session(session.id)
    detail = RegisterSessionOut.model_validate(session).model_dump()
    detail["entries"] = entries
    detail["summary"] = LedgerEntryService.summarize(entries)
    return detail


# ===== REGISTER SESSIONS =====

@caisse_router.get("/", response_model=RegisterSessionOut)
def get_latest_session(db: Session = Depends(get_db)):
    """Most recently opened session, open or closed."""
    return RegisterSessionService(db).get_latest_session()


@caisse_router.get("/open", response_model=RegisterSessionDetail)
def get_open_session(db: Session = Depends(get_db)):
    """The open session with its ledger entries. 404 when the register is closed."""
    session = RegisterSessionService(db).get_active_session()
    return _session_detail(db, session)


@caisse_router.post("/open", response_model=RegisterSessionOut, status_code=status.HTTP_201_CREATED)
def open_session(db: Session = Depends(get_db)):
    """
    Open the register by hand. The scheduler normally does this every morning.
    """
    return RegisterSessionService(db).open_session()


@caisse_router.post("/close", response_model=RegisterSessionOut)
def close_session(db: Session = Depends(get_db)):
    """
    Close the register by hand. The scheduler normally does this every evening.
    """
    return RegisterSessionService(db).close_session()


@caisse_router.get("/history", response_model=RegisterSessionList)
def list_sessions(
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    return RegisterSessionService(db).list_sessions(limit, offset)


@caisse_router.get("/{session_id}", response_model=RegisterSessionDetail)
def get_session(session_id: int, db: Session = Depends(get_db)):
    session = RegisterSessionService(db).get_session(session_id)
    return _session_detail(db, session)


# ===== LEDGER ENTRIES =====

@transactions_router.post("/", response_model=LedgerEntryOut, status_code=status.HTTP_201_CREATED)
def record_entry(entry: LedgerEntryCreate, db: Session = Depends(get_db)):
    """
    Record a deposit or withdrawal on the open register.

    - **type**: `deposit` / `withdrawal` (also `depot` / `retrait`)
    - **amount**: strictly positive
    - **reason**: free text, optional
    """
    return LedgerEntryService(db).record_entry(entry.type, entry.amount, entry.reason)


@transactions_router.get("/", response_model=List[LedgerEntryOut])
def list_active_entries(db: Session = Depends(get_db)):
    """Entries of the open session, oldest first."""
    return LedgerEntryService(db).list_active_entries()


@transactions_router.get("/caisse/{session_id}", response_model=List[LedgerEntryOut])
def list_session_entries(session_id: int, db: Session = Depends(get_db)):
    return LedgerEntryService(db).list_entries_for_session(session_id)


@transactions_router.get("/{entry_id}", response_model=LedgerEntryOut)
def get_entry(entry_id: int, db: Session = Depends(get_db)):
    return LedgerEntryService(db).get_entry(entry_id)


@transactions_router.delete("/{entry_id}")
def delete_entry(entry_id: int, db: Session = Depends(get_db)):
    """Delete an entry and undo its effect on its session's balance."""
    return LedgerEntryService(db).delete_entry(entry_id)
