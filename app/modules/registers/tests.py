"""
Tests for the cash register: session lifecycle, ledger entries and the
scheduled open/close jobs.
"""

import pytest
from decimal import Decimal
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.common.exceptions import NotFoundError, NoOpenSessionError, ConflictError, ValidationError
from app.modules.registers import tasks
from app.modules.registers.models import RegisterSession, LedgerEntry, EntryType
from app.modules.registers.schemas import LedgerEntryCreate
from app.modules.registers.service import RegisterSessionService, LedgerEntryService


# ===== SESSION LIFECYCLE =====

class TestRegisterSessions:

    def test_first_session_opens_at_zero(self, db_session: Session):
        session = RegisterSessionService(db_session).open_session()

        assert session.is_open is True
        assert session.opening_balance == Decimal("0")
        assert session.closing_balance == Decimal("0")
        assert session.closed_at is None

    def test_opening_balance_carries_forward(self, db_session: Session):
        sessions = RegisterSessionService(db_session)
        ledger = LedgerEntryService(db_session)

        sessions.open_session()
        ledger.record_entry(EntryType.DEPOSIT, Decimal("120.50"), "float")
        first = sessions.close_session()

        second = sessions.open_session()
        assert second.opening_balance == first.closing_balance == Decimal("120.50")
        assert second.closing_balance == Decimal("120.50")

    def test_open_closes_previous_open_session(self, db_session: Session):
        sessions = RegisterSessionService(db_session)
        first = sessions.open_session()
        second = sessions.open_session()

        db_session.refresh(first)
        assert first.is_open is False
        assert first.closed_at is not None
        assert second.is_open is True
        assert db_session.query(RegisterSession).filter(RegisterSession.is_open.is_(True)).count() == 1

    def test_close_without_open_session(self, db_session: Session):
        with pytest.raises(NotFoundError):
            RegisterSessionService(db_session).close_session()

    def test_close_sets_closed_at(self, db_session: Session, open_register):
        closed = RegisterSessionService(db_session).close_session()
        assert closed.id == open_register.id
        assert closed.is_open is False
        assert closed.closed_at is not None

    def test_active_session_lookups(self, db_session: Session):
        sessions = RegisterSessionService(db_session)
        assert sessions.find_active_session() is None
        with pytest.raises(NotFoundError):
            sessions.get_active_session()
        with pytest.raises(NoOpenSessionError):
            sessions.require_active_session()

        opened = sessions.open_session()
        assert sessions.get_active_session().id == opened.id

    def test_list_sessions_newest_first(self, db_session: Session):
        sessions = RegisterSessionService(db_session)
        first = sessions.open_session()
        second = sessions.open_session()

        result = sessions.list_sessions()
        assert result["total"] == 2
        assert [s.id for s in result["sessions"]] == [second.id, first.id]

    def test_storage_allows_one_open_session(self, db_session: Session, open_register):
        db_session.add(RegisterSession(opening_balance=0, closing_balance=0, is_open=True))
        with pytest.raises(IntegrityError):
            db_session.flush()
        db_session.rollback()

        db_session.add(RegisterSession(opening_balance=0, closing_balance=0, is_open=False))
        db_session.commit()
        assert db_session.query(RegisterSession).count() == 2

    def test_concurrent_open_is_conflict(self, db_session: Session, monkeypatch):
        def commit():
            raise IntegrityError("INSERT INTO register_sessions", {}, Exception("unique constraint"))

        monkeypatch.setattr(db_session, "commit", commit)
        with pytest.raises(ConflictError) as exc:
            RegisterSessionService(db_session).open_session()

        assert exc.value.status_code == 409
        monkeypatch.undo()
        assert db_session.query(RegisterSession).count() == 0


# ===== LEDGER ENTRIES =====

class TestLedgerEntries:

    def test_deposit_then_withdrawal_restores_balance(self, db_session: Session, open_register):
        ledger = LedgerEntryService(db_session)
        before = Decimal(open_register.closing_balance)

        ledger.record_entry(EntryType.DEPOSIT, Decimal("75.00"), "float")
        db_session.refresh(open_register)
        assert open_register.closing_balance == before + Decimal("75.00")

        ledger.record_entry(EntryType.WITHDRAWAL, Decimal("75.00"), "bank")
        db_session.refresh(open_register)
        assert open_register.closing_balance == before

    def test_record_without_open_session(self, db_session: Session):
        with pytest.raises(NoOpenSessionError):
            LedgerEntryService(db_session).record_entry(EntryType.DEPOSIT, Decimal("10"), "float")
        assert db_session.query(LedgerEntry).count() == 0

    def test_delete_reverses_effect_on_its_session(self, db_session: Session, open_register):
        ledger = LedgerEntryService(db_session)
        entry = ledger.record_entry(EntryType.WITHDRAWAL, Decimal("30"), "supplies")
        db_session.refresh(open_register)
        assert open_register.closing_balance == Decimal("-30")

        ledger.delete_entry(entry.id)
        db_session.refresh(open_register)
        assert open_register.closing_balance == Decimal("0")
        assert db_session.query(LedgerEntry).count() == 0

    def test_delete_unknown_entry(self, db_session: Session):
        with pytest.raises(NotFoundError):
            LedgerEntryService(db_session).delete_entry(999)

    def test_entries_listed_in_creation_order(self, db_session: Session, open_register):
        ledger = LedgerEntryService(db_session)
        ids = [
            ledger.record_entry(EntryType.DEPOSIT, Decimal("10"), "a").id,
            ledger.record_entry(EntryType.WITHDRAWAL, Decimal("4"), "b").id,
            ledger.record_entry(EntryType.DEPOSIT, Decimal("1"), "c").id,
        ]
        entries = ledger.list_active_entries()
        assert [e.id for e in entries] == ids

        summary = LedgerEntryService.summarize(entries)
        assert summary["total_deposits"] == Decimal("11")
        assert summary["total_withdrawals"] == Decimal("4")
        assert summary["net"] == Decimal("7")
        assert summary["count"] == 3

    def test_fractional_amounts_rounded_to_cents(self, db_session: Session, open_register):
        ledger = LedgerEntryService(db_session)
        ledger.record_entry(EntryType.DEPOSIT, Decimal("100"), "float")
        ledger.record_entry(EntryType.DEPOSIT, Decimal("0.005"), "coins")
        ledger.record_entry(EntryType.WITHDRAWAL, Decimal("2.344"), "stamps")
        db_session.expire_all()

        session = RegisterSessionService(db_session).get_session(open_register.id)
        entries = ledger.list_entries_for_session(session.id)
        assert [e.amount for e in entries] == [Decimal("100.00"), Decimal("0.01"), Decimal("2.34")]
        assert session.closing_balance == Decimal("97.67")
        assert LedgerEntryService.summarize(entries)["net"] == session.net_change

    def test_amount_rounding_to_zero_is_rejected(self, db_session: Session, open_register):
        with pytest.raises(ValidationError):
            LedgerEntryService(db_session).record_entry(EntryType.DEPOSIT, Decimal("0.004"), "dust")
        assert db_session.query(LedgerEntry).count() == 0
        db_session.refresh(open_register)
        assert open_register.closing_balance == Decimal("0")

    def test_signed_amount(self):
        assert LedgerEntry(type=EntryType.DEPOSIT, amount=Decimal("5")).signed_amount == Decimal("5")
        assert LedgerEntry(type=EntryType.WITHDRAWAL, amount=Decimal("5")).signed_amount == Decimal("-5")

    def test_schema_accepts_legacy_names(self):
        entry = LedgerEntryCreate.model_validate({"type": "depot", "montant": "12.5", "motif": "fond de caisse"})
        assert entry.type == EntryType.DEPOSIT
        assert entry.amount == Decimal("12.5")
        assert entry.reason == "fond de caisse"

        assert LedgerEntryCreate.model_validate({"type": "retrait", "amount": 1}).type == EntryType.WITHDRAWAL

    def test_schema_rejects_non_positive_amount(self):
        with pytest.raises(ValueError):
            LedgerEntryCreate.model_validate({"type": "deposit", "amount": 0})
        with pytest.raises(ValueError):
            LedgerEntryCreate.model_validate({"type": "deposit", "amount": "0.004"})

    def test_schema_rounds_to_cents(self):
        assert LedgerEntryCreate.model_validate({"type": "deposit", "amount": "12.345"}).amount == Decimal("12.35")


# ===== SCHEDULED JOBS =====

class TestScheduledJobs:

    @pytest.fixture(autouse=True)
    def task_sessions(self, db_session, monkeypatch):
        monkeypatch.setattr(tasks, "SessionLocal", lambda: db_session)

    def test_open_then_close(self, db_session: Session):
        opened = tasks.open_register()
        assert opened["success"] is True

        closed = tasks.close_register()
        assert closed["success"] is True
        assert closed["session_id"] == opened["session_id"]

        session = RegisterSessionService(db_session).get_session(opened["session_id"])
        assert session.is_open is False

    def test_close_with_nothing_open(self):
        result = tasks.close_register()
        assert result["success"] is False
        assert "No open register session" in result["error"]


# ===== API =====

class TestRegisterAPI:

    def test_requires_authentication(self, client):
        assert client.get("/api/caisse/").status_code == 401

    def test_open_deposit_and_read_back(self, client, auth_headers):
        response = client.post("/api/caisse/open", headers=auth_headers)
        assert response.status_code == 201
        session_id = response.json()["id"]

        response = client.post(
            "/api/transactions/",
            json={"type": "depot", "montant": 100, "motif": "float"},
            headers=auth_headers
        )
        assert response.status_code == 201
        assert response.json()["session_id"] == session_id

        response = client.get("/api/caisse/open", headers=auth_headers)
        body = response.json()
        assert response.status_code == 200
        assert Decimal(str(body["closing_balance"])) == Decimal("100")
        assert len(body["entries"]) == 1
        assert Decimal(str(body["summary"]["net"])) == Decimal("100")

        response = client.get(f"/api/transactions/caisse/{session_id}", headers=auth_headers)
        assert len(response.json()) == 1

    def test_entry_without_open_register_is_404(self, client, auth_headers):
        response = client.post(
            "/api/transactions/",
            json={"type": "deposit", "amount": 10},
            headers=auth_headers
        )
        assert response.status_code == 404

    def test_invalid_entry_type_is_422(self, client, auth_headers, open_register):
        response = client.post(
            "/api/transactions/",
            json={"type": "gift", "amount": 10},
            headers=auth_headers
        )
        assert response.status_code == 422

    def test_close_and_history(self, client, auth_headers):
        client.post("/api/caisse/open", headers=auth_headers)
        response = client.post("/api/caisse/close", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["is_open"] is False

        assert client.post("/api/caisse/close", headers=auth_headers).status_code == 404
        assert client.get("/api/caisse/open", headers=auth_headers).status_code == 404

        history = client.get("/api/caisse/history", headers=auth_headers).json()
        assert history["total"] == 1

        latest = client.get("/api/caisse/", headers=auth_headers).json()
        assert latest["is_open"] is False
