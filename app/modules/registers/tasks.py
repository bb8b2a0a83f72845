"""
Scheduled register jobs run by Celery beat.

Each task opens its own DB session and calls the session manager directly.
"""
import logging

from fastapi import HTTPException

from app.core.celery import celery_app
from app.database.database import SessionLocal
from app.modules.registers.service import RegisterSessionService

logger = logging.getLogger(__name__)


@celery_app.task(bind=True)
def open_register(self):
    """
    Open the day's register, carrying forward the last closing balance.
    """
    db = SessionLocal()
    try:
        session = RegisterSessionService(db).open_session()
        logger.info(f"Scheduled open: session {session.id} with balance {session.opening_balance}")
        return {
            "success": True,
            "session_id": session.id,
            "opening_balance": str(session.opening_balance)
        }
    except HTTPException as e:
        logger.error(f"Scheduled open failed: {e.detail}")
        return {"success": False, "error": e.detail}
    finally:
        db.close()


@celery_app.task(bind=True)
def close_register(self):
    """
    Close the open register. Nothing to close is reported, not raised.
    """
    db = SessionLocal()
    try:
        session = RegisterSessionService(db).close_session()
        logger.info(f"Scheduled close: session {session.id} with balance {session.closing_balance}")
        return {
            "success": True,
            "session_id": session.id,
            "closing_balance": str(session.closing_balance)
        }
    except HTTPException as e:
        logger.warning(f"Scheduled close skipped: {e.detail}")
        return {"success": False, "error": e.detail}
    finally:
        db.close()
