from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional

from app.common.exceptions import ValidationError
from app.database.database import get_db
from app.modules.auth.utils import get_current_user
from app.modules.statistics.service import StatisticsService
from app.modules.statistics.schemas import StatisticsOut

statistics_router = APIRouter(
    prefix="/statistics",
    tags=["Statistics"],
    dependencies=[Depends(get_current_user)]
)


@statistics_router.get("/", response_model=StatisticsOut)
def get_statistics(
    start_date: Optional[date] = Query(None, description="First day included (YYYY-MM-DD)"),
    end_date: Optional[date] = Query(None, description="Last day included (YYYY-MM-DD)"),
    db: Session = Depends(get_db)
):
    """
    Dashboard figures: payments per day, paid vs pending orders, top 5
    products, totals per payment method and revenue per day and month.
    """
    if start_date and end_date and start_date > end_date:
        raise ValidationError("start_date must not be after end_date")
    return StatisticsService(db, start_date, end_date).get_statistics()
