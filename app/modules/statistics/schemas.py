from pydantic import BaseModel, Field
from decimal import Decimal
from typing import List, Optional
from datetime import date


class DailyPayments(BaseModel):
    day: str
    total: Decimal


class OrderStatusCounts(BaseModel):
    paid: int
    pending: int


class TopProduct(BaseModel):
    product_id: int
    name: str
    quantity: int


class MethodTotal(BaseModel):
    method: str
    total: Decimal
    count: int


class DailyRevenue(BaseModel):
    day: str
    revenue: Decimal


class MonthlyRevenue(BaseModel):
    month: str = Field(..., description="YYYY-MM")
    revenue: Decimal


class StatisticsOut(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    currency: str
    payments_per_day: List[DailyPayments]
    orders: OrderStatusCounts
    top_products: List[TopProduct]
    totals_per_method: List[MethodTotal]
    revenue_per_day: List[DailyRevenue]
    revenue_per_month: List[MonthlyRevenue]
    total_revenue: Decimal
