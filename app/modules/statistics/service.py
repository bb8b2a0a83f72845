"""
Sales statistics

Aggregates payments and orders for the dashboard: payments per day, paid vs
pending orders, best-selling products, totals per payment method and revenue
per day and per month. Order revenue is the order total after discounts.

Days and months are those of the shop (SCHEDULER_TIMEZONE); timestamps
are stored in UTC.
"""

from collections import OrderedDict
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Dict, List, Optional, Any
from zoneinfo import ZoneInfo

from sqlalchemy import desc, func
from sqlalchemy.orm import Session

from app.core.config import settings
from app.modules.orders import calculator
from app.modules.orders.models import Order, OrderLineItem
from app.modules.payments.models import Payment
from app.modules.products.models import Product

TOP_PRODUCTS_LIMIT = 5


class StatisticsService:
    """Dashboard figures over an optional date range"""

    def __init__(self, db: Session, start_date: Optional[date] = None, end_date: Optional[date] = None):
        self.db = db
        self.start_date = start_date
        self.end_date = end_date
        self.tz = ZoneInfo(settings.SCHEDULER_TIMEZONE)

    def _local(self, moment: datetime) -> datetime:
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return moment.astimezone(self.tz)

    def _day_start(self, day: date) -> datetime:
        return datetime.combine(day, time.min, tzinfo=self.tz).astimezone(timezone.utc)

    def _apply_date_filter(self, query, date_field):
        """Restrict to [start_date, end_date], both local days inclusive"""
        if self.start_date:
            query = query.filter(date_field >= self._day_start(self.start_date))
        if self.end_date:
            query = query.filter(date_field < self._day_start(self.end_date + timedelta(days=1)))
        return query

    def _orders(self) -> List[Order]:
        return self._apply_date_filter(self.db.query(Order), Order.created_at).order_by(Order.id).all()

    def payments_per_day(self) -> List[Dict[str, Any]]:
        payments = self._apply_date_filter(self.db.query(Payment), Payment.created_at).order_by(Payment.id).all()
        per_day: Dict[str, Decimal] = {}
        for payment in payments:
            day = self._local(payment.created_at).date().isoformat()
            per_day[day] = per_day.get(day, Decimal("0")) + Decimal(payment.amount)
        return [{"day": day, "total": total} for day, total in sorted(per_day.items())]

    def order_status_counts(self) -> Dict[str, int]:
        query = self._apply_date_filter(self.db.query(Order), Order.created_at)
        paid = query.filter(Order.is_paid.is_(True)).count()
        pending = query.filter(Order.is_paid.is_(False)).count()
        return {"paid": paid, "pending": pending}

    def top_products(self) -> List[Dict[str, Any]]:
        query = self.db.query(
            Product.id.label("product_id"),
            Product.name.label("name"),
            func.sum(OrderLineItem.quantity).label("quantity")
        ).join(
            OrderLineItem, OrderLineItem.product_id == Product.id
        ).join(
            Order, Order.id == OrderLineItem.order_id
        )
        query = self._apply_date_filter(query, Order.created_at)

        rows = query.group_by(Product.id, Product.name).order_by(
            desc("quantity"), Product.id
        ).limit(TOP_PRODUCTS_LIMIT).all()

        return [
            {"product_id": row.product_id, "name": row.name, "quantity": int(row.quantity or 0)}
            for row in rows
        ]

    def totals_per_method(self) -> List[Dict[str, Any]]:
        query = self.db.query(
            Payment.method,
            func.coalesce(func.sum(Payment.amount), 0).label("total"),
            func.count(Payment.id).label("count")
        )
        query = self._apply_date_filter(query, Payment.created_at)
        rows = query.group_by(Payment.method).order_by(Payment.method).all()
        return [
            {"method": row.method.value, "total": Decimal(str(row.total)), "count": row.count}
            for row in rows
        ]

    def revenue(self, orders: List[Order]) -> Dict[str, List[Dict[str, Any]]]:
        per_day: Dict[str, Decimal] = OrderedDict()
        per_month: Dict[str, Decimal] = OrderedDict()
        for order in sorted(orders, key=lambda o: self._local(o.created_at)):
            total = calculator.compute_total(order)
            created = self._local(order.created_at)
            day = created.strftime("%Y-%m-%d")
            month = created.strftime("%Y-%m")
            per_day[day] = per_day.get(day, Decimal("0")) + total
            per_month[month] = per_month.get(month, Decimal("0")) + total

        return {
            "per_day": [{"day": k, "revenue": v} for k, v in per_day.items()],
            "per_month": [{"month": k, "revenue": v} for k, v in per_month.items()],
        }

    def get_statistics(self) -> Dict[str, Any]:
        orders = self._orders()
        revenue = self.revenue(orders)
        return {
            "start_date": self.start_date,
            "end_date": self.end_date,
            "currency": settings.CURRENCY,
            "payments_per_day": self.payments_per_day(),
            "orders": self.order_status_counts(),
            "top_products": self.top_products(),
            "totals_per_method": self.totals_per_method(),
            "revenue_per_day": revenue["per_day"],
            "revenue_per_month": revenue["per_month"],
            "total_revenue": sum((calculator.compute_total(o) for o in orders), Decimal("0")),
        }
