"""
Tests for the dashboard statistics.
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from sqlalchemy.orm import Session

from app.modules.payments.models import PaymentMethod
from app.modules.payments.service import PaymentService
from app.modules.statistics.service import StatisticsService


class TestStatistics:

    def test_aggregates(self, db_session: Session, open_register, make_order):
        paid = make_order(quantity=2)
        make_order(quantity=1)
        payments = PaymentService(db_session)
        payments.record_payment(paid.id, Decimal("60"), PaymentMethod.CASH)
        payments.record_payment(paid.id, Decimal("40"), PaymentMethod.CARD)

        stats = StatisticsService(db_session).get_statistics()

        assert stats["orders"] == {"paid": 1, "pending": 1}
        assert stats["top_products"][0]["quantity"] == 3
        methods = {m["method"]: m["total"] for m in stats["totals_per_method"]}
        assert methods == {"card": Decimal("40"), "cash": Decimal("60")}
        assert sum(d["total"] for d in stats["payments_per_day"]) == Decimal("100")
        assert stats["total_revenue"] == Decimal("150")
        assert sum(m["revenue"] for m in stats["revenue_per_month"]) == Decimal("150")

    def test_date_range_excludes_other_days(self, db_session: Session, make_order):
        make_order()
        later = date.today() + timedelta(days=2)
        stats = StatisticsService(db_session, start_date=later, end_date=later).get_statistics()
        assert stats["orders"] == {"paid": 0, "pending": 0}
        assert stats["revenue_per_day"] == []

    def test_days_follow_shop_timezone(self, db_session: Session, make_order):
        order = make_order(quantity=1)
        payment = PaymentService(db_session).record_payment(order.id, Decimal("20"), PaymentMethod.CARD)
        # 23:30 UTC on 10 March is 00:30 on 11 March in Paris
        late = datetime(2026, 3, 10, 23, 30, tzinfo=timezone.utc)
        order.created_at = late
        payment.created_at = late
        db_session.commit()

        stats = StatisticsService(db_session).get_statistics()
        assert stats["payments_per_day"] == [{"day": "2026-03-11", "total": Decimal("20")}]
        assert [d["day"] for d in stats["revenue_per_day"]] == ["2026-03-11"]

        in_range = StatisticsService(db_session, start_date=date(2026, 3, 11), end_date=date(2026, 3, 11))
        assert in_range.order_status_counts() == {"paid": 0, "pending": 1}
        before = StatisticsService(db_session, start_date=date(2026, 3, 10), end_date=date(2026, 3, 10))
        assert before.payments_per_day() == []

    def test_api(self, client, auth_headers, make_order):
        make_order()
        response = client.get("/api/statistics/", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["orders"]["pending"] == 1
        assert response.json()["currency"] == "EUR"

    def test_inverted_range_is_400(self, client, auth_headers):
        response = client.get(
            "/api/statistics/?start_date=2026-02-01&end_date=2026-01-01",
            headers=auth_headers
        )
        assert response.status_code == 400
