"""
Order totals and payment status.

Pure functions over an order and its payments: they read attributes and
never touch the database, so calling them twice on unchanged inputs gives
the same result.

Every discount is an absolute currency amount:
- a product line's discount is taken once off ``unit_price * quantity``
- a service item's discount is taken off its price
- the order's global discount is taken once off the subtotal
"""

from decimal import Decimal
from typing import Iterable, Dict, Any

# An order is settled once what is left to pay is at most this much
PAID_EPSILON = Decimal("0.001")


def _money(value) -> Decimal:
    if value is None:
        return Decimal("0")
    return value if isinstance(value, Decimal) else Decimal(str(value))


def line_total(line) -> Decimal:
    return _money(line.unit_price) * int(line.quantity) - _money(line.discount)


def service_total(item) -> Decimal:
    return _money(item.price) - _money(item.discount)


def compute_subtotal(order) -> Decimal:
    products = sum((line_total(line) for line in order.items), Decimal("0"))
    services = sum((service_total(item) for item in order.services), Decimal("0"))
    return products + services


def compute_total(order) -> Decimal:
    return compute_subtotal(order) - _money(order.global_discount)


def compute_total_payments(payments: Iterable) -> Decimal:
    return sum((_money(p.amount) for p in payments), Decimal("0"))


def compute_remaining_due(order, payments: Iterable) -> Decimal:
    """Total minus payments. Negative means the order was overpaid."""
    return compute_total(order) - compute_total_payments(payments)


def is_settled(remaining_due: Decimal) -> bool:
    return _money(remaining_due) <= PAID_EPSILON


def build_summary(order, payments: Iterable) -> Dict[str, Any]:
    payments = list(payments)
    subtotal = compute_subtotal(order)
    total = subtotal - _money(order.global_discount)
    paid = compute_total_payments(payments)
    remaining = total - paid
    return {
        "order_id": order.id,
        "subtotal": subtotal,
        "global_discount": _money(order.global_discount),
        "total": total,
        "paid": paid,
        "remaining_due": remaining,
        "is_paid": is_settled(remaining),
        "payment_count": len(payments),
    }
