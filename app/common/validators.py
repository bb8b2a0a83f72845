"""
Money validators shared by the request schemas and the services
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

CENT = Decimal('0.01')


def round_money(value) -> Optional[Decimal]:
    """Round an amount to cents (commercial rounding, half up)."""
    if value is None:
        return None
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def positive_money(value) -> Optional[Decimal]:
    """
    Round to cents and reject what rounds to zero or below.

    Raises ValueError so pydantic reports it as a 422.
    """
    rounded = round_money(value)
    if rounded is not None and rounded <= 0:
        raise ValueError("Amount must be at least 0.01")
    return rounded
