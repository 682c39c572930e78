"""Convert an extra payment stated per cadence into a monthly amount."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from .debt_inputs import PAYMENT_FREQUENCIES, non_negative, require_choice

# Payments made per year for each cadence; the simulator always steps one month.
PAYMENTS_PER_YEAR: dict[str, int] = {
    "monthly": 12,
    "biweekly": 26,
    "weekly": 52,
    "quarterly": 4,
}

_MONTHS_PER_YEAR = Decimal(12)


def extra_per_period(extra_payment: Any, frequency: str = "monthly") -> Decimal:
    """Return the monthly equivalent of ``extra_payment`` made every ``frequency``.

    ``monthly`` is returned unchanged, ``biweekly`` is scaled by 26/12, ``weekly``
    by 52/12 and ``quarterly`` by 4/12. The result is not rounded.
    """

    amount = non_negative(extra_payment, field="extra_payment")
    cadence = require_choice(frequency, PAYMENT_FREQUENCIES, field="payment_frequency")
    if cadence == "monthly":
        return amount
    return amount * Decimal(PAYMENTS_PER_YEAR[cadence]) / _MONTHS_PER_YEAR


__all__ = ["PAYMENTS_PER_YEAR", "extra_per_period"]
