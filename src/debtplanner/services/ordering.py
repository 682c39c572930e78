"""Debt prioritization for snowball and avalanche payoff."""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from .debt_inputs import PAYOFF_METHODS, DebtInput, require_choice


def _avalanche_key(debt: DebtInput) -> tuple[Decimal, Decimal, str]:
    # Highest APR first, then smallest balance, then id.
    return (-debt.interest_rate, debt.remaining_balance, debt.id)


def _snowball_key(debt: DebtInput) -> tuple[Decimal, Decimal, str]:
    # Smallest balance first, then highest APR, then id.
    return (debt.remaining_balance, -debt.interest_rate, debt.id)


def order_debts(debts: Iterable[DebtInput], method: str) -> list[DebtInput]:
    """Return debts with a positive balance in payoff priority order.

    The order is a total order (ties fall back to the debt id), so the same debts
    always produce the same sequence regardless of input order. It is computed once
    at the start of a simulation and never re-evaluated as balances change.
    """

    method = require_choice(method, PAYOFF_METHODS, field="method")
    key = _avalanche_key if method == "avalanche" else _snowball_key
    return sorted((d for d in debts if d.remaining_balance > 0), key=key)


def focus_debt_id(debts: Iterable[DebtInput], method: str) -> str:
    """Return the id of the debt that receives extra payments first, or ``""``."""

    ordered = order_debts(debts, method)
    return ordered[0].id if ordered else ""


__all__ = ["focus_debt_id", "order_debts"]
