"""Month-by-month amortization of several debts with rolldown.

The simulator works on debts that are already in priority order. Each simulated
month it accrues interest on every unpaid debt, applies each debt's minimum payment,
then sends the extra payment plus the rolldown pool to the focus debt. Minimums of
paid-off debts ahead of the focus debt form the rolldown pool from the
following month.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, localcontext
from typing import Iterable

from ..logging_config import get_logger
from .debt_inputs import DebtInput, InvalidDebtInput

logger = get_logger(__name__)

# Balances at or below half a cent count as paid.
EPSILON = Decimal("0.005")
MAX_MONTHS = 600
# A debt that grows past this multiple of its starting balance will never be repaid.
GROWTH_LIMIT = Decimal(10)
DECIMAL_PRECISION = 34

_ZERO = Decimal(0)
_ONE = Decimal(1)
_HUNDRED = Decimal(100)
_MONTHS_PER_YEAR = Decimal(12)
_DAYS_PER_YEAR = Decimal(365)


def add_months(value: date, months: int) -> date:
    """Return ``value`` shifted by ``months`` calendar months, clamping the day."""

    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def monthly_interest(balance: Decimal, debt: DebtInput, period_days: int) -> Decimal:
    """Interest accrued on ``balance`` over one simulated month.

    Installment loans and monthly-compounding revolving debts use APR/12. Daily
    compounding uses the billing cycle length (or the calendar month length when no
    cycle is set). Quarterly and annual compounding are converted to the equivalent
    monthly rate.
    """

    if balance <= 0 or debt.interest_rate == 0:
        return _ZERO
    rate = debt.interest_rate / _HUNDRED

    if debt.loan_type == "installment" or debt.compounding_frequency == "monthly":
        return balance * rate / _MONTHS_PER_YEAR

    if debt.compounding_frequency == "daily":
        days = debt.billing_cycle_days or period_days
        return balance * ((_ONE + rate / _DAYS_PER_YEAR) ** days - _ONE)

    if debt.compounding_frequency == "quarterly":
        periods_per_year, months_per_period = 4, 3
    else:
        periods_per_year, months_per_period = 1, 12
    periodic_rate = rate / Decimal(periods_per_year)
    effective = (_ONE + periodic_rate) ** (_ONE / Decimal(months_per_period)) - _ONE
    return balance * effective


@dataclass(slots=True)
class DebtOutcome:
    """Simulation state and final figures for one debt."""

    debt: DebtInput
    balance: Decimal
    interest_paid: Decimal = _ZERO
    payoff_month: int | None = None

    @property
    def is_paid(self) -> bool:
        return self.payoff_month is not None


@dataclass(slots=True)
class SimulationOutcome:
    """Raw, unrounded result of :func:`simulate`."""

    debts: list[DebtOutcome] = field(default_factory=list)
    total_interest: Decimal = _ZERO
    months: int = 0
    converged: bool = True

    @property
    def unpaid_debt_ids(self) -> list[str]:
        return [d.debt.id for d in self.debts if not d.is_paid]


def rolldown_pool(states: list[DebtOutcome], focus: DebtOutcome) -> Decimal:
    """Sum of the minimums of paid debts ahead of ``focus`` in priority order."""

    pool = _ZERO
    for state in states:
        if state is focus:
            break
        if state.is_paid:
            pool += state.debt.minimum_payment
    return pool


def simulate(
    ordered_debts: Iterable[DebtInput],
    *,
    extra_per_period: Decimal,
    start_date: date,
    max_months: int = MAX_MONTHS,
) -> SimulationOutcome:
    """Run the payoff simulation over debts already in priority order.

    Stops when every debt is paid, when a debt's balance runs away, or after
    ``max_months`` months. The last two cases return ``converged=False``.
    """

    if isinstance(max_months, bool) or not isinstance(max_months, int) or max_months < 1:
        raise InvalidDebtInput("max_months must be a positive integer", field="max_months")
    if extra_per_period < 0:
        raise InvalidDebtInput("extra payment must not be negative", field="extra_payment")

    outcome = SimulationOutcome(
        debts=[DebtOutcome(debt=debt, balance=debt.remaining_balance) for debt in ordered_debts]
    )
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        while True:
            active = [state for state in outcome.debts if not state.is_paid]
            if not active:
                break
            if outcome.months >= max_months:
                outcome.converged = False
                logger.debug(
                    "Payoff horizon exhausted",
                    extra={"months": outcome.months, "unpaid": outcome.unpaid_debt_ids},
                )
                break

            outcome.months += 1
            month = outcome.months
            period_start = add_months(start_date, month - 1)
            period_days = (add_months(start_date, month) - period_start).days

            # Interest then minimum payment on every unpaid debt.
            for state in active:
                interest = monthly_interest(state.balance, state.debt, period_days)
                state.balance += interest
                state.interest_paid += interest
                outcome.total_interest += interest
                state.balance -= min(state.debt.minimum_payment, state.balance)

            # Extra plus rolldown goes to the focus debt only; a remainder is dropped.
            focus = active[0]
            pool = extra_per_period + rolldown_pool(outcome.debts, focus)
            if pool > 0 and focus.balance > EPSILON:
                focus.balance -= min(pool, focus.balance)

            runaway = False
            for state in active:
                if state.balance <= EPSILON:
                    state.balance = _ZERO
                    state.payoff_month = month
                elif state.balance > state.debt.remaining_balance * GROWTH_LIMIT:
                    runaway = True

            if runaway:
                outcome.converged = False
                logger.debug(
                    "Debt balance outgrew its payments",
                    extra={"months": month, "unpaid": outcome.unpaid_debt_ids},
                )
                break

    return outcome


__all__ = [
    "DebtOutcome",
    "EPSILON",
    "GROWTH_LIMIT",
    "MAX_MONTHS",
    "SimulationOutcome",
    "add_months",
    "monthly_interest",
    "rolldown_pool",
    "simulate",
]
