"""Debt payoff calculators.

``calculate_payoff_strategy`` is the public entry point: it validates inputs,
orders the debts for the chosen method, runs the month-by-month simulation and
rounds the figures for display. The comparison helpers reuse it with different
inputs.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Optional

from ..logging_config import get_logger
from .amortization import MAX_MONTHS, SimulationOutcome, add_months, simulate
from .debt_inputs import (
    PAYMENT_FREQUENCIES,
    PAYOFF_METHODS,
    DebtInput,
    InvalidDebtInput,
    PaymentFrequency,
    PayoffMethod,
    PayoffNonConvergence,
    require_choice,
    validate_debts,
)
from .frequency import extra_per_period
from .ordering import order_debts

logger = get_logger(__name__)

CENT = Decimal("0.01")


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(slots=True)
class RolldownPayment:
    """Where one debt stands in the rolldown sequence."""

    debt_id: str
    debt_name: str
    payoff_month: Optional[int]
    payoff_date: Optional[date]
    current_payment: Decimal  # the debt's own minimum
    active_payment: Decimal  # everything directed at the debt in the snapshot month
    is_focus_debt: bool
    interest_paid: Decimal = Decimal("0.00")


@dataclass(slots=True)
class PayoffOrder:
    debt_id: str
    debt_name: str
    remaining_balance: Decimal
    interest_rate: Decimal
    minimum_payment: Decimal
    order: int
    type: str
    color: Optional[str] = None
    icon: Optional[str] = None


@dataclass(slots=True)
class RecommendedPayment:
    """What to pay on the focus debt this month."""

    debt_id: str
    debt_name: str
    current_balance: Decimal
    recommended_payment: Decimal
    months_until_payoff: Optional[int]
    total_interest: Decimal


@dataclass(slots=True)
class StrategyResult:
    """Outcome of a payoff simulation, rounded to cents."""

    method: PayoffMethod
    payment_frequency: PaymentFrequency
    start_date: date
    extra_per_period: Decimal
    total_months: Optional[int]
    total_interest_paid: Decimal
    debt_free_date: Optional[date]
    rolldown_payments: list[RolldownPayment] = field(default_factory=list)
    payoff_order: list[PayoffOrder] = field(default_factory=list)
    next_recommended_payment: Optional[RecommendedPayment] = None
    converged: bool = True

    def rolldown_at(self, month: int) -> list[RolldownPayment]:
        """Return the rolldown snapshot for simulated ``month`` (1-based).

        Debts paid before ``month`` report an active payment of zero. The focus
        debt is the first unpaid debt in order; only the minimums of paid debts
        ahead of it feed its payment.
        """

        if month < 1:
            raise ValueError("month must be 1 or later")
        paid_minimums = Decimal("0")
        for payment in self.rolldown_payments:
            if not _paid_before(payment, month):
                break
            paid_minimums += payment.current_payment

        snapshot: list[RolldownPayment] = []
        focus_assigned = False
        for payment in self.rolldown_payments:
            if _paid_before(payment, month):
                snapshot.append(replace(payment, active_payment=Decimal("0.00"), is_focus_debt=False))
            elif not focus_assigned:
                focus_assigned = True
                active = payment.current_payment + self.extra_per_period + paid_minimums
                snapshot.append(replace(payment, active_payment=_money(active), is_focus_debt=True))
            else:
                snapshot.append(
                    replace(payment, active_payment=payment.current_payment, is_focus_debt=False)
                )
        return snapshot

    @property
    def focus_debt(self) -> Optional[RolldownPayment]:
        return next((p for p in self.rolldown_payments if p.is_focus_debt), None)


def _paid_before(payment: RolldownPayment, month: int) -> bool:
    return payment.payoff_month is not None and payment.payoff_month < month


@dataclass(slots=True)
class ComparisonResult:
    snowball: StrategyResult
    avalanche: StrategyResult
    time_savings: int  # months saved by avalanche
    interest_savings: Decimal  # interest saved by avalanche
    recommended_method: PayoffMethod


@dataclass(slots=True)
class MinimumPaymentComparison:
    """Minimum payments only versus the household's current plan.

    Savings are ``None`` when either run never pays everything off.
    """

    minimum_only: StrategyResult
    current_plan: StrategyResult
    months_saved: Optional[int]
    years_saved: Optional[int]
    remaining_months_saved: Optional[int]
    interest_saved: Optional[Decimal]


def _empty_result(
    method: PayoffMethod, frequency: PaymentFrequency, start: date, extra: Decimal
) -> StrategyResult:
    return StrategyResult(
        method=method,
        payment_frequency=frequency,
        start_date=start,
        extra_per_period=_money(extra),
        total_months=0,
        total_interest_paid=Decimal("0.00"),
        debt_free_date=start,
    )


def _build_result(
    *,
    outcome: SimulationOutcome,
    zero_balance: list[DebtInput],
    method: PayoffMethod,
    frequency: PaymentFrequency,
    start: date,
    extra: Decimal,
) -> StrategyResult:
    payments: list[RolldownPayment] = []
    for state in outcome.debts:
        payments.append(
            RolldownPayment(
                debt_id=state.debt.id,
                debt_name=state.debt.name,
                payoff_month=state.payoff_month,
                payoff_date=add_months(start, state.payoff_month) if state.is_paid else None,
                current_payment=_money(state.debt.minimum_payment),
                active_payment=_money(state.debt.minimum_payment),
                is_focus_debt=False,
                interest_paid=_money(state.interest_paid),
            )
        )
    for debt in zero_balance:
        payments.append(
            RolldownPayment(
                debt_id=debt.id,
                debt_name=debt.name,
                payoff_month=0,
                payoff_date=start,
                current_payment=_money(debt.minimum_payment),
                active_payment=Decimal("0.00"),
                is_focus_debt=False,
            )
        )

    payoff_order = [
        PayoffOrder(
            debt_id=state.debt.id,
            debt_name=state.debt.name,
            remaining_balance=_money(state.debt.remaining_balance),
            interest_rate=state.debt.interest_rate,
            minimum_payment=_money(state.debt.minimum_payment),
            order=index,
            type=state.debt.type,
            color=state.debt.color,
            icon=state.debt.icon,
        )
        for index, state in enumerate(outcome.debts, start=1)
    ]

    if outcome.converged:
        total_months: Optional[int] = max(
            (state.payoff_month or 0 for state in outcome.debts), default=0
        )
        debt_free_date: Optional[date] = add_months(start, total_months)
    else:
        total_months = None
        debt_free_date = None

    result = StrategyResult(
        method=method,
        payment_frequency=frequency,
        start_date=start,
        extra_per_period=_money(extra),
        total_months=total_months,
        total_interest_paid=_money(outcome.total_interest),
        debt_free_date=debt_free_date,
        rolldown_payments=payments,
        payoff_order=payoff_order,
        converged=outcome.converged,
    )
    result.rolldown_payments = result.rolldown_at(1)

    if outcome.debts:
        focus = outcome.debts[0]
        result.next_recommended_payment = RecommendedPayment(
            debt_id=focus.debt.id,
            debt_name=focus.debt.name,
            current_balance=_money(focus.debt.remaining_balance),
            recommended_payment=_money(focus.debt.minimum_payment + extra),
            months_until_payoff=focus.payoff_month,
            total_interest=_money(focus.interest_paid),
        )
    return result


def calculate_payoff_strategy(
    debts: Iterable[DebtInput],
    extra_payment: Any,
    method: str,
    payment_frequency: str = "monthly",
    *,
    start_date: date | None = None,
    max_months: int = MAX_MONTHS,
    allow_partial: bool = False,
) -> StrategyResult:
    """Simulate paying off ``debts`` with the given method and extra payment.

    ``extra_payment`` is stated per ``payment_frequency`` and converted to a
    monthly amount. Raises :class:`InvalidDebtInput` for bad arguments and
    :class:`PayoffNonConvergence` when the debts are never paid off, unless
    ``allow_partial`` is set, in which case the returned result has
    ``converged=False`` and no total months.
    """

    checked_method: PayoffMethod = require_choice(method, PAYOFF_METHODS, field="method")  # type: ignore[assignment]
    frequency: PaymentFrequency = require_choice(  # type: ignore[assignment]
        payment_frequency, PAYMENT_FREQUENCIES, field="payment_frequency"
    )
    extra = extra_per_period(extra_payment, frequency)
    debt_list = validate_debts(debts)
    start = start_date or date.today()

    if not debt_list:
        return _empty_result(checked_method, frequency, start, extra)

    ordered = order_debts(debt_list, checked_method)
    ordered_ids = {debt.id for debt in ordered}
    zero_balance = sorted((d for d in debt_list if d.id not in ordered_ids), key=lambda d: d.id)

    outcome = simulate(ordered, extra_per_period=extra, start_date=start, max_months=max_months)
    if not outcome.converged and not allow_partial:
        unpaid = outcome.unpaid_debt_ids
        logger.warning(
            "Payoff plan does not converge",
            extra={"method": checked_method, "months": outcome.months, "unpaid": unpaid},
        )
        raise PayoffNonConvergence(
            f"payments never cover interest on {', '.join(unpaid)} "
            f"(stopped after {outcome.months} months)",
            unpaid_debt_ids=unpaid,
            months=outcome.months,
        )

    result = _build_result(
        outcome=outcome,
        zero_balance=zero_balance,
        method=checked_method,
        frequency=frequency,
        start=start,
        extra=extra,
    )
    logger.debug(
        "Payoff strategy calculated",
        extra={
            "method": checked_method,
            "debts": len(debt_list),
            "total_months": result.total_months,
            "total_interest": str(result.total_interest_paid),
        },
    )
    return result


def compare_payoff_methods(
    debts: Iterable[DebtInput],
    extra_payment: Any,
    payment_frequency: str = "monthly",
    *,
    start_date: date | None = None,
    max_months: int = MAX_MONTHS,
) -> ComparisonResult:
    """Run snowball and avalanche side by side and recommend one."""

    debt_list = list(debts)
    start = start_date or date.today()
    snowball = calculate_payoff_strategy(
        debt_list, extra_payment, "snowball", payment_frequency,
        start_date=start, max_months=max_months,
    )
    avalanche = calculate_payoff_strategy(
        debt_list, extra_payment, "avalanche", payment_frequency,
        start_date=start, max_months=max_months,
    )
    time_savings = (snowball.total_months or 0) - (avalanche.total_months or 0)
    interest_savings = snowball.total_interest_paid - avalanche.total_interest_paid
    # Snowball wins ties for the quicker early payoffs.
    recommended: PayoffMethod = (
        "avalanche" if interest_savings > 0 or time_savings > 0 else "snowball"
    )
    return ComparisonResult(
        snowball=snowball,
        avalanche=avalanche,
        time_savings=time_savings,
        interest_savings=interest_savings,
        recommended_method=recommended,
    )


def compare_minimum_vs_plan(
    debts: Iterable[DebtInput],
    extra_payment: Any,
    method: str,
    payment_frequency: str = "monthly",
    *,
    start_date: date | None = None,
    max_months: int = MAX_MONTHS,
) -> MinimumPaymentComparison:
    """Compare paying only minimums with paying the configured extra amount."""

    debt_list = list(debts)
    start = start_date or date.today()
    minimum_only = calculate_payoff_strategy(
        debt_list, 0, method, payment_frequency,
        start_date=start, max_months=max_months, allow_partial=True,
    )
    current_plan = calculate_payoff_strategy(
        debt_list, extra_payment, method, payment_frequency,
        start_date=start, max_months=max_months, allow_partial=True,
    )

    if minimum_only.converged and current_plan.converged:
        months_saved: Optional[int] = (minimum_only.total_months or 0) - (
            current_plan.total_months or 0
        )
        interest_saved: Optional[Decimal] = (
            minimum_only.total_interest_paid - current_plan.total_interest_paid
        )
        years_saved, remaining = divmod(months_saved, 12)
    else:
        months_saved = interest_saved = years_saved = remaining = None

    return MinimumPaymentComparison(
        minimum_only=minimum_only,
        current_plan=current_plan,
        months_saved=months_saved,
        years_saved=years_saved,
        remaining_months_saved=remaining,
        interest_saved=interest_saved,
    )


__all__ = [
    "ComparisonResult",
    "DebtInput",
    "InvalidDebtInput",
    "MinimumPaymentComparison",
    "PayoffNonConvergence",
    "PayoffOrder",
    "RecommendedPayment",
    "RolldownPayment",
    "StrategyResult",
    "calculate_payoff_strategy",
    "compare_minimum_vs_plan",
    "compare_payoff_methods",
]
