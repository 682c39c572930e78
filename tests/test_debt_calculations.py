"""Comprehensive tests for debt payoff calculations (snowball/avalanche).

These tests verify the core financial logic for debt payoff simulation,
including:
- Snowball and avalanche prioritization
- Interest accrual and Decimal rounding at the output boundary
- Rolldown of freed-up minimum payments
- Monotonicity in the extra payment
- Non-convergence detection and invalid input rejection
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from debtplanner.services.amortization import add_months
from debtplanner.services.debt_inputs import DebtInput, InvalidDebtInput, PayoffNonConvergence
from debtplanner.services.debts import (
    calculate_payoff_strategy,
    compare_minimum_vs_plan,
    compare_payoff_methods,
)
from tests.conftest import assert_money_equal


class TestEmptyInput:
    """Zero debts is a well-defined result, not an error."""

    @pytest.mark.parametrize("method", ["avalanche", "snowball"])
    @pytest.mark.parametrize("extra", [0, 150, "99.99"])
    def test_empty_debts_returns_zeroed_result(self, method, extra, start_date):
        result = calculate_payoff_strategy([], extra, method, start_date=start_date)

        assert result.total_months == 0
        assert result.total_interest_paid == Decimal("0")
        assert result.debt_free_date == start_date
        assert result.rolldown_payments == []
        assert result.next_recommended_payment is None
        assert result.converged

    def test_empty_debts_still_validate_method(self):
        with pytest.raises(InvalidDebtInput):
            calculate_payoff_strategy([], 0, "hybrid")


class TestSingleDebt:
    """Single debt amortization."""

    def test_reference_card_pays_off_in_about_a_year(self, debt_factory, start_date):
        """1200 at 12% APR with a 103 minimum takes 13 months and about 82 interest."""
        debt = debt_factory(balance=1200, interest_rate=12, minimum_payment=103)

        result = calculate_payoff_strategy([debt], 0, "avalanche", start_date=start_date)

        assert abs(result.total_months - 12) <= 1
        assert result.total_months == 13
        assert_money_equal(result.total_interest_paid, "82.35")
        assert result.debt_free_date == add_months(start_date, 13)

    def test_zero_interest_is_all_principal(self, debt_factory, start_date):
        debt = debt_factory(balance=1000, minimum_payment=100, interest_rate=0)

        result = calculate_payoff_strategy([debt], 0, "avalanche", start_date=start_date)

        assert result.total_months == 10
        assert result.total_interest_paid == Decimal("0.00")

    def test_one_cent_debt_is_paid_in_first_month(self, debt_factory, start_date):
        debt = debt_factory(balance="0.01", minimum_payment=25, interest_rate=18)

        result = calculate_payoff_strategy([debt], 0, "avalanche", start_date=start_date)

        assert result.total_months == 1

    def test_zero_minimum_debt_is_paid_by_extra(self, debt_factory, start_date):
        debt = debt_factory(balance=1000, minimum_payment=0, interest_rate=0)

        result = calculate_payoff_strategy([debt], 100, "snowball", start_date=start_date)

        assert result.total_months == 10

    def test_interest_rounded_only_at_output(self, debt_factory, start_date):
        """Sub-cent interest accumulates instead of being rounded away each month."""
        debt = debt_factory(balance="1.00", minimum_payment="0.10", interest_rate="5")

        result = calculate_payoff_strategy([debt], 0, "avalanche", start_date=start_date)

        # Monthly interest is well under half a cent, yet the total is not zero.
        assert result.total_interest_paid == Decimal("0.02")
        assert result.total_months == 11


class TestRolldown:
    """Freed minimums roll to the next debt in priority order."""

    def _debts(self, debt_factory):
        return [
            debt_factory(id="d1", balance=500, interest_rate=10, minimum_payment=25),
            debt_factory(id="d2", balance=2000, interest_rate=15, minimum_payment=50),
            debt_factory(id="d3", balance=4000, interest_rate=20, minimum_payment=100),
        ]

    def test_first_month_snapshot(self, debt_factory, start_date):
        result = calculate_payoff_strategy(
            self._debts(debt_factory), 100, "snowball", start_date=start_date
        )

        payments = {p.debt_id: p for p in result.rolldown_payments}
        assert payments["d1"].is_focus_debt
        assert payments["d1"].active_payment == Decimal("125.00")
        assert payments["d2"].active_payment == Decimal("50.00")
        assert payments["d3"].active_payment == Decimal("100.00")
        assert sum(p.is_focus_debt for p in result.rolldown_payments) == 1

    def test_next_debt_receives_freed_minimum_after_payoff(self, debt_factory, start_date):
        result = calculate_payoff_strategy(
            self._debts(debt_factory), 100, "snowball", start_date=start_date
        )
        first = result.rolldown_payments[0]
        assert first.debt_id == "d1"

        snapshot = {p.debt_id: p for p in result.rolldown_at(first.payoff_month + 1)}

        assert not snapshot["d1"].is_focus_debt
        assert snapshot["d1"].active_payment == Decimal("0.00")
        assert snapshot["d1"].current_payment == Decimal("25.00")
        assert snapshot["d2"].is_focus_debt
        # Own minimum + extra + freed minimum of d1
        assert snapshot["d2"].active_payment == Decimal("175.00")
        assert snapshot["d3"].active_payment == Decimal("100.00")

    def test_rolldown_pool_is_cumulative(self, debt_factory, start_date):
        result = calculate_payoff_strategy(
            self._debts(debt_factory), 100, "snowball", start_date=start_date
        )
        second = result.rolldown_payments[1]
        assert second.debt_id == "d2"

        snapshot = {p.debt_id: p for p in result.rolldown_at(second.payoff_month + 1)}

        assert snapshot["d3"].is_focus_debt
        assert snapshot["d3"].active_payment == Decimal("275.00")

    def test_zero_minimum_debt_is_paid_through_rolldown(self, debt_factory, start_date):
        debts = [
            debt_factory(id="small", balance=300, minimum_payment=100, interest_rate=0),
            debt_factory(id="no-min", balance=1000, minimum_payment=0, interest_rate=0),
        ]

        result = calculate_payoff_strategy(debts, 0, "snowball", start_date=start_date)

        payments = {p.debt_id: p for p in result.rolldown_payments}
        assert payments["small"].payoff_month == 3
        assert payments["no-min"].payoff_month == 13
        assert result.total_months == 13

    def test_remainder_after_payoff_is_not_carried(self, debt_factory, start_date):
        debts = [
            debt_factory(id="tiny", balance=50, minimum_payment=0, interest_rate=0),
            debt_factory(id="big", balance=1050, minimum_payment=0, interest_rate=0),
        ]

        result = calculate_payoff_strategy(debts, 100, "snowball", start_date=start_date)

        payments = {p.debt_id: p for p in result.rolldown_payments}
        assert payments["tiny"].payoff_month == 1
        # "big" only starts receiving the extra in month 2.
        assert payments["big"].payoff_month == 12

    def test_lower_priority_payoff_does_not_feed_focus(self, debt_factory, start_date):
        debts = [
            debt_factory(id="A", balance=5000, interest_rate=20, minimum_payment=100),
            debt_factory(id="B", balance=30, interest_rate=5, minimum_payment=40),
        ]

        result = calculate_payoff_strategy(debts, 50, "avalanche", start_date=start_date)
        payments = {p.debt_id: p for p in result.rolldown_payments}
        assert payments["B"].payoff_month == 1

        snapshot = {p.debt_id: p for p in result.rolldown_at(2)}

        assert snapshot["A"].is_focus_debt
        assert snapshot["A"].active_payment == Decimal("150.00")
        assert snapshot["B"].active_payment == Decimal("0.00")

    def test_all_debts_paid_have_no_focus(self, debt_factory, start_date):
        result = calculate_payoff_strategy(
            self._debts(debt_factory), 100, "snowball", start_date=start_date
        )

        snapshot = result.rolldown_at(result.total_months + 1)

        assert not any(p.is_focus_debt for p in snapshot)
        assert all(p.active_payment == Decimal("0.00") for p in snapshot)

    def test_rolldown_at_rejects_month_zero(self, debt_factory, start_date):
        result = calculate_payoff_strategy(
            self._debts(debt_factory), 100, "snowball", start_date=start_date
        )
        with pytest.raises(ValueError):
            result.rolldown_at(0)


class TestStrategyOrdering:
    """Avalanche and snowball diverge when the cheapest debt is not the smallest."""

    def test_focus_debt_differs(self, priority_disagreement, start_date):
        avalanche = calculate_payoff_strategy(
            priority_disagreement, 100, "avalanche", start_date=start_date
        )
        snowball = calculate_payoff_strategy(
            priority_disagreement, 100, "snowball", start_date=start_date
        )

        assert avalanche.focus_debt.debt_id == "A"
        assert snowball.focus_debt.debt_id == "B"
        assert [p.debt_id for p in avalanche.rolldown_payments] == ["A", "B"]
        assert [p.debt_id for p in snowball.rolldown_payments] == ["B", "A"]

    def test_payoff_timing_diverges(self, priority_disagreement, start_date):
        avalanche = calculate_payoff_strategy(
            priority_disagreement, 100, "avalanche", start_date=start_date
        )
        snowball = calculate_payoff_strategy(
            priority_disagreement, 100, "snowball", start_date=start_date
        )
        av = {p.debt_id: p.payoff_month for p in avalanche.rolldown_payments}
        sb = {p.debt_id: p.payoff_month for p in snowball.rolldown_payments}

        # Snowball retires B within a few months; avalanche leaves it to its minimum.
        assert sb["B"] < sb["A"]
        assert sb["B"] <= 5
        assert sb["B"] < av["B"]
        assert av["A"] <= sb["A"]

    def test_avalanche_pays_less_interest(self, priority_disagreement, start_date):
        avalanche = calculate_payoff_strategy(
            priority_disagreement, 100, "avalanche", start_date=start_date
        )
        snowball = calculate_payoff_strategy(
            priority_disagreement, 100, "snowball", start_date=start_date
        )

        assert avalanche.total_interest_paid <= snowball.total_interest_paid

    def test_payoff_order_is_one_based(self, priority_disagreement, start_date):
        result = calculate_payoff_strategy(
            priority_disagreement, 100, "avalanche", start_date=start_date
        )

        assert [(o.debt_id, o.order) for o in result.payoff_order] == [("A", 1), ("B", 2)]

    def test_next_recommended_payment(self, priority_disagreement, start_date):
        result = calculate_payoff_strategy(
            priority_disagreement, 100, "avalanche", start_date=start_date
        )

        recommendation = result.next_recommended_payment
        assert recommendation.debt_id == "A"
        assert recommendation.recommended_payment == Decimal("160.00")
        assert recommendation.current_balance == Decimal("3000.00")
        assert recommendation.months_until_payoff == result.rolldown_payments[0].payoff_month


class TestProperties:
    """Determinism and monotonicity."""

    def _household(self, debt_factory):
        return [
            debt_factory(id="visa", balance=4200, interest_rate="22.9", minimum_payment=110),
            debt_factory(
                id="store",
                balance=900,
                interest_rate="26.5",
                minimum_payment=35,
                compounding_frequency="daily",
            ),
            debt_factory(
                id="car",
                balance=11000,
                interest_rate="6.4",
                minimum_payment=320,
                loan_type="installment",
            ),
            debt_factory(id="loc", balance=2500, interest_rate=11, minimum_payment=40),
        ]

    @pytest.mark.parametrize("method", ["avalanche", "snowball"])
    def test_identical_inputs_give_identical_results(self, debt_factory, start_date, method):
        first = calculate_payoff_strategy(
            self._household(debt_factory), 175, method, "biweekly", start_date=start_date
        )
        second = calculate_payoff_strategy(
            self._household(debt_factory), 175, method, "biweekly", start_date=start_date
        )

        assert first == second

    def test_input_order_does_not_matter(self, debt_factory, start_date):
        debts = self._household(debt_factory)
        forward = calculate_payoff_strategy(debts, 100, "snowball", start_date=start_date)
        backward = calculate_payoff_strategy(
            list(reversed(debts)), 100, "snowball", start_date=start_date
        )

        assert forward == backward

    @pytest.mark.parametrize("method", ["avalanche", "snowball"])
    def test_more_extra_never_costs_more(self, debt_factory, start_date, method):
        results = [
            calculate_payoff_strategy(
                self._household(debt_factory), extra, method, start_date=start_date
            )
            for extra in (0, 25, 100, 250, 600, 2000)
        ]

        for smaller, larger in zip(results, results[1:]):
            assert larger.total_months <= smaller.total_months
            assert larger.total_interest_paid <= smaller.total_interest_paid

    def test_avalanche_interest_not_above_snowball(self, debt_factory, start_date):
        for extra in (0, 100, 400):
            comparison = compare_payoff_methods(
                self._household(debt_factory), extra, start_date=start_date
            )
            assert comparison.avalanche.total_interest_paid <= comparison.snowball.total_interest_paid


class TestPaymentFrequency:
    def test_biweekly_extra_is_scaled(self, debt_factory, start_date):
        debts = [debt_factory(balance=5000, minimum_payment=200, interest_rate=18)]

        monthly = calculate_payoff_strategy(debts, 100, "avalanche", "monthly", start_date=start_date)
        biweekly = calculate_payoff_strategy(
            debts, 100, "avalanche", "biweekly", start_date=start_date
        )

        assert biweekly.extra_per_period == Decimal("216.67")
        assert biweekly.rolldown_payments[0].active_payment == Decimal("416.67")
        assert biweekly.total_months < monthly.total_months
        assert biweekly.total_interest_paid < monthly.total_interest_paid

    def test_frequency_without_extra_changes_nothing(self, debt_factory, start_date):
        debts = [debt_factory(balance=5000, minimum_payment=200, interest_rate=18)]

        monthly = calculate_payoff_strategy(debts, 0, "avalanche", "monthly", start_date=start_date)
        weekly = calculate_payoff_strategy(debts, 0, "avalanche", "weekly", start_date=start_date)

        assert weekly.total_months == monthly.total_months


class TestZeroBalanceDebts:
    def test_zero_balance_debt_is_reported_as_paid(self, debt_factory, start_date):
        debts = [
            debt_factory(id="paid", balance=0, minimum_payment=40),
            debt_factory(id="open", balance=1000, minimum_payment=100, interest_rate=0),
        ]

        result = calculate_payoff_strategy(debts, 0, "avalanche", start_date=start_date)

        assert [p.debt_id for p in result.rolldown_payments] == ["open", "paid"]
        paid = result.rolldown_payments[1]
        assert paid.payoff_month == 0
        assert paid.payoff_date == start_date
        assert paid.active_payment == Decimal("0.00")
        assert not paid.is_focus_debt
        # The paid debt's minimum does not join the pool.
        assert result.total_months == 10

    def test_only_zero_balances(self, debt_factory, start_date):
        result = calculate_payoff_strategy(
            [debt_factory(balance=0)], 50, "snowball", start_date=start_date
        )

        assert result.total_months == 0
        assert result.debt_free_date == start_date
        assert result.focus_debt is None


class TestNonConvergence:
    def _underwater(self, debt_factory):
        # $50 payment on $10000 at 24% APR = $200/month interest
        return [debt_factory(balance=10000, minimum_payment=50, interest_rate=24)]

    def test_minimum_below_interest_is_reported(self, debt_factory, start_date):
        with pytest.raises(PayoffNonConvergence) as excinfo:
            calculate_payoff_strategy(
                self._underwater(debt_factory), 0, "avalanche", start_date=start_date
            )

        assert excinfo.value.unpaid_debt_ids == ["debt-1"]
        assert excinfo.value.months < 600

    def test_horizon_exhaustion_is_reported(self, debt_factory, start_date):
        debts = [debt_factory(balance=1000, minimum_payment=0, interest_rate=0)]

        with pytest.raises(PayoffNonConvergence) as excinfo:
            calculate_payoff_strategy(debts, 0, "snowball", start_date=start_date, max_months=24)

        assert excinfo.value.months == 24

    def test_partial_result_has_no_total(self, debt_factory, start_date):
        result = calculate_payoff_strategy(
            self._underwater(debt_factory),
            0,
            "avalanche",
            start_date=start_date,
            allow_partial=True,
        )

        assert not result.converged
        assert result.total_months is None
        assert result.debt_free_date is None
        assert result.rolldown_payments[0].payoff_month is None
        assert result.rolldown_payments[0].is_focus_debt

    def test_extra_payment_rescues_plan(self, debt_factory, start_date):
        result = calculate_payoff_strategy(
            self._underwater(debt_factory), 500, "avalanche", start_date=start_date
        )

        assert result.converged
        assert result.total_months > 0


class TestInvalidInput:
    def test_negative_balance(self, debt_factory):
        with pytest.raises(InvalidDebtInput) as excinfo:
            debt_factory(balance=-1)
        assert excinfo.value.field == "remaining_balance"

    def test_negative_interest_rate(self, debt_factory):
        with pytest.raises(InvalidDebtInput):
            debt_factory(interest_rate=-0.5)

    def test_negative_minimum(self, debt_factory):
        with pytest.raises(InvalidDebtInput):
            debt_factory(minimum_payment=-10)

    def test_non_finite_balance(self, debt_factory):
        with pytest.raises(InvalidDebtInput):
            debt_factory(balance=float("nan"))

    def test_non_numeric_balance(self, debt_factory):
        with pytest.raises(InvalidDebtInput):
            debt_factory(balance="lots")

    def test_unknown_loan_type(self, debt_factory):
        with pytest.raises(InvalidDebtInput):
            debt_factory(loan_type="mortgage")

    def test_unknown_compounding(self, debt_factory):
        with pytest.raises(InvalidDebtInput):
            debt_factory(compounding_frequency="hourly")

    def test_billing_cycle_must_be_positive(self, debt_factory):
        with pytest.raises(InvalidDebtInput):
            debt_factory(billing_cycle_days=0)

    def test_negative_extra_payment(self, debt_factory):
        with pytest.raises(InvalidDebtInput):
            calculate_payoff_strategy([debt_factory()], -5, "avalanche")

    def test_unknown_method(self, debt_factory):
        with pytest.raises(InvalidDebtInput):
            calculate_payoff_strategy([debt_factory()], 0, "hybrid")

    def test_unknown_frequency(self, debt_factory):
        with pytest.raises(InvalidDebtInput):
            calculate_payoff_strategy([debt_factory()], 0, "avalanche", "daily")

    def test_duplicate_ids(self, debt_factory):
        with pytest.raises(InvalidDebtInput):
            calculate_payoff_strategy([debt_factory(), debt_factory()], 0, "avalanche")

    def test_errors_are_value_errors(self, debt_factory):
        with pytest.raises(ValueError):
            calculate_payoff_strategy([debt_factory()], 0, "AVALANCHE")


class TestComparisons:
    def test_compare_methods_recommends_avalanche_when_it_saves(
        self, priority_disagreement, start_date
    ):
        comparison = compare_payoff_methods(priority_disagreement, 100, start_date=start_date)

        assert comparison.interest_savings > 0
        assert comparison.time_savings >= 0
        assert comparison.recommended_method == "avalanche"
        assert comparison.snowball.method == "snowball"
        assert comparison.avalanche.method == "avalanche"

    def test_compare_methods_prefers_snowball_on_tie(self, debt_factory, start_date):
        debts = [debt_factory(balance=1000, minimum_payment=100, interest_rate=0)]

        comparison = compare_payoff_methods(debts, 50, start_date=start_date)

        assert comparison.interest_savings == 0
        assert comparison.time_savings == 0
        assert comparison.recommended_method == "snowball"

    def test_minimum_vs_plan_savings(self, debt_factory, start_date):
        debts = [
            debt_factory(id="card", balance=2000, interest_rate=18, minimum_payment=60),
            debt_factory(id="loan", balance=1000, interest_rate=10, minimum_payment=40),
        ]

        comparison = compare_minimum_vs_plan(
            debts, 100, "avalanche", start_date=start_date
        )

        assert comparison.minimum_only.extra_per_period == Decimal("0.00")
        assert comparison.months_saved > 0
        assert comparison.interest_saved > 0
        assert comparison.years_saved * 12 + comparison.remaining_months_saved == (
            comparison.months_saved
        )
        assert comparison.months_saved == (
            comparison.minimum_only.total_months - comparison.current_plan.total_months
        )

    def test_minimum_vs_plan_when_minimums_never_finish(self, debt_factory, start_date):
        debts = [debt_factory(balance=10000, minimum_payment=50, interest_rate=24)]

        comparison = compare_minimum_vs_plan(debts, 500, "snowball", start_date=start_date)

        assert not comparison.minimum_only.converged
        assert comparison.current_plan.converged
        assert comparison.months_saved is None
        assert comparison.interest_saved is None


class TestDebtInputMapping:
    def test_camel_case_keys(self):
        debt = DebtInput.from_mapping(
            {
                "id": "x1",
                "name": "Card",
                "remainingBalance": 1500.25,
                "minimumPayment": 45,
                "interestRate": 19.99,
                "loanType": "revolving",
                "compoundingFrequency": "daily",
                "billingCycleDays": 30,
                "color": "#ff0000",
            }
        )

        assert debt.remaining_balance == Decimal("1500.25")
        assert debt.interest_rate == Decimal("19.99")
        assert debt.compounding_frequency == "daily"
        assert debt.billing_cycle_days == 30
        assert debt.color == "#ff0000"

    def test_missing_rate_and_minimum_default_to_zero(self):
        debt = DebtInput.from_mapping({"id": 7, "remaining_balance": "250"})

        assert debt.id == "7"
        assert debt.name == "7"
        assert debt.minimum_payment == Decimal("0")
        assert debt.interest_rate == Decimal("0")

    def test_missing_balance_is_rejected(self):
        with pytest.raises(InvalidDebtInput):
            DebtInput.from_mapping({"id": "x"})
