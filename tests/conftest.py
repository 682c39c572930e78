"""Pytest configuration and shared fixtures for debtplanner tests.

Provides a debt factory, a fixed simulation start date and money helpers so the
payoff engine can be exercised deterministically.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

import pytest

from debtplanner.services.debt_inputs import DebtInput

# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def start_date() -> date:
    """Fixed first simulated month so payoff dates are stable."""
    return date(2026, 1, 15)


@pytest.fixture
def debt_factory():
    """Factory for creating debt inputs.

    Returns:
        Callable: Function that creates DebtInput instances
    """

    def _create_debt(
        id: str = "debt-1",
        name: str | None = None,
        balance: float | str = 5000,
        minimum_payment: float | str = 150,
        interest_rate: float | str = 18,
        loan_type: str = "revolving",
        compounding_frequency: str = "monthly",
        billing_cycle_days: int | None = None,
        type: str = "credit_card",
    ) -> DebtInput:
        """Create a debt with sensible defaults.

        Args:
            id: Unique debt id
            balance: Remaining balance
            minimum_payment: Minimum monthly payment
            interest_rate: APR in percent (18 means 18%)

        Returns:
            DebtInput: Validated debt
        """
        return DebtInput(
            id=id,
            name=name or id,
            remaining_balance=balance,
            minimum_payment=minimum_payment,
            interest_rate=interest_rate,
            type=type,
            loan_type=loan_type,
            compounding_frequency=compounding_frequency,
            billing_cycle_days=billing_cycle_days,
        )

    return _create_debt


@pytest.fixture
def priority_disagreement(debt_factory) -> list[DebtInput]:
    """High-rate large debt versus low-rate small debt."""
    return [
        debt_factory(id="A", balance=3000, interest_rate=20, minimum_payment=60),
        debt_factory(id="B", balance=500, interest_rate=8, minimum_payment=25),
    ]


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers that setup_logging attached during a test."""
    yield
    logger = logging.getLogger("debtplanner")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


# =============================================================================
# Helper Utilities
# =============================================================================


def assert_money_equal(actual: Decimal, expected, tolerance: str = "0.01"):
    """Assert that two money amounts match within a tolerance (default one cent)."""
    expected_value = Decimal(str(expected))
    assert abs(actual - expected_value) <= Decimal(tolerance), (
        f"Expected {expected_value}, got {actual} (diff: {abs(actual - expected_value)})"
    )
