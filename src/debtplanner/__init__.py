"""Debt payoff planning: snowball and avalanche simulation with rolldown."""

from __future__ import annotations

from .config import BaseConfig, DevConfig
from .services.debt_inputs import DebtInput, InvalidDebtInput, PayoffNonConvergence
from .services.debts import (
    StrategyResult,
    calculate_payoff_strategy,
    compare_minimum_vs_plan,
    compare_payoff_methods,
)
from .services.unified_sources import to_debt_inputs, unify_debt_sources

__all__ = [
    "BaseConfig",
    "DebtInput",
    "DevConfig",
    "InvalidDebtInput",
    "PayoffNonConvergence",
    "StrategyResult",
    "calculate_payoff_strategy",
    "compare_minimum_vs_plan",
    "compare_payoff_methods",
    "to_debt_inputs",
    "unify_debt_sources",
]
