"""Source records and settings consumed by the payoff planner."""

from .account import CreditAccount
from .bill import DebtBill
from .debt import DebtRecord
from .settings import DebtStrategySettings

__all__ = [
    "CreditAccount",
    "DebtBill",
    "DebtRecord",
    "DebtStrategySettings",
]
