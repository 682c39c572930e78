"""Household debt strategy preferences."""

from __future__ import annotations

from typing import Any, Mapping

from sqlmodel import Field, SQLModel

from ..logging_config import get_logger
from ..services.debt_inputs import PAYMENT_FREQUENCIES, PAYOFF_METHODS

logger = get_logger(__name__)

DEFAULT_METHOD = "avalanche"
DEFAULT_FREQUENCY = "monthly"


def _stored_choice(value: Any, allowed: tuple[str, ...], default: str, name: str) -> str:
    if value is None or value == "":
        return default
    if isinstance(value, str) and value in allowed:
        return value
    logger.warning("Unknown stored %s %r, using %s", name, value, default)
    return default


class DebtStrategySettings(SQLModel):
    """Extra payment, preferred method and cadence saved for a household."""

    extra_monthly_payment: float = Field(default=0.0, ge=0)
    preferred_method: str = Field(default=DEFAULT_METHOD, max_length=16)
    payment_frequency: str = Field(default=DEFAULT_FREQUENCY, max_length=16)
    debt_strategy_enabled: bool = Field(default=False)

    @classmethod
    def from_stored(cls, data: Mapping[str, Any] | None) -> "DebtStrategySettings":
        """Read persisted settings, replacing unknown method/frequency values.

        Accepts snake_case or camelCase keys. Missing values use the defaults.
        """

        data = data or {}

        def pick(snake: str, camel: str) -> Any:
            return data.get(snake, data.get(camel))

        extra = pick("extra_monthly_payment", "extraMonthlyPayment") or 0.0
        return cls(
            extra_monthly_payment=extra,
            preferred_method=_stored_choice(
                pick("preferred_method", "preferredMethod"), PAYOFF_METHODS, DEFAULT_METHOD, "method"
            ),
            payment_frequency=_stored_choice(
                pick("payment_frequency", "paymentFrequency"),
                PAYMENT_FREQUENCIES,
                DEFAULT_FREQUENCY,
                "payment frequency",
            ),
            debt_strategy_enabled=bool(pick("debt_strategy_enabled", "debtStrategyEnabled") or False),
        )
