"""Debt input value type and validation shared by the payoff engine."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Literal, Mapping, Optional

PayoffMethod = Literal["avalanche", "snowball"]
PaymentFrequency = Literal["monthly", "biweekly", "weekly", "quarterly"]
LoanType = Literal["revolving", "installment"]
CompoundingFrequency = Literal["daily", "monthly", "quarterly", "annually"]

PAYOFF_METHODS: tuple[str, ...] = ("avalanche", "snowball")
PAYMENT_FREQUENCIES: tuple[str, ...] = ("monthly", "biweekly", "weekly", "quarterly")
LOAN_TYPES: tuple[str, ...] = ("revolving", "installment")
COMPOUNDING_FREQUENCIES: tuple[str, ...] = ("daily", "monthly", "quarterly", "annually")


class InvalidDebtInput(ValueError):
    """Raised when a debt or strategy argument cannot be simulated as given."""

    def __init__(self, message: str, *, field: str | None = None, debt_id: str | None = None):
        super().__init__(message)
        self.field = field
        self.debt_id = debt_id


class PayoffNonConvergence(ValueError):
    """Raised when payments never outpace interest on at least one debt."""

    def __init__(self, message: str, *, unpaid_debt_ids: list[str], months: int):
        super().__init__(message)
        self.unpaid_debt_ids = unpaid_debt_ids
        self.months = months


def to_decimal(value: Any, *, field: str, debt_id: str | None = None) -> Decimal:
    """Convert a user supplied number to ``Decimal`` without float artifacts."""

    if isinstance(value, bool):
        raise InvalidDebtInput(f"{field} must be a number", field=field, debt_id=debt_id)
    try:
        if isinstance(value, Decimal):
            result = value
        elif isinstance(value, float):
            result = Decimal(str(value))
        elif isinstance(value, (int, str)):
            result = Decimal(value)
        else:
            raise TypeError(type(value).__name__)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise InvalidDebtInput(
            f"{field} must be a number, got {value!r}", field=field, debt_id=debt_id
        ) from exc
    if not result.is_finite():
        raise InvalidDebtInput(f"{field} must be finite", field=field, debt_id=debt_id)
    return result


def non_negative(value: Any, *, field: str, debt_id: str | None = None) -> Decimal:
    amount = to_decimal(value, field=field, debt_id=debt_id)
    if amount < 0:
        raise InvalidDebtInput(
            f"{field} must not be negative (got {amount})", field=field, debt_id=debt_id
        )
    return amount


def require_choice(value: Any, choices: Iterable[str], *, field: str) -> str:
    """Return *value* when it is one of *choices*; never coerce unknown values."""

    allowed = tuple(choices)
    if not isinstance(value, str) or value not in allowed:
        raise InvalidDebtInput(
            f"{field} must be one of {', '.join(allowed)} (got {value!r})", field=field
        )
    return value


@dataclass(slots=True)
class DebtInput:
    """A single debt as seen by the payoff engine.

    Money and rates are stored as ``Decimal``. ``interest_rate`` is an annual
    percentage (``18`` means 18% APR). ``type``, ``color`` and ``icon`` are passed
    through untouched for display.
    """

    id: str
    name: str
    remaining_balance: Decimal
    minimum_payment: Decimal = Decimal("0")
    interest_rate: Decimal = Decimal("0")
    type: str = "other"
    loan_type: LoanType = "revolving"
    compounding_frequency: CompoundingFrequency = "monthly"
    billing_cycle_days: Optional[int] = None
    color: Optional[str] = None
    icon: Optional[str] = None

    def __post_init__(self) -> None:
        self.id = str(self.id)
        debt_id = self.id
        self.remaining_balance = non_negative(
            self.remaining_balance, field="remaining_balance", debt_id=debt_id
        )
        self.minimum_payment = non_negative(
            self.minimum_payment if self.minimum_payment is not None else 0,
            field="minimum_payment",
            debt_id=debt_id,
        )
        self.interest_rate = non_negative(
            self.interest_rate if self.interest_rate is not None else 0,
            field="interest_rate",
            debt_id=debt_id,
        )
        self.loan_type = require_choice(self.loan_type, LOAN_TYPES, field="loan_type")  # type: ignore[assignment]
        self.compounding_frequency = require_choice(  # type: ignore[assignment]
            self.compounding_frequency, COMPOUNDING_FREQUENCIES, field="compounding_frequency"
        )
        if self.billing_cycle_days is not None:
            if isinstance(self.billing_cycle_days, bool) or not isinstance(
                self.billing_cycle_days, int
            ):
                raise InvalidDebtInput(
                    "billing_cycle_days must be an integer",
                    field="billing_cycle_days",
                    debt_id=debt_id,
                )
            if self.billing_cycle_days < 1:
                raise InvalidDebtInput(
                    "billing_cycle_days must be at least 1",
                    field="billing_cycle_days",
                    debt_id=debt_id,
                )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "DebtInput":
        """Build a debt from a dict using snake_case or camelCase keys."""

        def pick(snake: str, camel: str, default: Any = None) -> Any:
            if snake in data and data[snake] is not None:
                return data[snake]
            if camel in data and data[camel] is not None:
                return data[camel]
            return default

        if "id" not in data:
            raise InvalidDebtInput("debt is missing an id", field="id")
        balance = pick("remaining_balance", "remainingBalance")
        if balance is None:
            raise InvalidDebtInput(
                "remaining_balance is required", field="remaining_balance", debt_id=str(data["id"])
            )
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or data["id"]),
            remaining_balance=balance,
            minimum_payment=pick("minimum_payment", "minimumPayment", 0),
            interest_rate=pick("interest_rate", "interestRate", 0),
            type=str(data.get("type") or "other"),
            loan_type=pick("loan_type", "loanType", "revolving"),
            compounding_frequency=pick("compounding_frequency", "compoundingFrequency", "monthly"),
            billing_cycle_days=pick("billing_cycle_days", "billingCycleDays"),
            color=data.get("color"),
            icon=data.get("icon"),
        )


def validate_debts(debts: Iterable[DebtInput]) -> list[DebtInput]:
    """Return debts as a list, rejecting duplicate ids."""

    result = list(debts)
    seen: set[str] = set()
    for debt in result:
        if not isinstance(debt, DebtInput):
            raise InvalidDebtInput(f"expected DebtInput, got {type(debt).__name__}")
        if debt.id in seen:
            raise InvalidDebtInput(f"duplicate debt id {debt.id!r}", field="id", debt_id=debt.id)
        seen.add(debt.id)
    return result


__all__ = [
    "COMPOUNDING_FREQUENCIES",
    "CompoundingFrequency",
    "DebtInput",
    "InvalidDebtInput",
    "LOAN_TYPES",
    "LoanType",
    "PAYMENT_FREQUENCIES",
    "PAYOFF_METHODS",
    "PaymentFrequency",
    "PayoffMethod",
    "PayoffNonConvergence",
    "non_negative",
    "require_choice",
    "to_decimal",
    "validate_debts",
]
