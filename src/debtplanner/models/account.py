"""Ledger-side credit accounts that carry a revolving balance."""

from __future__ import annotations

from decimal import Decimal
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel

from ..services.debt_inputs import DebtInput, to_decimal
from ..services.unified_sources import UnifiedDebt

_CENTS = Decimal(100)


def budgeted_extra(
    *, minimum: Decimal, budgeted: Optional[float], additional: Optional[float], debt_id: str
) -> Decimal:
    """Extra monthly payment the household budgets above the minimum."""

    if additional is not None:
        extra = to_decimal(additional, field="additional_monthly_payment", debt_id=debt_id)
    elif budgeted:
        extra = to_decimal(budgeted, field="budgeted_monthly_payment", debt_id=debt_id) - minimum
    else:
        extra = Decimal("0")
    return max(extra, Decimal("0"))


class CreditAccount(SQLModel):
    """Credit card or line of credit as recorded in the ledger.

    Ledger balances are signed (money owed is negative), so the balance is taken as
    an absolute value. ``current_balance_cents`` wins over ``current_balance``.
    """

    source_kind: ClassVar[str] = "account"

    id: str = Field(max_length=64)
    name: str = Field(max_length=128)
    type: str = Field(default="credit", max_length=32)
    current_balance: Optional[float] = Field(default=None)
    current_balance_cents: Optional[int] = Field(default=None)
    credit_limit: Optional[float] = Field(default=None)
    credit_limit_cents: Optional[int] = Field(default=None)
    minimum_payment_amount: Optional[float] = Field(default=None)
    budgeted_monthly_payment: Optional[float] = Field(default=None)
    additional_monthly_payment: Optional[float] = Field(default=None)
    interest_rate: Optional[float] = Field(default=None)
    interest_type: str = Field(default="fixed", description="'fixed' or 'variable'")
    color: Optional[str] = Field(default=None, max_length=16)
    icon: Optional[str] = Field(default=None, max_length=32)
    include_in_payoff_strategy: bool = Field(default=True)

    @property
    def source_id(self) -> str:
        return self.id

    def _balance(self) -> Decimal:
        if self.current_balance_cents is not None:
            return abs(Decimal(self.current_balance_cents)) / _CENTS
        if self.current_balance is not None:
            return abs(to_decimal(self.current_balance, field="current_balance", debt_id=self.id))
        return Decimal("0")

    def to_unified_debt(self) -> UnifiedDebt:
        balance = self._balance()
        minimum = self.minimum_payment_amount or 0
        debt = DebtInput(
            id=self.id,
            name=self.name,
            remaining_balance=balance,
            minimum_payment=minimum,
            interest_rate=self.interest_rate or 0,
            type=self.type,
            loan_type="revolving",
            compounding_frequency="daily" if self.interest_type == "variable" else "monthly",
            billing_cycle_days=30,
            color=self.color,
            icon=self.icon,
        )
        if self.credit_limit_cents is not None:
            original = Decimal(self.credit_limit_cents) / _CENTS
        elif self.credit_limit is not None:
            original = to_decimal(self.credit_limit, field="credit_limit", debt_id=self.id)
        else:
            original = balance
        return UnifiedDebt(
            debt=debt,
            source=self.source_kind,
            source_type=self.type,
            original_balance=original,
            additional_monthly_payment=budgeted_extra(
                minimum=debt.minimum_payment,
                budgeted=self.budgeted_monthly_payment,
                additional=self.additional_monthly_payment,
                debt_id=self.id,
            ),
            include_in_payoff_strategy=self.include_in_payoff_strategy,
        )
