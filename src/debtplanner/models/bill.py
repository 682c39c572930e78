"""Recurring bills flagged as debt (car loans, financed purchases, ...)."""

from __future__ import annotations

from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel

from ..services.debt_inputs import DebtInput, to_decimal
from ..services.unified_sources import UnifiedDebt
from .account import budgeted_extra


class DebtBill(SQLModel):
    """A bill schedule that pays down an installment balance."""

    source_kind: ClassVar[str] = "bill"

    id: str = Field(max_length=64)
    name: str = Field(max_length=128)
    debt_type: Optional[str] = Field(default=None, max_length=32)
    remaining_balance: Optional[float] = Field(default=None)
    original_balance: Optional[float] = Field(default=None)
    minimum_payment: Optional[float] = Field(default=None)
    budgeted_monthly_payment: Optional[float] = Field(default=None)
    additional_monthly_payment: Optional[float] = Field(default=None)
    interest_rate: Optional[float] = Field(default=None)
    compounding_frequency: Optional[str] = Field(default=None, max_length=16)
    color: Optional[str] = Field(default=None, max_length=16)
    include_in_payoff_strategy: bool = Field(default=True)

    @property
    def source_id(self) -> str:
        return self.id

    def to_unified_debt(self) -> UnifiedDebt:
        debt_type = self.debt_type or "other"
        debt = DebtInput(
            id=self.id,
            name=self.name,
            remaining_balance=self.remaining_balance or 0,
            minimum_payment=self.minimum_payment or 0,
            interest_rate=self.interest_rate or 0,
            type=debt_type,
            loan_type="installment",
            compounding_frequency=self.compounding_frequency or "monthly",
            billing_cycle_days=30,
            color=self.color,
        )
        original = (
            to_decimal(self.original_balance, field="original_balance", debt_id=self.id)
            if self.original_balance
            else debt.remaining_balance
        )
        return UnifiedDebt(
            debt=debt,
            source=self.source_kind,
            source_type=debt_type,
            original_balance=original,
            additional_monthly_payment=budgeted_extra(
                minimum=debt.minimum_payment,
                budgeted=self.budgeted_monthly_payment,
                additional=self.additional_monthly_payment,
                debt_id=self.id,
            ),
            include_in_payoff_strategy=self.include_in_payoff_strategy,
        )


__all__ = ["DebtBill"]
