"""Standalone debt records entered directly by the household."""

from __future__ import annotations

from decimal import Decimal
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel

from ..services.debt_inputs import DebtInput, to_decimal
from ..services.unified_sources import UnifiedDebt


class DebtRecord(SQLModel):
    """Installment or revolving debt tracked on its own."""

    source_kind: ClassVar[str] = "debt"

    id: str = Field(max_length=64)
    name: str = Field(max_length=128)
    type: Optional[str] = Field(default=None, max_length=32)
    remaining_balance: Optional[float] = Field(default=None)
    original_amount: Optional[float] = Field(default=None)
    minimum_payment: Optional[float] = Field(default=None)
    additional_monthly_payment: Optional[float] = Field(default=None)
    interest_rate: Optional[float] = Field(default=None)
    loan_type: Optional[str] = Field(default=None, max_length=16)
    compounding_frequency: Optional[str] = Field(default=None, max_length=16)
    billing_cycle_days: Optional[int] = Field(default=None, ge=1)
    color: Optional[str] = Field(default=None, max_length=16)
    icon: Optional[str] = Field(default=None, max_length=32)

    @property
    def source_id(self) -> str:
        return self.id

    def to_unified_debt(self) -> UnifiedDebt:
        debt_type = self.type or "other"
        # Credit cards revolve; everything else amortizes like a loan.
        inferred = "revolving" if debt_type == "credit_card" else "installment"
        debt = DebtInput(
            id=self.id,
            name=self.name,
            remaining_balance=self.remaining_balance or 0,
            minimum_payment=self.minimum_payment or 0,
            interest_rate=self.interest_rate or 0,
            type=debt_type,
            loan_type=self.loan_type or inferred,
            compounding_frequency=self.compounding_frequency or "monthly",
            billing_cycle_days=self.billing_cycle_days or 30,
            color=self.color,
            icon=self.icon,
        )
        original = (
            to_decimal(self.original_amount, field="original_amount", debt_id=self.id)
            if self.original_amount
            else debt.remaining_balance
        )
        additional = (
            to_decimal(self.additional_monthly_payment, field="additional_monthly_payment", debt_id=self.id)
            if self.additional_monthly_payment
            else Decimal("0")
        )
        return UnifiedDebt(
            debt=debt,
            source=self.source_kind,
            source_type=debt_type,
            original_balance=original,
            additional_monthly_payment=max(additional, Decimal("0")),
            # Standalone debts are always part of the plan.
            include_in_payoff_strategy=True,
        )
