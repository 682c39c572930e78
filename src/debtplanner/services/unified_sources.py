"""Merge credit accounts, debt bills and standalone debts into payoff inputs."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Protocol

from ..logging_config import get_logger
from .debt_inputs import DebtInput, InvalidDebtInput

logger = get_logger(__name__)


@dataclass(slots=True)
class UnifiedDebt:
    """A normalized debt plus the bookkeeping the engine does not need."""

    debt: DebtInput
    source: str  # "account", "bill" or "debt"
    source_type: str
    original_balance: Decimal
    additional_monthly_payment: Decimal = Decimal("0")
    include_in_payoff_strategy: bool = True


class DebtSource(Protocol):
    """Any record that can describe itself as a debt."""

    source_kind: str

    @property
    def source_id(self) -> str:  # pragma: no cover - interface
        ...

    def to_unified_debt(self) -> UnifiedDebt:  # pragma: no cover - interface
        """Return the record as a unified debt or raise InvalidDebtInput."""
        ...


@dataclass(slots=True)
class DataAnomaly:
    """A source record that was skipped instead of failing the batch."""

    source: str
    record_id: str
    field: str | None
    reason: str


@dataclass(slots=True)
class UnificationResult:
    debts: list[UnifiedDebt] = field(default_factory=list)
    anomalies: list[DataAnomaly] = field(default_factory=list)


def unify_debt_sources(
    sources: Iterable[DebtSource], *, include_zero_balances: bool = False
) -> UnificationResult:
    """Normalize heterogeneous debt records.

    Invalid records (a balance that is still negative after sign correction, a
    negative rate, an unknown compounding frequency, ...) are recorded as
    anomalies and skipped. Zero balances are dropped unless requested.
    """

    result = UnificationResult()
    for record in sources:
        try:
            unified = record.to_unified_debt()
        except InvalidDebtInput as exc:
            anomaly = DataAnomaly(
                source=record.source_kind,
                record_id=record.source_id,
                field=exc.field,
                reason=str(exc),
            )
            result.anomalies.append(anomaly)
            logger.warning(
                "Skipping debt record",
                extra={
                    "source": anomaly.source,
                    "record_id": anomaly.record_id,
                    "reason": anomaly.reason,
                },
            )
            continue
        if not include_zero_balances and unified.debt.remaining_balance <= 0:
            continue
        result.debts.append(unified)
    return result


def to_debt_inputs(
    debts: Iterable[UnifiedDebt], *, in_strategy_only: bool = True
) -> list[DebtInput]:
    """Strip source bookkeeping, keeping only debts included in the strategy."""

    return [
        unified.debt
        for unified in debts
        if unified.include_in_payoff_strategy or not in_strategy_only
    ]


__all__ = [
    "DataAnomaly",
    "DebtSource",
    "UnificationResult",
    "UnifiedDebt",
    "to_debt_inputs",
    "unify_debt_sources",
]
