"""Service module exports."""

from . import (
    amortization,
    debt_inputs,
    debts,
    export_csv,
    frequency,
    ordering,
    unified_sources,
)

__all__ = [
    "amortization",
    "debt_inputs",
    "debts",
    "export_csv",
    "frequency",
    "ordering",
    "unified_sources",
]
