"""CSV export helpers for payoff plans."""

from __future__ import annotations

import csv
from datetime import date
from pathlib import Path

from .debts import StrategyResult

HEADERS = [
    "debt_id",
    "debt_name",
    "payoff_month",
    "payoff_date",
    "current_payment",
    "active_payment",
    "is_focus_debt",
    "interest_paid",
]


def _serialize_value(value):
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def export_rolldown_csv(*, result: StrategyResult, output_path: Path) -> Path:
    """Write one row per rolldown payment to `output_path`.

    Columns are deterministic and follow the plan's priority order.
    Returns the path written.
    """

    output_path.parent.mkdir(parents=True, exist_ok=True)

    # Use newline='' for csv on Windows
    with output_path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=HEADERS, quoting=csv.QUOTE_MINIMAL)
        writer.writeheader()
        for payment in result.rolldown_payments:
            writer.writerow(
                {name: _serialize_value(getattr(payment, name)) for name in HEADERS}
            )

    return output_path


__all__ = ["HEADERS", "export_rolldown_csv"]
