"""Command line interface for debt payoff planning."""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import date
from pathlib import Path
from typing import Any

import click

from .config import BaseConfig
from .logging_config import get_logger, setup_logging
from .models import CreditAccount, DebtBill, DebtRecord, DebtStrategySettings
from .services.debt_inputs import PAYMENT_FREQUENCIES, PAYOFF_METHODS, DebtInput
from .services.debts import (
    StrategyResult,
    calculate_payoff_strategy,
    compare_minimum_vs_plan,
    compare_payoff_methods,
)
from .services.export_csv import export_rolldown_csv
from .services.unified_sources import to_debt_inputs, unify_debt_sources

logger = get_logger(__name__)

_SOURCE_MODELS = {"account": CreditAccount, "bill": DebtBill, "debt": DebtRecord}


def _load_plan_file(path: Path) -> tuple[list[DebtInput], DebtStrategySettings | None]:
    """Read debts (and optional settings) from a JSON file.

    Entries with a ``source`` key are treated as raw account/bill/debt records and
    normalized; anything else is read as a ready-made debt.
    """

    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, list):
        entries, stored_settings = payload, None
    elif isinstance(payload, dict):
        entries, stored_settings = payload.get("debts", []), payload.get("settings")
    else:
        raise ValueError("plan file must contain a list of debts or an object with 'debts'")

    debts: list[DebtInput] = []
    records = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise ValueError(f"each debt must be a JSON object, got {entry!r}")
        source = entry.get("source")
        if source is None:
            debts.append(DebtInput.from_mapping(entry))
            continue
        model = _SOURCE_MODELS.get(source)
        if model is None:
            raise ValueError(f"unknown debt source {source!r}")
        records.append(model(**{k: v for k, v in entry.items() if k != "source"}))

    if records:
        unified = unify_debt_sources(records)
        for anomaly in unified.anomalies:
            click.echo(
                f"Skipped {anomaly.source} {anomaly.record_id}: {anomaly.reason}", err=True
            )
        debts.extend(to_debt_inputs(unified.debts))
    settings = DebtStrategySettings.from_stored(stored_settings) if stored_settings else None
    return debts, settings


def _resolve(
    config: BaseConfig,
    settings: DebtStrategySettings | None,
    *,
    extra: float | None,
    method: str | None = None,
    frequency: str | None = None,
) -> tuple[float, str, str]:
    """Command line options win, then the file's settings, then configuration."""

    if settings is not None:
        extra = extra if extra is not None else settings.extra_monthly_payment
        method = method or settings.preferred_method
        frequency = frequency or settings.payment_frequency
    return (
        extra if extra is not None else 0.0,
        method or config.DEFAULT_METHOD,
        frequency or config.DEFAULT_FREQUENCY,
    )


def _to_json(value: Any) -> str:
    return json.dumps(value, default=str, indent=2)


def _echo_result(result: StrategyResult) -> None:
    click.echo(
        f"Method: {result.method} ({result.payment_frequency}, "
        f"extra {result.extra_per_period}/month)"
    )
    if result.converged:
        click.echo(
            f"Debt-free in {result.total_months} months ({result.debt_free_date}), "
            f"total interest {result.total_interest_paid}"
        )
    else:
        click.echo(f"Not paid off within the horizon; interest so far {result.total_interest_paid}")
    for index, payment in enumerate(result.rolldown_payments, start=1):
        marker = "*" if payment.is_focus_debt else " "
        month = payment.payoff_month if payment.payoff_month is not None else "-"
        click.echo(
            f"{index:>3} {marker} {payment.debt_name:<24} month {month!s:>4}  "
            f"min {payment.current_payment:>10}  active {payment.active_payment:>10}"
        )


def _parse_start(value: str | None) -> date | None:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise click.BadParameter(f"expected YYYY-MM-DD, got {value!r}") from exc


common_options = [
    click.argument("plan_file", type=click.Path(exists=True, dir_okay=False, path_type=Path)),
    click.option("--extra", type=float, default=None, help="Extra payment per period"),
    click.option(
        "--frequency", type=click.Choice(PAYMENT_FREQUENCIES), default=None,
        help="Cadence of the extra payment",
    ),
    click.option("--start", "start", default=None, help="Start date (YYYY-MM-DD)"),
    click.option("--json", "as_json", is_flag=True, default=False, help="Print JSON"),
]


def _with_common_options(func):
    for option in reversed(common_options):
        func = option(func)
    return func


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Plan snowball or avalanche debt payoff."""

    config = BaseConfig()
    setup_logging(config)
    ctx.obj = config


@cli.command("plan")
@_with_common_options
@click.option("--method", type=click.Choice(PAYOFF_METHODS), default=None)
@click.option("--csv", "csv_path", type=click.Path(dir_okay=False, path_type=Path), default=None)
@click.pass_obj
def plan_command(config: BaseConfig, plan_file, extra, frequency, start, as_json, method, csv_path):
    """Simulate a payoff plan and print the rolldown order."""

    try:
        debts, settings = _load_plan_file(plan_file)
        extra, method, frequency = _resolve(
            config, settings, extra=extra, method=method, frequency=frequency
        )
        result = calculate_payoff_strategy(
            debts,
            extra,
            method,
            frequency,
            start_date=_parse_start(start),
            max_months=config.MAX_MONTHS,
        )
    except ValueError as exc:
        logger.info("Plan rejected: %s", exc)
        raise click.ClickException(str(exc)) from exc

    if csv_path is not None:
        export_rolldown_csv(result=result, output_path=csv_path)
    if as_json:
        click.echo(_to_json(asdict(result)))
    else:
        _echo_result(result)


@cli.command("compare")
@_with_common_options
@click.pass_obj
def compare_command(config: BaseConfig, plan_file, extra, frequency, start, as_json):
    """Compare snowball and avalanche for the same debts."""

    try:
        debts, settings = _load_plan_file(plan_file)
        extra, _, frequency = _resolve(config, settings, extra=extra, frequency=frequency)
        comparison = compare_payoff_methods(
            debts,
            extra,
            frequency,
            start_date=_parse_start(start),
            max_months=config.MAX_MONTHS,
        )
    except ValueError as exc:
        logger.info("Request rejected: %s", exc)
        raise click.ClickException(str(exc)) from exc

    if as_json:
        click.echo(_to_json(asdict(comparison)))
        return
    _echo_result(comparison.snowball)
    click.echo("")
    _echo_result(comparison.avalanche)
    click.echo("")
    click.echo(
        f"Avalanche saves {comparison.interest_savings} interest and "
        f"{comparison.time_savings} months; recommended: {comparison.recommended_method}"
    )


@cli.command("savings")
@_with_common_options
@click.option("--method", type=click.Choice(PAYOFF_METHODS), default=None)
@click.pass_obj
def savings_command(config: BaseConfig, plan_file, extra, frequency, start, as_json, method):
    """Show what the extra payment saves over paying minimums only."""

    try:
        debts, settings = _load_plan_file(plan_file)
        extra, method, frequency = _resolve(
            config, settings, extra=extra, method=method, frequency=frequency
        )
        comparison = compare_minimum_vs_plan(
            debts,
            extra,
            method,
            frequency,
            start_date=_parse_start(start),
            max_months=config.MAX_MONTHS,
        )
    except ValueError as exc:
        logger.info("Request rejected: %s", exc)
        raise click.ClickException(str(exc)) from exc

    if as_json:
        click.echo(_to_json(asdict(comparison)))
        return
    if comparison.months_saved is None:
        click.echo("Minimum payments alone never pay these debts off.")
        if comparison.current_plan.converged:
            click.echo(f"Current plan: debt-free in {comparison.current_plan.total_months} months")
        return
    click.echo(
        f"Minimum only: {comparison.minimum_only.total_months} months, "
        f"interest {comparison.minimum_only.total_interest_paid}"
    )
    click.echo(
        f"Current plan: {comparison.current_plan.total_months} months, "
        f"interest {comparison.current_plan.total_interest_paid}"
    )
    click.echo(
        f"Saves {comparison.years_saved} years {comparison.remaining_months_saved} months "
        f"and {comparison.interest_saved} in interest"
    )


def main() -> None:  # pragma: no cover - console entry point
    cli()
