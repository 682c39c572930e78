"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

from .services.debt_inputs import PAYMENT_FREQUENCIES, PAYOFF_METHODS

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "debtplanner"
    LOG_FILENAME = "debtplanner.log"
    DEFAULT_MAX_MONTHS = 600

    def __init__(self) -> None:
        self.DEV_MODE = _env_bool("DEBTPLANNER_DEV_MODE", default=True)
        self.DATA_DIR = self._resolve_data_dir()
        self.MAX_MONTHS = _env_int("DEBTPLANNER_MAX_MONTHS", self.DEFAULT_MAX_MONTHS)
        self.DEFAULT_METHOD = os.getenv("DEBTPLANNER_DEFAULT_METHOD", "avalanche")
        self.DEFAULT_FREQUENCY = os.getenv("DEBTPLANNER_DEFAULT_FREQUENCY", "monthly")
        if self.MAX_MONTHS < 1:
            raise ValueError("DEBTPLANNER_MAX_MONTHS must be at least 1.")
        if self.DEFAULT_METHOD not in PAYOFF_METHODS:
            raise ValueError(
                f"DEBTPLANNER_DEFAULT_METHOD must be one of {', '.join(PAYOFF_METHODS)}."
            )
        if self.DEFAULT_FREQUENCY not in PAYMENT_FREQUENCIES:
            raise ValueError(
                f"DEBTPLANNER_DEFAULT_FREQUENCY must be one of {', '.join(PAYMENT_FREQUENCIES)}."
            )

    def _resolve_data_dir(self) -> Path:
        """Return the directory where logs and exports live."""

        data_root = os.getenv("DEBTPLANNER_DATA_DIR", "instance")
        base_path = Path(data_root).expanduser()
        try:
            path = base_path.resolve()
            path.mkdir(parents=True, exist_ok=True)
            return path
        except PermissionError:
            # Fall back to user-local storage when the configured location is read-only.
            fallback_path = Path.home() / f".{self.APP_NAME}"
            fallback_path.mkdir(parents=True, exist_ok=True)
            return fallback_path.resolve()


class DevConfig(BaseConfig):
    """Development configuration."""

    DEBUG = True
    TESTING = False
