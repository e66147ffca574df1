"""Standalone-safe configuration surface for portfolio_analytics_engine."""

from __future__ import annotations

import os
from typing import Any


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


_DEFAULTS: dict[str, Any] = {
    "STATUS_THRESHOLDS": {
        "funded_progress_pct": _env_float("STATUS_FUNDED_PROGRESS_PCT", 100.0),
        "closing_soon_progress_pct": _env_float("STATUS_CLOSING_SOON_PROGRESS_PCT", 80.0),
        "closing_soon_days": _env_int("STATUS_CLOSING_SOON_DAYS", 7),
        "nearly_funded_progress_pct": _env_float("STATUS_NEARLY_FUNDED_PROGRESS_PCT", 90.0),
    },
    # Fixed lookbacks in days; ytd/all/today are calendar-anchored.
    "RANGE_LOOKBACK_DAYS": {
        "1m": 30,
        "3m": 90,
        "6m": 182,
        "1y": 365,
    },
    # Display approximation of how much of the period's value/distributions
    # has accrued. Not derived from event history.
    "RANGE_MULTIPLIERS": {
        "1m": 0.1,
        "3m": 0.25,
        "6m": 0.5,
        "1y": 0.8,
        "ytd": 0.7,
        "all": 1.0,
    },
    "DISTRIBUTION_MONTHS_BY_RANGE": {
        "1m": 1,
        "3m": 3,
        "6m": 6,
        "1y": 12,
    },
    "RISK_BUCKET_THRESHOLDS": {
        "low_max": _env_float("RISK_BUCKET_LOW_MAX", 3.0),
        "medium_max": _env_float("RISK_BUCKET_MEDIUM_MAX", 6.0),
    },
    "EXPORT_DEFAULTS": {
        "float_format": os.getenv("ANALYTICS_EXPORT_FLOAT_FORMAT", "%.2f"),
        "line_terminator": "\n",
    },
    "SLOW_OPERATION_SECONDS": _env_float("ANALYTICS_SLOW_OPERATION_SECONDS", 0.5),
}


try:  # pragma: no cover - project-level overrides
    import settings as _settings  # type: ignore

    for key in list(_DEFAULTS.keys()):
        if hasattr(_settings, key):
            _DEFAULTS[key] = getattr(_settings, key)
except ImportError:
    pass


STATUS_THRESHOLDS = _DEFAULTS["STATUS_THRESHOLDS"]
RANGE_LOOKBACK_DAYS = _DEFAULTS["RANGE_LOOKBACK_DAYS"]
RANGE_MULTIPLIERS = _DEFAULTS["RANGE_MULTIPLIERS"]
DISTRIBUTION_MONTHS_BY_RANGE = _DEFAULTS["DISTRIBUTION_MONTHS_BY_RANGE"]
RISK_BUCKET_THRESHOLDS = _DEFAULTS["RISK_BUCKET_THRESHOLDS"]
EXPORT_DEFAULTS = _DEFAULTS["EXPORT_DEFAULTS"]
SLOW_OPERATION_SECONDS = float(_DEFAULTS["SLOW_OPERATION_SECONDS"])


def configure(**overrides: Any) -> None:
    """Programmatically override package configuration values."""
    globals_dict = globals()
    for key, value in overrides.items():
        if key not in _DEFAULTS:
            raise KeyError(f"Unknown config key: {key}")
        globals_dict[key] = value
