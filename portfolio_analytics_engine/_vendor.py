"""Small helpers for serialization/coercion of engine outputs."""

from __future__ import annotations

import dataclasses
import math
from datetime import date, datetime
from enum import Enum
from typing import Any

import numpy as np
import pandas as pd


def make_json_safe(obj: Any) -> Any:
    """Recursively convert values into JSON-serializable forms."""
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        to_dict = getattr(obj, "to_dict", None)
        payload = to_dict() if callable(to_dict) else dataclasses.asdict(obj)
        return make_json_safe(payload)

    if isinstance(obj, dict):
        out = {}
        for key, value in obj.items():
            if isinstance(key, Enum):
                safe_key = key.value
            elif isinstance(key, (pd.Timestamp, datetime, date)):
                safe_key = key.isoformat()
            elif isinstance(key, (int, float, str, bool, type(None))):
                safe_key = key
            else:
                safe_key = str(key)
            out[safe_key] = make_json_safe(value)
        return out

    if isinstance(obj, (list, tuple)):
        return [make_json_safe(item) for item in obj]

    if isinstance(obj, (set, frozenset)):
        return sorted(make_json_safe(item) for item in obj)

    if isinstance(obj, Enum):
        return obj.value

    if isinstance(obj, pd.DataFrame):
        return [make_json_safe(row) for row in obj.to_dict("records")]

    if isinstance(obj, pd.Series):
        return {str(k): make_json_safe(v) for k, v in obj.to_dict().items()}

    if isinstance(obj, np.ndarray):
        return [make_json_safe(item) for item in obj.tolist()]

    if isinstance(obj, np.integer):
        return int(obj)

    if isinstance(obj, np.floating):
        obj = float(obj)

    if isinstance(obj, np.bool_):
        return bool(obj)

    if isinstance(obj, (pd.Timestamp, datetime, date)):
        return obj.isoformat()

    if isinstance(obj, float):
        return obj if math.isfinite(obj) else None

    if isinstance(obj, (int, str, bool, type(None))):
        return obj

    return str(obj)


def _to_float(value: Any) -> float | None:
    try:
        if value is None:
            return None
        return float(value)
    except (TypeError, ValueError):
        return None


def _finite_or_zero(value: Any) -> float:
    """Coerce to a finite float; None/NaN/inf/non-numeric become 0.0."""
    numeric = _to_float(value)
    if numeric is None or not math.isfinite(numeric):
        return 0.0
    return numeric


def get_field(record: Any, path: str, default: Any = None) -> Any:
    """Read a dotted ``path`` from nested dicts and/or attributes.

    ``get_field(investment, "properties.city")`` works for both
    ``{"properties": {"city": ...}}`` and objects with a ``properties`` attribute.
    Missing segments and ``None`` values yield ``default``.
    """
    current = record
    for part in path.split("."):
        if current is None:
            return default
        if isinstance(current, dict):
            current = current.get(part)
        else:
            current = getattr(current, part, None)
    return default if current is None else current
