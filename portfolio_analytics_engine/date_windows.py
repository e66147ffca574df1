"""
Date-range window calculator.

Turns a symbolic range selector (``1m``, ``3m``, ``6m``, ``1y``, ``ytd``,
``all``, ``today``) plus an anchor into a concrete DateWindow.

Contract notes:
- ``start`` is never earlier than the first activity date.
- ``end`` is ``anchor + 1 day`` so a point exactly on the anchor is inside
  under the inclusive test ``start <= t <= end``.
- Unknown tokens/presets raise ValueError; they are caller defects.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from portfolio_analytics_engine import config
from portfolio_analytics_engine.constants import (
    RangeToken,
    TransactionDatePreset,
    coerce_range_token,
)
from portfolio_analytics_engine.data_objects import (
    DateWindow,
    _coerce_datetime,
    _coerce_optional_datetime,
    utc_now,
)


def _midnight(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def _end_of_day(moment: datetime) -> datetime:
    return _midnight(moment) + timedelta(days=1) - timedelta(microseconds=1)


def default_first_activity(anchor: datetime) -> datetime:
    """Jan 1 of the year before the anchor's year."""
    return datetime(anchor.year - 1, 1, 1)


def range_start(range_token, anchor: datetime, first_activity: datetime) -> datetime:
    """Unclamped window start for a range token."""
    token = coerce_range_token(range_token)

    if token == RangeToken.TODAY:
        return _midnight(anchor)
    if token == RangeToken.YTD:
        return _midnight(anchor).replace(month=1, day=1)
    if token == RangeToken.ALL:
        return first_activity

    lookback_days = config.RANGE_LOOKBACK_DAYS[token.value]
    return anchor - timedelta(days=lookback_days)


def calculate_window(
    range_token,
    anchor,
    first_activity=None,
) -> DateWindow:
    """
    Compute the concrete window for ``range_token`` anchored at ``anchor``.

    Args:
        range_token: RangeToken or its string value
        anchor: reference moment (usually "now" or the latest data point)
        first_activity: earliest data point; defaults to Jan 1 of the year
            before the anchor's year

    Returns:
        DateWindow with start clamped to ``first_activity`` and end = anchor + 1 day.
    """
    token = coerce_range_token(range_token)
    anchor = _coerce_datetime(anchor, "anchor")
    first = _coerce_optional_datetime(first_activity, "first_activity") or default_first_activity(anchor)

    start = range_start(token, anchor, first)
    if start < first:
        start = first

    return DateWindow(start=start, end=anchor + timedelta(days=1))


def transaction_date_range(
    preset,
    now: Optional[datetime] = None,
    custom_start=None,
    custom_end=None,
) -> DateWindow:
    """
    Window for the transaction ledger's date presets.

    ``last_30``/``last_90`` count back from today's midnight; ``ytd`` starts on
    Jan 1; ``last_year`` spans the previous calendar year; ``custom`` uses the
    supplied bounds, defaulting to today. Preset windows end at the last
    instant of their final day.
    """
    try:
        preset = TransactionDatePreset(preset)
    except ValueError:
        raise ValueError(f"Unknown transaction date preset: {preset!r}") from None

    now = _coerce_datetime(now, "now") if now is not None else utc_now()
    today = _midnight(now)
    today_end = _end_of_day(now)

    if preset == TransactionDatePreset.LAST_30:
        return DateWindow(start=today - timedelta(days=30), end=today_end)
    if preset == TransactionDatePreset.LAST_90:
        return DateWindow(start=today - timedelta(days=90), end=today_end)
    if preset == TransactionDatePreset.YTD:
        return DateWindow(start=today.replace(month=1, day=1), end=today_end)
    if preset == TransactionDatePreset.LAST_YEAR:
        last_year = today.year - 1
        return DateWindow(
            start=today.replace(year=last_year, month=1, day=1),
            end=_end_of_day(today.replace(year=last_year, month=12, day=31)),
        )

    start = _coerce_optional_datetime(custom_start, "custom_start") or today
    end = _coerce_optional_datetime(custom_end, "custom_end") or today_end
    return DateWindow(start=start, end=end)
