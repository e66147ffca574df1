"""Performance series selection for the dashboard value chart.

Called by:
- Dashboard performance panels that need the points for a selected range.

Contract notes:
- Input order is not trusted; points are sorted chronologically first.
- Degrades through three tiers (now-anchored window, latest-point-anchored
  window, all-time window) and only returns an empty list for empty input.
- Points with a non-finite ``portfolio_value`` are never returned.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional

import numpy as np
import pandas as pd

from portfolio_analytics_engine._logging import analytics_logger, log_operation
from portfolio_analytics_engine.constants import RangeToken, coerce_range_token
from portfolio_analytics_engine.data_objects import (
    DateWindow,
    PerformanceSnapshot,
    _coerce_datetime,
    utc_now,
)
from portfolio_analytics_engine.date_windows import calculate_window


def _within(points: List[PerformanceSnapshot], window: DateWindow) -> List[PerformanceSnapshot]:
    return [
        point
        for point in points
        if window.contains(point.date) and np.isfinite(point.portfolio_value)
    ]


@log_operation("performance_series_selection")
def select_series(
    all_points: Iterable[PerformanceSnapshot],
    range_token,
    now: Optional[datetime] = None,
) -> List[PerformanceSnapshot]:
    """
    Select the points of ``all_points`` that belong to ``range_token``.

    Tiers:
        1. window anchored at ``now``
        2. same range anchored at the latest point (skipped for ``all``)
        3. ``all`` anchored at the latest point

    Debug pointer:
    - The tier that produced the result is logged at debug level.
    """
    token = coerce_range_token(range_token)
    ordered = sorted(all_points, key=lambda point: point.date)
    if not ordered:
        return []

    first_activity = ordered[0].date
    latest = ordered[-1].date
    now = _coerce_datetime(now, "now") if now is not None else utc_now()

    window = calculate_window(token, now, first_activity)
    selected = _within(ordered, window)
    if selected:
        analytics_logger.debug("series %s: %d points in now-anchored window", token.value, len(selected))
        return selected

    if token != RangeToken.ALL:
        window = calculate_window(token, latest, first_activity)
        selected = _within(ordered, window)
        if selected:
            analytics_logger.debug(
                "series %s: re-anchored at latest point %s (%d points)",
                token.value,
                latest.isoformat(),
                len(selected),
            )
            return selected

    window = calculate_window(RangeToken.ALL, latest, first_activity)
    selected = _within(ordered, window)
    analytics_logger.debug(
        "series %s: fell back to all-time window (%d points)", token.value, len(selected)
    )
    return selected


def series_to_frame(points: Iterable[PerformanceSnapshot]) -> pd.DataFrame:
    """Date-indexed DataFrame view of a snapshot series (chart/CSV consumers)."""
    columns = ["date", "portfolio_value", "net_return_pct", "net_contribution"]
    rows = [
        (point.date, point.portfolio_value, point.net_return_pct, point.net_contribution)
        for point in points
    ]
    frame = pd.DataFrame(rows, columns=columns)
    return frame.set_index("date").sort_index()
