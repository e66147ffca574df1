"""
KPI computation.

Headline return metrics over aggregate totals (total invested, current value,
total distributions) and the range-adjusted values shown in the dashboard
KPI strip.

All ratios are zero-guarded: when nothing has been invested, or a result is
not finite, the metric is 0.0.
"""

from __future__ import annotations

import math
import time
from typing import Any, Dict, Iterable, List, Optional, Tuple

from portfolio_analytics_engine import config
from portfolio_analytics_engine._logging import (
    log_analytics_operation,
    log_errors,
    log_operation,
    log_timing,
)
from portfolio_analytics_engine._vendor import _finite_or_zero, get_field
from portfolio_analytics_engine.cash_flows import summarize_transactions
from portfolio_analytics_engine.constants import coerce_range_token
from portfolio_analytics_engine.data_objects import FinancialEvent
from portfolio_analytics_engine.results import KPIBundle, PortfolioKPIs


def _ratio(numerator: float, denominator: float) -> float:
    if denominator is None or denominator <= 0:
        return 0.0
    value = numerator / denominator
    return value if math.isfinite(value) else 0.0


def net_return_pct(total_invested: float, current_value: float, total_distributions: float) -> float:
    """(current value + distributions - invested) / invested * 100."""
    return _ratio(current_value + total_distributions - total_invested, total_invested) * 100


def moic(total_invested: float, current_value: float, total_distributions: float) -> float:
    """Multiple on invested capital."""
    return _ratio(current_value + total_distributions, total_invested)


def dpi(total_invested: float, total_distributions: float) -> float:
    """Distributions to paid-in capital."""
    return _ratio(total_distributions, total_invested)


def tvpi(total_invested: float, current_value: float, total_distributions: float) -> float:
    """Total value to paid-in capital. Same formula as MOIC."""
    return moic(total_invested, current_value, total_distributions)


def range_multiplier(range_token) -> float:
    """Display multiplier for a range; ranges without an entry use 1.0."""
    token = coerce_range_token(range_token)
    return float(config.RANGE_MULTIPLIERS.get(token.value, 1.0))


def range_adjusted_values(
    total_invested: float,
    current_value: float,
    total_distributions: float,
    range_token,
) -> Tuple[float, float, float]:
    """
    Scale value gain and distributions by the range multiplier.

    Returns:
        (adjusted_current_value, adjusted_distributions, multiplier)
    """
    multiplier = range_multiplier(range_token)
    adjusted_value = total_invested + (current_value - total_invested) * multiplier
    adjusted_distributions = total_distributions * multiplier
    return adjusted_value, adjusted_distributions, multiplier


@log_operation("portfolio_kpis")
def compute_portfolio_kpis(
    total_invested: float,
    current_value: float,
    total_distributions: float,
    range_token=None,
) -> PortfolioKPIs:
    """
    KPI strip values, optionally adjusted for a display range.

    With ``range_token`` the current value and distributions are first
    range-adjusted, then every ratio is computed on the adjusted figures.
    """
    total_invested = _finite_or_zero(total_invested)
    current_value = _finite_or_zero(current_value)
    total_distributions = _finite_or_zero(total_distributions)

    multiplier = 1.0
    if range_token is not None:
        current_value, total_distributions, multiplier = range_adjusted_values(
            total_invested, current_value, total_distributions, range_token
        )

    return PortfolioKPIs(
        total_invested=total_invested,
        current_value=current_value,
        total_distributions=total_distributions,
        net_return=current_value + total_distributions - total_invested,
        net_return_pct=net_return_pct(total_invested, current_value, total_distributions),
        moic=moic(total_invested, current_value, total_distributions),
        dpi=dpi(total_invested, total_distributions),
        tvpi=tvpi(total_invested, current_value, total_distributions),
        multiplier=multiplier,
    )


@log_errors("high")
@log_timing()
def build_kpi_bundle(
    events: Iterable[FinancialEvent],
    current_value: float,
    range_token=None,
    total_invested: Optional[float] = None,
) -> KPIBundle:
    """
    Full KPI bundle for a ledger plus a current portfolio valuation.

    Args:
        events: ledger transactions (already scoped by the caller)
        current_value: current valuation of the positions
        range_token: optional display range applied to value/distributions
        total_invested: invested capital; defaults to total contributions

    Returns:
        KPIBundle with ledger totals and zero-guarded ratios
    """
    started = time.perf_counter()
    totals = summarize_transactions(events)
    invested = totals.total_contributions if total_invested is None else total_invested
    kpis = compute_portfolio_kpis(invested, current_value, totals.total_distributions, range_token)

    bundle = KPIBundle(
        net_cash_flow=totals.net_cash_flow,
        total_contributions=totals.total_contributions,
        total_distributions=totals.total_distributions,
        total_fees=totals.total_fees,
        realized_gains=totals.realized_gains,
        taxes_withheld=totals.taxes_withheld,
        moic=kpis.moic,
        dpi=kpis.dpi,
        tvpi=kpis.tvpi,
        net_return_pct=kpis.net_return_pct,
    )
    log_analytics_operation(
        "kpi_bundle_built",
        {
            "range": coerce_range_token(range_token).value if range_token is not None else None,
            "total_invested": kpis.total_invested,
            "moic": bundle.moic,
        },
        execution_time=time.perf_counter() - started,
    )
    return bundle


def aggregate_investment_totals(investments: Iterable[Any]) -> Dict[str, float]:
    """
    Sum the position fields used by the investments page KPI row.

    Each investment may be a dict or an object exposing ``amount_invested``,
    ``current_value``, ``total_distributions`` and ``income_ytd``; missing or
    non-numeric values count as 0.
    """
    totals = {
        "total_invested": 0.0,
        "current_value": 0.0,
        "total_distributions": 0.0,
        "income_ytd": 0.0,
        "count": 0,
    }
    for investment in investments:
        totals["total_invested"] += _finite_or_zero(get_field(investment, "amount_invested"))
        totals["current_value"] += _finite_or_zero(get_field(investment, "current_value"))
        totals["total_distributions"] += _finite_or_zero(get_field(investment, "total_distributions"))
        totals["income_ytd"] += _finite_or_zero(get_field(investment, "income_ytd"))
        totals["count"] += 1
    return totals


def allocation_breakdown(
    records: Iterable[Any],
    label_field: str,
    value_field: str,
    unknown_label: str = "Unknown",
) -> List[Dict[str, Any]]:
    """Value share per label, in first-seen label order."""
    values: Dict[str, float] = {}
    for record in records:
        label = str(get_field(record, label_field, unknown_label))
        values[label] = values.get(label, 0.0) + _finite_or_zero(get_field(record, value_field))

    total = sum(values.values())
    return [
        {
            "name": label,
            "value": value,
            "percentage": _ratio(value, total) * 100,
        }
        for label, value in values.items()
    ]
