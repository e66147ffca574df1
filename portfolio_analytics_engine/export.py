"""CSV and JSON export of KPI bundles, ledger totals and monthly cash-flow rollups.

CSV output is locale-free: ``.`` decimal separator, no thousands separators, ``\\n``
line endings, fixed header row. Float formatting comes from
``config.EXPORT_DEFAULTS``.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, Optional

import pandas as pd

from portfolio_analytics_engine import config
from portfolio_analytics_engine._vendor import make_json_safe
from portfolio_analytics_engine.results import KPIBundle, MonthlyBucket, TransactionTotals

KPI_EXPORT_KEYS = {
    "netCashFlow": "net_cash_flow",
    "totalContributions": "total_contributions",
    "totalDistributions": "total_distributions",
    "totalFees": "total_fees",
    "realizedGains": "realized_gains",
    "taxesWithheld": "taxes_withheld",
    "moic": "moic",
    "dpi": "dpi",
    "tvpi": "tvpi",
    "netReturnPct": "net_return_pct",
}

TOTALS_EXPORT_KEYS = {
    "totalInflows": "total_inflows",
    "totalOutflows": "total_outflows",
    "netCashFlow": "net_cash_flow",
    "totalContributions": "total_contributions",
    "totalDistributions": "total_distributions",
    "totalFees": "total_fees",
    "realizedGains": "realized_gains",
    "taxesWithheld": "taxes_withheld",
}

MONTHLY_EXPORT_COLUMNS = ["month", "period", "inflow", "outflow", "netFlow", "runningBalance"]


def _render(frame: pd.DataFrame) -> str:
    options = config.EXPORT_DEFAULTS
    return frame.to_csv(
        index=False,
        float_format=options.get("float_format", "%.2f"),
        lineterminator=options.get("line_terminator", "\n"),
    )


def _metric_frame(values: Dict[str, float], keys: Dict[str, str]) -> pd.DataFrame:
    rows = [(label, float(values[attr])) for label, attr in keys.items()]
    return pd.DataFrame(rows, columns=["metric", "value"])


def kpi_bundle_to_csv(bundle: KPIBundle) -> str:
    """``metric,value`` rows in the fixed KPI order."""
    return _render(_metric_frame(bundle.to_dict(), KPI_EXPORT_KEYS))


def transaction_totals_to_csv(totals: TransactionTotals) -> str:
    return _render(_metric_frame(totals.to_dict(), TOTALS_EXPORT_KEYS))


def monthly_buckets_to_csv(buckets: Iterable[MonthlyBucket]) -> str:
    """One row per month; empty input still produces the header row."""
    rows = [
        (
            bucket.month,
            bucket.period,
            float(bucket.inflow),
            float(bucket.outflow),
            float(bucket.net_flow),
            float(bucket.running_balance),
        )
        for bucket in buckets
    ]
    return _render(pd.DataFrame(rows, columns=MONTHLY_EXPORT_COLUMNS))


def to_json(obj: Any, indent: Optional[int] = None) -> str:
    """
    JSON text for any engine output (result objects, events, lists and dicts of them).

    Datetimes become ISO strings, enums their values, non-finite floats ``null``.
    """
    return json.dumps(make_json_safe(obj), indent=indent)
