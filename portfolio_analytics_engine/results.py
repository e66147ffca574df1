"""Result objects returned by the cash-flow, KPI and grouping engines."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict


@dataclass
class TransactionTotals:
    """Classifier totals for a set of transactions. All values are absolute
    sums except ``taxes_withheld`` (withholding minus refunds)."""

    total_inflows: float = 0.0
    total_outflows: float = 0.0
    net_cash_flow: float = 0.0
    total_contributions: float = 0.0
    total_distributions: float = 0.0
    total_fees: float = 0.0
    realized_gains: float = 0.0
    taxes_withheld: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {
            "total_inflows": self.total_inflows,
            "total_outflows": self.total_outflows,
            "net_cash_flow": self.net_cash_flow,
            "total_contributions": self.total_contributions,
            "total_distributions": self.total_distributions,
            "total_fees": self.total_fees,
            "realized_gains": self.realized_gains,
            "taxes_withheld": self.taxes_withheld,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "TransactionTotals":
        return cls(
            total_inflows=d.get("total_inflows", 0.0),
            total_outflows=d.get("total_outflows", 0.0),
            net_cash_flow=d.get("net_cash_flow", 0.0),
            total_contributions=d.get("total_contributions", 0.0),
            total_distributions=d.get("total_distributions", 0.0),
            total_fees=d.get("total_fees", 0.0),
            realized_gains=d.get("realized_gains", 0.0),
            taxes_withheld=d.get("taxes_withheld", 0.0),
        )


@dataclass
class KPIBundle:
    """Headline portfolio metrics.

    ``moic`` and ``tvpi`` share one formula and are always equal; both are
    kept because the dashboard labels them separately.
    """

    net_cash_flow: float
    total_contributions: float
    total_distributions: float
    total_fees: float
    realized_gains: float
    taxes_withheld: float
    moic: float
    dpi: float
    tvpi: float
    net_return_pct: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "net_cash_flow": self.net_cash_flow,
            "total_contributions": self.total_contributions,
            "total_distributions": self.total_distributions,
            "total_fees": self.total_fees,
            "realized_gains": self.realized_gains,
            "taxes_withheld": self.taxes_withheld,
            "moic": self.moic,
            "dpi": self.dpi,
            "tvpi": self.tvpi,
            "net_return_pct": self.net_return_pct,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "KPIBundle":
        return cls(
            net_cash_flow=d.get("net_cash_flow", 0.0),
            total_contributions=d.get("total_contributions", 0.0),
            total_distributions=d.get("total_distributions", 0.0),
            total_fees=d.get("total_fees", 0.0),
            realized_gains=d.get("realized_gains", 0.0),
            taxes_withheld=d.get("taxes_withheld", 0.0),
            moic=d.get("moic", 0.0),
            dpi=d.get("dpi", 0.0),
            tvpi=d.get("tvpi", 0.0),
            net_return_pct=d.get("net_return_pct", 0.0),
        )


@dataclass
class PortfolioKPIs:
    """Range-scoped KPI strip values computed from aggregate totals."""

    total_invested: float
    current_value: float
    total_distributions: float
    net_return: float
    net_return_pct: float
    moic: float
    dpi: float
    tvpi: float
    multiplier: float = 1.0

    def to_dict(self) -> Dict[str, float]:
        return {
            "total_invested": self.total_invested,
            "current_value": self.current_value,
            "total_distributions": self.total_distributions,
            "net_return": self.net_return,
            "net_return_pct": self.net_return_pct,
            "moic": self.moic,
            "dpi": self.dpi,
            "tvpi": self.tvpi,
            "multiplier": self.multiplier,
        }


@dataclass
class MonthlyBucket:
    """One calendar month of cash flow. ``running_balance`` accumulates
    ``net_flow`` over all preceding buckets of the same rollup."""

    month: str
    period: str
    month_start: datetime
    inflow: float = 0.0
    outflow: float = 0.0
    net_flow: float = 0.0
    running_balance: float = 0.0
    event_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month": self.month,
            "period": self.period,
            "month_start": self.month_start.isoformat(),
            "inflow": self.inflow,
            "outflow": self.outflow,
            "net_flow": self.net_flow,
            "running_balance": self.running_balance,
            "event_count": self.event_count,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "MonthlyBucket":
        month_start = d.get("month_start")
        if isinstance(month_start, str):
            month_start = datetime.fromisoformat(month_start)
        return cls(
            month=d.get("month", ""),
            period=d.get("period", ""),
            month_start=month_start,
            inflow=d.get("inflow", 0.0),
            outflow=d.get("outflow", 0.0),
            net_flow=d.get("net_flow", 0.0),
            running_balance=d.get("running_balance", 0.0),
            event_count=d.get("event_count", 0),
        )


@dataclass
class MonthlyDistribution:
    month: str
    ordinary_income: float = 0.0
    return_of_capital: float = 0.0
    total: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month": self.month,
            "ordinary_income": self.ordinary_income,
            "return_of_capital": self.return_of_capital,
            "total": self.total,
        }


@dataclass
class GroupHeader:
    """Header row emitted before each group in a flattened ledger view."""

    group_key: str
    group_count: int
    group_total: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_group_header": True,
            "group_key": self.group_key,
            "group_count": self.group_count,
            "group_total": self.group_total,
        }
