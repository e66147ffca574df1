"""
Transaction Classifier & Cash-Flow Aggregator

Pure computation over FinancialEvent collections. No I/O; callers pass the
ledger snapshot they want analysed.

Key functions:
- classify(): partition events into inflow/outflow and category buckets
- summarize_transactions(): headline ledger totals (net cash flow, fees, ...)
- realized_gains(): gains on exited positions (positions with a sale)
- aggregate_monthly(): gap-free monthly rollup with running balance
- monthly_distributions(): income vs. return-of-capital per month
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

import pandas as pd

from portfolio_analytics_engine import config
from portfolio_analytics_engine._logging import log_errors, log_operation, log_timing
from portfolio_analytics_engine.constants import (
    FLOW_DIRECTION,
    MONTH_ABBREVIATIONS,
    TRANSACTION_CATEGORY,
    FlowDirection,
    RangeToken,
    TransactionCategory,
    TransactionType,
    coerce_range_token,
    coerce_transaction_type,
)
from portfolio_analytics_engine.data_objects import (
    DateWindow,
    FinancialEvent,
    _coerce_datetime,
    utc_now,
)
from portfolio_analytics_engine.results import MonthlyBucket, MonthlyDistribution, TransactionTotals

EVENT_FRAME_COLUMNS = [
    "id",
    "investment_id",
    "transaction_type",
    "status",
    "amount",
    "abs_amount",
    "direction",
    "category",
    "occurred_at",
    "month",
]


@dataclass
class ClassifiedTransactions:
    """Events partitioned by direction and by sub-category.

    ``inflows``/``outflows``/``adjustments`` partition the input; the category
    lists are views over the same events.
    """

    inflows: List[FinancialEvent] = field(default_factory=list)
    outflows: List[FinancialEvent] = field(default_factory=list)
    adjustments: List[FinancialEvent] = field(default_factory=list)
    contributions: List[FinancialEvent] = field(default_factory=list)
    distributions: List[FinancialEvent] = field(default_factory=list)
    fees: List[FinancialEvent] = field(default_factory=list)
    taxes: List[FinancialEvent] = field(default_factory=list)

    @property
    def total_inflows(self) -> float:
        return _abs_sum(self.inflows)

    @property
    def total_outflows(self) -> float:
        return _abs_sum(self.outflows)

    @property
    def total_contributions(self) -> float:
        return _abs_sum(self.contributions)

    @property
    def total_distributions(self) -> float:
        return _abs_sum(self.distributions)

    @property
    def total_fees(self) -> float:
        return _abs_sum(self.fees)

    @property
    def taxes_withheld(self) -> float:
        return taxes_withheld(self.taxes)


def _abs_sum(events: Iterable[FinancialEvent]) -> float:
    return float(sum(event.abs_amount for event in events))


def flow_direction(transaction_type) -> FlowDirection:
    return FLOW_DIRECTION[coerce_transaction_type(transaction_type)]


def transaction_category(transaction_type) -> TransactionCategory:
    return TRANSACTION_CATEGORY[coerce_transaction_type(transaction_type)]


def classify(events: Iterable[FinancialEvent]) -> ClassifiedTransactions:
    """Partition ``events`` by flow direction and category."""
    result = ClassifiedTransactions()
    direction_buckets = {
        FlowDirection.INFLOW: result.inflows,
        FlowDirection.OUTFLOW: result.outflows,
        FlowDirection.NEUTRAL: result.adjustments,
    }
    category_buckets = {
        TransactionCategory.CONTRIBUTION: result.contributions,
        TransactionCategory.DISTRIBUTION: result.distributions,
        TransactionCategory.FEE: result.fees,
        TransactionCategory.TAX: result.taxes,
    }

    for event in events:
        direction_buckets[FLOW_DIRECTION[event.transaction_type]].append(event)
        bucket = category_buckets.get(TRANSACTION_CATEGORY[event.transaction_type])
        if bucket is not None:
            bucket.append(event)

    return result


def taxes_withheld(events: Iterable[FinancialEvent]) -> float:
    """Net tax withheld: withholdings minus refunds (absolute amounts)."""
    total = 0.0
    for event in events:
        if event.transaction_type == TransactionType.TAX_WITHHOLDING:
            total += event.abs_amount
        elif event.transaction_type == TransactionType.TAX_REFUND:
            total -= event.abs_amount
    return total


def realized_gains_by_investment(events: Iterable[FinancialEvent]) -> Dict[str, float]:
    """
    Realized gain per exited investment.

    An investment is exited when it has at least one ``sale_proceeds`` event.
    Its gain is distributions + sale proceeds - contributions, counting only
    its own events. Investments without a sale are omitted.
    """
    events = list(events)
    gains: Dict[str, float] = dict.fromkeys(
        (event.investment_id for event in events if event.transaction_type == TransactionType.SALE_PROCEEDS),
        0.0,
    )
    for event in events:
        if event.investment_id not in gains:
            continue
        category = TRANSACTION_CATEGORY[event.transaction_type]
        if category in (TransactionCategory.DISTRIBUTION, TransactionCategory.SALE):
            gains[event.investment_id] += event.abs_amount
        elif category == TransactionCategory.CONTRIBUTION:
            gains[event.investment_id] -= event.abs_amount
    return gains


def realized_gains(events: Iterable[FinancialEvent]) -> float:
    return float(sum(realized_gains_by_investment(events).values()))


@log_operation("transaction_summary")
def summarize_transactions(events: Iterable[FinancialEvent]) -> TransactionTotals:
    """Headline ledger totals for the transactions page KPI row."""
    events = list(events)
    classified = classify(events)
    total_inflows = classified.total_inflows
    total_outflows = classified.total_outflows
    return TransactionTotals(
        total_inflows=total_inflows,
        total_outflows=total_outflows,
        net_cash_flow=total_inflows - total_outflows,
        total_contributions=classified.total_contributions,
        total_distributions=classified.total_distributions,
        total_fees=classified.total_fees,
        realized_gains=realized_gains(events),
        taxes_withheld=classified.taxes_withheld,
    )


def _month_key(moment: datetime) -> str:
    return f"{moment.year:04d}-{moment.month:02d}"


def _month_label(moment: datetime) -> str:
    return f"{MONTH_ABBREVIATIONS[moment.month - 1]} {moment.year}"


def events_to_frame(events: Iterable[FinancialEvent]) -> pd.DataFrame:
    """Tabular view of events with direction/category/month columns."""
    rows = [
        (
            event.id,
            event.investment_id,
            event.transaction_type.value,
            event.status.value,
            event.amount,
            event.abs_amount,
            FLOW_DIRECTION[event.transaction_type].value,
            TRANSACTION_CATEGORY[event.transaction_type].value,
            event.occurred_at,
            _month_key(event.occurred_at),
        )
        for event in events
    ]
    return pd.DataFrame(rows, columns=EVENT_FRAME_COLUMNS)


def month_sequence(window: DateWindow) -> List[datetime]:
    """First day of every calendar month from window.start to window.end, inclusive."""
    first = datetime(window.start.year, window.start.month, 1)
    last = datetime(window.end.year, window.end.month, 1)
    if first > last:
        return []
    return [ts.to_pydatetime() for ts in pd.date_range(first, last, freq="MS")]


@log_errors("medium")
@log_operation("monthly_cash_flow_rollup")
@log_timing()
def aggregate_monthly(events: Iterable[FinancialEvent], window: DateWindow) -> List[MonthlyBucket]:
    """
    One bucket per calendar month spanning ``window``, including empty months.

    Events are assigned by calendar month of ``occurred_at``; events in months
    outside the window are ignored. ``running_balance`` is a left fold of
    ``net_flow`` starting at zero, in chronological month order.
    """
    months = month_sequence(window)
    keys = [_month_key(month) for month in months]

    frame = events_to_frame(events)
    frame = frame[frame["month"].isin(keys)]
    sums: Dict = {}
    counts: Dict = {}
    if not frame.empty:
        sums = frame.groupby(["month", "direction"])["abs_amount"].sum().to_dict()
        counts = frame.groupby("month").size().to_dict()

    buckets: List[MonthlyBucket] = []
    running_balance = 0.0
    for month, key in zip(months, keys):
        inflow = float(sums.get((key, FlowDirection.INFLOW.value), 0.0))
        outflow = float(sums.get((key, FlowDirection.OUTFLOW.value), 0.0))
        net_flow = inflow - outflow
        running_balance += net_flow
        buckets.append(
            MonthlyBucket(
                month=key,
                period=_month_label(month),
                month_start=month,
                inflow=inflow,
                outflow=outflow,
                net_flow=net_flow,
                running_balance=running_balance,
                event_count=int(counts.get(key, 0)),
            )
        )
    return buckets


def monthly_distributions(events: Iterable[FinancialEvent], window: DateWindow) -> List[MonthlyDistribution]:
    """Per-month ordinary income vs. return of capital, one row per month of ``window``."""
    rows = {
        _month_key(month): MonthlyDistribution(month=_month_key(month))
        for month in month_sequence(window)
    }
    for event in events:
        row = rows.get(_month_key(event.occurred_at))
        if row is None:
            continue
        if event.transaction_type == TransactionType.DISTRIBUTION_INCOME:
            row.ordinary_income += event.abs_amount
        elif event.transaction_type == TransactionType.RETURN_OF_CAPITAL:
            row.return_of_capital += event.abs_amount
        else:
            continue
        row.total = row.ordinary_income + row.return_of_capital
    return list(rows.values())


def select_distribution_months(
    rows: Sequence[MonthlyDistribution],
    range_token,
    anchor: Optional[datetime] = None,
) -> List[MonthlyDistribution]:
    """
    Trim a chronological distribution table to the selected range.

    ``all`` keeps everything, ``ytd`` keeps the anchor year's months up to the
    anchor month, fixed ranges keep the last 1/3/6/12 rows.
    """
    token = coerce_range_token(range_token)
    rows = list(rows)
    if not rows or token == RangeToken.ALL:
        return rows

    if token == RangeToken.YTD:
        anchor = _coerce_datetime(anchor, "anchor") if anchor is not None else utc_now()
        first_key = f"{anchor.year:04d}-01"
        last_key = _month_key(anchor)
        return [row for row in rows if first_key <= row.month <= last_key]

    count = config.DISTRIBUTION_MONTHS_BY_RANGE.get(token.value)
    if not count:
        return rows
    return rows[-count:]
