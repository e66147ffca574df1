"""Public API for portfolio_analytics_engine."""

from portfolio_analytics_engine.cash_flows import (
    ClassifiedTransactions,
    aggregate_monthly,
    classify,
    events_to_frame,
    monthly_distributions,
    realized_gains,
    realized_gains_by_investment,
    select_distribution_months,
    summarize_transactions,
)
from portfolio_analytics_engine.constants import (
    DerivedStatus,
    RangeToken,
    TransactionStatus,
    TransactionType,
)
from portfolio_analytics_engine.data_objects import (
    DateWindow,
    FinancialEvent,
    FundingRecord,
    PerformanceSnapshot,
)
from portfolio_analytics_engine.date_windows import calculate_window, transaction_date_range
from portfolio_analytics_engine.export import (
    kpi_bundle_to_csv,
    monthly_buckets_to_csv,
    to_json,
    transaction_totals_to_csv,
)
from portfolio_analytics_engine.filters import (
    FilterCriteria,
    GroupSpec,
    NumericRange,
    SortSpec,
    filter_records,
    group_records,
    group_with_headers,
    sort_records,
)
from portfolio_analytics_engine.kpis import (
    aggregate_investment_totals,
    allocation_breakdown,
    build_kpi_bundle,
    compute_portfolio_kpis,
)
from portfolio_analytics_engine.performance_series import select_series
from portfolio_analytics_engine.results import (
    GroupHeader,
    KPIBundle,
    MonthlyBucket,
    MonthlyDistribution,
    PortfolioKPIs,
    TransactionTotals,
)
from portfolio_analytics_engine.status import (
    derive_offering_status,
    derive_status,
    get_status_info,
)
from portfolio_analytics_engine.view_config import ViewConfig, apply_view, load_view_config

__all__ = [
    "ClassifiedTransactions",
    "aggregate_monthly",
    "classify",
    "events_to_frame",
    "monthly_distributions",
    "realized_gains",
    "realized_gains_by_investment",
    "select_distribution_months",
    "summarize_transactions",
    "DerivedStatus",
    "RangeToken",
    "TransactionStatus",
    "TransactionType",
    "DateWindow",
    "FinancialEvent",
    "FundingRecord",
    "PerformanceSnapshot",
    "calculate_window",
    "transaction_date_range",
    "kpi_bundle_to_csv",
    "monthly_buckets_to_csv",
    "transaction_totals_to_csv",
    "to_json",
    "FilterCriteria",
    "GroupSpec",
    "NumericRange",
    "SortSpec",
    "filter_records",
    "group_records",
    "group_with_headers",
    "sort_records",
    "aggregate_investment_totals",
    "allocation_breakdown",
    "build_kpi_bundle",
    "compute_portfolio_kpis",
    "select_series",
    "GroupHeader",
    "KPIBundle",
    "MonthlyBucket",
    "MonthlyDistribution",
    "PortfolioKPIs",
    "TransactionTotals",
    "derive_offering_status",
    "derive_status",
    "get_status_info",
    "ViewConfig",
    "apply_view",
    "load_view_config",
]
