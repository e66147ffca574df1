"""
Core Constants Module

Centralized definitions for transaction types, offering statuses, range tokens
and the category tables the classifier relies on. Every table keyed by an enum
is checked for full coverage at import time, so adding a new member without
classifying it fails immediately instead of silently dropping events.
"""

from enum import Enum


# Transaction Types
# =================

class TransactionType(str, Enum):
    CONTRIBUTION = "contribution"
    CAPITAL_CALL = "capital_call"
    DISTRIBUTION_INCOME = "distribution_income"
    RETURN_OF_CAPITAL = "return_of_capital"
    WITHDRAWAL = "withdrawal"
    FEE_MGMT = "fee_mgmt"
    FEE_TXN = "fee_txn"
    DIVIDEND = "dividend"
    INTEREST = "interest"
    SALE_PROCEEDS = "sale_proceeds"
    TAX_WITHHOLDING = "tax_withholding"
    TAX_REFUND = "tax_refund"
    ADJUSTMENT = "adjustment"


class TransactionStatus(str, Enum):
    POSTED = "posted"
    PENDING = "pending"
    FAILED = "failed"
    REVERSED = "reversed"


class FlowDirection(str, Enum):
    INFLOW = "inflow"
    OUTFLOW = "outflow"
    NEUTRAL = "neutral"


class TransactionCategory(str, Enum):
    CONTRIBUTION = "contribution"
    DISTRIBUTION = "distribution"
    FEE = "fee"
    TAX = "tax"
    INCOME = "income"
    SALE = "sale"
    WITHDRAWAL = "withdrawal"
    ADJUSTMENT = "adjustment"


# Cash direction per transaction type (money received vs. money paid out).
# Adjustments carry no direction and stay out of both totals.
FLOW_DIRECTION = {
    TransactionType.DISTRIBUTION_INCOME: FlowDirection.INFLOW,
    TransactionType.RETURN_OF_CAPITAL: FlowDirection.INFLOW,
    TransactionType.DIVIDEND: FlowDirection.INFLOW,
    TransactionType.INTEREST: FlowDirection.INFLOW,
    TransactionType.SALE_PROCEEDS: FlowDirection.INFLOW,
    TransactionType.TAX_REFUND: FlowDirection.INFLOW,
    TransactionType.CONTRIBUTION: FlowDirection.OUTFLOW,
    TransactionType.CAPITAL_CALL: FlowDirection.OUTFLOW,
    TransactionType.WITHDRAWAL: FlowDirection.OUTFLOW,
    TransactionType.FEE_MGMT: FlowDirection.OUTFLOW,
    TransactionType.FEE_TXN: FlowDirection.OUTFLOW,
    TransactionType.TAX_WITHHOLDING: FlowDirection.OUTFLOW,
    TransactionType.ADJUSTMENT: FlowDirection.NEUTRAL,
}

TRANSACTION_CATEGORY = {
    TransactionType.CONTRIBUTION: TransactionCategory.CONTRIBUTION,
    TransactionType.CAPITAL_CALL: TransactionCategory.CONTRIBUTION,
    TransactionType.DISTRIBUTION_INCOME: TransactionCategory.DISTRIBUTION,
    TransactionType.RETURN_OF_CAPITAL: TransactionCategory.DISTRIBUTION,
    TransactionType.FEE_MGMT: TransactionCategory.FEE,
    TransactionType.FEE_TXN: TransactionCategory.FEE,
    TransactionType.TAX_WITHHOLDING: TransactionCategory.TAX,
    TransactionType.TAX_REFUND: TransactionCategory.TAX,
    TransactionType.DIVIDEND: TransactionCategory.INCOME,
    TransactionType.INTEREST: TransactionCategory.INCOME,
    TransactionType.SALE_PROCEEDS: TransactionCategory.SALE,
    TransactionType.WITHDRAWAL: TransactionCategory.WITHDRAWAL,
    TransactionType.ADJUSTMENT: TransactionCategory.ADJUSTMENT,
}

TRANSACTION_TYPE_LABELS = {
    TransactionType.CONTRIBUTION: "Contribution",
    TransactionType.CAPITAL_CALL: "Capital Call",
    TransactionType.DISTRIBUTION_INCOME: "Distribution (Income)",
    TransactionType.RETURN_OF_CAPITAL: "Return of Capital",
    TransactionType.WITHDRAWAL: "Withdrawal",
    TransactionType.FEE_MGMT: "Management Fee",
    TransactionType.FEE_TXN: "Transaction Fee",
    TransactionType.DIVIDEND: "Dividend",
    TransactionType.INTEREST: "Interest",
    TransactionType.SALE_PROCEEDS: "Sale Proceeds",
    TransactionType.TAX_WITHHOLDING: "Tax Withholding",
    TransactionType.TAX_REFUND: "Tax Refund",
    TransactionType.ADJUSTMENT: "Adjustment",
}


# Offering Status
# ===============

class DerivedStatus(str, Enum):
    FUNDING = "FUNDING"
    CLOSING_SOON = "CLOSING_SOON"
    FUNDED = "FUNDED"
    WAITLIST = "WAITLIST"


# Raw backend statuses that mean the raise is over.
FUNDED_RAW_STATUSES = frozenset({"funded", "closed", "fully_funded", "completed"})

# Raw backend statuses of an offering still accepting money (unset also counts).
OPEN_RAW_STATUSES = frozenset({"available", "funding"})

WAITLIST_RAW_STATUS = "waitlist"

# Filter value -> raw statuses it matches (property browser status filter).
STATUS_FILTER_GROUPS = {
    "available": frozenset({"available", "funding", "open", "development", "coming_soon"}),
    "funding": frozenset({"funding"}),
    "fully_funded": frozenset({"funded", "fully_funded", "closed", "completed"}),
}


# Range Tokens
# ============

class RangeToken(str, Enum):
    ONE_MONTH = "1m"
    THREE_MONTHS = "3m"
    SIX_MONTHS = "6m"
    ONE_YEAR = "1y"
    YTD = "ytd"
    ALL = "all"
    TODAY = "today"


class TransactionDatePreset(str, Enum):
    LAST_30 = "last_30"
    LAST_90 = "last_90"
    YTD = "ytd"
    LAST_YEAR = "last_year"
    CUSTOM = "custom"


# Month labels (fixed English names; labels must not depend on process locale)
MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
MONTH_ABBREVIATIONS = tuple(name[:3] for name in MONTH_NAMES)


# Coverage checks
# ===============

def _require_full_coverage(table: dict, enum_cls: type, table_name: str) -> None:
    missing = [member.value for member in enum_cls if member not in table]
    if missing:
        raise RuntimeError(f"{table_name} is missing entries for: {', '.join(missing)}")


_require_full_coverage(FLOW_DIRECTION, TransactionType, "FLOW_DIRECTION")
_require_full_coverage(TRANSACTION_CATEGORY, TransactionType, "TRANSACTION_CATEGORY")
_require_full_coverage(TRANSACTION_TYPE_LABELS, TransactionType, "TRANSACTION_TYPE_LABELS")


# Validation Functions
# ===================

def coerce_transaction_type(value) -> TransactionType:
    """Return the TransactionType for ``value``; raises ValueError when unknown."""
    if isinstance(value, TransactionType):
        return value
    try:
        return TransactionType(str(value).strip().lower())
    except ValueError:
        raise ValueError(f"Unknown transaction type: {value!r}") from None


def coerce_transaction_status(value) -> TransactionStatus:
    """Return the TransactionStatus for ``value``; ``None`` means posted."""
    if isinstance(value, TransactionStatus):
        return value
    if value is None or value == "":
        return TransactionStatus.POSTED
    try:
        return TransactionStatus(str(value).strip().lower())
    except ValueError:
        raise ValueError(f"Unknown transaction status: {value!r}") from None


def coerce_range_token(value) -> RangeToken:
    """Return the RangeToken for ``value``; raises ValueError when unknown."""
    if isinstance(value, RangeToken):
        return value
    try:
        return RangeToken(str(value).strip().lower())
    except ValueError:
        valid = ", ".join(token.value for token in RangeToken)
        raise ValueError(f"Unknown range token: {value!r} (expected one of {valid})") from None


def get_transaction_type_label(value) -> str:
    """Get human-readable label for a transaction type."""
    return TRANSACTION_TYPE_LABELS[coerce_transaction_type(value)]
