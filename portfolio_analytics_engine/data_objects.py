"""
Core Data Objects Module

Input records consumed by the analytics engine, with input validation and
conversion from the raw backend shape.

Classes:
- FinancialEvent: one ledger transaction (contribution, distribution, fee, ...)
- FundingRecord: funding state of a property/offering, drives status derivation
- PerformanceSnapshot: one point of the portfolio value series
- DateWindow: concrete [start, end] interval produced by the window calculator

All timestamps are naive UTC ``datetime`` objects. Strings, ``date`` and
``pd.Timestamp`` values are converted on construction; timezone-aware input
is shifted to UTC and its offset dropped, naive input is taken as UTC.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

import pandas as pd

from portfolio_analytics_engine.constants import (
    TransactionStatus,
    TransactionType,
    coerce_transaction_status,
    coerce_transaction_type,
)


def utc_now() -> datetime:
    """Current time as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _as_naive_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def _coerce_datetime(value: Any, field_name: str) -> datetime:
    """Convert datetime/date/ISO string input to naive UTC ``datetime``; raises ValueError."""
    if isinstance(value, pd.Timestamp):
        if pd.isna(value):
            raise ValueError(f"{field_name} must not be NaT")
        return _as_naive_utc(value.to_pydatetime())
    if isinstance(value, datetime):
        return _as_naive_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str) and value.strip():
        try:
            parsed = pd.Timestamp(value.strip())
        except ValueError:
            raise ValueError(f"{field_name} is not a valid date: {value!r}") from None
        if pd.isna(parsed):
            raise ValueError(f"{field_name} is not a valid date: {value!r}")
        return _as_naive_utc(parsed.to_pydatetime())
    raise ValueError(f"{field_name} must be a datetime, date or ISO string, got {value!r}")


def _coerce_optional_datetime(value: Any, field_name: str) -> Optional[datetime]:
    if value is None or value == "":
        return None
    return _coerce_datetime(value, field_name)


def _nested_get(data: Dict[str, Any], *path: str) -> Any:
    current: Any = data
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


@dataclass
class FinancialEvent:
    """
    One ledger transaction as seen by the engine.

    The amount sign follows the source system's convention; the classifier
    always works on ``abs(amount)`` and decides direction from the type.

    Example:
        event = FinancialEvent.from_dict({
            "id": "tx-1",
            "investment_id": "inv-9",
            "transaction_type": "distribution_income",
            "amount": 250.0,
            "created_at": "2024-03-15",
        })
    """

    id: str
    investment_id: str
    transaction_type: TransactionType
    amount: float
    occurred_at: datetime
    status: TransactionStatus = TransactionStatus.POSTED

    # Descriptive fields used by search and grouping
    description: Optional[str] = None
    investment_name: Optional[str] = None
    method: Optional[str] = None

    def __post_init__(self):
        """
        Normalize enum/date fields and validate the amount.

        Raises:
            ValueError: unknown type/status, malformed date, non-finite amount
        """
        self.transaction_type = coerce_transaction_type(self.transaction_type)
        self.status = coerce_transaction_status(self.status)
        self.occurred_at = _coerce_datetime(self.occurred_at, "occurred_at")
        try:
            self.amount = float(self.amount)
        except (TypeError, ValueError):
            raise ValueError(f"amount must be numeric, got {self.amount!r}") from None
        if not math.isfinite(self.amount):
            raise ValueError(f"amount must be finite, got {self.amount!r}")
        self.id = str(self.id)
        self.investment_id = "" if self.investment_id is None else str(self.investment_id)

    @property
    def abs_amount(self) -> float:
        return abs(self.amount)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FinancialEvent":
        """Build from the backend transaction shape (``transaction_type``, ``created_at``, ...)."""
        occurred_at = data.get("occurred_at") or data.get("created_at") or data.get("payment_date")
        return cls(
            id=data.get("id", ""),
            investment_id=data.get("investment_id") or "",
            transaction_type=data.get("transaction_type") or data.get("type"),
            amount=data.get("amount", 0.0),
            occurred_at=occurred_at,
            status=data.get("status"),
            description=data.get("description"),
            investment_name=data.get("investment_name") or _nested_get(data, "properties", "title"),
            method=data.get("method"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "investment_id": self.investment_id,
            "transaction_type": self.transaction_type.value,
            "amount": self.amount,
            "occurred_at": self.occurred_at.isoformat(),
            "status": self.status.value,
            "description": self.description,
            "investment_name": self.investment_name,
            "method": self.method,
        }


@dataclass
class FundingRecord:
    """
    Funding state of a property or offering.

    Parameters:
    - current_funding: amount raised so far (>= 0)
    - target_funding: raise target; 0 is tolerated and means "no progress"
    - funding_deadline: optional close date
    - waitlist_open: investors may join a waitlist
    - capacity_remaining: optional remaining allocation; <= 0 means full
    - raw_status: backend status string, compared case-insensitively
    """

    id: str
    current_funding: float = 0.0
    target_funding: float = 0.0
    funding_deadline: Optional[datetime] = None
    waitlist_open: bool = False
    capacity_remaining: Optional[int] = None
    raw_status: Optional[str] = None

    def __post_init__(self):
        self.current_funding = self._validated_amount(self.current_funding, "current_funding")
        self.target_funding = self._validated_amount(self.target_funding, "target_funding")
        self.funding_deadline = _coerce_optional_datetime(self.funding_deadline, "funding_deadline")
        self.waitlist_open = bool(self.waitlist_open)
        if self.capacity_remaining is not None:
            self.capacity_remaining = int(self.capacity_remaining)
        if self.raw_status is not None:
            normalized = str(self.raw_status).strip().lower()
            self.raw_status = normalized or None

    @staticmethod
    def _validated_amount(value: Any, field_name: str) -> float:
        if value is None:
            return 0.0
        try:
            numeric = float(value)
        except (TypeError, ValueError):
            raise ValueError(f"{field_name} must be numeric, got {value!r}") from None
        if not math.isfinite(numeric):
            raise ValueError(f"{field_name} must be finite, got {value!r}")
        if numeric < 0:
            raise ValueError(f"{field_name} must not be negative, got {numeric}")
        return numeric

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FundingRecord":
        """Build from the backend property/offering shape."""
        return cls(
            id=str(data.get("id", "")),
            current_funding=data.get("current_funding", data.get("raised_amount", 0.0)),
            target_funding=data.get("target_funding", data.get("target_amount", 0.0)),
            funding_deadline=data.get("funding_deadline"),
            waitlist_open=data.get("waitlist_open", False),
            capacity_remaining=data.get("capacity_remaining"),
            raw_status=data.get("property_status", data.get("status")),
        )


@dataclass
class PerformanceSnapshot:
    """One dated point of the portfolio value series. Values may be non-finite;
    the series selector drops those points."""

    date: datetime
    portfolio_value: float
    net_return_pct: float = 0.0
    net_contribution: float = 0.0

    def __post_init__(self):
        self.date = _coerce_datetime(self.date, "date")
        self.portfolio_value = float("nan") if self.portfolio_value is None else float(self.portfolio_value)
        self.net_return_pct = float(self.net_return_pct or 0.0)
        self.net_contribution = float(self.net_contribution or 0.0)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PerformanceSnapshot":
        return cls(
            date=data.get("date"),
            portfolio_value=data.get("portfolio_value"),
            net_return_pct=data.get("net_return_pct", 0.0),
            net_contribution=data.get("net_contribution", 0.0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "portfolio_value": self.portfolio_value,
            "net_return_pct": self.net_return_pct,
            "net_contribution": self.net_contribution,
        }


@dataclass(frozen=True)
class DateWindow:
    """Concrete interval. Membership is inclusive on both ends."""

    start: datetime
    end: datetime

    def __post_init__(self):
        object.__setattr__(self, "start", _coerce_datetime(self.start, "start"))
        object.__setattr__(self, "end", _coerce_datetime(self.end, "end"))

    def contains(self, moment: datetime) -> bool:
        moment = _coerce_datetime(moment, "moment")
        return self.start <= moment <= self.end

    def to_dict(self) -> Dict[str, str]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}
