"""
Filter / sort / group utility for listing screens.

Three independent stages applied in order:

    filter  -> conjunction of text search, category membership, numeric
               ranges, status groups and an optional date window
    sort    -> one key + direction; strings compare case-insensitively under
               the process LC_COLLATE locale (``locale.strxfrm``), numbers
               numerically, missing values as the type's zero
    group   -> ordered mapping of derived label -> records, keeping the
               incoming (sorted) order inside each group

Records may be dicts (backend rows) or objects (FinancialEvent, ...); every
field reference is a dotted path resolved with ``get_field``.

The ``*_criteria`` / ``*_sort`` / ``*_group`` builders reproduce the filter
panels of the property browser, the investments page and the transaction
ledger.
"""

from __future__ import annotations

import locale
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Union

import pandas as pd

from portfolio_analytics_engine import config
from portfolio_analytics_engine._logging import analytics_logger, log_operation
from portfolio_analytics_engine._vendor import _finite_or_zero, _to_float, get_field
from portfolio_analytics_engine.constants import MONTH_NAMES, STATUS_FILTER_GROUPS
from portfolio_analytics_engine.data_objects import (
    DateWindow,
    _coerce_datetime,
    _coerce_optional_datetime,
)
from portfolio_analytics_engine.date_windows import transaction_date_range
from portfolio_analytics_engine.results import GroupHeader
from portfolio_analytics_engine.status import funding_progress

SORT_DIRECTIONS = ("asc", "desc")
ALL = "all"


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _normalize(value: Any) -> str:
    return _text(value).strip().lower()


# Filter
# ======

@dataclass
class NumericRange:
    """Inclusive bounds on a numeric field; ``None`` leaves a side open."""

    path: str
    min: Optional[float] = None
    max: Optional[float] = None
    absolute: bool = False

    def matches(self, record: Any) -> bool:
        value = _finite_or_zero(get_field(record, self.path))
        if self.absolute:
            value = abs(value)
        if self.min is not None and value < self.min:
            return False
        if self.max is not None and value > self.max:
            return False
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {"path": self.path, "min": self.min, "max": self.max, "absolute": self.absolute}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "NumericRange":
        return cls(
            path=d["path"],
            min=_to_float(d.get("min")),
            max=_to_float(d.get("max")),
            absolute=bool(d.get("absolute", False)),
        )


@dataclass
class FilterCriteria:
    """
    Explicit filter state for one listing.

    Attributes:
        search: case-insensitive substring matched against ``search_fields``
        memberships: field -> allowed values; an empty list disables the check
        membership_defaults: value assumed when a membership field is missing
        ranges: numeric bounds, all must hold
        status_field: field holding the raw status used by ``status_filters``
        status_filters: status filter values (``all`` or empty match everything)
        date_field: field holding the record date, checked against ``window``
        window: inclusive date window
    """

    search: str = ""
    search_fields: List[str] = field(default_factory=list)
    memberships: Dict[str, List[str]] = field(default_factory=dict)
    membership_defaults: Dict[str, str] = field(default_factory=dict)
    ranges: List[NumericRange] = field(default_factory=list)
    status_field: Optional[str] = None
    status_filters: List[str] = field(default_factory=list)
    date_field: Optional[str] = None
    window: Optional[DateWindow] = None

    def is_active(self) -> bool:
        """True when any stage would exclude something."""
        return bool(
            self.search.strip()
            or any(values for values in self.memberships.values())
            or self.ranges
            or any(_normalize(value) not in ("", ALL) for value in self.status_filters)
            or self.window is not None
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "search": self.search,
            "search_fields": list(self.search_fields),
            "memberships": {key: list(values) for key, values in self.memberships.items()},
            "membership_defaults": dict(self.membership_defaults),
            "ranges": [numeric_range.to_dict() for numeric_range in self.ranges],
            "status_field": self.status_field,
            "status_filters": list(self.status_filters),
            "date_field": self.date_field,
            "window": self.window.to_dict() if self.window else None,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "FilterCriteria":
        window = d.get("window")
        if window:
            window = DateWindow(
                start=_coerce_datetime(window.get("start"), "window.start"),
                end=_coerce_datetime(window.get("end"), "window.end"),
            )
        return cls(
            search=d.get("search") or "",
            search_fields=list(d.get("search_fields") or []),
            memberships={key: list(values or []) for key, values in (d.get("memberships") or {}).items()},
            membership_defaults=dict(d.get("membership_defaults") or {}),
            ranges=[NumericRange.from_dict(item) for item in d.get("ranges") or []],
            status_field=d.get("status_field"),
            status_filters=list(d.get("status_filters") or []),
            date_field=d.get("date_field"),
            window=window or None,
        )


def matches_status_filter(status: Any, filter_value: Any) -> bool:
    """Raw status against a filter value; group names expand to their member statuses."""
    normalized_filter = _normalize(filter_value)
    if not normalized_filter or normalized_filter == ALL:
        return True
    allowed = STATUS_FILTER_GROUPS.get(normalized_filter, frozenset({normalized_filter}))
    return _normalize(status) in allowed


def _matches_search(record: Any, term: str, search_fields: Sequence[str]) -> bool:
    needle = term.strip().lower()
    if not needle:
        return True
    return any(needle in _normalize(get_field(record, path)) for path in search_fields)


def _matches_window(record: Any, date_field: str, window: DateWindow) -> bool:
    raw = get_field(record, date_field)
    if raw is None:
        return False
    return window.contains(_coerce_datetime(raw, date_field))


def matches(record: Any, criteria: FilterCriteria) -> bool:
    """True when ``record`` passes every configured check."""
    if criteria.window is not None and criteria.date_field:
        if not _matches_window(record, criteria.date_field, criteria.window):
            return False

    if not _matches_search(record, criteria.search, criteria.search_fields):
        return False

    for path, allowed in criteria.memberships.items():
        if not allowed:
            continue
        value = get_field(record, path, criteria.membership_defaults.get(path))
        if _normalize(value) not in {_normalize(item) for item in allowed}:
            return False

    if not all(numeric_range.matches(record) for numeric_range in criteria.ranges):
        return False

    if criteria.status_field:
        status = get_field(record, criteria.status_field)
        if not all(matches_status_filter(status, value) for value in criteria.status_filters):
            return False

    return True


def filter_records(records: Iterable[Any], criteria: Optional[FilterCriteria]) -> List[Any]:
    """Records passing ``criteria``, in input order."""
    records = list(records)
    if criteria is None:
        return records
    return [record for record in records if matches(record, criteria)]


# Sort
# ====

def _timestamp_value(value: Any) -> Optional[int]:
    moment = _coerce_optional_datetime(value, "date")
    if moment is None:
        return None
    return pd.Timestamp(moment).value


def _record_progress(record: Any) -> float:
    return funding_progress(
        _finite_or_zero(get_field(record, "current_funding")),
        _finite_or_zero(get_field(record, "target_funding")),
    )


def recommended_score(record: Any) -> float:
    """Property browser ranking: return x 0.4 + (10 - risk) x 0.3 + progress x 0.3."""
    expected_return = _finite_or_zero(get_field(record, "expected_annual_return"))
    risk_rating = _finite_or_zero(get_field(record, "risk_rating"))
    return expected_return * 0.4 + (10 - risk_rating) * 0.3 + _record_progress(record) * 0.3


NAMED_SORT_KEYS: Dict[str, Callable[[Any], Any]] = {
    "funding_progress": _record_progress,
    "target_irr": lambda record: get_field(record, "expected_annual_return"),
    "min_investment": lambda record: get_field(record, "minimum_investment"),
    "newest": lambda record: _timestamp_value(get_field(record, "created_at")),
    "recommended": recommended_score,
}


@dataclass
class SortSpec:
    """Sort by a named key (see ``NAMED_SORT_KEYS``) or a dotted field path."""

    by: str
    direction: str = "asc"

    def __post_init__(self):
        self.direction = _normalize(self.direction)
        if self.direction not in SORT_DIRECTIONS:
            raise ValueError(f"Unknown sort direction: {self.direction!r} (expected asc or desc)")

    @property
    def descending(self) -> bool:
        return self.direction == "desc"

    def to_dict(self) -> Dict[str, str]:
        return {"by": self.by, "direction": self.direction}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SortSpec":
        return cls(by=d["by"], direction=d.get("direction", "asc"))


def _sort_keys(values: List[Any]) -> List[Any]:
    values = [value.value if isinstance(value, Enum) else value for value in values]
    if any(isinstance(value, str) for value in values):
        keys = []
        for value in values:
            text = "" if value is None else str(value)
            keys.append((locale.strxfrm(text.casefold()), text))
        return keys

    keys = []
    for value in values:
        if isinstance(value, (datetime, date, pd.Timestamp)):
            keys.append(_timestamp_value(value))
        else:
            keys.append(_finite_or_zero(value))
    return keys


def sort_records(records: Iterable[Any], spec: Optional[SortSpec]) -> List[Any]:
    """Stable sort; equal keys keep their incoming order in either direction."""
    records = list(records)
    if spec is None:
        return records

    key_fn = NAMED_SORT_KEYS.get(spec.by)
    raw = [key_fn(record) if key_fn else get_field(record, spec.by) for record in records]
    keys = _sort_keys(raw)
    order = sorted(range(len(records)), key=lambda index: keys[index], reverse=spec.descending)
    return [records[index] for index in order]


# Group
# =====

def risk_bucket(risk_rating: Any) -> str:
    """Risk group label; missing ratings count as 0."""
    thresholds = config.RISK_BUCKET_THRESHOLDS
    rating = _finite_or_zero(risk_rating)
    if rating <= thresholds["low_max"]:
        return "Low Risk"
    if rating <= thresholds["medium_max"]:
        return "Medium Risk"
    return "High Risk"


def month_label(value: Any) -> str:
    """'January 2024' style label for a date."""
    moment = _coerce_datetime(value, "date")
    return f"{MONTH_NAMES[moment.month - 1]} {moment.year}"


def type_label(value: Any) -> str:
    """'DISTRIBUTION INCOME' style label for a transaction type."""
    return _text(value).replace("_", " ").upper()


@dataclass
class GroupSpec:
    """
    Grouping rule.

    ``by`` is one of:
        field       -> the value at ``path``
        risk        -> risk bucket of ``path`` (default ``risk_rating``)
        month       -> month label of ``path`` (default ``occurred_at``)
        type        -> transaction type label of ``path`` (default ``transaction_type``)
        investment  -> first present of ``paths`` (investment name, then id)
        constant    -> every record under ``other_label``
    Records without a value go to ``other_label``.
    """

    by: str
    path: Optional[str] = None
    paths: List[str] = field(default_factory=list)
    other_label: str = "Other"

    def __post_init__(self):
        if self.by not in GROUP_KINDS:
            raise ValueError(f"Unknown group key: {self.by!r} (expected one of {', '.join(GROUP_KINDS)})")
        if self.by == "field" and not self.path:
            raise ValueError("GroupSpec(by='field') requires a path")
        if self.by == "investment" and not self.paths:
            self.paths = ["investment_name", "properties.title", "investment_id"]

    def label_for(self, record: Any) -> str:
        if self.by == "constant":
            return self.other_label
        if self.by == "investment":
            for path in self.paths:
                value = _text(get_field(record, path))
                if value:
                    return value
            return self.other_label
        if self.by == "risk":
            return risk_bucket(get_field(record, self.path or "risk_rating"))

        value = get_field(record, self.path or _DEFAULT_GROUP_FIELDS.get(self.by, ""))
        if value is None or _text(value) == "":
            return self.other_label
        if self.by == "month":
            return month_label(value)
        if self.by == "type":
            return type_label(value)
        return _text(value)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "by": self.by,
            "path": self.path,
            "paths": list(self.paths),
            "other_label": self.other_label,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "GroupSpec":
        return cls(
            by=d["by"],
            path=d.get("path"),
            paths=list(d.get("paths") or []),
            other_label=d.get("other_label", "Other"),
        )


GROUP_KINDS = ("field", "risk", "month", "type", "investment", "constant")

_DEFAULT_GROUP_FIELDS = {
    "month": "occurred_at",
    "type": "transaction_type",
}


@log_operation("group_records")
def group_records(records: Iterable[Any], spec: GroupSpec) -> Dict[str, List[Any]]:
    """Ordered mapping label -> records; labels in first-seen order, members in input order."""
    groups: Dict[str, List[Any]] = {}
    for record in records:
        groups.setdefault(spec.label_for(record), []).append(record)
    analytics_logger.debug("grouped by %s into %d groups", spec.by, len(groups))
    return groups


def group_with_headers(
    groups: Dict[str, List[Any]],
    amount_field: str = "amount",
) -> List[Union[GroupHeader, Any]]:
    """Flatten groups into ``[header, *members, header, *members, ...]``.

    ``group_total`` is the signed sum of ``amount_field`` over the members.
    """
    rows: List[Union[GroupHeader, Any]] = []
    for group_key, members in groups.items():
        rows.append(
            GroupHeader(
                group_key=group_key,
                group_count=len(members),
                group_total=float(sum(_finite_or_zero(get_field(member, amount_field)) for member in members)),
            )
        )
        rows.extend(members)
    return rows


# Screen presets
# ==============

PROPERTY_SEARCH_FIELDS = ["title", "city", "address", "property_type"]
INVESTMENT_SEARCH_FIELDS = ["properties.title", "properties.city", "properties.sponsor"]
TRANSACTION_SEARCH_FIELDS = ["description", "investment_name", "id"]

PROPERTY_MAX_INVESTMENT_CAP = 1_000_000


def property_criteria(
    search: str = "",
    min_return: float = 0,
    max_investment: float = PROPERTY_MAX_INVESTMENT_CAP,
    risk_min: float = 1,
    risk_max: float = 10,
    funding_status: str = ALL,
    property_type: str = ALL,
    status: str = ALL,
) -> FilterCriteria:
    """Property browser filter panel. The risk range always applies."""
    ranges = []
    if min_return > 0:
        ranges.append(NumericRange("expected_annual_return", min=min_return))
    if max_investment < PROPERTY_MAX_INVESTMENT_CAP:
        ranges.append(NumericRange("minimum_investment", max=max_investment))
    ranges.append(NumericRange("risk_rating", min=risk_min, max=risk_max))

    memberships = {}
    if _normalize(property_type) not in ("", ALL):
        memberships["property_type"] = [property_type]

    return FilterCriteria(
        search=search,
        search_fields=list(PROPERTY_SEARCH_FIELDS),
        memberships=memberships,
        ranges=ranges,
        status_field="property_status",
        status_filters=[funding_status, status],
    )


PROPERTY_SORT_DIRECTIONS = {
    "recommended": "desc",
    "funding_progress": "desc",
    "target_irr": "desc",
    "min_investment": "asc",
    "newest": "desc",
}


def property_sort(sort_by: str = "recommended") -> SortSpec:
    """Property browser sort options; unrecognised options fall back to ``recommended``."""
    if sort_by not in PROPERTY_SORT_DIRECTIONS:
        sort_by = "recommended"
    return SortSpec(by=sort_by, direction=PROPERTY_SORT_DIRECTIONS[sort_by])


INVESTMENT_STATUS_VALUES = {
    "active": "active",
    "exited": "exited",
    "commitments": "committed",
    "watchlist": "watchlist",
}


def investment_criteria(search: str = "", status: str = ALL) -> FilterCriteria:
    """Investments page filters (search + position status)."""
    memberships = {}
    status = _normalize(status)
    if status not in ("", ALL):
        if status not in INVESTMENT_STATUS_VALUES:
            raise ValueError(f"Unknown investment status filter: {status!r}")
        memberships["investment_status"] = [INVESTMENT_STATUS_VALUES[status]]
    return FilterCriteria(
        search=search,
        search_fields=list(INVESTMENT_SEARCH_FIELDS),
        memberships=memberships,
    )


INVESTMENT_SORT_FIELDS = {
    "value": "current_value",
    "irr": "irr",
    "net_return": "net_return_percent",
    "name": "properties.title",
}


def investment_sort(sort_by: str = "value", order: str = "desc") -> SortSpec:
    if sort_by not in INVESTMENT_SORT_FIELDS:
        raise ValueError(f"Unknown investment sort: {sort_by!r}")
    return SortSpec(by=INVESTMENT_SORT_FIELDS[sort_by], direction=order)


INVESTMENT_GROUP_FIELDS = {
    "asset_type": "properties.property_type",
    "geography": "properties.city",
    "sponsor": "properties.sponsor",
    "status": "investment_status",
}


def investment_group(group_by: str = "asset_type") -> GroupSpec:
    """Investments page grouping; ``vehicle`` has no backing field and yields one 'Other' group."""
    if group_by == "risk":
        return GroupSpec(by="risk", path="properties.risk_rating")
    if group_by == "vehicle":
        return GroupSpec(by="constant")
    if group_by not in INVESTMENT_GROUP_FIELDS:
        raise ValueError(f"Unknown group key: {group_by!r}")
    return GroupSpec(by="field", path=INVESTMENT_GROUP_FIELDS[group_by])


def transaction_criteria(
    search: str = "",
    date_preset: str = "last_30",
    now: Optional[datetime] = None,
    custom_start=None,
    custom_end=None,
    types: Sequence[str] = (),
    statuses: Sequence[str] = (),
    investment_ids: Sequence[str] = (),
    methods: Sequence[str] = (),
    amount_min: Optional[float] = None,
    amount_max: Optional[float] = None,
) -> FilterCriteria:
    """
    Transaction ledger filters over FinancialEvent records.

    Missing status counts as ``posted`` and missing method as ``unknown``;
    the amount range applies to the absolute amount.
    """
    ranges = []
    if amount_min is not None or amount_max is not None:
        ranges.append(NumericRange("amount", min=amount_min, max=amount_max, absolute=True))

    return FilterCriteria(
        search=search,
        search_fields=list(TRANSACTION_SEARCH_FIELDS),
        memberships={
            "transaction_type": list(types),
            "status": list(statuses),
            "investment_id": list(investment_ids),
            "method": list(methods),
        },
        membership_defaults={"status": "posted", "method": "unknown"},
        ranges=ranges,
        date_field="occurred_at",
        window=transaction_date_range(date_preset, now, custom_start, custom_end),
    )


def transaction_group(group_by: str = "none") -> Optional[GroupSpec]:
    """Ledger grouping: ``none``, ``month``, ``investment`` or ``type``."""
    if group_by == "none":
        return None
    if group_by in ("month", "type", "investment"):
        return GroupSpec(by=group_by)
    raise ValueError(f"Unknown group key: {group_by!r}")
