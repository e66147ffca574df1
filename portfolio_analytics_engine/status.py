"""Offering status derivation.

Pure functions mapping a FundingRecord to exactly one DerivedStatus through a
fixed precedence chain, plus the display metadata for each status and the
back-office offering label used on developer screens.

Precedence (first match wins):
    1. FUNDED-class (progress >= 100, closed raw status, or no capacity left);
       an open waitlist turns this into WAITLIST.
    2. CLOSING_SOON for open offerings at >= 80% progress or <= 7 days to close.
    3. FUNDING for open offerings below 100%.
    4. WAITLIST on explicit waitlist status/flag.
    5. FUNDING fallback.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from portfolio_analytics_engine import config
from portfolio_analytics_engine.constants import (
    FUNDED_RAW_STATUSES,
    OPEN_RAW_STATUSES,
    WAITLIST_RAW_STATUS,
    DerivedStatus,
)
from portfolio_analytics_engine.data_objects import (
    FundingRecord,
    _coerce_datetime,
    _coerce_optional_datetime,
    utc_now,
)

_MS_PER_DAY = 24 * 60 * 60 * 1000


@dataclass(frozen=True)
class StatusInfo:
    label: str
    variant: str
    tooltip: str
    pulse: bool


@dataclass(frozen=True)
class OfferingStatus:
    label: str
    variant: str
    description: str


_STATUS_INFO = {
    DerivedStatus.FUNDING: StatusInfo(
        label="FUNDING",
        variant="funding",
        tooltip="Open for investment",
        pulse=False,
    ),
    DerivedStatus.CLOSING_SOON: StatusInfo(
        label="CLOSING SOON",
        variant="closing",
        tooltip="Limited time remaining - act fast!",
        pulse=True,
    ),
    DerivedStatus.FUNDED: StatusInfo(
        label="FUNDED",
        variant="funded",
        tooltip="Fully funded and closed",
        pulse=False,
    ),
    DerivedStatus.WAITLIST: StatusInfo(
        label="WAITLIST",
        variant="waitlist",
        tooltip="Join the waitlist for future opportunities",
        pulse=False,
    ),
}


def funding_progress(current_funding: float, target_funding: float) -> float:
    """Funding progress in percent; 0 when there is no positive target."""
    if target_funding is None or target_funding <= 0:
        return 0.0
    progress = (current_funding or 0.0) / target_funding * 100
    return progress if math.isfinite(progress) else 0.0


def days_to_deadline(deadline: Optional[datetime], now: Optional[datetime] = None) -> Optional[int]:
    """Whole days until ``deadline`` rounded up; negative once passed, None without a deadline."""
    if deadline is None:
        return None
    deadline = _coerce_datetime(deadline, "deadline")
    now = _coerce_datetime(now, "now") if now is not None else utc_now()
    diff_ms = (deadline - now).total_seconds() * 1000
    return math.ceil(diff_ms / _MS_PER_DAY)


def funding_remaining(record: FundingRecord) -> float:
    """Amount still needed to reach target, never negative."""
    return max(record.target_funding - record.current_funding, 0.0)


def is_open_offering(raw_status: Optional[str]) -> bool:
    return raw_status is None or raw_status in OPEN_RAW_STATUSES


def derive_status(record: FundingRecord, now: Optional[datetime] = None) -> DerivedStatus:
    """Derive the investor-facing status of an offering. Always returns a value."""
    thresholds = config.STATUS_THRESHOLDS
    status = record.raw_status
    progress = funding_progress(record.current_funding, record.target_funding)

    capacity_exhausted = record.capacity_remaining is not None and record.capacity_remaining <= 0
    if (
        progress >= thresholds["funded_progress_pct"]
        or status in FUNDED_RAW_STATUSES
        or capacity_exhausted
    ):
        return DerivedStatus.WAITLIST if record.waitlist_open else DerivedStatus.FUNDED

    days_left = days_to_deadline(record.funding_deadline, now)
    open_offering = is_open_offering(status)
    if open_offering and (
        progress >= thresholds["closing_soon_progress_pct"]
        or (days_left is not None and days_left <= thresholds["closing_soon_days"])
    ):
        return DerivedStatus.CLOSING_SOON

    if open_offering and progress < thresholds["funded_progress_pct"]:
        return DerivedStatus.FUNDING

    if status == WAITLIST_RAW_STATUS or record.waitlist_open:
        return DerivedStatus.WAITLIST

    return DerivedStatus.FUNDING


def get_status_info(status: DerivedStatus) -> StatusInfo:
    """Display metadata (label, badge variant, tooltip, pulse) for a status."""
    return _STATUS_INFO[DerivedStatus(status)]


def derive_offering_status(
    raw_status: Optional[str],
    raised_amount: float,
    target_amount: float,
    funding_deadline=None,
    now: Optional[datetime] = None,
) -> OfferingStatus:
    """Back-office label for a developer offering (active/coming_soon/funded/closed)."""
    status = (raw_status or "").strip().lower()

    if status == "funded":
        return OfferingStatus(
            label="Fully Funded",
            variant="default",
            description="This offering has reached its funding target",
        )

    if status == "closed":
        return OfferingStatus(
            label="Closed",
            variant="destructive",
            description="This offering is no longer accepting investments",
        )

    if status == "coming_soon":
        return OfferingStatus(
            label="Coming Soon",
            variant="secondary",
            description="This offering will be available for investment soon",
        )

    if status == "active":
        progress = min(100.0, funding_progress(raised_amount, target_amount))
        deadline = _coerce_optional_datetime(funding_deadline, "funding_deadline")
        days_left = days_to_deadline(deadline, now)
        if days_left is not None:
            days_left = max(0, days_left)

        if days_left is not None and days_left <= config.STATUS_THRESHOLDS["closing_soon_days"]:
            plural = "" if days_left == 1 else "s"
            return OfferingStatus(
                label="Closing Soon",
                variant="destructive",
                description=f"Only {days_left} day{plural} remaining",
            )

        if progress >= config.STATUS_THRESHOLDS["nearly_funded_progress_pct"]:
            return OfferingStatus(
                label="Nearly Funded",
                variant="default",
                description=f"{progress:.1f}% funded",
            )

        return OfferingStatus(
            label="Active",
            variant="default",
            description=f"{progress:.1f}% funded",
        )

    return OfferingStatus(
        label="Unknown",
        variant="outline",
        description="Status unclear",
    )
