import itertools
from datetime import datetime, timedelta

import pytest

from portfolio_analytics_engine import config
from portfolio_analytics_engine.constants import DerivedStatus
from portfolio_analytics_engine.data_objects import FundingRecord
from portfolio_analytics_engine.status import (
    days_to_deadline,
    derive_offering_status,
    derive_status,
    funding_progress,
    funding_remaining,
    get_status_info,
)

NOW = datetime(2024, 6, 1, 12, 0)


def _record(current=0, target=100, **kwargs):
    return FundingRecord(id="p1", current_funding=current, target_funding=target, **kwargs)


def test_fully_funded_is_funded():
    assert derive_status(_record(100, 100), now=NOW) == DerivedStatus.FUNDED


def test_fully_funded_with_open_waitlist_is_waitlist():
    assert derive_status(_record(100, 100, waitlist_open=True), now=NOW) == DerivedStatus.WAITLIST


def test_closed_raw_status_is_funded_regardless_of_progress():
    # Raw status is compared case-insensitively
    assert derive_status(_record(10, 100, raw_status=" Closed "), now=NOW) == DerivedStatus.FUNDED
    assert derive_status(_record(10, 100, raw_status="completed"), now=NOW) == DerivedStatus.FUNDED


def test_exhausted_capacity_is_funded():
    assert derive_status(_record(10, 100, capacity_remaining=0), now=NOW) == DerivedStatus.FUNDED


def test_closing_soon_by_progress():
    assert derive_status(_record(85, 100), now=NOW) == DerivedStatus.CLOSING_SOON


def test_closing_soon_by_deadline():
    record = _record(10, 100, raw_status="available", funding_deadline=NOW + timedelta(days=3))
    assert derive_status(record, now=NOW) == DerivedStatus.CLOSING_SOON


def test_funding_when_open_and_far_from_deadline():
    record = _record(10, 100, raw_status="funding", funding_deadline=NOW + timedelta(days=30))
    assert derive_status(record, now=NOW) == DerivedStatus.FUNDING


def test_explicit_waitlist_status():
    assert derive_status(_record(10, 100, raw_status="waitlist"), now=NOW) == DerivedStatus.WAITLIST


def test_unrecognised_raw_status_falls_back_to_funding():
    assert derive_status(_record(10, 100, raw_status="coming_soon"), now=NOW) == DerivedStatus.FUNDING


def test_zero_target_means_zero_progress():
    assert funding_progress(50, 0) == 0.0
    assert derive_status(_record(50, 0), now=NOW) == DerivedStatus.FUNDING


def test_negative_funding_is_rejected():
    with pytest.raises(ValueError):
        _record(10, -100)
    with pytest.raises(ValueError):
        _record(-1, 100)


def test_thresholds_follow_config():
    config.configure(STATUS_THRESHOLDS={**config.STATUS_THRESHOLDS, "closing_soon_progress_pct": 50.0})
    assert derive_status(_record(55, 100), now=NOW) == DerivedStatus.CLOSING_SOON


def test_derive_status_is_total():
    deadlines = [None, NOW - timedelta(days=2), NOW + timedelta(days=2), NOW + timedelta(days=60)]
    statuses = [None, "available", "funding", "funded", "closed", "waitlist", "coming_soon", "mystery"]
    for current, target, waitlist, capacity, deadline, status in itertools.product(
        [0, 50, 85, 100, 150], [0, 100], [False, True], [None, 0, 5], deadlines, statuses
    ):
        record = _record(
            current,
            target,
            waitlist_open=waitlist,
            capacity_remaining=capacity,
            funding_deadline=deadline,
            raw_status=status,
        )
        assert derive_status(record, now=NOW) in set(DerivedStatus)


def test_days_to_deadline_rounds_up():
    assert days_to_deadline(None, NOW) is None
    assert days_to_deadline(NOW + timedelta(hours=25), NOW) == 2
    assert days_to_deadline(NOW + timedelta(days=3), NOW) == 3
    assert days_to_deadline(NOW - timedelta(days=2), NOW) == -2


def test_funding_remaining_never_negative():
    assert funding_remaining(_record(40, 100)) == 60.0
    assert funding_remaining(_record(120, 100)) == 0.0


def test_status_info():
    info = get_status_info(DerivedStatus.CLOSING_SOON)
    assert info.label == "CLOSING SOON"
    assert info.pulse is True

    assert get_status_info(DerivedStatus.FUNDED).tooltip == "Fully funded and closed"
    assert get_status_info("WAITLIST").label == "WAITLIST"


def test_offering_status_terminal_labels():
    assert derive_offering_status("funded", 0, 100, now=NOW).label == "Fully Funded"
    assert derive_offering_status("closed", 0, 100, now=NOW).label == "Closed"
    assert derive_offering_status("coming_soon", 0, 100, now=NOW).label == "Coming Soon"
    assert derive_offering_status("paused", 0, 100, now=NOW).label == "Unknown"


def test_offering_status_closing_soon_pluralises_days():
    one_day = derive_offering_status("active", 10, 100, NOW + timedelta(hours=12), now=NOW)
    assert one_day.label == "Closing Soon"
    assert one_day.description == "Only 1 day remaining"

    # Past deadlines clamp to zero days
    past = derive_offering_status("active", 10, 100, NOW - timedelta(days=5), now=NOW)
    assert past.description == "Only 0 days remaining"


def test_offering_status_nearly_funded_and_active():
    nearly = derive_offering_status("active", 95, 100, "2024-12-31", now=NOW)
    assert nearly.label == "Nearly Funded"
    assert nearly.description == "95.0% funded"

    # Progress is capped at 100 for the label
    over = derive_offering_status("active", 150, 100, None, now=NOW)
    assert over.description == "100.0% funded"

    active = derive_offering_status("active", 40, 100, None, now=NOW)
    assert active.label == "Active"
