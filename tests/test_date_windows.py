from datetime import datetime, timedelta

import pytest

from portfolio_analytics_engine.date_windows import (
    calculate_window,
    default_first_activity,
    transaction_date_range,
)


def test_all_starts_at_first_activity():
    window = calculate_window("all", datetime(2024, 6, 1), datetime(2023, 1, 1))
    assert window.start == datetime(2023, 1, 1)
    assert window.end == datetime(2024, 6, 2)


def test_start_is_clamped_to_first_activity():
    window = calculate_window("1y", datetime(2024, 6, 1), datetime(2024, 5, 1))
    assert window.start == datetime(2024, 5, 1)


def test_fixed_lookbacks():
    anchor = datetime(2024, 6, 1)
    first = datetime(2015, 1, 1)
    assert calculate_window("1m", anchor, first).start == anchor - timedelta(days=30)
    assert calculate_window("3m", anchor, first).start == anchor - timedelta(days=90)
    assert calculate_window("6m", anchor, first).start == anchor - timedelta(days=182)
    assert calculate_window("1y", anchor, first).start == anchor - timedelta(days=365)


def test_ytd_and_today_start_at_midnight():
    anchor = datetime(2024, 6, 15, 10, 30)
    first = datetime(2015, 1, 1)
    assert calculate_window("ytd", anchor, first).start == datetime(2024, 1, 1)
    assert calculate_window("today", anchor, first).start == datetime(2024, 6, 15)


def test_anchor_is_inside_window():
    anchor = datetime(2024, 6, 15, 10, 30)
    for token in ["1m", "3m", "6m", "1y", "ytd", "all", "today"]:
        window = calculate_window(token, anchor, datetime(2020, 1, 1))
        assert window.contains(anchor)
        assert window.start <= window.end


def test_default_first_activity_is_jan_first_of_previous_year():
    assert default_first_activity(datetime(2024, 6, 1)) == datetime(2023, 1, 1)
    assert calculate_window("all", datetime(2024, 6, 1)).start == datetime(2023, 1, 1)


def test_string_anchor_is_accepted():
    window = calculate_window("all", "2024-06-01", "2023-01-01")
    assert window.start == datetime(2023, 1, 1)


def test_unknown_range_token_raises():
    with pytest.raises(ValueError):
        calculate_window("2w", datetime(2024, 6, 1))


def test_malformed_anchor_raises():
    with pytest.raises(ValueError):
        calculate_window("1m", "not a date")


def test_transaction_presets():
    now = datetime(2024, 6, 15, 13, 0)
    end_of_today = datetime(2024, 6, 15, 23, 59, 59, 999999)

    last_30 = transaction_date_range("last_30", now=now)
    assert last_30.start == datetime(2024, 5, 16)
    assert last_30.end == end_of_today

    last_90 = transaction_date_range("last_90", now=now)
    assert last_90.start == datetime(2024, 3, 17)

    ytd = transaction_date_range("ytd", now=now)
    assert ytd.start == datetime(2024, 1, 1)
    assert ytd.contains(now)

    last_year = transaction_date_range("last_year", now=now)
    assert last_year.start == datetime(2023, 1, 1)
    assert last_year.end == datetime(2023, 12, 31, 23, 59, 59, 999999)


def test_custom_preset_defaults_to_today():
    now = datetime(2024, 6, 15, 13, 0)
    window = transaction_date_range("custom", now=now)
    assert window.start == datetime(2024, 6, 15)

    window = transaction_date_range("custom", now=now, custom_start="2024-02-01", custom_end="2024-02-29")
    assert window.start == datetime(2024, 2, 1)
    assert window.end == datetime(2024, 2, 29)


def test_unknown_preset_raises():
    with pytest.raises(ValueError):
        transaction_date_range("last_week", now=datetime(2024, 6, 15))
