import math

import pytest

from portfolio_analytics_engine import config
from portfolio_analytics_engine.kpis import (
    aggregate_investment_totals,
    allocation_breakdown,
    build_kpi_bundle,
    compute_portfolio_kpis,
    dpi,
    moic,
    net_return_pct,
    range_adjusted_values,
    range_multiplier,
    tvpi,
)


def test_zero_invested_guards():
    assert net_return_pct(0, 100, 50) == 0.0
    assert moic(0, 100, 50) == 0.0
    assert dpi(0, 50) == 0.0
    assert tvpi(0, 100, 50) == 0.0


def test_formulas():
    assert net_return_pct(1000, 1100, 100) == pytest.approx(20.0)
    assert moic(1000, 1100, 100) == pytest.approx(1.2)
    assert dpi(1000, 100) == pytest.approx(0.1)
    assert tvpi(1000, 1100, 100) == moic(1000, 1100, 100)


def test_range_multiplier_table():
    assert range_multiplier("1m") == 0.1
    assert range_multiplier("3m") == 0.25
    assert range_multiplier("6m") == 0.5
    assert range_multiplier("1y") == 0.8
    assert range_multiplier("ytd") == 0.7
    assert range_multiplier("all") == 1.0
    assert range_multiplier("today") == 1.0

    with pytest.raises(ValueError):
        range_multiplier("5y")


def test_range_adjusted_values():
    value, distributions, multiplier = range_adjusted_values(1000, 1200, 100, "6m")
    assert value == pytest.approx(1100.0)
    assert distributions == pytest.approx(50.0)
    assert multiplier == 0.5


def test_portfolio_kpis_use_adjusted_figures():
    kpis = compute_portfolio_kpis(1000, 1200, 100, "6m")
    assert kpis.current_value == pytest.approx(1100.0)
    assert kpis.total_distributions == pytest.approx(50.0)
    assert kpis.net_return == pytest.approx(150.0)
    assert kpis.net_return_pct == pytest.approx(15.0)
    assert kpis.moic == pytest.approx(1.15)
    assert kpis.tvpi == kpis.moic


def test_portfolio_kpis_without_range_are_unadjusted():
    kpis = compute_portfolio_kpis(1000, 1200, 100)
    assert kpis.current_value == 1200.0
    assert kpis.multiplier == 1.0
    assert kpis.net_return_pct == pytest.approx(30.0)


def test_multiplier_table_is_configurable():
    config.configure(RANGE_MULTIPLIERS={**config.RANGE_MULTIPLIERS, "1m": 0.2})
    assert range_multiplier("1m") == 0.2


def test_kpi_bundle_from_ledger(event):
    events = [
        event("contribution", -1000),
        event("distribution_income", 200),
        event("fee_mgmt", -50),
    ]
    bundle = build_kpi_bundle(events, current_value=1100)

    assert bundle.total_contributions == 1000.0
    assert bundle.total_distributions == 200.0
    assert bundle.total_fees == 50.0
    assert bundle.net_cash_flow == -850.0
    assert bundle.moic == pytest.approx(1.3)
    assert bundle.tvpi == bundle.moic
    assert bundle.dpi == pytest.approx(0.2)
    assert bundle.net_return_pct == pytest.approx(30.0)
    assert bundle.realized_gains == 0.0


def test_kpi_bundle_explicit_invested(event):
    bundle = build_kpi_bundle([event("distribution_income", 100)], current_value=900, total_invested=1000)
    assert bundle.moic == pytest.approx(1.0)
    assert bundle.net_return_pct == pytest.approx(0.0)


def test_kpi_bundle_with_no_events_is_all_zero():
    bundle = build_kpi_bundle([], current_value=0, range_token="1y")
    for value in bundle.to_dict().values():
        assert value == 0.0
        assert math.isfinite(value)


def test_aggregate_investment_totals(investments):
    totals = aggregate_investment_totals(investments)
    assert totals["total_invested"] == 17500.0
    assert totals["current_value"] == 14000.0
    assert totals["total_distributions"] == 6800.0
    assert totals["income_ytd"] == 200.0
    assert totals["count"] == 3


def test_allocation_breakdown():
    records = [
        {"type": "Office", "value": 300},
        {"type": "Retail", "value": 100},
        {"type": "Office", "value": 100},
        {"value": 0},
    ]
    rows = allocation_breakdown(records, "type", "value")
    assert [r["name"] for r in rows] == ["Office", "Retail", "Unknown"]
    assert rows[0]["value"] == 400.0
    assert rows[0]["percentage"] == pytest.approx(80.0)
    assert rows[1]["percentage"] == pytest.approx(20.0)
    assert rows[2]["percentage"] == 0.0


def test_allocation_breakdown_zero_total():
    rows = allocation_breakdown([{"type": "Office", "value": 0}], "type", "value")
    assert rows == [{"name": "Office", "value": 0.0, "percentage": 0.0}]
