from datetime import datetime

import pytest

from portfolio_analytics_engine import config
from portfolio_analytics_engine.data_objects import FinancialEvent, PerformanceSnapshot


def make_event(
    transaction_type,
    amount,
    occurred_at=datetime(2024, 1, 15),
    investment_id="inv-1",
    event_id=None,
    **extra,
):
    make_event.counter += 1
    return FinancialEvent(
        id=event_id or f"tx-{make_event.counter}",
        investment_id=investment_id,
        transaction_type=transaction_type,
        amount=amount,
        occurred_at=occurred_at,
        **extra,
    )


make_event.counter = 0


def make_point(year, month, day, value):
    return PerformanceSnapshot(date=datetime(year, month, day), portfolio_value=value)


@pytest.fixture
def event():
    return make_event


@pytest.fixture
def point():
    return make_point


@pytest.fixture(autouse=True)
def restore_config():
    """Undo config.configure() calls made by a test."""
    saved = {key: getattr(config, key) for key in config._DEFAULTS}
    yield
    for key, value in saved.items():
        setattr(config, key, value)


@pytest.fixture
def properties():
    return [
        {
            "id": "p1",
            "title": "Downtown Office Complex",
            "city": "Austin",
            "address": "100 Congress Ave",
            "property_type": "Office",
            "property_status": "funding",
            "expected_annual_return": 9.0,
            "minimum_investment": 5000,
            "risk_rating": 4,
            "current_funding": 500_000,
            "target_funding": 1_000_000,
            "created_at": "2024-01-10",
        },
        {
            "id": "p2",
            "title": "Lakeside Apartments",
            "city": "Denver",
            "address": "12 Lake Rd",
            "property_type": "Multifamily",
            "property_status": "funded",
            "expected_annual_return": 7.5,
            "minimum_investment": 1000,
            "risk_rating": 2,
            "current_funding": 2_000_000,
            "target_funding": 2_000_000,
            "created_at": "2023-11-01",
        },
        {
            "id": "p3",
            "title": "Harbor Retail Center",
            "city": "Seattle",
            "address": "8 Pier St",
            "property_type": "Retail",
            "property_status": "coming_soon",
            "expected_annual_return": 12.0,
            "minimum_investment": 25000,
            "risk_rating": 8,
            "current_funding": 0,
            "target_funding": 750_000,
            "created_at": "2024-03-02",
        },
        {
            "id": "p4",
            "title": "Austin Logistics Hub",
            "city": "Austin",
            "address": "55 Industrial Way",
            "property_type": "Industrial",
            "property_status": "Closed",
            "expected_annual_return": 8.0,
            "minimum_investment": 10000,
            "risk_rating": 6,
            "current_funding": 900_000,
            "target_funding": 900_000,
            "created_at": "2022-05-20",
        },
    ]


@pytest.fixture
def investments():
    return [
        {
            "id": "i1",
            "investment_status": "active",
            "amount_invested": 10000,
            "current_value": 11500,
            "total_distributions": 600,
            "income_ytd": 200,
            "irr": 11.0,
            "net_return_percent": 21.0,
            "properties": {"title": "Downtown Office Complex", "city": "Austin", "sponsor": "Summit Capital",
                           "property_type": "Office", "risk_rating": 4},
        },
        {
            "id": "i2",
            "investment_status": "exited",
            "amount_invested": 5000,
            "current_value": 0,
            "total_distributions": 6200,
            "irr": 9.5,
            "net_return_percent": 24.0,
            "properties": {"title": "Lakeside Apartments", "city": "Denver", "sponsor": "Blue Ridge",
                           "property_type": "Multifamily", "risk_rating": 2},
        },
        {
            "id": "i3",
            "investment_status": "committed",
            "amount_invested": 2500,
            "current_value": 2500,
            "irr": None,
            "properties": {"title": "harbor retail center", "sponsor": "Summit Capital",
                           "property_type": "Retail", "risk_rating": 8},
        },
    ]
