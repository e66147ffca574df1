from datetime import datetime

import pytest

from portfolio_analytics_engine.filters import FilterCriteria, GroupSpec, SortSpec
from portfolio_analytics_engine.view_config import (
    ViewConfig,
    apply_view,
    load_view_config,
    resolve_view_config,
)


def test_preset_view_from_dict():
    view = ViewConfig.from_dict(
        {
            "filter": {"preset": "property", "status": "available"},
            "sort": {"preset": "property", "sort_by": "newest"},
            "group": {"by": "risk"},
        }
    )
    assert view.sort == SortSpec("newest", "desc")
    assert view.group == GroupSpec("risk")
    assert view.has_active_filters()


def test_untouched_preset_has_no_active_filters():
    view = ViewConfig.from_dict({"filter": {"preset": "property"}})
    assert not view.has_active_filters()


def test_plain_filter_view():
    view = ViewConfig.from_dict({"filter": {"search": "lake", "search_fields": ["title"]}})
    assert view.filter == FilterCriteria(search="lake", search_fields=["title"])
    assert view.has_active_filters()
    assert not ViewConfig().has_active_filters()


def test_apply_view_runs_all_stages(properties):
    grouped = apply_view(
        properties,
        {
            "filter": {"preset": "property", "search": "austin"},
            "sort": {"preset": "property", "sort_by": "newest"},
            "group": {"preset": "investment", "group_by": "risk"},
        },
    )
    # investment grouping reads properties.risk_rating, absent on property rows
    assert list(grouped) == ["Low Risk"]
    assert [p["id"] for p in grouped["Low Risk"]] == ["p1", "p4"]

    listing = apply_view(properties, {"sort": {"by": "title", "direction": "asc"}})
    assert [p["id"] for p in listing] == ["p4", "p1", "p3", "p2"]


def test_transaction_preset_view(event):
    rows = [
        event("dividend", 10, occurred_at=datetime(2024, 3, 1), event_id="a"),
        event("interest", 10, occurred_at=datetime(2023, 3, 1), event_id="b"),
    ]
    view = {
        "filter": {"preset": "transaction", "date_preset": "ytd", "now": "2024-03-20"},
        "group": {"preset": "transaction", "group_by": "type"},
    }
    grouped = apply_view(rows, view)
    assert list(grouped) == ["DIVIDEND"]
    # Date preset differs from the screen default (last_30)
    assert resolve_view_config(view).has_active_filters()


def test_load_view_config(tmp_path, properties):
    path = tmp_path / "view.yaml"
    path.write_text(
        "filter:\n"
        "  preset: property\n"
        "  min_return: 8.5\n"
        "sort:\n"
        "  preset: property\n"
        "  sort_by: target_irr\n",
        encoding="utf-8",
    )
    view = load_view_config(path)
    assert [p["id"] for p in apply_view(properties, view)] == ["p3", "p1"]
    assert [p["id"] for p in apply_view(properties, str(path))] == ["p3", "p1"]


def test_invalid_view_inputs(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_view_config(path)

    with pytest.raises(ValueError):
        ViewConfig.from_dict({"filter": {"preset": "wishlist"}})

    with pytest.raises(TypeError):
        resolve_view_config(42)
