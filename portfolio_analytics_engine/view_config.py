"""View configuration: explicit filter/sort/group state supplied by the caller.

A view can be given as a ViewConfig, a plain dict, or a YAML file path::

    filter:
      preset: property          # property | investment | transaction
      min_return: 8
      status: available
    sort:
      preset: property
      sort_by: newest
    group:
      by: risk

Without ``preset`` the ``filter``/``sort``/``group`` dicts map one-to-one to
FilterCriteria / SortSpec / GroupSpec. Persisting views is left to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import yaml

from portfolio_analytics_engine._logging import analytics_logger, log_errors
from portfolio_analytics_engine.filters import (
    FilterCriteria,
    GroupSpec,
    SortSpec,
    filter_records,
    group_records,
    investment_criteria,
    investment_group,
    investment_sort,
    property_criteria,
    property_sort,
    sort_records,
    transaction_criteria,
    transaction_group,
)

FILTER_PRESETS = {
    "property": property_criteria,
    "investment": investment_criteria,
    "transaction": transaction_criteria,
}

SORT_PRESETS = {
    "property": property_sort,
    "investment": investment_sort,
}

GROUP_PRESETS = {
    "investment": investment_group,
    "transaction": transaction_group,
}


@dataclass
class ViewConfig:
    """Filter, sort and group settings for one listing screen.

    ``defaults`` is the screen's untouched filter state; when present,
    ``has_active_filters`` compares against it instead of asking the criteria.
    """

    filter: FilterCriteria = field(default_factory=FilterCriteria)
    sort: Optional[SortSpec] = None
    group: Optional[GroupSpec] = None
    defaults: Optional[FilterCriteria] = None

    def has_active_filters(self) -> bool:
        if self.defaults is not None:
            return self.filter != self.defaults
        return self.filter.is_active()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filter": self.filter.to_dict(),
            "sort": self.sort.to_dict() if self.sort else None,
            "group": self.group.to_dict() if self.group else None,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ViewConfig":
        d = d or {}
        criteria, defaults = _criteria_from_dict(d.get("filter") or {})
        return cls(
            filter=criteria,
            sort=_sort_from_dict(d.get("sort")),
            group=_group_from_dict(d.get("group")),
            defaults=defaults,
        )


def _split_preset(section: Dict[str, Any], presets: Dict[str, Any], kind: str):
    params = dict(section)
    name = params.pop("preset")
    if name not in presets:
        raise ValueError(f"Unknown {kind} preset: {name!r} (expected one of {', '.join(presets)})")
    return presets[name], params


def _criteria_from_dict(section: Dict[str, Any]):
    if "preset" not in section:
        return FilterCriteria.from_dict(section), None
    builder, params = _split_preset(section, FILTER_PRESETS, "filter")
    default_params = {"now": params["now"]} if "now" in params else {}
    return builder(**params), builder(**default_params)


def _sort_from_dict(section: Optional[Dict[str, Any]]) -> Optional[SortSpec]:
    if not section:
        return None
    if "preset" not in section:
        return SortSpec.from_dict(section)
    builder, params = _split_preset(section, SORT_PRESETS, "sort")
    return builder(**params)


def _group_from_dict(section: Optional[Dict[str, Any]]) -> Optional[GroupSpec]:
    if not section:
        return None
    if "preset" not in section:
        return GroupSpec.from_dict(section)
    builder, params = _split_preset(section, GROUP_PRESETS, "group")
    return builder(**params)


@log_errors("medium")
def load_view_config(path: Union[str, Path]) -> ViewConfig:
    """Read a ViewConfig from a YAML file."""
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"View config {path} must be a mapping, got {type(raw).__name__}")
    analytics_logger.info("Loaded view config from %s", path)
    return ViewConfig.from_dict(raw)


def resolve_view_config(view: Union[str, Path, ViewConfig, Dict[str, Any], None]) -> ViewConfig:
    """Accept the supported view inputs and return a ViewConfig."""
    if view is None:
        return ViewConfig()
    if isinstance(view, ViewConfig):
        return view
    if isinstance(view, dict):
        return ViewConfig.from_dict(view)
    if isinstance(view, (str, Path)):
        return load_view_config(view)
    raise TypeError(f"Unsupported view type: {type(view)!r}")


def apply_view(
    records: Iterable[Any],
    view: Union[str, Path, ViewConfig, Dict[str, Any], None],
) -> Union[List[Any], Dict[str, List[Any]]]:
    """
    Run filter -> sort -> group.

    Returns a list when the view has no grouping, otherwise an ordered mapping
    of group label -> records.
    """
    view = resolve_view_config(view)
    rows = sort_records(filter_records(records, view.filter), view.sort)
    if view.group is None:
        return rows
    return group_records(rows, view.group)
