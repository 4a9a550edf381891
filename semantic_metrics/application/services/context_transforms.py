"""Built-in context transforms for time intelligence.

Every transform is a pure ``context -> context`` function. A context that lacks
the fields a transform needs (or holds them in an unsupported shape) is
returned unchanged, so metrics stay evaluable under any context.
"""

from collections.abc import Mapping
from typing import Any

from semantic_metrics.domain.types import ContextTransformFn, FilterContext, FilterValue

DEFAULT_YEAR_KEY = "year"
DEFAULT_MONTH_KEY = "month"


def year_to_date(month_key: str = DEFAULT_MONTH_KEY) -> ContextTransformFn:
    """Months 1..m of the current year."""

    def transform(context: FilterContext) -> dict[str, FilterValue]:
        month = context.get(month_key)
        if not _is_int(month):
            return dict(context)
        return {**context, month_key: {"from": 1, "to": month}}

    return transform


def quarter_to_date(month_key: str = DEFAULT_MONTH_KEY) -> ContextTransformFn:
    """Months from the start of the quarter through m."""

    def transform(context: FilterContext) -> dict[str, FilterValue]:
        month = context.get(month_key)
        if not _is_int(month):
            return dict(context)
        quarter_start = (month - 1) // 3 * 3 + 1
        return {**context, month_key: {"from": quarter_start, "to": month}}

    return transform


def last_year(year_key: str = DEFAULT_YEAR_KEY) -> ContextTransformFn:
    """Same period one year earlier. Year ranges shift both bounds."""

    def transform(context: FilterContext) -> dict[str, FilterValue]:
        year = context.get(year_key)
        if _is_int(year):
            return {**context, year_key: year - 1}
        if _is_range(year):
            shifted = {bound: _shift(value, -1) for bound, value in year.items()}
            return {**context, year_key: shifted}
        return dict(context)

    return transform


def prior_month(
    year_key: str = DEFAULT_YEAR_KEY,
    month_key: str = DEFAULT_MONTH_KEY,
) -> ContextTransformFn:
    """Previous month, wrapping January into December of the previous year."""

    def transform(context: FilterContext) -> dict[str, FilterValue]:
        month = context.get(month_key)
        if not _is_int(month):
            return dict(context)
        if month > 1:
            return {**context, month_key: month - 1}

        year = context.get(year_key)
        if not _is_int(year):
            return dict(context)
        return {**context, year_key: year - 1, month_key: 12}

    return transform


def compose(*transforms: ContextTransformFn) -> ContextTransformFn:
    """Apply transforms left to right."""

    def transform(context: FilterContext) -> dict[str, FilterValue]:
        result = dict(context)
        for step in transforms:
            result = step(result)
        return result

    return transform


def default_context_transforms(
    year_key: str = DEFAULT_YEAR_KEY,
    month_key: str = DEFAULT_MONTH_KEY,
) -> dict[str, ContextTransformFn]:
    """Built-in transform table."""
    ytd = year_to_date(month_key)
    previous_year = last_year(year_key)
    return {
        "ytd": ytd,
        "qtd": quarter_to_date(month_key),
        "last_year": previous_year,
        "ytd_last_year": compose(ytd, previous_year),
        "prior_month": prior_month(year_key, month_key),
    }


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_range(value: Any) -> bool:
    return isinstance(value, Mapping) and bool(value) and set(value) <= {"from", "to"}


def _shift(value: Any, delta: int) -> Any:
    return value + delta if _is_int(value) else value
