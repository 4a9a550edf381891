"""Grain-aware filter context evaluation over fact rows."""

import numbers
import operator
from collections.abc import Callable, Iterable, Mapping
from typing import Any

import numpy as np
import pandas as pd

from semantic_metrics.domain.enums import FilterOperator
from semantic_metrics.domain.errors import InvalidFilterError
from semantic_metrics.domain.types import FilterContext, FilterValue

RowPredicate = Callable[[Any], bool]

_RANGE_KEYS = frozenset({"from", "to"})

_COMPARISON_OPS: dict[FilterOperator, Callable[[Any, Any], bool]] = {
    FilterOperator.LT: operator.lt,
    FilterOperator.LTE: operator.le,
    FilterOperator.GT: operator.gt,
    FilterOperator.GTE: operator.ge,
}


def apply_filter_context(
    rows: pd.DataFrame,
    context: FilterContext,
    grain: Iterable[str],
) -> pd.DataFrame:
    """Keep rows passing every context filter whose key is part of ``grain``.

    Keys outside the grain are ignored. Input order is preserved.
    """
    grain_keys = set(grain)
    mask = np.ones(len(rows), dtype=bool)

    for key, filter_value in context.items():
        if key not in grain_keys or filter_value is None:
            continue

        predicate = build_predicate(filter_value)
        if key not in rows.columns:
            mask[:] = False
            continue

        mask &= rows[key].map(predicate).to_numpy(dtype=bool)

    return rows[mask]


def build_predicate(filter_value: FilterValue) -> RowPredicate:
    """Build a row-value predicate for a scalar, range or comparison filter."""
    if isinstance(filter_value, Mapping):
        keys = set(filter_value)
        if keys <= _RANGE_KEYS:
            return _range_predicate(filter_value.get("from"), filter_value.get("to"))
        if keys and keys <= {op.value for op in FilterOperator}:
            return _comparison_predicate(filter_value)
        raise InvalidFilterError(f"Unsupported filter keys: {sorted(keys)}")

    if isinstance(filter_value, (list, tuple, set, frozenset)):
        raise InvalidFilterError(f"Unsupported filter value: {filter_value!r}")

    return _equality_predicate(filter_value)


def values_match(row_value: Any, target: Any) -> bool:
    """Exact kind + value equality."""
    if is_missing(row_value) or value_kind(row_value) != value_kind(target):
        return False
    return bool(row_value == target)


def is_missing(value: Any) -> bool:
    """True for None, NaN and other pandas missing markers."""
    return value is None or (pd.api.types.is_scalar(value) and bool(pd.isna(value)))


def value_kind(value: Any) -> str:
    """Classify a value for comparison: bool, number, str or its type name."""
    if isinstance(value, (bool, np.bool_)):
        return "bool"
    if isinstance(value, numbers.Number):
        return "number"
    if isinstance(value, str):
        return "str"
    return type(value).__name__


def _equality_predicate(target: Any) -> RowPredicate:
    def predicate(row_value: Any) -> bool:
        return values_match(row_value, target)

    return predicate


def _range_predicate(lower: Any, upper: Any) -> RowPredicate:
    """Inclusive on both ends; None bound is unbounded."""

    def predicate(row_value: Any) -> bool:
        if is_missing(row_value):
            return False
        if lower is not None and not _compare(operator.ge, row_value, lower):
            return False
        if upper is not None and not _compare(operator.le, row_value, upper):
            return False
        return True

    return predicate


def _comparison_predicate(filter_value: Mapping[str, Any]) -> RowPredicate:
    checks = [
        (_COMPARISON_OPS[FilterOperator(op)], bound)
        for op, bound in filter_value.items()
    ]

    def predicate(row_value: Any) -> bool:
        if is_missing(row_value):
            return False
        return all(_compare(compare, row_value, bound) for compare, bound in checks)

    return predicate


def _compare(compare: Callable[[Any, Any], bool], row_value: Any, bound: Any) -> bool:
    if value_kind(row_value) != value_kind(bound):
        return False
    try:
        return bool(compare(row_value, bound))
    except TypeError:
        return False
