"""Domain types and aliases."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, TypedDict, Union

import pandas as pd

ScalarValue = Union[str, int, float, bool]


# Inclusive range; a missing bound is unbounded. "from" is a keyword.
RangeFilter = TypedDict(
    "RangeFilter",
    {"from": Union[ScalarValue, None], "to": Union[ScalarValue, None]},
    total=False,
)


class ComparisonFilter(TypedDict, total=False):
    """Comparison filter; every stated relation must hold."""

    lt: ScalarValue
    lte: ScalarValue
    gt: ScalarValue
    gte: ScalarValue


FilterValue = Union[ScalarValue, RangeFilter, ComparisonFilter, None]

# Dimension key (or reserved key such as a time unit) -> constraint
FilterContext = Mapping[str, FilterValue]

MetricValue = Union[int, float, None]

# Flat result row: dimension values, label texts and formatted metric values
ResultRow = dict[str, Any]

ExpressionFn = Callable[[pd.DataFrame], MetricValue]
CombineFn = Callable[[Mapping[str, MetricValue]], MetricValue]
ContextTransformFn = Callable[[FilterContext], dict[str, FilterValue]]
