"""Aggregations over fact columns."""

import math
from typing import Any, Callable

import numpy as np
import pandas as pd

from semantic_metrics.domain.enums import AggregationType
from semantic_metrics.domain.errors import ConfigurationError
from semantic_metrics.domain.types import MetricValue


def aggregate(rows: pd.DataFrame, column: str, agg: AggregationType | str) -> MetricValue:
    """Aggregate ``column`` over ``rows``.

    Empty input: sum, count and count_distinct give 0; avg, min and max give None.
    Rows lacking the column count as missing values.
    """
    if isinstance(agg, str):
        try:
            agg = AggregationType(agg)
        except ValueError:
            raise ConfigurationError(f"Unknown aggregation: {agg}") from None

    aggregator = _AGGREGATORS.get(agg)
    if not aggregator:
        raise ConfigurationError(f"Unsupported aggregation: {agg}")

    return aggregator(rows, column)


def agg_sum(rows: pd.DataFrame, column: str) -> MetricValue:
    """Sum of non-missing values; 0 when there are none."""
    values = _numeric_values(rows, column)
    if values.empty:
        return 0
    return to_metric_value(values.sum())


def agg_avg(rows: pd.DataFrame, column: str) -> MetricValue:
    """Mean of non-missing values."""
    values = _numeric_values(rows, column)
    if values.empty:
        return None
    return to_metric_value(values.mean())


def agg_count(rows: pd.DataFrame, column: str) -> MetricValue:
    """Number of rows."""
    return len(rows)


def agg_count_distinct(rows: pd.DataFrame, column: str) -> MetricValue:
    """Number of distinct non-missing values."""
    if column not in rows.columns:
        return 0
    return int(rows[column].nunique(dropna=True))


def agg_min(rows: pd.DataFrame, column: str) -> MetricValue:
    """Minimum of non-missing values."""
    values = _numeric_values(rows, column)
    if values.empty:
        return None
    return to_metric_value(values.min())


def agg_max(rows: pd.DataFrame, column: str) -> MetricValue:
    """Maximum of non-missing values."""
    values = _numeric_values(rows, column)
    if values.empty:
        return None
    return to_metric_value(values.max())


_AGGREGATORS: dict[AggregationType, Callable[[pd.DataFrame, str], MetricValue]] = {
    AggregationType.SUM: agg_sum,
    AggregationType.AVG: agg_avg,
    AggregationType.COUNT: agg_count,
    AggregationType.COUNT_DISTINCT: agg_count_distinct,
    AggregationType.MIN: agg_min,
    AggregationType.MAX: agg_max,
}


def to_metric_value(value: Any) -> MetricValue:
    """Normalize numpy scalars to Python numbers and NaN to None."""
    if value is None:
        return None
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float) and math.isnan(value):
        return None
    if value is pd.NA or value is pd.NaT:
        return None
    return value


def _numeric_values(rows: pd.DataFrame, column: str) -> pd.Series:
    """Non-missing numeric values of a column (non-numeric entries count as missing)."""
    if column not in rows.columns or rows.empty:
        return pd.Series([], dtype="float64")
    return pd.to_numeric(rows[column], errors="coerce").dropna()
