"""Run a metrics query - row enumeration, evaluation, labels and formatting."""

from collections.abc import Mapping, Sequence
from typing import Any

import numpy as np
import pandas as pd
import structlog

from semantic_metrics.application.dto.query import QueryRequest
from semantic_metrics.application.services.cache import EvaluationCache
from semantic_metrics.application.services.evaluator import MetricEvaluator
from semantic_metrics.application.services.filter_context import (
    apply_filter_context,
    is_missing,
    value_kind,
)
from semantic_metrics.application.services.formatting import (
    DEFAULT_CURRENCY_SYMBOL,
    format_value,
    resolve_format,
)
from semantic_metrics.domain.entities import Dimension, FactTable
from semantic_metrics.domain.errors import ConfigurationError
from semantic_metrics.domain.ports import RowSourcePort
from semantic_metrics.domain.registries import SemanticModel
from semantic_metrics.domain.types import ResultRow

logger = structlog.get_logger()


def run(
    request: QueryRequest | Mapping[str, Any],
    model: SemanticModel,
    row_source: RowSourcePort,
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL,
) -> list[ResultRow]:
    """Evaluate the requested metrics for every row-dimension combination.

    Rows come back in first-seen combination order. The evaluation cache lives
    for this call only.
    """
    if not isinstance(request, QueryRequest):
        request = QueryRequest.model_validate(request)

    fact_table = _validate_request(request, model)

    evaluator = MetricEvaluator(model, row_source)
    cache = EvaluationCache()

    # Global slice at the fact table's native grain
    sliced = apply_filter_context(
        row_source.get_fact_rows(fact_table.name),
        request.filters,
        fact_table.grain,
    )
    combinations = distinct_combinations(sliced, request.row_dimensions)

    label_dimensions = [
        model.dimensions.get(key) for key in request.row_dimensions if key in model.dimensions
    ]
    label_lookups = [(dimension, _label_lookup(dimension, row_source)) for dimension in label_dimensions]
    formats = {name: resolve_format(model, name) for name in request.metric_names}

    results: list[ResultRow] = []
    for combination in combinations:
        row_context = {**request.filters, **combination}

        result: ResultRow = dict(combination)
        for dimension, lookup in label_lookups:
            result[dimension.label_alias] = _label_for(lookup, combination[dimension.key])

        for metric_name in request.metric_names:
            value = evaluator.evaluate(metric_name, row_context, cache)
            result[metric_name] = format_value(value, formats[metric_name], currency_symbol)

        results.append(result)

    logger.info(
        "query_completed",
        fact_table=fact_table.name,
        row_dimensions=request.row_dimensions,
        metric_count=len(request.metric_names),
        row_count=len(results),
        cache_entries=len(cache),
        cache_hits=cache.hits,
    )
    return results


def distinct_combinations(rows: pd.DataFrame, dimensions: Sequence[str]) -> list[dict[str, Any]]:
    """Distinct row-dimension value combinations in first-seen order.

    No dimensions gives a single empty combination (grand total). Rows missing
    any dimension value do not form a combination.
    """
    dimensions = list(dict.fromkeys(dimensions))
    if not dimensions:
        return [{}]
    if any(dimension not in rows.columns for dimension in dimensions):
        return []

    seen: set[tuple] = set()
    combinations: list[dict[str, Any]] = []
    for raw_values in rows[dimensions].itertuples(index=False, name=None):
        values = tuple(_to_python(value) for value in raw_values)
        if any(is_missing(value) for value in values):
            continue
        key = tuple((value_kind(value), value) for value in values)
        if key in seen:
            continue
        seen.add(key)
        combinations.append(dict(zip(dimensions, values)))

    return combinations


def _validate_request(request: QueryRequest, model: SemanticModel) -> FactTable:
    """Fail before any evaluation on unknown names."""
    fact_table = model.fact_tables.get(request.fact_table)

    for metric_name in request.metric_names:
        model.metrics.get(metric_name)

    outside = [key for key in request.row_dimensions if key not in fact_table.grain]
    if outside:
        raise ConfigurationError(
            f"Row dimensions {outside} not in grain of fact table {fact_table.name}: "
            f"{list(fact_table.grain)}"
        )
    return fact_table


def _label_lookup(dimension: Dimension, row_source: RowSourcePort) -> dict[tuple, Any]:
    """Lookup key -> label text; first row wins for duplicate keys."""
    lookup_rows = row_source.get_lookup_rows(dimension.table)
    if dimension.lookup_key not in lookup_rows.columns or dimension.label_field not in lookup_rows.columns:
        return {}

    lookup: dict[tuple, Any] = {}
    keys = lookup_rows[dimension.lookup_key].tolist()
    labels = lookup_rows[dimension.label_field].tolist()
    for key, label in zip(keys, labels):
        if is_missing(key):
            continue
        lookup.setdefault(_lookup_key(key), None if is_missing(label) else label)
    return lookup


def _label_for(lookup: dict[tuple, Any], value: Any) -> Any:
    return lookup.get(_lookup_key(value))


def _lookup_key(value: Any) -> tuple:
    value = _to_python(value)
    return value_kind(value), value


def _to_python(value: Any) -> Any:
    if isinstance(value, np.generic):
        return value.item()
    return value
