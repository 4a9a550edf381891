"""Metric evaluation engine."""

import math
import numbers
from collections.abc import Callable
from typing import Any

import pandas as pd

from semantic_metrics.application.services.aggregations import aggregate, to_metric_value
from semantic_metrics.application.services.cache import MISSING, EvaluationCache
from semantic_metrics.application.services.filter_context import apply_filter_context
from semantic_metrics.domain.entities import (
    ContextTransformMetric,
    DerivedMetric,
    ExpressionMetric,
    FactMeasureMetric,
    FactTable,
    Metric,
)
from semantic_metrics.domain.enums import MetricKind
from semantic_metrics.domain.errors import (
    ConfigurationError,
    CyclicDependencyError,
    EvaluationError,
    UnknownReferenceError,
)
from semantic_metrics.domain.ports import RowSourcePort
from semantic_metrics.domain.registries import SemanticModel
from semantic_metrics.domain.types import FilterContext, MetricValue

ActivePath = tuple[str, ...]


class MetricEvaluator:
    """Evaluates metrics of a semantic model against a filter context.

    Values are memoized per (metric name, canonical context) in the cache
    passed by the caller; pass a fresh cache per query.
    """

    def __init__(self, model: SemanticModel, row_source: RowSourcePort) -> None:
        """Initialize evaluator."""
        self.model = model
        self.row_source = row_source
        self._evaluators: dict[MetricKind, Callable[..., MetricValue]] = {
            MetricKind.FACT_MEASURE: self._evaluate_fact_measure,
            MetricKind.EXPRESSION: self._evaluate_expression,
            MetricKind.DERIVED: self._evaluate_derived,
            MetricKind.CONTEXT_TRANSFORM: self._evaluate_context_transform,
        }

    def evaluate(
        self,
        metric_name: str,
        context: FilterContext,
        cache: EvaluationCache | None = None,
    ) -> MetricValue:
        """Evaluate a metric; a new cache is used when none is given."""
        if cache is None:
            cache = EvaluationCache()
        return self._evaluate(metric_name, context, cache, ())

    def grain_for(self, metric: FactMeasureMetric | ExpressionMetric) -> tuple[str, ...]:
        """Metric grain, defaulting to the native grain of its fact table."""
        if metric.grain is not None:
            return metric.grain
        return self.model.fact_tables.get(metric.fact_table).grain

    def _evaluate(
        self,
        metric_name: str,
        context: FilterContext,
        cache: EvaluationCache,
        active: ActivePath,
    ) -> MetricValue:
        if metric_name in active:
            raise CyclicDependencyError(list(active[active.index(metric_name):]) + [metric_name])

        metric = self.model.metrics.get(metric_name)

        key = cache.key_for(metric_name, context)
        cached = cache.lookup(key)
        if cached is not MISSING:
            return cached

        evaluator = self._evaluators.get(metric.kind)
        if not evaluator:
            raise ConfigurationError(f"Unsupported metric kind: {metric.kind}")

        value = evaluator(metric, context, cache, active + (metric_name,))
        cache.store(key, value)
        return value

    def _evaluate_fact_measure(
        self,
        metric: FactMeasureMetric,
        context: FilterContext,
        cache: EvaluationCache,
        active: ActivePath,
    ) -> MetricValue:
        fact_table = self.model.fact_tables.get(metric.fact_table)
        measure = fact_table.get_measure(metric.fact_column)
        if measure is None:
            raise UnknownReferenceError(
                f"Unknown measure {metric.fact_column} in fact table {fact_table.name}"
            )

        rows = self._filtered_rows(fact_table, context, self.grain_for(metric))
        return aggregate(rows, measure.column, metric.agg or measure.default_agg)

    def _evaluate_expression(
        self,
        metric: ExpressionMetric,
        context: FilterContext,
        cache: EvaluationCache,
        active: ActivePath,
    ) -> MetricValue:
        fact_table = self.model.fact_tables.get(metric.fact_table)
        rows = self._filtered_rows(fact_table, context, self.grain_for(metric))
        return _checked_value(metric, metric.expression(rows))

    def _evaluate_derived(
        self,
        metric: DerivedMetric,
        context: FilterContext,
        cache: EvaluationCache,
        active: ActivePath,
    ) -> MetricValue:
        values = {
            dependency: self._evaluate(dependency, context, cache, active)
            for dependency in metric.dependencies
        }
        return _checked_value(metric, metric.combine(values))

    def _evaluate_context_transform(
        self,
        metric: ContextTransformMetric,
        context: FilterContext,
        cache: EvaluationCache,
        active: ActivePath,
    ) -> MetricValue:
        transform = self.model.transforms.get(metric.transform)
        transformed = transform(dict(context))
        return self._evaluate(metric.base_measure, transformed, cache, active)

    def _filtered_rows(
        self,
        fact_table: FactTable,
        context: FilterContext,
        grain: tuple[str, ...],
    ) -> pd.DataFrame:
        rows = self.row_source.get_fact_rows(fact_table.name)
        return apply_filter_context(rows, context, grain)


def _checked_value(metric: Metric, value: Any) -> MetricValue:
    """Normalize a user callback result; reject non-numeric and non-finite values."""
    value = to_metric_value(value)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise EvaluationError(
            f"Metric {metric.name} returned non-numeric value: {value!r}"
        )
    if not math.isfinite(value):
        raise EvaluationError(
            f"Metric {metric.name} returned non-finite value: {value!r}"
        )
    return value
