"""Metric dependency graph: reference validation, cycle detection, ordering."""

from collections.abc import Iterable

from semantic_metrics.application.services.context_transforms import DEFAULT_MONTH_KEY, DEFAULT_YEAR_KEY
from semantic_metrics.domain.entities import (
    ContextTransformMetric,
    DerivedMetric,
    ExpressionMetric,
    FactMeasureMetric,
    FactTable,
    Metric,
)
from semantic_metrics.domain.errors import (
    ConfigurationError,
    CyclicDependencyError,
    UnknownReferenceError,
)
from semantic_metrics.domain.registries import SemanticModel


def metric_dependencies(metric: Metric) -> tuple[str, ...]:
    """Names of metrics that ``metric`` evaluates directly."""
    if isinstance(metric, DerivedMetric):
        return metric.dependencies
    if isinstance(metric, ContextTransformMetric):
        return (metric.base_measure,)
    return ()


def validate_model(
    model: SemanticModel,
    time_keys: Iterable[str] = (DEFAULT_YEAR_KEY, DEFAULT_MONTH_KEY),
) -> None:
    """Fail fast on unknown references and dependency cycles.

    Fact table grain keys must name a registered dimension or one of ``time_keys``.
    """
    reserved = set(time_keys)
    for fact_table in model.fact_tables:
        _validate_grain(fact_table, model, reserved)
    for metric in model.metrics:
        _validate_references(metric, model)
    evaluation_order(model)


def evaluation_order(model: SemanticModel) -> list[str]:
    """Metric names ordered so that every dependency precedes its dependents.

    Raises CyclicDependencyError naming the cycle path.
    """
    order: list[str] = []
    done: set[str] = set()

    for name in model.metrics.names():
        _visit(name, model, [], done, order)

    return order


def _visit(
    name: str,
    model: SemanticModel,
    path: list[str],
    done: set[str],
    order: list[str],
) -> None:
    """Depth-first visit keeping the active path for cycle reporting."""
    if name in done:
        return
    if name in path:
        raise CyclicDependencyError(path[path.index(name):] + [name])

    metric = model.metrics.get(name)
    path.append(name)
    for dependency in metric_dependencies(metric):
        _visit(dependency, model, path, done, order)
    path.pop()

    done.add(name)
    order.append(name)


def _validate_grain(fact_table: FactTable, model: SemanticModel, reserved: set[str]) -> None:
    unknown = [key for key in fact_table.grain if key not in reserved and key not in model.dimensions]
    if unknown:
        raise UnknownReferenceError(
            f"Unknown dimension {unknown} in grain of fact table {fact_table.name}"
        )


def _validate_references(metric: Metric, model: SemanticModel) -> None:
    if isinstance(metric, (FactMeasureMetric, ExpressionMetric)):
        fact_table = model.fact_tables.get(metric.fact_table)
        if metric.grain is not None:
            outside = [key for key in metric.grain if key not in fact_table.grain]
            if outside:
                raise ConfigurationError(
                    f"Metric {metric.name} grain {outside} not in grain of fact table "
                    f"{fact_table.name}: {list(fact_table.grain)}"
                )
        if isinstance(metric, FactMeasureMetric) and fact_table.get_measure(metric.fact_column) is None:
            raise UnknownReferenceError(
                f"Unknown measure {metric.fact_column} in fact table {fact_table.name} "
                f"(metric {metric.name})"
            )

    elif isinstance(metric, ContextTransformMetric):
        if metric.transform not in model.transforms:
            raise UnknownReferenceError(
                f"Unknown context transform: {metric.transform} (metric {metric.name})"
            )

    for dependency in metric_dependencies(metric):
        if dependency not in model.metrics:
            raise UnknownReferenceError(f"Unknown metric: {dependency} (dependency of {metric.name})")
