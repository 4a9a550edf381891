"""Build and validate a semantic model from a definitions document."""

import json
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any

import structlog

from semantic_metrics.application.dto.definitions import (
    ContextTransformDefinition,
    DerivedDefinition,
    ExpressionDefinition,
    FactMeasureDefinition,
    SemanticModelDocument,
)
from semantic_metrics.application.services.context_transforms import (
    DEFAULT_MONTH_KEY,
    DEFAULT_YEAR_KEY,
    default_context_transforms,
)
from semantic_metrics.application.services.dependency_graph import validate_model
from semantic_metrics.application.services.derived_ops import build_combiner
from semantic_metrics.domain.entities import (
    ContextTransformMetric,
    DerivedMetric,
    Dimension,
    ExpressionMetric,
    FactColumn,
    FactMeasureMetric,
    FactTable,
    Metric,
)
from semantic_metrics.domain.errors import ConfigurationError, UnknownReferenceError
from semantic_metrics.domain.registries import (
    ContextTransformRegistry,
    DimensionRegistry,
    FactTableRegistry,
    MetricRegistry,
    SemanticModel,
)
from semantic_metrics.domain.types import ContextTransformFn

logger = structlog.get_logger()


def run(
    document: SemanticModelDocument | Mapping[str, Any],
    functions: Mapping[str, Callable] | None = None,
    transforms: Mapping[str, ContextTransformFn] | None = None,
    extra_metrics: list[Metric] | None = None,
    time_keys: Iterable[str] = (DEFAULT_YEAR_KEY, DEFAULT_MONTH_KEY),
) -> SemanticModel:
    """Build a validated semantic model.

    ``functions`` resolves the names used by expression metrics and by derived
    metrics declared with ``function``. ``transforms`` defaults to the built-in
    transform table. ``extra_metrics`` are appended as already-built entities.
    ``time_keys`` are grain keys accepted without a registered dimension.
    """
    if not isinstance(document, SemanticModelDocument):
        document = SemanticModelDocument.model_validate(document)

    functions = functions or {}
    if transforms is None:
        transforms = default_context_transforms()

    dimensions = [
        Dimension(
            key=definition.key,
            table=definition.table,
            lookup_key=definition.lookup_key,
            label_field=definition.label_field,
            label_alias=definition.label_alias,
        )
        for definition in document.dimensions
    ]

    fact_tables = [
        FactTable(
            name=definition.name,
            grain=tuple(definition.grain),
            measures={
                measure_name: FactColumn(
                    column=measure.column,
                    default_agg=measure.default_agg,
                    format=measure.format,
                )
                for measure_name, measure in definition.measures.items()
            },
        )
        for definition in document.fact_tables
    ]

    metrics = [_build_metric(definition, functions) for definition in document.metrics]
    metrics.extend(extra_metrics or [])

    model = SemanticModel(
        dimensions=DimensionRegistry(dimensions),
        fact_tables=FactTableRegistry(fact_tables),
        metrics=MetricRegistry(metrics),
        transforms=ContextTransformRegistry(transforms),
    )
    validate_model(model, time_keys)

    logger.info(
        "semantic_model_loaded",
        dimensions=len(model.dimensions),
        fact_tables=len(model.fact_tables),
        metrics=len(model.metrics),
        transforms=len(model.transforms),
    )
    return model


def run_from_file(
    model_path: str | Path,
    functions: Mapping[str, Callable] | None = None,
    transforms: Mapping[str, ContextTransformFn] | None = None,
    time_keys: Iterable[str] = (DEFAULT_YEAR_KEY, DEFAULT_MONTH_KEY),
) -> SemanticModel:
    """Load a JSON semantic model document from disk."""
    path = Path(model_path)
    logger.info("loading_semantic_model", model_path=str(path))
    with path.open(encoding="utf-8") as handle:
        document = json.load(handle)
    return run(document, functions=functions, transforms=transforms, time_keys=time_keys)


def _build_metric(definition: Any, functions: Mapping[str, Callable]) -> Metric:
    """Convert a metric definition into its domain entity."""
    if isinstance(definition, FactMeasureDefinition):
        return FactMeasureMetric(
            name=definition.name,
            fact_table=definition.fact_table,
            fact_column=definition.fact_column,
            agg=definition.agg,
            grain=tuple(definition.grain) if definition.grain is not None else None,
            format=definition.format,
        )

    if isinstance(definition, ExpressionDefinition):
        return ExpressionMetric(
            name=definition.name,
            fact_table=definition.fact_table,
            expression=_resolve_function(definition.expression, functions, definition.name),
            grain=tuple(definition.grain) if definition.grain is not None else None,
            format=definition.format,
        )

    if isinstance(definition, DerivedDefinition):
        if (definition.op is None) == (definition.function is None):
            raise ConfigurationError(
                f"Derived metric {definition.name} needs exactly one of op or function"
            )
        if definition.scale is not None and definition.op is None:
            raise ConfigurationError(
                f"Derived metric {definition.name} sets scale without op"
            )
        if definition.op is not None:
            combine = build_combiner(definition.op, definition.dependencies, definition.scale)
        else:
            combine = _resolve_function(definition.function, functions, definition.name)
        return DerivedMetric(
            name=definition.name,
            dependencies=tuple(definition.dependencies),
            combine=combine,
            format=definition.format,
        )

    if isinstance(definition, ContextTransformDefinition):
        return ContextTransformMetric(
            name=definition.name,
            base_measure=definition.base_measure,
            transform=definition.transform,
            format=definition.format,
        )

    raise ConfigurationError(f"Unsupported metric definition: {definition!r}")


def _resolve_function(name: str, functions: Mapping[str, Callable], metric_name: str) -> Callable:
    try:
        return functions[name]
    except KeyError:
        raise UnknownReferenceError(f"Unknown function: {name} (metric {metric_name})") from None
