"""Domain entities."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import ClassVar, Union

from semantic_metrics.domain.enums import AggregationType, MetricKind, ValueFormat
from semantic_metrics.domain.types import CombineFn, ExpressionFn


@dataclass(frozen=True)
class Dimension:
    """Business entity used for grouping and filtering, backed by a lookup table."""

    key: str
    table: str
    lookup_key: str
    label_field: str
    label_alias: str


@dataclass(frozen=True)
class FactColumn:
    """Fact column definition of a fact table."""

    column: str
    default_agg: AggregationType = AggregationType.SUM
    format: ValueFormat = ValueFormat.RAW


@dataclass(frozen=True)
class FactTable:
    """Fact table with its native grain and measures."""

    name: str
    grain: tuple[str, ...]
    measures: Mapping[str, FactColumn] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "grain", tuple(self.grain))
        object.__setattr__(self, "measures", MappingProxyType(dict(self.measures)))

    def get_measure(self, measure_name: str) -> FactColumn | None:
        """Find a measure by name."""
        return self.measures.get(measure_name)


@dataclass(frozen=True)
class FactMeasureMetric:
    """Direct aggregation of a fact column."""

    kind: ClassVar[MetricKind] = MetricKind.FACT_MEASURE

    name: str
    fact_table: str
    fact_column: str
    agg: AggregationType | None = None
    grain: tuple[str, ...] | None = None
    format: ValueFormat | None = None

    def __post_init__(self) -> None:
        if self.grain is not None:
            object.__setattr__(self, "grain", tuple(self.grain))


@dataclass(frozen=True)
class ExpressionMetric:
    """Free-form aggregation over the filtered fact rows.

    ``expression`` must be pure: it receives the filtered rows as a DataFrame,
    must not modify them, and returns a number or None.
    """

    kind: ClassVar[MetricKind] = MetricKind.EXPRESSION

    name: str
    fact_table: str
    expression: ExpressionFn = field(compare=False)
    grain: tuple[str, ...] | None = None
    format: ValueFormat | None = None

    def __post_init__(self) -> None:
        if self.grain is not None:
            object.__setattr__(self, "grain", tuple(self.grain))


@dataclass(frozen=True)
class DerivedMetric:
    """Combination of other metrics evaluated under the same context.

    ``combine`` receives a mapping of dependency name to value, in dependency
    order, and must be pure.
    """

    kind: ClassVar[MetricKind] = MetricKind.DERIVED

    name: str
    dependencies: tuple[str, ...]
    combine: CombineFn = field(compare=False)
    format: ValueFormat | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "dependencies", tuple(self.dependencies))


@dataclass(frozen=True)
class ContextTransformMetric:
    """Base metric evaluated under a transformed filter context."""

    kind: ClassVar[MetricKind] = MetricKind.CONTEXT_TRANSFORM

    name: str
    base_measure: str
    transform: str
    format: ValueFormat | None = None


Metric = Union[FactMeasureMetric, ExpressionMetric, DerivedMetric, ContextTransformMetric]
