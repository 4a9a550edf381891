"""Immutable lookup-by-name registries and the semantic model bundle."""

from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Generic, TypeVar

from semantic_metrics.domain.entities import Dimension, FactTable, Metric
from semantic_metrics.domain.errors import ConfigurationError, UnknownReferenceError
from semantic_metrics.domain.types import ContextTransformFn

T = TypeVar("T")


class _Registry(Generic[T]):
    """Read-only name -> entry table."""

    entry_kind = "entry"

    def __init__(self, entries: Iterable[tuple[str, T]] = ()) -> None:
        """Initialize registry, rejecting duplicate names."""
        table: dict[str, T] = {}
        for name, entry in entries:
            if name in table:
                raise ConfigurationError(f"Duplicate {self.entry_kind} name: {name}")
            table[name] = entry
        self._entries: Mapping[str, T] = MappingProxyType(table)

    def get(self, name: str) -> T:
        """Get entry by name."""
        try:
            return self._entries[name]
        except KeyError:
            raise UnknownReferenceError(f"Unknown {self.entry_kind}: {name}") from None

    def names(self) -> list[str]:
        """Registered names in registration order."""
        return list(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[T]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)


class DimensionRegistry(_Registry[Dimension]):
    """Dimension key -> dimension."""

    entry_kind = "dimension"

    def __init__(self, dimensions: Iterable[Dimension] = ()) -> None:
        super().__init__((dimension.key, dimension) for dimension in dimensions)


class FactTableRegistry(_Registry[FactTable]):
    """Fact table name -> fact table."""

    entry_kind = "fact table"

    def __init__(self, fact_tables: Iterable[FactTable] = ()) -> None:
        super().__init__((table.name, table) for table in fact_tables)


class MetricRegistry(_Registry[Metric]):
    """Single namespace for metrics of every kind."""

    entry_kind = "metric"

    def __init__(self, metrics: Iterable[Metric] = ()) -> None:
        super().__init__((metric.name, metric) for metric in metrics)


class ContextTransformRegistry(_Registry[ContextTransformFn]):
    """Transform name -> pure context function."""

    entry_kind = "context transform"

    def __init__(self, transforms: Mapping[str, Callable] | None = None) -> None:
        super().__init__((transforms or {}).items())


@dataclass(frozen=True)
class SemanticModel:
    """Dimensions, fact tables, metrics and transforms the engine evaluates against."""

    dimensions: DimensionRegistry = field(default_factory=DimensionRegistry)
    fact_tables: FactTableRegistry = field(default_factory=FactTableRegistry)
    metrics: MetricRegistry = field(default_factory=MetricRegistry)
    transforms: ContextTransformRegistry = field(default_factory=ContextTransformRegistry)
