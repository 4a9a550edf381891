"""Per-query evaluation cache keyed by metric name and canonical context."""

import datetime
import json
from collections.abc import Mapping
from typing import Any

import numpy as np

from semantic_metrics.domain.types import FilterContext, MetricValue

CacheKey = tuple[str, str]

MISSING = object()


def canonical_context(context: FilterContext) -> str:
    """Serialize a filter context independently of key insertion order.

    None-valued entries carry no constraint and are dropped. Values keep their
    JSON type, so ``1`` and ``"1"`` never share a key.
    """
    constraints = {key: value for key, value in context.items() if value is not None}
    return json.dumps(
        constraints,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=_encode_value,
    )


def _encode_value(value: Any) -> Any:
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, (datetime.date, datetime.time)):
        return [type(value).__name__, value.isoformat()]
    return [type(value).__name__, str(value)]


class EvaluationCache:
    """Memoized metric values for a single query evaluation session.

    Create one per query; never share an instance between concurrent queries.
    """

    def __init__(self) -> None:
        """Initialize empty cache."""
        self._values: dict[CacheKey, MetricValue] = {}
        self.hits = 0
        self.misses = 0

    @staticmethod
    def key_for(metric_name: str, context: FilterContext) -> CacheKey:
        """Build cache key for a metric under a context."""
        return metric_name, canonical_context(context)

    def lookup(self, key: CacheKey) -> Any:
        """Return cached value or the ``MISSING`` sentinel."""
        value = self._values.get(key, MISSING)
        if value is MISSING:
            self.misses += 1
        else:
            self.hits += 1
        return value

    def store(self, key: CacheKey, value: MetricValue) -> None:
        """Store computed value."""
        self._values[key] = value

    def keys(self) -> list[CacheKey]:
        """Cached keys in insertion order."""
        return list(self._values)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

