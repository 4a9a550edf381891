"""Declarative combination functions for derived metrics."""

import operator
from collections.abc import Mapping, Sequence
from statistics import fmean
from typing import Callable

from semantic_metrics.domain.enums import DerivedOp
from semantic_metrics.domain.errors import ConfigurationError
from semantic_metrics.domain.types import CombineFn, MetricValue


def _ratio(left: float, right: float) -> MetricValue:
    if right == 0:
        return None
    return left / right


# Binary operations mapping
_BINARY_OPS: dict[DerivedOp, Callable[[float, float], MetricValue]] = {
    DerivedOp.ADD: operator.add,
    DerivedOp.SUBTRACT: operator.sub,
    DerivedOp.MULTIPLY: operator.mul,
    DerivedOp.RATIO: _ratio,
}

# N-ary operations mapping (nulls skipped)
_NARY_OPS: dict[DerivedOp, Callable[[list[float]], MetricValue]] = {
    DerivedOp.SUM: sum,
    DerivedOp.AVG: fmean,
    DerivedOp.MAX: max,
    DerivedOp.MIN: min,
}


def build_combiner(
    op: DerivedOp | str,
    dependencies: Sequence[str],
    scale: float | None = None,
) -> CombineFn:
    """Build a pure combine function for ``op`` over ``dependencies``."""
    if isinstance(op, str):
        try:
            op = DerivedOp(op)
        except ValueError:
            raise ConfigurationError(f"Unknown derived op: {op}") from None

    names = list(dependencies)

    if op in _BINARY_OPS:
        if len(names) != 2:
            raise ConfigurationError(
                f"Derived op {op.value} requires exactly 2 dependencies, got {len(names)}"
            )
        binary = _BINARY_OPS[op]
        left_name, right_name = names

        def combine_binary(values: Mapping[str, MetricValue]) -> MetricValue:
            left = values.get(left_name)
            right = values.get(right_name)
            if left is None or right is None:
                return None
            return _apply_scale(binary(left, right), scale)

        return combine_binary

    if op in _NARY_OPS:
        if not names:
            raise ConfigurationError(f"Derived op {op.value} requires at least 1 dependency")
        reducer = _NARY_OPS[op]

        def combine_nary(values: Mapping[str, MetricValue]) -> MetricValue:
            present = [values[name] for name in names if values.get(name) is not None]
            if not present:
                return None
            return _apply_scale(reducer(present), scale)

        return combine_nary

    raise ConfigurationError(f"Unsupported derived op: {op}")


def _apply_scale(value: MetricValue, scale: float | None) -> MetricValue:
    if value is None or scale is None:
        return value
    return value * scale
