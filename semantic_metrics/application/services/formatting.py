"""Display formatting of metric values."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Callable

from semantic_metrics.domain.entities import (
    ContextTransformMetric,
    FactMeasureMetric,
)
from semantic_metrics.domain.enums import ValueFormat
from semantic_metrics.domain.errors import ConfigurationError
from semantic_metrics.domain.registries import SemanticModel
from semantic_metrics.domain.types import MetricValue

DEFAULT_CURRENCY_SYMBOL = "$"


def format_value(
    value: MetricValue,
    value_format: ValueFormat | str | None,
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL,
) -> str | int | float | None:
    """Format a metric value for display. None stays None."""
    if value is None:
        return None

    if value_format is None:
        value_format = ValueFormat.RAW
    elif isinstance(value_format, str):
        try:
            value_format = ValueFormat(value_format)
        except ValueError:
            raise ConfigurationError(f"Unknown value format: {value_format}") from None

    if value_format == ValueFormat.CURRENCY:
        return format_currency(value, currency_symbol)

    formatter = _FORMATTERS.get(value_format)
    if not formatter:
        raise ConfigurationError(f"Unsupported value format: {value_format}")
    return formatter(value)


def format_currency(value: float, currency_symbol: str = DEFAULT_CURRENCY_SYMBOL) -> str:
    """Fixed 2 decimals, thousands grouped: -$1,234.50."""
    amount = _round_half_up(value, "0.01")
    sign = "-" if amount < 0 else ""
    return f"{sign}{currency_symbol}{abs(amount):,.2f}"


def format_percent(value: float) -> str:
    """Value already in percent units, rounded: 95%."""
    return f"{_round_half_up(value, '1'):,.0f}%"


def format_integer(value: float) -> str:
    """Rounded, thousands grouped: 1,235."""
    return f"{_round_half_up(value, '1'):,.0f}"


def format_decimal(value: float) -> str:
    """Two decimals, thousands grouped."""
    return f"{_round_half_up(value, '0.01'):,.2f}"


def format_hours(value: float) -> str:
    """One decimal with unit: 8.0 hrs."""
    return f"{_round_half_up(value, '0.1'):.1f} hrs"


_FORMATTERS: dict[ValueFormat, Callable[[float], str | int | float]] = {
    ValueFormat.PERCENT: format_percent,
    ValueFormat.INTEGER: format_integer,
    ValueFormat.DECIMAL: format_decimal,
    ValueFormat.HOURS: format_hours,
    ValueFormat.RAW: lambda value: value,
}


def resolve_format(model: SemanticModel, metric_name: str) -> ValueFormat:
    """Declared format of a metric, falling back to its measure or base metric."""
    metric = model.metrics.get(metric_name)
    if metric.format is not None:
        return metric.format

    if isinstance(metric, FactMeasureMetric):
        measure = model.fact_tables.get(metric.fact_table).get_measure(metric.fact_column)
        if measure is not None:
            return measure.format
    elif isinstance(metric, ContextTransformMetric):
        return resolve_format(model, metric.base_measure)

    return ValueFormat.RAW


def _round_half_up(value: float, quantum: str) -> Decimal:
    result = Decimal(str(value)).quantize(Decimal(quantum), rounding=ROUND_HALF_UP)
    # avoid "-0"
    return result if result != 0 else abs(result)
