"""Domain enums for metric kinds, aggregations and formats."""

from enum import Enum


class MetricKind(str, Enum):
    """Metric kind enum."""

    FACT_MEASURE = "fact_measure"
    EXPRESSION = "expression"
    DERIVED = "derived"
    CONTEXT_TRANSFORM = "context_transform"


class AggregationType(str, Enum):
    """Aggregation applied to a fact column."""

    SUM = "sum"
    AVG = "avg"
    COUNT = "count"
    COUNT_DISTINCT = "count_distinct"
    MIN = "min"
    MAX = "max"


class ValueFormat(str, Enum):
    """Display format of a metric value."""

    CURRENCY = "currency"
    PERCENT = "percent"
    INTEGER = "integer"
    DECIMAL = "decimal"
    HOURS = "hours"
    RAW = "raw"


class FilterOperator(str, Enum):
    """Comparison filter operator enum."""

    LT = "lt"
    LTE = "lte"
    GT = "gt"
    GTE = "gte"


class DerivedOp(str, Enum):
    """Declarative combination of derived metric dependencies."""

    ADD = "add"
    SUBTRACT = "subtract"
    MULTIPLY = "multiply"
    RATIO = "ratio"
    SUM = "sum"  # n-ary
    AVG = "avg"  # n-ary
    MAX = "max"  # n-ary
    MIN = "min"  # n-ary
