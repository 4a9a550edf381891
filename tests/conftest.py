"""Shared fixtures: a small sales/budget semantic model."""

import pytest

from semantic_metrics.application.services.context_transforms import default_context_transforms
from semantic_metrics.application.services.derived_ops import build_combiner
from semantic_metrics.application.services.evaluator import MetricEvaluator
from semantic_metrics.domain.entities import (
    ContextTransformMetric,
    DerivedMetric,
    Dimension,
    ExpressionMetric,
    FactColumn,
    FactMeasureMetric,
    FactTable,
)
from semantic_metrics.domain.enums import AggregationType, DerivedOp, ValueFormat
from semantic_metrics.domain.registries import (
    ContextTransformRegistry,
    DimensionRegistry,
    FactTableRegistry,
    MetricRegistry,
    SemanticModel,
)
from semantic_metrics.infrastructure.io.memory_source import InMemoryRowSource


def avg_unit_price(rows):
    """Amount per unit over the filtered rows."""
    quantity = rows["quantity"].sum() if len(rows) else 0
    if not quantity:
        return None
    return rows["amount"].sum() / quantity


@pytest.fixture
def sales_records():
    """Sales fact rows at (year, month, regionId, productId) grain."""
    return [
        {"year": 2025, "month": 1, "regionId": "NA", "productId": 1, "amount": 100, "quantity": 10},
        {"year": 2025, "month": 2, "regionId": "NA", "productId": 1, "amount": 200, "quantity": 10},
        {"year": 2025, "month": 6, "regionId": "NA", "productId": 2, "amount": 300, "quantity": 5},
        {"year": 2025, "month": 6, "regionId": "EU", "productId": 1, "amount": 350, "quantity": 7},
        {"year": 2024, "month": 6, "regionId": "NA", "productId": 1, "amount": 150, "quantity": 3},
        {"year": 2024, "month": 1, "regionId": "NA", "productId": 1, "amount": 50, "quantity": 1},
    ]


@pytest.fixture
def budget_records():
    """Budget fact rows at (year, month, regionId) grain."""
    return [
        {"year": 2025, "month": 6, "regionId": "NA", "budget": 400},
        {"year": 2025, "month": 6, "regionId": "EU", "budget": 600},
    ]


@pytest.fixture
def lookup_records():
    """Dimension lookup tables; product 2 has no lookup row."""
    return {
        "regions": [
            {"id": "NA", "name": "North America"},
            {"id": "EU", "name": "Europe"},
        ],
        "products": [
            {"id": 1, "title": "Widget"},
        ],
    }


@pytest.fixture
def row_source(sales_records, budget_records, lookup_records):
    """In-memory row source over the sample records."""
    return InMemoryRowSource(
        {"sales": sales_records, "budget": budget_records},
        lookup_records,
    )


@pytest.fixture
def dimensions():
    """Region and product dimensions."""
    return [
        Dimension(key="regionId", table="regions", lookup_key="id", label_field="name", label_alias="regionName"),
        Dimension(key="productId", table="products", lookup_key="id", label_field="title", label_alias="productName"),
    ]


@pytest.fixture
def fact_tables():
    """Sales and budget fact tables."""
    return [
        FactTable(
            name="sales",
            grain=("year", "month", "regionId", "productId"),
            measures={
                "amount": FactColumn("amount", AggregationType.SUM, ValueFormat.CURRENCY),
                "quantity": FactColumn("quantity", AggregationType.SUM, ValueFormat.INTEGER),
                "productId": FactColumn("productId", AggregationType.COUNT_DISTINCT, ValueFormat.INTEGER),
            },
        ),
        FactTable(
            name="budget",
            grain=("year", "month", "regionId"),
            measures={"budget": FactColumn("budget", AggregationType.SUM, ValueFormat.CURRENCY)},
        ),
    ]


@pytest.fixture
def metrics():
    """Metrics of every kind over the sales and budget tables."""
    return [
        FactMeasureMetric(name="totalSalesAmount", fact_table="sales", fact_column="amount"),
        FactMeasureMetric(
            name="regionalSales",
            fact_table="sales",
            fact_column="amount",
            grain=("year", "regionId"),
        ),
        FactMeasureMetric(name="totalQuantity", fact_table="sales", fact_column="quantity"),
        FactMeasureMetric(
            name="orderCount",
            fact_table="sales",
            fact_column="amount",
            agg=AggregationType.COUNT,
            format=ValueFormat.INTEGER,
        ),
        FactMeasureMetric(
            name="avgOrderAmount",
            fact_table="sales",
            fact_column="amount",
            agg=AggregationType.AVG,
        ),
        FactMeasureMetric(name="distinctProducts", fact_table="sales", fact_column="productId"),
        FactMeasureMetric(name="totalBudget", fact_table="budget", fact_column="budget"),
        ExpressionMetric(
            name="avgUnitPrice",
            fact_table="sales",
            expression=avg_unit_price,
            format=ValueFormat.DECIMAL,
        ),
        DerivedMetric(
            name="salesVsBudgetPct",
            dependencies=("totalSalesAmount", "totalBudget"),
            combine=build_combiner(DerivedOp.RATIO, ("totalSalesAmount", "totalBudget"), scale=100),
            format=ValueFormat.PERCENT,
        ),
        ContextTransformMetric(name="salesAmountYTD", base_measure="totalSalesAmount", transform="ytd"),
        ContextTransformMetric(
            name="salesAmountLastYear",
            base_measure="totalSalesAmount",
            transform="last_year",
        ),
        DerivedMetric(
            name="salesGrowth",
            dependencies=("totalSalesAmount", "salesAmountLastYear"),
            combine=build_combiner(DerivedOp.SUBTRACT, ("totalSalesAmount", "salesAmountLastYear")),
            format=ValueFormat.CURRENCY,
        ),
    ]


@pytest.fixture
def semantic_model(dimensions, fact_tables, metrics):
    """Semantic model over the sample definitions with built-in transforms."""
    return SemanticModel(
        dimensions=DimensionRegistry(dimensions),
        fact_tables=FactTableRegistry(fact_tables),
        metrics=MetricRegistry(metrics),
        transforms=ContextTransformRegistry(default_context_transforms()),
    )


@pytest.fixture
def evaluator(semantic_model, row_source):
    """Evaluator bound to the sample model and rows."""
    return MetricEvaluator(semantic_model, row_source)
