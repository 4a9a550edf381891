"""Semantic model definition DTOs."""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from semantic_metrics.domain.enums import AggregationType, DerivedOp, ValueFormat


class DimensionDefinition(BaseModel):
    """Dimension definition."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    key: str
    table: str
    lookup_key: str = Field(alias="lookupKey")
    label_field: str = Field(alias="labelField")
    label_alias: str = Field(alias="labelAlias")


class FactColumnDefinition(BaseModel):
    """Fact column definition."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    column: str
    default_agg: AggregationType = Field(AggregationType.SUM, alias="defaultAgg")
    format: ValueFormat = ValueFormat.RAW


class FactTableDefinition(BaseModel):
    """Fact table definition."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    grain: list[str]
    measures: dict[str, FactColumnDefinition] = Field(default_factory=dict)


class FactMeasureDefinition(BaseModel):
    """Fact measure metric definition."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    kind: Literal["fact_measure"] = "fact_measure"
    name: str
    fact_table: str = Field(alias="factTable")
    fact_column: str = Field(alias="factColumn")
    agg: AggregationType | None = None
    grain: list[str] | None = None
    format: ValueFormat | None = None


class ExpressionDefinition(BaseModel):
    """Expression metric definition; ``expression`` names a registered function."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    kind: Literal["expression"] = "expression"
    name: str
    fact_table: str = Field(alias="factTable")
    expression: str
    grain: list[str] | None = None
    format: ValueFormat | None = None


class DerivedDefinition(BaseModel):
    """Derived metric definition.

    Either ``op`` (declarative combination, optional ``scale``) or ``function``
    (name of a registered combine function) must be set.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    kind: Literal["derived"] = "derived"
    name: str
    dependencies: list[str]
    op: DerivedOp | None = None
    scale: float | None = None
    function: str | None = None
    format: ValueFormat | None = None


class ContextTransformDefinition(BaseModel):
    """Context transform metric definition."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    kind: Literal["context_transform"] = "context_transform"
    name: str
    base_measure: str = Field(alias="baseMeasure")
    transform: str
    format: ValueFormat | None = None


MetricDefinition = Annotated[
    Union[
        FactMeasureDefinition,
        ExpressionDefinition,
        DerivedDefinition,
        ContextTransformDefinition,
    ],
    Field(discriminator="kind"),
]


class SemanticModelDocument(BaseModel):
    """Complete semantic model document."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    dimensions: list[DimensionDefinition] = Field(default_factory=list)
    fact_tables: list[FactTableDefinition] = Field(default_factory=list, alias="factTables")
    metrics: list[MetricDefinition] = Field(default_factory=list)
