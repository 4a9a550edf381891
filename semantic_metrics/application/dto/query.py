"""Query DTOs."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class QueryRequest(BaseModel):
    """Query request from presentation code."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    row_dimensions: list[str] = Field(default_factory=list, alias="rowDimensions")
    filters: dict[str, Any] = Field(default_factory=dict)
    metric_names: list[str] = Field(alias="metricNames")
    fact_table: str = Field(alias="factTable")
