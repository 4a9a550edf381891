"""Ports (interfaces) for infrastructure adapters."""

from abc import ABC, abstractmethod
from collections.abc import Sequence

import pandas as pd

from semantic_metrics.domain.types import ResultRow


class RowSourcePort(ABC):
    """Port for reading fact rows and dimension lookup rows."""

    @abstractmethod
    def get_fact_rows(self, fact_table: str) -> pd.DataFrame:
        """Get all rows of a fact table."""

    @abstractmethod
    def get_lookup_rows(self, table: str) -> pd.DataFrame:
        """Get rows of a dimension lookup table (empty frame when unknown)."""


class ResultWriterPort(ABC):
    """Port for writing query results."""

    @abstractmethod
    def write_rows(self, rows: Sequence[ResultRow], output_path: str) -> list[str]:
        """Write result rows and return list of written file paths."""
