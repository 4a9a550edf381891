"""In-memory row source."""

import json
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import pandas as pd

from semantic_metrics.domain.errors import UnknownReferenceError
from semantic_metrics.domain.ports import RowSourcePort

Records = Sequence[Mapping[str, Any]]


class InMemoryRowSource(RowSourcePort):
    """Row source over lists of flat records.

    Frames are built with ``dtype=object`` so record values keep their Python
    types (no int -> float promotion when a record lacks a field).
    """

    def __init__(
        self,
        facts: Mapping[str, Records],
        lookups: Mapping[str, Records] | None = None,
    ) -> None:
        """Initialize row source."""
        self._facts = {name: _to_frame(records) for name, records in facts.items()}
        self._lookups = {name: _to_frame(records) for name, records in (lookups or {}).items()}

    @classmethod
    def from_json_file(cls, path: str | Path) -> "InMemoryRowSource":
        """Load ``{"facts": {table: [records]}, "lookups": {table: [records]}}``."""
        with Path(path).open(encoding="utf-8") as handle:
            document = json.load(handle)
        return cls(document.get("facts", {}), document.get("lookups", {}))

    def get_fact_rows(self, fact_table: str) -> pd.DataFrame:
        """Get all rows of a fact table."""
        try:
            return self._facts[fact_table]
        except KeyError:
            raise UnknownReferenceError(f"No rows loaded for fact table: {fact_table}") from None

    def get_lookup_rows(self, table: str) -> pd.DataFrame:
        """Get lookup rows; unknown tables give an empty frame."""
        return self._lookups.get(table, pd.DataFrame())


def _to_frame(records: Records) -> pd.DataFrame:
    return pd.DataFrame([dict(record) for record in records], dtype=object)
