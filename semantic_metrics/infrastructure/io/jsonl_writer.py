"""JSONL writer."""

import io
import json
from collections.abc import Sequence
from pathlib import Path

import pandas as pd

from semantic_metrics.domain.ports import ResultWriterPort
from semantic_metrics.domain.types import ResultRow


class JsonlWriter(ResultWriterPort):
    """JSONL writer for query results."""

    def write_rows(self, rows: Sequence[ResultRow], output_path: str) -> list[str]:
        """Write one JSON object per result row, keeping key order."""
        buffer = io.StringIO()
        for row in rows:
            # NaN/NaT -> null
            cleaned_row = {
                key: (None if pd.api.types.is_scalar(value) and pd.isna(value) else value)
                for key, value in row.items()
            }
            buffer.write(json.dumps(cleaned_row, ensure_ascii=False, default=str))
            buffer.write("\n")

        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(buffer.getvalue(), encoding="utf-8")

        return [str(path)]
