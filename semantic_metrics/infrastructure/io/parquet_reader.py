"""Parquet row source with PyArrow."""

from pathlib import Path

import pandas as pd
import pyarrow.parquet as pq
import structlog

from semantic_metrics.domain.ports import RowSourcePort

logger = structlog.get_logger()


class ParquetRowSource(RowSourcePort):
    """Reads ``<data_dir>/<table>.parquet`` files, once per table."""

    def __init__(self, data_dir: str | Path) -> None:
        """Initialize parquet row source."""
        self.data_dir = Path(data_dir)
        self._frames: dict[str, pd.DataFrame] = {}

    def get_fact_rows(self, fact_table: str) -> pd.DataFrame:
        """Get all rows of a fact table."""
        frame = self._read(fact_table)
        if frame is None:
            raise ValueError(
                f"Fact table not found: {fact_table} (expected {self._path_for(fact_table)})"
            )
        return frame

    def get_lookup_rows(self, table: str) -> pd.DataFrame:
        """Get lookup rows; a missing file gives an empty frame."""
        frame = self._read(table)
        if frame is None:
            logger.warning("lookup_table_missing", table=table, path=str(self._path_for(table)))
            return pd.DataFrame()
        return frame

    def _read(self, table: str) -> pd.DataFrame | None:
        if table in self._frames:
            return self._frames[table]

        path = self._path_for(table)
        if not path.exists():
            return None

        try:
            arrow_table = pq.read_table(str(path))
        except (OSError, ValueError) as e:
            logger.error("failed_to_read_parquet", table=table, path=str(path), error=str(e))
            raise

        frame = arrow_table.to_pandas()
        logger.info(
            "table_read_success",
            table=table,
            row_count=len(frame),
            size_mb=arrow_table.nbytes / (1024 * 1024),
        )
        self._frames[table] = frame
        return frame

    def _path_for(self, table: str) -> Path:
        return self.data_dir / f"{table}.parquet"
