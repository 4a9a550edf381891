"""One-shot query runner adapter."""

import json
import time
from pathlib import Path

import structlog

from semantic_metrics.application.dto.query import QueryRequest
from semantic_metrics.application.use_cases.run_query import run as run_query
from semantic_metrics.domain.errors import (
    ConfigurationError,
    CyclicDependencyError,
    EvaluationError,
    UnknownReferenceError,
)
from semantic_metrics.domain.ports import ResultWriterPort, RowSourcePort
from semantic_metrics.domain.registries import SemanticModel
from semantic_metrics.domain.types import ResultRow
from semantic_metrics.infrastructure.observability.metrics import (
    queries_failed,
    queries_started,
    queries_succeeded,
    query_duration_seconds,
    query_rows,
)

logger = structlog.get_logger()


class FileQueryRunner:
    """Runs query requests against a semantic model and writes the results."""

    def __init__(
        self,
        model: SemanticModel,
        row_source: RowSourcePort,
        writer: ResultWriterPort,
        currency_symbol: str = "$",
    ) -> None:
        """Initialize file query runner."""
        self.model = model
        self.row_source = row_source
        self.writer = writer
        self.currency_symbol = currency_symbol

    def run(self, request: QueryRequest) -> list[ResultRow]:
        """Run a query; failures are logged, counted and re-raised."""
        queries_started.inc()
        started = time.perf_counter()
        try:
            rows = run_query(request, self.model, self.row_source, self.currency_symbol)
        except Exception as e:
            error_code = classify_error(e)
            queries_failed.labels(error_code=error_code).inc()
            logger.error(
                "query_failed",
                fact_table=request.fact_table,
                error_code=error_code,
                error_message=str(e),
                exc_info=True,
            )
            raise

        queries_succeeded.inc()
        query_duration_seconds.observe(time.perf_counter() - started)
        query_rows.observe(len(rows))
        return rows

    def run_file(self, request_path: str, output_path: str) -> list[str]:
        """Read a JSON query request, run it and write JSONL results."""
        with Path(request_path).open(encoding="utf-8") as handle:
            request = QueryRequest.model_validate(json.load(handle))

        rows = self.run(request)
        written = self.writer.write_rows(rows, output_path)
        logger.info("results_written", output_path=output_path, row_count=len(rows))
        return written


def classify_error(error: Exception) -> str:
    """Classify error and return error code."""
    if isinstance(error, CyclicDependencyError):
        return "CYCLIC_DEPENDENCY"
    if isinstance(error, UnknownReferenceError):
        return "UNKNOWN_REFERENCE"
    if isinstance(error, ConfigurationError):
        return "CONFIGURATION_ERROR"
    if isinstance(error, EvaluationError):
        return "EVALUATION_ERROR"
    return "INTERNAL_ERROR"
