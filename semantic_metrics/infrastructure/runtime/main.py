"""Main entrypoint."""

import sys

import structlog

from semantic_metrics.application.services.context_transforms import default_context_transforms
from semantic_metrics.application.use_cases.load_semantic_model import run_from_file
from semantic_metrics.domain.errors import DomainError
from semantic_metrics.domain.ports import RowSourcePort
from semantic_metrics.infrastructure.config.settings import Settings
from semantic_metrics.infrastructure.io.jsonl_writer import JsonlWriter
from semantic_metrics.infrastructure.io.memory_source import InMemoryRowSource
from semantic_metrics.infrastructure.io.parquet_reader import ParquetRowSource
from semantic_metrics.infrastructure.observability.logging import configure_logging
from semantic_metrics.infrastructure.runtime.health import start_metrics_server
from semantic_metrics.interfaces.runners.file_query_runner import FileQueryRunner

logger = structlog.get_logger()


def build_row_source(settings: Settings) -> RowSourcePort:
    """Row source for the configured data format."""
    if settings.data_format == "json":
        return InMemoryRowSource.from_json_file(settings.data_dir)
    return ParquetRowSource(settings.data_dir)


def run(settings: Settings) -> list[str]:
    """Load the model, run the configured request and write results."""
    configure_logging(settings)
    logger.info(
        "settings_loaded",
        model_path=settings.model_path,
        request_path=settings.request_path,
        data_dir=settings.data_dir,
        data_format=settings.data_format,
        output_path=settings.output_path,
    )

    if settings.metrics_server_enabled:
        start_metrics_server(settings)

    transforms = default_context_transforms(settings.year_dimension, settings.month_dimension)
    model = run_from_file(
        settings.model_path,
        transforms=transforms,
        time_keys=(settings.year_dimension, settings.month_dimension),
    )

    runner = FileQueryRunner(
        model,
        build_row_source(settings),
        JsonlWriter(),
        currency_symbol=settings.currency_symbol,
    )
    return runner.run_file(settings.request_path, settings.output_path)


def main() -> None:
    """Entrypoint."""
    settings = Settings()
    try:
        run(settings)
    except (DomainError, OSError, ValueError) as e:
        logger.error("run_failed", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
