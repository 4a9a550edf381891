"""Application settings."""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # Inputs for the one-shot query runner
    model_path: str
    request_path: str
    # Directory of <table>.parquet files, or a JSON data file for data_format=json
    data_dir: str = "data"
    data_format: Literal["parquet", "json"] = "parquet"
    output_path: str = "results.jsonl"

    currency_symbol: str = "$"
    # Context fields read by the built-in time transforms
    year_dimension: str = "year"
    month_dimension: str = "month"

    log_level: str = "INFO"
    log_json: bool = True
    metrics_server_enabled: bool = False
    prometheus_port: int = 9300

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="SEMANTIC_METRICS_",
        extra="ignore",
    )
