"""Centralized configuration management for duckquery."""

from functools import lru_cache

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DuckDBSettings(BaseModel):
    """Settings applied to every DuckDB connection the connector opens."""

    threads: int = Field(default=4, ge=1, description="Number of DuckDB threads to use")
    read_only: bool = Field(default=False, description="Open file databases read-only")


class DuckquerySettings(BaseSettings):
    """Pipeline settings loaded from env, .env, and defaults."""

    initial_row_capacity: int = Field(
        default=2048,
        ge=0,
        description="Row buffer capacity reserved before the first row is read",
    )
    fetch_size: int = Field(
        default=1024,
        ge=1,
        description="Rows requested from the driver per round trip",
    )
    log_level: str = Field(default="INFO", description="Log verbosity")
    log_sql_max_chars: int = Field(
        default=200,
        ge=0,
        description="SQL longer than this is truncated in log lines",
    )
    duckdb: DuckDBSettings = Field(default_factory=DuckDBSettings)

    model_config = SettingsConfigDict(
        env_prefix="DUCKQUERY_",
        env_file=".env",
        extra="ignore",
        env_nested_delimiter="__",
    )


@lru_cache(maxsize=1)
def get_settings() -> DuckquerySettings:
    """Return a cached settings instance."""

    return DuckquerySettings()
