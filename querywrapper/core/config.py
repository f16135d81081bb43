"""
Configuration Management

Centralized configuration using Pydantic Settings.
"""

from functools import lru_cache
from typing import Optional

import sqlglot
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Library settings, read from QUERYWRAPPER_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="QUERYWRAPPER_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_sql: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # Pagination
    max_page_size: Optional[int] = Field(default=None, ge=1)

    # sqlglot read dialect used when inspecting custom SQL (None = generic)
    sql_dialect: Optional[str] = Field(default=None)

    @field_validator("sql_dialect")
    @classmethod
    def validate_sql_dialect(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not is_known_dialect(v):
            raise ValueError(
                f"Unknown sqlglot dialect {v!r}. "
                "Use a name such as 'postgres', 'duckdb' or 'sqlite'"
            )
        return v


def is_known_dialect(name: str) -> bool:
    """Whether sqlglot has a dialect registered under `name`."""
    try:
        sqlglot.Dialect.get_or_raise(name)
    except ValueError:
        return False
    return True


@lru_cache()
def get_settings() -> Settings:
    """Get the process-wide settings instance."""
    return Settings()


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment (for testing)."""
    get_settings.cache_clear()
