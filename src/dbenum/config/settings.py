"""Application configuration settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support.

    All settings can be overridden via environment variables prefixed with DBENUM_.
    For example, DBENUM_DATABASE_URL=sqlite:///lookups.db.
    """

    model_config = SettingsConfigDict(
        env_prefix="DBENUM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Paths
    mapping_file: Path = Field(
        default=Path("dbenum.yaml"),
        description="Mapping file declaring the tables to compile",
    )
    output_file: Path | None = Field(
        default=None,
        description="File the generated source is written to (default: stdout)",
    )

    # Database
    database_url: str | None = Field(
        default=None,
        description="SQLAlchemy URL used when the mapping file does not declare a source",
    )

    # Output
    default_format: Literal["json", "table"] = Field(
        default="json",
        description="Default output format for the inspect command",
    )
    indent: int = Field(
        default=4,
        ge=1,
        le=8,
        description="Spaces per indentation level in generated source",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging level",
    )

    @property
    def resolved_output_file(self) -> Path | None:
        """Get the output file, creating its parent directory if needed."""
        if self.output_file is None:
            return None
        self.output_file.parent.mkdir(parents=True, exist_ok=True)
        return self.output_file


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
