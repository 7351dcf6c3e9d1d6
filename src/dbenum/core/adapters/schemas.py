"""Configuration schemas for database adapters."""

from pathlib import Path

from pydantic import BaseModel, Field, SecretStr


class SQLAlchemyConfig(BaseModel):
    """Configuration for any database reachable through a SQLAlchemy URL.

    The URL may embed credentials, so it is kept as a secret.
    """

    url: SecretStr = Field(
        ...,
        description="SQLAlchemy database URL (e.g., postgresql+psycopg://user:pw@host/db)",
    )
    schema_name: str | None = Field(
        default=None,
        description="Schema the mapped tables live in (default: the connection's default)",
    )
    echo: bool = Field(
        default=False,
        description="Log every SQL statement",
    )


class SQLiteConfig(BaseModel):
    """Configuration for a SQLite database file."""

    path: Path = Field(
        ...,
        description="Path to the SQLite database file",
    )
    echo: bool = Field(
        default=False,
        description="Log every SQL statement",
    )
