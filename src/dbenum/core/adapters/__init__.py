"""Database adapters for dbenum."""

from dbenum.core.adapters.base import SourceAdapter
from dbenum.core.adapters.exceptions import (
    AdapterConfigurationError,
    AdapterConnectionError,
    AdapterError,
    AdapterNotFoundError,
    AdapterQueryError,
)
from dbenum.core.adapters.generic import SQLAlchemyAdapter, create_database_engine
from dbenum.core.adapters.registry import AdapterInfo, AdapterRegistry
from dbenum.core.adapters.schemas import SQLAlchemyConfig, SQLiteConfig
from dbenum.core.adapters.sqlite import SQLiteAdapter
from dbenum.core.adapters.types import storage_type_for, storage_type_name

__all__ = [
    # Base
    "SourceAdapter",
    # Registry
    "AdapterRegistry",
    "AdapterInfo",
    # Exceptions
    "AdapterError",
    "AdapterConnectionError",
    "AdapterConfigurationError",
    "AdapterQueryError",
    "AdapterNotFoundError",
    # Config schemas
    "SQLAlchemyConfig",
    "SQLiteConfig",
    # Adapters
    "SQLAlchemyAdapter",
    "SQLiteAdapter",
    "create_database_engine",
    # Type mapping
    "storage_type_for",
    "storage_type_name",
]
