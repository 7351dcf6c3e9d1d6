"""Mapping and table data models for dbenum."""

from dbenum.core.models.mapping import (
    ColumnMapping,
    ConnectionTestResult,
    MappingDocument,
    SourceConfig,
    TableMapping,
)
from dbenum.core.models.table_data import ResultSet, RowData, StorageType, TableData

__all__ = [
    # Mapping
    "ColumnMapping",
    "TableMapping",
    "SourceConfig",
    "MappingDocument",
    "ConnectionTestResult",
    # Table data
    "StorageType",
    "ResultSet",
    "RowData",
    "TableData",
]
