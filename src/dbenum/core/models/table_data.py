"""Materialized query results for mapped tables."""

from dataclasses import dataclass, field
from typing import Any

from dbenum.core.exceptions import SchemaMismatchError
from dbenum.core.literals import is_integral


@dataclass(frozen=True)
class StorageType:
    """Storage type of a column, expressed as a C# type name."""

    name: str
    nullable: bool = True

    @property
    def is_integral(self) -> bool:
        return is_integral(self.name)


@dataclass
class ResultSet:
    """Raw result of selecting columns from one table.

    Rows are dicts keyed by column name, in the order the database returned them.
    """

    table: str
    columns: dict[str, StorageType]
    rows: list[dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class RowData:
    """One row of a mapped table."""

    primary_key: Any
    label: Any
    values: dict[str, Any]


@dataclass(frozen=True)
class TableData:
    """Loaded contents of a mapped table.

    Holds the storage type of every selected column and the rows in natural
    query order. Never mutated after load.
    """

    table: str
    columns: dict[str, StorageType]
    rows: tuple[RowData, ...] = ()

    def storage_type(self, column: str) -> StorageType:
        """Get a column's storage type.

        Raises:
            SchemaMismatchError: If the column was not part of the result.
        """
        try:
            return self.columns[column]
        except KeyError:
            raise SchemaMismatchError(self.table, column) from None
