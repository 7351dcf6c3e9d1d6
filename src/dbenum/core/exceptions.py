"""Mapping and compilation exceptions."""

from typing import Any


class DbEnumError(Exception):
    """Base exception for mapping and compilation errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class MappingConfigurationError(DbEnumError):
    """Raised when a mapping file or mapping entry is malformed."""

    def __init__(self, message: str, table: str | None = None) -> None:
        if table is not None:
            message = f"Table {table!r}: {message}"
        super().__init__(message)
        self.table = table


class SchemaMismatchError(DbEnumError):
    """Raised when a mapped table or column is absent from the database."""

    def __init__(self, table: str, column: str | None = None) -> None:
        if column is None:
            message = f"Table not found in database: {table!r}"
        else:
            message = f"Column {column!r} not found in table {table!r}"
        super().__init__(message)
        self.table = table
        self.column = column


class DuplicateMemberError(DbEnumError):
    """Raised when two rows of one table normalize to the same member name."""

    def __init__(self, type_name: str, member: str, label: Any) -> None:
        super().__init__(
            f"Duplicate member {member!r} in {type_name} (from label {label!r})"
        )
        self.type_name = type_name
        self.member = member
        self.label = label


class EmptyIdentifierError(DbEnumError):
    """Raised when a row label normalizes to an empty identifier."""

    def __init__(self, type_name: str, label: Any) -> None:
        super().__init__(
            f"Label {label!r} in {type_name} does not produce a valid member name"
        )
        self.type_name = type_name
        self.label = label


class UnresolvedForeignKeyError(DbEnumError):
    """Raised when a foreign-key value has no matching member in its target type."""

    def __init__(
        self,
        type_name: str,
        value: Any,
        referenced_by: str | None = None,
    ) -> None:
        message = f"No such primary key in target table {type_name}: {value!r}"
        if referenced_by is not None:
            message += f" (referenced by {referenced_by})"
        super().__init__(message)
        self.type_name = type_name
        self.value = value
        self.referenced_by = referenced_by


class CyclicDependencyError(DbEnumError):
    """Raised when mapped tables reference each other in a cycle."""

    def __init__(self, path: list[str]) -> None:
        super().__init__("Cyclic table reference: " + " -> ".join(path))
        self.path = path


class DuplicateKeyError(DbEnumError):
    """Raised when two rows of one table share a primary-key value."""

    def __init__(self, type_name: str, value: Any, member: str) -> None:
        super().__init__(
            f"Duplicate primary key {value!r} in {type_name} (already used by {member})"
        )
        self.type_name = type_name
        self.value = value
        self.member = member
