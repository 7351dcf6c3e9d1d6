"""Adapter-specific exceptions."""


class AdapterError(Exception):
    """Base exception for database adapter errors."""

    def __init__(self, message: str, source_type: str | None = None) -> None:
        self.message = message
        self.source_type = source_type
        super().__init__(message)


class AdapterConnectionError(AdapterError):
    """Raised when the database cannot be opened."""


class AdapterConfigurationError(AdapterError):
    """Raised when no database is configured or its configuration is invalid."""


class AdapterQueryError(AdapterError):
    """Raised when reading a mapped table fails in the database driver."""

    def __init__(
        self,
        message: str,
        table: str | None = None,
        query: str | None = None,
        source_type: str | None = None,
    ) -> None:
        super().__init__(message, source_type)
        self.table = table
        self.query = query


class AdapterNotFoundError(AdapterError):
    """Raised when a mapping names a source type with no registered adapter."""

    def __init__(self, source_type: str) -> None:
        super().__init__(f"Unknown adapter type: {source_type!r}", source_type=source_type)
