"""Base adapter interface for databases."""

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel

from dbenum.core.models import ResultSet


class SourceAdapter(ABC):
    """Abstract base class for database adapters.

    Adapters give the loader a uniform way to read mapped tables from
    different databases. The interface is async; callers await one table at
    a time.
    """

    source_type: str

    def __init__(self, config: BaseModel) -> None:
        """Initialize adapter with validated configuration.

        Args:
            config: Pydantic model with connection configuration.
        """
        self.config = config
        self._connection: Any = None

    @abstractmethod
    async def connect(self) -> None:
        """Establish connection to the database.

        Raises:
            AdapterConnectionError: If connection cannot be established.
        """
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Close connection and release resources."""
        pass

    @abstractmethod
    async def test_connection(self) -> bool:
        """Test if the connection is valid.

        Returns:
            True if connection is successful, False otherwise.
        """
        pass

    @abstractmethod
    async def fetch_table(self, table: str, columns: list[str]) -> ResultSet:
        """Select columns from a table.

        Args:
            table: Table name.
            columns: Column names to select, in order.

        Returns:
            ResultSet with the storage type of every column and the rows in
            the database's natural order.

        Raises:
            SchemaMismatchError: If the table or a column does not exist.
            AdapterQueryError: If query execution fails.
        """
        pass

    async def __aenter__(self) -> "SourceAdapter":
        """Async context manager entry - establish connection."""
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Async context manager exit - close connection."""
        await self.disconnect()
