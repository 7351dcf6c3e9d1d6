"""Generic SQLAlchemy adapter."""

import asyncio
import logging
from typing import Any

from sqlalchemy import MetaData, Table, create_engine, event, select, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import NoSuchTableError, SQLAlchemyError

from dbenum.core.adapters.base import SourceAdapter
from dbenum.core.adapters.exceptions import AdapterConnectionError, AdapterQueryError
from dbenum.core.adapters.registry import AdapterRegistry
from dbenum.core.adapters.schemas import SQLAlchemyConfig
from dbenum.core.adapters.types import storage_type_for
from dbenum.core.exceptions import SchemaMismatchError
from dbenum.core.models import ResultSet

logger = logging.getLogger(__name__)


def create_database_engine(url: str, echo: bool = False) -> Engine:
    """Create a SQLAlchemy engine.

    Args:
        url: Database connection string.
        echo: Whether to echo SQL statements for debugging.

    Returns:
        SQLAlchemy Engine instance.
    """
    # SQLite-specific configuration
    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
        )

        # Lookup tables are only read
        @event.listens_for(engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA query_only=ON")
            cursor.close()
    else:
        engine = create_engine(url, echo=echo, pool_pre_ping=True)

    return engine


@AdapterRegistry.register(
    source_type="sqlalchemy",
    display_name="SQLAlchemy URL",
    config_schema=SQLAlchemyConfig,
)
class SQLAlchemyAdapter(SourceAdapter):
    """Adapter for any database SQLAlchemy can reflect.

    Supports:
    - Table reflection for column types and nullability
    - Selecting mapped columns in the database's natural row order

    The database driver named by the URL must be installed separately.
    """

    source_type = "sqlalchemy"

    def __init__(self, config: SQLAlchemyConfig) -> None:
        super().__init__(config)
        self.config = config
        self._engine: Engine | None = None
        self._connection: Connection | None = None

    @property
    def url(self) -> str:
        return self.config.url.get_secret_value()

    @property
    def schema_name(self) -> str | None:
        return getattr(self.config, "schema_name", None)

    async def connect(self) -> None:
        """Create the engine and open a connection."""

        def _connect() -> tuple[Engine, Connection]:
            engine = create_database_engine(self.url, echo=self.config.echo)
            try:
                return engine, engine.connect()
            except Exception:
                engine.dispose()
                raise

        try:
            loop = asyncio.get_event_loop()
            self._engine, self._connection = await loop.run_in_executor(None, _connect)
        except (SQLAlchemyError, ImportError) as e:
            raise AdapterConnectionError(
                f"Failed to connect to database: {e}",
                source_type=self.source_type,
            ) from e
        logger.info(f"Connected to {self._engine.url.render_as_string(hide_password=True)}")

    async def disconnect(self) -> None:
        """Close the connection and dispose of the engine."""
        if self._connection is not None:
            try:
                loop = asyncio.get_event_loop()
                await loop.run_in_executor(None, self._connection.close)
            finally:
                self._connection = None
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    async def test_connection(self) -> bool:
        """Test connection by running a simple query."""
        try:
            await self.execute_query("SELECT 1 AS test")
            return True
        except Exception:
            return False

    def _require_connection(self) -> Connection:
        if self._connection is None:
            raise AdapterConnectionError(
                "Not connected. Call connect() first.",
                source_type=self.source_type,
            )
        return self._connection

    async def execute_query(self, query: str) -> list[dict[str, Any]]:
        """Execute a SQL query and return results as list of dicts."""
        connection = self._require_connection()

        def _execute() -> list[dict[str, Any]]:
            result = connection.execute(text(query))
            return [dict(row._mapping) for row in result]

        try:
            loop = asyncio.get_event_loop()
            return await loop.run_in_executor(None, _execute)
        except SQLAlchemyError as e:
            raise AdapterQueryError(
                f"Query execution failed: {e}",
                query=query,
                source_type=self.source_type,
            ) from e

    async def fetch_table(self, table: str, columns: list[str]) -> ResultSet:
        """Reflect a table and select the requested columns from it."""
        connection = self._require_connection()

        def _fetch() -> ResultSet:
            try:
                reflected = Table(
                    table,
                    MetaData(),
                    autoload_with=connection,
                    schema=self.schema_name,
                )
            except NoSuchTableError:
                raise SchemaMismatchError(table) from None

            for column in columns:
                if column not in reflected.c:
                    raise SchemaMismatchError(table, column)

            selected = [reflected.c[column] for column in columns]
            query = select(*selected)
            logger.debug(f"Executing: {query}")
            rows = [dict(zip(columns, row)) for row in connection.execute(query)]
            return ResultSet(
                table=table,
                columns={
                    column.name: storage_type_for(column.type, column.nullable)
                    for column in selected
                },
                rows=rows,
            )

        try:
            loop = asyncio.get_event_loop()
            return await loop.run_in_executor(None, _fetch)
        except SQLAlchemyError as e:
            raise AdapterQueryError(
                f"Failed to read table {table!r}: {e}",
                table=table,
                query=f"SELECT {', '.join(columns)} FROM {table}",
                source_type=self.source_type,
            ) from e
