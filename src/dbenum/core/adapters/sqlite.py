"""SQLite adapter."""

from dbenum.core.adapters.exceptions import AdapterConnectionError
from dbenum.core.adapters.generic import SQLAlchemyAdapter
from dbenum.core.adapters.registry import AdapterRegistry
from dbenum.core.adapters.schemas import SQLiteConfig


@AdapterRegistry.register(
    source_type="sqlite",
    display_name="SQLite file",
    config_schema=SQLiteConfig,
)
class SQLiteAdapter(SQLAlchemyAdapter):
    """Adapter for a SQLite database file.

    Unlike a bare ``sqlite://`` URL, a missing file is an error rather than
    a new empty database.
    """

    source_type = "sqlite"

    def __init__(self, config: SQLiteConfig) -> None:
        super().__init__(config)
        self.config = config

    @property
    def url(self) -> str:
        return f"sqlite:///{self.config.path}"

    async def connect(self) -> None:
        if not self.config.path.is_file():
            raise AdapterConnectionError(
                f"SQLite database not found: {self.config.path}",
                source_type=self.source_type,
            )
        await super().connect()
