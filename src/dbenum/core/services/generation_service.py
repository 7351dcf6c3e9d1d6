"""Service tying together mapping, loading, compilation and emission."""

import asyncio
import logging
import tempfile
import time
from pathlib import Path

from dbenum.config import Settings, get_settings
from dbenum.core.adapters import AdapterConfigurationError, AdapterError, AdapterRegistry, SourceAdapter
from dbenum.core.compiler import compile_tables
from dbenum.core.emitter import CSharpEmitter
from dbenum.core.environment import TypeEnvironment
from dbenum.core.models import ConnectionTestResult, MappingDocument
from dbenum.core.services.loader_service import LoaderService
from dbenum.core.services.mapping_loader import load_mapping

logger = logging.getLogger(__name__)


class GenerationService:
    """Runs one compilation from a mapping file to generated source.

    Handles:
    - Loading and validating the mapping (no database access)
    - Choosing and configuring the database adapter
    - Loading table data, compiling and rendering

    A run is all-or-nothing: nothing is written unless every table compiles.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    def check(self, mapping_path: Path) -> MappingDocument:
        """Load and validate a mapping file without touching the database.

        Raises:
            ConfigLoadError: If the file cannot be read.
            MappingConfigurationError: If the mapping is malformed.
            AdapterNotFoundError: If the declared source type is unknown.
            AdapterConfigurationError: If the source configuration is invalid.
        """
        document = load_mapping(mapping_path)
        if document.source is not None:
            self.create_adapter(document)
        return document

    def create_adapter(
        self,
        document: MappingDocument,
        database_url: str | None = None,
    ) -> SourceAdapter:
        """Create the adapter for a mapping.

        An explicit database URL wins over the mapping's source, which wins
        over the configured default URL.

        Raises:
            AdapterNotFoundError: If the source type is not registered.
            AdapterConfigurationError: If no database is configured or the
                configuration is invalid.
        """
        if database_url:
            source_type, config = "sqlalchemy", {"url": database_url}
        elif document.source is not None:
            source_type, config = document.source.type, document.source.connection_info
        elif self.settings.database_url:
            source_type, config = "sqlalchemy", {"url": self.settings.database_url}
        else:
            raise AdapterConfigurationError(
                "No database configured. Add a 'source' to the mapping, "
                "pass --database-url or set DBENUM_DATABASE_URL."
            )

        return AdapterRegistry.get_adapter(source_type, config)

    def test_connection(
        self,
        mapping_path: Path,
        database_url: str | None = None,
    ) -> ConnectionTestResult:
        """Connect to a mapping's database and run a trivial query.

        Connection failures are reported in the result rather than raised.
        """
        document = self.check(mapping_path)
        adapter = self.create_adapter(document, database_url)

        async def _test() -> ConnectionTestResult:
            start = time.perf_counter()
            try:
                async with adapter:
                    connected = await adapter.test_connection()
            except AdapterError as e:
                return ConnectionTestResult(
                    source_type=adapter.source_type,
                    connected=False,
                    message=e.message,
                )
            latency = (time.perf_counter() - start) * 1000
            return ConnectionTestResult(
                source_type=adapter.source_type,
                connected=connected,
                message="Connection successful" if connected else "Connection test failed",
                latency_ms=round(latency, 2),
            )

        return asyncio.run(_test())

    def compile(self, mapping_path: Path, database_url: str | None = None) -> TypeEnvironment:
        """Load a mapping and its tables and compile them."""
        document = self.check(mapping_path)
        adapter = self.create_adapter(document, database_url)
        mappings = LoaderService(adapter).load_all(document.tables)
        return compile_tables(mappings)

    def generate(self, mapping_path: Path, database_url: str | None = None) -> str:
        """Compile a mapping and render it as C# source."""
        environment = self.compile(mapping_path, database_url)
        return CSharpEmitter(indent=self.settings.indent).render(environment)

    def write(
        self,
        mapping_path: Path,
        output: Path,
        database_url: str | None = None,
    ) -> Path:
        """Generate source and write it to a file, replacing any previous output.

        The source is written to a temporary file beside ``output`` and moved
        into place, so a failed write leaves the previous file intact.
        """
        source = self.generate(mapping_path, database_url)
        output.parent.mkdir(parents=True, exist_ok=True)
        temp_path: Path | None = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=output.parent,
                prefix=f".{output.name}.",
                suffix=".tmp",
                delete=False,
            ) as f:
                temp_path = Path(f.name)
                f.write(source)
            temp_path.replace(output)
        except OSError:
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)
            raise
        logger.info(f"Wrote {output}")
        return output
