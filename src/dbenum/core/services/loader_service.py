"""Service for loading mapped table contents from a database."""

import asyncio
import logging
from collections.abc import Sequence

from dbenum.core.adapters import SourceAdapter
from dbenum.core.models import RowData, TableData, TableMapping

logger = logging.getLogger(__name__)


class LoaderService:
    """Loads the rows of mapped tables through a database adapter.

    One query per table, issued sequentially in declaration order over a
    single connection. Adapter operations are async but wrapped for sync use.
    """

    def __init__(self, adapter: SourceAdapter) -> None:
        """Initialize loader service.

        Args:
            adapter: Unconnected adapter; connected for the duration of a load.
        """
        self.adapter = adapter

    async def load(self, mapping: TableMapping) -> TableData:
        """Load one table through the (connected) adapter.

        Selects the primary key, label and every mapped column.

        Raises:
            SchemaMismatchError: If the table or a mapped column is missing.
            AdapterQueryError: If the query fails.
        """
        result = await self.adapter.fetch_table(mapping.table, mapping.query_columns)
        rows = tuple(
            RowData(
                primary_key=row[mapping.primary_key],
                label=row[mapping.label],
                values={column.column: row[column.column] for column in mapping.columns},
            )
            for row in result.rows
        )
        logger.info(f"Loaded {len(rows)} row(s) from {mapping.table}")
        return TableData(table=mapping.table, columns=result.columns, rows=rows)

    def load_all(self, mappings: Sequence[TableMapping]) -> list[TableMapping]:
        """Load every mapped table.

        Returns:
            The mappings, in the same order, with their table data attached.
        """

        async def _load() -> list[TableMapping]:
            loaded = []
            async with self.adapter:
                for mapping in mappings:
                    data = await self.load(mapping)
                    loaded.append(mapping.with_data(data))
            return loaded

        return asyncio.run(_load())
