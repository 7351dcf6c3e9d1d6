"""Pytest configuration and shared fixtures."""

from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
from sqlalchemy import create_engine, text
from typer.testing import CliRunner

from dbenum.config.settings import get_settings
from dbenum.core.models import RowData, StorageType, TableData, TableMapping


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a CLI runner for testing Typer commands."""
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_settings(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[None, None, None]:
    """Run each test from an empty directory with no DBENUM_ variables set.

    Also resets the cached settings before and after.
    """
    for name in (
        "DBENUM_MAPPING_FILE",
        "DBENUM_OUTPUT_FILE",
        "DBENUM_DATABASE_URL",
        "DBENUM_DEFAULT_FORMAT",
        "DBENUM_INDENT",
        "DBENUM_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    try:
        yield
    finally:
        get_settings.cache_clear()


@pytest.fixture
def demo_db(tmp_path: Path) -> Path:
    """Create a SQLite lookup database.

    Currency (integer key) is referenced by OrderKind.CurrencyId, which has
    a null in one row. Region has a string key.
    """
    path = tmp_path / "lookups.db"
    engine = create_engine(f"sqlite:///{path}")
    with engine.begin() as conn:
        conn.execute(
            text(
                """
                CREATE TABLE Currency (
                    Id INTEGER PRIMARY KEY,
                    Code VARCHAR(3) NOT NULL,
                    Country VARCHAR(64),
                    Rate DECIMAL(10, 4) NOT NULL
                )
                """
            )
        )
        conn.execute(
            text(
                """
                CREATE TABLE OrderKind (
                    Id INTEGER PRIMARY KEY,
                    Name VARCHAR(64) NOT NULL,
                    CurrencyId INTEGER,
                    Discount INTEGER
                )
                """
            )
        )
        conn.execute(
            text(
                """
                CREATE TABLE Region (
                    Code VARCHAR(8) PRIMARY KEY,
                    Name VARCHAR(64) NOT NULL
                )
                """
            )
        )
        conn.execute(text("INSERT INTO Currency VALUES (1, 'CAD', 'Canada', 1.35)"))
        conn.execute(text("INSERT INTO Currency VALUES (2, 'USD', 'USA', 1)"))
        conn.execute(text("INSERT INTO OrderKind VALUES (1, 'Retail', 1, NULL)"))
        conn.execute(text("INSERT INTO OrderKind VALUES (2, 'Wholesale', NULL, 15)"))
        conn.execute(text("INSERT INTO Region VALUES ('NA', 'North America')"))
    engine.dispose()
    return path


@pytest.fixture
def mapping_file(tmp_path: Path, demo_db: Path) -> Path:
    """Create a YAML mapping for the demo database."""
    path = tmp_path / "dbenum.yaml"
    path.write_text(
        f"""
source:
  type: sqlite
  path: {demo_db.as_posix()}

tables:
  - table: Currency
    type: Acme.Finance.Currency
    key: Id
    label: Code
    columns:
      - Id
      - Country

  - table: OrderKind
    type: Acme.Finance.OrderKind
    key: Id
    label: Name
    columns:
      - column: CurrencyId
        function: Currency
        returns: Acme.Finance.Currency
      - column: Discount
        returns: int
"""
    )
    return path


@pytest.fixture
def table_factory() -> Callable[..., TableMapping]:
    """Build table mappings with data attached, without a database.

    Column storage types default to ``int`` for the key and ``string`` for
    everything else; pass ``types`` to override.
    """

    def _make(
        table: str,
        rows: list[dict[str, Any]],
        *,
        key: str = "Id",
        label: str = "Code",
        columns: list[Any] | None = None,
        types: dict[str, str] | None = None,
        type_name: str | None = None,
        attributes: list[str] | None = None,
    ) -> TableMapping:
        mapping = TableMapping.model_validate(
            {
                "table": table,
                "type": type_name,
                "key": key,
                "label": label,
                "columns": columns or [],
                "attributes": attributes or [],
            }
        )
        storage_names = {key: "int", **(types or {})}
        data = TableData(
            table=table,
            columns={
                name: StorageType(storage_names.get(name, "string"))
                for name in mapping.query_columns
            },
            rows=tuple(
                RowData(
                    primary_key=row[key],
                    label=row[label],
                    values={column.column: row.get(column.column) for column in mapping.columns},
                )
                for row in rows
            ),
        )
        return mapping.with_data(data)

    return _make
