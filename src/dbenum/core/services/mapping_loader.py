"""Loading of mapping files.

Two formats are accepted. YAML files (the default):

    source:
      type: sqlite
      path: ${LOOKUP_DB:-lookups.db}
    tables:
      - table: Currency
        type: Acme.Finance.Currency
        key: Id
        label: Code
        columns:
          - Country
          - column: Rate
            function: ExchangeRate
            expression: "new Rate(%Rate%)"

and the line-oriented text format (``.txt`` and ``.map`` files):

    ::database::sqlite
    lookups.db
    ::table::Currency as Acme.Finance.Currency
    ::label::Code
    Id
    Country
    Rate as ExchangeRate::new Rate(%Rate%)
    ::table::Orders as Acme.Finance.OrderKind
    ::key::Id
    ::label::Name
    CurrencyId as Currency::::Acme.Finance.Currency

In the text format the first column line of a table names the primary key
unless a ``::key::`` line does, and the label defaults to the primary key.
"""

import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from dbenum.core.exceptions import MappingConfigurationError
from dbenum.core.models import MappingDocument
from dbenum.core.services.config_loader import (
    load_yaml_config,
    read_config_text,
    substitute_env_vars,
)

logger = logging.getLogger(__name__)

TEXT_SUFFIXES = frozenset({".txt", ".map"})

# Connection field each adapter's text-format connection line fills
_CONNECTION_FIELDS = {"sqlite": "path"}


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"])
        parts.append(f"{location}: {item['msg']}" if location else item["msg"])
    return "Invalid mapping: " + "; ".join(parts)


def parse_mapping(config: dict[str, Any]) -> MappingDocument:
    """Validate a mapping configuration dict.

    Raises:
        MappingConfigurationError: If any entry is malformed.
    """
    try:
        return MappingDocument.model_validate(config)
    except ValidationError as e:
        raise MappingConfigurationError(_format_validation_error(e)) from e


def _directive(line: str, name: str) -> str | None:
    prefix = f"::{name}::"
    if line.startswith(prefix):
        return line[len(prefix):].strip()
    return None


def _parse_column_line(line: str, number: int) -> dict[str, Any]:
    parts = line.split("::")
    if len(parts) > 3:
        raise MappingConfigurationError(
            f"Line {number}: expected <column> as <function>::<expression>::<type>"
        )
    column, _, function = parts[0].partition(" as ")
    entry: dict[str, Any] = {"column": column.strip()}
    if function.strip():
        entry["function"] = function.strip()
    if len(parts) > 1 and parts[1].strip():
        entry["expression"] = parts[1].strip()
    if len(parts) > 2 and parts[2].strip():
        entry["returns"] = parts[2].strip()
    return entry


def parse_text_mapping(text: str) -> dict[str, Any]:
    """Parse the line-oriented mapping format into a configuration dict.

    Blank lines and lines starting with ``#`` are ignored.

    Raises:
        MappingConfigurationError: If the text is malformed.
    """
    lines = [
        (number, line.strip())
        for number, line in enumerate(text.splitlines(), start=1)
        if line.strip() and not line.lstrip().startswith("#")
    ]
    if not lines or not lines[0][1].startswith("::database"):
        raise MappingConfigurationError("Mapping must start with a ::database::<adapter> line")

    adapter = lines[0][1].split("::")[2:]
    if not adapter or not adapter[0].strip():
        raise MappingConfigurationError(
            "Please specify ::database::<adapter>, where <adapter> is sqlite, sqlalchemy, etc."
        )
    source_type = adapter[0].strip()

    if len(lines) < 2 or lines[1][1].startswith("::"):
        raise MappingConfigurationError("Missing database connection string.")
    source = {
        "type": source_type,
        _CONNECTION_FIELDS.get(source_type, "url"): lines[1][1],
    }

    tables: list[dict[str, Any]] = []
    current: dict[str, Any] | None = None
    for number, line in lines[2:]:
        table_spec = _directive(line, "table")
        if table_spec is not None:
            table, _, type_name = table_spec.partition(" as ")
            current = {
                "table": table.strip(),
                "type": type_name.strip() or table.strip(),
                "key": None,
                "label": None,
                "attributes": [],
                "columns": [],
            }
            tables.append(current)
            continue

        if current is None:
            raise MappingConfigurationError(f"Line {number}: expected a ::table:: line")

        if not line.startswith("::"):
            current["columns"].append(_parse_column_line(line, number))
        elif line.startswith("::key::"):
            current["key"] = _directive(line, "key")
        elif line.startswith("::label::"):
            current["label"] = _directive(line, "label")
        elif line.startswith("::attribute::"):
            current["attributes"].append(_directive(line, "attribute"))
        else:
            raise MappingConfigurationError(f"Line {number}: unknown directive {line!r}")

    for table in tables:
        if table["key"] is None:
            if not table["columns"]:
                raise MappingConfigurationError(
                    "needs a ::key:: line or at least one column line", table=table["table"]
                )
            table["key"] = table["columns"].pop(0)["column"]
        if table["label"] is None:
            table["label"] = table["key"]

    return {"source": source, "tables": tables}


def load_mapping(path: Path) -> MappingDocument:
    """Load and validate a mapping file.

    Raises:
        ConfigLoadError: If the file cannot be read.
        MappingConfigurationError: If the mapping is malformed.
    """
    if path.suffix.lower() in TEXT_SUFFIXES:
        config = substitute_env_vars(parse_text_mapping(read_config_text(path)))
    else:
        config = load_yaml_config(path)

    document = parse_mapping(config)
    logger.info(f"Loaded {len(document.tables)} table mapping(s) from {path}")
    return document
