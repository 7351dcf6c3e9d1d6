"""Mapping declarations: which tables become which generated types."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from dbenum.core.exceptions import MappingConfigurationError
from dbenum.core.models.table_data import TableData

IDENTIFIER_PATTERN = r"^[A-Za-z_][A-Za-z0-9_]*$"
TYPE_NAME_PATTERN = r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$"


class ColumnMapping(BaseModel):
    """An accessor generated from one column of a mapped table."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    table: str = Field(..., description="Owning table")
    column: str = Field(..., min_length=1, description="Column the accessor reads")
    function: str = Field(
        ...,
        pattern=IDENTIFIER_PATTERN,
        description="Accessor name (defaults to the column name)",
    )
    expression: str | None = Field(
        None,
        description="Template wrapping each value; %<column>% marks where the literal goes",
    )
    return_type: str | None = Field(
        None,
        alias="returns",
        min_length=1,
        description="Explicit return type; another mapping's type makes a foreign key",
    )

    @model_validator(mode="before")
    @classmethod
    def _default_function(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("function"):
            data = {**data, "function": data.get("column")}
        return data

    @model_validator(mode="after")
    def _check_expression(self) -> "ColumnMapping":
        if self.expression is not None and self.placeholder not in self.expression:
            raise ValueError(
                f"expression for column {self.column!r} must contain {self.placeholder}"
            )
        return self

    @property
    def placeholder(self) -> str:
        """Token in ``expression`` replaced by the literal value."""
        return f"%{self.column}%"

    def render(self, literal: str) -> str:
        """Apply the expression template, if any, to a case literal."""
        if self.expression is None:
            return literal
        return self.expression.replace(self.placeholder, literal)


class TableMapping(BaseModel):
    """Association between a table and its generated type and accessors.

    Immutable after parse; ``with_data`` returns a copy carrying the loaded rows.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    table: str = Field(..., min_length=1, description="Table to select from")
    type_name: str = Field(
        ...,
        alias="type",
        pattern=TYPE_NAME_PATTERN,
        description="Fully-qualified generated type name (defaults to the table name)",
    )
    primary_key: str = Field(..., alias="key", min_length=1, description="Primary key column")
    label: str = Field(..., min_length=1, description="Column member names are built from")
    columns: tuple[ColumnMapping, ...] = Field(default=(), description="Mapped columns in order")
    attributes: tuple[str, ...] = Field(default=(), description="Attributes on the generated type")
    data: TableData | None = Field(default=None, exclude=True, repr=False)

    @model_validator(mode="before")
    @classmethod
    def _prepare(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        table = data.get("table")
        if not data.get("type") and not data.get("type_name"):
            data["type"] = table
        columns = []
        for column in data.get("columns") or ():
            if isinstance(column, str):
                column = {"column": column}
            if isinstance(column, dict):
                column = {**column, "table": table}
            columns.append(column)
        data["columns"] = columns
        return data

    @model_validator(mode="after")
    def _check_columns(self) -> "TableMapping":
        seen_columns: set[str] = set()
        seen_functions: set[str] = set()
        for column in self.columns:
            if column.column in seen_columns:
                raise ValueError(f"column {column.column!r} is mapped more than once")
            if column.function in seen_functions:
                raise ValueError(f"accessor {column.function!r} is declared more than once")
            seen_columns.add(column.column)
            seen_functions.add(column.function)
        return self

    @property
    def query_columns(self) -> list[str]:
        """Columns to select: primary key, label, then mapped columns, without repeats."""
        names = [self.primary_key, self.label, *(c.column for c in self.columns)]
        return list(dict.fromkeys(names))

    def with_data(self, data: TableData) -> "TableMapping":
        """Return a copy of this mapping with loaded table data attached."""
        return self.model_copy(update={"data": data})

    def require_data(self) -> TableData:
        """Get the attached table data.

        Raises:
            MappingConfigurationError: If the table has not been loaded.
        """
        if self.data is None:
            raise MappingConfigurationError("table data has not been loaded", table=self.table)
        return self.data


class SourceConfig(BaseModel):
    """Database source named by a mapping file.

    ``type`` selects the adapter; every other key is passed to the adapter's
    configuration schema.
    """

    model_config = ConfigDict(extra="allow")

    type: str = Field(default="sqlalchemy", description="Adapter type")

    @property
    def connection_info(self) -> dict[str, Any]:
        return dict(self.model_extra or {})


class MappingDocument(BaseModel):
    """A parsed mapping file."""

    model_config = ConfigDict(frozen=True)

    source: SourceConfig | None = Field(default=None, description="Database to read from")
    tables: tuple[TableMapping, ...] = Field(..., min_length=1, description="Mapped tables in order")

    @model_validator(mode="after")
    def _check_type_names(self) -> "MappingDocument":
        seen: set[str] = set()
        for table in self.tables:
            if table.type_name in seen:
                raise ValueError(f"type {table.type_name!r} is declared by more than one table")
            seen.add(table.type_name)
        return self

    @property
    def type_names(self) -> list[str]:
        return [table.type_name for table in self.tables]


class ConnectionTestResult(BaseModel):
    """Result of testing the database connection of a mapping."""

    source_type: str
    connected: bool
    message: str | None = None
    latency_ms: float | None = None
