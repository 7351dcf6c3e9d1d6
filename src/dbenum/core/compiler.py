"""Compilation of mapped tables into the type environment.

Each table is compiled in two phases:

1. Declare: define the table's Internal type and one accessor per mapped
   column, with the return type left unresolved.
2. Fill: record one member per row, then one case per row and accessor.
   Grounding an accessor's return type compiles the table it names first,
   so foreign keys always resolve against a completed member table.

``Compiler`` drives the tables in declaration order and fails on cycles
instead of reading a half-filled member table.
"""

import logging
from collections import deque
from collections.abc import Iterable

from dbenum.core.environment import (
    FunctionNode,
    GroundType,
    InternalType,
    Member,
    TypeEnvironment,
    qualify,
)
from dbenum.core.exceptions import CyclicDependencyError, EmptyIdentifierError, MappingConfigurationError
from dbenum.core.literals import is_value_kind, quote
from dbenum.core.models import ColumnMapping, RowData, TableMapping
from dbenum.core.naming import normalize

logger = logging.getLogger(__name__)


class TableCompiler:
    """Compiles one mapped table against a shared environment."""

    def __init__(self, mapping: TableMapping, environment: TypeEnvironment) -> None:
        self.mapping = mapping
        self.environment = environment
        self.data = mapping.require_data()
        self.internal: InternalType | None = None
        self.functions: dict[str, FunctionNode] = {}

    def declare(self) -> InternalType:
        """Define the table's type and declare its accessors."""
        mapping = self.mapping
        key_type = self.data.storage_type(mapping.primary_key)

        internal = self.environment.define(mapping.type_name, list(mapping.attributes))
        internal.primary_key_type = key_type.name

        for column in mapping.columns:
            storage = self.data.storage_type(column.column)
            return_name = column.return_type or storage.name
            if return_name == mapping.type_name:
                raise CyclicDependencyError([mapping.type_name, mapping.type_name])
            is_pk_coercion = (
                column.column == mapping.primary_key
                and column.expression is None
                and column.return_type is None
                and key_type.is_integral
            )
            self.functions[column.column] = self.environment.declare_function(
                column.function,
                is_pk_coercion,
                internal,
                self.environment.reference(return_name),
                nullable=storage.nullable,
            )

        self.internal = internal
        return internal

    def fill(self) -> None:
        """Record members and accessor cases for every row."""
        if self.internal is None:
            self.declare()

        members = [self._add_member(row) for row in self.data.rows]

        targets = {
            name: self.environment.resolve_return_type(function)
            for name, function in self.functions.items()
        }

        for row, member in zip(self.data.rows, members):
            for column in self.mapping.columns:
                function = self.functions[column.column]
                if function.is_pk_coercion:
                    continue
                raw = row.values[column.column]
                target = targets[column.column]
                if raw is None and self._is_non_nullable(target):
                    logger.debug(
                        f"No case for {self.mapping.type_name}.{member.name} in "
                        f"{function.name}: null value for non-nullable {target.name}"
                    )
                    continue
                function.cases[member.name] = self._case_expression(column, target, raw)

    def _add_member(self, row: RowData) -> Member:
        internal = self.internal
        key_type = internal.primary_key_type
        label = "" if row.label is None else str(row.label)
        name = normalize(label)
        if not name:
            raise EmptyIdentifierError(internal.name, row.label)
        return internal.add_member(
            row.primary_key,
            key_type,
            name,
            quote(row.primary_key, key_type),
            label=row.label,
        )

    def _is_non_nullable(self, target: GroundType) -> bool:
        if isinstance(target, InternalType):
            return True
        return is_value_kind(target.name)

    def _case_expression(self, column: ColumnMapping, target: GroundType, raw: object) -> str:
        if isinstance(target, InternalType):
            member = target.member_for(
                raw,
                target.primary_key_type,
                referenced_by=f"{self.mapping.type_name}.{column.function}",
            )
            return column.render(qualify(target, self.internal, member.name))
        return column.render(quote(raw, target.name))


class Compiler:
    """Compiles a set of mapped tables, resolving cross-table references on demand.

    Tables are taken from a work-list in declaration order. A table named by
    another table's accessor is compiled as soon as that accessor is grounded.
    The stack of tables being compiled detects cycles; the completed set
    prevents recompilation.
    """

    def __init__(self, mappings: Iterable[TableMapping]) -> None:
        self.environment = TypeEnvironment(on_demand=self.require)
        self._mappings: dict[str, TableMapping] = {}
        for mapping in mappings:
            if mapping.type_name in self._mappings:
                raise MappingConfigurationError(
                    f"type {mapping.type_name!r} is declared by more than one table",
                    table=mapping.table,
                )
            self._mappings[mapping.type_name] = mapping
        self._compiling: list[str] = []
        self._completed: set[str] = set()

    @property
    def completed(self) -> set[str]:
        return set(self._completed)

    def compile_all(self) -> TypeEnvironment:
        """Compile every mapped table and return the populated environment."""
        pending = deque(self._mappings)
        while pending:
            self.require(pending.popleft())
        logger.info(f"Compiled {len(self._completed)} table(s)")
        return self.environment

    def require(self, type_name: str) -> None:
        """Ensure the table declaring ``type_name`` is compiled.

        Names not declared by any mapping are ignored; they resolve to
        external types.

        Raises:
            CyclicDependencyError: If the table is already being compiled.
        """
        mapping = self._mappings.get(type_name)
        if mapping is None or type_name in self._completed:
            return
        if type_name in self._compiling:
            start = self._compiling.index(type_name)
            raise CyclicDependencyError(self._compiling[start:] + [type_name])

        self._compiling.append(type_name)
        try:
            logger.info(f"Compiling {mapping.table} as {type_name}")
            compiler = TableCompiler(mapping, self.environment)
            compiler.declare()
            compiler.fill()
        finally:
            self._compiling.pop()
        self._completed.add(type_name)


def compile_tables(mappings: Iterable[TableMapping]) -> TypeEnvironment:
    """Compile mapped tables with loaded data into a new environment."""
    return Compiler(mappings).compile_all()
