"""Type environment for compiled tables.

The environment is the single namespace of generated types and accessor
functions for one compilation run. Type names move one way through three
variants:

- ``UnresolvedType``: a name referenced before anything is known about it;
- ``ExternalType``: a passthrough name not backed by a table (``string``,
  ``decimal``, a user class);
- ``InternalType``: a generated enumeration backed by a mapped table.

``ground`` turns a node into one of the last two. Promotion to Internal
replaces any earlier placeholder, so an accessor may name a table's type
before that table has been compiled.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Union

from dbenum.core.exceptions import DuplicateKeyError, DuplicateMemberError, UnresolvedForeignKeyError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UnresolvedType:
    """A type name whose meaning is decided on first use."""

    name: str


@dataclass(frozen=True)
class ExternalType:
    """An opaque type name not backed by any table."""

    name: str


@dataclass
class Member:
    """One named constant of a generated type."""

    name: str
    literal: str
    raw: Any


@dataclass(eq=False)
class InternalType:
    """A generated enumeration backed by a mapped table.

    Members are keyed by name and by ``(raw primary key, key type)`` so that
    foreign-key values from other tables can be resolved to member names.
    """

    name: str
    attributes: list[str] = field(default_factory=list)
    primary_key_type: str | None = None
    members: dict[str, Member] = field(default_factory=dict)
    functions: list["FunctionNode"] = field(default_factory=list)
    _keys: dict[tuple[Any, str], str] = field(default_factory=dict, repr=False)

    @property
    def namespace(self) -> str:
        """Dotted namespace of the type, empty for top-level types."""
        return self.name.rpartition(".")[0]

    @property
    def short_name(self) -> str:
        return self.name.rpartition(".")[2]

    def add_member(self, raw: Any, expected_type: str, name: str, literal: str, label: Any = None) -> Member:
        """Record the member generated for one row.

        Raises:
            DuplicateMemberError: If the name is already taken in this type.
            DuplicateKeyError: If another row already has this primary key.
        """
        if name in self.members:
            raise DuplicateMemberError(self.name, name, label if label is not None else raw)
        if (raw, expected_type) in self._keys:
            raise DuplicateKeyError(self.name, raw, self._keys[(raw, expected_type)])
        member = Member(name=name, literal=literal, raw=raw)
        self.members[name] = member
        self._keys[(raw, expected_type)] = name
        return member

    def member_for(self, raw: Any, expected_type: str, referenced_by: str | None = None) -> Member:
        """Look up the member recorded for a primary-key value.

        Raises:
            UnresolvedForeignKeyError: If no row of this type has that key.
        """
        name = self._keys.get((raw, expected_type))
        if name is None:
            raise UnresolvedForeignKeyError(self.name, raw, referenced_by)
        return self.members[name]


TypeNode = Union[UnresolvedType, ExternalType, InternalType]
GroundType = Union[ExternalType, InternalType]


@dataclass(eq=False)
class FunctionNode:
    """An accessor from the members of one Internal type to a derived value.

    ``cases`` maps member name to a source expression. It may be
    non-exhaustive: members whose value is null in a non-nullable column have
    no case, and the generated accessor rejects them at run time.
    ``nullable`` records whether the source column admits nulls at all.
    """

    name: str
    arg_type: InternalType
    return_type: TypeNode
    is_pk_coercion: bool = False
    nullable: bool = False
    cases: dict[str, str] = field(default_factory=dict)

    @property
    def missing_members(self) -> list[str]:
        """Members of the argument type with no case."""
        if self.is_pk_coercion:
            return []
        return [name for name in self.arg_type.members if name not in self.cases]


def ground(node: TypeNode, environment: "TypeEnvironment") -> GroundType:
    """Map a node to its ground variant.

    Unresolved names become the Internal type of that name if one has been
    defined, otherwise an External type. An External placeholder that has
    since been promoted yields the Internal type.
    """
    if isinstance(node, InternalType):
        return node
    existing = environment.lookup(node.name)
    if isinstance(existing, InternalType):
        return existing
    if isinstance(node, ExternalType):
        return node
    return environment.resolve(node.name)


def qualify_type(referenced: InternalType, referencing: InternalType) -> str:
    """Name of ``referenced`` as written from inside ``referencing``.

    When the referenced type's namespace encloses the referencing type, the
    shared prefix is dropped; otherwise the fully-qualified name is used.
    """
    namespace = referenced.namespace
    if namespace and referencing.name.startswith(namespace + "."):
        return referenced.short_name
    return referenced.name


def qualify(referenced: InternalType, referencing: InternalType, member: str) -> str:
    """Member reference ``Type.Member`` as written from inside ``referencing``."""
    return f"{qualify_type(referenced, referencing)}.{member}"


class TypeEnvironment:
    """Namespace of types and functions for one compilation run.

    Args:
        on_demand: Called with a type name before a return type
            is grounded. The compiler uses it to compile the table declaring
            that type, if there is one.
    """

    def __init__(self, on_demand: Callable[[str], None] | None = None) -> None:
        self.on_demand = on_demand
        self._types: dict[str, TypeNode] = {}
        self._functions: dict[tuple[str, str], FunctionNode] = {}

    def lookup(self, name: str) -> TypeNode | None:
        """Get the current node for a name without creating one."""
        return self._types.get(name)

    def reference(self, name: str) -> TypeNode:
        """Get the node for a name, recording an Unresolved placeholder if new."""
        node = self._types.get(name)
        if node is None:
            node = UnresolvedType(name)
            self._types[name] = node
        return node

    def resolve(self, name: str) -> GroundType:
        """Get the External node for a name.

        An existing Internal node is returned as is; it is never downgraded.
        """
        node = self._types.get(name)
        if isinstance(node, (InternalType, ExternalType)):
            return node
        external = ExternalType(name)
        self._types[name] = external
        logger.debug(f"Resolved external type: {name}")
        return external

    def define(self, name: str, attributes: list[str] | None = None) -> InternalType:
        """Get the Internal node for a name, creating or promoting it."""
        node = self._types.get(name)
        if isinstance(node, InternalType):
            return node
        internal = InternalType(name=name, attributes=list(attributes or []))
        if node is not None:
            logger.debug(f"Promoted {type(node).__name__} {name} to internal type")
        self._types[name] = internal
        return internal

    def declare_function(
        self,
        name: str,
        is_pk_coercion: bool,
        arg_type: InternalType,
        return_type: TypeNode,
        nullable: bool = False,
    ) -> FunctionNode:
        """Register an accessor the first time ``(name, arg_type)`` is seen.

        Later declarations of the same pair return the existing function
        unchanged.
        """
        key = (name, arg_type.name)
        function = self._functions.get(key)
        if function is None:
            function = FunctionNode(
                name=name,
                arg_type=arg_type,
                return_type=return_type,
                is_pk_coercion=is_pk_coercion,
                nullable=nullable,
            )
            self._functions[key] = function
            arg_type.functions.append(function)
        return function

    def resolve_return_type(self, function: FunctionNode) -> GroundType:
        """Force a function's return type to ground form.

        The on-demand hook runs first, even for a type already defined, so
        that a mapped table named by the return type is completed (or found
        to be mid-compilation) before any of its members are looked up.
        """
        node = function.return_type
        if self.on_demand is not None:
            self.on_demand(node.name)
        grounded = ground(node, self)
        function.return_type = grounded
        return grounded

    def internal_types(self) -> list[InternalType]:
        """Internal types in definition order."""
        return [node for node in self._types.values() if isinstance(node, InternalType)]

    def external_types(self) -> list[ExternalType]:
        return [node for node in self._types.values() if isinstance(node, ExternalType)]

    def functions(self) -> list[FunctionNode]:
        return list(self._functions.values())
