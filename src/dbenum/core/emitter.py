"""Rendering of a compiled environment as C# source."""

from typing import Any

from dbenum import __version__
from dbenum.core.environment import (
    FunctionNode,
    InternalType,
    TypeEnvironment,
    TypeNode,
    qualify_type,
)
from dbenum.core.literals import is_integral

HEADER = """\
// <auto-generated>
//     Generated by dbenum {version}.
//     Changes to this file will be lost when the code is regenerated.
// </auto-generated>
"""


class CSharpEmitter:
    """Renders every Internal type as an enum plus a static extension class.

    Types are grouped by namespace in order of first appearance. Accessors
    with cases render as a ``switch``; unmatched members fall through to an
    ``ArgumentOutOfRangeException``.
    """

    def __init__(self, indent: int = 4) -> None:
        self.unit = " " * indent
        self._lines: list[str] = []

    def render(self, environment: TypeEnvironment) -> str:
        """Render the environment to source text."""
        self._lines = [HEADER.format(version=__version__), "using System;", ""]

        namespaces: dict[str, list[InternalType]] = {}
        for internal in environment.internal_types():
            namespaces.setdefault(internal.namespace, []).append(internal)

        for namespace, types in namespaces.items():
            if namespace:
                self._emit(0, f"namespace {namespace}")
                self._emit(0, "{")
                depth = 1
            else:
                depth = 0
            for position, internal in enumerate(types):
                if position:
                    self._emit(0, "")
                self._render_type(depth, internal)
            if namespace:
                self._emit(0, "}")
            self._emit(0, "")

        return "\n".join(self._lines).rstrip("\n") + "\n"

    def _emit(self, depth: int, text: str) -> None:
        self._lines.append(self.unit * depth + text if text else "")

    def _render_type(self, depth: int, internal: InternalType) -> None:
        for attribute in internal.attributes:
            if not attribute.startswith("["):
                attribute = f"[{attribute}]"
            self._emit(depth, attribute)

        key_type = internal.primary_key_type or "int"
        integral = is_integral(key_type)
        declaration = f"public enum {internal.short_name}"
        if integral and key_type != "int":
            declaration += f" : {key_type}"
        self._emit(depth, declaration)
        self._emit(depth, "{")
        for member in internal.members.values():
            if integral:
                self._emit(depth + 1, f"{member.name} = {member.literal},")
            else:
                self._emit(depth + 1, f"{member.name}, // {member.literal}")
        self._emit(depth, "}")

        if not internal.functions:
            return
        self._emit(0, "")
        self._emit(depth, f"public static class {internal.short_name}Extensions")
        self._emit(depth, "{")
        for position, function in enumerate(internal.functions):
            if position:
                self._emit(0, "")
            self._render_function(depth + 1, function)
        self._emit(depth, "}")

    def _render_function(self, depth: int, function: FunctionNode) -> None:
        owner = function.arg_type
        return_name = type_name(function.return_type, owner)
        self._emit(
            depth,
            f"public static {return_name} {function.name}(this {owner.short_name} value)",
        )
        self._emit(depth, "{")
        if function.is_pk_coercion:
            self._emit(depth + 1, f"return ({return_name})value;")
        else:
            self._emit(depth + 1, "switch (value)")
            self._emit(depth + 1, "{")
            for member, expression in function.cases.items():
                self._emit(depth + 2, f"case {owner.short_name}.{member}: return {expression};")
            self._emit(
                depth + 2,
                "default: throw new ArgumentOutOfRangeException("
                f'nameof(value), value, "Invalid {owner.short_name} value");',
            )
            self._emit(depth + 1, "}")
        self._emit(depth, "}")


def type_name(node: TypeNode, owner: InternalType) -> str:
    """Name of a return type as written inside ``owner``'s namespace."""
    if isinstance(node, InternalType):
        return qualify_type(node, owner)
    return node.name


def describe(environment: TypeEnvironment) -> dict[str, Any]:
    """Summarize a compiled environment as JSON-compatible data."""
    types = []
    for internal in environment.internal_types():
        types.append({
            "name": internal.name,
            "key_type": internal.primary_key_type,
            "attributes": list(internal.attributes),
            "members": [
                {"name": member.name, "value": member.literal}
                for member in internal.members.values()
            ],
            "functions": [
                {
                    "name": function.name,
                    "returns": type_name(function.return_type, internal),
                    "foreign_key": isinstance(function.return_type, InternalType),
                    "pk_coercion": function.is_pk_coercion,
                    "nullable": function.nullable,
                    "cases": len(function.cases),
                    "missing": function.missing_members,
                }
                for function in internal.functions
            ],
        })
    return {
        "types": types,
        "external_types": sorted(node.name for node in environment.external_types()),
    }
