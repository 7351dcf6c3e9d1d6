"""Rendering of raw cell values as C# source literals."""

import math
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any
from uuid import UUID

# C# value types by keyword and by framework name. Anything else (string,
# byte[], object, user classes) is a reference type and may hold null.
VALUE_KINDS = frozenset(
    {
        "bool", "byte", "sbyte", "char", "short", "ushort", "int", "uint",
        "long", "ulong", "float", "double", "decimal",
        "Boolean", "Byte", "SByte", "Char", "Int16", "UInt16", "Int32", "UInt32",
        "Int64", "UInt64", "Single", "Double", "Decimal",
        "DateTime", "DateTimeOffset", "DateOnly", "TimeOnly", "TimeSpan", "Guid",
    }
)

INTEGRAL_KINDS = frozenset({"byte", "sbyte", "short", "ushort", "int", "uint", "long", "ulong"})

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\0": "\\0",
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
}


def is_value_kind(type_name: str) -> bool:
    """Whether a type name denotes a non-nullable C# value type.

    ``int?`` and ``Nullable<int>`` are nullable; ``System.Int32`` is a value type.
    """
    if type_name.endswith("?") or type_name.startswith("Nullable<"):
        return False
    return type_name.rsplit(".", 1)[-1] in VALUE_KINDS


def is_integral(type_name: str) -> bool:
    """Whether a type name is a legal enum underlying type."""
    return type_name in INTEGRAL_KINDS


def escape_string(value: str) -> str:
    """Escape a string for use inside a regular C# string literal."""
    out = []
    for ch in value:
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif ord(ch) < 0x20 or 0x7F <= ord(ch) < 0xA0:
            out.append(f"\\u{ord(ch):04x}")
        else:
            out.append(ch)
    return "".join(out)


def _quote_float(value: float) -> str:
    if math.isnan(value):
        return "double.NaN"
    if math.isinf(value):
        return "double.PositiveInfinity" if value > 0 else "double.NegativeInfinity"
    return f"{value!r}D"


def _quote_datetime(value: date) -> str:
    parts = [value.year, value.month, value.day]
    if isinstance(value, datetime):
        parts += [value.hour, value.minute, value.second]
    text = f"new DateTime({', '.join(str(part) for part in parts)})"
    if isinstance(value, datetime) and value.microsecond:
        text += f".AddTicks({value.microsecond * 10})"
    return text


def _quote_timespan(value: time | timedelta) -> str:
    if isinstance(value, time):
        value = timedelta(
            hours=value.hour,
            minutes=value.minute,
            seconds=value.second,
            microseconds=value.microsecond,
        )
    # 1 tick = 100ns
    ticks = (value.days * 86_400 + value.seconds) * 10_000_000 + value.microseconds * 10
    return f"new TimeSpan({ticks}L)"


def _quote_bytes(value: bytes) -> str:
    if not value:
        return "new byte[0]"
    return "new byte[] { " + ", ".join(f"0x{b:02X}" for b in value) + " }"


def quote(value: Any, expected_type: str) -> str:
    """Render a raw value as a source literal.

    Args:
        value: Cell value as returned by the database driver.
        expected_type: Type name the literal is used as. Only consulted for
            null values, which render as that type's default.

    Dates, times, GUIDs and binary values have no C# literal form and render
    as construction expressions, which are valid anywhere an accessor returns.

    Returns:
        Literal source text.
    """
    if value is None:
        return f"default({expected_type})"
    if isinstance(value, str):
        return f'"{escape_string(value)}"'
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Decimal):
        return f"{value:f}M"
    if isinstance(value, float):
        return _quote_float(value)
    if isinstance(value, date):
        return _quote_datetime(value)
    if isinstance(value, (time, timedelta)):
        return _quote_timespan(value)
    if isinstance(value, UUID):
        return f'new Guid("{value}")'
    if isinstance(value, (bytes, bytearray, memoryview)):
        return _quote_bytes(bytes(value))
    return str(value)
