"""Mapping from SQLAlchemy column types to C# storage type names."""

from sqlalchemy import types as sqltypes

from dbenum.core.models import StorageType

# Checked in order; subclasses before their bases.
_TYPE_NAMES: list[tuple[type[sqltypes.TypeEngine], str]] = [
    (sqltypes.Boolean, "bool"),
    (sqltypes.SmallInteger, "short"),
    (sqltypes.BigInteger, "long"),
    (sqltypes.Integer, "int"),
    (sqltypes.Float, "double"),
    (sqltypes.Numeric, "decimal"),
    (sqltypes.Enum, "string"),
    (sqltypes.String, "string"),
    (sqltypes.DateTime, "DateTime"),
    (sqltypes.Date, "DateTime"),
    (sqltypes.Time, "TimeSpan"),
    (sqltypes.Interval, "TimeSpan"),
    (sqltypes.Uuid, "Guid"),
    (sqltypes.LargeBinary, "byte[]"),
]


def storage_type_name(column_type: sqltypes.TypeEngine) -> str:
    """Get the C# type name for a reflected column type.

    Unrecognized types map to ``object``.
    """
    for sql_type, name in _TYPE_NAMES:
        if isinstance(column_type, sql_type):
            return name
    return "object"


def storage_type_for(column_type: sqltypes.TypeEngine, nullable: bool = True) -> StorageType:
    """Build the StorageType of a reflected column."""
    return StorageType(name=storage_type_name(column_type), nullable=bool(nullable))
