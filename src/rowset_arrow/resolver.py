"""Resolution of source column descriptors to Arrow data types."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import timezone, tzinfo

import pyarrow as pa

from .errors import UnsupportedTypeError
from .fields import FieldDescriptor, SqlType

logger = logging.getLogger(__name__)

TypeConverter = Callable[[FieldDescriptor], pa.DataType]

DEFAULT_DECIMAL_PRECISION = 38
DEFAULT_DECIMAL_SCALE = 9
MAX_DECIMAL128_PRECISION = 38
MAX_DECIMAL256_PRECISION = 76

_STRING_TYPES = frozenset({
    SqlType.CHAR,
    SqlType.NCHAR,
    SqlType.VARCHAR,
    SqlType.NVARCHAR,
    SqlType.LONGVARCHAR,
    SqlType.LONGNVARCHAR,
    SqlType.CLOB,
    SqlType.NCLOB,
})

_BINARY_TYPES = frozenset({
    SqlType.BINARY,
    SqlType.VARBINARY,
    SqlType.LONGVARBINARY,
    SqlType.BLOB,
})

# Element type names as reported by drivers for array columns, e.g. ``_int4``
# (PostgreSQL) or ``integer[]``.
_ARRAY_ELEMENT_TYPE_NAMES = {
    "bool": SqlType.BOOLEAN,
    "boolean": SqlType.BOOLEAN,
    "int1": SqlType.TINYINT,
    "tinyint": SqlType.TINYINT,
    "int2": SqlType.SMALLINT,
    "smallint": SqlType.SMALLINT,
    "int": SqlType.INTEGER,
    "int4": SqlType.INTEGER,
    "integer": SqlType.INTEGER,
    "int8": SqlType.BIGINT,
    "bigint": SqlType.BIGINT,
    "float4": SqlType.REAL,
    "real": SqlType.REAL,
    "float8": SqlType.DOUBLE,
    "double": SqlType.DOUBLE,
    "double precision": SqlType.DOUBLE,
    "numeric": SqlType.NUMERIC,
    "decimal": SqlType.DECIMAL,
    "bpchar": SqlType.CHAR,
    "char": SqlType.CHAR,
    "character": SqlType.CHAR,
    "varchar": SqlType.VARCHAR,
    "character varying": SqlType.VARCHAR,
    "text": SqlType.VARCHAR,
    "date": SqlType.DATE,
    "time": SqlType.TIME,
    "timestamp": SqlType.TIMESTAMP,
    "bytea": SqlType.VARBINARY,
}


@dataclass(frozen=True, slots=True)
class TypeOverrideMap:
    """Overrides keyed by 1-based column index and by column name.

    Index entries win over name entries for the same column. Names are
    matched case-sensitively.
    """

    by_index: Mapping[int, FieldDescriptor] | None = None
    by_name: Mapping[str, FieldDescriptor] | None = None

    def by_column_index(self, index: int | None) -> FieldDescriptor | None:
        if self.by_index is None or index is None:
            return None
        return self.by_index.get(index)

    def by_column_name(self, name: str) -> FieldDescriptor | None:
        if self.by_name is None:
            return None
        return self.by_name.get(name)

    def lookup(self, descriptor: FieldDescriptor) -> FieldDescriptor | None:
        """Return the override for ``descriptor``, or ``None`` when neither mapping has one."""

        override = self.by_column_index(descriptor.column_index)
        if override is not None:
            return override
        return self.by_column_name(descriptor.name)


@dataclass(frozen=True, slots=True)
class FieldTypeResolver:
    """Map a descriptor to its Arrow type.

    A configured ``converter`` replaces the built-in mapping for every column.
    """

    converter: TypeConverter | None = None
    temporal_context: tzinfo | None = None

    def resolve(
        self, descriptor: FieldDescriptor, *, element_type: pa.DataType | None = None
    ) -> pa.DataType:
        if self.converter is not None:
            return self.converter(descriptor)
        return default_arrow_type(
            descriptor, self.temporal_context, element_type=element_type
        )

    __call__ = resolve


def default_arrow_type(
    descriptor: FieldDescriptor,
    temporal_context: tzinfo | None = None,
    *,
    element_type: pa.DataType | None = None,
) -> pa.DataType:
    """Return the built-in Arrow type for ``descriptor``'s native SQL type.

    ``element_type`` is only consulted for array columns; when omitted the
    element type is inferred from the descriptor's source type name.
    """

    native_type = descriptor.native_type

    if native_type in (SqlType.BOOLEAN, SqlType.BIT):
        return pa.bool_()

    if native_type == SqlType.TINYINT:
        return pa.int8()

    if native_type == SqlType.SMALLINT:
        return pa.int16()

    if native_type == SqlType.INTEGER:
        return pa.int32()

    if native_type == SqlType.BIGINT:
        return pa.int64()

    if native_type in (SqlType.NUMERIC, SqlType.DECIMAL):
        return _decimal_type(descriptor)

    if native_type in (SqlType.REAL, SqlType.FLOAT):
        return pa.float32()

    if native_type == SqlType.DOUBLE:
        return pa.float64()

    if native_type in _STRING_TYPES:
        return pa.string()

    if native_type == SqlType.DATE:
        return pa.date32()

    if native_type == SqlType.TIME:
        return pa.time32("ms")

    if native_type == SqlType.TIMESTAMP:
        return pa.timestamp("ms", tz=timezone_name(temporal_context))

    if native_type in _BINARY_TYPES:
        return pa.binary()

    if native_type == SqlType.ARRAY:
        if element_type is None:
            element = infer_array_element(descriptor)
            element_type = default_arrow_type(element, temporal_context)
        return pa.list_(element_type)

    if native_type == SqlType.NULL:
        return pa.null()

    if native_type == SqlType.STRUCT:
        return pa.struct([])

    raise UnsupportedTypeError(
        f"Unsupported native type {native_type!r} for column "
        f"{descriptor.column_index} ({descriptor.name!r})"
    )


def infer_array_element(descriptor: FieldDescriptor) -> FieldDescriptor:
    """Guess the element descriptor of an array column from its source type name.

    Unrecognised names yield a ``VARCHAR`` element.
    """

    base_name = _array_element_type_name(descriptor.type_name)
    native_type = _ARRAY_ELEMENT_TYPE_NAMES.get(base_name or "")
    if native_type is None:
        logger.debug(
            f"Unknown array element type {base_name!r} for column {descriptor.name!r}; using VARCHAR"
        )
        native_type = SqlType.VARCHAR
    return FieldDescriptor(native_type=native_type, name=descriptor.name)


def timezone_name(context: tzinfo | None) -> str | None:
    """Return the Arrow timezone string for ``context``."""

    if context is None:
        return None
    # zoneinfo exposes ``key``, pytz exposes ``zone``
    for attribute in ("key", "zone"):
        name = getattr(context, attribute, None)
        if isinstance(name, str) and name:
            return name
    if context is timezone.utc:
        return "UTC"
    offset = context.utcoffset(None)
    if offset is None:
        name = context.tzname(None)
        if not name:
            raise UnsupportedTypeError(f"Cannot derive a timezone name from {context!r}")
        return name
    total_minutes = int(offset.total_seconds()) // 60
    sign = "-" if total_minutes < 0 else "+"
    hours, minutes = divmod(abs(total_minutes), 60)
    return f"{sign}{hours:02d}:{minutes:02d}"


def _decimal_type(descriptor: FieldDescriptor) -> pa.DataType:
    precision = descriptor.precision
    scale = descriptor.scale
    if precision is None or not 0 < precision <= MAX_DECIMAL256_PRECISION:
        # unknown or unbounded, e.g. PostgreSQL reports 131089 for bare ``numeric``
        if precision:
            logger.debug(
                f"Precision {precision} of column {descriptor.name!r} is out of range; "
                f"using decimal({DEFAULT_DECIMAL_PRECISION}, {DEFAULT_DECIMAL_SCALE})"
            )
        precision, scale = DEFAULT_DECIMAL_PRECISION, None
    if scale is None:
        scale = min(DEFAULT_DECIMAL_SCALE, precision)
    if precision > MAX_DECIMAL128_PRECISION:
        return pa.decimal256(precision, scale)
    return pa.decimal128(precision, scale)


def _array_element_type_name(type_name: str | None) -> str | None:
    if not type_name:
        return None
    name = type_name.strip().lower()
    if name.startswith("_"):
        name = name[1:]
    elif name.endswith("[]"):
        name = name[:-2]
    elif name.startswith("array<") and name.endswith(">"):
        name = name[len("array<"):-1]
    else:
        return None
    return name.split("(", 1)[0].strip() or None
