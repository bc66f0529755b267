"""Helpers for deriving Arrow schemas from result-set column descriptors."""

from __future__ import annotations

from collections.abc import Iterable

import pyarrow as pa

from .config import ConversionConfig
from .fields import FieldDescriptor

SQL_COLUMN_NAME_KEY = b"sql.column_name"
SQL_TYPE_KEY = b"sql.type"
SQL_NATIVE_TYPE_KEY = b"sql.native_type"
SQL_PRECISION_KEY = b"sql.precision"
SQL_SCALE_KEY = b"sql.scale"
SQL_TABLE_NAME_KEY = b"sql.table_name"


def schema_from_descriptors(
    descriptors: Iterable[FieldDescriptor], config: ConversionConfig
) -> pa.Schema:
    """Create the Arrow schema a result set with ``descriptors`` converts to."""

    fields = []
    for descriptor in descriptors:
        arrow_type = config.resolve_target_type(descriptor)
        nullable = descriptor.nullable is not False
        metadata = _field_metadata(descriptor) if config.include_metadata else None
        fields.append(pa.field(descriptor.name, arrow_type, nullable=nullable, metadata=metadata))
    return pa.schema(fields)


def _field_metadata(descriptor: FieldDescriptor) -> dict[bytes, bytes]:
    sql_type = descriptor.sql_type
    type_label = descriptor.type_name or (sql_type.name if sql_type is not None else None)

    values = {
        SQL_COLUMN_NAME_KEY: descriptor.name,
        SQL_TYPE_KEY: type_label,
        SQL_NATIVE_TYPE_KEY: descriptor.native_type,
        SQL_PRECISION_KEY: descriptor.precision,
        SQL_SCALE_KEY: descriptor.scale,
        SQL_TABLE_NAME_KEY: descriptor.table_name,
    }
    return {key: str(value).encode() for key, value in values.items() if value not in (None, "")}
