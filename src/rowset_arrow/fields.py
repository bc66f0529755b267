"""Source column descriptors and native SQL type codes."""

from __future__ import annotations

from enum import IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SqlType(IntEnum):
    """Standard SQL type codes as reported by JDBC/ODBC style drivers."""

    BIT = -7
    TINYINT = -6
    SMALLINT = 5
    INTEGER = 4
    BIGINT = -5
    FLOAT = 6
    REAL = 7
    DOUBLE = 8
    NUMERIC = 2
    DECIMAL = 3
    CHAR = 1
    VARCHAR = 12
    LONGVARCHAR = -1
    DATE = 91
    TIME = 92
    TIMESTAMP = 93
    BINARY = -2
    VARBINARY = -3
    LONGVARBINARY = -4
    NULL = 0
    OTHER = 1111
    JAVA_OBJECT = 2000
    DISTINCT = 2001
    STRUCT = 2002
    ARRAY = 2003
    BLOB = 2004
    CLOB = 2005
    REF = 2006
    DATALINK = 70
    BOOLEAN = 16
    ROWID = -8
    NCHAR = -15
    NVARCHAR = -9
    LONGNVARCHAR = -16
    NCLOB = 2011
    SQLXML = 2009
    REF_CURSOR = 2012
    TIME_WITH_TIMEZONE = 2013
    TIMESTAMP_WITH_TIMEZONE = 2014


class FieldDescriptor(BaseModel):
    """Describes one source column, or the type an override forces onto one.

    ``column_index`` is 1-based. Override targets are not bound to a source
    column and leave it unset.
    """

    model_config = ConfigDict(frozen=True)

    native_type: int
    column_index: int | None = Field(default=None, ge=1)
    name: str = ""
    precision: int | None = None
    scale: int | None = None
    type_name: str | None = None
    nullable: bool | None = None
    table_name: str | None = None

    @field_validator("native_type", mode="before")
    @classmethod
    def _coerce_native_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return int(SqlType[value.strip().upper()])
            except KeyError:
                raise ValueError(f"Unknown SQL type name: {value!r}") from None
        if isinstance(value, SqlType):
            return int(value)
        return value

    @property
    def sql_type(self) -> SqlType | None:
        """The standard type for ``native_type``, or ``None`` for driver specific codes."""

        try:
            return SqlType(self.native_type)
        except ValueError:
            return None

    @property
    def is_array(self) -> bool:
        return self.native_type == SqlType.ARRAY
