"""Declarative conversion settings loaded from mappings or JSON documents."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import pyarrow as pa
from pydantic import BaseModel, ConfigDict, field_validator

from .builder import ConversionConfigBuilder
from .config import DEFAULT_TARGET_BATCH_SIZE, ConversionConfig
from .fields import FieldDescriptor

logger = logging.getLogger(__name__)

RoundingMode = Literal[
    "ROUND_CEILING",
    "ROUND_DOWN",
    "ROUND_FLOOR",
    "ROUND_HALF_DOWN",
    "ROUND_HALF_EVEN",
    "ROUND_HALF_UP",
    "ROUND_UP",
    "ROUND_05UP",
]


class ConversionSettings(BaseModel):
    """Serializable form of the conversion settings.

    Override entries use the :class:`FieldDescriptor` fields, and
    ``native_type`` may be given as a SQL type name::

        {
            "include_metadata": true,
            "explicit_types_by_column_name": {"price": {"native_type": "DECIMAL", "precision": 12, "scale": 2}}
        }

    The allocator is a runtime object and is supplied to :meth:`to_builder`.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    timezone: str | None = None
    include_metadata: bool = False
    reuse_output_container: bool = False
    target_batch_size: int = DEFAULT_TARGET_BATCH_SIZE
    decimal_rounding_mode: RoundingMode | None = None
    array_sub_types_by_column_index: dict[int, FieldDescriptor] | None = None
    array_sub_types_by_column_name: dict[str, FieldDescriptor] | None = None
    explicit_types_by_column_index: dict[int, FieldDescriptor] | None = None
    explicit_types_by_column_name: dict[str, FieldDescriptor] | None = None

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, value: str | None) -> str | None:
        if value is None:
            return value
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {value!r}") from None
        return value

    @classmethod
    def from_json_file(cls, path: str | os.PathLike[str]) -> ConversionSettings:
        """Load settings from a JSON document on disk."""

        settings = cls.model_validate_json(Path(path).read_text(encoding="utf-8"))
        logger.info(f"Loaded conversion settings from {path}")
        return settings

    @property
    def temporal_context(self) -> ZoneInfo | None:
        return ZoneInfo(self.timezone) if self.timezone is not None else None

    def to_builder(self, allocator: pa.MemoryPool | None = None) -> ConversionConfigBuilder:
        """Return a builder staged with these settings.

        ``allocator`` defaults to Arrow's default memory pool.
        """

        if allocator is None:
            allocator = pa.default_memory_pool()
        return (
            ConversionConfigBuilder(allocator, self.temporal_context, self.include_metadata)
            .set_reuse_output_container(self.reuse_output_container)
            .set_target_batch_size(self.target_batch_size)
            .set_decimal_rounding_mode(self.decimal_rounding_mode)
            .set_array_sub_types_by_column_index(self.array_sub_types_by_column_index)
            .set_array_sub_types_by_column_name(self.array_sub_types_by_column_name)
            .set_explicit_types_by_column_index(self.explicit_types_by_column_index)
            .set_explicit_types_by_column_name(self.explicit_types_by_column_name)
        )

    def to_config(self, allocator: pa.MemoryPool | None = None) -> ConversionConfig:
        return self.to_builder(allocator).build()
