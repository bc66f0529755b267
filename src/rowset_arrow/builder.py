"""Builder for :class:`~rowset_arrow.config.ConversionConfig`."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import tzinfo

import pyarrow as pa

from .config import DEFAULT_TARGET_BATCH_SIZE, ConversionConfig
from .errors import MissingRequiredFieldError
from .fields import FieldDescriptor
from .resolver import TypeConverter

logger = logging.getLogger(__name__)


class ConversionConfigBuilder:
    """Stage conversion settings before producing an immutable ``ConversionConfig``.

    Every setter stores its value as given and returns the builder, so calls
    can be chained. Only the allocator is required, and it is checked by
    :meth:`build`. Passing ``None`` to an optional setter clears that setting.

    ``ConversionConfigBuilder(allocator, temporal_context)`` and
    ``ConversionConfigBuilder(allocator, temporal_context, include_metadata)``
    are shorthand for the matching setter calls.

    A builder is meant to be used from a single thread.
    """

    def __init__(
        self,
        allocator: pa.MemoryPool | None = None,
        temporal_context: tzinfo | None = None,
        include_metadata: bool = False,
    ) -> None:
        self._allocator = allocator
        self._temporal_context = temporal_context
        self._include_metadata = include_metadata
        self._reuse_output_container = False
        self._array_sub_types_by_column_index: Mapping[int, FieldDescriptor] | None = None
        self._array_sub_types_by_column_name: Mapping[str, FieldDescriptor] | None = None
        self._explicit_types_by_column_index: Mapping[int, FieldDescriptor] | None = None
        self._explicit_types_by_column_name: Mapping[str, FieldDescriptor] | None = None
        self._target_batch_size = DEFAULT_TARGET_BATCH_SIZE
        self._type_converter: TypeConverter | None = None
        self._decimal_rounding_mode: str | None = None

    def set_allocator(self, allocator: pa.MemoryPool | None) -> ConversionConfigBuilder:
        """Set the memory pool the conversion engine allocates Arrow buffers from."""

        self._allocator = allocator
        return self

    def set_temporal_context(self, temporal_context: tzinfo | None) -> ConversionConfigBuilder:
        """Set the timezone used for timestamp columns; ``None`` leaves them timezone-naive."""

        self._temporal_context = temporal_context
        return self

    def set_include_metadata(self, include_metadata: bool) -> ConversionConfigBuilder:
        """Set whether source column metadata is copied onto Arrow field metadata."""

        self._include_metadata = include_metadata
        return self

    def set_reuse_output_container(self, reuse_output_container: bool) -> ConversionConfigBuilder:
        self._reuse_output_container = reuse_output_container
        return self

    def set_array_sub_types_by_column_index(
        self, mapping: Mapping[int, FieldDescriptor] | None
    ) -> ConversionConfigBuilder:
        """Set element types of array columns keyed by 1-based column index."""

        self._array_sub_types_by_column_index = mapping
        return self

    def set_array_sub_types_by_column_name(
        self, mapping: Mapping[str, FieldDescriptor] | None
    ) -> ConversionConfigBuilder:
        """Set element types of array columns keyed by column name."""

        self._array_sub_types_by_column_name = mapping
        return self

    def set_explicit_types_by_column_index(
        self, mapping: Mapping[int, FieldDescriptor] | None
    ) -> ConversionConfigBuilder:
        self._explicit_types_by_column_index = mapping
        return self

    def set_explicit_types_by_column_name(
        self, mapping: Mapping[str, FieldDescriptor] | None
    ) -> ConversionConfigBuilder:
        self._explicit_types_by_column_name = mapping
        return self

    def set_target_batch_size(self, target_batch_size: int) -> ConversionConfigBuilder:
        self._target_batch_size = target_batch_size
        return self

    def set_type_converter(self, type_converter: TypeConverter | None) -> ConversionConfigBuilder:
        """Set a function that decides the Arrow type of every top-level column."""

        self._type_converter = type_converter
        return self

    def set_decimal_rounding_mode(self, rounding_mode: str | None) -> ConversionConfigBuilder:
        """Set a :mod:`decimal` rounding constant such as ``decimal.ROUND_HALF_UP``."""

        self._decimal_rounding_mode = rounding_mode
        return self

    def build(self) -> ConversionConfig:
        """Return a ``ConversionConfig`` from the staged settings.

        Raises:
            MissingRequiredFieldError: if no allocator was set.
        """

        if self._allocator is None:
            raise MissingRequiredFieldError("allocator")

        config = ConversionConfig(
            allocator=self._allocator,
            temporal_context=self._temporal_context,
            include_metadata=self._include_metadata,
            reuse_output_container=self._reuse_output_container,
            array_sub_types_by_column_index=self._array_sub_types_by_column_index,
            array_sub_types_by_column_name=self._array_sub_types_by_column_name,
            explicit_types_by_column_index=self._explicit_types_by_column_index,
            explicit_types_by_column_name=self._explicit_types_by_column_name,
            target_batch_size=self._target_batch_size,
            type_converter=self._type_converter,
            decimal_rounding_mode=self._decimal_rounding_mode,
        )
        logger.debug(f"Built {config!r}")
        return config
