"""Configuration objects for rowset-arrow."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import tzinfo
from decimal import ROUND_DOWN, Context, Decimal, InvalidOperation

import pyarrow as pa

from .errors import InvalidBatchSizeError, MissingRequiredFieldError, PrecisionLossError
from .fields import FieldDescriptor
from .resolver import (
    MAX_DECIMAL256_PRECISION,
    FieldTypeResolver,
    TypeConverter,
    TypeOverrideMap,
    infer_array_element,
)

logger = logging.getLogger(__name__)

DEFAULT_TARGET_BATCH_SIZE = 1024

_RESCALE_CONTEXT = Context(prec=MAX_DECIMAL256_PRECISION)


@dataclass(frozen=True, slots=True)
class ConversionConfig:
    """Policy controlling how result-set columns become Arrow columns.

    Instances are produced by :class:`~rowset_arrow.builder.ConversionConfigBuilder`
    and are safe to share between concurrent conversions. Override mappings
    are held by reference; callers must not mutate them afterwards.

    ``target_batch_size`` is stored as given. Consumers that batch call
    :meth:`checked_target_batch_size`.
    """

    allocator: pa.MemoryPool
    temporal_context: tzinfo | None = None
    include_metadata: bool = False
    reuse_output_container: bool = False
    # Mappings are unhashable and left out of ``hash()``; they still take part in ``==``.
    array_sub_types_by_column_index: Mapping[int, FieldDescriptor] | None = field(default=None, hash=False)
    array_sub_types_by_column_name: Mapping[str, FieldDescriptor] | None = field(default=None, hash=False)
    explicit_types_by_column_index: Mapping[int, FieldDescriptor] | None = field(default=None, hash=False)
    explicit_types_by_column_name: Mapping[str, FieldDescriptor] | None = field(default=None, hash=False)
    target_batch_size: int = DEFAULT_TARGET_BATCH_SIZE
    type_converter: TypeConverter | None = field(default=None, hash=False)
    decimal_rounding_mode: str | None = None
    builtin_type_resolver: FieldTypeResolver = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.allocator is None:
            raise MissingRequiredFieldError("allocator")
        # The type_converter is applied by resolve_target_type alone.
        object.__setattr__(
            self,
            "builtin_type_resolver",
            FieldTypeResolver(temporal_context=self.temporal_context),
        )

    @property
    def explicit_type_overrides(self) -> TypeOverrideMap:
        return TypeOverrideMap(self.explicit_types_by_column_index, self.explicit_types_by_column_name)

    @property
    def array_sub_type_overrides(self) -> TypeOverrideMap:
        return TypeOverrideMap(self.array_sub_types_by_column_index, self.array_sub_types_by_column_name)

    def explicit_type_by_column_index(self, index: int) -> FieldDescriptor | None:
        return self.explicit_type_overrides.by_column_index(index)

    def explicit_type_by_column_name(self, name: str) -> FieldDescriptor | None:
        return self.explicit_type_overrides.by_column_name(name)

    def array_sub_type_by_column_index(self, index: int) -> FieldDescriptor | None:
        return self.array_sub_type_overrides.by_column_index(index)

    def array_sub_type_by_column_name(self, name: str) -> FieldDescriptor | None:
        return self.array_sub_type_overrides.by_column_name(name)

    def resolve_field_descriptor(self, descriptor: FieldDescriptor) -> FieldDescriptor:
        """Return the explicit override for ``descriptor`` (index first, then name), or itself."""

        override = self.explicit_type_overrides.lookup(descriptor)
        if override is None:
            return descriptor
        logger.debug(
            f"Explicit type override for column {descriptor.column_index} "
            f"({descriptor.name!r}): native type {override.native_type}"
        )
        return override

    def resolve_target_type(self, descriptor: FieldDescriptor) -> pa.DataType:
        """Resolve the Arrow type of a top-level column.

        Precedence:

        1. ``type_converter``, when configured, decides for every column.
        2. Explicit override keyed by column index.
        3. Explicit override keyed by column name.
        4. The built-in native type mapping.

        Array columns resolve to a list of :meth:`resolve_array_sub_type`.
        """

        if self.type_converter is not None:
            return self.type_converter(descriptor)

        effective = self.resolve_field_descriptor(descriptor)
        element_type = self.resolve_array_sub_type(descriptor) if effective.is_array else None
        return self.builtin_type_resolver.resolve(effective, element_type=element_type)

    def resolve_array_sub_type(self, descriptor: FieldDescriptor) -> pa.DataType:
        """Resolve the element type of an array column.

        Array sub-type overrides are consulted by index, then by name. Without
        one the element type is inferred from the source type name. The
        ``type_converter`` does not take part.
        """

        element = self.array_sub_type_overrides.lookup(descriptor)
        if element is None:
            element = infer_array_element(descriptor)
        return self.builtin_type_resolver.resolve(element)

    def checked_target_batch_size(self) -> int:
        """Return ``target_batch_size`` for a consumer that needs a positive batch size."""

        if self.target_batch_size <= 0:
            raise InvalidBatchSizeError(
                f"target_batch_size must be positive, got {self.target_batch_size}"
            )
        return self.target_batch_size

    def rescale_decimal(self, value: Decimal, scale: int) -> Decimal:
        """Rescale ``value`` to ``scale`` digits after the decimal point.

        Without a ``decimal_rounding_mode`` any digit that would be dropped
        raises :class:`PrecisionLossError` instead of being rounded away.
        Results wider than 76 digits raise :class:`PrecisionLossError` too.
        """

        exponent = Decimal(1).scaleb(-scale)
        rounding = self.decimal_rounding_mode or ROUND_DOWN
        try:
            rescaled = value.quantize(exponent, rounding=rounding, context=_RESCALE_CONTEXT)
        except InvalidOperation as exc:
            raise PrecisionLossError(
                f"Rescaling {value} to scale {scale} exceeds {_RESCALE_CONTEXT.prec} digits"
            ) from exc
        if self.decimal_rounding_mode is None and rescaled != value:
            raise PrecisionLossError(
                f"Rescaling {value} to scale {scale} loses precision and no rounding mode is set"
            )
        return rescaled
