import dataclasses
import logging
from datetime import timezone

import pyarrow as pa
import pytest

from rowset_arrow import (
    DEFAULT_TARGET_BATCH_SIZE,
    ConversionConfigBuilder,
    FieldDescriptor,
    MissingRequiredFieldError,
    SqlType,
)


@pytest.fixture
def pool() -> pa.MemoryPool:
    return pa.default_memory_pool()


def test_constructor_shorthand_matches_setter_chain(pool: pa.MemoryPool) -> None:
    shorthand = ConversionConfigBuilder(pool, timezone.utc).build()
    chained = (
        ConversionConfigBuilder()
        .set_allocator(pool)
        .set_temporal_context(timezone.utc)
        .build()
    )

    assert shorthand == chained
    assert shorthand.include_metadata is False


def test_constructor_shorthand_with_metadata_matches_setter_chain(pool: pa.MemoryPool) -> None:
    shorthand = ConversionConfigBuilder(pool, timezone.utc, True).build()
    chained = (
        ConversionConfigBuilder()
        .set_allocator(pool)
        .set_temporal_context(timezone.utc)
        .set_include_metadata(True)
        .build()
    )

    assert shorthand == chained
    assert shorthand.include_metadata is True


def test_defaults(pool: pa.MemoryPool) -> None:
    config = ConversionConfigBuilder(pool, None).build()

    assert config.allocator is pool
    assert config.temporal_context is None
    assert config.include_metadata is False
    assert config.reuse_output_container is False
    assert config.target_batch_size == DEFAULT_TARGET_BATCH_SIZE == 1024
    assert config.type_converter is None
    assert config.decimal_rounding_mode is None
    assert config.explicit_types_by_column_index is None
    assert config.explicit_types_by_column_name is None
    assert config.array_sub_types_by_column_index is None
    assert config.array_sub_types_by_column_name is None


def test_build_without_allocator_fails_regardless_of_other_settings() -> None:
    builder = (
        ConversionConfigBuilder()
        .set_temporal_context(timezone.utc)
        .set_include_metadata(True)
        .set_reuse_output_container(True)
        .set_target_batch_size(10)
        .set_explicit_types_by_column_index({1: FieldDescriptor(native_type=SqlType.VARCHAR)})
        .set_type_converter(lambda descriptor: pa.string())
    )

    with pytest.raises(MissingRequiredFieldError) as excinfo:
        builder.build()

    assert excinfo.value.field_name == "allocator"
    assert "allocator required" in str(excinfo.value)


def test_build_with_allocator_reset_to_none_fails(pool: pa.MemoryPool) -> None:
    builder = ConversionConfigBuilder(pool, None).set_allocator(None)

    with pytest.raises(ValueError):
        builder.build()


def test_builder_is_reusable_after_failed_build(pool: pa.MemoryPool) -> None:
    builder = ConversionConfigBuilder().set_include_metadata(True)

    with pytest.raises(MissingRequiredFieldError):
        builder.build()

    config = builder.set_allocator(pool).build()
    assert config.include_metadata is True


def test_non_positive_batch_size_is_accepted(pool: pa.MemoryPool) -> None:
    assert ConversionConfigBuilder(pool, None).set_target_batch_size(0).build().target_batch_size == 0
    assert ConversionConfigBuilder(pool, None).set_target_batch_size(-1).build().target_batch_size == -1


def test_none_maps_equal_never_set(pool: pa.MemoryPool) -> None:
    untouched = ConversionConfigBuilder(pool, None).build()
    cleared = (
        ConversionConfigBuilder(pool, None)
        .set_explicit_types_by_column_index(None)
        .set_explicit_types_by_column_name(None)
        .set_array_sub_types_by_column_index(None)
        .set_array_sub_types_by_column_name(None)
        .set_type_converter(None)
        .build()
    )

    assert cleared == untouched


def test_override_maps_are_held_by_reference(pool: pa.MemoryPool) -> None:
    by_name = {"price": FieldDescriptor(native_type=SqlType.DOUBLE)}

    config = ConversionConfigBuilder(pool, None).set_explicit_types_by_column_name(by_name).build()

    assert config.explicit_types_by_column_name is by_name


def test_config_is_immutable(pool: pa.MemoryPool) -> None:
    config = ConversionConfigBuilder(pool, None).build()

    with pytest.raises(dataclasses.FrozenInstanceError):
        config.include_metadata = True  # type: ignore[misc]


def test_build_logs_config(pool: pa.MemoryPool, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="rowset_arrow.builder")

    ConversionConfigBuilder(pool, None).build()

    assert "Built ConversionConfig(" in caplog.text
