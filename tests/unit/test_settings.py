import json
from decimal import ROUND_HALF_UP
from pathlib import Path

import pyarrow as pa
import pytest

from rowset_arrow import (
    ConversionConfigBuilder,
    ConversionSettings,
    FieldDescriptor,
    SqlType,
    ValidationError,
)


def test_settings_from_json_file_build_equivalent_config(tmp_path: Path) -> None:
    path = tmp_path / "conversion.json"
    path.write_text(
        json.dumps({
            "include_metadata": True,
            "target_batch_size": 2048,
            "decimal_rounding_mode": "ROUND_HALF_UP",
            "explicit_types_by_column_index": {"1": {"native_type": "BIGINT"}},
            "explicit_types_by_column_name": {
                "price": {"native_type": "DECIMAL", "precision": 12, "scale": 2}
            },
            "array_sub_types_by_column_name": {"tags": {"native_type": 12}},
        }),
        encoding="utf-8",
    )
    pool = pa.default_memory_pool()

    config = ConversionSettings.from_json_file(path).to_config(pool)

    expected = (
        ConversionConfigBuilder(pool, None, True)
        .set_target_batch_size(2048)
        .set_decimal_rounding_mode(ROUND_HALF_UP)
        .set_explicit_types_by_column_index({1: FieldDescriptor(native_type=SqlType.BIGINT)})
        .set_explicit_types_by_column_name(
            {"price": FieldDescriptor(native_type=SqlType.DECIMAL, precision=12, scale=2)}
        )
        .set_array_sub_types_by_column_name({"tags": FieldDescriptor(native_type=SqlType.VARCHAR)})
        .build()
    )
    assert config == expected


def test_settings_defaults_to_default_memory_pool() -> None:
    config = ConversionSettings().to_config()

    assert config.allocator is not None
    assert config.target_batch_size == 1024
    assert config.temporal_context is None


def test_settings_keep_non_positive_batch_size() -> None:
    assert ConversionSettings(target_batch_size=-5).to_config().target_batch_size == -5


@pytest.mark.parametrize(
    "payload",
    [
        {"unknown_option": True},
        {"decimal_rounding_mode": "ROUND_SIDEWAYS"},
        {"timezone": "Not/A_Zone"},
        {"explicit_types_by_column_name": {"x": {"native_type": "NOPE"}}},
        {"explicit_types_by_column_index": {"x": {"native_type": "INTEGER"}}},
    ],
)
def test_invalid_settings_are_rejected(payload: dict) -> None:
    with pytest.raises(ValidationError):
        ConversionSettings.model_validate(payload)
