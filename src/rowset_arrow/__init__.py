"""
rowset-arrow: conversion policy for relational result sets to Apache Arrow
"""
from .builder import ConversionConfigBuilder
from .config import DEFAULT_TARGET_BATCH_SIZE, ConversionConfig
from .errors import (
    InvalidBatchSizeError,
    MissingRequiredFieldError,
    PrecisionLossError,
    RowsetArrowError,
    UnsupportedTypeError,
)
from .fields import FieldDescriptor, SqlType
from .resolver import FieldTypeResolver, TypeOverrideMap, default_arrow_type
from .schema import schema_from_descriptors
from .settings import ConversionSettings
from pydantic import ValidationError

__all__ = [
    "ConversionConfig",
    "ConversionConfigBuilder",
    "ConversionSettings",
    "DEFAULT_TARGET_BATCH_SIZE",
    "FieldDescriptor",
    "FieldTypeResolver",
    "SqlType",
    "TypeOverrideMap",
    "default_arrow_type",
    "schema_from_descriptors",
    "RowsetArrowError",
    "MissingRequiredFieldError",
    "InvalidBatchSizeError",
    "PrecisionLossError",
    "UnsupportedTypeError",
    "ValidationError", # Re-export for convenience
]
