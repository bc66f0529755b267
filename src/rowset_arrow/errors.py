"""Custom exceptions raised by rowset-arrow."""


class RowsetArrowError(Exception):
    """Base exception for the library."""


class MissingRequiredFieldError(RowsetArrowError, ValueError):
    """Raised when a configuration is built without a required setting."""

    def __init__(self, field_name: str) -> None:
        super().__init__(f"{field_name} required")
        self.field_name = field_name


class InvalidBatchSizeError(RowsetArrowError, ValueError):
    """Raised when a non-positive target batch size reaches a batching consumer."""


class PrecisionLossError(RowsetArrowError, ArithmeticError):
    """Raised when a decimal cannot be rescaled without rounding and no rounding mode is set."""


class UnsupportedTypeError(RowsetArrowError, TypeError):
    """Raised when a native SQL type has no Arrow mapping."""
