"""
Exception hierarchy for wire-level type conversion.

Every error derives from `ValueError` so that pydantic reports it as a
validation failure instead of letting it escape validation.
"""

from __future__ import annotations

from typing import Any


class WireFormatError(ValueError):
    """
    Base exception for all wire conversion errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class WireEncodingError(WireFormatError):
    """
    Raised when a wire value is not in the textual form its type requires.

    Attributes:
        type_name: The type that was being decoded.
        detail: What was wrong with the value.
        value: The offending value (truncated for display).
    """

    def __init__(self, type_name: str, detail: str, value: Any = None) -> None:
        self.type_name = type_name
        self.detail = detail
        self.value = value

        msg = f"Invalid {type_name}: {detail}"
        if value is not None:
            value_repr = repr(value)
            if len(value_repr) > 50:
                value_repr = value_repr[:47] + "..."
            msg = f"{msg}: {value_repr}"

        super().__init__(msg)


class WireOverflowError(WireFormatError):
    """
    Raised when a numeric value is outside the valid range.

    Attributes:
        value: The value that caused the overflow.
        type_name: The type that couldn't hold the value.
        max_value: The maximum allowed value (inclusive).
    """

    def __init__(self, value: int, type_name: str, *, max_value: int) -> None:
        self.value = value
        self.type_name = type_name
        self.max_value = max_value

        super().__init__(f"{value} is out of range for {type_name} (valid range: [0, {max_value}])")


class WireLengthError(WireFormatError):
    """
    Raised when a byte or bit sequence has an incorrect length.

    Attributes:
        type_name: The type with the length constraint.
        expected: The expected length (exact for vectors, max for lists).
        actual: The actual length received.
        is_limit: True if expected is a maximum limit, False if exact.
        unit: What is being counted ("bytes" or "bits").
    """

    def __init__(
        self,
        type_name: str,
        *,
        expected: int,
        actual: int,
        is_limit: bool = False,
        unit: str = "bytes",
    ) -> None:
        self.type_name = type_name
        self.expected = expected
        self.actual = actual
        self.is_limit = is_limit
        self.unit = unit

        if is_limit:
            msg = f"{type_name} cannot exceed {expected} {unit}, got {actual}"
        else:
            msg = f"{type_name} requires exactly {expected} {unit}, got {actual}"

        super().__init__(msg)
