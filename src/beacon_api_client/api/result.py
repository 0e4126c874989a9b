"""
Typed result union: `Ok(value)` or `Err(error)`.

REST calls raise on failure; `BeaconApiClient.try_call` and event
subscriptions hand back these values instead, so that a failure can travel
through a stream without ending it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, NoReturn, TypeVar

from .errors import ApiError

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """A successful result."""

    value: T

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Return the value."""
        return self.value


@dataclass(frozen=True, slots=True)
class Err:
    """A failed result."""

    error: ApiError

    @property
    def is_ok(self) -> bool:
        return False

    def unwrap(self) -> NoReturn:
        """Raise the carried error."""
        raise self.error


Result = Ok[T] | Err
"""Either a value of type T or an `ApiError`."""
