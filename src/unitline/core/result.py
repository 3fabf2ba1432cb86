"""
Result envelope for consistent success/failure handling.

``Outcome`` is the explicit two-variant alternative to exception-based
failure signalling: a unit invoked through ``Unit.outcome()`` returns
``Ok(state)`` when it succeeded and ``Err(failure)`` when it failed on
purpose. Contract violations and unexpected faults are not expected
outcomes and still raise.

Architecture:
    ::

        ┌─────────────────────────────────────────────┐
        │                 Outcome[T]                   │
        ├──────────────────────┬──────────────────────┤
        │       Ok[T]          │       Err[T]         │
        │  • value: T          │  • error: Exception  │
        │  • map()             │  • map_err()         │
        │  • unwrap()          │  • unwrap_or()       │
        └──────────────────────┴──────────────────────┘

Examples:
    >>> Ok(10).map(lambda x: x * 2).unwrap()
    20
    >>> Err(ValueError("bad")).unwrap_or(0)
    0

Tags:
    result-pattern, outcome, unitline-core
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, Union

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful result containing a value."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Get the value. Safe for Ok."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        """Get value or default (always returns value for Ok)."""
        return self.value

    def map(self, f: Callable[[T], U]) -> Outcome[U]:
        """Transform the value if Ok."""
        return Ok(f(self.value))

    def map_err(self, f: Callable[[Exception], Exception]) -> Outcome[T]:
        """Transform error if Err (no-op for Ok)."""
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"ok": True, "value": self.value}

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[T]):
    """Failed result containing the error that ended the run."""

    error: Exception

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Raise the contained error."""
        raise self.error

    def unwrap_or(self, default: T) -> T:
        """Return ``default`` since there is no value."""
        return default

    def map(self, f: Callable[[T], U]) -> Outcome[U]:
        """Transform value if Ok (no-op for Err)."""
        return Err(self.error)

    def map_err(self, f: Callable[[Exception], Exception]) -> Outcome[T]:
        """Transform the error."""
        return Err(f(self.error))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        to_dict = getattr(self.error, "to_dict", None)
        return {
            "ok": False,
            "error": to_dict() if callable(to_dict) else str(self.error),
            "error_type": type(self.error).__name__,
        }

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Outcome = Union[Ok[T], Err[T]]


__all__ = ["Err", "Ok", "Outcome"]
