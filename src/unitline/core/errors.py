"""
Structured error types for unitline.

Every error raised by the execution protocol derives from ``UnitlineError`` so
callers can catch the whole family with one ``except`` clause, while the
subclasses keep the three failure kinds apart:

- **BusinessFailure:** the expected, caller-triggered abort. It is the only
  error the quiet entry point (``Unit.call``) swallows.
- **ContractViolation:** a declared input/output is missing or has the wrong
  type. Always propagates, whichever entry point was used.
- **RollbackError:** one or more compensating actions raised during an
  unwind. Raised once, after the unwind has visited every ledgered unit.

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                       UnitlineError                           │
        │            (category, metadata, cause, to_dict)               │
        ├──────────────────────────────────────────────────────────────┤
        │                                                               │
        │  BusinessFailure     ContractViolation       RollbackError    │
        │  (FAILURE)           (CONTRACT)              (ROLLBACK)       │
        │                         │                                     │
        │                  MissingInput                                 │
        │                  MissingOutput                                │
        │                  TypeMismatch (+ TypeError)                   │
        │                                                               │
        │  StateError (INTERNAL)    OrganizerDefinitionError (CONFIG)   │
        └──────────────────────────────────────────────────────────────┘

Contract errors are built from a static ``ContractErrorKind`` mapping rather
than by looking a class up from its name at runtime.

Examples:
    >>> error = MissingInput("Missing required input: user", field="user")
    >>> error.category
    <ErrorCategory.CONTRACT: 'CONTRACT'>
    >>> contract_error(ContractErrorKind.MISSING_OUTPUT, "nope").__class__.__name__
    'MissingOutput'

Tags:
    error-handling, exception-hierarchy, unitline-core

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from unitline.orchestration.state import SharedState


class ErrorCategory(str, Enum):
    """Categories used to classify errors in logs and serialized output."""

    FAILURE = "FAILURE"  # Explicit business failure
    CONTRACT = "CONTRACT"  # Declared input/output violated
    ROLLBACK = "ROLLBACK"  # Compensating action raised
    CONFIG = "CONFIG"  # Bad declaration or settings
    INTERNAL = "INTERNAL"  # Bug, unexpected state


class UnitlineError(Exception):
    """
    Base exception for all unitline errors.

    Subclasses set ``default_category``; every instance carries a message,
    its category, an optional chained cause and free-form metadata.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        cause: Exception | None = None,
        metadata: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.cause = cause
        self.metadata: dict[str, Any] = dict(metadata or {})

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> UnitlineError:
        """
        Add metadata to this error (fluent API).

        Usage:
            raise UnitlineError("boom").with_context(unit="ChargeCard")
        """
        self.metadata.update(kwargs)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        if self.metadata:
            result["metadata"] = dict(self.metadata)
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# BUSINESS FAILURE
# =============================================================================


class BusinessFailure(UnitlineError):
    """
    The failure signal.

    Raised by ``SharedState.fail()`` and carries the failed state, so a
    caller of ``Unit.call_strict`` can inspect what the pipeline left behind.
    """

    default_category = ErrorCategory.FAILURE

    def __init__(self, state: SharedState, message: str | None = None, **kwargs: Any):
        if message is None:
            error = state.get("error") if state is not None else None
            message = str(error) if error is not None else "Unit failed"
        super().__init__(message, **kwargs)
        self.state = state

    # Alias matching the vocabulary used by unit authors.
    @property
    def context(self) -> SharedState:
        return self.state

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.state is not None:
            result["state"] = self.state.to_dict()
        return result


# =============================================================================
# CONTRACT VIOLATIONS
# =============================================================================


class ContractViolation(UnitlineError):
    """A declared input or output contract was not honoured."""

    default_category = ErrorCategory.CONTRACT

    def __init__(
        self,
        message: str,
        *,
        state: SharedState | None = None,
        unit: str | None = None,
        field: str | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.state = state
        self.unit = unit
        self.field = field

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.unit:
            result["unit"] = self.unit
        if self.field:
            result["field"] = self.field
        return result


class MissingInput(ContractViolation):
    """A required input was absent when the unit started."""

    pass


class MissingOutput(ContractViolation):
    """A required output was absent when the unit's core logic returned."""

    pass


class TypeMismatch(ContractViolation, TypeError):
    """A declared input/output held a value of the wrong type."""

    def __init__(
        self,
        message: str,
        *,
        expected: type | None = None,
        actual: type | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.expected = expected
        self.actual = actual

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.expected is not None:
            result["expected"] = self.expected.__name__
        if self.actual is not None:
            result["actual"] = self.actual.__name__
        return result


class ContractErrorKind(str, Enum):
    """Finite set of contract violation kinds."""

    MISSING_INPUT = "missing_input"
    MISSING_OUTPUT = "missing_output"
    TYPE_MISMATCH = "type_mismatch"


CONTRACT_ERRORS: dict[ContractErrorKind, type[ContractViolation]] = {
    ContractErrorKind.MISSING_INPUT: MissingInput,
    ContractErrorKind.MISSING_OUTPUT: MissingOutput,
    ContractErrorKind.TYPE_MISMATCH: TypeMismatch,
}


def contract_error(kind: ContractErrorKind, message: str, **kwargs: Any) -> ContractViolation:
    """Build the contract error registered for ``kind``."""
    return CONTRACT_ERRORS[ContractErrorKind(kind)](message, **kwargs)


# =============================================================================
# ROLLBACK / STATE / DECLARATION ERRORS
# =============================================================================


class RollbackError(UnitlineError):
    """
    One or more compensating actions raised during an unwind.

    Raised after the unwind finished visiting every ledgered unit. ``errors``
    lists ``(unit, exception)`` pairs in the order the rollbacks ran.
    """

    default_category = ErrorCategory.ROLLBACK

    def __init__(self, errors: list[tuple[Any, Exception]], message: str | None = None, **kwargs: Any):
        if message is None:
            names = ", ".join(type(unit).__name__ for unit, _ in errors)
            message = f"{len(errors)} rollback(s) failed: {names}"
        if errors and "cause" not in kwargs:
            kwargs["cause"] = errors[0][1]
        super().__init__(message, **kwargs)
        self.errors = list(errors)

    @property
    def exceptions(self) -> list[Exception]:
        return [exc for _, exc in self.errors]

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["errors"] = [
            {"unit": type(unit).__name__, "error": str(exc)} for unit, exc in self.errors
        ]
        return result


class StateError(UnitlineError):
    """An operation was attempted that the state's status does not allow."""

    pass


class OrganizerDefinitionError(UnitlineError):
    """An organizer was declared with something that is not a unit type."""

    default_category = ErrorCategory.CONFIG


def categorize_error(error: Exception) -> ErrorCategory:
    """Return the category of ``error``; non-unitline errors are INTERNAL."""
    if isinstance(error, UnitlineError):
        return error.category
    return ErrorCategory.INTERNAL


__all__ = [
    "BusinessFailure",
    "CONTRACT_ERRORS",
    "ContractErrorKind",
    "ContractViolation",
    "ErrorCategory",
    "MissingInput",
    "MissingOutput",
    "OrganizerDefinitionError",
    "RollbackError",
    "StateError",
    "TypeMismatch",
    "UnitlineError",
    "categorize_error",
    "contract_error",
]
