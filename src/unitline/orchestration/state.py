"""
Shared State - the mutable value store shared across one pipeline run.

A single ``SharedState`` is created per top-level invocation and handed by
reference to every unit taking part in it. It holds three things:

- **values:** key/value data units read and write
- **status:** ``pending`` until the run settles on ``success`` or ``failure``
- **ledger:** units that completed their core logic, in completion order

ARCHITECTURE
────────────
::

    SharedState
      ├── get / set / has / require      ─ value access
      ├── state["k"], state.k            ─ mapping + attribute sugar
      ├── fail(**info)                   ─ pending → failure, raises BusinessFailure
      ├── mark_succeeded(unit)           ─ append to ledger
      ├── mark_success()                 ─ pending → success (top level only)
      └── rollback()                     ─ reverse, best-effort, single-pass unwind

Rollback consumes the ledger before invoking any compensating action, so a
second ``rollback()`` (for example from an enclosing organizer unwinding the
same exception) finds nothing left to undo.

Example:
    state = SharedState.build({"order_id": 42})
    state.set("charged", True)
    state.order_id          # → 42
    state.missing           # → None
    state.require("missing")  # → KeyError

Tags:
    unitline, orchestration, shared-state, ledger, rollback
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator, Mapping
from enum import Enum
from typing import TYPE_CHECKING, Any

from unitline.core.errors import BusinessFailure, RollbackError, StateError
from unitline.core.logging import get_logger
from unitline.core.settings import get_settings

if TYPE_CHECKING:
    from unitline.orchestration.unit import Unit

logger = get_logger(__name__)

_INSTANCE_ATTRS = frozenset({"run_id", "rollback_errors"})


class Status(str, Enum):
    """Lifecycle of a shared state. Settled states never change again."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"


class SharedState:
    """
    Mutable key/value store, status and rollback ledger for one run.

    Attribute access reads and writes values: ``state.user`` is
    ``state.get("user")``. Names that belong to the class itself (``status``,
    ``ledger``, ``get`` ...) always resolve to the class member; use
    ``state["status"]`` for a value stored under such a key.
    """

    def __init__(self, values: Mapping[str, Any] | None = None, /, **kwargs: Any):
        object.__setattr__(self, "_values", dict(values or {}))
        self._values.update(kwargs)
        object.__setattr__(self, "_status", Status.PENDING)
        object.__setattr__(self, "_ledger", [])
        object.__setattr__(self, "_rolled_back", False)
        object.__setattr__(self, "rollback_errors", [])
        object.__setattr__(self, "run_id", uuid.uuid4().hex)

    # =========================================================================
    # Factories
    # =========================================================================

    @classmethod
    def build(cls, initial: SharedState | Mapping[str, Any] | None = None, /, **kwargs: Any) -> SharedState:
        """
        Return ``initial`` if it already is a state, otherwise wrap it.

        Keyword arguments are merged into the resulting state in both cases.
        """
        if isinstance(initial, SharedState):
            if kwargs:
                initial.update(kwargs)
            return initial
        return cls(initial, **kwargs)

    # =========================================================================
    # Value access
    # =========================================================================

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def has(self, key: str) -> bool:
        return key in self._values

    def require(self, key: str) -> Any:
        """Get a value that must be present; raises ``KeyError`` otherwise."""
        try:
            return self._values[key]
        except KeyError:
            raise KeyError(f"SharedState has no value for {key!r}") from None

    def update(self, values: Mapping[str, Any] | None = None, /, **kwargs: Any) -> None:
        if values:
            self._values.update(values)
        if kwargs:
            self._values.update(kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Shallow copy of the stored values."""
        return dict(self._values)

    def keys(self):
        return self._values.keys()

    def items(self):
        return self._values.items()

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._values[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails.
        if name.startswith("_"):
            raise AttributeError(name)
        return self._values.get(name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_") or name in _INSTANCE_ATTRS:
            object.__setattr__(self, name, value)
        elif hasattr(type(self), name):
            raise AttributeError(f"{name!r} is reserved on SharedState; use state[{name!r}] = ...")
        else:
            self._values[name] = value

    # =========================================================================
    # Status
    # =========================================================================

    @property
    def status(self) -> Status:
        return self._status

    def is_success(self) -> bool:
        return self._status is Status.SUCCESS

    def is_failure(self) -> bool:
        return self._status is Status.FAILURE

    def is_pending(self) -> bool:
        return self._status is Status.PENDING

    def fail(self, info: Mapping[str, Any] | None = None, /, **kwargs: Any) -> None:
        """
        Mark the run as failed and raise ``BusinessFailure``.

        ``info`` (and keyword arguments) are merged into the values first, e.g.
        ``state.fail(error="card declined")``. On a state that already failed
        this does nothing: no merge and no raise.

        Raises:
            BusinessFailure: carrying this state.
            StateError: if the state already settled on success.
        """
        if self._status is Status.FAILURE:
            logger.debug("state.fail_ignored", run_id=self.run_id)
            return
        if self._status is Status.SUCCESS:
            raise StateError("Cannot fail a state that already succeeded")

        self.update(info, **kwargs)
        self._status = Status.FAILURE
        logger.info("state.failed", run_id=self.run_id, error=self._values.get("error"))
        raise BusinessFailure(self)

    def mark_success(self) -> None:
        """Settle a pending state on success. Failed states are left alone."""
        if self._status is Status.PENDING:
            self._status = Status.SUCCESS

    # =========================================================================
    # Ledger
    # =========================================================================

    @property
    def ledger(self) -> tuple[Unit, ...]:
        """Units that completed successfully and have not been rolled back."""
        return tuple(self._ledger)

    @property
    def rolled_back(self) -> bool:
        return self._rolled_back

    def mark_succeeded(self, unit: Unit) -> None:
        """Record ``unit`` as completed. Called once per unit, after output validation."""
        self._ledger.append(unit)

    def rollback(self) -> bool:
        """
        Invoke ``rollback()`` on every ledgered unit, most recent first.

        The ledger is emptied before any compensating action runs, so this is
        a no-op the second time around. A compensating action that raises does
        not stop the others; once all of them ran, the collected errors are
        stored on ``rollback_errors`` and raised together as ``RollbackError``
        (unless ``raise_rollback_errors`` is disabled in the settings).

        Returns:
            True if any unit was rolled back, False if there was nothing to undo.
        """
        entries = self._ledger
        self._ledger = []
        self._rolled_back = True
        if not entries:
            return False

        logger.info(
            "state.rollback",
            run_id=self.run_id,
            units=[type(unit).__name__ for unit in reversed(entries)],
        )

        errors: list[tuple[Unit, Exception]] = []
        for unit in reversed(entries):
            try:
                unit.rollback()
            except Exception as exc:
                logger.exception(
                    "state.rollback_error",
                    run_id=self.run_id,
                    unit=type(unit).__name__,
                    error=str(exc),
                )
                errors.append((unit, exc))

        if errors:
            self.rollback_errors.extend(errors)
            if get_settings().raise_rollback_errors:
                raise RollbackError(errors)
        return True

    def __repr__(self) -> str:
        parts = [f"{key}={value!r}" for key, value in self._values.items()]
        parts.append(f"status={self._status.value!r}")
        return f"SharedState({', '.join(parts)})"
