"""
Test support utilities for unitline tests.

Helpers that don't fit as pytest fixtures but are used across test files:
a ``Journal`` that records what each unit did, and ``recording_unit`` which
builds unit types that write to it.
"""

from __future__ import annotations

from typing import Any

from unitline import Unit

from tests._support.fault_injection import apply_fault


class Journal:
    """
    Ordered record of ``(unit_name, action)`` events.

    Usage:
        journal = Journal()
        Charge = recording_unit("Charge", journal)
        Charge.call()
        journal.actions("rollback")   # → []
    """

    def __init__(self) -> None:
        self.events: list[tuple[str, str]] = []

    def record(self, name: str, action: str) -> None:
        self.events.append((name, action))

    def actions(self, action: str) -> list[str]:
        """Names of units that performed ``action``, in order."""
        return [name for name, act in self.events if act == action]

    def count(self, name: str, action: str) -> int:
        return self.events.count((name, action))

    def assert_order(self, expected: list[tuple[str, str]]) -> None:
        assert self.events == expected, (
            f"Journal mismatch:\n"
            f"  Expected: {expected}\n"
            f"  Actual:   {self.events}"
        )


def recording_unit(
    name: str,
    journal: Journal,
    *,
    base: type[Unit] = Unit,
    rollback_error: Exception | None = None,
    **namespace: Any,
) -> type[Unit]:
    """
    Build a unit type named ``name`` that journals ``perform`` and ``rollback``.

    ``perform`` checks the fault registry, so a test can make any recording
    unit fail with ``install_fault(name, ...)``. ``rollback_error`` makes the
    unit's compensating action raise.
    """

    def perform(self: Unit) -> None:
        journal.record(name, "perform")
        apply_fault(name, self)
        self.state.set(f"{name.lower()}_done", True)

    def rollback(self: Unit) -> None:
        journal.record(name, "rollback")
        if rollback_error is not None:
            raise rollback_error

    body = {"perform": perform, "rollback": rollback}
    body.update(namespace)
    return type(name, (base,), body)
