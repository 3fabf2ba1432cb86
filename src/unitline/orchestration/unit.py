"""
Unit - a single step of business logic.

A unit validates its declared inputs, runs its core logic (``perform``),
validates its declared outputs and then records itself in the shared
state's ledger. Everything between the first input check and the ledger
entry runs inside the unit type's hook chain.

ARCHITECTURE
────────────
::

    Unit.call(attrs)          ─ quiet: BusinessFailure swallowed, state returned
    Unit.call_strict(attrs)   ─ loud: BusinessFailure propagates
    Unit.outcome(attrs)       ─ Ok(state) | Err(BusinessFailure)
        │
        └── run() → run_strict()
                      └── hooks.wrap(
                            validate inputs → perform() → validate outputs
                            → state.mark_succeeded(self) )
                      on any exception: state.rollback(), then re-raise

Contract violations and unexpected exceptions propagate through every
entry point. Only the failure signal is ever swallowed, and only by
``call``/``run``.

Example:
    class ChargeCard(Unit):
        inputs = (FieldSpec("order", Order),)
        outputs = (FieldSpec("charge_id", str),)

        def perform(self):
            charge = gateway.charge(self.state.order)
            if not charge.ok:
                self.fail(error=charge.message)
            self.state.charge_id = charge.id

        def rollback(self):
            gateway.refund(self.state.charge_id)

    state = ChargeCard.call(order=order)
    state.is_success()

Tags:
    unitline, orchestration, unit, interactor
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, ClassVar

from unitline.core.errors import BusinessFailure, RollbackError, categorize_error
from unitline.core.logging import LogContext, get_logger
from unitline.core.result import Err, Ok, Outcome
from unitline.orchestration.contract import Contract, FieldKind
from unitline.orchestration.hooks import HookChain, HookKind, marked_hooks
from unitline.orchestration.state import SharedState

logger = get_logger(__name__)


class Unit:
    """
    Base class for units.

    Subclasses override ``perform()`` with their core logic and, when the
    step needs undoing after a downstream failure, ``rollback()``.

    Class-level declarations (collected when the subclass is created):
        inputs / outputs: ``FieldSpec`` entries or bare names
        @before / @around / @after: hook methods
    """

    hooks: ClassVar[HookChain] = HookChain()
    contract: ClassVar[Contract] = Contract()
    inputs: ClassVar[tuple[Any, ...]] = ()
    outputs: ClassVar[tuple[Any, ...]] = ()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        namespace = vars(cls)

        hooks = cls.hooks.copy()
        registered = {(hook.kind, hook.target) for hook in hooks}
        for kind, name in marked_hooks(dict(namespace)):
            if (kind, name) not in registered:
                hooks.add(kind, name)
        cls.hooks = hooks

        cls.contract = cls.contract.extend(
            namespace.get("inputs", ()),
            namespace.get("outputs", ()),
        )

    def __init__(self, state: SharedState | Mapping[str, Any] | None = None, /, **kwargs: Any):
        self._state = SharedState.build(state, **kwargs)

    @property
    def state(self) -> SharedState:
        return self._state

    @property
    def context(self) -> SharedState:
        return self._state

    # =========================================================================
    # Entry points
    # =========================================================================

    @classmethod
    def call(cls, attributes: SharedState | Mapping[str, Any] | None = None, /, **kwargs: Any) -> SharedState:
        """
        Run the unit and return the resulting state.

        Never raises ``BusinessFailure``; inspect ``state.is_failure()``
        instead. Contract violations and other exceptions still propagate.

        Note:
            Failing a state that already settled on success raises
            ``StateError``, and that propagates from here too. Chaining
            ``B.call(A.call())`` hands B a settled state; pass a fresh
            mapping (``B.call(A.call().to_dict())``) or run both through an
            ``Organizer`` instead.
        """
        return cls._invoke(attributes, kwargs, strict=False)

    @classmethod
    def call_strict(cls, attributes: SharedState | Mapping[str, Any] | None = None, /, **kwargs: Any) -> SharedState:
        """
        Run the unit and return the resulting state.

        Raises:
            BusinessFailure: if the state was failed, carrying that state.
        """
        return cls._invoke(attributes, kwargs, strict=True)

    @classmethod
    def outcome(cls, attributes: SharedState | Mapping[str, Any] | None = None, /, **kwargs: Any) -> Outcome[SharedState]:
        """Run the unit and return ``Ok(state)`` or ``Err(BusinessFailure)``."""
        try:
            return Ok(cls.call_strict(attributes, **kwargs))
        except BusinessFailure as failure:
            return Err(failure)

    @classmethod
    def _invoke(cls, attributes: Any, kwargs: dict[str, Any], *, strict: bool) -> SharedState:
        # Only the invocation that created the state settles it on success;
        # a call handed an existing state is part of someone else's run.
        owns_state = not isinstance(attributes, SharedState)
        unit = cls(attributes, **kwargs)

        with LogContext(run_id=unit.state.run_id):
            if strict:
                unit.run_strict()
            else:
                unit.run()

        if owns_state:
            unit.state.mark_success()
        return unit.state

    # =========================================================================
    # Execution
    # =========================================================================

    def run(self) -> None:
        """Run with hooks, tracking and rollback, swallowing ``BusinessFailure``."""
        try:
            self.run_strict()
        except BusinessFailure as failure:
            logger.debug("unit.failure_swallowed", unit=type(self).__name__, error=failure.message)

    def run_strict(self) -> None:
        """
        Run with hooks, tracking and rollback.

        If anything escapes the hook-wrapped region, every unit recorded in
        the shared ledger is rolled back before the exception is re-raised.
        """
        name = type(self).__name__
        logger.debug("unit.start", unit=name)
        try:
            self.hooks.wrap(self, self._execute)()
        except BusinessFailure as failure:
            logger.debug("unit.failed", unit=name, error=failure.message)
            self._unwind(failure)
            raise
        except Exception as exc:
            logger.warning(
                "unit.error",
                unit=name,
                error=str(exc),
                error_type=type(exc).__name__,
                category=categorize_error(exc).value,
            )
            self._unwind(exc)
            raise
        logger.debug("unit.succeeded", unit=name)

    def _execute(self) -> None:
        name = type(self).__name__
        self.contract.validate(FieldKind.INPUT, self._state, unit=name)
        self.perform()
        self.contract.validate(FieldKind.OUTPUT, self._state, unit=name)
        self._state.mark_succeeded(self)

    def _unwind(self, exc: Exception) -> None:
        try:
            self._state.rollback()
        except RollbackError as rollback_error:
            # The original exception stays the one the caller sees.
            exc.add_note(f"Rollback also failed: {rollback_error}")
            logger.error(
                "unit.rollback_failed",
                unit=type(self).__name__,
                error=str(exc),
                rollback_error=rollback_error.to_dict(),
            )

    # =========================================================================
    # Overridables
    # =========================================================================

    def perform(self) -> None:
        """Core logic. Expected to be overridden."""

    def rollback(self) -> None:
        """Undo ``perform`` after a downstream failure. Expected to be overridden when needed."""

    def fail(self, info: Mapping[str, Any] | None = None, /, **kwargs: Any) -> None:
        """Shortcut for ``self.state.fail(...)``."""
        self._state.fail(info, **kwargs)

    # =========================================================================
    # Declaration helpers
    # =========================================================================

    @classmethod
    def input(cls, name: str, type: Any = None, optional: bool = False) -> None:
        cls.contract = cls.contract.with_input(name, type, optional)

    @classmethod
    def output(cls, name: str, type: Any = None, optional: bool = False) -> None:
        cls.contract = cls.contract.with_output(name, type, optional)

    @classmethod
    def add_before(cls, target: str | Callable[..., Any]) -> None:
        cls.hooks.add(HookKind.BEFORE, target)

    @classmethod
    def add_around(cls, target: str | Callable[..., Any]) -> None:
        cls.hooks.add(HookKind.AROUND, target)

    @classmethod
    def add_after(cls, target: str | Callable[..., Any]) -> None:
        cls.hooks.add(HookKind.AFTER, target)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} state={self._state!r}>"
