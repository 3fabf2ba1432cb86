"""
Hook Chain - before / around / after behaviour wrapped around a unit.

Hooks let cross-cutting behaviour (logging, timing, transactions, guards)
surround a unit's core logic without the core logic knowing about them.
Each unit type owns one ``HookChain``; a subclass starts from a copy of its
parent's chain and can only append to it.

Composition for a core callable ``C``::

    before_1() → before_2() → around_1( around_2( C ) ) → after_2() → after_1()

- before hooks run in declaration order
- the first-declared around hook is the outermost layer; each receives a
  ``proceed`` continuation, and not calling it skips everything inside
- after hooks run in reverse declaration order, and only once the around/core
  region returned normally
- an exception anywhere aborts the rest of the chain and propagates

Declaring hooks:

    class PlaceOrder(Unit):
        @before
        def load_cart(self):
            ...

        @around
        def in_transaction(self, proceed):
            with db.transaction():
                proceed()

    PlaceOrder.add_after(lambda unit: audit(unit.state))

Tags:
    unitline, orchestration, hooks, middleware
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any

HOOK_MARKER = "__unitline_hook__"


class HookKind(str, Enum):
    BEFORE = "before"
    AROUND = "around"
    AFTER = "after"


@dataclass(frozen=True)
class Hook:
    """
    One hook descriptor.

    ``target`` is either the name of a method looked up on the unit at run
    time (so subclasses can override it), or a callable taking the unit as
    first argument.
    """

    kind: HookKind
    target: str | Callable[..., Any]

    def invoke(self, unit: Any, *args: Any) -> Any:
        if isinstance(self.target, str):
            return getattr(unit, self.target)(*args)
        return self.target(unit, *args)

    @property
    def name(self) -> str:
        if isinstance(self.target, str):
            return self.target
        return getattr(self.target, "__name__", repr(self.target))


class HookChain:
    """Ordered, append-only list of hooks for one unit type."""

    def __init__(self, hooks: list[Hook] | None = None):
        self._hooks: list[Hook] = list(hooks or [])

    def add(self, kind: HookKind | str, target: str | Callable[..., Any]) -> Hook:
        hook = Hook(HookKind(kind), target)
        self._hooks.append(hook)
        return hook

    def before(self, target: str | Callable[..., Any]) -> Hook:
        return self.add(HookKind.BEFORE, target)

    def around(self, target: str | Callable[..., Any]) -> Hook:
        return self.add(HookKind.AROUND, target)

    def after(self, target: str | Callable[..., Any]) -> Hook:
        return self.add(HookKind.AFTER, target)

    def extend(self, other: HookChain) -> None:
        self._hooks.extend(other)

    def copy(self) -> HookChain:
        return HookChain(self._hooks)

    def of_kind(self, kind: HookKind | str) -> list[Hook]:
        kind = HookKind(kind)
        return [hook for hook in self._hooks if hook.kind is kind]

    def wrap(self, unit: Any, core: Callable[[], Any]) -> Callable[[], None]:
        """Return a zero-argument callable running ``core`` inside this chain."""
        befores = self.of_kind(HookKind.BEFORE)
        arounds = self.of_kind(HookKind.AROUND)
        afters = self.of_kind(HookKind.AFTER)

        chain: Callable[[], Any] = core
        for hook in reversed(arounds):
            chain = _layer(hook, unit, chain)

        def run() -> None:
            for hook in befores:
                hook.invoke(unit)
            chain()
            for hook in reversed(afters):
                hook.invoke(unit)

        return run

    def __iter__(self) -> Iterator[Hook]:
        return iter(self._hooks)

    def __len__(self) -> int:
        return len(self._hooks)

    def __repr__(self) -> str:
        hooks = ", ".join(f"{hook.kind.value}:{hook.name}" for hook in self._hooks)
        return f"HookChain([{hooks}])"


def _layer(hook: Hook, unit: Any, proceed: Callable[[], Any]) -> Callable[[], Any]:
    def call() -> Any:
        return hook.invoke(unit, proceed)

    return call


# =============================================================================
# Class-body decorators
# =============================================================================


def _marker(kind: HookKind) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    def decorate(fn: Callable[..., Any]) -> Callable[..., Any]:
        setattr(fn, HOOK_MARKER, kind)
        return fn

    decorate.__name__ = kind.value
    return decorate


before = _marker(HookKind.BEFORE)
before.__doc__ = "Mark a unit method as a before hook."

around = _marker(HookKind.AROUND)
around.__doc__ = "Mark a unit method as an around hook; it receives ``proceed``."

after = _marker(HookKind.AFTER)
after.__doc__ = "Mark a unit method as an after hook."


def marked_hooks(namespace: dict[str, Any]) -> Iterator[tuple[HookKind, str]]:
    """Yield ``(kind, method_name)`` for decorated methods, in definition order."""
    for name, member in namespace.items():
        kind = getattr(member, HOOK_MARKER, None)
        if kind is not None:
            yield kind, name


__all__ = [
    "Hook",
    "HookChain",
    "HookKind",
    "after",
    "around",
    "before",
    "marked_hooks",
]
