"""
Organizer - a unit that runs other units in order over one shared state.

An organizer is itself a ``Unit``: it has the same entry points, hooks and
contracts, and can be organized by another organizer. Its core logic runs
each organized unit type against the organizer's own state.

Rollback needs no organizer-specific code. Every completed unit sits in the
shared ledger, so when any unit anywhere in the tree raises, the innermost
``run_strict`` unwinds the whole ledger in reverse completion order; the
enclosing organizers then find the ledger empty.

Example:
    class PlaceOrder(Organizer):
        organized = (ChargeCard, ReserveStock, SendConfirmation)

    # or, after the class body:
    PlaceOrder.organize(ChargeCard, ReserveStock, SendConfirmation)

    state = PlaceOrder.call(order=order)

Tags:
    unitline, orchestration, organizer, pipeline, compensation
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, ClassVar

from unitline.core.errors import OrganizerDefinitionError
from unitline.core.logging import get_logger
from unitline.orchestration.unit import Unit

logger = get_logger(__name__)


def _as_units(owner: str, units: Iterable[Any]) -> tuple[type[Unit], ...]:
    organized = tuple(units)
    for unit in organized:
        if not (isinstance(unit, type) and issubclass(unit, Unit)):
            raise OrganizerDefinitionError(
                f"{owner} can only organize Unit subclasses, got {unit!r}",
                metadata={"organizer": owner},
            )
    return organized


class Organizer(Unit):
    """Runs ``organized`` unit types in declaration order."""

    organized: ClassVar[tuple[type[Unit], ...]] = ()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "organized" in vars(cls):
            cls.organized = _as_units(cls.__name__, vars(cls)["organized"])

    @classmethod
    def organize(cls, *units: type[Unit]) -> None:
        """Declare the units to run, replacing any earlier declaration."""
        if len(units) == 1 and isinstance(units[0], (list, tuple)):
            units = tuple(units[0])
        cls.organized = _as_units(cls.__name__, units)

    def perform(self) -> None:
        for unit_cls in self.organized:
            logger.debug("organizer.step", organizer=type(self).__name__, unit=unit_cls.__name__)
            unit_cls(self.state).run_strict()
