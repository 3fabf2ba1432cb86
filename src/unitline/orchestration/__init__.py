"""
unitline Orchestration: units, organizers and compensating rollback.

ARCHITECTURE
────────────
::

    Organizer (Unit of Units)
      ├── Unit A ─┐
      ├── Unit B  ├── one SharedState: values + status + ledger
      └── Unit C ─┘

    HookChain   ─ before / around / after wrapped around each unit
    Contract    ─ declared inputs / outputs checked on entry / exit

MODULE MAP (recommended reading order)
──────────────────────────────────────
1. state.py      ─ SharedState + Status
2. hooks.py      ─ HookChain, Hook descriptors, @before/@around/@after
3. contract.py   ─ FieldSpec + Contract validation
4. unit.py       ─ Unit execution protocol
5. organizer.py  ─ Organizer

Example:
    from unitline.orchestration import Organizer, Unit

    class Charge(Unit):
        def perform(self):
            self.state.charged = True

        def rollback(self):
            self.state.charged = False

    class Ship(Unit):
        def perform(self):
            self.fail(error="out of stock")

    class Checkout(Organizer):
        organized = (Charge, Ship)

    state = Checkout.call()
    state.is_failure()   # True
    state.charged        # False
"""

from unitline.orchestration.contract import Contract, FieldKind, FieldSpec
from unitline.orchestration.hooks import Hook, HookChain, HookKind, after, around, before
from unitline.orchestration.organizer import Organizer
from unitline.orchestration.state import SharedState, Status
from unitline.orchestration.unit import Unit

__all__ = [
    # state
    "SharedState",
    "Status",
    # hooks
    "Hook",
    "HookChain",
    "HookKind",
    "after",
    "around",
    "before",
    # contract
    "Contract",
    "FieldKind",
    "FieldSpec",
    # units
    "Organizer",
    "Unit",
]
