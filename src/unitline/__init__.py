"""
unitline: composable units of business logic with compensating rollback.

Units run in declared order over one shared state. When any of them fails,
every unit that already completed is rolled back, most recent first.

    from unitline import FieldSpec, Organizer, Unit

See ``unitline.orchestration`` for the execution protocol and
``unitline.core`` for errors, logging and settings.
"""

from unitline.core.errors import (
    BusinessFailure,
    ContractViolation,
    MissingInput,
    MissingOutput,
    RollbackError,
    TypeMismatch,
    UnitlineError,
)
from unitline.core.result import Err, Ok, Outcome
from unitline.orchestration import (
    FieldSpec,
    HookChain,
    Organizer,
    SharedState,
    Status,
    Unit,
    after,
    around,
    before,
)

__version__ = "0.1.0"

__all__ = [
    "BusinessFailure",
    "ContractViolation",
    "Err",
    "FieldSpec",
    "HookChain",
    "MissingInput",
    "MissingOutput",
    "Ok",
    "Organizer",
    "Outcome",
    "RollbackError",
    "SharedState",
    "Status",
    "TypeMismatch",
    "Unit",
    "UnitlineError",
    "__version__",
    "after",
    "around",
    "before",
]
