"""
Core primitives shared by the execution protocol.

- errors.py    ─ error hierarchy (BusinessFailure, ContractViolation, RollbackError)
- result.py    ─ Ok / Err outcome envelope
- logging.py   ─ structlog configuration and context binding
- settings.py  ─ pydantic-settings runtime configuration
"""

from unitline.core.errors import (
    BusinessFailure,
    ContractErrorKind,
    ContractViolation,
    ErrorCategory,
    MissingInput,
    MissingOutput,
    OrganizerDefinitionError,
    RollbackError,
    StateError,
    TypeMismatch,
    UnitlineError,
    categorize_error,
    contract_error,
)
from unitline.core.logging import (
    LogContext,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)
from unitline.core.result import Err, Ok, Outcome
from unitline.core.settings import UnitlineSettings, get_settings, reset_settings

__all__ = [
    # errors
    "BusinessFailure",
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
    # logging
    "LogContext",
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_logger",
    "unbind_context",
    # result
    "Err",
    "Ok",
    "Outcome",
    # settings
    "UnitlineSettings",
    "get_settings",
    "reset_settings",
]
