"""Runtime settings for unitline.

Settings are read from ``UNITLINE_*`` environment variables (and a ``.env``
file when present) through pydantic-settings, validated once and cached.

Fields
──────
log_level              : structlog level used by ``configure_logging``
log_json               : JSON output (True), console (False), or auto (None)
service                : service name stamped on every log line
raise_rollback_errors  : raise ``RollbackError`` after an unwind in which a
                         compensating action failed (otherwise log only)
check_types            : enforce the declared types of inputs/outputs

Examples:
    >>> from unitline.core.settings import get_settings
    >>> get_settings().check_types
    True
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class UnitlineSettings(BaseSettings):
    """Settings shared by every pipeline run in the process."""

    model_config = SettingsConfigDict(
        env_prefix="UNITLINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool | None = None
    service: str = "unitline"

    # ── Execution ────────────────────────────────────────────────
    raise_rollback_errors: bool = Field(
        default=True,
        description="Raise an aggregate RollbackError once an unwind completes",
    )
    check_types: bool = Field(
        default=True,
        description="Validate declared input/output types at runtime",
    )


@lru_cache(maxsize=1)
def get_settings() -> UnitlineSettings:
    """Return the process-wide settings, loading them on first use."""
    return UnitlineSettings()


def reset_settings() -> None:
    """Drop cached settings so the next ``get_settings()`` re-reads the environment."""
    get_settings.cache_clear()


__all__ = ["UnitlineSettings", "get_settings", "reset_settings"]
