"""Tool configuration loaded from SPECSCOPE_* environment variables."""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class SpecScopeSettings(BaseSettings):
    """spec-scope settings.

    All fields are read from environment variables with the ``SPECSCOPE_``
    prefix.  For example, ``SPECSCOPE_LOG_LEVEL=DEBUG`` maps to ``log_level``.
    """

    model_config = SettingsConfigDict(
        env_prefix="SPECSCOPE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # -- Logging ---------------------------------------------------------------
    log_level: str = "WARNING"

    # -- Workspace -------------------------------------------------------------
    config_file: str = "angular.json"
    """Workspace configuration file name, relative to the workspace root."""

    git_binary: str = "git"

    # -- Watch mode ------------------------------------------------------------
    debounce_ms: int = 500
    """Quiet window after the last file-system event before a pass runs."""

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000


@lru_cache(maxsize=1)
def get_settings() -> SpecScopeSettings:
    """Return a cached settings instance.

    Call ``get_settings.cache_clear()`` in tests to force a re-read after
    overriding env vars.
    """
    return SpecScopeSettings()
