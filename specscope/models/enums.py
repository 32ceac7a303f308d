"""Shared enumerations."""

from __future__ import annotations

from enum import StrEnum


class PassOutcome(StrEnum):
    """What a single pipeline pass ended up doing."""

    NO_CHANGES = "no_changes"
    REVERTED = "reverted"
    UPDATED = "updated"


class WatchState(StrEnum):
    IDLE = "idle"
    RUNNING = "running"
