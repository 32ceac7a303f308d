"""Data models for spec-scope."""

from specscope.models.enums import PassOutcome, WatchState
from specscope.models.project import Project
from specscope.models.workspace import ProjectConfig, WorkspaceConfig

__all__ = [
    # Enums
    "PassOutcome",
    # Project
    "Project",
    # Workspace
    "ProjectConfig",
    "WatchState",
    "WorkspaceConfig",
]
