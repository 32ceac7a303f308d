"""Change sources: where the list of changed files comes from."""

from specscope.changes.base import ChangeSource, ChangeSourceError
from specscope.changes.git import CommandFailedError, GitChangeSource, ToolNotFoundError

__all__ = [
    "ChangeSource",
    "ChangeSourceError",
    "CommandFailedError",
    "GitChangeSource",
    "ToolNotFoundError",
]
