"""Change source interface.

A change source reports which files of the workspace changed since the last
commit.  The pipeline only needs the paths, relative to the workspace root,
of modified and untracked source files; deleted files are never reported.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable


class ChangeSourceError(RuntimeError):
    """Base class for change-source failures.  Always fatal to a pass."""


@runtime_checkable
class ChangeSource(Protocol):
    """Async protocol for listing changed files of a workspace."""

    async def get_modified_files(self, root: str | Path) -> list[str]:
        """Return workspace-relative paths of modified and untracked files."""
        ...
