"""Pass coordinator -- one run of the change-resolution pipeline.

A pass:

1. **Collect**: list changed files and load the workspace config, concurrently
2. **Filter**: drop changed files that are themselves test-entry files
3. **Rewrite**: scope each affected project's test-entry file to its spec
   files, or revert every entry file when no source change is left

Change-source and configuration errors are fatal and propagate to the
caller.  Per-project rewrite failures never are: they come back as report
lines next to the successful ones.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from specscope.execution.mapping import convert_to_spec_files, create_projects
from specscope.execution.rewriter import revert_test_files, update_test_file
from specscope.managers.workspace import WorkspaceConfigCache, get_test_files
from specscope.models.enums import PassOutcome

if TYPE_CHECKING:
    from specscope.changes.base import ChangeSource
    from specscope.models.project import Project

NO_CHANGES_MESSAGE = "No file changes found"
_WRITTEN_PREFIXES = ("File updated: ", "File updated (undone): ")


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------


@dataclass
class PassResult:
    """Outcome of one pipeline pass."""

    outcome: PassOutcome
    messages: list[str] = field(default_factory=list)
    projects: list[Project] = field(default_factory=list)

    @property
    def report(self) -> str:
        return "\n".join(self.messages)

    @property
    def failed(self) -> list[str]:
        return [m for m in self.messages if m.startswith("FAILED")]

    @property
    def written(self) -> list[str]:
        """Test-entry files this pass actually rewrote."""
        return [m.split(": ", 1)[1] for m in self.messages if m.startswith(_WRITTEN_PREFIXES)]


# ---------------------------------------------------------------------------
# Coordinator
# ---------------------------------------------------------------------------


class SpecScopeCoordinator:
    """Runs passes against one workspace root.

    The config cache is shared across passes; the watcher invalidates it when
    files are added.  Everything else is recomputed from scratch every pass.
    """

    def __init__(
        self,
        root: str | Path,
        *,
        change_source: ChangeSource,
        config_cache: WorkspaceConfigCache | None = None,
    ) -> None:
        self.root = Path(root)
        self.change_source = change_source
        self.config_cache = config_cache or WorkspaceConfigCache(self.root)

    async def run_pass(self) -> PassResult:
        changed_files, config = await asyncio.gather(
            self.change_source.get_modified_files(self.root),
            self.config_cache.get(),
        )

        if not changed_files:
            logger.debug("Pass: no changed files")
            return PassResult(outcome=PassOutcome.NO_CHANGES, messages=[NO_CHANGES_MESSAGE])

        test_files = get_test_files(config)
        source_files = [f for f in changed_files if f not in test_files]

        if not source_files:
            logger.debug("Pass: only test-entry files changed, reverting {} file(s)", len(test_files))
            messages = await revert_test_files(self.root, test_files)
            return PassResult(outcome=PassOutcome.REVERTED, messages=messages)

        spec_files = convert_to_spec_files(source_files)
        projects = create_projects(test_files, spec_files)
        logger.debug(
            "Pass: {} changed file(s) -> {} spec file(s) across {} project(s)",
            len(source_files),
            len(spec_files),
            len(projects),
        )

        messages = await asyncio.gather(
            *(update_test_file(self.root, p.test_file, p.spec_files) for p in projects),
        )
        return PassResult(outcome=PassOutcome.UPDATED, messages=list(messages), projects=projects)
