"""Debounced watch loop.

File-system notifications from ``watchfiles.awatch`` are coalesced by a
trailing-edge timer: every notification re-arms the timer, and a pass only
starts once the workspace has been quiet for ``debounce`` seconds.  A burst
of N events therefore yields exactly one pass, which asks the change source
for its view of the world at that later moment.

Passes are single-flight.  A timer that fires while a pass is still
rewriting files queues behind it on a lock instead of racing it for the same
test-entry files.

A notification that includes an added file also invalidates the cached
workspace configuration, so a project registered mid-session is picked up
by the next pass.

When every path that changed during a window is a test-entry file the
previous pass rewrote itself, the window closes without a pass.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger
from watchfiles import Change, awatch

from specscope.changes.base import ChangeSourceError
from specscope.managers.workspace import WorkspaceConfigError
from specscope.models.enums import WatchState

if TYPE_CHECKING:
    from watchfiles.main import AnyEvent

    from specscope.execution.coordinator import PassResult, SpecScopeCoordinator

DEFAULT_DEBOUNCE = 0.5
"""Seconds of quiet required before a pass runs."""

FileChanges = Iterable[tuple[Change, str]]


def _ignore(_: object) -> None:
    return None


class SpecWatcher:
    """Re-runs the coordinator's pass whenever the workspace settles."""

    def __init__(
        self,
        coordinator: SpecScopeCoordinator,
        *,
        debounce: float = DEFAULT_DEBOUNCE,
        on_report: Callable[[str], None] | None = None,
        on_error: Callable[[Exception], None] | None = None,
    ) -> None:
        self.coordinator = coordinator
        self.debounce = debounce
        self._on_report = on_report or _ignore
        self._on_error = on_error or _ignore

        self.state = WatchState.IDLE
        self.pass_count = 0
        self._lock = asyncio.Lock()
        self._timer: asyncio.TimerHandle | None = None
        self._changed: set[Path] = set()
        self._own_writes: set[Path] = set()
        self._tasks: set[asyncio.Task[PassResult | None]] = set()

    @property
    def pending(self) -> bool:
        """Whether a debounce window is open and a pass is scheduled."""
        return self._timer is not None

    # -- Notifications -----------------------------------------------------------

    def notify(self, changes: FileChanges) -> None:
        """Record a batch of file-system changes and (re)arm the debounce timer."""
        changes = set(changes)
        self._changed.update(Path(path).resolve() for _, path in changes)
        if any(change == Change.added for change, _ in changes):
            self.coordinator.config_cache.invalidate()

        if self._timer is not None:
            self._timer.cancel()
        else:
            logger.debug("Watch: debounce window opened ({} change(s))", len(changes))
        self._timer = asyncio.get_running_loop().call_later(self.debounce, self._fire)

    def _fire(self) -> None:
        self._timer = None
        task = asyncio.create_task(self._run_scheduled())
        self._tasks.add(task)
        task.add_done_callback(self._pass_done)

    def _pass_done(self, task: asyncio.Task[PassResult | None]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.opt(exception=exc).error("Watch: pass crashed")

    # -- Passes --------------------------------------------------------------------

    async def run_pass(self) -> PassResult | None:
        """Run one pass under the single-flight lock.

        Fatal pass errors are handed to ``on_error`` and ``None`` is returned,
        so the watch loop keeps going.
        """
        async with self._lock:
            return await self._run_locked()

    async def _run_scheduled(self) -> PassResult | None:
        async with self._lock:
            changed, self._changed = self._changed, set()
            if changed and changed <= self._own_writes:
                logger.debug("Watch: only our own rewrites changed, skipping pass")
                return None
            return await self._run_locked()

    async def _run_locked(self) -> PassResult | None:
        self.state = WatchState.RUNNING
        self.pass_count += 1
        try:
            result = await self.coordinator.run_pass()
        except (ChangeSourceError, WorkspaceConfigError) as exc:
            logger.warning("Watch: pass {} failed: {}", self.pass_count, exc)
            self._on_error(exc)
            return None
        finally:
            self.state = WatchState.IDLE

        root = Path(self.coordinator.root)
        self._own_writes = {(root / f).resolve() for f in result.written}
        self._on_report(result.report)
        return result

    async def watch(self, stop_event: AnyEvent | None = None) -> None:
        """Run an initial pass, then one pass per settled burst of changes.

        Returns once *stop_event* is set; otherwise runs until cancelled.
        """
        await self.run_pass()
        logger.info("Watching {} for changes", self.coordinator.root)
        try:
            async for changes in awatch(self.coordinator.root, stop_event=stop_event):
                self.notify(changes)
        finally:
            await self.close()

    async def close(self) -> None:
        """Drop any scheduled pass and wait for in-flight ones to finish."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
