"""Unit tests for the debounced watch loop.

The coordinator is mocked; debounce windows are shortened to keep the
suite fast.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

from watchfiles import Change

from specscope.changes.git import ToolNotFoundError
from specscope.execution.coordinator import PassResult, SpecScopeCoordinator
from specscope.execution.watcher import SpecWatcher
from specscope.managers.workspace import ConfigNotFoundError, WorkspaceConfigCache
from specscope.models.enums import PassOutcome, WatchState

from .conftest import ENTRY_TEMPLATE, WorkspaceFactory

DEBOUNCE = 0.1

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _result(message: str = "File updated: app/src/test.ts") -> PassResult:
    return PassResult(outcome=PassOutcome.UPDATED, messages=[message])


def _mock_coordinator(root: Path = Path("/ws")) -> MagicMock:
    coordinator = MagicMock()
    coordinator.root = root
    coordinator.run_pass = AsyncMock(return_value=_result())
    return coordinator


def _modified(path: str = "/ws/app/src/foo.ts") -> set[tuple[Change, str]]:
    return {(Change.modified, path)}


async def _settle(watcher: SpecWatcher) -> None:
    """Wait for the debounce window to close and scheduled passes to finish."""
    await asyncio.sleep(DEBOUNCE * 3)
    await watcher.close()


# ---------------------------------------------------------------------------
# Debounce
# ---------------------------------------------------------------------------


async def test_burst_triggers_single_pass() -> None:
    coordinator = _mock_coordinator()
    reports: list[str] = []
    watcher = SpecWatcher(coordinator, debounce=DEBOUNCE, on_report=reports.append)

    for i in range(5):
        watcher.notify(_modified(f"/ws/app/src/f{i}.ts"))
        await asyncio.sleep(DEBOUNCE / 5)
    assert coordinator.run_pass.await_count == 0
    assert watcher.pending is True

    await _settle(watcher)

    coordinator.run_pass.assert_awaited_once()
    assert reports == ["File updated: app/src/test.ts"]
    assert watcher.pending is False


async def test_separate_windows_trigger_separate_passes() -> None:
    coordinator = _mock_coordinator()
    watcher = SpecWatcher(coordinator, debounce=DEBOUNCE)

    watcher.notify(_modified())
    await asyncio.sleep(DEBOUNCE * 3)
    watcher.notify(_modified())
    await _settle(watcher)

    assert coordinator.run_pass.await_count == 2
    assert watcher.pass_count == 2


async def test_close_cancels_pending_pass() -> None:
    coordinator = _mock_coordinator()
    watcher = SpecWatcher(coordinator, debounce=DEBOUNCE)

    watcher.notify(_modified())
    await watcher.close()
    await asyncio.sleep(DEBOUNCE * 2)

    coordinator.run_pass.assert_not_awaited()


# ---------------------------------------------------------------------------
# Config invalidation
# ---------------------------------------------------------------------------


async def test_added_file_invalidates_config() -> None:
    coordinator = _mock_coordinator()
    watcher = SpecWatcher(coordinator, debounce=DEBOUNCE)

    watcher.notify({(Change.added, "/ws/new/src/test.ts"), (Change.modified, "/ws/a.ts")})
    await watcher.close()

    coordinator.config_cache.invalidate.assert_called_once()


async def test_modified_file_keeps_config() -> None:
    coordinator = _mock_coordinator()
    watcher = SpecWatcher(coordinator, debounce=DEBOUNCE)

    watcher.notify({(Change.modified, "/ws/a.ts"), (Change.deleted, "/ws/b.ts")})
    await watcher.close()

    coordinator.config_cache.invalidate.assert_not_called()


# ---------------------------------------------------------------------------
# Own rewrites
# ---------------------------------------------------------------------------


async def test_own_rewrite_does_not_trigger_pass() -> None:
    coordinator = _mock_coordinator()
    reports: list[str] = []
    watcher = SpecWatcher(coordinator, debounce=DEBOUNCE, on_report=reports.append)

    await watcher.run_pass()
    watcher.notify(_modified("/ws/app/src/test.ts"))
    await _settle(watcher)

    coordinator.run_pass.assert_awaited_once()
    assert reports == ["File updated: app/src/test.ts"]


async def test_own_rewrite_with_other_changes_runs_pass() -> None:
    coordinator = _mock_coordinator()
    watcher = SpecWatcher(coordinator, debounce=DEBOUNCE)

    await watcher.run_pass()
    watcher.notify(_modified("/ws/app/src/test.ts"))
    watcher.notify(_modified("/ws/app/src/foo.ts"))
    await _settle(watcher)

    assert coordinator.run_pass.await_count == 2


async def test_unchanged_entry_is_not_treated_as_own_write() -> None:
    coordinator = _mock_coordinator()
    coordinator.run_pass.return_value = _result("File unchanged: app/src/test.ts")
    watcher = SpecWatcher(coordinator, debounce=DEBOUNCE)

    await watcher.run_pass()
    watcher.notify(_modified("/ws/app/src/test.ts"))
    await _settle(watcher)

    assert coordinator.run_pass.await_count == 2


# ---------------------------------------------------------------------------
# Single flight
# ---------------------------------------------------------------------------


async def test_passes_never_overlap() -> None:
    coordinator = _mock_coordinator()
    running = 0
    peak = 0

    async def _slow_pass() -> PassResult:
        nonlocal running, peak
        running += 1
        peak = max(peak, running)
        await asyncio.sleep(DEBOUNCE * 3)
        running -= 1
        return _result()

    coordinator.run_pass.side_effect = _slow_pass
    watcher = SpecWatcher(coordinator, debounce=DEBOUNCE)

    watcher.notify(_modified())
    await asyncio.sleep(DEBOUNCE * 1.5)
    assert watcher.state == WatchState.RUNNING
    # A second window closes while the first pass is still writing.
    watcher.notify(_modified())
    await asyncio.sleep(DEBOUNCE * 1.5)
    await watcher.close()

    assert coordinator.run_pass.await_count == 2
    assert peak == 1
    assert watcher.state == WatchState.IDLE


async def test_fatal_error_does_not_stop_later_passes() -> None:
    coordinator = _mock_coordinator()
    coordinator.run_pass.side_effect = [ToolNotFoundError("git was not found"), _result()]
    errors: list[Exception] = []
    reports: list[str] = []
    watcher = SpecWatcher(coordinator, debounce=DEBOUNCE, on_report=reports.append, on_error=errors.append)

    assert await watcher.run_pass() is None
    result = await watcher.run_pass()

    assert [str(e) for e in errors] == ["git was not found"]
    assert result is not None
    assert reports == ["File updated: app/src/test.ts"]
    assert watcher.state == WatchState.IDLE


async def test_unreadable_config_does_not_stop_watching(tmp_path: Path) -> None:
    (tmp_path / "angular.json").mkdir()
    source = AsyncMock()
    source.get_modified_files.return_value = ["app/src/foo.ts"]
    coordinator = SpecScopeCoordinator(tmp_path, change_source=source, config_cache=WorkspaceConfigCache(tmp_path))
    errors: list[Exception] = []
    watcher = SpecWatcher(coordinator, debounce=DEBOUNCE, on_error=errors.append)

    stop = asyncio.Event()
    task = asyncio.create_task(watcher.watch(stop_event=stop))
    await asyncio.sleep(0.3)
    stop.set()
    await asyncio.wait_for(task, timeout=5)

    assert len(errors) == 1
    assert isinstance(errors[0], ConfigNotFoundError)


# ---------------------------------------------------------------------------
# watch()
# ---------------------------------------------------------------------------


async def test_watch_runs_initial_pass_and_stops(make_workspace: WorkspaceFactory) -> None:
    root = make_workspace({"app": "app/src/test.ts"})
    source = AsyncMock()
    source.get_modified_files.return_value = ["app/src/foo.ts"]
    coordinator = SpecScopeCoordinator(root, change_source=source, config_cache=WorkspaceConfigCache(root))
    reports: list[str] = []
    watcher = SpecWatcher(coordinator, debounce=DEBOUNCE, on_report=reports.append)

    stop = asyncio.Event()
    task = asyncio.create_task(watcher.watch(stop_event=stop))
    await asyncio.sleep(0.3)
    stop.set()
    await asyncio.wait_for(task, timeout=5)

    assert reports[0] == "File updated: app/src/test.ts"
    assert (root / "app/src/test.ts").read_text(encoding="utf-8") != ENTRY_TEMPLATE
