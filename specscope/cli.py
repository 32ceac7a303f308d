import asyncio
import sys
from pathlib import Path

import click

from specscope import __version__


def _print_report(report: str) -> None:
    click.echo(f"\n{report}\n")


def _print_error(exc: Exception) -> None:
    click.echo(f"\nspec-scope unexpected error: {exc}\n", err=True)


def build_coordinator(root: Path):
    """Wire the git change source and config cache for *root*."""
    from specscope.changes.git import GitChangeSource
    from specscope.execution.coordinator import SpecScopeCoordinator
    from specscope.managers.workspace import WorkspaceConfigCache
    from specscope.settings import get_settings

    settings = get_settings()
    return SpecScopeCoordinator(
        root,
        change_source=GitChangeSource(binary=settings.git_binary),
        config_cache=WorkspaceConfigCache(root, settings.config_file),
    )


@click.command()
@click.argument(
    "root",
    required=False,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.option("-w", "--watch", is_flag=True, default=False, help="Keep running and rescope on every file change.")
@click.version_option(__version__, prog_name="spec-scope")
def main(root: Path | None, watch: bool) -> None:
    """Scope each project's test.ts to the specs of changed files.

    ROOT is the workspace directory (default: the current directory).
    """
    from specscope.changes.base import ChangeSourceError
    from specscope.log import setup_logging
    from specscope.managers.workspace import WorkspaceConfigError
    from specscope.settings import get_settings

    settings = get_settings()
    setup_logging(settings.log_level)

    coordinator = build_coordinator(root or Path.cwd())

    if watch:
        from specscope.execution.watcher import SpecWatcher

        watcher = SpecWatcher(
            coordinator,
            debounce=settings.debounce_seconds,
            on_report=_print_report,
            on_error=_print_error,
        )
        try:
            asyncio.run(watcher.watch())
        except KeyboardInterrupt:
            pass
        return

    try:
        result = asyncio.run(coordinator.run_pass())
    except (ChangeSourceError, WorkspaceConfigError) as exc:
        _print_error(exc)
        sys.exit(1)
    _print_report(result.report)


if __name__ == "__main__":
    main()
