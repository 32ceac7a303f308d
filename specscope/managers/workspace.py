"""Workspace configuration loading and caching.

The configuration is read once and memoized for the lifetime of a watch
session.  ``WorkspaceConfigCache.invalidate`` drops the memoized value so
the next pass re-reads the file; the watcher calls it whenever files are
added, since a new project may have been registered.
"""

from __future__ import annotations

from functools import partial
from pathlib import Path

from anyio import to_thread
from loguru import logger
from pydantic import ValidationError

from specscope.models.workspace import WorkspaceConfig

DEFAULT_CONFIG_FILE = "angular.json"


class WorkspaceConfigError(RuntimeError):
    """Base class for configuration failures.  Always fatal to a pass."""


class ConfigNotFoundError(WorkspaceConfigError, LookupError):
    """Raised when the workspace configuration file does not exist."""


class ConfigParseError(WorkspaceConfigError, ValueError):
    """Raised when the workspace configuration file is not a valid JSON object."""


async def load_workspace_config(root: str | Path, config_file: str = DEFAULT_CONFIG_FILE) -> WorkspaceConfig:
    """Read and parse ``{root}/{config_file}``.

    Raises ``ConfigNotFoundError`` if the file is missing or unreadable and
    ``ConfigParseError`` if it is not a JSON object of the expected shape.
    """
    path = Path(root) / config_file
    try:
        raw = await to_thread.run_sync(partial(path.read_text, encoding="utf-8"))
    except FileNotFoundError:
        msg = f"can't find file {path}"
        raise ConfigNotFoundError(msg) from None
    except UnicodeDecodeError as exc:
        msg = f"{config_file} file is not valid UTF-8 {path}"
        raise ConfigParseError(msg) from exc
    except OSError as exc:
        msg = f"can't read file {path}: {exc.strerror or exc}"
        raise ConfigNotFoundError(msg) from exc

    try:
        config = WorkspaceConfig.model_validate_json(raw)
    except ValidationError as exc:
        if any(error["type"] == "json_invalid" for error in exc.errors()):
            msg = f"{config_file} file is not valid JSON {path}"
        else:
            msg = f"{config_file} file does not hold a workspace object {path}"
        raise ConfigParseError(msg) from exc

    logger.debug("Loaded {} with {} project(s)", path, len(config.projects))
    return config


def get_test_files(config: WorkspaceConfig) -> list[str]:
    """Return every project's test-entry path, in configuration order.

    Projects without ``architect.test.options.main`` are omitted.
    """
    test_files: list[str] = []
    for project in config.projects.values():
        if project is not None and project.test_file:
            test_files.append(project.test_file)
    return test_files


class WorkspaceConfigCache:
    """Memoized workspace configuration with explicit invalidation.

    The cached value is only ever replaced wholesale, so a pass that already
    holds a ``WorkspaceConfig`` keeps a consistent snapshot even if the cache
    is invalidated underneath it.
    """

    def __init__(self, root: str | Path, config_file: str = DEFAULT_CONFIG_FILE) -> None:
        self.root = Path(root)
        self.config_file = config_file
        self._config: WorkspaceConfig | None = None

    @property
    def is_loaded(self) -> bool:
        return self._config is not None

    async def get(self) -> WorkspaceConfig:
        if self._config is None:
            self._config = await load_workspace_config(self.root, self.config_file)
        return self._config

    def invalidate(self) -> None:
        if self._config is not None:
            logger.debug("Workspace config cache invalidated")
        self._config = None
