r"""Test-entry file rewriting.

A project's test-entry file builds its test context with exactly one call
of the shape::

    const context = require.context('./', true, /\.spec\.ts$/);

Only the trailing argument of that call is replaced; every other byte of
the file is left as it was.  Writes overwrite the file in place with no
temp-file-and-rename, so a crash mid-write can leave a truncated entry file
behind.

File I/O runs through ``anyio.to_thread.run_sync`` so that the per-project
rewrites of one pass can proceed concurrently without blocking the loop.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Iterable
from functools import partial
from pathlib import Path

from anyio import to_thread
from loguru import logger

from specscope.execution.pattern import DEFAULT_PATTERN, create_regex_for_files

CONTEXT_CALL = re.compile(r"(require\.context\('\./', true,).*(\);)")


class EntryRewriteError(RuntimeError):
    """Base class for per-project rewrite failures."""


class EntryNotFoundError(EntryRewriteError, LookupError):
    """Raised when a project's test-entry file does not exist."""


class FormatMismatchError(EntryRewriteError, ValueError):
    """Raised when a test-entry file does not contain exactly one context call."""


def replace_context_regex(content: str, regex: str, *, path: str | Path = "<string>") -> str:
    """Return *content* with the context call's last argument set to *regex*.

    Raises ``FormatMismatchError`` unless the call occurs exactly once.
    """
    matches = list(CONTEXT_CALL.finditer(content))
    if len(matches) != 1:
        found = "no" if not matches else str(len(matches))
        msg = f"file is in unexpected format {path} ({found} require.context calls found)"
        raise FormatMismatchError(msg)

    match = matches[0]
    replacement = f"{match.group(1)} {regex}{match.group(2)}"
    return content[: match.start()] + replacement + content[match.end() :]


async def update_test_file_regex(test_file_path: str | Path, regex: str) -> bool:
    """Rewrite the context regex of the file at *test_file_path*.

    Returns ``False`` without writing when the file already carries *regex*,
    so watch mode does not react to its own no-op writes.
    """
    path = Path(test_file_path)
    try:
        content = await to_thread.run_sync(partial(_read_file, path))
    except FileNotFoundError:
        msg = f"can't find file {path}"
        raise EntryNotFoundError(msg) from None
    except UnicodeDecodeError as exc:
        msg = f"file is not valid UTF-8 {path}"
        raise FormatMismatchError(msg) from exc

    updated = replace_context_regex(content, regex, path=path)
    if updated == content:
        return False

    await to_thread.run_sync(partial(_write_file, path, updated))
    return True


async def update_test_file(root: str | Path, test_file: str, spec_files: Iterable[str]) -> str:
    """Scope *test_file* to *spec_files*.  Never raises; returns a report line."""
    regex = create_regex_for_files(spec_files)
    try:
        written = await update_test_file_regex(Path(root) / test_file, regex)
    except (EntryRewriteError, OSError) as exc:
        logger.debug("Update of {} failed: {}", test_file, exc)
        return f"FAILED file update: {test_file} {exc}"

    logger.debug("Scoped {} to {}", test_file, regex)
    return f"File updated: {test_file}" if written else f"File unchanged: {test_file}"


async def revert_test_file(root: str | Path, test_file: str) -> str:
    """Restore the catch-all pattern in *test_file*.  Never raises."""
    try:
        written = await update_test_file_regex(Path(root) / test_file, DEFAULT_PATTERN)
    except (EntryRewriteError, OSError) as exc:
        logger.debug("Revert of {} failed: {}", test_file, exc)
        return f"FAILED file update: {test_file} {exc}"

    return f"File updated (undone): {test_file}" if written else f"File unchanged: {test_file}"


async def revert_test_files(root: str | Path, test_files: Iterable[str]) -> list[str]:
    """Revert every file in *test_files* concurrently, one report line each."""
    return list(await asyncio.gather(*(revert_test_file(root, f) for f in test_files)))


# -- Sync helpers (run in thread pool) -----------------------------------------


def _read_file(path: Path) -> str:
    # newline="" keeps CRLF line endings intact on the way back out.
    with path.open(encoding="utf-8", newline="") as f:
        return f.read()


def _write_file(path: Path, data: str) -> None:
    with path.open("w", encoding="utf-8", newline="") as f:
        f.write(data)
