"""Git-backed change source.

Runs ``git ls-files`` against the workspace root::

    git -C {root} ls-files -m -o --exclude-standard -z *.ts

``-m`` lists tracked files with unstaged modifications, ``-o`` untracked
files, and ``--exclude-standard`` applies the usual ignore rules.  Git also
reports deleted files under ``-m``; those are dropped here since there is
nothing left to scope a test run to.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from anyio import to_thread
from loguru import logger

from specscope.changes.base import ChangeSourceError

DEFAULT_PATHSPEC = "*.ts"


class ToolNotFoundError(ChangeSourceError):
    """Raised when the git binary cannot be found."""


class CommandFailedError(ChangeSourceError):
    """Raised when git exits with an error."""


class GitChangeSource:
    """``ChangeSource`` implementation that shells out to git."""

    def __init__(self, binary: str = "git", pathspec: str = DEFAULT_PATHSPEC) -> None:
        self.binary = binary
        self.pathspec = pathspec

    def command(self, root: str | Path) -> list[str]:
        return [
            self.binary,
            "-C",
            str(root),
            "ls-files",
            "-m",
            "-o",
            "--exclude-standard",
            "-z",
            self.pathspec,
        ]

    async def get_modified_files(self, root: str | Path) -> list[str]:
        cmd = self.command(root)
        logger.debug("Running {}", " ".join(cmd))
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            msg = f"{self.binary} was not found"
            raise ToolNotFoundError(msg) from None

        stdout, stderr = await proc.communicate()
        if proc.returncode != 0:
            detail = stderr.decode(errors="replace").strip()
            msg = f"git ls-files failed\n\n{detail}"
            raise CommandFailedError(msg)

        files = parse_ls_files(stdout.decode(errors="replace"))
        existing = await to_thread.run_sync(_existing, Path(root), files)
        logger.debug("git reported {} changed file(s), {} still on disk", len(files), len(existing))
        return existing


def parse_ls_files(output: str) -> list[str]:
    """Split NUL-separated ``git ls-files -z`` output, dropping blanks and repeats."""
    files: list[str] = []
    for line in output.split("\0"):
        path = line.strip()
        if path and path not in files:
            files.append(path)
    return files


def _existing(root: Path, files: list[str]) -> list[str]:
    return [f for f in files if (root / f).exists()]
