"""Spec-file derivation and project assignment.

Both transforms are pure; they never touch the file system.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import PurePosixPath

from specscope.models.project import Project

SOURCE_SUFFIX = ".ts"
SPEC_SUFFIX = ".spec.ts"


def to_spec_file(file: str, *, source_suffix: str = SOURCE_SUFFIX, spec_suffix: str = SPEC_SUFFIX) -> str:
    """Return the canonical spec path for *file*.

    Already-canonical spec paths, and paths that do not end in
    *source_suffix*, are returned unchanged.
    """
    if file.endswith(spec_suffix) or not file.endswith(source_suffix):
        return file
    return file[: -len(source_suffix)] + spec_suffix


def convert_to_spec_files(
    files: Iterable[str],
    *,
    source_suffix: str = SOURCE_SUFFIX,
    spec_suffix: str = SPEC_SUFFIX,
) -> list[str]:
    """Map changed files to their spec files, deduplicated in first-seen order."""
    spec_files = (to_spec_file(f, source_suffix=source_suffix, spec_suffix=spec_suffix) for f in files)
    return list(dict.fromkeys(spec_files))


def _directory(path: str) -> PurePosixPath:
    return PurePosixPath(path).parent


def owns(test_file: str, spec_file: str) -> bool:
    """Whether the project of *test_file* owns *spec_file*.

    Compares whole path components: a project under ``app/`` owns
    ``app/x/y.spec.ts`` but not ``app2/y.spec.ts``.  An entry file at the
    workspace root owns everything.
    """
    project_dir = _directory(test_file)
    spec_dir = _directory(spec_file)
    return project_dir == PurePosixPath(".") or spec_dir == project_dir or project_dir in spec_dir.parents


def find_project(projects: Sequence[Project], spec_file: str) -> Project | None:
    """Return the first project, in enumeration order, that owns *spec_file*.

    This is deliberately a first-match scan and not a longest-prefix match:
    with nested projects, whichever one is configured first wins.
    """
    for project in projects:
        if owns(project.test_file, spec_file):
            return project
    return None


def create_projects(test_files: Iterable[str], spec_files: Iterable[str]) -> list[Project]:
    """Group *spec_files* under their owning project.

    Spec files no project owns are dropped, and so are projects that end up
    with no spec files.
    """
    projects = [Project(test_file=test_file) for test_file in test_files]
    for spec_file in spec_files:
        project = find_project(projects, spec_file)
        if project is not None:
            project.spec_files.append(spec_file)
    return [project for project in projects if project.spec_files]
