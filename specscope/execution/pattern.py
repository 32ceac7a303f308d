r"""Matching-pattern construction.

The pattern is a JavaScript regular-expression literal written verbatim as
the last argument of ``require.context``.  Scoped patterns alternate the
escaped base names of the spec files to run::

    /(foo\.spec\.ts|bar\.spec\.ts)/

The default pattern matches every spec file and is used to revert.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import PurePosixPath

from specscope.execution.mapping import SPEC_SUFFIX

_METACHARACTERS = re.compile(r"[.*+?^${}()/|\[\]\\]")


def escape_file_name(name: str) -> str:
    """Backslash-escape every regex metacharacter in *name*."""
    return _METACHARACTERS.sub(lambda m: "\\" + m.group(0), name)


def default_pattern(spec_suffix: str = SPEC_SUFFIX) -> str:
    """Catch-all pattern matching any path that ends in *spec_suffix*."""
    return f"/{escape_file_name(spec_suffix)}$/"


DEFAULT_PATTERN = default_pattern()


def create_regex_for_files(files: Iterable[str]) -> str:
    """Build a pattern matching exactly the base names of *files*."""
    escaped = "|".join(escape_file_name(PurePosixPath(f).name) for f in files)
    return f"/({escaped})/"
