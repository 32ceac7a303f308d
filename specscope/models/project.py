"""Per-pass project model."""

from __future__ import annotations

from pydantic import BaseModel, Field


class Project(BaseModel):
    """A build unit identified by its test-entry file.

    Rebuilt from scratch on every pass; ``spec_files`` holds the spec files
    assigned to it for that pass only.
    """

    test_file: str
    spec_files: list[str] = Field(default_factory=list)
