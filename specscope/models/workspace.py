"""Workspace configuration model.

Only the slice of ``angular.json`` the tool needs is modelled: for every
project, the path of its test-entry file at
``projects.<name>.architect.test.options.main``.  Everything else in the
file is ignored, and a project whose shape does not fit is kept as ``None``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class _Lenient(BaseModel):
    model_config = ConfigDict(extra="ignore")


class ArchitectTestOptions(_Lenient):
    main: str | None = None
    """Test-entry file, relative to the workspace root."""


class ArchitectTest(_Lenient):
    options: ArchitectTestOptions | None = None


class Architect(_Lenient):
    test: ArchitectTest | None = None


class ProjectConfig(_Lenient):
    architect: Architect | None = None

    @property
    def test_file(self) -> str | None:
        if self.architect and self.architect.test and self.architect.test.options:
            return self.architect.test.options.main or None
        return None


class WorkspaceConfig(_Lenient):
    """Parsed workspace configuration file."""

    projects: dict[str, ProjectConfig | None] = Field(default_factory=dict)

    @field_validator("projects", mode="before")
    @classmethod
    def _drop_unexpected_projects(cls, value: Any) -> Any:
        # A project of any other shape (e.g. an Nx path string) has no test entry.
        if value is None:
            return {}
        if not isinstance(value, dict):
            return value
        return {name: _project_or_none(project) for name, project in value.items()}


def _project_or_none(value: Any) -> ProjectConfig | None:
    try:
        return ProjectConfig.model_validate(value)
    except ValidationError:
        return None
