"""Shared fixtures: on-disk Angular-style workspaces under ``tmp_path``."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest

from specscope.settings import get_settings

ENTRY_TEMPLATE = """\
// This file is required by karma.conf.js and loads recursively all the .spec and framework files

import 'zone.js/testing';
import { getTestBed } from '@angular/core/testing';

declare const require: any;

// First, initialize the Angular testing environment.
getTestBed().initTestEnvironment(BrowserDynamicTestingModule, platformBrowserDynamicTesting());
// Then we find all the tests.
const context = require.context('./', true, /\\.spec\\.ts$/);
// And load the modules.
context.keys().map(context);
"""

WorkspaceFactory = Callable[..., Path]


def angular_config(projects: dict[str, str | None]) -> dict:
    """Build an angular.json payload; ``None`` means "no test target"."""
    config: dict = {"version": 1, "projects": {}}
    for name, test_file in projects.items():
        project: dict = {"projectType": "application", "root": name}
        if test_file is not None:
            project["architect"] = {"test": {"builder": "karma", "options": {"main": test_file}}}
        config["projects"][name] = project
    return config


@pytest.fixture
def make_workspace(tmp_path: Path) -> WorkspaceFactory:
    """Create ``angular.json`` plus one entry file per project under ``tmp_path``."""

    def _make(projects: dict[str, str | None], *, entry: str = ENTRY_TEMPLATE) -> Path:
        (tmp_path / "angular.json").write_text(json.dumps(angular_config(projects)), encoding="utf-8")
        for test_file in projects.values():
            if test_file is None:
                continue
            path = tmp_path / test_file
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(entry, encoding="utf-8")
        return tmp_path

    return _make


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> None:
    get_settings.cache_clear()
