"""spec-scope: scope a workspace's unit-test run to the specs of changed files."""

__version__ = "0.1.0"
