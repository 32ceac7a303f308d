"""Test suite for spec-scope."""
