"""Workspace data access.

Managers load and cache state that lives outside the pipeline (the
workspace configuration file) and raise domain exceptions, never CLI exit
codes -- that translation is the CLI's responsibility.
"""
