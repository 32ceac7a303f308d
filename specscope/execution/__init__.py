"""Change-resolution pipeline.

- **mapping**: changed source files -> spec files -> per-project groups
- **pattern**: spec file names -> escaped alternation pattern
- **rewriter**: pattern -> test-entry file on disk (update / revert)
- **coordinator**: one full pass (changes + config -> rewrites -> report)
- **watcher**: debounced file-system watch loop driving the coordinator
"""
