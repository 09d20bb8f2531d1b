"""Path sandboxing, per-path locking and atomic writes for workflow files."""
