"""Internal helpers for optscope, not covered by versioning policy."""
