"""Operating system boundary (subprocesses)."""
