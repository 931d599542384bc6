"""Release train orchestration: version resolution, task pipeline, rollback."""

__version__ = "0.1.0"
