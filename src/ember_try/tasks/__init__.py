"""Tasks run by the CLI commands."""

from .reset import ResetTask
from .try_each import TryEachTask

__all__ = ["ResetTask", "TryEachTask"]
