"""Runner module for spawning verification and install commands."""

from .command import CommandInvoker, CommandTimeout, resolve_executable, run_command

__all__ = [
    "CommandInvoker",
    "CommandTimeout",
    "resolve_executable",
    "run_command",
]
