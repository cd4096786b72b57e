"""Command execution for scenario runs and dependency installs.

The CommandInvoker spawns a child process that inherits stdio, waits for it,
and raises ScenarioTestFailure on a non-zero exit. Timeout handling lives
entirely here; callers see a timeout as an ordinary failure unless the timeout
is configured to count as success (useful for long-running commands such as
a dev server).
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..errors import ScenarioTestFailure, command_failure

logger = logging.getLogger(__name__)

# Exit code reported when the command cannot be spawned at all
COMMAND_NOT_FOUND_EXIT_CODE = 127


@dataclass(frozen=True)
class CommandTimeout:
    """Parsed form of the "timeout" command option."""

    seconds: float
    is_success: bool = False

    @classmethod
    def parse(cls, value: Any) -> "CommandTimeout | None":
        """Parse a timeout option.

        Accepts a number of milliseconds or a mapping with "length"
        (milliseconds) and an optional success flag, spelled "isSuccess" as
        in ember-try configs or "is_success".
        """
        if value is None:
            return None
        if isinstance(value, Mapping):
            length = value.get("length")
            if length is None:
                return None
            is_success = value.get("isSuccess", value.get("is_success", False))
            return cls(seconds=float(length) / 1000, is_success=bool(is_success))
        return cls(seconds=float(value) / 1000)


class CommandInvoker:
    """Run commands as child processes."""

    def __init__(self, cwd: Path | str | None = None):
        """Initialize command invoker.

        Args:
            cwd: Default working directory for spawned commands
        """
        self.cwd = Path(cwd) if cwd else None

    async def invoke(
        self,
        command: str,
        args: Sequence[str] = (),
        options: Mapping[str, Any] | None = None,
    ) -> None:
        """Run a command and wait for it to finish.

        Args:
            command: Executable name or path
            args: Command arguments
            options: Recognized keys: "timeout" (see CommandTimeout.parse),
                "cwd" (overrides the invoker's working directory)

        Raises:
            ScenarioTestFailure: Non-zero exit, spawn failure, or timeout
        """
        options = options or {}
        argv = [command, *args]
        cwd = options.get("cwd") or self.cwd
        timeout = CommandTimeout.parse(options.get("timeout"))

        logger.info(f"Running command: {' '.join(argv)}")
        logger.debug(f"Command options: cwd={cwd} timeout={timeout}")

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                cwd=str(cwd) if cwd else None,
                env=os.environ.copy(),
            )
        except (FileNotFoundError, PermissionError) as e:
            logger.debug(f"Command could not be started: {type(e).__name__}: {e}")
            raise command_failure(argv, COMMAND_NOT_FOUND_EXIT_CODE) from e

        try:
            if timeout is None:
                returncode = await process.wait()
            else:
                returncode = await asyncio.wait_for(process.wait(), timeout=timeout.seconds)
        except asyncio.CancelledError:
            logger.info("Run cancelled, killing process")
            await _kill(process)
            raise
        except asyncio.TimeoutError:
            logger.info(f"Command timed out after {timeout.seconds}s, killing process")
            await _kill(process)
            if timeout.is_success:
                return
            raise command_failure(argv, None, timed_out=True)

        if returncode != 0:
            raise command_failure(argv, returncode)


async def _kill(process: asyncio.subprocess.Process) -> None:
    try:
        process.kill()
    except ProcessLookupError:
        pass  # Already exited
    await process.wait()


def resolve_executable(root: Path, command: str) -> str:
    """Prefer a project-local binary from node_modules/.bin."""
    local = root / "node_modules" / ".bin" / command
    if os.sep not in command and local.exists():
        return str(local)
    return command


async def run_command(
    root: Path | str,
    command_args: Sequence[str],
    options: Mapping[str, Any] | None = None,
    invoker: CommandInvoker | None = None,
) -> bool:
    """Run a scenario's verification command.

    Args:
        root: Project root, used as working directory
        command_args: Full command line (command first)
        options: Command options forwarded to the invoker unchanged
        invoker: Invoker to use (a new one rooted at ``root`` by default)

    Returns:
        True if the command succeeded, False otherwise
    """
    root = Path(root)
    invoker = invoker or CommandInvoker(cwd=root)
    command, *args = command_args
    try:
        await invoker.invoke(resolve_executable(root, command), args, options)
    except ScenarioTestFailure as e:
        logger.info(f"Scenario command failed: {e}")
        return False
    return True
