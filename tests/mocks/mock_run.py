"""Command runner and invoker mocks."""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Any

from ember_try.errors import command_failure
from ember_try.models import CURRENT_SCENARIO_ENV_VAR


class MockRunCommand:
    """Stand-in for ember_try.runner.run_command.

    ``outcomes`` maps a command line (joined with spaces) to a callable
    returning the raw success for that run; ``default`` is used for any other
    command. Every call is recorded along with the scenario env var.
    """

    def __init__(
        self,
        default: bool | Callable[[], bool] = True,
        outcomes: Mapping[str, bool | Callable[[], bool]] | None = None,
    ):
        self.default = default
        self.outcomes = dict(outcomes or {})
        self.calls: list[dict[str, Any]] = []

    @classmethod
    def failing_first(cls) -> "MockRunCommand":
        """Fail the first run, succeed afterwards."""
        mock = cls()
        mock.default = lambda: len(mock.calls) > 1
        return mock

    @property
    def commands(self) -> list[str]:
        return [call["command"] for call in self.calls]

    async def __call__(
        self,
        root: Path,
        command_args: Sequence[str],
        options: Mapping[str, Any],
    ) -> bool:
        command = " ".join(command_args)
        self.calls.append(
            {
                "root": root,
                "command": command,
                "options": options,
                "scenario": os.environ.get(CURRENT_SCENARIO_ENV_VAR),
            }
        )
        outcome = self.outcomes.get(command, self.default)
        return outcome() if callable(outcome) else outcome


class RecordingInvoker:
    """CommandInvoker stand-in that records install commands."""

    def __init__(self, fail: bool = False, on_invoke: Callable[[list[str]], None] | None = None):
        self.fail = fail
        self.on_invoke = on_invoke
        self.invocations: list[list[str]] = []

    async def invoke(self, command: str, args: Sequence[str] = (), options: Mapping[str, Any] | None = None) -> None:
        argv = [Path(command).name, *args]
        self.invocations.append(argv)
        if self.on_invoke:
            self.on_invoke(argv)
        if self.fail:
            raise command_failure(argv, 1)
