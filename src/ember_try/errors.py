"""Error types for ember-try.

Three kinds of failure can happen during a run:

- ScenarioTestFailure: the verification command exited non-zero. Recoverable,
  the engine records it as a scenario classification.
- DependencyApplicationError: an adapter could not materialize a dependency
  set. Fatal, aborts the remaining scenarios.
- ConfigurationError: a scenario entry or command cannot be resolved. Fatal,
  raised before any scenario runs.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class EmberTryError(Exception):
    """Base error class for ember-try errors."""

    message: str
    data: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.message


@dataclass
class ConfigurationError(EmberTryError):
    """Scenario configuration is malformed or a command cannot be resolved."""

    message: str = "Invalid ember-try configuration"


@dataclass
class DependencyApplicationError(EmberTryError):
    """A dependency-manager adapter failed to apply a dependency set."""

    message: str = "Failed to apply dependency set"
    kind: str | None = None
    scenario: str | None = None


@dataclass
class ScenarioTestFailure(EmberTryError):
    """The verification command exited non-zero or timed out."""

    message: str = "Command failed"
    exit_code: int | None = None
    command: list[str] = field(default_factory=list)
    timed_out: bool = False


def command_failure(command: list[str], exit_code: int | None, timed_out: bool = False) -> ScenarioTestFailure:
    """Build a ScenarioTestFailure with a readable message.

    Args:
        command: Full command line that was run
        exit_code: Process exit code (None when killed on timeout)
        timed_out: Whether the process was killed by the timeout

    Returns:
        ScenarioTestFailure describing the failure
    """
    display = " ".join(command)
    if timed_out:
        message = f"Command timed out: {display}"
    else:
        message = f"Command failed with exit code {exit_code}: {display}"
    return ScenarioTestFailure(
        message=message,
        exit_code=exit_code,
        command=list(command),
        timed_out=timed_out,
    )
