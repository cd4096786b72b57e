"""Data model for scenario runs.

Scenarios come from the loaded configuration and are never mutated by the
engine. Results are created once per scenario at the end of its run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Command used when neither the CLI, the scenario nor the config names one
DEFAULT_COMMAND = "ember test"

# Environment variable naming the scenario whose command is running
CURRENT_SCENARIO_ENV_VAR = "EMBER_TRY_CURRENT_SCENARIO"


class DependencyManagerKind(Enum):
    """Dependency managers a scenario can pin versions for."""

    NPM = "npm"
    BOWER = "bower"


class Classification(Enum):
    """Final outcome of a scenario."""

    SUCCESS = "success"
    FAIL = "fail"
    FAIL_ALLOWED = "fail_allowed"

    @property
    def label(self) -> str:
        """Label used in the per-scenario output line."""
        return _LABELS[self]


_LABELS = {
    Classification.SUCCESS: "SUCCESS",
    Classification.FAIL: "FAIL",
    Classification.FAIL_ALLOWED: "FAIL (Allowed)",
}


@dataclass(frozen=True)
class DependencySpec:
    """Dependency versions for one dependency manager.

    A version of None removes the dependency from the manifest.
    """

    dependencies: dict[str, str | None] = field(default_factory=dict)
    dev_dependencies: dict[str, str | None] = field(default_factory=dict)
    resolutions: dict[str, str] | None = None

    def pinned(self) -> dict[str, str | None]:
        """All declared packages, dev dependencies last."""
        return {**self.dependencies, **self.dev_dependencies}


@dataclass(frozen=True)
class Scenario:
    """A named point in the compatibility matrix."""

    name: str
    command: str | None = None
    allowed_to_fail: bool = False
    dependency_sets: dict[DependencyManagerKind, DependencySpec] = field(default_factory=dict)


@dataclass
class RunOptions:
    """Options supplied once per run.

    command_options is forwarded as-is to the command runner; "timeout" is the
    only key the bundled runner interprets.
    """

    command_args: list[str] = field(default_factory=list)
    command_options: dict[str, Any] = field(default_factory=dict)
    skip_cleanup: bool = False


@dataclass(frozen=True)
class DependencyState:
    """Expected vs installed version of one package after setup."""

    name: str
    version_expected: str | None
    version_seen: str | None
    package_manager: str


@dataclass(frozen=True)
class ScenarioResult:
    """Outcome of running one scenario."""

    scenario_name: str
    raw_success: bool
    allowed_to_fail: bool
    classification: Classification
    dependency_state: tuple[DependencyState, ...] = ()
    command: tuple[str, ...] = ()

    @property
    def label(self) -> str:
        return self.classification.label


@dataclass(frozen=True)
class RunSummary:
    """Counts over a finished run. ``failed`` includes allowed failures."""

    total: int
    succeeded: int
    failed: int
    allowed_failures: int
    exit_code: int

    @property
    def all_succeeded(self) -> bool:
        return self.failed == 0
