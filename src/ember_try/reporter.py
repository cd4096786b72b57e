"""Scenario output formatting.

All output goes through a single ``write_line`` callable (click.echo by
default) so tests can capture it. The per-scenario and summary lines are
plain text; the dependency tables are rendered with rich without colors.
"""

from __future__ import annotations

import io
from collections.abc import Callable, Sequence
from typing import Any

import click
import yaml
from rich.console import Console
from rich.table import Table

from .models import RunSummary, ScenarioResult
from .results import summary_lines

WriteLine = Callable[[str], None]

TABLE_WIDTH = 100


def scenario_line(result: ScenarioResult) -> str:
    """Per-scenario status line, e.g. ``Scenario first: FAIL (Allowed)``."""
    return f"Scenario {result.scenario_name}: {result.label}"


def print_config_yaml(data: dict[str, Any]) -> None:
    """Print config as YAML."""
    click.echo(yaml.dump(data, default_flow_style=False, sort_keys=False))


class ResultReporter:
    """Write scenario progress, dependency details and the run summary."""

    def __init__(self, write_line: WriteLine | None = None):
        """Initialize reporter.

        Args:
            write_line: Output callable receiving one line at a time
        """
        self.write_line = write_line or click.echo

    def report_scenario_start(self, name: str, command: Sequence[str]) -> None:
        self.write_line(f"\n------ Scenario {name}: running `{' '.join(command)}` ------")

    def report_scenario(self, result: ScenarioResult) -> None:
        """Write the status line for a finished scenario."""
        self.write_line(scenario_line(result))

    def print_results(self, results: Sequence[ScenarioResult]) -> None:
        """Write dependency details for every scenario."""
        self.write_line("\n------ RESULTS ------\n")
        for result in results:
            self.write_line(f"{result.scenario_name} ({result.label})")
            if result.command:
                self.write_line(f"Command run: {' '.join(result.command)}")
            if result.dependency_state:
                for line in render_dependency_table(result).splitlines():
                    self.write_line(line)
            self.write_line("")

    def report_summary(self, summary: RunSummary) -> None:
        """Write the final summary lines."""
        for line in summary_lines(summary):
            self.write_line(line)


def render_dependency_table(result: ScenarioResult) -> str:
    """Render expected vs installed versions as a plain-text table."""
    table = Table(show_edge=True)
    table.add_column("Dependency")
    table.add_column("Expected")
    table.add_column("Used")
    table.add_column("Type")

    for state in result.dependency_state:
        table.add_row(
            state.name,
            state.version_expected or "Not Installed",
            state.version_seen or "Not Installed",
            state.package_manager,
        )

    buffer = io.StringIO()
    console = Console(file=buffer, width=TABLE_WIDTH, color_system=None, force_terminal=False)
    console.print(table)
    return buffer.getvalue().rstrip("\n")
