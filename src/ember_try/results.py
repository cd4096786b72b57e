"""Scenario classification and exit-code policy.

Allowed failures are counted and reported but never make the run fail on
their own: the exit code is 1 only when a scenario that was not allowed to
fail has failed.
"""

from __future__ import annotations

from collections.abc import Sequence

from .models import Classification, RunSummary, ScenarioResult


def classify(raw_success: bool, allowed_to_fail: bool) -> Classification:
    """Classify a scenario from its command outcome.

    Args:
        raw_success: Whether the command exited successfully
        allowed_to_fail: Whether the scenario is flagged allowedToFail

    Returns:
        SUCCESS, FAIL_ALLOWED or FAIL
    """
    if raw_success:
        return Classification.SUCCESS
    if allowed_to_fail:
        return Classification.FAIL_ALLOWED
    return Classification.FAIL


def exit_code_for(results: Sequence[ScenarioResult]) -> int:
    """Process exit code for a finished run."""
    if any(r.classification == Classification.FAIL for r in results):
        return 1
    return 0


def summarize(results: Sequence[ScenarioResult]) -> RunSummary:
    """Compute the run summary from the ordered scenario results."""
    succeeded = sum(1 for r in results if r.classification == Classification.SUCCESS)
    allowed = sum(1 for r in results if r.classification == Classification.FAIL_ALLOWED)
    return RunSummary(
        total=len(results),
        succeeded=succeeded,
        failed=len(results) - succeeded,
        allowed_failures=allowed,
        exit_code=exit_code_for(results),
    )


def summary_lines(summary: RunSummary) -> list[str]:
    """Final summary lines printed after all scenarios ran."""
    if summary.all_succeeded:
        return [f"All {summary.total} scenarios succeeded"]

    failed_line = f"{summary.failed} scenarios failed"
    if summary.allowed_failures > 0:
        failed_line += f" ({summary.allowed_failures} allowed)"

    return [
        failed_line,
        f"{summary.succeeded} scenarios succeeded",
        f"{summary.total} scenarios run",
    ]
