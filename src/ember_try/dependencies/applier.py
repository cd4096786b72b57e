"""Dependency Context Applier.

Dispatches each scenario's dependency sets to the registered adapters, in
registration order, and concatenates the resulting dependency states.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from ..errors import ConfigurationError, DependencyApplicationError, EmberTryError
from ..models import DependencyState, Scenario
from ..shared.logging import get_logger

if TYPE_CHECKING:
    from .base import DependencyManagerAdapter

logger = get_logger(__name__)


class DependencyContextApplier:
    """Apply scenario dependency sets through dependency-manager adapters."""

    def __init__(self, adapters: Sequence["DependencyManagerAdapter"]):
        self.adapters = list(adapters)

    def check(self, scenarios: Sequence[Scenario]) -> None:
        """Verify that every dependency-manager kind in use has an adapter.

        Raises:
            ConfigurationError: If a scenario uses an unregistered kind
        """
        registered = {adapter.kind for adapter in self.adapters}
        for scenario in scenarios:
            missing = [kind.value for kind in scenario.dependency_sets if kind not in registered]
            if missing:
                raise ConfigurationError(
                    message=(
                        f"Scenario '{scenario.name}' uses {', '.join(sorted(missing))} "
                        "but no adapter is registered for it"
                    ),
                    data={"scenario": scenario.name, "kinds": sorted(missing)},
                )

    async def prepare(self) -> None:
        """Back up every adapter's manifest before the first scenario."""
        for adapter in self.adapters:
            await self._guard(adapter.setup(), adapter)

    async def setup(self, scenario: Scenario) -> list[DependencyState]:
        """Materialize a scenario's dependency sets.

        Args:
            scenario: Scenario to apply

        Returns:
            Dependency states of all applied adapters, in registration order

        Raises:
            DependencyApplicationError: If any adapter fails
        """
        states: list[DependencyState] = []
        for adapter in self.adapters:
            spec = scenario.dependency_sets.get(adapter.kind)
            if spec is None:
                continue
            logger.info("applying dependency set", scenario=scenario.name, adapter=adapter.name)
            states.extend(await self._guard(adapter.change_to_dependency_set(spec), adapter, scenario))
        return states

    async def cleanup(self) -> None:
        """Restore every adapter's original manifest."""
        for adapter in self.adapters:
            logger.info("restoring original dependencies", adapter=adapter.name)
            await self._guard(adapter.cleanup(), adapter)

    @staticmethod
    async def _guard(awaitable, adapter: "DependencyManagerAdapter", scenario: Scenario | None = None):
        scenario_name = scenario.name if scenario else None
        try:
            return await awaitable
        except DependencyApplicationError as e:
            e.kind = e.kind or adapter.name
            e.scenario = e.scenario or scenario_name
            raise
        except EmberTryError:
            raise
        except Exception as e:
            raise DependencyApplicationError(
                message=f"{adapter.name} adapter failed: {e}",
                kind=adapter.name,
                scenario=scenario_name,
            ) from e
