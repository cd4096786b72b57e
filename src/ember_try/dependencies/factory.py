"""Build the adapter list for a configuration."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from ..models import DependencyManagerKind
from ..runner import CommandInvoker
from .base import DependencyManagerAdapter
from .bower import BowerAdapter
from .npm import NpmAdapter

if TYPE_CHECKING:
    from ..config import TryConfig


def adapters_from_config(
    config: "TryConfig",
    root: Path | str,
    invoker: CommandInvoker | None = None,
) -> list[DependencyManagerAdapter]:
    """Create adapters for the dependency managers the scenarios use.

    npm is registered before bower, so npm dependency states come first.

    Args:
        config: Loaded configuration
        root: Project root
        invoker: Shared command invoker for installs

    Returns:
        Adapters in registration order
    """
    kinds = {kind for scenario in config.scenarios for kind in scenario.dependency_sets}
    adapters: list[DependencyManagerAdapter] = []

    if DependencyManagerKind.NPM in kinds:
        adapters.append(
            NpmAdapter(
                root,
                invoker=invoker,
                manager_options=config.npm_options,
                use_yarn=config.use_yarn,
            )
        )
    if DependencyManagerKind.BOWER in kinds:
        adapters.append(BowerAdapter(root, invoker=invoker, manager_options=config.bower_options))

    return adapters
