"""ResetTask - restore manifests left behind by an interrupted run."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from ..dependencies import DependencyContextApplier, adapters_from_config
from ..shared.logging import get_logger

if TYPE_CHECKING:
    from ..config import TryConfig
    from ..dependencies import DependencyManagerAdapter

logger = get_logger(__name__)


class ResetTask:
    """Restore original manifests from their backups and reinstall."""

    def __init__(
        self,
        project_root: Path | str,
        config: "TryConfig",
        dependency_manager_adapters: Sequence["DependencyManagerAdapter"] | None = None,
    ):
        self.project_root = Path(project_root)
        if dependency_manager_adapters is None:
            dependency_manager_adapters = adapters_from_config(config, self.project_root)
        self.applier = DependencyContextApplier(dependency_manager_adapters)

    async def run(self) -> list[str]:
        """Restore every adapter that has a backup.

        Returns:
            Names of the adapters that were restored
        """
        restored = [adapter.name for adapter in self.applier.adapters if adapter.has_backup()]
        logger.info("resetting dependencies", adapters=restored)
        await self.applier.cleanup()
        return restored
