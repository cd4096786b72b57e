"""Bower adapter."""

from __future__ import annotations

import logging
import shutil

from ..models import DependencyManagerKind
from .base import DependencyManagerAdapter

logger = logging.getLogger(__name__)

BOWER_INSTALL_OPTIONS = ["--config.interactive=false"]


class BowerAdapter(DependencyManagerAdapter):
    """Adapter for bower.json based projects.

    bower_components is cleared before every install so packages removed by a
    scenario do not linger from the previous one.
    """

    kind = DependencyManagerKind.BOWER
    manifest_name = "bower.json"

    @property
    def components_dir(self):
        return self.cwd / "bower_components"

    async def before_install(self) -> None:
        if self.components_dir.exists():
            logger.debug("Removing bower_components")
            shutil.rmtree(self.components_dir)

    def install_command(self) -> list[str]:
        options = self.manager_options if self.manager_options is not None else BOWER_INSTALL_OPTIONS
        return ["bower", "install", *options]

    def installed_version(self, package: str) -> str | None:
        package_dir = self.components_dir / package
        return self._read_version(package_dir / ".bower.json", package_dir / "bower.json")
