"""npm / yarn adapter.

Rewrites package.json and installs with npm, or with yarn when the project
uses yarn (``use_yarn`` in the config, a ``yarn:`` scenario key, or a
yarn.lock in the project root).
"""

from __future__ import annotations

from pathlib import Path

from ..models import DependencyManagerKind
from ..runner import CommandInvoker
from .base import DependencyManagerAdapter

NPM_INSTALL_OPTIONS = ["--no-package-lock"]
YARN_INSTALL_OPTIONS = ["--no-lockfile", "--ignore-engines"]


class NpmAdapter(DependencyManagerAdapter):
    """Adapter for package.json based projects."""

    kind = DependencyManagerKind.NPM
    manifest_name = "package.json"
    lockfile_names = ("yarn.lock", "package-lock.json")

    def __init__(
        self,
        cwd: Path | str,
        invoker: CommandInvoker | None = None,
        manager_options: list[str] | None = None,
        use_yarn: bool = False,
    ):
        super().__init__(cwd, invoker=invoker, manager_options=manager_options)
        self.use_yarn = use_yarn or (self.cwd / "yarn.lock").exists()

    @property
    def name(self) -> str:
        return "yarn" if self.use_yarn else "npm"

    def install_command(self) -> list[str]:
        if self.use_yarn:
            options = self.manager_options if self.manager_options is not None else YARN_INSTALL_OPTIONS
            return ["yarn", "install", *options]
        options = self.manager_options if self.manager_options is not None else NPM_INSTALL_OPTIONS
        return ["npm", "install", *options]

    def installed_version(self, package: str) -> str | None:
        return self._read_version(self.cwd / "node_modules" / package / "package.json")
