"""Base class for dependency-manager adapters.

An adapter owns one JSON manifest (package.json, bower.json). It backs the
manifest up once per run, rewrites it for each scenario from the pristine
backup, installs, and finally restores the original.
"""

from __future__ import annotations

import json
import logging
import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from ..errors import DependencyApplicationError, ScenarioTestFailure
from ..models import DependencyManagerKind, DependencySpec, DependencyState
from ..runner import CommandInvoker, resolve_executable

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".ember-try"


class DependencyManagerAdapter(ABC):
    """Materialize dependency sets for one dependency manager."""

    kind: DependencyManagerKind
    manifest_name: str
    # Additional files restored alongside the manifest when present
    lockfile_names: tuple[str, ...] = ()

    def __init__(
        self,
        cwd: Path | str,
        invoker: CommandInvoker | None = None,
        manager_options: list[str] | None = None,
    ):
        """Initialize adapter.

        Args:
            cwd: Project root containing the manifest
            invoker: Runs the install command
            manager_options: Replaces the default install flags when given
        """
        self.cwd = Path(cwd)
        self.invoker = invoker or CommandInvoker(cwd=self.cwd)
        self.manager_options = manager_options

    @property
    def name(self) -> str:
        return self.kind.value

    @property
    def manifest_path(self) -> Path:
        return self.cwd / self.manifest_name

    def backup_path(self, path: Path) -> Path:
        return path.with_name(path.name + BACKUP_SUFFIX)

    def _tracked_files(self) -> list[Path]:
        return [self.manifest_path, *(self.cwd / name for name in self.lockfile_names)]

    def has_backup(self) -> bool:
        return self.backup_path(self.manifest_path).exists()

    async def setup(self) -> None:
        """Back up the manifest and lockfiles.

        An existing backup is left in place: it holds the pristine manifest
        from a run that did not clean up.

        Raises:
            DependencyApplicationError: If the manifest does not exist
        """
        if not self.manifest_path.exists():
            raise DependencyApplicationError(
                message=f"No {self.manifest_name} found in {self.cwd}",
                kind=self.name,
            )

        if self.has_backup():
            logger.warning(f"Reusing existing backup of {self.manifest_name}")
            return

        for path in self._tracked_files():
            if path.exists():
                shutil.copy2(path, self.backup_path(path))
                logger.debug(f"Backed up {path.name}")

    async def change_to_dependency_set(self, spec: DependencySpec) -> list[DependencyState]:
        """Rewrite the manifest for a scenario and install.

        Args:
            spec: Dependency versions to apply

        Returns:
            Expected vs installed version for each declared package
        """
        manifest = self._read_json(self.backup_path(self.manifest_path))
        self._write_json(self.manifest_path, self.apply_spec(manifest, spec))

        await self.before_install()
        await self.install()

        return [
            DependencyState(
                name=name,
                version_expected=version,
                version_seen=self.installed_version(name),
                package_manager=self.name,
            )
            for name, version in spec.pinned().items()
        ]

    async def cleanup(self) -> None:
        """Restore the original manifest and lockfiles, then reinstall."""
        if not self.has_backup():
            logger.debug(f"No backup of {self.manifest_name} to restore")
            return

        for path in self._tracked_files():
            backup = self.backup_path(path)
            if backup.exists():
                shutil.copy2(backup, path)
                backup.unlink()
                logger.debug(f"Restored {path.name}")

        await self.before_install()
        await self.install()

    def apply_spec(self, manifest: dict[str, Any], spec: DependencySpec) -> dict[str, Any]:
        """Return a copy of the manifest with the dependency set's versions applied."""
        updated = dict(manifest)
        for section, versions in (
            ("dependencies", spec.dependencies),
            ("devDependencies", spec.dev_dependencies),
        ):
            if not versions:
                continue
            entries = dict(updated.get(section) or {})
            for package, version in versions.items():
                if version is None:
                    entries.pop(package, None)
                else:
                    entries[package] = version
            updated[section] = entries

        if spec.resolutions is not None:
            updated["resolutions"] = {**(updated.get("resolutions") or {}), **spec.resolutions}

        return updated

    async def before_install(self) -> None:
        """Hook run before every install."""

    async def install(self) -> None:
        """Run the dependency manager's install command.

        Raises:
            DependencyApplicationError: If the install command fails
        """
        command, *args = self.install_command()
        try:
            await self.invoker.invoke(resolve_executable(self.cwd, command), args, {"cwd": self.cwd})
        except ScenarioTestFailure as e:
            raise DependencyApplicationError(
                message=f"{self.name} install failed: {e.message}",
                kind=self.name,
                data={"exit_code": e.exit_code},
            ) from e

    @abstractmethod
    def install_command(self) -> list[str]:
        """Command line used to install dependencies."""

    @abstractmethod
    def installed_version(self, package: str) -> str | None:
        """Version of an installed package, or None if not installed."""

    @staticmethod
    def _read_json(path: Path) -> dict[str, Any]:
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise DependencyApplicationError(message=f"Cannot read {path.name}: {e}") from e

    @staticmethod
    def _write_json(path: Path, data: dict[str, Any]) -> None:
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")

    @staticmethod
    def _read_version(*candidates: Path) -> str | None:
        for path in candidates:
            if not path.exists():
                continue
            try:
                version = json.loads(path.read_text(encoding="utf-8")).get("version")
            except (OSError, json.JSONDecodeError):
                continue
            if version:
                return str(version)
        return None
