"""Scenario configuration loading.

Reads config/ember-try.yaml (or .yml / .json) from the project root and
normalizes every scenario into the DependencySpec-keyed-by-kind model the
engine works with. Two scenario shapes are accepted:

Legacy (bower only)::

    - name: ember-2.0
      dependencies: {ember: 2.0.0}
      devDependencies: {jquery: 1.11.3}
      resolutions: {ember: 2.0.0}

Per dependency manager::

    - name: ember-2.0
      allowedToFail: true
      command: npm run-script different
      bower:
        dependencies: {ember: 2.0.0, bootstrap: null}
      npm:            # or "yarn:", which also switches installs to yarn
        devDependencies: {ember-cli-deploy: 0.5.1}
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigurationError
from .models import DependencyManagerKind, DependencySpec, Scenario

# Searched in order under the project root
DEFAULT_CONFIG_PATHS = (
    Path("config") / "ember-try.yaml",
    Path("config") / "ember-try.yml",
    Path("config") / "ember-try.json",
)

# Environment variable mappings
ENV_VARS = {
    "config_path": "EMBER_TRY_CONFIG_PATH",
}

LEGACY_KEYS = ("dependencies", "devDependencies", "resolutions")
MANAGER_KEYS = {
    "bower": DependencyManagerKind.BOWER,
    "npm": DependencyManagerKind.NPM,
    "yarn": DependencyManagerKind.NPM,
}


@dataclass
class TryConfig:
    """Normalized ember-try configuration."""

    scenarios: list[Scenario] = field(default_factory=list)
    command: str | None = None
    use_yarn: bool = False
    npm_options: list[str] | None = None
    bower_options: list[str] | None = None
    path: Path | None = None

    def get_scenario(self, name: str) -> Scenario:
        """Look up a scenario by name.

        Raises:
            ConfigurationError: If no scenario has that name
        """
        for scenario in self.scenarios:
            if scenario.name == name:
                return scenario
        available = ", ".join(s.name for s in self.scenarios) or "none"
        raise ConfigurationError(
            message=f"Scenario '{name}' not found (available: {available})",
            data={"scenario": name},
        )


def find_config_path(project_root: Path | str, explicit: str | Path | None = None) -> Path:
    """Locate the config file.

    Precedence (highest to lowest):
    1. Explicit path (--config-path)
    2. EMBER_TRY_CONFIG_PATH environment variable
    3. config/ember-try.{yaml,yml,json} under the project root

    Relative paths are resolved against the project root.

    Raises:
        ConfigurationError: If no config file exists
    """
    root = Path(project_root)
    candidate = explicit or os.environ.get(ENV_VARS["config_path"])
    if candidate:
        path = Path(candidate)
        path = path if path.is_absolute() else root / path
        if not path.exists():
            raise ConfigurationError(message=f"Config file not found: {path}", data={"path": str(path)})
        return path

    for relative in DEFAULT_CONFIG_PATHS:
        path = root / relative
        if path.exists():
            return path

    searched = ", ".join(f"./{p}" for p in DEFAULT_CONFIG_PATHS)
    raise ConfigurationError(
        message=f"No ember-try config found (searched: {searched})",
        data={"searched": [str(p) for p in DEFAULT_CONFIG_PATHS]},
    )


def load_config(project_root: Path | str, path: str | Path | None = None) -> TryConfig:
    """Load and normalize the configuration for a project.

    Args:
        project_root: Project root directory
        path: Optional explicit config path

    Returns:
        TryConfig with normalized scenarios
    """
    config_path = find_config_path(project_root, path)
    try:
        with open(config_path, encoding="utf-8") as f:
            if config_path.suffix == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f) or {}
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(message=f"Cannot parse {config_path}: {e}") from e

    config = config_from_dict(data)
    config.path = config_path
    return config


def config_from_dict(data: Mapping[str, Any]) -> TryConfig:
    """Normalize raw configuration data.

    Raises:
        ConfigurationError: If the data or any scenario entry is malformed
    """
    if not isinstance(data, Mapping):
        raise ConfigurationError(message="Config must be a mapping with a 'scenarios' list")

    raw_scenarios = data.get("scenarios")
    if not isinstance(raw_scenarios, list) or not raw_scenarios:
        raise ConfigurationError(message="Config must define a non-empty 'scenarios' list")

    config = TryConfig(scenarios=[normalize_scenario(raw, index) for index, raw in enumerate(raw_scenarios)])

    if data.get("command") is not None:
        config.command = _expect_str(data["command"], "command")

    uses_yarn_key = any(isinstance(raw, Mapping) and "yarn" in raw for raw in raw_scenarios)
    config.use_yarn = bool(data.get("useYarn", False)) or uses_yarn_key

    for key, attr in (("npmOptions", "npm_options"), ("bowerOptions", "bower_options")):
        if data.get(key) is not None:
            setattr(config, attr, _expect_str_list(data[key], key))

    return config


def normalize_scenario(raw: Any, index: int = 0) -> Scenario:
    """Normalize one scenario entry.

    Args:
        raw: Scenario mapping from the config file
        index: Position in the scenarios list (for error messages)

    Raises:
        ConfigurationError: If the entry is malformed
    """
    if not isinstance(raw, Mapping):
        raise ConfigurationError(message=f"Scenario #{index + 1} must be a mapping")

    name = raw.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ConfigurationError(message=f"Scenario #{index + 1} needs a non-empty 'name'")

    command = raw.get("command")
    if command is not None:
        command = _expect_str(command, f"scenarios[{name}].command")

    allowed_to_fail = raw.get("allowedToFail", False)
    if not isinstance(allowed_to_fail, bool):
        raise ConfigurationError(message=f"Scenario '{name}': 'allowedToFail' must be true or false")

    has_legacy = any(key in raw for key in LEGACY_KEYS)
    present = [key for key in MANAGER_KEYS if key in raw]

    if has_legacy and "bower" in present:
        raise ConfigurationError(
            message=f"Scenario '{name}' mixes top-level dependencies with a 'bower' section"
        )
    if "npm" in present and "yarn" in present:
        raise ConfigurationError(message=f"Scenario '{name}' cannot have both 'npm' and 'yarn' sections")

    dependency_sets: dict[DependencyManagerKind, DependencySpec] = {}
    if has_legacy:
        dependency_sets[DependencyManagerKind.BOWER] = _dependency_spec(raw, name, "dependencies")
    for key in present:
        section = raw[key]
        if not isinstance(section, Mapping):
            raise ConfigurationError(message=f"Scenario '{name}': '{key}' must be a mapping")
        dependency_sets[MANAGER_KEYS[key]] = _dependency_spec(section, name, key)

    return Scenario(
        name=name,
        command=command,
        allowed_to_fail=allowed_to_fail,
        dependency_sets=dependency_sets,
    )


def config_to_dict(config: TryConfig) -> dict[str, Any]:
    """Convert a config back to its file representation (for display)."""
    data: dict[str, Any] = {}
    if config.command is not None:
        data["command"] = config.command
    if config.use_yarn:
        data["useYarn"] = True
    if config.npm_options is not None:
        data["npmOptions"] = config.npm_options
    if config.bower_options is not None:
        data["bowerOptions"] = config.bower_options

    scenarios = []
    for scenario in config.scenarios:
        entry: dict[str, Any] = {"name": scenario.name}
        if scenario.command is not None:
            entry["command"] = scenario.command
        if scenario.allowed_to_fail:
            entry["allowedToFail"] = True
        for kind, spec in scenario.dependency_sets.items():
            section: dict[str, Any] = {}
            if spec.dependencies:
                section["dependencies"] = dict(spec.dependencies)
            if spec.dev_dependencies:
                section["devDependencies"] = dict(spec.dev_dependencies)
            if spec.resolutions is not None:
                section["resolutions"] = dict(spec.resolutions)
            entry[kind.value] = section
        scenarios.append(entry)
    data["scenarios"] = scenarios
    return data


def _dependency_spec(section: Mapping[str, Any], name: str, key: str) -> DependencySpec:
    resolutions = section.get("resolutions")
    return DependencySpec(
        dependencies=_versions(section.get("dependencies"), f"{name}.{key}.dependencies"),
        dev_dependencies=_versions(section.get("devDependencies"), f"{name}.{key}.devDependencies"),
        resolutions=None if resolutions is None else _versions(resolutions, f"{name}.{key}.resolutions"),
    )


def _versions(value: Any, where: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(message=f"'{where}' must be a mapping of package to version")
    versions: dict[str, Any] = {}
    for package, version in value.items():
        if version is not None and not isinstance(version, (str, int, float)):
            raise ConfigurationError(message=f"'{where}.{package}' must be a version string or null")
        # YAML reads unquoted versions such as 2.0 as numbers
        versions[str(package)] = None if version is None else str(version)
    return versions


def _expect_str(value: Any, where: str) -> str:
    if not isinstance(value, str):
        raise ConfigurationError(message=f"'{where}' must be a string")
    return value


def _expect_str_list(value: Any, where: str) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigurationError(message=f"'{where}' must be a list of strings")
    return list(value)
