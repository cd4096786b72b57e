"""Shared test fixtures for ember-try tests.

This module provides:
- project_dir: a temporary project with package.json and bower.json
- output / exit_codes: capture the reporter output and the exit hook
- make_task: builds a TryEachTask wired to stubs
"""

import json
from pathlib import Path
from typing import Any

import pytest

from ember_try.config import config_from_dict
from ember_try.models import CURRENT_SCENARIO_ENV_VAR, RunOptions
from ember_try.tasks import TryEachTask
from tests.mocks import MockRunCommand, StubDependencyAdapter

PACKAGE_JSON = {
    "name": "my-addon",
    "version": "0.0.0",
    "dependencies": {"ember-cli-babel": "^7.0.0"},
    "devDependencies": {"ember-cli": "~3.4.0", "ember-source": "~3.4.0"},
}

BOWER_JSON = {
    "name": "my-addon",
    "dependencies": {"ember": "1.13.0", "bootstrap": "3.3.5"},
    "devDependencies": {"ember-data": "1.13.0"},
}

LEGACY_CONFIG = {
    "scenarios": [
        {"name": "default", "dependencies": {}},
        {"name": "first", "dependencies": {"ember": "1.13.0"}},
        {"name": "second", "dependencies": {"ember": "2.0.0"}},
        {
            "name": "with-dev-deps",
            "dependencies": {"ember": "2.0.0"},
            "devDependencies": {"jquery": "1.11.3"},
        },
        {
            "name": "with-resolutions",
            "dependencies": {"ember": "components/ember#beta"},
            "resolutions": {"ember": "beta"},
        },
    ]
}


def write_json(path: Path, data: dict[str, Any]) -> None:
    path.write_text(json.dumps(data, indent=2) + "\n")


@pytest.fixture(autouse=True)
def clean_scenario_env(monkeypatch):
    """Make sure no test starts with the scenario variable set."""
    monkeypatch.delenv(CURRENT_SCENARIO_ENV_VAR, raising=False)
    monkeypatch.delenv("EMBER_TRY_CONFIG_PATH", raising=False)


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Temporary project with package.json and bower.json."""
    write_json(tmp_path / "package.json", PACKAGE_JSON)
    write_json(tmp_path / "bower.json", BOWER_JSON)
    (tmp_path / "node_modules").mkdir()
    return tmp_path


@pytest.fixture
def output() -> list[str]:
    """Lines written by the reporter."""
    return []


@pytest.fixture
def exit_codes() -> list[int]:
    """Codes passed to the exit hook."""
    return []


@pytest.fixture
def legacy_config():
    return config_from_dict(LEGACY_CONFIG)


@pytest.fixture
def make_task(project_dir, output, exit_codes):
    """Factory for a TryEachTask with stubbed side effects."""

    def _make(
        config,
        run_command: MockRunCommand | None = None,
        adapters: list | None = None,
        options: RunOptions | None = None,
        **kwargs: Any,
    ) -> TryEachTask:
        return TryEachTask(
            project_dir,
            config,
            options=options,
            dependency_manager_adapters=adapters if adapters is not None else [StubDependencyAdapter()],
            write_line=output.append,
            run_command=run_command or MockRunCommand(),
            exit=exit_codes.append,
            **kwargs,
        )

    return _make
