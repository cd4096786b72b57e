"""Unit tests for the npm / yarn dependency adapter."""

import json

import pytest

from ember_try.dependencies import BACKUP_SUFFIX, NpmAdapter
from ember_try.errors import DependencyApplicationError
from ember_try.models import DependencySpec
from tests.mocks import RecordingInvoker


def read_json(path):
    return json.loads(path.read_text())


def fake_install(root, versions):
    """Invoker callback that writes node_modules/<pkg>/package.json."""

    def _install(argv):
        for package, version in versions.items():
            package_dir = root / "node_modules" / package
            package_dir.mkdir(parents=True, exist_ok=True)
            (package_dir / "package.json").write_text(json.dumps({"name": package, "version": version}))

    return _install


class TestNpmSetup:
    @pytest.mark.asyncio
    async def test_backs_up_manifest(self, project_dir):
        adapter = NpmAdapter(project_dir, invoker=RecordingInvoker())

        await adapter.setup()

        backup = project_dir / f"package.json{BACKUP_SUFFIX}"
        assert backup.exists()
        assert read_json(backup) == read_json(project_dir / "package.json")
        assert adapter.has_backup()

    @pytest.mark.asyncio
    async def test_missing_manifest(self, tmp_path):
        adapter = NpmAdapter(tmp_path, invoker=RecordingInvoker())

        with pytest.raises(DependencyApplicationError, match="No package.json found") as exc_info:
            await adapter.setup()

        assert exc_info.value.kind == "npm"

    @pytest.mark.asyncio
    async def test_existing_backup_is_kept(self, project_dir):
        backup = project_dir / f"package.json{BACKUP_SUFFIX}"
        backup.write_text(json.dumps({"name": "pristine"}))
        adapter = NpmAdapter(project_dir, invoker=RecordingInvoker())

        await adapter.setup()

        assert read_json(backup) == {"name": "pristine"}

    @pytest.mark.asyncio
    async def test_backs_up_lockfiles(self, project_dir):
        (project_dir / "yarn.lock").write_text("# yarn lockfile v1\n")
        adapter = NpmAdapter(project_dir, invoker=RecordingInvoker())

        await adapter.setup()

        assert (project_dir / f"yarn.lock{BACKUP_SUFFIX}").exists()
        assert not (project_dir / f"package-lock.json{BACKUP_SUFFIX}").exists()


class TestNpmChangeToDependencySet:
    @pytest.mark.asyncio
    async def test_rewrites_manifest_and_installs(self, project_dir):
        invoker = RecordingInvoker(on_invoke=fake_install(project_dir, {"ember-source": "3.28.0"}))
        adapter = NpmAdapter(project_dir, invoker=invoker)
        await adapter.setup()

        states = await adapter.change_to_dependency_set(
            DependencySpec(dev_dependencies={"ember-source": "3.28.0"})
        )

        manifest = read_json(project_dir / "package.json")
        assert manifest["devDependencies"]["ember-source"] == "3.28.0"
        assert manifest["devDependencies"]["ember-cli"] == "~3.4.0"
        assert manifest["dependencies"] == {"ember-cli-babel": "^7.0.0"}
        assert invoker.invocations == [["npm", "install", "--no-package-lock"]]
        assert [(s.name, s.version_expected, s.version_seen, s.package_manager) for s in states] == [
            ("ember-source", "3.28.0", "3.28.0", "npm")
        ]

    @pytest.mark.asyncio
    async def test_none_version_removes_package(self, project_dir):
        adapter = NpmAdapter(project_dir, invoker=RecordingInvoker())
        await adapter.setup()

        states = await adapter.change_to_dependency_set(DependencySpec(dependencies={"ember-cli-babel": None}))

        assert "ember-cli-babel" not in read_json(project_dir / "package.json")["dependencies"]
        assert states[0].version_expected is None
        assert states[0].version_seen is None

    @pytest.mark.asyncio
    async def test_each_set_starts_from_original_manifest(self, project_dir):
        adapter = NpmAdapter(project_dir, invoker=RecordingInvoker())
        await adapter.setup()

        await adapter.change_to_dependency_set(DependencySpec(dependencies={"ember-data": "3.0.0"}))
        await adapter.change_to_dependency_set(DependencySpec(dependencies={"ember-fetch": "8.0.0"}))

        dependencies = read_json(project_dir / "package.json")["dependencies"]
        assert "ember-data" not in dependencies
        assert dependencies["ember-fetch"] == "8.0.0"

    @pytest.mark.asyncio
    async def test_resolutions_merged(self, project_dir):
        adapter = NpmAdapter(project_dir, invoker=RecordingInvoker())
        await adapter.setup()

        await adapter.change_to_dependency_set(DependencySpec(resolutions={"ember-source": "3.28.0"}))

        assert read_json(project_dir / "package.json")["resolutions"] == {"ember-source": "3.28.0"}

    @pytest.mark.asyncio
    async def test_version_mismatch_reported(self, project_dir):
        invoker = RecordingInvoker(on_invoke=fake_install(project_dir, {"ember-source": "3.28.1"}))
        adapter = NpmAdapter(project_dir, invoker=invoker)
        await adapter.setup()

        states = await adapter.change_to_dependency_set(DependencySpec(dependencies={"ember-source": "~3.28.0"}))

        assert states[0].version_expected == "~3.28.0"
        assert states[0].version_seen == "3.28.1"

    @pytest.mark.asyncio
    async def test_install_failure(self, project_dir):
        adapter = NpmAdapter(project_dir, invoker=RecordingInvoker(fail=True))
        await adapter.setup()

        with pytest.raises(DependencyApplicationError, match="npm install failed") as exc_info:
            await adapter.change_to_dependency_set(DependencySpec(dependencies={"ember-source": "3.28.0"}))

        assert exc_info.value.kind == "npm"
        assert exc_info.value.data == {"exit_code": 1}

    @pytest.mark.asyncio
    async def test_unreadable_backup(self, project_dir):
        adapter = NpmAdapter(project_dir, invoker=RecordingInvoker())
        await adapter.setup()
        (project_dir / f"package.json{BACKUP_SUFFIX}").write_text("{not json")

        with pytest.raises(DependencyApplicationError, match="Cannot read package.json.ember-try"):
            await adapter.change_to_dependency_set(DependencySpec())


class TestYarn:
    def test_use_yarn_flag(self, project_dir):
        adapter = NpmAdapter(project_dir, use_yarn=True)

        assert adapter.name == "yarn"
        assert adapter.install_command() == ["yarn", "install", "--no-lockfile", "--ignore-engines"]

    def test_yarn_lock_detected(self, project_dir):
        (project_dir / "yarn.lock").write_text("")

        assert NpmAdapter(project_dir).use_yarn

    def test_npm_by_default(self, project_dir):
        adapter = NpmAdapter(project_dir)

        assert adapter.name == "npm"
        assert adapter.install_command() == ["npm", "install", "--no-package-lock"]

    @pytest.mark.parametrize("use_yarn,manager", [(False, "npm"), (True, "yarn")])
    def test_manager_options_replace_defaults(self, project_dir, use_yarn, manager):
        adapter = NpmAdapter(project_dir, manager_options=["--prefer-offline"], use_yarn=use_yarn)

        assert adapter.install_command() == [manager, "install", "--prefer-offline"]

    @pytest.mark.asyncio
    async def test_yarn_install_failure_named_yarn(self, project_dir):
        adapter = NpmAdapter(project_dir, invoker=RecordingInvoker(fail=True), use_yarn=True)
        await adapter.setup()

        with pytest.raises(DependencyApplicationError) as exc_info:
            await adapter.change_to_dependency_set(DependencySpec())

        assert exc_info.value.kind == "yarn"


class TestNpmCleanup:
    @pytest.mark.asyncio
    async def test_restores_and_reinstalls(self, project_dir):
        original = (project_dir / "package.json").read_text()
        invoker = RecordingInvoker()
        adapter = NpmAdapter(project_dir, invoker=invoker)
        await adapter.setup()
        await adapter.change_to_dependency_set(DependencySpec(dependencies={"ember-source": "4.0.0"}))

        await adapter.cleanup()

        assert (project_dir / "package.json").read_text() == original
        assert not adapter.has_backup()
        assert len(invoker.invocations) == 2

    @pytest.mark.asyncio
    async def test_restores_lockfile(self, project_dir):
        lockfile = project_dir / "package-lock.json"
        lockfile.write_text('{"lockfileVersion": 2}')
        adapter = NpmAdapter(project_dir, invoker=RecordingInvoker())
        await adapter.setup()
        lockfile.write_text('{"lockfileVersion": 3}')

        await adapter.cleanup()

        assert lockfile.read_text() == '{"lockfileVersion": 2}'
        assert not (project_dir / f"package-lock.json{BACKUP_SUFFIX}").exists()

    @pytest.mark.asyncio
    async def test_nothing_to_restore(self, project_dir):
        invoker = RecordingInvoker()
        adapter = NpmAdapter(project_dir, invoker=invoker)

        await adapter.cleanup()

        assert invoker.invocations == []
