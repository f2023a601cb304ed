"""Tests for the lpck command.

Each test builds an LpckContext with fakes and passes it as `obj`, so the
command never creates a real context or runs npm.
"""

import json
from pathlib import Path

from click.testing import CliRunner

from lpck.cli.cli import cli
from lpck.core.config_store import InMemoryConfigStore, LpckRc, Preset
from lpck.core.context import LpckContext
from lpck.core.manifest import Manifest, RealManifestStore
from lpck.core.paths import LpckPaths
from tests.fakes.npm import FakePackageManager
from tests.fakes.user_feedback import FakeUserFeedback
from tests.test_utils.workspace_helpers import create_workspace, write_package_json


def _setup(tmp_path: Path) -> tuple[Path, Path, LpckPaths]:
    origin = tmp_path / "origin"
    create_workspace(
        origin,
        {"@s/a": {"dependencies": {"@s/b": "^1.0.0"}}, "@s/b": {}},
    )
    app = tmp_path / "app"
    write_package_json(app, {"name": "my-app", "dependencies": {"@s/a": "^1.0.0"}})
    return origin, app, LpckPaths(home=tmp_path / "home")


def test_no_arguments_shows_help() -> None:
    runner = CliRunner()
    ctx = LpckContext.for_test()

    result = runner.invoke(cli, [], obj=ctx)

    assert result.exit_code == 0
    assert "Usage:" in result.output
    assert "--raw-install" in result.output


def test_install_from_path(tmp_path: Path) -> None:
    origin, app, paths = _setup(tmp_path)
    npm = FakePackageManager(pack_outputs=["s-a-1.0.0.tgz", "s-b-1.0.0.tgz"])
    feedback = FakeUserFeedback()
    ctx = LpckContext.for_test(package_manager=npm, feedback=feedback, paths=paths, cwd=app)

    result = CliRunner().invoke(cli, [str(origin)], obj=ctx)

    assert result.exit_code == 0, result.output
    assert "Local Install Complete" in result.output
    assert npm.install_calls == [(app.resolve(), [paths.packs_dir / "s-a-1.0.0.tgz"])]
    assert feedback.texts("success") == ["Done"]


def test_raw_install_accepts_camel_case_alias(tmp_path: Path) -> None:
    origin, app, paths = _setup(tmp_path)
    npm = FakePackageManager(pack_outputs=["s-a-1.0.0.tgz", "s-b-1.0.0.tgz"])
    ctx = LpckContext.for_test(package_manager=npm, paths=paths, cwd=app)

    result = CliRunner().invoke(cli, [str(origin), "--rawInstall"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert [p.name for p in npm.install_calls[0][1]] == ["s-a-1.0.0.tgz", "s-b-1.0.0.tgz"]


def test_packaging_failure_exits_non_zero_after_best_effort_install(tmp_path: Path) -> None:
    origin, app, paths = _setup(tmp_path)
    npm = FakePackageManager(pack_exit_code=1)
    ctx = LpckContext.for_test(package_manager=npm, paths=paths, cwd=app)

    result = CliRunner().invoke(cli, [str(origin)], obj=ctx)

    assert result.exit_code == 1
    assert "Local Install Incomplete" in result.output
    assert "Origin manifests were restored." in result.output
    assert npm.install_calls == []


def test_strict_packaging_failure_skips_install(tmp_path: Path) -> None:
    origin, app, paths = _setup(tmp_path)
    npm = FakePackageManager(pack_exit_code=1)
    ctx = LpckContext.for_test(package_manager=npm, paths=paths, cwd=app)

    result = CliRunner().invoke(cli, [str(origin), "--strict"], obj=ctx)

    assert result.exit_code == 1
    assert "Error: Failed to pack workspace packages (exit status 1)" in result.output
    assert npm.install_calls == []


def test_install_failure_reports_kept_archives(tmp_path: Path) -> None:
    origin, app, paths = _setup(tmp_path)
    npm = FakePackageManager(pack_outputs=["s-a-1.0.0.tgz"], install_exit_code=1)
    ctx = LpckContext.for_test(package_manager=npm, paths=paths, cwd=app)

    result = CliRunner().invoke(cli, [str(origin)], obj=ctx)

    assert result.exit_code == 1
    assert "Failed to install local archives (exit status 1)" in result.output
    assert "Packed archives were kept in" in result.output
    assert (paths.packs_dir / "s-a-1.0.0.tgz").exists()


class _ReadOnlyAfterPackStore(RealManifestStore):
    def __init__(self) -> None:
        self.read_only = False

    def save(self, manifest: Manifest) -> None:
        if self.read_only:
            raise PermissionError(f"Permission denied: {manifest.path}")
        super().save(manifest)


def test_restore_failure_is_reported_loudly(tmp_path: Path) -> None:
    origin, app, paths = _setup(tmp_path)
    store = _ReadOnlyAfterPackStore()
    npm = FakePackageManager(on_pack=lambda src, dest: setattr(store, "read_only", True))
    ctx = LpckContext.for_test(manifest_store=store, package_manager=npm, paths=paths, cwd=app)

    result = CliRunner().invoke(cli, [str(origin)], obj=ctx)

    assert result.exit_code == 1
    assert "the origin workspace was left modified." in result.output
    assert "Failed to restore original dependencies in:" in result.output
    assert "@s/a" in result.output


def test_missing_origin_directory_is_a_usage_error(tmp_path: Path) -> None:
    ctx = LpckContext.for_test()

    result = CliRunner().invoke(cli, [str(tmp_path / "missing")], obj=ctx)

    assert result.exit_code == 2


def test_origin_without_manifest_fails(tmp_path: Path) -> None:
    ctx = LpckContext.for_test(paths=LpckPaths(home=tmp_path / "home"), cwd=tmp_path)

    result = CliRunner().invoke(cli, [str(tmp_path)], obj=ctx)

    assert result.exit_code == 1
    assert "Error: No package.json found in" in result.output


def test_preset_runs_prepack_then_installs(tmp_path: Path) -> None:
    origin, app, paths = _setup(tmp_path)
    npm = FakePackageManager(pack_outputs=["s-a-1.0.0.tgz"])
    rc = LpckRc(presets=[Preset(name="ui", path=str(origin), prepack="npm run build")])
    ctx = LpckContext.for_test(
        package_manager=npm, config_store=InMemoryConfigStore(rc), paths=paths, cwd=app
    )

    result = CliRunner().invoke(cli, ["-p", "ui"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert npm.script_calls == [("npm run build", origin)]
    assert len(npm.install_calls) == 1


def test_preset_no_prepack_skips_the_script(tmp_path: Path) -> None:
    origin, app, paths = _setup(tmp_path)
    npm = FakePackageManager()
    rc = LpckRc(presets=[Preset(name="ui", path=str(origin), prepack="npm run build")])
    ctx = LpckContext.for_test(
        package_manager=npm, config_store=InMemoryConfigStore(rc), paths=paths, cwd=app
    )

    result = CliRunner().invoke(cli, ["--preset", "ui", "--noPrepack"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert npm.script_calls == []
    assert len(npm.pack_calls) == 1


def test_preset_pointing_at_missing_directory_fails(tmp_path: Path) -> None:
    npm = FakePackageManager()
    missing = tmp_path / "moved-away"
    rc = LpckRc(presets=[Preset(name="ui", path=str(missing), prepack="npm run build")])
    ctx = LpckContext.for_test(
        package_manager=npm, config_store=InMemoryConfigStore(rc), cwd=tmp_path
    )

    result = CliRunner().invoke(cli, ["-p", "ui"], obj=ctx)

    assert result.exit_code == 1
    assert f"Error: Origin directory does not exist: {missing}" in result.output
    assert npm.script_calls == []


def test_unknown_preset_fails() -> None:
    ctx = LpckContext.for_test(config_store=InMemoryConfigStore(LpckRc.empty()))

    result = CliRunner().invoke(cli, ["-p", "ui"], obj=ctx)

    assert result.exit_code == 1
    assert "Error: Preset ui not found in /fake/lpck/.lpckrc" in result.output


def test_preset_takes_priority_over_origin(tmp_path: Path) -> None:
    origin, app, paths = _setup(tmp_path)
    other = tmp_path / "other"
    other.mkdir()
    npm = FakePackageManager()
    rc = LpckRc(presets=[Preset(name="ui", path=str(origin))])
    ctx = LpckContext.for_test(
        package_manager=npm, config_store=InMemoryConfigStore(rc), paths=paths, cwd=app
    )

    result = CliRunner().invoke(cli, [str(other), "-p", "ui"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert npm.pack_calls[0][0] == origin.resolve()


def test_print_presets_writes_json_to_stdout() -> None:
    rc = LpckRc(presets=[Preset(name="ui", path="~/code/ui", prepack="npm run build")])
    ctx = LpckContext.for_test(config_store=InMemoryConfigStore(rc))

    result = CliRunner().invoke(cli, ["--print-presets"], obj=ctx)

    assert result.exit_code == 0
    assert "/fake/lpck/.lpckrc:" in result.output
    json_start = result.output.index("{")
    assert json.loads(result.output[json_start:]) == {
        "presets": [{"name": "ui", "path": "~/code/ui", "prepack": "npm run build"}]
    }


def test_print_presets_without_file() -> None:
    ctx = LpckContext.for_test(config_store=InMemoryConfigStore())

    result = CliRunner().invoke(cli, ["--printPresets"], obj=ctx)

    assert result.exit_code == 0
    assert "No presets found at: /fake/lpck/.lpckrc" in result.output


def test_init_writes_template() -> None:
    store = InMemoryConfigStore()
    ctx = LpckContext.for_test(config_store=store)

    result = CliRunner().invoke(cli, ["--init"], obj=ctx)

    assert result.exit_code == 0
    assert "Preset file initialized at: /fake/lpck/.lpckrc" in result.output
    assert store.load() == LpckRc.template()


def test_init_refuses_to_overwrite() -> None:
    existing = LpckRc(presets=[Preset(name="ui", path="/ui")])
    store = InMemoryConfigStore(existing)
    ctx = LpckContext.for_test(config_store=store)

    result = CliRunner().invoke(cli, ["--init"], obj=ctx)

    assert result.exit_code == 1
    assert "Error: Preset file already exists at: /fake/lpck/.lpckrc" in result.output
    assert store.load() == existing
