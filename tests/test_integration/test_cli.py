"""End-to-end tests for the buildmanager CLI.

The Unity editor is never started: ``subprocess.run`` and
``subprocess.Popen`` are patched in :mod:`buildmanager.executor`.
"""

from __future__ import annotations

import json
import re
import subprocess
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from typer.testing import CliRunner

from buildmanager import __version__
from buildmanager.app import app

runner = CliRunner()

UNITY = "/opt/Unity/Editor/Unity"

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


def _strip_ansi(text: str) -> str:
    return _ANSI_RE.sub("", text)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def project(isolated_config: Path, unity_project: Path) -> Path:
    """A Unity project inside an isolated config environment."""
    return unity_project


@pytest.fixture
def unity_on_path(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("UNITY_PATH", UNITY)


@pytest.fixture
def fake_run(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    """Replace ``subprocess.run`` with a mock reporting a successful build."""
    mock = MagicMock(
        return_value=subprocess.CompletedProcess(args=[], returncode=0, stdout="", stderr="")
    )
    monkeypatch.setattr("buildmanager.executor.subprocess.run", mock)
    return mock


def _invoke(project: Path, *args: str, fmt: str = "--json"):
    return runner.invoke(app, [fmt, "--no-color", "--quiet", "-P", str(project), *args])


# ---------------------------------------------------------------------------
# Basics
# ---------------------------------------------------------------------------


class TestBasics:
    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"buildmanager {__version__}" in result.output

    def test_help_lists_commands(self) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        text = _strip_ansi(result.output)
        for command in ("player", "bundles", "window", "resolve", "targets", "switch-target", "config"):
            assert command in text

    def test_player_help(self) -> None:
        result = runner.invoke(app, ["player", "--help"])
        assert result.exit_code == 0
        text = _strip_ansi(result.output)
        assert "--target" in text
        assert "--unity" in text


# ---------------------------------------------------------------------------
# resolve
# ---------------------------------------------------------------------------


class TestResolve:
    def test_resolve_json(self, project: Path) -> None:
        result = _invoke(project, "resolve", "--target", "WindowsX64")
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        root = project.resolve().as_posix()
        assert data == {
            "output_path": f"{root}/Builds/WindowsX64/Game1.exe",
            "application_id": "com.Ac3m3Studios.Game1",
            "scenes": ["Assets/Scenes/Main.unity", "Assets/Scenes/Level1.unity"],
            "target": "WindowsX64",
            "asset_bundle_dir": f"{root}/AssetBundles/WindowsX64",
        }

    def test_target_from_environment(self, project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BUILDMANAGER_TARGET", "android")
        result = _invoke(project, "resolve")
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["output_path"].endswith("/Builds/Android/Game1.apk")

    def test_no_target_configured(self, project: Path) -> None:
        result = _invoke(project, "resolve")
        assert result.exit_code == 1
        assert "No build target selected" in result.output

    def test_unknown_target(self, project: Path) -> None:
        result = _invoke(project, "resolve", "-t", "Dreamcast")
        assert result.exit_code == 2
        assert "Unknown build target" in result.output

    def test_not_a_unity_project(self, isolated_config: Path) -> None:
        empty = isolated_config / "empty"
        empty.mkdir()
        result = runner.invoke(app, ["--plain", "--no-color", "-P", str(empty), "resolve", "-t", "Android"])
        assert result.exit_code == 4
        assert "does not look like a Unity project" in result.output


# ---------------------------------------------------------------------------
# targets / switch-target
# ---------------------------------------------------------------------------


class TestTargets:
    def test_lists_all_targets(self, project: Path) -> None:
        result = _invoke(project, "targets")
        assert result.exit_code == 0, result.output
        rows = {row["Target"]: row for row in json.loads(result.stdout)}
        assert len(rows) == 12
        assert rows["WindowsX64"] == {
            "Target": "WindowsX64",
            "Editor target": "StandaloneWindows64",
            "Group": "Standalone",
            "Extension": ".exe",
            "Available": "yes",
        }
        assert rows["iOS"]["Extension"] == "-"
        assert rows["MacOSIntel"]["Available"] == "no"

    def test_switch_target_marks_active(self, project: Path) -> None:
        switched = _invoke(project, "switch-target", "Android")
        assert switched.exit_code == 0, switched.output
        assert json.loads((project / "buildmanager.json").read_text()) == {"active_target": "Android"}

        listed = _invoke(project, "targets")
        names = [row["Target"] for row in json.loads(listed.stdout)]
        assert "* Android" in names

    def test_switched_target_is_used_for_builds(self, project: Path) -> None:
        _invoke(project, "switch-target", "StandaloneLinux64")
        result = _invoke(project, "resolve")
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["output_path"].endswith("/Builds/LinuxX64/Game1.x64")

    def test_switch_to_same_target(self, project: Path) -> None:
        _invoke(project, "switch-target", "iOS")
        result = runner.invoke(app, ["--plain", "--no-color", "-P", str(project), "switch-target", "iOS"])
        assert result.exit_code == 0
        assert "already the active build target" in result.output

    def test_switch_to_unavailable_target(self, project: Path) -> None:
        result = _invoke(project, "switch-target", "MacOSIntel")
        assert result.exit_code == 2
        assert not (project / "buildmanager.json").exists()


# ---------------------------------------------------------------------------
# player / bundles
# ---------------------------------------------------------------------------


class TestPlayer:
    def test_dry_run_builds_nothing(self, project: Path, fake_run: MagicMock) -> None:
        result = runner.invoke(
            app, ["--json", "--quiet", "--dry-run", "-P", str(project), "player", "-t", "Android"]
        )
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["application_id"] == "com.Ac3m3Studios.Game1"
        fake_run.assert_not_called()

    def test_successful_build(self, project: Path, unity_on_path: None, fake_run: MagicMock) -> None:
        result = _invoke(project, "player", "-t", "WindowsX64")
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["success"] is True
        assert data["target"] == "WindowsX64"
        assert data["output_path"].endswith("/Builds/WindowsX64/Game1.exe")

        cmd = fake_run.call_args.args[0]
        assert cmd[0] == UNITY
        assert cmd[cmd.index("-bmApplicationId") + 1] == "com.Ac3m3Studios.Game1"
        assert cmd[cmd.index("-bmTarget") + 1] == "StandaloneWindows64"

    def test_unity_option_beats_environment(self, project: Path, unity_on_path: None, fake_run: MagicMock) -> None:
        result = _invoke(project, "player", "-t", "WindowsX64", "--unity", "/custom/Unity")
        assert result.exit_code == 0, result.output
        assert fake_run.call_args.args[0][0] == "/custom/Unity"

    def test_failed_build_exits_5(self, project: Path, unity_on_path: None, fake_run: MagicMock) -> None:
        fake_run.return_value = subprocess.CompletedProcess(
            args=[], returncode=1, stdout="", stderr="Scripts have compiler errors."
        )
        result = _invoke(project, "player", "-t", "WindowsX64")
        assert result.exit_code == 5
        assert "Unity exited with code 1" in result.output

    def test_editor_not_configured(self, project: Path, fake_run: MagicMock) -> None:
        result = _invoke(project, "player", "-t", "WindowsX64")
        assert result.exit_code == 1
        assert "Unity editor not configured" in result.output
        fake_run.assert_not_called()

    def test_build_messages_without_quiet(self, project: Path, unity_on_path: None, fake_run: MagicMock) -> None:
        result = runner.invoke(app, ["--plain", "--no-color", "-P", str(project), "player", "-t", "Android"])
        assert result.exit_code == 0, result.output
        assert "Build started for Android" in result.output
        assert "Build completed for Android" in result.output


class TestBundles:
    def test_creates_output_dir(self, project: Path, unity_on_path: None, fake_run: MagicMock) -> None:
        result = _invoke(project, "bundles", "-t", "Android")
        assert result.exit_code == 0, result.output
        assert (project / "AssetBundles" / "Android").is_dir()
        cmd = fake_run.call_args.args[0]
        assert cmd[cmd.index("-bmOutput") + 1].endswith("/AssetBundles/Android")

    def test_dry_run(self, project: Path, fake_run: MagicMock) -> None:
        result = runner.invoke(
            app, ["--json", "--quiet", "-n", "-P", str(project), "bundles", "-t", "iOS"]
        )
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["output_dir"].endswith("/AssetBundles/iOS")
        assert not (project / "AssetBundles").exists()
        fake_run.assert_not_called()


# ---------------------------------------------------------------------------
# window
# ---------------------------------------------------------------------------


class TestWindow:
    def test_unavailable_on_old_editor(
        self, isolated_config: Path, make_unity_project, unity_on_path: None
    ) -> None:
        old = make_unity_project(isolated_config / "Old", editor_version="5.6.7f1")
        result = runner.invoke(app, ["--plain", "--no-color", "-P", str(old), "window"])
        assert result.exit_code == 2
        assert "no Build Player window" in result.output

    def test_opens_window(
        self, project: Path, unity_on_path: None, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        popen = MagicMock()
        monkeypatch.setattr("buildmanager.executor.subprocess.Popen", popen)
        result = _invoke(project, "window")
        assert result.exit_code == 0, result.output
        assert popen.call_args.args[0][0] == UNITY

    def test_dry_run(self, project: Path, unity_on_path: None, monkeypatch: pytest.MonkeyPatch) -> None:
        popen = MagicMock()
        monkeypatch.setattr("buildmanager.executor.subprocess.Popen", popen)
        result = runner.invoke(app, ["--plain", "--no-color", "--dry-run", "-P", str(project), "window"])
        assert result.exit_code == 0, result.output
        popen.assert_not_called()

    def test_dry_run_without_editor_configured(self, project: Path) -> None:
        result = runner.invoke(app, ["--plain", "--no-color", "--dry-run", "-P", str(project), "window"])
        assert result.exit_code == 0, result.output
        assert "Dry run: editor not started." in result.output


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------


class TestConfigCommands:
    def test_set_and_show(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["--quiet", "config", "set", "default_target", "WindowsX64"])
        assert result.exit_code == 0, result.output

        shown = runner.invoke(app, ["--json", "--quiet", "config", "show"])
        assert shown.exit_code == 0, shown.output
        assert json.loads(shown.stdout)["default_target"] == "WindowsX64"

    def test_default_target_used_by_resolve(self, project: Path) -> None:
        runner.invoke(app, ["--quiet", "config", "set", "default_target", "WebGL"])
        result = _invoke(project, "resolve")
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["target"] == "WebGL"

    def test_set_list_value(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["--quiet", "config", "set", "hooks.disabled", "build-log,notify"])
        assert result.exit_code == 0, result.output
        shown = runner.invoke(app, ["--json", "--quiet", "config", "show"])
        assert json.loads(shown.stdout)["hooks"]["disabled"] == ["build-log", "notify"]

    def test_configured_output_format(self, isolated_config: Path) -> None:
        runner.invoke(app, ["--quiet", "config", "set", "output.format", "json"])
        shown = runner.invoke(app, ["--quiet", "config", "show"])
        assert shown.exit_code == 0, shown.output
        assert json.loads(shown.stdout)["output"]["format"] == "json"

    def test_broken_config_can_be_reset(self, isolated_config: Path) -> None:
        path = isolated_config / "config" / "buildmanager" / "config.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("{broken", encoding="utf-8")
        result = runner.invoke(app, ["--force", "--quiet", "config", "reset"])
        assert result.exit_code == 0, result.output
        assert json.loads(path.read_text())["build_timeout"] == 3600

    def test_unknown_key(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["config", "set", "nope", "1"])
        assert result.exit_code == 2

    def test_invalid_target_value(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["--no-color", "config", "set", "default_target", "Dreamcast"])
        assert result.exit_code == 2
        assert "Validation error" in result.output

    def test_reset_with_force(self, isolated_config: Path) -> None:
        runner.invoke(app, ["--quiet", "config", "set", "build_timeout", "60"])
        result = runner.invoke(app, ["--force", "--quiet", "config", "reset"])
        assert result.exit_code == 0
        shown = runner.invoke(app, ["--json", "--quiet", "config", "show"])
        assert json.loads(shown.stdout)["build_timeout"] == 3600
