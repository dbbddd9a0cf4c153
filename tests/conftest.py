"""Shared test fixtures for buildmanager.

Provides reusable fixtures for creating Unity project trees on disk,
isolated config environments, output state, and CLI runners. These fixtures
are automatically discovered by pytest and available to all test modules.
"""

from __future__ import annotations

import logging
import textwrap
from pathlib import Path
from typing import Optional

import pytest

from buildmanager.models import PLACEHOLDER_APPLICATION_ID
from buildmanager.output import OutputFormat, OutputManager, reset_output, set_output


_ASSET_HEADER = "%YAML 1.1\n%TAG !u! tag:unity3d.com,2011:\n"


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager and log routing after every test.

    Both cache references to the sys.stderr of the test that created them;
    CliRunner closes those streams when the invocation ends.
    """
    yield
    reset_output()
    logger = logging.getLogger("buildmanager")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


# ---------------------------------------------------------------------------
# Unity project fixtures
# ---------------------------------------------------------------------------


def write_unity_project(
    root: Path,
    company: str = "Ac3m3 Studios",
    product: str = "Game1",
    identifiers: Optional[dict[str, str]] = None,
    scenes: Optional[list[tuple[str, bool]]] = None,
    editor_version: Optional[str] = "2019.4.31f1",
) -> Path:
    """Create a minimal Unity project layout under *root* and return it.

    Args:
        identifiers: ``applicationIdentifier`` map keyed by target group.
        scenes: ``(path, enabled)`` pairs for ``EditorBuildSettings.asset``.
            ``None`` skips writing the file.
        editor_version: Value for ``ProjectVersion.txt``. ``None`` skips it.
    """
    (root / "Assets").mkdir(parents=True, exist_ok=True)
    settings = root / "ProjectSettings"
    settings.mkdir(parents=True, exist_ok=True)

    if identifiers is None:
        identifiers = {"Standalone": PLACEHOLDER_APPLICATION_ID}
    id_lines = "".join(f"    {group}: {value}\n" for group, value in identifiers.items())
    if not id_lines:
        id_lines = "    {}\n"
    (settings / "ProjectSettings.asset").write_text(
        _ASSET_HEADER
        + "--- !u!129 &1\n"
        + "PlayerSettings:\n"
        + "  m_ObjectHideFlags: 0\n"
        + "  serializedVersion: 15\n"
        + f"  companyName: {company}\n"
        + f"  productName: {product}\n"
        + "  defaultCursor: {fileID: 0}\n"
        + "  applicationIdentifier:\n"
        + id_lines
        + "  bundleVersion: 1.0\n",
        encoding="utf-8",
    )

    if scenes is not None:
        if scenes:
            scene_lines = "".join(
                f"  - enabled: {1 if enabled else 0}\n"
                f"    path: {path}\n"
                f"    guid: 2cda990e2423bbf4892e6590ba056729\n"
                for path, enabled in scenes
            )
            body = "  m_Scenes:\n" + scene_lines
        else:
            body = "  m_Scenes: []\n"
        (settings / "EditorBuildSettings.asset").write_text(
            _ASSET_HEADER
            + "--- !u!1045 &1\n"
            + "EditorBuildSettings:\n"
            + "  m_ObjectHideFlags: 0\n"
            + "  serializedVersion: 2\n"
            + body
            + "  m_configObjects: {}\n",
            encoding="utf-8",
        )

    if editor_version is not None:
        (settings / "ProjectVersion.txt").write_text(
            textwrap.dedent(
                f"""\
                m_EditorVersion: {editor_version}
                m_EditorVersionWithRevision: {editor_version} (6d4d0e1d42a1)
                """
            ),
            encoding="utf-8",
        )
    return root


@pytest.fixture
def make_unity_project():
    """Factory fixture exposing :func:`write_unity_project` to test modules."""
    return write_unity_project


@pytest.fixture
def unity_project(tmp_path: Path) -> Path:
    """A Unity project with the placeholder id and three registered scenes."""
    return write_unity_project(
        tmp_path / "MyProject",
        scenes=[
            ("Assets/Scenes/Main.unity", True),
            ("Assets/Scenes/Debug.unity", False),
            ("Assets/Scenes/Level1.unity", True),
        ],
    )


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Forces XDG layout, points XDG_CONFIG_HOME and XDG_DATA_HOME at
    subdirectories of tmp_path, clears buildmanager environment variables,
    and changes the working directory to tmp_path.
    """
    monkeypatch.setattr("buildmanager.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in ["BUILDMANAGER_TARGET", "UNITY_PATH"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def plain_output() -> OutputManager:
    """Install a PLAIN-format, colourless OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
