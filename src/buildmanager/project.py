"""Read player and build settings from a Unity project on disk.

The editor stores its settings as YAML documents under ``ProjectSettings/``
with Unity-specific directives and tagged document headers
(``--- !u!129 &1``) that a stock YAML loader rejects. :func:`load_unity_yaml`
strips those before handing the text to PyYAML.

The public functions build the explicit inputs the resolver expects:

* :func:`load_project_identity` -- company, product and application id from
  ``ProjectSettings.asset``.
* :func:`load_registered_scenes` -- the scene list from
  ``EditorBuildSettings.asset``.
* :func:`load_editor_version` / :func:`load_host_capabilities` -- the editor
  version from ``ProjectVersion.txt`` and the feature flags derived from it.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Optional

import yaml

from buildmanager.exceptions import InvalidArgumentError, ProjectError
from buildmanager.models import (
    PLACEHOLDER_APPLICATION_ID,
    HostCapabilities,
    PlatformTarget,
    ProjectIdentity,
    SceneEntry,
)

logger = logging.getLogger(__name__)

SETTINGS_DIR = "ProjectSettings"
PLAYER_SETTINGS_FILE = "ProjectSettings.asset"
BUILD_SETTINGS_FILE = "EditorBuildSettings.asset"
VERSION_FILE = "ProjectVersion.txt"

_DOCUMENT_HEADER_RE = re.compile(r"^--- !u!\d+ &-?\d+.*$", re.MULTILINE)
_DIRECTIVE_RE = re.compile(r"^%.*$", re.MULTILINE)


def load_unity_yaml(path: Path) -> dict[str, Any]:
    """Parse a Unity serialized settings file into a dict.

    Only the first document is returned; settings assets hold exactly one.
    Every scalar is kept as a string (PyYAML's ``BaseLoader``), so unquoted
    names such as ``007`` or ``Yes`` read back verbatim.

    Args:
        path: Path to a ``.asset`` file.

    Returns:
        The parsed top-level mapping (e.g. ``{"PlayerSettings": {...}}``).

    Raises:
        ProjectError: If the file is missing, unreadable, or not a YAML
            mapping.
    """
    if not path.is_file():
        raise ProjectError(f"Settings file not found: {path}")
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ProjectError(f"Failed to read settings file {path}: {exc}") from exc

    content = _DIRECTIVE_RE.sub("", content)
    content = _DOCUMENT_HEADER_RE.sub("---", content)

    try:
        documents = [
            doc for doc in yaml.load_all(content, Loader=yaml.BaseLoader) if doc is not None
        ]
    except yaml.YAMLError as exc:
        raise ProjectError(f"Invalid settings file {path}: {exc}") from exc

    if not documents or not isinstance(documents[0], dict):
        raise ProjectError(f"Settings file {path} does not contain a mapping")
    return documents[0]


def _settings_path(project_root: Path, name: str) -> Path:
    return Path(project_root) / SETTINGS_DIR / name


def load_project_identity(project_root: Path, target: PlatformTarget) -> ProjectIdentity:
    """Snapshot the player settings relevant to *target*.

    Application identifiers are stored per target group. A group with no
    identifier (or an empty one) is reported as the placeholder so that the
    resolver assigns a derived identifier. Editors before 5.6 store a single
    ``bundleIdentifier``, which is used when no per-group map exists.

    Raises:
        ProjectError: If ``ProjectSettings.asset`` is missing or has no
            ``PlayerSettings`` section.
    """
    data = load_unity_yaml(_settings_path(project_root, PLAYER_SETTINGS_FILE))
    player = data.get("PlayerSettings")
    if not isinstance(player, dict):
        raise ProjectError(f"No PlayerSettings section in {PLAYER_SETTINGS_FILE}")

    identifiers = player.get("applicationIdentifier")
    if isinstance(identifiers, dict):
        current = identifiers.get(target.group)
    else:
        current = player.get("bundleIdentifier")

    return ProjectIdentity(
        company_name=_as_text(player.get("companyName")),
        product_name=_as_text(player.get("productName")),
        current_application_id=_as_text(current) or PLACEHOLDER_APPLICATION_ID,
    )


def load_registered_scenes(project_root: Path) -> list[SceneEntry]:
    """Return the scenes registered in the build settings, in order.

    A project without ``EditorBuildSettings.asset`` has no registered scenes
    and yields an empty list.
    """
    path = _settings_path(project_root, BUILD_SETTINGS_FILE)
    if not path.is_file():
        logger.debug("No build settings at %s, assuming no scenes", path)
        return []

    data = load_unity_yaml(path)
    settings = data.get("EditorBuildSettings") or {}
    if not isinstance(settings, dict):
        raise ProjectError(f"No EditorBuildSettings section in {BUILD_SETTINGS_FILE}")
    scenes: list[SceneEntry] = []
    for entry in settings.get("m_Scenes") or []:
        if not isinstance(entry, dict) or not entry.get("path"):
            continue
        try:
            enabled = bool(int(entry.get("enabled", "1")))
        except (TypeError, ValueError):
            raise ProjectError(
                f"Invalid enabled flag for scene {entry['path']} in {BUILD_SETTINGS_FILE}"
            ) from None
        scenes.append(SceneEntry(path=str(entry["path"]), enabled=enabled))
    return scenes


def load_editor_version(project_root: Path) -> Optional[str]:
    """Return the editor version recorded in ``ProjectVersion.txt``, if any."""
    path = _settings_path(project_root, VERSION_FILE)
    if not path.is_file():
        return None
    try:
        data = yaml.load(path.read_text(encoding="utf-8"), Loader=yaml.BaseLoader)
    except (OSError, yaml.YAMLError) as exc:
        raise ProjectError(f"Invalid version file {path}: {exc}") from exc
    if not isinstance(data, dict) or not data.get("m_EditorVersion"):
        return None
    return str(data["m_EditorVersion"])


def load_host_capabilities(project_root: Path) -> HostCapabilities:
    """Derive the editor's feature flags from the project's recorded version.

    Projects without a version file are assumed to target a modern editor.

    Raises:
        ProjectError: If the recorded version cannot be interpreted.
    """
    version = load_editor_version(project_root)
    if version is None:
        return HostCapabilities()
    try:
        return HostCapabilities.for_version(version)
    except InvalidArgumentError as exc:
        raise ProjectError(str(exc)) from exc


def is_unity_project(project_root: Path) -> bool:
    """Check for the ``Assets/`` and ``ProjectSettings/`` folders every project has."""
    root = Path(project_root)
    return (root / "Assets").is_dir() and (root / SETTINGS_DIR).is_dir()


def _as_text(value: Any) -> str:
    """Missing keys read as empty text."""
    if value is None:
        return ""
    return str(value)
