"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for buildmanager:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.buildmanager/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- A single :class:`~buildmanager.models.GlobalConfig`
  JSON file storing user defaults (target, editor path, hooks).
* **Project config** -- ``buildmanager.json`` in the Unity project root,
  holding the active build target. See :func:`load_project_config`.
* **Precedence resolution** -- :func:`resolve_target` and
  :func:`resolve_unity_path` merge CLI flags, environment variables, project
  config, and global config.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from buildmanager.exceptions import ConfigError
from buildmanager.models import GlobalConfig, PlatformTarget, ProjectConfig

_APP_NAME = "buildmanager"
_CONFIG_FILENAME = "config.json"
PROJECT_CONFIG_FILENAME = "buildmanager.json"

ENV_TARGET = "BUILDMANAGER_TARGET"
ENV_UNITY_PATH = "UNITY_PATH"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/buildmanager/`` (default
    ``~/.config/buildmanager/``). On macOS/Windows: ``~/.buildmanager/``.

    Returns:
        Absolute path to the configuration directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs, build logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/buildmanager/`` (default
    ``~/.local/share/buildmanager/``). On macOS/Windows:
    ``~/.buildmanager/data/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "data"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_logs_dir() -> Path:
    """Return ``<data_dir>/logs/``, creating it if necessary."""
    path = get_data_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is guaranteed to be an atomic rename on POSIX systems.
    On success the temp file is renamed over *path*; on any failure the temp
    file is cleaned up.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close in finally
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def _global_config_path() -> Path:
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the config directory.

    Returns:
        The deserialised :class:`~buildmanager.models.GlobalConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Project config ---


def project_config_path(project_root: Path) -> Path:
    """Path to ``buildmanager.json`` inside *project_root*."""
    return Path(project_root) / PROJECT_CONFIG_FILENAME


def load_project_config(project_root: Path) -> ProjectConfig:
    """Load ``buildmanager.json`` from the project root.

    Returns:
        The deserialised :class:`~buildmanager.models.ProjectConfig`, or a
        default instance if the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or an
            unknown target.
    """
    path = project_config_path(project_root)
    if not path.is_file():
        return ProjectConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return ProjectConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc


def save_project_config(project_root: Path, config: ProjectConfig) -> None:
    """Persist the project configuration atomically."""
    data = config.model_dump(mode="json", exclude_none=True)
    _atomic_write(project_config_path(project_root), json.dumps(data, indent=2) + "\n")


# --- Precedence resolution ---


def resolve_target(
    cli_target: Optional[str],
    project_root: Path,
    global_config: Optional[GlobalConfig] = None,
) -> PlatformTarget:
    """Resolve the platform to build for.

    Precedence (high to low):
        1. CLI flag (``--target``)
        2. Environment variable ``BUILDMANAGER_TARGET``
        3. Project config ``active_target``
        4. Global config ``default_target``

    Raises:
        InvalidUsageError: If a CLI or environment value names no platform.
        ConfigError: If no source supplies a target.
    """
    if cli_target:
        return PlatformTarget.parse(cli_target)

    env_target = os.environ.get(ENV_TARGET)
    if env_target:
        return PlatformTarget.parse(env_target)

    project = load_project_config(project_root)
    if project.active_target is not None:
        return project.active_target

    global_cfg = global_config or load_global_config()
    if global_cfg.default_target is not None:
        return global_cfg.default_target

    raise ConfigError(
        "No build target selected. Pass --target, set "
        f"{ENV_TARGET}, or run 'buildmanager switch-target'."
    )


def resolve_unity_path(
    cli_path: Optional[str],
    project_root: Path,
    global_config: Optional[GlobalConfig] = None,
) -> str:
    """Resolve the Unity editor executable.

    Precedence (high to low):
        1. CLI flag (``--unity``)
        2. Environment variable ``UNITY_PATH``
        3. Project config ``unity_path``
        4. Global config ``unity_path``

    Raises:
        ConfigError: If no source supplies a path.
    """
    if cli_path:
        return cli_path

    env_path = os.environ.get(ENV_UNITY_PATH)
    if env_path:
        return env_path

    project = load_project_config(project_root)
    if project.unity_path:
        return project.unity_path

    global_cfg = global_config or load_global_config()
    if global_cfg.unity_path:
        return global_cfg.unity_path

    raise ConfigError(
        "Unity editor not configured. Pass --unity, set "
        f"{ENV_UNITY_PATH}, or run 'buildmanager config set unity_path <path>'."
    )
