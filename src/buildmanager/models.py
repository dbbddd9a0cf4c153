"""Canonical Pydantic models shared across all buildmanager modules.

This is the single source of truth for data shapes in the project. The models
fall into three groups:

**Build models** -- inputs and outputs of the resolver:
    :class:`PlatformTarget`, :class:`ProjectIdentity`, :class:`SceneEntry`,
    :class:`HostCapabilities`, :class:`BuildRequest`,
    :class:`AssetBundleRequest`, and :class:`BuildResult`.

**Configuration models** -- serialised as JSON in the user's config
directory or the project root:
    :class:`OutputConfig`, :class:`HooksConfig`, :class:`GlobalConfig`, and
    :class:`ProjectConfig`.

Build models are frozen: a request is produced fresh on every resolution
call and never mutated afterwards.
"""

from __future__ import annotations

import enum
import re
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from buildmanager.exceptions import InvalidArgumentError, InvalidUsageError

PLACEHOLDER_APPLICATION_ID = "com.Company.ProductName"
"""Application identifier the editor assigns to a freshly created project."""


# --- Platforms ---


class PlatformTarget(str, enum.Enum):
    """Closed set of platforms a player can be built for.

    Member names double as path segments in build output locations
    (``Builds/WindowsX64/...``). The editor's own identifier for each target
    is available as :attr:`build_target`.
    """

    Android = "Android"
    LinuxX86 = "LinuxX86"
    LinuxX64 = "LinuxX64"
    LinuxUniversal = "LinuxUniversal"
    MacOS = "MacOS"
    MacOSIntel = "MacOSIntel"
    MacOSIntel64 = "MacOSIntel64"
    WindowsX86 = "WindowsX86"
    WindowsX64 = "WindowsX64"
    iOS = "iOS"
    WebGL = "WebGL"
    tvOS = "tvOS"

    @property
    def build_target(self) -> str:
        """The editor's ``BuildTarget`` identifier (e.g. ``StandaloneWindows64``)."""
        return _BUILD_TARGETS[self]

    @property
    def group(self) -> str:
        """The editor's ``BuildTargetGroup`` the platform belongs to.

        Application identifiers are stored per group, so every desktop
        platform shares the ``Standalone`` identifier.
        """
        return _TARGET_GROUPS.get(self, "Standalone")

    @property
    def is_legacy(self) -> bool:
        """Whether the target only exists on older editor versions."""
        return self in (PlatformTarget.MacOSIntel, PlatformTarget.MacOSIntel64)

    @classmethod
    def parse(cls, text: str) -> PlatformTarget:
        """Look up a target by member name or editor identifier, ignoring case.

        Args:
            text: ``"WindowsX64"``, ``"windowsx64"`` or ``"StandaloneWindows64"``.

        Returns:
            The matching :class:`PlatformTarget`.

        Raises:
            InvalidUsageError: If *text* names no known platform.
        """
        needle = text.strip().lower()
        for target in cls:
            if needle in (target.name.lower(), target.build_target.lower()):
                return target
        choices = ", ".join(t.name for t in cls)
        raise InvalidUsageError(f"Unknown build target '{text}'. Choose from: {choices}")


_BUILD_TARGETS: dict[PlatformTarget, str] = {
    PlatformTarget.Android: "Android",
    PlatformTarget.LinuxX86: "StandaloneLinux",
    PlatformTarget.LinuxX64: "StandaloneLinux64",
    PlatformTarget.LinuxUniversal: "StandaloneLinuxUniversal",
    PlatformTarget.MacOS: "StandaloneOSX",
    PlatformTarget.MacOSIntel: "StandaloneOSXIntel",
    PlatformTarget.MacOSIntel64: "StandaloneOSXIntel64",
    PlatformTarget.WindowsX86: "StandaloneWindows",
    PlatformTarget.WindowsX64: "StandaloneWindows64",
    PlatformTarget.iOS: "iOS",
    PlatformTarget.WebGL: "WebGL",
    PlatformTarget.tvOS: "tvOS",
}

_TARGET_GROUPS: dict[PlatformTarget, str] = {
    PlatformTarget.Android: "Android",
    PlatformTarget.iOS: "iOS",
    PlatformTarget.WebGL: "WebGL",
    PlatformTarget.tvOS: "tvOS",
}


def _coerce_target(value: Any) -> Any:
    """Pydantic ``before`` validator helper accepting names or editor identifiers."""
    if isinstance(value, str) and not isinstance(value, PlatformTarget):
        try:
            return PlatformTarget.parse(value)
        except InvalidUsageError as exc:
            raise ValueError(str(exc)) from None
    return value


# --- Build inputs ---


class ProjectIdentity(BaseModel):
    """Read-only snapshot of the project's player settings at resolution time."""

    model_config = ConfigDict(frozen=True)

    company_name: str
    product_name: str
    current_application_id: str = PLACEHOLDER_APPLICATION_ID


class SceneEntry(BaseModel):
    """A scene registered in the project's build settings."""

    model_config = ConfigDict(frozen=True)

    path: str
    enabled: bool = True


_VERSION_RE = re.compile(r"^\s*(\d+)\.(\d+)")


class HostCapabilities(BaseModel):
    """Optional editor features, which vary by editor version.

    Build with :meth:`for_version` from the project's recorded editor
    version, or construct directly in tests. The defaults describe a modern
    editor.
    """

    model_config = ConfigDict(frozen=True)

    build_player_window: bool = True
    target_changed_events: bool = True
    legacy_macos_targets: bool = False
    scene_enable_flags: bool = True

    @classmethod
    def for_version(cls, version: str) -> HostCapabilities:
        """Derive capabilities from an editor version string like ``2017.1.0f3``.

        Raises:
            InvalidArgumentError: If the version string cannot be parsed.
        """
        match = _VERSION_RE.match(version)
        if match is None:
            raise InvalidArgumentError(f"Unrecognised editor version: '{version}'")
        major_minor = (int(match.group(1)), int(match.group(2)))
        return cls(
            build_player_window=major_minor >= (2017, 1),
            target_changed_events=major_minor >= (2017, 1),
            legacy_macos_targets=major_minor < (2017, 3),
            scene_enable_flags=True,
        )

    def supports(self, target: PlatformTarget) -> bool:
        """Return ``False`` only for legacy targets this host no longer offers."""
        if target.is_legacy:
            return self.legacy_macos_targets
        return True


# --- Build outputs ---


class BuildRequest(BaseModel):
    """A fully specified player build, ready for the executor."""

    model_config = ConfigDict(frozen=True)

    output_path: str
    application_id: str
    scenes: list[str] = Field(default_factory=list)
    target: PlatformTarget


class AssetBundleRequest(BaseModel):
    """A fully specified asset bundle build."""

    model_config = ConfigDict(frozen=True)

    output_dir: str
    target: PlatformTarget


class BuildResult(BaseModel):
    """Outcome reported by the executor for one build."""

    success: bool
    target: PlatformTarget
    output_path: str
    started_at: datetime
    finished_at: datetime
    return_code: Optional[int] = None
    log_file: Optional[str] = None
    message: str = ""

    @property
    def duration(self) -> float:
        """Wall-clock build time in seconds."""
        return (self.finished_at - self.started_at).total_seconds()


# --- Configuration ---


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class HooksConfig(BaseModel):
    """Explicit hook allow/deny lists stored in :class:`GlobalConfig`."""

    enabled: list[str] = Field(default_factory=list)
    disabled: list[str] = Field(default_factory=list)


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/buildmanager/config.json``.

    Loaded and saved by :func:`~buildmanager.config.load_global_config` and
    :func:`~buildmanager.config.save_global_config`. Fields here have the
    lowest precedence and can be overridden by the project config,
    environment variables, or CLI flags.
    """

    default_target: Optional[PlatformTarget] = None
    unity_path: Optional[str] = Field(
        default=None, description="Path to the Unity editor executable"
    )
    build_timeout: int = Field(
        default=3600, description="Seconds before a batch-mode build is aborted"
    )
    show_built_player: bool = Field(
        default=False, description="Reveal the built player once the build succeeds"
    )
    output: OutputConfig = Field(default_factory=OutputConfig)
    hooks: HooksConfig = Field(default_factory=HooksConfig)

    @field_validator("default_target", mode="before")
    @classmethod
    def normalise_target(cls, value: Any) -> Any:
        return _coerce_target(value)


class ProjectConfig(BaseModel):
    """Per-project settings stored in ``<project>/buildmanager.json``.

    Holds the active build target (the counterpart of the editor's "switch
    platform") and an optional editor path pinned by the project.
    """

    model_config = ConfigDict(extra="allow")

    active_target: Optional[PlatformTarget] = None
    unity_path: Optional[str] = None

    @field_validator("active_target", mode="before")
    @classmethod
    def normalise_target(cls, value: Any) -> Any:
        return _coerce_target(value)
