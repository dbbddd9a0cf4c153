"""Build-target configuration resolver.

Pure functions that turn a project identity, a platform target and the
registered scene list into a fully specified build request:

* :func:`resolve_application_id` -- derive ``com.<company>.<product>`` when the
  project still carries the placeholder identifier.
* :func:`resolve_output_path` -- ``<root>/Builds/<target>/<product><ext>``.
* :func:`resolve_scenes` -- the enabled scenes, in registration order.
* :func:`resolve_asset_bundle_output_dir` -- ``<root>/AssetBundles/<target>``.

Nothing here touches the filesystem or the editor. Directory creation and
the build itself belong to :mod:`buildmanager.pipeline` and
:mod:`buildmanager.executor`.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional

from buildmanager.exceptions import InvalidArgumentError
from buildmanager.models import (
    PLACEHOLDER_APPLICATION_ID,
    AssetBundleRequest,
    BuildRequest,
    HostCapabilities,
    PlatformTarget,
    ProjectIdentity,
    SceneEntry,
)

_DISALLOWED_RE = re.compile(r"[^A-Za-z0-9']+")

_EXTENSIONS: dict[PlatformTarget, str] = {
    PlatformTarget.Android: ".apk",
    PlatformTarget.LinuxX86: ".x86",
    PlatformTarget.LinuxX64: ".x64",
    PlatformTarget.LinuxUniversal: ".x86_64",
    PlatformTarget.MacOS: ".app",
    PlatformTarget.MacOSIntel: ".app",
    PlatformTarget.MacOSIntel64: ".app",
    PlatformTarget.WindowsX86: ".exe",
    PlatformTarget.WindowsX64: ".exe",
}


def sanitize(text: str) -> str:
    """Reduce a human-entered name to a valid application identifier segment.

    Every character outside ``[A-Za-z0-9']`` is removed, keeping the order
    of the rest, and a leading digit is replaced with ``x``.

    Args:
        text: Company or product name as typed into the player settings.

    Returns:
        The sanitised segment, e.g. ``"xCats"`` for ``"3Cats!"``.

    Raises:
        InvalidArgumentError: If *text* is empty.
    """
    if not text:
        raise InvalidArgumentError("Cannot sanitize an empty name")
    cleaned = _DISALLOWED_RE.sub("", text)
    if cleaned[:1].isdigit():
        cleaned = "x" + cleaned[1:]
    return cleaned


def resolve_application_id(identity: ProjectIdentity) -> str:
    """Return the application identifier the build should use.

    A project still using :data:`~buildmanager.models.PLACEHOLDER_APPLICATION_ID`
    gets ``com.<company>.<product>`` built from its sanitised names; any
    other identifier is returned untouched.

    Raises:
        InvalidArgumentError: If the placeholder must be replaced and the
            company or product name is empty.
    """
    if identity.current_application_id != PLACEHOLDER_APPLICATION_ID:
        return identity.current_application_id
    return "com." + sanitize(identity.company_name) + "." + sanitize(identity.product_name)


def extension_for(target: PlatformTarget) -> str:
    """File extension of the player artifact for *target*.

    Platforms without a single-file artifact (``iOS``, ``WebGL``, ...) get an
    empty extension rather than an error.
    """
    return _EXTENSIONS.get(target, "")


def resolve_output_path(root: str, target: PlatformTarget, product_name: str) -> str:
    """Location of the player artifact, e.g. ``/proj/Builds/WindowsX64/MyGame.exe``."""
    return root + "/Builds/" + target.name + "/" + product_name + extension_for(target)


def resolve_scenes(registered: Iterable[SceneEntry], honor_enabled: bool = True) -> list[str]:
    """Paths of the scenes to include, in registration order.

    Duplicates are kept. An empty registry yields an empty list; whether
    that is fatal is up to the executor.

    Args:
        registered: Scenes as registered in the build settings.
        honor_enabled: When ``False`` (hosts without per-scene enable flags)
            every registered scene is included.
    """
    return [scene.path for scene in registered if scene.enabled or not honor_enabled]


def resolve_asset_bundle_output_dir(root: str, target: PlatformTarget) -> str:
    """Directory asset bundles for *target* are written to.

    The caller must create it before building; this function only computes
    the path.
    """
    return root + "/AssetBundles/" + target.name


def resolve_build_request(
    root: str,
    target: PlatformTarget,
    identity: ProjectIdentity,
    scenes: Iterable[SceneEntry],
    capabilities: Optional[HostCapabilities] = None,
) -> BuildRequest:
    """Compose the individual resolvers into a :class:`~buildmanager.models.BuildRequest`.

    Args:
        root: Project root directory (the folder containing ``Assets/``).
        target: Platform to build for.
        identity: Player settings snapshot.
        scenes: Registered scenes.
        capabilities: Host feature flags. Defaults to a modern editor.

    Returns:
        A new, frozen build request.
    """
    caps = capabilities or HostCapabilities()
    return BuildRequest(
        output_path=resolve_output_path(root, target, identity.product_name),
        application_id=resolve_application_id(identity),
        scenes=resolve_scenes(scenes, honor_enabled=caps.scene_enable_flags),
        target=target,
    )


def resolve_asset_bundle_request(root: str, target: PlatformTarget) -> AssetBundleRequest:
    """Wrap :func:`resolve_asset_bundle_output_dir` in an :class:`~buildmanager.models.AssetBundleRequest`."""
    return AssetBundleRequest(
        output_dir=resolve_asset_bundle_output_dir(root, target),
        target=target,
    )
