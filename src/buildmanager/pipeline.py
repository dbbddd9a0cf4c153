"""Build orchestration around the resolver, the hooks, and the executor.

Each public function reads what it needs from the project on disk, resolves
a request, and drives the executor with the hook chain wrapped around it:

* :func:`prepare_player_request` -- resolve without building.
* :func:`build_player` -- pre-build hooks, executor, post-build hooks.
* :func:`build_asset_bundles` -- create the bundle directory, then the same.
* :func:`switch_target` -- persist a new active target and notify hooks.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from buildmanager.config import load_project_config, save_project_config
from buildmanager.exceptions import InvalidUsageError
from buildmanager.executor import BuildExecutor
from buildmanager.hooks.runner import HookContext, HookRunner
from buildmanager.models import (
    AssetBundleRequest,
    BuildRequest,
    BuildResult,
    HostCapabilities,
    PlatformTarget,
)
from buildmanager.project import (
    load_host_capabilities,
    load_project_identity,
    load_registered_scenes,
)
from buildmanager.resolver import resolve_asset_bundle_request, resolve_build_request

logger = logging.getLogger(__name__)


def _root(project_root: Path) -> str:
    return Path(project_root).as_posix()


def _require_support(target: PlatformTarget, capabilities: HostCapabilities) -> None:
    if not capabilities.supports(target):
        raise InvalidUsageError(
            f"Build target {target.name} is not available in this editor version"
        )


def prepare_player_request(
    project_root: Path,
    target: PlatformTarget,
    capabilities: Optional[HostCapabilities] = None,
) -> BuildRequest:
    """Resolve the player build request for *target* from the project's settings.

    Raises:
        InvalidUsageError: If the editor does not offer *target*.
        ProjectError: If the player settings cannot be read.
        InvalidArgumentError: If a derived application id needs an empty name.
    """
    caps = capabilities or load_host_capabilities(project_root)
    _require_support(target, caps)
    identity = load_project_identity(project_root, target)
    scenes = load_registered_scenes(project_root)
    request = resolve_build_request(_root(project_root), target, identity, scenes, caps)
    if identity.current_application_id != request.application_id:
        logger.info(
            "Replacing placeholder application id with %s", request.application_id
        )
    return request


def build_player(
    project_root: Path,
    target: PlatformTarget,
    executor: BuildExecutor,
    hook_runner: HookRunner,
    capabilities: Optional[HostCapabilities] = None,
) -> BuildResult:
    """Resolve and build a player, firing hooks around the executor.

    Returns:
        The executor's result. A failed build is returned, not raised.

    Raises:
        HookError: If a pre-build or post-build hook fails.
        BuildError: If the executor cannot run the build.
    """
    request = prepare_player_request(project_root, target, capabilities)
    return _execute(
        HookContext(target=target, output_path=request.output_path, kind="player"),
        lambda: executor.build_player(request),
        hook_runner,
    )


def prepare_asset_bundle_request(project_root: Path, target: PlatformTarget) -> AssetBundleRequest:
    """Resolve the asset bundle request for *target* (no filesystem access)."""
    return resolve_asset_bundle_request(_root(project_root), target)


def build_asset_bundles(
    project_root: Path,
    target: PlatformTarget,
    executor: BuildExecutor,
    hook_runner: HookRunner,
    capabilities: Optional[HostCapabilities] = None,
) -> BuildResult:
    """Create the bundle output directory if absent and build asset bundles into it.

    Raises:
        InvalidUsageError: If the editor does not offer *target*.
        HookError: If a hook fails.
        BuildError: If the executor cannot run the build.
    """
    caps = capabilities or load_host_capabilities(project_root)
    _require_support(target, caps)
    request = prepare_asset_bundle_request(project_root, target)
    Path(request.output_dir).mkdir(parents=True, exist_ok=True)
    return _execute(
        HookContext(target=target, output_path=request.output_dir, kind="asset_bundles"),
        lambda: executor.build_asset_bundles(request),
        hook_runner,
    )


def _execute(
    ctx: HookContext,
    run: Callable[[], BuildResult],
    hook_runner: HookRunner,
) -> BuildResult:
    ctx.started_at = datetime.now()
    hook_runner.run_pre_build(ctx)
    try:
        result = run()
    except Exception as exc:
        ctx.finished_at = datetime.now()
        ctx.error = exc
        hook_runner.run_error(exc, ctx)
        raise
    ctx.finished_at = result.finished_at
    ctx.result = result
    hook_runner.run_post_build(ctx)
    return result


def switch_target(
    project_root: Path,
    target: PlatformTarget,
    hook_runner: HookRunner,
    capabilities: Optional[HostCapabilities] = None,
) -> Optional[PlatformTarget]:
    """Make *target* the project's active build target.

    Target-changed hooks fire only when the target actually changes and the
    editor version supports change notifications.

    Returns:
        The previously active target, or ``None`` if none was set.

    Raises:
        InvalidUsageError: If the editor does not offer *target*.
    """
    caps = capabilities or load_host_capabilities(project_root)
    _require_support(target, caps)

    config = load_project_config(project_root)
    previous = config.active_target
    if previous == target:
        return previous

    save_project_config(project_root, config.model_copy(update={"active_target": target}))
    if caps.target_changed_events:
        hook_runner.run_target_changed(previous, target)
    return previous
