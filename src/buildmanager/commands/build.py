"""Build commands -- ``player``, ``bundles``, ``window`` and ``resolve``.

These are the command-line counterparts of the editor's *Build Manager*
menu: *Build Player*, *Build AssetBundles* and *Show Build Player Window*,
plus ``resolve`` to preview what a player build would do.
"""

from __future__ import annotations

from typing import Optional

import typer

from buildmanager.commands.common import (
    exit_on_error,
    is_dry_run,
    make_executor,
    project_root,
    report_result,
)
from buildmanager.exceptions import BuildError
from buildmanager.output import error, format_response, info, success, suggest

_TARGET_OPTION = typer.Option(
    None, "--target", "-t", help="Platform to build for (default: active target)."
)
_UNITY_OPTION = typer.Option(None, "--unity", help="Path to the Unity editor executable.")


def player_command(
    ctx: typer.Context,
    target: Optional[str] = _TARGET_OPTION,
    unity: Optional[str] = _UNITY_OPTION,
) -> None:
    """Build a player for the selected platform.

    The application identifier is derived from the company and product
    names when the project still uses the default one. With ``--dry-run``
    the resolved request is printed and nothing is built.

    Example::

        buildmanager player --target WindowsX64
        buildmanager --dry-run player
    """
    from buildmanager.config import load_global_config, resolve_target
    from buildmanager.hooks import create_default_manager
    from buildmanager.pipeline import build_player, prepare_player_request

    root = project_root(ctx)
    with exit_on_error():
        global_cfg = load_global_config()
        platform = resolve_target(target, root, global_cfg)

        if is_dry_run(ctx):
            request = prepare_player_request(root, platform)
            format_response(request.model_dump(mode="json"))
            info("Dry run: build not started.")
            return

        executor = make_executor(ctx, unity, global_cfg)
        manager = create_default_manager(global_cfg)
        try:
            result = build_player(root, platform, executor, manager.get_hook_runner())
        finally:
            manager.cleanup()

        report_result(result)
        if not result.success:
            if result.log_file:
                suggest(f"See the editor log: {result.log_file}")
            raise BuildError(result.message or f"Player build for {platform.name} failed")


def bundles_command(
    ctx: typer.Context,
    target: Optional[str] = _TARGET_OPTION,
    unity: Optional[str] = _UNITY_OPTION,
) -> None:
    """Build asset bundles into ``AssetBundles/<target>``.

    The output directory is created if it does not exist.

    Example::

        buildmanager bundles --target Android
    """
    from buildmanager.config import load_global_config, resolve_target
    from buildmanager.hooks import create_default_manager
    from buildmanager.pipeline import build_asset_bundles, prepare_asset_bundle_request

    root = project_root(ctx)
    with exit_on_error():
        global_cfg = load_global_config()
        platform = resolve_target(target, root, global_cfg)

        if is_dry_run(ctx):
            request = prepare_asset_bundle_request(root, platform)
            format_response(request.model_dump(mode="json"))
            info("Dry run: asset bundles not built.")
            return

        executor = make_executor(ctx, unity, global_cfg)
        manager = create_default_manager(global_cfg)
        try:
            result = build_asset_bundles(root, platform, executor, manager.get_hook_runner())
        finally:
            manager.cleanup()

        report_result(result)
        if not result.success:
            raise BuildError(result.message or f"Asset bundle build for {platform.name} failed")


def window_command(
    ctx: typer.Context,
    unity: Optional[str] = _UNITY_OPTION,
) -> None:
    """Open the editor on the Build Player window.

    Only available for editor versions that have the window (2017.1+).
    """
    from buildmanager.config import load_global_config
    from buildmanager.project import load_host_capabilities

    root = project_root(ctx)
    with exit_on_error():
        capabilities = load_host_capabilities(root)
        if not capabilities.build_player_window:
            error("This editor version has no Build Player window.")
            raise typer.Exit(code=2)

        if is_dry_run(ctx):
            info("Dry run: editor not started.")
            return
        executor = make_executor(ctx, unity, load_global_config())
        executor.show_build_player_window()
        success("Opened the Build Player window.")


def resolve_command(
    ctx: typer.Context,
    target: Optional[str] = _TARGET_OPTION,
) -> None:
    """Show the resolved build request without building anything.

    Prints the output path, application identifier, scene list and the
    asset bundle directory for the selected target.

    Example::

        buildmanager resolve --target Android --json
    """
    from buildmanager.config import load_global_config, resolve_target
    from buildmanager.pipeline import prepare_asset_bundle_request, prepare_player_request

    root = project_root(ctx)
    with exit_on_error():
        platform = resolve_target(target, root, load_global_config())
        request = prepare_player_request(root, platform)
        bundles = prepare_asset_bundle_request(root, platform)

    data = request.model_dump(mode="json")
    data["asset_bundle_dir"] = bundles.output_dir
    format_response(data)
    if not request.scenes:
        suggest("No enabled scenes are registered in the build settings.")
