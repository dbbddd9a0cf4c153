"""Target commands -- list platforms and switch the active one."""

from __future__ import annotations

import typer

from buildmanager.commands.common import exit_on_error, project_root
from buildmanager.models import PlatformTarget
from buildmanager.output import info, print_table, success


def targets_command(ctx: typer.Context) -> None:
    """List the supported build targets.

    Shows each target's editor identifier, target group, artifact
    extension, and whether the project's editor version offers it. The
    active target is marked with ``*``.
    """
    from buildmanager.config import load_project_config
    from buildmanager.project import load_host_capabilities
    from buildmanager.resolver import extension_for

    root = project_root(ctx)
    with exit_on_error():
        capabilities = load_host_capabilities(root)
        active = load_project_config(root).active_target

    rows = [
        [
            ("* " if target == active else "") + target.name,
            target.build_target,
            target.group,
            extension_for(target) or "-",
            "yes" if capabilities.supports(target) else "no",
        ]
        for target in PlatformTarget
    ]
    print_table(
        ["Target", "Editor target", "Group", "Extension", "Available"],
        rows,
        title="Build targets",
    )


def switch_target_command(
    ctx: typer.Context,
    target: str = typer.Argument(help="Target to make active, e.g. 'WindowsX64'."),
) -> None:
    """Make TARGET the project's active build target.

    Later builds without ``--target`` use it. Target-changed hooks are
    notified when the target actually changes.
    """
    from buildmanager.config import load_global_config
    from buildmanager.hooks import create_default_manager
    from buildmanager.pipeline import switch_target

    root = project_root(ctx)
    with exit_on_error():
        platform = PlatformTarget.parse(target)
        manager = create_default_manager(load_global_config())
        try:
            previous = switch_target(root, platform, manager.get_hook_runner())
        finally:
            manager.cleanup()

    if previous == platform:
        info(f"{platform.name} is already the active build target.")
    else:
        success(f"Active build target: {platform.name}")
