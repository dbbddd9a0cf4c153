"""Config commands -- view and modify global configuration.

Provides the ``buildmanager config`` sub-command group for reading, updating,
and resetting the user's global configuration file
(:class:`~buildmanager.models.GlobalConfig`): default target, editor path,
build timeout, and hook allow/deny lists.
"""

from __future__ import annotations

import json

import typer

from buildmanager.output import error, format_response, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show current configuration.

    Example::

        buildmanager config show
        buildmanager --json config show
    """
    from buildmanager.config import get_config_dir, load_global_config

    config = load_global_config()
    info(f"Config directory: {get_config_dir()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Config key (dot notation, e.g., 'hooks.disabled')."
    ),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value.

    Values are coerced to the existing field's type: ``true``/``false`` for
    booleans, integers, and JSON arrays (or comma-separated text) for lists.
    The updated config is validated before saving.

    Example::

        buildmanager config set default_target WindowsX64
        buildmanager config set unity_path /opt/Unity/Editor/Unity
        buildmanager config set hooks.disabled build-log
    """
    from buildmanager.config import load_global_config, save_global_config
    from buildmanager.models import GlobalConfig

    config = load_global_config()
    data = config.model_dump(mode="json")

    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=2)
        target = target[k]

    final_key = keys[-1]
    if final_key not in target:
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=2)

    current = target[final_key]
    if isinstance(current, bool):
        coerced = value.lower() in ("true", "1", "yes")
    elif isinstance(current, int):
        try:
            coerced = int(value)
        except ValueError:
            error(f"Expected integer for {key}, got: {value}")
            raise typer.Exit(code=2) from None
    elif isinstance(current, list):
        coerced = _parse_list(value)
    elif current is None and value.lower() in ("null", "none", ""):
        coerced = None
    else:
        coerced = value

    target[final_key] = coerced

    try:
        new_config = GlobalConfig.model_validate(data)
    except ValueError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=2) from None

    save_global_config(new_config)
    success(f"Set {key} = {coerced}")


def _parse_list(value: str) -> list[str]:
    """Accept ``'["a", "b"]'`` or ``'a,b'``."""
    if value.strip().startswith("["):
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            return [str(item) for item in parsed]
    return [item.strip() for item in value.split(",") if item.strip()]


@config_app.command("reset")
def config_reset(
    ctx: typer.Context,
) -> None:
    """Reset configuration to defaults.

    Asks for confirmation unless ``--force`` is active.

    Example::

        buildmanager --force config reset
    """
    from buildmanager.config import save_global_config
    from buildmanager.models import GlobalConfig

    force = ctx.obj.get("force", False) if ctx.obj else False
    if not force:
        confirmed = typer.confirm("Reset all config to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
