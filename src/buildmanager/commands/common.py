"""Helpers shared by the command modules."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import typer

from buildmanager.exceptions import BuildManagerError
from buildmanager.models import BuildResult, GlobalConfig
from buildmanager.output import error, format_response


@contextmanager
def exit_on_error() -> Iterator[None]:
    """Print a :class:`BuildManagerError` and exit with its code."""
    try:
        yield
    except BuildManagerError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def project_root(ctx: typer.Context) -> Path:
    """The project directory chosen with ``--project`` (default: cwd)."""
    root = ctx.obj.get("project") if ctx.obj else None
    return Path(root) if root else Path.cwd()


def is_dry_run(ctx: typer.Context) -> bool:
    return bool(ctx.obj.get("dry_run", False)) if ctx.obj else False


def make_executor(
    ctx: typer.Context,
    unity: Optional[str],
    global_cfg: GlobalConfig,
):
    """Build a :class:`~buildmanager.executor.UnityBatchExecutor` from config."""
    from buildmanager.config import get_logs_dir, resolve_unity_path
    from buildmanager.executor import UnityBatchExecutor

    root = project_root(ctx)
    return UnityBatchExecutor(
        unity_path=resolve_unity_path(unity, root, global_cfg),
        project_root=root,
        log_dir=get_logs_dir(),
        timeout=global_cfg.build_timeout,
        show_built_player=global_cfg.show_built_player,
    )


def report_result(result: BuildResult) -> None:
    """Print a build result to stdout."""
    format_response(
        {
            "target": result.target.name,
            "success": result.success,
            "output_path": result.output_path,
            "duration_seconds": round(result.duration, 1),
            "log_file": result.log_file or "",
        }
    )
