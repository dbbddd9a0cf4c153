"""Built-in hook reporting build start, completion and target switches."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from buildmanager.hooks.base import BuildHook
from buildmanager.hooks.runner import HookContext
from buildmanager.models import PlatformTarget
from buildmanager.output import error as report_error, info, success

logger = logging.getLogger(__name__)

BUILD_LOG_HOOK_NAME = "build-log"

_TIMESTAMP_FORMAT = "%A, %B %d, %Y %I:%M:%S %p"


def _label(ctx: HookContext) -> str:
    return "Asset bundle build" if ctx.kind == "asset_bundles" else "Build"


def format_timestamp(moment: Optional[datetime]) -> str:
    """Render *moment* as a long date and time, e.g. ``Monday, November 27, 2017 02:05:09 PM``."""
    return (moment or datetime.now()).strftime(_TIMESTAMP_FORMAT)


class BuildLogHook(BuildHook):
    """Reports every build on stderr and in the ``buildmanager`` log."""

    @property
    def name(self) -> str:
        return BUILD_LOG_HOOK_NAME

    @property
    def description(self) -> str:
        return "Report build start, completion and target switches"

    def on_pre_build(self, ctx: HookContext) -> None:
        logger.info("Build started: target=%s path=%s", ctx.target.name, ctx.output_path)
        info(
            f"{_label(ctx)} started for {ctx.target.name} at {format_timestamp(ctx.started_at)}.\n"
            f'Build location: "{ctx.output_path}".'
        )

    def on_post_build(self, ctx: HookContext) -> None:
        if ctx.result is not None and not ctx.result.success:
            logger.info("Build failed: target=%s path=%s", ctx.target.name, ctx.output_path)
            report_error(
                f"{_label(ctx)} failed for {ctx.target.name} at {format_timestamp(ctx.finished_at)}.\n"
                f'Build location: "{ctx.output_path}".'
            )
            return
        logger.info("Build completed: target=%s path=%s", ctx.target.name, ctx.output_path)
        success(
            f"{_label(ctx)} completed for {ctx.target.name} at {format_timestamp(ctx.finished_at)}.\n"
            f'Build location: "{ctx.output_path}".'
        )

    def on_target_changed(self, previous: Optional[PlatformTarget], new: PlatformTarget) -> None:
        old = previous.name if previous is not None else "(none)"
        logger.info("Build target switched: %s -> %s", old, new.name)
        info(f"Build target switched from {old} to {new.name}.")

    def on_error(self, error: Exception, ctx: HookContext) -> None:
        logger.error("Build for %s raised: %s", ctx.target.name, error)
