"""Hook context dataclass and runner for the build lifecycle.

* :class:`HookContext` -- A mutable dataclass that carries build state
  through the hook chain. Fields are filled in as the build advances.
* :class:`HookRunner` -- Calls ``on_pre_build``, ``on_post_build``,
  ``on_target_changed`` and ``on_error`` across all loaded hooks in order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from buildmanager.exceptions import BuildManagerError, HookError
from buildmanager.hooks.base import BuildHook
from buildmanager.models import BuildResult, PlatformTarget

logger = logging.getLogger(__name__)


@dataclass
class HookContext:
    """Mutable context threaded through the hook chain for one build.

    Attributes:
        target: Platform being built.
        output_path: Player artifact path or asset bundle directory.
        kind: ``"player"`` or ``"asset_bundles"``.
        started_at: Timestamp taken just before the pre-build hooks run.
        finished_at: Timestamp taken when the executor returned or raised.
        result: Executor result, set before the post-build hooks run.
        error: Exception raised by the executor, if any.
    """

    target: PlatformTarget
    output_path: str
    kind: str = "player"
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    result: Optional[BuildResult] = None
    error: Optional[Exception] = None


class HookRunner:
    """Executes hook callbacks across loaded hooks in ascending ``order``.

    The runner holds an immutable snapshot of the hook list taken at
    creation time. Obtain a new runner from the manager after loading
    more hooks.
    """

    def __init__(self, hooks: list[BuildHook]) -> None:
        self._hooks = sorted(hooks, key=lambda hook: hook.order)

    @property
    def hooks(self) -> list[BuildHook]:
        return list(self._hooks)

    def run_pre_build(self, ctx: HookContext) -> HookContext:
        """Call ``on_pre_build`` on every hook.

        Raises:
            HookError: If a hook raises. The build must not start.
        """
        for hook in self._hooks:
            self._call(hook, "on_pre_build", hook.on_pre_build, ctx)
        return ctx

    def run_post_build(self, ctx: HookContext) -> HookContext:
        """Call ``on_post_build`` on every hook.

        Raises:
            HookError: If a hook raises.
        """
        for hook in self._hooks:
            self._call(hook, "on_post_build", hook.on_post_build, ctx)
        return ctx

    def run_target_changed(self, previous: Optional[PlatformTarget], new: PlatformTarget) -> None:
        """Call ``on_target_changed`` on every hook.

        Raises:
            HookError: If a hook raises.
        """
        for hook in self._hooks:
            self._call(hook, "on_target_changed", hook.on_target_changed, previous, new)

    def run_error(self, error: Exception, ctx: HookContext) -> None:
        """Call ``on_error`` on every hook, swallowing failures of the handlers."""
        for hook in self._hooks:
            try:
                hook.on_error(error, ctx)
            except Exception as exc:
                logger.debug("Hook '%s' raised in on_error: %s", hook.name, exc)

    @staticmethod
    def _call(hook: BuildHook, stage: str, func, *args) -> None:  # noqa: ANN001
        try:
            func(*args)
        except BuildManagerError:
            raise
        except Exception as exc:
            raise HookError(f"Hook '{hook.name}' failed in {stage}: {exc}") from exc
