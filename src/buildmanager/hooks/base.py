"""Abstract base class for build hooks.

Every hook must subclass :class:`BuildHook` and implement the :attr:`name`
property. The lifecycle callbacks (``on_init``, ``on_pre_build``,
``on_post_build``, ``on_target_changed``, ``on_error``, ``cleanup``) are
optional -- default implementations are no-ops so hooks only override what
they need.

Hooks are registered as entry points in the ``buildmanager.hooks`` group and
discovered at runtime by :class:`~buildmanager.hooks.manager.HookManager`.

Example:
    Minimal hook implementation::

        class NotifyHook(BuildHook):
            @property
            def name(self) -> str:
                return "notify"

            def on_post_build(self, ctx):
                send_chat_message(f"{ctx.target.name} build finished")
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from buildmanager.models import GlobalConfig, PlatformTarget

if TYPE_CHECKING:
    from buildmanager.hooks.runner import HookContext


class BuildHook(ABC):
    """Base class for all build hooks.

    The hook lifecycle is:

    1. Instantiation -- the :class:`HookManager` calls the no-arg constructor.
    2. :meth:`on_init` -- called once with the global configuration.
    3. Build callbacks -- called around every build the pipeline runs.
    4. :meth:`cleanup` -- called once during shutdown.

    Hooks run in ascending :attr:`order`; hooks with equal order keep their
    registration order.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the unique hook name used for discovery and logging."""
        ...

    @property
    def order(self) -> int:
        """Sort key among loaded hooks. Defaults to ``0``."""
        return 0

    @property
    def description(self) -> str:
        return ""

    def on_init(self, config: GlobalConfig) -> None:
        """Called once when the hook is loaded by the :class:`HookManager`."""

    def on_pre_build(self, ctx: HookContext) -> None:
        """Called immediately before the executor starts a build.

        ``ctx.target``, ``ctx.output_path`` and ``ctx.started_at`` are set.
        """

    def on_post_build(self, ctx: HookContext) -> None:
        """Called immediately after the executor returns.

        ``ctx.result`` and ``ctx.finished_at`` are set in addition to the
        pre-build fields. The build may have failed; check
        ``ctx.result.success``.
        """

    def on_target_changed(self, previous: PlatformTarget | None, new: PlatformTarget) -> None:
        """Called when the project's active build target is switched.

        Args:
            previous: The target active before the switch, or ``None`` if
                none was selected.
            new: The newly active target.
        """

    def on_error(self, error: Exception, ctx: HookContext) -> None:
        """Called when the executor raises instead of returning a result.

        Exceptions raised inside this method are swallowed by the
        :class:`~buildmanager.hooks.runner.HookRunner` so they cannot mask the
        original failure.
        """

    def cleanup(self) -> None:
        """Called once during shutdown to release hook resources."""
