"""Hook manager -- discovery, loading, and lifecycle management.

This module contains :class:`HookManager`, the central coordinator for build
hooks. It discovers hooks registered as Python entry points, applies
enable/disable filtering from the global configuration, and provides a
lazily-cached :class:`~buildmanager.hooks.runner.HookRunner`.

Third-party packages register hooks by declaring an entry point under the
``buildmanager.hooks`` group in their ``pyproject.toml``::

    [project.entry-points."buildmanager.hooks"]
    notify = "my_package.hooks:NotifyHook"
"""

from __future__ import annotations

import importlib.metadata
import logging
from typing import Optional

from buildmanager.exceptions import HookError
from buildmanager.hooks.base import BuildHook
from buildmanager.hooks.runner import HookRunner
from buildmanager.models import GlobalConfig

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "buildmanager.hooks"
"""The entry-point group name used for hook discovery."""


def _is_allowed(name: str, config: GlobalConfig) -> bool:
    """Apply the ``hooks.enabled`` allowlist and ``hooks.disabled`` blocklist."""
    if config.hooks.enabled and name not in config.hooks.enabled:
        return False
    return name not in config.hooks.disabled


class HookManager:
    """Discovers, loads, and manages the lifecycle of build hooks.

    The *enabled* and *disabled* lists in
    :class:`~buildmanager.models.HooksConfig` act as an explicit
    allowlist/blocklist. When *enabled* is non-empty only those hooks are
    loaded; otherwise all discovered hooks not in *disabled* are loaded.

    Example::

        manager = HookManager()
        manager.discover(global_config)
        runner = manager.get_hook_runner()
    """

    def __init__(self) -> None:
        self._hooks: dict[str, BuildHook] = {}
        self._hook_runner: Optional[HookRunner] = None

    def discover(self, config: GlobalConfig) -> list[str]:
        """Load every allowed hook registered in the ``buildmanager.hooks`` group.

        Hooks already loaded under the same name are skipped, so built-in
        hooks registered both directly and as entry points load once.

        Returns:
            Names of the hooks loaded by this call. Hooks that fail to load
            are logged as warnings and skipped.
        """
        loaded_names: list[str] = []
        for ep in importlib.metadata.entry_points(group=ENTRY_POINT_GROUP):
            name = ep.name
            if name in self._hooks:
                continue
            if not _is_allowed(name, config):
                logger.debug("Hook '%s' is filtered out by config, skipping", name)
                continue
            try:
                hook_cls = ep.load()
                self.load_hook(name, hook_cls(), config)
                loaded_names.append(name)
            except Exception as exc:
                logger.warning("Failed to load hook '%s': %s", name, exc)
        return loaded_names

    def load_hook(self, name: str, hook: BuildHook, config: GlobalConfig) -> None:
        """Initialise and register a single hook instance.

        Raises:
            HookError: If a hook with the same *name* is already loaded.
        """
        if name in self._hooks:
            raise HookError(f"Hook '{name}' is already loaded")

        hook.on_init(config)
        self._hooks[name] = hook
        self._hook_runner = None
        logger.debug("Loaded hook '%s'", name)

    def get_hook(self, name: str) -> BuildHook:
        """Retrieve a loaded hook by its registered name.

        Raises:
            HookError: If no hook with the given *name* is loaded.
        """
        try:
            return self._hooks[name]
        except KeyError:
            raise HookError(f"Hook '{name}' is not loaded") from None

    def list_hooks(self) -> list[dict[str, str]]:
        """List loaded hooks as ``{"name", "order", "description"}`` dicts."""
        return [
            {
                "name": name,
                "order": str(hook.order),
                "description": hook.description,
            }
            for name, hook in self._hooks.items()
        ]

    def get_hook_runner(self) -> HookRunner:
        """Return a :class:`HookRunner` over all loaded hooks, rebuilt after loads."""
        if self._hook_runner is None:
            self._hook_runner = HookRunner(list(self._hooks.values()))
        return self._hook_runner

    def cleanup(self) -> None:
        """Call ``cleanup`` on every hook and reset internal state.

        One hook's failure is logged and does not stop the others.
        """
        for name, hook in self._hooks.items():
            try:
                hook.cleanup()
            except Exception as exc:
                logger.warning("Error cleaning up hook '%s': %s", name, exc)
        self._hooks.clear()
        self._hook_runner = None


def create_default_manager(config: GlobalConfig, discover: bool = True) -> HookManager:
    """Create a :class:`HookManager` with the built-in ``build-log`` hook loaded.

    Args:
        config: Global configuration carrying the hook allow/deny lists.
        discover: Also load third-party hooks from entry points.
    """
    from buildmanager.hooks.log import BUILD_LOG_HOOK_NAME, BuildLogHook

    manager = HookManager()
    if _is_allowed(BUILD_LOG_HOOK_NAME, config):
        manager.load_hook(BUILD_LOG_HOOK_NAME, BuildLogHook(), config)
    if discover:
        manager.discover(config)
    return manager
