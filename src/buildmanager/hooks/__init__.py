"""Build hooks -- discovery, loading, and lifecycle callbacks.

Hooks replace the editor's pre-build and post-build processors and its
active-target listener. Third-party packages register hooks as entry points
in the ``buildmanager.hooks`` group; :class:`HookManager` loads them and the
:class:`HookRunner` calls them around every build.

Key classes:

* :class:`BuildHook` -- Abstract base class that all hooks extend.
* :class:`HookManager` -- Discovers, loads, and manages hook lifecycle.
* :class:`HookRunner` -- Executes hook callbacks in order.
* :class:`HookContext` -- Mutable dataclass carrying build state through the
  hook chain.
* :class:`BuildLogHook` -- Built-in hook reporting builds on stderr.
"""

from buildmanager.hooks.base import BuildHook
from buildmanager.hooks.log import BuildLogHook
from buildmanager.hooks.manager import HookManager, create_default_manager
from buildmanager.hooks.runner import HookContext, HookRunner

__all__ = [
    "BuildHook",
    "BuildLogHook",
    "HookContext",
    "HookManager",
    "HookRunner",
    "create_default_manager",
]
