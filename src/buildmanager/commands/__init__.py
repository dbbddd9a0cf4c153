"""Built-in CLI sub-commands for buildmanager.

Each module exports either plain callback functions registered directly on
the root app (single commands like ``player``) or a :class:`typer.Typer`
sub-application (command groups like ``config``):

* :mod:`~buildmanager.commands.build` -- ``player``, ``bundles``, ``window``
  and ``resolve``.
* :mod:`~buildmanager.commands.targets` -- ``targets`` and ``switch-target``.
* :mod:`~buildmanager.commands.config` -- view and modify global settings.
* :mod:`~buildmanager.commands.common` -- helpers shared by the commands.
"""
