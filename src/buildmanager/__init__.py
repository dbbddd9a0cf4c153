"""buildmanager -- Build Unity players and asset bundles from the command line.

This package resolves everything a player build needs for a chosen platform
(output location, application identifier, scene list) from the project's
settings files, then hands the request to the Unity editor running in batch
mode. Pre-build and post-build hooks fire around every build.

Typical workflow::

    buildmanager switch-target WindowsX64   # pick the active platform
    buildmanager resolve                    # preview the build request
    buildmanager player                     # build the player
    buildmanager bundles                    # build asset bundles

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models shared across the entire package.
    resolver: Pure build-configuration resolution functions.
    project: Readers for Unity project settings files.
    config: XDG-aware configuration and precedence resolution.
    pipeline: Build orchestration around the executor and hooks.
    executor: Unity batch-mode build executor.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
