"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~buildmanager.exceptions.BuildManagerError` subclass.
CI scripts can inspect the exit code to determine the failure class without
parsing stderr.

Example::

    $ buildmanager player --target WindowsX64
    $ echo $?
    5   # EXIT_BUILD_FAILURE -- the editor reported a failed build
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_PROJECT_ERROR = 4
"""The Unity project settings could not be found or parsed."""

EXIT_BUILD_FAILURE = 5
"""The build executor failed or reported an unsuccessful build."""

EXIT_HOOK_ERROR = 10
"""A build hook failed to load, initialise, or execute."""
