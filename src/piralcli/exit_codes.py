"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~piralcli.exceptions.PiralCliError` subclass.
CI scripts can inspect the exit code to determine the failure class without
parsing stderr.

Example::

    $ pilet validate
    $ echo $?
    5   # EXIT_VALIDATION_FAILURE -- the pilet has errors
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or an unknown command name."""

EXIT_NOT_FOUND = 4
"""A required file (entry module, package.json, tarball) was not found."""

EXIT_VALIDATION_FAILURE = 5
"""A ``validate`` command found errors in the Piral instance or pilet."""

EXIT_BACKEND_ERROR = 10
"""A backend failed to load, is missing, or failed while executing."""

EXIT_INTERRUPTED = 130
"""The user cancelled the command with Ctrl-C."""
