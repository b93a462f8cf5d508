"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to one failure class of the loading layer and is
referenced by the corresponding :class:`~eventloader.exceptions.EventLoaderError`
subclass.  Shell wrappers can tell "sign in again" apart from "try again
later" without parsing stderr.

Example::

    $ eventloader load g1
    $ echo $?
    3   # EXIT_NOT_RECOVERABLE -- the session was rejected
"""

EXIT_SUCCESS = 0
"""The event was loaded (from the remote API or from the cache)."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_NOT_RECOVERABLE = 3
"""The remote API rejected the session (HTTP 401). Re-authentication is required."""

EXIT_ABSENT = 4
"""The remote fetch failed and the cache holds nothing usable for the id."""

EXIT_RECOVERABLE = 5
"""A transient failure (network, unexpected status, malformed payload)."""
