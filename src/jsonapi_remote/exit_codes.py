"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

The CLI maps every :data:`~jsonapi_remote.outcomes.OutcomeError` to one of
these constants (see :func:`~jsonapi_remote.messages.exit_code_for`), so
shell scripts can branch on the failure class without parsing stderr.

Example::

    $ jsonapi-remote post https://api.example.com/users --body '{...}'
    $ echo $?
    8   # EXIT_DOCUMENT_ERROR -- the server answered 422 with validation errors
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred (including unexpected HTTP statuses)."""

EXIT_INVALID_USAGE = 2
"""Invalid arguments, or a URL the transport refused to send."""

EXIT_AUTH_FAILURE = 3
"""The server answered 401 or 403."""

EXIT_NOT_FOUND = 4
"""The server answered 404."""

EXIT_SERVER_ERROR = 5
"""The server answered with a 5xx status."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_BAD_BODY = 7
"""The response body could not be decoded."""

EXIT_DOCUMENT_ERROR = 8
"""The server returned a JSON:API error document."""

EXIT_CUSTOM_ERROR = 9
"""A custom decoder refused the response payload."""
