"""Built-in CLI sub-commands for jsonapi-remote.

* :mod:`~jsonapi_remote.commands.requests` -- ``get``, ``post``, ``put``,
  ``patch``, ``delete`` and ``upload``, registered directly on the root app.
* :mod:`~jsonapi_remote.commands.config` -- the ``config`` group for viewing
  and modifying the config file.
"""
