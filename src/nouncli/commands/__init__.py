"""Handlers behind the dispatcher's head tokens.

* :mod:`~nouncli.commands.auth` -- ``login`` / ``logout``.
* :mod:`~nouncli.commands.config` -- ``config get|set|delete|list|path|reset``.
* :mod:`~nouncli.commands.resources` -- per-resource CRUD and verb commands.

Handlers return a :class:`~nouncli.models.CommandResult` on success and
raise :class:`~nouncli.exceptions.NouncliError` subclasses on failure; the
runner converts those at its single catch point.
"""
