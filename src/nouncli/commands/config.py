"""Config commands -- view and modify the application's settings file.

Backs the ``config`` head token::

    shop config set output.format json
    shop config get output.format
    shop config list
    shop config delete output.format
    shop config path
    shop config reset

The credential is never shown in clear text and cannot be changed here;
``login``/``logout`` own it.
"""

from __future__ import annotations

import json
from typing import Any, Callable

from nouncli.config import CREDENTIAL_KEY, MISSING, ConfigStore, mask_secret
from nouncli.exceptions import InvalidUsageError, NotFoundError
from nouncli.models import CommandResult
from nouncli.suggest import suggest

CONFIG_SUBCOMMANDS: tuple[str, ...] = ("get", "set", "delete", "path", "reset", "list")


def _display(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value, indent=2)
    if isinstance(value, bool) or value is None:
        return json.dumps(value)
    return str(value)


def config_get(args: list[str], store: ConfigStore) -> CommandResult:
    if not args:
        config = store.load()
        if CREDENTIAL_KEY in config:
            config[CREDENTIAL_KEY] = mask_secret(config[CREDENTIAL_KEY])
        return CommandResult.ok(json.dumps(config, indent=2), data=config)

    key = args[0]
    value = store.get(key)
    if value is MISSING:
        raise NotFoundError(f"Configuration key not found: {key}")
    if key == CREDENTIAL_KEY:
        value = mask_secret(value)
    return CommandResult.ok(_display(value), data=value)


def config_set(args: list[str], store: ConfigStore) -> CommandResult:
    """Set a dotted key. Existing bool/int values keep their type."""
    if len(args) < 2:
        raise InvalidUsageError(
            "Usage: config set <key> <value>", usage="config set <key> <value>"
        )
    key, value = args[0], args[1]
    stored = store.set(key, value)
    text = f"Set {key} = {_display(stored)}"
    return CommandResult.ok(text, message=text)


def config_delete(args: list[str], store: ConfigStore) -> CommandResult:
    if not args:
        raise InvalidUsageError(
            "Usage: config delete <key>", usage="config delete <key>"
        )
    key = args[0]
    if not store.delete(key):
        raise NotFoundError(f"Configuration key not found: {key}")
    return CommandResult.ok(f"Deleted {key}", message=f"Deleted {key}")


def config_list(args: list[str], store: ConfigStore) -> CommandResult:
    return CommandResult.ok("\n".join(store.list_lines()))


def config_path(args: list[str], store: ConfigStore) -> CommandResult:
    return CommandResult.ok(str(store.path))


def config_reset(args: list[str], store: ConfigStore) -> CommandResult:
    store.reset()
    return CommandResult.ok(
        "Configuration reset to defaults", message="Configuration reset to defaults"
    )


_HANDLERS: dict[str, Callable[[list[str], ConfigStore], CommandResult]] = {
    "get": config_get,
    "set": config_set,
    "delete": config_delete,
    "list": config_list,
    "path": config_path,
    "reset": config_reset,
}


def run_config(args: list[str], store: ConfigStore) -> CommandResult:
    """Dispatch ``config <sub> ...`` to its handler.

    Raises:
        InvalidUsageError: When the sub-command is missing or unknown.
    """
    if not args:
        raise InvalidUsageError(
            "Config subcommand required: " + ", ".join(CONFIG_SUBCOMMANDS),
            usage="config <" + "|".join(CONFIG_SUBCOMMANDS) + ">",
        )

    sub, rest = args[0], args[1:]
    handler = _HANDLERS.get(sub)
    if handler is None:
        similar = suggest(sub, list(CONFIG_SUBCOMMANDS))
        raise InvalidUsageError(
            f"Unknown config subcommand: {sub}",
            suggestion=f"Did you mean '{similar}'?" if similar else None,
        )
    return handler(rest, store)
