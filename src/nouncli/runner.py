"""Command router -- interpret an argument vector against the schema.

This is the core of nouncli. :func:`create_cli_runner` parses the nouns and
verbs of a :class:`~nouncli.models.CLIConfig` once into a command model:

* ``resources_by_command`` -- resource command name -> descriptor;
* one command table per resource -- sub-command name -> tagged
  :class:`~nouncli.models.SubCommand`.

:meth:`CLIRunner.execute` then classifies the head token and delegates:

=====================  ===================================================
Head token             Result
=====================  ===================================================
none, ``--help/-h``    root help
``--version/-v``       the version string
``help [resource]``    root or resource help
``login`` / ``logout`` :mod:`nouncli.commands.auth`
``config <sub>``       :mod:`nouncli.commands.config`
``completion <shell>`` completion placeholder
resource command       resource sub-dispatch
anything else          unknown-command failure with a typo suggestion
=====================  ===================================================

For resource commands, arguments are validated before authentication is
checked, so an argument error is reported identically whether or not the
caller is logged in.

The runner holds no per-call state: everything a call needs travels in
its :class:`~nouncli.models.ExecuteOptions`. Two calls may run
concurrently.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Awaitable, Callable, Optional, Sequence

from nouncli.commands import auth as auth_commands
from nouncli.commands.config import run_config
from nouncli.commands.resources import (
    build_command_table,
    parse_invocation,
    run_invocation,
)
from nouncli.config import ConfigStore, default_config_dir
from nouncli.exceptions import AuthError, InvalidUsageError, NouncliError
from nouncli.help import render_main_help, render_resource_help, render_subcommand_help
from nouncli.models import (
    CLIConfig,
    CommandResult,
    ExecuteOptions,
    ResourceDescriptor,
    SubCommand,
)
from nouncli.parser.extractor import parse_all_resources
from nouncli.suggest import suggest

logger = logging.getLogger(__name__)

BUILTIN_COMMANDS: tuple[str, ...] = ("login", "logout", "config", "completion", "help")
COMPLETION_SHELLS: tuple[str, ...] = ("bash", "zsh", "fish", "powershell")
HELP_FLAGS = ("--help", "-h")
VERSION_FLAGS = ("--version", "-v")

NOT_AUTHENTICATED = "Not authenticated. Please run login first."

_Handler = Callable[[list[str], ExecuteOptions], Awaitable[CommandResult]]


def _did_you_mean(name: Optional[str]) -> Optional[str]:
    return f"Did you mean '{name}'?" if name else None


class CLIRunner:
    """Dispatch argument vectors for one application definition.

    Args:
        config: The application definition. Its nouns and verbs are parsed
            immediately; a malformed schema raises
            :class:`~nouncli.exceptions.SchemaError` here rather than on
            every call.

    Example::

        runner = CLIRunner(CLIConfig(nouns={"Customer": {"name": "string"}}))
        result = await runner.execute(["customer", "get", "cus_123"])
    """

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._resources: list[ResourceDescriptor] = parse_all_resources(
            config.nouns, config.verbs
        )
        self.resources_by_command: dict[str, ResourceDescriptor] = {
            r.command_name: r for r in self._resources
        }
        self.command_tables: dict[str, dict[str, SubCommand]] = {
            r.command_name: build_command_table(r) for r in self._resources
        }
        self._builtins: dict[str, _Handler] = {
            "login": self._login,
            "logout": self._logout,
            "config": self._config_command,
            "completion": self._completion,
            "help": self._help,
        }
        logger.debug(
            "Built command model for %s: %s",
            config.cli_name,
            ", ".join(self.resources_by_command) or "(no resources)",
        )

    @property
    def config(self) -> CLIConfig:
        return self._config

    @property
    def resources(self) -> list[ResourceDescriptor]:
        return list(self._resources)

    @property
    def known_commands(self) -> list[str]:
        """Built-in commands followed by resource commands, in schema order."""
        return [*BUILTIN_COMMANDS, *self.resources_by_command]

    # ------------------------------------------------------------------ #
    # Entry point
    # ------------------------------------------------------------------ #

    async def execute(
        self,
        args: Sequence[str],
        options: Optional[ExecuteOptions] = None,
    ) -> CommandResult:
        """Run one command and return its result.

        Never raises for usage, auth, transport or config failures; they
        come back as a :class:`~nouncli.models.CommandResult` with
        ``success=False`` and the exit code of the error class.
        """
        options = options or ExecuteOptions()
        argv = list(args)
        try:
            return await self._dispatch(argv, options)
        except NouncliError as exc:
            logger.debug("Command %r failed: %s", argv, exc)
            return CommandResult.from_error(exc)

    async def _dispatch(self, argv: list[str], options: ExecuteOptions) -> CommandResult:
        if not argv or argv[0] in HELP_FLAGS:
            return CommandResult.ok(render_main_help(self._config, self._resources))

        head, rest = argv[0], argv[1:]
        if head in VERSION_FLAGS:
            return CommandResult.ok(self._config.version)

        handler = self._builtins.get(head)
        if handler is not None:
            return await handler(rest, options)

        resource = self.resources_by_command.get(head.lower())
        if resource is not None:
            return await self._resource_command(resource, rest, options)

        raise InvalidUsageError(
            f"Unknown command: {head}",
            suggestion=_did_you_mean(suggest(head, self.known_commands)),
        )

    # ------------------------------------------------------------------ #
    # Per-call context
    # ------------------------------------------------------------------ #

    def _store(self, options: ExecuteOptions) -> ConfigStore:
        config_dir = options.config_dir or default_config_dir(self._config.cli_name)
        return ConfigStore(Path(config_dir))

    def _is_authenticated(self, options: ExecuteOptions) -> bool:
        """Resolve the auth state: explicit flag, then test mode, then stored credentials."""
        if options.authenticated is not None:
            return options.authenticated
        test_mode = options.test_mode
        if test_mode is None:
            test_mode = options.transport is not None
        if test_mode:
            return True
        return self._store(options).has_credentials()

    # ------------------------------------------------------------------ #
    # Built-in commands
    # ------------------------------------------------------------------ #

    async def _help(self, rest: list[str], options: ExecuteOptions) -> CommandResult:
        if not rest:
            return CommandResult.ok(render_main_help(self._config, self._resources))
        resource = self.resources_by_command.get(rest[0].lower())
        if resource is None:
            raise InvalidUsageError(
                f"Unknown command: {rest[0]}",
                suggestion=_did_you_mean(
                    suggest(rest[0], list(self.resources_by_command))
                ),
            )
        return CommandResult.ok(render_resource_help(self._config, resource))

    async def _login(self, rest: list[str], options: ExecuteOptions) -> CommandResult:
        return await auth_commands.login(
            rest, self._store(options), options.validate_credentials
        )

    async def _logout(self, rest: list[str], options: ExecuteOptions) -> CommandResult:
        return auth_commands.logout(self._store(options))

    async def _config_command(
        self, rest: list[str], options: ExecuteOptions
    ) -> CommandResult:
        return run_config(rest, self._store(options))

    async def _completion(self, rest: list[str], options: ExecuteOptions) -> CommandResult:
        shells = ", ".join(COMPLETION_SHELLS)
        if not rest:
            raise InvalidUsageError(
                f"Shell type required: {shells}", usage="completion <shell>"
            )
        shell = rest[0].lower()
        if shell not in COMPLETION_SHELLS:
            raise InvalidUsageError(
                f"Unsupported shell: {rest[0]}. Supported shells: {shells}",
                suggestion=_did_you_mean(suggest(shell, list(COMPLETION_SHELLS))),
            )
        return CommandResult.ok(f"# Completion script for {shell}")

    # ------------------------------------------------------------------ #
    # Resource commands
    # ------------------------------------------------------------------ #

    async def _resource_command(
        self,
        resource: ResourceDescriptor,
        rest: list[str],
        options: ExecuteOptions,
    ) -> CommandResult:
        table = self.command_tables[resource.command_name]

        if not rest:
            return CommandResult.ok(render_resource_help(self._config, resource))

        if any(token in HELP_FLAGS for token in rest):
            sub_name = next((t for t in rest if not t.startswith("-")), None)
            if sub_name is None:
                return CommandResult.ok(render_resource_help(self._config, resource))
            if sub_name not in table:
                raise self._unknown_subcommand(resource, sub_name)
            return CommandResult.ok(
                render_subcommand_help(self._config, resource, sub_name)
            )

        sub = table.get(rest[0])
        if sub is None:
            raise self._unknown_subcommand(resource, rest[0])

        invocation = parse_invocation(resource, sub, rest[1:])

        if not self._is_authenticated(options):
            raise AuthError(NOT_AUTHENTICATED)

        logger.debug("Dispatching %s %s", resource.command_name, sub.name)
        return await run_invocation(resource, invocation, options.transport)

    def _unknown_subcommand(
        self, resource: ResourceDescriptor, name: str
    ) -> InvalidUsageError:
        valid = list(self.command_tables[resource.command_name])
        return InvalidUsageError(
            f"Unknown verb or command: {name}. Valid commands: {', '.join(valid)}",
            suggestion=_did_you_mean(suggest(name, valid)),
        )


def create_cli_runner(config: CLIConfig) -> CLIRunner:
    """Build a :class:`CLIRunner` for *config*.

    Raises:
        SchemaError: When a noun's schema cannot be parsed.
    """
    return CLIRunner(config)
