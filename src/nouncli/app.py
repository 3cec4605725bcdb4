"""Typer console entry point for nouncli.

``nouncli`` turns an application definition file into a working CLI without
generating code::

    nouncli --app shop.yaml customer list --limit 10
    NOUNCLI_APP=shop.yaml nouncli customer get cus_123 -o yaml

The options below are consumed by the entry point itself; every other token
is handed unchanged to :meth:`~nouncli.runner.CLIRunner.execute`.

When a base URL is known (``--base-url``, ``<CLI_NAME>_BASE_URL``, the
stored ``baseUrl`` setting, or ``base_url`` in the definition, in that
order) an :class:`~nouncli.client.transport.HttpTransport` is injected and
the call counts as authenticated exactly when an API key was resolved.
Without one the dispatcher runs in dry mode.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``.
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Optional

import typer

from nouncli import __version__
from nouncli.exit_codes import EXIT_INVALID_USAGE
from nouncli.models import CLIConfig, ExecuteOptions

logger = logging.getLogger(__name__)

APP_ENV_VAR = "NOUNCLI_APP"

app = typer.Typer(
    name="nouncli",
    help="Run a CLI straight from a nouns/verbs application definition.",
    add_completion=False,
    rich_markup_mode="rich",
)


def env_prefix(cli_name: str) -> str:
    """Environment variable prefix of a CLI: ``my-shop`` -> ``MY_SHOP``."""
    return cli_name.upper().replace("-", "_")


def resolve_api_key(definition: CLIConfig, stored: Optional[str]) -> Optional[str]:
    """Return the API key from the environment, falling back to *stored*."""
    env_var = f"{env_prefix(definition.cli_name)}_API_KEY"
    if definition.auth is not None and definition.auth.env_var:
        env_var = definition.auth.env_var
    return os.environ.get(env_var) or stored


def resolve_base_url(
    definition: CLIConfig,
    stored: Optional[str],
    flag: Optional[str] = None,
) -> Optional[str]:
    """Pick the base URL: flag, then ``<CLI_NAME>_BASE_URL``, then *stored*, then the definition."""
    env_value = os.environ.get(f"{env_prefix(definition.cli_name)}_BASE_URL")
    return flag or env_value or stored or definition.base_url


def build_execute_options(
    definition: CLIConfig,
    config_dir: Optional[Path] = None,
    base_url: Optional[str] = None,
) -> ExecuteOptions:
    """Assemble the per-call context for a console invocation."""
    from nouncli.client.transport import HttpTransport
    from nouncli.config import ConfigStore, default_config_dir

    store = ConfigStore(config_dir or default_config_dir(definition.cli_name))
    settings = store.load()

    stored_url = settings.get("baseUrl")
    url = resolve_base_url(
        definition, stored_url if isinstance(stored_url, str) else None, base_url
    )
    if url is None:
        logger.debug("No base URL configured; running in dry mode")
        return ExecuteOptions(config_dir=store.config_dir)

    api_key = resolve_api_key(definition, settings.get("apiKey"))
    header_name = definition.auth.header_name if definition.auth is not None else None
    logger.debug("Using %s (credential %s)", url, "set" if api_key else "missing")
    return ExecuteOptions(
        config_dir=store.config_dir,
        transport=HttpTransport(url, api_key=api_key, header_name=header_name),
        authenticated=api_key is not None,
    )


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="[%(name)s] %(levelname)s: %(message)s",
            stream=sys.stderr,
        )


@app.command(
    context_settings={
        "allow_extra_args": True,
        "ignore_unknown_options": True,
        "help_option_names": [],
    }
)
def run(
    ctx: typer.Context,
    app_file: Optional[Path] = typer.Option(
        None,
        "--app",
        "-a",
        envvar=APP_ENV_VAR,
        help="Application definition (YAML or JSON).",
    ),
    config_dir: Optional[Path] = typer.Option(
        None, "--config-dir", help="Config directory (default: ~/.<cli_name>)."
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="API base URL override."
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
) -> None:
    """Dispatch the remaining arguments against the application definition.

    Raises:
        typer.Exit: Always, with the result's exit code.
    """
    from nouncli.exceptions import NouncliError
    from nouncli.output import OutputManager, set_output
    from nouncli.parser.loader import load_definition
    from nouncli.runner import create_cli_runner

    _configure_logging(verbose)
    output = OutputManager(no_color=no_color, verbose=verbose)
    set_output(output)

    if app_file is None:
        output.error("No application definition given.")
        output.suggest(f"Pass --app <file> or set {APP_ENV_VAR}.")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    try:
        definition = load_definition(app_file)
        runner = create_cli_runner(definition)
        options = build_execute_options(definition, config_dir, base_url)
    except NouncliError as exc:
        output.error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    output.debug(f"nouncli {__version__}: {definition.cli_name} {' '.join(ctx.args)}")
    result = asyncio.run(runner.execute(ctx.args, options))
    output.render_result(result)
    raise typer.Exit(code=result.exit_code)


def main() -> None:
    """CLI entry point invoked by the ``nouncli`` console script.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    try:
        app()
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
