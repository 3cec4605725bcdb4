"""nouncli -- Run a command-line client straight from a nouns/verbs schema.

This package interprets argument vectors against a declarative application
definition: resources (*nouns*) with typed fields, plus custom actions
(*verbs*) on those resources. No code is generated; the schema is parsed
once into a command model and every invocation is dispatched in memory.

Typical usage::

    from nouncli import CLIConfig, create_cli_runner

    runner = create_cli_runner(CLIConfig(
        cli_name="shop",
        version="1.0.0",
        nouns={"Customer": {"name": "string", "email": "string"}},
        verbs={},
    ))
    result = await runner.execute(["customer", "list", "--limit", "10"])

Modules:
    runner: The command router/dispatcher (:func:`create_cli_runner`).
    models: Pydantic models shared across the entire package.
    config: Per-application settings and credentials on disk.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr rendering of command results with Rich.
    app: Typer console entry point.
"""

__version__ = "0.3.0"

from nouncli.models import CLIConfig, CommandResult, ExecuteOptions, TransportRequest  # noqa: E402
from nouncli.runner import CLIRunner, create_cli_runner  # noqa: E402

__all__ = [
    "CLIConfig",
    "CLIRunner",
    "CommandResult",
    "ExecuteOptions",
    "TransportRequest",
    "create_cli_runner",
]
