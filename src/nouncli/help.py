"""Usage text for the root command, a resource, and a resource sub-command.

All text is derived from the parsed schema, so help always matches what the
dispatcher actually accepts.
"""

from __future__ import annotations

from nouncli.models import CLIConfig, FieldDescriptor, FieldKind, ResourceDescriptor

_BUILTIN_HELP: tuple[tuple[str, str], ...] = (
    ("login", "Authenticate with the API"),
    ("logout", "Log out and remove credentials"),
    ("config", "Manage configuration"),
    ("completion", "Generate shell completion script"),
    ("help", "Show help for a command"),
)


def _title(word: str) -> str:
    return word[:1].upper() + word[1:]


def _describe_type(field: FieldDescriptor) -> str:
    if field.kind == FieldKind.ENUM:
        return " | ".join(field.enum_values or [])
    if field.kind == FieldKind.RELATION:
        return f"{field.base_type} (-> {field.relation_target})"
    return field.base_type


def render_main_help(config: CLIConfig, resources: list[ResourceDescriptor]) -> str:
    """Render the root help screen."""
    cli = config.cli_name
    lines = [
        f"{cli} - {config.description or 'CLI generated from a nouns/verbs schema'}",
        "",
        "Usage:",
        f"  {cli} <command> [options]",
        "",
        "Commands:",
    ]
    for name, text in _BUILTIN_HELP:
        lines.append(f"  {name:<12} {text}")

    lines.append("")
    lines.append("Resources:")
    for resource in resources:
        lines.append(f"  {resource.command_name:<12} Manage {resource.plural_name}")

    lines.append("")
    lines.append("Examples:")
    lines.append(f"  {cli} login --api-key sk_xxx")
    if resources:
        first = resources[0].command_name
        lines.append(f"  {cli} {first} list")
        lines.append(f"  {cli} {first} get <id>")
    lines.append("")
    lines.append(f"Run '{cli} <command> --help' for more information on a command.")
    return "\n".join(lines)


def render_resource_help(config: CLIConfig, resource: ResourceDescriptor) -> str:
    """Render the help screen of one resource: CRUD commands, verbs, examples."""
    cli = config.cli_name
    cmd = resource.command_name
    singular = resource.name.lower()
    lines = [
        f"{cli} {cmd} - Manage {resource.plural_name}",
        "",
        "Usage:",
        f"  {cli} {cmd} <command> [options]",
        "",
        "Commands:",
        f"  list      List all {resource.plural_name}",
        f"  get       Get a {singular} by ID",
        f"  create    Create a new {singular}",
        f"  update    Update a {singular}",
        f"  delete    Delete a {singular}",
    ]

    if resource.custom_verbs:
        lines.append("")
        lines.append("Verbs:")
        for verb in resource.custom_verbs:
            lines.append(f"  {verb:<9} {_title(verb)} a {singular}")

    required = " ".join(f"--{f.name} <value>" for f in resource.required_fields)
    lines.append("")
    lines.append("Examples:")
    lines.append(f"  {cli} {cmd} list --limit 10")
    lines.append(f"  {cli} {cmd} get <id>")
    lines.append(f"  {cli} {cmd} create {required}".rstrip())
    return "\n".join(lines)


def render_subcommand_help(
    config: CLIConfig,
    resource: ResourceDescriptor,
    subcommand: str,
) -> str:
    """Render help for ``<resource> <subcommand>``.

    Returns an empty string for a sub-command the resource does not have;
    callers are expected to check :attr:`ResourceDescriptor.subcommands`
    first.
    """
    prefix = f"{config.cli_name} {resource.command_name}"
    singular = resource.name.lower()
    lines: list[str] = []

    if subcommand == "list":
        lines += [
            f"{prefix} list - List all {resource.plural_name}",
            "",
            "Options:",
            "  --limit <n>     Maximum number of results",
            "  --offset <n>    Number of results to skip",
            "  --filter <k=v>  Filter by field value (repeatable)",
            "  --output <fmt>  Output format (table, json, yaml, csv)",
        ]
    elif subcommand == "get":
        lines += [
            f"{prefix} get <id> - Get a {singular} by ID",
            "",
            "Arguments:",
            "  <id>    The ID of the resource to retrieve",
        ]
    elif subcommand == "create":
        lines += [
            f"{prefix} create - Create a new {singular}",
            "",
            "Options:",
            "  --data <json>   All fields as a JSON object",
        ]
        for field in resource.data_fields:
            required = "" if field.optional else " (required)"
            lines.append(f"  --{field.name:<12} {_describe_type(field)}{required}")
    elif subcommand == "update":
        lines += [
            f"{prefix} update <id> - Update a {singular}",
            "",
            "Arguments:",
            "  <id>    The ID of the resource to update",
            "",
            "Options:",
        ]
        for field in resource.data_fields:
            lines.append(f"  --{field.name:<12} {_describe_type(field)}")
    elif subcommand == "delete":
        lines += [
            f"{prefix} delete <id> - Delete a {singular}",
            "",
            "Arguments:",
            "  <id>    The ID of the resource to delete",
        ]
    elif subcommand in resource.custom_verbs:
        lines += [
            f"{prefix} {subcommand} <id> - {_title(subcommand)} a {singular}",
            "",
            "Arguments:",
            "  <id>    The ID of the resource",
            "",
            "Options:",
            "  --input <json>     Input data as JSON",
            "  --<name> <value>   Any additional input field",
        ]

    return "\n".join(lines)
