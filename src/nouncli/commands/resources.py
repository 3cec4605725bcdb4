"""Resource commands -- CRUD and custom verbs for one schema noun.

Handling a resource sub-command is split into two phases so that argument
problems are reported before anything else happens:

1. :func:`parse_invocation` turns the remaining tokens into an
   :class:`Invocation` (record id, query, body, output format). Every
   argument error is raised here as
   :class:`~nouncli.exceptions.InvalidUsageError`.
2. :func:`run_invocation` builds the :class:`~nouncli.models.TransportRequest`,
   calls the injected transport (or synthesizes a result in dry mode) and
   shapes the :class:`~nouncli.models.CommandResult`.

The runner checks authentication between the two phases.

Request mapping::

    list      GET    /{plural}
    get       GET    /{plural}/{id}
    create    POST   /{plural}
    update    PUT    /{plural}/{id}
    delete    DELETE /{plural}/{id}
    <verb>    POST   /{plural}/{id}/{verb}
"""

from __future__ import annotations

import inspect
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from nouncli.client.errors import map_transport_error
from nouncli.exceptions import InvalidUsageError
from nouncli.models import (
    CommandKind,
    CommandResult,
    FieldKind,
    HTTPMethod,
    ResourceDescriptor,
    SubCommand,
    TransportRequest,
)

logger = logging.getLogger(__name__)

OUTPUT_FORMATS: tuple[str, ...] = ("table", "json", "yaml", "csv")
DEFAULT_LIST_FORMAT = "table"
DRY_RUN_ID = "new_id"

SHORT_FLAGS = {"o": "output"}
PAGINATION_KEYS: tuple[str, ...] = ("limit", "offset")

# Commands without a request body only let these flags take a value; any
# other flag is a bare switch and never swallows the record id.
VALUE_FLAGS: dict[CommandKind, frozenset[str]] = {
    CommandKind.LIST: frozenset({"limit", "offset", "filter", "output"}),
    CommandKind.GET: frozenset({"output"}),
    CommandKind.DELETE: frozenset({"output"}),
}

_TRUE_VALUES = ("true", "1", "yes")
_FALSE_VALUES = ("false", "0", "no")


@dataclass
class Invocation:
    """A validated resource command, ready to be sent.

    Attributes:
        subcommand: The command table entry that was matched.
        record_id: Target id for get/update/delete/verb commands.
        query: Query parameters (``list`` only). Values are strings.
        body: Request body for create/update/verb commands.
        output_format: Requested output format, if any.
    """

    subcommand: SubCommand
    record_id: Optional[str] = None
    query: dict[str, str] = field(default_factory=dict)
    body: dict[str, Any] = field(default_factory=dict)
    output_format: Optional[str] = None


# ---------------------------------------------------------------------------
# Command table
# ---------------------------------------------------------------------------


def build_command_table(resource: ResourceDescriptor) -> dict[str, SubCommand]:
    """Build the sub-command map of *resource*.

    CRUD names are registered first; a declared verb with the same name is
    shadowed by the CRUD command.
    """
    table = {
        kind.value: SubCommand(name=kind.value, kind=kind)
        for kind in CommandKind
        if kind is not CommandKind.VERB
    }
    for verb in resource.custom_verbs:
        table[verb] = SubCommand(name=verb, kind=CommandKind.VERB)
    return table


# ---------------------------------------------------------------------------
# Token scanning
# ---------------------------------------------------------------------------


def scan_tokens(
    tokens: list[str],
    value_flags: Optional[frozenset[str]] = None,
) -> tuple[list[str], list[tuple[str, str]]]:
    """Split *tokens* into positionals and ``(flag, value)`` pairs.

    ``--name value``, ``--name=value`` and the short aliases in
    :data:`SHORT_FLAGS` are recognised. A flag followed by another ``--``
    flag, or by nothing, gets the value ``"true"``. When *value_flags* is
    given, flags outside it never consume the next token either.
    """
    positionals: list[str] = []
    flags: list[tuple[str, str]] = []
    i = 0
    while i < len(tokens):
        token = tokens[i]
        name: Optional[str] = None
        value: Optional[str] = None
        if token.startswith("--") and len(token) > 2:
            name, sep, inline = token[2:].partition("=")
            if sep:
                value = inline
        elif len(token) == 2 and token[0] == "-" and token[1] in SHORT_FLAGS:
            name = SHORT_FLAGS[token[1]]

        if name is None:
            positionals.append(token)
        else:
            if value is None:
                takes_value = value_flags is None or name in value_flags
                if (
                    takes_value
                    and i + 1 < len(tokens)
                    and not tokens[i + 1].startswith("--")
                ):
                    value = tokens[i + 1]
                    i += 1
                else:
                    value = "true"
            flags.append((name, value))
        i += 1
    return positionals, flags


def _usage(resource: ResourceDescriptor, sub: SubCommand) -> str:
    return f"{resource.command_name} {sub.name} <id>"


def _require_id(
    resource: ResourceDescriptor, sub: SubCommand, positionals: list[str]
) -> str:
    if not positionals:
        raise InvalidUsageError(
            "Missing required argument: id", usage=_usage(resource, sub)
        )
    return positionals[0]


def _output_format(flags: list[tuple[str, str]], default: Optional[str]) -> Optional[str]:
    fmt = default
    for name, value in flags:
        if name == "output":
            fmt = value
    if fmt is not None and fmt not in OUTPUT_FORMATS:
        raise InvalidUsageError(
            f"Invalid output format: {fmt}. Valid formats: {', '.join(OUTPUT_FORMATS)}"
        )
    return fmt


def _parse_json_object(raw: str, flag: str) -> dict[str, Any]:
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        raise InvalidUsageError(f"Invalid JSON in --{flag} flag") from None
    if not isinstance(parsed, dict):
        raise InvalidUsageError(f"--{flag} must be a JSON object")
    return parsed


def coerce_field_value(resource: ResourceDescriptor, name: str, value: Any) -> Any:
    """Convert a command-line value according to the schema field *name*.

    Unknown fields and non-string values pass through unchanged.

    Raises:
        InvalidUsageError: For a non-numeric ``number``, a non-boolean
            ``boolean`` or a value outside an enum.
    """
    descriptor = resource.field(name)
    if descriptor is None or not isinstance(value, str):
        return value

    if descriptor.kind == FieldKind.ENUM:
        allowed = descriptor.enum_values or []
        if value not in allowed:
            raise InvalidUsageError(
                f"Invalid value for {name}: must be one of {', '.join(allowed)}"
            )
        return value

    base = descriptor.base_type.lower()
    if base in ("number", "int", "integer", "float"):
        try:
            return int(value)
        except ValueError:
            pass
        try:
            return float(value)
        except ValueError:
            raise InvalidUsageError(
                f"Invalid value for {name}: expected a number, got '{value}'"
            ) from None
    if base in ("boolean", "bool"):
        lowered = value.lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise InvalidUsageError(
            f"Invalid value for {name}: expected true or false, got '{value}'"
        )
    return value


def _field_body(
    resource: ResourceDescriptor,
    flags: list[tuple[str, str]],
    skip: tuple[str, ...],
) -> dict[str, Any]:
    body: dict[str, Any] = {}
    for name, value in flags:
        if name in skip:
            continue
        body[name] = coerce_field_value(resource, name, value)
    return body


# ---------------------------------------------------------------------------
# Per-kind argument parsers
# ---------------------------------------------------------------------------


def _parse_list(resource, sub, positionals, flags) -> Invocation:
    query: dict[str, str] = {}
    for name, value in flags:
        if name == "limit":
            if not value.isdigit():
                raise InvalidUsageError("Invalid limit: must be a number")
            query["limit"] = value
        elif name == "offset":
            if not value.isdigit():
                raise InvalidUsageError("Invalid offset: must be a number")
            query["offset"] = value
        elif name == "filter":
            key, sep, filter_value = value.partition("=")
            if not sep or not key or not filter_value:
                raise InvalidUsageError(
                    f"Invalid filter: {value}. Expected key=value",
                    usage=f"{resource.command_name} list --filter <key>=<value>",
                )
            if key in PAGINATION_KEYS:
                raise InvalidUsageError(
                    f"Invalid filter: {key} is not a field. Use --{key} instead"
                )
            query[key] = filter_value
    return Invocation(
        subcommand=sub,
        query=query,
        output_format=_output_format(flags, DEFAULT_LIST_FORMAT),
    )


def _parse_get(resource, sub, positionals, flags) -> Invocation:
    return Invocation(
        subcommand=sub,
        record_id=_require_id(resource, sub, positionals),
        output_format=_output_format(flags, None),
    )


def _parse_create(resource, sub, positionals, flags) -> Invocation:
    data = [value for name, value in flags if name == "data"]
    if data:
        body = _parse_json_object(data[-1], "data")
        for key, value in body.items():
            descriptor = resource.field(key)
            if descriptor is not None and descriptor.kind == FieldKind.ENUM:
                coerce_field_value(resource, key, value)
    else:
        body = _field_body(resource, flags, skip=("output",))

    for required in resource.required_fields:
        if required.name not in body:
            example = " ".join(f"--{f.name} <value>" for f in resource.required_fields)
            raise InvalidUsageError(
                f"Missing required field: {required.name}",
                usage=f"{resource.command_name} create {example}",
            )
    return Invocation(subcommand=sub, body=body, output_format=_output_format(flags, None))


def _parse_update(resource, sub, positionals, flags) -> Invocation:
    return Invocation(
        subcommand=sub,
        record_id=_require_id(resource, sub, positionals),
        body=_field_body(resource, flags, skip=("output",)),
        output_format=_output_format(flags, None),
    )


def _parse_delete(resource, sub, positionals, flags) -> Invocation:
    return Invocation(
        subcommand=sub,
        record_id=_require_id(resource, sub, positionals),
        output_format=_output_format(flags, None),
    )


def _parse_verb(resource, sub, positionals, flags) -> Invocation:
    record_id = _require_id(resource, sub, positionals)
    body: dict[str, Any] = {}
    for name, value in flags:
        if name == "input":
            body.update(_parse_json_object(value, "input"))
    body.update(_field_body(resource, flags, skip=("input", "output")))
    return Invocation(
        subcommand=sub,
        record_id=record_id,
        body=body,
        output_format=_output_format(flags, None),
    )


_PARSERS: dict[CommandKind, Callable[..., Invocation]] = {
    CommandKind.LIST: _parse_list,
    CommandKind.GET: _parse_get,
    CommandKind.CREATE: _parse_create,
    CommandKind.UPDATE: _parse_update,
    CommandKind.DELETE: _parse_delete,
    CommandKind.VERB: _parse_verb,
}


def parse_invocation(
    resource: ResourceDescriptor, sub: SubCommand, tokens: list[str]
) -> Invocation:
    """Validate *tokens* for *sub* without performing any I/O.

    Raises:
        InvalidUsageError: On any argument problem.
    """
    positionals, flags = scan_tokens(tokens, VALUE_FLAGS.get(sub.kind))
    return _PARSERS[sub.kind](resource, sub, positionals, flags)


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------


def build_request(resource: ResourceDescriptor, invocation: Invocation) -> TransportRequest:
    """Map an invocation to the method/path/query/body handed to the transport."""
    collection = f"/{resource.plural_name}"
    kind = invocation.subcommand.kind
    record_path = f"{collection}/{invocation.record_id}"

    if kind is CommandKind.LIST:
        return TransportRequest(method=HTTPMethod.GET, path=collection, query=invocation.query)
    if kind is CommandKind.GET:
        return TransportRequest(method=HTTPMethod.GET, path=record_path)
    if kind is CommandKind.CREATE:
        return TransportRequest(method=HTTPMethod.POST, path=collection, body=invocation.body)
    if kind is CommandKind.UPDATE:
        return TransportRequest(method=HTTPMethod.PUT, path=record_path, body=invocation.body)
    if kind is CommandKind.DELETE:
        return TransportRequest(method=HTTPMethod.DELETE, path=record_path)
    return TransportRequest(
        method=HTTPMethod.POST,
        path=f"{record_path}/{invocation.subcommand.name}",
        body=invocation.body or None,
    )


def _dry_run(invocation: Invocation) -> Any:
    kind = invocation.subcommand.kind
    if kind is CommandKind.LIST:
        return []
    if kind is CommandKind.GET:
        return {}
    if kind is CommandKind.CREATE:
        return {"id": DRY_RUN_ID, **invocation.body}
    if kind is CommandKind.UPDATE:
        return {"id": invocation.record_id, **invocation.body}
    if kind is CommandKind.DELETE:
        return None
    return {"id": invocation.record_id, "verb": invocation.subcommand.name, **invocation.body}


async def _send(transport: Callable[..., Any], request: TransportRequest) -> Any:
    response = transport(request)
    if inspect.isawaitable(response):
        response = await response
    return response


def _to_json(data: Any) -> str:
    return json.dumps(data, indent=2, default=str)


def _shape_result(
    resource: ResourceDescriptor, invocation: Invocation, response: Any
) -> CommandResult:
    kind = invocation.subcommand.kind
    fmt = invocation.output_format

    if kind is CommandKind.LIST:
        data = response
        if isinstance(response, dict) and response.get("data") is not None:
            data = response["data"]
        return CommandResult.ok(_to_json(data), data=data, format=fmt)

    if kind is CommandKind.DELETE:
        return CommandResult.ok(
            f"{resource.name} {invocation.record_id} deleted",
            message=f"{resource.name} deleted successfully!",
            format=fmt,
        )

    message = {
        CommandKind.CREATE: f"{resource.name} created successfully!",
        CommandKind.UPDATE: f"{resource.name} updated successfully!",
        CommandKind.VERB: f"{invocation.subcommand.name} executed successfully!",
    }.get(kind)
    return CommandResult.ok(_to_json(response), message=message, data=response, format=fmt)


async def run_invocation(
    resource: ResourceDescriptor,
    invocation: Invocation,
    transport: Optional[Callable[..., Any]],
) -> CommandResult:
    """Perform *invocation* through *transport*, or synthesize it when ``None``.

    Raises:
        NouncliError: Whatever the transport raised, classified by
            :func:`~nouncli.client.errors.map_transport_error` with this
            resource and record id.
    """
    request = build_request(resource, invocation)

    if transport is None:
        logger.debug("Dry run: %s %s", request.method.value, request.path)
        return _shape_result(resource, invocation, _dry_run(invocation))

    logger.debug("Transport call: %s %s", request.method.value, request.path)
    try:
        response = await _send(transport, request)
    except Exception as exc:
        logger.debug("Transport failed: %r", exc)
        raise map_transport_error(exc, resource, invocation.record_id) from exc
    return _shape_result(resource, invocation, response)
