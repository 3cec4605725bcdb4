"""Canonical Pydantic models shared across all nouncli modules.

This is the single source of truth for data shapes in the project. The
models fall into three groups:

**Definition models** -- the declarative input, usually loaded from a YAML
or JSON file:
    :class:`CLIAuthConfig` and :class:`CLIConfig`.

**Schema parser output** -- produced once per runner and never mutated:
    :class:`FieldKind`, :class:`FieldDescriptor`,
    :class:`ResourceDescriptor`, and the tagged command table entries
    :class:`CommandKind` / :class:`SubCommand`.

**Per-call models** -- exist only for the duration of one ``execute()``:
    :class:`ExecuteOptions`, :class:`HTTPMethod`, :class:`TransportRequest`,
    :class:`CredentialCheck` and :class:`CommandResult`.
"""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Any, Callable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from nouncli.exit_codes import EXIT_GENERIC_FAILURE, EXIT_SUCCESS

CRUD_COMMANDS: tuple[str, ...] = ("list", "get", "create", "update", "delete")
"""Sub-commands every resource gets, in help/listing order."""

ID_FIELD = "id"


# --- Definition models ---


class CLIAuthConfig(BaseModel):
    """How the production transport authenticates with the remote API.

    Example::

        CLIAuthConfig(type="api-key", header_name="X-API-Key", env_var="SHOP_KEY")
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: str = Field(default="api-key", description="Auth type: api-key, oauth, browser")
    header_name: Optional[str] = Field(
        default=None,
        description="Header carrying the key; Authorization (Bearer) when unset",
    )
    env_var: Optional[str] = Field(
        default=None, description="Environment variable that overrides the stored key"
    )


class CLIConfig(BaseModel):
    """A declarative application definition: nouns, verbs and CLI metadata.

    ``nouns`` maps a resource name to its field schema (field name -> type
    expression such as ``"string"``, ``"number?"``, ``"->Customer"`` or
    ``"pending | paid"``). ``verbs`` maps a resource name to either a mapping
    of verb name -> handler, or a plain list of verb names; the handlers
    themselves are opaque to the dispatcher.

    Keys are accepted in snake_case or camelCase (``cli_name``/``cliName``)
    so that definitions written for the JavaScript toolchain load unchanged.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    nouns: dict[str, dict[str, str]] = Field(default_factory=dict)
    verbs: dict[str, Union[dict[str, Any], list[str]]] = Field(default_factory=dict)
    cli_name: str = Field(default="cli", description="Binary name, also names ~/.<cli_name>")
    package_name: Optional[str] = None
    version: str = "0.0.0"
    base_url: Optional[str] = Field(default=None, description="Default API base URL")
    description: Optional[str] = None
    auth: Optional[CLIAuthConfig] = None


# --- Schema parser output ---


class FieldKind(str, enum.Enum):
    """Classification of a parsed field. Exactly one applies to each field."""

    PRIMITIVE = "primitive"
    RELATION = "relation"
    ENUM = "enum"


class FieldDescriptor(BaseModel):
    """A single field parsed from a type expression."""

    model_config = ConfigDict(frozen=True)

    name: str
    base_type: str
    optional: bool = False
    is_relation: bool = False
    relation_target: Optional[str] = None
    enum_values: Optional[list[str]] = None

    @property
    def kind(self) -> FieldKind:
        if self.is_relation:
            return FieldKind.RELATION
        if self.enum_values is not None:
            return FieldKind.ENUM
        return FieldKind.PRIMITIVE


class ResourceDescriptor(BaseModel):
    """A parsed resource (noun): naming, fields and declared verbs.

    ``fields[0]`` is always the synthesized ``id`` field.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    plural_name: str
    command_name: str
    fields: list[FieldDescriptor]
    verb_names: list[str] = Field(default_factory=list)

    @property
    def required_fields(self) -> list[FieldDescriptor]:
        """Fields ``create`` must receive: non-optional and not the identity field."""
        return [f for f in self.fields if not f.optional and f.name != ID_FIELD]

    @property
    def data_fields(self) -> list[FieldDescriptor]:
        return [f for f in self.fields if f.name != ID_FIELD]

    @property
    def custom_verbs(self) -> list[str]:
        """Declared verbs that do not collide with a CRUD command name."""
        return [v for v in self.verb_names if v not in CRUD_COMMANDS]

    @property
    def subcommands(self) -> list[str]:
        return [*CRUD_COMMANDS, *self.custom_verbs]

    def field(self, name: str) -> Optional[FieldDescriptor]:
        for f in self.fields:
            if f.name == name:
                return f
        return None


class CommandKind(str, enum.Enum):
    """Closed set of resource sub-command variants."""

    LIST = "list"
    GET = "get"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    VERB = "verb"


class SubCommand(BaseModel):
    """One entry of a resource's command table: a name tagged with its kind."""

    model_config = ConfigDict(frozen=True)

    name: str
    kind: CommandKind

    @property
    def requires_id(self) -> bool:
        return self.kind in (
            CommandKind.GET,
            CommandKind.UPDATE,
            CommandKind.DELETE,
            CommandKind.VERB,
        )


# --- Per-call models ---


class HTTPMethod(str, enum.Enum):
    """Methods the dispatcher puts on a :class:`TransportRequest`."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class TransportRequest(BaseModel):
    """What a command hands to the injected transport.

    The dispatcher defines nothing of the wire protocol beyond these four
    fields; base URL, headers and encoding are the transport's business.
    """

    method: HTTPMethod
    path: str
    query: Optional[dict[str, str]] = None
    body: Optional[dict[str, Any]] = None


class CredentialCheck(BaseModel):
    """Result of the optional credential validator passed to ``login``."""

    valid: bool
    user: Optional[dict[str, Any]] = None


class ExecuteOptions(BaseModel):
    """Caller-supplied context for a single ``execute()`` call.

    Nothing here is persisted. ``transport`` and ``validate_credentials``
    may be plain or ``async`` callables.

    Authentication is resolved in this order: ``authenticated`` when given;
    otherwise ``test_mode``, which defaults to "a transport was injected";
    otherwise the presence of a stored credentials file.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    transport: Optional[Callable[..., Any]] = None
    authenticated: Optional[bool] = None
    config_dir: Optional[Path] = None
    validate_credentials: Optional[Callable[..., Any]] = None
    test_mode: Optional[bool] = None


class CommandResult(BaseModel):
    """Uniform return value of every command path.

    ``success=False`` implies ``error`` is set. ``suggestion`` and ``usage``
    are only populated for typo and missing-argument failures. ``data`` and
    ``format`` are advisory: the raw payload and the requested output format,
    for renderers that want more than the JSON text in ``output``.
    """

    success: bool
    output: str = ""
    error: Optional[str] = None
    message: Optional[str] = None
    suggestion: Optional[str] = None
    usage: Optional[str] = None
    data: Any = None
    format: Optional[str] = None
    exit_code: int = EXIT_SUCCESS

    @model_validator(mode="after")
    def _failure_has_error(self) -> CommandResult:
        if not self.success:
            if not self.error:
                raise ValueError("a failed CommandResult must carry an error message")
            if self.exit_code == EXIT_SUCCESS:
                self.exit_code = EXIT_GENERIC_FAILURE
        return self

    @classmethod
    def ok(cls, output: str = "", **kwargs: Any) -> CommandResult:
        return cls(success=True, output=output, **kwargs)

    @classmethod
    def from_error(cls, exc: Exception) -> CommandResult:
        """Build a failed result from a :class:`~nouncli.exceptions.NouncliError`."""
        return cls(
            success=False,
            error=str(exc) or "Unknown error",
            suggestion=getattr(exc, "suggestion", None),
            usage=getattr(exc, "usage", None),
            exit_code=getattr(exc, "exit_code", EXIT_GENERIC_FAILURE),
        )
