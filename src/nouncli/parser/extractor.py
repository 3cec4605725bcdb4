"""Turn a nouns/verbs schema into field and resource descriptors.

Each field is declared with a compact type expression. The rules are
applied in priority order:

1. A trailing ``?`` marks the field optional; parsing continues on the rest.
2. A leading ``->`` is a forward relation; the rest names the target
   resource and the base type becomes ``string`` (the id of the target).
3. An expression containing ``|`` is an enum; the trimmed pieces are the
   allowed values.
4. Anything else is a primitive type name, kept verbatim.

Every resource additionally gets a leading, required ``id`` field that the
schema does not declare.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from nouncli.exceptions import SchemaError
from nouncli.models import ID_FIELD, FieldDescriptor, ResourceDescriptor
from nouncli.parser.naming import pluralize, to_kebab_case

OPTIONAL_SUFFIX = "?"
RELATION_PREFIX = "->"
UNION_SEPARATOR = "|"


def parse_field(name: str, type_expr: str) -> FieldDescriptor:
    """Parse a single ``field: type`` declaration.

    Args:
        name: Field name.
        type_expr: Type expression, e.g. ``"number?"``, ``"->Customer"``
            or ``"pending | paid | shipped"``.

    Returns:
        The :class:`~nouncli.models.FieldDescriptor`.
    """
    optional = type_expr.endswith(OPTIONAL_SUFFIX)
    clean = type_expr[: -len(OPTIONAL_SUFFIX)] if optional else type_expr

    if clean.startswith(RELATION_PREFIX):
        return FieldDescriptor(
            name=name,
            base_type="string",
            optional=optional,
            is_relation=True,
            relation_target=clean[len(RELATION_PREFIX):],
        )

    if UNION_SEPARATOR in clean:
        return FieldDescriptor(
            name=name,
            base_type="enum",
            optional=optional,
            enum_values=[v.strip() for v in clean.split(UNION_SEPARATOR)],
        )

    return FieldDescriptor(name=name, base_type=clean, optional=optional)


def parse_resource(
    name: str,
    schema: Mapping[str, str],
    verb_names: Iterable[str] = (),
) -> ResourceDescriptor:
    """Parse one noun into a :class:`~nouncli.models.ResourceDescriptor`.

    Args:
        name: Resource name, conventionally ``PascalCase`` singular.
        schema: Field name -> type expression.
        verb_names: Custom verbs declared for this resource.

    Raises:
        SchemaError: If a type expression is not a string.
    """
    fields = [FieldDescriptor(name=ID_FIELD, base_type="string")]
    for field_name, type_expr in schema.items():
        if not isinstance(type_expr, str):
            raise SchemaError(
                f"Field '{name}.{field_name}' must be a type expression string, "
                f"got {type(type_expr).__name__}"
            )
        fields.append(parse_field(field_name, type_expr))

    return ResourceDescriptor(
        name=name,
        plural_name=pluralize(name).lower(),
        command_name=to_kebab_case(name),
        fields=fields,
        verb_names=list(verb_names),
    )


def verb_names_for(verbs: Any) -> list[str]:
    """Return the verb names from a mapping (its keys) or a list (its items)."""
    if verbs is None:
        return []
    if isinstance(verbs, Mapping):
        return [str(k) for k in verbs]
    if isinstance(verbs, (list, tuple)):
        return [str(v) for v in verbs]
    raise SchemaError(f"Verbs must be a mapping or a list, got {type(verbs).__name__}")


def parse_all_resources(
    schema_map: Mapping[str, Mapping[str, str]],
    verb_map: Mapping[str, Any],
) -> list[ResourceDescriptor]:
    """Parse every noun in *schema_map*, in declaration order.

    Args:
        schema_map: Resource name -> field schema.
        verb_map: Resource name -> verbs (mapping of name -> handler, or a
            list of names). Resources without an entry get no verbs.

    Returns:
        One descriptor per resource.
    """
    return [
        parse_resource(name, schema, verb_names_for(verb_map.get(name)))
        for name, schema in schema_map.items()
    ]
