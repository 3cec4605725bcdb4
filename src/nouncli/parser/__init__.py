"""Application definition parsing.

Loads a nouns/verbs definition from disk and turns its field schemas into
the descriptors the dispatcher works from.

Public API:

* :func:`load_definition` -- read a JSON/YAML file into a
  :class:`~nouncli.models.CLIConfig`.
* :func:`parse_field`, :func:`parse_resource`, :func:`parse_all_resources`
  -- type-expression and resource parsing.
* :func:`pluralize`, :func:`to_kebab_case` -- naming rules.
"""

from nouncli.parser.extractor import parse_all_resources, parse_field, parse_resource
from nouncli.parser.loader import load_definition
from nouncli.parser.naming import pluralize, to_kebab_case

__all__ = [
    "load_definition",
    "parse_all_resources",
    "parse_field",
    "parse_resource",
    "pluralize",
    "to_kebab_case",
]
