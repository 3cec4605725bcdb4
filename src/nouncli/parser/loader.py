"""Load an application definition from a local JSON or YAML file.

The definition is the declarative input of the whole tool: ``nouns``,
``verbs`` and CLI metadata (name, version, base URL, auth). JSON and YAML
are both accepted, with the format picked from the file extension and
otherwise detected from content.

After loading, the dict is validated into a :class:`~nouncli.models.CLIConfig`
which :func:`~nouncli.runner.create_cli_runner` consumes.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from nouncli.exceptions import SchemaError
from nouncli.models import CLIConfig


def load_definition(path: str | Path) -> CLIConfig:
    """Load and validate an application definition file.

    Args:
        path: Path to a ``.json``, ``.yaml`` or ``.yml`` file.

    Returns:
        The validated :class:`~nouncli.models.CLIConfig`.

    Raises:
        SchemaError: If the file is missing, unreadable, not an object, or
            fails validation.
    """
    raw = load_definition_dict(path)
    try:
        return CLIConfig.model_validate(raw)
    except ValidationError as exc:
        raise SchemaError(f"Invalid application definition {path}: {exc}") from exc


def load_definition_dict(path: str | Path) -> dict[str, Any]:
    """Read *path* and return the raw definition mapping.

    Raises:
        SchemaError: If the file cannot be read or parsed.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise SchemaError(f"Definition file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SchemaError(f"Failed to read definition file {path}: {exc}") from exc

    if not content.strip():
        raise SchemaError(f"Definition file is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return _parse_content(content, hint=hint)


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse content as JSON or YAML.

    Tries JSON first (unless hinted as YAML), then YAML. Valid JSON is also
    valid YAML, but the JSON parser gives sharper error messages.
    """
    json_error: Exception | None = None
    yaml_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
            if not isinstance(result, dict):
                raise SchemaError(
                    f"Definition must be a JSON/YAML object (got {type(result).__name__})"
                )
            return result
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise SchemaError(f"Invalid JSON: {exc}") from exc

    try:
        result = yaml.safe_load(content)
        if not isinstance(result, dict):
            raise SchemaError(
                "Definition must be a JSON/YAML object (got "
                f"{type(result).__name__ if result is not None else 'empty document'})"
            )
        return result
    except yaml.YAMLError as exc:
        yaml_error = exc

    msg = "Failed to parse definition as JSON or YAML"
    if json_error:
        msg += f"\n  JSON error: {json_error}"
    if yaml_error:
        msg += f"\n  YAML error: {yaml_error}"
    raise SchemaError(msg)
