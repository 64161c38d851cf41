"""
Load custom target schemas from YAML files.

Supports ``${VAR}`` and ``${VAR:-default}`` environment interpolation in
string values. Example file::

    name: studio
    summary: Studio call sheet with production companies.
    fields:
      date: {type: string, description: "Shooting day YYYY-MM-DD"}
      projectName: string
      productionCompanies: string[]
      locations: string[]
      generalCallTime: string?
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import ConfigDict, Field, StrictBool, StrictFloat, StrictInt, StrictStr, create_model

from ..errors import SchemaConfigError
from .base import TargetSchema
from .callsheet import get_schema

logger = logging.getLogger(__name__)

# Regex for environment variable interpolation: ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")

SCALAR_TYPES: dict[str, Any] = {
    "string": StrictStr,
    "number": Union[StrictInt, StrictFloat],
    "integer": StrictInt,
    "boolean": StrictBool,
    "object": dict,
    "array": list,
}


def resolve_env_vars(value: str) -> str:
    """Resolve ``${VAR}`` / ``${VAR:-default}`` references in a string."""

    def replace_match(match: re.Match) -> str:
        default_value = match.group(2) if match.group(2) is not None else ""
        return os.environ.get(match.group(1), default_value)

    return ENV_VAR_PATTERN.sub(replace_match, value)


def _substitute_env_vars_recursive(data: Any) -> Any:
    if isinstance(data, dict):
        return {k: _substitute_env_vars_recursive(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_substitute_env_vars_recursive(item) for item in data]
    elif isinstance(data, str):
        return resolve_env_vars(data)
    return data


def parse_field_type(spec: str) -> tuple[Any, bool]:
    """
    Translate a type spec such as ``string``, ``string[]`` or ``number?``.

    Returns:
        Tuple of (python annotation, is_optional).
    """
    spec = spec.strip()
    optional = spec.endswith("?")
    if optional:
        spec = spec[:-1]

    is_list = spec.endswith("[]")
    base = spec[:-2] if is_list else spec

    if base not in SCALAR_TYPES:
        raise SchemaConfigError(f"Unknown field type '{spec}'")

    annotation = SCALAR_TYPES[base]
    if is_list:
        annotation = list[annotation]
    if optional:
        annotation = Optional[annotation]
    return annotation, optional


def build_schema(data: dict) -> TargetSchema:
    """Build a TargetSchema from an already-parsed mapping."""
    name = data.get("name")
    if not name:
        raise SchemaConfigError("Schema definition requires a 'name'")

    fields_data = data.get("fields") or {}
    if not isinstance(fields_data, dict) or not fields_data:
        raise SchemaConfigError(f"Schema '{name}' must declare at least one field")

    field_definitions: dict[str, Any] = {}
    for key, field_spec in fields_data.items():
        if isinstance(field_spec, str):
            field_spec = {"type": field_spec}
        if not isinstance(field_spec, dict) or "type" not in field_spec:
            raise SchemaConfigError(f"Field '{key}' in schema '{name}' needs a type")

        annotation, optional = parse_field_type(str(field_spec["type"]))
        description = field_spec.get("description")
        if optional:
            field_definitions[key] = (annotation, Field(default=None, description=description))
        else:
            field_definitions[key] = (annotation, Field(description=description))

    try:
        model = create_model(
            f"{name.title().replace('_', '')}Schema",
            __config__=ConfigDict(extra="allow"),
            **field_definitions,
        )
    except Exception as e:
        raise SchemaConfigError(f"Invalid schema '{name}': {e}") from e

    return TargetSchema(name, model, summary=data.get("summary", ""))


def load_schema_file(path: Union[str, Path]) -> TargetSchema:
    """
    Load a target schema from a YAML file.

    Raises:
        SchemaConfigError: If the file is missing, empty, or invalid.
    """
    schema_path = Path(path)
    if not schema_path.exists():
        raise SchemaConfigError(f"Schema file not found at {schema_path}")

    logger.info("Loading target schema from %s", schema_path)
    with open(schema_path, "r") as f:
        raw = yaml.safe_load(f)

    if not raw:
        raise SchemaConfigError(f"Schema file {schema_path} is empty")
    if not isinstance(raw, dict):
        raise SchemaConfigError(f"Schema file {schema_path} must contain a mapping")

    return build_schema(_substitute_env_vars_recursive(raw))


def resolve_schema(name: Optional[str] = None, path: Optional[str] = None) -> TargetSchema:
    """Pick the deployment's target schema: a YAML file wins over a built-in name."""
    if path:
        return load_schema_file(path)
    return get_schema(name or "basic")
