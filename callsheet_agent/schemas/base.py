"""
Target schemas: swappable conformance predicates for the final answer.

A target schema wraps a Pydantic model used purely as a checker. The
validated object returned to callers is always the parsed JSON itself,
never the model instance, so extra keys survive untouched.
"""

from typing import Any, Optional

from pydantic import BaseModel, ValidationError


class TargetSchema:
    """A named predicate over the model's final JSON object."""

    def __init__(self, name: str, model: type[BaseModel], summary: str = ""):
        self.name = name
        self.model = model
        self.summary = summary

    @property
    def required_keys(self) -> list[str]:
        return [
            key for key, field in self.model.model_fields.items() if field.is_required()
        ]

    def check(self, obj: Any) -> list[str]:
        """
        Check ``obj`` against the schema.

        Returns:
            List of human-readable problems; empty when the object conforms.
        """
        if not isinstance(obj, dict):
            return [f"expected a JSON object, got {type(obj).__name__}"]
        try:
            self.model.model_validate(obj)
        except ValidationError as exc:
            return [_format_error(err) for err in exc.errors()]
        return []

    def description(self) -> str:
        """Describe the expected keys for prompts and corrective messages."""
        json_schema = self.model.model_json_schema()
        properties = json_schema.get("properties", {})
        required = set(json_schema.get("required", []))
        defs = json_schema.get("$defs", {})

        lines = []
        if self.summary:
            lines.append(self.summary)
        for key, prop in properties.items():
            label = _type_label(prop, defs)
            status = "required" if key in required else "optional"
            line = f"- {key}: {label}, {status}"
            if prop.get("description"):
                line += f". {prop['description']}"
            lines.append(line)
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"TargetSchema(name={self.name!r}, required={self.required_keys})"


def _format_error(err: dict) -> str:
    location = ".".join(str(part) for part in err.get("loc", ())) or "<root>"
    if err.get("type") == "missing":
        return f"missing required field '{location}'"
    return f"field '{location}': {err.get('msg', 'invalid value')}"


def _type_label(prop: dict, defs: Optional[dict] = None) -> str:
    """Render a JSON-schema property as a short type label."""
    defs = defs or {}
    if "$ref" in prop:
        ref_name = prop["$ref"].rsplit("/", 1)[-1]
        target = defs.get(ref_name, {})
        keys = ", ".join(target.get("required", []))
        return f"object with {keys}" if keys else "object"
    if "const" in prop:
        return f'"{prop["const"]}"'
    if "enum" in prop:
        return "one of " + ", ".join(str(v) for v in prop["enum"])
    if "anyOf" in prop:
        labels = [_type_label(p, defs) for p in prop["anyOf"]]
        return " or ".join(dict.fromkeys(labels))
    prop_type = prop.get("type", "any")
    if prop_type == "array":
        items = prop.get("items")
        return f"array of {_type_label(items, defs)}" if items else "array"
    return prop_type
