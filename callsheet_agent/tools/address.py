"""
Address normalization tool.

Cleans a raw address copied out of a call sheet so it can be geocoded.
"""

import re

WHITESPACE_PATTERN = re.compile(r"\s+")
# Literal escape sequences that sometimes leak into extracted text
ESCAPED_CONTROL_PATTERN = re.compile(r"\\[nrt]")
# Vienna district prefix: "2., Rustenschacherallee 9"
VIENNA_DISTRICT_PATTERN = re.compile(r"^(\d{1,2})\.,\s*(.+)$")


def normalize_address(raw: str) -> dict:
    """
    Normalize a raw address.

    Collapses whitespace, removes leaked escape sequences and trailing
    punctuation, and rewrites Vienna district prefixes into a postal code
    (``"2., Rustenschacherallee 9"`` -> ``"Rustenschacherallee 9, 1020 Wien"``).

    Args:
        raw: The address as it appears in the text.

    Returns:
        Dictionary with the ``normalized`` address.
    """
    if not isinstance(raw, str) or not raw.strip():
        raise ValueError("Address is empty. Provide the raw address text.")

    normalized = ESCAPED_CONTROL_PATTERN.sub(" ", raw)
    normalized = WHITESPACE_PATTERN.sub(" ", normalized).strip()
    normalized = normalized.strip(" ,;")

    match = VIENNA_DISTRICT_PATTERN.match(normalized)
    if match:
        district = int(match.group(1))
        if 1 <= district <= 23:
            normalized = f"{match.group(2)}, 1{district:02d}0 Wien"

    return {"normalized": normalized}


def _handle_normalize(params: dict) -> dict:
    return normalize_address(params.get("raw", ""))


# Register tool with the registry
def _register():
    from .registry import default_registry

    default_registry.register(
        name="address_normalize",
        description=(
            "Normalize and clean a raw address so it is ready for geocoding"
        ),
        parameters={
            "type": "object",
            "properties": {
                "raw": {
                    "type": "string",
                    "description": "The original address exactly as it appears in the text",
                }
            },
            "required": ["raw"],
        },
        handler=_handle_normalize,
    )


_register()
