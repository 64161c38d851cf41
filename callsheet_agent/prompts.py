"""
Prompt text for the extraction agent.
"""

import re

from .schemas import TargetSchema

SYSTEM_INSTRUCTION = """You are an expert data-extraction agent for film and TV production logistics. \
Analyze the text of a call sheet and return a single structured JSON object with the key logistics \
information for the crew.

Use the tools (functions) you are given, following this policy:

Project metadata:
- projectName is the CREATIVE TITLE of the project (film, series, documentary). It is not the \
production company, not the scene/set and not the episode. Look for "Titel:", "Title:", "Project:", \
"Serie:", "Film:".
- The production company is the company producing the project. Look for "Produktion:", \
"Production Company:", "Productora:", "Studio:".
- Ignore generic document titles such as CALLSHEET or Tagesdisposition.

Addresses:
1. Identify every relevant physical location in the text.
2. For EACH address, call `address_normalize` with the original address (`raw`), then call \
`geocode_address` with the normalized address.
3. If a tool fails, keep the original address and leave coordinates null. Never invent data.
4. Deduplicate locations, preserving their order.

Output:
Respond only with the final JSON object, no explanations and no markdown fences. \
It must contain these keys:
{schema_description}"""

SEED_TEMPLATE = "Analyze this call sheet and extract the information:\n\n{text}"

PARSE_CORRECTION = (
    "The response is not valid JSON. Return ONLY the JSON object, "
    "without explanations or markdown."
)

SCHEMA_CORRECTION = (
    "The JSON does not match the required {schema_name} schema. "
    "Fix the following problems and return the complete JSON object:\n"
    "{problems}\n\nRequired keys:\n{schema_description}"
)


def sanitize_model_text(text: str) -> str:
    """Lightweight cleanup to reduce noise before sending text to the model."""
    text = re.sub(r"[\u00a0 \t]+", " ", text)
    text = text.replace("\r", "")
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def build_system_instruction(schema: TargetSchema) -> str:
    return SYSTEM_INSTRUCTION.format(schema_description=schema.description())


def build_seed_message(text: str) -> str:
    return SEED_TEMPLATE.format(text=sanitize_model_text(text))


def build_schema_correction(schema: TargetSchema, problems: tuple[str, ...]) -> str:
    return SCHEMA_CORRECTION.format(
        schema_name=schema.name,
        problems="\n".join(f"- {p}" for p in problems),
        schema_description=schema.description(),
    )
