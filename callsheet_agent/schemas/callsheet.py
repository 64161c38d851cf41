"""
Built-in call-sheet target schemas.

Deployments disagree on the required shape of the same extracted object,
so each variant is registered under its own name and selected by
configuration (``CALLSHEET_SCHEMA``).
"""

from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr

from ..errors import SchemaConfigError
from .base import TargetSchema

StrictNumber = Union[StrictInt, StrictFloat]

LocationType = Literal[
    "FILMING_PRINCIPAL",
    "UNIT_BASE",
    "CATERING",
    "MAKEUP_HAIR",
    "WARDROBE",
    "CREW_PARKING",
    "LOAD_UNLOAD",
]


class CallsheetExtraction(BaseModel):
    """Minimal extraction: date, project and locations."""

    model_config = ConfigDict(extra="allow")

    date: StrictStr = Field(description="Normalized shooting day date YYYY-MM-DD")
    projectName: StrictStr = Field(
        description="Creative title of the project, not the production company"
    )
    locations: list[StrictStr] = Field(
        description="Ordered, deduplicated list of relevant locations"
    )


class CallsheetWithCompany(CallsheetExtraction):
    productionCompany: StrictStr = Field(
        description="Company producing the project"
    )


class CallsheetWithCompanies(CallsheetExtraction):
    productionCompanies: list[StrictStr] = Field(
        description="Companies producing the project"
    )


class CrewFirstLocation(BaseModel):
    model_config = ConfigDict(extra="allow")

    location_type: LocationType = Field(description="Category of the location")
    address: StrictStr = Field(description="Original address from the text")
    name: Optional[StrictStr] = None
    formatted_address: Optional[StrictStr] = None
    latitude: Optional[StrictNumber] = None
    longitude: Optional[StrictNumber] = None
    notes: Optional[list[StrictStr]] = None
    confidence: Optional[StrictNumber] = None


class CrewFirstCallsheet(BaseModel):
    """Crew-first logistics extraction with geocoded, typed locations."""

    model_config = ConfigDict(extra="allow")

    version: Literal["parser-crew-1"] = Field(description="Schema version identifier")
    date: StrictStr = Field(description="Normalized shooting day date YYYY-MM-DD")
    projectName: StrictStr = Field(description="Creative title of the project")
    productionCompany: Optional[StrictStr] = None
    motiv: Optional[StrictStr] = None
    episode: Optional[StrictStr] = None
    shootingDay: Optional[StrictStr] = None
    generalCallTime: Optional[StrictStr] = Field(
        default=None, description="General call time HH:MM"
    )
    locations: list[CrewFirstLocation] = Field(
        description="Crew-first logistics locations"
    )
    rutas: list = Field(description="Always an empty array")


BASIC = TargetSchema("basic", CallsheetExtraction)
COMPANY = TargetSchema("company", CallsheetWithCompany)
COMPANIES = TargetSchema("companies", CallsheetWithCompanies)
CREW_FIRST = TargetSchema(
    "crew_first",
    CrewFirstCallsheet,
    summary="A CrewFirstCallsheet object.",
)

BUILTIN_SCHEMAS: dict[str, TargetSchema] = {
    schema.name: schema for schema in (BASIC, COMPANY, COMPANIES, CREW_FIRST)
}


def get_schema(name: str) -> TargetSchema:
    """Look up a built-in schema by name."""
    try:
        return BUILTIN_SCHEMAS[name]
    except KeyError:
        available = ", ".join(sorted(BUILTIN_SCHEMAS))
        raise SchemaConfigError(
            f"Unknown target schema '{name}'. Available: {available}"
        ) from None
