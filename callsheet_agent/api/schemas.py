"""
Pydantic schemas for the extraction API.

Field names follow the JSON wire format used by the web client
(``apiKey``, ``maxTurns``, ``toolsUsed``).
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ExtractRequest(BaseModel):
    """Request body for /v1/extract."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "text": "CALLSHEET\nTitel: Der Bergdoktor\nDrehtag 12 - 14.03.2025\n"
                "Motiv: Rustenschacherallee 9, 1020 Wien",
                "schema": "basic",
            }
        },
    )

    text: str = Field(..., description="Raw call-sheet text")
    apiKey: Optional[str] = Field(
        default=None, description="Provider API key; defaults to the server's key"
    )
    model: Optional[str] = Field(default=None, description="Model identifier")
    schema_name: Optional[str] = Field(
        default=None,
        alias="schema",
        description="Built-in target schema; defaults to the server's schema",
    )
    maxTurns: Optional[int] = Field(
        default=None, ge=1, le=50, description="Maximum number of provider calls"
    )


class ExtractResponse(BaseModel):
    """Response body for /v1/extract."""

    model_config = ConfigDict(populate_by_name=True)

    data: Any = Field(..., description="The accepted extraction")
    schema_name: str = Field(..., alias="schema", description="Schema the data conforms to")
    turns: int = Field(..., description="Provider calls used")
    toolsUsed: list[str] = Field(default_factory=list, description="Tools the model invoked")


class SchemaInfo(BaseModel):
    """A target schema available to /v1/extract."""

    name: str
    requiredKeys: list[str]
    default: bool = False


class SchemaListResponse(BaseModel):
    """Response body for /v1/schemas."""

    object: Literal["list"] = "list"
    data: list[SchemaInfo]


class HealthResponse(BaseModel):
    """Response body for /health endpoint."""

    status: Literal["healthy", "unhealthy"]
    version: str
    model: str


class ErrorResponse(BaseModel):
    """Error body returned by HTTPException handlers."""

    detail: str
