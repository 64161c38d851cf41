"""
Call-sheet extraction endpoints.

Implements /v1/extract and /v1/schemas.
"""

import logging
import uuid

from fastapi import APIRouter, HTTPException

from ..schemas import (
    ErrorResponse,
    ExtractRequest,
    ExtractResponse,
    SchemaInfo,
    SchemaListResponse,
)
from ...config import config
from ...errors import (
    CredentialsError,
    ProviderError,
    SchemaConfigError,
    TurnBudgetExhausted,
)
from ...extractor import default_schema, extract_callsheet
from ...schemas import BUILTIN_SCHEMAS, get_schema
from ...tracing import TracingContext, get_tracing_client

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/v1/schemas",
    response_model=SchemaListResponse,
    summary="List target schemas",
    description="List the built-in target schemas accepted by /v1/extract.",
)
def list_schemas() -> SchemaListResponse:
    return SchemaListResponse(
        data=[
            SchemaInfo(
                name=name,
                requiredKeys=schema.required_keys,
                default=name == config.agent.schema and not config.agent.schema_file,
            )
            for name, schema in BUILTIN_SCHEMAS.items()
        ]
    )


@router.post(
    "/v1/extract",
    response_model=ExtractResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Empty text or unknown schema"},
        422: {"model": ErrorResponse, "description": "No valid output within the turn budget"},
        500: {"model": ErrorResponse, "description": "Server misconfiguration"},
        502: {"model": ErrorResponse, "description": "Provider failure"},
    },
    summary="Extract call-sheet logistics",
    description=(
        "Run the tool-calling extraction agent over raw call-sheet text and "
        "return a JSON object conforming to the selected target schema."
    ),
)
def extract(request: ExtractRequest) -> ExtractResponse:
    """Run one extraction and map agent failures to HTTP errors."""
    text = request.text.strip()
    if not text:
        raise HTTPException(
            status_code=400,
            detail="Request body must include a non-empty text field",
        )

    # A bad schema name is the caller's fault; a bad configured schema is ours
    try:
        schema = get_schema(request.schema_name) if request.schema_name else None
    except SchemaConfigError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if schema is None:
        try:
            schema = default_schema()
        except SchemaConfigError as e:
            logger.error("Configured target schema is invalid: %s", e)
            raise HTTPException(status_code=500, detail=str(e))

    execution_id = f"exec-{uuid.uuid4().hex[:8]}"
    logger.info(
        "[%s] Extraction request: %d chars, schema=%s", execution_id, len(text), schema.name
    )

    tracing_context = TracingContext(execution_id=execution_id)
    tracing_context.start_trace(
        name="callsheet_extraction",
        input={"text": text[:2000]},
        metadata={"schema": schema.name, "model": request.model or config.provider.model},
    )

    try:
        result = extract_callsheet(
            text,
            api_key=request.apiKey,
            model=request.model,
            schema=schema,
            max_turns=request.maxTurns,
            tracing_context=tracing_context,
            execution_id=execution_id,
        )
    except CredentialsError as e:
        tracing_context.end_trace(output=str(e), status="error")
        _flush_tracing()
        raise HTTPException(status_code=500, detail="OpenRouter API key is not configured")
    except ProviderError as e:
        tracing_context.end_trace(output=str(e), status="error")
        _flush_tracing()
        raise HTTPException(status_code=502, detail=str(e))
    except TurnBudgetExhausted as e:
        tracing_context.end_trace(output=str(e), status="error")
        _flush_tracing()
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.exception("[%s] Extraction failed: %s", execution_id, e)
        tracing_context.end_trace(output=str(e), status="error")
        _flush_tracing()
        raise HTTPException(status_code=500, detail=str(e))

    tracing_context.end_trace(
        output=result.data,
        status="success",
        metadata={"turns": result.turns, "tools_used": result.tools_used},
    )
    _flush_tracing()

    return ExtractResponse(
        data=result.data,
        schema=schema.name,
        turns=result.turns,
        toolsUsed=result.tools_used,
    )


def _flush_tracing() -> None:
    """Flush tracing client if available."""
    client = get_tracing_client()
    if client:
        client.flush()
