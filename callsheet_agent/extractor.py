"""
Call-sheet extraction service.

Wires a provider client, the tool registry and the deployment's target
schema into an ExtractionLoop. Shared by the HTTP API and the CLI.
"""

import logging
import uuid
from typing import Any, Optional, Union

from .config import config
from .errors import AgentError
from .orchestration import ExtractionLoop, ExtractionResult, ToolDispatcher
from .providers import OpenAIProviderClient, ProviderClient
from .schemas import TargetSchema, get_schema, resolve_schema
from .tools import default_registry
from .tracing import TracingContext

logger = logging.getLogger(__name__)


def default_schema() -> TargetSchema:
    """The schema selected by deployment configuration."""
    return resolve_schema(name=config.agent.schema, path=config.agent.schema_file or None)


def normalize_extraction(data: Any) -> Any:
    """Trim and deduplicate a flat list of location strings, keeping order."""
    if not isinstance(data, dict):
        return data
    locations = data.get("locations")
    if not isinstance(locations, list) or not all(isinstance(loc, str) for loc in locations):
        return data
    trimmed = (loc.strip() for loc in locations)
    return {**data, "locations": list(dict.fromkeys(loc for loc in trimmed if loc))}


def extract_callsheet(
    text: str,
    api_key: Optional[str] = None,
    model: Optional[str] = None,
    schema: Union[str, TargetSchema, None] = None,
    max_turns: Optional[int] = None,
    provider: Optional[ProviderClient] = None,
    tracing_context: Optional[TracingContext] = None,
    execution_id: Optional[str] = None,
) -> ExtractionResult:
    """
    Run one extraction over ``text``.

    Args:
        text: Raw call-sheet text.
        api_key: Per-request provider key; falls back to OPENROUTER_API_KEY.
        model: Model identifier; falls back to the configured model.
        schema: Built-in schema name or a TargetSchema; defaults to configuration.
        max_turns: Provider call budget; defaults to AGENT_MAX_TURNS.
        provider: Pre-built provider client (mainly for testing).
        tracing_context: Optional Langfuse context for the run.
        execution_id: ID used to correlate log lines.

    Returns:
        ExtractionResult whose data has normalized locations.

    Raises:
        ValueError: If ``text`` is empty.
        SchemaConfigError: If the schema cannot be resolved.
        CredentialsError: If no API key is available.
        ProviderError: If the provider fails.
        TurnBudgetExhausted: If no valid answer arrives in time.
    """
    if not text or not text.strip():
        raise ValueError("text must be a non-empty string")

    if isinstance(schema, TargetSchema):
        target = schema
    elif schema:
        target = get_schema(schema)
    else:
        target = default_schema()

    execution_id = execution_id or f"exec-{uuid.uuid4().hex[:8]}"
    owns_provider = provider is None
    if provider is None:
        key = api_key.strip() if api_key and api_key.strip() else None
        provider = OpenAIProviderClient(api_key=key, model=model)

    dispatcher = ToolDispatcher(
        default_registry,
        timeout=config.tools.timeout,
        parallel=config.tools.parallel,
    )
    loop = ExtractionLoop(
        provider=provider,
        registry=default_registry,
        dispatcher=dispatcher,
        model=model,
        tracing_context=tracing_context,
        execution_id=execution_id,
    )
    try:
        result = loop.run(text, target, max_turns=max_turns)
    except AgentError as e:
        logger.warning("[%s] Extraction failed: %s", execution_id, e)
        raise
    finally:
        dispatcher.close()
        if owns_provider:
            provider.close()

    result.data = normalize_extraction(result.data)
    return result
