"""
Call-sheet agent: tool-calling LLM extraction of film/TV call-sheet logistics.
"""

__version__ = "0.1.0"

from .errors import (
    AgentError,
    CredentialsError,
    ProviderError,
    SchemaConfigError,
    ToolExecutionError,
    TurnBudgetExhausted,
)
from .extractor import extract_callsheet
from .orchestration import ExtractionLoop, ExtractionResult

__all__ = [
    "__version__",
    "AgentError",
    "CredentialsError",
    "ProviderError",
    "SchemaConfigError",
    "ToolExecutionError",
    "TurnBudgetExhausted",
    "extract_callsheet",
    "ExtractionLoop",
    "ExtractionResult",
]
