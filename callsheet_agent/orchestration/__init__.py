"""
Extraction loop and its collaborators.
"""

from .dispatcher import ToolDispatcher, ToolOutcome, decode_arguments
from .loop import ExtractionLoop, ExtractionResult, LoopState, RunState
from .validator import (
    Accepted,
    ParseFailure,
    SchemaFailure,
    accept,
    strip_code_fences,
)

__all__ = [
    "ToolDispatcher",
    "ToolOutcome",
    "decode_arguments",
    "ExtractionLoop",
    "ExtractionResult",
    "LoopState",
    "RunState",
    "Accepted",
    "ParseFailure",
    "SchemaFailure",
    "accept",
    "strip_code_fences",
]
