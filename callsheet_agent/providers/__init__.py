"""
Completion providers for the extraction loop.
"""

from .base import ProviderClient, ProviderReply, ProviderRequest
from .openai_client import OpenAIProviderClient, parse_completion

__all__ = [
    "ProviderClient",
    "ProviderReply",
    "ProviderRequest",
    "OpenAIProviderClient",
    "parse_completion",
]
