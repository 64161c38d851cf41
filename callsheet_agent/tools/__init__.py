"""
Call-sheet agent tools.

Available tools:
- address_normalize: Clean a raw address before geocoding
- geocode_address: Google Maps geocoding
"""

from .registry import ToolDefinition, ToolRegistry, default_registry
from .address import normalize_address
from .geocode import geocode

__all__ = [
    "ToolDefinition",
    "ToolRegistry",
    "default_registry",
    "normalize_address",
    "geocode",
]
