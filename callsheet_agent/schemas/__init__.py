"""
Target schemas for the extracted call-sheet object.
"""

from .base import TargetSchema
from .callsheet import (
    BASIC,
    BUILTIN_SCHEMAS,
    COMPANIES,
    COMPANY,
    CREW_FIRST,
    get_schema,
)
from .loader import build_schema, load_schema_file, resolve_schema

__all__ = [
    "TargetSchema",
    "BASIC",
    "COMPANY",
    "COMPANIES",
    "CREW_FIRST",
    "BUILTIN_SCHEMAS",
    "get_schema",
    "build_schema",
    "load_schema_file",
    "resolve_schema",
]
