"""
Jassbot Schemas

Wire models for the documentation service.
"""

from .doc_service import (
    NativeResult,
    QueryParsed,
    DocResult,
    Annotation,
    Parameter,
)

__all__ = [
    "NativeResult",
    "QueryParsed",
    "DocResult",
    "Annotation",
    "Parameter",
]
