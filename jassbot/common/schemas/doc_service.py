"""
Documentation Service Schemas

Wire models for the jassbot documentation service JSON API.
Field aliases follow the service's JSON keys (queryParsed, linenumber).
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Native search (/search/api/<query>)
# ============================================================================

class QueryParsed(BaseModel):
    """How the service interpreted the search query"""
    tag: str
    contents: str


class NativeResult(BaseModel):
    """Native function search result: matching signatures, best first"""
    model_config = ConfigDict(populate_by_name=True)

    query_parsed: QueryParsed = Field(..., alias="queryParsed")
    results: List[str] = Field(default_factory=list)


# ============================================================================
# Doc lookup (/doc/api/<query>)
# ============================================================================

class Annotation(BaseModel):
    """Named metadata tag on a documented entity (e.g. deprecated)"""
    name: str
    value: str


class Parameter(BaseModel):
    """Function parameter with optional documentation"""
    name: str
    type: str
    doc: Optional[str] = None

    @property
    def has_doc(self) -> bool:
        """True if the parameter carries non-blank documentation"""
        return bool(self.doc and self.doc.strip())


class DocResult(BaseModel):
    """Structured documentation for a single entity"""
    model_config = ConfigDict(populate_by_name=True)

    annotations: List[Annotation] = Field(default_factory=list)
    parameters: List[Parameter] = Field(default_factory=list)
    commit: str
    kind: str
    line_number: str = Field(..., alias="linenumber")
