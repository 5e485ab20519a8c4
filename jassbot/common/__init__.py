"""
Jassbot Common Module

Shared infrastructure for the bot: configuration, errors, wire schemas and
the documentation service client.
"""

from .config import JassbotConfig, load_config, configure_logging
from .doc_client import (
    DocServiceClient,
    QueryOutcome,
    Success,
    NotFound,
    TransportFailure,
    DecodeFailure,
    doc_page_url,
    encode_query,
)

__all__ = [
    "JassbotConfig",
    "load_config",
    "configure_logging",
    "DocServiceClient",
    "QueryOutcome",
    "Success",
    "NotFound",
    "TransportFailure",
    "DecodeFailure",
    "doc_page_url",
    "encode_query",
]
