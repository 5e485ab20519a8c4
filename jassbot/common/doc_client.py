"""
Documentation Service Client

Async client for the jassbot documentation service.

Every lookup makes exactly one GET request and returns a QueryOutcome
instead of raising:

- Success(value)          2xx with a body matching the expected schema
- NotFound()              404, the service has no entry for the query
- TransportFailure(...)   connection error, timeout, any other non-2xx
- DecodeFailure(...)      2xx whose body is not the expected JSON shape

Usage:
    client = DocServiceClient(api_base="https://lep.duckdns.org/app/jassbot")
    outcome = await client.fetch_doc("CreateUnit")
    if isinstance(outcome, Success):
        print(outcome.value.parameters)
"""

import logging
from dataclasses import dataclass
from typing import Generic, Optional, Type, TypeVar, Union
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from .schemas import NativeResult, DocResult

logger = logging.getLogger("jassbot.common.doc_client")

T = TypeVar("T", bound=BaseModel)


@dataclass(frozen=True)
class Success(Generic[T]):
    """Lookup returned a decoded result"""
    value: T


@dataclass(frozen=True)
class NotFound:
    """Service has no entry for the query"""
    pass


@dataclass(frozen=True)
class TransportFailure:
    """Request did not complete with a usable status"""
    detail: str


@dataclass(frozen=True)
class DecodeFailure:
    """Response body did not match the expected schema"""
    detail: str


QueryOutcome = Union[Success, NotFound, TransportFailure, DecodeFailure]


def encode_query(query: str) -> str:
    """Percent-encode a query for use as a single path segment"""
    return quote(query, safe="")


def doc_page_url(doc_base: str, query: str) -> str:
    """Human-facing documentation page for a query (never fetched)"""
    return f"{doc_base.rstrip('/')}/doc/{encode_query(query)}"


class DocServiceClient:
    """
    Stateless client for the native-search and doc-lookup endpoints.

    A fresh httpx.AsyncClient is opened per call, so one instance can be
    shared by any number of concurrent message handlers.
    """

    def __init__(
        self,
        api_base: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            api_base: Service root, e.g. "https://lep.duckdns.org/app/jassbot"
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def native_url(self, query: str) -> str:
        """Native search endpoint for query"""
        return f"{self.api_base}/search/api/{encode_query(query)}"

    def doc_url(self, query: str) -> str:
        """Doc lookup endpoint for query"""
        return f"{self.api_base}/doc/api/{encode_query(query)}"

    async def fetch_native(self, query: str) -> QueryOutcome:
        """Search native function signatures matching query"""
        return await self._fetch(self.native_url(query), NativeResult)

    async def fetch_doc(self, query: str) -> QueryOutcome:
        """Look up structured documentation for the entity named query"""
        return await self._fetch(self.doc_url(query), DocResult)

    async def _fetch(self, url: str, model: Type[T]) -> QueryOutcome:
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                response = await client.get(url)
        except httpx.HTTPError as e:
            logger.debug("GET %s failed: %r", url, e)
            return TransportFailure(f"{type(e).__name__}: {e}")

        if response.status_code == 404:
            return NotFound()

        if not response.is_success:
            return TransportFailure(f"HTTP {response.status_code} from {url}")

        try:
            value = model.model_validate_json(response.content)
        except ValidationError as e:
            return DecodeFailure(f"{model.__name__}: {e.error_count()} validation error(s): {e.errors()[0]['msg']}")

        return Success(value)
