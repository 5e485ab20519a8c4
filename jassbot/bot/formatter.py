"""
Response Formatter

Renders documentation-service results as chat replies.

A formatter returns None when there is nothing worth posting: a native
search with no results, or a doc entry with no displayable annotation or
parameter documentation.
"""

from dataclasses import dataclass
from typing import List, Optional, Union

from ..common.doc_client import doc_page_url
from ..common.schemas import NativeResult, DocResult

MAX_NATIVE_RESULTS = 3

# Internal metadata the doc service attaches to every entry
HIDDEN_ANNOTATIONS = frozenset({"return-type", "source-code", "source-file"})


@dataclass(frozen=True)
class ReplyContent:
    """Reply text plus how it should be rendered"""
    text: str
    rich: bool = False  # True: render as markdown (clickable links)


NO_RESULTS = ReplyContent(text="No results found", rich=False)


def format_native(result: NativeResult) -> Optional[ReplyContent]:
    """Top signatures, one per line, plain text"""
    if not result.results:
        return None

    text = "\n".join(result.results[:MAX_NATIVE_RESULTS])
    return ReplyContent(text=text, rich=False)


def _annotation_lines(result: DocResult) -> List[str]:
    return [
        f"{an.name}: {an.value.strip()}"
        for an in result.annotations
        if an.name.lower() not in HIDDEN_ANNOTATIONS
    ]


def _parameter_lines(result: DocResult) -> List[str]:
    return [
        f"* {pa.name} parameter: {pa.doc.strip()}"
        for pa in result.parameters
        if pa.has_doc
    ]


def format_doc(result: DocResult, query: str, doc_base: str) -> Optional[ReplyContent]:
    """
    Doc page link followed by annotations and documented parameters.

    Layout (markdown):

        <doc page url>

        <name>: <value>

        <name>: <value>

        * <param> parameter: <doc>
        * <param> parameter: <doc>
    """
    annotations = _annotation_lines(result)
    parameters = _parameter_lines(result)

    if not annotations and not parameters:
        return None

    # angle brackets make the URL a markdown autolink
    sections = [f"<{doc_page_url(doc_base, query)}>"]
    if annotations:
        sections.append("\n\n".join(annotations))
    if parameters:
        sections.append("\n".join(parameters))

    return ReplyContent(text="\n\n".join(sections), rich=True)


def format_reply(
    result: Union[NativeResult, DocResult],
    query: str,
    doc_base: str,
) -> Optional[ReplyContent]:
    """Format any successful lookup result"""
    if isinstance(result, NativeResult):
        return format_native(result)
    if isinstance(result, DocResult):
        return format_doc(result, query, doc_base)
    raise TypeError(f"Unsupported result type: {type(result).__name__}")
