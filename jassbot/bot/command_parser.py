"""
Command Parser

Turns a chat message into an Action. Only the first two whitespace-delimited
words matter: the trigger and the query. Anything after is ignored.

    "!j CreateUnit"        -> NativeQuery("CreateUnit")
    "!doc CreateUnit foo"  -> DocQuery("CreateUnit")
    "hello"                -> MissingArgument
    "!x foo"               -> NotATrigger
"""

from dataclasses import dataclass
from typing import Dict, Type, Union

from ..common.errors import MissingArgument, NotATrigger


@dataclass(frozen=True)
class NativeQuery:
    """Search native function signatures"""
    query: str


@dataclass(frozen=True)
class DocQuery:
    """Look up structured documentation"""
    query: str


Action = Union[NativeQuery, DocQuery]

TRIGGERS: Dict[str, Type] = {
    "!j": NativeQuery,
    "!jass": NativeQuery,
    "!d": DocQuery,
    "!doc": DocQuery,
}


def parse(text: str) -> Action:
    """
    Parse a message body into an Action.

    Raises:
        MissingArgument: fewer than two words
        NotATrigger: first word is not in TRIGGERS
    """
    words = text.split(None, 2)
    if len(words) < 2:
        raise MissingArgument("Second word is absent")

    command, query = words[0], words[1]
    action_type = TRIGGERS.get(command)
    if action_type is None:
        raise NotATrigger(f"First word is not a trigger: {command!r}")

    return action_type(query)
