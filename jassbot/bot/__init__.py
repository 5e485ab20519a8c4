"""
Jassbot Bot - Command Pipeline

Watches chat rooms for two-word commands and answers them from the
jassbot documentation service.

Key Components:
- parse: Message text -> NativeQuery / DocQuery
- Dispatcher: parse -> query -> format -> reply, one message at a time
- format_reply: Doc-service results -> chat text
- Handlers: Network-specific event processing (Matrix)

Commands:
    !j <name>, !jass <name>   native function signature search
    !d <name>, !doc <name>    structured documentation lookup
"""

from .command_parser import parse, NativeQuery, DocQuery, Action, TRIGGERS
from .dispatcher import Dispatcher, DispatchStatus
from .formatter import ReplyContent, NO_RESULTS, format_reply, format_native, format_doc

__all__ = [
    "parse",
    "NativeQuery",
    "DocQuery",
    "Action",
    "TRIGGERS",
    "Dispatcher",
    "DispatchStatus",
    "ReplyContent",
    "NO_RESULTS",
    "format_reply",
    "format_native",
    "format_doc",
]
