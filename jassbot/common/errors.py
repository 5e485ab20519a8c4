"""
Jassbot Errors

Exceptions raised across the bot. Documentation-service lookups do not
raise: their failures are returned as QueryOutcome values (see doc_client).
"""


class JassbotError(Exception):
    """Base class for all Jassbot errors"""
    pass


class ParseFailure(JassbotError):
    """Message text is not a command the bot should answer"""
    pass


class NotATrigger(ParseFailure):
    """First word is not a recognized trigger"""
    pass


class MissingArgument(ParseFailure):
    """Message has fewer than two words"""
    pass


class ChatSendError(JassbotError):
    """Reply could not be delivered to the room"""

    def __init__(self, message: str, room_id: str = "") -> None:
        self.message = message
        self.room_id = room_id
        super().__init__(message)


class MatrixError(JassbotError):
    """Login or sync against the Matrix homeserver failed"""

    def __init__(self, message: str, status_code: int = 0) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ConfigError(JassbotError):
    """Required configuration is missing or invalid"""
    pass
