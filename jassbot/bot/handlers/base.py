"""
Base Handler

Abstract base class for chat-network event handlers.
Provides a common interface for converting events to Messages.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Dict, Any


@dataclass
class Message:
    """
    Common message format for all chat networks.

    This is all the Dispatcher ever sees of an incoming event: the plain
    text body plus enough addressing to route a reply.
    """
    text: str
    sender: str
    room_id: str
    event_id: str
    is_own: bool = False

    @property
    def is_valid(self) -> bool:
        """Check if message has minimum required fields"""
        return bool(self.text and self.text.strip() and self.room_id)


class BaseHandler(ABC):
    """
    Abstract base class for chat handlers.

    Each handler must implement:
    - parse_event: Convert raw event to Message
    """

    @abstractmethod
    def parse_event(self, room_id: str, raw_event: Dict[str, Any]) -> Optional[Message]:
        """
        Parse a raw timeline event into a Message.

        Args:
            room_id: Room the event arrived in
            raw_event: Raw event data from the network

        Returns:
            Message object or None if event should be ignored
        """
        pass

    def should_process(self, message: Message) -> bool:
        """
        Check if message should be handed to the Dispatcher.

        Default implementation filters out:
        - Invalid (empty) messages
        - The bot's own messages
        """
        if not message.is_valid:
            return False

        if message.is_own:
            return False

        return True
