"""
Chat Handlers

Handlers convert network-specific events to a common Message format.

Available Handlers:
- MatrixHandler: Matrix joined-room timeline events
"""

from .base import BaseHandler, Message
from .matrix import MatrixHandler

__all__ = [
    "BaseHandler",
    "Message",
    "MatrixHandler",
]
