"""Chat transports: where inbound messages come from and replies go."""

from .base import ChatTransport, split_message
from .console import ConsoleTransport

__all__ = [
    "ChatTransport",
    "ConsoleTransport",
    "split_message",
]
