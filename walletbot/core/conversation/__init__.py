from .engine import ConversationEngine, parse_selection
from .models import ConversationSession, ConversationState

__all__ = [
    "ConversationEngine",
    "ConversationSession",
    "ConversationState",
    "parse_selection",
]
