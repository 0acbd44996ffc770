from abc import ABC, abstractmethod
from typing import List

from ..services.user_store import UserId


class ChatTransport(ABC):
    """Outbound side of the chat transport"""

    name: str

    @abstractmethod
    async def send_message(self, user_id: UserId, text: str) -> None:
        """Deliver ``text`` to a user, splitting it if the transport requires"""
        pass


def split_message(text: str, limit: int) -> List[str]:
    """Split on line boundaries so each chunk fits in ``limit`` characters.

    Lines longer than the limit are hard-wrapped.
    """
    if len(text) <= limit:
        return [text]

    chunks: List[str] = []
    current = ""
    for line in text.split("\n"):
        while len(line) > limit:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:limit])
            line = line[limit:]
        candidate = f"{current}\n{line}" if current else line
        if len(candidate) > limit:
            chunks.append(current)
            current = line
        else:
            current = candidate
    if current:
        chunks.append(current)
    return chunks
