from typing import Callable, List, Optional, Tuple

from ..services.user_store import UserId
from .base import ChatTransport


class ConsoleTransport(ChatTransport):
    """Prints outbound messages; used by the local CLI"""

    name = "console"

    def __init__(self, writer: Optional[Callable[[str], None]] = None):
        self._write = writer or print
        self.sent: List[Tuple[UserId, str]] = []

    async def send_message(self, user_id: UserId, text: str) -> None:
        self.sent.append((user_id, text))
        self._write(f"🤖 [{user_id}] {text}")
