"""
Conversation Session Models

Defines the states a multi-step command moves through and the per-user
session record.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union


class ConversationState(str, Enum):
    """Where a user is in a multi-step command."""

    IDLE = "idle"                                   # No flow in progress
    AWAITING_CHAIN = "awaiting_chain"               # addwallet: asked which chain
    AWAITING_WALLET_ADDRESS = "awaiting_wallet_address"  # addwallet: asked for the address
    AWAITING_REMOVE_CHAIN = "awaiting_remove_chain"  # removewallet: asked which chain
    AWAITING_REMOVE_INDEX = "awaiting_remove_index"  # removewallet: showed numbered list


@dataclass
class ConversationSession:
    """One user's in-progress multi-step command."""

    user_id: Union[int, str]
    state: ConversationState = ConversationState.IDLE
    pending_chain: Optional[str] = None
    candidate_wallets: List[str] = field(default_factory=list)

    @property
    def is_active(self) -> bool:
        return self.state != ConversationState.IDLE

    def reset(self) -> None:
        self.state = ConversationState.IDLE
        self.pending_chain = None
        self.candidate_wallets = []

