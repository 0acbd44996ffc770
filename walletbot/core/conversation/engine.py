"""
Conversation Engine

Per-user state machine for commands that need more than one reply
(adding and removing wallets). Each user has at most one session; the next
message a user sends while a session is active is taken as the answer to the
pending prompt, whatever it looks like. Every path ends back in IDLE.

All handlers are synchronous: a session transition and the store mutation it
triggers complete without yielding to the event loop, so two updates from
the same user can never interleave inside one step.
"""

import logging
from typing import Dict, Mapping, Optional, Set, Union

from ...services.user_store import UserId, UserStore
from .. import messages
from ..chains import ChainConfig, resolve_chain
from ..errors import (
    DuplicateWalletError,
    InvalidSelectionError,
    InvalidTransitionError,
    UnsupportedChainError,
    WalletBotError,
    WalletNotFoundError,
)
from .models import ConversationSession, ConversationState


class ConversationEngine:
    """
    Drives the addwallet and removewallet flows.

    IDLE -> AWAITING_CHAIN -> AWAITING_WALLET_ADDRESS -> IDLE
    IDLE -> AWAITING_REMOVE_CHAIN -> AWAITING_REMOVE_INDEX -> IDLE

    Any invalid answer aborts to IDLE. Starting a new flow while one is
    pending discards the pending one.
    """

    TRANSITIONS: Dict[ConversationState, Set[ConversationState]] = {
        ConversationState.IDLE: {
            ConversationState.AWAITING_CHAIN,
            ConversationState.AWAITING_REMOVE_CHAIN,
        },
        ConversationState.AWAITING_CHAIN: {
            ConversationState.AWAITING_WALLET_ADDRESS,
            ConversationState.IDLE,
        },
        ConversationState.AWAITING_WALLET_ADDRESS: {
            ConversationState.IDLE,
        },
        ConversationState.AWAITING_REMOVE_CHAIN: {
            ConversationState.AWAITING_REMOVE_INDEX,
            ConversationState.IDLE,
        },
        ConversationState.AWAITING_REMOVE_INDEX: {
            ConversationState.IDLE,
        },
    }

    def __init__(
        self,
        store: UserStore,
        chains: Mapping[str, ChainConfig],
        logger: Optional[logging.Logger] = None,
    ):
        self.store = store
        self.chains = chains
        self.logger = logger or logging.getLogger(__name__)
        self._sessions: Dict[UserId, ConversationSession] = {}

    def session_for(self, user_id: UserId) -> ConversationSession:
        """Current session for a user; an IDLE session if none is stored."""
        return self._sessions.get(user_id) or ConversationSession(user_id=user_id)

    def has_active_session(self, user_id: UserId) -> bool:
        session = self._sessions.get(user_id)
        return session is not None and session.is_active

    def cancel(self, user_id: UserId) -> bool:
        """Drop a user's pending flow. Returns True if one was active."""
        session = self._sessions.pop(user_id, None)
        return session is not None and session.is_active

    # Flow entry points

    def begin_add_wallet(self, user_id: UserId) -> str:
        session = self._fresh_session(user_id)
        self._transition(session, ConversationState.AWAITING_CHAIN)
        return messages.ask_chain(self.chains)

    def begin_remove_wallet(self, user_id: UserId) -> str:
        account = self.store.get(user_id)
        if account is None or not account.has_wallets:
            self.cancel(user_id)
            return messages.NOTHING_TO_REMOVE

        session = self._fresh_session(user_id)
        self._transition(session, ConversationState.AWAITING_REMOVE_CHAIN)
        return messages.ask_chain(self.chains)

    def handle_reply(self, user_id: UserId, text: Optional[str]) -> Optional[str]:
        """Feed the user's next message into their pending flow.

        Returns the reply to send, or None when no flow is active.
        """
        session = self._sessions.get(user_id)
        if session is None or not session.is_active:
            return None

        text = text or ""
        handler = {
            ConversationState.AWAITING_CHAIN: self._on_add_chain,
            ConversationState.AWAITING_WALLET_ADDRESS: self._on_wallet_address,
            ConversationState.AWAITING_REMOVE_CHAIN: self._on_remove_chain,
            ConversationState.AWAITING_REMOVE_INDEX: self._on_remove_index,
        }[session.state]
        reply = handler(session, text)

        if not session.is_active:
            self._sessions.pop(user_id, None)
        return reply

    # State handlers

    def _on_add_chain(self, session: ConversationSession, text: str) -> str:
        try:
            chain = resolve_chain(text, self.chains)
        except UnsupportedChainError as e:
            self._abort(session, e)
            return messages.UNSUPPORTED_CHAIN

        session.pending_chain = chain.key
        self._transition(session, ConversationState.AWAITING_WALLET_ADDRESS)
        return messages.ENTER_WALLET_ADDRESS

    def _on_wallet_address(self, session: ConversationSession, text: str) -> str:
        chain = self.chains[session.pending_chain]
        address = text.strip()
        if not address:
            self._abort(session, "empty wallet address")
            return messages.EMPTY_WALLET_ADDRESS

        try:
            self.store.add_wallet(session.user_id, chain.key, address)
        except DuplicateWalletError as e:
            self._abort(session, e)
            return messages.WALLET_ALREADY_ADDED

        self._transition(session, ConversationState.IDLE, reason=f"added wallet on {chain.key}")
        return messages.wallet_added(chain)

    def _on_remove_chain(self, session: ConversationSession, text: str) -> str:
        try:
            chain = resolve_chain(text, self.chains)
        except UnsupportedChainError as e:
            self._abort(session, e)
            return messages.UNSUPPORTED_CHAIN

        account = self.store.get(session.user_id)
        wallets = account.wallets_on(chain.key) if account else []
        if not wallets:
            self._abort(session, f"no wallets on {chain.key}")
            return messages.no_wallets_on_chain(chain)

        session.pending_chain = chain.key
        session.candidate_wallets = wallets
        self._transition(session, ConversationState.AWAITING_REMOVE_INDEX)
        return messages.numbered_wallets(chain, wallets)

    def _on_remove_index(self, session: ConversationSession, text: str) -> str:
        chain = self.chains[session.pending_chain]
        try:
            index = parse_selection(text, len(session.candidate_wallets))
            removed = self.store.remove_wallet(session.user_id, chain.key, index)
        except (InvalidSelectionError, WalletNotFoundError) as e:
            self._abort(session, e)
            return messages.INVALID_SELECTION

        self._transition(session, ConversationState.IDLE, reason=f"removed wallet {index} on {chain.key}")
        return messages.wallet_removed(chain, removed)

    # Internals

    def _fresh_session(self, user_id: UserId) -> ConversationSession:
        previous = self._sessions.get(user_id)
        if previous is not None and previous.is_active:
            self.logger.info(f"User {user_id}: new command supersedes pending {previous.state.value} flow")
        session = ConversationSession(user_id=user_id)
        self._sessions[user_id] = session
        return session

    def _abort(self, session: ConversationSession, cause: Union[str, WalletBotError]) -> None:
        if isinstance(cause, WalletBotError):
            cause = f"{cause.category.value}: {cause.message}"
        self.logger.info(f"User {session.user_id}: {session.state.value} flow aborted ({cause})")
        self._transition(session, ConversationState.IDLE, reason="aborted")

    def _transition(
        self,
        session: ConversationSession,
        to_state: ConversationState,
        reason: Optional[str] = None,
    ) -> None:
        from_state = session.state
        if to_state not in self.TRANSITIONS.get(from_state, set()):
            raise InvalidTransitionError(from_state.value, to_state.value)

        if to_state == ConversationState.IDLE:
            session.reset()
        else:
            session.state = to_state

        self.logger.debug(
            f"User {session.user_id}: {from_state.value} -> {to_state.value}"
            f"{f' ({reason})' if reason else ''}"
        )


def parse_selection(text: str, upper_bound: int) -> int:
    """Parse a 1-based list position.

    Raises:
        InvalidSelectionError: If ``text`` is not an integer in ``[1, upper_bound]``.
    """
    raw = (text or "").strip()
    if not (raw.isascii() and raw.isdigit()):
        raise InvalidSelectionError(raw, upper_bound)
    index = int(raw)
    if not 1 <= index <= upper_bound:
        raise InvalidSelectionError(raw, upper_bound)
    return index
