"""
Error Classification

Domain errors raised by the user store, the chain registry and the oracle
providers. Every user-facing error is recoverable by reissuing a command;
only StartupMisconfigurationError stops the process.
"""

from enum import Enum
from typing import Optional


class ErrorCategory(str, Enum):
    """Categories of errors, used for logging and message selection."""

    UNSUPPORTED_CHAIN = "unsupported_chain"
    DUPLICATE = "duplicate"
    NOT_FOUND = "not_found"
    INVALID_SELECTION = "invalid_selection"
    ORACLE = "oracle"
    CONFIGURATION = "configuration"
    STATE = "state"


class WalletBotError(Exception):
    """Base class for all walletbot errors."""

    def __init__(self, message: str, category: ErrorCategory):
        super().__init__(message)
        self.message = message
        self.category = category


class UnsupportedChainError(WalletBotError):
    """Chain key is not part of the static chain configuration."""

    def __init__(self, chain_key: str):
        super().__init__(f"Unsupported chain: {chain_key!r}", ErrorCategory.UNSUPPORTED_CHAIN)
        self.chain_key = chain_key


class DuplicateWalletError(WalletBotError):
    """Wallet address is already tracked on that chain."""

    def __init__(self, chain_key: str, address: str):
        super().__init__(f"Wallet {address} already tracked on {chain_key}", ErrorCategory.DUPLICATE)
        self.chain_key = chain_key
        self.address = address


class DuplicateSubscriptionError(WalletBotError):
    """Token identifier is already in the user's alert subscriptions."""

    def __init__(self, token_id: str):
        super().__init__(f"Already subscribed to {token_id}", ErrorCategory.DUPLICATE)
        self.token_id = token_id


class NotFoundError(WalletBotError):
    """Something the user asked to remove does not exist."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCategory.NOT_FOUND)


class WalletNotFoundError(NotFoundError):
    def __init__(self, chain_key: str, index: Optional[int] = None):
        detail = f" at position {index}" if index is not None else ""
        super().__init__(f"No wallet on {chain_key}{detail}")
        self.chain_key = chain_key
        self.index = index


class SubscriptionNotFoundError(NotFoundError):
    def __init__(self, token_id: str):
        super().__init__(f"Not subscribed to {token_id}")
        self.token_id = token_id


class InvalidSelectionError(WalletBotError):
    """Non-numeric or out-of-range index during wallet removal."""

    def __init__(self, raw: str, upper_bound: int):
        super().__init__(
            f"Invalid selection {raw!r}; expected a number between 1 and {upper_bound}",
            ErrorCategory.INVALID_SELECTION,
        )
        self.raw = raw
        self.upper_bound = upper_bound


class OracleUnavailableError(WalletBotError):
    """Transport failure or malformed response from an external data source.

    Never shown to users: the oracles turn it into an absent value.
    """

    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(message, ErrorCategory.ORACLE)
        self.provider = provider


class StartupMisconfigurationError(WalletBotError):
    def __init__(self, message: str):
        super().__init__(message, ErrorCategory.CONFIGURATION)


class InvalidTransitionError(WalletBotError):
    """A conversation session attempted a transition its state table forbids."""

    def __init__(self, from_state: str, to_state: str):
        super().__init__(
            f"Invalid transition from {from_state} to {to_state}",
            ErrorCategory.STATE,
        )
        self.from_state = from_state
        self.to_state = to_state
