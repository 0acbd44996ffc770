"""
In-memory user registry.

Maps a chat identity to the wallets it tracks and the tokens it wants price
alerts for. State lives for the lifetime of the process only.

All mutations are synchronous, so on the single event loop a read and the
mutation that depends on it are never separated by another update.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Set, Union

from ..core.errors import (
    DuplicateSubscriptionError,
    DuplicateWalletError,
    SubscriptionNotFoundError,
    WalletNotFoundError,
)

logger = logging.getLogger(__name__)

UserId = Union[int, str]


@dataclass
class UserAccount:
    user_id: UserId
    wallets: Dict[str, List[str]] = field(default_factory=dict)  # chain key -> addresses, insertion ordered
    notifications: Set[str] = field(default_factory=set)         # price-service token ids

    @property
    def has_wallets(self) -> bool:
        return any(self.wallets.values())

    def wallets_on(self, chain_key: str) -> List[str]:
        """Copy of the wallets tracked on a chain."""
        return list(self.wallets.get(chain_key, []))


class UserStore:
    def __init__(self) -> None:
        self._accounts: Dict[UserId, UserAccount] = {}

    def get(self, user_id: UserId) -> Optional[UserAccount]:
        return self._accounts.get(user_id)

    def get_or_create(self, user_id: UserId) -> UserAccount:
        account = self._accounts.get(user_id)
        if account is None:
            account = UserAccount(user_id=user_id)
            self._accounts[user_id] = account
            logger.debug(f"Created account for user {user_id}")
        return account

    def accounts(self) -> List[UserAccount]:
        """Snapshot of all accounts, safe to iterate across awaits."""
        return list(self._accounts.values())

    def subscribed_accounts(self) -> Iterator[UserAccount]:
        for account in self.accounts():
            if account.notifications:
                yield account

    def __len__(self) -> int:
        return len(self._accounts)

    # Wallets

    def add_wallet(self, user_id: UserId, chain_key: str, address: str) -> UserAccount:
        """Append a wallet to a chain.

        Raises:
            DuplicateWalletError: If the address is already tracked on that chain.
        """
        account = self.get_or_create(user_id)
        chain_wallets = account.wallets.get(chain_key, [])
        if address in chain_wallets:
            raise DuplicateWalletError(chain_key, address)

        account.wallets[chain_key] = chain_wallets + [address]
        return account

    def remove_wallet(self, user_id: UserId, chain_key: str, index: int) -> str:
        """Remove the wallet at 1-based ``index`` on a chain and return its address.

        Remaining wallets keep their relative order. A chain left without
        wallets is dropped from the mapping.

        Raises:
            WalletNotFoundError: If there is no wallet at that position.
        """
        account = self.get(user_id)
        chain_wallets = account.wallets.get(chain_key, []) if account else []
        if not 1 <= index <= len(chain_wallets):
            raise WalletNotFoundError(chain_key, index)

        removed = chain_wallets[index - 1]
        remaining = chain_wallets[:index - 1] + chain_wallets[index:]
        if remaining:
            account.wallets[chain_key] = remaining
        else:
            del account.wallets[chain_key]
        return removed

    def clear_wallets(self, user_id: UserId) -> bool:
        """Forget every wallet of a user, keeping the account and its subscriptions.

        Returns False when the user has no account yet.
        """
        account = self.get(user_id)
        if account is None:
            return False
        account.wallets = {}
        return True

    # Price alert subscriptions

    def subscribe(self, user_id: UserId, token_id: str) -> UserAccount:
        account = self.get_or_create(user_id)
        if token_id in account.notifications:
            raise DuplicateSubscriptionError(token_id)
        account.notifications.add(token_id)
        return account

    def unsubscribe(self, user_id: UserId, token_id: str) -> UserAccount:
        account = self.get(user_id)
        if account is None or token_id not in account.notifications:
            raise SubscriptionNotFoundError(token_id)
        account.notifications.discard(token_id)
        return account
