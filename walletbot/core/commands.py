"""
Command routing.

Every inbound text message for a user goes through ``CommandRouter.handle``:

1. ``addwallet`` / ``removewallet`` always start a fresh flow, discarding any
   pending one.
2. Otherwise, if the user has a pending flow, the raw message is its answer.
3. Otherwise a recognised command runs its single-turn handler.
4. Anything else is ignored.

Command words are matched case-sensitively on the first token, with or
without a leading ``/`` and an optional ``@botname`` suffix.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Mapping, Optional

from ..services.oracles import PriceOracle
from ..services.portfolio import PortfolioAggregator
from ..services.user_store import UserId, UserStore
from . import messages
from .chains import ChainConfig, normalize_chain_key
from .conversation import ConversationEngine
from .errors import DuplicateSubscriptionError, SubscriptionNotFoundError

logger = logging.getLogger(__name__)

MULTI_STEP_COMMANDS = frozenset({"addwallet", "removewallet"})

COMMAND_NAMES = frozenset({
    "start",
    "help",
    "addwallet",
    "removewallet",
    "listwallets",
    "checkwallets",
    "gettokenprice",
    "subscribeprice",
    "unsubscribeprice",
    "portfolio",
    "clearwallets",
})


@dataclass(frozen=True)
class Command:
    name: str
    argument: str = ""


def parse_command(text: Optional[str]) -> Optional[Command]:
    """Split ``/name@bot argument text`` into a Command, None for non-command text."""
    if not text:
        return None
    parts = text.split(maxsplit=1)
    if not parts:
        return None

    head = parts[0]
    rest = parts[1] if len(parts) > 1 else ""
    name = head[1:] if head.startswith("/") else head
    name = name.split("@", 1)[0]
    if name not in COMMAND_NAMES:
        return None
    return Command(name=name, argument=rest.strip())


Handler = Callable[[UserId, str], Awaitable[List[str]]]


class CommandRouter:
    def __init__(
        self,
        store: UserStore,
        engine: ConversationEngine,
        aggregator: PortfolioAggregator,
        prices: PriceOracle,
        chains: Mapping[str, ChainConfig],
    ):
        self.store = store
        self.engine = engine
        self.aggregator = aggregator
        self.prices = prices
        self.chains = chains
        self._handlers: Dict[str, Handler] = {
            "start": self.cmd_start,
            "help": self.cmd_help,
            "listwallets": self.cmd_list_wallets,
            "checkwallets": self.cmd_check_wallets,
            "gettokenprice": self.cmd_get_token_price,
            "subscribeprice": self.cmd_subscribe_price,
            "unsubscribeprice": self.cmd_unsubscribe_price,
            "portfolio": self.cmd_portfolio,
            "clearwallets": self.cmd_clear_wallets,
        }

    async def handle(self, user_id: UserId, text: Optional[str]) -> List[str]:
        """Process one inbound message and return the replies to send, in order."""
        command = parse_command(text)

        if command is not None and command.name in MULTI_STEP_COMMANDS:
            if command.name == "addwallet":
                return [self.engine.begin_add_wallet(user_id)]
            return [self.engine.begin_remove_wallet(user_id)]

        if self.engine.has_active_session(user_id):
            reply = self.engine.handle_reply(user_id, text)
            return [reply] if reply else []

        if command is None:
            return []

        logger.debug(f"User {user_id}: /{command.name}")
        return await self._handlers[command.name](user_id, command.argument)

    # Single-turn handlers

    async def cmd_start(self, user_id: UserId, argument: str) -> List[str]:
        return [messages.welcome_text()]

    async def cmd_help(self, user_id: UserId, argument: str) -> List[str]:
        return [messages.help_text()]

    async def cmd_list_wallets(self, user_id: UserId, argument: str) -> List[str]:
        account = self.store.get(user_id)
        if account is None or not account.has_wallets:
            return [messages.NO_WALLETS]
        return [messages.wallet_list(account.wallets, self.chains)]

    async def cmd_check_wallets(self, user_id: UserId, argument: str) -> List[str]:
        account = self.store.get(user_id)
        if account is None or not account.has_wallets:
            return [messages.NO_WALLETS]

        chain_key = None
        if argument:
            chain_key = normalize_chain_key(argument)
            chain = self.chains.get(chain_key)
            if chain is None:
                return [messages.unsupported_chain_filter(chain_key, self.chains)]
            if not account.wallets_on(chain_key):
                return [messages.no_wallets_on_chain(chain)]

        report = await self.aggregator.build_report(account, chain_key=chain_key)
        return [messages.balance_report(report)]

    async def cmd_portfolio(self, user_id: UserId, argument: str) -> List[str]:
        account = self.store.get(user_id)
        if account is None or not account.has_wallets:
            return [messages.NO_WALLETS]

        report = await self.aggregator.build_report(account)
        return [messages.portfolio_report(report)]

    async def cmd_clear_wallets(self, user_id: UserId, argument: str) -> List[str]:
        if not self.store.clear_wallets(user_id):
            return [messages.NOTHING_TO_CLEAR]
        return [messages.WALLETS_CLEARED]

    async def cmd_get_token_price(self, user_id: UserId, argument: str) -> List[str]:
        token_id = argument.lower()
        if not token_id:
            return [messages.usage("gettokenprice")]

        price = await self.prices.resolve(token_id)
        if price is None:
            return [messages.token_price_unavailable(token_id)]
        return [messages.token_price(token_id, price)]

    async def cmd_subscribe_price(self, user_id: UserId, argument: str) -> List[str]:
        token_id = argument.lower()
        if not token_id:
            return [messages.usage("subscribeprice")]

        if not await self._is_known_token(token_id):
            return [messages.INVALID_TOKEN]

        try:
            self.store.subscribe(user_id, token_id)
        except DuplicateSubscriptionError:
            return [messages.already_subscribed(token_id)]
        return [messages.subscribed(token_id)]

    async def cmd_unsubscribe_price(self, user_id: UserId, argument: str) -> List[str]:
        token_id = argument.lower()
        if not token_id:
            return [messages.usage("unsubscribeprice")]

        try:
            self.store.unsubscribe(user_id, token_id)
        except SubscriptionNotFoundError:
            return [messages.not_subscribed(token_id)]
        return [messages.unsubscribed(token_id)]

    async def _is_known_token(self, token_id: str) -> bool:
        """A chain's native token is always accepted; anything else must resolve to a price now."""
        if any(chain.price_id == token_id for chain in self.chains.values()):
            return True
        return await self.prices.resolve(token_id) is not None
