"""Builds the object graph shared by the Telegram bot, the HTTP app and the CLI."""

from dataclasses import dataclass
from typing import List, Mapping, Optional

from .config import Settings, settings
from .core.chains import ChainConfig, build_chain_registry
from .core.commands import CommandRouter
from .core.conversation import ConversationEngine
from .providers.base import Provider
from .providers.coingecko import CoingeckoProvider
from .services.oracles import BalanceOracle, PriceOracle, default_balance_providers
from .services.portfolio import PortfolioAggregator
from .services.user_store import UserStore


@dataclass
class Services:
    config: Settings
    chains: Mapping[str, ChainConfig]
    store: UserStore
    balances: BalanceOracle
    prices: PriceOracle
    aggregator: PortfolioAggregator
    engine: ConversationEngine
    router: CommandRouter

    def providers(self) -> List[Provider]:
        return [self.prices.provider, *self.balances.providers.values()]


def build_services(
    config: Optional[Settings] = None,
    balances: Optional[BalanceOracle] = None,
    prices: Optional[PriceOracle] = None,
) -> Services:
    config = config or settings
    chains = build_chain_registry(config)
    store = UserStore()
    balances = balances or BalanceOracle(default_balance_providers(config))
    prices = prices or PriceOracle(CoingeckoProvider(config))
    aggregator = PortfolioAggregator(balances, prices, chains)
    engine = ConversationEngine(store, chains)
    router = CommandRouter(store, engine, aggregator, prices, chains)
    return Services(
        config=config,
        chains=chains,
        store=store,
        balances=balances,
        prices=prices,
        aggregator=aggregator,
        engine=engine,
        router=router,
    )
