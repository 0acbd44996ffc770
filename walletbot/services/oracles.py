"""
Balance and price oracles.

Both oracles turn every failure into an absent value: callers receive
``None`` (or a BalanceQuote without an amount) and decide how to present it.
Failures are logged for operators and never retried.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, Mapping, Optional

from ..config import Settings
from ..core.chains import ChainConfig, ChainKind
from ..core.errors import OracleUnavailableError
from ..providers.base import BalanceProvider, PriceProvider
from ..providers.blockchair import BlockchairProvider
from ..providers.coingecko import CoingeckoProvider
from ..providers.etherscan import EtherscanProvider
from ..types import BalanceQuote

logger = logging.getLogger(__name__)


def default_balance_providers(config: Optional[Settings] = None) -> Dict[ChainKind, BalanceProvider]:
    return {
        ChainKind.NATIVE_COIN: BlockchairProvider(config),
        ChainKind.ACCOUNT: EtherscanProvider(config),
    }


class BalanceOracle:
    """Resolves (wallet, chain) to a native-unit balance."""

    def __init__(self, providers: Optional[Mapping[ChainKind, BalanceProvider]] = None):
        self._providers: Dict[ChainKind, BalanceProvider] = dict(providers or default_balance_providers())

    @property
    def providers(self) -> Dict[ChainKind, BalanceProvider]:
        return dict(self._providers)

    async def quote(self, wallet: str, chain: ChainConfig) -> BalanceQuote:
        provider = self._providers.get(chain.kind)
        if provider is None:
            logger.warning(f"No balance provider registered for {chain.kind.value} chains ({chain.key})")
            return BalanceQuote(reason=f"no provider for {chain.kind.value}")

        try:
            amount = await provider.get_native_balance(wallet, chain)
        except OracleUnavailableError as e:
            logger.warning(f"Balance lookup failed for {wallet} on {chain.key} via {provider.name}: {e.message}")
            return BalanceQuote(reason=e.message)
        except Exception as e:
            logger.exception(f"Unexpected error fetching {chain.key} balance for {wallet}")
            return BalanceQuote(reason=str(e) or type(e).__name__)

        return BalanceQuote(amount=amount)

    async def resolve(self, wallet: str, chain: ChainConfig) -> Optional[Decimal]:
        """Native-unit balance, or None when it cannot be determined (never zero by default)."""
        quote = await self.quote(wallet, chain)
        return quote.amount


class PriceOracle:
    """Resolves a price-service token id to a USD price. Every call is a live fetch."""

    def __init__(self, provider: Optional[PriceProvider] = None):
        self._provider = provider or CoingeckoProvider()

    @property
    def provider(self) -> PriceProvider:
        return self._provider

    async def resolve(self, token_id: str) -> Optional[Decimal]:
        try:
            price = await self._provider.get_usd_price(token_id)
        except OracleUnavailableError as e:
            logger.warning(f"Price lookup failed for {token_id} via {self._provider.name}: {e.message}")
            return None
        except Exception:
            logger.exception(f"Unexpected error fetching price for {token_id}")
            return None

        if price is None:
            logger.info(f"Price service does not know token {token_id!r}")
        return price
