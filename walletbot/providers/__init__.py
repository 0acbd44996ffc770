"""HTTP adapters for block explorers and the price service."""

from .base import BalanceProvider, PriceProvider, Provider
from .blockchair import BlockchairProvider
from .coingecko import CoingeckoProvider
from .etherscan import EtherscanProvider

__all__ = [
    "Provider",
    "BalanceProvider",
    "PriceProvider",
    "BlockchairProvider",
    "CoingeckoProvider",
    "EtherscanProvider",
]
