"""
Supported chain configuration.

Chains come in two shapes: native-coin explorers (Blockchair style, balance
nested under the address in a dashboard envelope) and account-model
explorers (Etherscan style, flat ``result`` field). The shape is carried on
the chain itself as ``ChainKind`` so balance lookups dispatch on the kind and
never on the chain's identity.

The registry is built once at startup and is read-only afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from .errors import UnsupportedChainError


class ChainKind(str, Enum):
    """How a chain's explorer reports balances."""

    NATIVE_COIN = "native_coin"
    ACCOUNT = "account"


@dataclass(frozen=True)
class ChainConfig:
    key: str
    name: str
    kind: ChainKind
    api_url: str
    price_id: str                   # Coingecko coin id
    decimals: int                   # minor units per native unit, as a power of ten
    display_precision: int          # decimals shown for balances
    api_key: Optional[str] = None


def build_chain_registry(config=None) -> Mapping[str, ChainConfig]:
    """Build the immutable chain registry from settings.

    Insertion order is the order chains are offered to the user.
    """
    if config is None:
        from ..config import settings as config

    chains = {
        "ethereum": ChainConfig(
            key="ethereum",
            name="Ethereum",
            kind=ChainKind.ACCOUNT,
            api_url=config.etherscan_base_url,
            api_key=config.etherscan_api_key or None,
            price_id="ethereum",
            decimals=18,
            display_precision=6,
        ),
        "bsc": ChainConfig(
            key="bsc",
            name="Binance Smart Chain",
            kind=ChainKind.ACCOUNT,
            api_url=config.bscscan_base_url,
            api_key=config.bscscan_api_key or None,
            price_id="binancecoin",
            decimals=18,
            display_precision=6,
        ),
        "polygon": ChainConfig(
            key="polygon",
            name="Polygon",
            kind=ChainKind.ACCOUNT,
            api_url=config.polygonscan_base_url,
            api_key=config.polygonscan_api_key or None,
            price_id="matic-network",
            decimals=18,
            display_precision=6,
        ),
        "bitcoin": ChainConfig(
            key="bitcoin",
            name="Bitcoin",
            kind=ChainKind.NATIVE_COIN,
            api_url=f"{config.blockchair_base_url.rstrip('/')}/bitcoin",
            price_id="bitcoin",
            decimals=8,
            display_precision=8,
        ),
    }
    return MappingProxyType(chains)


def normalize_chain_key(raw: Optional[str]) -> str:
    return (raw or "").strip().lower()


def resolve_chain(raw: Optional[str], chains: Mapping[str, ChainConfig]) -> ChainConfig:
    """Case-insensitive lookup of a user-supplied chain key.

    Raises:
        UnsupportedChainError: If the key is not configured.
    """
    key = normalize_chain_key(raw)
    chain = chains.get(key)
    if chain is None:
        raise UnsupportedChainError(key or (raw or ""))
    return chain


def supported_chain_keys(chains: Mapping[str, ChainConfig]) -> str:
    return ", ".join(chains.keys())
