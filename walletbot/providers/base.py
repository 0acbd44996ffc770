from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

from ..core.chains import ChainConfig
from ..core.errors import OracleUnavailableError


class Provider(ABC):
    """Base provider interface"""

    name: str
    timeout_s: int = 10

    @abstractmethod
    async def ready(self) -> bool:
        """Check if provider is ready to serve requests"""
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """Return provider health status"""
        pass


class BalanceProvider(Provider):
    """Provider for native-coin balances of a wallet on one kind of explorer"""

    @abstractmethod
    async def get_native_balance(self, address: str, chain: ChainConfig) -> Decimal:
        """Get the native balance in whole coins (ETH, BTC, ...).

        Raises:
            OracleUnavailableError: On transport failure or an unusable response.
        """
        pass


class PriceProvider(Provider):
    """Provider for token price data"""

    @abstractmethod
    async def get_usd_price(self, token_id: str) -> Optional[Decimal]:
        """Get the USD price for a token id, None if the service does not know it.

        Raises:
            OracleUnavailableError: On transport failure or an unusable response.
        """
        pass


def minor_to_native(raw: Any, decimals: int, provider: Optional[str] = None) -> Decimal:
    """Convert an integer minor-unit amount (satoshi, wei) to native units."""
    if isinstance(raw, bool) or raw is None:
        raise OracleUnavailableError(f"Unusable balance value: {raw!r}", provider=provider)
    try:
        minor = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        raise OracleUnavailableError(f"Non-numeric balance value: {raw!r}", provider=provider)
    if not minor.is_finite() or minor != minor.to_integral_value():
        raise OracleUnavailableError(f"Balance is not an integer amount of minor units: {raw!r}", provider=provider)
    return minor / (Decimal(10) ** decimals)
