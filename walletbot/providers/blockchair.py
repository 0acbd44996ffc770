from decimal import Decimal
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from ..config import Settings, settings
from ..core.chains import ChainConfig
from ..core.errors import OracleUnavailableError
from .base import BalanceProvider, minor_to_native


class BlockchairProvider(BalanceProvider):
    """Blockchair dashboards API for native-coin chains (balances in satoshi)"""

    name = "blockchair"
    timeout_s = 15

    def __init__(self, config: Optional[Settings] = None):
        config = config or settings
        self.base_url = config.blockchair_base_url.rstrip("/")
        self.timeout_s = config.request_timeout_seconds

    async def ready(self) -> bool:
        return True  # no key needed

    async def health_check(self) -> Dict[str, Any]:
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(
                    f"{self.base_url}/bitcoin/stats",
                    timeout=self.timeout_s
                )
                response.raise_for_status()
                return {"status": "healthy", "latency_ms": int(response.elapsed.total_seconds() * 1000)}
        except Exception as e:
            return {"status": "error", "reason": str(e)}

    async def get_native_balance(self, address: str, chain: ChainConfig) -> Decimal:
        """Get the balance for ``address`` from ``{api}/dashboards/address/{address}``.

        The payload nests the balance as ``data[address].address.balance``.
        """
        url = f"{chain.api_url.rstrip('/')}/dashboards/address/{quote(address, safe='')}"

        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(url, timeout=self.timeout_s)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPError as e:
            raise OracleUnavailableError(f"{chain.name} balance request failed: {e}", provider=self.name) from e
        except ValueError as e:
            raise OracleUnavailableError(f"{chain.name} explorer returned invalid JSON: {e}", provider=self.name) from e

        entry = _address_entry(payload, address)
        if entry is None:
            raise OracleUnavailableError(f"No dashboard entry for {address} on {chain.name}", provider=self.name)

        address_info = entry.get("address")
        balance = address_info.get("balance") if isinstance(address_info, dict) else None
        if balance is None:
            raise OracleUnavailableError(f"Balance field missing for {address} on {chain.name}", provider=self.name)

        return minor_to_native(balance, chain.decimals, provider=self.name)


def _address_entry(payload: Any, address: str) -> Optional[Dict[str, Any]]:
    if not isinstance(payload, dict):
        return None
    data = payload.get("data")
    if not isinstance(data, dict):
        return None

    entry = data.get(address)
    # Blockchair normalises some address formats (bech32 is lowercased)
    if entry is None and len(data) == 1:
        entry = next(iter(data.values()))
    return entry if isinstance(entry, dict) else None
