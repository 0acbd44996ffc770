from decimal import Decimal
from typing import Any, Dict, Optional

import httpx

from ..config import Settings, settings
from ..core.chains import ChainConfig
from ..core.errors import OracleUnavailableError
from .base import BalanceProvider, minor_to_native


class EtherscanProvider(BalanceProvider):
    """Etherscan-family explorers (Etherscan, BscScan, PolygonScan) for account-model chains.

    One instance serves every account-model chain: endpoint and key come from
    the ChainConfig being queried.
    """

    name = "etherscan"
    timeout_s = 15

    def __init__(self, config: Optional[Settings] = None):
        config = config or settings
        self.health_url = config.etherscan_base_url
        self.health_key = config.etherscan_api_key
        self.timeout_s = config.request_timeout_seconds

    async def ready(self) -> bool:
        return bool(self.health_key)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {
                "status": "unavailable",
                "reason": "API key not configured"
            }

        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(
                    self.health_url,
                    params={"module": "proxy", "action": "eth_blockNumber", "apikey": self.health_key},
                    timeout=self.timeout_s
                )
                response.raise_for_status()
                return {"status": "healthy", "latency_ms": int(response.elapsed.total_seconds() * 1000)}
        except Exception as e:
            return {"status": "error", "reason": str(e)}

    async def get_native_balance(self, address: str, chain: ChainConfig) -> Decimal:
        """Get the native balance via ``module=account&action=balance``.

        The explorer answers ``{"status": "1", "message": "OK", "result": "<wei>"}``;
        errors come back as status ``"0"`` with a text ``result``.
        """
        params = {
            "module": "account",
            "action": "balance",
            "address": address,
            "tag": "latest",
        }
        if chain.api_key:
            params["apikey"] = chain.api_key

        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(chain.api_url, params=params, timeout=self.timeout_s)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPError as e:
            raise OracleUnavailableError(f"{chain.name} balance request failed: {e}", provider=self.name) from e
        except ValueError as e:
            raise OracleUnavailableError(f"{chain.name} explorer returned invalid JSON: {e}", provider=self.name) from e

        if not isinstance(payload, dict) or "result" not in payload:
            raise OracleUnavailableError(f"Result field missing in {chain.name} response", provider=self.name)

        status = payload.get("status")
        if status is not None and str(status) != "1":
            raise OracleUnavailableError(
                f"{chain.name} explorer error: {payload.get('message')} ({payload.get('result')})",
                provider=self.name,
            )

        return minor_to_native(payload["result"], chain.decimals, provider=self.name)
