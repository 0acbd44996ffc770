from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

import httpx

from ..config import Settings, settings
from ..core.errors import OracleUnavailableError
from .base import PriceProvider


class CoingeckoProvider(PriceProvider):
    """Coingecko API provider for token prices"""

    name = "coingecko"
    timeout_s = 15

    def __init__(self, config: Optional[Settings] = None):
        config = config or settings
        self.api_key = config.coingecko_api_key
        self.base_url = config.coingecko_base_url.rstrip("/")
        self.timeout_s = config.request_timeout_seconds

    def _build_headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        if self.api_key:
            headers["X-CG-Demo-API-Key"] = self.api_key
        return headers

    async def ready(self) -> bool:
        return True  # API key is optional for basic tier

    async def health_check(self) -> Dict[str, Any]:
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(
                    f"{self.base_url}/ping",
                    headers=self._build_headers(),
                    timeout=self.timeout_s
                )
                response.raise_for_status()
                return {"status": "healthy", "latency_ms": int(response.elapsed.total_seconds() * 1000)}
        except Exception as e:
            return {"status": "error", "reason": str(e)}

    async def get_usd_price(self, token_id: str) -> Optional[Decimal]:
        """Get the USD price for a Coingecko coin id (e.g. ``bitcoin``, ``matic-network``)"""
        token_id = (token_id or "").strip().lower()
        if not token_id:
            return None

        params = {
            "ids": token_id,
            "vs_currencies": "usd",
        }

        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(
                    f"{self.base_url}/simple/price",
                    headers=self._build_headers(),
                    params=params,
                    timeout=self.timeout_s
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            raise OracleUnavailableError(f"Coingecko request failed: {e}", provider=self.name) from e
        except ValueError as e:
            raise OracleUnavailableError(f"Coingecko returned invalid JSON: {e}", provider=self.name) from e

        if not isinstance(data, dict):
            raise OracleUnavailableError(f"Unexpected Coingecko payload: {type(data).__name__}", provider=self.name)

        # Unknown ids are simply left out of the response
        price_data = data.get(token_id)
        if not isinstance(price_data, dict) or price_data.get("usd") is None:
            return None

        try:
            return Decimal(str(price_data["usd"]))
        except (InvalidOperation, ValueError) as e:
            raise OracleUnavailableError(f"Non-numeric price for {token_id}: {price_data['usd']!r}", provider=self.name) from e
