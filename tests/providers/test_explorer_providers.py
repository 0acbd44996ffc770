from decimal import Decimal

import httpx
import pytest

from walletbot.config import Settings
from walletbot.core.chains import build_chain_registry
from walletbot.core.errors import OracleUnavailableError
from walletbot.providers import blockchair as blockchair_module
from walletbot.providers import coingecko as coingecko_module
from walletbot.providers import etherscan as etherscan_module
from walletbot.providers.base import minor_to_native
from walletbot.providers.blockchair import BlockchairProvider
from walletbot.providers.coingecko import CoingeckoProvider
from walletbot.providers.etherscan import EtherscanProvider


class _DummyResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            request = httpx.Request("GET", "https://example.test")
            raise httpx.HTTPStatusError(
                f"HTTP {self.status_code}",
                request=request,
                response=httpx.Response(self.status_code, request=request),
            )
        return None

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


def _client_returning(response=None, error=None):
    class _DummyClient:
        requests = []

        def __init__(self, *_, **__):
            pass

        async def __aenter__(self):
            return self

        async def __aexit__(self, exc_type, exc, tb):
            return False

        async def get(self, url, params=None, headers=None, timeout=None):
            _DummyClient.requests.append({"url": url, "params": params, "headers": headers})
            if error is not None:
                raise error
            return response

    return _DummyClient


@pytest.fixture
def config() -> Settings:
    return Settings(
        _env_file=None,
        etherscan_api_key="eth-key",
        bscscan_api_key="",
        coingecko_api_key="cg-key",
    )


@pytest.fixture
def chains(config):
    return build_chain_registry(config)


class TestMinorToNative:
    def test_converts_wei(self):
        assert minor_to_native("1500000000000000000", 18) == Decimal("1.5")

    def test_converts_satoshi_int(self):
        assert minor_to_native(150000000, 8) == Decimal("1.5")

    def test_zero(self):
        assert minor_to_native("0", 18) == Decimal("0")

    @pytest.mark.parametrize("raw", [None, True, "abc", "1.5", "NaN", "Infinity", "Max rate limit reached"])
    def test_rejects_unusable_values(self, raw):
        with pytest.raises(OracleUnavailableError):
            minor_to_native(raw, 18)


class TestBlockchairProvider:
    @pytest.mark.asyncio
    async def test_parses_nested_balance(self, monkeypatch, config, chains):
        payload = {"data": {"bc1qxyz": {"address": {"balance": 150000000}}}}
        client = _client_returning(_DummyResponse(payload))
        monkeypatch.setattr(blockchair_module.httpx, "AsyncClient", client)

        balance = await BlockchairProvider(config).get_native_balance("bc1qxyz", chains["bitcoin"])

        assert balance == Decimal("1.5")
        assert client.requests[0]["url"] == "https://api.blockchair.com/bitcoin/dashboards/address/bc1qxyz"

    @pytest.mark.asyncio
    async def test_address_is_escaped_in_url_path(self, monkeypatch, config, chains):
        address = "bc1/../stats?x=1#frag"
        payload = {"data": {address: {"address": {"balance": 0}}}}
        client = _client_returning(_DummyResponse(payload))
        monkeypatch.setattr(blockchair_module.httpx, "AsyncClient", client)

        await BlockchairProvider(config).get_native_balance(address, chains["bitcoin"])

        assert client.requests[0]["url"] == (
            "https://api.blockchair.com/bitcoin/dashboards/address/bc1%2F..%2Fstats%3Fx%3D1%23frag"
        )

    @pytest.mark.asyncio
    async def test_falls_back_to_single_entry(self, monkeypatch, config, chains):
        payload = {"data": {"bc1qxyz": {"address": {"balance": 1}}}}
        monkeypatch.setattr(blockchair_module.httpx, "AsyncClient", _client_returning(_DummyResponse(payload)))

        balance = await BlockchairProvider(config).get_native_balance("BC1QXYZ", chains["bitcoin"])

        assert balance == Decimal("0.00000001")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [
        {"data": {}},
        {"data": None},
        {"data": {"bc1": {"address": {}}}, "other": 1},
        {"data": {"bc1": {"address": {"balance": "lots"}}}},
        [],
    ])
    async def test_malformed_payload_raises(self, monkeypatch, config, chains, payload):
        monkeypatch.setattr(blockchair_module.httpx, "AsyncClient", _client_returning(_DummyResponse(payload)))

        with pytest.raises(OracleUnavailableError):
            await BlockchairProvider(config).get_native_balance("bc1", chains["bitcoin"])

    @pytest.mark.asyncio
    async def test_http_error_raises(self, monkeypatch, config, chains):
        monkeypatch.setattr(
            blockchair_module.httpx, "AsyncClient", _client_returning(_DummyResponse({}, status_code=430))
        )

        with pytest.raises(OracleUnavailableError) as exc_info:
            await BlockchairProvider(config).get_native_balance("bc1", chains["bitcoin"])

        assert exc_info.value.provider == "blockchair"

    @pytest.mark.asyncio
    async def test_connection_error_raises(self, monkeypatch, config, chains):
        monkeypatch.setattr(
            blockchair_module.httpx, "AsyncClient", _client_returning(error=httpx.ConnectError("refused"))
        )

        with pytest.raises(OracleUnavailableError):
            await BlockchairProvider(config).get_native_balance("bc1", chains["bitcoin"])


class TestEtherscanProvider:
    @pytest.mark.asyncio
    async def test_parses_flat_result(self, monkeypatch, config, chains):
        payload = {"status": "1", "message": "OK", "result": "2000000000000000000"}
        client = _client_returning(_DummyResponse(payload))
        monkeypatch.setattr(etherscan_module.httpx, "AsyncClient", client)

        balance = await EtherscanProvider(config).get_native_balance("0xABC", chains["ethereum"])

        assert balance == Decimal("2")
        request = client.requests[0]
        assert request["url"] == "https://api.etherscan.io/api"
        assert request["params"] == {
            "module": "account",
            "action": "balance",
            "address": "0xABC",
            "tag": "latest",
            "apikey": "eth-key",
        }

    @pytest.mark.asyncio
    async def test_omits_missing_key_and_uses_chain_endpoint(self, monkeypatch, config, chains):
        client = _client_returning(_DummyResponse({"status": "1", "message": "OK", "result": "0"}))
        monkeypatch.setattr(etherscan_module.httpx, "AsyncClient", client)

        balance = await EtherscanProvider(config).get_native_balance("0xABC", chains["bsc"])

        assert balance == Decimal("0")
        assert client.requests[0]["url"] == "https://api.bscscan.com/api"
        assert "apikey" not in client.requests[0]["params"]

    @pytest.mark.asyncio
    async def test_error_envelope_raises(self, monkeypatch, config, chains):
        payload = {"status": "0", "message": "NOTOK", "result": "Invalid API Key"}
        monkeypatch.setattr(etherscan_module.httpx, "AsyncClient", _client_returning(_DummyResponse(payload)))

        with pytest.raises(OracleUnavailableError) as exc_info:
            await EtherscanProvider(config).get_native_balance("0xABC", chains["polygon"])

        assert "Invalid API Key" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_missing_result_raises(self, monkeypatch, config, chains):
        monkeypatch.setattr(
            etherscan_module.httpx, "AsyncClient", _client_returning(_DummyResponse({"status": "1"}))
        )

        with pytest.raises(OracleUnavailableError):
            await EtherscanProvider(config).get_native_balance("0xABC", chains["ethereum"])

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self, monkeypatch, config, chains):
        monkeypatch.setattr(
            etherscan_module.httpx, "AsyncClient", _client_returning(_DummyResponse(ValueError("not json")))
        )

        with pytest.raises(OracleUnavailableError):
            await EtherscanProvider(config).get_native_balance("0xABC", chains["ethereum"])

    @pytest.mark.asyncio
    async def test_health_without_key_is_unavailable(self):
        provider = EtherscanProvider(Settings(_env_file=None, etherscan_api_key=""))

        status = await provider.health_check()

        assert status["status"] == "unavailable"


class TestCoingeckoProvider:
    @pytest.mark.asyncio
    async def test_returns_usd_price(self, monkeypatch, config):
        client = _client_returning(_DummyResponse({"bitcoin": {"usd": 50000.5}}))
        monkeypatch.setattr(coingecko_module.httpx, "AsyncClient", client)

        price = await CoingeckoProvider(config).get_usd_price("Bitcoin")

        assert price == Decimal("50000.5")
        request = client.requests[0]
        assert request["url"] == "https://api.coingecko.com/api/v3/simple/price"
        assert request["params"] == {"ids": "bitcoin", "vs_currencies": "usd"}
        assert request["headers"] == {"X-CG-Demo-API-Key": "cg-key"}

    @pytest.mark.asyncio
    async def test_unknown_token_returns_none(self, monkeypatch, config):
        monkeypatch.setattr(coingecko_module.httpx, "AsyncClient", _client_returning(_DummyResponse({})))

        assert await CoingeckoProvider(config).get_usd_price("notacoin") is None

    @pytest.mark.asyncio
    async def test_missing_usd_field_returns_none(self, monkeypatch, config):
        monkeypatch.setattr(
            coingecko_module.httpx, "AsyncClient", _client_returning(_DummyResponse({"bitcoin": {}}))
        )

        assert await CoingeckoProvider(config).get_usd_price("bitcoin") is None

    @pytest.mark.asyncio
    async def test_rate_limit_raises(self, monkeypatch, config):
        monkeypatch.setattr(
            coingecko_module.httpx, "AsyncClient", _client_returning(_DummyResponse({}, status_code=429))
        )

        with pytest.raises(OracleUnavailableError) as exc_info:
            await CoingeckoProvider(config).get_usd_price("bitcoin")

        assert exc_info.value.provider == "coingecko"

    @pytest.mark.asyncio
    async def test_no_key_sends_no_header(self, monkeypatch):
        client = _client_returning(_DummyResponse({"ethereum": {"usd": 2000}}))
        monkeypatch.setattr(coingecko_module.httpx, "AsyncClient", client)

        price = await CoingeckoProvider(Settings(_env_file=None, coingecko_api_key="")).get_usd_price("ethereum")

        assert price == Decimal("2000")
        assert client.requests[0]["headers"] == {}
