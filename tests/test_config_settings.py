import pytest

from walletbot.config import Settings, validate_startup
from walletbot.core.chains import ChainKind, build_chain_registry, resolve_chain
from walletbot.core.errors import StartupMisconfigurationError, UnsupportedChainError


def test_bot_token_legacy_alias(monkeypatch):
    """Bot token should load from the BOT_TOKEN alias when present."""

    monkeypatch.delenv("TELEGRAM_BOT_TOKEN", raising=False)
    monkeypatch.setenv("BOT_TOKEN", "  123:abc  ")

    settings = Settings(_env_file=None)

    assert settings.telegram_bot_token == "123:abc"
    assert settings.has_bot_token


def test_bot_token_direct_env(monkeypatch):
    """TELEGRAM_BOT_TOKEN remains the primary source."""

    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "primary")
    monkeypatch.setenv("BOT_TOKEN", "legacy")

    settings = Settings(_env_file=None)

    assert settings.telegram_bot_token == "primary"


def test_missing_token_fails_startup(monkeypatch):
    monkeypatch.delenv("TELEGRAM_BOT_TOKEN", raising=False)
    monkeypatch.delenv("BOT_TOKEN", raising=False)

    with pytest.raises(StartupMisconfigurationError):
        validate_startup(Settings(_env_file=None))


def test_explorer_keys_are_optional():
    validate_startup(Settings(_env_file=None, telegram_bot_token="t", etherscan_api_key=""))


def test_chain_registry(monkeypatch):
    monkeypatch.setenv("ETHERSCAN_API_KEY", "eth")

    chains = build_chain_registry(Settings(_env_file=None))

    assert list(chains) == ["ethereum", "bsc", "polygon", "bitcoin"]
    assert chains["ethereum"].api_key == "eth"
    assert chains["bitcoin"].kind == ChainKind.NATIVE_COIN
    assert chains["bitcoin"].api_url == "https://api.blockchair.com/bitcoin"
    assert chains["polygon"].price_id == "matic-network"
    with pytest.raises(TypeError):
        chains["solana"] = chains["bitcoin"]


def test_resolve_chain_is_case_insensitive():
    chains = build_chain_registry(Settings(_env_file=None))

    assert resolve_chain(" BSC ", chains).key == "bsc"
    with pytest.raises(UnsupportedChainError):
        resolve_chain("dogecoin", chains)
