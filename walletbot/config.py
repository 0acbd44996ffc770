from pathlib import Path
from typing import Any

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.errors import StartupMisconfigurationError


BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def model_post_init(self, __context: Any) -> None:
        """Strip stray whitespace copied along with tokens from BotFather or dashboards."""

        super().model_post_init(__context)

        for name in ("telegram_bot_token", "etherscan_api_key", "bscscan_api_key", "polygonscan_api_key", "coingecko_api_key"):
            value = getattr(self, name)
            if value and value != value.strip():
                object.__setattr__(self, name, value.strip())

    # Server Settings
    host: str = Field(default="127.0.0.1", description="Health server host")
    port: int = Field(default=8000, description="Health server port")
    log_level: str = Field(default="INFO", description="Logging level")
    log_json: bool = Field(default=True, description="Emit JSON log lines (console rendering when false)")

    # Chat transport
    telegram_bot_token: str = Field(
        default="",
        description="Telegram bot token (required to start the bot)",
        validation_alias=AliasChoices("telegram_bot_token", "TELEGRAM_BOT_TOKEN", "BOT_TOKEN"),
    )
    max_message_chars: int = Field(
        default=4096,
        ge=256,
        description="Outbound messages longer than this are split into several messages",
    )

    # Explorer API keys (account-model chains)
    etherscan_api_key: str = Field(default="", description="Etherscan API key")
    bscscan_api_key: str = Field(default="", description="BscScan API key")
    polygonscan_api_key: str = Field(default="", description="PolygonScan API key")

    # Explorer endpoints
    etherscan_base_url: str = Field(default="https://api.etherscan.io/api", description="Etherscan API endpoint")
    bscscan_base_url: str = Field(default="https://api.bscscan.com/api", description="BscScan API endpoint")
    polygonscan_base_url: str = Field(default="https://api.polygonscan.com/api", description="PolygonScan API endpoint")
    blockchair_base_url: str = Field(default="https://api.blockchair.com", description="Blockchair API root")

    # Price service
    coingecko_api_key: str = Field(default="", description="Coingecko demo API key (optional)")
    coingecko_base_url: str = Field(default="https://api.coingecko.com/api/v3", description="Coingecko API root")

    request_timeout_seconds: int = Field(default=15, ge=1, description="HTTP timeout for explorer and price requests")

    # Price alerts
    enable_price_alerts: bool = Field(default=True, description="Run the periodic price alert loop")
    price_alert_interval_seconds: int = Field(
        default=3600,
        ge=1,
        description="Seconds between price alert digests",
    )

    @property
    def has_bot_token(self) -> bool:
        return bool(self.telegram_bot_token)


def validate_startup(config: Settings) -> None:
    """Fail fast when the bot cannot possibly run.

    Explorer keys are optional: the native-coin explorer needs none and an
    account-model explorer without a key answers with an error envelope that
    the balance oracle reports as unavailable.
    """
    if not config.has_bot_token:
        raise StartupMisconfigurationError("Missing TELEGRAM_BOT_TOKEN; the bot cannot start without it.")


# Global settings instance
settings = Settings()
