import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from . import __version__
from .api import health
from .config import Settings, settings, validate_startup
from .container import Services, build_services
from .logging_config import setup_logging
from .transport.telegram_bot import TelegramBot
from .workers.price_alerts import AlertScheduler

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[Settings] = None,
    services: Optional[Services] = None,
    start_bot: bool = True,
) -> FastAPI:
    """Build the HTTP app; its lifespan runs the Telegram bot and the price alert loop.

    Raises:
        StartupMisconfigurationError: If the bot token is missing and the bot is to be started.
    """
    config = config or settings
    if start_bot:
        validate_startup(config)

    services = services or build_services(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(config.log_level)
        bot: Optional[TelegramBot] = None
        alert_task: Optional[asyncio.Task] = None

        if start_bot:
            bot = TelegramBot(config.telegram_bot_token, services.router, max_chars=config.max_message_chars)
            await bot.start()

            if config.enable_price_alerts:
                scheduler = AlertScheduler(
                    services.store,
                    services.prices,
                    bot.transport,
                    interval_seconds=config.price_alert_interval_seconds,
                )
                alert_task = asyncio.create_task(scheduler.run_forever())
                logger.info(f"Price alerts every {config.price_alert_interval_seconds}s")

        logger.info(f"Crypto Tracker Bot {__version__} is running...")
        try:
            yield
        finally:
            if alert_task is not None:
                alert_task.cancel()
                try:
                    await alert_task
                except asyncio.CancelledError:
                    pass
            if bot is not None:
                await bot.stop()

    app = FastAPI(
        title="Crypto Tracker Bot",
        description="Telegram wallet tracker: balances, portfolio value and price alerts",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.services = services
    app.include_router(health.router, tags=["Health"])

    @app.get("/")
    async def root():
        """Root endpoint with basic info"""
        return {
            "name": "Crypto Tracker Bot",
            "version": __version__,
            "chains": list(services.chains.keys()),
            "health": "/healthz"
        }

    return app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "walletbot.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower()
    )
