"""
Telegram transport built on python-telegram-bot.

A single text handler (commands included) feeds every message into the
CommandRouter, which decides between a pending conversation and a command.
Updates are processed concurrently, so one user's slow report never delays
another user. Each user's messages go through a per-user lock and are
handled one after another in the order they arrive.
"""

import asyncio
import logging
from collections import defaultdict
from typing import Dict, Optional

from telegram import Bot, Update
from telegram.error import TelegramError
from telegram.ext import Application, ContextTypes, MessageHandler, filters

from ..core.commands import CommandRouter
from ..services.user_store import UserId
from .base import ChatTransport, split_message

logger = logging.getLogger(__name__)

TELEGRAM_MAX_CHARS = 4096


class TelegramTransport(ChatTransport):
    name = "telegram"

    def __init__(self, bot: Bot, max_chars: int = TELEGRAM_MAX_CHARS):
        self.bot = bot
        self.max_chars = min(max_chars, TELEGRAM_MAX_CHARS)

    async def send_message(self, user_id: UserId, text: str) -> None:
        for chunk in split_message(text, self.max_chars):
            await self.bot.send_message(chat_id=user_id, text=chunk)


class TelegramBot:
    """Wires the router to a python-telegram-bot Application."""

    def __init__(self, token: str, router: CommandRouter, max_chars: int = TELEGRAM_MAX_CHARS):
        self.router = router
        self.application: Application = (
            Application.builder()
            .token(token)
            .concurrent_updates(True)
            .build()
        )
        self.transport: ChatTransport = TelegramTransport(self.application.bot, max_chars=max_chars)
        self._user_locks: Dict[UserId, asyncio.Lock] = defaultdict(asyncio.Lock)

        self.application.add_handler(MessageHandler(filters.TEXT, self.on_text))
        self.application.add_error_handler(self.on_error)

    async def on_text(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        message = update.effective_message
        chat = update.effective_chat
        if message is None or chat is None:
            return
        await self.handle_text(chat.id, message.text)

    async def handle_text(self, user_id: UserId, text: Optional[str]) -> None:
        """Route one message and deliver its replies while holding the user's lock."""
        async with self._user_locks[user_id]:
            replies = await self.router.handle(user_id, text)
            for reply in replies:
                await self.transport.send_message(user_id, reply)

    async def on_error(self, update: Optional[object], context: ContextTypes.DEFAULT_TYPE) -> None:
        logger.error(f"Error while handling update {update}: {context.error}", exc_info=context.error)

    async def start(self) -> None:
        """Start long polling without blocking the running event loop."""
        await self.application.initialize()
        await self.application.start()
        await self.application.updater.start_polling()
        logger.info("Telegram polling started")

    async def stop(self) -> None:
        try:
            if self.application.updater and self.application.updater.running:
                await self.application.updater.stop()
            if self.application.running:
                await self.application.stop()
            await self.application.shutdown()
        except TelegramError as e:
            logger.warning(f"Telegram shutdown error: {e}")
        logger.info("Telegram polling stopped")
