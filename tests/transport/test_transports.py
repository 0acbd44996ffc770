import asyncio
from types import SimpleNamespace
from typing import Dict, List

import pytest

from walletbot.transport import ConsoleTransport, split_message
from walletbot.transport.telegram_bot import TelegramBot, TelegramTransport


class _DummyBot:
    def __init__(self):
        self.sent: List[dict] = []

    async def send_message(self, chat_id, text):
        self.sent.append({"chat_id": chat_id, "text": text})


class TestSplitMessage:
    def test_short_message_untouched(self):
        assert split_message("hello\nworld", 100) == ["hello\nworld"]

    def test_splits_on_line_boundaries(self):
        text = "\n".join(f"line {i}" for i in range(10))

        chunks = split_message(text, 20)

        assert all(len(chunk) <= 20 for chunk in chunks)
        assert "\n".join(chunks) == text

    def test_hard_wraps_long_line(self):
        chunks = split_message("a" * 25, 10)

        assert chunks == ["a" * 10, "a" * 10, "a" * 5]


class TestTransports:
    @pytest.mark.asyncio
    async def test_console_records_messages(self):
        printed: List[str] = []
        transport = ConsoleTransport(writer=printed.append)

        await transport.send_message(7, "hi")

        assert transport.sent == [(7, "hi")]
        assert printed == ["🤖 [7] hi"]

    @pytest.mark.asyncio
    async def test_telegram_splits_long_messages(self):
        bot = _DummyBot()
        transport = TelegramTransport(bot, max_chars=300)
        text = "\n".join("x" * 99 for _ in range(6))

        await transport.send_message(42, text)

        assert len(bot.sent) == 2
        assert all(call["chat_id"] == 42 for call in bot.sent)
        assert all(len(call["text"]) <= 300 for call in bot.sent)

    def test_telegram_limit_is_capped(self):
        assert TelegramTransport(_DummyBot(), max_chars=10000).max_chars == 4096


class _RecordingRouter:
    def __init__(self, delays: Dict[str, float]):
        self.delays = delays
        self.events: List[tuple] = []

    async def handle(self, user_id, text):
        self.events.append(("start", user_id, text))
        await asyncio.sleep(self.delays.get(text, 0))
        self.events.append(("end", user_id, text))
        return [f"re: {text}"]


def _text_update(user_id, text):
    return SimpleNamespace(
        effective_message=SimpleNamespace(text=text),
        effective_chat=SimpleNamespace(id=user_id),
    )


@pytest.fixture
def recording_bot():
    def _build(delays: Dict[str, float]):
        bot = TelegramBot("123:ABC", _RecordingRouter(delays))
        bot.transport = ConsoleTransport(writer=lambda _: None)
        return bot
    return _build


class TestTelegramBotScheduling:
    def test_application_processes_updates_concurrently(self, recording_bot):
        bot = recording_bot({})

        assert bot.application.concurrent_updates > 1

    @pytest.mark.asyncio
    async def test_slow_report_does_not_delay_other_users(self, recording_bot):
        bot = recording_bot({"/portfolio": 0.5})

        await asyncio.gather(
            bot.on_text(_text_update(1, "/portfolio"), None),
            bot.on_text(_text_update(2, "/help"), None),
        )

        assert [user for user, _ in bot.transport.sent] == [2, 1]
        events = bot.router.events
        assert events.index(("end", 2, "/help")) < events.index(("end", 1, "/portfolio"))

    @pytest.mark.asyncio
    async def test_same_user_messages_are_handled_in_order(self, recording_bot):
        bot = recording_bot({"/addwallet": 0.2})

        await asyncio.gather(
            bot.on_text(_text_update(1, "/addwallet"), None),
            bot.on_text(_text_update(1, "ethereum"), None),
        )

        assert bot.router.events == [
            ("start", 1, "/addwallet"),
            ("end", 1, "/addwallet"),
            ("start", 1, "ethereum"),
            ("end", 1, "ethereum"),
        ]
        assert bot.transport.sent == [(1, "re: /addwallet"), (1, "re: ethereum")]
