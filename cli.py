#!/usr/bin/env python3
"""Simple CLI for testing the Crypto Tracker Bot locally"""

import argparse
import asyncio
import json
import sys

from walletbot.container import build_services
from walletbot.core.commands import parse_command
from walletbot.logging_config import setup_logging
from walletbot.transport.console import ConsoleTransport
from walletbot.types import format_price
from walletbot.workers.price_alerts import AlertScheduler

LOCAL_USER = "local"


async def cli_chat(user_id: str):
    """Interactive chat mode: type bot commands exactly as you would in Telegram"""
    services = build_services()
    transport = ConsoleTransport()

    print("🤖 Crypto Tracker Bot (local)")
    print("Type '/help' for commands, 'exit' to quit")
    print("-" * 40)

    while True:
        try:
            user_input = input("\n💬 You: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\n👋 Goodbye!")
            break

        if user_input.lower() in ("exit", "quit"):
            print("👋 Goodbye!")
            break
        if not user_input:
            continue

        replies = await services.router.handle(user_id, user_input)
        if not replies and parse_command(user_input) is None:
            print("(ignored: not a command)")
        for reply in replies:
            await transport.send_message(user_id, reply)


async def cli_price(token_id: str):
    """CLI command to fetch a single token price"""
    services = build_services()
    print(f"🔍 Fetching price for {token_id}...")
    price = await services.prices.resolve(token_id.lower())
    if price is None:
        print(f"❌ No price available for {token_id}")
        return 1
    print(f"💰 {token_id.upper()}: ${format_price(price)}")
    return 0


async def cli_alerts(token_ids):
    """Subscribe a local user to the given tokens and run one alert cycle"""
    services = build_services()
    for token_id in dict.fromkeys(t.lower() for t in token_ids):
        services.store.subscribe(LOCAL_USER, token_id)

    scheduler = AlertScheduler(services.store, services.prices, ConsoleTransport())
    result = await scheduler.run()
    print(json.dumps(result.to_dict(), indent=2))
    return 0 if not result.errors else 1


async def cli_health():
    """Check every external provider"""
    services = build_services()
    exit_code = 0
    for provider in services.providers():
        status = await provider.health_check()
        marker = "✅" if status["status"] == "healthy" else "⚠️ "
        print(f"{marker} {provider.name}: {status}")
        if status["status"] == "error":
            exit_code = 1
    return exit_code


def main():
    parser = argparse.ArgumentParser(description="Crypto Tracker Bot CLI")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    chat_parser = subparsers.add_parser("chat", help="Chat with the bot in the terminal")
    chat_parser.add_argument("--user", default=LOCAL_USER, help="User identity to chat as")

    price_parser = subparsers.add_parser("price", help="Fetch a token price")
    price_parser.add_argument("token_id", help="Coingecko token id (e.g. bitcoin)")

    alerts_parser = subparsers.add_parser("alerts", help="Run one price alert cycle")
    alerts_parser.add_argument("token_ids", nargs="+", help="Token ids to include in the digest")

    subparsers.add_parser("health", help="Check external providers")

    args = parser.parse_args()
    setup_logging(args.log_level, json_logs=False)

    if args.command == "chat":
        asyncio.run(cli_chat(args.user))
    elif args.command == "price":
        sys.exit(asyncio.run(cli_price(args.token_id)))
    elif args.command == "alerts":
        sys.exit(asyncio.run(cli_alerts(args.token_ids)))
    elif args.command == "health":
        sys.exit(asyncio.run(cli_health()))
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
