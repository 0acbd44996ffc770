"""Wallet tracker bot: balances, portfolio valuation and price alerts over Telegram."""

__version__ = "0.1.0"
