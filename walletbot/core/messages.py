"""User-facing message text and report rendering."""

from decimal import Decimal
from typing import Iterable, List, Mapping, Tuple

from ..types import PortfolioReport, format_price
from .chains import ChainConfig, supported_chain_keys

COMMANDS: List[Tuple[str, str]] = [
    ("/start", "Welcome message"),
    ("/help", "View the list of commands"),
    ("/addwallet", "Add a wallet to track"),
    ("/removewallet", "Remove a wallet"),
    ("/listwallets", "List tracked wallets"),
    ("/checkwallets [chain]", "Check wallet balances"),
    ("/gettokenprice <token_id>", "Fetch the price of a token"),
    ("/subscribeprice <token_id>", "Subscribe to token price alerts"),
    ("/unsubscribeprice <token_id>", "Unsubscribe from token price alerts"),
    ("/portfolio", "View your portfolio value"),
    ("/clearwallets", "Clear all tracked wallets"),
]

NO_WALLETS = "❌ No wallets found. Use /addwallet to track wallets."
NOTHING_TO_REMOVE = "❌ You have no wallets to remove. Use /addwallet to track wallets."
NOTHING_TO_CLEAR = "❌ No wallets to clear."
WALLETS_CLEARED = "✅ All tracked wallets cleared."
UNSUPPORTED_CHAIN = "❌ Unsupported chain. Please try again with /addwallet."
WALLET_ALREADY_ADDED = "❌ Wallet already added."
ENTER_WALLET_ADDRESS = "Enter your wallet address:"
EMPTY_WALLET_ADDRESS = "❌ Wallet address cannot be empty. Use /addwallet to try again."
INVALID_SELECTION = "❌ Invalid selection. Use /removewallet to try again."
INVALID_TOKEN = "❌ Invalid token. Make sure the token exists on CoinGecko."


def welcome_text() -> str:
    return (
        "Welcome to the Crypto Tracker Bot! 🚀\n"
        "Track your wallets, monitor token prices, and stay updated on your portfolio.\n\n"
        + command_list(with_args=False)
    )


def help_text() -> str:
    return command_list(with_args=True)


def command_list(with_args: bool) -> str:
    lines = ["Commands:"]
    for usage, description in COMMANDS:
        name = usage if with_args else usage.split(" ", 1)[0]
        lines.append(f"{name} - {description}")
    return "\n".join(lines)


def usage(command: str, argument: str = "token_id") -> str:
    return f"Usage: /{command} <{argument}>"


def ask_chain(chains: Mapping[str, ChainConfig]) -> str:
    return f"Which chain? ({supported_chain_keys(chains)})"


def wallet_added(chain: ChainConfig) -> str:
    return f"✅ Wallet added successfully to {chain.name}!"


def no_wallets_on_chain(chain: ChainConfig) -> str:
    return f"❌ You have no wallets on {chain.name}."


def unsupported_chain_filter(chain_key: str, chains: Mapping[str, ChainConfig]) -> str:
    return f"❌ Unsupported chain '{chain_key}'. Supported chains: {supported_chain_keys(chains)}"


def numbered_wallets(chain: ChainConfig, wallets: Iterable[str]) -> str:
    lines = [f"Which wallet do you want to remove from {chain.name}? Reply with its number:"]
    for position, wallet in enumerate(wallets, 1):
        lines.append(f"{position}. {wallet}")
    return "\n".join(lines)


def wallet_removed(chain: ChainConfig, address: str) -> str:
    return f"✅ Removed {address} from {chain.name}."


def wallet_list(wallets: Mapping[str, List[str]], chains: Mapping[str, ChainConfig]) -> str:
    message = "📜 Your tracked wallets:\n"
    for chain_key, addresses in wallets.items():
        if not addresses:
            continue
        chain = chains.get(chain_key)
        message += f"\nChain: {chain.name if chain else chain_key}\n"
        for position, wallet in enumerate(addresses, 1):
            message += f"{position}. {wallet}\n"
    return message.rstrip("\n")


def balance_report(report: PortfolioReport) -> str:
    """Per-wallet balance and value, as sent for /checkwallets."""
    message = "📊 Wallet Balances:\n"
    for item in report.line_items:
        message += (
            f"\nChain: {item.chain_name}\n"
            f"Wallet: {item.wallet}\n"
            f"Balance: {item.formatted_balance}\n"
            f"Value: ${item.formatted_value}\n"
        )
    return message + _unpriced_note(report)


def portfolio_report(report: PortfolioReport) -> str:
    """Per-wallet value plus the total, as sent for /portfolio."""
    message = "💼 Your Portfolio Value:\n"
    for item in report.line_items:
        message += f"Chain: {item.chain_name} Wallet: {item.wallet} Value: ${item.formatted_value}\n"
    message += f"\nTotal Portfolio Value: ${report.formatted_total}"
    return message + _unpriced_note(report)


def _unpriced_note(report: PortfolioReport) -> str:
    if not report.unpriced_chains:
        return ""
    return f"\n⚠️ Price unavailable for: {', '.join(report.unpriced_chains)}"


def token_price(token_id: str, price: Decimal) -> str:
    return f"💰 {token_id.upper()}: ${format_price(price)}"


def token_price_unavailable(token_id: str) -> str:
    return f"❌ Could not fetch the price of {token_id}. Make sure the token exists on CoinGecko."


def subscribed(token_id: str) -> str:
    return f"✅ Subscribed to {token_id.upper()} price alerts!"


def already_subscribed(token_id: str) -> str:
    return f"❌ You are already subscribed to {token_id} price alerts."


def unsubscribed(token_id: str) -> str:
    return f"✅ Unsubscribed from {token_id.upper()} price alerts."


def not_subscribed(token_id: str) -> str:
    return f"❌ You are not subscribed to {token_id} price alerts."


def price_digest(prices: Iterable[Tuple[str, Decimal]]) -> str:
    lines = ["📈 Price Alerts:"]
    for token_id, price in prices:
        lines.append(f"{token_id.upper()}: ${format_price(price)}")
    return "\n".join(lines)
