from .portfolio import BalanceQuote, PortfolioReport, WalletValuation, format_price, format_usd

__all__ = [
    "BalanceQuote",
    "PortfolioReport",
    "WalletValuation",
    "format_price",
    "format_usd",
]
