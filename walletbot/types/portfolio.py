from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional
from pydantic import BaseModel, Field


CENT = Decimal("0.01")


def format_usd(value: Decimal) -> str:
    """Two-decimal USD amount without thousands separators (``75000.00``)."""
    return str(value.quantize(CENT, rounding=ROUND_HALF_UP))


def format_price(price: Decimal) -> str:
    """Quoted token price in plain notation, trailing zeros dropped (``0.000000012``, ``50000``)."""
    return f"{price.normalize():f}"


class BalanceQuote(BaseModel):
    amount: Optional[Decimal] = Field(default=None, description="Balance in native units, None when unknown")
    reason: Optional[str] = Field(default=None, description="Why the balance is unknown")

    @property
    def available(self) -> bool:
        return self.amount is not None


class WalletValuation(BaseModel):
    chain_key: str = Field(description="Chain key (e.g. ethereum, bitcoin)")
    chain_name: str = Field(description="Chain display name")
    wallet: str = Field(description="Wallet address as entered by the user")
    balance: Optional[Decimal] = Field(default=None, description="Native-unit balance, None if the lookup failed")
    price_usd: Optional[Decimal] = Field(default=None, description="Native token price used for valuation")
    value_usd: Decimal = Field(default=Decimal("0"), description="USD value; zero when balance or price is unknown")
    display_precision: int = Field(default=8, description="Decimals used to render the balance")

    @property
    def formatted_balance(self) -> str:
        if self.balance is None:
            return "unavailable"
        return f"{self.balance:.{self.display_precision}f}"

    @property
    def formatted_value(self) -> str:
        return format_usd(self.value_usd)


class PortfolioReport(BaseModel):
    line_items: List[WalletValuation] = Field(default_factory=list, description="One entry per tracked wallet, chain order then wallet order")
    total_usd: Decimal = Field(default=Decimal("0"), description="Sum of line item values")
    unpriced_chains: List[str] = Field(default_factory=list, description="Chains whose price could not be resolved")

    @property
    def formatted_total(self) -> str:
        return format_usd(self.total_usd)

    @property
    def is_empty(self) -> bool:
        return not self.line_items
