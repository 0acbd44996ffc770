"""
Portfolio aggregation over a user's tracked wallets.

Chains are visited in the account's insertion order and wallets in stored
order. The price of a chain's native token is fetched once per chain, then
each wallet's balance is fetched in turn. A failed balance or price lookup
never aborts the report: the wallet is still listed, valued at zero, and
contributes nothing to the total.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Mapping, Optional

from ..core.chains import ChainConfig
from ..types import PortfolioReport, WalletValuation
from .oracles import BalanceOracle, PriceOracle
from .user_store import UserAccount

logger = logging.getLogger(__name__)


class PortfolioAggregator:
    def __init__(
        self,
        balances: BalanceOracle,
        prices: PriceOracle,
        chains: Mapping[str, ChainConfig],
    ):
        self.balances = balances
        self.prices = prices
        self.chains = chains

    async def build_report(self, account: UserAccount, chain_key: Optional[str] = None) -> PortfolioReport:
        """Value every wallet of ``account``, or only those on ``chain_key``.

        Oracle calls are issued sequentially: one price lookup per chain that
        has wallets, then one balance lookup per wallet.
        """
        report = PortfolioReport()
        total = Decimal("0")

        for key, wallets in list(account.wallets.items()):
            if chain_key is not None and key != chain_key:
                continue
            wallets = list(wallets)
            if not wallets:
                continue

            chain = self.chains.get(key)
            if chain is None:
                logger.warning(f"Account {account.user_id} tracks wallets on unknown chain {key!r}; skipping")
                continue

            price = await self.prices.resolve(chain.price_id)
            if price is None:
                report.unpriced_chains.append(chain.key)

            for wallet in wallets:
                quote = await self.balances.quote(wallet, chain)
                value = Decimal("0")
                if quote.amount is not None and price is not None:
                    value = quote.amount * price
                total += value

                report.line_items.append(WalletValuation(
                    chain_key=chain.key,
                    chain_name=chain.name,
                    wallet=wallet,
                    balance=quote.amount,
                    price_usd=price,
                    value_usd=value,
                    display_precision=chain.display_precision,
                ))

        report.total_usd = total
        logger.info(
            f"Portfolio for {account.user_id}: {len(report.line_items)} wallets, "
            f"total ${report.formatted_total}"
        )
        return report
