"""
Price Alert Worker

Periodically sends each subscribed user a digest of current prices for the
tokens they follow. A token whose price cannot be fetched is left out of
that cycle's digest; nothing is retried within a cycle.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from ..core import messages
from ..services.oracles import PriceOracle
from ..services.user_store import UserStore
from ..transport.base import ChatTransport

logger = logging.getLogger(__name__)


@dataclass
class AlertCycleResult:
    """Result from one alert cycle."""
    started_at: datetime
    ended_at: datetime
    users_notified: int = 0
    users_skipped: int = 0
    prices_missing: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def duration_seconds(self) -> float:
        return (self.ended_at - self.started_at).total_seconds()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "startedAt": self.started_at.isoformat(),
            "endedAt": self.ended_at.isoformat(),
            "durationSeconds": self.duration_seconds,
            "usersNotified": self.users_notified,
            "usersSkipped": self.users_skipped,
            "pricesMissing": self.prices_missing,
            "errors": self.errors,
        }


class AlertScheduler:
    """
    Sends price digests to every user with at least one subscription.

    Prices are looked up per user and per token, sequentially. Users with
    no resolvable price this cycle get no message.
    """

    def __init__(
        self,
        store: UserStore,
        prices: PriceOracle,
        transport: ChatTransport,
        interval_seconds: int = 3600,
    ):
        self.store = store
        self.prices = prices
        self.transport = transport
        self.interval_seconds = interval_seconds

    async def run(self) -> AlertCycleResult:
        """Run a single alert cycle."""
        result = AlertCycleResult(
            started_at=datetime.now(timezone.utc),
            ended_at=datetime.now(timezone.utc),
        )

        for account in list(self.store.subscribed_accounts()):
            resolved: List[Tuple[str, Decimal]] = []
            for token_id in sorted(account.notifications):
                price = await self.prices.resolve(token_id)
                if price is None:
                    result.prices_missing += 1
                    continue
                resolved.append((token_id, price))

            if not resolved:
                result.users_skipped += 1
                continue

            try:
                await self.transport.send_message(account.user_id, messages.price_digest(resolved))
                result.users_notified += 1
            except Exception as e:
                logger.error(f"Failed to deliver price digest to {account.user_id}: {e}")
                result.errors.append(f"{account.user_id}: {e}")

        result.ended_at = datetime.now(timezone.utc)
        logger.info(
            f"Price alert cycle: {result.users_notified} notified, {result.users_skipped} skipped, "
            f"{result.prices_missing} prices missing"
        )
        return result

    async def run_forever(self, max_iterations: Optional[int] = None) -> None:
        """
        Run alert cycles every ``interval_seconds`` until cancelled.

        The first digest goes out one interval after start.

        Args:
            max_iterations: Max iterations (None for infinite)
        """
        iterations = 0
        while max_iterations is None or iterations < max_iterations:
            await asyncio.sleep(self.interval_seconds)
            try:
                await self.run()
            except Exception as e:
                logger.error(f"Price alert cycle {iterations + 1} failed: {e}")
            iterations += 1
