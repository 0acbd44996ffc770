"""Service layer: user registry, oracles and portfolio aggregation"""

from .oracles import BalanceOracle, PriceOracle
from .portfolio import PortfolioAggregator
from .user_store import UserAccount, UserId, UserStore

__all__ = [
    "BalanceOracle",
    "PriceOracle",
    "PortfolioAggregator",
    "UserAccount",
    "UserId",
    "UserStore",
]
