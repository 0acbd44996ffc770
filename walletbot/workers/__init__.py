"""
Background Workers

Workers for scheduled and background tasks.
"""

from .price_alerts import AlertCycleResult, AlertScheduler

__all__ = [
    "AlertCycleResult",
    "AlertScheduler",
]
