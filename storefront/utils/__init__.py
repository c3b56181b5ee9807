"""Utilities package - Flat structure"""

from .money import round_money
from .time_utils import utcnow, to_epoch_ms, from_epoch_ms

__all__ = [
    "round_money",
    "utcnow",
    "to_epoch_ms",
    "from_epoch_ms",
]
