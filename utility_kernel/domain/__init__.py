"""
Pure domain layer.

Value objects with NO dependencies on:
- Database
- Time/clock
- I/O

All domain objects are immutable and deterministic.
"""

from utility_kernel.domain.currency import CurrencyInfo, CurrencyRegistry
from utility_kernel.domain.values import Currency, Money

__all__ = [
    "Currency",
    "CurrencyInfo",
    "CurrencyRegistry",
    "Money",
]
