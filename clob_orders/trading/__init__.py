"""Order construction modules."""

from .market_data import CachingMarketData
from .order_builder import OrderBuilder

__all__ = ["CachingMarketData", "OrderBuilder"]
