"""
Caching wrapper around a market data source.

Tick size, neg-risk flag and fee rate are cached per token; order books are
always fetched live.
"""

import inspect
from typing import Any, Callable, Optional
import logging

from ..collaborators import MarketDataSource, coerce_neg_risk
from ..utils.cache import TTLCache

logger = logging.getLogger(__name__)


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class CachingMarketData:
    """
    MarketDataSource that memoizes per-token metadata.

    Satisfies the MarketDataSource protocol itself, so it can be handed to
    OrderBuilder in place of the wrapped source. Errors from the wrapped
    source propagate unchanged and nothing is cached for that token. The
    neg-risk flag is validated before it is cached.
    """

    def __init__(
        self,
        source: MarketDataSource,
        ttl: float = 300.0,
        max_size: int = 10000,
        cache: Optional[TTLCache] = None
    ):
        self.source = source
        self.cache = cache or TTLCache(default_ttl=ttl, max_size=max_size)

    async def _cached(
        self,
        kind: str,
        token_id: str,
        fetch_fn: Callable[[str], Any],
        validate: Optional[Callable[[Any, str], Any]] = None
    ) -> Any:
        key = f"{kind}:{token_id}"
        value = self.cache.get(key)
        if value is not None:
            return value

        logger.debug(f"Cache miss, fetching {kind} for {token_id}")
        value = await _resolve(fetch_fn(token_id))
        if validate is not None:
            value = validate(value, token_id)
        self.cache.set(key, value)
        return value

    async def get_tick_size(self, token_id: str) -> Any:
        return await self._cached("tick_size", token_id, self.source.get_tick_size)

    async def get_neg_risk(self, token_id: str) -> Any:
        return await self._cached(
            "neg_risk", token_id, self.source.get_neg_risk, coerce_neg_risk
        )

    async def get_fee_rate_bps(self, token_id: str) -> Any:
        return await self._cached("fee_rate", token_id, self.source.get_fee_rate_bps)

    async def get_order_book(self, token_id: str) -> Any:
        return await _resolve(self.source.get_order_book(token_id))

    def set_tick_size(self, token_id: str, tick_size: str) -> None:
        """Manually set tick size for token (e.g. from a tick_size_change event)."""
        self.cache.set(f"tick_size:{token_id}", tick_size)

    def set_neg_risk(self, token_id: str, neg_risk: bool) -> None:
        """Manually set negative risk flag for token."""
        self.cache.set(f"neg_risk:{token_id}", coerce_neg_risk(neg_risk, token_id))

    def set_fee_rate(self, token_id: str, fee_rate_bps: int) -> None:
        """Manually set fee rate for token."""
        self.cache.set(f"fee_rate:{token_id}", fee_rate_bps)

    def invalidate(self, token_id: str) -> None:
        """Drop all cached metadata for a token."""
        for kind in ("tick_size", "neg_risk", "fee_rate"):
            self.cache.delete(f"{kind}:{token_id}")

    def cleanup(self) -> int:
        """Clean up expired entries."""
        return self.cache.cleanup_expired()
