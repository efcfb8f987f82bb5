"""
Tick-size aware rounding and amount scaling.

The exchange rejects orders whose amounts carry more decimals than the
market's tick size allows, and it recomputes prices from the signed integer
amounts. Everything here is Decimal based and pure.
"""

from decimal import (
    Decimal,
    ROUND_CEILING,
    ROUND_DOWN,
    ROUND_FLOOR,
    ROUND_HALF_UP,
    localcontext,
)
from typing import Any, NamedTuple, Optional, Sequence, Union
import logging

from ..constants import TOKEN_DECIMALS
from ..exceptions import NoMatchError, UnsupportedTickSizeError, ValidationError
from ..models import OrderType, PriceLevel, Side
from ..utils.numeric import decimal_to_str, parse_decimal, to_decimal

logger = logging.getLogger(__name__)

Numeric = Union[Decimal, str, int, float]

# Decimal places inspected by decimal_places(); digits beyond are noise
DECIMAL_WINDOW = 12
# Rounding applied before scaling to integer units
WEI_PRE_ROUND_PLACES = 10
# Working precision for quantize/scaleb on large amounts
_WORKING_PRECISION = 80


class RoundConfig(NamedTuple):
    """Allowed decimals for price, size and derived amount."""
    price: int
    size: int
    amount: int


ROUNDING_CONFIG: dict[str, RoundConfig] = {
    "0.1": RoundConfig(price=1, size=2, amount=3),
    "0.01": RoundConfig(price=2, size=2, amount=4),
    "0.001": RoundConfig(price=3, size=2, amount=5),
    "0.0001": RoundConfig(price=4, size=2, amount=6),
}


def _dec(value: Numeric, field: str = "value") -> Decimal:
    try:
        return parse_decimal(value, field)
    except ValueError as e:
        raise ValidationError(str(e), {"field": field, "value": str(value)}) from e


def _quantum(places: int) -> Decimal:
    return Decimal(1).scaleb(-places)


def normalize_tick_size(tick_size: Numeric) -> str:
    """
    Canonical string form of a tick size ("0.010" -> "0.01").

    Raises:
        UnsupportedTickSizeError: If the value is not a positive number
    """
    tick = to_decimal(tick_size)
    if tick is None or not tick.is_finite() or tick <= 0:
        raise UnsupportedTickSizeError(f"unsupported tick size: {tick_size}", tick_size=str(tick_size))
    return decimal_to_str(tick)


def get_round_config(tick_size: Numeric) -> RoundConfig:
    """
    Rounding configuration for a tick size.

    Raises:
        UnsupportedTickSizeError: If the tick size is not supported by the exchange
    """
    normalized = normalize_tick_size(tick_size)
    config = ROUNDING_CONFIG.get(normalized)
    if config is None:
        raise UnsupportedTickSizeError(f"unsupported tick size: {tick_size}", tick_size=normalized)
    return config


def decimal_places(value: Numeric) -> int:
    """
    Count significant fractional digits within a 12-digit window.

    Examples:
        >>> decimal_places("1.50")
        1
        >>> decimal_places("3.0300000000000001")
        2
    """
    d = _dec(value)
    if d == d.to_integral_value():
        return 0
    with localcontext() as ctx:
        ctx.prec = _WORKING_PRECISION
        windowed = d.quantize(_quantum(DECIMAL_WINDOW), rounding=ROUND_HALF_UP).normalize()
    return max(0, -windowed.as_tuple().exponent)


def _rescale(value: Numeric, decimals: int, rounding: str) -> Decimal:
    d = _dec(value)
    if decimal_places(d) <= decimals:
        return d
    with localcontext() as ctx:
        ctx.prec = _WORKING_PRECISION
        return d.quantize(_quantum(decimals), rounding=rounding)


def round_down(value: Numeric, decimals: int) -> Decimal:
    """Floor to ``decimals`` places; values already within precision are returned unchanged."""
    return _rescale(value, decimals, ROUND_FLOOR)


def round_up(value: Numeric, decimals: int) -> Decimal:
    """Ceil to ``decimals`` places; values already within precision are returned unchanged."""
    return _rescale(value, decimals, ROUND_CEILING)


def round_normal(value: Numeric, decimals: int) -> Decimal:
    """Round half-up to ``decimals`` places; values already within precision are returned unchanged."""
    return _rescale(value, decimals, ROUND_HALF_UP)


def price_valid(price: Numeric, tick_size: Numeric) -> bool:
    """True iff tick <= price <= 1 - tick."""
    p = _dec(price, "price")
    tick = _dec(tick_size, "tick_size")
    return tick <= p <= Decimal(1) - tick


def to_wei(amount: Numeric, decimals: int = TOKEN_DECIMALS, round_down: bool = True) -> str:
    """
    Scale a decimal amount to integer base units.

    The amount is first brought to 10 decimal places (floored when
    ``round_down``, half-up otherwise) to shed float noise, then the decimal
    point is shifted and any digits beyond ``decimals`` are truncated.

    Args:
        amount: Amount in token units
        decimals: Token decimals (6 for USDC and conditional tokens)
        round_down: Floor instead of round during the 10-place pre-rounding

    Returns:
        Integer string, e.g. "1500000"

    Examples:
        >>> to_wei(1.5, 6)
        '1500000'
        >>> to_wei(3.030000000001, 2, round_down=True)
        '303'
    """
    d = _dec(amount, "amount")
    if d < 0:
        raise ValidationError(f"Amount must be non-negative, got {d}", {"field": "amount"})

    with localcontext() as ctx:
        ctx.prec = _WORKING_PRECISION
        pre_rounded = d.quantize(
            _quantum(WEI_PRE_ROUND_PLACES),
            rounding=ROUND_FLOOR if round_down else ROUND_HALF_UP,
        )
        scaled = pre_rounded.scaleb(decimals).to_integral_value(rounding=ROUND_DOWN)
    return str(int(scaled))


def order_amounts(side: Side, size: Numeric, price: Numeric) -> tuple[Decimal, Decimal]:
    """
    Maker and taker amounts (token units) for a limit order.

    BUY pays size * price USDC for size shares; SELL gives size shares for
    size * price USDC.
    """
    s = _dec(size, "size")
    p = _dec(price, "price")
    if side is Side.BUY:
        return s * p, s
    return s, s * p


def market_taker_amount(
    maker_amount: Numeric,
    price: Numeric,
    side: Side,
    amount_decimals: int
) -> Decimal:
    """
    Taker amount for a market order.

    BUY receives maker / price shares, SELL receives maker * price USDC.
    When the result has too many decimals it is first rounded up at
    ``amount_decimals + 4`` places, and only truncated to ``amount_decimals``
    if that still leaves too many.

    Examples:
        >>> market_taker_amount("7", "0.03", Side.BUY, 4)
        Decimal('233.3333')
    """
    maker = _dec(maker_amount, "maker_amount")
    p = _dec(price, "price")
    if p <= 0:
        raise ValidationError(f"Price must be positive, got {p}", {"field": "price"})

    taker = maker / p if side is Side.BUY else maker * p
    if decimal_places(taker) > amount_decimals:
        taker = round_up(taker, amount_decimals + 4)
        if decimal_places(taker) > amount_decimals:
            taker = round_down(taker, amount_decimals)
    return taker


def market_order_amounts(
    side: Side,
    amount: Numeric,
    price: Numeric,
    round_config: RoundConfig
) -> tuple[Decimal, Decimal]:
    """
    Maker and taker amounts (token units) for a market order.

    Price is rounded to the tick's price decimals and the amount floored to
    its size decimals before the taker side is derived.
    """
    raw_price = round_normal(price, round_config.price)
    raw_maker = round_down(amount, round_config.size)
    raw_taker = market_taker_amount(raw_maker, raw_price, side, round_config.amount)
    return raw_maker, raw_taker


def calculate_market_price(
    levels: Sequence[Any],
    amount: Numeric,
    side: Side,
    order_type: OrderType = OrderType.FOK,
    token_id: Optional[str] = None
) -> Decimal:
    """
    Price needed to fill ``amount`` against one side of the book.

    Levels are taken in the order the book endpoint reports them (asks
    descending, bids ascending) and swept from the last level toward the
    first, accumulating notional (BUY: size * price) or shares (SELL: size).
    The price of the level where the sum covers ``amount`` is returned.
    This is a best-to-worst walk over a worst-to-best list: ``levels[-1]``
    is the best price and ``levels[0]``, the worst, is what non-FOK orders
    fall back to when the book is too thin. A caller holding a best-to-worst
    book must reverse it before calling.

    Args:
        levels: Opposing side of the book (asks for BUY, bids for SELL)
        amount: USDC to spend (BUY) or shares to sell (SELL)
        side: Order side
        order_type: FOK orders fail when the book is too thin
        token_id: Used for error details only

    Returns:
        Sweep price

    Raises:
        NoMatchError: Empty book, or FOK order the book cannot cover
    """
    target = _dec(amount, "amount")
    book = [lvl if isinstance(lvl, PriceLevel) else PriceLevel.model_validate(lvl) for lvl in levels]
    if not book:
        raise NoMatchError("no match: empty book", token_id=token_id,
                           amount=str(target), order_type=order_type.value)

    total = Decimal(0)
    for level in reversed(book):
        total += level.size * level.price if side is Side.BUY else level.size
        if total >= target:
            return level.price

    if order_type == OrderType.FOK:
        raise NoMatchError(
            f"no match: book covers {total} of {target}",
            token_id=token_id,
            amount=str(target),
            order_type=order_type.value,
        )

    logger.debug(f"Book covers {total} of {target}, using first level price {book[0].price}")
    return book[0].price
