"""
Request bodies for order submission.

The body string returned by dumps_body() is both HMAC-signed and sent, so
it must be produced exactly once per request.
"""

from typing import Any, Iterable, Union

import orjson

from ..exceptions import InvalidOrderError
from ..models import OrderType, SignedOrder

# Time-in-force values that can rest on the book
POST_ONLY_ORDER_TYPES = frozenset({OrderType.GTC, OrderType.GTD})


def order_envelope(
    order: Union[SignedOrder, dict[str, Any]],
    owner: str,
    order_type: OrderType = OrderType.GTC,
    post_only: bool = False
) -> dict[str, Any]:
    """
    Wrap a signed order for POST /order.

    Args:
        order: Signed order (or its wire payload)
        owner: API key that owns the order
        order_type: Time-in-force
        post_only: Reject instead of matching on arrival (GTC/GTD only)

    Returns:
        {order, owner, orderType, deferExec[, postOnly]}

    Raises:
        InvalidOrderError: If post_only is set on a FOK/FAK order
    """
    order_type = OrderType(order_type)
    if post_only and order_type not in POST_ONLY_ORDER_TYPES:
        raise InvalidOrderError(
            f"post_only is only supported for GTC and GTD orders, got {order_type.value}",
            {"field": "post_only", "order_type": order_type.value},
        )

    envelope = {
        "order": order.to_payload() if isinstance(order, SignedOrder) else order,
        "owner": owner,
        "orderType": order_type.value,
        "deferExec": False,
    }
    if post_only:
        envelope["postOnly"] = True
    return envelope


def batch_envelope(
    entries: Iterable[tuple[SignedOrder, OrderType]],
    owner: str,
    post_only: bool = False
) -> list[dict[str, Any]]:
    """Wrap several (order, order_type) pairs for POST /orders."""
    return [
        order_envelope(order, owner, order_type, post_only)
        for order, order_type in entries
    ]


def dumps_body(obj: Any) -> str:
    """Compact JSON body (orjson emits no insignificant whitespace)."""
    return orjson.dumps(obj).decode("utf-8")
