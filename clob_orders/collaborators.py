"""
Contracts for the transport-side collaborators the order engine calls.

The engine performs no I/O itself. Callers pass objects implementing these
protocols; methods may be plain functions or coroutines.
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Protocol, Union, runtime_checkable

from .exceptions import ClobOrderError, NetworkCollaboratorError, ValidationError
from .models import ApiCredentials, OrderBookSnapshot

logger = logging.getLogger(__name__)

MaybeAwaitable = Union[Any, Awaitable[Any]]


@runtime_checkable
class MarketDataSource(Protocol):
    """Per-token market metadata and order books."""

    def get_tick_size(self, token_id: str) -> MaybeAwaitable:
        """Minimum tick size as a string, e.g. "0.01"."""
        ...

    def get_neg_risk(self, token_id: str) -> MaybeAwaitable:
        """True if the token trades on the negative-risk exchange."""
        ...

    def get_fee_rate_bps(self, token_id: str) -> MaybeAwaitable:
        """Market base fee in basis points."""
        ...

    def get_order_book(self, token_id: str) -> MaybeAwaitable:
        """OrderBookSnapshot (or a mapping accepted by it)."""
        ...


@runtime_checkable
class CredentialsEndpoint(Protocol):
    """L1-authenticated API key endpoints."""

    def derive_api_key(self, headers: dict[str, str]) -> MaybeAwaitable:
        """GET /auth/derive-api-key; returns credentials or their wire mapping."""
        ...

    def create_api_key(self, headers: dict[str, str]) -> MaybeAwaitable:
        """POST /auth/api-key; returns credentials or their wire mapping."""
        ...


@runtime_checkable
class OrderEndpoint(Protocol):
    """L2-authenticated order submission."""

    def post_order(self, body: str, headers: dict[str, str]) -> MaybeAwaitable:
        """POST /order; returns the decoded JSON response."""
        ...

    def post_orders(self, body: str, headers: dict[str, str]) -> MaybeAwaitable:
        """POST /orders; returns the decoded JSON response (a list)."""
        ...


async def call_collaborator(
    stage: str,
    fn: Callable[..., Any],
    *args: Any,
    token_id: Optional[str] = None
) -> Any:
    """
    Invoke a collaborator method, awaiting it if it returns an awaitable.

    Engine errors pass through untouched; anything else the transport raises
    is wrapped in NetworkCollaboratorError tagged with the stage name.
    """
    try:
        result = fn(*args)
        if inspect.isawaitable(result):
            result = await result
    except ClobOrderError:
        raise
    except Exception as e:
        logger.warning(f"Collaborator stage '{stage}' failed: {type(e).__name__}: {e}")
        raise NetworkCollaboratorError(
            f"{stage} failed: {type(e).__name__}: {e}",
            stage=stage,
            token_id=token_id,
        ) from e
    return result


def coerce_order_book(value: Any) -> OrderBookSnapshot:
    """Validate a collaborator's order book at the boundary."""
    if isinstance(value, OrderBookSnapshot):
        return value
    return OrderBookSnapshot.model_validate(value)


def coerce_credentials(value: Any) -> ApiCredentials:
    """Validate a collaborator's credentials response at the boundary."""
    if isinstance(value, ApiCredentials):
        return value
    return ApiCredentials.model_validate(value)


def coerce_neg_risk(value: Any, token_id: Optional[str] = None) -> bool:
    """
    Validate a collaborator's neg-risk flag at the boundary.

    The flag picks the exchange contract the order is signed for, so only a
    real bool or the JSON literals "true"/"false" are accepted.

    Raises:
        ValidationError: For anything else, including None
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ValidationError(
        f"Invalid neg_risk flag: {value!r}",
        {"field": "neg_risk", "token_id": token_id},
    )
