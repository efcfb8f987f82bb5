"""
Exception hierarchy for the CLOB order engine.

Every error carries a human readable message plus a ``details`` dict naming
the offending field or constraint.
"""

from typing import Any, Optional


class ClobOrderError(Exception):
    """Base exception for all order engine errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# Key material and signing
class PrivateKeyError(ClobOrderError):
    """Private key is malformed (wrong length, not hex, out of curve range)."""
    pass


class SigningError(ClobOrderError):
    """Elliptic-curve signing failed unexpectedly."""
    pass


class AuthenticationError(ClobOrderError):
    """Authentication headers could not be produced or credentials bootstrap failed."""
    pass


# Validation
class ValidationError(ClobOrderError):
    """Order input validation failed."""
    pass


class UnsupportedTickSizeError(ValidationError):
    """Tick size is not one of the exchange's supported values."""

    def __init__(self, message: str, tick_size: Optional[str] = None):
        super().__init__(message, {"tick_size": tick_size})
        self.tick_size = tick_size


class InvalidPriceError(ValidationError):
    """Price falls outside [tick, 1 - tick]."""

    def __init__(self, message: str, price: Optional[str] = None,
                 tick_size: Optional[str] = None):
        super().__init__(message, {"price": price, "tick_size": tick_size})
        self.price = price
        self.tick_size = tick_size


class InvalidFeeRateError(ValidationError):
    """Caller supplied fee rate does not match the market's fee rate."""

    def __init__(self, message: str, provided: Optional[int] = None,
                 market: Optional[int] = None):
        super().__init__(message, {"provided": provided, "market": market})
        self.provided = provided
        self.market = market


class MissingRequiredFieldError(ValidationError):
    """A field required for lookup-free order construction was not supplied."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, {"field": field})
        self.field = field


class InvalidOrderError(ValidationError):
    """Order parameters are inconsistent (e.g. post-only on a FOK order)."""
    pass


# Trading
class TradingError(ClobOrderError):
    """Base exception for trading operations."""
    pass


class NoMatchError(TradingError):
    """Order book cannot cover the requested amount."""

    def __init__(self, message: str, token_id: Optional[str] = None,
                 amount: Optional[str] = None, order_type: Optional[str] = None):
        super().__init__(message, {
            "token_id": token_id,
            "amount": amount,
            "order_type": order_type,
        })
        self.token_id = token_id
        self.amount = amount
        self.order_type = order_type


# Collaborators
class NetworkCollaboratorError(ClobOrderError):
    """A transport collaborator failed; wraps the original exception."""

    def __init__(self, message: str, stage: Optional[str] = None,
                 token_id: Optional[str] = None):
        super().__init__(message, {"stage": stage, "token_id": token_id})
        self.stage = stage
        self.token_id = token_id
