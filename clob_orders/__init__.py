"""
CLOB order engine.

Builds, signs and authenticates orders for the Polymarket CTF exchange:
EIP-712 order hashing, secp256k1 signatures, L1/L2 auth headers and
tick-size aware amount precision. Transport is supplied by the caller.
"""

from .client import ClobOrderClient
from .config import ClobOrderSettings, get_settings
from .models import (
    Side,
    OrderType,
    SignatureType,
    OrderIntent,
    MarketOrderIntent,
    SignedOrder,
    ApiCredentials,
    L1Headers,
    L2Headers,
    PriceLevel,
    OrderBookSnapshot,
    OrderResponse,
    WalletConfig,
)
from .exceptions import (
    ClobOrderError,
    PrivateKeyError,
    SigningError,
    AuthenticationError,
    ValidationError,
    UnsupportedTickSizeError,
    InvalidPriceError,
    InvalidFeeRateError,
    MissingRequiredFieldError,
    InvalidOrderError,
    TradingError,
    NoMatchError,
    NetworkCollaboratorError,
)
from .auth import Authenticator, Signer
from .trading import OrderBuilder, CachingMarketData
from .logging_config import setup_logging

__version__ = "1.0.0"

__all__ = [
    "ClobOrderClient",
    "ClobOrderSettings",
    "get_settings",
    "Side",
    "OrderType",
    "SignatureType",
    "OrderIntent",
    "MarketOrderIntent",
    "SignedOrder",
    "ApiCredentials",
    "L1Headers",
    "L2Headers",
    "PriceLevel",
    "OrderBookSnapshot",
    "OrderResponse",
    "WalletConfig",
    "ClobOrderError",
    "PrivateKeyError",
    "SigningError",
    "AuthenticationError",
    "ValidationError",
    "UnsupportedTickSizeError",
    "InvalidPriceError",
    "InvalidFeeRateError",
    "MissingRequiredFieldError",
    "InvalidOrderError",
    "TradingError",
    "NoMatchError",
    "NetworkCollaboratorError",
    "Authenticator",
    "Signer",
    "OrderBuilder",
    "CachingMarketData",
    "setup_logging",
]
