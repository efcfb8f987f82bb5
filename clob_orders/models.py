"""
Type definitions for the CLOB order engine.

Uses Pydantic for runtime validation at every boundary.
DECIMAL PRECISION: All prices and amounts are Decimal; converted from floats via str().
"""

import re
from enum import Enum
from typing import Optional, Any
from decimal import Decimal
from pydantic import BaseModel, Field, field_validator, model_validator, ConfigDict

from .constants import ZERO_ADDRESS
from .utils.numeric import parse_decimal


_TOKEN_ID_PATTERN = re.compile(r"^(?:[0-9]+|0x[0-9a-fA-F]+)$")
_ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")


class Side(str, Enum):
    """Order side."""
    BUY = "BUY"
    SELL = "SELL"

    @property
    def code(self) -> int:
        """uint8 value used in the signed struct."""
        return 0 if self is Side.BUY else 1


class OrderType(str, Enum):
    """Order time-in-force."""
    GTC = "GTC"  # Good-til-cancelled
    GTD = "GTD"  # Good-til-date
    FOK = "FOK"  # Fill-or-kill
    FAK = "FAK"  # Fill-and-kill (immediate-or-cancel)


class SignatureType(int, Enum):
    """Wallet signature type."""
    EOA = 0  # Externally Owned Account (MetaMask, hardware wallet)
    POLY_PROXY = 1  # Polymarket proxy wallet
    POLY_GNOSIS_SAFE = 2  # Gnosis Safe (email / browser wallets)


def _check_token_id(v: Any) -> str:
    if isinstance(v, int) and not isinstance(v, bool):
        v = str(v)
    if not isinstance(v, str) or not _TOKEN_ID_PATTERN.match(v):
        raise ValueError(f"Token ID must be a decimal or 0x-hex string, got {v!r}")
    if int(v, 16 if v.startswith("0x") else 10) <= 0:
        raise ValueError(f"Token ID must be positive, got {v!r}")
    return v


def _check_address(v: str) -> str:
    if not _ADDRESS_PATTERN.match(v):
        raise ValueError(f"Invalid address: {v}")
    return v


# Request Models
class OrderIntent(BaseModel):
    """Limit order intent: buy or sell ``size`` shares at ``price``."""
    model_config = ConfigDict(frozen=True)

    token_id: str = Field(..., description="ERC1155 token ID (decimal or 0x hex)")
    side: Side = Field(..., description="BUY or SELL")
    price: Decimal = Field(..., gt=0, lt=1, description="Limit price per share")
    size: Decimal = Field(..., gt=0, description="Number of shares")
    fee_rate_bps: int = Field(default=0, ge=0, description="Fee rate in basis points")
    expiration: int = Field(default=0, ge=0, description="Unix timestamp, 0 for none")
    nonce: int = Field(default=0, ge=0, description="Exchange nonce")
    taker: str = Field(default=ZERO_ADDRESS, description="Counterparty, zero address for public orders")

    # Overrides that bypass lookups
    neg_risk: Optional[bool] = Field(None, description="Negative-risk market flag")
    tick_size: Optional[str] = Field(None, description="Market tick size, validates price when given")

    idempotency_key: Optional[str] = Field(None, description="Derive a deterministic salt from this key")

    @field_validator("token_id", mode="before")
    @classmethod
    def validate_token_id(cls, v: Any) -> str:
        return _check_token_id(v)

    @field_validator("price", "size", mode="before")
    @classmethod
    def validate_numeric(cls, v: Any) -> Decimal:
        """Convert numeric fields to Decimal."""
        return parse_decimal(v)

    @field_validator("taker")
    @classmethod
    def validate_taker(cls, v: str) -> str:
        return _check_address(v)


class MarketOrderIntent(BaseModel):
    """
    Market order intent.

    ``amount`` is USDC to spend for BUY and shares to sell for SELL.
    Optional fields are resolved through market data lookups when absent.
    """
    model_config = ConfigDict(frozen=True)

    token_id: str = Field(..., description="ERC1155 token ID (decimal or 0x hex)")
    side: Side = Field(..., description="BUY or SELL")
    amount: Decimal = Field(..., gt=0, description="USDC (BUY) or shares (SELL)")
    order_type: OrderType = Field(default=OrderType.FOK, description="Time-in-force")
    price: Optional[Decimal] = Field(None, gt=0, description="Worst acceptable price; swept from book if absent")
    expiration: int = Field(default=0, ge=0, description="Unix timestamp, 0 for none")
    nonce: int = Field(default=0, ge=0, description="Exchange nonce")
    taker: str = Field(default=ZERO_ADDRESS, description="Counterparty, zero address for public orders")

    # Overrides that bypass lookups
    tick_size: Optional[str] = Field(None, description="Market tick size")
    neg_risk: Optional[bool] = Field(None, description="Negative-risk market flag")
    fee_rate_bps: int = Field(default=0, ge=0, description="Fee rate in basis points")
    fee_rate_locked: bool = Field(
        default=False,
        description="Use fee_rate_bps verbatim and skip the fee rate lookup"
    )

    @field_validator("token_id", mode="before")
    @classmethod
    def validate_token_id(cls, v: Any) -> str:
        return _check_token_id(v)

    @field_validator("amount", mode="before")
    @classmethod
    def validate_amount(cls, v: Any) -> Decimal:
        return parse_decimal(v, "amount")

    @field_validator("price", mode="before")
    @classmethod
    def validate_price(cls, v: Any) -> Optional[Decimal]:
        if v is None:
            return None
        return parse_decimal(v, "price")

    @field_validator("taker")
    @classmethod
    def validate_taker(cls, v: str) -> str:
        return _check_address(v)


# Signed order
class SignedOrder(BaseModel):
    """
    Fully signed order, ready for submission.

    Amounts are integer strings scaled by 10^6.
    """
    model_config = ConfigDict(frozen=True)

    salt: str
    maker: str
    signer: str
    taker: str
    token_id: str
    maker_amount: str
    taker_amount: str
    expiration: str
    nonce: str
    fee_rate_bps: str
    side: Side
    signature_type: SignatureType
    signature: str
    order_hash: str = Field(..., description="EIP-712 digest that was signed (0x hex)")

    def to_payload(self) -> dict[str, Any]:
        """
        Wire representation expected by the exchange.

        ``salt`` and ``signatureType`` are numbers, everything else is a string.
        """
        return {
            "salt": int(self.salt),
            "maker": self.maker,
            "signer": self.signer,
            "taker": self.taker,
            "tokenId": self.token_id,
            "makerAmount": self.maker_amount,
            "takerAmount": self.taker_amount,
            "side": self.side.value,
            "expiration": self.expiration,
            "nonce": self.nonce,
            "feeRateBps": self.fee_rate_bps,
            "signatureType": int(self.signature_type),
            "signature": self.signature,
        }


# Credentials and headers
class ApiCredentials(BaseModel):
    """
    L2 API credentials.

    SECURITY: Secret and passphrase are hidden from repr.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    api_key: str = Field(..., alias="apiKey")
    api_secret: str = Field(..., alias="secret", repr=False)
    api_passphrase: str = Field(..., alias="passphrase", repr=False)


class L1Headers(BaseModel):
    """Wallet-signature headers used to derive or create API credentials."""
    model_config = ConfigDict(frozen=True)

    address: str
    signature: str
    timestamp: str
    nonce: str

    def to_headers(self) -> dict[str, str]:
        return {
            "POLY_ADDRESS": self.address,
            "POLY_SIGNATURE": self.signature,
            "POLY_TIMESTAMP": self.timestamp,
            "POLY_NONCE": self.nonce,
        }


class L2Headers(BaseModel):
    """HMAC headers for trading requests. Regenerate for every request."""
    model_config = ConfigDict(frozen=True)

    address: str
    signature: str
    timestamp: str
    api_key: str
    passphrase: str = Field(..., repr=False)

    def to_headers(self) -> dict[str, str]:
        return {
            "POLY_ADDRESS": self.address,
            "POLY_SIGNATURE": self.signature,
            "POLY_TIMESTAMP": self.timestamp,
            "POLY_API_KEY": self.api_key,
            "POLY_PASSPHRASE": self.passphrase,
        }


# Market Data Models
class PriceLevel(BaseModel):
    """Single order book level."""
    model_config = ConfigDict(frozen=True)

    price: Decimal
    size: Decimal

    @model_validator(mode="before")
    @classmethod
    def from_pair(cls, data: Any) -> Any:
        """Accept (price, size) pairs as well as mappings."""
        if isinstance(data, (tuple, list)) and len(data) == 2:
            return {"price": data[0], "size": data[1]}
        return data

    @field_validator("price", "size", mode="before")
    @classmethod
    def validate_numeric(cls, v: Any) -> Decimal:
        return parse_decimal(v)


class OrderBookSnapshot(BaseModel):
    """
    Order book for a token.

    Levels keep the order the exchange's book endpoint reports them in
    (bids ascending, asks descending), so the best level is the last one.
    In best-to-worst terms the lists are reversed: index 0 holds the worst
    (deepest) price and is the fallback for orders the book cannot fill.
    """
    token_id: str = Field(..., alias="asset_id")
    bids: list[PriceLevel] = Field(default_factory=list)
    asks: list[PriceLevel] = Field(default_factory=list)
    tick_size: Optional[str] = None
    neg_risk: Optional[bool] = None

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("tick_size", mode="before")
    @classmethod
    def validate_tick_size(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        return str(v)


class OrderResponse(BaseModel):
    """Order placement response."""
    success: bool = False
    error_msg: str = Field(default="", alias="errorMsg")
    order_id: str = Field(default="", alias="orderID")
    status: str = ""
    taking_amount: str = Field(default="0", alias="takingAmount")
    making_amount: str = Field(default="0", alias="makingAmount")
    transaction_hashes: list[str] = Field(default_factory=list, alias="transactionsHashes")

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def merge_error_fields(cls, data: Any) -> Any:
        """The exchange reports failures under errorMsg, error or message."""
        if isinstance(data, dict) and not data.get("errorMsg"):
            fallback = data.get("error") or data.get("message")
            if fallback:
                data = {**data, "errorMsg": str(fallback)}
        return data

    @field_validator("taking_amount", "making_amount", mode="before")
    @classmethod
    def validate_amount(cls, v: Any) -> str:
        return "0" if v is None else str(v)

    @field_validator("transaction_hashes", mode="before")
    @classmethod
    def validate_hashes(cls, v: Any) -> list[str]:
        return list(v) if isinstance(v, (list, tuple)) else []


# Configuration Models
class WalletConfig(BaseModel):
    """Wallet configuration."""
    private_key: str = Field(..., repr=False, description="Wallet private key (hex)")
    signature_type: SignatureType = Field(default=SignatureType.EOA)
    funder: Optional[str] = Field(None, description="Proxy wallet that holds funds (order maker)")

    @field_validator("funder")
    @classmethod
    def validate_funder(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _check_address(v)
