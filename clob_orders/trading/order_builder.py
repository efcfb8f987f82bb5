"""
Order builder with EIP-712 signing.

Turns limit and market order intents into signed orders for the CLOB
exchange contracts. Market metadata that the caller does not supply is
looked up through a MarketDataSource, one stage at a time.
"""

import hashlib
import secrets
from decimal import Decimal
from typing import Any, Optional
import logging

from pydantic import ValidationError as PydanticValidationError

from .precision import (
    calculate_market_price,
    get_round_config,
    market_order_amounts,
    normalize_tick_size,
    order_amounts,
    price_valid,
    to_wei,
)
from ..auth.eip712 import encode_eip712, hash_order_domain, hash_order_struct
from ..auth.signer import Signer
from ..collaborators import (
    MarketDataSource,
    call_collaborator,
    coerce_neg_risk,
    coerce_order_book,
)
from ..config import ClobOrderSettings
from ..constants import TOKEN_DECIMALS
from ..exceptions import (
    InvalidFeeRateError,
    InvalidPriceError,
    MissingRequiredFieldError,
    NetworkCollaboratorError,
    ValidationError,
)
from ..models import (
    MarketOrderIntent,
    OrderBookSnapshot,
    OrderIntent,
    Side,
    SignatureType,
    SignedOrder,
)

logger = logging.getLogger(__name__)

# Random salts are drawn from [0, SALT_RANGE)
SALT_RANGE = 10 ** 12


def normalize_token_id(token_id: str) -> str:
    """Decimal string form of a token ID given in decimal or 0x hex."""
    if token_id.startswith(("0x", "0X")):
        return str(int(token_id, 16))
    return token_id.lstrip("0") or "0"


class OrderBuilder:
    """
    Builds and signs orders for the CLOB.

    Handles:
    - Exchange contract selection (standard vs negative-risk)
    - Maker/taker amount calculation with tick-size rounding
    - Salt generation
    - Market metadata resolution for market orders
    - EIP-712 hashing and signing
    """

    def __init__(
        self,
        signer: Signer,
        settings: Optional[ClobOrderSettings] = None,
        market_data: Optional[MarketDataSource] = None,
        signature_type: Optional[SignatureType] = None,
        funder: Optional[str] = None
    ):
        """
        Initialize order builder.

        Args:
            signer: Wallet signer (order ``signer`` field)
            settings: Chain and exchange settings
            market_data: Source for tick size, neg-risk, fee rate and books
            signature_type: Overrides settings.signature_type
            funder: Wallet holding the funds (order ``maker``); defaults to
                settings.funder_address, then the signer's address
        """
        self.signer = signer
        self.settings = settings or ClobOrderSettings()
        self.market_data = market_data
        self.chain_id = self.settings.chain_id
        self.signature_type = (
            signature_type if signature_type is not None else self.settings.signature_type
        )
        self.maker = funder or self.settings.funder_address or signer.address

    def exchange_address(self, neg_risk: bool) -> str:
        """Verifying contract for the order: neg-risk markets settle on their own exchange."""
        if neg_risk:
            return self.settings.neg_risk_exchange_address
        return self.settings.exchange_address

    def generate_salt(self, idempotency_key: Optional[str] = None) -> str:
        """
        Generate an order salt.

        Random unless ``idempotency_key`` is given, in which case the salt is
        derived from SHA-256 of the key so that retries of the same logical
        order produce the same order hash.

        Args:
            idempotency_key: Unique identifier (e.g. database UUID), or None

        Returns:
            Salt as a decimal string
        """
        if idempotency_key is None:
            return str(secrets.randbelow(SALT_RANGE))

        hash_bytes = hashlib.sha256(idempotency_key.encode("utf-8")).digest()
        return str(int.from_bytes(hash_bytes, byteorder="big") % SALT_RANGE)

    # Limit orders

    def build_order(self, intent: OrderIntent, neg_risk: bool) -> SignedOrder:
        """
        Build and sign a limit order with the neg-risk flag already known.

        Args:
            intent: Limit order intent
            neg_risk: Negative-risk market flag

        Returns:
            Signed order

        Raises:
            UnsupportedTickSizeError: If intent.tick_size is given but unsupported
            InvalidPriceError: If the price falls outside [tick, 1 - tick]
            SigningError: If signing fails
        """
        if intent.tick_size is not None:
            tick_size = normalize_tick_size(intent.tick_size)
            get_round_config(tick_size)
            self._check_price(intent.price, tick_size)

        maker_amount, taker_amount = order_amounts(intent.side, intent.size, intent.price)

        order = self._sign(
            token_id=intent.token_id,
            side=intent.side,
            maker_amount=to_wei(maker_amount, TOKEN_DECIMALS),
            taker_amount=to_wei(taker_amount, TOKEN_DECIMALS),
            expiration=intent.expiration,
            nonce=intent.nonce,
            fee_rate_bps=intent.fee_rate_bps,
            taker=intent.taker,
            neg_risk=neg_risk,
            salt=self.generate_salt(intent.idempotency_key),
        )

        logger.info(
            f"Built order: {intent.side.value} {intent.size} @ {intent.price} "
            f"(token={intent.token_id}, neg_risk={neg_risk})"
        )
        return order

    async def create_order(self, intent: OrderIntent) -> SignedOrder:
        """
        Build and sign a limit order, looking up the neg-risk flag if not supplied.

        Raises:
            MissingRequiredFieldError: Flag absent and no market data source
            NetworkCollaboratorError: If the lookup fails
        """
        neg_risk = intent.neg_risk
        if neg_risk is None:
            neg_risk = await self._fetch_neg_risk(intent.token_id)
        return self.build_order(intent, neg_risk)

    # Market orders

    def create_market_order_strict(self, intent: MarketOrderIntent) -> SignedOrder:
        """
        Build a market order from caller-supplied metadata only.

        For latency-sensitive paths: no lookups are performed, so tick size,
        price, neg-risk flag and a locked fee rate must all be present.

        Raises:
            MissingRequiredFieldError: Names the first absent field
            UnsupportedTickSizeError: If the tick size is unsupported
            InvalidPriceError: If the price falls outside [tick, 1 - tick]
        """
        required = (
            ("tick_size", intent.tick_size),
            ("price", intent.price),
            ("neg_risk", intent.neg_risk),
        )
        for field, value in required:
            if value is None:
                raise MissingRequiredFieldError(
                    f"{field} is required for strict market orders", field=field
                )
        if not intent.fee_rate_locked:
            raise MissingRequiredFieldError(
                "fee_rate_bps must be locked for strict market orders", field="fee_rate_bps"
            )

        return self._build_market_order(
            intent,
            tick_size=normalize_tick_size(intent.tick_size),
            price=intent.price,
            neg_risk=intent.neg_risk,
            fee_rate_bps=intent.fee_rate_bps,
        )

    async def create_market_order_resolved(self, intent: MarketOrderIntent) -> SignedOrder:
        """
        Build a market order, resolving missing metadata.

        Stages run strictly in order and the first failure aborts the rest:
        tick size, price (book sweep if absent), price validity, neg-risk
        flag, fee rate, then build and sign.

        Raises:
            UnsupportedTickSizeError: Tick size unsupported
            NoMatchError: Book sweep cannot produce a price
            InvalidPriceError: Price outside [tick, 1 - tick]
            InvalidFeeRateError: Caller fee differs from the market fee
            MissingRequiredFieldError: Lookup needed but no market data source
            NetworkCollaboratorError: A lookup failed
        """
        token_id = intent.token_id

        if intent.tick_size is not None:
            tick_size = normalize_tick_size(intent.tick_size)
        else:
            tick_size = await self._fetch_tick_size(token_id)
        get_round_config(tick_size)

        price = intent.price
        if price is None:
            book = await self._fetch_order_book(token_id)
            levels = book.asks if intent.side is Side.BUY else book.bids
            price = calculate_market_price(
                levels, intent.amount, intent.side, intent.order_type, token_id=token_id
            )
            logger.debug(f"Swept book for {token_id}: {intent.side.value} {intent.amount} -> {price}")

        self._check_price(price, tick_size)

        neg_risk = intent.neg_risk
        if neg_risk is None:
            neg_risk = await self._fetch_neg_risk(token_id)

        if intent.fee_rate_locked:
            fee_rate_bps = intent.fee_rate_bps
        else:
            fee_rate_bps = await self._resolve_fee_rate(token_id, intent.fee_rate_bps)

        return self._build_market_order(intent, tick_size, price, neg_risk, fee_rate_bps)

    def _build_market_order(
        self,
        intent: MarketOrderIntent,
        tick_size: str,
        price: Decimal,
        neg_risk: bool,
        fee_rate_bps: int
    ) -> SignedOrder:
        round_config = get_round_config(tick_size)
        self._check_price(price, tick_size)

        maker_amount, taker_amount = market_order_amounts(
            intent.side, intent.amount, price, round_config
        )

        order = self._sign(
            token_id=intent.token_id,
            side=intent.side,
            maker_amount=to_wei(maker_amount, TOKEN_DECIMALS),
            taker_amount=to_wei(taker_amount, TOKEN_DECIMALS),
            expiration=intent.expiration,
            nonce=intent.nonce,
            fee_rate_bps=fee_rate_bps,
            taker=intent.taker,
            neg_risk=neg_risk,
            salt=self.generate_salt(),
        )

        logger.info(
            f"Built market order: {intent.side.value} {intent.amount} @ {price} "
            f"{intent.order_type.value} (token={intent.token_id}, tick={tick_size}, "
            f"neg_risk={neg_risk}, fee={fee_rate_bps}bps)"
        )
        return order

    # Resolution stages

    def _check_price(self, price: Decimal, tick_size: str) -> None:
        if not price_valid(price, tick_size):
            raise InvalidPriceError(
                f"Price {price} invalid for tick size {tick_size}. "
                f"Must be between {tick_size} and {Decimal(1) - Decimal(tick_size)}",
                price=str(price),
                tick_size=tick_size,
            )

    def _require_market_data(self, field: str) -> MarketDataSource:
        if self.market_data is None:
            raise MissingRequiredFieldError(
                f"{field} not supplied and no market data source configured", field=field
            )
        return self.market_data

    async def _fetch_tick_size(self, token_id: str) -> str:
        source = self._require_market_data("tick_size")
        tick_size = await call_collaborator(
            "tick_size", source.get_tick_size, token_id, token_id=token_id
        )
        return normalize_tick_size(tick_size)

    async def _fetch_order_book(self, token_id: str) -> OrderBookSnapshot:
        source = self._require_market_data("price")
        raw = await call_collaborator(
            "order_book", source.get_order_book, token_id, token_id=token_id
        )
        try:
            return coerce_order_book(raw)
        except PydanticValidationError as e:
            raise NetworkCollaboratorError(
                f"order_book returned a malformed book: {e.error_count()} errors",
                stage="order_book",
                token_id=token_id,
            ) from e

    async def _fetch_neg_risk(self, token_id: str) -> bool:
        source = self._require_market_data("neg_risk")
        neg_risk = await call_collaborator(
            "neg_risk", source.get_neg_risk, token_id, token_id=token_id
        )
        return coerce_neg_risk(neg_risk, token_id)

    async def _resolve_fee_rate(self, token_id: str, provided: int) -> int:
        """
        Reconcile the caller's fee rate with the market's.

        A non-zero caller value must equal a non-zero market value; a
        non-zero market value always wins over a zero caller value.
        """
        source = self._require_market_data("fee_rate_bps")
        raw = await call_collaborator(
            "fee_rate", source.get_fee_rate_bps, token_id, token_id=token_id
        )
        market = _coerce_fee_rate(raw)

        if market > 0 and provided != 0 and provided != market:
            raise InvalidFeeRateError(
                f"invalid user provided fee rate: ({provided}), fee rate for the market must be {market}",
                provided=provided,
                market=market,
            )
        return market if market > 0 else provided

    def _sign(
        self,
        token_id: str,
        side: Side,
        maker_amount: str,
        taker_amount: str,
        expiration: int,
        nonce: int,
        fee_rate_bps: int,
        taker: str,
        neg_risk: bool,
        salt: str
    ) -> SignedOrder:
        """Assemble the order struct, hash it against the exchange domain and sign."""
        fields: dict[str, Any] = {
            "maker": self.maker,
            "signer": self.signer.address,
            "taker": taker,
            "tokenId": normalize_token_id(token_id),
            "makerAmount": maker_amount,
            "takerAmount": taker_amount,
            "expiration": str(expiration),
            "nonce": str(nonce),
            "feeRateBps": str(fee_rate_bps),
            "side": side.code,
            "signatureType": int(self.signature_type),
        }

        digest = encode_eip712(
            hash_order_domain(self.chain_id, self.exchange_address(neg_risk)),
            hash_order_struct(fields, salt),
        )
        signature = self.signer.sign_hex(digest)

        logger.debug(f"Signed order {('0x' + digest.hex())[:18]}... maker={self.maker}")
        return SignedOrder(
            salt=salt,
            maker=fields["maker"],
            signer=fields["signer"],
            taker=taker,
            token_id=fields["tokenId"],
            maker_amount=maker_amount,
            taker_amount=taker_amount,
            expiration=fields["expiration"],
            nonce=fields["nonce"],
            fee_rate_bps=fields["feeRateBps"],
            side=side,
            signature_type=self.signature_type,
            signature=signature,
            order_hash="0x" + digest.hex(),
        )


def _coerce_fee_rate(value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"Invalid market fee rate: {value!r}", {"field": "fee_rate_bps"})
    try:
        fee = int(str(value).strip())
    except (TypeError, ValueError) as e:
        raise ValidationError(
            f"Invalid market fee rate: {value!r}", {"field": "fee_rate_bps"}
        ) from e
    if fee < 0:
        raise ValidationError(f"Negative market fee rate: {fee}", {"field": "fee_rate_bps"})
    return fee
