"""
High-level order client.

Composes the signer, authenticator and order builder with caller-supplied
transport collaborators: build, sign, authenticate and submit in one call.

Usage:
    client = ClobOrderClient(
        WalletConfig(private_key=key),
        market_data=my_market_data,
        credentials_endpoint=my_auth_api,
        order_endpoint=my_order_api,
    )
    response = await client.create_and_post_order(
        OrderIntent(token_id="123", side=Side.BUY, price="0.5", size="10")
    )
"""

import asyncio
from typing import Any, Iterable, Optional
import logging

from pydantic import ValidationError as PydanticValidationError

from .auth.authenticator import Authenticator
from .auth.credentials import create_or_derive_api_credentials
from .auth.signer import Signer
from .collaborators import (
    CredentialsEndpoint,
    MarketDataSource,
    OrderEndpoint,
    call_collaborator,
)
from .config import ClobOrderSettings, get_settings
from .exceptions import AuthenticationError, NetworkCollaboratorError
from .models import (
    ApiCredentials,
    MarketOrderIntent,
    OrderIntent,
    OrderResponse,
    OrderType,
    SignedOrder,
    WalletConfig,
)
from .trading.market_data import CachingMarketData
from .trading.order_builder import OrderBuilder
from .trading.payloads import batch_envelope, dumps_body, order_envelope

logger = logging.getLogger(__name__)

ORDER_PATH = "/order"
ORDERS_PATH = "/orders"


class ClobOrderClient:
    """
    Order placement client for a single wallet.

    Features:
    - Limit and market order construction (strict or resolved)
    - Lazy API credential bootstrap (derive, then create)
    - Per-request L2 headers over the exact body that is sent
    - Metadata caching in front of the market data source
    """

    def __init__(
        self,
        wallet: WalletConfig,
        market_data: Optional[MarketDataSource] = None,
        credentials_endpoint: Optional[CredentialsEndpoint] = None,
        order_endpoint: Optional[OrderEndpoint] = None,
        settings: Optional[ClobOrderSettings] = None,
        credentials: Optional[ApiCredentials] = None
    ):
        """
        Initialize order client.

        Args:
            wallet: Wallet configuration (private key, signature type, funder)
            market_data: Tick size / neg-risk / fee / order book source
            credentials_endpoint: API key derive/create endpoints
            order_endpoint: Order submission endpoints
            settings: Optional settings (loads from env if not provided)
            credentials: Pre-existing API credentials (skips bootstrap)

        Raises:
            PrivateKeyError: If the wallet key is malformed
        """
        self.settings = settings or get_settings()

        self.signer = Signer(wallet.private_key, chain_id=self.settings.chain_id)
        self.authenticator = Authenticator(self.signer)

        if market_data is not None and self.settings.metadata_cache_ttl > 0:
            market_data = CachingMarketData(
                market_data,
                ttl=self.settings.metadata_cache_ttl,
                max_size=self.settings.metadata_cache_size,
            )
        self.market_data = market_data

        self.builder = OrderBuilder(
            self.signer,
            settings=self.settings,
            market_data=market_data,
            signature_type=wallet.signature_type,
            funder=wallet.funder,
        )

        self.credentials_endpoint = credentials_endpoint
        self.order_endpoint = order_endpoint
        self._credentials = credentials
        self._credentials_lock = asyncio.Lock()

        logger.info(f"Order client initialized for {self.address} (chain {self.settings.chain_id})")

    def __repr__(self) -> str:
        return f"ClobOrderClient(address={self.address}, chain_id={self.settings.chain_id})"

    @property
    def address(self) -> str:
        return self.signer.address

    # ========== Credentials ==========

    async def ensure_credentials(self) -> ApiCredentials:
        """
        Return API credentials, bootstrapping them on first use.

        Raises:
            AuthenticationError: No endpoint configured, or derive and create both failed
        """
        if self._credentials is not None:
            return self._credentials

        async with self._credentials_lock:
            if self._credentials is None:
                if self.credentials_endpoint is None:
                    raise AuthenticationError(
                        "No API credentials and no credentials endpoint configured",
                        {"address": self.address},
                    )
                self._credentials = await create_or_derive_api_credentials(
                    self.authenticator, self.credentials_endpoint
                )
        return self._credentials

    # ========== Submission ==========

    async def post_order(
        self,
        order: SignedOrder,
        order_type: OrderType = OrderType.GTC,
        post_only: bool = False
    ) -> OrderResponse:
        """
        Submit a signed order.

        Args:
            order: Signed order
            order_type: Time-in-force
            post_only: Reject instead of matching on arrival (GTC/GTD only)

        Returns:
            Order response

        Raises:
            InvalidOrderError: post_only on FOK/FAK
            AuthenticationError: Credentials unavailable
            NetworkCollaboratorError: Transport failure or malformed response
        """
        endpoint = self._require_order_endpoint()
        credentials = await self.ensure_credentials()

        body = dumps_body(order_envelope(order, credentials.api_key, order_type, post_only))
        headers = self.authenticator.create_l2_headers(credentials, "POST", ORDER_PATH, body)

        raw = await call_collaborator(
            "post_order", endpoint.post_order, body, headers.to_headers(), token_id=order.token_id
        )
        response = _parse_response("post_order", raw)

        if response.success:
            logger.info(
                f"Order placed: {order.side.value} token={order.token_id} "
                f"id={response.order_id} status={response.status}"
            )
        else:
            logger.warning(f"Order rejected: token={order.token_id} error={response.error_msg}")
        return response

    async def post_orders(
        self,
        entries: Iterable[tuple[SignedOrder, OrderType]],
        post_only: bool = False
    ) -> list[OrderResponse]:
        """
        Submit several signed orders in one request.

        Args:
            entries: (signed order, order type) pairs
            post_only: Applied to every order in the batch

        Returns:
            One response per order, in exchange order
        """
        entries = list(entries)
        endpoint = self._require_order_endpoint()
        credentials = await self.ensure_credentials()

        body = dumps_body(batch_envelope(entries, credentials.api_key, post_only))
        headers = self.authenticator.create_l2_headers(credentials, "POST", ORDERS_PATH, body)

        raw = await call_collaborator("post_orders", endpoint.post_orders, body, headers.to_headers())
        if not isinstance(raw, list):
            raise NetworkCollaboratorError(
                f"post_orders returned {type(raw).__name__}, expected a list",
                stage="post_orders",
            )

        responses = [_parse_response("post_orders", item) for item in raw]
        accepted = sum(1 for r in responses if r.success)
        logger.info(f"Batch placed: {accepted}/{len(entries)} orders accepted")
        return responses

    async def create_and_post_order(
        self,
        intent: OrderIntent,
        order_type: OrderType = OrderType.GTC,
        post_only: bool = False
    ) -> OrderResponse:
        """Build, sign and submit a limit order."""
        order = await self.builder.create_order(intent)
        return await self.post_order(order, order_type, post_only)

    async def create_and_post_market_order(
        self,
        intent: MarketOrderIntent,
        strict: bool = False
    ) -> OrderResponse:
        """
        Build, sign and submit a market order.

        Args:
            intent: Market order intent
            strict: Use only caller-supplied metadata (no lookups)
        """
        if strict:
            order = self.builder.create_market_order_strict(intent)
        else:
            order = await self.builder.create_market_order_resolved(intent)
        return await self.post_order(order, intent.order_type)

    def _require_order_endpoint(self) -> OrderEndpoint:
        if self.order_endpoint is None:
            raise NetworkCollaboratorError("No order endpoint configured", stage="post_order")
        return self.order_endpoint


def _parse_response(stage: str, raw: Any) -> OrderResponse:
    if isinstance(raw, OrderResponse):
        return raw
    try:
        return OrderResponse.model_validate(raw)
    except PydanticValidationError as e:
        raise NetworkCollaboratorError(
            f"{stage} returned a malformed response: {e.error_count()} errors",
            stage=stage,
        ) from e
