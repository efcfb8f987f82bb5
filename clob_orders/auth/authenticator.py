"""
Authentication header generation for the CLOB API.

Handles L1 (wallet signature) and L2 (API key HMAC) authentication.
Both header sets embed the current timestamp, so they are built per request.
"""

import time
import hmac
import hashlib
import base64
import binascii
from typing import Optional
import logging

from .eip712 import encode_eip712, hash_auth_domain, hash_auth_struct
from .signer import Signer
from ..models import ApiCredentials, L1Headers, L2Headers
from ..exceptions import AuthenticationError, ClobOrderError

logger = logging.getLogger(__name__)


def decode_api_secret(api_secret: str) -> bytes:
    """
    Decode a base64 API secret.

    Accepts both the standard (+/) and URL-safe (-_) alphabets, with or
    without padding.

    Raises:
        binascii.Error: If the secret contains non-base64 characters
    """
    normalized = api_secret.strip().replace("-", "+").replace("_", "/").rstrip("=")
    normalized += "=" * (-len(normalized) % 4)
    return base64.b64decode(normalized, validate=True)


def build_hmac_signature(
    api_secret: str,
    timestamp: int,
    method: str,
    path: str,
    body: str = ""
) -> str:
    """
    Compute the L2 HMAC signature.

    message = timestamp + METHOD + path [+ body]; HMAC-SHA256 keyed by the
    decoded secret; URL-safe base64 output.
    """
    message = str(timestamp) + str(method).upper() + str(path)
    if body:
        message += body

    h = hmac.new(
        decode_api_secret(api_secret),
        message.encode("utf-8"),
        hashlib.sha256
    )
    return base64.urlsafe_b64encode(h.digest()).decode("utf-8")


class Authenticator:
    """
    Handles L1 and L2 authentication for the CLOB.

    L1: EIP-712 wallet signature, used only to derive or create API credentials
    L2: API key HMAC signature for trading requests
    """

    def __init__(self, signer: Signer, chain_id: Optional[int] = None):
        """
        Initialize authenticator.

        Args:
            signer: Wallet signer (its address is always the L1/L2 address)
            chain_id: Chain ID for the auth domain (defaults to the signer's)
        """
        self.signer = signer
        self.chain_id = chain_id if chain_id is not None else signer.chain_id

    @property
    def address(self) -> str:
        return self.signer.address

    def create_l1_headers(
        self,
        nonce: int = 0,
        timestamp: Optional[int] = None
    ) -> L1Headers:
        """
        Create L1 authentication headers.

        Signs ClobAuth(address, timestamp, nonce, attestation message).

        Args:
            nonce: Nonce value (default: 0)
            timestamp: Unix timestamp (uses current time if None)

        Returns:
            L1 headers

        Raises:
            AuthenticationError: If signing fails
        """
        if timestamp is None:
            timestamp = int(time.time())

        try:
            digest = encode_eip712(
                hash_auth_domain(self.chain_id),
                hash_auth_struct(self.address, str(timestamp), nonce),
            )
            signature = self.signer.sign_hex(digest)
        except (ClobOrderError, ValueError) as e:
            # SECURITY: Report only the error type
            error_type = type(e).__name__
            logger.error(f"Failed to create L1 headers: {error_type}")
            raise AuthenticationError(f"L1 signature failed: {error_type}") from e

        logger.debug(f"Created L1 headers for {self.address}")
        return L1Headers(
            address=self.address,
            signature=signature,
            timestamp=str(timestamp),
            nonce=str(nonce),
        )

    def create_l2_headers(
        self,
        credentials: ApiCredentials,
        method: str,
        path: str,
        body: str = "",
        timestamp: Optional[int] = None
    ) -> L2Headers:
        """
        Create L2 authentication headers.

        Args:
            credentials: API credentials
            method: HTTP method (GET, POST, DELETE, etc.)
            path: Request path
            body: Exact request body string that will be sent
            timestamp: Unix timestamp (uses current time if None)

        Returns:
            L2 headers

        Raises:
            AuthenticationError: If the secret cannot be decoded
        """
        if timestamp is None:
            timestamp = int(time.time())

        try:
            signature = build_hmac_signature(
                credentials.api_secret, timestamp, method, path, body
            )
        except (binascii.Error, ValueError) as e:
            # SECURITY: Never interpolate the secret
            error_type = type(e).__name__
            logger.error(f"Failed to create L2 headers: {error_type}")
            raise AuthenticationError(
                f"L2 signature failed: {error_type}. Check API credentials format."
            ) from e

        logger.debug(f"Created L2 headers for {str(method).upper()} {path}")
        return L2Headers(
            address=self.address,
            signature=signature,
            timestamp=str(timestamp),
            api_key=credentials.api_key,
            passphrase=credentials.api_passphrase,
        )

    @staticmethod
    def verify_l2_signature(
        api_secret: str,
        signature: str,
        timestamp: int,
        method: str,
        path: str,
        body: str = ""
    ) -> bool:
        """
        Verify an L2 HMAC signature in constant time.

        Args:
            api_secret: API secret (base64 encoded)
            signature: Signature to verify
            timestamp: Request timestamp
            method: HTTP method
            path: Request path
            body: Request body

        Returns:
            True if signature is valid
        """
        expected = build_hmac_signature(api_secret, timestamp, method, path, body)
        return hmac.compare_digest(signature, expected)
