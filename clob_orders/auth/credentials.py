"""
API credential bootstrap over L1 authentication.

Policy: derive the existing key first, create a new one if that fails,
and give up with AuthenticationError if both fail.
"""

import logging

from pydantic import ValidationError as PydanticValidationError

from .authenticator import Authenticator
from ..collaborators import CredentialsEndpoint, call_collaborator, coerce_credentials
from ..exceptions import AuthenticationError, ClobOrderError
from ..models import ApiCredentials

logger = logging.getLogger(__name__)


async def derive_api_credentials(
    authenticator: Authenticator,
    endpoint: CredentialsEndpoint,
    nonce: int = 0
) -> ApiCredentials:
    """Look up the API key already registered for this wallet and nonce."""
    headers = authenticator.create_l1_headers(nonce=nonce)
    response = await call_collaborator("derive_api_key", endpoint.derive_api_key, headers.to_headers())
    return coerce_credentials(response)


async def create_api_credentials(
    authenticator: Authenticator,
    endpoint: CredentialsEndpoint,
    nonce: int = 0
) -> ApiCredentials:
    """Register a new API key for this wallet."""
    headers = authenticator.create_l1_headers(nonce=nonce)
    response = await call_collaborator("create_api_key", endpoint.create_api_key, headers.to_headers())
    return coerce_credentials(response)


async def create_or_derive_api_credentials(
    authenticator: Authenticator,
    endpoint: CredentialsEndpoint
) -> ApiCredentials:
    """
    Obtain API credentials for the wallet.

    Args:
        authenticator: L1 header generator for the wallet
        endpoint: Credentials collaborator

    Returns:
        API credentials

    Raises:
        AuthenticationError: If both derive and create fail
    """
    try:
        credentials = await derive_api_credentials(authenticator, endpoint)
        logger.info(f"Derived API key for {authenticator.address}")
        return credentials
    except (ClobOrderError, PydanticValidationError) as e:
        logger.warning(f"Derive API key failed ({type(e).__name__}), creating a new key")

    try:
        credentials = await create_api_credentials(authenticator, endpoint)
    except (ClobOrderError, PydanticValidationError) as e:
        logger.error(f"Create API key failed: {type(e).__name__}")
        raise AuthenticationError(
            "Could not derive or create API credentials",
            {"address": authenticator.address},
        ) from e

    logger.info(f"Created API key for {authenticator.address}")
    return credentials
