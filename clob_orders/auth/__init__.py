"""Authentication and signing modules for the order engine."""

from .authenticator import Authenticator
from .credentials import create_or_derive_api_credentials
from .signer import Signer, derive_address

__all__ = ["Authenticator", "Signer", "create_or_derive_api_credentials", "derive_address"]
