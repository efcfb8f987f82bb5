"""Utility modules for the order engine."""

from .cache import TTLCache
from .redaction import CredentialRedactionFilter

__all__ = ["TTLCache", "CredentialRedactionFilter"]
