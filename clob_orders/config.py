"""
Configuration management for the CLOB order engine.

Loads settings from environment variables with validation.
"""

from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import DEFAULT_CHAIN_ID, EXCHANGE_ADDRESS, NEG_RISK_EXCHANGE_ADDRESS
from .models import SignatureType


class ClobOrderSettings(BaseSettings):
    """
    Order engine settings.

    Loads from environment variables with CLOB_ prefix.
    """
    model_config = SettingsConfigDict(
        env_prefix="CLOB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Chain configuration
    chain_id: int = Field(default=DEFAULT_CHAIN_ID, description="Polygon chain ID")
    exchange_address: str = Field(
        default=EXCHANGE_ADDRESS,
        description="Exchange contract for standard markets"
    )
    neg_risk_exchange_address: str = Field(
        default=NEG_RISK_EXCHANGE_ADDRESS,
        description="Exchange contract for negative-risk markets"
    )

    # Wallet
    signature_type: SignatureType = Field(default=SignatureType.EOA, description="Order signature type")
    funder_address: Optional[str] = Field(None, description="Proxy wallet holding funds (order maker)")

    # Market metadata cache
    metadata_cache_ttl: float = Field(default=300.0, ge=0.0, description="Tick size / neg-risk / fee cache TTL")
    metadata_cache_size: int = Field(default=10000, ge=1, description="Max cached tokens")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_json: bool = Field(default=False, description="Emit JSON log lines")

    @field_validator("exchange_address", "neg_risk_exchange_address", "funder_address")
    @classmethod
    def validate_address(cls, v: Optional[str]) -> Optional[str]:
        """Require 0x-prefixed 20-byte hex addresses."""
        if v is None:
            return v
        body = v[2:] if v.startswith(("0x", "0X")) else ""
        if len(body) != 40 or any(c not in "0123456789abcdefABCDEF" for c in body):
            raise ValueError(f"Invalid address: {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level: {v}")
        return level

    def __repr__(self) -> str:
        """Safe repr without wallet details."""
        return (
            f"ClobOrderSettings("
            f"chain_id={self.chain_id}, "
            f"signature_type={self.signature_type.name}, "
            f"log_level={self.log_level}"
            ")"
        )


def get_settings() -> ClobOrderSettings:
    """
    Get order engine settings.

    Returns:
        Validated settings instance
    """
    return ClobOrderSettings()
