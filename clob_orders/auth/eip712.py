"""
EIP-712 typed data hashing for CLOB orders and L1 authentication.

Every digest here is recomputed by the exchange contract (orders) or the API
server (auth), so field order, types and padding must match byte for byte.
"""

from typing import Union

from eth_utils import keccak

from ..constants import (
    AUTH_DOMAIN_NAME,
    AUTH_DOMAIN_VERSION,
    AUTH_MESSAGE,
    ORDER_DOMAIN_NAME,
    ORDER_DOMAIN_VERSION,
)
from ..utils.abi import encode_address, encode_uint256, encode_uint8


EIP712_DOMAIN_TYPE = (
    "EIP712Domain(string name,string version,uint256 chainId,address verifyingContract)"
)
EIP712_AUTH_DOMAIN_TYPE = "EIP712Domain(string name,string version,uint256 chainId)"
ORDER_TYPE = (
    "Order(uint256 salt,address maker,address signer,address taker,uint256 tokenId,"
    "uint256 makerAmount,uint256 takerAmount,uint256 expiration,uint256 nonce,"
    "uint256 feeRateBps,uint8 side,uint8 signatureType)"
)
CLOB_AUTH_TYPE = "ClobAuth(address address,string timestamp,uint256 nonce,string message)"

DOMAIN_TYPEHASH = keccak(text=EIP712_DOMAIN_TYPE)
AUTH_DOMAIN_TYPEHASH = keccak(text=EIP712_AUTH_DOMAIN_TYPE)
ORDER_TYPEHASH = keccak(text=ORDER_TYPE)
CLOB_AUTH_TYPEHASH = keccak(text=CLOB_AUTH_TYPE)


def hash_domain(
    name: str,
    version: str,
    chain_id: int,
    verifying_contract: str
) -> bytes:
    """
    Compute an EIP-712 domain separator.

    Args:
        name: Domain name
        version: Domain version
        chain_id: EVM chain ID
        verifying_contract: Contract that verifies the signature

    Returns:
        32-byte domain separator
    """
    return keccak(
        DOMAIN_TYPEHASH
        + keccak(text=name)
        + keccak(text=version)
        + encode_uint256(chain_id)
        + encode_address(verifying_contract)
    )


def hash_order_domain(chain_id: int, exchange: str) -> bytes:
    """Domain separator of an exchange contract."""
    return hash_domain(ORDER_DOMAIN_NAME, ORDER_DOMAIN_VERSION, chain_id, exchange)


def hash_order_struct(order: dict, salt: Union[int, str]) -> bytes:
    """
    Hash an Order struct.

    Args:
        order: Order fields keyed by their struct names (maker, signer, taker,
            tokenId, makerAmount, takerAmount, expiration, nonce, feeRateBps,
            side, signatureType). Integer fields may be ints, decimal strings
            or 0x-hex strings.
        salt: Order salt

    Returns:
        32-byte struct hash
    """
    return keccak(
        ORDER_TYPEHASH
        + encode_uint256(salt)
        + encode_address(order["maker"])
        + encode_address(order["signer"])
        + encode_address(order["taker"])
        + encode_uint256(order["tokenId"])
        + encode_uint256(order["makerAmount"])
        + encode_uint256(order["takerAmount"])
        + encode_uint256(order["expiration"])
        + encode_uint256(order["nonce"])
        + encode_uint256(order["feeRateBps"])
        + encode_uint8(order["side"])
        + encode_uint8(order["signatureType"])
    )


def encode_eip712(domain_hash: bytes, struct_hash: bytes) -> bytes:
    """Final digest to sign: keccak(0x19 0x01 domain struct)."""
    if len(domain_hash) != 32 or len(struct_hash) != 32:
        raise ValueError("domain and struct hashes must be 32 bytes")
    return keccak(b"\x19\x01" + domain_hash + struct_hash)


def hash_auth_domain(chain_id: int) -> bytes:
    """Domain separator for L1 authentication (no verifying contract)."""
    return keccak(
        AUTH_DOMAIN_TYPEHASH
        + keccak(text=AUTH_DOMAIN_NAME)
        + keccak(text=AUTH_DOMAIN_VERSION)
        + encode_uint256(chain_id)
    )


def hash_auth_struct(address: str, timestamp: str, nonce: int) -> bytes:
    """
    Hash a ClobAuth struct.

    Args:
        address: Signer address
        timestamp: Unix timestamp as a decimal string (hashed as a string)
        nonce: Auth nonce

    Returns:
        32-byte struct hash
    """
    return keccak(
        CLOB_AUTH_TYPEHASH
        + encode_address(address)
        + keccak(text=timestamp)
        + encode_uint256(nonce)
        + keccak(text=AUTH_MESSAGE)
    )
