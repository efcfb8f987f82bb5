"""
Tests for EIP-712 hashing.

The hand-rolled hashers are cross-checked against eth_account's
encode_typed_data and the poly_eip712_structs definitions.
"""

from eth_account.messages import encode_typed_data
from eth_utils import keccak
import pytest

from ..auth.eip712 import (
    ORDER_TYPEHASH,
    encode_eip712,
    hash_auth_domain,
    hash_auth_struct,
    hash_order_domain,
    hash_order_struct,
)
from .reference_structs import ClobAuth, Order, auth_domain, order_domain
from ..constants import AUTH_MESSAGE, EXCHANGE_ADDRESS, NEG_RISK_EXCHANGE_ADDRESS, ZERO_ADDRESS
from .fakes import BIG_TOKEN_ID, TEST_ADDRESS

ORDER = {
    "maker": TEST_ADDRESS,
    "signer": TEST_ADDRESS,
    "taker": ZERO_ADDRESS,
    "tokenId": BIG_TOKEN_ID,
    "makerAmount": "5000000",
    "takerAmount": "10000000",
    "expiration": "0",
    "nonce": "0",
    "feeRateBps": "0",
    "side": 0,
    "signatureType": 0,
}
SALT = "479249096354"


def _typed_order(chain_id: int, exchange: str) -> dict:
    return {
        "types": {
            "EIP712Domain": [
                {"name": "name", "type": "string"},
                {"name": "version", "type": "string"},
                {"name": "chainId", "type": "uint256"},
                {"name": "verifyingContract", "type": "address"},
            ],
            "Order": [
                {"name": "salt", "type": "uint256"},
                {"name": "maker", "type": "address"},
                {"name": "signer", "type": "address"},
                {"name": "taker", "type": "address"},
                {"name": "tokenId", "type": "uint256"},
                {"name": "makerAmount", "type": "uint256"},
                {"name": "takerAmount", "type": "uint256"},
                {"name": "expiration", "type": "uint256"},
                {"name": "nonce", "type": "uint256"},
                {"name": "feeRateBps", "type": "uint256"},
                {"name": "side", "type": "uint8"},
                {"name": "signatureType", "type": "uint8"},
            ],
        },
        "primaryType": "Order",
        "domain": {
            "name": "Polymarket CTF Exchange",
            "version": "1",
            "chainId": chain_id,
            "verifyingContract": exchange,
        },
        "message": {
            "salt": int(SALT),
            "maker": ORDER["maker"],
            "signer": ORDER["signer"],
            "taker": ORDER["taker"],
            "tokenId": int(ORDER["tokenId"]),
            "makerAmount": int(ORDER["makerAmount"]),
            "takerAmount": int(ORDER["takerAmount"]),
            "expiration": 0,
            "nonce": 0,
            "feeRateBps": 0,
            "side": 0,
            "signatureType": 0,
        },
    }


def _digest(signable) -> bytes:
    return keccak(b"\x19" + signable.version + signable.header + signable.body)


def test_order_typehash():
    assert ORDER_TYPEHASH == keccak(
        text="Order(uint256 salt,address maker,address signer,address taker,uint256 tokenId,"
             "uint256 makerAmount,uint256 takerAmount,uint256 expiration,uint256 nonce,"
             "uint256 feeRateBps,uint8 side,uint8 signatureType)"
    )


@pytest.mark.parametrize("exchange", [EXCHANGE_ADDRESS, NEG_RISK_EXCHANGE_ADDRESS])
def test_order_digest_matches_eth_account(exchange):
    digest = encode_eip712(hash_order_domain(137, exchange), hash_order_struct(ORDER, SALT))
    expected = _digest(encode_typed_data(full_message=_typed_order(137, exchange)))
    assert digest == expected


def test_order_digest_matches_struct_definitions():
    struct = Order(
        salt=int(SALT),
        maker=ORDER["maker"],
        signer=ORDER["signer"],
        taker=ORDER["taker"],
        tokenId=int(ORDER["tokenId"]),
        makerAmount=int(ORDER["makerAmount"]),
        takerAmount=int(ORDER["takerAmount"]),
        expiration=0,
        nonce=0,
        feeRateBps=0,
        side=0,
        signatureType=0,
    )
    domain = order_domain(137, EXCHANGE_ADDRESS)

    assert hash_order_domain(137, EXCHANGE_ADDRESS) == domain.hash_struct()
    assert hash_order_struct(ORDER, SALT) == struct.hash_struct()
    assert encode_eip712(domain.hash_struct(), struct.hash_struct()) == keccak(struct.signable_bytes(domain))


def test_order_struct_accepts_int_and_string_fields():
    as_ints = {**ORDER, "tokenId": int(BIG_TOKEN_ID), "makerAmount": 5000000, "nonce": 0}
    assert hash_order_struct(as_ints, int(SALT)) == hash_order_struct(ORDER, SALT)


def test_domain_depends_on_exchange_and_chain():
    standard = hash_order_domain(137, EXCHANGE_ADDRESS)
    assert standard != hash_order_domain(137, NEG_RISK_EXCHANGE_ADDRESS)
    assert standard != hash_order_domain(80002, EXCHANGE_ADDRESS)


def test_auth_digest_matches_struct_definitions():
    timestamp = "1700000000"
    struct = ClobAuth(address=TEST_ADDRESS, timestamp=timestamp, nonce=0, message=AUTH_MESSAGE)
    domain = auth_domain(137)

    assert hash_auth_domain(137) == domain.hash_struct()
    assert hash_auth_struct(TEST_ADDRESS, timestamp, 0) == struct.hash_struct()
    digest = encode_eip712(hash_auth_domain(137), hash_auth_struct(TEST_ADDRESS, timestamp, 0))
    assert digest == keccak(struct.signable_bytes(domain))


def test_encode_eip712_rejects_short_hashes():
    with pytest.raises(ValueError):
        encode_eip712(b"\x00" * 31, b"\x00" * 32)
