"""Tests for ABI word encoding."""

import pytest

from .fakes import BIG_TOKEN_ID
from ..utils.abi import (
    decimal_string_to_bytes,
    encode_address,
    encode_uint256,
    encode_uint8,
)


def test_decimal_string_to_bytes_small_values():
    assert decimal_string_to_bytes("0") == b""
    assert decimal_string_to_bytes("000") == b""
    assert decimal_string_to_bytes("1") == b"\x01"
    assert decimal_string_to_bytes("255") == b"\xff"
    assert decimal_string_to_bytes("256") == b"\x01\x00"
    assert decimal_string_to_bytes("65535") == b"\xff\xff"


def test_decimal_string_to_bytes_beyond_64_bits():
    """Token IDs are ~77 digits and must not go through fixed-width ints."""
    expected = int(BIG_TOKEN_ID).to_bytes(32, "big").lstrip(b"\x00")
    assert decimal_string_to_bytes(BIG_TOKEN_ID) == expected

    max_uint256 = str(2 ** 256 - 1)
    assert decimal_string_to_bytes(max_uint256) == b"\xff" * 32


@pytest.mark.parametrize("bad", ["", "12a", "-1", "1.5", " 1"])
def test_decimal_string_to_bytes_rejects_non_digits(bad):
    with pytest.raises(ValueError):
        decimal_string_to_bytes(bad)


def test_encode_uint256_accepts_int_decimal_and_hex():
    word = (1234567).to_bytes(32, "big")
    assert encode_uint256(1234567) == word
    assert encode_uint256("1234567") == word
    assert encode_uint256(hex(1234567)) == word
    assert encode_uint256("") == b"\x00" * 32
    assert encode_uint256(BIG_TOKEN_ID) == int(BIG_TOKEN_ID).to_bytes(32, "big")


def test_encode_uint256_range_checks():
    with pytest.raises(ValueError):
        encode_uint256(-1)
    with pytest.raises(ValueError):
        encode_uint256(2 ** 256)
    with pytest.raises(ValueError):
        encode_uint256(str(2 ** 256))
    with pytest.raises(ValueError):
        encode_uint256(True)


def test_encode_uint8():
    assert encode_uint8(0) == b"\x00" * 32
    assert encode_uint8(1)[-1] == 1
    with pytest.raises(ValueError):
        encode_uint8(256)


def test_encode_address():
    word = encode_address("0x4bFb41d5B3570DeFd03C39a9A4D8dE6Bd8B8982E")
    assert word[:12] == b"\x00" * 12
    assert word[12:].hex() == "4bfb41d5b3570defd03c39a9a4d8de6bd8b8982e"

    with pytest.raises(ValueError):
        encode_address("0x1234")
    with pytest.raises(ValueError):
        encode_address("4bFb41d5B3570DeFd03C39a9A4D8dE6Bd8B8982E")
