"""
ABI word encoding for EIP-712 struct hashing.

Token IDs and wei-scaled amounts routinely exceed 64 bits, so decimal strings
are converted with schoolbook long division by 256 rather than through a
fixed-width integer.
"""

from typing import Union

WORD_SIZE = 32
_MAX_UINT256_BYTES = WORD_SIZE


def decimal_string_to_bytes(value: str) -> bytes:
    """
    Convert a non-negative decimal string to minimal big-endian bytes.

    Repeatedly divides the digit string by 256, collecting remainders as the
    little-endian bytes of the result.

    Args:
        value: String of ASCII digits

    Returns:
        Big-endian bytes (b"" for zero)

    Raises:
        ValueError: If value contains anything other than digits

    Examples:
        >>> decimal_string_to_bytes("256")
        b'\\x01\\x00'
        >>> decimal_string_to_bytes("0")
        b''
    """
    if not value or not value.isascii() or not value.isdigit():
        raise ValueError(f"Not a decimal integer string: {value!r}")

    digits = value.lstrip("0")
    out = bytearray()
    while digits:
        quotient = []
        remainder = 0
        for ch in digits:
            # remainder < 256, so acc < 2560 and each quotient digit is 0-9
            acc = remainder * 10 + int(ch)
            q, remainder = divmod(acc, 256)
            if quotient or q:
                quotient.append(str(q))
        out.append(remainder)
        digits = "".join(quotient)
    out.reverse()
    return bytes(out)


def hex_string_to_bytes(value: str) -> bytes:
    """Decode a 0x-prefixed hex string, tolerating an odd number of nibbles."""
    body = value[2:]
    if len(body) % 2:
        body = "0" + body
    try:
        return bytes.fromhex(body)
    except ValueError as e:
        raise ValueError(f"Not a hex string: {value!r}") from e


def encode_uint256(value: Union[int, str]) -> bytes:
    """
    Encode an unsigned integer as a 32-byte big-endian ABI word.

    ``0x``-prefixed strings are raw big-endian bytes; all-digit strings are
    decimal integers; the empty string encodes zero.

    Raises:
        ValueError: If the value is negative, malformed, or wider than 256 bits
    """
    if isinstance(value, bool):
        raise ValueError("bool is not a uint256")
    if isinstance(value, int):
        if value < 0 or value.bit_length() > 256:
            raise ValueError(f"Value out of uint256 range: {value}")
        return value.to_bytes(WORD_SIZE, "big")

    if value == "":
        raw = b""
    elif value[:2] in ("0x", "0X"):
        raw = hex_string_to_bytes(value).lstrip(b"\x00")
    else:
        raw = decimal_string_to_bytes(value)

    if len(raw) > _MAX_UINT256_BYTES:
        raise ValueError(f"Value out of uint256 range: {value}")
    return raw.rjust(WORD_SIZE, b"\x00")


def encode_uint8(value: int) -> bytes:
    """Encode a small enum value (side, signature type) as an ABI word."""
    if not 0 <= int(value) <= 0xFF:
        raise ValueError(f"Value out of uint8 range: {value}")
    return int(value).to_bytes(WORD_SIZE, "big")


def encode_address(address: str) -> bytes:
    """Left-pad a 20-byte address to an ABI word."""
    raw = hex_string_to_bytes(address) if address[:2] in ("0x", "0X") else b""
    if len(raw) != 20:
        raise ValueError(f"Invalid address: {address!r}")
    return raw.rjust(WORD_SIZE, b"\x00")
