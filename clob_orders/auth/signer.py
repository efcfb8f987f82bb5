"""
secp256k1 key handling and recoverable signatures.

The Signer owns the private key and the elliptic-curve key object built from
it; both stay inside this module and never appear in logs or reprs.
"""

import re
import threading
import logging

from eth_keys import keys
from eth_utils import keccak

from ..constants import DEFAULT_CHAIN_ID
from ..exceptions import PrivateKeyError, SigningError

logger = logging.getLogger(__name__)

_PRIVATE_KEY_PATTERN = re.compile(r"^(?:0x)?[0-9a-fA-F]{64}$")
SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141


def parse_private_key(private_key: str) -> bytes:
    """
    Validate and decode a hex private key.

    Raises:
        PrivateKeyError: If the key is not 32 bytes of hex or not a valid scalar
    """
    if not isinstance(private_key, str) or not _PRIVATE_KEY_PATTERN.match(private_key):
        # SECURITY: never echo the key back
        raise PrivateKeyError("Invalid private key format: expected 32 bytes of hex")
    raw = bytes.fromhex(private_key[2:] if private_key.startswith("0x") else private_key)
    if not 0 < int.from_bytes(raw, "big") < SECP256K1_N:
        raise PrivateKeyError("Invalid private key: scalar out of secp256k1 range")
    return raw


def to_checksum_address(address_bytes: bytes) -> str:
    """
    EIP-55 mixed-case encoding of a 20-byte address.

    A hex letter is uppercased when the matching nibble of
    keccak(lowercase hex) is >= 8.
    """
    lower = address_bytes.hex()
    digest = keccak(text=lower).hex()
    return "0x" + "".join(
        c.upper() if c in "abcdef" and int(digest[i], 16) >= 8 else c
        for i, c in enumerate(lower)
    )


def derive_address(private_key: str) -> str:
    """
    Derive the checksummed account address for a private key.

    keccak(uncompressed public key without the 0x04 prefix), last 20 bytes,
    EIP-55 checksum.

    Args:
        private_key: Hex private key, with or without 0x

    Returns:
        Checksummed address
    """
    public_key = keys.PrivateKey(parse_private_key(private_key)).public_key
    return to_checksum_address(keccak(public_key.to_bytes())[-20:])


class Signer:
    """
    Holds key material and produces recoverable ECDSA signatures.

    Signatures are deterministic (RFC 6979): the same digest always yields the
    same 65-byte r || s || v signature, with v in {27, 28}.

    Thread-safe: the key object is only touched under the instance lock.
    """

    def __init__(self, private_key: str, chain_id: int = DEFAULT_CHAIN_ID):
        """
        Initialize signer.

        Args:
            private_key: Hex private key, with or without 0x
            chain_id: Chain the signatures are intended for

        Raises:
            PrivateKeyError: If the key is malformed
        """
        self._key = keys.PrivateKey(parse_private_key(private_key))
        self._lock = threading.Lock()
        self.chain_id = chain_id
        self.address = to_checksum_address(keccak(self._key.public_key.to_bytes())[-20:])
        logger.debug(f"Signer ready for {self.address}")

    def __repr__(self) -> str:
        return f"Signer(address={self.address}, chain_id={self.chain_id})"

    def sign(self, digest: bytes) -> bytes:
        """
        Sign a 32-byte digest.

        Args:
            digest: Message hash (already EIP-712 encoded)

        Returns:
            65-byte signature r || s || v

        Raises:
            SigningError: If the digest is malformed or the backend fails
        """
        if not isinstance(digest, (bytes, bytearray)) or len(digest) != 32:
            raise SigningError("Digest must be exactly 32 bytes")

        try:
            with self._lock:
                signature = self._key.sign_msg_hash(bytes(digest))
        except Exception as e:
            error_type = type(e).__name__
            logger.error(f"Signing failed: {error_type}")
            raise SigningError(f"Signing failed: {error_type}") from e

        return (
            signature.r.to_bytes(32, "big")
            + signature.s.to_bytes(32, "big")
            + bytes([signature.v + 27])
        )

    def sign_hex(self, digest: bytes) -> str:
        """Sign a digest and return the 0x-prefixed hex signature."""
        return "0x" + self.sign(digest).hex()
