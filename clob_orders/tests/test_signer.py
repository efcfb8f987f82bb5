"""Tests for key handling and signatures."""

from eth_account import Account
from eth_account.messages import encode_typed_data
from eth_utils import keccak
import pytest

from ..auth.eip712 import encode_eip712, hash_order_domain, hash_order_struct
from ..auth.signer import Signer, derive_address, parse_private_key, to_checksum_address
from ..constants import EXCHANGE_ADDRESS
from ..exceptions import PrivateKeyError, SigningError
from .fakes import TEST_ADDRESS, TEST_PRIVATE_KEY
from .test_eip712 import ORDER, SALT, _typed_order


class TestPrivateKeys:
    """Private key parsing and address derivation."""

    def test_derive_address_known_vector(self):
        assert derive_address(TEST_PRIVATE_KEY) == TEST_ADDRESS
        assert derive_address(TEST_PRIVATE_KEY[2:]) == TEST_ADDRESS

    def test_derive_address_matches_eth_account(self):
        key = "0x" + "11" * 32
        assert derive_address(key) == Account.from_key(key).address

    @pytest.mark.parametrize("bad", [
        "",
        "0x1234",
        "0x" + "zz" * 32,
        "0x" + "00" * 32,
        "0x" + "ff" * 32,
        TEST_PRIVATE_KEY + "00",
    ])
    def test_invalid_keys_rejected(self, bad):
        with pytest.raises(PrivateKeyError):
            parse_private_key(bad)

    def test_error_does_not_echo_key(self):
        bad = "0x" + "ab" * 31 + "zz"
        with pytest.raises(PrivateKeyError) as exc_info:
            Signer(bad)
        assert bad not in str(exc_info.value)
        assert "ab" * 31 not in str(exc_info.value)

    def test_checksum_address_eip55_vectors(self):
        for address in (
            "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed",
            "0xfB6916095ca1df60bB79Ce92cE3Ea74c37c5d359",
            "0xdbF03B407c01E7cD3CBea99509d93f8DDDC8C6FB",
            "0xD1220A0cf47c7B9Be7A2E6BA89F429762e7b9aDb",
        ):
            assert to_checksum_address(bytes.fromhex(address[2:])) == address


class TestSigner:
    """Recoverable, deterministic signatures."""

    def test_address_and_repr(self, signer):
        assert signer.address == TEST_ADDRESS
        assert TEST_PRIVATE_KEY[2:] not in repr(signer)
        assert TEST_ADDRESS in repr(signer)

    def test_signature_layout_and_recovery(self, signer):
        digest = keccak(b"order engine")
        signature = signer.sign(digest)

        assert len(signature) == 65
        assert signature[64] in (27, 28)
        assert Account._recover_hash(digest, signature=signature) == TEST_ADDRESS

    def test_signatures_are_deterministic(self, signer):
        digest = keccak(b"same digest")
        assert signer.sign(digest) == signer.sign(digest)
        assert signer.sign(digest) != signer.sign(keccak(b"other digest"))

    def test_matches_eth_account_typed_data_signature(self, signer):
        digest = encode_eip712(hash_order_domain(137, EXCHANGE_ADDRESS), hash_order_struct(ORDER, SALT))
        signed = Account.sign_message(
            encode_typed_data(full_message=_typed_order(137, EXCHANGE_ADDRESS)),
            TEST_PRIVATE_KEY,
        )
        assert bytes(signed.signature) == signer.sign(digest)

    def test_sign_hex(self, signer):
        digest = keccak(b"hex")
        assert signer.sign_hex(digest) == "0x" + signer.sign(digest).hex()

    @pytest.mark.parametrize("digest", [b"", b"\x00" * 31, b"\x00" * 33, "00" * 32])
    def test_bad_digest_rejected(self, signer, digest):
        with pytest.raises(SigningError):
            signer.sign(digest)
