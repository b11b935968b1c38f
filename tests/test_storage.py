"""Tests for the versioned storage codec."""

from typing import List, Optional, Tuple

import pytest

from pos_crypto.binary import storage, wire
from pos_crypto.crypto.hashing import Hash, compute_hash
from pos_crypto.crypto.hd import HDAddressPayload, HDPassphrase, pack_hd_address_attr
from pos_crypto.crypto.proxy import ProxySecretKey, create_proxy_secret_key, proxy_sign, ProxySignature
from pos_crypto.crypto.safe_signer import EncryptedSecretKey, encrypt_secret_key
from pos_crypto.crypto.signing import PublicKey, Signed, mk_signed, sign, Signature
from pos_crypto.errors import MalformedEncoding
from pos_crypto.types import Int32, Word8, Word32, Word64


VERSION_1 = b"\x01\x00\x00\x00"


class TestLayout:
    def test_fixed_ints_are_little_endian(self):
        assert storage.encode(Word64(1)).hex() == "0100000000000000"
        assert storage.encode(Int32(-2)) == b"\xfe\xff\xff\xff"

    def test_zigzag_varints(self):
        assert storage.encode(0) == b"\x00"
        assert storage.encode(-1) == b"\x01"
        assert storage.encode(1) == b"\x02"
        assert storage.encode(300) == b"\xd8\x04"

    def test_bytes_length_prefix(self):
        assert storage.encode(b"abc") == b"\x03abc"

    def test_list_count_prefix(self):
        assert storage.encode([Word8(1), Word8(2)]) == b"\x02\x01\x02"

    def test_records_carry_version(self, keys):
        pk, _ = keys
        assert storage.encode(pk) == VERSION_1 + pk.key

    def test_nested_records_carry_their_own_version(self, keys):
        _, sk = keys
        signed = mk_signed(sk, Word8(3))
        data = storage.encode(signed)
        assert data == VERSION_1 + b"\x03" + VERSION_1 + signed.signature.sig

    def test_nested_none_needs_descriptor(self):
        with pytest.raises(TypeError, match="Optional"):
            storage.encode([[None, 1]])
        tp = List[List[Optional[int]]]
        assert storage.encode([[None, 1]], tp) != storage.encode([[1, None]], tp)

    def test_differs_from_wire(self):
        value = [Word32(1), Word32(2)]
        assert storage.encode(value) != wire.encode(value)


class TestRoundTrip:
    @pytest.mark.parametrize(
        "value,tp",
        [
            (None, None),
            (False, bool),
            (Word32(123456), Word32),
            (-(2**70), int),
            (2**64, int),
            (b"\x00" * 300, bytes),
            ("stake", str),
            ([b"a", b"bc"], List[bytes]),
            ((Word8(1), -7), Tuple[Word8, int]),
            (None, Optional[int]),
            (42, Optional[int]),
        ],
    )
    def test_primitives(self, value, tp):
        assert storage.decode(storage.encode(value, tp), tp) == value

    def test_records(self, record_sample):
        value, tp = record_sample
        assert storage.decode(storage.encode(value, tp), tp) == value
        assert storage.decode(storage.encode(value), tp) == value

    def test_hash(self):
        h = compute_hash(b"block")
        assert storage.decode(storage.encode(h), Hash) == h

    def test_signature(self, keys):
        _, sk = keys
        sig = sign(sk, "payload")
        assert storage.decode(storage.encode(sig), Signature[str]) == sig

    def test_signed(self, keys):
        _, sk = keys
        signed = mk_signed(sk, [Word8(1), Word8(2)])
        assert storage.decode(storage.encode(signed), Signed[List[Word8]]) == signed

    def test_proxy_secret_key(self, keys, other_keys):
        _, issuer_sk = keys
        delegate_pk, delegate_sk = other_keys
        psk = create_proxy_secret_key(issuer_sk, delegate_pk, Word64(7))
        assert storage.decode(storage.encode(psk), ProxySecretKey[Word64]) == psk

        psig = proxy_sign(delegate_sk, psk, b"data")
        decoded = storage.decode(storage.encode(psig), ProxySignature[Word64, bytes])
        assert decoded == psig

    def test_encrypted_secret_key(self, keys, rng):
        _, sk = keys
        esk = encrypt_secret_key(b"pass", sk, rng)
        assert storage.decode(storage.encode(esk), EncryptedSecretKey) == esk

    def test_hd_types(self):
        passphrase = HDPassphrase(bytes(range(32)))
        payload = pack_hd_address_attr(passphrase, [1, 2, 3])
        assert storage.decode(storage.encode(passphrase), HDPassphrase) == passphrase
        assert storage.decode(storage.encode(payload), HDAddressPayload) == payload


class TestMalformed:
    def test_unknown_version(self, keys):
        pk, _ = keys
        with pytest.raises(MalformedEncoding, match="storage version 2"):
            storage.decode(b"\x02\x00\x00\x00" + pk.key, PublicKey)

    def test_truncated_version(self):
        with pytest.raises(MalformedEncoding):
            storage.decode(b"\x01\x00", PublicKey)

    def test_non_minimal_varint(self):
        with pytest.raises(MalformedEncoding, match="minimally"):
            storage.decode(b"\x80\x00", int)

    def test_unterminated_varint(self):
        with pytest.raises(MalformedEncoding):
            storage.decode(b"\xff\xff", int)

    def test_trailing_bytes(self):
        with pytest.raises(MalformedEncoding, match="extra bytes"):
            storage.decode(b"\x02\x00", int)

    def test_list_count_beyond_input(self):
        with pytest.raises(MalformedEncoding):
            storage.decode(b"\xff\xff\xff\x7f", List[Word8])

    def test_bad_bool(self):
        with pytest.raises(MalformedEncoding):
            storage.decode(b"\x05", bool)

    def test_bad_optional(self):
        with pytest.raises(MalformedEncoding):
            storage.decode(b"\x02", Optional[int])
