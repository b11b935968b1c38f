"""Tests for the plain signature domain."""

from typing import List, Optional

import pytest

from pos_crypto.crypto.random import DeterministicRandom
from pos_crypto.crypto.redeem import RedeemPublicKey, redeem_deterministic_key_gen
from pos_crypto.crypto.signing import (
    PublicKey,
    Signature,
    SignTag,
    check_sig,
    check_sig_raw,
    deterministic_key_gen,
    format_full_public_key,
    key_gen,
    mk_signed,
    parse_full_public_key,
    sign,
    sign_raw,
    to_public,
    verify_signed,
)
from pos_crypto.types import Word32, Word64


def _key_pairs(count: int, label: bytes = b"signing"):
    rng = DeterministicRandom(label)
    return [key_gen(rng) for _ in range(count)]


PAYLOADS = [b"", b"block", Word64(0), Word64(2**64 - 1), "text", [Word32(1), Word32(2)], (1, b"x")]


class TestKeyGeneration:
    def test_to_public_matches_generated_key(self):
        for pk, sk in _key_pairs(20):
            assert to_public(sk) == pk

    def test_deterministic_key_gen(self):
        assert deterministic_key_gen(b"\x07" * 32) == deterministic_key_gen(b"\x07" * 32)
        assert deterministic_key_gen(b"\x07" * 32) != deterministic_key_gen(b"\x08" * 32)

    def test_rejects_short_seed(self):
        with pytest.raises(ValueError, match="32 bytes"):
            deterministic_key_gen(b"short")

    def test_secret_key_repr_hides_seed(self, keys):
        _, sk = keys
        assert sk.seed.hex() not in repr(sk)

    def test_public_keys_are_ordered(self):
        pks = [pk for pk, _ in _key_pairs(10)]
        assert sorted(pks) == sorted(pks, key=lambda pk: pk.key)

    def test_public_key_str(self, keys):
        pk, _ = keys
        text = str(pk)
        assert text.startswith("pub:")
        assert len(text) == 12


class TestSignAndVerify:
    @pytest.mark.parametrize("payload", PAYLOADS)
    def test_valid_signature(self, keys, payload):
        pk, sk = keys
        assert check_sig(pk, payload, sign(sk, payload)) is True

    @pytest.mark.parametrize("payload", PAYLOADS)
    def test_wrong_public_key(self, keys, other_keys, payload):
        _, sk = keys
        other_pk, _ = other_keys
        assert check_sig(other_pk, payload, sign(sk, payload)) is False

    def test_different_payload(self):
        for pk, sk in _key_pairs(10):
            sig = sign(sk, b"a")
            assert check_sig(pk, b"b", sig) is False

    def test_payload_type_is_signed(self, keys):
        pk, sk = keys
        sig = sign(sk, Word32(5))
        assert check_sig(pk, Word64(5), sig) is False
        assert check_sig(pk, 5, sig, Word32) is True

    def test_nested_optionals_do_not_share_signatures(self, keys):
        pk, sk = keys
        tp = List[List[Optional[int]]]
        sig = sign(sk, [[None, 1]], tp)
        assert check_sig(pk, [[None, 1]], sig, tp) is True
        assert check_sig(pk, [[1, None]], sig, tp) is False
        with pytest.raises(TypeError):
            sign(sk, [[None, 1]])

    def test_signature_is_deterministic(self, keys):
        _, sk = keys
        assert sign(sk, b"x") == sign(sk, b"x")

    def test_rejects_foreign_key_types(self, keys):
        pk, sk = keys
        redeem_pk, _ = redeem_deterministic_key_gen(bytes(32))
        with pytest.raises(TypeError, match="PublicKey"):
            check_sig(redeem_pk, b"x", sign(sk, b"x"))

    def test_signature_size_checked(self):
        with pytest.raises(ValueError):
            Signature(b"\x00" * 63)


class TestRawAndSigned:
    def test_raw_round_trip(self, keys):
        pk, sk = keys
        sig = sign_raw(sk, b"raw bytes")
        assert check_sig_raw(pk, b"raw bytes", sig) is True
        assert check_sig_raw(pk, b"raw byteS", sig) is False

    def test_raw_tags_separate_domains(self, keys):
        pk, sk = keys
        sig = sign_raw(sk, b"data", SignTag.REDEEM)
        assert check_sig_raw(pk, b"data", sig, SignTag.REDEEM) is True
        assert check_sig_raw(pk, b"data", sig) is False
        assert check_sig_raw(pk, b"data", sig, SignTag.PLAIN) is False

    def test_plain_signature_is_tagged(self, keys):
        pk, sk = keys
        sig = sign(sk, b"data")
        assert check_sig_raw(pk, SignTag.PLAIN.value + b"\x00" * 7 + b"\x04data", sig) is True

    def test_signed_bundle(self, keys, other_keys):
        pk, sk = keys
        other_pk, _ = other_keys
        signed = mk_signed(sk, "hello")
        assert signed.payload == "hello"
        assert verify_signed(pk, signed) is True
        assert verify_signed(other_pk, signed) is False


class TestPublicKeyText:
    def test_round_trip(self):
        for pk, _ in _key_pairs(25):
            assert parse_full_public_key(format_full_public_key(pk)) == pk

    def test_invalid_alphabet(self):
        assert parse_full_public_key("0OIl") is None

    def test_wrong_length(self):
        assert parse_full_public_key("abc") is None
        assert parse_full_public_key("") is None

    def test_parsed_key_verifies(self, keys):
        pk, sk = keys
        parsed = parse_full_public_key(format_full_public_key(pk))
        assert isinstance(parsed, PublicKey)
        assert check_sig(parsed, b"m", sign(sk, b"m"))

    def test_redeem_key_is_not_a_public_key(self):
        redeem_pk, _ = redeem_deterministic_key_gen(bytes(32))
        assert isinstance(redeem_pk, RedeemPublicKey)
        assert not isinstance(redeem_pk, PublicKey)
