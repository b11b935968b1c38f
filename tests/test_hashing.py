"""Tests for value hashing."""

from typing import List, Optional

import pytest

from pos_crypto.binary import wire
from pos_crypto.crypto.hashing import Hash, compute_hash, compute_hash_raw, hash_hex, short_hash_hex
from pos_crypto.crypto.random import DeterministicRandom
from pos_crypto.types import Word32, Word64


GOLDEN_WORD64_ONE = "4bd3a3255713f33d6c673f7d84048a7a8bcfc206464c85555c603ef4d72189c6"


class TestComputeHash:
    def test_golden_value(self):
        assert hash_hex(compute_hash(Word64(1))) == GOLDEN_WORD64_ONE

    def test_hashes_the_wire_encoding(self):
        value = [b"a", b"b"]
        assert compute_hash(value).digest == compute_hash_raw(wire.encode(value))

    def test_hex_is_lowercase_64_chars(self):
        result = hash_hex(compute_hash("anything"))
        assert len(result) == 64
        assert all(c in "0123456789abcdef" for c in result)

    def test_short_hash(self):
        h = compute_hash(Word64(1))
        assert short_hash_hex(h) == GOLDEN_WORD64_ONE[:8]

    def test_deterministic(self):
        assert compute_hash(b"block") == compute_hash(b"block")

    def test_type_changes_the_hash(self):
        assert compute_hash(Word32(1)) != compute_hash(Word64(1))

    def test_nested_optionals_hash_apart(self):
        tp = List[List[Optional[int]]]
        values = [[], [[]], [[None]], [[None, 1]], [[1, None]], [[1], [None]], [[None], [1]]]
        assert len({compute_hash(v, tp) for v in values}) == len(values)

    def test_nested_none_is_not_inferred(self):
        with pytest.raises(TypeError):
            compute_hash([[None, 1]])

    def test_distinct_values_have_distinct_hashes(self):
        values = [Word64(i) for i in range(500)]
        assert len({compute_hash(v) for v in values}) == len(values)

    def test_distinct_random_bytes_have_distinct_hashes(self):
        rng = DeterministicRandom(b"hash inputs")
        values = {rng.random_bytes(1 + i % 40) for i in range(300)}
        assert len({compute_hash(v) for v in values}) == len(values)


class TestHashType:
    def test_rejects_wrong_size(self):
        with pytest.raises(ValueError, match="32 bytes"):
            Hash(b"\x00" * 31)

    def test_wire_is_raw_digest(self):
        h = compute_hash(b"x")
        assert wire.encode(h) == h.digest
        assert wire.decode(h.digest, Hash) == h

    def test_str_is_hex(self):
        h = compute_hash(b"x")
        assert str(h) == hash_hex(h)

    def test_ordering(self):
        hashes = sorted(compute_hash(Word64(i)) for i in range(10))
        assert [h.digest for h in hashes] == sorted(h.digest for h in hashes)
