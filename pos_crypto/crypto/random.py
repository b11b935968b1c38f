"""
Randomness sources for key generation and secret sharing.

Every generator in pos_crypto takes an explicit ``rng``; passing a
DeterministicRandom makes keys, shares and proofs reproducible in tests.
"""

from typing import Callable, Optional, Protocol, TypeVar, runtime_checkable

import nacl.bindings
import nacl.encoding
import nacl.hash
import nacl.utils

T = TypeVar("T")

# Seed length of libsodium's randombytes_buf_deterministic
SEED_SIZE = 32


@runtime_checkable
class RandomSource(Protocol):
    """Anything that can hand out random bytes."""

    def random_bytes(self, size: int) -> bytes:
        ...


class SecureRandom:
    """Operating system randomness (libsodium randombytes)."""

    def random_bytes(self, size: int) -> bytes:
        return nacl.utils.random(size)


class DeterministicRandom:
    """
    Reproducible byte stream derived from a seed.

    The seed is hashed into a BLAKE2b key; each request expands a fresh
    counter-derived block seed with libsodium's deterministic generator.
    Instances are stateful and must not be shared between threads.
    """

    def __init__(self, seed: bytes) -> None:
        self._key = nacl.hash.blake2b(
            bytes(seed),
            digest_size=32,
            person=b"pos-crypto-drg",
            encoder=nacl.encoding.RawEncoder,
        )
        self._counter = 0

    def random_bytes(self, size: int) -> bytes:
        block_seed = nacl.hash.blake2b(
            self._counter.to_bytes(8, "big"),
            digest_size=SEED_SIZE,
            key=self._key,
            encoder=nacl.encoding.RawEncoder,
        )
        self._counter += 1
        return nacl.bindings.randombytes_buf_deterministic(size, block_seed)


def default_rng(rng: Optional[RandomSource] = None) -> RandomSource:
    return rng if rng is not None else SecureRandom()


def random_number(n: int, rng: Optional[RandomSource] = None) -> int:
    """
    Uniform random integer in [0, n).

    Args:
        n: Exclusive upper bound (must be positive)
        rng: Randomness source (defaults to SecureRandom)
    """
    if n < 1:
        raise ValueError(f"upper bound must be positive, got {n}")
    source = default_rng(rng)
    size = max(1, (n.bit_length() + 7) // 8)
    space = 1 << (8 * size)
    limit = space - space % n
    while True:
        candidate = int.from_bytes(source.random_bytes(size), "big")
        if candidate < limit:
            return candidate % n


def deterministic(seed: bytes, action: Callable[[RandomSource], T]) -> T:
    """
    Run ``action`` with a DeterministicRandom seeded from ``seed``.

    Example:
        >>> deterministic(bytes(range(1, 41)), lambda rng: random_number(1, rng))
        0
    """
    return action(DeterministicRandom(seed))
