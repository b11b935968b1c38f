"""
Prime-order ed25519 group arithmetic for secret sharing

Points are 32-byte compressed encodings in the prime-order subgroup;
scalars are Python ints reduced mod CURVE_ORDER and travel as 32 bytes
little-endian. All curve operations go through libsodium (nacl.bindings).
"""

import functools
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

import nacl.bindings
import nacl.encoding
import nacl.exceptions
import nacl.hash

from ..errors import MalformedEncoding
from .random import RandomSource, default_rng

logger = logging.getLogger(__name__)

# Order of the ed25519 base point
CURVE_ORDER = 2**252 + 27742317777372353535851937790883648493

POINT_SIZE = 32
SCALAR_SIZE = 32
PROOF_SIZE = 2 * SCALAR_SIZE

# Domain separation (BLAKE2b personalisation, max 16 bytes)
PERSON_HASH_TO_POINT = b"pos-crypto-h2p"
PERSON_CHALLENGE = b"pos-crypto-dleq"


def scalar_to_bytes(s: int) -> bytes:
    return (s % CURVE_ORDER).to_bytes(SCALAR_SIZE, "little")


def scalar_from_bytes(data: bytes) -> int:
    """Parse a canonical scalar (must be < CURVE_ORDER)."""
    if len(data) != SCALAR_SIZE:
        raise MalformedEncoding(f"scalar must be {SCALAR_SIZE} bytes, got {len(data)}")
    s = int.from_bytes(data, "little")
    if s >= CURVE_ORDER:
        raise MalformedEncoding("scalar is not reduced")
    return s


def scalar_inverse(s: int) -> int:
    return pow(s % CURVE_ORDER, CURVE_ORDER - 2, CURVE_ORDER)


def random_scalar(rng: Optional[RandomSource] = None) -> int:
    """Uniform non-zero scalar."""
    source = default_rng(rng)
    while True:
        s = int.from_bytes(source.random_bytes(64), "little") % CURVE_ORDER
        if s:
            return s


def is_valid_point(point: bytes) -> bool:
    """Canonical encoding of a point in the prime-order subgroup (not the identity)."""
    if len(point) != POINT_SIZE:
        return False
    return nacl.bindings.crypto_core_ed25519_is_valid_point(point)


def check_point(point: bytes, what: str = "point") -> bytes:
    if not is_valid_point(point):
        raise MalformedEncoding(f"invalid {what}: not a prime-order ed25519 point")
    return point


def base_mul(s: int) -> bytes:
    """B * s. Raises nacl.exceptions.CryptoError when the result is the identity."""
    return nacl.bindings.crypto_scalarmult_ed25519_base_noclamp(scalar_to_bytes(s))


def point_mul(s: int, point: bytes) -> bytes:
    """point * s. Raises nacl.exceptions.CryptoError on invalid input or identity result."""
    return nacl.bindings.crypto_scalarmult_ed25519_noclamp(scalar_to_bytes(s), point)


def point_add(p: bytes, q: bytes) -> bytes:
    return nacl.bindings.crypto_core_ed25519_add(p, q)


def point_sum(points: Iterable[bytes]) -> bytes:
    return functools.reduce(point_add, points)


def _blake2b(data: bytes, person: bytes, size: int) -> bytes:
    return nacl.hash.blake2b(
        data, digest_size=size, person=person, encoder=nacl.encoding.RawEncoder
    )


def hash_to_point(data: bytes) -> bytes:
    """
    Map bytes to a group element nobody knows the discrete log of.

    Try-and-increment: about one candidate in sixteen decodes to a point of
    the prime-order subgroup.
    """
    for counter in range(1 << 12):
        candidate = _blake2b(
            data + counter.to_bytes(2, "little"), PERSON_HASH_TO_POINT, POINT_SIZE
        )
        if is_valid_point(candidate):
            return candidate
    raise ValueError("hash_to_point found no group element")


def hash_to_scalar(*parts: bytes, person: bytes = PERSON_CHALLENGE) -> int:
    """Fiat-Shamir challenge over length-prefixed parts."""
    data = b"".join(len(p).to_bytes(4, "big") + p for p in parts)
    return int.from_bytes(_blake2b(data, person, 64), "little") % CURVE_ORDER


@dataclass(frozen=True)
class DleqProof:
    """
    Chaum-Pedersen proof that log_g1(h1) == log_g2(h2).

    Packed as challenge || response, both 32-byte scalars.
    """
    challenge: int
    response: int

    def pack(self) -> bytes:
        return scalar_to_bytes(self.challenge) + scalar_to_bytes(self.response)

    @classmethod
    def unpack(cls, data: bytes) -> "DleqProof":
        if len(data) != PROOF_SIZE:
            raise MalformedEncoding(f"DLEQ proof must be {PROOF_SIZE} bytes, got {len(data)}")
        return cls(scalar_from_bytes(data[:SCALAR_SIZE]), scalar_from_bytes(data[SCALAR_SIZE:]))


def dleq_prove(
    g1: bytes,
    h1: bytes,
    g2: bytes,
    h2: bytes,
    x: int,
    rng: Optional[RandomSource] = None,
) -> DleqProof:
    """
    Prove knowledge of x with h1 = g1 * x and h2 = g2 * x.

    Args:
        g1, h1, g2, h2: Group elements
        x: The shared discrete log
        rng: Randomness source for the commitment nonce
    """
    while True:
        w = random_scalar(rng)
        a1 = point_mul(w, g1)
        a2 = point_mul(w, g2)
        c = hash_to_scalar(g1, h1, g2, h2, a1, a2)
        r = (w - c * x) % CURVE_ORDER
        # zero scalars have no libsodium multiplication; redraw
        if c and r:
            return DleqProof(c, r)


def dleq_verify(g1: bytes, h1: bytes, g2: bytes, h2: bytes, proof: DleqProof) -> bool:
    """Check a DLEQ proof; any invalid group element makes it fail."""
    try:
        a1 = point_add(point_mul(proof.response, g1), point_mul(proof.challenge, h1))
        a2 = point_add(point_mul(proof.response, g2), point_mul(proof.challenge, h2))
    except nacl.exceptions.CryptoError as e:
        logger.debug("DLEQ verification rejected group elements: %s", e)
        return False
    return hash_to_scalar(g1, h1, g2, h2, a1, a2) == proof.challenge
