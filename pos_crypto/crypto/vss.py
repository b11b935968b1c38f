"""
Publicly verifiable secret sharing (Schoenmakers PVSS over ed25519)

Notation: B is the ed25519 base point, E a per-ceremony generator obtained by
hashing fresh randomness to the curve (nobody knows log_B E). Participant i
holds x_i with public key y_i = B * x_i.

Dealer, for threshold t and participants 1..n:

    p(z)        = a_0 + a_1 z + ... + a_{t-1} z^{t-1}
    C_j         = E * a_j                        (SecretSharingExtra)
    Secret      = B * a_0
    SecretProof = DLEQ(E, C_0; B, Secret)
    EncShare_i  = (i, Y_i = y_i * p(i), DLEQ(E, X_i; y_i, Y_i)),
                  X_i = sum_j C_j * i^j

Participant i decrypts S_i = Y_i * x_i^-1 = B * p(i) and proves it with
DLEQ(B, y_i; S_i, Y_i). Any t decrypted shares recover B * a_0 by Lagrange
interpolation in the exponent.

Every VSS value travels and is stored through its packed (AsBinary) form.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import nacl.encoding
import nacl.exceptions
import nacl.hash

from ..binary.as_binary import BinaryPacked
from ..errors import MalformedEncoding
from ..types import Threshold, Word32
from .group import (
    CURVE_ORDER,
    POINT_SIZE,
    PROOF_SIZE,
    SCALAR_SIZE,
    DleqProof,
    base_mul,
    check_point,
    dleq_prove,
    dleq_verify,
    hash_to_point,
    point_mul,
    point_sum,
    random_scalar,
    scalar_from_bytes,
    scalar_inverse,
    scalar_to_bytes,
)
from .random import RandomSource, default_rng

logger = logging.getLogger(__name__)

# The base point B, as a packed group element
BASE_POINT = base_mul(1)

_INDEX_SIZE = 4


@dataclass(frozen=True)
class VssKeyPair(BinaryPacked):
    """Participant's decryption key. Packs to the raw secret scalar."""
    secret: int = field(repr=False)

    def __post_init__(self):
        if not 0 < self.secret < CURVE_ORDER:
            raise ValueError("VSS secret scalar must be in 1..CURVE_ORDER-1")

    def pack(self) -> bytes:
        return scalar_to_bytes(self.secret)

    @classmethod
    def unpack(cls, data: bytes) -> "VssKeyPair":
        secret = scalar_from_bytes(data)
        if secret == 0:
            raise MalformedEncoding("VSS secret scalar is zero")
        return cls(secret)


@dataclass(frozen=True, order=True)
class VssPublicKey(BinaryPacked):
    point: bytes

    def pack(self) -> bytes:
        return self.point

    @classmethod
    def unpack(cls, data: bytes) -> "VssPublicKey":
        return cls(check_point(data, "VSS public key"))


@dataclass(frozen=True)
class Secret(BinaryPacked):
    """Shared secret B * a_0."""
    point: bytes

    def pack(self) -> bytes:
        return self.point

    @classmethod
    def unpack(cls, data: bytes) -> "Secret":
        return cls(check_point(data, "secret"))


@dataclass(frozen=True)
class SecretProof(BinaryPacked):
    """Binds a Secret to the commitments of its ceremony."""
    proof: DleqProof

    def pack(self) -> bytes:
        return self.proof.pack()

    @classmethod
    def unpack(cls, data: bytes) -> "SecretProof":
        return cls(DleqProof.unpack(data))


def _pack_indexed(index: int, point: bytes, proof: DleqProof) -> bytes:
    return Word32(index).to_bytes_fixed("big") + point + proof.pack()


def _unpack_indexed(data: bytes, what: str) -> Tuple[int, bytes, DleqProof]:
    if len(data) != _INDEX_SIZE + POINT_SIZE + PROOF_SIZE:
        raise MalformedEncoding(f"{what} has wrong length {len(data)}")
    index = int(Word32.from_bytes_fixed(data[:_INDEX_SIZE], "big"))
    if index == 0:
        raise MalformedEncoding(f"{what} index must be positive")
    point = check_point(data[_INDEX_SIZE:_INDEX_SIZE + POINT_SIZE], what)
    return index, point, DleqProof.unpack(data[_INDEX_SIZE + POINT_SIZE:])


@dataclass(frozen=True)
class EncShare(BinaryPacked):
    """Share Y_i = y_i * p(i) encrypted to participant ``index``."""
    index: int
    point: bytes
    proof: DleqProof

    def pack(self) -> bytes:
        return _pack_indexed(self.index, self.point, self.proof)

    @classmethod
    def unpack(cls, data: bytes) -> "EncShare":
        return cls(*_unpack_indexed(data, "encrypted share"))


@dataclass(frozen=True)
class Share(BinaryPacked):
    """Decrypted share S_i = B * p(i) with its proof of correct decryption."""
    index: int
    point: bytes
    proof: DleqProof

    def pack(self) -> bytes:
        return _pack_indexed(self.index, self.point, self.proof)

    @classmethod
    def unpack(cls, data: bytes) -> "Share":
        return cls(*_unpack_indexed(data, "share"))


@dataclass(frozen=True)
class SecretSharingExtra(BinaryPacked):
    """Per-ceremony generator E and coefficient commitments C_0..C_{t-1}."""
    generator: bytes
    commitments: Tuple[bytes, ...]

    @property
    def threshold(self) -> Threshold:
        return Threshold(len(self.commitments))

    def pack(self) -> bytes:
        count = Word32(len(self.commitments)).to_bytes_fixed("big")
        return self.generator + count + b"".join(self.commitments)

    @classmethod
    def unpack(cls, data: bytes) -> "SecretSharingExtra":
        header = POINT_SIZE + _INDEX_SIZE
        if len(data) < header:
            raise MalformedEncoding("secret sharing extra is truncated")
        generator = check_point(data[:POINT_SIZE], "generator")
        count = int(Word32.from_bytes_fixed(data[POINT_SIZE:header], "big"))
        if count == 0 or len(data) != header + count * POINT_SIZE:
            raise MalformedEncoding(f"secret sharing extra has {count} commitments, bad length")
        commitments = tuple(
            check_point(data[header + k * POINT_SIZE:header + (k + 1) * POINT_SIZE], "commitment")
            for k in range(count)
        )
        return cls(generator, commitments)


@dataclass(frozen=True)
class SharedSecretDeal:
    """Everything a dealer publishes (and keeps) after one ceremony."""
    extra: SecretSharingExtra
    secret: Secret
    proof: SecretProof
    enc_shares: List[EncShare]


def to_vss_public_key(kp: VssKeyPair) -> VssPublicKey:
    return VssPublicKey(base_mul(kp.secret))


def vss_key_gen(rng: Optional[RandomSource] = None) -> VssKeyPair:
    return VssKeyPair(random_scalar(rng))


def deterministic_vss_key_gen(seed: bytes) -> VssKeyPair:
    """VSS key pair derived from a seed (at least 16 bytes)."""
    if len(seed) < 16:
        raise ValueError(f"VSS key seed must be at least 16 bytes, got {len(seed)}")
    digest = nacl.hash.blake2b(
        bytes(seed), digest_size=64, person=b"pos-crypto-vsskg", encoder=nacl.encoding.RawEncoder
    )
    secret = int.from_bytes(digest, "little") % CURVE_ORDER
    return VssKeyPair(secret or 1)


def _eval_poly(coeffs: Sequence[int], z: int) -> int:
    acc = 0
    for a in reversed(coeffs):
        acc = (acc * z + a) % CURVE_ORDER
    return acc


def _commitment_at(extra: SecretSharingExtra, index: int) -> bytes:
    """X_i = sum_j C_j * i^j"""
    return point_sum(
        point_mul(pow(index, j, CURVE_ORDER), c) for j, c in enumerate(extra.commitments)
    )


def gen_shared_secret(
    threshold: int,
    participants: Sequence[VssPublicKey],
    rng: Optional[RandomSource] = None,
) -> SharedSecretDeal:
    """
    Run the dealer side of a ceremony.

    Args:
        threshold: Shares needed to recover the secret (1 <= t <= n)
        participants: VSS public keys; participant k gets index k + 1
        rng: Randomness source

    Returns:
        SharedSecretDeal with one EncShare per participant, in order

    Raises:
        ValueError: Threshold out of range or duplicate participants
    """
    n = len(participants)
    if not 1 <= threshold <= n:
        raise ValueError(f"threshold must be in 1..{n}, got {threshold}")
    if n > Word32.max_value():
        raise ValueError(f"too many participants: {n}")
    for pk in participants:
        if not isinstance(pk, VssPublicKey):
            raise TypeError(f"participant must be VssPublicKey, got {type(pk).__name__}")
    if len(set(participants)) != n:
        raise ValueError("duplicate participant keys")

    source = default_rng(rng)
    generator = hash_to_point(source.random_bytes(32))
    coeffs = [random_scalar(source) for _ in range(threshold)]
    extra = SecretSharingExtra(generator, tuple(point_mul(a, generator) for a in coeffs))

    secret = Secret(base_mul(coeffs[0]))
    proof = SecretProof(
        dleq_prove(generator, extra.commitments[0], BASE_POINT, secret.point, coeffs[0], source)
    )

    enc_shares = []
    for index, pk in enumerate(participants, start=1):
        value = _eval_poly(coeffs, index)
        if value == 0:
            # p(i) = 0 happens with negligible probability; redraw the ceremony
            return gen_shared_secret(threshold, participants, source)
        encrypted = point_mul(value, pk.point)
        commitment = _commitment_at(extra, index)
        enc_proof = dleq_prove(generator, commitment, pk.point, encrypted, value, source)
        enc_shares.append(EncShare(index, encrypted, enc_proof))

    logger.debug("Dealt %d-of-%d shared secret", threshold, n)
    return SharedSecretDeal(extra, secret, proof, enc_shares)


def decrypt_share(
    key_pair: VssKeyPair,
    enc_share: EncShare,
    rng: Optional[RandomSource] = None,
) -> Share:
    """Decrypt an EncShare addressed to ``key_pair`` and prove it."""
    decrypted = point_mul(scalar_inverse(key_pair.secret), enc_share.point)
    public = base_mul(key_pair.secret)
    proof = dleq_prove(BASE_POINT, public, decrypted, enc_share.point, key_pair.secret, rng)
    return Share(enc_share.index, decrypted, proof)


def verify_enc_share(
    extra: SecretSharingExtra,
    vss_pk: VssPublicKey,
    enc_share: EncShare,
) -> bool:
    """True iff enc_share is the share of this ceremony addressed to vss_pk."""
    if enc_share.index < 1 or not extra.commitments:
        return False
    try:
        commitment = _commitment_at(extra, enc_share.index)
    except nacl.exceptions.CryptoError as e:
        logger.debug("Commitments of sharing extra are not group elements: %s", e)
        return False
    valid = dleq_verify(extra.generator, commitment, vss_pk.point, enc_share.point, enc_share.proof)
    if not valid:
        logger.debug("Encrypted share %d rejected", enc_share.index)
    return valid


def verify_share(enc_share: EncShare, vss_pk: VssPublicKey, share: Share) -> bool:
    """True iff share is the correct decryption of enc_share by the owner of vss_pk."""
    if share.index != enc_share.index:
        return False
    valid = dleq_verify(BASE_POINT, vss_pk.point, share.point, enc_share.point, share.proof)
    if not valid:
        logger.debug("Decrypted share %d rejected", share.index)
    return valid


def verify_secret_proof(extra: SecretSharingExtra, secret: Secret, proof: SecretProof) -> bool:
    """True iff secret is the one committed to by extra."""
    if not extra.commitments:
        return False
    return dleq_verify(
        extra.generator, extra.commitments[0], BASE_POINT, secret.point, proof.proof
    )


def recover_secret(threshold: int, shares: Sequence[Share]) -> Secret:
    """
    Recover the secret from decrypted shares.

    Shares should be checked with verify_share first; only the first
    ``threshold`` distinct indices are used.

    Raises:
        ValueError: Fewer than ``threshold`` distinct shares
    """
    by_index = {}
    for share in shares:
        by_index.setdefault(share.index, share)
    if threshold < 1 or len(by_index) < threshold:
        raise ValueError(f"need {threshold} distinct shares, got {len(by_index)}")

    chosen = sorted(by_index.values(), key=lambda s: s.index)[:threshold]
    indices = [s.index for s in chosen]
    terms = []
    for share in chosen:
        num, den = 1, 1
        for j in indices:
            if j != share.index:
                num = num * j % CURVE_ORDER
                den = den * (j - share.index) % CURVE_ORDER
        terms.append(point_mul(num * scalar_inverse(den), share.point))
    return Secret(point_sum(terms))
