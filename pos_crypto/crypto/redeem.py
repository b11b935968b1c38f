"""
Redeem signatures: a second Ed25519 domain used for one-time redemption

Redeem keys and signatures are distinct classes from the plain ones in
signing.py, and every redeem message is prefixed with SignTag.REDEEM, so a
redeem signature never verifies as a plain one (nor vice versa) even when
both were made from the same seed.
"""

import base64
import binascii
import logging
from dataclasses import dataclass, field
from typing import Any, Generic, Optional, Tuple, TypeVar

from ..binary.storage import check_version
from .random import RandomSource, default_rng
from .signing import (
    KEY_SIZE,
    SIGNATURE_SIZE,
    SignTag,
    ed25519_public,
    ed25519_sign,
    ed25519_verify,
    require_type,
    tagged_message,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, order=True)
class RedeemPublicKey:
    key: bytes

    storage_version = 1

    def __post_init__(self):
        if len(self.key) != KEY_SIZE:
            raise ValueError(f"RedeemPublicKey must be {KEY_SIZE} bytes, got {len(self.key)}")

    def __str__(self) -> str:
        return f"redeem_pk:{redeem_pk_b64(self)}"

    def to_wire(self, writer) -> None:
        writer.put_raw(self.key)

    @classmethod
    def from_wire(cls, reader) -> "RedeemPublicKey":
        return cls(reader.get_raw(KEY_SIZE))

    def to_storage(self, writer) -> None:
        writer.put_raw(self.key)

    @classmethod
    def from_storage(cls, reader, version: int) -> "RedeemPublicKey":
        check_version(cls, version)
        return cls(reader.get_raw(KEY_SIZE))


@dataclass(frozen=True)
class RedeemSecretKey:
    seed: bytes = field(repr=False)

    storage_version = 1

    def __post_init__(self):
        if len(self.seed) != KEY_SIZE:
            raise ValueError(f"RedeemSecretKey must be {KEY_SIZE} bytes, got {len(self.seed)}")

    def to_wire(self, writer) -> None:
        writer.put_raw(self.seed)

    @classmethod
    def from_wire(cls, reader) -> "RedeemSecretKey":
        return cls(reader.get_raw(KEY_SIZE))

    def to_storage(self, writer) -> None:
        writer.put_raw(self.seed)

    @classmethod
    def from_storage(cls, reader, version: int) -> "RedeemSecretKey":
        check_version(cls, version)
        return cls(reader.get_raw(KEY_SIZE))


@dataclass(frozen=True)
class RedeemSignature(Generic[T]):
    sig: bytes

    storage_version = 1

    def __post_init__(self):
        if len(self.sig) != SIGNATURE_SIZE:
            raise ValueError(f"RedeemSignature must be {SIGNATURE_SIZE} bytes, got {len(self.sig)}")

    def to_wire(self, writer, *type_args) -> None:
        writer.put_raw(self.sig)

    @classmethod
    def from_wire(cls, reader, *type_args) -> "RedeemSignature":
        return cls(reader.get_raw(SIGNATURE_SIZE))

    def to_storage(self, writer, *type_args) -> None:
        writer.put_raw(self.sig)

    @classmethod
    def from_storage(cls, reader, version: int, *type_args) -> "RedeemSignature":
        check_version(cls, version)
        return cls(reader.get_raw(SIGNATURE_SIZE))


def redeem_to_public(sk: RedeemSecretKey) -> RedeemPublicKey:
    require_type(sk, RedeemSecretKey, "redeem secret key")
    return RedeemPublicKey(ed25519_public(sk.seed))


def redeem_key_gen(
    rng: Optional[RandomSource] = None,
) -> Tuple[RedeemPublicKey, RedeemSecretKey]:
    sk = RedeemSecretKey(default_rng(rng).random_bytes(KEY_SIZE))
    return redeem_to_public(sk), sk


def redeem_deterministic_key_gen(seed: bytes) -> Tuple[RedeemPublicKey, RedeemSecretKey]:
    """Redeem key pair from a 32-byte seed."""
    if len(seed) != KEY_SIZE:
        raise ValueError(f"Key seed must be {KEY_SIZE} bytes, got {len(seed)}")
    sk = RedeemSecretKey(bytes(seed))
    return redeem_to_public(sk), sk


def redeem_sign(sk: RedeemSecretKey, payload: Any, tp: Any = None) -> RedeemSignature:
    """
    Sign a payload in the redeem domain.

    Raises:
        TypeError: If given a plain SecretKey
    """
    require_type(sk, RedeemSecretKey, "redeem secret key")
    message = tagged_message(SignTag.REDEEM, payload, tp)
    return RedeemSignature(ed25519_sign(sk.seed, message))


def redeem_check_sig(
    pk: RedeemPublicKey,
    payload: Any,
    sig: RedeemSignature,
    tp: Any = None,
) -> bool:
    """
    Verify a redeem signature.

    Raises:
        TypeError: If given a plain PublicKey or Signature
    """
    require_type(pk, RedeemPublicKey, "redeem public key")
    require_type(sig, RedeemSignature, "redeem signature")
    valid = ed25519_verify(pk.key, tagged_message(SignTag.REDEEM, payload, tp), sig.sig)
    if not valid:
        logger.debug("Redeem signature check failed for %s", pk)
    return valid


def redeem_pk_b64(pk: RedeemPublicKey) -> str:
    """URL-safe base64 rendering, as printed on redemption certificates."""
    return base64.urlsafe_b64encode(pk.key).decode("ascii")


def parse_redeem_pk_b64(text: str) -> Optional[RedeemPublicKey]:
    try:
        raw = base64.urlsafe_b64decode(text.encode("ascii"))
    except (binascii.Error, UnicodeEncodeError):
        return None
    if len(raw) != KEY_SIZE:
        return None
    return RedeemPublicKey(raw)
