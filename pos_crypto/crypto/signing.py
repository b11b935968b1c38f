"""
Signing utilities: Ed25519 keys and signatures over wire-encoded payloads

Signed message format: SignTag || wire_encode(payload)

IMPORTANT: the tag keeps plain, redeem and proxy signatures in separate
domains; a signature made for one never verifies as another, even with the
same key material.
IMPORTANT: public keys are rendered as base58 text (see format_full_public_key).
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, Optional, Tuple, TypeVar

import base58
import nacl.exceptions
import nacl.signing

from ..binary import wire
from ..binary.descriptors import type_arg
from ..binary.storage import check_version
from .hashing import compute_hash, short_hash_hex
from .random import RandomSource, default_rng

logger = logging.getLogger(__name__)

T = TypeVar("T")

KEY_SIZE = 32
SIGNATURE_SIZE = 64


class SignTag(Enum):
    """Domain prefix of every signed message."""
    PLAIN = b"\x01"
    REDEEM = b"\x02"
    PROXY_CERT = b"\x0a"
    PROXY_SIGNATURE = b"\x0b"


def tagged_message(tag: SignTag, payload: Any, tp: Any = None) -> bytes:
    """Bytes actually signed for a typed payload."""
    return tag.value + wire.encode(payload, tp)


def ed25519_sign(seed: bytes, message: bytes) -> bytes:
    return nacl.signing.SigningKey(seed).sign(message).signature


def ed25519_verify(key: bytes, message: bytes, signature: bytes) -> bool:
    try:
        nacl.signing.VerifyKey(key).verify(message, signature)
    except nacl.exceptions.BadSignatureError:
        return False
    return True


def ed25519_public(seed: bytes) -> bytes:
    return bytes(nacl.signing.SigningKey(seed).verify_key)


def require_type(value: Any, cls: type, role: str) -> None:
    """Reject values from another key/signature domain."""
    if not isinstance(value, cls):
        raise TypeError(f"{role} must be {cls.__name__}, got {type(value).__name__}")


def _check_size(name: str, data: bytes, size: int) -> None:
    if len(data) != size:
        raise ValueError(f"{name} must be {size} bytes, got {len(data)}")


@dataclass(frozen=True, order=True)
class PublicKey:
    """Ed25519 verification key."""
    key: bytes

    storage_version = 1

    def __post_init__(self):
        _check_size("PublicKey", self.key, KEY_SIZE)

    def __str__(self) -> str:
        return f"pub:{short_hash_hex(compute_hash(self))}"

    def to_wire(self, writer) -> None:
        writer.put_raw(self.key)

    @classmethod
    def from_wire(cls, reader) -> "PublicKey":
        return cls(reader.get_raw(KEY_SIZE))

    def to_storage(self, writer) -> None:
        writer.put_raw(self.key)

    @classmethod
    def from_storage(cls, reader, version: int) -> "PublicKey":
        check_version(cls, version)
        return cls(reader.get_raw(KEY_SIZE))


@dataclass(frozen=True)
class SecretKey:
    """Ed25519 signing key (32-byte seed). Never leaves its owner."""
    seed: bytes = field(repr=False)

    storage_version = 1

    def __post_init__(self):
        _check_size("SecretKey", self.seed, KEY_SIZE)

    def to_wire(self, writer) -> None:
        writer.put_raw(self.seed)

    @classmethod
    def from_wire(cls, reader) -> "SecretKey":
        return cls(reader.get_raw(KEY_SIZE))

    def to_storage(self, writer) -> None:
        writer.put_raw(self.seed)

    @classmethod
    def from_storage(cls, reader, version: int) -> "SecretKey":
        check_version(cls, version)
        return cls(reader.get_raw(KEY_SIZE))


@dataclass(frozen=True)
class Signature(Generic[T]):
    """Ed25519 signature over the wire encoding of a T."""
    sig: bytes

    storage_version = 1

    def __post_init__(self):
        _check_size("Signature", self.sig, SIGNATURE_SIZE)

    def __repr__(self) -> str:
        return f"Signature({self.sig.hex()[:16]}...)"

    def to_wire(self, writer, *type_args) -> None:
        writer.put_raw(self.sig)

    @classmethod
    def from_wire(cls, reader, *type_args) -> "Signature":
        return cls(reader.get_raw(SIGNATURE_SIZE))

    def to_storage(self, writer, *type_args) -> None:
        writer.put_raw(self.sig)

    @classmethod
    def from_storage(cls, reader, version: int, *type_args) -> "Signature":
        check_version(cls, version)
        return cls(reader.get_raw(SIGNATURE_SIZE))


@dataclass(frozen=True)
class Signed(Generic[T]):
    """
    Payload bundled with its signature.

    The payload is readable at any time, but carries no guarantee until
    verify_signed() succeeds against the expected public key.
    """
    payload: T
    signature: Signature

    storage_version = 1

    def to_wire(self, writer, *type_args) -> None:
        writer.put_value(self.payload, type_arg(type_args, 0))
        self.signature.to_wire(writer)

    @classmethod
    def from_wire(cls, reader, *type_args) -> "Signed":
        payload = reader.get_value(type_arg(type_args, 0))
        return cls(payload, Signature.from_wire(reader))

    def to_storage(self, writer, *type_args) -> None:
        writer.put_value(self.payload, type_arg(type_args, 0))
        writer.put_value(self.signature)

    @classmethod
    def from_storage(cls, reader, version: int, *type_args) -> "Signed":
        check_version(cls, version)
        payload = reader.get_value(type_arg(type_args, 0))
        return cls(payload, reader.get_value(Signature))


def to_public(sk: SecretKey) -> PublicKey:
    """Derive the public key of a secret key."""
    require_type(sk, SecretKey, "secret key")
    return PublicKey(ed25519_public(sk.seed))


def key_gen(rng: Optional[RandomSource] = None) -> Tuple[PublicKey, SecretKey]:
    """
    Generate a key pair.

    Args:
        rng: Randomness source (defaults to SecureRandom)

    Returns:
        (public key, secret key)
    """
    sk = SecretKey(default_rng(rng).random_bytes(KEY_SIZE))
    return to_public(sk), sk


def deterministic_key_gen(seed: bytes) -> Tuple[PublicKey, SecretKey]:
    """Key pair from a 32-byte seed."""
    if len(seed) != KEY_SIZE:
        raise ValueError(f"Key seed must be {KEY_SIZE} bytes, got {len(seed)}")
    sk = SecretKey(bytes(seed))
    return to_public(sk), sk


def sign(sk: SecretKey, payload: Any, tp: Any = None) -> Signature:
    """
    Sign a payload's wire encoding.

    Args:
        sk: Signer's secret key
        payload: Any wire-encodable value
        tp: Payload type descriptor (inferred when omitted)
    """
    require_type(sk, SecretKey, "secret key")
    return Signature(ed25519_sign(sk.seed, tagged_message(SignTag.PLAIN, payload, tp)))


def check_sig(pk: PublicKey, payload: Any, sig: Signature, tp: Any = None) -> bool:
    """True iff ``sig`` was made by pk's secret key over exactly ``payload``."""
    require_type(pk, PublicKey, "public key")
    require_type(sig, Signature, "signature")
    valid = ed25519_verify(pk.key, tagged_message(SignTag.PLAIN, payload, tp), sig.sig)
    if not valid:
        logger.debug("Signature check failed for %s", pk)
    return valid


def sign_raw(sk: SecretKey, data: bytes, tag: Optional[SignTag] = None) -> Signature:
    """Sign raw bytes, optionally prefixed with a tag."""
    require_type(sk, SecretKey, "secret key")
    prefix = tag.value if tag is not None else b""
    return Signature(ed25519_sign(sk.seed, prefix + data))


def check_sig_raw(
    pk: PublicKey,
    data: bytes,
    sig: Signature,
    tag: Optional[SignTag] = None,
) -> bool:
    require_type(pk, PublicKey, "public key")
    require_type(sig, Signature, "signature")
    prefix = tag.value if tag is not None else b""
    return ed25519_verify(pk.key, prefix + data, sig.sig)


def mk_signed(sk: SecretKey, payload: Any, tp: Any = None) -> Signed:
    """Bundle a payload with its signature."""
    return Signed(payload, sign(sk, payload, tp))


def verify_signed(pk: PublicKey, signed: Signed, tp: Any = None) -> bool:
    require_type(signed, Signed, "signed value")
    return check_sig(pk, signed.payload, signed.signature, tp)


def format_full_public_key(pk: PublicKey) -> str:
    """Canonical text form of a public key (base58)."""
    return base58.b58encode(pk.key).decode("ascii")


def parse_full_public_key(text: str) -> Optional[PublicKey]:
    """
    Parse the output of format_full_public_key.

    Returns:
        PublicKey, or None if the text is not a rendered key
    """
    try:
        raw = base58.b58decode(text)
    except ValueError:
        return None
    if len(raw) != KEY_SIZE:
        return None
    return PublicKey(raw)
