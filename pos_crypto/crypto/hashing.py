"""
Hashing of wire-encoded values.

Every digest in pos_crypto is BLAKE2s-256 over the value's wire encoding,
so the digest of a value never depends on its in-memory form.
"""

import hashlib
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from ..binary import wire
from ..binary.storage import check_version

T = TypeVar("T")

HASH_SIZE = 32


@dataclass(frozen=True, order=True)
class Hash(Generic[T]):
    """BLAKE2s-256 digest of a T."""
    digest: bytes

    storage_version = 1

    def __post_init__(self):
        if len(self.digest) != HASH_SIZE:
            raise ValueError(f"Hash must be {HASH_SIZE} bytes, got {len(self.digest)}")

    def __repr__(self) -> str:
        return f"Hash({self.digest.hex()[:16]}...)"

    def __str__(self) -> str:
        return hash_hex(self)

    def to_wire(self, writer, *type_args) -> None:
        writer.put_raw(self.digest)

    @classmethod
    def from_wire(cls, reader, *type_args) -> "Hash":
        return cls(reader.get_raw(HASH_SIZE))

    def to_storage(self, writer, *type_args) -> None:
        writer.put_raw(self.digest)

    @classmethod
    def from_storage(cls, reader, version: int, *type_args) -> "Hash":
        check_version(cls, version)
        return cls(reader.get_raw(HASH_SIZE))


def compute_hash_raw(data: bytes) -> bytes:
    """BLAKE2s-256 of raw bytes."""
    return hashlib.blake2s(data, digest_size=HASH_SIZE).digest()


def compute_hash(value: Any, tp: Any = None) -> Hash:
    """
    Hash a value's wire encoding.

    Args:
        value: Any wire-encodable value
        tp: Type descriptor (inferred from the value when omitted)

    Returns:
        Hash of the value

    Example:
        >>> from pos_crypto.types import Word64
        >>> hash_hex(compute_hash(Word64(1)))
        '4bd3a3255713f33d6c673f7d84048a7a8bcfc206464c85555c603ef4d72189c6'
    """
    return Hash(compute_hash_raw(wire.encode(value, tp)))


def hash_hex(h: Hash) -> str:
    """Lowercase hex rendering of a digest."""
    return h.digest.hex()


def short_hash_hex(h: Hash) -> str:
    """First 8 hex characters, for log lines."""
    return hash_hex(h)[:8]
