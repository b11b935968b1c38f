"""
HD address attribute encoding

A wallet's derivation path is stored inside its addresses, encrypted under
a passphrase only the wallet owner can derive:

    payload = ChaCha20-Poly1305(nonce="serokellfore", key=passphrase,
                                header="", wire(List[Word32] path))
"""

import hashlib
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..binary import wire
from ..binary.storage import check_version
from ..errors import DecryptError, MalformedEncoding
from ..types import Word32
from .aead import decrypt_chacha_poly, encrypt_chacha_poly
from .signing import PublicKey

logger = logging.getLogger(__name__)

HD_NONCE = b"serokellfore"
HD_PASSPHRASE_SALT = b"address-hashing"
HD_PASSPHRASE_ITERATIONS = 500
HD_PASSPHRASE_SIZE = 32

_PATH_TYPE = List[Word32]


@dataclass(frozen=True)
class HDPassphrase:
    """Symmetric key protecting derivation paths."""
    key: bytes = field(repr=False)

    storage_version = 1

    def __post_init__(self):
        if len(self.key) != HD_PASSPHRASE_SIZE:
            raise ValueError(
                f"HDPassphrase must be {HD_PASSPHRASE_SIZE} bytes, got {len(self.key)}"
            )

    def to_wire(self, writer) -> None:
        writer.put_raw(self.key)

    @classmethod
    def from_wire(cls, reader) -> "HDPassphrase":
        return cls(reader.get_raw(HD_PASSPHRASE_SIZE))

    def to_storage(self, writer) -> None:
        writer.put_raw(self.key)

    @classmethod
    def from_storage(cls, reader, version: int) -> "HDPassphrase":
        check_version(cls, version)
        return cls(reader.get_raw(HD_PASSPHRASE_SIZE))


@dataclass(frozen=True)
class HDAddressPayload:
    """Encrypted derivation path, as embedded in an address."""
    ciphertext: bytes

    storage_version = 1

    def to_wire(self, writer) -> None:
        writer.put_bytes(self.ciphertext)

    @classmethod
    def from_wire(cls, reader) -> "HDAddressPayload":
        return cls(reader.get_bytes())

    def to_storage(self, writer) -> None:
        writer.put_bytes(self.ciphertext)

    @classmethod
    def from_storage(cls, reader, version: int) -> "HDAddressPayload":
        check_version(cls, version)
        return cls(reader.get_bytes())


def derive_hd_passphrase(pk: PublicKey) -> HDPassphrase:
    """PBKDF2-HMAC-SHA512 of the root public key."""
    return HDPassphrase(
        hashlib.pbkdf2_hmac(
            "sha512",
            pk.key,
            HD_PASSPHRASE_SALT,
            HD_PASSPHRASE_ITERATIONS,
            dklen=HD_PASSPHRASE_SIZE,
        )
    )


def pack_hd_address_attr(passphrase: HDPassphrase, path: Sequence[int]) -> HDAddressPayload:
    """
    Encrypt a derivation path.

    Args:
        passphrase: Wallet's HD passphrase
        path: Derivation indices (each a 32-bit unsigned integer)

    Raises:
        ValueError: If an index does not fit in 32 bits
    """
    plaintext = wire.encode([Word32(i) for i in path], _PATH_TYPE)
    return HDAddressPayload(encrypt_chacha_poly(HD_NONCE, passphrase.key, b"", plaintext))


def unpack_hd_address_attr(
    passphrase: HDPassphrase,
    payload: HDAddressPayload,
) -> Optional[List[int]]:
    """
    Decrypt a derivation path.

    Returns:
        The path, or None if the payload was not made with this passphrase
    """
    try:
        plaintext = decrypt_chacha_poly(HD_NONCE, passphrase.key, b"", payload.ciphertext)
        path = wire.decode(plaintext, _PATH_TYPE)
    except DecryptError:
        return None
    except MalformedEncoding as e:
        logger.debug("Authenticated HD payload holds no path: %s", e)
        return None
    return [int(i) for i in path]
