"""
Encrypted secret keys and the safe signer abstraction

Secret keys at rest are EncryptedSecretKey values: the public key in the
clear plus the seed under ChaCha20-Poly1305, keyed by Argon2id(passphrase).
The public key is the AEAD header, so an encrypted seed cannot be paired
with another public key.

Signing goes through a SafeSigner, which has exactly two variants:
1. FakeSigner: wraps a plain SecretKey (tests, tools, genesis)
2. EncryptedSigner: an EncryptedSecretKey unlocked with its passphrase

Example:
    esk = encrypt_secret_key(b"correct horse", sk)
    signer = with_safe_signer(esk, b"correct horse")
    if signer is not None:
        sig = safe_sign(signer, payload)
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

import nacl.encoding
import nacl.pwhash

from ..binary.storage import check_version
from ..config import get_config
from ..errors import DecryptError, MalformedEncoding, PassphraseError
from ..types import PassPhrase
from .aead import TAG_SIZE, decrypt_chacha_poly, encrypt_chacha_poly
from .random import RandomSource, default_rng
from .signing import KEY_SIZE, PublicKey, SecretKey, Signature, require_type, sign, to_public

logger = logging.getLogger(__name__)

SALT_SIZE = nacl.pwhash.argon2id.SALTBYTES
# Each key has its own salt, so the derived AEAD key is never reused
_ZERO_NONCE = bytes(12)
_PAYLOAD_SIZE = KEY_SIZE + TAG_SIZE


@dataclass(frozen=True)
class EncryptedSecretKey:
    """Passphrase-protected secret key; the public key stays readable."""
    public_key: PublicKey
    salt: bytes
    opslimit: int
    memlimit: int
    payload: bytes

    storage_version = 1

    def __post_init__(self):
        if len(self.salt) != SALT_SIZE:
            raise ValueError(f"salt must be {SALT_SIZE} bytes, got {len(self.salt)}")
        if not (
            nacl.pwhash.argon2id.OPSLIMIT_MIN <= self.opslimit <= nacl.pwhash.argon2id.OPSLIMIT_MAX
        ):
            raise ValueError(f"Argon2id opslimit out of range: {self.opslimit}")
        if not (
            nacl.pwhash.argon2id.MEMLIMIT_MIN <= self.memlimit <= nacl.pwhash.argon2id.MEMLIMIT_MAX
        ):
            raise ValueError(f"Argon2id memlimit out of range: {self.memlimit}")
        if len(self.payload) != _PAYLOAD_SIZE:
            raise ValueError(f"payload must be {_PAYLOAD_SIZE} bytes, got {len(self.payload)}")

    def to_wire(self, writer) -> None:
        self.public_key.to_wire(writer)
        writer.put_raw(self.salt)
        writer.put_u64(self.opslimit)
        writer.put_u64(self.memlimit)
        writer.put_bytes(self.payload)

    @classmethod
    def from_wire(cls, reader) -> "EncryptedSecretKey":
        return cls._checked(
            PublicKey.from_wire(reader),
            reader.get_raw(SALT_SIZE),
            reader.get_u64(),
            reader.get_u64(),
            reader.get_bytes(),
        )

    def to_storage(self, writer) -> None:
        writer.put_value(self.public_key)
        writer.put_raw(self.salt)
        writer.put_varint(self.opslimit)
        writer.put_varint(self.memlimit)
        writer.put_bytes(self.payload)

    @classmethod
    def from_storage(cls, reader, version: int) -> "EncryptedSecretKey":
        check_version(cls, version)
        return cls._checked(
            reader.get_value(PublicKey),
            reader.get_raw(SALT_SIZE),
            reader.get_varint(),
            reader.get_varint(),
            reader.get_bytes(),
        )

    @classmethod
    def _checked(cls, *fields) -> "EncryptedSecretKey":
        try:
            return cls(*fields)
        except ValueError as e:
            raise MalformedEncoding(f"invalid encrypted secret key: {e}") from e


def _derive_key(passphrase: PassPhrase, salt: bytes, opslimit: int, memlimit: int) -> bytes:
    return nacl.pwhash.argon2id.kdf(
        KEY_SIZE,
        bytes(passphrase),
        salt,
        opslimit=opslimit,
        memlimit=memlimit,
        encoder=nacl.encoding.RawEncoder,
    )


def encrypt_secret_key(
    passphrase: PassPhrase,
    sk: SecretKey,
    rng: Optional[RandomSource] = None,
) -> EncryptedSecretKey:
    """
    Protect a secret key with a passphrase.

    Argon2id limits come from the current configuration and are recorded in
    the result.
    """
    require_type(sk, SecretKey, "secret key")
    config = get_config()
    salt = default_rng(rng).random_bytes(SALT_SIZE)
    pk = to_public(sk)
    key = _derive_key(passphrase, salt, config.kdf_opslimit, config.kdf_memlimit)
    payload = encrypt_chacha_poly(_ZERO_NONCE, key, pk.key, sk.seed)
    return EncryptedSecretKey(pk, salt, config.kdf_opslimit, config.kdf_memlimit, payload)


def to_encrypted(sk: SecretKey) -> EncryptedSecretKey:
    """Encrypt with the empty passphrase."""
    return encrypt_secret_key(b"", sk)


def decrypt_secret_key(esk: EncryptedSecretKey, passphrase: PassPhrase) -> SecretKey:
    """
    Unlock an encrypted secret key.

    Raises:
        PassphraseError: If the passphrase is wrong or the key was tampered with
    """
    key = _derive_key(passphrase, esk.salt, esk.opslimit, esk.memlimit)
    try:
        seed = decrypt_chacha_poly(_ZERO_NONCE, key, esk.public_key.key, esk.payload)
    except DecryptError as e:
        raise PassphraseError(
            "Cannot unlock secret key",
            {"public_key": str(esk.public_key)},
        ) from e
    sk = SecretKey(seed)
    if to_public(sk) != esk.public_key:
        raise PassphraseError("Decrypted seed does not match the stored public key")
    return sk


def change_encrypted_passphrase(
    old: PassPhrase,
    new: PassPhrase,
    esk: EncryptedSecretKey,
    rng: Optional[RandomSource] = None,
) -> Optional[EncryptedSecretKey]:
    """Re-encrypt under a new passphrase; None if ``old`` is wrong."""
    try:
        sk = decrypt_secret_key(esk, old)
    except PassphraseError:
        logger.debug("Passphrase change refused for %s", esk.public_key)
        return None
    return encrypt_secret_key(new, sk, rng)


def enc_to_public(esk: EncryptedSecretKey) -> PublicKey:
    """Public key of an encrypted secret key (no passphrase needed)."""
    return esk.public_key


# ============================================================
# SafeSigner variants
# ============================================================


class SafeSigner(ABC):
    """Signing capability; either FakeSigner or EncryptedSigner."""

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        # Closed set of variants
        if cls.__module__ != __name__:
            raise TypeError(
                f"{cls.__name__}: SafeSigner variants are FakeSigner and EncryptedSigner only"
            )

    @abstractmethod
    def public_key(self) -> PublicKey:
        ...

    @abstractmethod
    def sign(self, payload: Any, tp: Any = None) -> Signature:
        ...


class FakeSigner(SafeSigner):
    """Signer backed by a plain secret key."""

    def __init__(self, sk: SecretKey) -> None:
        require_type(sk, SecretKey, "secret key")
        self._sk = sk
        self._pk = to_public(sk)

    def public_key(self) -> PublicKey:
        return self._pk

    def sign(self, payload: Any, tp: Any = None) -> Signature:
        return sign(self._sk, payload, tp)

    def __repr__(self) -> str:
        return f"FakeSigner({self._pk})"


class EncryptedSigner(SafeSigner):
    """Signer backed by an encrypted secret key unlocked with its passphrase."""

    def __init__(self, esk: EncryptedSecretKey, passphrase: PassPhrase) -> None:
        self._esk = esk
        self._sk = decrypt_secret_key(esk, passphrase)

    @property
    def encrypted_key(self) -> EncryptedSecretKey:
        return self._esk

    def public_key(self) -> PublicKey:
        return enc_to_public(self._esk)

    def sign(self, payload: Any, tp: Any = None) -> Signature:
        return sign(self._sk, payload, tp)

    def __repr__(self) -> str:
        return f"EncryptedSigner({self._esk.public_key})"


def fake_signer(sk: SecretKey) -> SafeSigner:
    return FakeSigner(sk)


def with_safe_signer(esk: EncryptedSecretKey, passphrase: PassPhrase) -> Optional[SafeSigner]:
    """Unlock ``esk``; None if the passphrase is wrong."""
    try:
        return EncryptedSigner(esk, passphrase)
    except PassphraseError:
        logger.debug("Wrong passphrase for %s", esk.public_key)
        return None


def create_safe_signer(
    secret_key: Optional[SecretKey] = None,
    encrypted_key: Optional[EncryptedSecretKey] = None,
    passphrase: PassPhrase = b"",
) -> SafeSigner:
    """
    Create the appropriate signer from what the caller holds.
    Priority: secret_key > encrypted_key

    Raises:
        ValueError: If neither key is given
        PassphraseError: If encrypted_key does not unlock with passphrase
    """
    if secret_key is not None:
        return FakeSigner(secret_key)
    if encrypted_key is not None:
        return EncryptedSigner(encrypted_key, passphrase)
    raise ValueError("Provide secret_key or encrypted_key to create a signer")


def safe_to_public(signer: SafeSigner) -> PublicKey:
    return signer.public_key()


def safe_sign(signer: SafeSigner, payload: Any, tp: Any = None) -> Signature:
    """Sign with either signer variant; identical output for the same key."""
    return signer.sign(payload, tp)
