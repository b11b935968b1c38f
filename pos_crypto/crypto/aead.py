"""
ChaCha20-Poly1305 (IETF) authenticated encryption

Ciphertexts are ``encrypted || tag`` with a 16-byte Poly1305 tag. The header
is authenticated but not encrypted. Any mismatch of key, nonce, header or
ciphertext makes decryption raise DecryptError; it never returns wrong
plaintext.
"""

import logging

import nacl.bindings
import nacl.exceptions

from ..errors import DecryptError, EncryptError

logger = logging.getLogger(__name__)

NONCE_SIZE = nacl.bindings.crypto_aead_chacha20poly1305_ietf_NPUBBYTES
KEY_SIZE = nacl.bindings.crypto_aead_chacha20poly1305_ietf_KEYBYTES
TAG_SIZE = nacl.bindings.crypto_aead_chacha20poly1305_ietf_ABYTES


def encrypt_chacha_poly(nonce: bytes, key: bytes, header: bytes, plaintext: bytes) -> bytes:
    """
    Encrypt and authenticate.

    Args:
        nonce: 12-byte nonce, never reused with the same key
        key: 32-byte key
        header: Associated data (authenticated, sent in clear)
        plaintext: Data to encrypt

    Returns:
        Ciphertext followed by the 16-byte tag

    Raises:
        EncryptError: If the key or nonce has the wrong size
    """
    if len(nonce) != NONCE_SIZE:
        raise EncryptError(f"Nonce must be {NONCE_SIZE} bytes, got {len(nonce)}")
    if len(key) != KEY_SIZE:
        raise EncryptError(f"Key must be {KEY_SIZE} bytes, got {len(key)}")
    try:
        return nacl.bindings.crypto_aead_chacha20poly1305_ietf_encrypt(
            bytes(plaintext), bytes(header), bytes(nonce), bytes(key)
        )
    except nacl.exceptions.CryptoError as e:
        raise EncryptError(f"Encryption failed: {e}") from e


def decrypt_chacha_poly(nonce: bytes, key: bytes, header: bytes, ciphertext: bytes) -> bytes:
    """
    Authenticate and decrypt.

    Raises:
        DecryptError: Wrong key, nonce or header, or corrupted ciphertext
    """
    if len(nonce) != NONCE_SIZE:
        raise DecryptError(f"Nonce must be {NONCE_SIZE} bytes, got {len(nonce)}")
    if len(key) != KEY_SIZE:
        raise DecryptError(f"Key must be {KEY_SIZE} bytes, got {len(key)}")
    if len(ciphertext) < TAG_SIZE:
        raise DecryptError(
            f"Ciphertext too short: {len(ciphertext)} bytes",
            {"min_size": TAG_SIZE},
        )
    try:
        return nacl.bindings.crypto_aead_chacha20poly1305_ietf_decrypt(
            bytes(ciphertext), bytes(header), bytes(nonce), bytes(key)
        )
    except nacl.exceptions.CryptoError as e:
        logger.debug("AEAD authentication failed: %s", e)
        raise DecryptError("Authentication failed") from e
