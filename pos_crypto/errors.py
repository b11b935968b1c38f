"""
Exception classes for pos-crypto

Verification failures (signatures, proxy certificates, VSS proofs) are
reported as booleans. These exceptions cover decode and AEAD failures only.
"""

from typing import Optional, Dict, Any


class PosCryptoError(Exception):
    """Base pos-crypto error class"""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class MalformedEncoding(PosCryptoError):
    """Bytes do not decode to a valid value (truncated, bad tag, out of range)"""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__("MALFORMED_ENCODING", message, details)


class EncryptError(PosCryptoError):
    """AEAD encryption refused its inputs"""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__("ENCRYPT_FAILED", message, details)


class DecryptError(PosCryptoError):
    """AEAD authentication failed (wrong key, header, nonce or corrupted data)"""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        code: str = "DECRYPT_FAILED",
    ):
        super().__init__(code, message, details)


class PassphraseError(DecryptError):
    """Encrypted secret key could not be unlocked with the given passphrase"""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details, code="INVALID_PASSPHRASE")
