"""
Configuration management for pos-crypto

Holds the Argon2id limits used when new encrypted secret keys are created and
the debug switch for the package logger.

Can be set via:
1. Direct initialization / set_config()
2. Environment variables (POS_CRYPTO_KDF_OPSLIMIT, POS_CRYPTO_KDF_MEMLIMIT, POS_CRYPTO_DEBUG)

WARNING: Global configuration should be set once at startup. Limits are
recorded inside each EncryptedSecretKey, so changing them later never breaks
decryption of existing keys.
"""

import logging
import os
import threading
from dataclasses import dataclass, field
from typing import Optional

import nacl.pwhash


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "")
    return int(raw) if raw else default


@dataclass
class CryptoConfig:
    """Configuration for pos-crypto."""
    kdf_opslimit: int = field(
        default_factory=lambda: _env_int(
            "POS_CRYPTO_KDF_OPSLIMIT", nacl.pwhash.argon2id.OPSLIMIT_INTERACTIVE
        )
    )
    kdf_memlimit: int = field(
        default_factory=lambda: _env_int(
            "POS_CRYPTO_KDF_MEMLIMIT", nacl.pwhash.argon2id.MEMLIMIT_INTERACTIVE
        )
    )
    debug: bool = field(
        default_factory=lambda: os.environ.get("POS_CRYPTO_DEBUG", "").lower() == "true"
    )

    def __post_init__(self):
        if self.kdf_opslimit < nacl.pwhash.argon2id.OPSLIMIT_MIN:
            raise ValueError(f"kdf_opslimit below Argon2id minimum: {self.kdf_opslimit}")
        if self.kdf_memlimit < nacl.pwhash.argon2id.MEMLIMIT_MIN:
            raise ValueError(f"kdf_memlimit below Argon2id minimum: {self.kdf_memlimit}")


# Global config instance with thread lock
_config: Optional[CryptoConfig] = None
_config_lock = threading.Lock()
_debug_applied = False


def _apply_debug(config: CryptoConfig) -> None:
    # Only undo a level we set; the application owns the logger otherwise
    global _debug_applied
    logger = logging.getLogger("pos_crypto")
    if config.debug:
        logger.setLevel(logging.DEBUG)
        _debug_applied = True
    elif _debug_applied:
        logger.setLevel(logging.NOTSET)
        _debug_applied = False


def get_config() -> CryptoConfig:
    """
    Get the current pos-crypto configuration.

    Returns:
        CryptoConfig instance (creates from env vars if not set)
    """
    global _config
    with _config_lock:
        if _config is None:
            _config = CryptoConfig()
            _apply_debug(_config)
        return _config


def set_config(
    kdf_opslimit: Optional[int] = None,
    kdf_memlimit: Optional[int] = None,
    debug: Optional[bool] = None,
) -> CryptoConfig:
    """
    Set the global pos-crypto configuration.

    Args:
        kdf_opslimit: Argon2id operations limit for new encrypted keys
        kdf_memlimit: Argon2id memory limit (bytes) for new encrypted keys
        debug: Enable debug logging on the ``pos_crypto`` logger

    Returns:
        The updated CryptoConfig instance

    Example:
        ```python
        import nacl.pwhash
        from pos_crypto.config import set_config

        set_config(
            kdf_opslimit=nacl.pwhash.argon2id.OPSLIMIT_MODERATE,
            kdf_memlimit=nacl.pwhash.argon2id.MEMLIMIT_MODERATE,
        )
        ```
    """
    global _config
    with _config_lock:
        current = _config or CryptoConfig()
        _config = CryptoConfig(
            kdf_opslimit=kdf_opslimit if kdf_opslimit is not None else current.kdf_opslimit,
            kdf_memlimit=kdf_memlimit if kdf_memlimit is not None else current.kdf_memlimit,
            debug=debug if debug is not None else current.debug,
        )
        _apply_debug(_config)
        return _config


def reset_config() -> None:
    """Drop the global configuration; the next get_config() re-reads the environment."""
    global _config
    with _config_lock:
        _config = None
