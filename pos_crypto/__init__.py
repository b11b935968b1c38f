"""
pos-crypto
Cryptographic core of a proof-of-stake node: hashing, signatures, proxy
delegation, redeem keys, verifiable secret sharing, AEAD and HD addresses

Example:
    ```python
    from pos_crypto import key_gen, sign, check_sig, compute_hash, hash_hex
    from pos_crypto.types import Word64

    pk, sk = key_gen()
    sig = sign(sk, Word64(42))
    assert check_sig(pk, Word64(42), sig)

    print(hash_hex(compute_hash(Word64(1))))
    ```
"""

__version__ = "0.1.0"

# Codecs
from .binary import wire, storage, AsBinary, as_binary, from_binary

# Configuration
from .config import CryptoConfig, get_config, set_config, reset_config

# Errors
from .errors import (
    PosCryptoError,
    MalformedEncoding,
    EncryptError,
    DecryptError,
    PassphraseError,
)

# Types
from .types import (
    FixedInt,
    Word8,
    Word16,
    Word32,
    Word64,
    Int32,
    Int64,
    Threshold,
    PassPhrase,
)

# Primitives
from .crypto import *  # noqa: F401,F403
from .crypto import __all__ as _crypto_all

__all__ = [
    "__version__",
    # Codecs
    "wire",
    "storage",
    "AsBinary",
    "as_binary",
    "from_binary",
    # Configuration
    "CryptoConfig",
    "get_config",
    "set_config",
    "reset_config",
    # Errors
    "PosCryptoError",
    "MalformedEncoding",
    "EncryptError",
    "DecryptError",
    "PassphraseError",
    # Types
    "FixedInt",
    "Word8",
    "Word16",
    "Word32",
    "Word64",
    "Int32",
    "Int64",
    "Threshold",
    "PassPhrase",
] + list(_crypto_all)
