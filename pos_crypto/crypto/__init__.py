"""Crypto primitives"""

from .hashing import Hash, compute_hash, hash_hex, short_hash_hex

from .random import (
    RandomSource,
    SecureRandom,
    DeterministicRandom,
    random_number,
    deterministic,
)

from .signing import (
    SignTag,
    PublicKey,
    SecretKey,
    Signature,
    Signed,
    key_gen,
    deterministic_key_gen,
    to_public,
    sign,
    check_sig,
    sign_raw,
    check_sig_raw,
    mk_signed,
    verify_signed,
    format_full_public_key,
    parse_full_public_key,
)

from .redeem import (
    RedeemPublicKey,
    RedeemSecretKey,
    RedeemSignature,
    redeem_key_gen,
    redeem_deterministic_key_gen,
    redeem_to_public,
    redeem_sign,
    redeem_check_sig,
    redeem_pk_b64,
    parse_redeem_pk_b64,
)

from .proxy import (
    ProxyCert,
    ProxySecretKey,
    ProxySignature,
    create_proxy_cert,
    check_proxy_cert,
    create_proxy_secret_key,
    verify_proxy_secret_key,
    proxy_sign,
    proxy_verify,
)

from .vss import (
    VssKeyPair,
    VssPublicKey,
    Secret,
    SecretProof,
    Share,
    EncShare,
    SecretSharingExtra,
    SharedSecretDeal,
    vss_key_gen,
    deterministic_vss_key_gen,
    to_vss_public_key,
    gen_shared_secret,
    decrypt_share,
    verify_enc_share,
    verify_share,
    verify_secret_proof,
    recover_secret,
)

from .aead import encrypt_chacha_poly, decrypt_chacha_poly

from .hd import (
    HDPassphrase,
    HDAddressPayload,
    derive_hd_passphrase,
    pack_hd_address_attr,
    unpack_hd_address_attr,
)

from .safe_signer import (
    EncryptedSecretKey,
    SafeSigner,
    FakeSigner,
    EncryptedSigner,
    to_encrypted,
    encrypt_secret_key,
    decrypt_secret_key,
    change_encrypted_passphrase,
    enc_to_public,
    fake_signer,
    with_safe_signer,
    create_safe_signer,
    safe_to_public,
    safe_sign,
)

from .wallet import (
    WalletKeys,
    generate_mnemonic,
    is_valid_mnemonic,
    secret_key_from_mnemonic,
)

__all__ = [
    # Hashing
    "Hash",
    "compute_hash",
    "hash_hex",
    "short_hash_hex",
    # Randomness
    "RandomSource",
    "SecureRandom",
    "DeterministicRandom",
    "random_number",
    "deterministic",
    # Signatures
    "SignTag",
    "PublicKey",
    "SecretKey",
    "Signature",
    "Signed",
    "key_gen",
    "deterministic_key_gen",
    "to_public",
    "sign",
    "check_sig",
    "sign_raw",
    "check_sig_raw",
    "mk_signed",
    "verify_signed",
    "format_full_public_key",
    "parse_full_public_key",
    # Redeem
    "RedeemPublicKey",
    "RedeemSecretKey",
    "RedeemSignature",
    "redeem_key_gen",
    "redeem_deterministic_key_gen",
    "redeem_to_public",
    "redeem_sign",
    "redeem_check_sig",
    "redeem_pk_b64",
    "parse_redeem_pk_b64",
    # Proxy
    "ProxyCert",
    "ProxySecretKey",
    "ProxySignature",
    "create_proxy_cert",
    "check_proxy_cert",
    "create_proxy_secret_key",
    "verify_proxy_secret_key",
    "proxy_sign",
    "proxy_verify",
    # VSS
    "VssKeyPair",
    "VssPublicKey",
    "Secret",
    "SecretProof",
    "Share",
    "EncShare",
    "SecretSharingExtra",
    "SharedSecretDeal",
    "vss_key_gen",
    "deterministic_vss_key_gen",
    "to_vss_public_key",
    "gen_shared_secret",
    "decrypt_share",
    "verify_enc_share",
    "verify_share",
    "verify_secret_proof",
    "recover_secret",
    # AEAD
    "encrypt_chacha_poly",
    "decrypt_chacha_poly",
    # HD addresses
    "HDPassphrase",
    "HDAddressPayload",
    "derive_hd_passphrase",
    "pack_hd_address_attr",
    "unpack_hd_address_attr",
    # Safe signer
    "EncryptedSecretKey",
    "SafeSigner",
    "FakeSigner",
    "EncryptedSigner",
    "to_encrypted",
    "encrypt_secret_key",
    "decrypt_secret_key",
    "change_encrypted_passphrase",
    "enc_to_public",
    "fake_signer",
    "with_safe_signer",
    "create_safe_signer",
    "safe_to_public",
    "safe_sign",
    # Wallet
    "WalletKeys",
    "generate_mnemonic",
    "is_valid_mnemonic",
    "secret_key_from_mnemonic",
]
