"""Shared fixtures for pos-crypto tests."""

import nacl.pwhash
import pytest

from pos_crypto.binary.as_binary import AsBinary, as_binary
from pos_crypto.config import reset_config, set_config
from pos_crypto.crypto.hashing import Hash, compute_hash
from pos_crypto.crypto.hd import HDAddressPayload, HDPassphrase, derive_hd_passphrase, pack_hd_address_attr
from pos_crypto.crypto.proxy import (
    ProxyCert,
    ProxySecretKey,
    ProxySignature,
    create_proxy_cert,
    create_proxy_secret_key,
    proxy_sign,
)
from pos_crypto.crypto.random import DeterministicRandom
from pos_crypto.crypto.redeem import (
    RedeemPublicKey,
    RedeemSecretKey,
    RedeemSignature,
    redeem_deterministic_key_gen,
    redeem_sign,
)
from pos_crypto.crypto.safe_signer import EncryptedSecretKey, to_encrypted
from pos_crypto.crypto.signing import (
    PublicKey,
    SecretKey,
    Signature,
    Signed,
    deterministic_key_gen,
    mk_signed,
    sign,
)
from pos_crypto.crypto.vss import (
    EncShare,
    Secret,
    SecretProof,
    SecretSharingExtra,
    Share,
    VssKeyPair,
    VssPublicKey,
    decrypt_share,
    deterministic_vss_key_gen,
    gen_shared_secret,
    to_vss_public_key,
)
from pos_crypto.types import Threshold, Word32, Word64


@pytest.fixture(autouse=True)
def fast_kdf():
    """Minimal Argon2id limits so encrypted keys are cheap to make."""
    set_config(
        kdf_opslimit=nacl.pwhash.argon2id.OPSLIMIT_MIN,
        kdf_memlimit=nacl.pwhash.argon2id.MEMLIMIT_MIN,
        debug=False,
    )
    yield
    reset_config()


@pytest.fixture
def rng():
    return DeterministicRandom(b"pos-crypto test suite")


@pytest.fixture
def keys():
    return deterministic_key_gen(bytes(range(32)))


@pytest.fixture
def other_keys():
    return deterministic_key_gen(bytes(range(32, 64)))


def _ceremony(label: bytes, threshold: int = 2, participants: int = 3):
    key_pairs = [
        deterministic_vss_key_gen(label + b" participant " + bytes([i]))
        for i in range(participants)
    ]
    pks = [to_vss_public_key(kp) for kp in key_pairs]
    deal = gen_shared_secret(threshold, pks, DeterministicRandom(label))
    shares = [
        decrypt_share(kp, enc, DeterministicRandom(label + bytes([i])))
        for i, (kp, enc) in enumerate(zip(key_pairs, deal.enc_shares))
    ]
    return {
        "threshold": threshold,
        "key_pairs": key_pairs,
        "pks": pks,
        "deal": deal,
        "shares": shares,
    }


@pytest.fixture(scope="session")
def ceremony():
    """A 2-of-3 sharing with every share decrypted."""
    return _ceremony(b"ceremony one")


@pytest.fixture(scope="session")
def other_ceremony():
    """An unrelated 2-of-3 sharing."""
    return _ceremony(b"ceremony two")


def _record_samples(request):
    pk, sk = deterministic_key_gen(bytes(range(32)))
    delegate_pk, delegate_sk = deterministic_key_gen(bytes(range(32, 64)))
    redeem_pk, redeem_sk = redeem_deterministic_key_gen(bytes(range(64, 96)))
    psk = create_proxy_secret_key(sk, delegate_pk, Word32(3))
    vss_kp = deterministic_vss_key_gen(b"record samples key pair")
    ceremony = request.getfixturevalue("ceremony")
    deal = ceremony["deal"]
    return {
        "threshold": (Threshold(2), Threshold),
        "hash": (compute_hash(Word64(1)), Hash[Word64]),
        "public_key": (pk, PublicKey),
        "secret_key": (sk, SecretKey),
        "signature": (sign(sk, Word64(5)), Signature[Word64]),
        "signed": (mk_signed(sk, Word64(5)), Signed[Word64]),
        "redeem_public_key": (redeem_pk, RedeemPublicKey),
        "redeem_secret_key": (redeem_sk, RedeemSecretKey),
        "redeem_signature": (redeem_sign(redeem_sk, Word64(5)), RedeemSignature[Word64]),
        "proxy_cert": (create_proxy_cert(sk, delegate_pk, Word32(3)), ProxyCert[Word32]),
        "proxy_secret_key": (psk, ProxySecretKey[Word32]),
        "proxy_signature": (
            proxy_sign(delegate_sk, psk, b"tx"),
            ProxySignature[Word32, bytes],
        ),
        "encrypted_secret_key": (to_encrypted(sk), EncryptedSecretKey),
        "hd_passphrase": (derive_hd_passphrase(pk), HDPassphrase),
        "hd_address_payload": (
            pack_hd_address_attr(derive_hd_passphrase(pk), [0, 1]),
            HDAddressPayload,
        ),
        "vss_key_pair": (vss_kp, VssKeyPair),
        "vss_public_key": (to_vss_public_key(vss_kp), VssPublicKey),
        "secret": (deal.secret, Secret),
        "secret_proof": (deal.proof, SecretProof),
        "sharing_extra": (deal.extra, SecretSharingExtra),
        "enc_share": (deal.enc_shares[0], EncShare),
        "share": (ceremony["shares"][0], Share),
        "as_binary": (as_binary(to_vss_public_key(vss_kp)), AsBinary[VssPublicKey]),
    }


RECORD_KINDS = [
    "threshold",
    "hash",
    "public_key",
    "secret_key",
    "signature",
    "signed",
    "redeem_public_key",
    "redeem_secret_key",
    "redeem_signature",
    "proxy_cert",
    "proxy_secret_key",
    "proxy_signature",
    "encrypted_secret_key",
    "hd_passphrase",
    "hd_address_payload",
    "vss_key_pair",
    "vss_public_key",
    "secret",
    "secret_proof",
    "sharing_extra",
    "enc_share",
    "share",
    "as_binary",
]


@pytest.fixture(params=RECORD_KINDS)
def record_sample(request):
    """(value, type descriptor) for every codec-aware record type."""
    return _record_samples(request)[request.param]
