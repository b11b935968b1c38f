"""
Proxy (delegated) signing

An issuer hands a delegate the right to sign on its behalf within a scope W:

    cert      = sign(issuer_sk, PROXY_CERT || delegate_pk || wire(scope))
    psk       = ProxySecretKey(issuer_pk, delegate_pk, scope, cert)
    proxy sig = sign(delegate_sk, PROXY_SIGNATURE || issuer_pk || delegate_pk
                                  || cert || wire(payload))

The cert only verifies under the issuer key that made it, so swapping
``psk.issuer_pk`` invalidates the credential. The proxy signature covers the
whole credential, so it cannot be re-attached to another certificate.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from ..binary import wire
from ..binary.descriptors import type_arg
from ..binary.storage import check_version
from .signing import (
    SIGNATURE_SIZE,
    PublicKey,
    SecretKey,
    SignTag,
    ed25519_sign,
    ed25519_verify,
    require_type,
    to_public,
)

logger = logging.getLogger(__name__)

W = TypeVar("W")
T = TypeVar("T")


@dataclass(frozen=True)
class ProxyCert(Generic[W]):
    """Issuer signature over (delegate key, scope)."""
    sig: bytes

    storage_version = 1

    def __post_init__(self):
        if len(self.sig) != SIGNATURE_SIZE:
            raise ValueError(f"ProxyCert must be {SIGNATURE_SIZE} bytes, got {len(self.sig)}")

    def to_wire(self, writer, *type_args) -> None:
        writer.put_raw(self.sig)

    @classmethod
    def from_wire(cls, reader, *type_args) -> "ProxyCert":
        return cls(reader.get_raw(SIGNATURE_SIZE))

    def to_storage(self, writer, *type_args) -> None:
        writer.put_raw(self.sig)

    @classmethod
    def from_storage(cls, reader, version: int, *type_args) -> "ProxyCert":
        check_version(cls, version)
        return cls(reader.get_raw(SIGNATURE_SIZE))


@dataclass(frozen=True)
class ProxySecretKey(Generic[W]):
    """
    Delegation credential.

    Despite the name it holds no secret: the delegate still signs with its
    own SecretKey. Decoding requires the scope type, e.g.
    ``wire.decode(data, ProxySecretKey[Word64])``.
    """
    issuer_pk: PublicKey
    delegate_pk: PublicKey
    scope: W
    cert: ProxyCert

    storage_version = 1

    def to_wire(self, writer, *type_args) -> None:
        self.issuer_pk.to_wire(writer)
        self.delegate_pk.to_wire(writer)
        writer.put_value(self.scope, type_arg(type_args, 0))
        self.cert.to_wire(writer)

    @classmethod
    def from_wire(cls, reader, *type_args) -> "ProxySecretKey":
        issuer_pk = PublicKey.from_wire(reader)
        delegate_pk = PublicKey.from_wire(reader)
        scope = reader.get_value(type_arg(type_args, 0))
        return cls(issuer_pk, delegate_pk, scope, ProxyCert.from_wire(reader))

    def to_storage(self, writer, *type_args) -> None:
        writer.put_value(self.issuer_pk)
        writer.put_value(self.delegate_pk)
        writer.put_value(self.scope, type_arg(type_args, 0))
        writer.put_value(self.cert)

    @classmethod
    def from_storage(cls, reader, version: int, *type_args) -> "ProxySecretKey":
        check_version(cls, version)
        issuer_pk = reader.get_value(PublicKey)
        delegate_pk = reader.get_value(PublicKey)
        scope = reader.get_value(type_arg(type_args, 0))
        return cls(issuer_pk, delegate_pk, scope, reader.get_value(ProxyCert))


@dataclass(frozen=True)
class ProxySignature(Generic[W, T]):
    """Delegate signature over a T, made under a ProxySecretKey[W]."""
    psk: ProxySecretKey
    sig: bytes

    storage_version = 1

    def __post_init__(self):
        if len(self.sig) != SIGNATURE_SIZE:
            raise ValueError(f"ProxySignature must be {SIGNATURE_SIZE} bytes, got {len(self.sig)}")

    def to_wire(self, writer, *type_args) -> None:
        self.psk.to_wire(writer, type_arg(type_args, 0))
        writer.put_raw(self.sig)

    @classmethod
    def from_wire(cls, reader, *type_args) -> "ProxySignature":
        psk = ProxySecretKey.from_wire(reader, type_arg(type_args, 0))
        return cls(psk, reader.get_raw(SIGNATURE_SIZE))

    def to_storage(self, writer, *type_args) -> None:
        writer.put_version(ProxySecretKey.storage_version)
        self.psk.to_storage(writer, type_arg(type_args, 0))
        writer.put_raw(self.sig)

    @classmethod
    def from_storage(cls, reader, version: int, *type_args) -> "ProxySignature":
        check_version(cls, version)
        psk = ProxySecretKey.from_storage(reader, reader.get_version(), type_arg(type_args, 0))
        return cls(psk, reader.get_raw(SIGNATURE_SIZE))


def _cert_message(delegate_pk: PublicKey, scope: Any, scope_tp: Any) -> bytes:
    return SignTag.PROXY_CERT.value + delegate_pk.key + wire.encode(scope, scope_tp)


def _proxy_message(psk: ProxySecretKey, payload: Any, tp: Any) -> bytes:
    return (
        SignTag.PROXY_SIGNATURE.value
        + psk.issuer_pk.key
        + psk.delegate_pk.key
        + psk.cert.sig
        + wire.encode(payload, tp)
    )


def create_proxy_cert(
    issuer_sk: SecretKey,
    delegate_pk: PublicKey,
    scope: W,
    scope_tp: Any = None,
) -> ProxyCert:
    require_type(issuer_sk, SecretKey, "issuer secret key")
    require_type(delegate_pk, PublicKey, "delegate public key")
    return ProxyCert(ed25519_sign(issuer_sk.seed, _cert_message(delegate_pk, scope, scope_tp)))


def check_proxy_cert(
    issuer_pk: PublicKey,
    delegate_pk: PublicKey,
    scope: W,
    cert: ProxyCert,
    scope_tp: Any = None,
) -> bool:
    require_type(issuer_pk, PublicKey, "issuer public key")
    require_type(cert, ProxyCert, "proxy certificate")
    return ed25519_verify(issuer_pk.key, _cert_message(delegate_pk, scope, scope_tp), cert.sig)


def create_proxy_secret_key(
    issuer_sk: SecretKey,
    delegate_pk: PublicKey,
    scope: W,
    scope_tp: Any = None,
) -> ProxySecretKey:
    """
    Delegate signing rights for ``scope`` to ``delegate_pk``.

    Args:
        issuer_sk: Issuer's secret key
        delegate_pk: Public key of the delegate
        scope: Permission value (e.g. an epoch range)
        scope_tp: Type descriptor of the scope (inferred when omitted)

    Returns:
        ProxySecretKey embedding the issuer's public key and certificate
    """
    cert = create_proxy_cert(issuer_sk, delegate_pk, scope, scope_tp)
    return ProxySecretKey(to_public(issuer_sk), delegate_pk, scope, cert)


def verify_proxy_secret_key(psk: ProxySecretKey, scope_tp: Any = None) -> bool:
    """True iff psk.cert was made by psk.issuer_pk over (delegate_pk, scope)."""
    require_type(psk, ProxySecretKey, "proxy secret key")
    valid = check_proxy_cert(psk.issuer_pk, psk.delegate_pk, psk.scope, psk.cert, scope_tp)
    if not valid:
        logger.debug("Proxy certificate from %s to %s rejected", psk.issuer_pk, psk.delegate_pk)
    return valid


def proxy_sign(
    delegate_sk: SecretKey,
    psk: ProxySecretKey,
    payload: T,
    tp: Any = None,
) -> ProxySignature:
    """
    Sign ``payload`` as a delegate.

    Raises:
        ValueError: If delegate_sk does not belong to psk.delegate_pk
    """
    require_type(psk, ProxySecretKey, "proxy secret key")
    if to_public(delegate_sk) != psk.delegate_pk:
        raise ValueError("delegate secret key does not match the proxy secret key")
    return ProxySignature(psk, ed25519_sign(delegate_sk.seed, _proxy_message(psk, payload, tp)))


def proxy_verify(
    issuer_pk: PublicKey,
    proxy_sig: ProxySignature,
    scope_predicate: Callable[[W], bool],
    payload: T,
    tp: Any = None,
    scope_tp: Any = None,
) -> bool:
    """
    Verify a proxy signature.

    True iff the credential was issued by ``issuer_pk`` and its certificate
    verifies, ``scope_predicate`` accepts its scope, and the delegate
    signature covers exactly ``payload``.
    """
    require_type(issuer_pk, PublicKey, "issuer public key")
    require_type(proxy_sig, ProxySignature, "proxy signature")
    psk = proxy_sig.psk
    if psk.issuer_pk != issuer_pk:
        logger.debug("Proxy signature issued by %s, expected %s", psk.issuer_pk, issuer_pk)
        return False
    if not verify_proxy_secret_key(psk, scope_tp):
        return False
    if not scope_predicate(psk.scope):
        logger.debug("Proxy scope rejected by predicate")
        return False
    return ed25519_verify(psk.delegate_pk.key, _proxy_message(psk, payload, tp), proxy_sig.sig)
