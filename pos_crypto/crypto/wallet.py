"""
Mnemonic wallet seeds
BIP-39 mnemonics with SLIP-10 Ed25519 derivation of signing keys
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from bip_utils import (
    Bip32Slip10Ed25519,
    Bip32Utils,
    Bip39MnemonicGenerator,
    Bip39SeedGenerator,
    Bip39WordsNum,
)
from mnemonic import Mnemonic

from .hd import (
    HDAddressPayload,
    HDPassphrase,
    derive_hd_passphrase,
    pack_hd_address_attr,
    unpack_hd_address_attr,
)
from .signing import PublicKey, SecretKey, to_public

# Largest index before hardening
MAX_PATH_INDEX = 0x7FFFFFFF


def generate_mnemonic() -> str:
    """
    Generate a 24-word BIP-39 mnemonic (256-bit entropy)

    Example:
        >>> len(generate_mnemonic().split())
        24
    """
    return str(Bip39MnemonicGenerator().FromWordsNumber(Bip39WordsNum.WORDS_NUM_24))


def is_valid_mnemonic(mnemonic: str) -> bool:
    """Check the word list and checksum of an English BIP-39 mnemonic"""
    return Mnemonic("english").check(mnemonic)


def secret_key_from_mnemonic(
    mnemonic: str,
    path: Sequence[int] = (),
    passphrase: str = "",
) -> SecretKey:
    """
    Derive a signing key from a mnemonic

    Every index of ``path`` is hardened (SLIP-10 Ed25519 supports hardened
    derivation only), so ``(0, 5)`` means m/0'/5'.

    Args:
        mnemonic: BIP-39 mnemonic phrase (12 or 24 words)
        path: Derivation indices, each at most 2**31 - 1
        passphrase: Optional BIP-39 passphrase

    Raises:
        ValueError: If the mnemonic or an index is invalid
    """
    if not is_valid_mnemonic(mnemonic):
        raise ValueError("Invalid mnemonic phrase")

    seed = Bip39SeedGenerator(mnemonic).Generate(passphrase)
    ctx = Bip32Slip10Ed25519.FromSeed(seed)
    for index in path:
        if not 0 <= index <= MAX_PATH_INDEX:
            raise ValueError(f"Derivation index out of range: {index}")
        ctx = ctx.ChildKey(Bip32Utils.HardenIndex(index))

    return SecretKey(ctx.PrivateKey().Raw().ToBytes())


@dataclass(frozen=True)
class WalletKeys:
    """Root keys of a mnemonic wallet"""
    mnemonic: str = field(repr=False)
    secret_key: SecretKey
    public_key: PublicKey
    hd_passphrase: HDPassphrase
    passphrase: str = field(default="", repr=False)

    @classmethod
    def from_mnemonic(cls, mnemonic: str, passphrase: str = "") -> "WalletKeys":
        """
        Restore a wallet from its mnemonic

        Raises:
            ValueError: If the mnemonic is invalid
        """
        sk = secret_key_from_mnemonic(mnemonic, (), passphrase)
        pk = to_public(sk)
        return cls(mnemonic, sk, pk, derive_hd_passphrase(pk), passphrase)

    @classmethod
    def generate(cls) -> "WalletKeys":
        """Create a wallet with a fresh 24-word mnemonic"""
        return cls.from_mnemonic(generate_mnemonic())

    def derive(self, path: Sequence[int]) -> Tuple[PublicKey, SecretKey]:
        """Key pair at ``path`` below the root"""
        sk = secret_key_from_mnemonic(self.mnemonic, path, self.passphrase)
        return to_public(sk), sk

    def address_payload(self, path: Sequence[int]) -> HDAddressPayload:
        """Encrypted derivation path to embed in the address for ``path``"""
        return pack_hd_address_attr(self.hd_passphrase, path)

    def path_of(self, payload: HDAddressPayload) -> Optional[List[int]]:
        """Derivation path of one of this wallet's addresses, or None"""
        return unpack_hd_address_attr(self.hd_passphrase, payload)
