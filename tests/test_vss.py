"""Tests for publicly verifiable secret sharing."""

import dataclasses
import itertools

import pytest

from pos_crypto.binary import AsBinary, as_binary, from_binary, storage, wire
from pos_crypto.crypto.random import DeterministicRandom
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
    recover_secret,
    to_vss_public_key,
    verify_enc_share,
    verify_secret_proof,
    verify_share,
    vss_key_gen,
)
from pos_crypto.errors import MalformedEncoding


class TestVssKeys:
    def test_deterministic_key_gen(self):
        seed = b"sixteen byte seed"
        assert deterministic_vss_key_gen(seed) == deterministic_vss_key_gen(seed)
        assert deterministic_vss_key_gen(seed) != deterministic_vss_key_gen(seed + b"!")

    def test_rejects_short_seed(self):
        with pytest.raises(ValueError):
            deterministic_vss_key_gen(b"short")

    def test_random_keys_differ(self):
        rng = DeterministicRandom(b"vss keys")
        pks = {to_vss_public_key(vss_key_gen(rng)) for _ in range(5)}
        assert len(pks) == 5

    def test_key_pair_repr_hides_secret(self):
        kp = deterministic_vss_key_gen(b"sixteen byte seed")
        assert str(kp.secret) not in repr(kp)


class TestEncShares:
    def test_each_share_verifies_for_its_participant(self, ceremony):
        deal = ceremony["deal"]
        for pk, enc in zip(ceremony["pks"], deal.enc_shares):
            assert verify_enc_share(deal.extra, pk, enc) is True

    def test_share_for_another_participant_fails(self, ceremony):
        deal = ceremony["deal"]
        pks = ceremony["pks"]
        for i, j in itertools.permutations(range(len(pks)), 2):
            assert verify_enc_share(deal.extra, pks[i], deal.enc_shares[j]) is False

    def test_other_ceremony_extra_fails(self, ceremony, other_ceremony):
        enc = ceremony["deal"].enc_shares[0]
        assert verify_enc_share(other_ceremony["deal"].extra, ceremony["pks"][0], enc) is False

    def test_relabelled_index_fails(self, ceremony):
        deal = ceremony["deal"]
        enc = dataclasses.replace(deal.enc_shares[0], index=2)
        assert verify_enc_share(deal.extra, ceremony["pks"][0], enc) is False


class TestDecryptedShares:
    def test_decrypted_shares_verify(self, ceremony):
        for enc, pk, share in zip(
            ceremony["deal"].enc_shares, ceremony["pks"], ceremony["shares"]
        ):
            assert verify_share(enc, pk, share) is True

    def test_mismatched_share_fails(self, ceremony):
        encs = ceremony["deal"].enc_shares
        pks = ceremony["pks"]
        shares = ceremony["shares"]
        assert verify_share(encs[0], pks[0], shares[1]) is False
        assert verify_share(encs[1], pks[0], shares[1]) is False
        assert verify_share(encs[0], pks[1], shares[0]) is False

    def test_relabelled_share_fails(self, ceremony):
        encs = ceremony["deal"].enc_shares
        relabelled = dataclasses.replace(ceremony["shares"][1], index=encs[0].index)
        assert verify_share(encs[0], ceremony["pks"][0], relabelled) is False

    def test_other_ceremony_share_fails(self, ceremony, other_ceremony):
        enc = ceremony["deal"].enc_shares[0]
        share = other_ceremony["shares"][0]
        assert verify_share(enc, ceremony["pks"][0], share) is False

    def test_bogus_point_does_not_raise(self, ceremony):
        share = dataclasses.replace(ceremony["shares"][0], point=b"\xff" * 32)
        enc = ceremony["deal"].enc_shares[0]
        assert verify_share(enc, ceremony["pks"][0], share) is False


class TestSecretProof:
    def test_valid(self, ceremony):
        deal = ceremony["deal"]
        assert verify_secret_proof(deal.extra, deal.secret, deal.proof) is True

    def test_each_component_swapped(self, ceremony, other_ceremony):
        deal = ceremony["deal"]
        other = other_ceremony["deal"]
        assert verify_secret_proof(other.extra, deal.secret, deal.proof) is False
        assert verify_secret_proof(deal.extra, other.secret, deal.proof) is False
        assert verify_secret_proof(deal.extra, deal.secret, other.proof) is False


class TestRecoverSecret:
    def test_any_threshold_subset(self, ceremony):
        deal = ceremony["deal"]
        for subset in itertools.combinations(ceremony["shares"], ceremony["threshold"]):
            assert recover_secret(ceremony["threshold"], subset) == deal.secret

    def test_too_few_shares(self, ceremony):
        shares = ceremony["shares"]
        with pytest.raises(ValueError, match="distinct shares"):
            recover_secret(2, [shares[0]])
        with pytest.raises(ValueError):
            recover_secret(2, [shares[0], shares[0]])

    def test_threshold_one(self):
        kp = deterministic_vss_key_gen(b"single participant")
        pk = to_vss_public_key(kp)
        deal = gen_shared_secret(1, [pk], DeterministicRandom(b"solo"))
        share = decrypt_share(kp, deal.enc_shares[0])
        assert recover_secret(1, [share]) == deal.secret


class TestDealer:
    def test_threshold_recorded(self, ceremony):
        assert ceremony["deal"].extra.threshold == 2
        assert len(ceremony["deal"].enc_shares) == 3

    def test_indices_start_at_one(self, ceremony):
        assert [e.index for e in ceremony["deal"].enc_shares] == [1, 2, 3]

    def test_threshold_out_of_range(self, ceremony):
        with pytest.raises(ValueError, match="threshold"):
            gen_shared_secret(0, ceremony["pks"])
        with pytest.raises(ValueError, match="threshold"):
            gen_shared_secret(4, ceremony["pks"])

    def test_duplicate_participants(self, ceremony):
        pk = ceremony["pks"][0]
        with pytest.raises(ValueError, match="duplicate"):
            gen_shared_secret(1, [pk, pk])

    def test_deterministic_with_seeded_rng(self, ceremony):
        a = gen_shared_secret(2, ceremony["pks"], DeterministicRandom(b"same"))
        b = gen_shared_secret(2, ceremony["pks"], DeterministicRandom(b"same"))
        assert a == b


class TestAsBinary:
    def _values(self, ceremony):
        deal = ceremony["deal"]
        return [
            ceremony["pks"][0],
            deal.secret,
            deal.proof,
            deal.extra,
            deal.enc_shares[1],
            ceremony["shares"][2],
        ]

    def test_pack_unpack_isomorphism(self, ceremony):
        for value in self._values(ceremony):
            packed = as_binary(value)
            assert from_binary(packed, type(value)) == value
            assert as_binary(from_binary(packed, type(value))) == packed

    def test_codecs_use_packed_form(self, ceremony):
        for value in self._values(ceremony):
            packed = as_binary(value)
            assert wire.encode(value) == wire.encode(packed)
            assert storage.encode(value) == storage.encode(packed)
            assert wire.decode(wire.encode(value), type(value)) == value
            assert storage.decode(storage.encode(value), type(value)) == value
            assert wire.decode(wire.encode(packed), AsBinary[type(value)]) == packed

    def test_key_pair_packs_to_scalar(self):
        kp = deterministic_vss_key_gen(b"sixteen byte seed")
        assert VssKeyPair.unpack(kp.pack()) == kp
        with pytest.raises(MalformedEncoding):
            VssKeyPair.unpack(b"\x00" * 32)

    @pytest.mark.parametrize(
        "cls,data",
        [
            (VssPublicKey, b"\xff" * 32),
            (VssPublicKey, b"\x01" * 31),
            (Secret, b"\x00" * 32),
            (SecretProof, b"\xff" * 64),
            (SecretProof, b"\x00" * 63),
            (EncShare, b"\x00" * 100),
            (Share, b"\x00\x00\x00\x01" + b"\xff" * 96),
            (SecretSharingExtra, b""),
        ],
    )
    def test_unpack_rejects_garbage(self, cls, data):
        with pytest.raises(MalformedEncoding):
            from_binary(AsBinary(data), cls)

    def test_extra_with_wrong_commitment_count(self, ceremony):
        data = bytearray(as_binary(ceremony["deal"].extra).data)
        data[35] += 1
        with pytest.raises(MalformedEncoding):
            from_binary(AsBinary(bytes(data)), SecretSharingExtra)
