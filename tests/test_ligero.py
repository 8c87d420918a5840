import hashlib

import pytest

from smcbox.encoding import to_byte_array, to_columnwise
from smcbox.field import Interpolator, Share, mod
from smcbox.ligero import Claim, LigeroZK, generate_hash, generate_seeds
from smcbox.merkle import MerkleProof, verify_proof
from smcbox.rss import ReplicatedSecretSharing

Q = 10631


@pytest.fixture
def zk():
    return LigeroZK(3, 1, 6, 1, Q, 3)


def _encoded_witness(zk, secrets):
    claims, _ = zk.preprocess(secrets)
    witness = zk.prepare_extended_witness(claims)
    key = generate_seeds(zk.n_shares + 1, zk.q)
    return witness, zk.encode_extended_witness(witness, key)


def test_generate_merkletree():
    zk = LigeroZK(3, 1, 6, 1, 41, 3)
    columns = to_columnwise([[1, 2, 3], [4, 5, 6], [7, 8, 9]])
    tree, leaves, nonces = zk.commit_columns(columns)
    root = tree.root()
    assert len(leaves) == 3
    assert len(set(nonces)) == 3
    for leaf in leaves:
        proof = tree.generate_proof(leaf)
        assert verify_proof(leaf, proof, root)


@pytest.mark.parametrize(
    "args",
    [
        (3, 0, 6, 1, Q, 3),
        (3, 4, 6, 1, Q, 3),
        (3, 1, 3, 1, Q, 3),
        (3, 1, 6, 1, Q, 0),
        (3, 1, 6, 1, 10630, 3),
    ],
)
def test_constructor_rejects_bad_parameters(args):
    with pytest.raises(ValueError):
        LigeroZK(*args)


def test_constructor_dimensions():
    zk = LigeroZK(5, 2, 6, 1, Q, 3)
    assert zk.l == 3
    assert zk.n_shares == 6


def test_preprocess_shares_reconstruct_secrets(zk):
    secrets = [1, 0, 1]
    claims, party_shares = zk.preprocess(secrets)
    assert [claim.secret for claim in claims] == secrets
    assert [shares.party_index for shares in party_shares] == list(range(6))
    rss = ReplicatedSecretSharing(6, 1, Q)
    for i, secret in enumerate(secrets):
        parties = [
            [Share(index, values) for index, values in zip(s.index, s.values[i])]
            for s in party_shares
        ]
        assert rss.reconstruct(parties) == secret
    for claim, secret in zip(claims, secrets):
        assert sum(claim.shares) % Q == secret


def test_preprocess_wrong_number_of_secrets(zk):
    with pytest.raises(ValueError):
        zk.preprocess([1, 0])
    with pytest.raises(ValueError):
        zk.preprocess([])


def test_prepare_extended_witness_layout(zk):
    claims, _ = zk.preprocess([1, 0, 1])
    witness = zk.prepare_extended_witness(claims)
    assert len(witness) == 1 + zk.n_shares
    assert witness[0] == [1, 0, 1]
    for j, claim in enumerate(claims):
        assert [row[j] for row in witness[1:]] == claim.shares


def test_prepare_extended_witness_errors(zk):
    with pytest.raises(ValueError):
        zk.prepare_extended_witness([])
    with pytest.raises(ValueError):
        zk.prepare_extended_witness([Claim(shares=[1, 2], secret=1)] * 3)
    good = Claim(shares=[0] * zk.n_shares, secret=0)
    with pytest.raises(ValueError):
        zk.prepare_extended_witness([good, good])


def test_encode_rows_reconstruct_to_witness(zk):
    witness, encoded = _encoded_witness(zk, [1, 0, 1])
    assert len(encoded) == len(witness)
    for row, encoded_row in zip(witness, encoded):
        assert len(encoded_row) == zk.n_encode
        parts = [Share(i + 1, v) for i, v in enumerate(encoded_row)]
        assert zk.pss.reconstruct(parts) == row


def test_encode_is_deterministic_for_key(zk):
    claims, _ = zk.preprocess([0, 1, 1])
    witness = zk.prepare_extended_witness(claims)
    key = generate_seeds(zk.n_shares + 1, Q)
    first = zk.encode_extended_witness(witness, key)
    other = LigeroZK(3, 1, 6, 1, Q, 3)
    second = other.encode_extended_witness(witness, key)
    assert first == second
    assert len(first) == len(witness)
    for row, encoded_row in zip(witness, first):
        parts = [Share(i + 1, v) for i, v in enumerate(encoded_row)]
        assert zk.pss.reconstruct(parts) == row


def test_encode_rejects_bad_shape(zk):
    with pytest.raises(ValueError):
        zk.encode_extended_witness([], [1] * 7)
    with pytest.raises(ValueError):
        zk.encode_extended_witness([[1, 2, 3]], [1] * 7)


def test_generate_mask_encodes_seeds(zk):
    seeds = [5, 17, 400]
    mask = zk.generate_mask(seeds)
    assert len(mask) == zk.n_encode
    assert zk.pss.reconstruct([Share(i + 1, v) for i, v in enumerate(mask)]) == seeds


def test_quadratic_proof_vanishes_for_bits(zk):
    _, encoded = _encoded_witness(zk, [1, 0, 1])
    mask = zk.generate_mask([0] * zk.l)
    result = zk.quadratic_proof(encoded, [7], mask)
    assert len(result) == zk.n_encode
    interp = Interpolator(Q)
    xs = list(range(1, zk.n_encode + 1))
    assert [interp.evaluate(xs, result, mod(-j - 1, Q)) for j in range(zk.l)] == [0, 0, 0]


def test_linear_proof_vanishes_for_correct_shares(zk):
    _, encoded = _encoded_witness(zk, [0, 1, 1])
    mask = zk.generate_mask([0] * zk.l)
    result = zk.linear_proof(encoded, [123], mask)
    interp = Interpolator(Q)
    xs = list(range(1, zk.n_encode + 1))
    assert [interp.evaluate(xs, result, mod(-j - 1, Q)) for j in range(zk.l)] == [0, 0, 0]


def test_code_proof_length_and_shape_check(zk):
    _, encoded = _encoded_witness(zk, [1, 1, 0])
    mask = zk.generate_mask([1, 2, 3])
    randomness = list(range(1, len(encoded) + 1))
    result = zk.code_proof(encoded, randomness, mask)
    assert len(result) == zk.n_open + zk.l
    assert all(0 <= v < Q for v in result)
    with pytest.raises(ValueError):
        zk.code_proof(encoded[:-1], randomness, mask)


def test_generate_proof_structure(zk):
    secrets = [1, 0, 1]
    proofs = zk.generate_proof(secrets)
    assert len(proofs) == zk.n_server
    assert [p.shares.party_index for p in proofs] == list(range(zk.n_server))
    first = proofs[0]
    assert all(p.merkle_root == first.merkle_root for p in proofs)
    assert all(p.fst_root == first.fst_root for p in proofs)
    assert len(first.column_test) == zk.n_open
    indices = [col.index for col in first.column_test]
    assert len(set(indices)) == zk.n_open
    assert all(0 <= i < zk.n_encode for i in indices)
    assert len(first.code_test) == zk.n_open + zk.l
    assert len(first.quadra_test) == zk.n_encode
    assert len(first.linear_test) == zk.n_encode
    assert len(set(first.seeds)) == zk.n_shares + 1


def test_generate_proof_fst_paths_verify(zk):
    proofs = zk.generate_proof([0, 1, 1])
    for proof in proofs:
        values = [v for row in proof.shares.values for v in row]
        values.extend(proof.seeds[i] for i in proof.shares.index)
        leaf = to_byte_array(values)
        path = MerkleProof(hashes=proof.fst_authpath, index=proof.shares.party_index)
        assert verify_proof(leaf, path, proof.fst_root)


def test_generate_proof_shares_reconstruct(zk):
    secrets = [1, 1, 0]
    proofs = zk.generate_proof(secrets)
    rss = ReplicatedSecretSharing(6, 1, Q)
    for i, secret in enumerate(secrets):
        parties = [
            [Share(idx, v) for idx, v in zip(p.shares.index, p.shares.values[i])]
            for p in proofs
        ]
        assert rss.reconstruct(parties) == secret


def test_generate_proof_rejects_wrong_length(zk):
    with pytest.raises(ValueError):
        zk.generate_proof([1, 0])


def test_generate_seeds_distinct_and_bounded():
    seeds = generate_seeds(20, 41)
    assert len(seeds) == 20
    assert len(set(seeds)) == 20
    assert all(0 <= s < 41 for s in seeds)
    with pytest.raises(ValueError):
        generate_seeds(42, 41)


def test_generate_hash():
    assert generate_hash([b"a", b"b"]) == hashlib.sha256(b"ab").digest()
    with pytest.raises(ValueError):
        generate_hash([])