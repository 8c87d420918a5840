from dataclasses import replace

import pytest

from smcbox.ligero import LigeroZK
from smcbox.proof import Shares
from smcbox.verify import VerificationError, is_valid, verify_proof


@pytest.fixture(scope="module")
def zk():
    return LigeroZK(3, 1, 6, 1, 10631, 3)


@pytest.fixture(scope="module")
def proofs(zk):
    return zk.generate_proof([1, 0, 1])


def test_every_party_proof_verifies(zk, proofs):
    assert len(proofs) == 6
    assert [is_valid(zk, proof) for proof in proofs] == [True] * 6


def test_verify_proof_returns_for_honest_proof(zk, proofs):
    assert verify_proof(zk, proofs[3]) is None
    assert is_valid(zk, proofs[3])


def test_zeroed_code_test_is_rejected(zk, proofs):
    malicious = replace(proofs[0], code_test=[0] * len(proofs[0].code_test))
    with pytest.raises(VerificationError):
        verify_proof(zk, malicious)
    assert is_valid(zk, malicious) is False


def test_non_bit_input_fails_quadratic_test(zk):
    bad = zk.generate_proof([2, 0, 1])
    with pytest.raises(VerificationError, match="quadratic test failed"):
        verify_proof(zk, bad[0])


def test_tampered_share_values_fail_fst_path(zk, proofs):
    original = proofs[1].shares
    tampered = Shares(
        index=list(original.index),
        values=[[(v + 1) % zk.q for v in row] for row in original.values],
        party_index=original.party_index,
    )
    with pytest.raises(VerificationError, match="fst auth path"):
        verify_proof(zk, replace(proofs[1], shares=tampered))


def test_wrong_party_index_is_rejected(zk, proofs):
    original = proofs[2].shares
    moved = Shares(index=list(original.index), values=original.values, party_index=3)
    assert is_valid(zk, replace(proofs[2], shares=moved)) is False


def test_empty_fst_authpath_is_rejected(zk, proofs):
    with pytest.raises(VerificationError, match="cannot be empty"):
        verify_proof(zk, replace(proofs[0], fst_authpath=[]))


def test_tampered_opened_column_fails_merkle_check(zk, proofs):
    first = proofs[0].column_test[0]
    changed = replace(first, values=[(first.values[0] + 1) % zk.q] + first.values[1:])
    columns = [changed] + proofs[0].column_test[1:]
    with pytest.raises(VerificationError, match="opened column"):
        verify_proof(zk, replace(proofs[0], column_test=columns))


def test_reordered_columns_fail_index_check(zk, proofs):
    columns = list(reversed(proofs[0].column_test))
    with pytest.raises(VerificationError, match="index is wrong"):
        verify_proof(zk, replace(proofs[0], column_test=columns))