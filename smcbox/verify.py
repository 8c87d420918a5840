"""Server-side verification of a client's Ligero proof."""

from __future__ import annotations

from .chacha import rand_vector
from .encoding import to_byte_array
from .field import mod, mul_list
from .ligero import Claim, LigeroZK, _column_leaf, _fst_leaf, generate_hash
from .merkle import MerkleProof
from .merkle import verify_proof as verify_path
from .proof import OpenedColumn, Proof, Shares

__all__ = ["VerificationError", "verify_proof", "is_valid"]


class VerificationError(ValueError):
    """Raised when a proof does not pass one of the checks."""


def _check_fst_authpath(zk: LigeroZK, proof: Proof) -> None:
    if not proof.fst_authpath or not proof.fst_root:
        raise VerificationError("fst authpath or root cannot be empty")
    shares = proof.shares
    if any(not 0 <= index < len(proof.seeds) for index in shares.index):
        raise VerificationError("share index out of range")
    leaf = _fst_leaf(shares, proof.seeds)
    path = MerkleProof(hashes=list(proof.fst_authpath), index=shares.party_index)
    if not verify_path(leaf, path, proof.fst_root):
        raise VerificationError("failed to verify fst auth path")


def _check_column_indices(zk: LigeroZK, proof: Proof, h1: bytes) -> None:
    h2 = generate_hash(
        [
            h1,
            proof.fst_root,
            to_byte_array(proof.code_test),
            to_byte_array(proof.quadra_test),
            to_byte_array(proof.linear_test),
        ]
    )
    expected = rand_vector(h2, zk.n_open, zk.n_encode)
    if [col.index for col in proof.column_test] != expected:
        raise VerificationError("opened column's index is wrong")


def _check_opened_columns(columns: list[OpenedColumn], root: bytes) -> None:
    if not columns or not root:
        raise VerificationError("opened columns or root cannot be empty")
    for col in columns:
        leaf = _column_leaf(col.values, col.merkle_nonce)
        path = MerkleProof(hashes=list(col.authpath), index=col.index)
        if not verify_path(leaf, path, root):
            raise VerificationError("failed to verify the opened column")


def _check_code(zk: LigeroZK, q_code: list[int], randomness: list[int],
                columns: list[OpenedColumn]) -> None:
    x_samples = list(range(1, len(q_code) + 1))
    for col in columns:
        try:
            expected = zk.code_interpolator.evaluate(x_samples, q_code, col.index + 1)
        except ValueError as exc:
            raise VerificationError(
                "code test failed: x_samples and y_samples length are different"
            ) from exc
        try:
            combined = mul_list(randomness, col.values, zk.q)
        except ValueError as exc:
            raise VerificationError(
                "code test failed: inputs length are different so that "
                "multiplication cannot be done"
            ) from exc
        if expected != mod(combined + col.code_mask, zk.q):
            raise VerificationError("code test failed: failed to evaluate the opened column")


def _vanishes_at_secret_points(zk: LigeroZK, values: list[int]) -> bool:
    x_samples = list(range(1, len(values) + 1))
    return all(
        zk.interpolator.evaluate(x_samples, values, mod(-j - 1, zk.q)) == 0
        for j in range(zk.l)
    )


def _check_quadratic(zk: LigeroZK, q_quadra: list[int], randomness: list[int],
                     columns: list[OpenedColumn]) -> None:
    if not _vanishes_at_secret_points(zk, q_quadra):
        raise VerificationError("quadratic test failed: constraints are not satisfied")
    stride = 1 + zk.n_shares
    for col in columns:
        total = sum(r * v * (1 - v) for r, v in zip(randomness, col.values[::stride]))
        if q_quadra[col.index] != mod(total + col.quadra_mask, zk.q):
            raise VerificationError(
                "quadratic test failed: failed to evaluate the opened column"
            )


def _shares_match_columns(zk: LigeroZK, shares: Shares, key: list[int],
                          columns: list[OpenedColumn]) -> bool:
    claims = []
    for row in shares.values:
        if len(row) != len(shares.index):
            raise VerificationError("shares are malformed")
        full = [0] * zk.n_shares
        for index, value in zip(shares.index, row):
            full[index] = value
        claims.append(Claim(shares=full, secret=0))

    encoded = zk.encode_extended_witness(zk.prepare_extended_witness(claims), key)
    stride = 1 + zk.n_shares

    def matches(col: OpenedColumn) -> bool:
        return all(
            encoded[block + index + 1][col.index] == col.values[block + index + 1]
            for block in range(0, len(encoded), stride)
            for index in shares.index
        )

    return any(matches(col) for col in columns)


def _check_linear(zk: LigeroZK, proof: Proof, randomness: list[int]) -> None:
    if not _shares_match_columns(zk, proof.shares, proof.seeds, proof.column_test):
        raise VerificationError(
            "linear test failed: failed to evaluate shares with the opened columns"
        )
    q_linear = proof.linear_test
    if not _vanishes_at_secret_points(zk, q_linear):
        raise VerificationError("linear test failed: shares are not generated correctly")
    stride = 1 + zk.n_shares
    for col in proof.column_test:
        total = 0
        for r, block in zip(randomness, range(0, len(col.values), stride)):
            difference = col.values[block] - sum(col.values[block + 1:block + stride])
            total += difference * r
        if q_linear[col.index] != mod(total + col.linear_mask, zk.q):
            raise VerificationError("linear test failed: failed to evaluate the opened column")


def _verify(zk: LigeroZK, proof: Proof) -> None:
    _check_fst_authpath(zk, proof)

    h1 = generate_hash([proof.merkle_root])
    _check_column_indices(zk, proof, h1)
    _check_opened_columns(proof.column_test, proof.merkle_root)

    len1 = zk.m * (1 + zk.n_shares)
    len2 = zk.m
    len3 = zk.m
    random_vector = rand_vector(h1, len1 + len2 + len3, zk.q)

    _check_code(zk, proof.code_test, random_vector[:len1], proof.column_test)
    _check_quadratic(zk, proof.quadra_test, random_vector[len1:len1 + len2], proof.column_test)
    _check_linear(zk, proof, random_vector[len1 + len2:len1 + len2 + zk.m])


def verify_proof(zk: LigeroZK, proof: Proof) -> None:
    """Check a proof and the shares it carries; raise VerificationError if it fails."""
    try:
        _verify(zk, proof)
    except VerificationError:
        raise
    except (ValueError, IndexError, ZeroDivisionError) as exc:
        raise VerificationError(str(exc)) from exc


def is_valid(zk: LigeroZK, proof: Proof) -> bool:
    """Return whether the proof passes every check."""
    try:
        verify_proof(zk, proof)
    except VerificationError:
        return False
    return True