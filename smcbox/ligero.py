"""Ligero-style zero-knowledge proofs that a client's inputs are bits, shared correctly."""

from __future__ import annotations

import hashlib
import secrets as _secrets
from dataclasses import dataclass, field
from math import ceil, comb

from .chacha import CryptoRandSource, rand_vector
from .encoding import column_to_string, to_byte_array, to_columnwise
from .field import Interpolator, add_matrix, mul_matrix
from .merkle import MerkleTree
from .packed import PackedSecretSharing
from .proof import OpenedColumn, Proof, Shares
from .rss import ReplicatedSecretSharing

__all__ = ["Claim", "LigeroZK", "generate_seeds", "generate_hash"]


@dataclass
class Claim:
    """A secret together with its full list of replicated shares."""

    shares: list[int] = field(default_factory=list)
    secret: int = 0


def generate_seeds(size: int, q: int) -> list[int]:
    """Return size distinct random numbers below q."""
    if size > q:
        raise ValueError("cannot draw more distinct seeds than the modulus allows")
    seen: set[int] = set()
    seeds = []
    while len(seeds) < size:
        value = _secrets.randbelow(q)
        if value not in seen:
            seen.add(value)
            seeds.append(value)
    return seeds


def generate_hash(parts: list[bytes]) -> bytes:
    """Return the SHA-256 digest of the concatenated parts."""
    if not parts:
        raise ValueError("input of hash function could not be empty")
    return hashlib.sha256(b"".join(bytes(p) for p in parts)).digest()


def _column_leaf(values: list[int], nonce: int) -> bytes:
    """Merkle leaf for a column: zero padding, the column values, then the nonce."""
    padded = [0] * (len(values) + 1) + list(values) + [nonce]
    return column_to_string(padded).encode("ascii")


def _fst_leaf(shares: Shares, seeds: list[int]) -> bytes:
    """Leaf committing to one party's share values and the seeds of its share indices."""
    values = [value for row in shares.values for value in row]
    values.extend(seeds[index] for index in shares.index)
    return to_byte_array(values)


class LigeroZK:
    """Prover for inputs that are bits and whose replicated shares sum to them."""

    def __init__(self, n_secret: int, m: int, n_server: int, t: int, q: int, n_open: int) -> None:
        if m <= 0:
            raise ValueError("m cannot be less than 1")
        if m > n_secret:
            raise ValueError("m cannot be larger than n_secrets")
        if 3 * t + 1 > n_server:
            raise ValueError("n_server cannot be less than 3t+1")
        if n_open <= 0:
            raise ValueError("n_open cannot be less than 1")

        self.n_secret = n_secret
        self.m = m
        self.n_server = n_server
        self.t = t
        self.q = q
        self.n_open = n_open
        self.n_shares = comb(n_server, t)
        self.l = ceil(n_secret / m)
        self.n_encode = 6 * n_open + 6 * self.l + 1
        self.pss = PackedSecretSharing(self.n_encode, n_open, self.l, q)
        self.interpolator = Interpolator(q)
        self.code_interpolator = Interpolator(q)

    @property
    def _stride(self) -> int:
        return 1 + self.n_shares

    def generate_proof(self, secrets: list[int]) -> list[Proof]:
        """Share the secrets and return one proof per server."""
        claims, party_shares = self.preprocess(secrets)
        witness = self.prepare_extended_witness(claims)

        seed0 = generate_seeds(self.n_shares + 1, self.q)
        encoded = self.encode_extended_witness(witness, seed0)
        columns = to_columnwise(encoded)

        tree, leaves, nonces = self.commit_columns(columns)
        root = tree.root()

        len1 = self.m * self._stride
        len2 = self.m
        len3 = self.m
        h1 = generate_hash([root])
        random_vector = rand_vector(h1, len1 + len2 + len3, self.q)

        code_mask = self.generate_mask(generate_seeds(self.l, self.q))
        q_code = self.code_proof(encoded, random_vector[:len1], code_mask)

        quadra_mask = self.generate_mask([0] * self.l)
        q_quadra = self.quadratic_proof(encoded, random_vector[len1:len1 + len2], quadra_mask)

        linear_mask = self.generate_mask([0] * self.l)
        q_linear = self.linear_proof(encoded, random_vector[len1 + len2:], linear_mask)

        fst_leaves = [_fst_leaf(shares, seed0) for shares in party_shares]
        fst_tree = MerkleTree(fst_leaves)
        fst_root = fst_tree.root()

        h2 = generate_hash(
            [h1, fst_root, to_byte_array(q_code), to_byte_array(q_quadra), to_byte_array(q_linear)]
        )
        opened = rand_vector(h2, self.n_open, len(leaves))
        column_test = [
            OpenedColumn(
                values=list(columns[index]),
                authpath=tree.generate_proof(leaves[index]).hashes,
                index=index,
                merkle_nonce=nonces[index],
                code_mask=code_mask[index],
                quadra_mask=quadra_mask[index],
                linear_mask=linear_mask[index],
            )
            for index in opened
        ]

        return [
            Proof(
                merkle_root=root,
                column_test=list(column_test),
                code_test=list(q_code),
                quadra_test=list(q_quadra),
                linear_test=list(q_linear),
                shares=shares,
                seeds=list(seed0),
                fst_root=fst_root,
                fst_authpath=fst_tree.generate_proof(leaf).hashes,
            )
            for shares, leaf in zip(party_shares, fst_leaves)
        ]

    def preprocess(self, secrets: list[int]) -> tuple[list[Claim], list[Shares]]:
        """Split each secret with replicated sharing; return claims and per-party shares."""
        if not secrets or len(secrets) != self.n_secret:
            raise ValueError("Invalid input when generating proof: wrong number of secrets")

        rss = ReplicatedSecretSharing(self.n_server, self.t, self.q)
        claims = []
        party_shares = [Shares(party_index=j) for j in range(self.n_server)]
        for secret in secrets:
            share_list, parties = rss.split(secret)
            claims.append(Claim(shares=share_list, secret=secret))
            for shares, held in zip(party_shares, parties):
                shares.index = [share.index for share in held]
                shares.values.append([share.value for share in held])
        return claims, party_shares

    def prepare_extended_witness(self, claims: list[Claim]) -> list[list[int]]:
        """Arrange secrets and their shares into a matrix of m blocks of 1 + n_shares rows."""
        if not claims:
            raise ValueError("Invalid claims: claims are empty")
        if len(claims[0].shares) != self.n_shares:
            raise ValueError("Invalid input: Number of shares of each claim is not correct")
        if self.m > len(claims):
            raise ValueError("Invalid input: Number of claims must equal or larger than m")
        if self.m * self.l > len(claims):
            raise ValueError("Invalid input: not enough claims to fill the witness")

        matrix: list[list[int]] = []
        for block in range(self.m):
            block_claims = claims[block * self.l:(block + 1) * self.l]
            matrix.append([claim.secret for claim in block_claims])
            matrix.extend(list(row) for row in zip(*(claim.shares for claim in block_claims)))
        return matrix

    def encode_extended_witness(self, witness: list[list[int]], key: list[int]) -> list[list[int]]:
        """Encode each witness row with packed sharing, randomness derived from key."""
        if not witness:
            raise ValueError("Invalid input: Input is empty")
        if len(witness) != self.m * self._stride or len(witness[0]) != self.l:
            raise ValueError("Invalid input")
        if len(key) < self._stride:
            raise ValueError("Invalid input: key is too short")

        source = CryptoRandSource()
        encoded = []
        for i, row in enumerate(witness):
            source.seed(key[i % self._stride], i // self._stride)
            seed = source.int63(self.q)
            encoded.append([share.value for share in self.pss.split(row, seed)])
        return encoded

    def commit_columns(self, columns: list[list[int]]) -> tuple[MerkleTree, list[bytes], list[int]]:
        """Commit to the columns in a Merkle tree; return the tree, its leaves and nonces."""
        if not columns:
            raise ValueError("Invalid input: Input is empty")
        nonces = generate_seeds(len(columns), self.q)
        leaves = [_column_leaf(column, nonce) for column, nonce in zip(columns, nonces)]
        return MerkleTree(leaves), leaves, nonces

    def _check_encoded(self, encoded: list[list[int]]) -> None:
        if not encoded:
            raise ValueError("Invalid input: Input is empty")
        if len(encoded) != self.m * self._stride or len(encoded[0]) != self.n_encode:
            raise ValueError("Invalid input")

    def code_proof(self, encoded: list[list[int]], randomness: list[int], mask: list[int]) -> list[int]:
        """Random combination of the encoded rows plus mask, truncated to n_open + l values."""
        self._check_encoded(encoded)
        combined = mul_matrix([list(randomness)], encoded, self.q)
        q_code = add_matrix(combined, [list(mask)], self.q)
        if len(q_code) != 1:
            raise ValueError("Invalid q_code")
        return q_code[0][:self.n_open + self.l]

    def quadratic_proof(self, encoded: list[list[int]], randomness: list[int], mask: list[int]) -> list[int]:
        """Masked random combination of x*(1-x) over the secret rows; zero at bits."""
        self._check_encoded(encoded)
        secret_rows = encoded[::self._stride]
        result = [0] * self.n_encode
        for r, row in zip(randomness, secret_rows):
            for col, x in enumerate(row):
                result[col] += r * x * (1 - x)
        return [(value + m) % self.q for value, m in zip(result, mask)]

    def linear_proof(self, encoded: list[list[int]], randomness: list[int], mask: list[int]) -> list[int]:
        """Masked random combination of secret minus the sum of its shares."""
        self._check_encoded(encoded)
        result = [0] * self.n_encode
        for block, r in zip(range(0, len(encoded), self._stride), randomness):
            secret_row = encoded[block]
            share_rows = encoded[block + 1:block + self._stride]
            for col, value in enumerate(secret_row):
                difference = value - sum(row[col] for row in share_rows)
                result[col] += difference * r
        return [(value + m) % self.q for value, m in zip(result, mask)]

    def generate_mask(self, seeds: list[int]) -> list[int]:
        """Encode the seeds with packed sharing and return the n_encode share values."""
        return [share.value for share in self.pss.split(list(seeds), 1)]