"""A SHA-256 Merkle tree with authentication paths."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field

__all__ = ["MerkleProof", "MerkleTree", "verify_proof"]

_LEAF_PREFIX = b"\x00"
_NODE_PREFIX = b"\x01"
_EMPTY = bytes(32)


def _hash_leaf(leaf: bytes) -> bytes:
    return hashlib.sha256(_LEAF_PREFIX + leaf).digest()


def _hash_node(left: bytes, right: bytes) -> bytes:
    return hashlib.sha256(_NODE_PREFIX + left + right).digest()


@dataclass
class MerkleProof:
    """Sibling hashes from a leaf up to the root, and the leaf's position."""

    hashes: list[bytes] = field(default_factory=list)
    index: int = 0


class MerkleTree:
    """A binary hash tree over the given leaves, padded to a power of two."""

    def __init__(self, leaves: list[bytes]) -> None:
        if not leaves:
            raise ValueError("tree must have at least one leaf")
        self._leaves = [bytes(leaf) for leaf in leaves]
        width = 1
        while width < len(self._leaves):
            width *= 2
        level = [_hash_leaf(leaf) for leaf in self._leaves]
        level.extend([_EMPTY] * (width - len(level)))
        self._levels = [level]
        while len(level) > 1:
            level = [_hash_node(level[i], level[i + 1]) for i in range(0, len(level), 2)]
            self._levels.append(level)

    def root(self) -> bytes:
        """Return the root hash."""
        return self._levels[-1][0]

    def generate_proof(self, leaf: bytes) -> MerkleProof:
        """Return the authentication path of the first leaf equal to leaf."""
        try:
            position = self._leaves.index(bytes(leaf))
        except ValueError:
            raise ValueError("data not found in tree") from None
        hashes = []
        index = position
        for level in self._levels[:-1]:
            hashes.append(level[index ^ 1])
            index //= 2
        return MerkleProof(hashes=hashes, index=position)


def verify_proof(leaf: bytes, proof: MerkleProof, root: bytes) -> bool:
    """Check that leaf sits at proof.index in the tree with the given root."""
    if proof.index < 0:
        return False
    node = _hash_leaf(bytes(leaf))
    index = proof.index
    for sibling in proof.hashes:
        node = _hash_node(node, sibling) if index % 2 == 0 else _hash_node(sibling, node)
        index //= 2
    return index == 0 and node == bytes(root)