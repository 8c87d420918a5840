"""The proof a client sends to each server, and its JSON form."""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import Any

__all__ = ["Shares", "OpenedColumn", "Proof", "proof_size"]


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _unb64(text: str | None) -> bytes:
    return base64.b64decode(text) if text else b""


def _ints(values: Any) -> list[int]:
    return [int(v) for v in values or []]


@dataclass
class Shares:
    """One party's replicated shares: share indices and, per secret, their values."""

    index: list[int] = field(default_factory=list)
    values: list[list[int]] = field(default_factory=list)
    party_index: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "Index": list(self.index),
            "Values": [list(row) for row in self.values],
            "PartyIndex": self.party_index,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Shares:
        return cls(
            index=_ints(data.get("Index")),
            values=[_ints(row) for row in data.get("Values") or []],
            party_index=int(data.get("PartyIndex", 0)),
        )


@dataclass
class OpenedColumn:
    """A column of the encoded witness opened for checking, with its masks and path."""

    values: list[int] = field(default_factory=list)
    authpath: list[bytes] = field(default_factory=list)
    index: int = 0
    merkle_nonce: int = 0
    code_mask: int = 0
    linear_mask: int = 0
    quadra_mask: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "List": list(self.values),
            "Authpath": [_b64(h) for h in self.authpath],
            "Col_index": self.index,
            "Merkle_nonce": self.merkle_nonce,
            "Code_mask": self.code_mask,
            "Linear_mask": self.linear_mask,
            "Quadra_mask": self.quadra_mask,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OpenedColumn:
        return cls(
            values=_ints(data.get("List")),
            authpath=[_unb64(h) for h in data.get("Authpath") or []],
            index=int(data.get("Col_index", 0)),
            merkle_nonce=int(data.get("Merkle_nonce", 0)),
            code_mask=int(data.get("Code_mask", 0)),
            linear_mask=int(data.get("Linear_mask", 0)),
            quadra_mask=int(data.get("Quadra_mask", 0)),
        )


@dataclass
class Proof:
    """Everything a server needs to check a client's input and its own shares."""

    merkle_root: bytes = b""
    column_test: list[OpenedColumn] = field(default_factory=list)
    code_test: list[int] = field(default_factory=list)
    quadra_test: list[int] = field(default_factory=list)
    linear_test: list[int] = field(default_factory=list)
    shares: Shares = field(default_factory=Shares)
    seeds: list[int] = field(default_factory=list)
    fst_root: bytes = b""
    fst_authpath: list[bytes] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "MerkleRoot": _b64(self.merkle_root),
            "ColumnTest": [col.to_dict() for col in self.column_test],
            "CodeTest": list(self.code_test),
            "QuadraTest": list(self.quadra_test),
            "LinearTest": list(self.linear_test),
            "Shares": self.shares.to_dict(),
            "Seeds": list(self.seeds),
            "FST_root": _b64(self.fst_root),
            "FST_authpath": [_b64(h) for h in self.fst_authpath],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Proof:
        return cls(
            merkle_root=_unb64(data.get("MerkleRoot")),
            column_test=[OpenedColumn.from_dict(c) for c in data.get("ColumnTest") or []],
            code_test=_ints(data.get("CodeTest")),
            quadra_test=_ints(data.get("QuadraTest")),
            linear_test=_ints(data.get("LinearTest")),
            shares=Shares.from_dict(data.get("Shares") or {}),
            seeds=_ints(data.get("Seeds")),
            fst_root=_unb64(data.get("FST_root")),
            fst_authpath=[_unb64(h) for h in data.get("FST_authpath") or []],
        )


def _path_size(path: list[bytes]) -> int:
    return len(path) * len(path[0]) if path else 0


def proof_size(proof: Proof) -> tuple[int, int]:
    """Return the theoretical sizes in bytes of the proof and of the input shares."""
    if not proof.column_test:
        raise ValueError("proof has no opened columns")
    first = proof.column_test[0]
    column_size = len(proof.column_test) * (
        5 + len(first.values) * 8 + _path_size(first.authpath)
    )
    shares = proof.shares
    shares_size = len(shares.values) * 8 * len(shares.index) + len(shares.index) * 8 + 8
    size = (
        (len(proof.code_test) + len(proof.quadra_test) + len(proof.linear_test) + len(proof.seeds))
        * 8
        + len(proof.merkle_root)
        + len(proof.fst_root)
        + _path_size(proof.fst_authpath)
        + column_size
    )
    return size, shares_size