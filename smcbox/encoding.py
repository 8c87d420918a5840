"""Conversions between matrices, columns and their fixed-width binary text form."""

from __future__ import annotations

from typing import TypeVar

__all__ = ["to_columnwise", "column_to_string", "shares_to_columnwise", "to_byte_array"]

T = TypeVar("T")


def _transpose(matrix: list[list[T]], what: str) -> list[list[T]]:
    if not matrix:
        raise ValueError(f"{what} cannot be empty")
    return [list(column) for column in zip(*matrix)]


def to_columnwise(matrix: list[list[int]]) -> list[list[int]]:
    """Return the transpose of a matrix."""
    return _transpose(matrix, "matrix")


def shares_to_columnwise(shares: list[list[T]]) -> list[list[T]]:
    """Return the transpose of a matrix of shares."""
    return _transpose(shares, "shares")


def _binary(values: list[int]) -> str:
    return "".join(f"{value:064b}" for value in values)


def column_to_string(values: list[int]) -> str:
    """Concatenate each value written as 64 binary digits."""
    if not values:
        raise ValueError("list cannot be empty")
    return _binary(values)


def to_byte_array(values: list[int]) -> bytes:
    """Return the 64-digit binary text of each value, concatenated, as bytes."""
    if not values:
        raise ValueError("cannot convert empty integer array to byte array")
    return _binary(values).encode("ascii")