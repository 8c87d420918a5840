"""Deterministic pseudorandom numbers from the XChaCha20 keystream."""

from __future__ import annotations

import hashlib

from Crypto.Cipher import ChaCha20

__all__ = ["CryptoRandSource", "rand_vector"]

_UINT64_MASK = (1 << 64) - 1
_INT63_MASK = (1 << 63) - 1
_NONCE = bytes(24)


class CryptoRandSource:
    """A seeded, repeatable source of 63-bit random numbers."""

    def __init__(self) -> None:
        self._cipher = None

    def seed(self, *args: int | str | bytes) -> None:
        """Seed from ints (8 bytes big-endian), strings and bytes, hashed with SHA-256."""
        parts = []
        for value in args:
            if isinstance(value, int):
                parts.append((value & _UINT64_MASK).to_bytes(8, "big"))
            elif isinstance(value, str):
                parts.append(value.encode("utf-8"))
            elif isinstance(value, (bytes, bytearray)):
                parts.append(bytes(value))
            else:
                raise TypeError("unsupported seed type")
        key = hashlib.sha256(b"".join(parts)).digest()
        self._cipher = ChaCha20.new(key=key, nonce=_NONCE)

    def seed_raw(self, value: int) -> None:
        """Seed with a key whose first 8 bytes are value, big-endian, the rest zero."""
        key = (value & _UINT64_MASK).to_bytes(8, "big") + bytes(24)
        self._cipher = ChaCha20.new(key=key, nonce=_NONCE)

    def random63(self) -> int:
        """Return the next non-negative 63-bit number from the keystream."""
        if self._cipher is None:
            raise RuntimeError("crypto seed not set")
        block = self._cipher.encrypt(bytes(8))
        return int.from_bytes(block, "little") & _INT63_MASK

    def int63(self, q: int) -> int:
        """Return the next number reduced modulo q."""
        return self.random63() % q


def rand_vector(seed: bytes, length: int, q: int) -> list[int]:
    """Return length distinct numbers below q derived from seed."""
    if length > q:
        raise ValueError("cannot draw more distinct values than the modulus allows")
    source = CryptoRandSource()
    source.seed(seed)
    seen: set[int] = set()
    result = []
    while len(result) < length:
        number = source.int63(q)
        if number not in seen:
            seen.add(number)
            result.append(number)
    return result