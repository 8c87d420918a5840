"""Packed Shamir secret sharing: k secrets shared together into n shares."""

from __future__ import annotations

from .chacha import CryptoRandSource
from .field import Interpolator, Share, is_prime, mod

__all__ = ["PackedSecretSharing"]


class PackedSecretSharing:
    """Share k secrets at once; any t shares reveal nothing, t + k reconstruct."""

    def __init__(self, n: int, t: int, k: int, q: int) -> None:
        if t + k > n:
            raise ValueError("n cannot be less than t+k")
        if k < 1:
            raise ValueError("k must be at least 1")
        if not is_prime(q):
            raise ValueError("q must be a prime number")
        self.n = n
        self.t = t
        self.k = k
        self.q = q
        self._interpolator = Interpolator(q)

    def _sample_polynomial(self, secrets: list[int], seed: int) -> tuple[list[int], list[int]]:
        x_samples = [mod(-i - 1, self.q) for i in range(self.k + self.t)]
        source = CryptoRandSource()
        source.seed_raw(seed)
        randomness = [source.random63() % self.q for _ in range(self.t)]
        return x_samples, list(secrets) + randomness

    def split(self, secrets: list[int], seed: int) -> list[Share]:
        """Split k secrets into n shares; the seed fixes the random coefficients."""
        if not secrets:
            raise ValueError("cannot split an empty secret")
        if len(secrets) != self.k:
            raise ValueError(f"expected {self.k} secrets, got {len(secrets)}")
        x_samples, y_samples = self._sample_polynomial(secrets, seed)
        return [
            Share(index=x, value=self._interpolator.evaluate(x_samples, y_samples, x))
            for x in range(1, self.n + 1)
        ]

    def reconstruct(self, parts: list[Share]) -> list[int]:
        """Recover the k secrets from at least t + k and at most n shares."""
        if len(parts) < self.t + self.k:
            raise ValueError("cannot reconstruct, as number of shares less than t+k")
        if len(parts) > self.n:
            raise ValueError("cannot reconstruct, as number of shares more than n")
        x_samples = [part.index for part in parts]
        y_samples = [part.value for part in parts]
        return [
            self._interpolator.evaluate(x_samples, y_samples, mod(-i - 1, self.q))
            for i in range(self.k)
        ]