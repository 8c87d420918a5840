"""Replicated secret sharing with majority-vote reconstruction."""

from __future__ import annotations

import secrets as _secrets
from collections import Counter, defaultdict
from itertools import combinations
from math import comb

from .field import Share, is_prime, mod

__all__ = ["ReconstructionError", "ReplicatedSecretSharing", "find_majority"]


class ReconstructionError(ValueError):
    """Raised when a secret cannot be recovered from the given shares."""


def find_majority(values: list[int], t: int) -> int:
    """Return the most frequent value if it occurs at least t + 1 times."""
    if values:
        # Counter keeps first-seen order, so ties go to the earliest value.
        value, count = Counter(values).most_common(1)[0]
        if count >= t + 1:
            return value
    raise ReconstructionError("reconstruct failed: no majority element")


class ReplicatedSecretSharing:
    """Additive sharing into C(n, t) shares; each party misses the shares of one t-subset."""

    def __init__(self, n: int, t: int, q: int) -> None:
        if t > n:
            raise ValueError("n cannot be less than t")
        if not is_prime(q):
            raise ValueError("q must be a prime number")
        self.n = n
        self.t = t
        self.q = q

    @property
    def share_count(self) -> int:
        """Total number of additive shares a secret is split into."""
        return comb(self.n, self.t)

    def split(self, secret: int) -> tuple[list[int], list[list[Share]]]:
        """Split a secret; return all shares and the share list held by each party."""
        count = self.share_count
        shares = [_secrets.randbelow(self.q) for _ in range(count - 1)]
        shares.append(mod(secret - sum(shares), self.q))

        parties: list[list[Share]] = [[] for _ in range(self.n)]
        for index, (subset, value) in enumerate(
            zip(combinations(range(self.n), self.t), shares)
        ):
            excluded = set(subset)
            for party in range(self.n):
                if party not in excluded:
                    parties[party].append(Share(index=index, value=value))
        return shares, parties

    def reconstruct(self, parties: list[list[Share]]) -> int:
        """Recover the secret, taking for each share the value most parties agree on."""
        mapping: dict[int, list[int]] = defaultdict(list)
        for party in parties:
            for share in party:
                mapping[share.index].append(share.value)

        if len(mapping) != self.share_count:
            raise ReconstructionError("reconstruct failed: missing shares")

        total = sum(find_majority(values, self.t) for values in mapping.values())
        return mod(total, self.q)