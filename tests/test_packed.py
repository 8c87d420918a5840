import itertools

import pytest

from smcbox.field import Share
from smcbox.packed import PackedSecretSharing

Q = 10631


def test_split_gives_n_indexed_shares():
    pss = PackedSecretSharing(7, 2, 3, Q)
    shares = pss.split([1, 0, 1], 99)
    assert [s.index for s in shares] == list(range(1, 8))
    assert all(0 <= s.value < Q for s in shares)


def test_round_trip_all_shares():
    pss = PackedSecretSharing(7, 2, 3, Q)
    secrets = [5, 17, 10000]
    assert pss.reconstruct(pss.split(secrets, 12345)) == secrets


def test_any_minimal_subset_reconstructs():
    pss = PackedSecretSharing(6, 2, 2, Q)
    secrets = [3, 4]
    shares = pss.split(secrets, 7)
    for subset in itertools.combinations(shares, 4):
        assert pss.reconstruct(list(subset)) == secrets


def test_split_is_deterministic_for_seed():
    first = PackedSecretSharing(7, 2, 3, Q).split([1, 2, 3], 5)
    second = PackedSecretSharing(7, 2, 3, Q).split([1, 2, 3], 5)
    assert [s.value for s in first] == [s.value for s in second]
    assert [s.index for s in first] == list(range(1, 8))
    assert PackedSecretSharing(7, 2, 3, Q).reconstruct(first) == [1, 2, 3]


def test_different_seeds_change_shares_not_secrets():
    pss = PackedSecretSharing(7, 2, 3, Q)
    a = pss.split([1, 2, 3], 5)
    b = pss.split([1, 2, 3], 6)
    assert [s.value for s in a] != [s.value for s in b]
    assert pss.reconstruct(a) == pss.reconstruct(b) == [1, 2, 3]


def test_constant_polynomial_without_randomness():
    pss = PackedSecretSharing(5, 0, 1, Q)
    assert [s.value for s in pss.split([42], 1)] == [42] * 5


def test_shares_are_additively_homomorphic():
    pss = PackedSecretSharing(7, 2, 3, Q)
    a = pss.split([1, 2, 3], 11)
    b = pss.split([Q - 1, 5, 6], 22)
    summed = [Share(x.index, (x.value + y.value) % Q) for x, y in zip(a, b)]
    assert pss.reconstruct(summed) == [0, 7, 9]


def test_too_few_shares():
    pss = PackedSecretSharing(7, 2, 3, Q)
    shares = pss.split([1, 2, 3], 5)
    with pytest.raises(ValueError, match="less than t\\+k"):
        pss.reconstruct(shares[:4])


def test_too_many_shares():
    pss = PackedSecretSharing(4, 1, 2, Q)
    shares = pss.split([1, 2], 5)
    with pytest.raises(ValueError, match="more than n"):
        pss.reconstruct(shares + [Share(5, 0)])


def test_empty_secret_rejected():
    pss = PackedSecretSharing(4, 1, 2, Q)
    with pytest.raises(ValueError, match="empty"):
        pss.split([], 1)


def test_wrong_secret_count_rejected():
    pss = PackedSecretSharing(4, 1, 2, Q)
    with pytest.raises(ValueError):
        pss.split([1, 2, 3], 1)


@pytest.mark.parametrize(
    "n, t, k, q, message",
    [
        (3, 2, 2, Q, "n cannot be less than t\\+k"),
        (3, 1, 0, Q, "k must be at least 1"),
        (5, 1, 2, 10633 * 3, "q must be a prime number"),
    ],
)
def test_constructor_validation(n, t, k, q, message):
    with pytest.raises(ValueError, match=message):
        PackedSecretSharing(n, t, k, q)