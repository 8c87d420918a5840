"""Modular arithmetic over a prime field: inverses, Lagrange interpolation, matrices."""

from __future__ import annotations

from dataclasses import dataclass, field

__all__ = [
    "Share",
    "Interpolator",
    "mod",
    "egcd_binary",
    "inverse",
    "is_prime",
    "lagrange_constants",
    "add_matrix",
    "sub_matrix",
    "mul_matrix",
    "mul_list",
]


@dataclass(frozen=True)
class Share:
    """A single share: the x coordinate (index) and the value at that point."""

    index: int
    value: int


def mod(a: int, b: int) -> int:
    """Return a modulo b as a non-negative number, also for negative a."""
    return (a % b + b) % b


def _half(value: int) -> int:
    """Halve an integer, truncating toward zero."""
    return value // 2 if value >= 0 else -((-value) // 2)


def egcd_binary(a: int, b: int) -> int:
    """Binary extended Euclid; return s such that s*a + t*b == gcd(a, b)."""
    if a == 0 or b == 0:
        raise ValueError("egcd_binary needs non-zero arguments")
    u, v, s, t = 1, 0, 0, 1
    while a % 2 == 0 and b % 2 == 0:
        a, b = _half(a), _half(b)

    alpha, beta = a, b

    while a % 2 == 0:
        a = _half(a)
        if u % 2 == 0 and v % 2 == 0:
            u, v = _half(u), _half(v)
        else:
            u, v = _half(u + beta), _half(v - alpha)

    while a != b:
        if b % 2 == 0:
            b = _half(b)
            if s % 2 == 0 and t % 2 == 0:
                s, t = _half(s), _half(t)
            else:
                s, t = _half(s + beta), _half(t - alpha)
        elif b < a:
            a, b, u, v, s, t = b, a, s, t, u, v
        else:
            b, s, t = b - a, s - u, t - v

    return s


def inverse(a: int, q: int) -> int:
    """Return a multiplicative inverse of a modulo q (not necessarily reduced)."""
    a = a % q
    if a == 0:
        raise ZeroDivisionError(f"0 has no inverse modulo {q}")
    return egcd_binary(a, q)


_WITNESSES = (2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37)


def is_prime(n: int) -> bool:
    """Miller-Rabin primality test, deterministic for n below 3.3e24."""
    if n < 2:
        return False
    for p in _WITNESSES:
        if n % p == 0:
            return n == p
    d, r = n - 1, 0
    while d % 2 == 0:
        d //= 2
        r += 1
    for a in _WITNESSES:
        x = pow(a, d, n)
        if x in (1, n - 1):
            continue
        for _ in range(r - 1):
            x = x * x % n
            if x == n - 1:
                break
        else:
            return False
    return True


def lagrange_constants(x_samples: list[int], q: int) -> list[int]:
    """Return, for each sample x_i, the inverse of prod_{j != i}(x_j - x_i) mod q."""
    constants = []
    for i, xi in enumerate(x_samples):
        denom = 1
        for j, xj in enumerate(x_samples):
            if j != i:
                denom = mod(denom * (xj - xi), q)
        constants.append(mod(inverse(denom, q), q))
    return constants


@dataclass
class Interpolator:
    """Lagrange interpolation mod q that caches its constants between calls."""

    q: int
    _denominators: dict = field(default_factory=dict, init=False, repr=False)
    _numerators: dict = field(default_factory=dict, init=False, repr=False)

    def __init__(self, q: int) -> None:
        self.q = q
        self._denominators = {}
        self._numerators = {}

    def evaluate(self, x_samples: list[int], y_samples: list[int], x: int) -> int:
        """Evaluate at x the polynomial through the points (x_samples, y_samples)."""
        if len(x_samples) != len(y_samples):
            raise ValueError("Invalid inputs: x_samples and y_samples length are different")

        for xs, ys in zip(x_samples, y_samples):
            if xs == x:
                return ys

        q = self.q
        key = tuple(x_samples)
        denominators = self._denominators.get(key)
        if denominators is None:
            denominators = lagrange_constants(x_samples, q)
            self._denominators[key] = denominators

        numerators = self._numerators.get((key, x))
        if numerators is None:
            num = 1
            for xj in x_samples:
                num = mod(num * (xj - x), q)
            numerators = [mod(inverse(xi - x, q) * num, q) for xi in x_samples]
            self._numerators[(key, x)] = numerators

        total = sum(
            mod(y * d * n, q) for y, d, n in zip(y_samples, denominators, numerators)
        )
        return mod(total, q)


def add_matrix(matrix1: list[list[int]], matrix2: list[list[int]], q: int) -> list[list[int]]:
    """Element-wise sum of two matrices mod q."""
    return [
        [mod(a + b, q) for a, b in zip(row1, row2)]
        for row1, row2 in zip(matrix1, matrix2)
    ]


def sub_matrix(matrix1: list[list[int]], matrix2: list[list[int]], q: int) -> list[list[int]]:
    """Element-wise difference of two matrices mod q."""
    return [
        [mod(a - b, q) for a, b in zip(row1, row2)]
        for row1, row2 in zip(matrix1, matrix2)
    ]


def mul_matrix(matrix1: list[list[int]], matrix2: list[list[int]], q: int) -> list[list[int]]:
    """Matrix product mod q."""
    if not matrix1 or not matrix1[0] or not matrix2 or not matrix2[0]:
        raise ValueError("Matrix multiplication is not possible with an empty matrix.")
    if len(matrix1[0]) != len(matrix2):
        raise ValueError(
            "Matrix multiplication is not possible. The number of columns in the first "
            "matrix must be equal to the number of rows in the second matrix."
        )
    columns = list(zip(*matrix2))
    return [
        [mod(sum(a * b for a, b in zip(row, column)), q) for column in columns]
        for row in matrix1
    ]


def mul_list(list1: list[int], list2: list[int], q: int) -> int:
    """Inner product of two vectors mod q."""
    if len(list1) != len(list2):
        raise ValueError(
            "Invalid inputs: inputs length are different so that multiplication cannot be done"
        )
    return mod(sum(a * b for a, b in zip(list1, list2)), q)