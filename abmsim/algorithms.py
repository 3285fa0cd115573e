"""Combinatorics, random permutations and matrix inversion."""

from __future__ import annotations

from collections.abc import Sequence

from abmsim.randomizer import Randomizer


def random_permutation(randomizer: Randomizer, size: int) -> list[int]:
    """Random permutation of 0..size-1 drawn from the given randomizer."""
    permutation = list(range(size))
    for k in range(size - 1):
        j = randomizer.generate_int(k, size - 1)
        permutation[k], permutation[j] = permutation[j], permutation[k]
    return permutation


def n_choose_k(n: int, k: int) -> float:
    """Binomial coefficient as a float; zero when k exceeds n."""
    if n < 0 or k < 0:
        raise ValueError("n and k must be non-negative")
    if k > n:
        return 0.0
    if k * 2 > n:
        k = n - k
    if k == 0:
        return 1.0
    result = 1.0
    for i in range(1, k + 1):
        result *= n - i + 1
        result /= i
    return result


def bernoulli_probability(n: int, k: int, p: float) -> float:
    """Probability of exactly k successes in n trials of success chance p."""
    if n < 0 or k < 0:
        raise ValueError("n and k must be non-negative")
    if k > n:
        return 0.0
    return n_choose_k(n, k) * p**k * (1 - p) ** (n - k)


def invert_matrix(matrix: Sequence[Sequence[float]]) -> list[list[float]]:
    """Inverse of a square matrix by elimination with partial pivoting.

    Raises ValueError if the matrix is not square or is singular.
    """
    work = [[float(value) for value in row] for row in matrix]
    size = len(work)
    if any(len(row) != size for row in work):
        raise ValueError("matrix must be square")
    inverse = [[1.0 if r == c else 0.0 for c in range(size)] for r in range(size)]

    for col in range(size):
        pivot_row = max(range(col, size), key=lambda r: abs(work[r][col]))
        if work[pivot_row][col] == 0:
            raise ValueError("matrix is singular")
        if pivot_row != col:
            work[col], work[pivot_row] = work[pivot_row], work[col]
            inverse[col], inverse[pivot_row] = inverse[pivot_row], inverse[col]

        pivot = work[col][col]
        work[col] = [value / pivot for value in work[col]]
        inverse[col] = [value / pivot for value in inverse[col]]

        for row in range(size):
            if row == col:
                continue
            factor = work[row][col]
            if factor == 0:
                continue
            work[row] = [a - factor * b for a, b in zip(work[row], work[col])]
            inverse[row] = [a - factor * b for a, b in zip(inverse[row], inverse[col])]
    return inverse