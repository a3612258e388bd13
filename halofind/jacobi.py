"""Jacobi eigen-decomposition of symmetric 3x3 matrices and related helpers."""

from __future__ import annotations

import math
from typing import Sequence

NUM_PARAMS = 3

Matrix = Sequence[Sequence[float]]


def jacobi_decompose(matrix: Matrix) -> tuple[list[float], list[list[float]]]:
    """Eigenvalues and eigenvectors of a symmetric 3x3 matrix.

    Only the upper triangle is used for the rotations.  Returns
    ``(eigenvalues, vectors)`` where ``vectors[i]`` is the eigenvector for
    ``eigenvalues[i]``.  The input is not modified.
    """
    n = NUM_PARAMS
    cov = [[float(value) for value in row] for row in matrix]
    if len(cov) != n or any(len(row) != n for row in cov):
        raise ValueError("matrix must be 3x3")

    max_col = []
    for i in range(n):
        best = 0.0
        column = i + 1
        for j in range(i + 1, n):
            if abs(cov[i][j]) > best:
                column = j
                best = abs(cov[i][j])
        max_col.append(column)

    orth = [[1.0 if i == j else 0.0 for j in range(n)] for i in range(n)]
    eigenvalues = [cov[i][i] for i in range(n)]
    changed = [any(cov[i][j] for j in range(n) if j != i) for i in range(n)]
    state = sum(changed)

    def update(index: int, delta: float) -> None:
        nonlocal state
        eigenvalues[index] += delta
        threshold = 1e-6 * abs(eigenvalues[index])
        if changed[index] and abs(delta) < threshold:
            changed[index] = False
            state -= 1
        elif not changed[index] and abs(delta) > threshold:
            changed[index] = True
            state += 1

    while state:
        max_row = 0
        best = abs(cov[0][max_col[0]])
        for i in range(1, n - 1):
            if abs(cov[i][max_col[i]]) > best:
                best = abs(cov[i][max_col[i]])
                max_row = i
        k = max_row
        l = max_col[k]
        pivot = cov[k][l]
        if pivot == 0:
            break

        a = (eigenvalues[l] - eigenvalues[k]) * 0.5
        t = abs(a) + math.sqrt(pivot * pivot + a * a)
        s = math.sqrt(pivot * pivot + t * t)
        c = t / s
        s = pivot / s
        t = pivot * pivot / t
        if a < 0:
            s = -s
            t = -t

        update(k, -t)
        update(l, t)
        cov[k][l] = 0.0

        def rotate(m, w, x, y, z, track):
            first = m[w][x]
            second = m[y][z]
            m[w][x] = first * c - s * second
            m[y][z] = s * first + c * second
            if track:
                if abs(m[w][x]) > abs(m[w][max_col[w]]):
                    max_col[w] = x
                if abs(m[y][z]) > abs(m[y][max_col[y]]):
                    max_col[y] = z

        for i in range(k):
            rotate(cov, i, k, i, l, True)
        for i in range(k + 1, l):
            rotate(cov, k, i, i, l, True)
        for i in range(l + 1, n):
            rotate(cov, k, i, l, i, True)
        for i in range(n):
            rotate(orth, k, i, l, i, False)

    return eigenvalues, orth


def _deviation(block: list[list[float]]) -> float:
    eigenvalues, _ = jacobi_decompose(block)
    smallest = min(eigenvalues)
    if smallest <= 0:
        trace = block[0][0] + block[1][1] + block[2][2]
        return math.sqrt(trace) if trace >= 0 else math.nan
    return math.sqrt(smallest)


def calc_deviations(corr: Matrix) -> tuple[float, float]:
    """Position and velocity deviations from a 6x6 correlation matrix.

    The matrix is symmetrised from its upper triangle; each deviation is the
    square root of the smallest eigenvalue of its 3x3 block, or of the block's
    trace when that eigenvalue is not positive.
    """
    full = [[float(value) for value in row] for row in corr]
    if len(full) != 6 or any(len(row) != 6 for row in full):
        raise ValueError("correlation matrix must be 6x6")
    for i in range(6):
        for j in range(i):
            full[i][j] = full[j][i]
    position_block = [row[0:3] for row in full[0:3]]
    velocity_block = [row[3:6] for row in full[3:6]]
    return _deviation(position_block), _deviation(velocity_block)


def matrix_multiply(m: Matrix, vec: Sequence[float]) -> list[float]:
    """The product ``m @ vec`` for a 3x3 matrix."""
    return [sum(m[i][j] * vec[j] for j in range(NUM_PARAMS)) for i in range(NUM_PARAMS)]


def inv_matrix_multiply(m: Matrix, vec: Sequence[float]) -> list[float]:
    """The product ``transpose(m) @ vec``; the inverse for orthogonal ``m``."""
    return [sum(m[j][i] * vec[j] for j in range(NUM_PARAMS)) for i in range(NUM_PARAMS)]