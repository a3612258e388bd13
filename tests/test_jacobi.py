import copy
import math

import pytest

from halofind.jacobi import (
    calc_deviations,
    inv_matrix_multiply,
    jacobi_decompose,
    matrix_multiply,
)

SYMMETRIC = [
    [[2.0, 1.0, 0.0], [1.0, 2.0, 0.0], [0.0, 0.0, 3.0]],
    [[3.0, 1.0, 0.0], [1.0, 1.0, 0.0], [0.0, 0.0, 5.0]],
    [[4.0, 1.0, 2.0], [1.0, 3.0, 0.5], [2.0, 0.5, 6.0]],
    [[1.0, -0.3, 0.2], [-0.3, 2.0, -0.7], [0.2, -0.7, 0.5]],
    [[10.0, 4.0, 4.0], [4.0, 10.0, 4.0], [4.0, 4.0, 10.0]],
]


def _dot(a, b):
    return sum(x * y for x, y in zip(a, b))


@pytest.mark.parametrize("matrix", SYMMETRIC)
def test_eigenvector_equation(matrix):
    eigenvalues, vectors = jacobi_decompose(matrix)
    for value, vector in zip(eigenvalues, vectors):
        product = matrix_multiply(matrix, vector)
        assert product == pytest.approx([value * x for x in vector], abs=1e-5)


@pytest.mark.parametrize("matrix", SYMMETRIC)
def test_trace_preserved(matrix):
    eigenvalues, _ = jacobi_decompose(matrix)
    trace = matrix[0][0] + matrix[1][1] + matrix[2][2]
    assert sum(eigenvalues) == pytest.approx(trace)


@pytest.mark.parametrize("matrix", SYMMETRIC)
def test_vectors_orthonormal(matrix):
    _, vectors = jacobi_decompose(matrix)
    for i in range(3):
        for j in range(3):
            expected = 1.0 if i == j else 0.0
            assert _dot(vectors[i], vectors[j]) == pytest.approx(expected, abs=1e-9)


def test_diagonal_matrix_unchanged():
    matrix = [[5.0, 0.0, 0.0], [0.0, 2.0, 0.0], [0.0, 0.0, 7.0]]
    eigenvalues, vectors = jacobi_decompose(matrix)
    assert eigenvalues == [5.0, 2.0, 7.0]
    assert vectors == [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]]


def test_input_not_modified():
    matrix = copy.deepcopy(SYMMETRIC[2])
    jacobi_decompose(matrix)
    assert matrix == SYMMETRIC[2]


def test_rejects_wrong_shape():
    with pytest.raises(ValueError):
        jacobi_decompose([[1.0, 0.0], [0.0, 1.0]])


def _diag6(values):
    return [[values[i] if i == j else 0.0 for j in range(6)] for i in range(6)]


def test_calc_deviations_diagonal():
    sig_x, sig_v = calc_deviations(_diag6([4.0, 9.0, 16.0, 1.0, 25.0, 36.0]))
    assert sig_x ** 2 == pytest.approx(4.0)
    assert sig_v ** 2 == pytest.approx(1.0)


def test_calc_deviations_falls_back_to_trace():
    corr = _diag6([1.0, 1.0, 1.0, 1.0, 1.0, 1.0])
    corr[0][1] = 2.0
    sig_x, sig_v = calc_deviations(corr)
    assert sig_x ** 2 == pytest.approx(3.0)
    assert sig_v ** 2 == pytest.approx(1.0)


def test_calc_deviations_uses_upper_triangle():
    corr = _diag6([4.0, 3.0, 5.0, 2.0, 6.0, 1.5])
    corr[0][1] = 0.5
    corr[3][5] = 0.25
    garbage = copy.deepcopy(corr)
    garbage[1][0] = 99.0
    garbage[5][3] = -42.0
    assert calc_deviations(garbage) == pytest.approx(calc_deviations(corr))


def test_calc_deviations_is_smallest_eigenvalue_root():
    corr = _diag6([1.0] * 6)
    for i in range(3):
        for j in range(3):
            corr[i][j] = SYMMETRIC[2][i][j]
    sig_x, _ = calc_deviations(corr)
    eigenvalues, _ = jacobi_decompose(SYMMETRIC[2])
    assert sig_x == pytest.approx(math.sqrt(min(eigenvalues)))


def test_matrix_multiply_value():
    m = [[1.0, 2.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]]
    assert matrix_multiply(m, [1.0, 1.0, 1.0]) == [3.0, 1.0, 1.0]


def test_inv_matrix_multiply_is_transpose_product():
    m = [[1.0, 2.0, 3.0], [4.0, 5.0, 6.0], [7.0, 8.0, 9.0]]
    transposed = [list(row) for row in zip(*m)]
    vec = [0.5, -1.0, 2.0]
    assert inv_matrix_multiply(m, vec) == matrix_multiply(transposed, vec)


@pytest.mark.parametrize("matrix", SYMMETRIC)
def test_inverse_of_orthogonal_round_trip(matrix):
    _, vectors = jacobi_decompose(matrix)
    vec = [1.0, -2.0, 0.5]
    restored = inv_matrix_multiply(vectors, matrix_multiply(vectors, vec))
    assert restored == pytest.approx(vec)