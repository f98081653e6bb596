import numpy as np
import pytest

from cranium.core.errors import ShapeMismatchError
from cranium.core.matrix import Matrix


def _naive_product(a: Matrix, b: Matrix) -> Matrix:
    out = Matrix.zeros(a.rows, b.cols)
    for i in range(a.rows):
        for j in range(b.cols):
            total = 0.0
            for k in range(a.cols):
                total += a.get(i, k) * b.get(k, j)
            out.set(i, j, total)
    return out


def _random(rows: int, cols: int, seed: int) -> Matrix:
    rng = np.random.default_rng(seed)
    return Matrix.from_array(rng.standard_normal((rows, cols)))


def test_create_and_access():
    matrix = Matrix.from_rows([[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]])
    assert matrix.shape == (3, 2)
    assert matrix.data.size == 6
    assert matrix.get(2, 1) == 6.0
    matrix.set(0, 1, 10.0)
    assert matrix.get(0, 1) == 10.0
    assert matrix.values.tolist() == [[1.0, 10.0], [3.0, 4.0], [5.0, 6.0]]


def test_flat_buffer_is_row_major():
    matrix = Matrix(2, 3, [1, 2, 3, 4, 5, 6])
    assert matrix.get(1, 0) == 4.0
    assert matrix.get(0, 2) == 3.0


@pytest.mark.parametrize("rows, cols", [(0, 2), (2, 0), (0, 0)])
def test_degenerate_dimensions_rejected(rows, cols):
    with pytest.raises(ShapeMismatchError):
        Matrix(rows, cols)


def test_buffer_length_must_match_shape():
    with pytest.raises(ShapeMismatchError):
        Matrix(2, 2, [1.0, 2.0, 3.0])


@pytest.mark.parametrize("row, col", [(2, 0), (0, 2), (-1, 0)])
def test_out_of_range_access_faults(row, col):
    matrix = Matrix.zeros(2, 2)
    with pytest.raises(IndexError):
        matrix.get(row, col)
    with pytest.raises(IndexError):
        matrix.set(row, col, 1.0)


def test_transform_to_zero_and_scale():
    matrix = Matrix.from_rows([[1.0, -2.0], [3.0, -4.0]])
    matrix.transform(lambda x: x * x)
    assert matrix.equals(Matrix.from_rows([[1.0, 4.0], [9.0, 16.0]]))
    matrix.scalar_multiply(0.5)
    assert matrix.equals(Matrix.from_rows([[0.5, 2.0], [4.5, 8.0]]))
    matrix.to_zero()
    assert matrix.equals(Matrix.zeros(2, 2))


def test_copy_owns_its_buffer():
    original = Matrix.from_rows([[1.0, 2.0]])
    clone = original.copy()
    clone.set(0, 0, 99.0)
    assert original.get(0, 0) == 1.0

    target = Matrix.zeros(1, 2)
    original.copy_into(target)
    assert target.equals(original)
    with pytest.raises(ShapeMismatchError):
        original.copy_into(Matrix.zeros(2, 1))


@pytest.mark.parametrize("rows, cols", [(1, 1), (1, 4), (3, 2), (5, 5)])
def test_transpose_is_an_involution(rows, cols):
    matrix = _random(rows, cols, seed=rows * 10 + cols)
    transposed = matrix.transpose()
    assert transposed.shape == (cols, rows)
    assert transposed.transpose().equals(matrix)


def test_transpose_allocates_and_into_checks_shape():
    matrix = Matrix.from_rows([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])
    transposed = matrix.transpose()
    transposed.set(0, 0, -1.0)
    assert matrix.get(0, 0) == 1.0

    target = Matrix.zeros(3, 2)
    matrix.transpose_into(target)
    assert target.values.tolist() == [[1.0, 4.0], [2.0, 5.0], [3.0, 6.0]]
    with pytest.raises(ShapeMismatchError):
        matrix.transpose_into(Matrix.zeros(2, 3))


def test_add_and_add_to():
    a = _random(3, 4, seed=1)
    b = _random(3, 4, seed=2)
    assert a.add(b).equals(b.add(a))
    assert np.allclose(a.add(b).values, a.values + b.values)

    acc = b.copy()
    a.add_to(acc)
    assert np.allclose(acc.values, a.values + b.values)
    with pytest.raises(ShapeMismatchError):
        a.add(Matrix.zeros(4, 3))
    with pytest.raises(ShapeMismatchError):
        a.add_to(Matrix.zeros(3, 3))


def test_add_to_each_row_broadcasts_bias():
    matrix = Matrix.from_rows([[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]])
    bias = Matrix.from_rows([[10.0, 20.0]])
    result = matrix.add_to_each_row(bias)
    assert result.values.tolist() == [[11.0, 22.0], [13.0, 24.0], [15.0, 26.0]]
    assert matrix.get(0, 0) == 1.0
    with pytest.raises(ShapeMismatchError):
        matrix.add_to_each_row(Matrix.zeros(2, 2))
    with pytest.raises(ShapeMismatchError):
        matrix.add_to_each_row(Matrix.zeros(1, 3))


@pytest.mark.parametrize("n, k, m", [(1, 1, 1), (2, 3, 4), (4, 1, 3), (3, 5, 2)])
def test_multiply_matches_naive_triple_loop(n, k, m):
    a = _random(n, k, seed=n + k)
    b = _random(k, m, seed=k + m + 7)
    product = a.multiply(b)
    assert product.shape == (n, m)
    assert np.allclose(product.values, _naive_product(a, b).values, atol=1e-12)


def test_multiply_into_overwrites_target():
    a = _random(2, 3, seed=3)
    b = _random(3, 2, seed=4)
    target = Matrix.from_rows([[100.0, 100.0], [100.0, 100.0]])
    a.multiply_into(b, target)
    assert np.allclose(target.values, _naive_product(a, b).values)


def test_multiply_shape_checks():
    a = Matrix.zeros(2, 3)
    with pytest.raises(ShapeMismatchError):
        a.multiply(Matrix.zeros(2, 3))
    with pytest.raises(ShapeMismatchError):
        a.multiply_into(Matrix.zeros(3, 4), Matrix.zeros(2, 3))


def test_into_operations_reject_aliased_targets():
    a = Matrix.from_rows([[1.0, 2.0], [3.0, 4.0]])
    identity = Matrix.from_rows([[1.0, 0.0], [0.0, 1.0]])
    with pytest.raises(ShapeMismatchError):
        a.multiply_into(identity, a)
    with pytest.raises(ShapeMismatchError):
        identity.multiply_into(a, a)
    with pytest.raises(ShapeMismatchError):
        a.transpose_into(a)
    assert a.values.tolist() == [[1.0, 2.0], [3.0, 4.0]]


def test_hadamard_is_commutative_and_checked():
    a = _random(3, 3, seed=5)
    b = _random(3, 3, seed=6)
    assert a.hadamard(b).equals(b.hadamard(a))
    assert np.allclose(a.hadamard(b).values, a.values * b.values)

    target = Matrix.zeros(3, 3)
    a.hadamard_into(b, target)
    assert target.equals(a.hadamard(b))
    with pytest.raises(ShapeMismatchError):
        a.hadamard(Matrix.zeros(3, 2))
    with pytest.raises(ShapeMismatchError):
        a.hadamard_into(b, Matrix.zeros(2, 3))


def test_equals_is_exact():
    a = Matrix.from_rows([[1.0, 2.0]])
    assert a.equals(Matrix.from_rows([[1.0, 2.0]]))
    assert a == Matrix.from_rows([[1.0, 2.0]])
    assert not a.equals(Matrix.from_rows([[1.0, 2.0 + 1e-12]]))
    assert not a.equals(Matrix.from_rows([[1.0], [2.0]]))
