"""Dense row-major matrix engine used by every Cranium component."""

from __future__ import annotations

from typing import Callable, Iterable, Sequence

import numpy as np

from .errors import check_shape
from .types import Array


class Matrix:
    """A ``rows x cols`` float matrix backed by a flat, exclusively owned buffer.

    Operations that return a new matrix always allocate.  The ``*_into``
    variants write into a caller-supplied matrix of the right shape so hot
    loops can reuse scratch space.
    """

    __slots__ = ("rows", "cols", "data")

    def __init__(
        self,
        rows: int,
        cols: int,
        data: Iterable[float] | Iterable[Iterable[float]] | Array | None = None,
    ) -> None:
        rows = int(rows)
        cols = int(cols)
        check_shape(rows > 0 and cols > 0, f"Matrix dimensions must be positive, got {rows}x{cols}")
        if data is None:
            buffer = np.zeros(rows * cols, dtype=np.float64)
        else:
            buffer = np.array(data, dtype=np.float64).reshape(-1)
            check_shape(
                buffer.size == rows * cols,
                f"Expected {rows * cols} values for a {rows}x{cols} matrix, got {buffer.size}",
            )
        self.rows = rows
        self.cols = cols
        self.data = buffer

    # ------------------------------------------------------------------
    # Construction helpers

    @classmethod
    def zeros(cls, rows: int, cols: int) -> "Matrix":
        return cls(rows, cols)

    @classmethod
    def from_rows(cls, table: Sequence[Sequence[float]]) -> "Matrix":
        """Build a matrix from a nested row-major table."""

        check_shape(len(table) > 0, "Cannot build a matrix from an empty table")
        cols = len(table[0])
        for idx, row in enumerate(table):
            check_shape(
                len(row) == cols,
                f"Row {idx} has {len(row)} columns, expected {cols}",
            )
        return cls(len(table), cols, [value for row in table for value in row])

    @classmethod
    def from_array(cls, array: Array) -> "Matrix":
        array = np.asarray(array, dtype=np.float64)
        if array.ndim == 1:
            array = array.reshape(1, -1)
        check_shape(array.ndim == 2, f"Expected a 2D array, got {array.ndim} dimensions")
        return cls(array.shape[0], array.shape[1], array)

    # ------------------------------------------------------------------
    # Element access

    @property
    def shape(self) -> tuple[int, int]:
        return self.rows, self.cols

    @property
    def values(self) -> Array:
        """2D view onto the underlying buffer; writes go through to the matrix."""

        return self.data.reshape(self.rows, self.cols)

    def to_array(self) -> Array:
        return self.values.copy()

    def _offset(self, row: int, col: int) -> int:
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise IndexError(
                f"Index ({row}, {col}) out of range for a {self.rows}x{self.cols} matrix"
            )
        return row * self.cols + col

    def get(self, row: int, col: int) -> float:
        return float(self.data[self._offset(row, col)])

    def set(self, row: int, col: int, value: float) -> None:
        self.data[self._offset(row, col)] = value

    def row(self, index: int) -> "Matrix":
        """Return a ``1 x cols`` copy of row ``index``."""

        self._offset(index, 0)
        return Matrix(1, self.cols, self.values[index])

    # ------------------------------------------------------------------
    # In-place operations

    def transform(self, func: Callable[[float], float]) -> None:
        """Apply the scalar function ``func`` to every element in place."""

        for idx in range(self.data.size):
            self.data[idx] = func(float(self.data[idx]))

    def to_zero(self) -> None:
        self.data.fill(0.0)

    def scalar_multiply(self, k: float) -> None:
        self.data *= k

    # ------------------------------------------------------------------
    # Copies and transposes

    def copy(self) -> "Matrix":
        return type(self)(self.rows, self.cols, self.data)

    def copy_into(self, dst: "Matrix") -> None:
        self._require_same_shape(dst, "copy_into")
        np.copyto(dst.data, self.data)

    def transpose(self) -> "Matrix":
        return Matrix(self.cols, self.rows, self.values.T)

    def transpose_into(self, dst: "Matrix") -> None:
        check_shape(
            dst.rows == self.cols and dst.cols == self.rows,
            f"transpose_into expects a {self.cols}x{self.rows} target, got {dst.rows}x{dst.cols}",
        )
        check_shape(dst is not self, "transpose_into cannot write into its own source")
        dst.values[...] = self.values.T

    # ------------------------------------------------------------------
    # Arithmetic

    def add(self, other: "Matrix") -> "Matrix":
        self._require_same_shape(other, "add")
        return Matrix(self.rows, self.cols, self.data + other.data)

    def add_to(self, dst: "Matrix") -> None:
        """Accumulate ``self`` into ``dst`` (``dst += self``)."""

        self._require_same_shape(dst, "add_to")
        dst.data += self.data

    def subtract_from(self, dst: "Matrix") -> None:
        """Remove ``self`` from ``dst`` (``dst -= self``)."""

        self._require_same_shape(dst, "subtract_from")
        dst.data -= self.data

    def add_to_each_row(self, bias: "Matrix") -> "Matrix":
        """Return ``self`` with the single-row ``bias`` added to every row."""

        check_shape(
            bias.rows == 1 and bias.cols == self.cols,
            f"add_to_each_row expects a 1x{self.cols} bias, got {bias.rows}x{bias.cols}",
        )
        return Matrix(self.rows, self.cols, self.values + bias.values)

    def multiply(self, other: "Matrix") -> "Matrix":
        self._require_inner(other)
        result = Matrix(self.rows, other.cols)
        np.matmul(self.values, other.values, out=result.values)
        return result

    def multiply_into(self, other: "Matrix", dst: "Matrix") -> None:
        """Write ``self @ other`` into ``dst``, discarding its previous contents."""

        self._require_inner(other)
        check_shape(
            dst.rows == self.rows and dst.cols == other.cols,
            f"multiply_into expects a {self.rows}x{other.cols} target, got {dst.rows}x{dst.cols}",
        )
        check_shape(dst is not self and dst is not other, "multiply_into target must not be one of its operands")
        dst.to_zero()
        np.matmul(self.values, other.values, out=dst.values)

    def hadamard(self, other: "Matrix") -> "Matrix":
        self._require_same_shape(other, "hadamard")
        return Matrix(self.rows, self.cols, self.data * other.data)

    def hadamard_into(self, other: "Matrix", dst: "Matrix") -> None:
        self._require_same_shape(other, "hadamard_into")
        self._require_same_shape(dst, "hadamard_into")
        np.multiply(self.data, other.data, out=dst.data)

    # ------------------------------------------------------------------
    # Comparison

    def equals(self, other: "Matrix") -> bool:
        """Exact comparison: shapes first, then every value bit for bit."""

        if self.rows != other.rows or self.cols != other.cols:
            return False
        return bool(np.array_equal(self.data, other.data))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.equals(other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(rows={self.rows}, cols={self.cols}, data={self.values.tolist()!r})"

    # ------------------------------------------------------------------
    # Checks

    def _require_same_shape(self, other: "Matrix", op: str) -> None:
        check_shape(
            self.rows == other.rows and self.cols == other.cols,
            f"{op} requires matching shapes, got {self.rows}x{self.cols} and {other.rows}x{other.cols}",
        )

    def _require_inner(self, other: "Matrix") -> None:
        check_shape(
            self.cols == other.rows,
            f"Cannot multiply {self.rows}x{self.cols} by {other.rows}x{other.cols}",
        )


__all__ = ["Matrix"]
