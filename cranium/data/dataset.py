"""Row-oriented datasets, batch views and synchronized shuffling."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from ..core.errors import check_config, check_shape
from ..core.matrix import Matrix


class Dataset(Matrix):
    """A feature or label table: one example per row."""

    __slots__ = ()

    def row_into(self, index: int, dst: Matrix) -> None:
        """Copy row ``index`` into the ``1 x cols`` matrix ``dst``."""

        self._offset(index, 0)
        check_shape(
            dst.rows == 1 and dst.cols == self.cols,
            f"row_into expects a 1x{self.cols} target, got {dst.rows}x{dst.cols}",
        )
        dst.values[0] = self.values[index]

    def permute_rows(self, permutation: Sequence[int]) -> None:
        """Reorder rows in place so that new row ``i`` is old row ``permutation[i]``."""

        order = np.asarray(permutation, dtype=np.intp)
        check_shape(order.size == self.rows, f"Permutation has {order.size} entries, expected {self.rows}")
        self.values[...] = self.values[order]


def create_dataset(rows: int, cols: int, data: Sequence[Sequence[float]] | Sequence[float]) -> Dataset:
    return Dataset(rows, cols, data)


@dataclass(frozen=True)
class Batch:
    """A contiguous ``[offset, offset + size)`` row range of a dataset; never copies."""

    offset: int
    size: int
    dataset: Dataset

    def rows(self) -> List["Row"]:
        return split_rows(self)


@dataclass(frozen=True)
class Row:
    """Index of a single dataset row belonging to ``batch``."""

    row_idx: int
    batch: Batch


def batch_sizes(rows: int, num_batches: int) -> List[int]:
    """Sizes of ``num_batches`` near-equal batches covering ``rows`` rows.

    The first ``rows % num_batches`` batches carry one extra row.
    """

    check_config(num_batches >= 1, f"num_batches must be at least 1, got {num_batches}")
    base, remainder = divmod(rows, num_batches)
    return [base + 1 if idx < remainder else base for idx in range(num_batches)]


def num_batches_for(rows: int, batch_size: int) -> int:
    check_config(batch_size >= 1, f"batch_size must be at least 1, got {batch_size}")
    return math.ceil(rows / batch_size)


def create_batches(dataset: Dataset, num_batches: int) -> List[Batch]:
    batches: List[Batch] = []
    offset = 0
    for size in batch_sizes(dataset.rows, num_batches):
        batches.append(Batch(offset=offset, size=size, dataset=dataset))
        offset += size
    return batches


def split_rows(batch: Batch) -> List[Row]:
    return [Row(row_idx=idx, batch=batch) for idx in range(batch.offset, batch.offset + batch.size)]


def shuffle_together(data_a: Dataset, data_b: Dataset, rng: np.random.Generator) -> np.ndarray:
    """Apply one random permutation to both tables and return it."""

    check_config(
        data_a.rows == data_b.rows,
        f"Cannot shuffle tables with {data_a.rows} and {data_b.rows} rows together",
    )
    permutation = rng.permutation(data_a.rows)
    data_a.permute_rows(permutation)
    data_b.permute_rows(permutation)
    return permutation


__all__ = [
    "Batch",
    "Dataset",
    "Row",
    "batch_sizes",
    "create_batches",
    "create_dataset",
    "num_batches_for",
    "shuffle_together",
    "split_rows",
]
