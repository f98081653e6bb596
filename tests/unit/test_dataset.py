import numpy as np
import pytest

from cranium.core.errors import ConfigurationError
from cranium.core.matrix import Matrix
from cranium.data.dataset import (
    Batch,
    Dataset,
    batch_sizes,
    create_batches,
    create_dataset,
    num_batches_for,
    shuffle_together,
    split_rows,
)
from cranium.data.registry import get_dataset


def test_create_dataset():
    data = [[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]]
    dataset = create_dataset(3, 2, data)
    assert dataset.rows == 3
    assert dataset.cols == 2
    assert dataset.values.tolist() == data


@pytest.mark.parametrize("rows", [1, 2, 7, 10, 33, 100])
@pytest.mark.parametrize("num_batches", [1, 2, 3, 7])
def test_batch_sizes_cover_rows_evenly(rows, num_batches):
    sizes = batch_sizes(rows, num_batches)
    assert len(sizes) == num_batches
    assert sum(sizes) == rows
    assert max(sizes) - min(sizes) <= 1
    assert sizes == sorted(sizes, reverse=True)


def test_batch_sizes_requires_a_batch():
    with pytest.raises(ConfigurationError):
        batch_sizes(10, 0)


def test_num_batches_rounds_up():
    assert num_batches_for(10, 3) == 4
    assert num_batches_for(9, 3) == 3
    assert num_batches_for(1, 1) == 1


def test_create_batches_are_contiguous_views():
    dataset = Dataset(10, 2)
    batches = create_batches(dataset, 3)
    assert [b.size for b in batches] == [4, 3, 3]
    assert [b.offset for b in batches] == [0, 4, 7]
    assert all(b.dataset is dataset for b in batches)


def test_split_rows_stays_inside_batch():
    dataset = Dataset(5, 2)
    batch = Batch(offset=2, size=3, dataset=dataset)
    rows = split_rows(batch)
    assert [row.row_idx for row in rows] == [2, 3, 4]
    assert all(row.batch is batch for row in rows)
    assert batch.rows() == rows


def test_row_into_copies_a_single_row():
    dataset = Dataset.from_rows([[1.0, 2.0], [3.0, 4.0]])
    target = Matrix.zeros(1, 2)
    dataset.row_into(1, target)
    assert target.values.tolist() == [[3.0, 4.0]]
    with pytest.raises(IndexError):
        dataset.row_into(2, target)


def test_shuffle_together_keeps_rows_paired():
    rows = 50
    ids = np.arange(rows, dtype=np.float64)
    data_a = Dataset.from_array(np.column_stack([ids, ids * 2.0]))
    data_b = Dataset.from_array(np.column_stack([ids + 1000.0, -ids]))

    permutation = shuffle_together(data_a, data_b, np.random.default_rng(3))

    assert sorted(permutation.tolist()) == list(range(rows))
    assert data_a.values[:, 0].tolist() != ids.tolist()
    for i in range(rows):
        assert data_a.get(i, 0) + 1000.0 == data_b.get(i, 0)
        assert data_a.get(i, 1) == 2.0 * data_a.get(i, 0)
        assert data_b.get(i, 1) == -data_a.get(i, 0)


def test_shuffle_together_requires_equal_rows():
    with pytest.raises(ConfigurationError):
        shuffle_together(Dataset(3, 1), Dataset(4, 1), np.random.default_rng(0))


def test_dataset_copy_stays_a_dataset():
    dataset = Dataset.from_rows([[1.0], [2.0]])
    clone = dataset.copy()
    assert isinstance(clone, Dataset)
    clone.permute_rows([1, 0])
    assert dataset.values.tolist() == [[1.0], [2.0]]
    assert clone.values.tolist() == [[2.0], [1.0]]


def test_registered_datasets_reject_unknown_options():
    spec = get_dataset("xor", n=12, seed=1)
    assert spec.rows == 12
    assert (spec.d_in, spec.d_out) == (2, 2)
    with pytest.raises(ConfigurationError, match="sead"):
        get_dataset("separable", n=10, sead=3)
    with pytest.raises(ConfigurationError):
        get_dataset("missing")
