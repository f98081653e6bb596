"""Dataset tables, batching and the synthetic dataset registry."""

from . import synthetic as _synthetic  # noqa: F401
from .dataset import (
    Batch,
    Dataset,
    Row,
    batch_sizes,
    create_batches,
    create_dataset,
    shuffle_together,
    split_rows,
)
from .registry import DatasetSpec, available_datasets, get_dataset, register_dataset

__all__ = [
    "Batch",
    "Dataset",
    "DatasetSpec",
    "Row",
    "available_datasets",
    "batch_sizes",
    "create_batches",
    "create_dataset",
    "get_dataset",
    "register_dataset",
    "shuffle_together",
    "split_rows",
]
