"""Mini-batch backpropagation with momentum, L2 loss and learning-rate annealing."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Mapping, Sequence

import numpy as np

from ..core.errors import check_config
from ..core.losses import LossKind
from ..core.matrix import Matrix
from ..core.network import Network
from ..core.types import EpochMetrics, RunResult
from ..data.dataset import Dataset, create_batches, num_batches_for, shuffle_together, split_rows
from .backprop import BackpropWorkspace


@dataclass
class TrainingConfig:
    """Everything :func:`train` needs besides the network itself.

    ``labels`` must be one-hot.  ``search_time`` is the annealing divisor;
    zero keeps the learning rate constant.
    """

    dataset: Dataset
    labels: Dataset
    loss: LossKind = LossKind.CROSS_ENTROPY
    batch_size: int = 1
    learning_rate: float = 0.1
    search_time: float = 0.0
    regularization: float = 0.0
    momentum: float = 0.0
    max_iters: int = 1
    shuffle: bool = True
    verbose: bool = False
    seed: int | None = None

    def __post_init__(self) -> None:
        self.loss = LossKind.from_name(self.loss)
        if not isinstance(self.dataset, Dataset):
            self.dataset = Dataset(self.dataset.rows, self.dataset.cols, self.dataset.data)
        if not isinstance(self.labels, Dataset):
            self.labels = Dataset(self.labels.rows, self.labels.cols, self.labels.data)

    def validate(self, network: Network) -> None:
        dataset, labels = self.dataset, self.labels
        check_config(
            network.input_size == dataset.cols,
            f"Network expects {network.input_size} features but the dataset has {dataset.cols}",
        )
        check_config(
            dataset.rows == labels.rows,
            f"Dataset has {dataset.rows} rows but labels have {labels.rows}",
        )
        check_config(
            network.output_size == labels.cols,
            f"Network outputs {network.output_size} values but labels have {labels.cols} columns",
        )
        check_config(
            1 <= self.batch_size <= dataset.rows,
            f"batch_size must be in [1, {dataset.rows}], got {self.batch_size}",
        )
        check_config(self.max_iters >= 1, f"max_iters must be at least 1, got {self.max_iters}")
        check_config(self.learning_rate > 0, f"learning_rate must be positive, got {self.learning_rate}")
        check_config(self.momentum >= 0, f"momentum must be non-negative, got {self.momentum}")
        check_config(
            self.regularization >= 0,
            f"regularization must be non-negative, got {self.regularization}",
        )
        check_config(self.search_time >= 0, f"search_time must be non-negative, got {self.search_time}")


@dataclass
class MomentumOptimizer:
    """Momentum SGD whose learning rate decays as ``lr / (1 + epoch / search_time)``."""

    lr: float
    momentum: float = 0.0
    search_time: float = 0.0

    def rate(self, epoch: int) -> float:
        if self.search_time == 0:
            return self.lr
        return self.lr / (1.0 + epoch / self.search_time)

    def step(self, workspace: BackpropWorkspace, epoch: int, total_rows: int) -> None:
        # Gradient sums are normalised by the full dataset size, not the batch size.
        workspace.apply(self.rate(epoch) / total_rows, self.momentum)


class Trainer:
    """Run the epoch loop for a :class:`~cranium.core.network.Network`."""

    def __init__(self, network: Network, callbacks: Sequence[object] | None = None) -> None:
        self.network = network
        self.callbacks = list(callbacks or [])

    def run(self, config: TrainingConfig) -> RunResult:
        config.validate(self.network)
        # Shuffling reorders rows in place, so work on private copies.
        dataset = config.dataset.copy()
        labels = config.labels.copy()
        rng = np.random.default_rng(config.seed)
        optimizer = MomentumOptimizer(
            lr=config.learning_rate,
            momentum=config.momentum,
            search_time=config.search_time,
        )
        workspace = BackpropWorkspace(self.network)
        num_batches = num_batches_for(dataset.rows, config.batch_size)
        example = Matrix.zeros(1, dataset.cols)
        target = Matrix.zeros(1, labels.cols)

        history: List[EpochMetrics] = []
        epoch = 1
        while epoch <= config.max_iters:
            if config.shuffle:
                shuffle_together(dataset, labels, rng)
            data_batches = create_batches(dataset, num_batches)
            label_batches = create_batches(labels, num_batches)
            for data_batch, label_batch in zip(data_batches, label_batches):
                for data_row, label_row in zip(split_rows(data_batch), split_rows(label_batch)):
                    dataset.row_into(data_row.row_idx, example)
                    labels.row_into(label_row.row_idx, target)
                    workspace.accumulate(example, target)
                optimizer.step(workspace, epoch, dataset.rows)

            metrics = self._evaluate(config, epoch, optimizer.rate(epoch))
            history.append(metrics)
            self._emit_epoch(epoch, metrics.as_dict())
            if config.verbose:
                print(
                    f"epoch {epoch:>4}/{config.max_iters}  "
                    f"loss={metrics.loss:.6f}  accuracy={metrics.accuracy:.4f}  "
                    f"lr={metrics.learning_rate:.6g}"
                )
            epoch += 1

        last = history[-1]
        return RunResult(
            epochs=len(history),
            final_loss=last.loss,
            final_accuracy=last.accuracy,
            history=history,
        )

    # ------------------------------------------------------------------
    # Internal helpers

    def _evaluate(self, config: TrainingConfig, epoch: int, learning_rate: float) -> EpochMetrics:
        accuracy = self.network.accuracy(config.dataset, config.labels)
        loss = self.network.loss(
            self.network.output,
            config.labels,
            config.loss,
            config.regularization,
        )
        return EpochMetrics(epoch=epoch, loss=loss, accuracy=accuracy, learning_rate=learning_rate)

    def _emit_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(epoch, metrics)


def train(
    network: Network,
    config: TrainingConfig,
    callbacks: Sequence[object] | None = None,
) -> RunResult:
    """Train ``network`` in place according to ``config``."""

    return Trainer(network, callbacks=callbacks).run(config)


__all__ = ["MomentumOptimizer", "Trainer", "TrainingConfig", "train"]
