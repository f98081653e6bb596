"""Core typing contracts for Cranium."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

import numpy as np

Array = np.ndarray


@dataclass(frozen=True)
class ModelDescription:
    """Description of the feed-forward network architecture."""

    layer_sizes: List[int]
    activations: List[str]


@dataclass(frozen=True)
class EpochMetrics:
    """Full-dataset measurements taken after one training epoch."""

    epoch: int
    loss: float
    accuracy: float
    learning_rate: float

    def as_dict(self) -> Dict[str, float]:
        return {
            "loss": self.loss,
            "accuracy": self.accuracy,
            "learning_rate": self.learning_rate,
        }


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :meth:`cranium.training.trainer.Trainer.run`."""

    epochs: int
    final_loss: float
    final_accuracy: float
    history: List[EpochMetrics] = field(default_factory=list)
    metrics_path: str = ""
