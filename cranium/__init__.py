"""Cranium public API."""

from .core import activations  # noqa: F401
from .core import types  # noqa: F401
from .core.activations import Activation
from .core.errors import ConfigurationError, CraniumError, ShapeMismatchError
from .core.layers import Connection, Layer, LayerKind
from .core.losses import LossKind
from .core.matrix import Matrix
from .core.network import Network
from .core.sampling import GaussianSampler
from .data import Batch, Dataset, Row, create_batches, shuffle_together
from .training.pipelines import load_preset, presets, run_pipeline
from .training.trainer import Trainer, TrainingConfig, train

__all__ = [
    "Activation",
    "Batch",
    "ConfigurationError",
    "Connection",
    "CraniumError",
    "Dataset",
    "GaussianSampler",
    "Layer",
    "LayerKind",
    "LossKind",
    "Matrix",
    "Network",
    "Row",
    "ShapeMismatchError",
    "Trainer",
    "TrainingConfig",
    "activations",
    "create_batches",
    "load_preset",
    "presets",
    "run_pipeline",
    "shuffle_together",
    "train",
    "types",
]
