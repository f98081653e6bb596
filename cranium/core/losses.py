"""Loss registry: cross-entropy and mean-squared-error with an L2 penalty."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable

import numpy as np

from .errors import ConfigurationError, check_shape
from .matrix import Matrix
from .types import Array

LossFn = Callable[[Array, Array], float]

# Floor applied to predictions before the logarithm.
EPSILON = float(np.finfo(np.float64).tiny)


class LossKind(Enum):
    CROSS_ENTROPY = "ce"
    MEAN_SQUARED_ERROR = "mse"

    @classmethod
    def from_name(cls, name: "str | LossKind") -> "LossKind":
        if isinstance(name, LossKind):
            return name
        key = str(name).strip().lower()
        try:
            return _ALIASES[key]
        except KeyError as exc:
            available = ", ".join(sorted(_ALIASES))
            raise ConfigurationError(f"Unknown loss {name!r}. Available losses: {available}") from exc


_ALIASES: Dict[str, LossKind] = {
    "ce": LossKind.CROSS_ENTROPY,
    "cross_entropy": LossKind.CROSS_ENTROPY,
    "crossentropy": LossKind.CROSS_ENTROPY,
    "mse": LossKind.MEAN_SQUARED_ERROR,
    "mean_squared_error": LossKind.MEAN_SQUARED_ERROR,
    "meansquarederror": LossKind.MEAN_SQUARED_ERROR,
}


@dataclass(frozen=True)
class Loss:
    """Data term of a loss; the L2 penalty is added by :func:`evaluate`."""

    kind: LossKind
    fn: LossFn

    def __call__(self, predictions: Array, targets: Array) -> float:
        return self.fn(predictions, targets)


class LossRegistry:
    """Central registry for loss functions."""

    def __init__(self) -> None:
        self._registry: Dict[LossKind, Loss] = {}

    def register(self, kind: LossKind, fn: LossFn) -> None:
        self._registry[kind] = Loss(kind, fn)

    def get(self, kind: "LossKind | str") -> Loss:
        return self._registry[LossKind.from_name(kind)]

    def names(self) -> Iterable[str]:
        return sorted(kind.value for kind in self._registry)


REGISTRY = LossRegistry()


def _cross_entropy(pred: Array, target: Array) -> float:
    n = pred.shape[0]
    return float(-np.sum(target * np.log(np.maximum(EPSILON, pred))) / n)


def _mse(pred: Array, target: Array) -> float:
    n = pred.shape[0]
    diff = target - pred
    return float(0.5 * np.sum(diff * diff) / n)


REGISTRY.register(LossKind.CROSS_ENTROPY, _cross_entropy)
REGISTRY.register(LossKind.MEAN_SQUARED_ERROR, _mse)


def l2_penalty(weights: Iterable[Matrix], regularization: float) -> float:
    """``regularization * 0.5 * sum(w**2)`` over every weight matrix (never biases)."""

    total = 0.0
    for matrix in weights:
        total += float(np.dot(matrix.data, matrix.data))
    return regularization * 0.5 * total


def evaluate(
    kind: "LossKind | str",
    prediction: Matrix,
    labels: Matrix,
    weights: Iterable[Matrix],
    regularization: float = 0.0,
) -> float:
    """Return the loss of ``prediction`` against ``labels`` plus the L2 penalty."""

    check_shape(
        prediction.rows == labels.rows and prediction.cols == labels.cols,
        f"Prediction {prediction.rows}x{prediction.cols} does not match labels "
        f"{labels.rows}x{labels.cols}",
    )
    data_term = REGISTRY.get(kind)(prediction.values, labels.values)
    return data_term + l2_penalty(weights, regularization)


def output_delta_into(prediction: Matrix, target: Matrix, dst: Matrix) -> None:
    """Write ``prediction - target`` into ``dst``.

    This is the output-layer error for both softmax + cross-entropy and
    identity + mean-squared-error.
    """

    prediction.copy_into(dst)
    target.subtract_from(dst)


__all__ = [
    "EPSILON",
    "Loss",
    "LossKind",
    "LossRegistry",
    "REGISTRY",
    "evaluate",
    "l2_penalty",
    "output_delta_into",
]
