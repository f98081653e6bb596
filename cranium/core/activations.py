"""Activation functions and their derivatives, keyed by a closed enum."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable

import numpy as np

from .matrix import Matrix
from .types import Array


def sigmoid(x: Array) -> None:
    with np.errstate(over="ignore"):
        x[...] = 1.0 / (1.0 + np.exp(-x))


def sigmoid_deriv(y: Array) -> Array:
    return y * (1.0 - y)


def relu(x: Array) -> None:
    np.maximum(x, 0.0, out=x)


def relu_deriv(y: Array) -> Array:
    return (y > 0.0).astype(np.float64)


def tanh(x: Array) -> None:
    np.tanh(x, out=x)


def tanh_deriv(y: Array) -> Array:
    return 1.0 - y * y


def softmax(x: Array) -> None:
    x -= x.max(axis=1, keepdims=True)
    np.exp(x, out=x)
    x /= x.sum(axis=1, keepdims=True)


def linear(x: Array) -> None:
    return None


def linear_deriv(y: Array) -> Array:
    return np.ones_like(y)


@dataclass(frozen=True)
class ActivationRule:
    """Forward transform (in place) and derivative expressed in terms of the output."""

    forward: Callable[[Array], None]
    derivative: Callable[[Array], Array]


class Activation(Enum):
    """Closed set of supported activations."""

    SIGMOID = "sigmoid"
    RELU = "relu"
    TANH = "tanh"
    SOFTMAX = "softmax"
    LINEAR = "linear"

    @classmethod
    def from_name(cls, name: "str | Activation | None") -> "Activation":
        """Resolve ``name``; unknown names fall back to :attr:`LINEAR`."""

        if isinstance(name, Activation):
            return name
        if name is None:
            return cls.LINEAR
        key = str(name).strip().lower()
        for member in cls:
            if member.value == key:
                return member
        return cls.LINEAR

    @property
    def rule(self) -> ActivationRule:
        return _RULES[self]

    def apply(self, matrix: Matrix) -> None:
        """Activate ``matrix`` in place."""

        self.rule.forward(matrix.values)

    def derivative(self, signal: Matrix) -> Matrix:
        """Return the derivative evaluated on an already-activated ``signal``."""

        out = Matrix.zeros(signal.rows, signal.cols)
        self.derivative_into(signal, out)
        return out

    def derivative_into(self, signal: Matrix, dst: Matrix) -> None:
        signal.copy_into(dst)
        dst.values[...] = self.rule.derivative(signal.values)

    def __str__(self) -> str:
        return self.value


# Softmax passes gradients through unchanged; the output delta is taken directly.
_RULES: Dict[Activation, ActivationRule] = {
    Activation.SIGMOID: ActivationRule(sigmoid, sigmoid_deriv),
    Activation.RELU: ActivationRule(relu, relu_deriv),
    Activation.TANH: ActivationRule(tanh, tanh_deriv),
    Activation.SOFTMAX: ActivationRule(softmax, linear_deriv),
    Activation.LINEAR: ActivationRule(linear, linear_deriv),
}


def names() -> Iterable[str]:
    return sorted(member.value for member in Activation)


__all__ = ["Activation", "ActivationRule", "names"]
