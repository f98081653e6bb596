"""Layers and the weighted connections between them."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum

from .activations import Activation
from .errors import check_config
from .matrix import Matrix
from .sampling import GaussianSampler


class LayerKind(Enum):
    INPUT = "input"
    HIDDEN = "hidden"
    OUTPUT = "output"


@dataclass
class Layer:
    """A layer of ``size`` units holding the signal from the latest forward pass."""

    kind: LayerKind
    size: int
    activation: Activation | None = None
    signal: Matrix = field(init=False, repr=False)

    def __post_init__(self) -> None:
        check_config(self.size > 0, f"{self.kind.value} layer size must be positive, got {self.size}")
        if self.activation is not None:
            self.activation = Activation.from_name(self.activation)
        self.signal = Matrix.zeros(1, self.size)

    def set_signal(self, signal: Matrix) -> None:
        self.signal = signal

    def activate(self) -> None:
        if self.activation is not None:
            self.activation.apply(self.signal)


@dataclass
class Connection:
    """Weights ``[source.size x target.size]`` and bias ``[1 x target.size]``."""

    source: Layer
    target: Layer
    weights: Matrix = field(init=False, repr=False)
    bias: Matrix = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.weights = Matrix.zeros(self.source.size, self.target.size)
        self.bias = Matrix.zeros(1, self.target.size)

    def init(self, sampler: GaussianSampler) -> None:
        """Gaussian weights scaled by ``1/sqrt(fan_in)``; zero bias."""

        self.bias.to_zero()
        fan_in = math.sqrt(self.source.size)
        self.weights.transform(lambda _: sampler.sample() / fan_in)

    def parameter_count(self) -> int:
        return self.weights.rows * self.weights.cols + self.bias.cols


__all__ = ["LayerKind", "Layer", "Connection"]
