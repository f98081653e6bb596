"""Fully-connected feed-forward network: topology, inference and loss."""

from __future__ import annotations

from typing import List, Sequence

import numpy as np

from . import losses
from .activations import Activation
from .errors import check_config, check_shape
from .layers import Connection, Layer, LayerKind
from .matrix import Matrix
from .sampling import GaussianSampler
from .types import ModelDescription

ActivationLike = Activation | str | None


class Network:
    """A strictly linear stack of dense layers.

    ``connections[i]`` links ``layers[i]`` to ``layers[i + 1]``.  Layer
    signals are overwritten by every :meth:`forward` call and keep no
    history between calls.
    """

    def __init__(self, layers: Sequence[Layer], connections: Sequence[Connection]) -> None:
        layers = list(layers)
        connections = list(connections)
        check_config(len(layers) >= 2, "A network needs at least an input and an output layer")
        check_config(layers[0].kind is LayerKind.INPUT, "First layer must be an input layer")
        check_config(layers[-1].kind is LayerKind.OUTPUT, "Last layer must be an output layer")
        check_config(
            len(connections) == len(layers) - 1,
            f"Expected {len(layers) - 1} connections, got {len(connections)}",
        )
        for idx, conn in enumerate(connections):
            check_config(
                conn.source is layers[idx] and conn.target is layers[idx + 1],
                f"Connection {idx} does not link layer {idx} to layer {idx + 1}",
            )
        self._layers = layers
        self._connections = connections

    @classmethod
    def build(
        cls,
        num_features: int,
        hidden_sizes: Sequence[int] = (),
        hidden_activations: Sequence[ActivationLike] | None = None,
        num_outputs: int = 1,
        output_activation: ActivationLike = Activation.LINEAR,
        *,
        sampler: GaussianSampler | None = None,
        seed: int | None = None,
    ) -> "Network":
        """Construct a network and Gaussian-initialise every connection."""

        check_config(num_features > 0, f"num_features must be positive, got {num_features}")
        check_config(num_outputs > 0, f"num_outputs must be positive, got {num_outputs}")
        hidden_sizes = list(hidden_sizes)
        if hidden_activations is None:
            hidden_activations = [Activation.LINEAR] * len(hidden_sizes)
        hidden_activations = list(hidden_activations)
        check_config(
            len(hidden_activations) == len(hidden_sizes),
            f"Got {len(hidden_sizes)} hidden sizes but {len(hidden_activations)} activations",
        )

        layers: List[Layer] = [Layer(LayerKind.INPUT, int(num_features))]
        for size, activation in zip(hidden_sizes, hidden_activations):
            layers.append(Layer(LayerKind.HIDDEN, int(size), Activation.from_name(activation)))
        layers.append(Layer(LayerKind.OUTPUT, int(num_outputs), Activation.from_name(output_activation)))

        sampler = sampler or GaussianSampler.from_seed(seed)
        connections = [Connection(src, dst) for src, dst in zip(layers[:-1], layers[1:])]
        for conn in connections:
            conn.init(sampler)
        return cls(layers, connections)

    # ------------------------------------------------------------------
    # Topology

    @property
    def layers(self) -> List[Layer]:
        return self._layers

    @property
    def connections(self) -> List[Connection]:
        return self._connections

    @property
    def input_size(self) -> int:
        return self._layers[0].size

    @property
    def output_size(self) -> int:
        return self._layers[-1].size

    @property
    def output(self) -> Matrix:
        """Signal of the output layer from the latest forward pass."""

        return self._layers[-1].signal

    def describe(self) -> ModelDescription:
        return ModelDescription(
            layer_sizes=[layer.size for layer in self._layers],
            activations=[str(layer.activation) if layer.activation else "none" for layer in self._layers],
        )

    def parameter_count(self) -> int:
        return sum(conn.parameter_count() for conn in self._connections)

    # ------------------------------------------------------------------
    # Inference

    def forward(self, example: Matrix) -> Matrix:
        """Propagate ``example`` (``n x input_size``) through every connection."""

        check_shape(
            example.cols == self.input_size,
            f"Input has {example.cols} columns but the network expects {self.input_size}",
        )
        self._layers[0].set_signal(example)
        for conn in self._connections:
            pre = conn.source.signal.multiply(conn.weights)
            conn.target.set_signal(pre.add_to_each_row(conn.bias))
            conn.target.activate()
        return self.output

    def predict(self, inputs: Matrix | None = None) -> List[int]:
        """Arg-max column of each output row; ties go to the lowest index."""

        if inputs is not None:
            self.forward(inputs)
        return [int(idx) for idx in np.argmax(self.output.values, axis=1)]

    def accuracy(self, dataset: Matrix, labels: Matrix) -> float:
        """Fraction of rows whose predicted column is the one-hot ``1`` in ``labels``."""

        check_shape(
            dataset.rows == labels.rows,
            f"Dataset has {dataset.rows} rows but labels have {labels.rows}",
        )
        check_shape(
            labels.cols == self.output_size,
            f"Labels have {labels.cols} columns but the network outputs {self.output_size}",
        )
        predictions = self.predict(dataset)
        hits = labels.values[np.arange(labels.rows), predictions] == 1.0
        return float(np.count_nonzero(hits)) / labels.rows

    # ------------------------------------------------------------------
    # Loss

    def l2_penalty(self, regularization: float) -> float:
        return losses.l2_penalty((conn.weights for conn in self._connections), regularization)

    def loss(
        self,
        prediction: Matrix,
        labels: Matrix,
        kind: "losses.LossKind | str" = losses.LossKind.CROSS_ENTROPY,
        regularization: float = 0.0,
    ) -> float:
        return losses.evaluate(
            kind,
            prediction,
            labels,
            (conn.weights for conn in self._connections),
            regularization,
        )

    def cross_entropy_loss(self, prediction: Matrix, labels: Matrix, regularization: float = 0.0) -> float:
        return self.loss(prediction, labels, losses.LossKind.CROSS_ENTROPY, regularization)

    def mean_squared_error(self, prediction: Matrix, labels: Matrix, regularization: float = 0.0) -> float:
        return self.loss(prediction, labels, losses.LossKind.MEAN_SQUARED_ERROR, regularization)

    def __repr__(self) -> str:
        sizes = " -> ".join(str(layer.size) for layer in self._layers)
        return f"Network({sizes})"


__all__ = ["Network"]
