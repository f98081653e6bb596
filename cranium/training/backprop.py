"""Per-example backpropagation with reusable scratch buffers."""

from __future__ import annotations

from typing import List

from ..core.activations import Activation
from ..core.losses import output_delta_into
from ..core.matrix import Matrix
from ..core.network import Network


class BackpropWorkspace:
    """Scratch, accumulator and momentum buffers sized for one network.

    Everything is allocated once so the per-example loop only writes into
    existing matrices.  ``errors[k]`` is the delta at ``layers[k]``;
    ``grad_w[i]`` / ``grad_b[i]`` belong to ``connections[i]``.
    """

    def __init__(self, network: Network) -> None:
        self.network = network
        layers = network.layers
        connections = network.connections

        self.errors: List[Matrix] = [Matrix.zeros(1, layer.size) for layer in layers]
        self.derivs: List[Matrix] = [Matrix.zeros(1, layer.size) for layer in layers]
        self.backflow: List[Matrix] = [Matrix.zeros(1, conn.source.size) for conn in connections]
        self.weights_t: List[Matrix] = [Matrix.zeros(conn.target.size, conn.source.size) for conn in connections]
        self.inputs_t: List[Matrix] = [Matrix.zeros(conn.source.size, 1) for conn in connections]

        self.grad_w: List[Matrix] = [_like(conn.weights) for conn in connections]
        self.grad_b: List[Matrix] = [_like(conn.bias) for conn in connections]
        self.sum_w: List[Matrix] = [_like(conn.weights) for conn in connections]
        self.sum_b: List[Matrix] = [_like(conn.bias) for conn in connections]
        self.update_w: List[Matrix] = [_like(conn.weights) for conn in connections]
        self.update_b: List[Matrix] = [_like(conn.bias) for conn in connections]

    def accumulate(self, example: Matrix, target: Matrix) -> None:
        """Forward ``example`` and add its weight/bias gradients to the batch sums."""

        network = self.network
        connections = network.connections
        prediction = network.forward(example)
        output_delta_into(prediction, target, self.errors[-1])

        for idx in reversed(range(len(connections))):
            conn = connections[idx]
            error = self.errors[idx + 1]

            conn.source.signal.transpose_into(self.inputs_t[idx])
            self.inputs_t[idx].multiply_into(error, self.grad_w[idx])
            error.copy_into(self.grad_b[idx])

            if idx > 0:
                source = conn.source
                conn.weights.transpose_into(self.weights_t[idx])
                error.multiply_into(self.weights_t[idx], self.backflow[idx])
                activation = source.activation or Activation.LINEAR
                activation.derivative_into(source.signal, self.derivs[idx])
                self.backflow[idx].hadamard_into(self.derivs[idx], self.errors[idx])

        for idx in range(len(connections)):
            self.grad_w[idx].add_to(self.sum_w[idx])
            self.grad_b[idx].add_to(self.sum_b[idx])
        self._reset_scratch()

    def apply(self, step_size: float, momentum: float) -> None:
        """Apply ``update = momentum * previous_update + step_size * batch_sum``.

        The update is subtracted from the parameters and kept for the next
        call; the batch sums are cleared afterwards.
        """

        for idx, conn in enumerate(self.network.connections):
            for total, update, param in (
                (self.sum_w[idx], self.update_w[idx], conn.weights),
                (self.sum_b[idx], self.update_b[idx], conn.bias),
            ):
                total.scalar_multiply(step_size)
                update.scalar_multiply(momentum)
                total.add_to(update)
                update.subtract_from(param)
                total.to_zero()

    def _reset_scratch(self) -> None:
        for group in (self.errors, self.derivs, self.backflow, self.weights_t, self.inputs_t, self.grad_w, self.grad_b):
            for matrix in group:
                matrix.to_zero()


def _like(matrix: Matrix) -> Matrix:
    return Matrix.zeros(matrix.rows, matrix.cols)


__all__ = ["BackpropWorkspace"]
