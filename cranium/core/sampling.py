"""Box–Muller Gaussian sampling for weight initialisation."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np

from .matrix import Matrix

_TWO_PI = 2.0 * math.pi
_EPSILON = np.finfo(np.float64).tiny


@dataclass
class GaussianSampler:
    """Standard-normal sampler built on the Box–Muller transform.

    Each transform yields two independent samples.  The first is returned
    and the second is cached for the following call, so the sampler is
    stateful and should be owned by whoever initialises the weights.
    """

    rng: np.random.Generator
    _spare: float | None = field(default=None, init=False, repr=False)

    @classmethod
    def from_seed(cls, seed: int | None = None) -> "GaussianSampler":
        return cls(np.random.default_rng(seed))

    def sample(self) -> float:
        if self._spare is not None:
            value, self._spare = self._spare, None
            return value
        u1 = 0.0
        while u1 <= _EPSILON:
            u1 = float(self.rng.random())
        u2 = float(self.rng.random())
        radius = math.sqrt(-2.0 * math.log(u1))
        self._spare = radius * math.sin(_TWO_PI * u2)
        return radius * math.cos(_TWO_PI * u2)

    def sample_matrix(self, rows: int, cols: int, scale: float = 1.0) -> Matrix:
        """Return a new ``rows x cols`` matrix of samples divided by ``scale``."""

        matrix = Matrix.zeros(rows, cols)
        matrix.transform(lambda _: self.sample() / scale)
        return matrix


__all__ = ["GaussianSampler"]
