"""Pure in-memory synthetic classification datasets."""

from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np

from ..core.errors import check_config
from ..core.types import Array
from .dataset import Dataset
from .registry import DatasetSpec, register_dataset


def one_hot(y: Array, num_classes: int) -> Array:
    out = np.zeros((y.shape[0], num_classes), dtype=np.float64)
    out[np.arange(y.shape[0]), y] = 1.0
    return out


def _to_spec(name: str, x: Array, y: Array, num_classes: int, provenance: dict) -> DatasetSpec:
    features = Dataset.from_array(x)
    labels = Dataset.from_array(one_hot(y, num_classes))
    return DatasetSpec(name=name, features=features, labels=labels, provenance=provenance)


def make_separable(
    n: int = 200,
    d: int = 2,
    axis: int = 0,
    margin: float = 0.1,
    seed: int = 0,
) -> Tuple[Array, Array]:
    """Points in ``[-1, 1]^d``; the class is the sign of coordinate ``axis``.

    Points are pushed ``margin`` away from the decision boundary.
    """

    check_config(n > 0 and d > 0, f"n and d must be positive, got n={n}, d={d}")
    check_config(0 <= axis < d, f"axis must be in [0, {d}), got {axis}")
    rng = np.random.default_rng(seed)
    x = rng.uniform(-1.0, 1.0, size=(n, d))
    y = (x[:, axis] > 0).astype(np.int64)
    x[:, axis] += np.where(y == 1, margin, -margin)
    return x, y


def make_blobs(
    n_per_class: int = 60,
    centers: Sequence[Sequence[float]] = ((2.0, 2.0), (-2.0, -2.0), (2.0, -2.0)),
    spread: float = 0.4,
    seed: int = 0,
) -> Tuple[Array, Array]:
    """Isotropic Gaussian blobs, one class per centre."""

    check_config(n_per_class > 0, f"n_per_class must be positive, got {n_per_class}")
    rng = np.random.default_rng(seed)
    centre_arr = np.asarray(centers, dtype=np.float64)
    inputs = []
    labels = []
    for idx, centre in enumerate(centre_arr):
        noise = spread * rng.standard_normal((n_per_class, centre_arr.shape[1]))
        inputs.append(centre + noise)
        labels.append(np.full((n_per_class,), idx, dtype=np.int64))
    x = np.vstack(inputs)
    y = np.concatenate(labels)
    idx = rng.permutation(x.shape[0])
    return x[idx], y[idx]


def make_xor(n: int = 200, noise: float = 0.1, seed: int = 0) -> Tuple[Array, Array]:
    """Four noisy corners of the unit square labelled by XOR of their coordinates."""

    check_config(n > 0, f"n must be positive, got {n}")
    rng = np.random.default_rng(seed)
    bits = rng.integers(0, 2, size=(n, 2))
    x = bits.astype(np.float64) + noise * rng.standard_normal((n, 2))
    y = np.bitwise_xor(bits[:, 0], bits[:, 1]).astype(np.int64)
    return x, y


@register_dataset("separable")
def _separable_factory(
    n: int = 200,
    d: int = 2,
    axis: int = 0,
    margin: float = 0.1,
    seed: int = 0,
) -> DatasetSpec:
    x, y = make_separable(n=n, d=d, axis=axis, margin=margin, seed=seed)
    provenance = {"type": "synthetic", "n": n, "d": d, "axis": axis, "margin": margin, "seed": seed}
    return _to_spec("separable", x, y, 2, provenance)


@register_dataset("blobs")
def _blobs_factory(
    n_per_class: int = 60,
    centers: Sequence[Sequence[float]] = ((2.0, 2.0), (-2.0, -2.0), (2.0, -2.0)),
    spread: float = 0.4,
    seed: int = 0,
) -> DatasetSpec:
    x, y = make_blobs(n_per_class=n_per_class, centers=centers, spread=spread, seed=seed)
    provenance = {
        "type": "synthetic",
        "n_per_class": n_per_class,
        "centers": [list(map(float, c)) for c in centers],
        "spread": spread,
        "seed": seed,
    }
    return _to_spec("blobs", x, y, len(centers), provenance)


@register_dataset("xor")
def _xor_factory(n: int = 200, noise: float = 0.1, seed: int = 0) -> DatasetSpec:
    x, y = make_xor(n=n, noise=noise, seed=seed)
    provenance = {"type": "synthetic", "n": n, "noise": noise, "seed": seed}
    return _to_spec("xor", x, y, 2, provenance)


__all__ = ["make_blobs", "make_separable", "make_xor", "one_hot"]
