"""Dataset registry and metadata contracts."""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Mapping, MutableMapping

from ..core.errors import ConfigurationError
from .dataset import Dataset


@dataclass(frozen=True)
class DatasetSpec:
    """A feature table, its one-hot labels and where they came from.

    Attributes
    ----------
    name:
        Registry identifier of the dataset.
    features:
        ``n x d_in`` feature table.
    labels:
        ``n x d_out`` one-hot label table.
    provenance:
        Generator options that reproduce the tables exactly.
    """

    name: str
    features: Dataset
    labels: Dataset
    provenance: Dict[str, Any] = field(default_factory=dict)

    @property
    def d_in(self) -> int:
        return self.features.cols

    @property
    def d_out(self) -> int:
        return self.labels.cols

    @property
    def rows(self) -> int:
        return self.features.rows


DatasetFactory = Callable[..., DatasetSpec]


_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(
    name: str | None = None,
    factory: DatasetFactory | None = None,
) -> Callable[[DatasetFactory], DatasetFactory] | DatasetFactory:
    """Register a dataset factory.

    ``register_dataset`` can be used both as a decorator::

        @register_dataset("blobs")
        def make_blobs(**kwargs):
            ...

    or directly::

        register_dataset("blobs", make_blobs)
    """

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[str(name or func.__name__)] = func
        return func

    if factory is not None:
        return _decorator(factory)
    if name is None:
        raise TypeError("register_dataset requires a name when used without a decorator")
    return _decorator


def get_dataset(name: str, /, **options: Any) -> DatasetSpec:
    """Build the dataset registered as ``name`` with ``options``."""

    if name not in _REGISTRY:
        available = ", ".join(available_datasets())
        raise ConfigurationError(f"Unknown dataset {name!r}. Available datasets: {available}")
    factory = _REGISTRY[name]
    _check_options(name, factory, options)
    spec = factory(**options)
    _validate_spec(spec)
    return spec


def available_datasets() -> Iterable[str]:
    """Return the sorted list of available dataset identifiers."""

    return sorted(_REGISTRY)


def _check_options(name: str, factory: DatasetFactory, options: Mapping[str, Any]) -> None:
    params = inspect.signature(factory).parameters.values()
    if any(param.kind is inspect.Parameter.VAR_KEYWORD for param in params):
        return
    accepted = {param.name for param in params}
    unknown = sorted(set(options) - accepted)
    if unknown:
        raise ConfigurationError(
            f"Unknown options for dataset {name!r}: {', '.join(unknown)}. "
            f"Accepted options: {', '.join(sorted(accepted))}"
        )


def _validate_spec(spec: DatasetSpec) -> None:
    if spec.features.rows != spec.labels.rows:
        raise ConfigurationError(
            f"Dataset {spec.name!r} has {spec.features.rows} feature rows "
            f"but {spec.labels.rows} label rows"
        )


__all__ = [
    "DatasetSpec",
    "available_datasets",
    "get_dataset",
    "register_dataset",
]
