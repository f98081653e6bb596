"""Exception hierarchy for Cranium."""

from __future__ import annotations


class CraniumError(Exception):
    """Base class for all errors raised by Cranium."""


class ShapeMismatchError(CraniumError, ValueError):
    """Raised when matrix dimensions are incompatible or degenerate."""


class ConfigurationError(CraniumError, ValueError):
    """Raised when a network, training or pipeline configuration is inconsistent."""


def check_shape(condition: bool, message: str) -> None:
    """Raise :class:`ShapeMismatchError` with ``message`` unless ``condition`` holds."""

    if not condition:
        raise ShapeMismatchError(message)


def check_config(condition: bool, message: str) -> None:
    """Raise :class:`ConfigurationError` with ``message`` unless ``condition`` holds."""

    if not condition:
        raise ConfigurationError(message)


__all__ = [
    "CraniumError",
    "ShapeMismatchError",
    "ConfigurationError",
    "check_shape",
    "check_config",
]
