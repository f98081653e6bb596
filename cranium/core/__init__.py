"""Core numerical primitives for Cranium."""

from . import activations, errors, layers, losses, matrix, network, sampling, types

__all__ = ["activations", "errors", "layers", "losses", "matrix", "network", "sampling", "types"]
