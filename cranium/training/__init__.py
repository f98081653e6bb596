"""Training loop, configuration pipelines and presets."""

from .backprop import BackpropWorkspace
from .trainer import MomentumOptimizer, Trainer, TrainingConfig, train

__all__ = ["BackpropWorkspace", "MomentumOptimizer", "Trainer", "TrainingConfig", "train"]
