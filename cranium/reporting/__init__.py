"""Reporting utilities for Cranium."""

from .metrics import CsvSink, JsonlSink, MetricsCapture
from .plots import PlotAdapter

__all__ = ["CsvSink", "JsonlSink", "MetricsCapture", "PlotAdapter"]
