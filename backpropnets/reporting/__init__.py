"""Reporting utilities for BackpropNets."""

from .artifacts import load_checkpoint, save_checkpoint, write_manifest
from .metrics import CsvSink, JsonlSink
from .plots import PlotAdapter

__all__ = ["write_manifest", "save_checkpoint", "load_checkpoint", "JsonlSink", "CsvSink", "PlotAdapter"]
