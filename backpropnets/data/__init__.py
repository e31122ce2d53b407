"""Dataset providers for BackpropNets."""

from . import mnist, synthetic  # noqa: F401  (registers datasets)
from .registry import DatasetSpec, available_datasets, get_dataset, register_dataset

__all__ = [
    "DatasetSpec",
    "available_datasets",
    "get_dataset",
    "register_dataset",
]
