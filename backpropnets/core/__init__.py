"""Core numerical primitives for BackpropNets."""

from . import activations, change, costs, errors, initialisation, layers, linalg, network, types

__all__ = [
    "activations",
    "change",
    "costs",
    "errors",
    "initialisation",
    "layers",
    "linalg",
    "network",
    "types",
]
