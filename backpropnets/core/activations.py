"""Activation functions for BackpropNets layers."""

from __future__ import annotations

from enum import Enum

import numpy as np

from .errors import UnsupportedOperationError
from .types import Array


def sigmoid(z: Array) -> Array:
    """Return the logistic sigmoid of ``z``."""

    return 1.0 / (1.0 + np.exp(-z))


def d_sigmoid(z: Array) -> Array:
    s = sigmoid(z)
    return s * (1.0 - s)


def softmax(z: Array) -> Array:
    """Return the normalised exponential of the whole vector ``z``."""

    shifted = z - np.max(z)
    e = np.exp(shifted)
    return e / np.sum(e)


class Activation(str, Enum):
    """Activation function applied to a layer's pre-activation vector."""

    SIGMOID = "sigmoid"
    SOFTMAX = "softmax"

    def evaluate(self, z):
        """Evaluate the activation element by element."""

        if self is Activation.SIGMOID:
            with np.errstate(over="ignore"):
                return sigmoid(z)
        if self is Activation.SOFTMAX:
            raise UnsupportedOperationError(
                "softmax has no per-element form; it is only defined over a whole vector"
            )
        raise ValueError(f"Unknown activation: {self}")  # pragma: no cover - guardrail

    def derivative(self, z):
        """Evaluate the activation's derivative element by element."""

        if self is Activation.SIGMOID:
            with np.errstate(over="ignore"):
                return d_sigmoid(z)
        if self is Activation.SOFTMAX:
            raise UnsupportedOperationError(
                "softmax derivative needs the full Jacobian and is not implemented"
            )
        raise ValueError(f"Unknown activation: {self}")  # pragma: no cover - guardrail

    def apply(self, z: Array) -> Array:
        """Activate a whole pre-activation vector, as a layer's forward pass does."""

        if self is Activation.SOFTMAX:
            return softmax(z).astype(z.dtype, copy=False)
        return np.asarray(self.evaluate(z), dtype=z.dtype)


__all__ = ["Activation", "sigmoid", "d_sigmoid", "softmax"]
