"""Cost functions and weight regularisation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np

from . import linalg
from .activations import Activation
from .errors import UnsupportedOperationError
from .types import Array

_EPS = 1e-7


class Cost(str, Enum):
    """Cost function attached to an output layer."""

    QUADRATIC = "quadratic"
    CROSS_ENTROPY = "cross_entropy"
    LOG_LIKELIHOOD = "log_likelihood"

    def evaluate(self, output: Array, expected: Array) -> float:
        """Return the cost of ``output`` against ``expected`` for one sample."""

        output = np.asarray(output, dtype=np.float64)
        expected = np.asarray(expected, dtype=np.float64)
        if self is Cost.QUADRATIC:
            return float(0.5 * np.sum(np.square(output - expected)))
        clipped = np.clip(output, _EPS, 1.0 - _EPS)
        if self is Cost.CROSS_ENTROPY:
            return float(
                -np.sum(expected * np.log(clipped) + (1.0 - expected) * np.log(1.0 - clipped))
            )
        if self is Cost.LOG_LIKELIHOOD:
            return float(-np.sum(expected * np.log(clipped)))
        raise ValueError(f"Unknown cost: {self}")  # pragma: no cover - guardrail

    def derivative(self, output: Array, expected: Array) -> Array:
        """Return dC/da for each output neuron."""

        if self is Cost.QUADRATIC:
            return output - expected
        clipped = np.clip(output, _EPS, 1.0 - _EPS)
        if self is Cost.CROSS_ENTROPY:
            return ((clipped - expected) / (clipped * (1.0 - clipped))).astype(output.dtype)
        if self is Cost.LOG_LIKELIHOOD:
            return (-expected / clipped).astype(output.dtype)
        raise ValueError(f"Unknown cost: {self}")  # pragma: no cover - guardrail

    def c_dz(self, activation: Activation, output: Array, expected: Array, z: Array) -> Array:
        """Return dC/dz for the output layer, fused where the pairing allows it."""

        activation = Activation(activation)
        if self is Cost.QUADRATIC:
            return linalg.hadamard_product(output - expected, activation.derivative(z))
        if self is Cost.CROSS_ENTROPY and activation is Activation.SIGMOID:
            return output - expected
        if self is Cost.LOG_LIKELIHOOD and activation is Activation.SOFTMAX:
            return output - expected
        raise UnsupportedOperationError(
            f"{self.value} cost is not implemented for {activation.value} activation"
        )


class RegularisationKind(str, Enum):
    NONE = "none"
    L1 = "l1"
    L2 = "l2"


@dataclass(frozen=True)
class Regularisation:
    """Weight regularisation applied when a layer's accumulated change is applied."""

    kind: RegularisationKind = RegularisationKind.NONE
    lam: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", RegularisationKind(self.kind))
        if self.lam < 0:
            raise ValueError(f"Regularisation lambda must be non-negative, got {self.lam}")

    @classmethod
    def none(cls) -> "Regularisation":
        return cls()

    @classmethod
    def l1(cls, lam: float) -> "Regularisation":
        return cls(RegularisationKind.L1, float(lam))

    @classmethod
    def l2(cls, lam: float) -> "Regularisation":
        return cls(RegularisationKind.L2, float(lam))

    @classmethod
    def from_config(cls, config) -> "Regularisation":
        """Parse ``None``, ``"none"`` or ``{"kind": "l1"|"l2", "lambda": x}``."""

        if config is None:
            return cls.none()
        if isinstance(config, str):
            config = {"kind": config}
        kind = RegularisationKind(str(config.get("kind", "none")).lower())
        if kind is RegularisationKind.NONE:
            return cls.none()
        lam = config.get("lambda", config.get("lam"))
        if lam is None:
            raise ValueError(f"{kind.value} regularisation needs a 'lambda' value")
        return cls(kind, float(lam))

    def apply(self, weights: Array, gradient: Array, learning_rate: float, batch_size: int) -> Array:
        """Step ``weights`` in place against the summed mini-batch ``gradient``."""

        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        multiplier = -learning_rate / batch_size
        if self.kind is RegularisationKind.L1:
            linalg.scale_elements(weights, 1.0 - learning_rate * self.lam / batch_size)
            linalg.plus_equals_matrix_multiplied(weights, multiplier, gradient)
        elif self.kind is RegularisationKind.L2:
            # Penalty uses sign(w), not w.
            penalised = gradient + weights.dtype.type(self.lam) * np.sign(weights)
            linalg.plus_equals_matrix_multiplied(weights, multiplier, penalised)
        elif self.kind is RegularisationKind.NONE:
            linalg.plus_equals_matrix_multiplied(weights, multiplier, gradient)
        else:  # pragma: no cover - guardrail
            raise ValueError(f"Unknown regularisation: {self.kind}")
        return weights


__all__ = ["Cost", "Regularisation", "RegularisationKind"]
