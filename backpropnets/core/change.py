"""Per-layer gradient accumulator for one mini-batch."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from . import linalg
from .types import Array, Float


@dataclass
class Change:
    """Summed (never averaged) weight and bias gradients for one layer.

    A fresh, zeroed ``Change`` is created for every mini-batch, receives one
    contribution per sample and is consumed by exactly one layer update.
    """

    weights: Array
    biases: Array
    samples: int = 0

    @classmethod
    def zeros(cls, width: int, input_width: int, dtype=Float) -> "Change":
        return cls(
            weights=np.zeros((width, input_width), dtype=dtype),
            biases=np.zeros(width, dtype=dtype),
        )

    @property
    def shape(self) -> tuple[int, int]:
        return self.weights.shape  # type: ignore[return-value]

    def accumulate(self, errors: Array, previous_output: Array) -> None:
        """Add one sample's gradient: ``outer(errors, previous_output)`` and ``errors``."""

        linalg.outer_product_add(errors, previous_output, self.weights)
        linalg.plus_equals_matrix_multiplied(self.biases, 1.0, errors)
        self.samples += 1

    def is_zero(self) -> bool:
        return not (np.any(self.weights) or np.any(self.biases))


__all__ = ["Change"]
