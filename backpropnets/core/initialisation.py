"""Weight initialisation schemes."""

from __future__ import annotations

from enum import Enum
from typing import Tuple

import numpy as np

from .types import Array, Float


class InitType(str, Enum):
    """Supported weight initialisation schemes."""

    XAVIER = "xavier"
    NORMALISED_XAVIER = "normalised_xavier"
    HE = "he"

    def generate_weight(self, rng: np.random.Generator, fan_in: int, fan_out: int) -> float:
        """Draw a single initial weight."""

        return float(self.generate_weights(rng, fan_in, fan_out, shape=()))

    def generate_weights(
        self,
        rng: np.random.Generator,
        fan_in: int,
        fan_out: int,
        shape: Tuple[int, ...] | None = None,
        dtype=Float,
    ) -> Array:
        """Draw independent initial weights, one per element of ``shape``.

        ``shape`` defaults to ``(fan_out, fan_in)``.
        """

        if fan_in <= 0 or fan_out <= 0:
            raise ValueError(f"fan_in and fan_out must be positive, got {fan_in}, {fan_out}")
        if shape is None:
            shape = (fan_out, fan_in)
        if self is InitType.XAVIER:
            scale = np.sqrt(1.0 / fan_in)
            values = rng.uniform(-scale, scale, size=shape)
        elif self is InitType.NORMALISED_XAVIER:
            scale = np.sqrt(6.0 / (fan_in + fan_out))
            values = rng.uniform(-scale, scale, size=shape)
        elif self is InitType.HE:
            values = rng.normal(0.0, np.sqrt(2.0 / fan_in), size=shape)
        else:  # pragma: no cover - guardrail
            raise ValueError(f"Unknown initialisation: {self}")
        return np.asarray(values, dtype=dtype)


def generate_weight(scheme: InitType | str, rng: np.random.Generator, fan_in: int, fan_out: int) -> float:
    return InitType(scheme).generate_weight(rng, fan_in, fan_out)


__all__ = ["InitType", "generate_weight"]
