"""Core typing contracts for BackpropNets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

import numpy as np

Array = np.ndarray
Float = np.float32


@dataclass(frozen=True)
class Sample:
    """A single training or test example."""

    inputs: Array
    expected: Array

    @classmethod
    def from_values(cls, inputs, expected, dtype=Float) -> "Sample":
        return cls(
            inputs=np.asarray(inputs, dtype=dtype).reshape(-1),
            expected=np.asarray(expected, dtype=dtype).reshape(-1),
        )

    @classmethod
    def coerce(cls, item) -> "Sample":
        """Accept a ``Sample`` or an ``(inputs, expected)`` pair."""

        if isinstance(item, cls):
            return item
        inputs, expected = item
        return cls.from_values(inputs, expected)


@dataclass
class TrainingHistory:
    """Per-epoch accuracy series returned by :func:`backpropnets.training.trainer.train`."""

    accuracy: List[Tuple[int, float]] = field(default_factory=list)
    losses: List[Tuple[int, float]] = field(default_factory=list)
    min_accuracy: float | None = None
    max_accuracy: float | None = None
    epochs_run: int = 0

    @property
    def best_accuracy(self) -> float | None:
        return self.max_accuracy

    def record(self, epoch: int, percent: float) -> None:
        self.accuracy.append((int(epoch), float(percent)))
        if self.min_accuracy is None or percent < self.min_accuracy:
            self.min_accuracy = float(percent)
        if self.max_accuracy is None or percent > self.max_accuracy:
            self.max_accuracy = float(percent)

    def to_dict(self) -> Dict[str, object]:
        return {
            "accuracy": [[epoch, value] for epoch, value in self.accuracy],
            "losses": [[epoch, value] for epoch, value in self.losses],
            "min_accuracy": self.min_accuracy,
            "max_accuracy": self.max_accuracy,
            "epochs_run": self.epochs_run,
        }


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`backpropnets.training.pipelines.run_pipeline`."""

    epochs: int
    best_accuracy: float | None
    metrics_path: str
    manifest_path: str
    history_path: str = ""
    checkpoint_path: str = ""
