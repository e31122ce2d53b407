"""Evaluation helpers for the SGD trainer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from ..core.linalg import max_index
from ..core.network import Network
from ..core.types import Sample


@dataclass(frozen=True)
class EvaluationResult:
    correct: int
    total: int

    @property
    def percent(self) -> float:
        if self.total == 0:
            return 0.0
        return self.correct * 100.0 / self.total

    def describe(self) -> str:
        return f"{self.correct} / {self.total} ({self.percent}%)"


def is_correct(output, expected) -> bool:
    """A prediction is correct when its argmax matches the one-hot label's argmax."""

    return max_index(output) == max_index(expected)


def evaluate(network: Network, samples: Iterable[Sample]) -> EvaluationResult:
    correct = 0
    total = 0
    for item in samples:
        sample = Sample.coerce(item)
        output = network.forward(sample.inputs)
        if is_correct(output, sample.expected):
            correct += 1
        total += 1
    return EvaluationResult(correct=correct, total=total)


__all__ = ["EvaluationResult", "evaluate", "is_correct"]
