"""Training loops and run pipelines."""

from .metrics import EvaluationResult, evaluate
from .trainer import SGDTrainer, train

__all__ = ["EvaluationResult", "SGDTrainer", "evaluate", "train"]
