"""Mini-batch stochastic gradient descent over a :class:`Network`."""

from __future__ import annotations

import logging
from typing import Callable, List, Mapping, Sequence

import numpy as np

from ..core.costs import Regularisation
from ..core.network import Network
from ..core.types import Sample, TrainingHistory
from .metrics import EvaluationResult, evaluate

log = logging.getLogger(__name__)


class SGDTrainer:
    """Run epochs of shuffled mini-batch SGD with optional per-epoch evaluation."""

    def __init__(
        self,
        network: Network,
        *,
        learning_rate: float,
        mini_batch_size: int,
        regularisation: Regularisation | None = None,
        rng: np.random.Generator | None = None,
        callbacks: Sequence[object] | None = None,
    ) -> None:
        if learning_rate <= 0:
            raise ValueError(f"learning_rate must be positive, got {learning_rate}")
        if mini_batch_size <= 0:
            raise ValueError(f"mini_batch_size must be positive, got {mini_batch_size}")
        self.network = network
        self.learning_rate = float(learning_rate)
        self.mini_batch_size = int(mini_batch_size)
        self.regularisation = regularisation or Regularisation.none()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.callbacks = list(callbacks or [])

    def run(
        self,
        training_set: Sequence[Sample],
        epochs: int,
        test_set: Sequence[Sample] | None = None,
        *,
        should_stop: Callable[[], bool] | None = None,
    ) -> TrainingHistory:
        training_set = [Sample.coerce(item) for item in training_set]
        test_set = [Sample.coerce(item) for item in test_set] if test_set is not None else None
        if not training_set:
            raise ValueError("training_set must contain at least one sample")
        if epochs <= 0:
            raise ValueError(f"epochs must be positive, got {epochs}")

        history = TrainingHistory()
        best: EvaluationResult | None = None
        if test_set:
            initial = evaluate(self.network, test_set)
            log.info("Epoch 0: %s", initial.describe())

        for epoch in range(1, epochs + 1):
            if should_stop is not None and should_stop():
                log.info("Stopping before epoch %d", epoch)
                break
            mean_loss, stopped = self._run_epoch(training_set, should_stop)
            history.losses.append((epoch, mean_loss))
            history.epochs_run = epoch

            metrics: dict = {"loss": mean_loss}
            if test_set:
                result = evaluate(self.network, test_set)
                history.record(epoch, result.percent)
                if best is None or result.correct > best.correct:
                    best = result
                metrics.update(_accuracy_metrics(result))
                log.info("Epoch %d: %s", epoch, result.describe())
            else:
                log.info("Epoch %d complete.", epoch)
            self._emit_epoch(epoch, metrics)
            if stopped:
                log.info("Stopped after epoch %d", epoch)
                break

        if best is not None:
            log.info("Highest accuracy: %s", best.describe())
            self._emit_train_end(history.min_accuracy, history.max_accuracy)
        return history

    # ------------------------------------------------------------------
    # Internal helpers

    def _run_epoch(
        self,
        training_set: List[Sample],
        should_stop: Callable[[], bool] | None,
    ) -> tuple[float, bool]:
        order = self.rng.permutation(len(training_set))
        output_layer = self.network.output_layer
        total_loss = 0.0
        seen = 0
        for start in range(0, len(order), self.mini_batch_size):
            if should_stop is not None and seen and should_stop():
                return (total_loss / seen), True
            batch = [training_set[i] for i in order[start : start + self.mini_batch_size]]
            total_loss += self._run_batch(batch, output_layer)
            seen += len(batch)
        return total_loss / seen, False

    def _run_batch(self, batch: Sequence[Sample], output_layer) -> float:
        changes = self.network.new_changes()
        batch_loss = 0.0
        for sample in batch:
            self.network.backpropagate(sample.inputs, sample.expected, changes)
            batch_loss += output_layer.cost_value(sample.expected)
        self.network.apply_changes(changes, self.learning_rate, len(batch), self.regularisation)
        log.debug("Applied mini-batch of %d samples, loss %.6f", len(batch), batch_loss)
        return batch_loss

    def _emit_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(epoch, metrics)

    def _emit_train_end(self, min_percent: float | None, max_percent: float | None) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "on_train_end"):
                callback.on_train_end(min_percent, max_percent)  # type: ignore[attr-defined]


def _accuracy_metrics(result: EvaluationResult) -> Mapping[str, float]:
    return {
        "accuracy": float(result.percent),
        "correct": float(result.correct),
        "total": float(result.total),
    }


def train(
    network: Network,
    training_set: Sequence[Sample],
    test_set: Sequence[Sample] | None = None,
    *,
    epochs: int,
    mini_batch_size: int,
    learning_rate: float,
    regularisation: Regularisation | None = None,
    rng: np.random.Generator | None = None,
    callbacks: Sequence[object] | None = None,
    should_stop: Callable[[], bool] | None = None,
) -> TrainingHistory:
    """Train ``network`` with mini-batch SGD and return the per-epoch accuracy series."""

    trainer = SGDTrainer(
        network,
        learning_rate=learning_rate,
        mini_batch_size=mini_batch_size,
        regularisation=regularisation,
        rng=rng,
        callbacks=callbacks,
    )
    return trainer.run(training_set, epochs, test_set, should_stop=should_stop)


__all__ = ["SGDTrainer", "train"]
