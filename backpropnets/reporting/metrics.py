"""Per-epoch metric sinks usable as trainer callbacks."""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Dict, List, Mapping


def _numeric(metrics: Mapping[str, object]) -> Dict[str, float]:
    return {name: float(value) for name, value in metrics.items() if isinstance(value, (int, float))}


class _FileSink:
    """Truncates ``path`` on construction; subclasses append one row per epoch."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        raise NotImplementedError

    def __call__(self, epoch: int, metrics: Mapping[str, float]) -> None:
        self.on_epoch(epoch, metrics)


class JsonlSink(_FileSink):
    """One JSON object per epoch, followed by a ``train_end`` summary record."""

    def __init__(self, path: str | Path, *, seed: int | None = None) -> None:
        super().__init__(path)
        self.seed = seed

    def _append(self, record: Mapping[str, object]) -> None:
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record) + "\n")

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        self._append({"epoch": int(epoch), "seed": self.seed, **_numeric(metrics)})

    def on_train_end(self, min_percent: float | None, max_percent: float | None) -> None:
        self._append({"event": "train_end", "min_accuracy": min_percent, "max_accuracy": max_percent})


class CsvSink(_FileSink):
    """CSV rows whose columns are fixed by the first epoch reported."""

    def __init__(self, path: str | Path) -> None:
        super().__init__(path)
        self.columns: List[str] | None = None

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        row = {"epoch": int(epoch), **_numeric(metrics)}
        header = self.columns is None
        if header:
            self.columns = ["epoch"] + sorted(name for name in row if name != "epoch")
        with self.path.open("a", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=self.columns, extrasaction="ignore")
            if header:
                writer.writeheader()
            writer.writerow(row)


__all__ = ["JsonlSink", "CsvSink"]
