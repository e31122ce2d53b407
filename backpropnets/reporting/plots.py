"""Headless-safe accuracy curve plotting."""

from __future__ import annotations

from pathlib import Path
from typing import List, Mapping, Tuple


class PlotAdapter:
    """Collect per-epoch accuracy and render it once training ends."""

    def __init__(
        self,
        run_dir: str | Path,
        enable_plots: bool = False,
        *,
        title: str = "Test accuracy",
        filename: str = "accuracy.png",
    ):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self.title = title
        self.filename = filename
        self._history: List[Tuple[int, float]] = []
        if self.enable_plots:
            self.run_dir.mkdir(parents=True, exist_ok=True)

    @property
    def plot_path(self) -> Path:
        return self.run_dir / self.filename

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        if "accuracy" not in metrics:
            return
        self._history.append((int(epoch), float(metrics["accuracy"])))

    def on_train_end(self, min_percent: float | None, max_percent: float | None) -> None:
        if not self.enable_plots or not self._history:
            return
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt  # imported lazily for headless safety

        epochs, values = zip(*self._history)
        low = min(values) if min_percent is None else min_percent
        high = max(values) if max_percent is None else max_percent
        # Pad by a tenth of the range; a flat curve still gets a visible band.
        pad = 0.1 * (high - low) or 1.0

        fig, ax = plt.subplots(figsize=(10, 5))
        ax.plot(epochs, values, color="black")
        ax.scatter(epochs, values, color="red", s=12, zorder=3)
        for epoch, value in self._history:
            ax.annotate(f"{value:.3f}", (epoch, value), xytext=(5, 0), textcoords="offset points", fontsize=7)
        ax.set_xlim(0, max(epochs))
        ax.set_ylim(low - pad, high + pad)
        ax.set_xlabel("Epoch")
        ax.set_ylabel("Accuracy (%)")
        ax.set_title(self.title)
        fig.savefig(self.plot_path)
        plt.close(fig)

    __call__ = on_epoch


__all__ = ["PlotAdapter"]
