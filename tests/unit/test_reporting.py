import json

import numpy as np

from backpropnets.netlog import setup_logging
from backpropnets.reporting import CsvSink, JsonlSink, PlotAdapter, load_checkpoint, save_checkpoint


def test_jsonl_sink_writes_epochs_and_summary(tmp_path):
    sink = JsonlSink(tmp_path / "m.jsonl", seed=4)
    sink.on_epoch(1, {"accuracy": 50.0, "loss": 0.7})
    sink(2, {"accuracy": 75.0, "loss": 0.5})
    sink.on_train_end(50.0, 75.0)
    records = [json.loads(line) for line in (tmp_path / "m.jsonl").read_text().splitlines()]
    assert [r.get("epoch") for r in records[:2]] == [1, 2]
    assert records[0]["seed"] == 4
    assert records[-1] == {"event": "train_end", "min_accuracy": 50.0, "max_accuracy": 75.0}


def test_csv_sink_has_single_header(tmp_path):
    sink = CsvSink(tmp_path / "m.csv")
    sink.on_epoch(1, {"loss": 0.5})
    sink.on_epoch(2, {"loss": 0.25})
    lines = (tmp_path / "m.csv").read_text().splitlines()
    assert lines[0] == "epoch,loss"
    assert len(lines) == 3


def test_plot_adapter_headless(tmp_path):
    adapter = PlotAdapter(tmp_path, enable_plots=True)
    adapter.on_epoch(1, {"accuracy": 60.0})
    adapter.on_epoch(2, {"accuracy": 80.0})
    adapter.on_epoch(3, {"loss": 0.1})
    adapter.on_train_end(60.0, 80.0)
    assert adapter.plot_path.exists()


def test_plot_adapter_disabled_writes_nothing(tmp_path):
    adapter = PlotAdapter(tmp_path / "plots", enable_plots=False)
    adapter.on_epoch(1, {"accuracy": 60.0})
    adapter.on_train_end(60.0, 60.0)
    assert not (tmp_path / "plots").exists()


def test_checkpoint_round_trip(tmp_path):
    state = {"W1": np.arange(6, dtype=np.float32).reshape(2, 3), "b1": np.zeros(2, dtype=np.float32)}
    path = save_checkpoint(tmp_path / "last.ckpt", state)
    loaded = load_checkpoint(path)
    assert set(loaded) == {"W1", "b1"}
    assert np.array_equal(loaded["W1"], state["W1"])


def test_setup_logging_replaces_handlers():
    log = setup_logging("backpropnets.test", level="DEBUG")
    log = setup_logging("backpropnets.test", level="INFO")
    assert len(log.handlers) == 1
    assert log.level == 20
