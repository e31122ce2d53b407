"""Config-driven run assembly: dataset, topology, training and artifacts."""

from __future__ import annotations

import json
import logging
import time
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence

import numpy as np

from ..core.costs import Regularisation
from ..core.layers import LayerDescriptor, feedforward, input_layer, output
from ..core.network import Network
from ..core.types import RunResult
from ..data import get_dataset
from ..data.registry import DatasetSpec
from ..reporting.artifacts import save_checkpoint, write_manifest
from ..reporting.metrics import CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from .trainer import train

log = logging.getLogger(__name__)

_PRESETS: Dict[str, Mapping[str, object]] = {
    "xor-quadratic": {
        "data": {"name": "xor", "options": {}},
        "model": {
            "d_in": 2,
            "hidden": [4],
            "d_out": 2,
            "activation": "sigmoid",
            "cost": "quadratic",
            "init": "normalised_xavier",
        },
        "train": {
            "epochs": 300,
            "batch_size": 4,
            "lr": 2.0,
            "seed": 0,
            "run_dir": "runs/xor-quadratic",
            "enable_plots": False,
        },
    },
    "blobs-cross-entropy": {
        "data": {"name": "blobs", "options": {"n_train_per_class": 20, "n_test_per_class": 10, "seed": 0}},
        "model": {
            "layers": [
                {"kind": "input", "width": 2},
                {"kind": "feedforward", "width": 16, "activation": "sigmoid", "init": "xavier"},
                {
                    "kind": "output",
                    "width": 3,
                    "activation": "sigmoid",
                    "cost": "cross_entropy",
                    "init": "xavier",
                },
            ]
        },
        "train": {
            "epochs": 20,
            "batch_size": 10,
            "lr": 0.5,
            "seed": 1,
            "run_dir": "runs/blobs-cross-entropy",
            "enable_plots": False,
        },
    },
    "blobs-softmax": {
        "data": {"name": "blobs", "options": {"n_train_per_class": 20, "n_test_per_class": 10, "seed": 0}},
        "model": {
            "layers": [
                {"kind": "input", "width": 2},
                {"kind": "feedforward", "width": 16, "activation": "sigmoid", "init": "he"},
                {
                    "kind": "output",
                    "width": 3,
                    "activation": "softmax",
                    "cost": "log_likelihood",
                    "init": "he",
                },
            ]
        },
        "train": {
            "epochs": 20,
            "batch_size": 10,
            "lr": 0.3,
            "seed": 2,
            "regularisation": {"kind": "l2", "lambda": 0.0001},
            "run_dir": "runs/blobs-softmax",
            "enable_plots": False,
        },
    },
    "mnist-sigmoid-ce": {
        "data": {"name": "mnist", "options": {"data_dir": "mnist"}},
        "model": {
            "d_in": 784,
            "hidden": [30],
            "d_out": 10,
            "activation": "sigmoid",
            "cost": "cross_entropy",
            "init": "normalised_xavier",
        },
        "train": {
            "epochs": 30,
            "batch_size": 10,
            "lr": 0.25,
            "seed": 0,
            "run_dir": "runs/mnist-sigmoid-ce",
            "enable_plots": True,
        },
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"
_FILE_PRESETS_CACHE: Dict[str, Mapping[str, object]] | None = None


def read_config_file(path: Path) -> Mapping[str, object]:
    """Load a JSON or YAML config file into a mapping."""

    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        import yaml

        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported config file type: {path.suffix}")

    if not isinstance(data, Mapping):
        raise TypeError(f"Config {path.name} must decode to a mapping")
    return data


def _file_presets() -> Dict[str, Mapping[str, object]]:
    global _FILE_PRESETS_CACHE
    if _FILE_PRESETS_CACHE is None:
        found: Dict[str, Mapping[str, object]] = {}
        if _PRESET_DIR.exists():
            for file in sorted(_PRESET_DIR.iterdir()):
                if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
                    continue
                data = read_config_file(file)
                missing = {"data", "model", "train"} - set(data)
                if missing:
                    raise KeyError(
                        f"Preset {file.name} is missing required sections: {', '.join(sorted(missing))}"
                    )
                found[file.stem] = json.loads(json.dumps(data))
        _FILE_PRESETS_CACHE = found
    return {name: deepcopy(cfg) for name, cfg in _FILE_PRESETS_CACHE.items()}


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {}
    combined.update({name: deepcopy(cfg) for name, cfg in _PRESETS.items()})
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Mapping[str, object]:
    file_presets = _file_presets()
    if name in file_presets:
        return file_presets[name]
    try:
        return deepcopy(_PRESETS[name])
    except KeyError as exc:
        raise KeyError(f"Unknown preset: {name}") from exc


def build_descriptors(model_cfg: Mapping[str, Any]) -> List[LayerDescriptor]:
    """Turn the ``model`` config section into layer descriptors.

    Either an explicit ``layers`` list, or the ``d_in``/``hidden``/``d_out``
    shorthand where every non-input layer shares ``activation`` and ``init``
    and the output layer uses ``cost`` (and ``output_activation`` if given).
    """

    if "layers" in model_cfg:
        return [LayerDescriptor.from_config(layer) for layer in model_cfg["layers"]]

    for key in ("d_in", "d_out"):
        if key not in model_cfg:
            raise KeyError(f"Model config needs either 'layers' or '{key}'")
    activation = str(model_cfg.get("activation", "sigmoid"))
    init = str(model_cfg.get("init", "normalised_xavier"))
    descriptors = [input_layer(int(model_cfg["d_in"]))]
    descriptors.extend(feedforward(activation, init, int(width)) for width in model_cfg.get("hidden", []))
    descriptors.append(
        output(
            str(model_cfg.get("output_activation", activation)),
            str(model_cfg.get("cost", "quadratic")),
            init,
            int(model_cfg["d_out"]),
        )
    )
    return descriptors


def _check_widths(descriptors: Sequence[LayerDescriptor], dataset: DatasetSpec) -> None:
    if descriptors and descriptors[0].width != dataset.d_in:
        raise ValueError(
            f"Input layer width {descriptors[0].width} does not match dataset d_in={dataset.d_in}"
        )
    if descriptors and descriptors[-1].width != dataset.d_out:
        raise ValueError(
            f"Output layer width {descriptors[-1].width} does not match dataset d_out={dataset.d_out}"
        )


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    data_cfg = dict(config["data"])  # type: ignore[arg-type]
    model_cfg = dict(config["model"])  # type: ignore[arg-type]
    train_cfg = dict(config["train"])  # type: ignore[arg-type]

    dataset = get_dataset(str(data_cfg["name"]), **dict(data_cfg.get("options", {})))
    descriptors = build_descriptors(model_cfg)
    _check_widths(descriptors, dataset)

    seed = int(train_cfg.get("seed", 0))
    epochs = int(train_cfg.get("epochs", 1))
    batch_size = int(train_cfg.get("batch_size", 1))
    learning_rate = float(train_cfg.get("lr", 0.1))
    regularisation = Regularisation.from_config(train_cfg.get("regularisation"))

    rng = np.random.default_rng(seed)
    network = Network.build(descriptors, rng=rng)

    run_dir = _resolve_run_dir(train_cfg, dataset.name)
    run_dir.mkdir(parents=True, exist_ok=True)

    _log_startup_summary(
        dataset=dataset,
        network=network,
        epochs=epochs,
        batch_size=batch_size,
        learning_rate=learning_rate,
        regularisation=regularisation,
    )

    jsonl = JsonlSink(run_dir / "metrics.jsonl", seed=seed)
    csv_sink = CsvSink(run_dir / "metrics.csv")
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)), title=dataset.name)

    history = train(
        network,
        dataset.train,
        dataset.test,
        epochs=epochs,
        mini_batch_size=batch_size,
        learning_rate=learning_rate,
        regularisation=regularisation,
        rng=rng,
        callbacks=[jsonl, csv_sink, plots],
    )

    history_path = run_dir / "history.json"
    history_path.write_text(json.dumps(history.to_dict(), indent=2))
    checkpoint = save_checkpoint(run_dir / "last.ckpt", network.state_dict())
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=json.loads(json.dumps(config)),
        dataset_provenance=dataset.provenance,
        network={
            "layers": [descriptor.to_config() for descriptor in descriptors],
            "parameters": network.parameter_count(),
        },
    )

    return RunResult(
        epochs=history.epochs_run,
        best_accuracy=history.best_accuracy,
        metrics_path=str(jsonl.path),
        manifest_path=manifest,
        history_path=str(history_path),
        checkpoint_path=checkpoint,
    )


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str) -> Path:
    if "run_dir" in train_cfg:
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset


def _log_startup_summary(
    *,
    dataset: DatasetSpec,
    network: Network,
    epochs: int,
    batch_size: int,
    learning_rate: float,
    regularisation: Regularisation,
) -> None:
    log.info("=== BackpropNets run ===")
    log.info("Dataset        : %s (%d train, %d test)", dataset.name, len(dataset.train), len(dataset.test or []))
    log.info("Widths         : %s", network.widths)
    log.info("Parameters     : %d", network.parameter_count())
    log.info("Epochs         : %d", epochs)
    log.info("Mini-batch     : %d", batch_size)
    log.info("Learning rate  : %s", learning_rate)
    log.info("Regularisation : %s %s", regularisation.kind.value, regularisation.lam)
    log.info("========================")


__all__ = ["build_descriptors", "load_preset", "presets", "read_config_file", "run_pipeline"]
