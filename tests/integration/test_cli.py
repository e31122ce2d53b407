import json
from pathlib import Path

import pytest

from cli.main import main


def test_cli_runs_preset(tmp_path, capsys):
    run_dir = tmp_path / "run"
    main(["--preset", "xor-quadratic", "--epochs", "3", "--run-dir", str(run_dir), "--seed", "4"])
    payload = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert payload["epochs"] == 3
    assert (run_dir / "metrics.jsonl").exists()
    manifest = json.loads((run_dir / "manifest.json").read_text())
    assert manifest["config"]["train"]["seed"] == 4


def test_cli_yaml_override_and_dump(tmp_path):
    override = tmp_path / "override.yaml"
    override.write_text("train:\n  epochs: 2\n  batch_size: 2\n")
    dumped = tmp_path / "config.json"
    main(
        [
            "--preset",
            "xor-quadratic",
            "--config",
            str(override),
            "--run-dir",
            str(tmp_path / "run"),
            "--dump-config",
            str(dumped),
        ]
    )
    config = json.loads(dumped.read_text())
    assert config["train"]["epochs"] == 2
    assert config["train"]["batch_size"] == 2
    assert config["model"]["cost"] == "quadratic"


def test_cli_lists_presets(capsys):
    with pytest.raises(SystemExit):
        main(["--list-presets"])
    assert "xor-quadratic" in capsys.readouterr().out.split()


def test_cli_rejects_unknown_preset():
    with pytest.raises(SystemExit):
        main(["--preset", "nope"])
    assert not Path("runs/nope").exists()
