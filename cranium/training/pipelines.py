"""Config-driven training runs and built-in presets."""

from __future__ import annotations

import json
import time
from copy import deepcopy
from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

from ..core.errors import ConfigurationError, check_config
from ..core.network import Network
from ..core.types import RunResult
from ..data import registry
from ..reporting.metrics import CsvSink, JsonlSink, MetricsCapture
from ..reporting.plots import PlotAdapter
from .trainer import Trainer, TrainingConfig

_PRESETS: Dict[str, Mapping[str, object]] = {
    "separable-sigmoid": {
        "data": {
            "name": "separable",
            "options": {"n": 200, "d": 2, "axis": 0, "seed": 0},
        },
        "model": {
            "hidden": [4],
            "hidden_activations": ["sigmoid"],
            "output_activation": "softmax",
        },
        "train": {
            "epochs": 20,
            "batch_size": 10,
            "lr": 1.0,
            "search_time": 0.0,
            "regularization": 0.0,
            "momentum": 0.5,
            "loss": "ce",
            "shuffle": True,
            "seed": 0,
            "run_dir": "runs/separable-sigmoid",
            "enable_plots": False,
        },
    },
    "blobs-softmax": {
        "data": {
            "name": "blobs",
            "options": {"n_per_class": 60, "spread": 0.4, "seed": 1},
        },
        "model": {
            "hidden": [16],
            "hidden_activations": ["relu"],
            "output_activation": "softmax",
        },
        "train": {
            "epochs": 30,
            "batch_size": 30,
            "lr": 0.5,
            "search_time": 10.0,
            "regularization": 0.0001,
            "momentum": 0.9,
            "loss": "ce",
            "shuffle": True,
            "seed": 1,
            "run_dir": "runs/blobs-softmax",
            "enable_plots": False,
        },
    },
    "xor-tanh": {
        "data": {
            "name": "xor",
            "options": {"n": 200, "noise": 0.1, "seed": 2},
        },
        "model": {
            "hidden": [8],
            "hidden_activations": ["tanh"],
            "output_activation": "linear",
        },
        "train": {
            "epochs": 200,
            "batch_size": 20,
            "lr": 0.5,
            "search_time": 0.0,
            "regularization": 0.0,
            "momentum": 0.9,
            "loss": "mse",
            "shuffle": True,
            "seed": 2,
            "run_dir": "runs/xor-tanh",
            "enable_plots": False,
        },
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"


def read_config_file(path: str | Path) -> Mapping[str, object]:
    """Load a JSON or YAML mapping from ``path``."""

    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in {".yaml", ".yml", ".json"}:
        raise ConfigurationError(f"Unsupported config file type: {path.suffix}")
    text = path.read_text()
    if suffix in {".yaml", ".yml"}:
        try:
            import yaml  # type: ignore
        except ImportError as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("PyYAML is required to load YAML configs") from exc
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text or "{}")

    if not isinstance(data, Mapping):
        raise ConfigurationError(f"Config {path.name} must decode to a mapping")
    return data


def _file_presets() -> Dict[str, Mapping[str, object]]:
    found: Dict[str, Mapping[str, object]] = {}
    if not _PRESET_DIR.exists():
        return found
    for file in sorted(_PRESET_DIR.iterdir()):
        if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
            continue
        data = read_config_file(file)
        missing = {"data", "model", "train"} - set(data)
        if missing:
            raise ConfigurationError(
                f"Preset {file.name} is missing required sections: {', '.join(sorted(missing))}"
            )
        found[file.stem] = json.loads(json.dumps(data))
    return found


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {}
    combined.update({name: deepcopy(cfg) for name, cfg in _PRESETS.items()})
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Mapping[str, object]:
    available = presets()
    try:
        return available[name]
    except KeyError as exc:
        raise ConfigurationError(
            f"Unknown preset {name!r}. Available presets: {', '.join(sorted(available))}"
        ) from exc


def merge_config(base: dict, override: Mapping[str, object]) -> dict:
    """Recursively overlay ``override`` onto ``base``."""

    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(base.get(key), dict):
            base[key] = merge_config(dict(base[key]), value)
        else:
            base[key] = value
    return base


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    for section in ("data", "model", "train"):
        check_config(section in config, f"Config is missing the {section!r} section")
    data_cfg = dict(config["data"])
    model_cfg = dict(config["model"])
    train_cfg = dict(config["train"])

    check_config("name" in data_cfg, "Config data section must name a dataset")
    dataset = registry.get_dataset(str(data_cfg["name"]), **dict(data_cfg.get("options", {})))

    d_in = int(model_cfg.get("d_in", dataset.d_in))
    d_out = int(model_cfg.get("d_out", dataset.d_out))
    check_config(d_in == dataset.d_in, f"Configured d_in={d_in} but the dataset has {dataset.d_in}")
    check_config(d_out == dataset.d_out, f"Configured d_out={d_out} but the dataset has {dataset.d_out}")

    hidden = [int(size) for size in model_cfg.get("hidden", [])]
    hidden_activations = _build_hidden_activations(model_cfg, len(hidden))
    output_activation = str(model_cfg.get("output_activation", "softmax"))
    seed = int(train_cfg.get("seed", 0))

    network = Network.build(
        d_in,
        hidden,
        hidden_activations,
        d_out,
        output_activation,
        seed=seed,
    )
    training = TrainingConfig(
        dataset=dataset.features,
        labels=dataset.labels,
        loss=str(train_cfg.get("loss", "ce")),
        batch_size=int(train_cfg.get("batch_size", 1)),
        learning_rate=float(train_cfg.get("lr", 0.1)),
        search_time=float(train_cfg.get("search_time", 0.0)),
        regularization=float(train_cfg.get("regularization", 0.0)),
        momentum=float(train_cfg.get("momentum", 0.0)),
        max_iters=int(train_cfg.get("epochs", 1)),
        shuffle=bool(train_cfg.get("shuffle", True)),
        verbose=bool(train_cfg.get("verbose", False)),
        seed=seed,
    )

    run_dir = _resolve_run_dir(train_cfg, dataset.name)
    run_dir.mkdir(parents=True, exist_ok=True)

    _print_startup_summary(
        dataset_name=dataset.name,
        dims=network.describe().layer_sizes,
        activations=[*hidden_activations, output_activation],
        loss=training.loss.value,
        epochs=training.max_iters,
        param_count=network.parameter_count(),
    )

    jsonl = JsonlSink(run_dir / "metrics.jsonl", split="train", seed=seed)
    csv_sink = CsvSink(run_dir / "metrics.csv", split="train")
    capture = MetricsCapture()
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))

    trainer = Trainer(network, callbacks=[jsonl, csv_sink, capture, plots])
    result = trainer.run(training)
    plots.close()

    final_metrics = capture.last or {}
    (run_dir / "metrics_final.json").write_text(json.dumps(final_metrics, indent=2))

    (run_dir / "config.json").write_text(json.dumps(_safe_config(config), indent=2))
    (run_dir / "result.json").write_text(
        json.dumps(
            {
                "epochs": result.epochs,
                "final_loss": result.final_loss,
                "final_accuracy": result.final_accuracy,
                "final_metrics": final_metrics,
                "dataset": dataset.provenance,
            },
            indent=2,
        )
    )
    return replace(result, metrics_path=str(jsonl.path))


def _build_hidden_activations(model_cfg: Mapping[str, object], depth: int) -> List[str]:
    raw = model_cfg.get("hidden_activations", model_cfg.get("hidden_activation", "sigmoid"))
    if isinstance(raw, str):
        return [raw] * depth
    names = [str(item) for item in raw]  # type: ignore[union-attr]
    check_config(
        len(names) == depth,
        f"Got {depth} hidden layers but {len(names)} hidden activations",
    )
    return names


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str) -> Path:
    if "run_dir" in train_cfg:
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset


def _safe_config(config: Mapping[str, object]) -> Mapping[str, object]:
    return json.loads(json.dumps(config))


def _print_startup_summary(
    *,
    dataset_name: str,
    dims: Sequence[int],
    activations: Sequence[str],
    loss: str,
    epochs: int,
    param_count: int,
) -> None:
    print("=== Cranium run ===")
    print(f"Dataset       : {dataset_name}")
    print(f"Dimensions    : {list(dims)}")
    print(f"Activations   : {list(activations)}")
    print(f"Loss          : {loss}")
    print(f"Epochs        : {epochs}")
    print(f"Parameters    : {param_count}")
    print("===================")


__all__ = ["load_preset", "merge_config", "presets", "read_config_file", "run_pipeline"]
