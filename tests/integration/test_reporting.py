import csv
import json

import pytest

from cranium.reporting import CsvSink, JsonlSink, MetricsCapture, PlotAdapter


def test_jsonl_sink_appends_records(tmp_path):
    sink = JsonlSink(tmp_path / "nested" / "metrics.jsonl", seed=4)
    sink.on_epoch(1, {"loss": 0.5, "accuracy": 0.25})
    sink(2, {"loss": 0.25, "accuracy": 0.75})

    records = [json.loads(line) for line in sink.path.read_text().splitlines()]
    assert records == [
        {"epoch": 1, "split": "train", "seed": 4, "loss": 0.5, "accuracy": 0.25},
        {"epoch": 2, "split": "train", "seed": 4, "loss": 0.25, "accuracy": 0.75},
    ]


def test_csv_sink_writes_header_once(tmp_path):
    sink = CsvSink(tmp_path / "metrics.csv")
    sink.on_epoch(1, {"loss": 1.0})
    sink.on_epoch(2, {"loss": 0.5})

    with sink.path.open() as handle:
        rows = list(csv.DictReader(handle))
    assert [row["epoch"] for row in rows] == ["1", "2"]
    assert [float(row["loss"]) for row in rows] == [1.0, 0.5]


def test_metrics_capture_keeps_history():
    capture = MetricsCapture()
    capture.on_epoch(1, {"loss": 2.0})
    capture.on_epoch(2, {"loss": 1.0})
    assert [epoch for epoch, _ in capture.history] == [1, 2]
    assert capture.last == {"loss": 1.0}


def test_plot_adapter_disabled_is_a_no_op(tmp_path):
    adapter = PlotAdapter(tmp_path / "plots")
    adapter.on_epoch(1, {"loss": 1.0, "accuracy": 0.5})
    assert adapter.close() is None
    assert not (tmp_path / "plots").exists()


def test_plot_adapter_writes_figure(tmp_path):
    pytest.importorskip("matplotlib")
    adapter = PlotAdapter(tmp_path, enable_plots=True)
    for epoch in range(1, 4):
        adapter.on_epoch(epoch, {"loss": 1.0 / epoch, "accuracy": 0.3 * epoch})
    path = adapter.close()
    assert path == tmp_path / "loss.png"
    assert path.stat().st_size > 0
