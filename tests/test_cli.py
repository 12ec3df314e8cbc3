"""Tests for the command line interface."""

import importlib
import json
import signal

import pytest

from modma_fusion.cli.main import create_parser, interrupt_handler, main
from modma_fusion.pipeline import CancellationToken, DatasetPipeline
from modma_fusion.processing.preprocessor import Preprocessor


class InterruptingPreprocessor(Preprocessor):
    """Preprocessor that delivers Ctrl+C to the process while it runs."""

    def preprocess(self, raw):
        signal.raise_signal(signal.SIGINT)
        return super().preprocess(raw)


@pytest.fixture
def dataset_file(tmp_path):
    path = tmp_path / "dataset.json"
    assert main(["--generate", "--output", str(path), "--seed", "4"]) == 0
    return path


class TestParser:
    """Argument parsing."""

    def test_mode_required(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args([])

    def test_modes_exclusive(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["--run", "--generate"])

    def test_defaults(self):
        args = create_parser().parse_args(["--run", "--fake"])
        assert args.fusion == "Attention"
        assert args.severity_scale == 1

    def test_invalid_fusion(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["--run", "--fusion", "Hybrid"])


class TestGenerate:
    """Synthetic dataset generation."""

    def test_writes_dataset(self, dataset_file):
        data = json.loads(dataset_file.read_text())
        assert len(data["eeg_samples"]) == 1300
        assert len(data["audio_samples"]) == 50000

    def test_requires_output(self):
        assert main(["--generate"]) == 1


class TestRun:
    """Dataset processing from the command line."""

    def test_prints_result(self, dataset_file, capsys):
        capsys.readouterr()
        assert main(["--run", "--input", str(dataset_file), "--fusion", "Early"]) == 0
        record = json.loads(capsys.readouterr().out)
        assert record["fusionType"] == "Early"
        assert record["fusion"]["rows"] == 50

    def test_writes_result_on_ten_point_scale(self, dataset_file, tmp_path):
        out = tmp_path / "result.json"
        assert main(["--run", "--input", str(dataset_file), "--output", str(out),
                     "--severity-scale", "10"]) == 0
        record = json.loads(out.read_text())
        assert 0.0 <= record["prediction"]["severity"] <= 10.0

    def test_fake_mode(self, capsys):
        assert main(["--run", "--fake", "--fusion", "Late", "--seed", "2"]) == 0
        record = json.loads(capsys.readouterr().out)
        assert record["fusion"]["width"] == 64

    def test_error_result_exit_code(self, tmp_path, capsys):
        bad = tmp_path / "bad.json"
        bad.write_text("not json")
        assert main(["--run", "--input", str(bad)]) == 1
        assert json.loads(capsys.readouterr().out) == {"error": "Incorrect Data Format"}

    def test_requires_input(self):
        assert main(["--run"]) == 1


class TestInterrupt:
    """Ctrl+C cancels a running pipeline."""

    def test_handler_cancels_token(self):
        token = CancellationToken()
        interrupt_handler(token)(signal.SIGINT, None)
        assert token.cancelled

    def test_sigint_during_run_cancels(self, monkeypatch, capsys):
        monkeypatch.setattr(importlib.import_module("modma_fusion.cli.main"), "DatasetPipeline",
                            lambda config: DatasetPipeline(
                                config, preprocessor=InterruptingPreprocessor(config)))
        previous = signal.getsignal(signal.SIGINT)

        assert main(["--run", "--fake", "--seed", "3"]) == 1

        assert json.loads(capsys.readouterr().out) == {"error": "Processing cancelled"}
        assert signal.getsignal(signal.SIGINT) is previous
