"""End-to-end tests for the dataset processing pipeline."""

import asyncio
import io
import json

import numpy as np
import pytest

from modma_fusion.core import backend
from modma_fusion.core.data_types import FusionStrategy
from modma_fusion.pipeline import CancellationToken, DatasetPipeline, process_dataset
from modma_fusion.processing.features import FeatureExtractor, default_extractors
from modma_fusion.processing.preprocessor import Preprocessor

from conftest import minimal_dataset


class SpyPreprocessor(Preprocessor):
    """Preprocessor that records whether it ran."""

    def __init__(self, config=None):
        super().__init__(config)
        self.calls = 0

    def preprocess(self, raw):
        self.calls += 1
        return super().preprocess(raw)


class FailingExtractor(FeatureExtractor):
    """Extractor that fails after validation has passed."""

    n_columns = 128

    def extract(self, data):
        raise RuntimeError("extractor crashed")


def run(pipeline, source, fusion_type="Attention", token=None):
    return asyncio.run(pipeline.run(source, fusion_type, token))


@pytest.fixture
def pipeline(config):
    return DatasetPipeline(config)


class TestSuccessfulRun:
    """Valid datasets produce a complete result."""

    def test_early_fusion_reference_dataset(self, pipeline, dataset_bytes):
        result = run(pipeline, dataset_bytes, "Early")
        assert result.ok
        assert result.fusion_type is FusionStrategy.EARLY
        assert result.fusion["rows"] == 50
        assert result.fusion["width"] == 144

    @pytest.mark.parametrize("fusion_type", ["Early", "Late", "Attention"])
    def test_result_record(self, pipeline, dataset_bytes, fusion_type):
        record = run(pipeline, dataset_bytes, fusion_type).to_dict()
        assert set(record) == {"prediction", "explanation", "features", "fusionType",
                               "fusion", "modelPerformance"}
        assert record["fusionType"] == fusion_type
        assert set(record["features"]) == {"eeg_128", "eeg_3", "audio"}
        assert 0.0 <= record["prediction"]["severity"] <= 1.0
        assert sum(record["explanation"]["attention_weights"].values()) == pytest.approx(1.0)
        json.dumps(record)

    def test_feature_shapes(self, pipeline, dataset_bytes):
        features = run(pipeline, dataset_bytes).features
        assert features.eeg_wide.shape == (9, 128)
        assert features.eeg_narrow.shape == (4, 3)
        assert features.audio.shape == (194, 13)

    def test_severity_scale(self, pipeline, dataset_bytes):
        result = run(pipeline, dataset_bytes)
        record = result.to_dict(severity_scale=10)
        assert record["prediction"]["severity"] == pytest.approx(result.prediction.severity * 10)

    def test_text_modality_in_attention(self, pipeline, source):
        data = source.generate_bytes(with_text=True)
        result = run(pipeline, data)
        assert set(result.explanation.attention_weights) == {"eeg", "audio", "text"}

    def test_path_and_file_sources(self, pipeline, dataset_bytes, tmp_path):
        path = tmp_path / "dataset.json"
        path.write_bytes(dataset_bytes)
        assert run(pipeline, str(path)).ok
        assert run(pipeline, path).ok
        assert run(pipeline, io.BytesIO(dataset_bytes)).ok
        assert run(pipeline, io.StringIO(dataset_bytes.decode("utf-8"))).ok

    def test_repeatable_predictions(self, config, dataset_bytes):
        first = run(DatasetPipeline(config), dataset_bytes, "Late")
        second = run(DatasetPipeline(config), dataset_bytes, "Late")
        assert first.prediction == second.prediction

    def test_backend_initialized(self, pipeline, dataset_bytes):
        backend.reset_backend()
        run(pipeline, dataset_bytes)
        assert backend.is_initialized()

    def test_process_dataset(self, dataset_bytes):
        result = asyncio.run(process_dataset(dataset_bytes, "Attention"))
        assert result.ok
        assert result.model_performance.accuracy > 0


class TestRecordShapes:
    """Datasets whose records carry more than bare channel values."""

    def test_audio_frame_records(self, pipeline):
        data = minimal_dataset(eeg_rows=7500)
        data["eeg_data"] = data.pop("eeg_samples")
        data["audio_data"] = [{"frame_id": i, "timestamp": i * 10, "mfcc": [0.1] * 13,
                               "energy": 0.5 + 0.01 * (i % 20)} for i in range(100)]
        del data["audio_samples"]

        result = run(pipeline, json.dumps(data).encode("utf-8"), "Late")

        assert result.ok
        assert result.features.audio.shape == (1, 13)

    def test_eeg_annotation_fields(self, pipeline, source):
        data = source.generate()
        for sample in data["eeg_samples"]:
            sample["condition"] = "rest"
            sample["preprocessed"] = False

        result = run(pipeline, json.dumps(data).encode("utf-8"))

        assert result.ok
        assert result.features.eeg_wide.shape == (9, 128)
        assert result.features.eeg_narrow.shape == (4, 3)

    def test_non_numeric_channel_is_ignored(self, pipeline):
        data = minimal_dataset()
        for sample in data["eeg_samples"]:
            sample["Fp1"] = "n/a"

        result = run(pipeline, json.dumps(data).encode("utf-8"))

        assert result.ok
        assert result.features.eeg_wide.shape == (9, 128)


class TestFailures:
    """Every failure resolves to an error result."""

    def test_short_eeg_not_compliant_and_not_preprocessed(self, config):
        spy = SpyPreprocessor(config)
        pipeline = DatasetPipeline(config, preprocessor=spy)
        data = json.dumps(minimal_dataset(eeg_rows=900)).encode("utf-8")

        result = run(pipeline, data)

        assert result.to_dict() == {"error": "Data is not compliant"}
        assert spy.calls == 0

    def test_valid_dataset_is_preprocessed_once(self, config, dataset_bytes):
        spy = SpyPreprocessor(config)
        run(DatasetPipeline(config, preprocessor=spy), dataset_bytes)
        assert spy.calls == 1

    @pytest.mark.parametrize("content", [b"not json", b"\xff\xfe\x00", b"{\"metadata\": "])
    def test_malformed_input(self, pipeline, content):
        assert run(pipeline, content).error == "Incorrect Data Format"

    def test_schema_violation(self, pipeline):
        assert run(pipeline, b"[1, 2, 3]").error == "Incorrect Data Format"

    def test_stage_exception(self, config, dataset_bytes):
        extractors = default_extractors(config)
        extractors["eeg_wide"] = FailingExtractor()
        pipeline = DatasetPipeline(config, extractors=extractors)
        assert run(pipeline, dataset_bytes).error == "Error processing dataset"

    def test_unknown_fusion_type(self, pipeline, dataset_bytes):
        assert run(pipeline, dataset_bytes, "Hybrid").error == "Error processing dataset"

    def test_cancelled(self, pipeline, dataset_bytes):
        token = CancellationToken()
        token.cancel()
        assert token.cancelled
        assert run(pipeline, dataset_bytes, token=token).error == "Processing cancelled"

    def test_missing_file(self, pipeline, tmp_path):
        assert run(pipeline, str(tmp_path / "missing.json")).error == "Error reading file"

    def test_unsupported_source(self, pipeline):
        assert run(pipeline, 42).error == "Error reading file"

    def test_failure_record_has_only_error(self, pipeline):
        record = run(pipeline, b"nope").to_dict()
        assert record == {"error": "Incorrect Data Format"}
