"""Tests for dataset schema and quality validation."""

import pytest

from modma_fusion.core.config import PipelineConfig
from modma_fusion.core.errors import FormatError, QualityError
from modma_fusion.validation.schema_validator import SchemaValidator, audio_sample_value, modality_field

from conftest import minimal_dataset


@pytest.fixture
def validator():
    return SchemaValidator(PipelineConfig())


class TestCheckFormat:
    """Structural checks raise FormatError."""

    def test_valid_dataset_passes(self, validator, dataset):
        report = validator.validate(dataset)
        assert report.eeg_length == 1300
        assert report.audio_length == 50000
        assert report.text_length is None

    @pytest.mark.parametrize("raw", [None, [], "dataset", 42])
    def test_non_object_rejected(self, validator, raw):
        with pytest.raises(FormatError):
            validator.validate(raw)

    def test_missing_metadata(self, validator):
        data = minimal_dataset()
        del data["metadata"]
        with pytest.raises(FormatError):
            validator.validate(data)

    def test_missing_format_version(self, validator):
        data = minimal_dataset()
        del data["metadata"]["format_version"]
        with pytest.raises(FormatError):
            validator.validate(data)

    @pytest.mark.parametrize("key", ["eeg_samples", "audio_samples"])
    def test_empty_modality(self, validator, key):
        data = minimal_dataset()
        data[key] = []
        with pytest.raises(FormatError):
            validator.validate(data)

    @pytest.mark.parametrize("key", ["eeg_samples", "audio_samples"])
    def test_missing_modality(self, validator, key):
        data = minimal_dataset()
        del data[key]
        with pytest.raises(FormatError):
            validator.validate(data)

    def test_modma_alias_keys_accepted(self, validator):
        data = minimal_dataset()
        data["eeg_data"] = data.pop("eeg_samples")
        data["audio_data"] = data.pop("audio_samples")
        report = validator.validate(data)
        assert report.eeg_length == 1300
        assert modality_field(data, "eeg_samples") is data["eeg_data"]


class TestCheckQuality:
    """Quality thresholds: hard failures raise, soft issues warn."""

    def test_short_eeg_rejected(self, validator):
        with pytest.raises(QualityError):
            validator.validate(minimal_dataset(eeg_rows=900))

    def test_eeg_at_threshold_accepted(self, validator):
        report = validator.validate(minimal_dataset(eeg_rows=1250))
        assert report.eeg_length == 1250

    def test_eeg_integrity_below_ratio_rejected(self, validator):
        data = minimal_dataset()
        for i in range(25):
            data["eeg_samples"][i] = None
        with pytest.raises(QualityError):
            validator.validate(data)

    def test_eeg_integrity_at_ratio_accepted(self, validator):
        data = minimal_dataset()
        for i in range(20):
            data["eeg_samples"][i] = None
        validator.validate(data)

    def test_audio_integrity_below_ratio_rejected(self, validator):
        data = minimal_dataset(audio_rows=100)
        for i in range(0, 100, 4):
            data["audio_samples"][i] = None
        for i in range(1, 100, 20):
            data["audio_samples"][i] = None
        with pytest.raises(QualityError):
            validator.validate(data)

    def test_audio_integrity_at_ratio_accepted(self, validator):
        data = minimal_dataset(audio_rows=100)
        for i in range(0, 100, 5):
            data["audio_samples"][i] = None
        report = validator.validate(data)
        assert report.audio_length == 100

    def test_audio_frame_records_accepted(self, validator):
        data = minimal_dataset()
        data["audio_samples"] = [{"frame_id": i, "timestamp": i * 10, "mfcc": [0.1] * 13, "energy": 0.6}
                                 for i in range(100)]
        validator.validate(data)

    def test_audio_without_numeric_values_rejected(self, validator):
        data = minimal_dataset()
        data["audio_samples"] = [{"frame_id": i, "mfcc": [0.1] * 13} for i in range(100)]
        with pytest.raises(QualityError):
            validator.validate(data)

        data["audio_samples"] = ["loud"] * 100
        with pytest.raises(QualityError):
            validator.validate(data)

    def test_short_audio_only_warns(self, validator):
        report = validator.validate(minimal_dataset(audio_rows=100))
        assert any("short audio" in w for w in report.warnings)

    def test_low_quality_scores_warn(self, validator):
        data = minimal_dataset()
        data["metadata"]["data_quality"] = {"completeness": 0.5, "consistency": 0.6}
        report = validator.validate(data)
        assert any("completeness" in w for w in report.warnings)
        assert any("consistency" in w for w in report.warnings)

    def test_missing_quality_scores_warn(self, validator):
        data = minimal_dataset()
        del data["metadata"]["data_quality"]
        report = validator.validate(data)
        assert any("missing completeness" in w for w in report.warnings)

    def test_text_issues_never_fail(self, validator):
        report = validator.validate(minimal_dataset(text_entries=[{"id": 1, "content": "   "}]))
        assert report.text_length == 1
        assert any("no valid text" in w for w in report.warnings)

        report = validator.validate(minimal_dataset(text_entries=[]))
        assert report.text_length == 0
        assert any("empty text" in w for w in report.warnings)

    def test_synthetic_dataset_has_no_warnings(self, validator, dataset):
        report = validator.validate(dataset)
        assert report.warnings == []


class TestAudioSampleValue:
    """Reduction of audio samples to scalars."""

    @pytest.mark.parametrize("sample,expected", [
        (0.5, 0.5),
        (-3, -3.0),
        ({"frame_id": 0, "mfcc": [0.1, 0.2], "energy": 0.7}, 0.7),
        ({"rms": 0.2, "preprocessed": False}, 0.2),
    ])
    def test_numeric_values(self, sample, expected):
        assert audio_sample_value(sample) == expected

    @pytest.mark.parametrize("sample", [
        None, "loud", True, [1.0, 2.0], float("nan"), float("inf"),
        {"frame_id": 0, "mfcc": [0.1]}, {"energy": "high"},
    ])
    def test_samples_without_value(self, sample):
        assert audio_sample_value(sample) is None
