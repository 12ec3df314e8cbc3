"""Shared fixtures for MODMA Fusion tests."""

import json

import numpy as np
import pytest

from modma_fusion.acquisition.sources import SyntheticDatasetSource
from modma_fusion.core.config import PipelineConfig
from modma_fusion.core.data_types import PreprocessedData
from modma_fusion.processing.preprocessor import Preprocessor


@pytest.fixture
def config():
    return PipelineConfig(metrics_seed=0)


@pytest.fixture
def source():
    return SyntheticDatasetSource(seed=1)


@pytest.fixture
def dataset(source):
    """Valid dataset: 1300 EEG records, 50000 audio samples, no text."""
    return source.generate(eeg_samples=1300, audio_samples=50000)


@pytest.fixture
def dataset_bytes(dataset):
    return json.dumps(dataset).encode("utf-8")


@pytest.fixture
def preprocessed(dataset, config):
    return Preprocessor(config).preprocess(dataset)


@pytest.fixture
def feature_matrices():
    """Hand-built branch matrices with different row counts."""
    rng = np.random.default_rng(3)
    return {
        "eeg_wide": rng.standard_normal((9, 128)),
        "eeg_narrow": rng.random((4, 3)),
        "audio": rng.standard_normal((194, 13)),
    }


def minimal_dataset(eeg_rows=1300, audio_rows=100, **extra):
    """Small hand-built dataset with two EEG channels."""
    data = {
        "metadata": {
            "format_version": "1.0",
            "data_quality": {"completeness": 0.95, "consistency": 0.9},
        },
        "eeg_samples": [{"timestamp": i / 250, "Fp1": float(i % 7), "O1": 1.0}
                        for i in range(eeg_rows)],
        "audio_samples": [float(i % 11) - 5.0 for i in range(audio_rows)],
    }
    data.update(extra)
    return data


@pytest.fixture
def empty_preprocessed():
    return PreprocessedData(eeg=(), audio=np.array([]))
