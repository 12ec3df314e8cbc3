"""
Dataset sources

This module reads uploaded dataset documents from paths, bytes or file-like
objects, and generates synthetic MODMA datasets for testing without real
recordings.
"""

import json
import logging
import os
from typing import Any, Dict, List, Optional, Union

import numpy as np

from ..core.config import FS_EXPECTED, AUDIO_FS
from ..core.errors import FormatError

DatasetSource = Union[str, os.PathLike, bytes, bytearray, Any]

CHANNEL_NAMES = ['Fp1', 'Fp2', 'F3', 'F4', 'C3', 'C4', 'P3', 'P4', 'O1', 'O2']
FRONTAL_CHANNELS = ('Fp1', 'Fp2', 'F3', 'F4')
OCCIPITAL_CHANNELS = ('P3', 'P4', 'O1', 'O2')

JOURNAL_ENTRIES = [
    "Slept  badly again and could not focus at work.",
    "Felt   a bit better today, went for a walk in the park.",
    "Worried about the meeting tomorrow, my heart was racing.",
    "Spent the evening with friends and enjoyed it.",
]


def read_source(source: DatasetSource) -> bytes:
    """
    Read the raw bytes of a dataset document

    Args:
        source: Filesystem path, bytes, or a file-like object with read()

    Returns:
        bytes: Document contents

    Raises:
        OSError: If the source cannot be read
        TypeError: If the source type is not supported
    """
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    if isinstance(source, (str, os.PathLike)):
        with open(source, "rb") as f:
            return f.read()
    if hasattr(source, "read"):
        content = source.read()
        return content.encode("utf-8") if isinstance(content, str) else bytes(content)
    raise TypeError(f"Unsupported dataset source: {type(source).__name__}")


def parse_dataset(content: bytes) -> Any:
    """
    Decode UTF-8 JSON into a raw dataset document

    Raises:
        FormatError: If the content is not UTF-8 encoded JSON
    """
    try:
        return json.loads(content.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        logging.error(f"Failed to parse JSON data: {e}")
        raise FormatError(f"malformed JSON: {e}") from e


class SyntheticDatasetSource:
    """
    Generate synthetic MODMA datasets

    EEG carries an alpha rhythm over occipital channels and a beta rhythm over
    frontal channels on top of Gaussian noise; audio is a voiced tone with
    noise. All output is JSON-serializable and passes validation by default.
    """

    def __init__(self, fs: float = FS_EXPECTED, audio_fs: float = AUDIO_FS,
                 n_channels: int = 8, seed: Optional[int] = 42):
        self.fs = fs
        self.audio_fs = audio_fs
        self.channels = CHANNEL_NAMES[:n_channels]
        self.rng = np.random.default_rng(seed)

    def generate_eeg(self, n_samples: int) -> List[Dict[str, float]]:
        """EEG records with a timestamp and one value per channel"""
        t = np.arange(n_samples) / self.fs
        data = self.rng.standard_normal((len(self.channels), n_samples)) * 10

        for ch, name in enumerate(self.channels):
            if name in OCCIPITAL_CHANNELS:
                data[ch] += 15 * np.sin(2 * np.pi * 10 * t + self.rng.random() * 2 * np.pi)
            if name in FRONTAL_CHANNELS:
                data[ch] += 8 * np.sin(2 * np.pi * 20 * t + self.rng.random() * 2 * np.pi)
            # Theta background everywhere
            data[ch] += 5 * np.sin(2 * np.pi * 6 * t + self.rng.random() * 2 * np.pi)

        records = []
        for i in range(n_samples):
            record = {"timestamp": round(float(t[i]), 6)}
            record.update({name: round(float(data[ch, i]), 4) for ch, name in enumerate(self.channels)})
            records.append(record)
        return records

    def generate_audio(self, n_samples: int) -> List[float]:
        """Voiced tone (with harmonics) plus noise, in arbitrary units"""
        t = np.arange(n_samples) / self.audio_fs
        audio = (0.6 * np.sin(2 * np.pi * 180 * t)
                 + 0.3 * np.sin(2 * np.pi * 360 * t)
                 + 0.1 * self.rng.standard_normal(n_samples))
        return [round(float(x), 5) for x in audio * 1000]

    def generate(self, eeg_samples: int = 1300, audio_samples: int = 50000,
                 with_text: bool = False, completeness: float = 0.95,
                 consistency: float = 0.9) -> Dict[str, Any]:
        """
        Build a complete dataset document

        Args:
            eeg_samples: Number of EEG records
            audio_samples: Number of audio samples
            with_text: Include journal text entries
            completeness: metadata.data_quality.completeness
            consistency: metadata.data_quality.consistency

        Returns:
            dict: Dataset in the canonical schema
        """
        dataset = {
            "metadata": {
                "format_version": "1.0",
                "data_quality": {"completeness": completeness, "consistency": consistency},
                "recording": {
                    "duration_seconds": eeg_samples / self.fs,
                    "device_info": {"eeg": f"{len(self.channels)}-channel synthetic",
                                    "audio": f"{self.audio_fs} Hz synthetic"},
                },
            },
            "eeg_samples": self.generate_eeg(eeg_samples),
            "audio_samples": self.generate_audio(audio_samples),
        }
        if with_text:
            dataset["text_entries"] = [{"id": i, "content": entry}
                                       for i, entry in enumerate(JOURNAL_ENTRIES)]

        logging.info(f"Generated synthetic dataset: {eeg_samples} EEG records, "
                     f"{audio_samples} audio samples, text={with_text}")
        return dataset

    def generate_bytes(self, **kwargs) -> bytes:
        """Generated dataset encoded as UTF-8 JSON"""
        return json.dumps(self.generate(**kwargs)).encode("utf-8")
