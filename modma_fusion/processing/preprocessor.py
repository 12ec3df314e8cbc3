"""
Dataset preprocessing

This module turns a validated raw dataset into per-modality normalized copies,
and provides the EEG signal conditioning (notch + band-pass) used before
spectral feature extraction.
"""

import logging
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
from scipy import signal as sp_signal

from ..core.config import PipelineConfig
from ..core.data_types import PreprocessedData
from ..validation.schema_validator import audio_sample_value, modality_field


class SignalConditioner:
    """
    Zero-phase notch and band-pass filtering of multichannel EEG

    Segments shorter than the filters' padding length are returned unfiltered,
    since filtfilt cannot process them.
    """

    def __init__(self, fs: float, notch_freq: float, bandpass: Tuple[float, float]):
        self.fs = fs
        self.notch_freq = notch_freq
        self.bandpass = bandpass

        self._design_filters()

    def _design_filters(self):
        """Design digital filters for preprocessing"""
        nyquist = self.fs / 2

        # Notch filter for power line interference
        Q = 30  # Quality factor
        self.notch_b, self.notch_a = sp_signal.iirnotch(self.notch_freq / nyquist, Q)

        low = self.bandpass[0] / nyquist
        high = self.bandpass[1] / nyquist
        self.bp_b, self.bp_a = sp_signal.butter(4, [low, high], btype='band')

        self.min_samples = 3 * max(len(self.bp_a), len(self.bp_b), len(self.notch_a)) + 1
        logging.debug(f"Filters designed: Notch {self.notch_freq}Hz, BP {self.bandpass}Hz")

    def filter(self, data: np.ndarray) -> np.ndarray:
        """
        Apply preprocessing filters to EEG data

        Args:
            data: EEG data (channels x samples)

        Returns:
            np.ndarray: Filtered EEG data, or a copy of the input if too short
        """
        filtered = np.array(data, dtype=float, copy=True)
        if filtered.ndim != 2 or filtered.shape[1] < self.min_samples:
            return filtered

        filtered = sp_signal.filtfilt(self.notch_b, self.notch_a, filtered, axis=1)
        filtered = sp_signal.filtfilt(self.bp_b, self.bp_a, filtered, axis=1)
        return filtered


class Preprocessor:
    """
    Per-modality normalization of a validated dataset

    preprocess() never re-validates; samples the gate tolerated but that carry
    no usable value are dropped.
    """

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig()

    def preprocess(self, raw: Mapping) -> PreprocessedData:
        """
        Normalize every modality present in the dataset

        Args:
            raw: Validated raw dataset

        Returns:
            PreprocessedData: Filtered/normalized copies of each modality
        """
        logging.info("Preprocessing EEG data...")
        eeg = self.preprocess_eeg(modality_field(raw, "eeg_samples") or [])

        logging.info("Preprocessing audio data...")
        audio = self.preprocess_audio(modality_field(raw, "audio_samples") or [])

        text = None
        raw_text = modality_field(raw, "text_entries")
        if isinstance(raw_text, list):
            logging.info("Preprocessing text data...")
            text = self.preprocess_text(raw_text)

        return PreprocessedData(eeg=eeg, audio=audio, text=text)

    def preprocess_eeg(self, samples: List[Any]) -> Tuple[Mapping, ...]:
        """Keep well-formed EEG records; values pass through unchanged"""
        kept = tuple(sample for sample in samples if isinstance(sample, Mapping))
        dropped = len(samples) - len(kept)
        if dropped:
            logging.debug(f"Dropped {dropped} malformed EEG samples")
        return kept

    def preprocess_audio(self, samples: List[Any]) -> np.ndarray:
        """
        Reduce samples to scalars and peak-normalize to [-1, 1]

        Frame records are reduced to their energy (see audio_sample_value);
        samples carrying no finite value are dropped like nulls.
        """
        values = [audio_sample_value(sample) for sample in samples]
        audio = np.array([value for value in values if value is not None], dtype=float)

        dropped = len(samples) - audio.size
        if dropped:
            logging.debug(f"Dropped {dropped} audio samples without a numeric value")
        if audio.size == 0:
            return audio

        peak = float(np.max(np.abs(audio)))
        if peak == 0:
            peak = 1.0  # Prevent division by zero
        return audio / peak

    def preprocess_text(self, entries: List[Any]) -> Tuple[Dict[str, Any], ...]:
        """Keep entries with content; lower-case and collapse whitespace"""
        normalized = []
        for entry in entries:
            if not isinstance(entry, Mapping):
                continue
            content = entry.get("content")
            if not isinstance(content, str) or not content.strip():
                continue
            record = dict(entry)
            record["content"] = " ".join(content.lower().split())
            normalized.append(record)
        return tuple(normalized)
