"""
Per-modality feature extraction

This module converts preprocessed samples into fixed-width feature matrices:
a 128-column wide EEG view, a 3-column narrow EEG view (alpha, beta, theta) and
a 13-column MFCC view of the audio. Spectral estimates use Welch's method.

Every extractor tolerates empty or very short input by returning a single row,
so downstream fusion always receives a non-empty matrix.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
from scipy import signal as sp_signal
from scipy.fft import dct

from ..core.config import (
    PipelineConfig, FREQ_BANDS, NARROW_BANDS, EEG_META_KEYS,
    EEG_WIDE_WINDOW_SEC, EEG_WIDE_OVERLAP, EEG_NARROW_WINDOW_SEC, EEG_NARROW_OVERLAP,
)
from ..core.data_types import FeatureSet, PreprocessedData
from ..core.errors import ProcessingError
from ..validation.schema_validator import is_number
from .preprocessor import SignalConditioner


def eeg_channel_names(samples: Sequence[Mapping]) -> List[str]:
    """
    Channel names in the order of the first sample

    A channel is a key whose first-sample value is a number; metadata keys
    and annotation fields (labels, flags, lists) are skipped.
    """
    if not samples:
        return []
    return [key for key, value in samples[0].items()
            if key not in EEG_META_KEYS and is_number(value)]


def eeg_to_array(samples: Sequence[Mapping]) -> np.ndarray:
    """
    Convert EEG records to a (channels x samples) array

    Missing or non-numeric channel values become 0.
    """
    channels = eeg_channel_names(samples)
    data = np.zeros((len(channels), len(samples)))
    skipped = 0
    for j, sample in enumerate(samples):
        for i, channel in enumerate(channels):
            value = sample.get(channel)
            if is_number(value):
                data[i, j] = value
            elif value is not None:
                skipped += 1
    if skipped:
        logging.debug(f"Replaced {skipped} non-numeric EEG values with 0")
    return np.nan_to_num(data, nan=0.0, posinf=0.0, neginf=0.0)


def sliding_windows(n_samples: int, window: int, hop: int) -> List[Tuple[int, int]]:
    """
    Start/stop indices of full windows over n_samples

    Input shorter than one window yields a single window covering everything.
    """
    if n_samples <= 0:
        return []
    if n_samples <= window:
        return [(0, n_samples)]
    starts = range(0, n_samples - window + 1, max(1, hop))
    return [(start, start + window) for start in starts]


def band_power(data: np.ndarray, fs: float, freq_range: Tuple[float, float]) -> np.ndarray:
    """
    Average Welch power in a frequency band for each channel

    Args:
        data: EEG segment (channels x samples)
        fs: Sampling frequency
        freq_range: (low_freq, high_freq) in Hz

    Returns:
        np.ndarray: Band power per channel
    """
    if data.shape[1] < 2:
        return np.zeros(data.shape[0])

    nperseg = min(int(fs), data.shape[1])
    freqs, psd = sp_signal.welch(data, fs=fs, nperseg=nperseg,
                                 noverlap=nperseg // 2, window='hann', axis=-1)

    freq_mask = (freqs >= freq_range[0]) & (freqs <= freq_range[1])
    if not np.any(freq_mask):
        return np.zeros(data.shape[0])
    return np.mean(psd[:, freq_mask], axis=1)


class FeatureExtractor(ABC):
    """
    Stateless conversion of preprocessed data into a feature matrix

    Subclasses can be swapped for real signal-processing implementations
    without touching the pipeline, as long as they keep n_columns fixed.
    """

    name: str = "features"

    @property
    @abstractmethod
    def n_columns(self) -> int:
        """Fixed column count of every matrix this extractor returns"""

    @abstractmethod
    def extract(self, data: PreprocessedData) -> np.ndarray:
        """Return a (rows x n_columns) matrix with at least one row"""

    def degenerate(self) -> np.ndarray:
        """Single zero row used when the input is empty"""
        return np.zeros((1, self.n_columns))


class EEGWideExtractor(FeatureExtractor):
    """
    Wide EEG view: per-channel statistics and log band powers

    For each 1 s window (50% overlap) every channel contributes its mean,
    standard deviation and the log power of each band in FREQ_BANDS. The
    values are laid out channel-major and zero-padded or truncated to the
    configured width.
    """

    name = "eeg_wide"

    def __init__(self, config: Optional[PipelineConfig] = None,
                 freq_bands: Dict[str, Tuple[float, float]] = FREQ_BANDS):
        self.config = config or PipelineConfig()
        self.fs = self.config.fs
        self.freq_bands = freq_bands
        self.conditioner = None
        if self.config.apply_filters:
            self.conditioner = SignalConditioner(self.fs, self.config.notch_hz, self.config.bandpass)

    @property
    def n_columns(self) -> int:
        return self.config.eeg_wide_columns

    def _window_features(self, segment: np.ndarray) -> np.ndarray:
        columns = [segment.mean(axis=1), segment.std(axis=1)]
        for low, high in self.freq_bands.values():
            columns.append(np.log1p(band_power(segment, self.fs, (low, high))))
        # Channel-major: (channels x features) flattened row by row
        return np.stack(columns, axis=1).ravel()

    def extract(self, data: PreprocessedData) -> np.ndarray:
        logging.info("Extracting wide EEG features...")
        eeg = eeg_to_array(data.eeg)
        if eeg.size == 0:
            return self.degenerate()

        if self.conditioner is not None:
            eeg = self.conditioner.filter(eeg)

        window = int(EEG_WIDE_WINDOW_SEC * self.fs)
        hop = int(window * (1 - EEG_WIDE_OVERLAP))
        rows = []
        for start, stop in sliding_windows(eeg.shape[1], window, hop):
            values = self._window_features(eeg[:, start:stop])
            row = np.zeros(self.n_columns)
            n = min(self.n_columns, values.size)
            row[:n] = values[:n]
            rows.append(row)

        return np.vstack(rows)


class EEGNarrowExtractor(FeatureExtractor):
    """
    Narrow EEG view: relative alpha, beta and theta power

    Each 2 s window (50% overlap) yields one row of relative band powers
    averaged across all channels, in NARROW_BANDS column order.
    """

    name = "eeg_narrow"

    def __init__(self, config: Optional[PipelineConfig] = None,
                 bands: Sequence[str] = NARROW_BANDS):
        self.config = config or PipelineConfig()
        self.fs = self.config.fs
        self.bands = tuple(bands)

    @property
    def n_columns(self) -> int:
        return len(self.bands)

    def extract(self, data: PreprocessedData) -> np.ndarray:
        logging.info("Extracting narrow EEG features...")
        eeg = eeg_to_array(data.eeg)
        if eeg.size == 0:
            return self.degenerate()

        window = int(EEG_NARROW_WINDOW_SEC * self.fs)
        hop = int(window * (1 - EEG_NARROW_OVERLAP))
        rows = []
        for start, stop in sliding_windows(eeg.shape[1], window, hop):
            segment = eeg[:, start:stop]
            powers = np.array([np.mean(band_power(segment, self.fs, FREQ_BANDS[band]))
                               for band in self.bands])
            total = powers.sum()
            rows.append(powers / total if total > 0 else np.zeros(self.n_columns))

        return np.vstack(rows)


def mel_filterbank(n_filters: int, n_fft: int, fs: float) -> np.ndarray:
    """Triangular mel filterbank of shape (n_filters x n_fft // 2 + 1)"""
    def hz_to_mel(hz):
        return 2595.0 * np.log10(1.0 + hz / 700.0)

    def mel_to_hz(mel):
        return 700.0 * (10 ** (mel / 2595.0) - 1.0)

    mel_points = np.linspace(hz_to_mel(0.0), hz_to_mel(fs / 2), n_filters + 2)
    bins = np.floor((n_fft + 1) * mel_to_hz(mel_points) / fs).astype(int)

    bank = np.zeros((n_filters, n_fft // 2 + 1))
    for m in range(1, n_filters + 1):
        left, center, right = bins[m - 1], bins[m], bins[m + 1]
        for k in range(left, center):
            bank[m - 1, k] = (k - left) / max(center - left, 1)
        for k in range(center, right):
            bank[m - 1, k] = (right - k) / max(right - center, 1)
    return bank


class AudioMFCCExtractor(FeatureExtractor):
    """
    MFCC-like audio coefficients, one row per frame

    Hamming-windowed frames -> power spectrum -> mel filterbank -> log ->
    DCT-II, keeping the first K coefficients.
    """

    name = "audio"

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig()
        self.frame_len = self.config.audio_frame_len
        self.hop_len = self.config.audio_hop_len
        self.window = np.hamming(self.frame_len)
        self.filterbank = mel_filterbank(self.config.mel_filters, self.frame_len, self.config.audio_fs)

    @property
    def n_columns(self) -> int:
        return self.config.mfcc_coefficients

    def extract(self, data: PreprocessedData) -> np.ndarray:
        logging.info("Extracting audio features...")
        audio = np.asarray(data.audio, dtype=float)
        if audio.size == 0:
            return self.degenerate()

        if audio.size < self.frame_len:
            audio = np.pad(audio, (0, self.frame_len - audio.size))

        n_frames = 1 + (audio.size - self.frame_len) // self.hop_len
        index = (np.arange(self.frame_len)[None, :]
                 + self.hop_len * np.arange(n_frames)[:, None])
        frames = audio[index] * self.window

        power = np.abs(np.fft.rfft(frames, n=self.frame_len, axis=1)) ** 2 / self.frame_len
        energies = np.maximum(power @ self.filterbank.T, np.finfo(float).eps)
        coefficients = dct(np.log(energies), type=2, axis=1, norm='ortho')
        return coefficients[:, :self.n_columns]


def default_extractors(config: Optional[PipelineConfig] = None) -> Dict[str, FeatureExtractor]:
    """The three standard extractors keyed by branch name"""
    config = config or PipelineConfig()
    return {
        "eeg_wide": EEGWideExtractor(config),
        "eeg_narrow": EEGNarrowExtractor(config),
        "audio": AudioMFCCExtractor(config),
    }


def extract_feature_set(data: PreprocessedData,
                        extractors: Optional[Dict[str, FeatureExtractor]] = None) -> FeatureSet:
    """
    Run the three extractors independently on the same preprocessed data

    Args:
        data: Preprocessed dataset
        extractors: Mapping with 'eeg_wide', 'eeg_narrow' and 'audio' extractors

    Returns:
        FeatureSet: One matrix per branch (row counts may differ)
    """
    extractors = extractors or default_extractors()
    matrices = {}
    for branch in ("eeg_wide", "eeg_narrow", "audio"):
        extractor = extractors[branch]
        matrix = np.atleast_2d(np.asarray(extractor.extract(data), dtype=float))
        if matrix.shape[0] == 0:
            matrix = extractor.degenerate()
        if matrix.shape[1] != extractor.n_columns:
            raise ProcessingError(f"{branch} extractor returned {matrix.shape[1]} columns, "
                                  f"expected {extractor.n_columns}")
        logging.debug(f"{branch} features: {matrix.shape}")
        matrices[branch] = matrix
    return FeatureSet(**matrices)
