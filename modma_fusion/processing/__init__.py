"""
Signal preprocessing and feature extraction

This module contains the per-modality preprocessing and the feature extractors
that turn preprocessed samples into fixed-width matrices.
"""

from .preprocessor import Preprocessor, SignalConditioner
from .features import (
    FeatureExtractor, EEGWideExtractor, EEGNarrowExtractor, AudioMFCCExtractor,
    default_extractors, extract_feature_set,
)

__all__ = [
    'Preprocessor', 'SignalConditioner',
    'FeatureExtractor', 'EEGWideExtractor', 'EEGNarrowExtractor', 'AudioMFCCExtractor',
    'default_extractors', 'extract_feature_set',
]
