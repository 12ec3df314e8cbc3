"""
Core data types, configuration and shared state for MODMA Fusion

This module contains the fundamental data classes used throughout the system.
"""

from .config import PipelineConfig, validate_config
from .data_types import (
    FusionStrategy, PreprocessedData, FeatureSet, FusedFeatures,
    Prediction, Explanation, ModelPerformanceMetrics, PipelineResult,
)
from .errors import PipelineError, FormatError, QualityError, ProcessingError, PipelineCancelled
from .backend import NumericBackend, ensure_initialized

__all__ = [
    'PipelineConfig', 'validate_config',
    'FusionStrategy', 'PreprocessedData', 'FeatureSet', 'FusedFeatures',
    'Prediction', 'Explanation', 'ModelPerformanceMetrics', 'PipelineResult',
    'PipelineError', 'FormatError', 'QualityError', 'ProcessingError', 'PipelineCancelled',
    'NumericBackend', 'ensure_initialized',
]
