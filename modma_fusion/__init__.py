"""
MODMA Fusion - Multimodal EEG/audio screening pipeline

A modular Python package that validates an uploaded MODMA-style dataset,
extracts EEG and audio features, fuses them with an early, late or attention
strategy, and returns a condition prediction with an explanation and a model
performance record.

Python: 3.10+
"""

__version__ = "1.0.0"

# Main package imports for easy access
from .core.config import PipelineConfig
from .core.data_types import FusionStrategy, Prediction, Explanation, PipelineResult
from .acquisition.sources import SyntheticDatasetSource
from .validation.schema_validator import SchemaValidator
from .processing.preprocessor import Preprocessor
from .fusion.engine import FusionEngine
from .detection.predictor import HybridPredictor
from .detection.explainer import Explainer
from .pipeline import CancellationToken, DatasetPipeline, process_dataset

__all__ = [
    'PipelineConfig',
    'FusionStrategy', 'Prediction', 'Explanation', 'PipelineResult',
    'SyntheticDatasetSource', 'SchemaValidator', 'Preprocessor',
    'FusionEngine', 'HybridPredictor', 'Explainer',
    'CancellationToken', 'DatasetPipeline', 'process_dataset'
]
