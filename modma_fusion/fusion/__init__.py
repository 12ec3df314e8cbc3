"""
Multimodal fusion

This module implements the Early, Late and Attention fusion strategies and the
per-modality scorers they rely on.
"""

from .engine import FusionEngine, aligned_rows
from .scorers import ModalityScorer, ProjectionScorer, default_scorers, average_variance

__all__ = [
    'FusionEngine', 'aligned_rows',
    'ModalityScorer', 'ProjectionScorer', 'default_scorers', 'average_variance',
]
