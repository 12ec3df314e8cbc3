"""
Condition detection and explanation

This module implements the condition predictor and the explainer that
accompanies each prediction.
"""

from .predictor import HybridPredictor, margin_confidence, pool_features
from .explainer import Explainer

__all__ = ['HybridPredictor', 'margin_confidence', 'pool_features', 'Explainer']
