"""
Condition prediction from fused features

This module maps a fused feature matrix to one label of a fixed condition set
using either a trained classifier loaded with joblib or a deterministic linear
head as fallback.
"""

import logging
import os
from typing import Dict, List, Optional

import numpy as np
import joblib

from ..core.config import PipelineConfig, LOGIT_SCALE
from ..core.data_types import FusedFeatures, Prediction


def softmax(logits: np.ndarray) -> np.ndarray:
    shifted = logits - np.max(logits)
    exp = np.exp(shifted)
    return exp / exp.sum()


def margin_confidence(probabilities: np.ndarray) -> float:
    """
    Confidence from the gap between the best and second-best probability

    A larger margin gives higher confidence; the result is clipped to [0.5, 1].
    """
    ordered = np.sort(probabilities)[::-1]
    margin = ordered[0] - ordered[1] if ordered.size > 1 else ordered[0]
    return float(np.clip(0.5 + margin, 0.5, 1.0))


def pool_features(matrix: np.ndarray) -> np.ndarray:
    """Summarize a (rows x D) matrix as tanh-squashed row mean and std (2D,)"""
    matrix = np.atleast_2d(matrix)
    return np.tanh(np.concatenate([matrix.mean(axis=0), matrix.std(axis=0)]))


class HybridPredictor:
    """
    Condition classifier using a trained model or a deterministic fallback

    If model_path points to a joblib file holding an estimator with
    predict_proba, it receives the pooled feature vector. Otherwise a seeded
    linear head (one weight matrix per input width) produces the logits.
    """

    def __init__(self, config: Optional[PipelineConfig] = None, model_path: Optional[str] = None):
        self.config = config or PipelineConfig()
        self.labels: List[str] = self.config.labels
        self.model_path = model_path or self.config.model_path
        self.model = None
        self.use_model = False
        self._heads: Dict[int, np.ndarray] = {}

        if self.model_path:
            self._load_model()

    def _load_model(self) -> bool:
        """Load a trained classifier if available"""
        try:
            if os.path.exists(self.model_path):
                model = joblib.load(self.model_path)
                if not hasattr(model, "predict_proba"):
                    logging.error(f"Model {self.model_path} has no predict_proba - using fallback head")
                    return False
                self.model = model
                self.use_model = True
                logging.info(f"Loaded prediction model: {self.model_path}")
                return True
            else:
                logging.info("No prediction model found - using fallback head")
                return False
        except Exception as e:
            logging.error(f"Failed to load prediction model: {e}")
            return False

    def _head_for(self, n_inputs: int) -> np.ndarray:
        if n_inputs not in self._heads:
            rng = np.random.default_rng([self.config.predictor_seed, n_inputs, len(self.labels)])
            self._heads[n_inputs] = rng.standard_normal((n_inputs, len(self.labels))) / np.sqrt(n_inputs)
        return self._heads[n_inputs]

    def _heuristic_probabilities(self, pooled: np.ndarray) -> np.ndarray:
        logits = LOGIT_SCALE * (pooled @ self._head_for(pooled.size))
        return softmax(logits)

    def _model_probabilities(self, pooled: np.ndarray) -> Optional[np.ndarray]:
        """Class probabilities from the loaded model, ordered like self.labels"""
        try:
            proba = np.asarray(self.model.predict_proba(pooled.reshape(1, -1))[0], dtype=float)
            classes = [str(c) for c in getattr(self.model, "classes_", [])]

            probabilities = np.zeros(len(self.labels))
            if classes and all(c in self.labels for c in classes):
                for class_name, p in zip(classes, proba):
                    probabilities[self.labels.index(class_name)] = p
            else:
                n = min(len(proba), len(self.labels))
                probabilities[:n] = proba[:n]

            total = probabilities.sum()
            if total <= 0:
                raise ValueError("model returned no probability mass for known labels")
            return probabilities / total

        except Exception as e:
            logging.error(f"Model prediction failed: {e}")
            return None

    def predict(self, fused: FusedFeatures) -> Prediction:
        """
        Predict the condition for a fused feature matrix

        Args:
            fused: Output of the fusion engine

        Returns:
            Prediction: Label, probability, severity (0-1) and confidence
        """
        logging.info("Making predictions with hybrid model...")
        pooled = pool_features(fused.matrix)

        probabilities = None
        if self.use_model and self.model is not None:
            probabilities = self._model_probabilities(pooled)
        if probabilities is None:
            probabilities = self._heuristic_probabilities(pooled)

        best = int(np.argmax(probabilities))
        baseline_p = probabilities[self.labels.index(self.config.baseline_label)]

        return Prediction(
            label=self.labels[best],
            probability=float(probabilities[best]),
            severity=float(np.clip(1.0 - baseline_p, 0.0, 1.0)),
            confidence=margin_confidence(probabilities),
            probabilities={label: float(p) for label, p in zip(self.labels, probabilities)},
        )
