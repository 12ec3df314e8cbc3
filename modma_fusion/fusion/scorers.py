"""
Modality scorers

A scorer maps one modality's feature matrix to a fixed-width embedding per row,
standing in for that modality's own classifier head. The default projection
scorer is deterministic: its weights are drawn from a generator seeded by the
scorer seed and the input/output widths.
"""

from abc import ABC, abstractmethod
from typing import Dict

import numpy as np


class ModalityScorer(ABC):
    """Per-modality head producing an (rows x output_dim) embedding"""

    def __init__(self, output_dim: int):
        if output_dim <= 0:
            raise ValueError(f"Output dimension must be positive, got {output_dim}")
        self.output_dim = output_dim

    @abstractmethod
    def score(self, features: np.ndarray) -> np.ndarray:
        """Embed every row of a (rows x columns) feature matrix"""


class ProjectionScorer(ModalityScorer):
    """
    Fixed random projection followed by tanh

    Columns are scaled by their peak magnitude before projection so that
    modalities with very different units produce comparable embeddings.
    """

    def __init__(self, output_dim: int, seed: int = 42, gain: float = 1.0):
        super().__init__(output_dim)
        self.seed = seed
        self.gain = gain
        self._weights: Dict[int, np.ndarray] = {}

    def weights_for(self, n_inputs: int) -> np.ndarray:
        if n_inputs not in self._weights:
            rng = np.random.default_rng([self.seed, n_inputs, self.output_dim])
            self._weights[n_inputs] = rng.standard_normal((n_inputs, self.output_dim)) / np.sqrt(n_inputs)
        return self._weights[n_inputs]

    def score(self, features: np.ndarray) -> np.ndarray:
        features = np.atleast_2d(np.asarray(features, dtype=float))
        scaled = features / (1.0 + np.max(np.abs(features), axis=0))
        return np.tanh(self.gain * scaled @ self.weights_for(features.shape[1]))


def default_scorers(embedding_dims: Dict[str, int], seed: int = 42) -> Dict[str, ModalityScorer]:
    """One projection scorer per branch, each with its own seed offset"""
    return {
        branch: ProjectionScorer(dim, seed=seed + offset)
        for offset, (branch, dim) in enumerate(sorted(embedding_dims.items()))
    }


def average_variance(embedding: np.ndarray) -> float:
    """Mean over rows of the variance of each row's embedding values"""
    embedding = np.atleast_2d(embedding)
    return float(np.mean(np.var(embedding, axis=1)))
