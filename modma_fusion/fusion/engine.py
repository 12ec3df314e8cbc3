"""
Multimodal fusion engine

This module combines the wide EEG, narrow EEG and audio feature matrices into a
single fused matrix using one of three strategies:

- Early: concatenate the aligned raw feature rows for a fixed number of steps
- Late: score each branch separately, scale by fixed weights, concatenate
- Attention: score each branch, weight by variance-derived importance,
  concatenate

Modalities are aligned positionally. When row counts differ, row i of a shorter
matrix is read as its row min(i, len - 1); nothing is interpolated or resampled,
so trailing rows of longer modalities are ignored by Late/Attention fusion and
by Early fusion beyond the configured step count.
"""

import logging
from typing import Dict, Optional

import numpy as np

from ..core.config import PipelineConfig, MODALITY_BRANCHES
from ..core.data_types import FusedFeatures, FusionStrategy
from ..core.errors import ProcessingError
from .scorers import ModalityScorer, average_variance, default_scorers


def aligned_rows(matrix: np.ndarray, n_rows: int) -> np.ndarray:
    """Rows 0..n_rows-1 of matrix, clamping each index to the last valid row"""
    index = np.minimum(np.arange(n_rows), matrix.shape[0] - 1)
    return matrix[index]


class FusionEngine:
    """
    Strategy-selectable fusion of the three modality branches

    Usage:
        engine = FusionEngine(config)
        fused = engine.fuse("Attention", eeg_wide, eeg_narrow, audio)
    """

    def __init__(self, config: Optional[PipelineConfig] = None,
                 scorers: Optional[Dict[str, ModalityScorer]] = None):
        self.config = config or PipelineConfig()
        self.scorers = scorers or default_scorers(self.config.embedding_dims, self.config.scorer_seed)

        missing = [branch for branch in MODALITY_BRANCHES if branch not in self.scorers]
        if missing:
            raise ValueError(f"No scorer configured for branches: {missing}")

    def fuse(self, strategy, eeg_wide: np.ndarray, eeg_narrow: np.ndarray,
             audio: np.ndarray) -> FusedFeatures:
        """
        Apply the requested fusion strategy

        Args:
            strategy: FusionStrategy or its name ("Early", "Late", "Attention")
            eeg_wide: Wide EEG features (T_w x 128)
            eeg_narrow: Narrow EEG features (T_n x 3)
            audio: Audio features (T_a x K)

        Returns:
            FusedFeatures: Fused matrix with at least one row
        """
        strategy = FusionStrategy.parse(strategy)
        branches = {
            "eeg_wide": self._as_matrix("eeg_wide", eeg_wide),
            "eeg_narrow": self._as_matrix("eeg_narrow", eeg_narrow),
            "audio": self._as_matrix("audio", audio),
        }
        logging.info(f"Applying {strategy.value} fusion...")

        if strategy is FusionStrategy.EARLY:
            fused = self.early_fusion(branches)
        elif strategy is FusionStrategy.LATE:
            fused = self.late_fusion(branches)
        else:
            fused = self.attention_fusion(branches)

        logging.debug(f"{strategy.value} fusion output: {fused.matrix.shape}")
        return fused

    def _as_matrix(self, name: str, features: np.ndarray) -> np.ndarray:
        matrix = np.asarray(features, dtype=float)
        if matrix.ndim != 2:
            raise ProcessingError(f"{name} features must be 2-D, got shape {matrix.shape}")
        if matrix.shape[0] == 0:
            raise ProcessingError(f"{name} features have no rows")
        return matrix

    def early_fusion(self, branches: Dict[str, np.ndarray]) -> FusedFeatures:
        """Concatenate index-aligned raw rows over a fixed number of steps"""
        steps = self.config.early_fusion_steps
        matrix = np.hstack([aligned_rows(branches[name], steps) for name in MODALITY_BRANCHES])
        return FusedFeatures(matrix=matrix, strategy=FusionStrategy.EARLY)

    def score_branches(self, branches: Dict[str, np.ndarray]) -> Dict[str, np.ndarray]:
        """Run each branch through its own scorer"""
        return {name: self.scorers[name].score(branches[name]) for name in MODALITY_BRANCHES}

    def late_fusion(self, branches: Dict[str, np.ndarray]) -> FusedFeatures:
        """Scale each scored branch by its fixed weight and concatenate"""
        outputs = self.score_branches(branches)
        weights = {name: float(self.config.late_weights[name]) for name in MODALITY_BRANCHES}
        matrix = self._combine(outputs, weights)
        return FusedFeatures(matrix=matrix, strategy=FusionStrategy.LATE, modality_weights=weights)

    def attention_fusion(self, branches: Dict[str, np.ndarray]) -> FusedFeatures:
        """Scale each scored branch by its normalized variance-based importance"""
        outputs = self.score_branches(branches)
        weights = self.attention_weights(outputs)
        matrix = self._combine(outputs, weights)
        return FusedFeatures(matrix=matrix, strategy=FusionStrategy.ATTENTION, modality_weights=weights)

    def attention_weights(self, outputs: Dict[str, np.ndarray]) -> Dict[str, float]:
        """
        Data-dependent branch weights

        importance = base_weight * (1 + average_variance(embedding)),
        normalized so the three weights sum to 1.
        """
        importance = {
            name: float(self.config.attention_base_weights[name]) * (1.0 + average_variance(outputs[name]))
            for name in MODALITY_BRANCHES
        }
        total = sum(importance.values())
        return {name: value / total for name, value in importance.items()}

    def _combine(self, outputs: Dict[str, np.ndarray], weights: Dict[str, float]) -> np.ndarray:
        n_rows = min(out.shape[0] for out in outputs.values())
        return np.hstack([aligned_rows(outputs[name], n_rows) * weights[name]
                          for name in MODALITY_BRANCHES])
