"""
Condition-aware explanations

This module derives a feature-importance profile and per-modality attention
weights for a prediction from per-condition priors.
"""

import logging
from typing import Dict, Iterable, Optional

from ..core.config import FEATURE_PRIORS, ATTENTION_PRIORS, CONDITIONS
from ..core.data_types import Explanation, Prediction


class Explainer:
    """
    Explain predictions with per-condition priors

    Feature importance is prior ** (1 + probability), normalized, so a more
    confident prediction gives a sharper profile. Attention weights are the
    condition's modality priors restricted to the modalities present.
    """

    def __init__(self, feature_priors: Optional[Dict[str, Dict[str, float]]] = None,
                 attention_priors: Optional[Dict[str, Dict[str, float]]] = None,
                 default_label: str = CONDITIONS[0]):
        self.feature_priors = feature_priors or FEATURE_PRIORS
        self.attention_priors = attention_priors or ATTENTION_PRIORS
        self.default_label = default_label

    def _priors_for(self, table: Dict[str, Dict[str, float]], label: str) -> Dict[str, float]:
        if label not in table:
            logging.warning(f"No explanation priors for '{label}', using '{self.default_label}'")
            return table[self.default_label]
        return table[label]

    def feature_importance(self, prediction: Prediction) -> Dict[str, float]:
        priors = self._priors_for(self.feature_priors, prediction.label)
        sharpness = 1.0 + prediction.probability
        raw = {name: weight ** sharpness for name, weight in priors.items()}
        total = sum(raw.values())
        return {name: value / total for name, value in raw.items()}

    def attention_weights(self, prediction: Prediction, modalities: Iterable[str]) -> Dict[str, float]:
        priors = self._priors_for(self.attention_priors, prediction.label)
        available = set(modalities)
        present = [m for m in priors if m in available]
        if not present:
            raise ValueError(f"None of the modalities {sorted(available)} have attention priors")

        total = sum(priors[m] for m in present)
        weights = {m: priors[m] / total for m in present}
        # Absorb rounding in the last weight so the map sums to exactly 1
        last = present[-1]
        weights[last] = 1.0 - sum(weights[m] for m in present[:-1])
        return weights

    def explain(self, prediction: Prediction, modalities: Iterable[str] = ("eeg", "audio")) -> Explanation:
        """
        Generate the explanation for a prediction

        Args:
            prediction: Output of the predictor
            modalities: Modalities present in the dataset ("eeg", "audio", "text")

        Returns:
            Explanation: Importance over the feature vocabulary and modality weights
        """
        logging.info("Generating explanations...")
        modalities = list(modalities)
        return Explanation(
            feature_importance=self.feature_importance(prediction),
            attention_weights=self.attention_weights(prediction, modalities),
        )
