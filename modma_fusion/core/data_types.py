"""
Core data types for MODMA Fusion

This module defines the data structures handed from stage to stage: the
preprocessed dataset, per-modality feature matrices, the fused matrix, and the
prediction, explanation and performance records returned to the caller.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

import numpy as np

from ..utils.serialization import convert_numpy_types
from .config import SEVERITY_SCALE


class FusionStrategy(str, Enum):
    """Interchangeable strategies for combining modality features"""

    EARLY = "Early"
    LATE = "Late"
    ATTENTION = "Attention"

    @classmethod
    def parse(cls, value: Any) -> "FusionStrategy":
        """Resolve a strategy from an enum member or a case-insensitive name"""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        raise ValueError(f"Unknown fusion type: {value!r} "
                         f"(expected one of {[m.value for m in cls]})")


@dataclass
class PreprocessedData:
    """Filtered, normalized copies of each modality"""
    eeg: Tuple[Mapping[str, Any], ...]
    audio: np.ndarray                            # Shape: (n_samples,)
    text: Optional[Tuple[Dict[str, Any], ...]] = None

    @property
    def modalities(self) -> List[str]:
        present = ["eeg", "audio"]
        if self.text:
            present.append("text")
        return present


@dataclass
class FeatureSet:
    """Independently produced per-modality feature matrices"""
    eeg_wide: np.ndarray      # Shape: (T_w, 128)
    eeg_narrow: np.ndarray    # Shape: (T_n, 3)
    audio: np.ndarray         # Shape: (T_a, K)

    def as_dict(self) -> Dict[str, list]:
        """Feature matrices under the dashboard's key names"""
        return {
            "eeg_128": self.eeg_wide.tolist(),
            "eeg_3": self.eeg_narrow.tolist(),
            "audio": self.audio.tolist(),
        }


@dataclass
class FusedFeatures:
    """Fused feature matrix with the strategy-specific width carried alongside"""
    matrix: np.ndarray        # Shape: (T_f, D)
    strategy: FusionStrategy
    modality_weights: Dict[str, float] = field(default_factory=dict)

    @property
    def rows(self) -> int:
        return int(self.matrix.shape[0])

    @property
    def width(self) -> int:
        return int(self.matrix.shape[1])

    def summary(self) -> Dict[str, Any]:
        return {
            "strategy": self.strategy.value,
            "rows": self.rows,
            "width": self.width,
            "modality_weights": dict(self.modality_weights),
        }


@dataclass
class Prediction:
    """Labeled condition with probability, severity (0-1) and confidence"""
    label: str
    probability: float
    severity: float
    confidence: float
    probabilities: Dict[str, float] = field(default_factory=dict)

    def severity_on_scale(self, scale: float = SEVERITY_SCALE) -> float:
        """Severity expressed on a 0..scale range (e.g. 10 for dashboard display)"""
        return float(self.severity * scale)

    def to_dict(self, severity_scale: float = SEVERITY_SCALE) -> Dict[str, Any]:
        record = asdict(self)
        record["severity"] = self.severity_on_scale(severity_scale)
        return convert_numpy_types(record)


@dataclass
class Explanation:
    """Per-feature importance and per-modality attention for one prediction"""
    feature_importance: Dict[str, float]
    attention_weights: Dict[str, float]


@dataclass
class ModelPerformanceMetrics:
    """Performance record consumed by the presentation layer"""
    accuracy: float
    precision: float
    recall: float
    f1_score: float
    specificity: float
    robustness_index: float
    inference_time: float                 # Milliseconds
    false_positive_rate: Optional[float] = None
    cross_validation_variance: Optional[float] = None
    noise_sensitivity: Optional[float] = None
    demographic_bias: Optional[float] = None

    def to_dict(self) -> Dict[str, float]:
        record = {
            "accuracy": self.accuracy,
            "precision": self.precision,
            "recall": self.recall,
            "f1Score": self.f1_score,
            "specificity": self.specificity,
            "robustnessIndex": self.robustness_index,
            "inferenceTime": self.inference_time,
            "falsePositiveRate": self.false_positive_rate,
            "crossValidationVariance": self.cross_validation_variance,
            "noiseSensitivity": self.noise_sensitivity,
            "demographicBias": self.demographic_bias,
        }
        return convert_numpy_types({k: v for k, v in record.items() if v is not None})


@dataclass
class PipelineResult:
    """
    Outcome of one pipeline run

    Either `error` is set, or all of the success fields are. Use the
    constructors `failure()` and `success()` rather than building one by hand.
    """
    error: Optional[str] = None
    prediction: Optional[Prediction] = None
    explanation: Optional[Explanation] = None
    features: Optional[FeatureSet] = None
    fusion: Optional[Dict[str, Any]] = None
    fusion_type: Optional[FusionStrategy] = None
    model_performance: Optional[ModelPerformanceMetrics] = None

    @classmethod
    def failure(cls, message: str) -> "PipelineResult":
        return cls(error=message)

    @classmethod
    def success(cls, prediction: Prediction, explanation: Explanation,
                features: FeatureSet, fused: FusedFeatures,
                model_performance: ModelPerformanceMetrics) -> "PipelineResult":
        return cls(
            prediction=prediction,
            explanation=explanation,
            features=features,
            fusion=fused.summary(),
            fusion_type=fused.strategy,
            model_performance=model_performance,
        )

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self, severity_scale: float = SEVERITY_SCALE) -> Dict[str, Any]:
        """JSON-serializable form using the dashboard's key names"""
        if not self.ok:
            return {"error": self.error}
        return convert_numpy_types({
            "prediction": self.prediction.to_dict(severity_scale),
            "explanation": asdict(self.explanation),
            "features": self.features.as_dict(),
            "fusionType": self.fusion_type.value,
            "fusion": self.fusion,
            "modelPerformance": self.model_performance.to_dict(),
        })
