"""
Configuration constants for MODMA Fusion

This module contains the parameters that control validation thresholds, signal
processing, fusion weighting and the prediction label set. The constants are the
defaults of PipelineConfig; override fields on a PipelineConfig instance rather
than editing the module at runtime.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

# ============================================================================
# ACQUISITION
# ============================================================================

FS_EXPECTED = 250                 # Nominal EEG sampling rate (Hz)
AUDIO_FS = 16000                  # Nominal audio sampling rate (Hz)
NOTCH_HZ = 60                     # Power line frequency (50 Hz for EU, 60 Hz for US)
BANDPASS = (1.0, 45.0)            # EEG band-pass filter range (Hz)

# Keys of an EEG sample that carry metadata rather than a channel value.
# Non-numeric fields (labels, flags, lists) are always treated as metadata.
EEG_META_KEYS = ("timestamp", "time", "t", "sampling_rate", "quality")

# Fields that reduce a frame-record audio sample to one scalar, in priority order
AUDIO_FRAME_VALUE_KEYS = ("energy", "rms", "amplitude", "value")

# Original MODMA key names accepted in place of the canonical modality keys
MODALITY_ALIASES = {
    "eeg_samples": "eeg_data",
    "audio_samples": "audio_data",
    "text_entries": "text_data",
}

# ============================================================================
# VALIDATION
# ============================================================================

MIN_EEG_SAMPLES = 5 * FS_EXPECTED  # 5 seconds of EEG
MIN_AUDIO_SAMPLES = 3 * AUDIO_FS   # 3 seconds of audio (warning only)
INTEGRITY_WINDOW = 100             # Rows inspected for signal integrity
INTEGRITY_RATIO = 0.8              # Minimum fraction of well-formed rows
QUALITY_SCORE_MIN = 0.7            # completeness / consistency warning level

# ============================================================================
# FEATURE EXTRACTION
# ============================================================================

EEG_WIDE_COLUMNS = 128
EEG_WIDE_WINDOW_SEC = 1.0
EEG_WIDE_OVERLAP = 0.5
EEG_NARROW_WINDOW_SEC = 2.0
EEG_NARROW_OVERLAP = 0.5

# Frequency Bands (Hz)
FREQ_BANDS = {
    "delta": (1, 4),
    "theta": (4, 7),
    "alpha": (8, 12),
    "beta": (13, 30),
    "gamma": (30, 45),
}

# Column order of the narrow EEG view
NARROW_BANDS = ("alpha", "beta", "theta")

MFCC_COEFFICIENTS = 13
MEL_FILTERS = 26
AUDIO_FRAME_LEN = 512
AUDIO_HOP_LEN = 256

# ============================================================================
# FUSION
# ============================================================================

MODALITY_BRANCHES = ("eeg_wide", "eeg_narrow", "audio")
EARLY_FUSION_STEPS = 50

BRANCH_EMBEDDING_DIMS = {"eeg_wide": 32, "eeg_narrow": 16, "audio": 16}
LATE_FUSION_WEIGHTS = {"eeg_wide": 0.4, "eeg_narrow": 0.3, "audio": 0.3}
ATTENTION_BASE_WEIGHTS = {"eeg_wide": 0.6, "eeg_narrow": 0.2, "audio": 0.15}

SCORER_SEED = 42
PREDICTOR_SEED = 7

# ============================================================================
# PREDICTION & EXPLANATION
# ============================================================================

CONDITIONS = [
    "Major Depressive Disorder",
    "Generalized Anxiety Disorder",
    "Bipolar Disorder",
    "Social Anxiety Disorder",
]
BASELINE_LABEL = "Healthy"
LOGIT_SCALE = 4.0

FEATURE_VOCABULARY = [
    "alpha_power_frontal",
    "beta_oscillation",
    "theta_power_temporal",
    "delta_wave_pattern",
    "speech_rate",
    "voice_pitch",
]

FEATURE_PRIORS = {
    "Major Depressive Disorder": {
        "alpha_power_frontal": 0.8, "beta_oscillation": 0.3, "theta_power_temporal": 0.4,
        "delta_wave_pattern": 0.5, "speech_rate": 0.7, "voice_pitch": 0.6,
    },
    "Generalized Anxiety Disorder": {
        "alpha_power_frontal": 0.5, "beta_oscillation": 0.8, "theta_power_temporal": 0.3,
        "delta_wave_pattern": 0.2, "speech_rate": 0.9, "voice_pitch": 0.7,
    },
    "Bipolar Disorder": {
        "alpha_power_frontal": 0.6, "beta_oscillation": 0.7, "theta_power_temporal": 0.7,
        "delta_wave_pattern": 0.6, "speech_rate": 0.5, "voice_pitch": 0.8,
    },
    "Social Anxiety Disorder": {
        "alpha_power_frontal": 0.4, "beta_oscillation": 0.6, "theta_power_temporal": 0.5,
        "delta_wave_pattern": 0.3, "speech_rate": 0.8, "voice_pitch": 0.9,
    },
    "Healthy": {
        "alpha_power_frontal": 0.6, "beta_oscillation": 0.5, "theta_power_temporal": 0.4,
        "delta_wave_pattern": 0.4, "speech_rate": 0.5, "voice_pitch": 0.5,
    },
}

ATTENTION_PRIORS = {
    "Major Depressive Disorder": {"eeg": 0.6, "audio": 0.2, "text": 0.2},
    "Generalized Anxiety Disorder": {"eeg": 0.4, "audio": 0.4, "text": 0.2},
    "Bipolar Disorder": {"eeg": 0.5, "audio": 0.3, "text": 0.2},
    "Social Anxiety Disorder": {"eeg": 0.3, "audio": 0.5, "text": 0.2},
    "Healthy": {"eeg": 0.5, "audio": 0.3, "text": 0.2},
}

# Severity is produced on a 0-1 scale; callers wanting 0-10 convert at output
SEVERITY_SCALE = 1.0

# ============================================================================
# RESULT MESSAGES
# ============================================================================

MSG_FORMAT_ERROR = "Incorrect Data Format"
MSG_QUALITY_ERROR = "Data is not compliant"
MSG_PROCESSING_ERROR = "Error processing dataset"
MSG_READ_ERROR = "Error reading file"
MSG_CANCELLED = "Processing cancelled"


@dataclass
class PipelineConfig:
    """
    Runtime configuration for one DatasetPipeline

    Defaults mirror the module constants above. Each component reads only the
    fields it needs, so a single instance can be shared across a pipeline.
    """

    # Sampling and filtering
    fs: int = FS_EXPECTED
    audio_fs: int = AUDIO_FS
    notch_hz: int = NOTCH_HZ
    bandpass: Tuple[float, float] = BANDPASS
    apply_filters: bool = True

    # Validation thresholds
    min_eeg_samples: int = MIN_EEG_SAMPLES
    min_audio_samples: int = MIN_AUDIO_SAMPLES
    integrity_window: int = INTEGRITY_WINDOW
    integrity_ratio: float = INTEGRITY_RATIO
    quality_score_min: float = QUALITY_SCORE_MIN

    # Feature extraction
    eeg_wide_columns: int = EEG_WIDE_COLUMNS
    mfcc_coefficients: int = MFCC_COEFFICIENTS
    mel_filters: int = MEL_FILTERS
    audio_frame_len: int = AUDIO_FRAME_LEN
    audio_hop_len: int = AUDIO_HOP_LEN

    # Fusion
    early_fusion_steps: int = EARLY_FUSION_STEPS
    embedding_dims: Dict[str, int] = None
    late_weights: Dict[str, float] = None
    attention_base_weights: Dict[str, float] = None
    scorer_seed: int = SCORER_SEED

    # Prediction
    predictor_seed: int = PREDICTOR_SEED
    model_path: Optional[str] = None
    conditions: List[str] = field(default_factory=lambda: list(CONDITIONS))
    baseline_label: str = BASELINE_LABEL

    # Reporting
    metrics_seed: Optional[int] = None

    def __post_init__(self):
        if self.embedding_dims is None:
            self.embedding_dims = dict(BRANCH_EMBEDDING_DIMS)
        if self.late_weights is None:
            self.late_weights = dict(LATE_FUSION_WEIGHTS)
        if self.attention_base_weights is None:
            self.attention_base_weights = dict(ATTENTION_BASE_WEIGHTS)

    @property
    def labels(self) -> List[str]:
        """Full label set: the named conditions followed by the baseline"""
        return list(self.conditions) + [self.baseline_label]


def validate_config(config: PipelineConfig) -> None:
    """
    Validate configuration parameters for common mistakes

    Args:
        config: Configuration to validate

    Raises:
        ValueError: If configuration parameters are invalid
    """
    if config.fs <= 0 or config.audio_fs <= 0:
        raise ValueError(f"Sampling rates must be positive, got {config.fs}/{config.audio_fs}")

    low, high = config.bandpass
    if low >= high:
        raise ValueError(f"Band-pass low ({low}) must be < high ({high})")
    if high >= config.fs / 2:
        raise ValueError(f"Band-pass high ({high}) exceeds Nyquist ({config.fs / 2})")
    if config.notch_hz >= config.fs / 2:
        raise ValueError(f"Notch frequency ({config.notch_hz}) exceeds Nyquist ({config.fs / 2})")

    if not 0.0 < config.integrity_ratio <= 1.0:
        raise ValueError(f"Integrity ratio must be in (0, 1], got {config.integrity_ratio}")
    if config.integrity_window <= 0:
        raise ValueError(f"Integrity window must be positive, got {config.integrity_window}")

    if config.early_fusion_steps <= 0:
        raise ValueError(f"Early fusion steps must be positive, got {config.early_fusion_steps}")
    if config.audio_hop_len <= 0 or config.audio_frame_len <= 0:
        raise ValueError("Audio frame and hop lengths must be positive")
    if config.mfcc_coefficients > config.mel_filters:
        raise ValueError(f"MFCC coefficients ({config.mfcc_coefficients}) "
                         f"exceed mel filters ({config.mel_filters})")

    for table_name in ("embedding_dims", "late_weights", "attention_base_weights"):
        table = getattr(config, table_name)
        missing = [b for b in MODALITY_BRANCHES if b not in table]
        if missing:
            raise ValueError(f"{table_name} is missing branches: {missing}")
        if any(value < 0 for value in table.values()):
            raise ValueError(f"{table_name} must not contain negative values")

    if sum(config.attention_base_weights.values()) <= 0:
        raise ValueError("Attention base weights must not all be zero")
    if any(dim <= 0 for dim in config.embedding_dims.values()):
        raise ValueError("Embedding dimensions must be positive")

    if config.baseline_label in config.conditions:
        raise ValueError(f"Baseline label '{config.baseline_label}' duplicates a condition")
    if len(config.labels) < 2:
        raise ValueError("At least two labels are required for prediction")
