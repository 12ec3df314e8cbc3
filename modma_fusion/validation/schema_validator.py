"""
Dataset schema and quality validation

This module is the acceptance gate for an uploaded dataset. The structural check
rejects anything that does not look like a MODMA dataset; the quality check
enforces minimum EEG length and per-modality signal integrity. Soft issues are
logged as warnings and returned on the report, hard issues raise.
"""

import logging
import math
import numbers
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, List, Optional

from ..core.config import PipelineConfig, MODALITY_ALIASES, AUDIO_FRAME_VALUE_KEYS
from ..core.errors import FormatError, QualityError


def modality_field(raw: Mapping, key: str) -> Any:
    """Look up a modality by its canonical key, falling back to the MODMA alias"""
    if key in raw:
        return raw[key]
    alias = MODALITY_ALIASES.get(key)
    if alias is not None:
        return raw.get(alias)
    return None


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def is_number(value: Any) -> bool:
    """Real number that is not a bool"""
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def audio_sample_value(sample: Any) -> Optional[float]:
    """
    Scalar value of one audio sample, or None if it carries none

    A sample is either a number or a frame record such as
    {"frame_id": 0, "mfcc": [...], "energy": 0.7}, which is reduced to the
    first numeric field in AUDIO_FRAME_VALUE_KEYS. Non-finite values count
    as missing.
    """
    if isinstance(sample, Mapping):
        sample = next((sample[key] for key in AUDIO_FRAME_VALUE_KEYS
                       if is_number(sample.get(key))), None)
    if not is_number(sample) or not math.isfinite(sample):
        return None
    return float(sample)


def _is_eeg_record(sample: Any) -> bool:
    return isinstance(sample, Mapping)


def _is_audio_sample(sample: Any) -> bool:
    return audio_sample_value(sample) is not None


def _has_text_content(entry: Any) -> bool:
    return (isinstance(entry, Mapping)
            and isinstance(entry.get("content"), str)
            and len(entry["content"].strip()) > 0)


@dataclass
class ValidationReport:
    """Successful validation outcome with the soft warnings that were logged"""
    eeg_length: int
    audio_length: int
    text_length: Optional[int] = None
    warnings: List[str] = field(default_factory=list)


class SchemaValidator:
    """
    Structural and statistical acceptance gate for a raw dataset

    validate() is single-pass: it either returns a ValidationReport or raises
    exactly one FormatError / QualityError.
    """

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig()

    def validate(self, raw: Any) -> ValidationReport:
        """
        Run the structural check followed by the quality check

        Args:
            raw: Parsed JSON document

        Returns:
            ValidationReport: Lengths and warnings of an accepted dataset

        Raises:
            FormatError: Structure does not conform to the dataset schema
            QualityError: A hard quality threshold was violated
        """
        self.check_format(raw)
        return self.check_quality(raw)

    def check_format(self, raw: Any) -> None:
        """Structural check; every violation is a hard FormatError"""
        if not isinstance(raw, Mapping):
            logging.error("Invalid data: not an object")
            raise FormatError("dataset is not an object")

        metadata = raw.get("metadata")
        if not isinstance(metadata, Mapping):
            logging.error("Invalid data: missing metadata")
            raise FormatError("missing metadata")

        for key in ("eeg_samples", "audio_samples"):
            samples = modality_field(raw, key)
            if not _is_sequence(samples) or len(samples) == 0:
                logging.error(f"Invalid data: missing or empty {key}")
                raise FormatError(f"missing or empty {key}")

        if not metadata.get("format_version"):
            logging.error("Invalid data: missing format version in metadata")
            raise FormatError("missing format_version in metadata")

    def check_quality(self, raw: Mapping) -> ValidationReport:
        """Quality check; assumes check_format() already passed"""
        warnings: List[str] = []
        self._check_quality_scores(raw["metadata"], warnings)

        eeg = modality_field(raw, "eeg_samples")
        audio = modality_field(raw, "audio_samples")
        self._check_eeg(eeg)
        self._check_audio(audio, warnings)

        text = modality_field(raw, "text_entries")
        text_length = None
        if text is not None:
            text_length = self._check_text(text, warnings)

        return ValidationReport(
            eeg_length=len(eeg),
            audio_length=len(audio),
            text_length=text_length,
            warnings=warnings,
        )

    def _warn(self, warnings: List[str], message: str) -> None:
        logging.warning(f"Data quality issue: {message}")
        warnings.append(message)

    def _check_quality_scores(self, metadata: Mapping, warnings: List[str]) -> None:
        quality = metadata.get("data_quality")
        if not isinstance(quality, Mapping):
            quality = {}

        for score_name in ("completeness", "consistency"):
            score = quality.get(score_name)
            if not is_number(score):
                self._warn(warnings, f"missing {score_name} score")
            elif score < self.config.quality_score_min:
                self._warn(warnings, f"low {score_name} score ({score:.2f})")

    def _integrity_ratio(self, samples: Sequence, is_valid) -> float:
        sample_size = min(self.config.integrity_window, len(samples))
        valid = sum(1 for i in range(sample_size) if is_valid(samples[i]))
        return valid / sample_size

    def _check_eeg(self, eeg: Sequence) -> None:
        if len(eeg) < self.config.min_eeg_samples:
            logging.error(f"EEG data quality issue: insufficient data length "
                          f"({len(eeg)} < {self.config.min_eeg_samples})")
            raise QualityError("insufficient EEG length")

        ratio = self._integrity_ratio(eeg, _is_eeg_record)
        if ratio < self.config.integrity_ratio:
            logging.error(f"EEG data quality issue: only {ratio * 100:.0f}% of checked samples are valid")
            raise QualityError("EEG signal integrity")

    def _check_audio(self, audio: Sequence, warnings: List[str]) -> None:
        if len(audio) < self.config.min_audio_samples:
            self._warn(warnings, f"short audio duration ({len(audio)} samples)")

        ratio = self._integrity_ratio(audio, _is_audio_sample)
        if ratio < self.config.integrity_ratio:
            logging.error(f"Audio data quality issue: only {ratio * 100:.0f}% of checked samples are valid")
            raise QualityError("audio signal integrity")

    def _check_text(self, text: Any, warnings: List[str]) -> int:
        # Text is optional and never blocks the pipeline
        if not _is_sequence(text) or len(text) == 0:
            self._warn(warnings, "empty text data")
            return 0

        if not any(_has_text_content(entry) for entry in text):
            self._warn(warnings, "no valid text entries found")
        return len(text)
