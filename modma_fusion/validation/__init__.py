"""
Dataset validation

This module provides the structural and quality acceptance gate for uploaded
datasets.
"""

from .schema_validator import (
    SchemaValidator, ValidationReport, modality_field, audio_sample_value, is_number,
)

__all__ = ['SchemaValidator', 'ValidationReport', 'modality_field', 'audio_sample_value', 'is_number']
