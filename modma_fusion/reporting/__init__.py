"""
Performance reporting

This module produces the model performance record returned with each result.
"""

from .metrics import MetricsReporter, REFERENCE_METRICS

__all__ = ['MetricsReporter', 'REFERENCE_METRICS']
