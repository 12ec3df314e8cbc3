"""
Utility functions and helpers

This module contains serialization helpers shared by the pipeline and the CLI.
"""

from .serialization import convert_numpy_types, save_result

__all__ = ['convert_numpy_types', 'save_result']
