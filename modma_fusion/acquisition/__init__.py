"""
Dataset sources

This module handles reading uploaded dataset documents and generating synthetic
datasets for testing.
"""

from .sources import read_source, parse_dataset, SyntheticDatasetSource

__all__ = ['read_source', 'parse_dataset', 'SyntheticDatasetSource']
