"""
JSON helpers for pipeline results

Results carry numpy arrays and scalars; these helpers turn them into plain
Python types before they are written out.
"""

import json
import logging
import os
from typing import Any, Dict

import numpy as np


def convert_numpy_types(obj: Any) -> Any:
    """Recursively convert numpy arrays and scalars to JSON-serializable types"""
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    elif isinstance(obj, np.integer):
        return int(obj)
    elif isinstance(obj, np.floating):
        return float(obj)
    elif isinstance(obj, np.bool_):
        return bool(obj)
    elif isinstance(obj, dict):
        return {key: convert_numpy_types(value) for key, value in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [convert_numpy_types(item) for item in obj]
    else:
        return obj


def save_result(result: Dict[str, Any], out_path: str) -> None:
    """
    Save a result (or any JSON document) to disk

    Args:
        result: Dictionary to save
        out_path: Path to the JSON file
    """
    logging.info(f"Saving result to: {out_path}")

    directory = os.path.dirname(out_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(convert_numpy_types(result), f, indent=2)
