"""
Process-wide numeric backend state

The numeric backend is initialized at most once per process. The handle is an
explicit module-level value guarded by a lock, so concurrent callers either
perform the initialization or receive the handle created by the first caller.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Optional

import numpy as np
import scipy


@dataclass(frozen=True)
class NumericBackend:
    """Description of the initialized numeric backend"""
    name: str
    numpy_version: str
    scipy_version: str
    float_dtype: str


_backend: Optional[NumericBackend] = None
_backend_lock = threading.Lock()


def _initialize() -> NumericBackend:
    """Check the numeric stack with a small operation and describe it"""
    result = np.add(np.array([1.0, 2.0, 3.0]), np.array([4.0, 5.0, 6.0]))
    if not np.allclose(result, [5.0, 7.0, 9.0]):
        raise RuntimeError("Numeric backend self-test failed")

    backend = NumericBackend(
        name="numpy-cpu",
        numpy_version=np.__version__,
        scipy_version=scipy.__version__,
        float_dtype=str(result.dtype),
    )
    logging.info(f"Numeric backend initialized: numpy {backend.numpy_version}, "
                 f"scipy {backend.scipy_version}")
    return backend


def ensure_initialized() -> NumericBackend:
    """Initialize the backend if needed and return the process-wide handle"""
    global _backend
    if _backend is not None:
        return _backend

    with _backend_lock:
        if _backend is None:
            _backend = _initialize()
    return _backend


def is_initialized() -> bool:
    return _backend is not None


def reset_backend() -> None:
    """Forget the backend handle (tests only)"""
    global _backend
    with _backend_lock:
        _backend = None
