"""Element-wise arithmetic over fixed-length numeric vectors.

Positions, zone offsets and other 2D quantities in a layout are plain numeric
sequences. These helpers accept any sequence (list, tuple or numpy array) and
return numpy arrays.
"""

from typing import Sequence

import numpy as np


class VectorLengthError(ValueError):
    """Raised when a pairwise vector operation receives vectors of unequal length."""


def _as_pair(
    v1: Sequence[float] | np.ndarray, v2: Sequence[float] | np.ndarray
) -> tuple[np.ndarray, np.ndarray]:
    a = np.asarray(v1, dtype=float)
    b = np.asarray(v2, dtype=float)
    if a.shape != b.shape:
        raise VectorLengthError(
            f"Invalid vectors: length {a.shape[0] if a.ndim else 0} does not match "
            f"length {b.shape[0] if b.ndim else 0}"
        )
    return a, b


def add(
    v1: Sequence[float] | np.ndarray, v2: Sequence[float] | np.ndarray
) -> np.ndarray:
    """Return the element-wise sum of two vectors of equal length."""
    a, b = _as_pair(v1, v2)
    return a + b


def subtract(
    v1: Sequence[float] | np.ndarray, v2: Sequence[float] | np.ndarray
) -> np.ndarray:
    """Return the element-wise difference ``v1 - v2`` of two vectors of equal length."""
    a, b = _as_pair(v1, v2)
    return a - b


def magnitude(v: Sequence[float] | np.ndarray) -> float:
    """Return the Euclidean length of a vector."""
    return float(np.sqrt(np.sum(np.square(np.asarray(v, dtype=float)))))
