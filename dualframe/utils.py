# utils.py

import numpy as np
from numpy import asarray as np_asarray
from numpy import float64 as np_float64
from numpy import ndarray
from typing import Union, List, Tuple
from numba import njit
from numba.core.errors import NumbaPerformanceWarning
import warnings

from dualframe.constants import ZERO_TOLERANCE, ROUNDING_DIGITS
warnings.filterwarnings("ignore", category=NumbaPerformanceWarning)

ArrayLike = Union[ndarray, List[float], Tuple[float, ...]]


@njit(cache=True)
def adjust(value: float) -> float:
    """Snap a scalar to exactly zero when its magnitude is below ZERO_TOLERANCE."""
    if abs(value) < ZERO_TOLERANCE:
        return 0.0
    return value


@njit(cache=True)
def adjust_array(values: ndarray) -> ndarray:
    """Element-wise `adjust`, returning a new array."""
    out = np.empty(values.shape[0], dtype=np_float64)
    for i in range(values.shape[0]):
        out[i] = adjust(values[i])
    return out


@njit(cache=True)
def safe_reciprocal(value: float) -> float:
    """
    1 / value, adjusted. Values within ZERO_TOLERANCE of zero give 0.0
    instead of an infinity.
    """
    if abs(value) < ZERO_TOLERANCE:
        return 0.0
    return adjust(1.0 / value)


def round_point(point: ndarray) -> ndarray:
    """Round to ROUNDING_DIGITS decimals (half to even)."""
    return np.round(point, ROUNDING_DIGITS)


def as_vector3(value: ArrayLike, name: str = "vector") -> ndarray:
    """Coerce to a float64 array of shape (3,)."""
    arr = np_asarray(value, dtype=np_float64)
    if arr.shape != (3,):
        raise ValueError(f"{name} must be (3,), got {arr.shape}")
    return arr


def as_quaternion(value: ArrayLike, name: str = "quaternion") -> ndarray:
    """Coerce to a float64 array of shape (4,) in [x, y, z, w] order."""
    arr = np_asarray(value, dtype=np_float64)
    if arr.shape != (4,):
        raise ValueError(f"{name} must be (4,), got {arr.shape}")
    return arr


def as_matrix3(value: ArrayLike, name: str = "rotation") -> ndarray:
    """Coerce to a C-contiguous float64 array of shape (3, 3)."""
    arr = np.ascontiguousarray(value, dtype=np_float64)
    if arr.shape != (3, 3):
        raise ValueError(f"{name} must be 3x3, got {arr.shape}")
    return arr
