# quaternion.py
"""
Hamilton quaternion kernels on float64 arrays laid out as [x, y, z, w]
(scalar last). These are the leaf primitives the dual quaternion algebra is
built from.
"""
import math
import numpy as np
from numpy import float64 as np_float64
from numpy import ndarray
from numba import njit

from numba.core.errors import NumbaPerformanceWarning
import warnings
warnings.filterwarnings("ignore", category=NumbaPerformanceWarning)


@njit(cache=True)
def quaternion_multiply(p: ndarray, q: ndarray) -> ndarray:
    """
    Hamilton product p * q.

    With p = (pv, pw) and q = (qv, qw):
        vector = pw*qv + qw*pv + pv x qv
        scalar = pw*qw - pv . qv
    """
    px, py, pz, pw = p[0], p[1], p[2], p[3]
    qx, qy, qz, qw = q[0], q[1], q[2], q[3]

    # cross product pv x qv
    a = py * qz - pz * qy
    b = pz * qx - px * qz
    c = px * qy - py * qx
    d = px * qx + py * qy + pz * qz

    out = np.empty(4, dtype=np_float64)
    out[0] = px * qw + qx * pw + a
    out[1] = py * qw + qy * pw + b
    out[2] = pz * qw + qz * pw + c
    out[3] = pw * qw - d
    return out


@njit(cache=True)
def quaternion_conjugate(q: ndarray) -> ndarray:
    """Negate the vector part, keep the scalar."""
    out = np.empty(4, dtype=np_float64)
    out[0] = -q[0]
    out[1] = -q[1]
    out[2] = -q[2]
    out[3] = q[3]
    return out


@njit(cache=True)
def quaternion_dot(p: ndarray, q: ndarray) -> float:
    return p[0] * q[0] + p[1] * q[1] + p[2] * q[2] + p[3] * q[3]


@njit(cache=True)
def quaternion_length_squared(q: ndarray) -> float:
    return q[0] * q[0] + q[1] * q[1] + q[2] * q[2] + q[3] * q[3]


@njit(cache=True)
def quaternion_normalize(q: ndarray) -> ndarray:
    """
    Scale q to unit length. A zero quaternion has no direction and is
    returned unchanged (as a copy) rather than turning into NaNs.
    """
    norm = math.sqrt(quaternion_length_squared(q))
    inv = 1.0 if norm == 0.0 else 1.0 / norm
    out = np.empty(4, dtype=np_float64)
    for i in range(4):
        out[i] = q[i] * inv
    return out


@njit(cache=True)
def quaternion_from_vector(vector: ndarray, scalar: float) -> ndarray:
    """Build [vx, vy, vz, scalar]."""
    out = np.empty(4, dtype=np_float64)
    out[0] = vector[0]
    out[1] = vector[1]
    out[2] = vector[2]
    out[3] = scalar
    return out


@njit(cache=True, fastmath=True)
def rotation_to_quaternion(rotation: ndarray) -> ndarray:
    """
    Converts a 3x3 rotation matrix (column-vector convention) to a
    normalized [x, y, z, w] quaternion.

    The branch is chosen from the trace so the divisor never gets small,
    which keeps half-turn rotations well defined.
    """
    a00, a01, a02 = rotation[0, 0], rotation[0, 1], rotation[0, 2]
    a10, a11, a12 = rotation[1, 0], rotation[1, 1], rotation[1, 2]
    a20, a21, a22 = rotation[2, 0], rotation[2, 1], rotation[2, 2]

    tr = a00 + a11 + a22

    if tr > 0.0:
        S = math.sqrt(tr + 1.0) * 2.0
        qw = 0.25 * S
        qx = (a21 - a12) / S
        qy = (a02 - a20) / S
        qz = (a10 - a01) / S
    else:
        # pick largest diagonal element
        if a00 > a11 and a00 > a22:
            S = math.sqrt(1.0 + a00 - a11 - a22) * 2.0
            qw = (a21 - a12) / S
            qx = 0.25 * S
            qy = (a01 + a10) / S
            qz = (a02 + a20) / S
        elif a11 > a22:
            S = math.sqrt(1.0 + a11 - a00 - a22) * 2.0
            qw = (a02 - a20) / S
            qx = (a01 + a10) / S
            qy = 0.25 * S
            qz = (a12 + a21) / S
        else:
            S = math.sqrt(1.0 + a22 - a00 - a11) * 2.0
            qw = (a10 - a01) / S
            qx = (a02 + a20) / S
            qy = (a12 + a21) / S
            qz = 0.25 * S

    out = np.empty(4, dtype=np_float64)
    out[0], out[1], out[2], out[3] = qx, qy, qz, qw
    return quaternion_normalize(out)
