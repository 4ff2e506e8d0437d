# geometry.py
import math
import numpy as np
from numpy import float64 as np_float64
from numpy import ndarray
from numba import njit

from dualframe.quaternion import (
    quaternion_multiply,
    quaternion_conjugate,
)

from numba.core.errors import NumbaPerformanceWarning
import warnings
warnings.filterwarnings("ignore", category=NumbaPerformanceWarning)


@njit(fastmath=True, inline='always', cache=True)
def det3(M):
    """Determinant of a 3 x 3 (faster than np.linalg.det for tiny mats)."""
    return (
        M[0, 0] * (M[1, 1] * M[2, 2] - M[1, 2] * M[2, 1])
        - M[0, 1] * (M[1, 0] * M[2, 2] - M[1, 2] * M[2, 0])
        + M[0, 2] * (M[1, 0] * M[2, 1] - M[1, 1] * M[2, 0])
    )


@njit(inline='always', cache=True)
def inv3(M):
    """Analytic inverse of a 3 x 3. The caller guarantees det(M) != 0."""
    d = det3(M)
    invd = 1.0 / d
    out = np.empty((3, 3), dtype=np_float64)
    out[0, 0] = (M[1, 1] * M[2, 2] - M[1, 2] * M[2, 1]) * invd
    out[0, 1] = -(M[0, 1] * M[2, 2] - M[0, 2] * M[2, 1]) * invd
    out[0, 2] = (M[0, 1] * M[1, 2] - M[0, 2] * M[1, 1]) * invd
    out[1, 0] = -(M[1, 0] * M[2, 2] - M[1, 2] * M[2, 0]) * invd
    out[1, 1] = (M[0, 0] * M[2, 2] - M[0, 2] * M[2, 0]) * invd
    out[1, 2] = -(M[0, 0] * M[1, 2] - M[0, 2] * M[1, 0]) * invd
    out[2, 0] = (M[1, 0] * M[2, 1] - M[1, 1] * M[2, 0]) * invd
    out[2, 1] = -(M[0, 0] * M[2, 1] - M[0, 1] * M[2, 0]) * invd
    out[2, 2] = (M[0, 0] * M[1, 1] - M[0, 1] * M[1, 0]) * invd
    return out


@njit(inline='always', cache=True)
def matmul3(A, B):
    """3 x 3 product without going through BLAS."""
    out = np.empty((3, 3), dtype=np_float64)
    for i in range(3):
        for j in range(3):
            out[i, j] = A[i, 0] * B[0, j] + A[i, 1] * B[1, j] + A[i, 2] * B[2, j]
    return out


@njit(cache=True)
def dual_quaternion_multiply(a: ndarray, b: ndarray) -> ndarray:
    """
    Product of two dual quaternions stored as 8-arrays
    [x, y, z, w, x0, y0, z0, w0].

    With Q = q + e*q0 and P = p + e*p0 (e^2 = 0):
        Q*P = q*p + e*(q*p0 + q0*p)
    """
    q = a[:4]
    q0 = a[4:]
    p = b[:4]
    p0 = b[4:]

    out = np.empty(8, dtype=np_float64)
    out[:4] = quaternion_multiply(q, p)
    out[4:] = quaternion_multiply(q, p0) + quaternion_multiply(q0, p)
    return out


@njit(cache=True)
def chain_multiply(values: ndarray) -> ndarray:
    """
    Compose an (n, 8) stack of dual quaternions as values[0] * ... * values[n-1].

    The right-most row is applied first. Intermediate real parts are not
    re-normalized.
    """
    n = values.shape[0]
    acc = values[n - 1].copy()
    for i in range(n - 2, -1, -1):
        acc = dual_quaternion_multiply(values[i], acc)
    return acc


@njit(cache=True)
def dual_quaternion_translation(components: ndarray) -> ndarray:
    """Vector part of Dual * 2 * conj(Real)."""
    t = quaternion_multiply(components[4:] * 2.0, quaternion_conjugate(components[:4]))
    return t[:3].copy()


@njit(cache=True)
def dual_quaternion_to_matrix(components: ndarray) -> ndarray:
    """
    Homogeneous 4x4 matrix of a (normalized) dual quaternion.

    The rotation block is written for row vectors and the translation sits in
    the last row, so a point maps as [x, y, z, 1] @ M.
    """
    x, y, z, w = components[0], components[1], components[2], components[3]

    m = np.eye(4, dtype=np_float64)

    m[0, 0] = w * w + x * x - y * y - z * z
    m[0, 1] = 2 * x * y + 2 * w * z
    m[0, 2] = 2 * x * z - 2 * w * y

    m[1, 0] = 2 * x * y - 2 * w * z
    m[1, 1] = w * w + y * y - x * x - z * z
    m[1, 2] = 2 * y * z + 2 * w * x

    m[2, 0] = 2 * x * z + 2 * w * y
    m[2, 1] = 2 * y * z - 2 * w * x
    m[2, 2] = w * w + z * z - x * x - y * y

    t = dual_quaternion_translation(components)
    m[3, 0] = t[0]
    m[3, 1] = t[1]
    m[3, 2] = t[2]
    return m


@njit(cache=True)
def cayley_rotation_quaternion(rotation: ndarray) -> ndarray:
    """
    Rotation quaternion [x, y, z, w] of a 3x3 rotation matrix via the Cayley
    transform B = (R - I)(R + I)^-1.

    B is skew-symmetric:

             0  -b_z  b_y
        B = b_z   0  -b_x
           -b_y  b_x   0

    with b = tan(theta/2) * axis. (R + I) must be invertible, which excludes
    half turns.
    """
    eye = np.eye(3, dtype=np_float64)
    r_minus = rotation - eye
    r_plus = rotation + eye
    b = matmul3(r_minus, inv3(r_plus))

    sx = b[2, 1]
    sy = b[0, 2]
    sz = b[1, 0]
    tz = math.sqrt(sx * sx + sy * sy + sz * sz)

    # leave a zero axis alone
    if tz > 0:
        sx = sx / tz
        sy = sy / tz
        sz = sz / tz

    half_angle = math.atan(tz)
    s = math.sin(half_angle)

    out = np.empty(4, dtype=np_float64)
    out[0] = s * sx
    out[1] = s * sy
    out[2] = s * sz
    out[3] = math.cos(half_angle)
    return out
