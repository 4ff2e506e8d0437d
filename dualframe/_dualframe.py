# _dualframe.py

# Licensed under the Apache License, Version 2.0 (the "License")

import logging
import math
import numbers

from numpy import abs as np_abs
from numpy import array2string as np_array2string
from numpy import array_equal as np_array_equal
from numpy import asarray as np_asarray
from numpy import count_nonzero as np_count_nonzero
from numpy import cross as np_cross
from numpy import empty as np_empty
from numpy import eye as np_eye
from numpy import float64 as np_float64
from numpy import stack as np_stack
from numpy import zeros as np_zeros
from numpy import ndarray

from typing import Optional, List, Tuple

from dualframe.constants import ZERO_TOLERANCE
from dualframe.geometry import (
    det3,
    dual_quaternion_multiply,
    chain_multiply,
    dual_quaternion_translation,
    dual_quaternion_to_matrix,
    cayley_rotation_quaternion,
)
from dualframe.quaternion import (
    quaternion_multiply,
    quaternion_conjugate,
    quaternion_dot,
    quaternion_length_squared,
    quaternion_normalize,
    quaternion_from_vector,
    rotation_to_quaternion,
)
from dualframe.utils import (
    ArrayLike,
    adjust,
    adjust_array,
    safe_reciprocal,
    round_point,
    as_vector3,
    as_quaternion,
    as_matrix3,
)

logger = logging.getLogger(__name__)

# preallocate the constant quaternions
_IDENTITY_REAL = np_asarray([0.0, 0.0, 0.0, 1.0], dtype=np_float64)
_ZERO_QUATERNION = np_zeros(4, dtype=np_float64)
_EYE3 = np_eye(3, dtype=np_float64)


class DualQuaternion:
    """
    An immutable dual quaternion Q = Real + e*Dual with e^2 = 0.

    Real encodes the rotation and is re-normalized to unit length every time
    a DualQuaternion is constructed from its parts. Dual encodes the
    translation/offset and is stored as given.

    Components are indexed 0..7 as
    Real.x, Real.y, Real.z, Real.w, Dual.x, Dual.y, Dual.z, Dual.w.

    Attributes:
        DEFAULT: identity rotation, zero dual.
        ZERO: all eight components zero (Real is *not* the identity).
        ORIGIN_POINT: the point (0, 0, 0).
    """
    __slots__ = ("_components",)

    # numpy operands defer to our reflected operators instead of broadcasting
    __array_ufunc__ = None

    DEFAULT: "DualQuaternion"
    ZERO: "DualQuaternion"
    ORIGIN_POINT: "DualQuaternion"

    def __init__(self, real: Optional[ArrayLike] = None, dual: Optional[ArrayLike] = None):
        real = _IDENTITY_REAL if real is None else as_quaternion(real, "real")
        dual = _ZERO_QUATERNION if dual is None else as_quaternion(dual, "dual")
        components = np_empty(8, dtype=np_float64)
        components[:4] = quaternion_normalize(real)
        components[4:] = dual
        components.flags.writeable = False
        self._components = components

    @classmethod
    def _from_raw(cls, components: ArrayLike) -> "DualQuaternion":
        # bypasses the normalization of Real
        instance = cls.__new__(cls)
        raw = np_asarray(components, dtype=np_float64).copy()
        raw.flags.writeable = False
        instance._components = raw
        return instance

    @classmethod
    def identity(cls) -> "DualQuaternion":
        """
        Create the identity dual quaternion (no rotation, no translation).

        Returns:
            A new DualQuaternion equal to DualQuaternion.DEFAULT.
        """
        return cls()

    @classmethod
    def from_components(
        cls,
        real_x: float, real_y: float, real_z: float, real_w: float,
        dual_x: float, dual_y: float, dual_z: float, dual_w: float,
    ) -> "DualQuaternion":
        """
        Create a DualQuaternion from its eight scalars. Real is normalized.
        """
        return cls((real_x, real_y, real_z, real_w), (dual_x, dual_y, dual_z, dual_w))

    @classmethod
    def from_array(cls, values: ArrayLike) -> "DualQuaternion":
        """
        Create a DualQuaternion from 8 values in index order.

        Args:
            values: Real.x, Real.y, Real.z, Real.w, Dual.x, Dual.y, Dual.z, Dual.w

        Returns:
            A new DualQuaternion; Real is normalized as with the constructor.
        """
        arr = np_asarray(values, dtype=np_float64)
        if arr.shape != (8,):
            raise ValueError(f"Invalid dual quaternion array shape: {arr.shape}")
        return cls(arr[:4], arr[4:])

    #########
    # Named constructors
    #

    @classmethod
    def from_rotation(cls, angle: float, axis: ArrayLike, point: ArrayLike) -> "DualQuaternion":
        """
        Rotation by `angle` radians about the line through `point` with direction `axis`.

        Args:
            angle: rotation angle in radians.
            axis: length-3 direction of the rotation axis.
            point: length-3 point the rotation axis passes through.

        Returns:
            A new DualQuaternion encoding the rotation.
        """
        axis = as_vector3(axis, "axis")
        point = as_vector3(point, "point")
        # the moment of the line gives its Plücker coordinates
        moment = np_cross(point, axis)
        return cls.from_rotation_plucker(angle, axis, moment)

    @classmethod
    def from_rotation_plucker(cls, angle: float, axis: ArrayLike, moment: ArrayLike) -> "DualQuaternion":
        """
        Rotation by `angle` radians about the line with Plücker coordinates (axis, moment).

        Real = (sin(angle/2) * axis, cos(angle/2)) and
        Dual = (sin(angle/2) * moment, 0). Components below ZERO_TOLERANCE are
        snapped to zero, so e.g. cos(pi/2) comes out as exactly 0.

        Args:
            angle: rotation angle in radians.
            axis: length-3 direction of the rotation axis.
            moment: length-3 moment of the rotation axis.

        Returns:
            A new DualQuaternion encoding the rotation.
        """
        axis = as_vector3(axis, "axis")
        moment = as_vector3(moment, "moment")
        s = adjust(math.sin(angle / 2.0))
        c = adjust(math.cos(angle / 2.0))
        real = adjust_array(quaternion_from_vector(s * axis, c))
        dual = adjust_array(quaternion_from_vector(s * moment, 0.0))
        return cls(real, dual)

    @classmethod
    def from_translation(cls, vector: ArrayLike, amount: float = 1.0) -> "DualQuaternion":
        """
        Pure translation by `amount * vector`, i.e. 1 + e * (amount * vector / 2).

        Args:
            vector: length-3 translation direction (or full translation when amount is 1).
            amount: scale applied to `vector`.

        Returns:
            A new DualQuaternion encoding the translation.
        """
        vector = as_vector3(vector)
        half = amount * vector / 2.0
        return cls(_IDENTITY_REAL, quaternion_from_vector(half, 0.0))

    @classmethod
    def from_point(cls, point: ArrayLike) -> "DualQuaternion":
        """Encode a point as 1 + e * point."""
        point = as_vector3(point, "point")
        return cls(_IDENTITY_REAL, quaternion_from_vector(point, 0.0))

    @classmethod
    def from_line(cls, vector: ArrayLike, point: ArrayLike) -> "DualQuaternion":
        """Encode the line through `point` with direction `vector`."""
        vector = as_vector3(vector)
        point = as_vector3(point, "point")
        moment = np_cross(point, vector)
        return cls.from_line_plucker(vector, moment)

    @classmethod
    def from_line_plucker(cls, vector: ArrayLike, moment: ArrayLike) -> "DualQuaternion":
        """Encode a line from its Plücker coordinates: Real = (vector, 0), Dual = (moment, 0)."""
        vector = as_vector3(vector)
        moment = as_vector3(moment, "moment")
        return cls(quaternion_from_vector(vector, 0.0), quaternion_from_vector(moment, 0.0))

    @classmethod
    def from_plane(cls, normal: ArrayLike, distance: float) -> "DualQuaternion":
        """Encode a plane: Real = (normal, 0), Dual = (0, 0, 0, distance)."""
        normal = as_vector3(normal, "normal")
        return cls(quaternion_from_vector(normal, 0.0), (0.0, 0.0, 0.0, distance))

    @classmethod
    def from_rotation_matrix(cls, rotation: ArrayLike) -> "DualQuaternion":
        """
        Recover a pure rotation from a 3x3 rotation matrix (column-vector convention).

        The axis and angle come from the Cayley transform B = (R - I)(R + I)^-1.
        Half turns make (R + I) singular; those are converted with the
        trace-based method instead. Dual is left zero.

        Args:
            rotation: 3x3 rotation matrix.

        Returns:
            A new DualQuaternion encoding the rotation.
        """
        rotation = as_matrix3(rotation)
        if abs(det3(rotation + _EYE3)) < ZERO_TOLERANCE:
            logger.debug("R + I is singular (half turn), using trace-based conversion")
            real = rotation_to_quaternion(rotation)
        else:
            real = cayley_rotation_quaternion(rotation)
        return cls(real, _ZERO_QUATERNION)

    @classmethod
    def from_rotation_then_translation(cls, rotation: ArrayLike, translation: ArrayLike) -> "DualQuaternion":
        """
        Rotate by the quaternion `rotation`, then translate by `translation`.

        Real = normalize(rotation) * 0.5 and Dual = (translation, 0) * Real,
        computed in that order before the constructor re-normalizes Real.

        Args:
            rotation: [x, y, z, w] rotation quaternion.
            translation: length-3 translation applied after the rotation.

        Returns:
            A new DualQuaternion encoding the rigid motion.
        """
        rotation = as_quaternion(rotation, "rotation")
        translation = as_vector3(translation, "translation")
        factor = quaternion_normalize(rotation) * 0.5
        dual = quaternion_multiply(quaternion_from_vector(translation, 0.0), factor)
        return cls(factor, dual)

    #########
    # Getters
    #

    @property
    def real(self) -> ndarray:
        """Read-only [x, y, z, w] view of the real part."""
        return self._components[:4]

    @property
    def dual(self) -> ndarray:
        """Read-only [x, y, z, w] view of the dual part."""
        return self._components[4:]

    @property
    def rotation(self) -> ndarray:
        """The rotation quaternion, i.e. the real part."""
        return self.real

    @property
    def translation(self) -> ndarray:
        """
        The translation vector: vector part of Dual * 2 * conj(Real).

        Returns:
            A length-3 array.
        """
        return dual_quaternion_translation(self._components)

    @property
    def length(self) -> float:
        """
        Squared norm of the real part. The dual part does not contribute.
        """
        return float(quaternion_dot(self.real, self.real))

    @property
    def is_unit(self) -> bool:
        """
        True when |Real|^2 is within ZERO_TOLERANCE of 1 and |Dual|^2 within
        ZERO_TOLERANCE of 0.
        """
        real_length_squared, dual_length_squared = self.length_squared()
        return (
            abs(real_length_squared - 1.0) <= ZERO_TOLERANCE
            and abs(dual_length_squared) <= ZERO_TOLERANCE
        )

    def length_squared(self) -> Tuple[float, float]:
        """
        Returns:
            (squared norm of Real, squared norm of Dual)
        """
        return (
            float(quaternion_length_squared(self.real)),
            float(quaternion_length_squared(self.dual)),
        )

    ########
    # Derived values
    #

    def normalize(self) -> "DualQuaternion":
        """
        Scale both parts by 1 / length.

        `length` is the squared norm of Real alone, not the full dual
        quaternion modulus; existing results depend on this.
        """
        scale = safe_reciprocal(self.length)
        return self.__class__(self.real * scale, self.dual * scale)

    def conjugate(self) -> "DualQuaternion":
        """Negate the vector parts of both Real and Dual."""
        return self.__class__(quaternion_conjugate(self.real), quaternion_conjugate(self.dual))

    def inverse(self) -> "DualQuaternion":
        """
        Inverse of a unit dual quaternion.

        Real becomes conj(Real) / |Real|^2. The dual part is scaled by
        a = |Dual|^2 - |Real|^2 as (Dual.x*a, Dual.y*a, Dual.z*a, -Dual.w*a).
        Every component is snapped with the zero tolerance.

        Returns:
            A new DualQuaternion.
        """
        real_length_squared, dual_length_squared = self.length_squared()
        inv = safe_reciprocal(real_length_squared)
        r = self.real
        d = self.dual

        real = (
            adjust(-r[0] * inv),
            adjust(-r[1] * inv),
            adjust(-r[2] * inv),
            adjust(r[3] * inv),
        )

        a = dual_length_squared - real_length_squared
        dual = (
            adjust(d[0] * a),
            adjust(d[1] * a),
            adjust(d[2] * a),
            adjust(d[3] * -a),
        )
        return self.__class__(real, dual)

    def adjusted(self) -> "DualQuaternion":
        """A copy with every component below ZERO_TOLERANCE snapped to zero."""
        return self.__class__(adjust_array(self.real), adjust_array(self.dual))

    def to_matrix(self) -> ndarray:
        """
        Normalize, then expand into a homogeneous 4x4 matrix.

        The upper-left 3x3 holds the rotation for row vectors and the last
        row holds the translation, so a point p maps as
        np.append(p, 1.0) @ M, matching `transform_point`.

        Returns:
            A 4x4 float64 array.
        """
        return dual_quaternion_to_matrix(self.normalize()._components)

    def get_point(self, rounded: bool = False) -> ndarray:
        """
        Read the point encoded in the dual part (Dual.x, Dual.y, Dual.z).

        Args:
            rounded: round to ROUNDING_DIGITS decimals.

        Returns:
            A length-3 array.
        """
        point = self.dual[:3].copy()
        if not rounded:
            return point
        return round_point(point)

    def transform_point(self, point: Optional[ArrayLike] = None, rounded: bool = True) -> ndarray:
        """
        Apply this transformation to `point` (the origin when omitted).

        See `dualframe.transform_point`.
        """
        if point is None:
            point = (0.0, 0.0, 0.0)
        return transform_point(point, self, rounded=rounded)

    def to_array(self) -> ndarray:
        """The eight components in index order, as a new writable array."""
        return self._components.copy()

    def to_list(self) -> List[float]:
        return self._components.tolist()

    #########
    # Dunder methods
    #

    def __getitem__(self, index: int) -> float:
        if isinstance(index, bool) or not isinstance(index, numbers.Integral):
            raise TypeError(f"DualQuaternion indices must be integers, not {type(index).__name__}")
        if not 0 <= index <= 7:
            raise IndexError("Indices for DualQuaternion run from 0 to 7, inclusive.")
        return float(self._components[index])

    def __len__(self) -> int:
        return 8

    def __iter__(self):
        return iter(self.to_list())

    def __add__(self, other: "DualQuaternion") -> "DualQuaternion":
        """Component-wise on both parts; Real of the sum is re-normalized."""
        if not isinstance(other, DualQuaternion):
            return NotImplemented
        return self.__class__(self.real + other.real, self.dual + other.dual)

    def __sub__(self, other: "DualQuaternion") -> "DualQuaternion":
        if not isinstance(other, DualQuaternion):
            return NotImplemented
        return self.__class__(self.real - other.real, self.dual - other.dual)

    def __neg__(self) -> "DualQuaternion":
        # all eight components, no re-normalization
        return self._from_raw(-self._components)

    def __mul__(self, other):
        """
        Dual quaternion product when `other` is a DualQuaternion, scaling when
        it is a real number.

        The product is not commutative: in `a * b`, `b` is applied first.
        """
        if isinstance(other, DualQuaternion):
            out = dual_quaternion_multiply(self._components, other._components)
            return self.__class__(out[:4], out[4:])
        if isinstance(other, numbers.Real):
            return self.__class__(self.real * other, self.dual * other)
        return NotImplemented

    def __rmul__(self, other):
        if isinstance(other, numbers.Real):
            return self.__class__(self.real * other, self.dual * other)
        return NotImplemented

    def __matmul__(self, other: "DualQuaternion") -> "DualQuaternion":
        """
        Alias for dual quaternion multiplication: `a @ b` composes `b` first, then `a`.
        """
        if not isinstance(other, DualQuaternion):
            return NotImplemented
        return self.__mul__(other)

    def __eq__(self, other: object) -> bool:
        """
        Exact component equality, no tolerance. Use `dualframe.compare` for a
        tolerance-based comparison.
        """
        if not isinstance(other, DualQuaternion):
            return False
        return bool(np_array_equal(self._components, other._components))

    def __hash__(self) -> int:
        return hash(tuple(self._components.tolist()))

    def __repr__(self) -> str:
        cls = self.__class__.__name__
        real = np_array2string(self.real, precision=6, separator=', ')
        dual = np_array2string(self.dual, precision=6, separator=', ')
        return f"{cls}(real={real}, dual={dual})"

    def __str__(self) -> str:
        real = np_array2string(self.real, precision=6, separator=', ')
        dual = np_array2string(self.dual, precision=6, separator=', ')
        return f"({real}) + ε({dual})"

    def __copy__(self) -> "DualQuaternion":
        return self._from_raw(self._components)

    def __deepcopy__(self, memo) -> "DualQuaternion":
        # components are plain floats, so shallow vs deep is the same here
        return self.__copy__()

    def __reduce__(self):
        """
        Pickle support: the raw components are restored without re-normalizing.
        """
        return (self.__class__._from_raw, (self._components.tolist(),))


DualQuaternion.DEFAULT = DualQuaternion(_IDENTITY_REAL, _ZERO_QUATERNION)
DualQuaternion.ZERO = DualQuaternion._from_raw(np_zeros(8, dtype=np_float64))
DualQuaternion.ORIGIN_POINT = DualQuaternion.from_point((0.0, 0.0, 0.0))


########
# Free functions
#

def dot(left: DualQuaternion, right: DualQuaternion) -> float:
    """Quaternion dot product of the two real parts."""
    return float(quaternion_dot(left.real, right.real))


def normalize(value: DualQuaternion) -> DualQuaternion:
    return value.normalize()


def conjugate(value: DualQuaternion) -> DualQuaternion:
    return value.conjugate()


def f1g(value: DualQuaternion, transformation: DualQuaternion) -> DualQuaternion:
    """
    Transformation applied on both sides without conjugation: A * B * A.
    """
    return transformation * value * transformation


def f2g(value: DualQuaternion, transformation: DualQuaternion) -> DualQuaternion:
    """
    A * B * conj(A), where conj negates the vector parts of Real and Dual.
    This is the action used for lines.
    """
    return transformation * value * transformation.conjugate()


def f3g(value: DualQuaternion, transformation: DualQuaternion) -> DualQuaternion:
    """
    A * B * A*, where A* keeps Real and negates all four Dual components.
    """
    r = transformation.real
    d = transformation.dual
    star = DualQuaternion.from_components(
        r[0], r[1], r[2], r[3],
        -d[0], -d[1], -d[2], -d[3],
    )
    return transformation * value * star


def f4g(value: DualQuaternion, transformation: DualQuaternion, adjust: bool = True) -> DualQuaternion:
    """
    Point action A * B * A**.

    A** negates the vector part of Real and the scalar part of Dual, keeping
    Real.w and the vector part of Dual.

    Args:
        value: the dual quaternion being transformed, usually a point.
        transformation: the rigid motion A.
        adjust: snap components below ZERO_TOLERANCE to zero in the result.

    Returns:
        The transformed DualQuaternion.
    """
    r = transformation.real
    d = transformation.dual
    star = DualQuaternion.from_components(
        -r[0], -r[1], -r[2], r[3],
        d[0], d[1], d[2], -d[3],
    )
    result = transformation * value
    result = result * star
    if adjust:
        result = result.adjusted()
    return result


def multiply(*values: DualQuaternion) -> DualQuaternion:
    """
    Compose transformations as values[0] * values[1] * ... * values[-1].

    The right-most transformation is applied first. The chain is accumulated
    in raw double precision without re-normalizing intermediate real parts;
    only the final result goes through the constructor.

    Raises:
        ValueError: if no transformation is given.
        TypeError: if any value is not a DualQuaternion.
    """
    if not values:
        raise ValueError("Must define one or more transformations")
    for value in values:
        if not isinstance(value, DualQuaternion):
            raise TypeError(f"Expected DualQuaternion, got {type(value).__name__}")
    out = chain_multiply(np_stack([value._components for value in values]))
    return DualQuaternion(out[:4], out[4:])


def transform_point(point: ArrayLike, transformation: DualQuaternion, rounded: bool = False) -> ndarray:
    """
    Move a 3D point with a rigid transformation.

    The point is encoded with `DualQuaternion.from_point`, pushed through
    `f4g` and read back with `get_point`. `rounded` both snaps near-zero
    components and rounds the result to ROUNDING_DIGITS decimals.

    Args:
        point: length-3 point.
        transformation: the rigid motion to apply.
        rounded: snap and round the result.

    Returns:
        The transformed length-3 point.
    """
    initial = DualQuaternion.from_point(point)
    q = f4g(initial, transformation, adjust=rounded)
    return q.get_point(rounded)


def compare(left: DualQuaternion, right: DualQuaternion, precision: float = ZERO_TOLERANCE) -> int:
    """
    Count the components of `left` and `right` that differ by more than `precision`.

    Q and -Q encode the same rigid motion, so the count is also taken against
    -right and the smaller of the two is returned. 0 means equivalent.
    """
    lhs = left._components
    rhs = right._components
    direct = int(np_count_nonzero(np_abs(lhs - rhs) > precision))
    flipped = int(np_count_nonzero(np_abs(lhs + rhs) > precision))
    return min(direct, flipped)


def is_point_on_plane(point: DualQuaternion, plane: DualQuaternion) -> bool:
    """
    True when |plane.Real(xyz) . point.Dual(xyz) - plane.Dual.z| < ZERO_TOLERANCE.
    """
    n = plane.real
    p = point.dual
    distance = n[0] * p[0] + n[1] * p[1] + n[2] * p[2] - plane.dual[2]
    return bool(abs(distance) < ZERO_TOLERANCE)
