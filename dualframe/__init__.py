"""
Dualframe: dual quaternion algebra for composing rigid-body transformations
(rotation + translation) in 3D and applying them to points, lines and planes.

Points, lines and planes are encoded as dual quaternions themselves, so the
same conjugation products move all three.
"""

__version__ = version = "0.1.0"

# exposing the public API of the package
from dualframe.constants import ZERO_TOLERANCE, ROUNDING_DIGITS
from dualframe._dualframe import (
    DualQuaternion,
    dot,
    normalize,
    conjugate,
    f1g,
    f2g,
    f3g,
    f4g,
    multiply,
    transform_point,
    compare,
    is_point_on_plane,
)

__all__ = [
    "ZERO_TOLERANCE",
    "ROUNDING_DIGITS",
    "DualQuaternion",
    "dot",
    "normalize",
    "conjugate",
    "f1g",
    "f2g",
    "f3g",
    "f4g",
    "multiply",
    "transform_point",
    "compare",
    "is_point_on_plane",
]
