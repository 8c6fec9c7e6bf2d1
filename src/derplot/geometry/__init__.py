"""Vector, matrix and region value types plus pure transform builders."""

from .matrix import IDENTITY, Matrix4
from .region import Region
from .transforms import (
    degrees_to_radians,
    multiply,
    ortho_matrix,
    perspective_matrix,
    radians_to_degrees,
    rotate,
    rotate_pitch_yaw_roll,
    rotate_x,
    rotate_y,
    rotate_z,
    scale,
    translate,
)
from .vector import Vector4

__all__ = [
    "IDENTITY",
    "Matrix4",
    "Region",
    "Vector4",
    "degrees_to_radians",
    "multiply",
    "ortho_matrix",
    "perspective_matrix",
    "radians_to_degrees",
    "rotate",
    "rotate_pitch_yaw_roll",
    "rotate_x",
    "rotate_y",
    "rotate_z",
    "scale",
    "translate",
]
