"""Pure transform builders over :class:`Vector4` / :class:`Matrix4` values.

Every helper returns a new value; nothing here holds state, so it is safe to
call from producer threads as well as the render executor. Matrix helpers
post-multiply the given matrix, which makes the new transform apply before
the ones already accumulated in it.
"""

from __future__ import annotations

import math
from typing import Optional

import numpy as np

from derplot.geometry.matrix import Matrix4
from derplot.geometry.vector import Vector4


def degrees_to_radians(angle: float) -> float:
    return float(angle) * math.pi / 180.0


def radians_to_degrees(angle: float) -> float:
    return float(angle) * 180.0 / math.pi


def multiply(vec: Vector4, mat: Matrix4) -> Vector4:
    """Return ``mat * vec`` (column vector on the right)."""

    out = mat.as_array() @ vec.as_array()
    return Vector4(*(float(v) for v in out))


# ---- Elementary matrices -------------------------------------------------------

def translation_matrix(x: float, y: float, z: float, w: float = 1.0) -> Matrix4:
    return Matrix4([
        1, 0, 0, 0,
        0, 1, 0, 0,
        0, 0, 1, 0,
        x, y, z, w,
    ])


def scale_matrix(x: float, y: float, z: float, w: float = 1.0) -> Matrix4:
    return Matrix4([
        x, 0, 0, 0,
        0, y, 0, 0,
        0, 0, z, 0,
        0, 0, 0, w,
    ])


def rotation_x_matrix(angle: float) -> Matrix4:
    s, c = math.sin(angle), math.cos(angle)
    return Matrix4([
        1, 0, 0, 0,
        0, c, s, 0,
        0, -s, c, 0,
        0, 0, 0, 1,
    ])


def rotation_y_matrix(angle: float) -> Matrix4:
    s, c = math.sin(angle), math.cos(angle)
    return Matrix4([
        c, 0, -s, 0,
        0, 1, 0, 0,
        s, 0, c, 0,
        0, 0, 0, 1,
    ])


def rotation_z_matrix(angle: float) -> Matrix4:
    s, c = math.sin(angle), math.cos(angle)
    return Matrix4([
        c, s, 0, 0,
        -s, c, 0, 0,
        0, 0, 1, 0,
        0, 0, 0, 1,
    ])


# ---- Accumulating helpers ------------------------------------------------------

def translate(mat: Matrix4, v: Vector4) -> Matrix4:
    return mat @ translation_matrix(v.x, v.y, v.z, v.w)


def scale(mat: Matrix4, v: Vector4) -> Matrix4:
    return mat @ scale_matrix(v.x, v.y, v.z, v.w)


def rotate_x(mat: Matrix4, angle: float) -> Matrix4:
    return mat @ rotation_x_matrix(angle)


def rotate_y(mat: Matrix4, angle: float) -> Matrix4:
    return mat @ rotation_y_matrix(angle)


def rotate_z(mat: Matrix4, angle: float) -> Matrix4:
    return mat @ rotation_z_matrix(angle)


def rotate_pitch_yaw_roll(mat: Matrix4, pitch: float, yaw: float, roll: float) -> Matrix4:
    """Rotate around X, then Y, then Z (angles in radians)."""

    return rotate_z(rotate_y(rotate_x(mat, pitch), yaw), roll)


def rotate(mat: Matrix4, angles: Vector4) -> Matrix4:
    return rotate_pitch_yaw_roll(mat, angles.x, angles.y, angles.z)


# ---- Projections ---------------------------------------------------------------

def ortho_matrix(
    left: float,
    right: float,
    bottom: float,
    top: float,
    near: float,
    far: float,
) -> Optional[Matrix4]:
    """Orthographic projection, or ``None`` when the volume is degenerate."""

    if not all(math.isfinite(v) for v in (left, right, bottom, top, near, far)):
        return None
    if near >= far or top == bottom or right == left:
        return None
    rl = right - left
    tb = top - bottom
    fn = far - near
    grid = np.array(
        [
            [2.0 / rl, 0.0, 0.0, -(right + left) / rl],
            [0.0, 2.0 / tb, 0.0, -(top + bottom) / tb],
            [0.0, 0.0, -2.0 / fn, -(far + near) / fn],
            [0.0, 0.0, 0.0, 1.0],
        ],
        dtype=np.float64,
    )
    return Matrix4(grid)


def perspective_matrix(fovy: float, near: float, far: float, aspect_ratio: float) -> Optional[Matrix4]:
    """Perspective projection from a vertical field of view in degrees.

    Returns ``None`` for non-finite input, ``near >= far``, a zero ``fovy``
    or a non-positive aspect ratio.
    """

    if not all(math.isfinite(v) for v in (fovy, near, far, aspect_ratio)):
        return None
    if near >= far or fovy == 0.0 or aspect_ratio <= 0.0:
        return None
    half = degrees_to_radians(fovy * 0.5)
    f_len = far - near
    y = 1.0 / math.tan(half)
    x = y / aspect_ratio
    zz = -(far + near) / f_len
    zw = -2.0 * near * far / f_len
    return Matrix4([
        x, 0, 0, 0,
        0, y, 0, 0,
        0, 0, zz, -1,
        0, 0, zw, 0,
    ])


__all__ = [
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
    "rotation_x_matrix",
    "rotation_y_matrix",
    "rotation_z_matrix",
    "scale",
    "scale_matrix",
    "translate",
    "translation_matrix",
]
