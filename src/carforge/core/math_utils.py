"""NumPy-backed 2D math utilities.

Points and vectors are plain numpy arrays of shape (2,) in rendering-plane
coordinates (x to the right, y downwards, as in SVG).  Angles are radians
unless a function name says otherwise.
"""

import math

import numpy as np
from numpy.typing import NDArray

# Type aliases
Vec2 = NDArray[np.float64]
Mat3 = NDArray[np.float64]


def vec2(x: float = 0.0, y: float = 0.0) -> Vec2:
    return np.array([x, y], dtype=np.float64)


def as_vec2(p) -> Vec2:
    """Coerce a tuple, list or array into a Vec2 copy."""
    return np.array([float(p[0]), float(p[1])], dtype=np.float64)


def length(v: Vec2) -> float:
    return float(math.hypot(v[0], v[1]))


def distance(a: Vec2, b: Vec2) -> float:
    return float(math.hypot(b[0] - a[0], b[1] - a[1]))


def perpendicular(v: Vec2) -> Vec2:
    """Rotate a vector by +90 degrees (y-down plane): (x, y) -> (-y, x)."""
    return vec2(-v[1], v[0])


def dot(a: Vec2, b: Vec2) -> float:
    return float(a[0] * b[0] + a[1] * b[1])


def angle_of(v: Vec2) -> float:
    return float(math.atan2(v[1], v[0]))


def angle_between_points(a: Vec2, b: Vec2) -> float:
    """Direction angle of the vector from *a* to *b*."""
    return float(math.atan2(b[1] - a[1], b[0] - a[0]))


def polar(origin: Vec2, radius: float, angle: float) -> Vec2:
    """Point at *radius* from *origin* in direction *angle*."""
    return vec2(origin[0] + radius * math.cos(angle), origin[1] + radius * math.sin(angle))


def rotate(v: Vec2, angle: float) -> Vec2:
    c, s = math.cos(angle), math.sin(angle)
    return vec2(v[0] * c - v[1] * s, v[0] * s + v[1] * c)


def move_along(start: Vec2, end: Vec2, factor: float) -> Vec2:
    """Point at *factor* of the way from *start* towards *end*."""
    return start + (end - start) * factor


def wrap_angle(angle: float) -> float:
    """Wrap an angle into (-pi, pi]."""
    return float(math.atan2(math.sin(angle), math.cos(angle)))


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def deg_to_rad(deg: float) -> float:
    return deg * math.pi / 180.0


def rad_to_deg(rad: float) -> float:
    return rad * 180.0 / math.pi


def points_equal(a: Vec2, b: Vec2, eps: float = 1e-3) -> bool:
    return abs(a[0] - b[0]) < eps and abs(a[1] - b[1]) < eps


# Affine transforms (3x3, row-major, column vectors)

def mat3_from_affine(a: float, b: float, c: float, d: float, e: float, f: float) -> Mat3:
    """Build a matrix from SVG-style affine coefficients ``matrix(a b c d e f)``."""
    return np.array([
        [a, c, e],
        [b, d, f],
        [0.0, 0.0, 1.0],
    ], dtype=np.float64)


def transform_point(m: Mat3, p: Vec2) -> Vec2:
    """Apply a 3x3 affine transform to a 2D point."""
    return vec2(
        m[0, 0] * p[0] + m[0, 1] * p[1] + m[0, 2],
        m[1, 0] * p[0] + m[1, 1] * p[1] + m[1, 2],
    )


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up, as sliders do."""
    return int(math.floor(value + 0.5))
