"""Conversions between vehicle millimetres, the rendering plane and asset space.

Three coordinate systems are in play:

* **vehicle space** -- millimetre offsets measured from an axle or a hip,
  as stored in :class:`~carforge.core.state.ParameterState`;
* **rendering plane** ("world") -- SVG user units, ``SCALE`` units per mm,
  y pointing down, ground at ``GROUND_Y``;
* **asset space** -- pixel coordinates inside the reference mannequin
  image, anchored at its hip and scaled by the pose's global scale.

A :class:`ScreenTransform` snapshot adds the final hop to screen pixels for
callers that place overlays.
"""

from dataclasses import dataclass

import numpy as np

from carforge.constants import ASSET_COORDS, ASSET_PARENT_OFFSET, SCALE
from carforge.core.math_utils import (
    Mat3,
    Vec2,
    as_vec2,
    mat3_from_affine,
    transform_point,
    vec2,
)

# Hip position inside the mannequin's parent container
HIP_ASSET_POSITION: Vec2 = as_vec2(ASSET_PARENT_OFFSET) + as_vec2(ASSET_COORDS["hip"])


def world_from_millimeters(reference_x: float, axis_sign: float, mm: float) -> float:
    """Rendering-plane coordinate *mm* millimetres from *reference_x* along *axis_sign*."""
    return reference_x + axis_sign * mm * SCALE


def millimeters_from_world(reference_x: float, axis_sign: float, px: float) -> float:
    """Inverse of :func:`world_from_millimeters`."""
    if axis_sign == 0:
        return 0.0
    return (px - reference_x) / (axis_sign * SCALE)


def asset_from_world(point, hip_world, hip_asset=HIP_ASSET_POSITION,
                     global_scale: float = 1.0) -> Vec2:
    """Map a rendering-plane point into the mannequin image's pixel space."""
    if global_scale == 0:
        return as_vec2(hip_asset)
    return as_vec2(hip_asset) + (as_vec2(point) - as_vec2(hip_world)) / global_scale


def world_from_asset(asset_point, hip_world, hip_asset=HIP_ASSET_POSITION,
                     global_scale: float = 1.0) -> Vec2:
    return as_vec2(hip_world) + (as_vec2(asset_point) - as_vec2(hip_asset)) * global_scale


def asset_to_local(asset_point) -> Vec2:
    """Asset point relative to the mannequin's parent container origin."""
    return as_vec2(asset_point) - as_vec2(ASSET_PARENT_OFFSET)


@dataclass(frozen=True)
class ScreenTransform:
    """Snapshot of the SVG-to-screen matrix and the overlay zoom/pan state.

    ``a`` .. ``f`` follow the SVG ``matrix(a b c d e f)`` convention.
    """
    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    e: float = 0.0
    f: float = 0.0
    rect_left: float = 0.0
    rect_top: float = 0.0
    zoom: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0

    @property
    def matrix(self) -> Mat3:
        return mat3_from_affine(self.a, self.b, self.c, self.d, self.e, self.f)

    @property
    def unit_scale(self) -> float:
        """Average screen pixels per SVG unit."""
        return (float(np.hypot(self.a, self.b)) + float(np.hypot(self.c, self.d))) / 2.0

    def svg_to_screen(self, point) -> Vec2:
        return transform_point(self.matrix, as_vec2(point))

    def screen_to_svg(self, point) -> Vec2:
        det = self.a * self.d - self.b * self.c
        p = as_vec2(point)
        if abs(det) < 1e-12:
            # Collapsed transform: no meaningful inverse
            return p
        x = p[0] - self.e
        y = p[1] - self.f
        return vec2((self.d * x - self.c * y) / det, (-self.b * x + self.a * y) / det)

    def screen_to_overlay_local(self, point) -> Vec2:
        zoom = self.zoom if self.zoom else 1.0
        p = as_vec2(point)
        return vec2(
            (p[0] - self.rect_left - self.offset_x) / zoom,
            (p[1] - self.rect_top - self.offset_y) / zoom,
        )

    def world_to_overlay(self, point) -> Vec2:
        return self.screen_to_overlay_local(self.svg_to_screen(point))

    def container_scale(self, global_scale: float) -> float:
        """CSS scale for a mannequin container drawn at *global_scale*."""
        zoom = self.zoom if self.zoom else 1.0
        return global_scale * self.unit_scale / zoom
