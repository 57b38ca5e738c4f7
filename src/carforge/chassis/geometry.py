"""Chassis geometry derived from vehicle dimensions.

All outputs are in rendering-plane units.  Degenerate inputs (chassis line
inside the wheel, vertical tangents) fall back to defined values; nothing
here raises for finite input.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Optional

from carforge.constants import (
    BODY_POINT_CONFIG,
    CENTER_X,
    FRONT_FACE_BREAK_X_RANGE,
    FRONT_FACE_BREAK_Y_RANGE,
    GROUND_Y,
    SCALE,
    TANGENT_LINE_LENGTH,
    VERTICAL_TANGENT_EPS,
    WHEELBASE_MAX,
    WHEELBASE_MIN,
)
from carforge.core.math_utils import Vec2, as_vec2, clamp, deg_to_rad, dot, round_half_up, vec2
from carforge.chassis.path import PathCommand, arc_to, line_to, move_to

logger = logging.getLogger(__name__)


@dataclass
class TangentLine:
    """Approach or departure line touching the tyre at ``contact``."""
    contact: Vec2
    direction: Vec2

    @property
    def start(self) -> Vec2:
        return self.contact - self.direction * TANGENT_LINE_LENGTH

    @property
    def end(self) -> Vec2:
        return self.contact + self.direction * TANGENT_LINE_LENGTH

    @property
    def is_vertical(self) -> bool:
        return abs(self.direction[0]) < VERTICAL_TANGENT_EPS

    def y_at(self, x: float) -> float:
        """Height of the line at *x*; the contact height when near-vertical."""
        if self.is_vertical:
            return float(self.contact[1])
        slope = self.direction[1] / self.direction[0]
        return float(self.contact[1] + slope * (x - self.contact[0]))

    def project(self, point) -> Vec2:
        p = as_vec2(point)
        return self.contact + self.direction * dot(p - self.contact, self.direction)


@dataclass
class WheelArch:
    center_x: float
    y: float            # chassis bottom line
    radius: float
    dx: float           # half-width where the arch meets the chassis line
    large_arc: int
    sweep: int = 1

    @property
    def start(self) -> Vec2:
        return vec2(self.center_x - self.dx, self.y)

    @property
    def end(self) -> Vec2:
        return vec2(self.center_x + self.dx, self.y)


def tangent_line(wheel_x: float, wheel_y: float, tire_radius: float,
                 angle_deg: float, position: str) -> TangentLine:
    """Tangent to the tyre at the approach (front) or departure (rear) angle."""
    angle = deg_to_rad(angle_deg)
    if position == "front":
        theta = math.pi / 2 + angle
        direction = vec2(-math.sin(theta), math.cos(theta))
    else:
        theta = math.pi / 2 - angle
        direction = vec2(math.sin(theta), -math.cos(theta))
    contact = vec2(wheel_x + tire_radius * math.cos(theta),
                   wheel_y + tire_radius * math.sin(theta))
    return TangentLine(contact=contact, direction=direction)


def arch_half_width(arch_radius: float, dy: float) -> float:
    """Horizontal half-width of an arch cut by a line *dy* below the wheel centre."""
    if arch_radius > abs(dy):
        return math.sqrt(arch_radius * arch_radius - dy * dy)
    return 0.0


@dataclass
class ChassisGeometry:
    wheel_base_px: float
    tire_radius_px: float
    front_wheel_x: float
    rear_wheel_x: float
    wheel_y: float
    chassis_bottom_y: float
    floor_y: float
    front_arch: WheelArch
    rear_arch: WheelArch
    front_tangent: TangentLine
    rear_tangent: TangentLine
    front_tip: Vec2
    rear_tip: Vec2
    anchors: dict[str, Vec2] = field(default_factory=dict)

    @property
    def arch_radius(self) -> float:
        return self.front_arch.radius

    @property
    def arch_dx(self) -> float:
        return self.front_arch.dx

    def reference_x(self, reference: str) -> float:
        return self.front_wheel_x if reference == "front" else self.rear_wheel_x

    def point_map(self) -> dict[str, Vec2]:
        """All eight contour anchors, keyed as in the segment table."""
        points = {"frontTip": self.front_tip}
        points.update(self.anchors)
        points["rearTip"] = self.rear_tip
        return points

    @property
    def overall_length_mm(self) -> float:
        xs = [p[0] for p in self.point_map().values()]
        xs += [self.front_wheel_x - self.tire_radius_px, self.rear_wheel_x + self.tire_radius_px]
        return (max(xs) - min(xs)) / SCALE

    @property
    def overall_height_mm(self) -> float:
        top = min(min(p[1] for p in self.point_map().values()), self.wheel_y - self.tire_radius_px)
        return (GROUND_Y - top) / SCALE

    def outline_commands(self) -> list[PathCommand]:
        """Underbody: front arch, sill line, rear arch."""
        fa, ra = self.front_arch, self.rear_arch
        return [
            move_to(fa.start),
            arc_to(fa.radius, fa.large_arc, fa.sweep, fa.end),
            line_to(ra.start),
            arc_to(ra.radius, ra.large_arc, ra.sweep, ra.end),
        ]

    @property
    def floor_line(self) -> tuple[Vec2, Vec2]:
        return vec2(self.front_arch.start[0], self.floor_y), vec2(self.rear_arch.end[0], self.floor_y)

    @property
    def bumper_lines(self) -> tuple[tuple[Vec2, Vec2], tuple[Vec2, Vec2]]:
        return (self.front_tip, self.front_arch.start), (self.rear_tip, self.rear_arch.end)


def body_anchor_position(state, key: str, front_wheel_x: float, rear_wheel_x: float,
                         wheel_y: float) -> Vec2:
    config = BODY_POINT_CONFIG[key]
    ref_x = front_wheel_x if config["reference"] == "front" else rear_wheel_x
    return vec2(ref_x - getattr(state, config["x_key"]) * SCALE,
                wheel_y - getattr(state, config["y_key"]) * SCALE)


def solve_chassis(state) -> ChassisGeometry:
    """Derive every chassis point from a ParameterState snapshot."""
    tire_radius = state.tire_diameter / 2 * SCALE
    wheel_base_px = state.wheel_base * SCALE
    front_wheel_x = CENTER_X - wheel_base_px / 2
    rear_wheel_x = CENTER_X + wheel_base_px / 2
    wheel_y = GROUND_Y - tire_radius
    chassis_bottom_y = GROUND_Y - state.ground_clearance * SCALE
    floor_y = chassis_bottom_y - state.floor_thickness * SCALE

    arch_radius = tire_radius + state.wheel_arch_gap * SCALE
    dy = chassis_bottom_y - wheel_y
    dx = arch_half_width(arch_radius, dy)
    if dx == 0.0:
        logger.debug("Chassis line outside arch radius (dy=%.2f, R=%.2f); arches collapse", dy, arch_radius)
    large_arc = 1 if dy > 0 else 0
    front_arch = WheelArch(front_wheel_x, chassis_bottom_y, arch_radius, dx, large_arc)
    rear_arch = WheelArch(rear_wheel_x, chassis_bottom_y, arch_radius, dx, large_arc)

    front_tangent = tangent_line(front_wheel_x, wheel_y, tire_radius, state.front_approach_angle, "front")
    rear_tangent = tangent_line(rear_wheel_x, wheel_y, tire_radius, state.rear_departure_angle, "rear")

    front_tip_x = front_wheel_x - state.front_overhang * SCALE
    rear_tip_x = rear_wheel_x + state.rear_overhang * SCALE
    front_tip = vec2(front_tip_x, front_tangent.y_at(front_tip_x))
    rear_tip = vec2(rear_tip_x, rear_tangent.y_at(rear_tip_x))

    anchors = {
        key: body_anchor_position(state, key, front_wheel_x, rear_wheel_x, wheel_y)
        for key in BODY_POINT_CONFIG
    }

    return ChassisGeometry(
        wheel_base_px=wheel_base_px,
        tire_radius_px=tire_radius,
        front_wheel_x=front_wheel_x,
        rear_wheel_x=rear_wheel_x,
        wheel_y=wheel_y,
        chassis_bottom_y=chassis_bottom_y,
        floor_y=floor_y,
        front_arch=front_arch,
        rear_arch=rear_arch,
        front_tangent=front_tangent,
        rear_tangent=rear_tangent,
        front_tip=front_tip,
        rear_tip=rear_tip,
        anchors=anchors,
    )


# ── Drag inverses ─────────────────────────────────────────────────────

def anchor_offsets_from_point(geometry: ChassisGeometry, key: str, point) -> dict[str, int]:
    """State partial placing body anchor *key* at rendering-plane *point*."""
    config = BODY_POINT_CONFIG[key]
    p = as_vec2(point)
    x_mm = round_half_up((geometry.reference_x(config["reference"]) - p[0]) / SCALE)
    y_mm = round_half_up((geometry.wheel_y - p[1]) / SCALE)
    if key == "frontFaceBreak":
        x_mm = int(clamp(x_mm, *FRONT_FACE_BREAK_X_RANGE))
        y_mm = int(clamp(y_mm, *FRONT_FACE_BREAK_Y_RANGE))
    return {config["x_key"]: x_mm, config["y_key"]: y_mm}


def wheelbase_from_axle_position(position: str, axle_x: float,
                                 bounds: tuple[float, float] = (WHEELBASE_MIN, WHEELBASE_MAX)) -> int:
    """Wheelbase (mm) that puts the dragged axle at *axle_x*, axles staying symmetric."""
    if position == "front":
        wheel_base_px = (CENTER_X - axle_x) * 2
    else:
        wheel_base_px = (axle_x - CENTER_X) * 2
    lo, hi = bounds
    wheel_base_px = clamp(wheel_base_px, lo * SCALE, hi * SCALE)
    return round_half_up(wheel_base_px / SCALE)


def overhang_from_point(geometry: ChassisGeometry, position: str, point,
                        limits: Optional[tuple[float, float]] = None) -> int:
    """Overhang (mm) for a tip dragged towards *point*, kept on the tangent line."""
    if position == "front":
        projected = geometry.front_tangent.project(point)
        raw_px = geometry.front_wheel_x - projected[0]
    else:
        projected = geometry.rear_tangent.project(point)
        raw_px = projected[0] - geometry.rear_wheel_x
    overhang = round_half_up(raw_px / SCALE)
    if limits is not None:
        overhang = int(clamp(overhang, *limits))
    return overhang
