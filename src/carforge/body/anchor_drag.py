"""Inverse mappings for dragging occupant anchors on the canvas.

Each function takes the latest solved pose (or chassis) plus the dragged
rendering-plane point and returns a state partial.  Values are whole
millimetres or degrees; pass ``limits`` to clamp them to slider ranges.
"""

import logging
import math
from typing import Optional

from carforge.constants import SCALE
from carforge.body.pose_solver import Pose
from carforge.body.rows import DRIVER_ROW, OccupantRow
from carforge.chassis.geometry import ChassisGeometry
from carforge.core.math_utils import as_vec2, rad_to_deg, round_half_up

logger = logging.getLogger(__name__)

ANCHOR_KEYS = ("hPoint", "heel", "hand", "head")

# Minimum |dy| when converting a head drag into a recline angle
_HEAD_DY_EPS = 1e-4


def _limited(updates: dict, limits) -> dict:
    return limits.clamp_updates(updates) if limits is not None else updates


def recline_from_head_point(hip, point) -> int:
    """Recline (degrees from vertical) of the line from *hip* to *point*."""
    hip = as_vec2(hip)
    p = as_vec2(point)
    dx = p[0] - hip[0]
    dy = hip[1] - p[1]
    if abs(dy) < _HEAD_DY_EPS:
        dy = math.copysign(_HEAD_DY_EPS, dy) if dy else _HEAD_DY_EPS
    return round_half_up(rad_to_deg(math.atan2(dx, dy)))


def anchor_params(row: OccupantRow, key: str) -> list[str]:
    """State keys an anchor drag edits, for interaction highlighting."""
    if row is DRIVER_ROW:
        return {
            "hPoint": ["h_point_x", "h_point_height"],
            "heel": ["hip_pedal_distance"],
            "hand": ["hand_distance_x", "hand_height"],
            "head": ["body_recline_angle"],
        }.get(key, [])
    return {
        "hPoint": [row.key("h_point_x"), row.key("h_point_height")],
        "heel": [row.key("foot_floor_dist"), row.key("hip_foot_dist")],
        "head": [row.key("body_recline")],
    }.get(key, [])


# ── Driver ────────────────────────────────────────────────────────────

def driver_hip_from_point(chassis: ChassisGeometry, point, limits=None) -> dict:
    p = as_vec2(point)
    return _limited({
        "h_point_x": round_half_up((p[0] - chassis.front_wheel_x) / SCALE),
        "h_point_height": round_half_up((chassis.floor_y - p[1]) / SCALE),
    }, limits)


def driver_heel_from_point(pose: Pose, point, limits=None) -> dict:
    """Pedal distance for a heel dragged to *point*; the heel never passes the hip."""
    hip_x = pose.hip[0]
    heel_x = min(as_vec2(point)[0], hip_x)
    return _limited({"hip_pedal_distance": round_half_up((hip_x - heel_x) / SCALE)}, limits)


def driver_hand_from_point(pose: Pose, point, limits=None) -> dict:
    p = as_vec2(point)
    return _limited({
        "hand_distance_x": round_half_up((pose.hip[0] - p[0]) / SCALE),
        "hand_height": round_half_up((pose.hip[1] - p[1]) / SCALE),
    }, limits)


def driver_head_from_point(pose: Pose, point, limits=None) -> dict:
    return _limited({"body_recline_angle": recline_from_head_point(pose.hip, point)}, limits)


# ── Passengers ────────────────────────────────────────────────────────

def passenger_hip_from_point(row: OccupantRow, pose: Pose, point, limits=None) -> dict:
    """Passenger hip offsets; x is measured from the driver's hip."""
    p = as_vec2(point)
    return _limited({
        row.key("h_point_x"): round_half_up((p[0] - pose.reference_x) / SCALE),
        row.key("h_point_height"): round_half_up((pose.floor_y - p[1]) / SCALE),
    }, limits)


def passenger_heel_from_point(row: OccupantRow, pose: Pose, point, limits=None) -> dict:
    p = as_vec2(point)
    return _limited({
        row.key("foot_floor_dist"): round_half_up((pose.floor_y - p[1]) / SCALE),
        row.key("hip_foot_dist"): round_half_up((pose.hip[0] - p[0]) / SCALE),
    }, limits)


def passenger_head_from_point(row: OccupantRow, pose: Pose, point, limits=None) -> dict:
    return _limited({row.key("body_recline"): recline_from_head_point(pose.hip, point)}, limits)


def drag_anchor(row: OccupantRow, key: str, point, pose: Optional[Pose],
                chassis: Optional[ChassisGeometry] = None, limits=None) -> dict:
    """Dispatch an anchor drag; returns an empty partial when nothing applies."""
    if pose is None:
        return {}
    if row is DRIVER_ROW:
        if key == "hPoint" and chassis is not None:
            return driver_hip_from_point(chassis, point, limits)
        if key == "heel":
            return driver_heel_from_point(pose, point, limits)
        if key == "hand":
            return driver_hand_from_point(pose, point, limits)
        if key == "head":
            return driver_head_from_point(pose, point, limits)
    else:
        if key == "hPoint":
            return passenger_hip_from_point(row, pose, point, limits)
        if key == "heel":
            return passenger_heel_from_point(row, pose, point, limits)
        if key == "head":
            return passenger_head_from_point(row, pose, point, limits)
    logger.debug("No drag mapping for %s anchor %r", row.name, key)
    return {}
