"""Occupant rows and the pose targets each row reads from the state.

The driver is placed from the front axle.  Passenger rows store their
hip position as a distance behind the driver's hip, so their reference
frame moves with the driver.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

from carforge.constants import SCALE
from carforge.chassis.geometry import ChassisGeometry, solve_chassis
from carforge.core.math_utils import Vec2, vec2

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OccupantRow:
    name: str
    prefix: str          # state key prefix; empty for the driver
    toggle_key: str
    has_arms: bool = False

    def key(self, suffix: str) -> str:
        return f"{self.prefix}_{suffix}" if self.prefix else suffix


DRIVER_ROW = OccupantRow("driver", "", "show_mannequin", has_arms=True)
MID_ROW = OccupantRow("mid", "mid_row", "show_mid_row")
LAST_ROW = OccupantRow("last", "passenger", "show_last_row")

PASSENGER_ROWS = (MID_ROW, LAST_ROW)
ROWS = {row.name: row for row in (DRIVER_ROW, MID_ROW, LAST_ROW)}


@dataclass(frozen=True)
class PoseTargets:
    """Rendering-plane inputs for one occupant's IK solve."""
    hip: Vec2
    heel: Vec2
    stature_cm: float
    recline_deg: float
    floor_y: float
    reference_x: float
    hand: Optional[Vec2] = None


def _finite(*values) -> bool:
    for v in values:
        if v is None or isinstance(v, bool) or not isinstance(v, (int, float)) or not math.isfinite(v):
            return False
    return True


def driver_hip(state, chassis: ChassisGeometry) -> Vec2:
    return vec2(chassis.front_wheel_x + state.h_point_x * SCALE,
                chassis.floor_y - state.h_point_height * SCALE)


def pose_targets(state, row: OccupantRow = DRIVER_ROW,
                 chassis: Optional[ChassisGeometry] = None) -> Optional[PoseTargets]:
    """Targets for *row*, or None when the row is hidden or its inputs are unusable."""
    if not getattr(state, row.toggle_key, False):
        return None
    if chassis is None:
        chassis = solve_chassis(state)
    floor_y = chassis.floor_y

    if row is DRIVER_ROW or not row.prefix:
        values = (state.h_point_x, state.h_point_height, state.hip_pedal_distance,
                  state.mannequin_height, state.body_recline_angle,
                  state.hand_height, state.hand_distance_x)
        if not _finite(*values) or state.mannequin_height <= 0:
            logger.debug("Driver pose inputs incomplete: %s", values)
            return None
        hip = driver_hip(state, chassis)
        return PoseTargets(
            hip=hip,
            heel=vec2(hip[0] - state.hip_pedal_distance * SCALE, floor_y),
            stature_cm=float(state.mannequin_height),
            recline_deg=float(state.body_recline_angle),
            floor_y=floor_y,
            reference_x=chassis.front_wheel_x,
            hand=vec2(hip[0] - state.hand_distance_x * SCALE, hip[1] - state.hand_height * SCALE),
        )

    offset_x, height, foot_floor, hip_foot, stature, recline = (
        getattr(state, row.key(suffix), None)
        for suffix in ("h_point_x", "h_point_height", "foot_floor_dist",
                       "hip_foot_dist", "height", "body_recline")
    )
    if not _finite(offset_x, height, foot_floor, hip_foot, stature, recline,
                   state.h_point_x, state.h_point_height) or stature <= 0:
        logger.debug("Passenger row %s inputs incomplete", row.name)
        return None

    reference_x = float(driver_hip(state, chassis)[0])
    hip = vec2(reference_x + offset_x * SCALE, floor_y - height * SCALE)
    return PoseTargets(
        hip=hip,
        heel=vec2(hip[0] - hip_foot * SCALE, floor_y - foot_floor * SCALE),
        stature_cm=float(stature),
        recline_deg=float(recline),
        floor_y=floor_y,
        reference_x=reference_x,
    )
