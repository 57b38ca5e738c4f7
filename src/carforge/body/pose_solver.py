"""Two-bone IK for occupant legs and arms plus torso recline resolution.

Every distance is clamped into the valid triangle range before it reaches
``acos``, so a pose can always be produced for finite input.  Bend
conventions are fixed: the thigh takes the ``+`` branch (knee forward and
down), the upper arm the ``-`` branch (elbow below the shoulder-hand line).

The solver never writes to the state.  When the arm cannot reach, the
torso is swung forward and the resulting recline is reported as
``Pose.actual_recline_angle`` for the caller to feed back.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

from carforge.constants import MAX_REACH_FACTOR, MIN_REACH_FACTOR
from carforge.body.rows import DRIVER_ROW, OccupantRow, PoseTargets, pose_targets
from carforge.body.skeleton import (
    FOOT_VECTOR,
    FOREARM,
    HEAD_VECTOR,
    SHIN,
    THIGH,
    TORSO,
    TORSO_ANGLE_FROM_VERTICAL,
    UPPER_ARM,
    leg_lengths,
)
from carforge.chassis.geometry import ChassisGeometry
from carforge.core.math_utils import (
    Vec2,
    angle_between_points,
    angle_of,
    as_vec2,
    clamp,
    deg_to_rad,
    distance,
    length,
    move_along,
    polar,
    rad_to_deg,
    rotate,
    vec2,
    wrap_angle,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Pose:
    """Solved joint positions (rendering plane) and asset rotations (degrees)."""
    hip: Vec2
    knee: Vec2
    heel: Vec2
    bottom_foot: Vec2
    shoulder: Vec2
    head: Vec2
    thigh_rotation_deg: float
    shin_rotation_deg: float
    torso_rotation_deg: float
    global_scale: float
    shin_scale: float
    actual_recline_angle: float
    recline_clamped: bool
    floor_y: float
    reference_x: float
    row: str = DRIVER_ROW.name
    elbow: Optional[Vec2] = None
    hand: Optional[Vec2] = None
    upper_arm_rotation_deg: Optional[float] = None
    forearm_rotation_deg: Optional[float] = None

    @property
    def has_arms(self) -> bool:
        return self.hand is not None


# ── Leg ───────────────────────────────────────────────────────────────

def reach_range(a: float, b: float) -> tuple[float, float]:
    """(min, max) reach of a two-bone chain, kept strictly inside the triangle range."""
    return abs(a - b) * MIN_REACH_FACTOR, (a + b) * MAX_REACH_FACTOR


def clamp_heel(hip: Vec2, heel: Vec2, thigh: float, shin: float) -> Vec2:
    """Move the heel horizontally so the hip-heel distance is reachable.

    The vertical drop is authoritative.  When it alone exceeds the maximum
    reach the heel is placed straight above or below the hip at full reach.
    """
    min_reach, max_reach = reach_range(thigh, shin)
    dx = hip[0] - heel[0]
    dy = abs(heel[1] - hip[1])
    side = 1.0 if dx >= 0 else -1.0
    dist = math.hypot(dx, dy)

    if dy > max_reach:
        drop = math.copysign(max_reach, heel[1] - hip[1])
        return vec2(hip[0], hip[1] + drop)
    if dist > max_reach:
        dx = side * math.sqrt(max_reach * max_reach - dy * dy)
    elif dist < min_reach and dy < min_reach:
        dx = side * math.sqrt(min_reach * min_reach - dy * dy)
    return vec2(hip[0] - dx, heel[1])


def law_of_cosines_angle(a: float, b: float, c: float) -> float:
    """Angle between sides *a* and *b* opposite side *c*, argument clamped to [-1, 1]."""
    if a == 0 or b == 0:
        return 0.0
    return math.acos(clamp((a * a + b * b - c * c) / (2 * a * b), -1.0, 1.0))


@dataclass(frozen=True, eq=False)
class LegSolution:
    knee: Vec2
    heel: Vec2
    bottom_foot: Vec2
    thigh_angle: float
    shin_angle: float


def solve_leg(hip, heel, thigh: float, shin: float) -> LegSolution:
    hip = as_vec2(hip)
    heel = clamp_heel(hip, as_vec2(heel), thigh, shin)
    d = distance(hip, heel)
    thigh_angle = angle_between_points(hip, heel) + law_of_cosines_angle(thigh, d, shin)
    knee = polar(hip, thigh, thigh_angle)
    shin_angle = angle_between_points(knee, heel)

    # Foot sole follows the shin rotation, scaled by the shin ratio
    foot_angle = angle_of(FOOT_VECTOR) + (shin_angle - SHIN.angle)
    foot_length = length(FOOT_VECTOR) * (shin / SHIN.length)
    bottom_foot = polar(knee, foot_length, foot_angle)
    return LegSolution(knee, heel, bottom_foot, thigh_angle, shin_angle)


# ── Arm ───────────────────────────────────────────────────────────────

@dataclass(frozen=True, eq=False)
class ArmSolution:
    shoulder: Vec2
    elbow: Vec2
    hand: Vec2
    torso_angle: float
    upper_angle: float
    forearm_angle: float
    torso_clamped: bool


def resolve_torso_for_reach(hip: Vec2, hand: Vec2, torso_length: float,
                            max_reach: float, torso_angle: float) -> float:
    """Torso angle that puts the shoulder exactly *max_reach* from *hand*.

    Of the two circle intersections the one closer to *torso_angle* wins.
    """
    hip_to_hand = distance(hip, hand)
    if hip_to_hand < 1e-9:
        return torso_angle
    spread = law_of_cosines_angle(torso_length, hip_to_hand, max_reach)
    base = angle_between_points(hip, hand)
    first, second = base + spread, base - spread
    if abs(wrap_angle(first - torso_angle)) < abs(wrap_angle(second - torso_angle)):
        return first
    return second


def solve_arm(hip, hand_target, torso_angle: float, torso_length: float,
              upper: float, forearm: float) -> ArmSolution:
    hip = as_vec2(hip)
    hand = as_vec2(hand_target)
    min_reach, max_reach = reach_range(upper, forearm)

    shoulder = polar(hip, torso_length, torso_angle)
    clamped = False
    if distance(shoulder, hand) > max_reach:
        new_angle = resolve_torso_for_reach(hip, hand, torso_length, max_reach, torso_angle)
        clamped = new_angle != torso_angle
        torso_angle = new_angle
        shoulder = polar(hip, torso_length, torso_angle)

    d = distance(shoulder, hand)
    if d < min_reach:
        hand = polar(shoulder, min_reach, angle_between_points(shoulder, hand))
    elif d > max_reach:
        # Still out of reach with the torso swung fully: stretch the arm out
        hand = move_along(shoulder, hand, max_reach / d)

    d_ik = clamp(distance(shoulder, hand), min_reach, max_reach)
    upper_angle = angle_between_points(shoulder, hand) - law_of_cosines_angle(upper, d_ik, forearm)
    elbow = polar(shoulder, upper, upper_angle)
    forearm_angle = angle_between_points(elbow, hand)
    return ArmSolution(shoulder, elbow, hand, torso_angle, upper_angle, forearm_angle, clamped)


# ── Full pose ─────────────────────────────────────────────────────────

def recline_from_torso_angle(torso_angle: float) -> float:
    """Degrees from the upward vertical of a torso pointing at *torso_angle*."""
    return rad_to_deg(math.atan2(math.cos(torso_angle), -math.sin(torso_angle)))


def solve_pose(targets: PoseTargets, with_arms: bool = True, row: str = DRIVER_ROW.name) -> Pose:
    thigh, shin = leg_lengths(targets.stature_cm)
    global_scale = thigh / THIGH.length
    shin_scale = shin / (SHIN.length * global_scale)

    hip = as_vec2(targets.hip)
    leg = solve_leg(hip, targets.heel, thigh, shin)

    torso_angle = TORSO.angle + deg_to_rad(targets.recline_deg) - TORSO_ANGLE_FROM_VERTICAL
    torso_length = TORSO.length * global_scale

    arm: Optional[ArmSolution] = None
    if with_arms and targets.hand is not None:
        arm = solve_arm(hip, targets.hand, torso_angle, torso_length,
                        UPPER_ARM.length * global_scale, FOREARM.length * global_scale)
        torso_angle = arm.torso_angle
        shoulder = arm.shoulder
    else:
        shoulder = polar(hip, torso_length, torso_angle)

    clamped = arm is not None and arm.torso_clamped
    torso_delta = torso_angle - TORSO.angle
    if clamped:
        actual_recline = recline_from_torso_angle(torso_angle)
        logger.debug("%s recline clamped from %.1f to %.1f deg", row, targets.recline_deg, actual_recline)
    else:
        actual_recline = targets.recline_deg

    return Pose(
        hip=hip,
        knee=leg.knee,
        heel=leg.heel,
        bottom_foot=leg.bottom_foot,
        shoulder=shoulder,
        head=hip + rotate(HEAD_VECTOR, torso_delta) * global_scale,
        thigh_rotation_deg=rad_to_deg(leg.thigh_angle - THIGH.angle),
        shin_rotation_deg=rad_to_deg(leg.shin_angle - SHIN.angle),
        torso_rotation_deg=rad_to_deg(torso_delta),
        global_scale=global_scale,
        shin_scale=shin_scale,
        actual_recline_angle=actual_recline,
        recline_clamped=clamped,
        floor_y=targets.floor_y,
        reference_x=targets.reference_x,
        row=row,
        elbow=arm.elbow if arm else None,
        hand=arm.hand if arm else None,
        upper_arm_rotation_deg=rad_to_deg(arm.upper_angle - UPPER_ARM.angle) if arm else None,
        forearm_rotation_deg=rad_to_deg(arm.forearm_angle - FOREARM.angle) if arm else None,
    )


def compute_pose(state, row: OccupantRow = DRIVER_ROW,
                 chassis: Optional[ChassisGeometry] = None) -> Optional[Pose]:
    """Pose for *row*, or None when the row is hidden or its inputs are unusable."""
    targets = pose_targets(state, row, chassis)
    if targets is None:
        return None
    return solve_pose(targets, with_arms=row.has_arms, row=row.name)
