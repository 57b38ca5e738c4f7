"""Reference mannequin skeleton measured from the figure artwork.

Bone vectors, lengths and rest angles are computed once from
``ASSET_COORDS``; poses rotate and rescale these rest values.
"""

import math
from dataclasses import dataclass

from carforge.constants import ASSET_COORDS, ASSET_FOOT_END, SHIN_RATIO, SCALE, THIGH_RATIO
from carforge.core.math_utils import Vec2, angle_of, as_vec2, length


def _joint(name: str) -> Vec2:
    return as_vec2(ASSET_COORDS[name])


@dataclass(frozen=True)
class Bone:
    """Rest-pose bone from ``origin`` to ``tip`` in asset pixels."""
    origin: str
    tip: str

    @property
    def vector(self) -> Vec2:
        return _joint(self.tip) - _joint(self.origin)

    @property
    def length(self) -> float:
        return length(self.vector)

    @property
    def angle(self) -> float:
        return angle_of(self.vector)


THIGH = Bone("hip", "knee")
SHIN = Bone("knee", "heel")
UPPER_ARM = Bone("shoulder", "elbow")
FOREARM = Bone("elbow", "hand")
TORSO = Bone("hip", "shoulder")

# Rest torso angle measured from the upward vertical (positive = reclined)
_torso = TORSO.vector
TORSO_ANGLE_FROM_VERTICAL = math.atan2(_torso[0], -_torso[1])

HEAD_VECTOR: Vec2 = _joint("head") - _joint("hip")

# Sole of the foot relative to the knee
FOOT_VECTOR: Vec2 = as_vec2(ASSET_FOOT_END) - _joint("knee")


def stature_px(stature_cm: float) -> float:
    """Stature in rendering units."""
    return stature_cm * 10 * SCALE


def leg_lengths(stature_cm: float) -> tuple[float, float]:
    """(thigh, shin) lengths in rendering units for a given stature."""
    height = stature_px(stature_cm)
    return height * THIGH_RATIO, height * SHIN_RATIO
