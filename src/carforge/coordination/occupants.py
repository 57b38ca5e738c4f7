"""Passenger row bookkeeping: default seat offsets and chassis-relative syncing."""

import logging
from typing import Optional

from carforge.body.rows import DRIVER_ROW, LAST_ROW, MID_ROW, PASSENGER_ROWS, ROWS, OccupantRow
from carforge.core.math_utils import round_half_up
from carforge.core.parameter_limits import ParameterLimits

logger = logging.getLogger(__name__)

__all__ = [
    "DRIVER_ROW", "MID_ROW", "LAST_ROW", "PASSENGER_ROWS", "ROWS", "OccupantRow",
    "MID_ROW_DEFAULT_DISTANCE", "default_passenger_offsets", "PassengerSync",
]

MID_ROW_DEFAULT_DISTANCE = 500
# Clearance between the last-row hip and the rear wheel arch (mm)
LAST_ROW_ARCH_CLEARANCE = 100


def default_passenger_offsets(state) -> dict[str, int]:
    """Seat offsets behind the driver's hip for a fresh layout.

    The last row sits just ahead of the rear wheel arch.
    """
    from_rear_axle = state.tire_diameter / 2 + state.wheel_arch_gap + LAST_ROW_ARCH_CLEARANCE
    last = round_half_up(state.wheel_base - from_rear_axle - state.h_point_x)
    return {
        MID_ROW.key("h_point_x"): MID_ROW_DEFAULT_DISTANCE,
        LAST_ROW.key("h_point_x"): last,
    }


class PassengerSync:
    """Keep passengers fixed to the chassis when the wheelbase or driver moves.

    Passenger hips are stored relative to the driver's hip.  A wheelbase
    change moves the last row with the rear axle (and the mid row half as
    far); a driver hip change is cancelled out so passengers stay put.
    """

    def __init__(self, limits: Optional[ParameterLimits] = None):
        self.limits = limits
        self._wheel_base: Optional[float] = None
        self._h_point_x: Optional[float] = None

    def reset(self, state) -> None:
        self._wheel_base = state.wheel_base
        self._h_point_x = state.h_point_x

    def updates_for(self, state) -> dict[str, float]:
        """Passenger offset partial compensating for changes since the last call."""
        if self._wheel_base is None or self._h_point_x is None:
            self.reset(state)
            return {}

        last_key = LAST_ROW.key("h_point_x")
        mid_key = MID_ROW.key("h_point_x")
        last = getattr(state, last_key) or 0
        mid = getattr(state, mid_key) or 0
        changed = False

        if state.wheel_base != self._wheel_base:
            delta = state.wheel_base - self._wheel_base
            last += delta
            mid += delta / 2
            changed = True

        if state.h_point_x != self._h_point_x:
            delta = state.h_point_x - self._h_point_x
            last -= delta
            mid -= delta
            changed = True

        self.reset(state)
        if not changed:
            return {}

        updates = {last_key: last, mid_key: mid}
        if self.limits is not None:
            updates = self.limits.clamp_updates(updates)
        logger.debug("Passenger offsets synced: %s", updates)
        return updates
