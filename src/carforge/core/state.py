"""Application state: every user-editable input plus the container that owns it."""

import copy
import logging
import math
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Optional, Union

from carforge.constants import (
    MAX_CONTROL_POINTS_PER_SEGMENT,
    SEGMENT_IDS,
    WHEELBASE_MAX,
    WHEELBASE_MIN,
)
from carforge.chassis.control_points import (
    AnyControlPoint,
    ControlPoint,
    ControlPointMode,
    Handle,
    control_point_from_dict,
    create_control_point,
    with_handle,
    with_mode,
    with_offsets,
)
from carforge.core.events import EventBus, EventType
from carforge.core.math_utils import clamp

logger = logging.getLogger(__name__)


@dataclass
class ParameterState:
    """Single source of truth for all inputs (millimetres and degrees)."""
    # Vehicle
    tire_diameter: float = 700
    wheel_arch_gap: float = 40
    wheel_base: float = 2700
    ground_clearance: float = 160
    floor_thickness: float = 100
    front_overhang: float = 850
    rear_overhang: float = 900
    front_approach_angle: float = 20
    rear_departure_angle: float = 25

    # Body anchors: x backwards from the reference axle, y up from wheel centre
    front_face_break_x: float = 775
    front_face_break_y: float = 525
    bonnet_end_x: float = -365
    bonnet_end_y: float = 660
    window_end_x: float = -1445
    window_end_y: float = 1125
    rooftop_end_x: float = -195
    rooftop_end_y: float = 1130
    rear_window_end_x: float = -500
    rear_window_end_y: float = 775
    bumper_end_x: float = -890
    bumper_end_y: float = 535

    # Driver
    h_point_height: float = 300
    h_point_x: float = 1400           # from the front axle
    hip_pedal_distance: float = 750
    body_recline_angle: float = 25    # degrees from vertical
    hand_height: float = 400
    hand_distance_x: float = 450
    mannequin_height: float = 175     # stature, cm
    show_mannequin: bool = True

    # Mid row passenger (h_point_x is the distance behind the driver's hip)
    mid_row_h_point_x: float = 500
    mid_row_h_point_height: float = 320
    mid_row_foot_floor_dist: float = 80
    mid_row_hip_foot_dist: float = 700
    mid_row_height: float = 175
    mid_row_body_recline: float = 25

    # Last row passenger
    passenger_h_point_x: float = 810
    passenger_h_point_height: float = 320
    passenger_foot_floor_dist: float = 80
    passenger_hip_foot_dist: float = 700
    passenger_height: float = 175
    passenger_body_recline: float = 25

    show_mid_row: bool = False
    show_last_row: bool = False
    active_passenger_row: str = "last"

    # Body contour edits
    body_control_points: dict[str, list[AnyControlPoint]] = field(default_factory=dict)
    next_control_point_id: int = 1

    def copy(self) -> "ParameterState":
        return copy.deepcopy(self)


def _to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


FIELD_NAMES: tuple[str, ...] = tuple(f.name for f in fields(ParameterState))
FIELD_TO_CAMEL: dict[str, str] = {name: _to_camel(name) for name in FIELD_NAMES}
CAMEL_TO_FIELD: dict[str, str] = {camel: name for name, camel in FIELD_TO_CAMEL.items()}
BOOL_FIELDS = frozenset(f.name for f in fields(ParameterState) if f.type in (bool, "bool"))
STR_FIELDS = frozenset(f.name for f in fields(ParameterState) if f.type in (str, "str"))
NUMERIC_FIELDS = frozenset(
    name for name in FIELD_NAMES
    if name not in BOOL_FIELDS and name not in STR_FIELDS
    and name not in ("body_control_points", "next_control_point_id")
)


def resolve_key(key: str) -> Optional[str]:
    """Map a snake_case or camelCase key onto a ParameterState field name."""
    if key in FIELD_TO_CAMEL:
        return key
    return CAMEL_TO_FIELD.get(key)


def coerce_control_points(raw: Any) -> dict[str, list[AnyControlPoint]]:
    """Normalise a segment -> points mapping, accepting dicts or ControlPoint objects.

    Unknown segments are dropped and each segment keeps at most
    ``MAX_CONTROL_POINTS_PER_SEGMENT`` points.  Raises ValueError on
    malformed input.
    """
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError(f"bodyControlPoints must be an object, got {type(raw).__name__}")
    result: dict[str, list[AnyControlPoint]] = {}
    for segment_id, points in raw.items():
        if segment_id not in SEGMENT_IDS:
            logger.warning("Dropping control points for unknown segment %r", segment_id)
            continue
        if not isinstance(points, list):
            raise ValueError(f"Control points for {segment_id!r} must be a list")
        parsed = [
            p if isinstance(p, ControlPoint) else control_point_from_dict(p)
            for p in points
        ]
        if len(parsed) > MAX_CONTROL_POINTS_PER_SEGMENT:
            logger.warning("Segment %s has %d control points; keeping the first %d",
                           segment_id, len(parsed), MAX_CONTROL_POINTS_PER_SEGMENT)
            parsed = parsed[:MAX_CONTROL_POINTS_PER_SEGMENT]
        if parsed:
            result[segment_id] = parsed
    return result


def next_free_control_point_id(points: dict[str, list[AnyControlPoint]], current: int = 1) -> int:
    """Smallest counter value that stays above every id in *points*."""
    used = [p.id for segment in points.values() for p in segment]
    return max(int(current), max(used, default=0) + 1)


class StateManager:
    """Owns the ParameterState and notifies subscribers after every mutation.

    Subscribers to ``EventType.STATE_CHANGED`` receive ``state`` and
    ``context`` keyword arguments, in subscription order.
    """

    def __init__(self, state: Optional[ParameterState] = None,
                 event_bus: Optional[EventBus] = None):
        self.state = state if state is not None else ParameterState()
        self.event_bus = event_bus if event_bus is not None else EventBus()
        self.interacting_param: Union[str, tuple[str, ...], None] = None

    # ── Subscriptions ─────────────────────────────────────────────────

    def subscribe(self, handler: Callable) -> Callable[[], None]:
        return self.event_bus.subscribe(EventType.STATE_CHANGED, handler)

    def notify(self, **context: Any) -> None:
        self.event_bus.publish(EventType.STATE_CHANGED, state=self.state, context=context)

    def subscribe_interaction(self, handler: Callable) -> Callable[[], None]:
        return self.event_bus.subscribe(EventType.INTERACTION_CHANGED, handler)

    def set_interaction(self, param: Union[str, list[str], tuple[str, ...], None]) -> None:
        """Mark which parameter(s) the active gesture is editing."""
        if isinstance(param, list):
            param = tuple(param)
        if param == self.interacting_param:
            return
        self.interacting_param = param
        self.event_bus.publish(EventType.INTERACTION_CHANGED, param=param)

    # ── Whole-state access ────────────────────────────────────────────

    def get_state(self) -> ParameterState:
        return self.state

    def wheel_base_bounds(self) -> tuple[int, int]:
        return WHEELBASE_MIN, WHEELBASE_MAX

    def set_state(self, partial: Optional[dict[str, Any]], silent: bool = False,
                  **context: Any) -> None:
        """Merge *partial* into the state; keys may be snake_case or camelCase.

        ``None`` values and unknown keys are skipped.  The wheelbase is
        clamped to its bounds, control points are held to their segment
        capacity and the id counter never falls behind an existing id.
        """
        if not partial or not isinstance(partial, dict):
            return

        for key, value in partial.items():
            if value is None:
                continue
            name = resolve_key(key)
            if name is None:
                logger.debug("Ignoring unknown state key %r", key)
                continue
            if name == "wheel_base":
                value = clamp(value, WHEELBASE_MIN, WHEELBASE_MAX)
            elif name == "body_control_points":
                value = coerce_control_points(value)
            elif name == "next_control_point_id":
                if (isinstance(value, bool) or not isinstance(value, (int, float))
                        or not math.isfinite(value)):
                    raise ValueError(f"nextControlPointId must be a finite number, got {value!r}")
                value = int(value)
            setattr(self.state, name, value)

        self._sync_control_point_counter()

        if not silent:
            self.notify(**context)

    def replace_state(self, new_state: Union[ParameterState, dict[str, Any]],
                      silent: bool = False, **context: Any) -> None:
        """Adopt *new_state* wholesale; keys missing from a mapping reset to defaults."""
        if isinstance(new_state, ParameterState):
            self.state = new_state.copy()
            self.state.body_control_points = coerce_control_points(self.state.body_control_points)
            self._sync_control_point_counter()
        elif isinstance(new_state, dict):
            fresh = ParameterState()
            self.state = fresh
            self.set_state(new_state, silent=True)
        else:
            return
        self.state.wheel_base = clamp(self.state.wheel_base, WHEELBASE_MIN, WHEELBASE_MAX)

        if not silent:
            context.setdefault("replaced", True)
            self.notify(**context)

    # ── Body control points ───────────────────────────────────────────

    def _sync_control_point_counter(self) -> None:
        self.state.next_control_point_id = next_free_control_point_id(
            self.state.body_control_points, self.state.next_control_point_id)

    def get_body_control_points(self, segment_id: str) -> list[AnyControlPoint]:
        return list(self.state.body_control_points.get(segment_id, []))

    def add_body_control_point(self, segment_id: str, t: float) -> Optional[int]:
        """Insert a hard point at *t*; returns its id, or None when the segment is full."""
        if segment_id not in SEGMENT_IDS:
            logger.debug("Cannot add control point to unknown segment %r", segment_id)
            return None
        points = self.state.body_control_points.setdefault(segment_id, [])
        if len(points) >= MAX_CONTROL_POINTS_PER_SEGMENT:
            logger.debug("Segment %s already holds %d control points", segment_id, len(points))
            return None

        point_id = self.state.next_control_point_id
        self.state.next_control_point_id += 1
        points.append(create_control_point(point_id, t))
        self.notify()
        return point_id

    def remove_body_control_point(self, segment_id: str, point_id: int) -> None:
        points = self.state.body_control_points.get(segment_id)
        if not points:
            return
        self.state.body_control_points[segment_id] = [p for p in points if p.id != point_id]
        self.notify()

    def update_body_control_point(
        self,
        segment_id: str,
        point_id: int,
        t: Optional[float] = None,
        offset_parallel: Optional[float] = None,
        offset_perpendicular: Optional[float] = None,
        silent: bool = False,
    ) -> None:
        if not self._replace_point(
            segment_id, point_id,
            lambda p: with_offsets(p, t, offset_parallel, offset_perpendicular),
        ):
            return
        if not silent:
            self.notify()

    def set_body_control_point_mode(self, segment_id: str, point_id: int,
                                    mode: Union[ControlPointMode, str]) -> None:
        if not self._replace_point(segment_id, point_id, lambda p: with_mode(p, mode)):
            return
        self.notify()

    def update_body_control_point_handle(
        self,
        segment_id: str,
        point_id: int,
        handle_key: str,
        values: Union[Handle, dict],
        symmetric_mode: bool = False,
        silent: bool = False,
    ) -> None:
        if not self._replace_point(
            segment_id, point_id,
            lambda p: with_handle(p, handle_key, values, symmetric_mode),
        ):
            return
        if not silent:
            self.notify()

    def _replace_point(self, segment_id: str, point_id: int,
                       update: Callable[[AnyControlPoint], AnyControlPoint]) -> bool:
        points = self.state.body_control_points.get(segment_id)
        if not points:
            return False
        for i, point in enumerate(points):
            if point.id == point_id:
                points[i] = update(point)
                return True
        logger.debug("No control point %s on segment %s", point_id, segment_id)
        return False
