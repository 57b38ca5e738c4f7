"""Synchronous recompute of all derived geometry after every state mutation.

Order per pass:
  1. Passenger offsets synced to wheelbase / driver hip changes
  2. Chassis geometry (wheels, arches, tangents, tips, body anchors)
  3. Body contour segments and the composite path
  4. Poses for the driver and every visible passenger row
  5. Driver recline written back when the arm reach clamped it
  6. ``EventType.GEOMETRY_UPDATED`` published with the new scene
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from carforge.body.pose_solver import Pose, compute_pose
from carforge.body.rows import DRIVER_ROW, ROWS
from carforge.chassis.contour import (
    BodyContour,
    build_body_contour,
    build_segments,
    control_point_world_position,
    handle_from_world,
    is_near_segment_endpoint,
    project_point_to_segment,
    world_to_relative,
)
from carforge.chassis.geometry import ChassisGeometry, solve_chassis
from carforge.chassis.path import PathCommand, to_svg_path
from carforge.coordination.occupants import PassengerSync
from carforge.core.events import EventType
from carforge.core.math_utils import round_half_up
from carforge.core.state import ParameterState, StateManager

logger = logging.getLogger(__name__)


@dataclass
class DerivedScene:
    """Everything the renderer draws, derived from one state snapshot."""
    chassis: ChassisGeometry
    contour: BodyContour
    poses: dict[str, Optional[Pose]] = field(default_factory=dict)

    @property
    def driver(self) -> Optional[Pose]:
        return self.poses.get(DRIVER_ROW.name)

    @property
    def body_commands(self) -> list[PathCommand]:
        return self.contour.commands

    @property
    def body_path(self) -> str:
        return to_svg_path(self.contour.commands)

    @property
    def outline_path(self) -> str:
        return to_svg_path(self.chassis.outline_commands())


def derive_scene(state: ParameterState) -> DerivedScene:
    """Pure recompute: no writes to *state*."""
    chassis = solve_chassis(state)
    segments = build_segments(chassis.point_map())
    contour = build_body_contour(segments, state.body_control_points)
    poses = {name: compute_pose(state, row, chassis) for name, row in ROWS.items()}
    return DerivedScene(chassis=chassis, contour=contour, poses=poses)


class GeometryPipeline:
    """Recomputes the scene whenever the StateManager notifies.

    Attach before any other STATE_CHANGED subscriber so those see fresh
    geometry.
    """

    def __init__(self, state_manager: StateManager,
                 passenger_sync: Optional[PassengerSync] = None):
        self.state_manager = state_manager
        self.passenger_sync = passenger_sync if passenger_sync is not None else PassengerSync()
        self.scene: Optional[DerivedScene] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    def attach(self) -> None:
        if self._unsubscribe is not None:
            return
        self.passenger_sync.reset(self.state_manager.get_state())
        self._unsubscribe = self.state_manager.subscribe(self._on_state_changed)
        self.recompute()

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_state_changed(self, state: ParameterState, context: dict) -> None:
        if context.get("replaced"):
            self.passenger_sync.reset(state)
        else:
            updates = self.passenger_sync.updates_for(state)
            if updates:
                self.state_manager.set_state(updates, silent=True)
        self.recompute()

    def recompute(self) -> DerivedScene:
        state = self.state_manager.get_state()
        scene = derive_scene(state)
        self._write_back_recline(state, scene.driver)
        self.scene = scene
        self.state_manager.event_bus.publish(EventType.GEOMETRY_UPDATED, scene=scene)
        return scene

    def _write_back_recline(self, state: ParameterState, pose: Optional[Pose]) -> None:
        if pose is None or not pose.recline_clamped:
            return
        actual = round_half_up(pose.actual_recline_angle)
        if actual != state.body_recline_angle:
            logger.debug("Driver recline limited by arm reach: %s -> %d",
                         state.body_recline_angle, actual)
            self.state_manager.set_state({"body_recline_angle": actual}, silent=True)

    # ── Control point gestures ────────────────────────────────────────

    def add_control_point_at(self, segment_id: str, point) -> Optional[int]:
        """Add a control point where *point* projects onto the segment.

        Clicks on a segment's endpoints are ignored.
        """
        if self.scene is None:
            self.recompute()
        segment = self.scene.contour.segment(segment_id)
        if segment is None or is_near_segment_endpoint(point, segment):
            return None
        t = project_point_to_segment(point, segment.start, segment.end)
        return self.state_manager.add_body_control_point(segment_id, t)

    def drag_control_point(self, segment_id: str, point_id: int, point) -> None:
        """Move a control point under the pointer and refresh the path."""
        if self.scene is None:
            self.recompute()
        segment = self.scene.contour.segment(segment_id)
        if segment is None:
            return
        rel = world_to_relative(segment, point)
        self.state_manager.update_body_control_point(
            segment_id, point_id, t=rel.t,
            offset_parallel=rel.offset_parallel,
            offset_perpendicular=rel.offset_perpendicular,
            silent=True,
        )
        self.recompute()

    def drag_control_point_handle(self, segment_id: str, point_id: int,
                                  handle_key: str, point) -> None:
        if self.scene is None:
            self.recompute()
        segment = self.scene.contour.segment(segment_id)
        if segment is None:
            return
        cp = next((p for p in self.state_manager.get_body_control_points(segment_id)
                   if p.id == point_id), None)
        if cp is None:
            return
        anchor = control_point_world_position(segment, cp)
        self.state_manager.update_body_control_point_handle(
            segment_id, point_id, handle_key,
            handle_from_world(segment, anchor, point),
            silent=True,
        )
        self.recompute()
