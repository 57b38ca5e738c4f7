"""Body contour: seven segments through the body anchors, shaped by control points.

Each segment supplies a local basis (unit tangent plus its normal) so control
points and their handles are stored relative to the segment and follow it
when the anchors move.  The composite path walks every segment's knots in
order, emitting a straight line between knots without handles and a cubic
bezier otherwise.
"""

import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence

from carforge.constants import (
    BODY_SEGMENTS,
    POINT_EPS,
    SCALE,
    SEGMENT_ENDPOINT_RADIUS,
    SEGMENT_OVERLAY_GAP,
)
from carforge.chassis.control_points import AnyControlPoint, ControlPoint, Handle
from carforge.chassis.path import PathCommand, curve_to, line_to, move_to
from carforge.core.math_utils import Vec2, as_vec2, clamp, dot, length, points_equal, vec2

logger = logging.getLogger(__name__)


@dataclass
class Segment:
    id: str
    label: str
    start_key: str
    end_key: str
    start: Vec2
    end: Vec2
    length_px: float
    unit: Vec2
    normal: Vec2

    @property
    def length_mm(self) -> float:
        return self.length_px / SCALE

    def point_at(self, t: float) -> Vec2:
        return self.start + self.unit * (t * self.length_px)


def make_segment(seg_id: str, start, end, label: str = "",
                 start_key: str = "", end_key: str = "") -> Segment:
    """Build a segment basis; a zero-length segment gets length 1 along +x."""
    start = as_vec2(start)
    end = as_vec2(end)
    span = end - start
    seg_length = length(span)
    if seg_length == 0:
        seg_length = 1.0
        unit = vec2(1.0, 0.0)
    else:
        unit = span / seg_length
    normal = vec2(-unit[1], unit[0])
    return Segment(seg_id, label, start_key, end_key, start, end, seg_length, unit, normal)


def build_segments(point_map: Mapping[str, Vec2]) -> list[Segment]:
    """Segments in contour order; segments with a missing anchor are skipped."""
    segments = []
    for seg_id, label, start_key, end_key in BODY_SEGMENTS:
        start = point_map.get(start_key)
        end = point_map.get(end_key)
        if start is None or end is None:
            logger.debug("Skipping segment %s: missing anchor", seg_id)
            continue
        segments.append(make_segment(seg_id, start, end, label, start_key, end_key))
    return segments


# ── Segment-relative coordinates ──────────────────────────────────────

def control_point_world_position(segment: Segment, point: ControlPoint) -> Vec2:
    base = segment.point_at(point.t)
    return (base
            + segment.unit * (point.offset_parallel * SCALE)
            + segment.normal * (point.offset_perpendicular * SCALE))


def handle_world_position(segment: Segment, anchor: Vec2, handle: Handle) -> Vec2:
    return (anchor
            + segment.unit * (handle.parallel * SCALE)
            + segment.normal * (handle.perpendicular * SCALE))


@dataclass(frozen=True)
class RelativePosition:
    t: float
    offset_parallel: float
    offset_perpendicular: float


def world_to_relative(segment: Segment, point) -> RelativePosition:
    """Re-project a world point onto *segment*.

    ``t`` is clamped to [0, 1]; any distance past either end is kept as
    ``offset_parallel`` so a dragged point can overshoot smoothly.
    """
    v = as_vec2(point) - segment.start
    along = dot(v, segment.unit)
    clamped = clamp(along, 0.0, segment.length_px)
    return RelativePosition(
        t=clamped / segment.length_px,
        offset_parallel=(along - clamped) / SCALE,
        offset_perpendicular=dot(v, segment.normal) / SCALE,
    )


def handle_from_world(segment: Segment, anchor: Vec2, point) -> Handle:
    """Handle vector (mm, segment frame) pointing from *anchor* to *point*."""
    v = as_vec2(point) - as_vec2(anchor)
    return Handle(dot(v, segment.unit) / SCALE, dot(v, segment.normal) / SCALE)


def project_point_to_segment(point, start, end) -> float:
    """Parametric position of the closest point on start-end, clamped to [0, 1]."""
    start = as_vec2(start)
    v = as_vec2(end) - start
    len_sq = dot(v, v)
    if len_sq == 0:
        return 0.0
    return clamp(dot(as_vec2(point) - start, v) / len_sq, 0.0, 1.0)


def is_near_segment_endpoint(point, segment: Segment,
                             radius: float = SEGMENT_ENDPOINT_RADIUS) -> bool:
    p = as_vec2(point)
    return length(p - segment.start) < radius or length(p - segment.end) < radius


def trimmed_segment(segment: Segment, gap: float = SEGMENT_OVERLAY_GAP) -> tuple[Vec2, Vec2]:
    """Segment shortened by *gap* at both ends, leaving the anchors clickable."""
    trim = min(gap, segment.length_px / 2 - 0.1)
    if trim <= 0:
        return segment.start, segment.end
    return segment.start + segment.unit * trim, segment.end - segment.unit * trim


# ── Path assembly ─────────────────────────────────────────────────────

@dataclass
class Knot:
    t: float
    point: Vec2
    handle_in: Optional[Vec2] = None
    handle_out: Optional[Vec2] = None
    point_id: Optional[int] = None


def control_point_knot(segment: Segment, cp: AnyControlPoint) -> Knot:
    anchor = control_point_world_position(segment, cp)
    if not cp.has_handles:
        return Knot(clamp(cp.t, 0.0, 1.0), anchor, point_id=cp.id)
    return Knot(
        clamp(cp.t, 0.0, 1.0),
        anchor,
        handle_in=handle_world_position(segment, anchor, cp.handle_in),
        handle_out=handle_world_position(segment, anchor, cp.handle_out),
        point_id=cp.id,
    )


def segment_knots(segment: Segment, control_points: Sequence[AnyControlPoint] = ()) -> list[Knot]:
    knots = [Knot(0.0, segment.start)]
    knots.extend(control_point_knot(segment, cp) for cp in sorted(control_points, key=lambda p: p.t))
    knots.append(Knot(1.0, segment.end))
    # Stable: a point at t=0 stays after the segment start
    return sorted(knots, key=lambda k: k.t)


def curve_command(prev: Knot, nxt: Knot) -> PathCommand:
    if prev.handle_out is None and nxt.handle_in is None:
        return line_to(nxt.point)
    c1 = prev.handle_out if prev.handle_out is not None else prev.point
    c2 = nxt.handle_in if nxt.handle_in is not None else nxt.point
    return curve_to(c1, c2, nxt.point)


@dataclass
class BodyContour:
    segments: list[Segment]
    knots: dict[str, list[Knot]] = field(default_factory=dict)
    commands: list[PathCommand] = field(default_factory=list)

    def segment(self, seg_id: str) -> Optional[Segment]:
        for seg in self.segments:
            if seg.id == seg_id:
                return seg
        return None


def build_body_contour(segments: Sequence[Segment],
                       control_points: Mapping[str, Sequence[AnyControlPoint]]) -> BodyContour:
    """Walk all segments and assemble the composite body path."""
    contour = BodyContour(list(segments))
    last: Optional[Knot] = None
    for seg in segments:
        knots = segment_knots(seg, control_points.get(seg.id, ()))
        contour.knots[seg.id] = knots
        for index, knot in enumerate(knots):
            if last is None:
                contour.commands.append(move_to(knot.point))
                last = knot
                continue
            if index == 0 and points_equal(last.point, knot.point, POINT_EPS):
                continue
            contour.commands.append(curve_command(last, knot))
            last = knot
    return contour
