"""User-placed bezier control points on body-contour segments.

A control point lives in the local frame of its segment: ``t`` is the
parametric position along the segment, the offsets and handles are
millimetre distances along the segment tangent (``parallel``) and its
normal (``perpendicular``).  Keeping everything segment-relative means a
point follows the contour when the segment's endpoints move.

Handle presence depends on the point's mode, so each mode is its own
type:

* ``HardPoint``       -- a sharp corner, no handles.
* ``SymmetricPoint``  -- one stored handle; ``handle_in`` is always its mirror.
* ``AsymmetricPoint`` -- two independent handles.

All variants expose ``handle_in`` / ``handle_out`` so the contour builder
can treat them uniformly.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Optional, Union

from carforge.constants import DEFAULT_HANDLE_LENGTH
from carforge.core.math_utils import clamp

logger = logging.getLogger(__name__)


class ControlPointMode(str, Enum):
    HARD = "hard"
    SYMMETRIC = "symmetric"
    ASYMMETRIC = "asymmetric"


HANDLE_KEYS = ("handleIn", "handleOut")


@dataclass(frozen=True)
class Handle:
    """Handle vector relative to its control point (mm, segment frame)."""
    parallel: float = 0.0
    perpendicular: float = 0.0

    def __neg__(self) -> Handle:
        return Handle(-self.parallel, -self.perpendicular)

    @property
    def is_zero(self) -> bool:
        return self.parallel == 0 and self.perpendicular == 0

    def to_dict(self) -> dict[str, float]:
        return {"parallel": self.parallel, "perpendicular": self.perpendicular}

    @classmethod
    def from_dict(cls, d: Any) -> Handle:
        if d is None:
            return cls()
        if not isinstance(d, dict):
            raise ValueError(f"Handle must be an object, got {type(d).__name__}")
        return cls(_number(d.get("parallel", 0.0), "parallel"),
                   _number(d.get("perpendicular", 0.0), "perpendicular"))


ZERO_HANDLE = Handle()
DEFAULT_HANDLE_IN = Handle(0.0, DEFAULT_HANDLE_LENGTH)
DEFAULT_HANDLE_OUT = Handle(0.0, -DEFAULT_HANDLE_LENGTH)


@dataclass
class ControlPoint:
    """Fields shared by every control point variant."""
    id: int
    t: float
    offset_parallel: float = 0.0
    offset_perpendicular: float = 0.0

    mode = ControlPointMode.HARD

    @property
    def has_handles(self) -> bool:
        return self.mode is not ControlPointMode.HARD

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "t": self.t,
            "offsetParallel": self.offset_parallel,
            "offsetPerpendicular": self.offset_perpendicular,
            "mode": self.mode.value,
            "handleIn": self.handle_in.to_dict(),
            "handleOut": self.handle_out.to_dict(),
        }


@dataclass
class HardPoint(ControlPoint):
    mode = ControlPointMode.HARD

    @property
    def handle_in(self) -> Handle:
        return ZERO_HANDLE

    @property
    def handle_out(self) -> Handle:
        return ZERO_HANDLE


@dataclass
class SymmetricPoint(ControlPoint):
    handle: Handle = DEFAULT_HANDLE_OUT

    mode = ControlPointMode.SYMMETRIC

    @property
    def handle_in(self) -> Handle:
        return -self.handle

    @property
    def handle_out(self) -> Handle:
        return self.handle


@dataclass
class AsymmetricPoint(ControlPoint):
    handle_in: Handle = DEFAULT_HANDLE_IN
    handle_out: Handle = DEFAULT_HANDLE_OUT

    mode = ControlPointMode.ASYMMETRIC


AnyControlPoint = Union[HardPoint, SymmetricPoint, AsymmetricPoint]


def create_control_point(point_id: int, t: float) -> HardPoint:
    """New points start as hard corners sitting on the segment."""
    return HardPoint(id=point_id, t=clamp(float(t), 0.0, 1.0))


def with_offsets(
    point: AnyControlPoint,
    t: Optional[float] = None,
    offset_parallel: Optional[float] = None,
    offset_perpendicular: Optional[float] = None,
) -> AnyControlPoint:
    """Return *point* with the given position fields replaced (``t`` clamped)."""
    changes: dict[str, float] = {}
    if t is not None:
        changes["t"] = clamp(float(t), 0.0, 1.0)
    if offset_parallel is not None:
        changes["offset_parallel"] = float(offset_parallel)
    if offset_perpendicular is not None:
        changes["offset_perpendicular"] = float(offset_perpendicular)
    return replace(point, **changes) if changes else point


def with_mode(point: AnyControlPoint, mode: Union[ControlPointMode, str]) -> AnyControlPoint:
    """Convert *point* to another mode.

    * hard: both handles are dropped.
    * symmetric: keeps the outgoing handle, seeding the default when it is
      zero; the incoming handle becomes its mirror.
    * asymmetric: keeps existing handles, seeds defaults when both are zero.
    """
    mode = ControlPointMode(mode)
    base = dict(
        id=point.id,
        t=point.t,
        offset_parallel=point.offset_parallel,
        offset_perpendicular=point.offset_perpendicular,
    )
    handle_in, handle_out = point.handle_in, point.handle_out

    if mode is ControlPointMode.HARD:
        return HardPoint(**base)

    if mode is ControlPointMode.SYMMETRIC:
        handle = handle_out if not handle_out.is_zero else DEFAULT_HANDLE_OUT
        return SymmetricPoint(handle=handle, **base)

    if handle_in.is_zero and handle_out.is_zero:
        handle_in, handle_out = DEFAULT_HANDLE_IN, DEFAULT_HANDLE_OUT
    return AsymmetricPoint(handle_in=handle_in, handle_out=handle_out, **base)


def with_handle(
    point: AnyControlPoint,
    handle_key: str,
    values: Union[Handle, dict],
    symmetric_mode: bool = False,
) -> AnyControlPoint:
    """Move one handle of *point*.

    Symmetric points always mirror the update to the opposite handle;
    asymmetric points mirror only when ``symmetric_mode`` is set.  Hard
    points have no handles and are returned unchanged.
    """
    if handle_key not in HANDLE_KEYS:
        raise ValueError(f"Unknown handle key: {handle_key!r}")
    handle = values if isinstance(values, Handle) else Handle.from_dict(values)

    if isinstance(point, HardPoint):
        logger.debug("Ignoring handle update on hard control point %d", point.id)
        return point

    if isinstance(point, SymmetricPoint):
        return replace(point, handle=handle if handle_key == "handleOut" else -handle)

    if handle_key == "handleIn":
        handle_in = handle
        handle_out = -handle if symmetric_mode else point.handle_out
    else:
        handle_out = handle
        handle_in = -handle if symmetric_mode else point.handle_in
    return replace(point, handle_in=handle_in, handle_out=handle_out)


def control_point_from_dict(d: Any) -> AnyControlPoint:
    """Rebuild a control point from its persisted form.

    Raises ValueError on malformed input.
    """
    if not isinstance(d, dict):
        raise ValueError(f"Control point must be an object, got {type(d).__name__}")
    if "id" not in d:
        raise ValueError("Control point is missing its id")
    point_id = d["id"]
    if (isinstance(point_id, bool) or not isinstance(point_id, (int, float))
            or not math.isfinite(point_id) or point_id != int(point_id)):
        raise ValueError(f"Control point id must be an integer, got {point_id!r}")

    base = dict(
        id=int(point_id),
        t=clamp(_number(d.get("t", 0.0), "t"), 0.0, 1.0),
        offset_parallel=_number(d.get("offsetParallel", 0.0), "offsetParallel"),
        offset_perpendicular=_number(d.get("offsetPerpendicular", 0.0), "offsetPerpendicular"),
    )
    try:
        mode = ControlPointMode(d.get("mode", "hard"))
    except ValueError:
        raise ValueError(f"Unknown control point mode: {d.get('mode')!r}") from None

    handle_in = Handle.from_dict(d.get("handleIn"))
    handle_out = Handle.from_dict(d.get("handleOut"))
    if mode is ControlPointMode.HARD:
        return HardPoint(**base)
    if mode is ControlPointMode.SYMMETRIC:
        handle = handle_out if not handle_out.is_zero else -handle_in
        return SymmetricPoint(handle=handle, **base)
    return AsymmetricPoint(handle_in=handle_in, handle_out=handle_out, **base)


def _number(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {value!r}")
    return float(value)
