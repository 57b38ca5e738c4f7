"""Profile JSON reader/writer.

A profile is a flat camelCase object holding every ParameterState field,
plus ``bodyControlPoints`` (segment id -> list of point objects) and
``nextControlPointId``.  Numbers are rounded to two decimals on save;
loading never rounds.
"""

import json
import logging
import math
import re
from pathlib import Path
from typing import Any

from carforge.constants import PROFILE_DECIMALS
from carforge.core.state import (
    BOOL_FIELDS,
    FIELD_TO_CAMEL,
    NUMERIC_FIELDS,
    STR_FIELDS,
    ParameterState,
    coerce_control_points,
    next_free_control_point_id,
    resolve_key,
)

logger = logging.getLogger(__name__)


class ProfileError(ValueError):
    """Raised for profile files that cannot be turned into a state."""


def round_values(obj: Any, decimals: int = PROFILE_DECIMALS) -> Any:
    """Recursively round floats half-up; ints, bools and strings pass through."""
    if isinstance(obj, bool) or isinstance(obj, int):
        return obj
    if isinstance(obj, float):
        if not math.isfinite(obj):
            return obj
        factor = 10 ** decimals
        return math.floor(obj * factor + 0.5) / factor
    if isinstance(obj, list):
        return [round_values(item, decimals) for item in obj]
    if isinstance(obj, dict):
        return {key: round_values(value, decimals) for key, value in obj.items()}
    return obj


def state_to_profile_dict(state: ParameterState, rounded: bool = True) -> dict[str, Any]:
    data: dict[str, Any] = {}
    for name, camel in FIELD_TO_CAMEL.items():
        if name == "body_control_points":
            data[camel] = {
                segment_id: [p.to_dict() for p in points]
                for segment_id, points in state.body_control_points.items()
            }
        else:
            data[camel] = getattr(state, name)
    return round_values(data) if rounded else data


def _check_number(key: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ProfileError(f"{key} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise ProfileError(f"{key} must be finite, got {value!r}")
    return value


def _control_points_from_profile(raw: Any) -> dict[str, list]:
    try:
        return coerce_control_points(raw)
    except ValueError as e:
        raise ProfileError(f"Bad bodyControlPoints: {e}") from e


def profile_dict_to_partial(data: Any) -> dict[str, Any]:
    """Validate a parsed profile and convert it to a snake_case state partial.

    Unknown keys are ignored.  A missing ``bodyControlPoints`` yields an
    empty map so stale edits never survive a load.
    """
    if not isinstance(data, dict):
        raise ProfileError(f"Profile root must be an object, got {type(data).__name__}")

    partial: dict[str, Any] = {}
    for key, value in data.items():
        name = resolve_key(key)
        if name is None:
            logger.debug("Ignoring unknown profile key %r", key)
            continue
        if value is None:
            continue
        if name in NUMERIC_FIELDS:
            partial[name] = _check_number(key, value)
        elif name in BOOL_FIELDS:
            if not isinstance(value, bool):
                raise ProfileError(f"{key} must be true or false, got {value!r}")
            partial[name] = value
        elif name in STR_FIELDS:
            if not isinstance(value, str):
                raise ProfileError(f"{key} must be a string, got {value!r}")
            partial[name] = value

    partial["body_control_points"] = _control_points_from_profile(data.get("bodyControlPoints"))

    next_id = _check_number("nextControlPointId", data.get("nextControlPointId", 1))
    partial["next_control_point_id"] = next_free_control_point_id(
        partial["body_control_points"], next_id)
    return partial


def profile_dict_to_state(data: Any) -> ParameterState:
    """Fresh defaults overlaid with the profile's values."""
    state = ParameterState()
    for name, value in profile_dict_to_partial(data).items():
        setattr(state, name, value)
    return state


def parse_profile(text: str) -> ParameterState:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ProfileError(f"Profile is not valid JSON: {e}") from e
    return profile_dict_to_state(data)


def dumps_profile(state: ParameterState) -> str:
    return json.dumps(state_to_profile_dict(state), indent=2)


def load_profile(path) -> ParameterState:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ProfileError(f"Cannot read profile {path}: {e}") from e
    state = parse_profile(text)
    logger.info("Loaded profile %s", path.name)
    return state


def save_profile(state: ParameterState, path) -> Path:
    path = Path(path)
    path.write_text(dumps_profile(state), encoding="utf-8")
    logger.info("Saved profile %s", path.name)
    return path


def profile_filename(name: str) -> str:
    """``"My Car 2"`` -> ``"my-car-2.json"``."""
    return re.sub(r"\s+", "-", name.strip()).lower() + ".json"
