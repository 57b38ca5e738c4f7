"""Shared constants and paths for CarForge."""

from pathlib import Path

# Project paths
PACKAGE_ROOT = Path(__file__).parent
ASSETS_DIR = PACKAGE_ROOT / "assets"
CONFIG_DIR = ASSETS_DIR / "config"

# Rendering plane: 1 mm of vehicle space = SCALE rendering units
SCALE = 0.25
GROUND_Y = 590.0
CENTER_X = 960.0

# Wheelbase slider range (mm)
WHEELBASE_MIN = 1800
WHEELBASE_MAX = 3600

# Tangent guide lines extend this far either side of the contact point
TANGENT_LINE_LENGTH = 200.0
# Below this |direction.x| a tangent is treated as vertical
VERTICAL_TANGENT_EPS = 1e-3
# Knots closer than this are considered the same point
POINT_EPS = 1e-3

# Body contour
MAX_CONTROL_POINTS_PER_SEGMENT = 2
DEFAULT_HANDLE_LENGTH = 150.0  # mm, perpendicular to the segment
SEGMENT_ENDPOINT_RADIUS = 20.0
SEGMENT_OVERLAY_GAP = 20.0

# Body anchors: x is measured backwards from the reference axle, y upwards
# from wheel-centre height.
BODY_POINT_CONFIG = {
    "frontFaceBreak": {
        "x_key": "front_face_break_x", "y_key": "front_face_break_y",
        "reference": "front", "label": "Front Face Break",
    },
    "bonnetEnd": {
        "x_key": "bonnet_end_x", "y_key": "bonnet_end_y",
        "reference": "front", "label": "Bonnet End",
    },
    "windowEnd": {
        "x_key": "window_end_x", "y_key": "window_end_y",
        "reference": "front", "label": "Window End",
    },
    "rooftopEnd": {
        "x_key": "rooftop_end_x", "y_key": "rooftop_end_y",
        "reference": "rear", "label": "Rooftop End",
    },
    "rearWindowEnd": {
        "x_key": "rear_window_end_x", "y_key": "rear_window_end_y",
        "reference": "rear", "label": "Rear Window End",
    },
    "bumperEnd": {
        "x_key": "bumper_end_x", "y_key": "bumper_end_y",
        "reference": "rear", "label": "Bumper End",
    },
}

# Front face break drag range (mm)
FRONT_FACE_BREAK_X_RANGE = (400, 1500)
FRONT_FACE_BREAK_Y_RANGE = (0, 800)

# Ordered body segments: (id, label, start anchor, end anchor)
BODY_SEGMENTS = [
    ("front-face", "Front face", "frontTip", "frontFaceBreak"),
    ("bonnet", "Bonnet", "frontFaceBreak", "bonnetEnd"),
    ("windscreen", "Windscreen", "bonnetEnd", "windowEnd"),
    ("rooftop", "Rooftop", "windowEnd", "rooftopEnd"),
    ("rear-window", "Rear Window", "rooftopEnd", "rearWindowEnd"),
    ("rear-door", "Rear Door", "rearWindowEnd", "bumperEnd"),
    ("rear-bump", "Rear bump", "bumperEnd", "rearTip"),
]
SEGMENT_IDS = [seg_id for seg_id, _, _, _ in BODY_SEGMENTS]

# Reference mannequin asset (pixel coordinates inside the figure image)
ASSET_PARENT_OFFSET = (397.0, 99.0)
ASSET_COORDS = {
    "hip": (591.97, 542.85),
    "knee": (284.26, 515.53),
    "heel": (73.0, 832.0),
    "head": (818.0, 0.0),
    "shoulder": (759.49, 224.21),
    "elbow": (557.38, 331.64),
    "hand": (256.0, 307.0),
}
# Sole of the foot below the knee in the reference image
ASSET_FOOT_END = (0.0, 793.0)
ASSET_PIVOTS = {
    "body": (51.74, 531.88),
    "big_arm": (216.68, 23.67),
    "small_arm": (322.46, 46.88),
    "big_leg": (331.38, 61.91),
    "small_leg": (356.26, 27.31),
}

# Anthropometric ratios (fraction of stature)
THIGH_RATIO = 0.245
SHIN_RATIO = 0.246

# Reach clamping factors keep acos() strictly inside its domain
MAX_REACH_FACTOR = 0.999
MIN_REACH_FACTOR = 1.001

# Profile persistence
PROFILE_DECIMALS = 2
