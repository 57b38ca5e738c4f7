"""CarForge session wiring and command-line entry point.

Builds the state container, limits, geometry pipeline and profile list
in the order they must subscribe: the pipeline first so every later
listener sees fresh geometry.

Usage::

    # Dimensions of the default vehicle:
    python -m carforge

    # Load a saved profile and export the silhouette:
    python -m carforge --profile my-car.json --svg my-car.svg

    # Machine-readable summary:
    python -m carforge --profile my-car.json --json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

from carforge.coordination.occupants import PassengerSync, default_passenger_offsets
from carforge.coordination.profile_manager import ProfileManager
from carforge.coordination.recompute import DerivedScene, GeometryPipeline
from carforge.core.events import EventBus
from carforge.core.parameter_limits import ParameterLimits
from carforge.core.state import ParameterState, StateManager
from carforge.loaders.profile_io import ProfileError

logger = logging.getLogger(__name__)


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(level=level, format="%(name)s: %(message)s")


@dataclass
class Session:
    state_manager: StateManager
    limits: ParameterLimits
    pipeline: GeometryPipeline
    profiles: ProfileManager

    @property
    def event_bus(self) -> EventBus:
        return self.state_manager.event_bus

    @property
    def scene(self) -> DerivedScene | None:
        return self.pipeline.scene


def build_session(state: ParameterState | None = None) -> Session:
    """Wire a ready-to-use editing session around *state* (defaults if None)."""
    state_manager = StateManager(state)

    limits = ParameterLimits()
    limits.load()

    if state is None:
        state_manager.set_state(default_passenger_offsets(state_manager.get_state()), silent=True)

    pipeline = GeometryPipeline(state_manager, PassengerSync(limits))
    pipeline.attach()

    profiles = ProfileManager(state_manager)
    return Session(state_manager=state_manager, limits=limits,
                   pipeline=pipeline, profiles=profiles)


# ── Command line ──────────────────────────────────────────────────────

def _polyline(points) -> str:
    return " ".join(f"{p[0]:.2f},{p[1]:.2f}" for p in points if p is not None)


def scene_to_svg(scene: DerivedScene, width: int = 1920, height: int = 700) -> str:
    """Standalone SVG document of the silhouette, wheels and occupants."""
    c = scene.chassis
    parts = [
        f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 {width} {height}">',
        f'  <path d="{scene.body_path}" fill="none" stroke="black" stroke-width="2"/>',
        f'  <path d="{scene.outline_path}" fill="none" stroke="black" stroke-width="2"/>',
    ]
    for x in (c.front_wheel_x, c.rear_wheel_x):
        parts.append(f'  <circle cx="{x:.2f}" cy="{c.wheel_y:.2f}" r="{c.tire_radius_px:.2f}" '
                     f'fill="none" stroke="gray"/>')
    for pose in scene.poses.values():
        if pose is None:
            continue
        chains = [
            (pose.head, pose.shoulder, pose.hip, pose.knee, pose.heel, pose.bottom_foot),
            (pose.shoulder, pose.elbow, pose.hand),
        ]
        for chain in chains:
            if sum(p is not None for p in chain) > 1:
                parts.append(f'  <polyline points="{_polyline(chain)}" fill="none" stroke="steelblue"/>')
    parts.append("</svg>")
    return "\n".join(parts) + "\n"


def scene_summary(session: Session) -> dict:
    scene = session.scene
    state = session.state_manager.get_state()
    return {
        "overall_length_mm": round(scene.chassis.overall_length_mm, 1),
        "overall_height_mm": round(scene.chassis.overall_height_mm, 1),
        "wheel_base_mm": state.wheel_base,
        "body_recline_angle": state.body_recline_angle,
        "occupants": sorted(name for name, pose in scene.poses.items() if pose is not None),
        "body_path": scene.body_path,
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="carforge",
        description="Vehicle side-profile silhouette and occupant packaging",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--profile", type=Path, default=None, metavar="FILE",
        help="Profile JSON to load (default: built-in defaults)",
    )
    parser.add_argument(
        "--svg", type=Path, default=None, metavar="FILE",
        help="Write the silhouette as an SVG document",
    )
    parser.add_argument(
        "--json", action="store_true",
        help="Print a JSON summary instead of plain text",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable verbose logging",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)

    session = build_session()
    if args.profile is not None:
        try:
            session.profiles.load_profile(args.profile)
        except ProfileError as e:
            print(f"carforge: {e}", file=sys.stderr)
            return 1

    summary = scene_summary(session)
    if args.json:
        print(json.dumps(summary, indent=2))
    else:
        print(f"Length: {summary['overall_length_mm']:.0f} mm")
        print(f"Height: {summary['overall_height_mm']:.0f} mm")
        print(f"Occupants: {', '.join(summary['occupants']) or 'none'}")

    if args.svg is not None:
        args.svg.write_text(scene_to_svg(session.scene), encoding="utf-8")
        logger.info("Wrote %s", args.svg)
    return 0
