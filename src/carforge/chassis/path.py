"""SVG-style path commands produced by the chassis and body contour builders."""

from dataclasses import dataclass
from typing import Sequence, Union

Point = tuple[float, float]


def _pt(p) -> Point:
    return (float(p[0]), float(p[1]))


def format_number(value: float) -> str:
    """Compact decimal text: no trailing zeros, no ``-0``."""
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


@dataclass(frozen=True)
class MoveTo:
    end: Point
    letter = "M"

    def to_svg(self) -> str:
        return f"M {format_number(self.end[0])} {format_number(self.end[1])}"


@dataclass(frozen=True)
class LineTo:
    end: Point
    letter = "L"

    def to_svg(self) -> str:
        return f"L {format_number(self.end[0])} {format_number(self.end[1])}"


@dataclass(frozen=True)
class CurveTo:
    """Cubic bezier to *end* with control points *c1* and *c2*."""
    c1: Point
    c2: Point
    end: Point
    letter = "C"

    def to_svg(self) -> str:
        coords = (*self.c1, *self.c2, *self.end)
        return "C " + " ".join(format_number(v) for v in coords)


@dataclass(frozen=True)
class ArcTo:
    """Elliptical arc, flags as in the SVG ``A`` command."""
    rx: float
    ry: float
    rotation: float
    large_arc: int
    sweep: int
    end: Point
    letter = "A"

    def to_svg(self) -> str:
        return (
            f"A {format_number(self.rx)} {format_number(self.ry)} {format_number(self.rotation)} "
            f"{self.large_arc} {self.sweep} {format_number(self.end[0])} {format_number(self.end[1])}"
        )


PathCommand = Union[MoveTo, LineTo, CurveTo, ArcTo]


def move_to(p) -> MoveTo:
    return MoveTo(_pt(p))


def line_to(p) -> LineTo:
    return LineTo(_pt(p))


def curve_to(c1, c2, end) -> CurveTo:
    return CurveTo(_pt(c1), _pt(c2), _pt(end))


def arc_to(radius: float, large_arc: int, sweep: int, end) -> ArcTo:
    return ArcTo(float(radius), float(radius), 0.0, int(large_arc), int(sweep), _pt(end))


def to_svg_path(commands: Sequence[PathCommand]) -> str:
    return " ".join(cmd.to_svg() for cmd in commands)


def count_commands(commands: Sequence[PathCommand], letter: str) -> int:
    return sum(1 for cmd in commands if cmd.letter == letter)
