"""Tests for chassis geometry and its drag inverses."""

import math

import numpy as np
import pytest

from carforge.chassis.geometry import (
    anchor_offsets_from_point, arch_half_width, overhang_from_point,
    TangentLine, solve_chassis, tangent_line, wheelbase_from_axle_position,
)
from carforge.chassis.path import count_commands
from carforge.constants import CENTER_X, GROUND_Y, SCALE
from carforge.core.math_utils import dot, vec2
from carforge.core.state import ParameterState


def _cross(a, b):
    return a[0] * b[1] - a[1] * b[0]


class TestWheels:
    def test_default_layout(self):
        g = solve_chassis(ParameterState())
        assert g.tire_radius_px == pytest.approx(87.5)
        assert g.front_wheel_x == pytest.approx(622.5)
        assert g.rear_wheel_x == pytest.approx(1297.5)
        assert g.wheel_y == pytest.approx(GROUND_Y - 87.5)
        assert g.chassis_bottom_y == pytest.approx(550)
        assert g.floor_y == pytest.approx(525)

    def test_axles_symmetric_about_center(self):
        g = solve_chassis(ParameterState(wheel_base=3100))
        assert (g.front_wheel_x + g.rear_wheel_x) / 2 == pytest.approx(CENTER_X)

    def test_wheelbase_2600(self):
        g = solve_chassis(ParameterState(wheel_base=2600))
        assert g.rear_wheel_x - g.front_wheel_x == pytest.approx(2600 * SCALE)


class TestArches:
    def test_default_arch(self):
        g = solve_chassis(ParameterState())
        assert g.arch_radius == pytest.approx(97.5)
        assert g.arch_dx == pytest.approx(math.sqrt(97.5 ** 2 - 47.5 ** 2))
        assert g.front_arch.large_arc == 1
        assert g.front_arch.sweep == 1

    def test_arch_collapses_when_line_outside_radius(self):
        assert arch_half_width(10, 10) == 0.0
        assert arch_half_width(10, -12) == 0.0
        assert arch_half_width(10, 6) == pytest.approx(8.0)

    def test_dx_zero_from_state(self):
        g = solve_chassis(ParameterState(wheel_arch_gap=0, ground_clearance=0))
        assert g.arch_dx == 0.0
        np.testing.assert_array_almost_equal(g.front_arch.start, g.front_arch.end)

    def test_small_arc_when_line_above_center(self):
        g = solve_chassis(ParameterState(ground_clearance=400))
        assert g.chassis_bottom_y < g.wheel_y
        assert g.front_arch.large_arc == 0

    def test_outline_commands(self):
        g = solve_chassis(ParameterState())
        cmds = g.outline_commands()
        assert [c.letter for c in cmds] == ["M", "A", "L", "A"]
        assert cmds[1].rx == pytest.approx(97.5)


class TestTangents:
    @pytest.mark.parametrize("position,angle", [("front", 20), ("rear", 25), ("front", 0), ("rear", 45)])
    def test_tangent_touches_tire(self, position, angle):
        wheel = vec2(600, 500)
        line = tangent_line(wheel[0], wheel[1], 87.5, angle, position)
        radius = line.contact - wheel
        assert math.hypot(*radius) == pytest.approx(87.5)
        assert dot(radius, line.direction) == pytest.approx(0.0, abs=1e-9)

    def test_front_tip_on_tangent(self):
        g = solve_chassis(ParameterState())
        assert g.front_tip[0] == pytest.approx(622.5 - 850 * SCALE)
        t = g.front_tangent
        assert _cross(g.front_tip - t.contact, t.direction) == pytest.approx(0.0, abs=1e-9)

    def test_rear_tip_on_tangent(self):
        g = solve_chassis(ParameterState())
        assert g.rear_tip[0] == pytest.approx(1297.5 + 900 * SCALE)
        t = g.rear_tangent
        assert _cross(g.rear_tip - t.contact, t.direction) == pytest.approx(0.0, abs=1e-9)

    def test_approach_slope(self):
        g = solve_chassis(ParameterState())
        tip, c = g.front_tip, g.front_tangent.contact
        assert (c[1] - tip[1]) / (c[0] - tip[0]) == pytest.approx(math.tan(math.radians(20)))

    def test_vertical_tangent_falls_back_to_contact(self):
        g = solve_chassis(ParameterState(front_approach_angle=90))
        assert g.front_tangent.is_vertical
        assert g.front_tip[1] == pytest.approx(g.front_tangent.contact[1])
        assert not math.isnan(g.front_tip[1])

    @pytest.mark.parametrize("dx, vertical", [(0.0, True), (0.0009, True), (0.001, False), (0.01, False)])
    def test_vertical_threshold_is_strict(self, dx, vertical):
        line = TangentLine(contact=vec2(600, 500), direction=vec2(dx, 1.0))
        assert line.is_vertical == vertical

    def test_tangent_line_extent(self):
        g = solve_chassis(ParameterState())
        t = g.rear_tangent
        assert math.hypot(*(t.end - t.start)) == pytest.approx(400)


class TestAnchors:
    def test_front_face_break_position(self):
        g = solve_chassis(ParameterState())
        np.testing.assert_array_almost_equal(
            g.anchors["frontFaceBreak"], [622.5 - 775 * SCALE, 502.5 - 525 * SCALE])

    def test_rear_referenced_anchor(self):
        g = solve_chassis(ParameterState())
        np.testing.assert_array_almost_equal(
            g.anchors["bumperEnd"], [1297.5 + 890 * SCALE, 502.5 - 535 * SCALE])

    def test_point_map_order(self):
        g = solve_chassis(ParameterState())
        assert list(g.point_map()) == [
            "frontTip", "frontFaceBreak", "bonnetEnd", "windowEnd",
            "rooftopEnd", "rearWindowEnd", "bumperEnd", "rearTip",
        ]

    def test_overall_dimensions(self):
        g = solve_chassis(ParameterState())
        assert g.overall_length_mm == pytest.approx(850 + 2700 + 900)
        assert g.overall_height_mm == pytest.approx(350 + 1130)

    def test_floor_and_bumper_lines(self):
        g = solve_chassis(ParameterState())
        start, end = g.floor_line
        assert start[1] == end[1] == pytest.approx(g.floor_y)
        (front_a, front_b), _ = g.bumper_lines
        np.testing.assert_array_equal(front_a, g.front_tip)
        np.testing.assert_array_equal(front_b, g.front_arch.start)


class TestDragInverses:
    def test_anchor_round_trip(self):
        g = solve_chassis(ParameterState())
        assert anchor_offsets_from_point(g, "bonnetEnd", g.anchors["bonnetEnd"]) == {
            "bonnet_end_x": -365, "bonnet_end_y": 660,
        }
        assert anchor_offsets_from_point(g, "rooftopEnd", g.anchors["rooftopEnd"]) == {
            "rooftop_end_x": -195, "rooftop_end_y": 1130,
        }

    def test_front_face_break_clamped(self):
        g = solve_chassis(ParameterState())
        out = anchor_offsets_from_point(g, "frontFaceBreak", (g.front_wheel_x + 100, 0))
        assert out == {"front_face_break_x": 400, "front_face_break_y": 800}

    def test_axle_drag(self):
        assert wheelbase_from_axle_position("front", CENTER_X - 325) == 2600
        assert wheelbase_from_axle_position("rear", CENTER_X + 325) == 2600

    def test_axle_drag_clamped(self):
        assert wheelbase_from_axle_position("rear", CENTER_X + 1000) == 3600
        assert wheelbase_from_axle_position("front", CENTER_X) == 1800

    def test_overhang_round_trip(self):
        g = solve_chassis(ParameterState())
        assert overhang_from_point(g, "front", g.front_tip) == 850
        assert overhang_from_point(g, "rear", g.rear_tip) == 900

    def test_overhang_projects_off_line_points(self):
        g = solve_chassis(ParameterState())
        off_line = g.front_tip + g.front_tangent.direction * 10 + vec2(
            -g.front_tangent.direction[1], g.front_tangent.direction[0]) * 30
        expected = round((g.front_wheel_x - (g.front_tip + g.front_tangent.direction * 10)[0]) / SCALE)
        assert overhang_from_point(g, "front", off_line) == expected

    def test_overhang_limits(self):
        g = solve_chassis(ParameterState())
        far = g.front_tangent.end + g.front_tangent.direction * 2000
        assert overhang_from_point(g, "front", far, limits=(500, 1300)) == 1300


def test_collapsed_arches_still_emit_arc_commands():
    g = solve_chassis(ParameterState(wheel_arch_gap=0, ground_clearance=0))
    assert count_commands(g.outline_commands(), "A") == 2
