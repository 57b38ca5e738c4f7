"""Tests for millimetre / rendering-plane / asset / screen conversions."""

import numpy as np
import pytest

from carforge.core.coordinates import (
    HIP_ASSET_POSITION, ScreenTransform,
    asset_from_world, asset_to_local, millimeters_from_world,
    world_from_asset, world_from_millimeters,
)


def test_world_from_millimeters():
    assert world_from_millimeters(622.5, 1, 1400) == pytest.approx(972.5)
    assert world_from_millimeters(622.5, -1, 100) == pytest.approx(597.5)


def test_millimeters_from_world_inverts():
    px = world_from_millimeters(1297.5, -1, 365)
    assert millimeters_from_world(1297.5, -1, px) == pytest.approx(365)


def test_millimeters_from_world_zero_axis():
    assert millimeters_from_world(100, 0, 300) == 0.0


class TestAssetSpace:
    def test_hip_maps_to_hip(self):
        hip = (900.0, 450.0)
        np.testing.assert_array_almost_equal(
            asset_from_world(hip, hip, global_scale=0.35), HIP_ASSET_POSITION)

    def test_round_trip(self):
        hip = (900.0, 450.0)
        p = (850.0, 400.0)
        asset = asset_from_world(p, hip, global_scale=0.35)
        np.testing.assert_array_almost_equal(world_from_asset(asset, hip, global_scale=0.35), p)

    def test_zero_scale_returns_hip(self):
        np.testing.assert_array_almost_equal(
            asset_from_world((1, 2), (3, 4), global_scale=0), HIP_ASSET_POSITION)

    def test_asset_to_local(self):
        np.testing.assert_array_almost_equal(asset_to_local(HIP_ASSET_POSITION), [591.97, 542.85])


class TestScreenTransform:
    def test_svg_to_screen(self):
        t = ScreenTransform(a=2, d=2, e=10, f=20)
        np.testing.assert_array_almost_equal(t.svg_to_screen((5, 5)), [20, 30])

    def test_screen_to_svg_inverts(self):
        t = ScreenTransform(a=1.5, b=0.2, c=-0.1, d=1.2, e=30, f=-12)
        p = (123.0, 45.0)
        np.testing.assert_array_almost_equal(t.screen_to_svg(t.svg_to_screen(p)), p)

    def test_degenerate_matrix_passthrough(self):
        t = ScreenTransform(a=0, d=0)
        np.testing.assert_array_equal(t.screen_to_svg((7, 8)), [7, 8])

    def test_overlay_local(self):
        t = ScreenTransform(rect_left=10, rect_top=5, zoom=2, offset_x=4, offset_y=1)
        np.testing.assert_array_almost_equal(t.screen_to_overlay_local((34, 25)), [10, 9.5])

    def test_world_to_overlay(self):
        t = ScreenTransform(a=2, d=2, zoom=2)
        np.testing.assert_array_almost_equal(t.world_to_overlay((10, 10)), [10, 10])

    def test_container_scale(self):
        t = ScreenTransform(a=2, d=2, zoom=2)
        assert t.unit_scale == pytest.approx(2)
        assert t.container_scale(0.5) == pytest.approx(0.5)
