"""Tests for slider range clamping."""

from carforge.core.parameter_limits import ParameterLimits


def _loaded():
    limits = ParameterLimits()
    limits.load()
    return limits


def test_load_shipped_config():
    limits = _loaded()
    assert len(limits) > 0
    assert "front_overhang" in limits
    assert limits.bounds("front_overhang") == (500, 1300)


def test_row_template_expanded():
    limits = _loaded()
    assert "mid_row_h_point_x" in limits
    assert "passenger_h_point_x" in limits
    assert limits.bounds("mid_row_body_recline") == limits.bounds("passenger_body_recline")


def test_camel_case_lookup():
    limits = _loaded()
    assert limits.bounds("passengerHPointX") == limits.bounds("passenger_h_point_x")


def test_clamp():
    limits = _loaded()
    assert limits.clamp("front_overhang", 2000) == 1300
    assert limits.clamp("front_overhang", 100) == 500
    assert limits.clamp("front_overhang", 900) == 900


def test_unknown_key_passes_through():
    limits = _loaded()
    assert limits.clamp("not_a_parameter", 12345) == 12345


def test_clamp_updates_skips_non_numeric():
    limits = _loaded()
    out = limits.clamp_updates({"hip_pedal_distance": 5000, "show_mannequin": True, "active_passenger_row": "mid"})
    assert out == {"hip_pedal_distance": 1300, "show_mannequin": True, "active_passenger_row": "mid"}


def test_missing_config_is_graceful():
    limits = ParameterLimits()
    limits.load("does_not_exist.json")
    assert len(limits) == 0
    assert limits.clamp("front_overhang", 2000) == 2000
