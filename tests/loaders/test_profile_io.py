"""Tests for profile JSON reading and writing."""

import json

import pytest

from carforge.chassis.control_points import HardPoint, SymmetricPoint
from carforge.core.state import ParameterState
from carforge.loaders.profile_io import (
    ProfileError, dumps_profile, load_profile, parse_profile, profile_dict_to_partial,
    profile_filename, round_values, save_profile, state_to_profile_dict,
)


def _cp(point_id, t=0.5, mode="hard"):
    return {"id": point_id, "t": t, "mode": mode}


def test_profile_error_is_value_error():
    assert issubclass(ProfileError, ValueError)


def test_round_values_half_up():
    assert round_values(0.125) == 0.13
    assert round_values(2700.456) == 2700.46
    assert round_values(7) == 7
    assert round_values(True) is True
    assert round_values({"a": [1.234, "x"]}) == {"a": [1.23, "x"]}


class TestSave:
    def test_camel_case_keys(self):
        data = state_to_profile_dict(ParameterState())
        assert data["wheelBase"] == 2700
        assert data["frontFaceBreakX"] == 775
        assert data["passengerHPointX"] == 810
        assert data["showMannequin"] is True
        assert data["bodyControlPoints"] == {}
        assert data["nextControlPointId"] == 1

    def test_numbers_rounded(self):
        data = state_to_profile_dict(ParameterState(wheel_base=2700.456, body_recline_angle=8.6049))
        assert data["wheelBase"] == 2700.46
        assert data["bodyReclineAngle"] == 8.6

    def test_unrounded_on_request(self):
        data = state_to_profile_dict(ParameterState(wheel_base=2700.456), rounded=False)
        assert data["wheelBase"] == 2700.456

    def test_control_points_serialised(self):
        state = ParameterState()
        state.body_control_points["bonnet"] = [SymmetricPoint(id=3, t=0.33333)]
        data = state_to_profile_dict(state)
        (cp,) = data["bodyControlPoints"]["bonnet"]
        assert cp["mode"] == "symmetric"
        assert cp["t"] == 0.33

    def test_dumps_is_json(self):
        assert json.loads(dumps_profile(ParameterState()))["tireDiameter"] == 700


class TestLoad:
    def test_missing_control_points_gives_empty_map(self):
        partial = profile_dict_to_partial({"wheelBase": 2500})
        assert partial["body_control_points"] == {}
        assert partial["wheel_base"] == 2500

    def test_unknown_keys_ignored(self):
        partial = profile_dict_to_partial({"imageOpacity": 0.4, "tireDiameter": 650})
        assert "imageOpacity" not in partial
        assert partial["tire_diameter"] == 650

    def test_parse_fills_defaults(self):
        state = parse_profile('{"wheelBase": 2500}')
        assert state.wheel_base == 2500
        assert state.tire_diameter == 700

    def test_control_points_restored(self):
        state = parse_profile(json.dumps({"bodyControlPoints": {"rooftop": [_cp(4, mode="symmetric")]}}))
        (point,) = state.body_control_points["rooftop"]
        assert isinstance(point, SymmetricPoint)
        assert state.next_control_point_id == 5

    def test_next_id_kept_when_larger(self):
        state = parse_profile(json.dumps({
            "bodyControlPoints": {"bonnet": [_cp(2)]}, "nextControlPointId": 9,
        }))
        assert state.next_control_point_id == 9

    def test_extra_points_truncated(self):
        state = parse_profile(json.dumps({
            "bodyControlPoints": {"bonnet": [_cp(1, 0.2), _cp(2, 0.4), _cp(3, 0.6)]},
        }))
        assert [p.id for p in state.body_control_points["bonnet"]] == [1, 2]

    def test_unknown_segment_dropped(self):
        state = parse_profile(json.dumps({
            "bodyControlPoints": {"spoiler": [_cp(1)], "bonnet": [_cp(2)]},
        }))
        assert list(state.body_control_points) == ["bonnet"]
        assert isinstance(state.body_control_points["bonnet"][0], HardPoint)

    @pytest.mark.parametrize("text", [
        "not json",
        "[1, 2, 3]",
        '"a string"',
        '{"wheelBase": "long"}',
        '{"wheelBase": true}',
        '{"showMannequin": "yes"}',
        '{"activePassengerRow": 3}',
        '{"bodyControlPoints": []}',
        '{"bodyControlPoints": {"bonnet": {"id": 1}}}',
        '{"bodyControlPoints": {"bonnet": [{"t": 0.5}]}}',
        '{"nextControlPointId": "7"}',
    ])
    def test_malformed(self, text):
        with pytest.raises(ProfileError):
            parse_profile(text)

    @pytest.mark.parametrize("text", [
        '{"nextControlPointId": 1e400}',
        '{"nextControlPointId": NaN}',
        '{"nextControlPointId": -Infinity}',
        '{"bodyControlPoints": {"bonnet": [{"id": 1e400}]}}',
        '{"bodyControlPoints": {"bonnet": [{"id": NaN}]}}',
        '{"bodyControlPoints": {"bonnet": [{"id": 1, "t": NaN}]}}',
        '{"bodyControlPoints": {"bonnet": [{"id": 1, "offsetParallel": Infinity}]}}',
        '{"tireDiameter": NaN}',
    ])
    def test_non_finite_numbers_rejected(self, text):
        with pytest.raises(ProfileError):
            parse_profile(text)


class TestFiles:
    def test_save_then_load(self, tmp_path):
        state = ParameterState(wheel_base=2612.347, show_last_row=True)
        state.body_control_points["windscreen"] = [HardPoint(id=1, t=0.5, offset_perpendicular=12.5)]
        state.next_control_point_id = 2
        path = save_profile(state, tmp_path / "car.json")
        loaded = load_profile(path)
        assert loaded.wheel_base == 2612.35
        assert loaded.show_last_row is True
        assert loaded.body_control_points["windscreen"][0].offset_perpendicular == 12.5
        assert loaded.next_control_point_id == 2

    def test_missing_file(self, tmp_path):
        with pytest.raises(ProfileError):
            load_profile(tmp_path / "nope.json")

    def test_filename_slug(self):
        assert profile_filename("Profile 1") == "profile-1.json"
        assert profile_filename("  My  Estate Car ") == "my-estate-car.json"
