"""Tests for occupant rows and pose targets."""

import numpy as np
import pytest

from carforge.body.rows import DRIVER_ROW, LAST_ROW, MID_ROW, ROWS, pose_targets
from carforge.core.state import ParameterState


def test_row_keys():
    assert DRIVER_ROW.key("h_point_x") == "h_point_x"
    assert MID_ROW.key("h_point_x") == "mid_row_h_point_x"
    assert LAST_ROW.key("body_recline") == "passenger_body_recline"
    assert set(ROWS) == {"driver", "mid", "last"}


def test_only_driver_has_arms():
    assert DRIVER_ROW.has_arms
    assert not MID_ROW.has_arms
    assert not LAST_ROW.has_arms


def test_driver_targets():
    t = pose_targets(ParameterState())
    np.testing.assert_array_almost_equal(t.hip, [972.5, 450])
    np.testing.assert_array_almost_equal(t.heel, [785, 525])
    np.testing.assert_array_almost_equal(t.hand, [860, 350])
    assert t.floor_y == pytest.approx(525)
    assert t.reference_x == pytest.approx(622.5)


def test_passenger_follows_driver_hip():
    near = pose_targets(ParameterState(show_mid_row=True), MID_ROW)
    moved = pose_targets(ParameterState(show_mid_row=True, h_point_x=1500), MID_ROW)
    assert moved.hip[0] - near.hip[0] == pytest.approx(100 * 0.25)
    assert near.hand is None


def test_hidden_rows():
    assert pose_targets(ParameterState(), LAST_ROW) is None
    assert pose_targets(ParameterState(show_mannequin=False)) is None


def test_non_finite_passenger_input():
    state = ParameterState(show_last_row=True, passenger_height=float("inf"))
    assert pose_targets(state, LAST_ROW) is None
