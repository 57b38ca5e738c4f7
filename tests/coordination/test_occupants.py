"""Tests for passenger default offsets and chassis-relative syncing."""

import pytest

from carforge.coordination.occupants import (
    MID_ROW_DEFAULT_DISTANCE, PassengerSync, default_passenger_offsets,
)
from carforge.core.parameter_limits import ParameterLimits
from carforge.core.state import ParameterState


def _synced(state, limits=None):
    sync = PassengerSync(limits)
    sync.reset(state)
    return sync


def test_default_offsets():
    out = default_passenger_offsets(ParameterState())
    assert out == {"mid_row_h_point_x": MID_ROW_DEFAULT_DISTANCE, "passenger_h_point_x": 810}


def test_default_last_row_tracks_wheelbase():
    out = default_passenger_offsets(ParameterState(wheel_base=3000))
    assert out["passenger_h_point_x"] == 1110


class TestPassengerSync:
    def test_no_change_no_updates(self):
        state = ParameterState()
        assert _synced(state).updates_for(state) == {}

    def test_first_call_only_records(self):
        state = ParameterState()
        assert PassengerSync().updates_for(state) == {}

    def test_wheelbase_moves_rows(self):
        state = ParameterState()
        sync = _synced(state)
        state.wheel_base += 100
        out = sync.updates_for(state)
        assert out["passenger_h_point_x"] == pytest.approx(910)
        assert out["mid_row_h_point_x"] == pytest.approx(550)

    def test_driver_hip_cancelled_out(self):
        state = ParameterState()
        sync = _synced(state)
        state.h_point_x += 50
        out = sync.updates_for(state)
        assert out["passenger_h_point_x"] == pytest.approx(760)
        assert out["mid_row_h_point_x"] == pytest.approx(450)

    def test_changes_consumed(self):
        state = ParameterState()
        sync = _synced(state)
        state.wheel_base += 100
        sync.updates_for(state)
        assert sync.updates_for(state) == {}

    def test_clamped_to_limits(self):
        limits = ParameterLimits()
        limits.load()
        state = ParameterState(passenger_h_point_x=2450)
        sync = _synced(state, limits)
        state.wheel_base += 200
        out = sync.updates_for(state)
        assert out["passenger_h_point_x"] == 2500
