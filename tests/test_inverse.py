"""
Unit Tests for Inverse Trajectories
===================================
Backward integration from a measured drop to the nozzle or the main jet.
Run: python -m pytest tests/ -v
"""

import sys
import os
import logging
import numpy as np
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from sprinkler.atmosphere import initialize_atmosphere
from sprinkler.config import DropConditions, TrajectoryConditions
from sprinkler.drop import parabolic_estimate
from sprinkler.integrator import Trajectory, reconstruct_drop, simulate_drop
from sprinkler.jet import Jet
from sprinkler.records import ListSink


def _forward(drag_model='constant', drag_coefficient=0.4):
    drop = DropConditions(diameter=0.003, z=0.5, velocity=15.0,
                          vertical_angle=30.0, drag_model=drag_model,
                          drag_coefficient=drag_coefficient)
    return simulate_drop(drop, TrajectoryConditions(dt=0.001))


def _measured(record, drag_model='constant', drag_coefficient=0.4):
    return DropConditions(
        diameter=record.diameter, x=record.x, y=record.y, z=record.z,
        velocity_vector=(record.vx, record.vy, record.vz),
        drag_model=drag_model, drag_coefficient=drag_coefficient,
    )


class TestRoundTrip:
    """Forward then inverse recovers the launch conditions."""

    def test_constant_drag(self):
        impact = _forward().records[-1]
        back = reconstruct_drop(_measured(impact),
                                TrajectoryConditions(dt=0.001,
                                                     bed_level=-10.0))
        assert back.x[-1] == 0.0
        assert abs(back.z[-1] - 0.5) < 1e-3
        assert abs(back.final_speed - 15.0) < 1e-3
        assert abs(back.final_vertical_angle_deg - 30.0) < 0.01

    def test_same_trajectory_conditions(self):
        """The landing state lies on the bed level of the forward run."""
        conditions = TrajectoryConditions(dt=0.001)
        impact = _forward().records[-1]
        assert impact.z == 0.0
        back = reconstruct_drop(_measured(impact), conditions)
        assert len(back.time) > 1
        assert back.x[-1] == 0.0
        assert abs(back.z[-1] - 0.5) < 1e-3
        assert abs(back.final_speed - 15.0) < 1e-3
        assert abs(back.final_vertical_angle_deg - 30.0) < 0.01

    def test_sphere_drag(self):
        impact = _forward('sphere').records[-1]
        back = reconstruct_drop(_measured(impact, 'sphere'),
                                TrajectoryConditions(dt=0.001,
                                                     bed_level=-10.0))
        assert abs(back.final_speed - 15.0) < 0.05
        assert abs(back.final_vertical_angle_deg - 30.0) < 0.1

    def test_time_runs_backward(self):
        impact = _forward().records[-1]
        back = reconstruct_drop(_measured(impact),
                                TrajectoryConditions(bed_level=-10.0))
        assert back.mode == 'inverse'
        assert np.all(np.diff(back.time) < 0)
        assert abs(back.flight_time - _forward().flight_time) < 1e-3


class TestInverseStop:
    """Verify where an inverse trajectory stops."""

    def test_measured_on_nozzle_plane(self):
        drop = DropConditions(x=0.0, z=0.5, velocity_vector=(5.0, 0.0, -5.0),
                              drag_model='constant', drag_coefficient=0.4)
        back = reconstruct_drop(drop, TrajectoryConditions())
        assert len(back.time) == 1
        assert back.z[0] == 0.5

    def test_crossing_both_planes_with_bed_unreachable(self):
        # both planes crossed on the last step; the bed cannot be reached
        # with the local deceleration, the nozzle plane can
        traj = Trajectory(
            DropConditions(x=1.0, z=1.0, velocity_vector=(1.0, 0.0, 0.5),
                           drag_model='constant', drag_coefficient=0.0),
            TrajectoryConditions(), initialize_atmosphere())
        traj.drop.r = np.array([-0.1, 0.0, -0.1])
        traj.drop.v = np.array([1.0, 0.0, 0.5])
        traj._exit_correction()
        assert traj.drop.r[0] == 0.0
        assert traj.drop.r[2] < 0.0

    def test_bed_reached_before_nozzle(self, caplog):
        # rising when measured: backward in time it falls to the bed
        drop = DropConditions(x=5.0, z=1.0, velocity_vector=(1.0, 0.0, 5.0),
                              drag_model='constant', drag_coefficient=0.4)
        with caplog.at_level(logging.WARNING):
            back = reconstruct_drop(drop, TrajectoryConditions())
        assert back.z[-1] == 0.0
        assert back.x[-1] > 0.0
        assert 'bed level' in caplog.text


class TestInverseWithJet:
    """Verify the search of the jet detachment point."""

    def _trajectory(self, sink=None):
        drop = DropConditions(x=5.0, z=0.0, velocity_vector=(5.0, 0.0, -8.0),
                              drag_model='constant', drag_coefficient=0.4)
        return Trajectory(drop, TrajectoryConditions(bed_level=-10.0),
                          initialize_atmosphere(), sink=sink)

    def test_stops_at_jet(self):
        result = self._trajectory().invert_with_jet(
            Jet((2.0, 0.0, 0.0, 0.0, 0.0)))
        exit_point = result.exit_point
        assert result.mode == 'inverse_jet'
        assert exit_point == result.records[-1]
        assert 2.0 <= exit_point.z < 2.01
        assert exit_point.x > 0.0
        assert np.all(result.z[:-1] < 2.0)

    def test_jet_out_of_reach_ends_at_nozzle(self):
        # jet far above, and closest near the nozzle
        result = self._trajectory().invert_with_jet(
            Jet((100.0, 50.0, 0.0, 0.0, 0.0)))
        assert result.exit_point.x == 0.0

    def test_records_streamed_after_truncation(self):
        sink = ListSink()
        result = self._trajectory(sink).invert_with_jet(
            Jet((2.0, 0.0, 0.0, 0.0, 0.0)))
        assert sink.records == result.records

    def test_jet_height(self):
        jet = Jet((1.0, 0.5, -0.1, 0.0, 0.0))
        assert abs(jet.height(2.0) - 1.6) < 1e-12
        assert np.allclose(jet.height(np.array([0.0, 1.0])), [1.0, 1.4])
        assert abs(jet.gap(np.array([2.0, 0.0, 1.0])) - 0.6) < 1e-12

    def test_jet_needs_five_coefficients(self):
        with pytest.raises(ValueError):
            Jet((1.0, 2.0))


class TestParabolicEstimate:
    """Drag-free extrapolation to the nozzle plane."""

    def test_matches_drag_free_flight(self):
        impact = _forward(drag_coefficient=0.0).records[-1]
        traj = Trajectory(_measured(impact, drag_coefficient=0.0),
                          TrajectoryConditions(), initialize_atmosphere())
        estimate = parabolic_estimate(traj.drop)
        assert abs(estimate['x']) < 1e-12
        assert abs(estimate['velocity'] - 15.0) < 0.05
        assert abs(estimate['angle_deg'] - 30.0) < 0.2
        assert abs(estimate['z'] - 0.5) < 0.05


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
