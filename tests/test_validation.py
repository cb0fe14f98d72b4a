"""
Unit Tests for the Drag Law Validation
======================================
Terminal velocities against Gunn & Kinzer (1949).
Run: python -m pytest tests/ -v
"""

import sys
import os
import numpy as np
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from sprinkler.atmosphere import initialize_atmosphere
from sprinkler.drag_model import make_drag_law
from sprinkler.validation import (
    GUNN_KINZER, reference_terminal_velocity, terminal_velocity,
    validate_terminal_velocity,
)


class TestTerminalVelocity:
    """Verify the drag / weight balance."""

    def setup_method(self):
        self.air = initialize_atmosphere(temperature=20.0, pressure=101300.0,
                                         humidity=50.0)

    def test_reference_interpolation(self):
        assert abs(reference_terminal_velocity(0.001) - 4.03) < 1e-9
        v = reference_terminal_velocity(0.0011)
        assert 4.03 < v < 4.64

    @pytest.mark.parametrize('diameter, measured', [(0.001, 4.03),
                                                    (0.003, 8.06)])
    def test_sphere_close_to_measurements(self, diameter, measured):
        v = terminal_velocity(diameter, self.air, make_drag_law('sphere'))
        assert abs(v - measured) / measured < 0.15

    def test_increases_with_diameter(self):
        law = make_drag_law('sphere')
        velocities = [terminal_velocity(d, self.air, law)
                      for d in [0.0005, 0.001, 0.002, 0.003]]
        assert np.all(np.diff(velocities) > 0)

    def test_deformation_slows_big_drops(self):
        sphere = terminal_velocity(0.005, self.air, make_drag_law('sphere'))
        ovoid = terminal_velocity(0.005, self.air, make_drag_law('ovoid'))
        assert ovoid < sphere

    def test_no_drag_has_no_terminal_velocity(self):
        with pytest.raises(ValueError):
            terminal_velocity(0.001, self.air, make_drag_law('constant', 0.0))


class TestValidationTable:
    """Verify the validation report."""

    def test_one_result_per_tabulated_diameter(self):
        results = validate_terminal_velocity('sphere', verbose=False)
        assert len(results) == len(GUNN_KINZER)
        assert all(r.sim_velocity > 0 for r in results)

    def test_selected_diameters(self, capsys):
        results = validate_terminal_velocity(
            'ovoid', diameters=[0.001, 0.002], verbose=True)
        assert [r.diameter for r in results] == [0.001, 0.002]
        assert 'VALIDATION' in capsys.readouterr().out

    def test_mean_error_reasonable(self):
        results = validate_terminal_velocity('ovoid', verbose=False)
        assert np.mean([abs(r.error_pct) for r in results]) < 15.0


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
