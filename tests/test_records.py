"""
Unit Tests for Trajectory Records
=================================
Record formatting, sinks and trajectory files.
Run: python -m pytest tests/ -v
"""

import sys
import os
import io
import numpy as np
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from sprinkler.config import DropConditions, TrajectoryConditions
from sprinkler.integrator import simulate_drop
from sprinkler.records import (
    TrajectoryRecord, MeasurementRecord, ListSink, FileSink,
    load_trajectory_file,
)


class TestTrajectoryRecord:
    """Verify the record text layout."""

    def test_format(self):
        record = TrajectoryRecord(0.5, 1.0, 0.0, 2.25, 3.0, 0.0, -1.5,
                                  0.75, 0.003)
        assert record.format() == '0.5 1 0 2.25 3 0 -1.5 0.75 0.003'

    def test_parse_formatted_line(self):
        record = TrajectoryRecord.parse('0.5 1 0 2.25 3 0 -1.5 0.75 0.003\n')
        assert record.t == 0.5
        assert record.vz == -1.5
        assert record.diameter == 0.003

    def test_parse_wrong_field_count(self):
        with pytest.raises(ValueError, match='9 fields'):
            TrajectoryRecord.parse('1 2 3')

    def test_measurement_record_format(self):
        record = MeasurementRecord(1.0, 2.0, 0.5, 0.002, 3.0, 0.0, -4.0)
        assert len(record.format().split()) == 7


class TestSinks:
    """Verify record sinks."""

    def test_list_sink(self):
        sink = ListSink()
        sink('a')
        sink('b')
        assert len(sink) == 2
        assert list(sink) == ['a', 'b']

    def test_file_sink_keeps_open_file(self):
        buffer = io.StringIO()
        with FileSink(buffer) as sink:
            sink(TrajectoryRecord(0, 0, 0, 1, 0, 0, 0, 0, 0.001))
        assert not buffer.closed
        assert buffer.getvalue() == '0 0 0 1 0 0 0 0 0.001\n'

    def test_trajectory_file(self, tmp_path):
        path = tmp_path / 'trajectory.dat'
        drop = DropConditions(diameter=0.002, z=1.0, velocity=10.0,
                              vertical_angle=45.0)
        with FileSink(path) as sink:
            result = simulate_drop(drop, TrajectoryConditions(), sink=sink)

        data = load_trajectory_file(path)
        assert data.shape == (len(result.time), 9)
        # %g keeps six significant digits
        assert np.allclose(data[:, 1], result.x, rtol=1e-5, atol=1e-6)
        assert np.allclose(data[:, 8], 0.002)
        assert abs(data[-1, 3]) < 1e-6

    def test_initial_drag_not_negative_zero(self):
        buffer = io.StringIO()
        with FileSink(buffer) as sink:
            simulate_drop(DropConditions(z=1.0), TrajectoryConditions(),
                          sink=sink)
        first = buffer.getvalue().splitlines()[0].split()
        assert first[7] == '0'

    def test_bad_trajectory_file(self, tmp_path):
        path = tmp_path / 'bad.dat'
        path.write_text('1 2 3\n4 5 6\n')
        with pytest.raises(ValueError, match='9 columns'):
            load_trajectory_file(path)


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
