"""
Trajectory Records
==================
Flat record stream produced by the integrator, one record per step:

    t x y z vx vy vz drag diameter

``drag`` is the positive drag magnitude that bounded the step leading to
the record. The text layout (nine ``%g`` fields separated by spaces)
matches the historical trajectory files, so existing tooling keeps reading
them.

A sink is any callable taking one record. ``ListSink`` buffers in memory,
``FileSink`` writes text lines.
"""

from typing import IO, List, NamedTuple, Union
import os

import numpy as np


class TrajectoryRecord(NamedTuple):
    """State of a drop at one instant."""
    t: float
    x: float
    y: float
    z: float
    vx: float
    vy: float
    vz: float
    drag: float
    diameter: float

    @classmethod
    def from_drop(cls, t: float, drop) -> 'TrajectoryRecord':
        r, v = drop.r, drop.v
        return cls(float(t), float(r[0]), float(r[1]), float(r[2]),
                   float(v[0]), float(v[1]), float(v[2]),
                   float(0.0 - drop.drag), float(drop.diameter))

    def format(self) -> str:
        return ' '.join('%g' % value for value in self)

    @classmethod
    def parse(cls, line: str) -> 'TrajectoryRecord':
        fields = line.split()
        if len(fields) != 9:
            raise ValueError(f"trajectory record needs 9 fields: {line!r}")
        return cls(*(float(f) for f in fields))


class MeasurementRecord(NamedTuple):
    """Drop crossing a measurement probe: probe position, drop data."""
    x: float
    y: float
    z: float
    diameter: float
    vx: float
    vy: float
    vz: float

    def format(self) -> str:
        return ' '.join('%g' % value for value in self)


class ListSink:
    """In-memory record buffer."""

    def __init__(self):
        self.records: List[NamedTuple] = []

    def __call__(self, record):
        self.records.append(record)

    def __len__(self):
        return len(self.records)

    def __iter__(self):
        return iter(self.records)


class FileSink:
    """
    Writes one formatted record per line.

    Accepts a path (opened and owned by the sink) or an open text file
    (left open on ``close``).
    """

    def __init__(self, target: Union[str, os.PathLike, IO[str]]):
        if isinstance(target, (str, os.PathLike)):
            self._file = open(target, 'w')
            self._owned = True
        else:
            self._file = target
            self._owned = False

    def __call__(self, record):
        self._file.write(record.format() + '\n')

    def close(self):
        if self._owned:
            self._file.close()
        else:
            self._file.flush()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False


def load_trajectory_file(path: Union[str, os.PathLike]) -> np.ndarray:
    """
    Read a trajectory file into an (N, 9) array, one row per record.
    """
    data = np.loadtxt(path, ndmin=2)
    if data.size and data.shape[1] != 9:
        raise ValueError(
            f"{path}: expected 9 columns per record, got {data.shape[1]}"
        )
    return data.reshape(-1, 9)
