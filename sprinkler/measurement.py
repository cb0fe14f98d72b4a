"""
Measurement Probe
=================
Rain-gauge style probe: records the drops crossing a horizontal plane inside
a rectangular footprint. Purely an observer of the integrator's steps.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional

import numpy as np

from .records import MeasurementRecord


def interpolate(x: float, x0: float, x1: float, y0: float, y1: float) -> float:
    """Linear interpolation of y at x between (x0, y0) and (x1, y1)."""
    if x1 == x0:
        return y1
    return y0 + (x - x0) * (y1 - y0) / (x1 - x0)


@dataclass(frozen=True)
class MeasurementProbe:
    """
    Measurement point at (x, y, z) with half-widths dx, dy.
    """
    x: float
    y: float
    z: float
    dx: float = 0.0
    dy: float = 0.0
    xleft: float = field(init=False)
    xright: float = field(init=False)
    ybottom: float = field(init=False)
    ytop: float = field(init=False)

    def __post_init__(self):
        if self.dx < 0.0 or self.dy < 0.0:
            raise ValueError("probe half-widths must be non-negative")
        object.__setattr__(self, 'xleft', self.x - self.dx)
        object.__setattr__(self, 'xright', self.x + self.dx)
        object.__setattr__(self, 'ybottom', self.y - self.dy)
        object.__setattr__(self, 'ytop', self.y + self.dy)

    def record_crossing(self, drop, previous_position: np.ndarray,
                        sink: Optional[Callable] = None
                        ) -> Optional[MeasurementRecord]:
        """
        Test the last step of ``drop`` against the probe plane.

        Parameters
        ----------
        drop : Drop
            Drop after the step (not modified)
        previous_position : np.ndarray
            Drop position before the step
        sink : callable, optional
            Receives the record when the drop crossed inside the footprint

        Returns
        -------
        MeasurementRecord or None
        """
        rold, rnew = previous_position, drop.r
        if (rold[2] - self.z) * (rnew[2] - self.z) > 0.0:
            return None
        x = interpolate(self.z, rold[2], rnew[2], rold[0], rnew[0])
        if x < self.xleft or x > self.xright:
            return None
        y = interpolate(self.z, rold[2], rnew[2], rold[1], rnew[1])
        if y < self.ybottom or y > self.ytop:
            return None
        record = MeasurementRecord(
            self.x, self.y, self.z, float(drop.diameter),
            float(drop.v[0]), float(drop.v[1]), float(drop.v[2]),
        )
        if sink is not None:
            sink(record)
        return record
