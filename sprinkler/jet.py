"""
Main Jet Shape
==============
Empirical vertical profile of the continuous water jet issuing from the
sprinkler nozzle: height as a quartic polynomial of the horizontal distance.

Only the inverse reconstruction uses it, to locate the point where a drop
detached from the jet.
"""

from dataclasses import dataclass

import numpy as np
from numpy.polynomial import polynomial as P


@dataclass(frozen=True)
class Jet:
    """Jet profile z = a0 + a1 x + a2 x² + a3 x³ + a4 x⁴."""
    a: tuple = (0.0, 0.0, 0.0, 0.0, 0.0)

    def __post_init__(self):
        if len(self.a) != 5:
            raise ValueError(f"jet needs 5 coefficients, got {len(self.a)}")
        object.__setattr__(self, 'a', tuple(float(c) for c in self.a))

    def height(self, x):
        """Jet height at horizontal distance ``x`` (scalar or array)."""
        z = P.polyval(x, self.a)
        return float(z) if np.ndim(z) == 0 else z

    def gap(self, position: np.ndarray) -> float:
        """Jet height above a point: positive when the point is below."""
        return self.height(position[0]) - position[2]
