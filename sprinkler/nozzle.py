"""
Sprinkler Nozzle
================
Turns a nozzle description (position, working pressure, angles, emitted
drop sizes) into the per-drop inputs of the trajectory engine.

Launch speed from the Bernoulli relation at the nozzle:
    v0 = sqrt(2 P / ρ_water)
"""

import logging
import math
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

import numpy as np

from .atmosphere import Atmosphere
from .config import (
    MAXIMUM_DROP_DIAMETER, MINIMUM_DROP_DIAMETER, RANDOM_SEED,
    AirConditions, DropConditions, TrajectoryConditions,
    _check_positive,
)
from .drop import water_density
from .integrator import Trajectory
from .measurement import MeasurementProbe

logger = logging.getLogger(__name__)


def rng_for_drop(index: int, seed: int = RANDOM_SEED) -> np.random.Generator:
    """
    Independent, reproducible generator for drop number ``index``.

    Drops simulated in any order (or in parallel workers) get the same
    random numbers as long as the seed and index match.
    """
    return np.random.default_rng(np.random.SeedSequence(seed, spawn_key=(index,)))


@dataclass(frozen=True)
class Nozzle:
    """
    Sprinkler nozzle and the drops it emits.
    """
    x: float = 0.0                            # m
    y: float = 0.0                            # m
    z: float = 0.0                            # m  height above the bed
    pressure: float = 300000.0                # Pa  working pressure
    vertical_angle: float = 30.0              # degrees
    horizontal_angle: float = 0.0             # degrees
    angle_min: float = 0.0                    # degrees  horizontal sweep
    angle_max: float = 0.0                    # degrees
    diameter: float = 0.004                   # m  nozzle diameter
    drop_dmin: float = MINIMUM_DROP_DIAMETER  # m
    drop_dmax: float = MAXIMUM_DROP_DIAMETER  # m
    jet_time: float = 0.0                     # s
    jet_model: str = 'null_drag'
    detach_model: str = 'total'
    drag_model: str = 'sphere'
    drag_coefficient: float = 0.0
    bed_level: float = 0.0                    # m
    dt: float = 0.001                         # s
    cfl: float = 0.01

    def __post_init__(self):
        _check_positive('pressure', self.pressure)
        _check_positive('nozzle diameter', self.diameter)
        _check_positive('minimum drop diameter', self.drop_dmin)
        if self.drop_dmax < self.drop_dmin:
            raise ValueError(
                f"bad drop diameters: maximum {self.drop_dmax!r} < "
                f"minimum {self.drop_dmin!r}"
            )
        if self.angle_max < self.angle_min:
            raise ValueError(
                f"bad horizontal angles: maximum {self.angle_max!r} < "
                f"minimum {self.angle_min!r}"
            )

    def launch_speed(self, density: float) -> float:
        """Jet speed (m/s) at the nozzle for water of the given density."""
        return math.sqrt(2.0 * self.pressure / density)

    def trajectory_conditions(self) -> TrajectoryConditions:
        return TrajectoryConditions(
            dt=self.dt, cfl=self.cfl, bed_level=self.bed_level,
            jet_time=self.jet_time, jet_model=self.jet_model,
            maximum_diameter=self.drop_dmax,
        )

    def drop_conditions(self, diameter: float, atmosphere: Atmosphere,
                        horizontal_angle: Optional[float] = None
                        ) -> DropConditions:
        """
        Inputs of one drop leaving the nozzle.

        The launch speed uses the water density at the ambient temperature
        and pressure, like the drop itself.
        """
        if horizontal_angle is None:
            horizontal_angle = self.horizontal_angle
        density = water_density(atmosphere.temperature, atmosphere.pressure)
        return DropConditions(
            diameter=diameter,
            x=self.x, y=self.y, z=self.z,
            velocity=self.launch_speed(density),
            horizontal_angle=horizontal_angle,
            vertical_angle=self.vertical_angle,
            drag_model=self.drag_model,
            drag_coefficient=self.drag_coefficient,
            detach_model=self.detach_model,
        )

    def sample_drop_conditions(self, rng: np.random.Generator,
                               atmosphere: Atmosphere) -> DropConditions:
        """
        Random drop: diameter uniform in [drop_dmin, drop_dmax], then
        horizontal angle uniform in [angle_min, angle_max].
        """
        diameter = self.drop_dmin + (self.drop_dmax - self.drop_dmin) \
            * rng.uniform()
        angle = self.angle_min + (self.angle_max - self.angle_min) \
            * rng.uniform()
        return self.drop_conditions(diameter, atmosphere, angle)


def simulate_nozzle(nozzle: Nozzle, n_drops: int,
                    air: AirConditions = AirConditions(),
                    seed: int = RANDOM_SEED,
                    probes: Sequence[MeasurementProbe] = (),
                    probe_sink: Optional[Callable] = None) -> List:
    """
    Forward trajectories of ``n_drops`` random drops from one nozzle.

    Each drop draws its diameter, angle, detach time and wind from its own
    ``rng_for_drop(index, seed)`` stream.

    Returns
    -------
    list of TrajectoryResult
    """
    atmosphere = Atmosphere.from_conditions(air)
    conditions = nozzle.trajectory_conditions()
    results = []
    for index in range(n_drops):
        rng = rng_for_drop(index, seed)
        drop = nozzle.sample_drop_conditions(rng, atmosphere)
        trajectory = Trajectory(drop, conditions, atmosphere, rng=rng)
        results.append(trajectory.calculate(probes, probe_sink))
    logger.info("nozzle: %d drops simulated (seed %d)", n_drops, seed)
    return results
