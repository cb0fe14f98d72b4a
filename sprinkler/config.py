"""
Configuration & Physical Constants
==================================
Constants and default values shared by the trajectory engine, plus the
plain input structures that a collaborator (console, XML or batch driver)
fills in before a drop is simulated.

The dataclasses validate their own fields when built, so malformed
configuration is reported before the integrator runs. The integrator
assumes the values it receives are physically sane.
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np


# ── Physical constants ────────────────────────────────────────────────────
G                     = 9.81        # m/s²  gravitational acceleration
R                     = 8.314       # J/(mol·K)  thermodynamic constant
AIR_MOLECULAR_MASS    = 0.028964    # kg/mol  dry air
WATER_MOLECULAR_MASS  = 0.018016    # kg/mol
KELVIN_TEMPERATURE    = 273.15      # K  (0 °C)

# ── Default values ────────────────────────────────────────────────────────
AIR_HUMIDITY          = 100.0       # %  saturated
AIR_PRESSURE          = 101325.0    # Pa
AIR_TEMPERATURE       = 20.0        # °C
MAXIMUM_DROP_DIAMETER = 0.0080      # m  maximum diameter of stable drops
MINIMUM_DROP_DIAMETER = 0.0004      # m  minimum diameter of emitted drops
RANDOM_SEED           = 7007        # pseudo-random numbers generator seed
WIND_ANGLE            = 0.0         # degrees  wind azimuth
WIND_HEIGHT           = 2.0         # m  reference height to measure the wind
WIND_UNCERTAINTY      = 0.0         # m/s
WIND_VELOCITY         = 0.0         # m/s
MAX_STEPS             = 1_000_000   # integration steps per phase

# ── Model tags ────────────────────────────────────────────────────────────
DRAG_MODELS   = ('constant', 'sphere', 'ovoid')
DETACH_MODELS = ('total', 'random')
JET_MODELS    = ('null_drag', 'progressive', 'big_drops')


def _check_positive(name: str, value: float):
    if not value > 0.0:
        raise ValueError(f"bad {name}: must be positive, got {value!r}")


def _check_tag(name: str, value: str, allowed):
    if value not in allowed:
        raise ValueError(
            f"unknown {name} '{value}'. Available: {list(allowed)}"
        )


@dataclass(frozen=True)
class AirConditions:
    """
    Atmospheric input values.
    """
    temperature: float = AIR_TEMPERATURE      # °C
    pressure: float = AIR_PRESSURE            # Pa
    humidity: float = AIR_HUMIDITY            # %  relative
    wind_velocity: float = WIND_VELOCITY      # m/s
    wind_angle: float = WIND_ANGLE            # degrees
    wind_uncertainty: float = WIND_UNCERTAINTY  # m/s
    wind_height: float = WIND_HEIGHT          # m

    def __post_init__(self):
        _check_positive('pressure', self.pressure)
        if self.temperature + KELVIN_TEMPERATURE <= 42.85:
            raise ValueError(f"bad temperature: {self.temperature!r}")
        if not 0.0 <= self.humidity <= 100.0:
            raise ValueError(f"bad humidity: {self.humidity!r}")
        if self.wind_velocity < 0.0:
            raise ValueError(f"bad wind velocity: {self.wind_velocity!r}")
        if self.wind_uncertainty < 0.0:
            raise ValueError(f"bad wind uncertainty: {self.wind_uncertainty!r}")


@dataclass(frozen=True)
class DropConditions:
    """
    Initial state and models of one simulated drop.

    The initial velocity is either given by speed and angles or, when
    ``velocity_vector`` is set, directly as (vx, vy, vz). The explicit vector
    is how an inverse reconstruction is started from a measured impact.
    """
    diameter: float = 0.003                   # m
    x: float = 0.0                            # m
    y: float = 0.0                            # m
    z: float = 0.0                            # m
    velocity: float = 0.0                     # m/s
    horizontal_angle: float = 0.0             # degrees
    vertical_angle: float = 0.0               # degrees
    velocity_vector: Optional[Tuple[float, float, float]] = None
    drag_model: str = 'sphere'
    drag_coefficient: float = 0.0             # constant model only
    detach_model: str = 'total'

    def __post_init__(self):
        _check_positive('diameter', self.diameter)
        _check_tag('drag model', self.drag_model, DRAG_MODELS)
        _check_tag('detach model', self.detach_model, DETACH_MODELS)
        if self.drag_coefficient < 0.0:
            raise ValueError(f"bad drag value: {self.drag_coefficient!r}")
        if self.velocity < 0.0:
            raise ValueError(f"bad velocity: {self.velocity!r}")
        if self.velocity_vector is not None and len(self.velocity_vector) != 3:
            raise ValueError("velocity vector needs 3 components")

    def initial_position(self) -> np.ndarray:
        """Starting position [x, y, z]."""
        return np.array([self.x, self.y, self.z], dtype=float)

    def initial_velocity_vector(self) -> np.ndarray:
        """
        Convert launch speed + angles to [vx, vy, vz] unless an explicit
        vector was given.
        """
        if self.velocity_vector is not None:
            return np.array(self.velocity_vector, dtype=float)
        h = math.radians(self.horizontal_angle)
        v = math.radians(self.vertical_angle)
        return self.velocity * np.array([
            math.cos(v) * math.cos(h),
            math.cos(v) * math.sin(h),
            math.sin(v),
        ])


@dataclass(frozen=True)
class TrajectoryConditions:
    """
    Numerical and jet parameters of a trajectory.
    """
    dt: float = 0.001                         # s  maximum time step size
    cfl: float = 0.01                         # stability number
    bed_level: float = 0.0                    # m  impact plane
    jet_time: float = 0.0                     # s  time of the emitted jet
    jet_model: str = 'null_drag'
    maximum_diameter: float = MAXIMUM_DROP_DIAMETER  # m  big-drops model
    max_steps: int = MAX_STEPS

    def __post_init__(self):
        _check_positive('time step size', self.dt)
        _check_positive('CFL number', self.cfl)
        _check_positive('maximum drop diameter', self.maximum_diameter)
        _check_tag('jet model', self.jet_model, JET_MODELS)
        if self.jet_time < 0.0:
            raise ValueError(f"bad jet time: {self.jet_time!r}")
        if self.max_steps < 1:
            raise ValueError(f"bad maximum steps: {self.max_steps!r}")
