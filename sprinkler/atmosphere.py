"""
Atmospheric Model
=================
Derives the air properties that govern drop drag (density, dynamic and
kinematic viscosity) from temperature, pressure and relative humidity, and
applies the stochastic wind perturbation drawn once per drop.

  - Dynamic viscosity: Sutherland's law
  - Water saturation pressure: Antoine-type equation
  - Density: ideal-gas mixture of dry air and water vapour

Preconditions (not checked here): temperature above the Antoine singularity
(42.85 K) and positive pressure.
"""

import logging
import math
from dataclasses import dataclass, replace
from typing import Tuple

import numpy as np

from .config import (
    AIR_HUMIDITY, AIR_MOLECULAR_MASS, AIR_PRESSURE, AIR_TEMPERATURE,
    KELVIN_TEMPERATURE, R, WATER_MOLECULAR_MASS, WIND_ANGLE, WIND_HEIGHT,
    WIND_UNCERTAINTY, WIND_VELOCITY, AirConditions,
)

logger = logging.getLogger(__name__)

# Bound of the Gaussian factor applied to the wind uncertainty
WIND_UNCERTAINTY_LIMIT = 5.0


def air_viscosity(kelvin: float) -> float:
    """
    Dynamic viscosity of air (Pa·s) from Sutherland's equation.
    """
    return 1.458e-6 * kelvin * math.sqrt(kelvin) / (kelvin + 110.4)


def saturation_pressure(kelvin: float) -> float:
    """
    Water saturation pressure in air (Pa) from the Antoine equation.
    """
    return math.exp(23.7836 - 3782.89 / (kelvin - 42.85))


@dataclass(frozen=True)
class Atmosphere:
    """
    Air state for one simulation run.

    ``vx, vy`` is the mean wind; ``u, v`` is the wind actually felt by the
    current drop (mean plus the random perturbation).
    """
    temperature: float            # °C
    pressure: float               # Pa
    humidity: float               # %
    kelvin: float                 # K
    dynamic_viscosity: float      # Pa·s
    kinematic_viscosity: float    # m²/s
    saturation_pressure: float    # Pa
    vapour_pressure: float        # Pa
    density: float                # kg/m³
    wind_velocity: float          # m/s
    wind_angle: float             # rad
    wind_uncertainty: float       # m/s
    wind_height: float            # m
    vx: float                     # m/s  mean wind
    vy: float
    u: float                      # m/s  per-drop wind
    v: float

    @classmethod
    def from_conditions(cls, conditions: AirConditions) -> 'Atmosphere':
        """Build the atmosphere from a validated configuration struct."""
        return initialize_atmosphere(
            conditions.temperature, conditions.pressure, conditions.humidity,
            conditions.wind_velocity, conditions.wind_angle,
            conditions.wind_uncertainty, conditions.wind_height,
        )

    def with_wind_uncertainty(self, rng: np.random.Generator) -> 'Atmosphere':
        """Copy of this atmosphere carrying a freshly randomized wind."""
        u, v = apply_wind_uncertainty(self, rng)
        return replace(self, u=u, v=v)


def initialize_atmosphere(temperature: float = AIR_TEMPERATURE,
                          pressure: float = AIR_PRESSURE,
                          humidity: float = AIR_HUMIDITY,
                          wind_velocity: float = WIND_VELOCITY,
                          wind_angle_deg: float = WIND_ANGLE,
                          wind_uncertainty: float = WIND_UNCERTAINTY,
                          reference_height: float = WIND_HEIGHT) -> Atmosphere:
    """
    Compute every derived air property.

    Parameters
    ----------
    temperature : float
        Air temperature (°C)
    pressure : float
        Air pressure (Pa)
    humidity : float
        Relative humidity (%)
    wind_velocity, wind_angle_deg : float
        Mean wind speed (m/s) and azimuth (degrees)
    wind_uncertainty : float
        Scale of the random wind perturbation (m/s)
    reference_height : float
        Height at which the wind was measured (m)
    """
    kelvin = temperature + KELVIN_TEMPERATURE
    dynamic = air_viscosity(kelvin)
    saturation = saturation_pressure(kelvin)
    vapour = saturation * 0.01 * humidity
    density = (AIR_MOLECULAR_MASS * pressure
               + (WATER_MOLECULAR_MASS - AIR_MOLECULAR_MASS) * vapour) \
        / (R * kelvin)
    angle = math.radians(wind_angle_deg)
    vx = wind_velocity * math.cos(angle)
    vy = wind_velocity * math.sin(angle)
    atmosphere = Atmosphere(
        temperature=temperature,
        pressure=pressure,
        humidity=humidity,
        kelvin=kelvin,
        dynamic_viscosity=dynamic,
        kinematic_viscosity=dynamic / density,
        saturation_pressure=saturation,
        vapour_pressure=vapour,
        density=density,
        wind_velocity=wind_velocity,
        wind_angle=angle,
        wind_uncertainty=wind_uncertainty,
        wind_height=reference_height,
        vx=vx,
        vy=vy,
        u=vx,
        v=vy,
    )
    logger.debug(
        "Air: temperature=%g pressure=%g humidity=%g density=%g viscosity=%e",
        temperature, pressure, humidity, density, dynamic,
    )
    return atmosphere


def apply_wind_uncertainty(atmosphere: Atmosphere,
                           rng: np.random.Generator) -> Tuple[float, float]:
    """
    Random wind felt by one drop.

    Draws an angle uniform in [0, 2π) and a magnitude
    ``uncertainty · min(5, |N(0, 1)|)`` and adds that vector to the mean
    wind. Advances ``rng`` by one uniform and one normal draw.
    """
    angle = 2.0 * math.pi * rng.uniform()
    uncertainty = atmosphere.wind_uncertainty * min(
        WIND_UNCERTAINTY_LIMIT, abs(rng.standard_normal())
    )
    return (atmosphere.vx + uncertainty * math.cos(angle),
            atmosphere.vy + uncertainty * math.sin(angle))


def atmosphere_profile(temperatures: np.ndarray, pressure: float = AIR_PRESSURE,
                       humidity: float = AIR_HUMIDITY) -> dict:
    """
    Air properties over an array of temperatures (°C).
    Returns dict with keys: 'temperature', 'density', 'dynamic_viscosity',
    'kinematic_viscosity', 'vapour_pressure'.
    """
    states = [initialize_atmosphere(t, pressure, humidity)
              for t in temperatures]
    return {
        'temperature': np.asarray(temperatures, dtype=float),
        'density': np.array([s.density for s in states]),
        'dynamic_viscosity': np.array([s.dynamic_viscosity for s in states]),
        'kinematic_viscosity': np.array([s.kinematic_viscosity for s in states]),
        'vapour_pressure': np.array([s.vapour_pressure for s in states]),
    }
