"""
Drop Definition & Forces
========================
Defines the Drop dataclass, the water property correlations it is
initialised with, and the acceleration acting on it:
  - Gravity, corrected by the air buoyancy
  - Aerodynamic drag on the velocity relative to the wind

Coordinate system:
  x, y = horizontal (x along the nozzle axis for a zero horizontal angle)
  z    = height (up positive)
"""

import math
from dataclasses import dataclass, field

import numpy as np

from .atmosphere import Atmosphere
from .config import G, KELVIN_TEMPERATURE


def water_compressibility(t: float) -> float:
    """
    Isothermal compressibility of air-free water (1/Pa) at ``t`` °C.

    F. E. Jones and G. L. Harris (1992), ITS-90 density of water formulation
    for volumetric standards calibration. J. Res. NIST 97(3), 335-340.
    """
    return 5.083101e-10 + t * (-3.682930e-12 + t * (
        7.263725e-14 + t * (-6.597702e-16 + t * 2.877670e-18)))


def water_density(temperature: float, pressure: float) -> float:
    """
    Density of air-saturated water (kg/m³), Jones & Harris (1992).

    Parameters
    ----------
    temperature : float
        Temperature (°C)
    pressure : float
        Pressure (Pa)
    """
    t = temperature
    return (999.84847 + t * (6.337563e-2 + t * (
        -8.523829e-3 + t * (6.943248e-5 - t * 2.821216e-7)))) \
        * (1.0 + water_compressibility(t) * (pressure - 101325.0))


def water_surface_tension(kelvin: float) -> float:
    """
    Surface tension of pure water (N/m).

    N. B. Vargaftik, B. N. Volkov and L. D. Voljak (1983), International
    tables of the surface tension of water. J. Phys. Chem. Ref. Data 12(3),
    817-820.
    """
    x = 1.0 - kelvin / 647.15
    return 2.358e-1 * x ** 1.256 * (1.0 - 0.625 * x)


@dataclass
class Drop:
    """
    Physical and kinematic state of one simulated drop.
    """
    diameter: float                   # m
    density: float                    # kg/m³
    surface_tension: float            # N/m
    axis_ratio: float = 1.0           # set by the ovoid drag law
    drag: float = 0.0                 # last drag factor (1/s, ≤ 0)
    jet_time: float = 0.0             # s  time still inside the main jet
    r: np.ndarray = field(default_factory=lambda: np.zeros(3))
    v: np.ndarray = field(default_factory=lambda: np.zeros(3))
    a: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def copy(self) -> 'Drop':
        """Independent value copy (used for the Runge-Kutta stages)."""
        return Drop(
            diameter=self.diameter,
            density=self.density,
            surface_tension=self.surface_tension,
            axis_ratio=self.axis_ratio,
            drag=self.drag,
            jet_time=self.jet_time,
            r=self.r.copy(),
            v=self.v.copy(),
            a=self.a.copy(),
        )


def initialize_drop(diameter: float, atmosphere: Atmosphere) -> Drop:
    """
    Drop of the given diameter (m) with density and surface tension taken at
    the ambient temperature and pressure.
    """
    return Drop(
        diameter=diameter,
        density=water_density(atmosphere.temperature, atmosphere.pressure),
        surface_tension=water_surface_tension(
            atmosphere.temperature + KELVIN_TEMPERATURE),
    )


def sample_jet_time(jet_time: float, detach_model: str,
                    rng: np.random.Generator) -> float:
    """
    Time the drop stays inside the main jet.

    'total' keeps the full jet time; 'random' takes a uniform fraction of it
    (one draw from ``rng``).
    """
    if detach_model == 'total':
        return jet_time
    if detach_model == 'random':
        return jet_time * rng.uniform()
    raise ValueError(f"Unknown detach model '{detach_model}'")


def move(drop: Drop, atmosphere: Atmosphere, drag_law,
         factor: float = 1.0) -> float:
    """
    Update the drop acceleration and drag factor.

    Parameters
    ----------
    drop : Drop
        Drop whose ``a`` and ``drag`` are overwritten
    atmosphere : Atmosphere
        Air state, including the per-drop wind
    drag_law : drag law object
        Provides ``cd(drop, atmosphere, speed)``
    factor : float
        Drag intensity scaling (1 in free flight, < 1 inside the jet)

    Returns
    -------
    float
        Drag magnitude ``−drag`` (1/s), used to bound the time step
    """
    vrx = drop.v[0] - atmosphere.u
    vry = drop.v[1] - atmosphere.v
    vrz = drop.v[2]
    speed = math.sqrt(vrx * vrx + vry * vry + vrz * vrz)
    cd = drag_law.cd(drop, atmosphere, speed)
    drop.drag = -0.75 * factor * speed * cd * atmosphere.density \
        / (drop.density * drop.diameter)
    drop.a[0] = drop.drag * vrx
    drop.a[1] = drop.drag * vry
    drop.a[2] = -(1.0 - atmosphere.density / drop.density) * G \
        + drop.drag * vrz
    return -drop.drag


def parabolic_estimate(drop: Drop) -> dict:
    """
    Drag-free extrapolation of a drop state to the nozzle plane x = 0.

    Useful to compare an inverse reconstruction against the plain parabolic
    model. Requires a nonzero horizontal velocity.
    """
    t = -drop.r[0] / drop.v[0]
    vz = drop.v[2] - G * t
    return {
        'velocity': math.hypot(drop.v[0], vz),
        'angle_deg': math.degrees(math.atan(vz / drop.v[0])),
        'x': drop.r[0] + t * drop.v[0],
        'z': drop.r[2] + t * (drop.v[2] - 0.5 * G * t),
    }
