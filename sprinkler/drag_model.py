"""
Aerodynamic Drag Model
======================
Drag coefficient (Cd) laws for water drops.

Three interchangeable laws, resolved once per drop:
- Constant coefficient
- Smooth solid sphere, Cd as a function of the Reynolds number
    - Fukui et al. (1980)  (default)
    - Morsi & Alexander (1972)
- Deformed (ovoid) drop, Burguete et al. (2016): the sphere law corrected by
  an axis ratio that decreases with the Weber number

A Reynolds number of zero (drop at rest relative to the air) always gives
zero drag.
"""

from dataclasses import dataclass

from .config import DRAG_MODELS


# Flattening limit of the axis ratio
MINIMUM_AXIS_RATIO = 0.642

SPHERE_CORRELATIONS = ('fukui', 'morsi_alexander')


def reynolds_number(speed: float, diameter: float,
                    kinematic_viscosity: float) -> float:
    """Re = v d / ν."""
    return speed * diameter / kinematic_viscosity


def weber_number(air_density: float, speed: float, diameter: float,
                 surface_tension: float) -> float:
    """We = ¼ ρ_air v² d / σ."""
    return 0.25 * air_density * speed * speed * diameter / surface_tension


def sphere_drag_fukui(re: float) -> float:
    """Fukui et al. (1980) drag coefficient of a smooth sphere."""
    if re >= 1440.0:
        return 0.45
    if re >= 128.0:
        return 72.2 / re - 0.0000556 * re + 0.46
    if re > 0.0:
        return 33.3 / re - 0.0033 * re + 1.2
    return 0.0


def sphere_drag_morsi_alexander(re: float) -> float:
    """Morsi & Alexander (1972) drag coefficient of a smooth sphere."""
    if re > 10000.0:
        return 0.5191 - 1662.5 / re + 5416700.0 / (re * re)
    if re > 5000.0:
        return 0.46 - 490.546 / re + 578700.0 / (re * re)
    if re > 1000.0:
        return 0.357 + 148.62 / re - 47500.0 / (re * re)
    if re > 100.0:
        return 0.3644 + 98.33 / re - 2778.0 / (re * re)
    if re > 10.0:
        return 0.6167 + 46.5 / re - 116.67 / (re * re)
    if re > 1.0:
        return 1.222 + 29.1667 / re - 3.8889 / (re * re)
    if re > 0.1:
        return 3.69 + 22.73 / re + 0.0903 / (re * re)
    if re > 0.0:
        return 24.0 / re
    return 0.0


_SPHERE_LAWS = {
    'fukui': sphere_drag_fukui,
    'morsi_alexander': sphere_drag_morsi_alexander,
}


def axis_ratio_burguete(weber: float) -> float:
    """
    Axis ratio of a deformed drop, Burguete et al. (2016).
    Clamped to the flattening limit 0.642.
    """
    return max(1.0 - 0.1742 * weber, MINIMUM_AXIS_RATIO)


def ovoid_correction(axis_ratio: float) -> float:
    """Factor applied to the sphere Cd for a drop of the given axis ratio."""
    x = axis_ratio - 1.0
    return (1.0 + 2.322 * x * x) / axis_ratio ** (2.0 / 3.0)


@dataclass(frozen=True)
class ConstantDrag:
    """Fixed drag coefficient."""
    coefficient: float
    name: str = 'constant'

    def cd(self, drop, atmosphere, speed: float) -> float:
        return self.coefficient


@dataclass(frozen=True)
class SphereDrag:
    """Drag coefficient of a smooth solid sphere."""
    correlation: str = 'fukui'
    name: str = 'sphere'

    def __post_init__(self):
        if self.correlation not in _SPHERE_LAWS:
            raise ValueError(
                f"Unknown sphere correlation '{self.correlation}'. "
                f"Available: {list(SPHERE_CORRELATIONS)}"
            )

    def sphere_cd(self, re: float) -> float:
        return _SPHERE_LAWS[self.correlation](re)

    def cd(self, drop, atmosphere, speed: float) -> float:
        re = reynolds_number(speed, drop.diameter,
                             atmosphere.kinematic_viscosity)
        return self.sphere_cd(re)


@dataclass(frozen=True)
class OvoidDrag(SphereDrag):
    """
    Drag coefficient of a drop deformed by the air flow.

    Updates ``drop.axis_ratio`` on every evaluation.
    """
    name: str = 'ovoid'

    def cd(self, drop, atmosphere, speed: float) -> float:
        we = weber_number(atmosphere.density, speed, drop.diameter,
                          drop.surface_tension)
        drop.axis_ratio = axis_ratio_burguete(we)
        return ovoid_correction(drop.axis_ratio) \
            * SphereDrag.cd(self, drop, atmosphere, speed)


def make_drag_law(name: str, coefficient: float = 0.0,
                  correlation: str = 'fukui'):
    """
    Resolve a drag model tag into its law.

    Parameters
    ----------
    name : str
        One of 'constant', 'sphere', 'ovoid'
    coefficient : float
        Drag coefficient of the constant model
    correlation : str
        Sphere correlation used by the 'sphere' and 'ovoid' models
    """
    if name == 'constant':
        return ConstantDrag(coefficient)
    if name == 'sphere':
        return SphereDrag(correlation)
    if name == 'ovoid':
        return OvoidDrag(correlation)
    raise ValueError(
        f"Unknown drag model '{name}'. Available: {list(DRAG_MODELS)}"
    )
