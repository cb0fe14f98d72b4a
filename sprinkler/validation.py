"""
Validation Against Published Data
=================================
Compares the drag laws against the terminal fall velocity of water drops
in stagnant air measured by:
  - Gunn, R. & Kinzer, G.D. "The terminal velocity of fall for water
    droplets in stagnant air". J. Meteorology 6, 243-248 (1949)

At terminal velocity the drag balances the buoyancy-corrected weight:

    0.75 · Cd(v) · ρ_air · v² / (ρ_water · d) = (1 − ρ_air / ρ_water) · g

solved for v with Brent's method. Measurements were taken at 20 °C and
1013 hPa, 50 % relative humidity.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
from scipy.interpolate import interp1d
from scipy.optimize import brentq

from .atmosphere import Atmosphere, initialize_atmosphere
from .config import G
from .drag_model import make_drag_law
from .drop import initialize_drop


# ══════════════════════════════════════════════════════════════════════════
#  Reference data: Gunn & Kinzer (1949), Table 2
# ══════════════════════════════════════════════════════════════════════════

# (diameter_mm, terminal_velocity_m_s)
GUNN_KINZER = np.array([
    (0.1, 0.27), (0.2, 0.72), (0.3, 1.17), (0.4, 1.62), (0.5, 2.06),
    (0.6, 2.47), (0.7, 2.87), (0.8, 3.27), (0.9, 3.67), (1.0, 4.03),
    (1.2, 4.64), (1.4, 5.17), (1.6, 5.65), (1.8, 6.09), (2.0, 6.49),
    (2.2, 6.90), (2.4, 7.27), (2.6, 7.57), (2.8, 7.82), (3.0, 8.06),
    (3.2, 8.26), (3.4, 8.44), (3.6, 8.60), (3.8, 8.72), (4.0, 8.83),
    (4.2, 8.92), (4.4, 8.98), (4.6, 9.03), (4.8, 9.07), (5.0, 9.09),
    (5.2, 9.12), (5.4, 9.14), (5.6, 9.16), (5.8, 9.17),
])

# Bracket for the terminal velocity root (m/s)
VELOCITY_BRACKET = (0.0, 20.0)


@dataclass
class ValidationResult:
    """Result of one validation comparison."""
    diameter: float         # m
    ref_velocity: float     # measured terminal velocity (m/s)
    sim_velocity: float     # computed terminal velocity (m/s)
    error_pct: float        # % error


def reference_terminal_velocity(diameter):
    """Measured terminal velocity (m/s) interpolated at ``diameter`` (m)."""
    table = interp1d(GUNN_KINZER[:, 0] * 1e-3, GUNN_KINZER[:, 1],
                     kind='cubic')
    v = table(diameter)
    return float(v) if np.ndim(v) == 0 else v


def terminal_velocity(diameter: float, atmosphere: Atmosphere,
                      drag_law) -> float:
    """
    Fall velocity (m/s) at which the drag balances the weight.

    Raises
    ------
    ValueError
        If the drag law never balances the weight inside the bracket
        (e.g. a zero constant coefficient).
    """
    drop = initialize_drop(diameter, atmosphere)
    weight = (1.0 - atmosphere.density / drop.density) * G

    def balance(v):
        cd = drag_law.cd(drop, atmosphere, v)
        return 0.75 * cd * atmosphere.density * v * v \
            / (drop.density * diameter) - weight

    return brentq(balance, *VELOCITY_BRACKET, xtol=1e-10)


def validate_terminal_velocity(drag_law='sphere',
                               diameters: Optional[Sequence[float]] = None,
                               atmosphere: Optional[Atmosphere] = None,
                               verbose: bool = True
                               ) -> List[ValidationResult]:
    """
    Compute the terminal velocity of each diameter and compare against the
    interpolated Gunn & Kinzer measurements.

    Parameters
    ----------
    drag_law : str or drag law object
        Tag accepted by ``make_drag_law`` or a resolved law
    diameters : sequence of float, optional
        Diameters (m); defaults to the tabulated ones
    atmosphere : Atmosphere, optional
        Defaults to the measurement conditions

    Returns list of ValidationResult for each diameter.
    """
    if isinstance(drag_law, str):
        drag_law = make_drag_law(drag_law)
    if atmosphere is None:
        atmosphere = initialize_atmosphere(temperature=20.0, pressure=101300.0,
                                           humidity=50.0)
    if diameters is None:
        diameters = GUNN_KINZER[:, 0] * 1e-3

    results = []

    if verbose:
        print(f"\n{'='*52}")
        print(f"  VALIDATION: terminal velocity, {drag_law.name} drag")
        print(f"  Air: {atmosphere.temperature:.1f} °C | "
              f"ρ = {atmosphere.density:.4f} kg/m³")
        print(f"{'='*52}")
        print(f"{'d (mm)':>8} {'Ref v (m/s)':>12} {'Sim v (m/s)':>12} "
              f"{'Err %':>8}")
        print("-" * 52)

    for d in diameters:
        ref = reference_terminal_velocity(d)
        sim = terminal_velocity(d, atmosphere, drag_law)
        err = 100.0 * (sim - ref) / ref
        results.append(ValidationResult(
            diameter=float(d),
            ref_velocity=ref,
            sim_velocity=sim,
            error_pct=err,
        ))
        if verbose:
            print(f"{d * 1000:>8.2f} {ref:>12.3f} {sim:>12.3f} {err:>+8.1f}")

    if verbose:
        avg_err = np.mean([abs(r.error_pct) for r in results])
        print("-" * 52)
        print(f"  Mean absolute error: {avg_err:.1f}%")
        status = "✓ PASS" if avg_err < 15 else "✗ NEEDS TUNING"
        print(f"  Status: {status}")
        print(f"{'='*52}\n")

    return results


def run_all_validations(verbose: bool = True):
    """Validate every drag law with a Reynolds-dependent coefficient."""
    all_results = {}
    for name in ('sphere', 'ovoid'):
        all_results[name] = validate_terminal_velocity(name, verbose=verbose)
    return all_results


if __name__ == "__main__":
    run_all_validations(verbose=True)
