#!/usr/bin/env python3
"""
═══════════════════════════════════════════════════════════════════════════════
  SPRINKLER DROP TRAJECTORY SIMULATOR — Main Runner
═══════════════════════════════════════════════════════════════════════════════

  Executes the complete simulation pipeline:
    1. Humid air properties
    2. Drag coefficient laws
    3. Single drop trajectory (RK4)
    4. Drag law comparison
    5. Jet model comparison
    6. Inverse reconstruction of a measured drop
    7. Random drops from a nozzle with a rain gauge
    8. Validation against Gunn & Kinzer's terminal velocities

  The trajectory of the reference drop is written to outputs/.

  Usage:
    python main.py              # Run everything
    python main.py --quick      # Fewer random drops
    python main.py --debug      # Log every integration phase
═══════════════════════════════════════════════════════════════════════════════
"""

import logging
import os
import sys
import time

import numpy as np

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from sprinkler.atmosphere import initialize_atmosphere
from sprinkler.config import AirConditions, DropConditions, TrajectoryConditions
from sprinkler.drag_model import (
    axis_ratio_burguete, sphere_drag_fukui, sphere_drag_morsi_alexander,
)
from sprinkler.drop import parabolic_estimate
from sprinkler.integrator import Trajectory, simulate_drop
from sprinkler.jet import Jet
from sprinkler.measurement import MeasurementProbe
from sprinkler.nozzle import Nozzle, simulate_nozzle
from sprinkler.records import FileSink, ListSink
from sprinkler.validation import validate_terminal_velocity


def banner():
    print("""
╔═══════════════════════════════════════════════════════════════════════╗
║                                                                       ║
║     SPRINKLER DROP TRAJECTORY SIMULATOR                               ║
║     ─────────────────────────────────────────────────────             ║
║     Physics: Gravity · Buoyancy · Drag(Re, We) · Humid air · Wind     ║
║     Methods: adaptive RK4 │ forward and inverse in time               ║
║                                                                       ║
╚═══════════════════════════════════════════════════════════════════════╝
""")


def section(title):
    print(f"\n{'─'*60}")
    print(f"  {title}")
    print(f"{'─'*60}")


def ensure_output_dir(path):
    os.makedirs(path, exist_ok=True)
    return path


def main():
    start_time = time.time()
    quick = '--quick' in sys.argv
    logging.basicConfig(
        level=logging.DEBUG if '--debug' in sys.argv else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    banner()
    out = ensure_output_dir('outputs')

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 1: Air Properties
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 1: Humid Air Properties")
    print(f"  {'T (°C)':>7} {'ρ (kg/m³)':>11} {'μ (Pa·s)':>11} "
          f"{'ν (m²/s)':>11} {'pv (Pa)':>9}")
    for t in [0, 10, 20, 30, 40]:
        air = initialize_atmosphere(temperature=t)
        print(f"  {t:>7} {air.density:>11.5f} {air.dynamic_viscosity:>11.4e} "
              f"{air.kinematic_viscosity:>11.4e} {air.vapour_pressure:>9.1f}")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 2: Drag Coefficient Laws
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 2: Cd vs Reynolds Number")
    print(f"  {'Re':>8} {'Fukui':>8} {'Morsi':>8}")
    for re in [10, 100, 128, 500, 1440, 3000]:
        print(f"  {re:>8} {sphere_drag_fukui(re):>8.4f} "
              f"{sphere_drag_morsi_alexander(re):>8.4f}")
    print(f"\n  Axis ratio: We=0 → {axis_ratio_burguete(0):.3f}  "
          f"We=1 → {axis_ratio_burguete(1):.3f}  "
          f"We=5 → {axis_ratio_burguete(5):.3f}")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 3: Reference Drop
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 3: Reference Drop (3 mm, 15 m/s, 30°)")

    air = AirConditions(wind_velocity=2.0, wind_angle=90.0)
    drop = DropConditions(diameter=0.003, z=1.0, velocity=15.0,
                          vertical_angle=30.0, drag_model='ovoid')
    conditions = TrajectoryConditions(dt=0.001, cfl=0.01)

    with FileSink(f'{out}/reference_trajectory.dat') as sink:
        result = simulate_drop(drop, conditions, air, sink=sink)
    print(result.summary())
    print(f"  ✓ Saved: {out}/reference_trajectory.dat")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 4: Drag Law Comparison
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 4: Drag Law Comparison (Same Launch Conditions)")

    still = AirConditions()
    for name, kwargs in [('No drag', dict(drag_model='constant')),
                         ('Constant Cd=0.4', dict(drag_model='constant',
                                                  drag_coefficient=0.4)),
                         ('Sphere', dict(drag_model='sphere')),
                         ('Ovoid', dict(drag_model='ovoid'))]:
        d = DropConditions(diameter=0.003, z=1.0, velocity=15.0,
                           vertical_angle=30.0, **kwargs)
        r = simulate_drop(d, conditions, still)
        print(f"  {name:<18s}  Distance: {r.horizontal_distance:>7.2f} m  "
              f"Max height: {r.max_height:>5.2f} m  "
              f"ToF: {r.flight_time:>5.2f} s")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 5: Jet Models
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 5: Jet Models (0.2 s jet)")

    for model in ['null_drag', 'progressive', 'big_drops']:
        jet_conditions = TrajectoryConditions(jet_time=0.2, jet_model=model)
        for diameter in [0.001, 0.004]:
            d = DropConditions(diameter=diameter, z=1.0, velocity=20.0,
                               vertical_angle=25.0)
            r = simulate_drop(d, jet_conditions, still)
            print(f"  {model:<12s} d={diameter*1000:.0f} mm  "
                  f"Distance: {r.horizontal_distance:>7.2f} m")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 6: Inverse Reconstruction
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 6: Inverse Reconstruction of the Reference Drop")

    impact = result.records[-1]
    measured = DropConditions(
        diameter=impact.diameter, x=impact.x, y=impact.y, z=impact.z,
        velocity_vector=(impact.vx, impact.vy, impact.vz),
        drag_model='ovoid',
    )
    inverse = Trajectory(measured, TrajectoryConditions(bed_level=-10.0),
                         initialize_atmosphere(wind_velocity=2.0,
                                               wind_angle_deg=90.0),
                         randomize_wind=False)
    back = inverse.invert()
    print(back.summary())
    print(f"  Launch speed recovered: {back.final_speed:.4f} m/s (15 m/s)")
    print(f"  Launch angle recovered: {back.final_vertical_angle_deg:.4f}° "
          f"(30°)")

    jet = Jet((1.0, 0.58, -0.05, 0.0, 0.0))
    inverse_jet = Trajectory(measured, TrajectoryConditions(bed_level=-10.0),
                             initialize_atmosphere(), randomize_wind=False)
    parabola = parabolic_estimate(inverse_jet.drop)
    print(f"  Drag-free estimate at x=0: v={parabola['velocity']:.3f} m/s  "
          f"angle={parabola['angle_deg']:.2f}°")

    detached = inverse_jet.invert_with_jet(jet)
    if detached.exit_point is not None:
        e = detached.exit_point
        print(f"  Jet detachment point: x={e.x:.3f} m  z={e.z:.3f} m  "
              f"t={e.t:.3f} s")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 7: Nozzle + Rain Gauge
    # ══════════════════════════════════════════════════════════════════════
    n_drops = 50 if quick else 500
    section(f"PHASE 7: {n_drops} Random Drops from a Nozzle")

    nozzle = Nozzle(z=0.5, pressure=300000.0, vertical_angle=25.0,
                    angle_min=-5.0, angle_max=5.0, drop_dmin=0.0005,
                    drop_dmax=0.005, jet_time=0.1, jet_model='progressive',
                    detach_model='random')
    gauge = MeasurementProbe(x=8.0, y=0.0, z=0.0, dx=4.0, dy=1.0)
    hits = ListSink()
    results = simulate_nozzle(nozzle, n_drops,
                              AirConditions(wind_uncertainty=0.5),
                              probes=[gauge], probe_sink=hits)
    distances = np.array([r.horizontal_distance for r in results])
    print(f"  Launch speed: {nozzle.launch_speed(998.2):.2f} m/s")
    print(f"  Distance: min {distances.min():.2f} m  "
          f"mean {distances.mean():.2f} m  max {distances.max():.2f} m")
    print(f"  Drops collected by the gauge: {len(hits)}")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 8: Validation
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 8: Validation — Gunn & Kinzer (1949)")
    validate_terminal_velocity('sphere')
    validate_terminal_velocity('ovoid')

    elapsed = time.time() - start_time
    section("COMPLETE")
    print(f"""
  Outputs saved to: {os.path.abspath(out)}/

  Total runtime: {elapsed:.1f} seconds
""")


if __name__ == "__main__":
    main()
