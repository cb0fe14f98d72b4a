"""
Numerical Integration Engine
============================
Advances one drop from the nozzle to the soil (forward mode) or from a
measured landing state back to the nozzle or the main jet (inverse mode).

Equations of motion:
    dr/dt = v
    dv/dt = a(r, v)   (from drop.move)

integrated with the classic 4th-order Runge-Kutta method. The step size is
re-derived before every step as

    dt = min(dt_max, cfl / |drag|)

a CFL-like bound on dt·|drag|, negated when integrating backward in time.

Forward flight runs through: jet transition → free flight → impact
correction. The jet transition is one of
  - 'null_drag':   drag-free projectile motion during the jet time
  - 'progressive': RK4 with a drag factor ramping from 0.1 to 1
  - 'big_drops':   'progressive' using the maximum stable drop diameter

The impact and initial corrections walk the last step back, assuming a
constant acceleration, so that the drop lies exactly on the target plane.

Output: TrajectoryResult dataclass with the full state history.
"""

import logging
import math
from dataclasses import dataclass, field
from itertools import takewhile
from typing import Callable, List, Optional, Sequence

import numpy as np

from .atmosphere import Atmosphere
from .config import (
    G, RANDOM_SEED, AirConditions, DropConditions, TrajectoryConditions,
)
from .drag_model import make_drag_law
from .drop import initialize_drop, move, sample_jet_time
from .jet import Jet
from .measurement import MeasurementProbe
from .records import MeasurementRecord, TrajectoryRecord

logger = logging.getLogger(__name__)


class TrajectoryError(RuntimeError):
    """The trajectory could not be completed."""


class DegenerateTrajectoryError(TrajectoryError):
    """Root-finding on a target plane has no real solution."""


class TrajectoryNotCompletedError(TrajectoryError):
    """The maximum number of integration steps was exceeded."""


def plane_correction_time(position: float, velocity: float,
                          acceleration: float, target: float) -> float:
    """
    Time τ to walk back so that one coordinate reaches ``target``.

    Solves ``position − τ·velocity + ½τ²·acceleration = target`` for the
    root of smallest magnitude, in a form free of cancellation so that a
    vanishing acceleration reduces to the linear case.

    Raises
    ------
    DegenerateTrajectoryError
        If the plane cannot be reached with the local acceleration.
    """
    h = target - position
    if h == 0.0:
        return 0.0
    discriminant = velocity * velocity + 2.0 * acceleration * h
    if discriminant < 0.0:
        raise DegenerateTrajectoryError(
            f"plane {target:g} unreachable: position={position:g} "
            f"velocity={velocity:g} acceleration={acceleration:g}"
        )
    b = -velocity
    q = b + math.copysign(math.sqrt(discriminant), b)
    if q == 0.0:
        raise DegenerateTrajectoryError(
            f"plane {target:g} unreachable: zero velocity and acceleration"
        )
    tau = 2.0 * h / q
    if not math.isfinite(tau):
        raise DegenerateTrajectoryError(f"non finite correction time {tau!r}")
    return tau


@dataclass
class TrajectoryResult:
    """Complete trajectory output."""
    mode: str                 # 'forward', 'inverse' or 'inverse_jet'
    dt: float                 # maximum time step used

    # Arrays, each of shape (N,)
    time: np.ndarray
    x: np.ndarray
    y: np.ndarray
    z: np.ndarray
    vx: np.ndarray
    vy: np.ndarray
    vz: np.ndarray
    drag: np.ndarray
    diameter: np.ndarray

    measurements: List[MeasurementRecord] = field(default_factory=list)
    exit_point: Optional[TrajectoryRecord] = None

    @property
    def records(self) -> List[TrajectoryRecord]:
        return [TrajectoryRecord(*row) for row in zip(
            self.time, self.x, self.y, self.z, self.vx, self.vy, self.vz,
            self.drag, self.diameter)]

    @property
    def final_position(self) -> np.ndarray:
        return np.array([self.x[-1], self.y[-1], self.z[-1]])

    @property
    def final_velocity(self) -> np.ndarray:
        return np.array([self.vx[-1], self.vy[-1], self.vz[-1]])

    @property
    def final_speed(self) -> float:
        return float(np.linalg.norm(self.final_velocity))

    @property
    def final_vertical_angle_deg(self) -> float:
        """Angle of the final velocity above the horizontal."""
        v_horiz = math.hypot(self.vx[-1], self.vy[-1])
        return math.degrees(math.atan2(self.vz[-1], v_horiz))

    @property
    def final_horizontal_angle_deg(self) -> float:
        return math.degrees(math.atan2(self.vy[-1], self.vx[-1]))

    @property
    def horizontal_distance(self) -> float:
        """Horizontal distance between the first and last records (m)."""
        return math.hypot(self.x[-1] - self.x[0], self.y[-1] - self.y[0])

    @property
    def flight_time(self) -> float:
        return abs(float(self.time[-1] - self.time[0]))

    @property
    def max_height(self) -> float:
        return float(np.max(self.z))

    def summary(self) -> str:
        """Human-readable summary string."""
        title = {'forward': 'IMPACT', 'inverse': 'INITIAL POINT',
                 'inverse_jet': 'JET EXIT'}.get(self.mode, self.mode.upper())
        x, y, z = self.final_position
        lines = [
            f"╔══════════════════════════════════════════════════════╗",
            f"║  TRAJECTORY SUMMARY — {self.mode:<30s} ║",
            f"╠══════════════════════════════════════════════════════╣",
            f"║  Diameter     : {self.diameter[0] * 1000:>10.3f} mm{'':<23s} ║",
            f"║  Max timestep : {self.dt:>10.4g} s{'':<24s} ║",
            f"║  Records      : {len(self.time):>10d}{'':<26s} ║",
            f"╠══════════════════════════════════════════════════════╣",
            f"║  {title + ' x':<13s}: {x:>10.3f} m{'':<24s} ║",
            f"║  {title + ' y':<13s}: {y:>10.3f} m{'':<24s} ║",
            f"║  {title + ' z':<13s}: {z:>10.3f} m{'':<24s} ║",
            f"║  Distance     : {self.horizontal_distance:>10.3f} m{'':<24s} ║",
            f"║  Max height   : {self.max_height:>10.3f} m{'':<24s} ║",
            f"║  Flight time  : {self.flight_time:>10.3f} s{'':<24s} ║",
            f"║  Final speed  : {self.final_speed:>10.3f} m/s{'':<22s} ║",
            f"║  Final angle  : {self.final_vertical_angle_deg:>10.2f} °{'':<24s} ║",
            f"╚══════════════════════════════════════════════════════╝",
        ]
        return '\n'.join(lines)


def _build_result(records: Sequence[TrajectoryRecord], mode: str, dt: float,
                  measurements=None, exit_point=None) -> TrajectoryResult:
    """Convert a record list to TrajectoryResult."""
    columns = np.array(records, dtype=float).reshape(-1, 9).T
    t, x, y, z, vx, vy, vz, drag, diameter = columns
    return TrajectoryResult(
        mode=mode, dt=dt,
        time=t, x=x, y=y, z=z, vx=vx, vy=vy, vz=vz,
        drag=drag, diameter=diameter,
        measurements=list(measurements or []),
        exit_point=exit_point,
    )


class Trajectory:
    """
    Integration state of one drop.

    Construction follows the per-drop initialisation order: drop properties,
    jet time sampled by the detach model, drag law, then the randomized wind
    (one uniform and one normal draw from ``rng``).

    Parameters
    ----------
    drop_conditions : DropConditions
    trajectory_conditions : TrajectoryConditions
    atmosphere : Atmosphere
        Shared air state (not modified)
    rng : np.random.Generator, optional
        Generator for the detach time and the wind perturbation
    sink : callable, optional
        Receives every TrajectoryRecord
    randomize_wind : bool
        Apply the wind uncertainty to this drop
    sphere_correlation : str
        Sphere drag correlation ('fukui' or 'morsi_alexander')
    """

    def __init__(self, drop_conditions: DropConditions,
                 trajectory_conditions: TrajectoryConditions,
                 atmosphere: Atmosphere,
                 rng: Optional[np.random.Generator] = None,
                 sink: Optional[Callable] = None,
                 randomize_wind: bool = True,
                 sphere_correlation: str = 'fukui'):
        self.conditions = trajectory_conditions
        self.rng = rng if rng is not None else np.random.default_rng(RANDOM_SEED)
        self.sink = sink

        self.drop = initialize_drop(drop_conditions.diameter, atmosphere)
        self.drop.r = drop_conditions.initial_position()
        self.drop.v = drop_conditions.initial_velocity_vector()
        self.jet_time = trajectory_conditions.jet_time
        self.drop.jet_time = sample_jet_time(
            trajectory_conditions.jet_time, drop_conditions.detach_model,
            self.rng)
        self.drag_law = make_drag_law(drop_conditions.drag_model,
                                      drop_conditions.drag_coefficient,
                                      sphere_correlation)
        self.atmosphere = (atmosphere.with_wind_uncertainty(self.rng)
                           if randomize_wind else atmosphere)

        self.jet_model = trajectory_conditions.jet_model
        self.bed_level = trajectory_conditions.bed_level
        self.cfl = trajectory_conditions.cfl
        self.maximum_diameter = trajectory_conditions.maximum_diameter
        self.max_steps = trajectory_conditions.max_steps
        self.t = 0.0
        self.dt = trajectory_conditions.dt
        self.phase = 'created'
        self.records: List[TrajectoryRecord] = []
        self._streaming = True

    # ── helpers ──────────────────────────────────────────────────────────
    def _move(self, factor: float = 1.0) -> float:
        return move(self.drop, self.atmosphere, self.drag_law, factor)

    def _stable_dt(self, factor: float = 1.0) -> float:
        """Step bounded by the CFL number; updates the drop acceleration."""
        magnitude = self._move(factor)
        if magnitude > 0.0:
            return min(self.conditions.dt, self.cfl / magnitude)
        return self.conditions.dt

    def _in_flight(self) -> bool:
        d = self.drop
        return d.r[2] > self.bed_level or d.v[2] > 0.0

    def _check_steps(self, steps: int):
        if steps > self.max_steps:
            raise TrajectoryNotCompletedError(
                f"trajectory not completed after {self.max_steps} steps "
                f"(t={self.t:g}, r={self.drop.r.tolist()})"
            )

    def write(self):
        """Record the current state."""
        record = TrajectoryRecord.from_drop(self.t, self.drop)
        self.records.append(record)
        if self._streaming and self.sink is not None:
            self.sink(record)

    # ── integration ──────────────────────────────────────────────────────
    def runge_kutta_4(self, factor: float = 1.0):
        """
        One RK4 step of size ``self.dt``.

        Stage 1 uses the acceleration left on the drop by the preceding
        ``move`` call.
        """
        d = self.drop
        dt = self.dt
        dt2 = 0.5 * dt

        d2 = d.copy()
        d2.r = d.r + dt2 * d.v
        d2.v = d.v + dt2 * d.a
        move(d2, self.atmosphere, self.drag_law, factor)

        d3 = d.copy()
        d3.r = d.r + dt2 * d2.v
        d3.v = d.v + dt2 * d2.a
        move(d3, self.atmosphere, self.drag_law, factor)

        d4 = d.copy()
        d4.r = d.r + dt * d3.v
        d4.v = d.v + dt * d3.a
        move(d4, self.atmosphere, self.drag_law, factor)

        dt6 = dt / 6.0
        d.r = d.r + dt6 * (d.v + d4.v + 2.0 * (d2.v + d3.v))
        d.v = d.v + dt6 * (d.a + d4.a + 2.0 * (d2.a + d3.a))
        self.t += dt

    # ── jet transition ───────────────────────────────────────────────────
    def jet_null_drag(self):
        """Drag-free projectile motion during the drop jet time."""
        d = self.drop
        self.t = t = d.jet_time
        d.r[0] += t * d.v[0]
        d.r[1] += t * d.v[1]
        d.r[2] += t * (d.v[2] - 0.5 * G * t)
        d.v[2] -= G * t
        if t > 0.0:
            self.write()

    def jet_progressive(self):
        """
        RK4 inside the jet with a drag factor growing linearly from 0.1 at
        the nozzle to 1 at the full jet time.
        """
        d = self.drop
        if d.jet_time <= 0.0:
            return
        steps = 0
        while self.t < d.jet_time:
            factor = 0.1 + 0.9 * self.t / self.jet_time
            self.dt = min(self._stable_dt(factor), d.jet_time - self.t)
            self.runge_kutta_4(factor)
            steps += 1
            self._check_steps(steps)
            if self._in_flight():
                self.write()

    def jet_big_drops(self):
        """Progressive jet computed with the maximum stable drop diameter."""
        d = self.drop
        diameter = d.diameter
        d.diameter = self.maximum_diameter
        try:
            self.jet_progressive()
        finally:
            d.diameter = diameter

    def jet(self):
        """Run the configured jet transition."""
        self.phase = 'jet'
        if self.jet_model == 'null_drag':
            self.jet_null_drag()
        elif self.jet_model == 'progressive':
            self.jet_progressive()
        else:
            self.jet_big_drops()
        logger.debug("jet exit: t=%g r=%s v=%s", self.t,
                     self.drop.r.tolist(), self.drop.v.tolist())

    # ── corrections ──────────────────────────────────────────────────────
    def _walk_back(self, tau: float):
        d = self.drop
        d.r = d.r - tau * (d.v - 0.5 * tau * d.a)
        d.v = d.v - tau * d.a
        self.t -= tau

    def _correct_to_plane(self, axis: int, target: float) -> float:
        d = self.drop
        tau = plane_correction_time(d.r[axis], d.v[axis], d.a[axis], target)
        self._walk_back(tau)
        d.r[axis] = target
        return tau

    def impact_correction(self):
        """Walk the last step back onto the bed level."""
        self.phase = 'impact_correction'
        self._move(1.0)
        tau = self._correct_to_plane(2, self.bed_level)
        logger.debug("impact correction: dt=%g t=%g r=%s", tau, self.t,
                     self.drop.r.tolist())

    def initial_correction(self):
        """Walk the last (backward) step onto the nozzle plane x = 0."""
        self.phase = 'exit_correction'
        self._move(1.0)
        tau = self._correct_to_plane(0, 0.0)
        logger.debug("initial correction: dt=%g t=%g r=%s", tau, self.t,
                     self.drop.r.tolist())

    def _reachable(self, axis: int, target: float) -> Optional[float]:
        d = self.drop
        try:
            return plane_correction_time(d.r[axis], d.v[axis], d.a[axis],
                                         target)
        except DegenerateTrajectoryError:
            return None

    def _exit_correction(self):
        """
        Correct an inverse trajectory onto the first plane it crossed:
        the bed level or the nozzle plane.
        """
        d = self.drop
        below_bed = d.r[2] < self.bed_level
        behind_nozzle = d.r[0] < 0.0
        if below_bed and behind_nozzle:
            self._move(1.0)
            tau_bed = self._reachable(2, self.bed_level)
            tau_nozzle = self._reachable(0, 0.0)
            if tau_bed is None and tau_nozzle is None:
                raise DegenerateTrajectoryError(
                    "inverse trajectory reaches neither the bed level nor "
                    "the nozzle plane")
            if tau_nozzle is None or (tau_bed is not None
                                      and abs(tau_bed) >= abs(tau_nozzle)):
                self.impact_correction()
            else:
                self.initial_correction()
        elif below_bed:
            self.impact_correction()
        elif behind_nozzle:
            self.initial_correction()
        if below_bed and not d.r[0] <= 0.0:
            logger.warning(
                "inverse trajectory reached the bed level at x=%g before "
                "the nozzle plane", d.r[0])

    # ── drivers ──────────────────────────────────────────────────────────
    def calculate(self, probes: Sequence[MeasurementProbe] = (),
                  probe_sink: Optional[Callable] = None) -> TrajectoryResult:
        """
        Forward trajectory from the nozzle to the bed level.

        Parameters
        ----------
        probes : sequence of MeasurementProbe
            Tested after every free-flight step
        probe_sink : callable, optional
            Receives the MeasurementRecord of every probe crossing

        Returns
        -------
        TrajectoryResult
        """
        d = self.drop
        measurements = []
        self.t = 0.0
        self.records = []
        self._streaming = True
        self.write()
        self.jet()

        self.phase = 'flight'
        steps = 0
        while self._in_flight():
            self.dt = self._stable_dt(1.0)
            previous = d.r.copy()
            self.runge_kutta_4(1.0)
            for probe in probes:
                hit = probe.record_crossing(d, previous, probe_sink)
                if hit is not None:
                    measurements.append(hit)
            steps += 1
            self._check_steps(steps)
            if self._in_flight():
                self.write()

        self.impact_correction()
        self.write()
        self.phase = 'terminated'
        logger.info("drop d=%g landed at x=%g y=%g after t=%g s (%d steps)",
                    d.diameter, d.r[0], d.r[1], self.t, steps)
        return _build_result(self.records, 'forward', self.conditions.dt,
                             measurements)

    def _integrate_backward(self, keep_going: Callable[[], bool]) -> int:
        d = self.drop
        steps = 0
        self.phase = 'flight'
        # a landing state sits on the bed level itself
        while d.r[2] >= self.bed_level and d.r[0] > 0.0 and keep_going():
            self.write()
            self.dt = -self._stable_dt(1.0)
            self.runge_kutta_4(1.0)
            steps += 1
            self._check_steps(steps)
        return steps

    def invert(self) -> TrajectoryResult:
        """
        Inverse trajectory: integrate backward in time from the current
        (landing) state until the drop reaches the nozzle plane x = 0 or
        drops below the bed level.
        """
        self.t = 0.0
        self.records = []
        self._streaming = True
        self._integrate_backward(lambda: True)
        self._exit_correction()
        self.write()
        self.phase = 'terminated'
        return _build_result(self.records, 'inverse', self.conditions.dt)

    def invert_with_jet(self, jet: Jet) -> TrajectoryResult:
        """
        Inverse trajectory up to the main jet.

        Tracks the vertical gap between the jet profile and the drop and
        truncates the recorded path at the sample of minimum gap, taken as
        the point where the drop detached from the jet.
        """
        d = self.drop
        self.t = 0.0
        self.records = []
        self._streaming = False
        tracker = {'min_gap': jet.gap(d.r), 'xmin': d.r[0]}

        def below_jet():
            gap = jet.gap(d.r)
            if gap < tracker['min_gap']:
                tracker['min_gap'] = gap
                tracker['xmin'] = d.r[0]
            return gap > 0.0

        self._integrate_backward(below_jet)
        self._exit_correction()
        # the corrected state may itself be the closest to the jet
        below_jet()
        self.write()
        self.phase = 'terminated'

        xmin = tracker['xmin']
        kept = list(takewhile(lambda record: record.x >= xmin, self.records))
        self.records = kept
        self._streaming = True
        if self.sink is not None:
            for record in kept:
                self.sink(record)
        logger.debug("jet exit point: x=%g gap=%g", xmin, tracker['min_gap'])
        return _build_result(kept, 'inverse_jet', self.conditions.dt,
                             exit_point=kept[-1] if kept else None)


def simulate_drop(drop_conditions: DropConditions,
                  trajectory_conditions: TrajectoryConditions,
                  air: AirConditions = AirConditions(),
                  rng: Optional[np.random.Generator] = None,
                  probes: Sequence[MeasurementProbe] = (),
                  sink: Optional[Callable] = None,
                  probe_sink: Optional[Callable] = None) -> TrajectoryResult:
    """
    Forward trajectory of one drop from plain configuration structs.
    """
    atmosphere = Atmosphere.from_conditions(air)
    trajectory = Trajectory(drop_conditions, trajectory_conditions,
                            atmosphere, rng=rng, sink=sink)
    return trajectory.calculate(probes, probe_sink)


def reconstruct_drop(drop_conditions: DropConditions,
                     trajectory_conditions: TrajectoryConditions,
                     air: AirConditions = AirConditions(),
                     jet: Optional[Jet] = None,
                     rng: Optional[np.random.Generator] = None,
                     sink: Optional[Callable] = None) -> TrajectoryResult:
    """
    Inverse trajectory of one drop from its measured landing state, up to
    the nozzle plane or, when ``jet`` is given, up to the main jet.
    """
    atmosphere = Atmosphere.from_conditions(air)
    trajectory = Trajectory(drop_conditions, trajectory_conditions,
                            atmosphere, rng=rng, sink=sink)
    if jet is None:
        return trajectory.invert()
    return trajectory.invert_with_jet(jet)
