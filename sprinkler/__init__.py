"""
Sprinkler Drop Trajectory Simulator
===================================
A computational tool that models the flight of water drops emitted by an
irrigation sprinkler, from the nozzle to the soil, incorporating:
  - Gravity with air buoyancy
  - Reynolds-dependent drag (sphere or deformed ovoid drop)
  - Humid air properties (density, viscosity)
  - Mean wind plus a random per-drop perturbation
  - Drop detachment from the main water jet

Integrates forward with an adaptive RK4 scheme, or backward in time to
reconstruct the launch conditions of a measured drop. Drag laws are
validated against Gunn & Kinzer's terminal velocity measurements.
"""

from .config import (
    AirConditions, DropConditions, TrajectoryConditions,
    DRAG_MODELS, DETACH_MODELS, JET_MODELS, RANDOM_SEED,
)
from .atmosphere import (
    Atmosphere, initialize_atmosphere, apply_wind_uncertainty,
    air_viscosity, saturation_pressure, atmosphere_profile,
)
from .drag_model import (
    ConstantDrag, SphereDrag, OvoidDrag, make_drag_law,
    sphere_drag_fukui, sphere_drag_morsi_alexander, axis_ratio_burguete,
)
from .drop import (
    Drop, initialize_drop, move, water_density, water_surface_tension,
)
from .jet import Jet
from .measurement import MeasurementProbe
from .records import (
    TrajectoryRecord, MeasurementRecord, ListSink, FileSink,
    load_trajectory_file,
)
from .integrator import (
    Trajectory, TrajectoryResult, simulate_drop, reconstruct_drop,
    TrajectoryError, DegenerateTrajectoryError, TrajectoryNotCompletedError,
)
from .nozzle import Nozzle, rng_for_drop, simulate_nozzle
from .validation import (
    terminal_velocity, validate_terminal_velocity, run_all_validations,
    GUNN_KINZER,
)

__version__ = "1.0.0"
__all__ = [
    'AirConditions', 'DropConditions', 'TrajectoryConditions',
    'DRAG_MODELS', 'DETACH_MODELS', 'JET_MODELS', 'RANDOM_SEED',
    'Atmosphere', 'initialize_atmosphere', 'apply_wind_uncertainty',
    'air_viscosity', 'saturation_pressure', 'atmosphere_profile',
    'ConstantDrag', 'SphereDrag', 'OvoidDrag', 'make_drag_law',
    'sphere_drag_fukui', 'sphere_drag_morsi_alexander', 'axis_ratio_burguete',
    'Drop', 'initialize_drop', 'move', 'water_density', 'water_surface_tension',
    'Jet', 'MeasurementProbe',
    'TrajectoryRecord', 'MeasurementRecord', 'ListSink', 'FileSink',
    'load_trajectory_file',
    'Trajectory', 'TrajectoryResult', 'simulate_drop', 'reconstruct_drop',
    'TrajectoryError', 'DegenerateTrajectoryError',
    'TrajectoryNotCompletedError',
    'Nozzle', 'rng_for_drop', 'simulate_nozzle',
    'terminal_velocity', 'validate_terminal_velocity', 'run_all_validations',
    'GUNN_KINZER',
]
