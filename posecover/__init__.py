"""
posecover - set-cover sensing-pose planning on 2D occupancy maps.

This package selects a small set of (position, heading) poses from which a
sensor with a polygonal field of view observes every free cell of a map,
using an iteratively reweighted LP relaxation followed by an exact 0/1
set-cover solve.

Main modules:
    - posecover.grid: Occupancy maps, loading, synthetic maps and coordinates
    - posecover.core: Footprints, discretization and visibility matrices
    - posecover.optimization: Solver adapter, relaxation, reduction and runner
    - posecover.visualization: Plotting and animation utilities
    - posecover.config: Configuration management

Quick start:
    >>> import numpy as np
    >>> from posecover import plan_sensing_poses, Footprint
    >>> from posecover.grid import OccupancyGrid, create_floorplan_map
    >>>
    >>> grid = OccupancyGrid(create_floorplan_map(120, 160, seed=42), resolution=0.05)
    >>> footprint = Footprint.camera_frustum(np.deg2rad(90), near=0.2, far=1.5)
    >>> result = plan_sensing_poses(grid, footprint, cell_size=8, allow_partial_coverage=True)
    >>> print(f"{result.num_poses} poses, coverage {result.coverage:.1%}")
"""

__version__ = "0.1.0"

# Exceptions
from posecover.exceptions import (
    PlannerError,
    EmptyRegionError,
    InfeasibleCoverageError,
    SolveFailure,
)

# Grid exports
from posecover.grid.occupancy import OccupancyGrid

# Core exports
from posecover.core.footprint import Footprint
from posecover.core.discretize import Cell, CandidatePose
from posecover.core.visibility import build_visibility_matrix

# Optimization exports
from posecover.optimization.problem import SensingPoseProblem
from posecover.optimization.solver import HighsSolver, SolverBackend
from posecover.optimization.runner import (
    PlanningResult,
    plan_sensing_poses,
    plan_from_config,
)

# Config exports
from posecover.config.settings import PlannerConfig, load_config

__all__ = [
    # Version
    "__version__",
    # Exceptions
    "PlannerError",
    "EmptyRegionError",
    "InfeasibleCoverageError",
    "SolveFailure",
    # Grid
    "OccupancyGrid",
    # Core
    "Footprint",
    "Cell",
    "CandidatePose",
    "build_visibility_matrix",
    # Optimization
    "SensingPoseProblem",
    "HighsSolver",
    "SolverBackend",
    "PlanningResult",
    "plan_sensing_poses",
    "plan_from_config",
    # Config
    "PlannerConfig",
    "load_config",
]
