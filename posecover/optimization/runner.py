"""
Optimization runner for sensing-pose planning.

This module provides the high-level entry point that takes an occupancy
map and a sensor footprint through discretization, visibility matrix
construction, reweighted relaxation, reduction and the exact final solve.
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Tuple
import time
import numpy as np

from posecover.core.discretize import CandidatePose, Cell, Region
from posecover.core.footprint import Footprint
from posecover.exceptions import InfeasibleCoverageError
from posecover.grid.coordinates import poses_to_world
from posecover.grid.occupancy import OccupancyGrid
from posecover.optimization.problem import SensingPoseProblem
from posecover.optimization.reduction import reduce_problem, solve_reduced, solve_set_cover
from posecover.optimization.reweighting import (
    MAX_ITERATIONS,
    PlanningStage,
    ReweightingScheduler,
)
from posecover.optimization.solver import HighsSolver, SolverBackend

if TYPE_CHECKING:
    from posecover.config.settings import PlannerConfig

logger = logging.getLogger(__name__)


@dataclass
class PlanningResult:
    """
    Result of a planning run.

    Attributes:
        poses: Selected candidate poses in candidate order
        pose_indices: Candidate indices of the selected poses
        coverage: Fraction of all cells observed by the selection
        status: "complete", or "partial" when unobservable cells were dropped
        uncovered_cells: Cells not observed by the selection
        reduction_fallback: The reduced problem could not cover every cell
            and the exact solve ran on the full matrix instead
        iterations: Number of relaxed solves
        termination: PlanningStage that ended the relaxation loop (DONE if
            nothing was observable and no relaxation ran)
        sparsity_history: Sparsity measurement per iteration
        trace: Relaxed solutions per iteration (if recorded)
        runtime_seconds: Wall-clock time for the whole run
        problem: The problem the poses were selected for
    """
    poses: List[CandidatePose]
    pose_indices: List[int]
    coverage: float
    status: str = "complete"
    uncovered_cells: List[Cell] = field(default_factory=list)
    reduction_fallback: bool = False
    iterations: int = 0
    termination: PlanningStage = PlanningStage.CONVERGED
    sparsity_history: List[int] = field(default_factory=list)
    trace: List[np.ndarray] = field(default_factory=list)
    runtime_seconds: float = 0.0
    problem: Optional[SensingPoseProblem] = field(default=None, repr=False)

    @property
    def num_poses(self) -> int:
        return len(self.poses)

    @property
    def is_complete(self) -> bool:
        return self.status == "complete"

    def pose_tuples(self) -> List[Tuple[float, float, float]]:
        """Selected poses as (x, y, heading) in grid pixels."""
        return [pose.to_tuple() for pose in self.poses]

    def world_poses(self) -> List[Tuple[float, float, float]]:
        """Selected poses as (x, y, heading) in world meters."""
        if self.problem is None:
            raise ValueError("World poses need the problem's occupancy grid")
        return poses_to_world(self.poses, self.problem.grid)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        data = {
            "poses": [list(p) for p in self.pose_tuples()],
            "pose_indices": [int(i) for i in self.pose_indices],
            "coverage": self.coverage,
            "status": self.status,
            "uncovered_cells": [[c.x, c.y] for c in self.uncovered_cells],
            "reduction_fallback": self.reduction_fallback,
            "iterations": self.iterations,
            "termination": self.termination.value,
            "sparsity_history": [int(s) for s in self.sparsity_history],
            "runtime_seconds": self.runtime_seconds,
        }
        if self.problem is not None:
            data["world_poses"] = [list(p) for p in self.world_poses()]
            data["problem"] = self.problem.to_dict()
        return data


def plan_sensing_poses(
    grid: OccupancyGrid,
    footprint: Footprint,
    cell_size: int = 5,
    delta_theta: float = np.pi / 4,
    region: Optional[Region] = None,
    sparsity_check_range: int = 20,
    max_iterations: int = MAX_ITERATIONS,
    sparsity_tolerance: float = 0.01,
    solver: Optional[SolverBackend] = None,
    n_workers: Optional[int] = None,
    batch_threshold: int = 16,
    allow_partial_coverage: bool = False,
    record_trace: bool = False,
    verbose: bool = True,
) -> PlanningResult:
    """
    Select a small set of poses that together observe every free cell.

    This is the main entry point for planning on an occupancy map.

    Args:
        grid: Occupancy map
        footprint: Sensor footprint
        cell_size: Cell lattice spacing in pixels
        delta_theta: Heading step in radians
        region: Region of interest ((x_min, y_min), (x_max, y_max)) in
            pixels, None for the whole map
        sparsity_check_range: Plateau length that stops the relaxation
        max_iterations: Relaxation iteration limit, at most 200
        sparsity_tolerance: Coefficients at or below this count as sparse
        solver: Solver backend (default: HighsSolver)
        n_workers: Threads for the visibility matrix build
        batch_threshold: Pose count below which the build stays serial
        allow_partial_coverage: Drop unobservable cells and return a
            "partial" result instead of raising
        record_trace: Keep every relaxed solution on the result
        verbose: Print progress information

    Returns:
        PlanningResult with the selected poses and diagnostics

    Raises:
        ValueError: On invalid parameters
        EmptyRegionError: If the region has no free cells
        InfeasibleCoverageError: If some cells are unobservable and
            allow_partial_coverage is False
        SolveFailure: If the solver fails

    Example:
        >>> from posecover.grid import OccupancyGrid, create_empty_room
        >>> grid = OccupancyGrid(create_empty_room(60, 60), resolution=0.05)
        >>> result = plan_sensing_poses(grid, Footprint.square(1.0), cell_size=10)
        >>> print(f"{result.num_poses} poses, coverage {result.coverage:.1%}")
    """
    if cell_size <= 0:
        raise ValueError(f"cell_size must be positive, got {cell_size}")
    if delta_theta <= 0:
        raise ValueError(f"delta_theta must be positive, got {delta_theta}")
    if solver is None:
        solver = HighsSolver()

    # Validates the relaxation parameters before any heavy work
    scheduler = ReweightingScheduler(
        solver,
        sparsity_check_range=sparsity_check_range,
        max_iterations=max_iterations,
        sparsity_tolerance=sparsity_tolerance,
        record_trace=record_trace,
    )

    t0 = time.time()

    problem = SensingPoseProblem(
        grid=grid,
        footprint=footprint,
        cell_size=cell_size,
        delta_theta=delta_theta,
        region=region,
        n_workers=n_workers,
        batch_threshold=batch_threshold,
    )

    if verbose:
        print("Sensing Pose Planning")
        print(f"  Map shape: {grid.shape}")
        print(f"  Cells: {problem.num_cells}")
        print(f"  Candidate poses: {problem.num_poses}")
        print(f"  Visibility entries: {int(problem.matrix.sum())}")

    status = "complete"
    matrix = problem.matrix
    if not problem.is_fully_observable:
        unobservable = problem.unobservable_cells()
        if not allow_partial_coverage:
            raise InfeasibleCoverageError(unobservable)
        logger.warning(
            "%d cell(s) cannot be observed from any candidate pose; planning for the rest",
            len(unobservable),
        )
        status = "partial"
        matrix = problem.observable_matrix()

    reduction_fallback = False
    if matrix.shape[0] == 0:
        relaxation = None
        columns = np.zeros(0, dtype=np.intp)
    else:
        relaxation = scheduler.run(matrix)
        if verbose:
            print(f"  Relaxation: {relaxation.iterations} iterations ({relaxation.stage.value})")

        scheduler.stage = PlanningStage.REDUCE
        reduced = reduce_problem(matrix, relaxation.solution)

        scheduler.stage = PlanningStage.FINAL_SOLVE
        missing = reduced.uncoverable_rows()
        if len(missing) > 0:
            logger.warning(
                "Retained poses leave %d cell(s) uncovered; solving the full problem instead",
                len(missing),
            )
            reduction_fallback = True
            columns = solve_set_cover(solver, matrix, name="full-set-cover")
        else:
            columns = solve_reduced(solver, reduced)

    scheduler.stage = PlanningStage.DONE
    runtime = time.time() - t0

    columns = sorted(int(j) for j in columns)
    stats = problem.evaluate_selection(columns)

    if verbose:
        print(f"  Selected poses: {len(columns)}")
        print(f"  Coverage: {stats['coverage']:.1%}")
        print(f"  Runtime: {runtime:.2f}s")

    return PlanningResult(
        poses=problem.selected_poses(columns),
        pose_indices=columns,
        coverage=stats["coverage"],
        status=status,
        uncovered_cells=stats["uncovered_cells"],
        reduction_fallback=reduction_fallback,
        iterations=relaxation.iterations if relaxation else 0,
        termination=relaxation.stage if relaxation else PlanningStage.DONE,
        sparsity_history=list(relaxation.sparsity_history) if relaxation else [],
        trace=list(relaxation.trace) if relaxation else [],
        runtime_seconds=runtime,
        problem=problem,
    )


def plan_from_config(
    grid: OccupancyGrid,
    config: "PlannerConfig",
    solver: Optional[SolverBackend] = None,
    verbose: bool = True,
) -> PlanningResult:
    """
    Run plan_sensing_poses with settings from a PlannerConfig.

    Args:
        grid: Occupancy map
        config: Planner configuration (see posecover.config)
        solver: Solver backend (default: HighsSolver)
        verbose: Print progress information

    Returns:
        PlanningResult
    """
    config.check()
    return plan_sensing_poses(
        grid,
        config.footprint.to_footprint(),
        cell_size=config.discretization.cell_size,
        delta_theta=config.discretization.delta_theta,
        region=config.discretization.region,
        sparsity_check_range=config.relaxation.sparsity_check_range,
        max_iterations=config.relaxation.max_iterations,
        sparsity_tolerance=config.relaxation.sparsity_tolerance,
        solver=solver,
        n_workers=config.visibility.n_workers,
        batch_threshold=config.visibility.batch_threshold,
        allow_partial_coverage=config.allow_partial_coverage,
        record_trace=config.relaxation.record_trace,
        verbose=verbose,
    )
