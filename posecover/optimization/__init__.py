"""
Set-cover optimization for sensing-pose planning.

This module provides:
    - SensingPoseProblem: cells, candidate poses and their visibility matrix
    - Solver adapter around SciPy's HiGHS LP/MILP interfaces
    - Reweighted relaxation scheduler
    - Problem reduction and exact final solve
    - plan_sensing_poses: the end-to-end entry point
"""

from posecover.optimization.solver import (
    ConstraintSense,
    CoveringProblem,
    HighsSolver,
    Solution,
    SolverBackend,
    SolveStatus,
    build_covering_problem,
)
from posecover.optimization.reweighting import (
    PlanningStage,
    RelaxationResult,
    ReweightingScheduler,
    compute_weight_epsilon,
    has_converged,
    measure_sparsity,
    update_weights,
)
from posecover.optimization.reduction import (
    RETAINED_VALUE,
    ReducedProblem,
    reduce_problem,
    select_retained_columns,
    solve_reduced,
    solve_set_cover,
)
from posecover.optimization.problem import SensingPoseProblem
from posecover.optimization.runner import (
    PlanningResult,
    plan_sensing_poses,
    plan_from_config,
)

__all__ = [
    # Solver adapter
    "ConstraintSense",
    "CoveringProblem",
    "HighsSolver",
    "Solution",
    "SolverBackend",
    "SolveStatus",
    "build_covering_problem",
    # Reweighting
    "PlanningStage",
    "RelaxationResult",
    "ReweightingScheduler",
    "compute_weight_epsilon",
    "has_converged",
    "measure_sparsity",
    "update_weights",
    # Reduction
    "RETAINED_VALUE",
    "ReducedProblem",
    "reduce_problem",
    "select_retained_columns",
    "solve_reduced",
    "solve_set_cover",
    # Problem and runner
    "SensingPoseProblem",
    "PlanningResult",
    "plan_sensing_poses",
    "plan_from_config",
]
