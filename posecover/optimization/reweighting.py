"""
Iterative reweighted relaxation of the set-cover problem.

Each iteration solves the continuous relaxation with the current per-pose
weights as costs, then re-weights every pose as

    w_i = epsilon_k / (epsilon_k + c_i)

where c_i is the relaxed value of pose i and epsilon_k shrinks with the
iteration count. The number of near-zero coefficients (sparsity) is
recorded after every solve; the loop stops once the last
``sparsity_check_range`` measurements are identical, or after
``max_iterations`` solves.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence
import numpy as np

from posecover.exceptions import SolveFailure
from posecover.optimization.solver import SolverBackend, build_covering_problem

logger = logging.getLogger(__name__)

# Hard cap on relaxation solves
MAX_ITERATIONS = 200
DEFAULT_SPARSITY_TOLERANCE = 0.01


class PlanningStage(Enum):
    """Lifecycle of a planning run."""
    START = "start"
    ITERATING = "iterating"
    CONVERGED = "converged"
    ITERATION_LIMIT_REACHED = "iteration_limit_reached"
    REDUCE = "reduce"
    FINAL_SOLVE = "final_solve"
    DONE = "done"


def compute_weight_epsilon(k: int) -> float:
    """
    Smoothing constant for iteration k (1-indexed).

    ``(1 / (e - 1)) ** (1 + (k - 1) * 0.1)``; about 0.582 at k = 1 and
    strictly decreasing afterwards.
    """
    if k < 1:
        raise ValueError(f"Iteration index must be >= 1, got {k}")
    return float((1.0 / (np.e - 1.0)) ** (1.0 + (k - 1) * 0.1))


def update_weights(solution: np.ndarray, epsilon: float) -> np.ndarray:
    """New weight vector ``epsilon / (epsilon + c_i)``, each in (0, 1]."""
    values = np.asarray(solution, dtype=np.float64)
    return epsilon / (epsilon + values)


def measure_sparsity(solution: np.ndarray, tolerance: float = DEFAULT_SPARSITY_TOLERANCE) -> int:
    """Number of coefficients at or below the tolerance."""
    return int(np.count_nonzero(np.asarray(solution) <= tolerance))


def has_converged(history: Sequence[int], check_range: int) -> bool:
    """
    True when the last ``check_range`` sparsity measurements all equal the
    most recent one. Comparison is exact.
    """
    if check_range <= 0:
        raise ValueError(f"check_range must be positive, got {check_range}")
    if len(history) < check_range:
        return False
    latest = history[-1]
    return all(value == latest for value in history[-check_range:])


@dataclass
class RelaxationResult:
    """
    Outcome of the reweighting loop.

    Attributes:
        solution: Relaxed coefficients from the last iteration
        weights: Weights computed after the last iteration
        sparsity_history: One sparsity measurement per iteration
        iterations: Number of relaxed solves performed
        stage: CONVERGED or ITERATION_LIMIT_REACHED
        trace: Per-iteration solutions (empty unless recorded)
    """
    solution: np.ndarray
    weights: np.ndarray
    sparsity_history: List[int]
    iterations: int
    stage: PlanningStage
    trace: List[np.ndarray] = field(default_factory=list)

    @property
    def converged(self) -> bool:
        return self.stage == PlanningStage.CONVERGED


class ReweightingScheduler:
    """
    Drives the reweighted relaxation loop over a visibility matrix.

    The scheduler owns the weight vector and the sparsity history; every
    iteration builds a fresh covering problem from them.

    Args:
        solver: Solver backend used for the relaxed solves
        sparsity_check_range: Length of the plateau that counts as converged
        max_iterations: Iteration limit, at most 200
        sparsity_tolerance: Values at or below this count as sparse
        record_trace: Keep a copy of every iteration's solution

    Example:
        >>> scheduler = ReweightingScheduler(HighsSolver(), sparsity_check_range=20)
        >>> relaxation = scheduler.run(matrix)
        >>> relaxation.stage
        <PlanningStage.CONVERGED: 'converged'>
    """

    def __init__(
        self,
        solver: SolverBackend,
        sparsity_check_range: int,
        max_iterations: int = MAX_ITERATIONS,
        sparsity_tolerance: float = DEFAULT_SPARSITY_TOLERANCE,
        record_trace: bool = False,
    ):
        if sparsity_check_range <= 0:
            raise ValueError(f"sparsity_check_range must be positive, got {sparsity_check_range}")
        if not 1 <= max_iterations <= MAX_ITERATIONS:
            raise ValueError(
                f"max_iterations must be in [1, {MAX_ITERATIONS}], got {max_iterations}"
            )
        if sparsity_tolerance < 0:
            raise ValueError(f"sparsity_tolerance must be non-negative, got {sparsity_tolerance}")

        self.solver = solver
        self.sparsity_check_range = sparsity_check_range
        self.max_iterations = max_iterations
        self.sparsity_tolerance = sparsity_tolerance
        self.record_trace = record_trace
        self.stage = PlanningStage.START

    def run(self, matrix: np.ndarray, initial_weights: Optional[np.ndarray] = None) -> RelaxationResult:
        """
        Iterate relaxed solves until the sparsity plateaus or the limit hits.

        Args:
            matrix: Visibility matrix (cells x poses); every row must have
                at least one 1
            initial_weights: Starting costs, all ones by default

        Returns:
            RelaxationResult with the last solution

        Raises:
            SolveFailure: If a relaxed solve is not optimal
        """
        num_cols = matrix.shape[1]
        if initial_weights is None:
            weights = np.ones(num_cols, dtype=np.float64)
        else:
            weights = np.array(initial_weights, dtype=np.float64)

        history: List[int] = []
        trace: List[np.ndarray] = []
        solution = np.zeros(num_cols, dtype=np.float64)
        self.stage = PlanningStage.ITERATING

        for k in range(1, self.max_iterations + 1):
            problem = build_covering_problem(self.solver, matrix, weights, name=f"relaxation-{k}")
            result = self.solver.solve_relaxed(problem)
            if not result.is_optimal:
                raise SolveFailure(
                    f"Relaxed solve at iteration {k} returned {result.status.value}: {result.message}"
                )

            solution = np.asarray(result.values, dtype=np.float64)
            weights = update_weights(solution, compute_weight_epsilon(k))
            history.append(measure_sparsity(solution, self.sparsity_tolerance))
            if self.record_trace:
                trace.append(solution.copy())

            logger.debug("Iteration %d: objective=%.6f sparsity=%d", k, result.objective, history[-1])

            if has_converged(history, self.sparsity_check_range):
                self.stage = PlanningStage.CONVERGED
                break
        else:
            self.stage = PlanningStage.ITERATION_LIMIT_REACHED
            logger.debug("Iteration limit %d reached without a sparsity plateau", self.max_iterations)

        return RelaxationResult(
            solution=solution,
            weights=weights,
            sparsity_history=history,
            iterations=len(history),
            stage=self.stage,
            trace=trace,
        )
