"""
Problem reduction and exact final solve.

After the reweighting loop settles, only the candidate poses whose relaxed
coefficient is exactly 0.0 are kept. The reduced set-cover problem is then
solved as a 0/1 integer program with unit costs and the chosen columns are
mapped back to the original candidate indices.
"""

import logging
from dataclasses import dataclass
import numpy as np

from posecover.exceptions import SolveFailure
from posecover.optimization.solver import SolveStatus, SolverBackend, build_covering_problem

logger = logging.getLogger(__name__)

# Relaxed value marking a column as retained
RETAINED_VALUE = 0.0


def select_retained_columns(solution: np.ndarray) -> np.ndarray:
    """Indices of the columns whose relaxed value equals RETAINED_VALUE exactly."""
    return np.flatnonzero(np.asarray(solution) == RETAINED_VALUE)


@dataclass
class ReducedProblem:
    """
    Visibility matrix restricted to the retained columns.

    Attributes:
        matrix: (num_cells, len(column_indices)) matrix, rows in original order
        column_indices: Original column index of each reduced column
    """
    matrix: np.ndarray
    column_indices: np.ndarray

    @property
    def num_columns(self) -> int:
        return len(self.column_indices)

    def uncoverable_rows(self) -> np.ndarray:
        """Rows left without any retained column."""
        if self.num_columns == 0:
            return np.arange(self.matrix.shape[0])
        return np.flatnonzero(self.matrix.max(axis=1) == 0)


def reduce_problem(matrix: np.ndarray, solution: np.ndarray) -> ReducedProblem:
    """
    Keep only the retained columns of the visibility matrix.

    Args:
        matrix: Visibility matrix (cells x poses)
        solution: Relaxed coefficients, one per column

    Returns:
        ReducedProblem with all rows and the retained columns
    """
    if len(solution) != matrix.shape[1]:
        raise ValueError(
            f"Solution length {len(solution)} does not match {matrix.shape[1]} columns"
        )
    columns = select_retained_columns(solution)
    logger.debug("Retained %d of %d columns", len(columns), matrix.shape[1])
    return ReducedProblem(matrix=matrix[:, columns], column_indices=columns)


def solve_set_cover(solver: SolverBackend, matrix: np.ndarray, name: str = "set-cover") -> np.ndarray:
    """
    Minimum-cardinality set cover of a visibility matrix.

    Returns:
        Column indices (ascending) whose integer value is 1

    Raises:
        SolveFailure: If the integer program is not optimal
    """
    problem = build_covering_problem(solver, matrix, name=name)
    result = solver.solve_integer(problem)
    if result.status != SolveStatus.OPTIMAL:
        raise SolveFailure(f"Integer solve of '{name}' returned {result.status.value}: {result.message}")
    return np.flatnonzero(np.asarray(result.values) == 1)


def solve_reduced(solver: SolverBackend, reduced: ReducedProblem) -> np.ndarray:
    """
    Solve the reduced problem exactly and map the choice back.

    Returns:
        Original column indices of the selected poses, in column order
    """
    chosen = solve_set_cover(solver, reduced.matrix, name="reduced-set-cover")
    return reduced.column_indices[chosen]
