"""
Optimization solver adapter.

The planner talks to the LP/ILP solver only through this module:
create a problem, add bounded variables with objective costs, add covering
constraints, then solve either the continuous relaxation or the 0/1
integer program. The concrete backend is HiGHS through SciPy
(``scipy.optimize.linprog`` and ``scipy.optimize.milp``); other backends
can be plugged in by subclassing SolverBackend.

Repeated solves of an unchanged problem return the same optimum value;
which of several equally good vertices is returned is up to the backend.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple
import numpy as np
from scipy import sparse
from scipy.optimize import Bounds, LinearConstraint, linprog, milp

from posecover.exceptions import SolveFailure

logger = logging.getLogger(__name__)


class SolveStatus(Enum):
    """Outcome of a solve that the planner knows how to handle."""
    OPTIMAL = "optimal"
    INFEASIBLE = "infeasible"
    UNBOUNDED = "unbounded"


class ConstraintSense(Enum):
    """Direction of a linear constraint ``sum(x_i) <sense> rhs``."""
    GREATER_EQUAL = "G"
    LESS_EQUAL = "L"
    EQUAL = "E"


@dataclass
class Solution:
    """
    Result of a solver call.

    Attributes:
        status: Solve outcome
        values: One coefficient per variable (None unless optimal).
            Floats in [0, 1] for relaxed solves, 0/1 integers for integer
            solves.
        objective: Objective value at the optimum (None unless optimal)
        message: Backend status message
    """
    status: SolveStatus
    values: Optional[np.ndarray] = None
    objective: Optional[float] = None
    message: str = ""

    @property
    def is_optimal(self) -> bool:
        return self.status == SolveStatus.OPTIMAL


@dataclass
class CoveringProblem:
    """
    A minimization problem over bounded variables with covering rows.

    Variables are identified by the integer returned from add_variable, in
    insertion order.

    Example:
        >>> problem = HighsSolver().create_problem("demo")
        >>> a = problem.add_variable(1.0)
        >>> b = problem.add_variable(2.0)
        >>> problem.add_covering_constraint([a, b])
    """
    name: str = "covering"
    costs: List[float] = field(default_factory=list)
    lower_bounds: List[float] = field(default_factory=list)
    upper_bounds: List[float] = field(default_factory=list)
    rows: List[Tuple[np.ndarray, float, ConstraintSense]] = field(default_factory=list)

    @property
    def num_variables(self) -> int:
        return len(self.costs)

    @property
    def num_constraints(self) -> int:
        return len(self.rows)

    def add_variable(self, cost: float, lower_bound: float = 0.0, upper_bound: float = 1.0) -> int:
        """Add a variable with objective cost and bounds; returns its id."""
        if lower_bound > upper_bound:
            raise ValueError(f"lower_bound {lower_bound} exceeds upper_bound {upper_bound}")
        self.costs.append(float(cost))
        self.lower_bounds.append(float(lower_bound))
        self.upper_bounds.append(float(upper_bound))
        return len(self.costs) - 1

    def add_covering_constraint(
        self,
        variable_ids: Sequence[int],
        rhs: float = 1.0,
        sense: ConstraintSense = ConstraintSense.GREATER_EQUAL,
    ) -> int:
        """
        Add ``sum(x_i for i in variable_ids) <sense> rhs``; returns the row id.

        All listed variables get coefficient 1.
        """
        ids = np.asarray(variable_ids, dtype=np.intp).reshape(-1)
        if len(ids) and (ids.min() < 0 or ids.max() >= self.num_variables):
            raise ValueError(f"Constraint references unknown variable ids: {ids.tolist()}")
        self.rows.append((ids, float(rhs), sense))
        return len(self.rows) - 1

    def constraint_matrix(self) -> sparse.csr_matrix:
        """Sparse (num_constraints x num_variables) coefficient matrix."""
        indptr = [0]
        indices = []
        for ids, _, _ in self.rows:
            indices.extend(ids.tolist())
            indptr.append(len(indices))
        data = np.ones(len(indices), dtype=np.float64)
        return sparse.csr_matrix(
            (data, np.asarray(indices, dtype=np.intp), np.asarray(indptr, dtype=np.intp)),
            shape=(self.num_constraints, self.num_variables),
        )

    def row_bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        """Per-row (lower, upper) bounds on ``A @ x``."""
        lower = np.full(self.num_constraints, -np.inf)
        upper = np.full(self.num_constraints, np.inf)
        for k, (_, rhs, sense) in enumerate(self.rows):
            if sense in (ConstraintSense.GREATER_EQUAL, ConstraintSense.EQUAL):
                lower[k] = rhs
            if sense in (ConstraintSense.LESS_EQUAL, ConstraintSense.EQUAL):
                upper[k] = rhs
        return lower, upper


class SolverBackend(ABC):
    """Boundary interface to an external LP/ILP solver."""

    def create_problem(self, name: str = "covering") -> CoveringProblem:
        return CoveringProblem(name=name)

    @abstractmethod
    def solve_relaxed(self, problem: CoveringProblem) -> Solution:
        """Solve with continuous variables within their bounds."""

    @abstractmethod
    def solve_integer(self, problem: CoveringProblem) -> Solution:
        """Solve with every variable restricted to integers within its bounds."""


def _solve_without_variables(problem: CoveringProblem, integer: bool) -> Solution:
    """A problem with no variables is feasible iff 0 satisfies every row."""
    lower, upper = problem.row_bounds()
    if np.all(lower <= 0.0) and np.all(upper >= 0.0):
        values = np.zeros(0, dtype=np.int64 if integer else np.float64)
        return Solution(SolveStatus.OPTIMAL, values, 0.0, "empty problem")
    return Solution(SolveStatus.INFEASIBLE, message="empty problem with unsatisfiable rows")


class HighsSolver(SolverBackend):
    """
    HiGHS backend through SciPy.

    Args:
        lp_method: linprog method for relaxed solves. The default dual
            simplex returns vertex solutions, so variables at their lower
            bound come back as exactly 0.0.
        time_limit: Optional time limit in seconds for integer solves
    """

    # SciPy status codes shared by linprog and milp
    _STATUS = {
        0: SolveStatus.OPTIMAL,
        2: SolveStatus.INFEASIBLE,
        3: SolveStatus.UNBOUNDED,
    }

    def __init__(self, lp_method: str = "highs-ds", time_limit: Optional[float] = None):
        self.lp_method = lp_method
        self.time_limit = time_limit

    def _to_solution(self, res, problem: CoveringProblem, integer: bool) -> Solution:
        status = self._STATUS.get(res.status)
        if status is None:
            raise SolveFailure(
                f"Solver failed on problem '{problem.name}': {res.message}",
                status_code=res.status,
            )
        if status != SolveStatus.OPTIMAL:
            logger.info("Problem '%s' is %s: %s", problem.name, status.value, res.message)
            return Solution(status, message=str(res.message))

        values = np.asarray(res.x, dtype=np.float64)
        if integer:
            values = np.rint(values).astype(np.int64)
        else:
            values = np.clip(values, problem.lower_bounds, problem.upper_bounds)
        return Solution(status, values, float(res.fun), str(res.message))

    def solve_relaxed(self, problem: CoveringProblem) -> Solution:
        if problem.num_variables == 0:
            return _solve_without_variables(problem, integer=False)

        c = np.asarray(problem.costs)
        bounds = list(zip(problem.lower_bounds, problem.upper_bounds))

        A_ub = A_eq = b_ub = b_eq = None
        if problem.num_constraints:
            A = problem.constraint_matrix()
            lower, upper = problem.row_bounds()
            eq = lower == upper
            ge = np.isfinite(lower) & ~eq
            le = np.isfinite(upper) & ~eq

            # linprog only takes A_ub @ x <= b_ub: negate the >= rows
            ub_parts, rhs_parts = [], []
            if ge.any():
                ub_parts.append(-A[ge])
                rhs_parts.append(-lower[ge])
            if le.any():
                ub_parts.append(A[le])
                rhs_parts.append(upper[le])
            if ub_parts:
                A_ub = sparse.vstack(ub_parts, format="csr")
                b_ub = np.concatenate(rhs_parts)
            if eq.any():
                A_eq = A[eq]
                b_eq = lower[eq]

        res = linprog(
            c, A_ub=A_ub, b_ub=b_ub, A_eq=A_eq, b_eq=b_eq,
            bounds=bounds, method=self.lp_method,
        )
        return self._to_solution(res, problem, integer=False)

    def solve_integer(self, problem: CoveringProblem) -> Solution:
        if problem.num_variables == 0:
            return _solve_without_variables(problem, integer=True)

        c = np.asarray(problem.costs)
        constraints = None
        if problem.num_constraints:
            lower, upper = problem.row_bounds()
            constraints = LinearConstraint(problem.constraint_matrix(), lower, upper)

        options = {}
        if self.time_limit is not None:
            options["time_limit"] = self.time_limit

        res = milp(
            c,
            integrality=np.ones(problem.num_variables),
            bounds=Bounds(problem.lower_bounds, problem.upper_bounds),
            constraints=constraints,
            options=options or None,
        )
        return self._to_solution(res, problem, integer=True)


def build_covering_problem(
    solver: SolverBackend,
    matrix: np.ndarray,
    weights: Optional[np.ndarray] = None,
    name: str = "covering",
) -> CoveringProblem:
    """
    Set-cover problem for a visibility matrix.

    One variable per column in column order, cost 1.0 or the matching
    weight, bounds [0, 1]; one ``>= 1`` covering row per matrix row listing
    exactly the columns with a 1.

    Args:
        solver: Backend creating the problem
        matrix: Binary visibility matrix (cells x poses)
        weights: Optional per-column costs
        name: Problem name for log messages

    Returns:
        CoveringProblem ready to solve
    """
    num_cols = matrix.shape[1]
    if weights is not None and len(weights) != num_cols:
        raise ValueError(f"Expected {num_cols} weights, got {len(weights)}")

    problem = solver.create_problem(name)
    for j in range(num_cols):
        problem.add_variable(1.0 if weights is None else float(weights[j]), 0.0, 1.0)

    for row in matrix:
        problem.add_covering_constraint(np.flatnonzero(row), rhs=1.0,
                                        sense=ConstraintSense.GREATER_EQUAL)
    return problem
