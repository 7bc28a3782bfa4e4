"""
Exception types raised by the sensing-pose planner.

All planner failures derive from PlannerError so callers can catch the
whole family at once. Invalid configuration is still reported with
ValueError and missing files with FileNotFoundError.
"""

from typing import List, Optional, Sequence


class PlannerError(Exception):
    """Base class for all planning failures."""


class EmptyRegionError(PlannerError):
    """
    Raised when the region of interest contains no free cells.

    Planning cannot proceed without at least one cell to cover.
    """

    def __init__(self, region=None, cell_size: Optional[int] = None):
        self.region = region
        self.cell_size = cell_size
        message = "No free cells found in the region of interest"
        if region is not None:
            message += f" {tuple(region)}"
        if cell_size is not None:
            message += f" at cell size {cell_size}"
        super().__init__(message)


class InfeasibleCoverageError(PlannerError):
    """
    Raised when some cells cannot be observed from any candidate pose.

    Attributes:
        cells: The unobservable cells (rows of the visibility matrix
            without a single 1-entry).
    """

    def __init__(self, cells: Sequence):
        self.cells: List = list(cells)
        preview = ", ".join(f"({c.x}, {c.y})" for c in self.cells[:10])
        if len(self.cells) > 10:
            preview += ", ..."
        super().__init__(
            f"{len(self.cells)} cell(s) cannot be observed from any candidate pose: {preview}"
        )


class SolveFailure(PlannerError):
    """
    Raised when the optimization solver does not report an optimal,
    infeasible or unbounded outcome, or when a problem known to be
    feasible comes back infeasible or unbounded.

    Attributes:
        status_code: Raw status reported by the backend (if any)
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        if status_code is not None:
            message = f"{message} (status={status_code})"
        super().__init__(message)
