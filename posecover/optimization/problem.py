"""
Sensing-pose planning problem definition.

SensingPoseProblem bundles everything the optimizer needs from the map:
the discretized cells, the candidate poses and the visibility matrix
linking them. Building the problem runs the discretizer and the visibility
matrix builder once; the optimization stages only read from it.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence
import numpy as np

from posecover.core.discretize import (
    CandidatePose,
    Cell,
    Region,
    discretize_region,
    generate_candidate_poses,
)
from posecover.core.footprint import Footprint
from posecover.core.visibility import (
    build_visibility_matrix,
    compute_coverage,
    find_unobservable_cells,
)
from posecover.grid.occupancy import OccupancyGrid


@dataclass
class SensingPoseProblem:
    """
    Set-cover formulation of sensing-pose planning.

    Rows of the visibility matrix are cells, columns are candidate poses;
    entry (i, j) is 1 when pose j observes cell i unobstructed.

    Attributes:
        grid: Occupancy map
        footprint: Sensor footprint
        cell_size: Cell lattice spacing in pixels
        delta_theta: Heading step in radians
        region: Region of interest ((x_min, y_min), (x_max, y_max)) in pixels
        n_workers: Threads for the visibility matrix build
        batch_threshold: Pose count below which the build stays serial
        name: Optional name for logging/visualization

    Example:
        >>> from posecover.grid import OccupancyGrid, create_empty_room
        >>> grid = OccupancyGrid(create_empty_room(60, 60))
        >>> problem = SensingPoseProblem(grid, Footprint.square(1.0), cell_size=10)
        >>> problem.matrix.shape
        (36, 288)
    """
    grid: OccupancyGrid
    footprint: Footprint
    cell_size: int = 5
    delta_theta: float = np.pi / 4
    region: Optional[Region] = None
    n_workers: Optional[int] = None
    batch_threshold: int = 16
    name: str = "unknown"

    # Derived state (set in __post_init__)
    cells: List[Cell] = field(init=False)
    poses: List[CandidatePose] = field(init=False)
    matrix: np.ndarray = field(init=False)
    unobservable_rows: np.ndarray = field(init=False)

    def __post_init__(self):
        self.cells = discretize_region(self.grid, self.cell_size, self.region)
        self.poses = generate_candidate_poses(self.cells, self.delta_theta)
        self.matrix = build_visibility_matrix(
            self.grid,
            self.cells,
            self.poses,
            self.footprint,
            n_workers=self.n_workers,
            batch_threshold=self.batch_threshold,
        )
        self.unobservable_rows = find_unobservable_cells(self.matrix)

    @property
    def num_cells(self) -> int:
        return len(self.cells)

    @property
    def num_poses(self) -> int:
        return len(self.poses)

    @property
    def is_fully_observable(self) -> bool:
        return len(self.unobservable_rows) == 0

    @property
    def observable_rows(self) -> np.ndarray:
        return np.setdiff1d(np.arange(self.num_cells), self.unobservable_rows)

    def unobservable_cells(self) -> List[Cell]:
        """Cells that no candidate pose observes."""
        return [self.cells[i] for i in self.unobservable_rows]

    def observable_matrix(self) -> np.ndarray:
        """Visibility matrix without the unobservable rows."""
        return self.matrix[self.observable_rows]

    def selected_poses(self, columns: Sequence[int]) -> List[CandidatePose]:
        return [self.poses[j] for j in columns]

    def evaluate_selection(self, columns: Sequence[int]) -> dict:
        """
        Coverage metrics of a pose selection.

        Returns:
            compute_coverage statistics plus the number of selected poses
            and the unobserved cells.
        """
        stats = compute_coverage(self.matrix, columns)
        stats["num_poses"] = len(columns)
        stats["uncovered_cells"] = [
            self.cells[i] for i in np.flatnonzero(stats["observation_count"] == 0)
        ]
        return stats

    def to_dict(self) -> dict:
        """Convert problem configuration to dictionary."""
        return {
            "name": self.name,
            "map_shape": list(self.grid.shape),
            "resolution": self.grid.resolution,
            "cell_size": self.cell_size,
            "delta_theta": float(self.delta_theta),
            "region": [list(c) for c in self.region] if self.region else None,
            "footprint": self.footprint.to_dict(),
            "num_cells": self.num_cells,
            "num_poses": self.num_poses,
            "num_unobservable": int(len(self.unobservable_rows)),
        }
