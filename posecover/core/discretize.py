"""
Discretization of the region of interest into cells and candidate poses.

Cells are sampled on a regular lattice ``cell_size`` pixels apart; every
free cell center then becomes the position of one candidate pose per
heading ``0, dtheta, 2*dtheta, ... < 2*pi``. The ordering (rows, then
columns, then heading) is deterministic so matrix indices are reproducible.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple
import numpy as np

from posecover.exceptions import EmptyRegionError
from posecover.grid.occupancy import OccupancyGrid

Region = Tuple[Tuple[int, int], Tuple[int, int]]

_HEADING_EPS = 1e-9


@dataclass(frozen=True)
class Cell:
    """
    A free-space grid point to be covered.

    Attributes:
        row: Row index in the discretization lattice
        col: Column index in the discretization lattice
        x: Pixel column of the cell center in the occupancy map
        y: Pixel row of the cell center in the occupancy map
    """
    row: int
    col: int
    x: int
    y: int

    @property
    def position(self) -> Tuple[int, int]:
        return (self.x, self.y)


@dataclass(frozen=True)
class CandidatePose:
    """
    A (position, heading) option the agent could occupy to sense the area.

    Attributes:
        index: Position in the ordered candidate sequence (matrix column)
        x: Pixel column
        y: Pixel row
        theta: Heading in radians, 0 = +x, counter-clockwise positive
        cell_index: Index of the cell the pose stands on
    """
    index: int
    x: int
    y: int
    theta: float
    cell_index: int

    def to_tuple(self) -> Tuple[float, float, float]:
        """(x, y, heading) triple in grid coordinates."""
        return (float(self.x), float(self.y), float(self.theta))

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "x": self.x,
            "y": self.y,
            "theta": float(self.theta),
            "cell_index": self.cell_index,
        }


def _resolve_region(grid: OccupancyGrid, region: Optional[Region]) -> Region:
    """Clip the region of interest to the map; default to the whole map."""
    if region is None:
        return (0, 0), (grid.width - 1, grid.height - 1)

    (x_min, y_min), (x_max, y_max) = region
    if x_min > x_max or y_min > y_max:
        raise ValueError(f"Region min corner must not exceed max corner, got {region}")

    return (
        (max(int(x_min), 0), max(int(y_min), 0)),
        (min(int(x_max), grid.width - 1), min(int(y_max), grid.height - 1)),
    )


def discretize_region(
    grid: OccupancyGrid,
    cell_size: int,
    region: Optional[Region] = None,
) -> List[Cell]:
    """
    Sample free cells on a regular lattice inside the region of interest.

    Lattice points start half a cell from the min corner and advance by
    ``cell_size`` while they stay within the (inclusive) max corner.

    Args:
        grid: Occupancy map
        cell_size: Lattice spacing in pixels
        region: ((x_min, y_min), (x_max, y_max)) in pixels, inclusive.
            Defaults to the whole map.

    Returns:
        List of free cells in row-major order

    Raises:
        ValueError: If cell_size is not positive
        EmptyRegionError: If no lattice point is free
    """
    if cell_size <= 0:
        raise ValueError(f"cell_size must be positive, got {cell_size}")

    (x_min, y_min), (x_max, y_max) = _resolve_region(grid, region)
    offset = cell_size // 2

    cells = []
    for row, y in enumerate(range(y_min + offset, y_max + 1, cell_size)):
        for col, x in enumerate(range(x_min + offset, x_max + 1, cell_size)):
            if grid.free_mask[y, x]:
                cells.append(Cell(row=row, col=col, x=x, y=y))

    if not cells:
        raise EmptyRegionError(region=((x_min, y_min), (x_max, y_max)), cell_size=cell_size)

    return cells


def candidate_headings(delta_theta: float) -> np.ndarray:
    """
    Headings ``k * delta_theta`` strictly below a full turn.

    A step that does not divide 2*pi evenly simply loses the last partial
    step.
    """
    if delta_theta <= 0:
        raise ValueError(f"delta_theta must be positive, got {delta_theta}")
    count = int(np.ceil(2.0 * np.pi / delta_theta))
    headings = np.arange(count) * delta_theta
    # An even division can land one ulp below 2*pi, a duplicate of heading 0
    return headings[headings < 2.0 * np.pi - _HEADING_EPS]


def generate_candidate_poses(cells: List[Cell], delta_theta: float) -> List[CandidatePose]:
    """
    Emit one candidate pose per cell and heading.

    Args:
        cells: Cells from discretize_region
        delta_theta: Angular step in radians

    Returns:
        Ordered list of candidate poses (cell order, then heading ascending)
    """
    headings = candidate_headings(delta_theta)

    poses = []
    for cell_index, cell in enumerate(cells):
        for theta in headings:
            poses.append(CandidatePose(
                index=len(poses),
                x=cell.x,
                y=cell.y,
                theta=float(theta),
                cell_index=cell_index,
            ))
    return poses
