"""
Visibility matrix construction for sensing-pose planning.

For every (cell, candidate pose) pair this module decides whether the pose
observes the cell unobstructed. A cell is observed when it passes, in
order:
1. the range gate (distance between the footprint's min and max radius),
2. the angle gate (angle to the rotated centroid vector within the
   footprint's half-angle),
3. the point-in-polygon test against the transformed footprint,
4. the occlusion test (no occupied pixel on the Bresenham line).

Each column (pose) is independent of the others, so columns can be
computed on a thread pool; numpy releases the GIL for the heavy parts.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Optional, Sequence
import numpy as np

from posecover.core.discretize import Cell, CandidatePose
from posecover.core.footprint import Footprint
from posecover.core.geometry import angles_between, points_in_polygon, line_of_sight
from posecover.grid.coordinates import pixel_to_world, world_to_pixel
from posecover.grid.occupancy import OccupancyGrid

logger = logging.getLogger(__name__)

# Slack for boundary comparisons; boundaries are inclusive
_BOUNDARY_EPS = 1e-9


def cell_positions(cells: Sequence[Cell]) -> np.ndarray:
    """(N, 2) float array of cell pixel centers."""
    return np.array([[c.x, c.y] for c in cells], dtype=np.float64).reshape(-1, 2)


def footprint_in_pixels(
    grid: OccupancyGrid,
    pose: CandidatePose,
    footprint: Footprint,
) -> np.ndarray:
    """
    Footprint polygon of a pose in map pixels.

    Corners are rounded to the nearest pixel and clamped to
    [0, width] x [0, height].

    Returns:
        (N, 2) integer array of polygon vertices
    """
    wx, wy = pixel_to_world(pose.x, pose.y, grid)
    polygon, _ = footprint.transformed(wx, wy, pose.theta)
    px, py = world_to_pixel(polygon[:, 0], polygon[:, 1], grid, clamp=True, round_to_int=True)
    return np.stack([px, py], axis=1)


def compute_visibility_column(
    grid: OccupancyGrid,
    positions: np.ndarray,
    pose: CandidatePose,
    footprint: Footprint,
) -> np.ndarray:
    """
    Visibility of all cells from a single candidate pose.

    Args:
        grid: Occupancy map
        positions: (N, 2) cell centers in pixels (see cell_positions)
        pose: Candidate pose
        footprint: Sensor footprint

    Returns:
        (N,) uint8 column, 1 where the pose observes the cell
    """
    column = np.zeros(len(positions), dtype=np.uint8)
    if len(positions) == 0:
        return column

    polygon = footprint_in_pixels(grid, pose, footprint)
    centroid = footprint.transformed(0.0, 0.0, pose.theta)[1]

    # Range gate, radii converted from meters to pixels
    to_cells = positions - np.array([pose.x, pose.y], dtype=np.float64)
    distance = np.linalg.norm(to_cells, axis=1)
    min_px = footprint.min_radius / grid.resolution
    max_px = footprint.max_radius / grid.resolution
    candidates = np.flatnonzero(
        (distance >= min_px - _BOUNDARY_EPS) & (distance <= max_px + _BOUNDARY_EPS)
    )
    if len(candidates) == 0:
        return column

    # Angle gate
    angles = angles_between(centroid, to_cells[candidates])
    candidates = candidates[angles <= footprint.max_half_angle + _BOUNDARY_EPS]
    if len(candidates) == 0:
        return column

    # Inside the transformed footprint
    inside = points_in_polygon(positions[candidates, 0], positions[candidates, 1], polygon)
    candidates = candidates[inside]

    # Occlusion
    px, py = int(pose.x), int(pose.y)
    occupied = grid.occupied_mask
    for idx in candidates:
        cx, cy = int(positions[idx, 0]), int(positions[idx, 1])
        if line_of_sight(occupied, px, py, cx, cy):
            column[idx] = 1

    return column


def build_visibility_matrix(
    grid: OccupancyGrid,
    cells: Sequence[Cell],
    poses: Sequence[CandidatePose],
    footprint: Footprint,
    n_workers: Optional[int] = None,
    batch_threshold: int = 16,
) -> np.ndarray:
    """
    Build the binary cell-by-pose visibility matrix.

    Args:
        grid: Occupancy map
        cells: Cells to cover (matrix rows)
        poses: Candidate poses (matrix columns)
        footprint: Sensor footprint
        n_workers: Worker threads for the per-pose columns. None or 1 runs
            serially.
        batch_threshold: Below this many poses the build runs serially
            regardless of n_workers.

    Returns:
        uint8 array (len(cells), len(poses))

    Example:
        >>> cells = discretize_region(grid, cell_size=5)
        >>> poses = generate_candidate_poses(cells, np.pi / 2)
        >>> V = build_visibility_matrix(grid, cells, poses, Footprint.square(1.0))
    """
    positions = cell_positions(cells)
    matrix = np.zeros((len(cells), len(poses)), dtype=np.uint8)

    if n_workers is None or n_workers <= 1 or len(poses) <= batch_threshold:
        for j, pose in enumerate(poses):
            matrix[:, j] = compute_visibility_column(grid, positions, pose, footprint)
    else:
        with ThreadPoolExecutor(max_workers=n_workers) as executor:
            futures = {
                executor.submit(compute_visibility_column, grid, positions, pose, footprint): j
                for j, pose in enumerate(poses)
            }
            for future in as_completed(futures):
                matrix[:, futures[future]] = future.result()

    logger.debug(
        "Visibility matrix %d x %d built, %d observations",
        matrix.shape[0], matrix.shape[1], int(matrix.sum()),
    )
    return matrix


def find_unobservable_cells(matrix: np.ndarray) -> np.ndarray:
    """Row indices of cells that no candidate pose observes."""
    if matrix.shape[1] == 0:
        return np.arange(matrix.shape[0])
    return np.flatnonzero(matrix.max(axis=1) == 0)


def compute_coverage(matrix: np.ndarray, selected_columns: Sequence[int]) -> dict:
    """
    Coverage statistics for a set of selected poses.

    Args:
        matrix: Visibility matrix (cells x poses)
        selected_columns: Column indices of the chosen poses

    Returns:
        Dictionary with:
        - coverage: Fraction of cells observed by at least one selected pose
        - covered_cells: Number of observed cells
        - total_cells: Number of cells
        - redundancy: Mean number of selected poses observing a covered cell
        - observation_count: (num_cells,) int array of observing poses
    """
    selected = np.asarray(selected_columns, dtype=np.intp)
    total = matrix.shape[0]

    if len(selected) == 0:
        counts = np.zeros(total, dtype=np.int64)
    else:
        counts = matrix[:, selected].sum(axis=1, dtype=np.int64)

    covered = counts > 0
    num_covered = int(covered.sum())

    return {
        "coverage": float(num_covered / total) if total > 0 else 0.0,
        "covered_cells": num_covered,
        "total_cells": int(total),
        "redundancy": float(counts[covered].mean()) if num_covered > 0 else 0.0,
        "observation_count": counts,
    }


def coverage_mask(
    grid: OccupancyGrid,
    cells: Sequence[Cell],
    matrix: np.ndarray,
    selected_columns: Sequence[int],
) -> np.ndarray:
    """
    Boolean image marking the centers of covered cells.

    Useful for plotting; uncovered cell centers stay False.
    """
    stats = compute_coverage(matrix, selected_columns)
    mask = np.zeros(grid.shape, dtype=bool)
    for cell, count in zip(cells, stats["observation_count"]):
        if count > 0:
            mask[cell.y, cell.x] = True
    return mask
