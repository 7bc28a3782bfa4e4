"""
Coordinate transformations between map pixels and world meters.

Pixel (x, y) maps to world ``origin + (x, y) * resolution``. There is no
axis flip here: the y axis of the world frame follows grid rows. Maps read
from a map descriptor are stored bottom row first, so world y points up.
"""

from typing import List, Tuple, Union
import numpy as np

from posecover.grid.occupancy import OccupancyGrid


def pixel_to_world(
    x: Union[float, np.ndarray],
    y: Union[float, np.ndarray],
    grid: OccupancyGrid,
) -> Tuple[Union[float, np.ndarray], Union[float, np.ndarray]]:
    """
    Convert pixel coordinates to world coordinates in meters.

    Args:
        x: Pixel column(s)
        y: Pixel row(s)
        grid: Occupancy grid providing resolution and origin

    Returns:
        (wx, wy) world coordinates

    Example:
        >>> grid = OccupancyGrid(np.zeros((10, 10), np.uint8), 0.1, (1.0, 2.0))
        >>> pixel_to_world(5, 5, grid)
        (1.5, 2.5)
    """
    wx = grid.origin[0] + x * grid.resolution
    wy = grid.origin[1] + y * grid.resolution
    return wx, wy


def world_to_pixel(
    wx: Union[float, np.ndarray],
    wy: Union[float, np.ndarray],
    grid: OccupancyGrid,
    clamp: bool = False,
    round_to_int: bool = False,
) -> Tuple[Union[float, np.ndarray], Union[float, np.ndarray]]:
    """
    Convert world coordinates in meters to pixel coordinates.

    Args:
        wx: World x coordinate(s)
        wy: World y coordinate(s)
        grid: Occupancy grid providing resolution and origin
        clamp: Clamp to [0, width] x [0, height]
        round_to_int: Round to the nearest integer pixel

    Returns:
        (x, y) pixel coordinates
    """
    x = (wx - grid.origin[0]) / grid.resolution
    y = (wy - grid.origin[1]) / grid.resolution

    if round_to_int:
        x = np.rint(x).astype(int)
        y = np.rint(y).astype(int)

    if clamp:
        x = np.clip(x, 0, grid.width)
        y = np.clip(y, 0, grid.height)

    return x, y


def poses_to_world(poses: List, grid: OccupancyGrid) -> List[Tuple[float, float, float]]:
    """
    Convert poses with pixel positions to (x, y, theta) in world meters.

    Args:
        poses: Objects with x, y and theta attributes
        grid: Occupancy grid

    Returns:
        List of (wx, wy, theta) tuples
    """
    result = []
    for pose in poses:
        wx, wy = pixel_to_world(pose.x, pose.y, grid)
        result.append((float(wx), float(wy), float(pose.theta)))
    return result
