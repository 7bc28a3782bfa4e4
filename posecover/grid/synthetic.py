"""
Synthetic occupancy maps for testing and development.

All functions return uint8 arrays in the occupancy encoding
(255 = free, 0 = occupied) that can be wrapped with OccupancyGrid.
"""

from typing import List, Optional, Tuple
import numpy as np

from posecover.grid.occupancy import FREE_VALUE, OCCUPIED_VALUE


def create_empty_room(
    height: int = 100,
    width: int = 100,
    wall_thickness: int = 2,
) -> np.ndarray:
    """
    Create a rectangular room: free interior surrounded by walls.

    Args:
        height: Number of rows.
        width: Number of columns.
        wall_thickness: Outer wall thickness in pixels (0 = no walls).

    Returns:
        uint8 array (H, W)
    """
    room = np.full((height, width), FREE_VALUE, dtype=np.uint8)
    if wall_thickness > 0:
        room[:wall_thickness, :] = OCCUPIED_VALUE
        room[-wall_thickness:, :] = OCCUPIED_VALUE
        room[:, :wall_thickness] = OCCUPIED_VALUE
        room[:, -wall_thickness:] = OCCUPIED_VALUE
    return room


def add_wall_lines(
    occupancy: np.ndarray,
    lines: List[Tuple[Tuple[int, int], Tuple[int, int]]],
    thickness: int = 1,
) -> np.ndarray:
    """
    Rasterize wall segments onto a map.

    Args:
        occupancy: Existing map (copied, not modified in place).
        lines: List of ((r1, c1), (r2, c2)) line segments.
        thickness: Wall thickness in pixels.

    Returns:
        Map with wall lines.

    Example:
        >>> room = create_empty_room(50, 50)
        >>> room = add_wall_lines(room, [((0, 25), (35, 25))], thickness=2)
    """
    occupancy = occupancy.copy()
    half_thick = thickness // 2

    for (r1, c1), (r2, c2) in lines:
        steps = max(abs(r2 - r1), abs(c2 - c1), 1)

        for i in range(steps + 1):
            t = i / steps
            r = int(round(r1 + t * (r2 - r1)))
            c = int(round(c1 + t * (c2 - c1)))

            r_lo, r_hi = max(r - half_thick, 0), min(r + half_thick + 1, occupancy.shape[0])
            c_lo, c_hi = max(c - half_thick, 0), min(c + half_thick + 1, occupancy.shape[1])
            occupancy[r_lo:r_hi, c_lo:c_hi] = OCCUPIED_VALUE

    return occupancy


def add_obstacles(
    occupancy: np.ndarray,
    boxes: List[Tuple[int, int, int, int]],
) -> np.ndarray:
    """
    Add rectangular obstacles (furniture, pillars) to a map.

    Args:
        occupancy: Existing map (copied).
        boxes: List of (row, col, height, width) rectangles.

    Returns:
        Map with obstacles.
    """
    occupancy = occupancy.copy()
    for row, col, h, w in boxes:
        occupancy[max(row, 0):row + h, max(col, 0):col + w] = OCCUPIED_VALUE
    return occupancy


def create_floorplan_map(
    height: int = 120,
    width: int = 160,
    num_obstacles: int = 4,
    seed: Optional[int] = None,
) -> np.ndarray:
    """
    Create an indoor floorplan with rooms, door gaps and small obstacles.

    Args:
        height: Number of rows.
        width: Number of columns.
        num_obstacles: Number of furniture-like blocks to place.
        seed: Random seed for reproducibility.

    Returns:
        uint8 occupancy array

    Example:
        >>> occ = create_floorplan_map(120, 160, seed=42)
        >>> print((occ == 0).sum(), "occupied pixels")
    """
    rng = np.random.default_rng(seed)

    occupancy = create_empty_room(height, width, wall_thickness=2)

    # Vertical divider with a door gap
    vw = width // 2
    gap_pos = int(rng.integers(height // 4, 3 * height // 4))
    gap_size = max(height // 8, 4)
    occupancy[:gap_pos - gap_size // 2, vw - 1:vw + 1] = OCCUPIED_VALUE
    occupancy[gap_pos + gap_size // 2:, vw - 1:vw + 1] = OCCUPIED_VALUE

    # Horizontal divider in the right half with a door gap
    hw = height // 2
    gap_pos = int(rng.integers(vw + width // 8, width - width // 8))
    gap_size = max(width // 10, 4)
    occupancy[hw - 1:hw + 1, vw:gap_pos - gap_size // 2] = OCCUPIED_VALUE
    occupancy[hw - 1:hw + 1, gap_pos + gap_size // 2:] = OCCUPIED_VALUE

    # Furniture-like obstacles, only placed on free floor
    placed = 0
    attempts = 0
    while placed < num_obstacles and attempts < num_obstacles * 20:
        attempts += 1
        oh = int(rng.integers(3, max(height // 12, 4)))
        ow = int(rng.integers(3, max(width // 12, 4)))
        oy = int(rng.integers(4, height - oh - 4))
        ox = int(rng.integers(4, width - ow - 4))

        # Keep a margin so obstacles never seal a doorway
        window = occupancy[oy - 3:oy + oh + 3, ox - 3:ox + ow + 3]
        if (window == FREE_VALUE).all():
            occupancy[oy:oy + oh, ox:ox + ow] = OCCUPIED_VALUE
            placed += 1

    return occupancy
