"""
Planar geometry helpers used by the visibility builder.

All functions are numpy-vectorized over the query points where that makes
sense; polygons are small (a handful of footprint corners).
"""

from typing import Tuple
import numpy as np


def rotation_matrix(theta: float) -> np.ndarray:
    """2x2 counter-clockwise rotation matrix for angle theta (radians)."""
    c, s = np.cos(theta), np.sin(theta)
    return np.array([[c, -s], [s, c]])


def angles_between(reference: np.ndarray, vectors: np.ndarray) -> np.ndarray:
    """
    Unsigned angle between a reference vector and each row of ``vectors``.

    The cosine is clamped to [-1, 1] before arccos. Where either vector has
    zero length the angle is 0.0.

    Args:
        reference: (2,) vector
        vectors: (N, 2) array

    Returns:
        (N,) array of angles in [0, pi]
    """
    vectors = np.atleast_2d(np.asarray(vectors, dtype=np.float64))
    reference = np.asarray(reference, dtype=np.float64)

    norms = np.linalg.norm(vectors, axis=1) * np.linalg.norm(reference)
    dots = vectors @ reference

    angles = np.zeros(len(vectors), dtype=np.float64)
    nonzero = norms > 0.0
    if np.any(nonzero):
        quotient = np.clip(dots[nonzero] / norms[nonzero], -1.0, 1.0)
        angles[nonzero] = np.arccos(quotient)
    return angles


def points_in_polygon(
    px: np.ndarray,
    py: np.ndarray,
    polygon: np.ndarray,
    include_boundary: bool = True,
    tolerance: float = 1e-9,
) -> np.ndarray:
    """
    Vectorized ray-casting point-in-polygon test.

    Args:
        px: (N,) x coordinates
        py: (N,) y coordinates
        polygon: (M, 2) ordered vertices (closed implicitly)
        include_boundary: Points on an edge count as inside
        tolerance: Distance tolerance for the boundary test

    Returns:
        (N,) boolean mask, True where the point is inside
    """
    px = np.asarray(px, dtype=np.float64)
    py = np.asarray(py, dtype=np.float64)
    polygon = np.asarray(polygon, dtype=np.float64)

    n = len(polygon)
    inside = np.zeros(px.shape, dtype=bool)
    on_edge = np.zeros(px.shape, dtype=bool)

    j = n - 1
    for i in range(n):
        xi, yi = polygon[i]
        xj, yj = polygon[j]

        crosses = (yi > py) != (yj > py)
        if np.any(crosses):
            dy_edge = yj - yi
            intersect_x = np.where(
                crosses,
                (xj - xi) * (py - yi) / np.where(crosses, dy_edge, 1.0) + xi,
                0.0,
            )
            inside ^= crosses & (px < intersect_x)

        if include_boundary:
            on_edge |= _on_segment(px, py, xi, yi, xj, yj, tolerance)
        j = i

    return inside | on_edge


def _on_segment(px, py, x1, y1, x2, y2, tolerance):
    """Mask of points lying on segment (x1, y1)-(x2, y2)."""
    dx, dy = x2 - x1, y2 - y1
    length = np.hypot(dx, dy)
    if length == 0.0:
        return np.hypot(px - x1, py - y1) <= tolerance

    cross = dx * (py - y1) - dy * (px - x1)
    dot = dx * (px - x1) + dy * (py - y1)
    return (np.abs(cross) <= tolerance * length) & (dot >= -tolerance) & (dot <= length * length + tolerance)


def point_segment_distances(point: np.ndarray, polygon: np.ndarray) -> np.ndarray:
    """
    Distance from a point to every edge of a closed polygon.

    Args:
        point: (2,) query point
        polygon: (M, 2) ordered vertices

    Returns:
        (M,) distances, edge k joins vertex k and vertex k+1 (mod M)
    """
    point = np.asarray(point, dtype=np.float64)
    a = np.asarray(polygon, dtype=np.float64)
    b = np.roll(a, -1, axis=0)

    ab = b - a
    length_sq = (ab ** 2).sum(axis=1)
    t = np.zeros(len(a))
    nonzero = length_sq > 0.0
    t[nonzero] = ((point - a[nonzero]) * ab[nonzero]).sum(axis=1) / length_sq[nonzero]
    t = np.clip(t, 0.0, 1.0)

    closest = a + t[:, None] * ab
    return np.linalg.norm(closest - point, axis=1)


def bresenham_line(x1: int, y1: int, x2: int, y2: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Pixels along the 8-connected line from (x1, y1) to (x2, y2).

    Both endpoints are included.

    Returns:
        (xs, ys) integer arrays
    """
    xs, ys = [], []

    dx = abs(x2 - x1)
    dy = abs(y2 - y1)
    x, y = x1, y1

    sx = 1 if x1 < x2 else -1
    sy = 1 if y1 < y2 else -1

    if dx > dy:
        err = dx / 2.0
        while x != x2:
            xs.append(x)
            ys.append(y)
            err -= dy
            if err < 0:
                y += sy
                err += dx
            x += sx
    else:
        err = dy / 2.0
        while y != y2:
            xs.append(x)
            ys.append(y)
            err -= dx
            if err < 0:
                x += sx
                err += dy
            y += sy

    xs.append(x2)
    ys.append(y2)
    return np.array(xs, dtype=np.intp), np.array(ys, dtype=np.intp)


def line_of_sight(occupied_mask: np.ndarray, x1: int, y1: int, x2: int, y2: int) -> bool:
    """
    True if no pixel on the line from (x1, y1) to (x2, y2) is occupied.

    Args:
        occupied_mask: (H, W) boolean array, True = obstacle
        x1, y1: Start pixel
        x2, y2: End pixel
    """
    xs, ys = bresenham_line(x1, y1, x2, y2)
    return not occupied_mask[ys, xs].any()
