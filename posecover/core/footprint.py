"""
Sensor footprint model.

A footprint is the field-of-view polygon attached to a sensing pose,
expressed in the sensor/robot local frame (meters, x forward, y left).
The visibility builder needs a few derived scalars that are computed once
from the polygon: the vector to the polygon centroid, the largest angle a
corner makes with that vector, and the range of distances from the pose
origin to the polygon boundary.
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple
import numpy as np

from posecover.core.geometry import (
    angles_between,
    points_in_polygon,
    point_segment_distances,
    rotation_matrix,
)


@dataclass
class Footprint:
    """
    Field-of-view polygon plus derived gating scalars.

    Any derived scalar left as None is computed from the polygon:
        - centroid_vector: mean of the polygon points
        - max_half_angle: largest angle between centroid_vector and a
          corner; pi if the origin lies inside the polygon or the centroid
          coincides with the origin
        - min_radius: distance from the origin to the nearest polygon edge;
          0 if the origin lies inside the polygon
        - max_radius: distance from the origin to the farthest corner

    Attributes:
        points: (N, 2) ordered polygon vertices in meters, N >= 3
        centroid_vector: Vector from pose origin to footprint centroid
        max_half_angle: Angular gate in radians
        min_radius: Minimum sensing distance in meters
        max_radius: Maximum sensing distance in meters

    Example:
        >>> fp = Footprint.rectangle(length=2.0, width=1.0, offset=0.5)
        >>> print(f"range [{fp.min_radius:.2f}, {fp.max_radius:.2f}] m")
    """
    points: np.ndarray
    centroid_vector: Optional[np.ndarray] = None
    max_half_angle: Optional[float] = None
    min_radius: Optional[float] = None
    max_radius: Optional[float] = None

    origin_inside: bool = field(init=False, default=False)

    def __post_init__(self):
        self.points = np.asarray(self.points, dtype=np.float64).reshape(-1, 2)
        if len(self.points) < 3:
            raise ValueError(f"Footprint needs at least 3 points, got {len(self.points)}")

        self.origin_inside = bool(
            points_in_polygon(np.zeros(1), np.zeros(1), self.points)[0]
        )

        if self.centroid_vector is None:
            self.centroid_vector = self.points.mean(axis=0)
        else:
            self.centroid_vector = np.asarray(self.centroid_vector, dtype=np.float64).reshape(2)

        if self.max_half_angle is None:
            self.max_half_angle = self._derive_half_angle()
        if self.min_radius is None:
            self.min_radius = self._derive_min_radius()
        if self.max_radius is None:
            self.max_radius = float(np.linalg.norm(self.points, axis=1).max())

        self.max_half_angle = float(self.max_half_angle)
        self.min_radius = float(self.min_radius)
        self.max_radius = float(self.max_radius)

        if self.min_radius < 0 or self.max_radius < self.min_radius:
            raise ValueError(
                f"Invalid sensing radii: min={self.min_radius}, max={self.max_radius}"
            )
        if not 0.0 <= self.max_half_angle <= np.pi:
            raise ValueError(f"max_half_angle must be in [0, pi], got {self.max_half_angle}")

    def _derive_half_angle(self) -> float:
        if self.origin_inside or np.linalg.norm(self.centroid_vector) == 0.0:
            return float(np.pi)
        return float(angles_between(self.centroid_vector, self.points).max())

    def _derive_min_radius(self) -> float:
        if self.origin_inside:
            return 0.0
        return float(point_segment_distances(np.zeros(2), self.points).min())

    @property
    def num_points(self) -> int:
        return len(self.points)

    @property
    def half_angle_degrees(self) -> float:
        return float(np.rad2deg(self.max_half_angle))

    def transformed(self, x: float, y: float, theta: float) -> Tuple[np.ndarray, np.ndarray]:
        """
        Place the footprint at a world pose.

        Args:
            x, y: Pose position in meters
            theta: Pose heading in radians

        Returns:
            (polygon, centroid_vector): (N, 2) world polygon and the rotated
            centroid vector
        """
        R = rotation_matrix(theta)
        polygon = np.array([x, y]) + self.points @ R.T
        return polygon, R @ self.centroid_vector

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "points": self.points.tolist(),
            "centroid_vector": [float(v) for v in self.centroid_vector],
            "max_half_angle": self.max_half_angle,
            "min_radius": self.min_radius,
            "max_radius": self.max_radius,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Footprint":
        """Create from dictionary; missing derived values are recomputed."""
        return cls(
            points=np.asarray(data["points"], dtype=np.float64),
            centroid_vector=data.get("centroid_vector"),
            max_half_angle=data.get("max_half_angle"),
            min_radius=data.get("min_radius"),
            max_radius=data.get("max_radius"),
        )

    # Common presets
    @classmethod
    def rectangle(cls, length: float, width: float, offset: float = 0.0) -> "Footprint":
        """
        Rectangular footprint ahead of the sensor.

        Args:
            length: Extent along the heading (meters)
            width: Extent across the heading (meters)
            offset: Distance from the pose origin to the near edge
        """
        half = width / 2
        return cls(np.array([
            [offset, -half],
            [offset + length, -half],
            [offset + length, half],
            [offset, half],
        ]))

    @classmethod
    def camera_frustum(
        cls,
        hfov: float,
        near: float,
        far: float,
    ) -> "Footprint":
        """
        Trapezoidal footprint of a forward-looking camera projected on the floor.

        Args:
            hfov: Horizontal field of view in radians
            near: Nearest visible distance (meters)
            far: Farthest usable distance (meters)
        """
        if not 0 < hfov < np.pi:
            raise ValueError(f"hfov must be in (0, pi), got {hfov}")
        t = np.tan(hfov / 2)
        return cls(np.array([
            [near, -near * t],
            [far, -far * t],
            [far, far * t],
            [near, near * t],
        ]))

    @classmethod
    def square(cls, size: float) -> "Footprint":
        """Square footprint centred on the pose (e.g. a cleaning robot body)."""
        half = size / 2
        return cls(np.array([
            [-half, -half],
            [half, -half],
            [half, half],
            [-half, half],
        ]))


def footprint_from_points(points: Sequence[Sequence[float]], **overrides) -> Footprint:
    """Build a Footprint from a list of [x, y] pairs (e.g. from a config file)."""
    return Footprint(np.asarray(points, dtype=np.float64), **overrides)
