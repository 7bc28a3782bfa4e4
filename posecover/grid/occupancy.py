"""
Occupancy grid data structure.

The planner works on a single static snapshot of a 2D map. Each pixel is
either free (255), occupied (0) or unknown (anything else). Unknown pixels
are neither candidate cells nor occluders.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple
import numpy as np


FREE_VALUE = 255
OCCUPIED_VALUE = 0


@dataclass
class OccupancyGrid:
    """
    2D occupancy map with metric information.

    Pixel coordinates are (x, y) = (column, row), with row 0 at the top of
    the image (the bottom for maps read by load_map_yaml). The world
    position of pixel (x, y) is ``origin + (x, y) * resolution``.

    Attributes:
        data: uint8 array (H, W); 255 = free, 0 = occupied
        resolution: Size of one pixel in meters
        origin: (x, y) world coordinate of pixel (0, 0) in meters
        source_file: Original file path if loaded from disk

    Example:
        >>> data = np.full((50, 80), 255, dtype=np.uint8)
        >>> grid = OccupancyGrid(data, resolution=0.05)
        >>> grid.is_free(10, 10)
        True
    """
    data: np.ndarray
    resolution: float = 0.05
    origin: Tuple[float, float] = (0.0, 0.0)
    source_file: Optional[str] = None

    free_mask: np.ndarray = field(init=False, repr=False)
    occupied_mask: np.ndarray = field(init=False, repr=False)

    def __post_init__(self):
        data = np.asarray(self.data)
        if data.ndim != 2:
            raise ValueError(f"Occupancy grid must be 2D, got shape {data.shape}")
        if self.resolution <= 0:
            raise ValueError(f"resolution must be positive, got {self.resolution}")

        if data.dtype == bool:
            data = np.where(data, FREE_VALUE, OCCUPIED_VALUE).astype(np.uint8)
        self.data = data.astype(np.uint8, copy=False)
        self.origin = (float(self.origin[0]), float(self.origin[1]))

        self.free_mask = self.data == FREE_VALUE
        self.occupied_mask = self.data == OCCUPIED_VALUE

    @classmethod
    def from_free_mask(
        cls,
        free_mask: np.ndarray,
        resolution: float = 0.05,
        origin: Tuple[float, float] = (0.0, 0.0),
    ) -> "OccupancyGrid":
        """Create a grid from a boolean mask (True = free, False = occupied)."""
        return cls(np.asarray(free_mask, dtype=bool), resolution=resolution, origin=origin)

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def shape(self) -> Tuple[int, int]:
        return self.data.shape

    @property
    def num_free(self) -> int:
        return int(self.free_mask.sum())

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_free(self, x: int, y: int) -> bool:
        """True if pixel (x, y) is free space."""
        return self.in_bounds(x, y) and bool(self.free_mask[y, x])

    def is_occupied(self, x: int, y: int) -> bool:
        """True if pixel (x, y) is an obstacle."""
        return self.in_bounds(x, y) and bool(self.occupied_mask[y, x])

    def to_dict(self) -> dict:
        """Convert metadata to dictionary (without the pixel data)."""
        return {
            "shape": [self.height, self.width],
            "resolution": self.resolution,
            "origin": list(self.origin),
            "num_free": self.num_free,
            "source_file": self.source_file,
        }
