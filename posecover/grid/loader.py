"""
Occupancy map loading from image files and map descriptors.

Maps are grayscale images (PNG, PGM, ...) where white pixels are free
space. A map descriptor is a small YAML file in the ROS map_server layout:

    image: room.pgm
    resolution: 0.05
    origin: [-10.0, -10.0, 0.0]
    negate: 0
    free_thresh: 0.196
"""

from pathlib import Path
from typing import Optional, Tuple, Union
import numpy as np

from posecover.grid.occupancy import OccupancyGrid, FREE_VALUE, OCCUPIED_VALUE


def binarize_image(
    image: np.ndarray,
    free_threshold: int = 250,
    occupied_threshold: int = 50,
    negate: bool = False,
) -> np.ndarray:
    """
    Convert a grayscale image to the 255/0/unknown occupancy encoding.

    Args:
        image: 2D (or RGB/RGBA) image array
        free_threshold: Pixels with value >= this are free
        occupied_threshold: Pixels with value <= this are occupied
        negate: If True, black means free (inverted images)

    Returns:
        uint8 array; 255 = free, 0 = occupied, 128 = unknown
    """
    image = np.asarray(image)
    if image.ndim == 3:
        # Drop alpha, average color channels
        image = image[:, :, :3].mean(axis=2)
    if image.ndim != 2:
        raise ValueError(f"Map image must be 2D or RGB, got shape {image.shape}")

    image = image.astype(np.float32)
    if negate:
        image = 255.0 - image

    result = np.full(image.shape, 128, dtype=np.uint8)
    result[image >= free_threshold] = FREE_VALUE
    result[image <= occupied_threshold] = OCCUPIED_VALUE
    return result


def load_occupancy_map(
    source: Union[str, Path],
    resolution: float = 0.05,
    origin: Tuple[float, float] = (0.0, 0.0),
    free_threshold: int = 250,
    occupied_threshold: int = 50,
    negate: bool = False,
) -> OccupancyGrid:
    """
    Load an occupancy map from an image file.

    Args:
        source: Path to the map image (PNG, PGM, BMP, ...)
        resolution: Meters per pixel
        origin: World coordinate of pixel (0, 0) in meters
        free_threshold: Gray value at or above which a pixel is free
        occupied_threshold: Gray value at or below which a pixel is occupied
        negate: Interpret black as free

    Returns:
        OccupancyGrid

    Raises:
        FileNotFoundError: If the image does not exist

    Example:
        >>> grid = load_occupancy_map("maps/office.png", resolution=0.05)
        >>> print(grid.shape, grid.num_free)
    """
    import imageio.v2 as imageio

    source = Path(source)
    if not source.exists():
        raise FileNotFoundError(f"Map image not found: {source}")

    image = imageio.imread(source)
    data = binarize_image(image, free_threshold, occupied_threshold, negate)

    return OccupancyGrid(
        data=data,
        resolution=resolution,
        origin=origin,
        source_file=str(source),
    )


def load_map_yaml(source: Union[str, Path]) -> OccupancyGrid:
    """
    Load an occupancy map from a ROS-style YAML descriptor.

    The image path in the descriptor is resolved relative to the YAML file.
    The descriptor origin is the lower-left image pixel and world y points
    up, so rows are flipped: grid row 0 is the bottom image row.
    Thresholds given as probabilities (``free_thresh``, ``occupied_thresh``)
    are converted to gray values.

    Args:
        source: Path to the YAML descriptor

    Returns:
        OccupancyGrid
    """
    import yaml

    source = Path(source)
    if not source.exists():
        raise FileNotFoundError(f"Map descriptor not found: {source}")

    with open(source, 'r') as f:
        desc = yaml.safe_load(f)

    if not desc or 'image' not in desc:
        raise ValueError(f"Map descriptor {source} has no 'image' entry")

    image_path = Path(desc['image'])
    if not image_path.is_absolute():
        image_path = source.parent / image_path

    origin = desc.get('origin', [0.0, 0.0])
    negate = bool(desc.get('negate', 0))

    # Probabilities of occupancy -> gray values (white = free)
    free_thresh = desc.get('free_thresh')
    occupied_thresh = desc.get('occupied_thresh')
    free_threshold = 250 if free_thresh is None else int(round(255 * (1.0 - free_thresh)))
    occupied_threshold = 50 if occupied_thresh is None else int(round(255 * (1.0 - occupied_thresh)))

    grid = load_occupancy_map(
        image_path,
        resolution=float(desc.get('resolution', 0.05)),
        origin=(float(origin[0]), float(origin[1])),
        free_threshold=free_threshold,
        occupied_threshold=occupied_threshold,
        negate=negate,
    )

    # Descriptor origin is the lower-left pixel with world y up
    return OccupancyGrid(
        data=np.flipud(grid.data).copy(),
        resolution=grid.resolution,
        origin=grid.origin,
        source_file=grid.source_file,
    )


def load_map_from_array(
    array: np.ndarray,
    resolution: float = 0.05,
    origin: Tuple[float, float] = (0.0, 0.0),
    binarize: bool = False,
) -> OccupancyGrid:
    """
    Wrap an existing numpy array as an OccupancyGrid.

    Args:
        array: 2D array; bool (True = free) or uint8 (255 = free, 0 = occupied)
        resolution: Meters per pixel
        origin: World coordinate of pixel (0, 0)
        binarize: Threshold arbitrary gray values with binarize_image first

    Returns:
        OccupancyGrid
    """
    array = np.asarray(array)
    if binarize:
        array = binarize_image(array)
    return OccupancyGrid(data=array, resolution=resolution, origin=origin)


def save_occupancy_map(
    grid: OccupancyGrid,
    path: Union[str, Path],
    descriptor: bool = False,
) -> Optional[Path]:
    """
    Save an occupancy grid as an image, optionally with a YAML descriptor.

    Args:
        grid: The grid to save
        path: Output image path (e.g. "room.png")
        descriptor: Also write "<stem>.yaml" next to the image. The image is
            then written with grid row 0 as its bottom row, the layout
            load_map_yaml reads

    Returns:
        Path of the YAML descriptor if written, else None
    """
    import imageio.v2 as imageio

    path = Path(path)
    imageio.imwrite(path, np.flipud(grid.data) if descriptor else grid.data)

    if not descriptor:
        return None

    import yaml

    yaml_path = path.with_suffix('.yaml')
    with open(yaml_path, 'w') as f:
        yaml.dump({
            'image': path.name,
            'resolution': float(grid.resolution),
            'origin': [grid.origin[0], grid.origin[1], 0.0],
            'negate': 0,
        }, f, default_flow_style=False, sort_keys=False)
    return yaml_path
