"""
Occupancy map handling.

This module provides tools for working with 2D occupancy maps:
    - The OccupancyGrid data structure (free / occupied / unknown pixels)
    - Loading maps from images and ROS-style YAML descriptors
    - Generating synthetic rooms and floorplans for testing
    - Pixel <-> world coordinate transformations
"""

from posecover.grid.occupancy import (
    OccupancyGrid,
    FREE_VALUE,
    OCCUPIED_VALUE,
)

from posecover.grid.loader import (
    load_occupancy_map,
    load_map_yaml,
    load_map_from_array,
    save_occupancy_map,
)

from posecover.grid.synthetic import (
    create_empty_room,
    create_floorplan_map,
    add_wall_lines,
    add_obstacles,
)

from posecover.grid.coordinates import (
    pixel_to_world,
    world_to_pixel,
    poses_to_world,
)

__all__ = [
    # Data structure
    "OccupancyGrid",
    "FREE_VALUE",
    "OCCUPIED_VALUE",
    # Loading
    "load_occupancy_map",
    "load_map_yaml",
    "load_map_from_array",
    "save_occupancy_map",
    # Synthetic generation
    "create_empty_room",
    "create_floorplan_map",
    "add_wall_lines",
    "add_obstacles",
    # Coordinates
    "pixel_to_world",
    "world_to_pixel",
    "poses_to_world",
]
