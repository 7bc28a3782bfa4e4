"""
Visualization tools for sensing-pose planning.

This module provides:
    - Static plotting of maps, selected poses, footprints and coverage
    - Sparsity convergence plots
    - GIF generation for the reweighted relaxation
"""

from posecover.visualization.plotting import (
    draw_pose_markers,
    draw_footprints,
    plot_occupancy_map,
    plot_sensing_plan,
    plot_sparsity_history,
)
from posecover.visualization.animation import (
    create_frame,
    create_relaxation_gif,
)

__all__ = [
    "draw_pose_markers",
    "draw_footprints",
    "plot_occupancy_map",
    "plot_sensing_plan",
    "plot_sparsity_history",
    "create_frame",
    "create_relaxation_gif",
]
