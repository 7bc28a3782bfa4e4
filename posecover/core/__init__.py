"""
Core geometry, discretization and visibility computation.

This module provides:
    - Footprint: sensor field-of-view polygon with derived gating scalars
    - Cell / CandidatePose discretization of the region of interest
    - Visibility matrix construction (range, angle, polygon and occlusion tests)
    - Coverage statistics for a set of selected poses
"""

from posecover.core.footprint import Footprint, footprint_from_points
from posecover.core.discretize import (
    Cell,
    CandidatePose,
    discretize_region,
    generate_candidate_poses,
    candidate_headings,
)
from posecover.core.visibility import (
    build_visibility_matrix,
    compute_visibility_column,
    compute_coverage,
    coverage_mask,
    find_unobservable_cells,
)

__all__ = [
    "Footprint",
    "footprint_from_points",
    "Cell",
    "CandidatePose",
    "discretize_region",
    "generate_candidate_poses",
    "candidate_headings",
    "build_visibility_matrix",
    "compute_visibility_column",
    "compute_coverage",
    "coverage_mask",
    "find_unobservable_cells",
]
