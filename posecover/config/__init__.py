"""
Configuration management for the planner.

Dataclass configuration models loadable from YAML or JSON files.
"""

from posecover.config.settings import (
    PlannerConfig,
    FootprintConfig,
    DiscretizationConfig,
    RelaxationConfig,
    VisibilityConfig,
    VisualizationConfig,
    load_config,
)

__all__ = [
    "PlannerConfig",
    "FootprintConfig",
    "DiscretizationConfig",
    "RelaxationConfig",
    "VisibilityConfig",
    "VisualizationConfig",
    "load_config",
]
