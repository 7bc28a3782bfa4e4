"""
Configuration settings for the sensing-pose planner.

This module provides typed dataclass configuration for the footprint,
discretization, relaxation, visibility and visualization settings,
loadable from YAML/JSON files.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple, Union
import json
import numpy as np

from posecover.core.footprint import Footprint
from posecover.optimization.reweighting import MAX_ITERATIONS


@dataclass
class FootprintConfig:
    """
    Sensor footprint configuration.

    Derived values left as None are computed from the polygon.

    Attributes:
        points: Polygon vertices [[x, y], ...] in meters, sensor frame
        centroid_vector: Override for the centroid vector
        max_half_angle: Override for the angular gate (radians)
        min_radius: Override for the minimum sensing distance (meters)
        max_radius: Override for the maximum sensing distance (meters)
    """
    points: List[List[float]] = field(default_factory=lambda: [
        [-0.25, -0.25], [0.25, -0.25], [0.25, 0.25], [-0.25, 0.25],
    ])
    centroid_vector: Optional[List[float]] = None
    max_half_angle: Optional[float] = None
    min_radius: Optional[float] = None
    max_radius: Optional[float] = None

    def to_footprint(self) -> Footprint:
        return Footprint(
            points=np.asarray(self.points, dtype=np.float64),
            centroid_vector=self.centroid_vector,
            max_half_angle=self.max_half_angle,
            min_radius=self.min_radius,
            max_radius=self.max_radius,
        )

    @classmethod
    def from_footprint(cls, footprint: Footprint) -> "FootprintConfig":
        """Config holding only the polygon; derived values are recomputed on load."""
        return cls(points=footprint.points.tolist())


@dataclass
class DiscretizationConfig:
    """
    Cell and heading discretization.

    Attributes:
        cell_size: Cell lattice spacing in pixels
        delta_theta: Heading step in radians
        region: ((x_min, y_min), (x_max, y_max)) in pixels, None = whole map
    """
    cell_size: int = 5
    delta_theta: float = np.pi / 4
    region: Optional[Tuple[Tuple[int, int], Tuple[int, int]]] = None


@dataclass
class RelaxationConfig:
    """
    Reweighted relaxation settings.

    Attributes:
        sparsity_check_range: Plateau length that counts as converged
        max_iterations: Iteration limit (at most 200)
        sparsity_tolerance: Coefficients at or below this count as sparse
        record_trace: Keep every iteration's solution (for animation)
    """
    sparsity_check_range: int = 20
    max_iterations: int = MAX_ITERATIONS
    sparsity_tolerance: float = 0.01
    record_trace: bool = False


@dataclass
class VisibilityConfig:
    """
    Visibility matrix build settings.

    Attributes:
        n_workers: Worker threads (None or 1 = serial)
        batch_threshold: Pose count below which the build stays serial
    """
    n_workers: Optional[int] = None
    batch_threshold: int = 16


@dataclass
class VisualizationConfig:
    """
    Visualization settings.

    Attributes:
        output_dir: Directory for output files
        generate_gifs: Whether to generate GIF animations
        gif_fps: Frames per second for GIFs
        gif_max_frames: Maximum frames in GIFs
        dpi: Resolution for saved images
        figsize: Default figure size (width, height)
    """
    output_dir: str = "outputs"
    generate_gifs: bool = False
    gif_fps: int = 5
    gif_max_frames: int = 50
    dpi: int = 150
    figsize: Tuple[int, int] = (10, 8)


@dataclass
class PlannerConfig:
    """
    Main planner configuration.

    Attributes:
        footprint: Sensor footprint
        discretization: Cell and heading discretization
        relaxation: Reweighted relaxation settings
        visibility: Visibility matrix build settings
        visualization: Visualization settings
        allow_partial_coverage: Plan around unobservable cells instead of failing
        map_path: Optional path to a map image or YAML descriptor
        map_resolution: Meters per pixel for map images without a descriptor
        map_origin: World position of pixel (0, 0) for map images
    """
    footprint: FootprintConfig = field(default_factory=FootprintConfig)
    discretization: DiscretizationConfig = field(default_factory=DiscretizationConfig)
    relaxation: RelaxationConfig = field(default_factory=RelaxationConfig)
    visibility: VisibilityConfig = field(default_factory=VisibilityConfig)
    visualization: VisualizationConfig = field(default_factory=VisualizationConfig)
    allow_partial_coverage: bool = False
    map_path: Optional[str] = None
    map_resolution: float = 0.05
    map_origin: Tuple[float, float] = (0.0, 0.0)

    def validate(self) -> List[str]:
        """
        Check the configuration for invalid values.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        if len(self.footprint.points) < 3:
            errors.append("Footprint needs at least 3 points")
        if self.discretization.cell_size <= 0:
            errors.append("cell_size must be positive")
        if self.discretization.delta_theta <= 0:
            errors.append("delta_theta must be positive")
        if self.discretization.region is not None:
            (x_min, y_min), (x_max, y_max) = self.discretization.region
            if x_min > x_max or y_min > y_max:
                errors.append("Region min corner must not exceed max corner")
        if self.relaxation.sparsity_check_range <= 0:
            errors.append("sparsity_check_range must be positive")
        if not 1 <= self.relaxation.max_iterations <= MAX_ITERATIONS:
            errors.append(f"max_iterations must be in [1, {MAX_ITERATIONS}]")
        if self.relaxation.sparsity_tolerance < 0:
            errors.append("sparsity_tolerance must be non-negative")
        if self.visibility.n_workers is not None and self.visibility.n_workers < 1:
            errors.append("n_workers must be at least 1")
        if self.map_resolution <= 0:
            errors.append("map_resolution must be positive")

        return errors

    def check(self) -> None:
        """Raise ValueError listing every validation error."""
        errors = self.validate()
        if errors:
            raise ValueError("Invalid planner configuration: " + "; ".join(errors))

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        def convert(obj):
            if hasattr(obj, '__dataclass_fields__'):
                return {k: convert(v) for k, v in obj.__dict__.items()}
            elif isinstance(obj, (list, tuple)):
                return [convert(v) for v in obj]
            elif isinstance(obj, np.ndarray):
                return obj.tolist()
            elif isinstance(obj, np.generic):
                return obj.item()
            else:
                return obj
        return convert(self)

    @classmethod
    def from_dict(cls, data: dict) -> "PlannerConfig":
        """Create from dictionary."""
        discretization = dict(data.get('discretization', {}))
        if discretization.get('region') is not None:
            (x_min, y_min), (x_max, y_max) = discretization['region']
            discretization['region'] = ((x_min, y_min), (x_max, y_max))

        visualization = dict(data.get('visualization', {}))
        if 'figsize' in visualization:
            visualization['figsize'] = tuple(visualization['figsize'])

        return cls(
            footprint=FootprintConfig(**data.get('footprint', {})),
            discretization=DiscretizationConfig(**discretization),
            relaxation=RelaxationConfig(**data.get('relaxation', {})),
            visibility=VisibilityConfig(**data.get('visibility', {})),
            visualization=VisualizationConfig(**visualization),
            allow_partial_coverage=data.get('allow_partial_coverage', False),
            map_path=data.get('map_path'),
            map_resolution=data.get('map_resolution', 0.05),
            map_origin=tuple(data.get('map_origin', (0.0, 0.0))),
        )

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "PlannerConfig":
        """Load configuration from YAML file."""
        import yaml

        path = Path(path)
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {})

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "PlannerConfig":
        """Load configuration from JSON file."""
        path = Path(path)
        with open(path, 'r') as f:
            data = json.load(f)
        return cls.from_dict(data)

    def to_yaml(self, path: Union[str, Path]) -> None:
        """Save configuration to YAML file."""
        import yaml

        path = Path(path)
        with open(path, 'w') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def to_json(self, path: Union[str, Path]) -> None:
        """Save configuration to JSON file."""
        path = Path(path)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def for_camera(cls) -> "PlannerConfig":
        """Preset for a forward-looking camera (90 deg FOV, 0.3 to 3 m)."""
        footprint = Footprint.camera_frustum(np.deg2rad(90), near=0.3, far=3.0)
        return cls(
            footprint=FootprintConfig.from_footprint(footprint),
            discretization=DiscretizationConfig(cell_size=10, delta_theta=np.pi / 4),
            relaxation=RelaxationConfig(sparsity_check_range=20),
        )

    @classmethod
    def for_cleaning_robot(cls) -> "PlannerConfig":
        """Preset for a floor-cleaning robot covering its own body square."""
        footprint = Footprint.square(0.5)
        return cls(
            footprint=FootprintConfig.from_footprint(footprint),
            discretization=DiscretizationConfig(cell_size=5, delta_theta=np.pi / 2),
            relaxation=RelaxationConfig(sparsity_check_range=10),
        )


def load_config(path: Optional[Union[str, Path]] = None) -> PlannerConfig:
    """
    Load configuration from file or return defaults.

    Supports YAML and JSON files based on extension.

    Args:
        path: Path to configuration file (optional)

    Returns:
        PlannerConfig instance
    """
    if path is None:
        return PlannerConfig()

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    suffix = path.suffix.lower()
    if suffix in ['.yaml', '.yml']:
        return PlannerConfig.from_yaml(path)
    elif suffix == '.json':
        return PlannerConfig.from_json(path)
    else:
        raise ValueError(f"Unsupported configuration format: {suffix}")
