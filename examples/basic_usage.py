#!/usr/bin/env python3
"""
Basic usage example for the posecover sensing-pose planner.

This script demonstrates the core functionality of the posecover package:
1. Building occupancy maps
2. Describing a sensor footprint
3. Running the planner
4. Inspecting and visualizing results
"""

from pathlib import Path

import numpy as np
import matplotlib
matplotlib.use('Agg')

from posecover import (
    Footprint,
    OccupancyGrid,
    PlannerConfig,
    InfeasibleCoverageError,
    plan_sensing_poses,
    plan_from_config,
)
from posecover.grid import create_empty_room, create_floorplan_map, add_obstacles
from posecover.optimization import SensingPoseProblem
from posecover.visualization import (
    plot_sensing_plan,
    plot_sparsity_history,
    create_relaxation_gif,
)


def example_cleaning_robot():
    """Example: Cover an empty room with a square robot footprint."""
    print("=" * 60)
    print("CLEANING ROBOT EXAMPLE")
    print("=" * 60)

    print("\n1. Building the room...")
    occupancy = create_empty_room(60, 80)
    occupancy = add_obstacles(occupancy, [(20, 30, 10, 12)])
    grid = OccupancyGrid(occupancy, resolution=0.05)
    print(f"   Map shape: {grid.shape}, free pixels: {grid.num_free}")

    print("\n2. Running the planner...")
    footprint = Footprint.square(0.6)
    result = plan_sensing_poses(
        grid, footprint,
        cell_size=6,
        delta_theta=np.pi / 2,
        sparsity_check_range=10,
        verbose=True,
    )

    print("\n3. Results:")
    print(f"   Poses: {result.num_poses}")
    print(f"   Coverage: {result.coverage:.1%}")
    for i, (x, y, theta) in enumerate(result.world_poses()):
        print(f"   Pose {i+1}: ({x:.2f} m, {y:.2f} m), heading {np.rad2deg(theta):.0f}°")

    return result


def example_camera_floorplan(output_dir: Path):
    """Example: Camera frustum on a floorplan, with plots and a GIF."""
    print("\n" + "=" * 60)
    print("CAMERA FLOORPLAN EXAMPLE")
    print("=" * 60)

    grid = OccupancyGrid(create_floorplan_map(120, 160, seed=42), resolution=0.05)

    config = PlannerConfig.for_camera()
    config.discretization.cell_size = 10
    config.relaxation.record_trace = True
    config.allow_partial_coverage = True
    config.visibility.n_workers = 4

    result = plan_from_config(grid, config)
    print(f"   Status: {result.status}, poses: {result.num_poses}, coverage: {result.coverage:.1%}")
    if result.uncovered_cells:
        print(f"   {len(result.uncovered_cells)} cells cannot be observed")

    plot_sensing_plan(result, title="Camera Plan", output_path=output_dir / 'camera_plan.png')
    plot_sparsity_history(
        result.sparsity_history,
        num_candidates=result.problem.num_poses,
        output_path=output_dir / 'camera_convergence.png',
    )
    create_relaxation_gif(
        result.problem, result.trace,
        output_dir / 'camera_relaxation.gif',
        sparsity_history=result.sparsity_history,
    )

    return result


def example_unobservable_cells():
    """Example: Detect cells that no candidate pose can observe."""
    print("\n" + "=" * 60)
    print("UNOBSERVABLE CELLS EXAMPLE")
    print("=" * 60)

    grid = OccupancyGrid(create_floorplan_map(80, 100, seed=7), resolution=0.05)
    footprint = Footprint.rectangle(length=1.0, width=0.8, offset=0.2)

    problem = SensingPoseProblem(grid, footprint, cell_size=8, delta_theta=np.pi / 2)
    print(f"   Cells: {problem.num_cells}, candidates: {problem.num_poses}")
    print(f"   Unobservable cells: {len(problem.unobservable_rows)}")

    try:
        plan_sensing_poses(grid, footprint, cell_size=8, delta_theta=np.pi / 2, verbose=False)
    except InfeasibleCoverageError as e:
        print(f"   Planner refused: {e}")


def main():
    """Run all examples."""
    output_dir = Path(__file__).parent / 'outputs'
    output_dir.mkdir(exist_ok=True)

    example_cleaning_robot()
    example_camera_floorplan(output_dir)
    example_unobservable_cells()

    print(f"\nOutputs saved to: {output_dir}/")


if __name__ == '__main__':
    main()
