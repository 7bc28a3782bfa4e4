#!/usr/bin/env python3
"""
Sensing-pose planning from the command line.

Loads a planner configuration and an occupancy map (image, ROS-style YAML
descriptor, or a synthetic map), selects the sensing poses and prints a
summary. Plots, a relaxation GIF and a JSON result can be written to the
output directory.

Examples:
  python plan.py --synthetic floorplan --preset camera --plot
  python plan.py --map maps/office.yaml --config planner.yaml --save-json
"""

import json
import logging
import sys
from pathlib import Path

import numpy as np

from posecover import PlannerConfig, PlannerError, load_config, plan_from_config
from posecover.grid import (
    OccupancyGrid,
    create_empty_room,
    create_floorplan_map,
    load_map_yaml,
    load_occupancy_map,
)


def load_grid(args, config: PlannerConfig) -> OccupancyGrid:
    """Occupancy grid from the command line or the configuration."""
    if args.synthetic == 'room':
        return OccupancyGrid(create_empty_room(80, 80), resolution=config.map_resolution)
    if args.synthetic == 'floorplan':
        return OccupancyGrid(
            create_floorplan_map(120, 160, seed=args.seed),
            resolution=config.map_resolution,
        )

    map_path = args.map or config.map_path
    if map_path is None:
        raise ValueError("No map given: use --map, --synthetic or map_path in the config")

    if Path(map_path).suffix.lower() in ['.yaml', '.yml']:
        return load_map_yaml(map_path)
    return load_occupancy_map(
        map_path,
        resolution=config.map_resolution,
        origin=config.map_origin,
    )


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description='Set-cover sensing pose planning')
    parser.add_argument('--config', type=str, default=None,
                        help='Planner configuration file (.yaml, .yml or .json)')
    parser.add_argument('--preset', choices=['camera', 'cleaning'], default=None,
                        help='Use a preset configuration instead of --config')
    parser.add_argument('--map', type=str, default=None,
                        help='Map image or YAML descriptor (overrides map_path)')
    parser.add_argument('--synthetic', choices=['room', 'floorplan'], default=None,
                        help='Plan on a synthetic map instead of a file')
    parser.add_argument('--cell-size', type=int, default=None,
                        help='Cell lattice spacing in pixels')
    parser.add_argument('--heading-step', type=float, default=None,
                        help='Heading step in degrees')
    parser.add_argument('--check-range', type=int, default=None,
                        help='Sparsity plateau length that stops the relaxation')
    parser.add_argument('--workers', type=int, default=None,
                        help='Threads for the visibility matrix build')
    parser.add_argument('--allow-partial', action='store_true',
                        help='Plan around unobservable cells instead of failing')
    parser.add_argument('--seed', type=int, default=42,
                        help='Random seed for synthetic maps')
    parser.add_argument('--output-dir', type=str, default=None,
                        help='Output directory (default: from config)')
    parser.add_argument('--plot', action='store_true',
                        help='Save plan and convergence plots')
    parser.add_argument('--gif', action='store_true',
                        help='Save a GIF of the relaxation')
    parser.add_argument('--save-json', action='store_true',
                        help='Save the result as JSON')
    parser.add_argument('--log-level', default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level')
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    if args.preset == 'camera':
        config = PlannerConfig.for_camera()
    elif args.preset == 'cleaning':
        config = PlannerConfig.for_cleaning_robot()
    else:
        config = load_config(args.config)

    if args.cell_size is not None:
        config.discretization.cell_size = args.cell_size
    if args.heading_step is not None:
        config.discretization.delta_theta = float(np.deg2rad(args.heading_step))
    if args.check_range is not None:
        config.relaxation.sparsity_check_range = args.check_range
    if args.workers is not None:
        config.visibility.n_workers = args.workers
    if args.allow_partial:
        config.allow_partial_coverage = True
    if args.gif:
        config.relaxation.record_trace = True

    grid = load_grid(args, config)

    try:
        result = plan_from_config(grid, config, verbose=True)
    except PlannerError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print("\n" + "=" * 70)
    print("PLANNING RESULT")
    print("=" * 70)
    print(f"  Status: {result.status}")
    print(f"  Poses: {result.num_poses}")
    print(f"  Coverage: {result.coverage:.2%}")
    print(f"  Iterations: {result.iterations} ({result.termination.value})")
    if result.reduction_fallback:
        print("  Final solve ran on the full problem")
    for i, (x, y, theta) in enumerate(result.pose_tuples()):
        print(f"    Pose {i+1}: x={x:.0f}, y={y:.0f}, heading={np.rad2deg(theta):.0f}°")

    if not (args.plot or args.gif or args.save_json):
        return

    output_dir = Path(args.output_dir or config.visualization.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    if args.save_json:
        with open(output_dir / 'plan.json', 'w') as f:
            json.dump(result.to_dict(), f, indent=2)
        print(f"\nResult saved to: {output_dir / 'plan.json'}")

    if args.plot:
        import matplotlib
        matplotlib.use('Agg')
        from posecover.visualization import plot_sensing_plan, plot_sparsity_history

        plot_sensing_plan(
            result,
            output_path=output_dir / 'plan.png',
            figsize=config.visualization.figsize,
            dpi=config.visualization.dpi,
        )
        plot_sparsity_history(
            result.sparsity_history,
            num_candidates=result.problem.num_poses,
            output_path=output_dir / 'convergence.png',
        )
        print(f"Plots saved to: {output_dir}/")

    if args.gif:
        import matplotlib
        matplotlib.use('Agg')
        from posecover.visualization import create_relaxation_gif

        create_relaxation_gif(
            result.problem,
            result.trace,
            output_dir / 'relaxation.gif',
            sparsity_history=result.sparsity_history,
            fps=config.visualization.gif_fps,
            max_frames=config.visualization.gif_max_frames,
        )


if __name__ == '__main__':
    main()
