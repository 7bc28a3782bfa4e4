"""
Static plotting functions for sensing-pose plans.

Maps are drawn in pixel coordinates with the origin at the top left, so
cell and pose positions can be plotted directly.
"""

from typing import List, Optional, Sequence, Tuple, Union
from pathlib import Path
import numpy as np
import matplotlib.pyplot as plt
import matplotlib.patches as mpatches

from posecover.core.discretize import CandidatePose, Cell
from posecover.core.footprint import Footprint
from posecover.core.visibility import footprint_in_pixels
from posecover.grid.occupancy import OccupancyGrid


def draw_pose_markers(
    ax: plt.Axes,
    poses: Sequence[CandidatePose],
    scale: float = 1.0,
    color: str = 'red',
    show_labels: bool = False,
    arrow_length: float = 6.0,
) -> None:
    """
    Draw pose positions with heading arrows on a matplotlib axes.

    Args:
        ax: Matplotlib axes to draw on
        poses: Poses to draw
        scale: Scale factor for arrows
        color: Marker and arrow color
        show_labels: Whether to show pose number labels
        arrow_length: Base length for heading arrows (pixels)
    """
    for i, pose in enumerate(poses):
        ax.plot(
            pose.x, pose.y, 'o',
            color=color,
            markersize=5,
            markeredgecolor='white',
            markeredgewidth=1,
            zorder=10
        )

        # Heading arrow in pixel coordinates
        arrow_len = arrow_length * scale
        dx = arrow_len * np.cos(pose.theta)
        dy = arrow_len * np.sin(pose.theta)

        ax.annotate(
            '', xy=(pose.x + dx, pose.y + dy), xytext=(pose.x, pose.y),
            arrowprops=dict(arrowstyle='->', color=color, lw=1.5),
            zorder=9
        )

        if show_labels:
            ax.annotate(
                f'{i+1}', (pose.x + 2, pose.y + 2),
                fontsize=7, color='white', fontweight='bold',
                zorder=11,
                bbox=dict(boxstyle='round,pad=0.2', facecolor=color, alpha=0.7)
            )


def draw_footprints(
    ax: plt.Axes,
    grid: OccupancyGrid,
    poses: Sequence[CandidatePose],
    footprint: Footprint,
    color: str = 'tab:blue',
    alpha: float = 0.2,
) -> None:
    """Draw the transformed footprint polygon of every pose."""
    for pose in poses:
        polygon = footprint_in_pixels(grid, pose, footprint)
        ax.add_patch(mpatches.Polygon(
            polygon, closed=True,
            facecolor=color, edgecolor=color, alpha=alpha, zorder=5
        ))


def plot_occupancy_map(
    grid: OccupancyGrid,
    ax: Optional[plt.Axes] = None,
    cells: Optional[Sequence[Cell]] = None,
    title: Optional[str] = None,
) -> plt.Axes:
    """
    Plot an occupancy map (free white, occupied black, unknown gray).

    Args:
        grid: Occupancy map
        ax: Matplotlib axes (creates new figure if None)
        cells: Optional cells to mark
        title: Optional title

    Returns:
        Matplotlib axes
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 8))

    ax.imshow(grid.data, cmap='gray', origin='upper', aspect='equal', vmin=0, vmax=255)

    if cells:
        xs = [c.x for c in cells]
        ys = [c.y for c in cells]
        ax.scatter(xs, ys, s=4, c='tab:gray', marker='.', zorder=3)

    if title:
        ax.set_title(title, fontweight='bold')

    ax.set_xlabel('X (px)')
    ax.set_ylabel('Y (px)')
    return ax


def plot_sensing_plan(
    result,
    title: str = "Sensing Plan",
    output_path: Optional[Union[str, Path]] = None,
    figsize: Tuple[int, int] = (14, 6),
    dpi: int = 200,
) -> plt.Figure:
    """
    Visualize a planning result.

    Shows two panels:
    1. Map with cells, selected poses and their footprints
    2. Number of selected poses observing each cell

    Args:
        result: PlanningResult carrying its problem
        title: Figure title
        output_path: Optional path to save figure
        figsize: Figure size
        dpi: Resolution for the saved figure

    Returns:
        Matplotlib figure
    """
    problem = result.problem
    if problem is None:
        raise ValueError("Plotting a plan needs the result's problem")

    grid = problem.grid
    stats = problem.evaluate_selection(result.pose_indices)
    counts = stats["observation_count"]

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=figsize)

    # Panel 1: Map + poses + footprints
    ax1.set_title(
        f'{title}\n{result.num_poses} poses, coverage {100*result.coverage:.1f}%',
        fontsize=11, fontweight='bold'
    )
    plot_occupancy_map(grid, ax=ax1, cells=problem.cells)
    draw_footprints(ax1, grid, result.poses, problem.footprint)
    draw_pose_markers(ax1, result.poses, show_labels=True)

    # Panel 2: Observation count per cell
    ax2.set_title('Cell Observations', fontsize=11, fontweight='bold')
    plot_occupancy_map(grid, ax=ax2)
    xs = np.array([c.x for c in problem.cells])
    ys = np.array([c.y for c in problem.cells])
    covered = counts > 0
    sc = ax2.scatter(
        xs[covered], ys[covered], c=counts[covered], cmap='viridis',
        s=12, vmin=1, vmax=max(int(counts.max()), 1), zorder=4
    )
    if (~covered).any():
        ax2.scatter(xs[~covered], ys[~covered], c='red', marker='x', s=16, zorder=4)
    plt.colorbar(sc, ax=ax2, label='# Poses', shrink=0.7)

    covered_patch = mpatches.Patch(color='tab:green', label='Observed')
    missed_patch = mpatches.Patch(color='red', label='Not observed')
    ax2.legend(handles=[covered_patch, missed_patch], loc='upper right', fontsize=8)

    plt.tight_layout()

    if output_path:
        plt.savefig(output_path, dpi=dpi, bbox_inches='tight')

    return fig


def plot_sparsity_history(
    sparsity_history: List[int],
    num_candidates: Optional[int] = None,
    output_path: Optional[Union[str, Path]] = None,
    title: str = "Relaxation Convergence",
) -> plt.Figure:
    """
    Plot the sparsity measurement of every relaxation iteration.

    Args:
        sparsity_history: Sparsity per iteration
        num_candidates: Optional total candidate count, drawn as a reference line
        output_path: Optional path to save figure
        title: Figure title

    Returns:
        Matplotlib figure
    """
    fig, ax = plt.subplots(figsize=(10, 5))

    iterations = list(range(1, len(sparsity_history) + 1))
    ax.plot(iterations, sparsity_history, 'b-', linewidth=2, marker='.')

    if num_candidates is not None:
        ax.axhline(num_candidates, color='gray', linestyle='--', label='Candidates')
        ax.legend(loc='lower right', fontsize=8)

    ax.set_xlabel('Iteration')
    ax.set_ylabel('Near-zero coefficients')
    ax.set_title(title, fontweight='bold')
    ax.grid(True, alpha=0.3)

    plt.tight_layout()

    if output_path:
        plt.savefig(output_path, dpi=150, bbox_inches='tight')

    return fig
