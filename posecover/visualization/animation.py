"""
Animation and GIF generation for the reweighted relaxation.

Each frame shows the relaxed coefficients of one iteration, summed over
the headings of every cell, on top of the occupancy map.
"""

from typing import List, Optional, Tuple, Union
from pathlib import Path
import numpy as np
import matplotlib.pyplot as plt

from posecover.optimization.problem import SensingPoseProblem
from posecover.visualization.plotting import plot_occupancy_map


def _cell_weights(problem: SensingPoseProblem, values: np.ndarray) -> np.ndarray:
    """Sum of relaxed coefficients over the poses standing on each cell."""
    cell_index = np.array([p.cell_index for p in problem.poses], dtype=np.intp)
    return np.bincount(cell_index, weights=values, minlength=problem.num_cells)


def create_frame(
    problem: SensingPoseProblem,
    values: np.ndarray,
    title: str = "Relaxation",
    iteration: Optional[int] = None,
    sparsity: Optional[int] = None,
    figsize: Tuple[int, int] = (6, 6),
) -> np.ndarray:
    """
    Create a single frame for a relaxation GIF.

    Args:
        problem: Planning problem the values belong to
        values: Relaxed coefficients, one per candidate pose
        title: Frame title
        iteration: Optional iteration number to display
        sparsity: Optional sparsity value to display
        figsize: Figure size

    Returns:
        RGB image as numpy array (H, W, 3)
    """
    weights = _cell_weights(problem, np.asarray(values, dtype=np.float64))

    fig, ax = plt.subplots(figsize=figsize)

    frame_title = title
    if iteration is not None:
        frame_title += f'\nIteration {iteration}'
    if sparsity is not None:
        frame_title += f' - sparsity {sparsity}/{problem.num_poses}'
    ax.set_title(frame_title, fontsize=10, fontweight='bold')

    plot_occupancy_map(problem.grid, ax=ax)
    xs = np.array([c.x for c in problem.cells])
    ys = np.array([c.y for c in problem.cells])
    active = weights > 0
    ax.scatter(xs[~active], ys[~active], s=4, c='tab:gray', marker='.', zorder=3)
    ax.scatter(
        xs[active], ys[active], c=weights[active], cmap='plasma',
        s=20, vmin=0, vmax=max(float(weights.max()), 1.0), zorder=4
    )

    plt.tight_layout()

    fig.canvas.draw()
    buf = fig.canvas.buffer_rgba()
    image = np.asarray(buf)[:, :, :3].copy()

    plt.close(fig)

    return image


def create_relaxation_gif(
    problem: SensingPoseProblem,
    trace: List[np.ndarray],
    output_path: Union[str, Path],
    sparsity_history: Optional[List[int]] = None,
    title: str = "Reweighted Relaxation",
    fps: int = 5,
    max_frames: int = 50,
    pause_at_end: int = 2,
) -> None:
    """
    Create a GIF showing the relaxed solutions over the iterations.

    Args:
        problem: Planning problem
        trace: Relaxed solution per iteration (PlanningResult.trace)
        output_path: Path to save the GIF
        sparsity_history: Optional sparsity per iteration for the titles
        title: GIF title
        fps: Frames per second
        max_frames: Maximum number of frames to include
        pause_at_end: Seconds to pause on final frame
    """
    import imageio.v2 as imageio

    if len(trace) == 0:
        print("No trace data available for GIF generation")
        return

    n_frames = len(trace)

    # Select frames to include (evenly spaced)
    if n_frames > max_frames:
        indices = np.linspace(0, n_frames - 1, max_frames, dtype=int)
    else:
        indices = list(range(n_frames))

    print(f"Generating relaxation GIF with {len(indices)} frames...")

    frames = []
    for idx in indices:
        sparsity = sparsity_history[idx] if sparsity_history is not None else None
        frames.append(create_frame(
            problem, trace[idx],
            title=title,
            iteration=int(idx) + 1,
            sparsity=sparsity,
        ))

    for _ in range(fps * pause_at_end):
        frames.append(frames[-1])

    # Pillow plugin takes the frame duration in milliseconds
    imageio.mimsave(str(output_path), frames, duration=1000 / fps, loop=0)
    print(f"GIF saved to: {output_path}")
