"""
Smoke tests for posecover.visualization.

Figures are rendered with the Agg backend and written to tmp_path.
"""

import matplotlib
matplotlib.use("Agg")

import pytest
import numpy as np


@pytest.fixture(scope="module")
def room_result():
    """Plan for a small room with the relaxation trace recorded."""
    from posecover import Footprint, OccupancyGrid, plan_sensing_poses
    from posecover.grid import create_empty_room

    grid = OccupancyGrid(create_empty_room(30, 30), resolution=0.05)
    return plan_sensing_poses(
        grid, Footprint.square(0.5),
        cell_size=5, delta_theta=np.pi / 2,
        sparsity_check_range=3, record_trace=True, verbose=False,
    )


class TestPlotting:
    """Tests for static plots."""

    def test_plot_sensing_plan(self, room_result, tmp_path):
        import matplotlib.pyplot as plt
        from posecover.visualization import plot_sensing_plan

        path = tmp_path / "plan.png"
        fig = plot_sensing_plan(room_result, output_path=path, dpi=50)

        assert path.exists()
        assert len(fig.axes) >= 2
        plt.close(fig)

    def test_plot_needs_problem(self, room_result):
        """Results without their problem cannot be plotted."""
        from dataclasses import replace
        from posecover.visualization import plot_sensing_plan

        with pytest.raises(ValueError):
            plot_sensing_plan(replace(room_result, problem=None))

    def test_plot_sparsity_history(self, room_result, tmp_path):
        import matplotlib.pyplot as plt
        from posecover.visualization import plot_sparsity_history

        path = tmp_path / "convergence.png"
        fig = plot_sparsity_history(
            room_result.sparsity_history,
            num_candidates=room_result.problem.num_poses,
            output_path=path,
        )
        assert path.exists()
        plt.close(fig)


class TestAnimation:
    """Tests for relaxation frames and GIFs."""

    def test_create_frame(self, room_result):
        from posecover.visualization import create_frame

        image = create_frame(room_result.problem, room_result.trace[0], iteration=1, sparsity=0)

        assert image.ndim == 3
        assert image.shape[2] == 3
        assert image.dtype == np.uint8

    def test_create_relaxation_gif(self, room_result, tmp_path):
        from posecover.visualization import create_relaxation_gif

        path = tmp_path / "relaxation.gif"
        create_relaxation_gif(
            room_result.problem, room_result.trace, path,
            sparsity_history=room_result.sparsity_history,
            max_frames=3, pause_at_end=0,
        )
        assert path.exists()

    def test_empty_trace_writes_nothing(self, room_result, tmp_path):
        from posecover.visualization import create_relaxation_gif

        path = tmp_path / "empty.gif"
        create_relaxation_gif(room_result.problem, [], path)
        assert not path.exists()
