"""
End-to-end tests for plan_sensing_poses.

These tests run the full pipeline (discretization, visibility matrix,
reweighted relaxation, reduction, final solve) with the HiGHS backend on
small hand-built maps.
"""

import json

import pytest
import numpy as np


@pytest.fixture
def single_cell_grid():
    """5x5 map with one free pixel at (2, 2)."""
    from posecover.grid import OccupancyGrid

    data = np.zeros((5, 5), dtype=np.uint8)
    data[2, 2] = 255
    return OccupancyGrid(data, resolution=0.1)


@pytest.fixture
def enclosed_cell_grid():
    """20x20 room with a walled pocket around pixel (12, 12)."""
    from posecover.grid import OccupancyGrid, create_empty_room

    data = create_empty_room(20, 20)
    data[10, 10:15] = 0
    data[14, 10:15] = 0
    data[10:15, 10] = 0
    data[10:15, 14] = 0
    return OccupancyGrid(data, resolution=0.1)


class TestScenarios:
    """Small maps with known answers."""

    def test_single_cell(self, single_cell_grid):
        """One free cell, one heading: the only pose is selected."""
        from posecover import Footprint, plan_sensing_poses

        result = plan_sensing_poses(
            single_cell_grid, Footprint.square(2.0),
            cell_size=1, delta_theta=2 * np.pi,
            sparsity_check_range=3, verbose=False,
        )

        np.testing.assert_array_equal(result.problem.matrix, [[1]])
        assert result.pose_tuples() == [(2.0, 2.0, 0.0)]
        assert result.pose_indices == [0]
        assert result.coverage == 1.0
        assert result.status == "complete"

    def test_single_cell_reduction_fallback(self, single_cell_grid):
        """The selected pose has relaxed value 1, so the retained set is empty."""
        from posecover import Footprint, plan_sensing_poses

        result = plan_sensing_poses(
            single_cell_grid, Footprint.square(2.0),
            cell_size=1, delta_theta=2 * np.pi,
            sparsity_check_range=3, verbose=False,
        )

        assert result.reduction_fallback
        assert result.iterations == 3
        assert result.sparsity_history == [0, 0, 0]

    def test_separated_cells(self):
        """Two cells on opposite sides of a wall need one pose each."""
        from posecover import Footprint, OccupancyGrid, plan_sensing_poses

        data = np.zeros((5, 9), dtype=np.uint8)
        data[2, 1] = 255
        data[2, 7] = 255
        grid = OccupancyGrid(data, resolution=0.1)

        result = plan_sensing_poses(
            grid, Footprint.square(0.2),
            cell_size=1, delta_theta=2 * np.pi,
            sparsity_check_range=3, verbose=False,
        )

        np.testing.assert_array_equal(result.problem.matrix, [[1, 0], [0, 1]])
        assert result.num_poses == 2
        assert result.pose_tuples() == [(1.0, 2.0, 0.0), (7.0, 2.0, 0.0)]

    def test_no_free_cells(self):
        """A fully occupied map cannot be planned."""
        from posecover import EmptyRegionError, Footprint, OccupancyGrid, plan_sensing_poses

        grid = OccupancyGrid(np.zeros((5, 5), dtype=np.uint8), resolution=0.1)
        with pytest.raises(EmptyRegionError):
            plan_sensing_poses(grid, Footprint.square(1.0), cell_size=1, verbose=False)

    def test_enclosed_cell_raises(self, enclosed_cell_grid):
        """The walled-in cell is named in the error."""
        from posecover import Footprint, InfeasibleCoverageError, plan_sensing_poses

        footprint = Footprint.rectangle(length=1.0, width=1.0, offset=0.1)
        with pytest.raises(InfeasibleCoverageError) as excinfo:
            plan_sensing_poses(
                enclosed_cell_grid, footprint,
                cell_size=5, delta_theta=np.pi / 2, verbose=False,
            )

        assert [(c.x, c.y) for c in excinfo.value.cells] == [(12, 12)]

    def test_enclosed_cell_partial(self, enclosed_cell_grid):
        """Partial coverage plans for every other cell."""
        from posecover import Footprint, plan_sensing_poses

        footprint = Footprint.rectangle(length=1.0, width=1.0, offset=0.1)
        result = plan_sensing_poses(
            enclosed_cell_grid, footprint,
            cell_size=5, delta_theta=np.pi / 2,
            sparsity_check_range=5,
            allow_partial_coverage=True, verbose=False,
        )

        assert result.status == "partial"
        assert not result.is_complete
        assert [(c.x, c.y) for c in result.uncovered_cells] == [(12, 12)]
        assert result.coverage == pytest.approx(15 / 16)

    def test_all_cells_unobservable_partial(self, single_cell_grid):
        """With nothing observable the partial result selects no poses."""
        from posecover import Footprint, plan_sensing_poses
        from posecover.optimization import PlanningStage

        result = plan_sensing_poses(
            single_cell_grid, Footprint.rectangle(0.3, 0.2, offset=0.1),
            cell_size=1, delta_theta=np.pi / 2,
            allow_partial_coverage=True, verbose=False,
        )

        assert result.status == "partial"
        assert result.poses == []
        assert result.coverage == 0.0
        assert result.iterations == 0
        assert result.termination == PlanningStage.DONE
        assert result.to_dict()["termination"] == "done"


class TestCoverage:
    """Coverage completeness on a small room."""

    @pytest.fixture
    def room_result(self):
        from posecover import Footprint, OccupancyGrid, plan_sensing_poses
        from posecover.grid import create_empty_room

        grid = OccupancyGrid(create_empty_room(30, 30), resolution=0.05)
        return plan_sensing_poses(
            grid, Footprint.square(0.5),
            cell_size=5, delta_theta=np.pi / 2,
            sparsity_check_range=5, n_workers=2, verbose=False,
        )

    def test_every_cell_covered(self, room_result):
        """Each row of the visibility matrix has a selected pose."""
        matrix = room_result.problem.matrix
        assert matrix[:, room_result.pose_indices].max(axis=1).min() == 1
        assert room_result.coverage == 1.0
        assert room_result.uncovered_cells == []

    def test_selection_is_small(self, room_result):
        """Far fewer poses than cells are needed."""
        assert 0 < room_result.num_poses < room_result.problem.num_cells
        assert room_result.iterations <= 200

    def test_result_serializes(self, room_result):
        """to_dict output is JSON serializable."""
        data = json.loads(json.dumps(room_result.to_dict()))

        assert data["status"] == "complete"
        assert len(data["poses"]) == room_result.num_poses
        assert len(data["world_poses"]) == room_result.num_poses
        assert data["problem"]["num_cells"] == room_result.problem.num_cells


class TestValidation:
    """Invalid parameters are rejected before planning."""

    @pytest.mark.parametrize("kwargs", [
        {"cell_size": 0},
        {"delta_theta": 0.0},
        {"sparsity_check_range": 0},
        {"max_iterations": 0},
        {"max_iterations": 201},
    ])
    def test_invalid_parameters(self, single_cell_grid, kwargs):
        from posecover import Footprint, plan_sensing_poses

        with pytest.raises(ValueError):
            plan_sensing_poses(single_cell_grid, Footprint.square(2.0), verbose=False, **kwargs)


class TestPlanFromConfig:
    """Tests for plan_from_config."""

    def test_cleaning_robot_preset(self):
        """Preset configuration plans a full cover of an empty room."""
        from posecover import OccupancyGrid, PlannerConfig, plan_from_config
        from posecover.grid import create_empty_room

        grid = OccupancyGrid(create_empty_room(30, 30), resolution=0.05)
        config = PlannerConfig.for_cleaning_robot()
        config.relaxation.record_trace = True

        result = plan_from_config(grid, config, verbose=False)

        assert result.coverage == 1.0
        assert len(result.trace) == result.iterations

    def test_invalid_config_raises(self):
        """Configuration errors surface as ValueError."""
        from posecover import OccupancyGrid, PlannerConfig, plan_from_config
        from posecover.grid import create_empty_room

        grid = OccupancyGrid(create_empty_room(30, 30), resolution=0.05)
        config = PlannerConfig()
        config.discretization.cell_size = -1

        with pytest.raises(ValueError, match="cell_size"):
            plan_from_config(grid, config, verbose=False)
