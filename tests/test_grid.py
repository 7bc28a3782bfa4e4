"""
Tests for posecover.grid module.

These tests verify occupancy grids, map loading, synthetic maps and
coordinate handling.
"""

import pytest
import numpy as np


class TestOccupancyGrid:
    """Tests for OccupancyGrid class."""

    def test_masks(self):
        """Free, occupied and unknown pixels are told apart."""
        from posecover.grid import OccupancyGrid

        data = np.array([[255, 0, 128]], dtype=np.uint8)
        grid = OccupancyGrid(data, resolution=0.1)

        assert grid.shape == (1, 3)
        assert grid.num_free == 1
        assert grid.is_free(0, 0)
        assert grid.is_occupied(1, 0)
        assert not grid.is_free(2, 0) and not grid.is_occupied(2, 0)
        assert not grid.is_free(5, 0)

    def test_bool_input(self):
        """Boolean masks are converted to 255/0."""
        from posecover.grid import OccupancyGrid

        grid = OccupancyGrid.from_free_mask(np.array([[True, False]]))
        np.testing.assert_array_equal(grid.data, [[255, 0]])

    def test_validation(self):
        """Test rejected shapes and resolutions."""
        from posecover.grid import OccupancyGrid

        with pytest.raises(ValueError):
            OccupancyGrid(np.zeros((2, 2, 2), dtype=np.uint8))
        with pytest.raises(ValueError):
            OccupancyGrid(np.zeros((2, 2), dtype=np.uint8), resolution=0.0)

    def test_to_dict(self):
        """Test metadata serialization."""
        from posecover.grid import OccupancyGrid

        grid = OccupancyGrid(np.full((4, 6), 255, dtype=np.uint8), resolution=0.05, origin=(1, 2))
        data = grid.to_dict()
        assert data["shape"] == [4, 6]
        assert data["origin"] == [1.0, 2.0]
        assert data["num_free"] == 24


class TestLoader:
    """Tests for map loading and saving."""

    def test_binarize_image(self):
        """Gray values map to free, occupied or unknown."""
        from posecover.grid.loader import binarize_image

        image = np.array([[255, 252, 128, 40, 0]], dtype=np.uint8)
        np.testing.assert_array_equal(binarize_image(image), [[255, 255, 128, 0, 0]])
        np.testing.assert_array_equal(binarize_image(image, negate=True), [[0, 0, 128, 128, 255]])

    def test_binarize_rgb(self):
        """Color images are averaged over their channels."""
        from posecover.grid.loader import binarize_image

        image = np.zeros((2, 2, 4), dtype=np.uint8)
        image[0, 0, :3] = 255
        result = binarize_image(image)
        assert result[0, 0] == 255
        assert result[1, 1] == 0

    def test_image_roundtrip(self, tmp_path):
        """Saved maps load back unchanged."""
        from posecover.grid import OccupancyGrid, create_empty_room, load_occupancy_map, save_occupancy_map

        grid = OccupancyGrid(create_empty_room(20, 30), resolution=0.05)
        path = tmp_path / "room.png"
        save_occupancy_map(grid, path)

        loaded = load_occupancy_map(path, resolution=0.05)
        np.testing.assert_array_equal(loaded.data, grid.data)
        assert loaded.source_file == str(path)

    def test_yaml_descriptor(self, tmp_path):
        """Descriptor provides resolution and origin."""
        from posecover.grid import OccupancyGrid, create_empty_room, load_map_yaml, save_occupancy_map

        grid = OccupancyGrid(create_empty_room(20, 30), resolution=0.1, origin=(-1.0, -2.0))
        yaml_path = save_occupancy_map(grid, tmp_path / "room.png", descriptor=True)

        loaded = load_map_yaml(yaml_path)
        assert loaded.resolution == pytest.approx(0.1)
        assert loaded.origin == (-1.0, -2.0)
        np.testing.assert_array_equal(loaded.data, grid.data)

    def test_yaml_origin_is_lower_left(self, tmp_path):
        """Descriptor origin is the bottom-left image pixel and world y points up."""
        import imageio.v2 as imageio
        from posecover.grid import load_map_yaml, pixel_to_world

        image = np.zeros((6, 4), dtype=np.uint8)
        image[5, 0] = 255  # bottom-left
        image[0, 3] = 255  # top-right
        imageio.imwrite(tmp_path / "map.png", image)
        (tmp_path / "map.yaml").write_text(
            "image: map.png\nresolution: 0.5\norigin: [-1.0, -2.0, 0.0]\nnegate: 0\n"
        )

        grid = load_map_yaml(tmp_path / "map.yaml")

        assert grid.is_free(0, 0)
        assert grid.is_free(3, 5)
        assert pixel_to_world(0, 0, grid) == (-1.0, -2.0)
        assert pixel_to_world(3, 5, grid) == (0.5, 0.5)

    def test_missing_files_raise(self, tmp_path):
        """Test FileNotFoundError for missing maps."""
        from posecover.grid import load_map_yaml, load_occupancy_map

        with pytest.raises(FileNotFoundError):
            load_occupancy_map(tmp_path / "missing.png")
        with pytest.raises(FileNotFoundError):
            load_map_yaml(tmp_path / "missing.yaml")

    def test_load_from_array(self):
        """Arbitrary gray images can be thresholded on load."""
        from posecover.grid import load_map_from_array

        grid = load_map_from_array(np.array([[255, 100, 10]], dtype=np.uint8), binarize=True)
        np.testing.assert_array_equal(grid.data, [[255, 128, 0]])


class TestSynthetic:
    """Tests for synthetic map generation."""

    def test_empty_room(self):
        """Walls surround a free interior."""
        from posecover.grid import create_empty_room

        room = create_empty_room(10, 12, wall_thickness=2)
        assert room.shape == (10, 12)
        assert room.dtype == np.uint8
        assert (room[:2, :] == 0).all()
        assert (room[:, -2:] == 0).all()
        assert (room[2:8, 2:10] == 255).all()

    def test_wall_lines_and_obstacles(self):
        """Test rasterized walls and boxes without modifying the input."""
        from posecover.grid import add_obstacles, add_wall_lines, create_empty_room

        room = create_empty_room(20, 20)
        walled = add_wall_lines(room, [((2, 10), (17, 10))])
        boxed = add_obstacles(room, [(5, 5, 3, 4)])

        assert (walled[2:18, 10] == 0).all()
        assert (boxed[5:8, 5:9] == 0).all()
        assert room[10, 10] == 255

    def test_floorplan_reproducible(self):
        """Same seed gives the same map."""
        from posecover.grid import create_floorplan_map

        a = create_floorplan_map(60, 80, seed=3)
        b = create_floorplan_map(60, 80, seed=3)
        np.testing.assert_array_equal(a, b)
        assert (a == 255).any() and (a == 0).any()


class TestCoordinates:
    """Tests for coordinate transformations."""

    def test_pixel_to_world(self):
        """Test pixel to world conversion."""
        from posecover.grid import OccupancyGrid, pixel_to_world

        grid = OccupancyGrid(np.zeros((10, 10), np.uint8), resolution=0.1, origin=(1.0, 2.0))
        wx, wy = pixel_to_world(5, 5, grid)
        assert wx == pytest.approx(1.5)
        assert wy == pytest.approx(2.5)

    def test_world_to_pixel_clamped(self):
        """Rounded pixel coordinates are clamped to the map extent."""
        from posecover.grid import OccupancyGrid, world_to_pixel

        grid = OccupancyGrid(np.zeros((10, 20), np.uint8), resolution=0.1)
        x, y = world_to_pixel(np.array([-0.5, 0.26, 5.0]), np.array([0.0, 0.44, 5.0]), grid,
                              clamp=True, round_to_int=True)
        np.testing.assert_array_equal(x, [0, 3, 20])
        np.testing.assert_array_equal(y, [0, 4, 10])

    def test_poses_to_world(self):
        """Test conversion of poses to world triples."""
        from posecover.core.discretize import CandidatePose
        from posecover.grid import OccupancyGrid, poses_to_world

        grid = OccupancyGrid(np.zeros((10, 10), np.uint8), resolution=0.5, origin=(-1.0, 0.0))
        poses = [CandidatePose(index=0, x=2, y=4, theta=1.0, cell_index=0)]
        assert poses_to_world(poses, grid) == [(0.0, 2.0, 1.0)]
