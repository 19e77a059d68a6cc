"""
Unit tests for the food distribution strategies.
"""

import math

import numpy as np
import pytest

from cellgrowth.core.cell import Cell, connect
from cellgrowth.core.face import build_faces
from cellgrowth.ops.food import (
    breadth_food,
    constant_food,
    density_food,
    distribute_food,
    face_food,
    farthest_cell,
    planar_food,
    x_axis_density_food,
)
from growth_policies import FoodMode, FoodPolicy


def _hex_fan():
    cells = {0: Cell(id=0, position=(0, 0, 0), normal=(0, 0, 1))}
    for k in range(6):
        angle = 2 * math.pi * k / 6
        cells[k + 1] = Cell(id=k + 1, position=(math.cos(angle), math.sin(angle), 0))
    for k in range(1, 7):
        connect(cells[0], cells[k])
        connect(cells[k], cells[k % 6 + 1])
    return cells


def _line(n, spacing=1.0):
    cells = {i: Cell(id=i, position=(i * spacing, 0, 0)) for i in range(n)}
    for i in range(n - 1):
        connect(cells[i], cells[i + 1])
    return cells


class TestConstantFood:
    """Tests for uniform feeding."""

    def test_every_cell_gets_amount(self):
        cells = _hex_fan()
        amounts = constant_food(cells, 1.5)
        assert amounts == {cid: 1.5 for cid in cells}

    def test_jitter_stays_in_range(self):
        cells = _hex_fan()
        amounts = constant_food(cells, 2.0, jitter=0.5, rng=np.random.default_rng(3))
        for value in amounts.values():
            assert 1.0 <= value <= 2.0

    def test_jitter_is_reproducible(self):
        cells = _hex_fan()
        a = constant_food(cells, 2.0, jitter=0.5, rng=np.random.default_rng(9))
        b = constant_food(cells, 2.0, jitter=0.5, rng=np.random.default_rng(9))
        assert a == b


class TestBreadthFood:
    """Tests for breadth-first feeding."""

    def test_decays_with_graph_distance(self):
        cells = _line(4)
        amounts = breadth_food(cells, [0], amount=1.0, decay=0.5)
        assert amounts[0] == 1.0
        assert amounts[1] == 0.5
        assert amounts[2] == 0.25
        assert amounts[3] == 0.125

    def test_uses_nearest_seed(self):
        cells = _line(5)
        amounts = breadth_food(cells, [0, 4], amount=1.0, decay=0.5)
        assert amounts[0] == amounts[4] == 1.0
        assert amounts[2] == 0.25

    def test_min_amount_cuts_walk(self):
        cells = _line(6)
        amounts = breadth_food(cells, [0], amount=1.0, decay=0.5, min_amount=0.2)
        assert set(amounts) == {0, 1, 2}

    def test_max_depth_cuts_walk(self):
        cells = _line(6)
        amounts = breadth_food(cells, [0], amount=1.0, decay=1.0, max_depth=2)
        assert set(amounts) == {0, 1, 2}

    def test_hex_fan_from_rim(self):
        """From a rim cell, the center and both rim neighbors are one hop away."""
        cells = _hex_fan()
        amounts = breadth_food(cells, [1], amount=1.0, decay=0.5)
        assert amounts[1] == 1.0
        for cid in (0, 2, 6):
            assert amounts[cid] == 0.5
        for cid in (3, 4, 5):
            assert amounts[cid] == 0.25

    def test_farthest_cell(self):
        cells = _line(5)
        # centroid at x=2; ties resolve to the lowest id
        assert farthest_cell(cells) == 0
        cells[4].position = np.array([10.0, 0, 0])
        assert farthest_cell(cells) == 4
        assert farthest_cell({}) is None


class TestDensityFood:
    """Tests for crowding-based feeding."""

    def _crowded(self):
        cells = _line(3)
        cells[0].collision_count = 0
        cells[1].collision_count = 2
        cells[2].collision_count = 4
        return cells

    def test_proportional_to_collisions(self):
        amounts = density_food(self._crowded(), 2.0)
        assert amounts == {0: 0.0, 1: 1.0, 2: 2.0}

    def test_prefer_sparse_inverts(self):
        amounts = density_food(self._crowded(), 2.0, prefer_sparse=True)
        assert amounts == {0: 2.0, 1: 1.0, 2: 0.0}

    def test_no_collisions_no_food(self):
        amounts = density_food(_line(3), 1.0)
        assert all(v == 0.0 for v in amounts.values())

    def test_x_axis_scales_with_projection(self):
        cells = self._crowded()
        for cell in cells.values():
            cell.collision_count = 4
        amounts = x_axis_density_food(cells, 1.0, axis=(1, 0, 0))
        assert amounts[0] == 0.0
        assert amounts[1] == pytest.approx(0.5)
        assert amounts[2] == pytest.approx(1.0)


class TestPlanarFood:
    """Tests for feeding near a plane."""

    def test_falls_off_with_height(self):
        cells = {
            0: Cell(id=0, position=(5, 5, 0)),
            1: Cell(id=1, position=(0, 0, 1)),
            2: Cell(id=2, position=(0, 0, -3)),
        }
        amounts = planar_food(cells, 2.0, axis=(0, 0, 1), band=2.0)
        assert amounts[0] == pytest.approx(2.0)
        assert amounts[1] == pytest.approx(1.0)
        assert amounts[2] == 0.0


class TestFaceFood:
    """Tests for feeding through aligned faces."""

    def test_flat_fan_aligned_with_axis(self):
        """The center touches six faces, each rim cell two."""
        cells = _hex_fan()
        faces = build_faces(cells)
        area = math.sqrt(3) / 4
        amounts = face_food(faces, 1.0, axis=(0, 0, 1), alignment=0.5)
        assert amounts[0] == pytest.approx(6 * area / 3)
        for cid in range(1, 7):
            assert amounts[cid] == pytest.approx(2 * area / 3)

    def test_orthogonal_axis_feeds_nothing(self):
        cells = _hex_fan()
        faces = build_faces(cells)
        assert face_food(faces, 1.0, axis=(1, 0, 0), alignment=0.5) == {}


class TestDistributeFood:
    """Tests for the strategy dispatcher."""

    def test_food_is_queued_not_committed(self):
        cells = _hex_fan()
        distribute_food(cells, FoodPolicy(mode=FoodMode.CONSTANT, amount=1.0))
        for cell in cells.values():
            assert cell.food == 0.0
            assert cell.pending_food == 1.0

    def test_mode_accepts_string(self):
        policy = FoodPolicy(mode="breadth", amount=1.0, decay=0.5)
        cells = _line(3)
        amounts = distribute_food(cells, policy, seed_ids=[2])
        assert amounts == {2: 1.0, 1: 0.5, 0: 0.25}

    def test_breadth_defaults_to_farthest(self):
        cells = _line(3)
        cells[0].position = np.array([-10.0, 0, 0])
        amounts = distribute_food(cells, FoodPolicy(mode=FoodMode.BREADTH, decay=0.5))
        assert amounts[0] == 1.0

    def test_face_mode_requires_faces(self):
        with pytest.raises(ValueError):
            distribute_food(_hex_fan(), FoodPolicy(mode=FoodMode.FACE))

    def test_reaction_diffusion_mode_requires_field(self):
        with pytest.raises(ValueError):
            distribute_food(_hex_fan(), FoodPolicy(mode=FoodMode.REACTION_DIFFUSION))
