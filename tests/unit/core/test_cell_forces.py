"""
Unit tests for the per-cell force model.

Tests verify:
- spring, planar and bulge targets on hand-built neighborhoods
- degenerate neighbors are skipped in the bulge estimate
- triweight repulsion kernel shape and collision offset
- double-buffered update/tick semantics
"""

import math

import numpy as np
import pytest

from cellgrowth.core.cell import (
    Cell,
    CellParams,
    connect,
    disconnect,
    triweight,
    triweight_falloff,
    TRIWEIGHT_SCALE,
)


def _arena(center_pos, neighbor_positions, params=None, normal=(0.0, 0.0, 1.0)):
    """Center cell 0 linked to cells 1..n at the given positions."""
    params = params or CellParams(link_rest_length=1.0)
    center = Cell(id=0, position=center_pos, normal=normal, params=params)
    cells = {0: center}
    for i, pos in enumerate(neighbor_positions, start=1):
        cells[i] = Cell(id=i, position=pos, params=params)
        connect(center, cells[i])
    return cells, center


def _ring(radius, n=6, z=0.0):
    return [
        (radius * math.cos(2 * math.pi * k / n), radius * math.sin(2 * math.pi * k / n), z)
        for k in range(n)
    ]


class TestLinks:
    """Tests for link bookkeeping on a cell."""

    def test_connect_is_symmetric(self):
        """connect() should add the link on both sides."""
        a = Cell(id=0, position=(0, 0, 0))
        b = Cell(id=1, position=(1, 0, 0))
        connect(a, b)
        assert a.is_connected(1)
        assert b.is_connected(0)

    def test_connect_ignores_duplicates(self):
        """Linking twice should not create a multi-edge."""
        a = Cell(id=0, position=(0, 0, 0))
        b = Cell(id=1, position=(1, 0, 0))
        connect(a, b)
        connect(a, b)
        assert a.connections == [1]
        assert b.connections == [0]

    def test_self_loop_rejected(self):
        """A cell cannot be linked to itself."""
        a = Cell(id=0, position=(0, 0, 0))
        with pytest.raises(ValueError):
            connect(a, a)
        a.add_link(0)
        assert a.connections == []

    def test_disconnect_removes_both_sides(self):
        """disconnect() should remove the link on both sides."""
        a = Cell(id=0, position=(0, 0, 0))
        b = Cell(id=1, position=(1, 0, 0))
        connect(a, b)
        disconnect(a, b)
        assert a.connections == []
        assert b.connections == []


class TestSpringTarget:
    """Tests for the rest-length spring target."""

    def test_at_rest_spring_target_is_position(self):
        """Neighbors exactly at rest length should leave the cell in place."""
        cells, center = _arena((0, 0, 0), _ring(1.0))
        target = center.compute_spring_target(cells)
        np.testing.assert_allclose(target, [0, 0, 0], atol=1e-12)

    def test_single_stretched_link(self):
        """A neighbor at distance 2 pulls the cell to rest length from it."""
        cells, center = _arena((0, 0, 0), [(2.0, 0, 0)])
        target = center.compute_spring_target(cells)
        np.testing.assert_allclose(target, [1.0, 0, 0], atol=1e-12)

    def test_single_compressed_link(self):
        """A neighbor at distance 0.5 pushes the cell out to rest length."""
        cells, center = _arena((0, 0, 0), [(0.5, 0, 0)])
        target = center.compute_spring_target(cells)
        np.testing.assert_allclose(target, [-0.5, 0, 0], atol=1e-12)

    def test_unlinked_cell_stays(self):
        """A cell without links has its own position as every target."""
        cell = Cell(id=0, position=(1, 2, 3))
        cells = {0: cell}
        np.testing.assert_allclose(cell.compute_spring_target(cells), [1, 2, 3])
        np.testing.assert_allclose(cell.compute_planar_target(cells), [1, 2, 3])
        np.testing.assert_allclose(cell.compute_bulge_target(cells), [1, 2, 3])


class TestPlanarTarget:
    """Tests for the planar smoothing target."""

    def test_planar_target_is_neighbor_centroid(self):
        """The planar target is the unweighted centroid of the neighbors."""
        neighbors = [(1, 0, 0), (0, 2, 0), (-1, 0, 1), (0, -3, 2)]
        cells, center = _arena((5, 5, 5), neighbors)
        target = center.compute_planar_target(cells)
        np.testing.assert_allclose(target, np.mean(neighbors, axis=0))


class TestBulgeTarget:
    """Tests for the curvature-driven bulge target."""

    def test_flat_fan_at_rest_length_has_no_bulge(self):
        """Neighbors in the tangent plane at rest length give zero height."""
        cells, center = _arena((0, 0, 0), _ring(1.0))
        target = center.compute_bulge_target(cells)
        np.testing.assert_allclose(target, [0, 0, 0], atol=1e-6)

    def test_close_neighbors_bulge_along_normal(self):
        """
        Neighbors at radius 0.5 in the tangent plane lie on a unit sphere
        whose cap puts the cell at height sqrt(1 - 0.25).
        """
        cells, center = _arena((0, 0, 0), _ring(0.5))
        target = center.compute_bulge_target(cells)
        np.testing.assert_allclose(target, [0, 0, math.sqrt(0.75)], atol=1e-9)

    def test_degenerate_neighbor_skipped_but_counted(self):
        """
        A neighbor farther than the rest length has no solution (NaN angle);
        it is skipped but the average still divides by all neighbors.
        """
        cells, center = _arena((0, 0, 0), [(0.5, 0, 0), (3.0, 0, 0)])
        target = center.compute_bulge_target(cells)
        assert np.all(np.isfinite(target))
        np.testing.assert_allclose(target, [0, 0, math.sqrt(0.75) / 2.0], atol=1e-9)

    def test_coincident_neighbor_is_skipped(self):
        """A neighbor at the same position contributes nothing and no NaN."""
        cells, center = _arena((0, 0, 0), [(0, 0, 0), (0.5, 0, 0)])
        target = center.compute_bulge_target(cells)
        assert np.all(np.isfinite(target))
        np.testing.assert_allclose(target, [0, 0, math.sqrt(0.75) / 2.0], atol=1e-9)


class TestTriweight:
    """Tests for the triweight repulsion kernel."""

    def test_falloff_is_one_at_zero(self):
        assert triweight_falloff(0.0, 2.0) == pytest.approx(1.0)

    def test_falloff_is_zero_at_and_beyond_roi(self):
        assert triweight_falloff(2.0, 2.0) == 0.0
        assert triweight_falloff(2.5, 2.0) == 0.0
        assert triweight_falloff(100.0, 2.0) == 0.0

    def test_falloff_is_monotone_decreasing(self):
        """Weights should strictly decrease across the region of influence."""
        distances = np.linspace(0.0, 2.0, 50)
        weights = [triweight_falloff(d, 2.0) for d in distances]
        assert all(a > b for a, b in zip(weights[:-1], weights[1:]))

    def test_kernel_scale(self):
        """The unnormalized kernel peaks at 35/32."""
        assert triweight(0.0, 1.0) == pytest.approx(TRIWEIGHT_SCALE)
        assert triweight(0.5, 1.0) == pytest.approx(TRIWEIGHT_SCALE * 0.75 ** 3)


class TestCollisionOffset:
    """Tests for the collision repulsion offset."""

    def test_no_collisions_gives_zero_offset(self):
        cell = Cell(id=0, position=(0, 0, 0))
        offset = cell.compute_collision_offset({0: cell}, [])
        np.testing.assert_allclose(offset, [0, 0, 0])
        assert cell.collision_count == 0

    def test_single_collision_pushes_away(self):
        """Offset points away from the other cell with triweight magnitude."""
        params = CellParams(roi=2.0, repulsion_strength=1.0)
        a = Cell(id=0, position=(0, 0, 0), params=params)
        b = Cell(id=1, position=(0.5, 0, 0), params=params)
        cells = {0: a, 1: b}
        offset = a.compute_collision_offset(cells, [1])
        np.testing.assert_allclose(offset, [-triweight_falloff(0.5, 2.0), 0, 0])
        assert a.collision_count == 1

    def test_offset_is_averaged_and_scaled(self):
        """Offsets from several collisions are averaged, then scaled."""
        params = CellParams(roi=2.0, repulsion_strength=0.5)
        a = Cell(id=0, position=(0, 0, 0), params=params)
        b = Cell(id=1, position=(1.0, 0, 0), params=params)
        c = Cell(id=2, position=(0, 1.0, 0), params=params)
        cells = {0: a, 1: b, 2: c}
        offset = a.compute_collision_offset(cells, [1, 2])
        expected = 0.5 * triweight_falloff(1.0, 2.0) * np.array([-1.0, -1.0, 0.0]) / 2.0
        np.testing.assert_allclose(offset, expected)

    def test_near_zero_separation_has_unit_weight(self):
        """Two almost coincident cells repel with weight 1.0, not 35/32."""
        params = CellParams(roi=2.0, repulsion_strength=1.0)
        a = Cell(id=0, position=(0, 0, 0), params=params)
        b = Cell(id=1, position=(1e-9, 0, 0), params=params)
        offset = a.compute_collision_offset({0: a, 1: b}, [1])
        assert np.linalg.norm(offset) == pytest.approx(1.0)
        np.testing.assert_allclose(offset, [-1.0, 0, 0], atol=1e-6)

    def test_weight_at_roi_is_zero(self):
        params = CellParams(roi=2.0, repulsion_strength=1.0)
        a = Cell(id=0, position=(0, 0, 0), params=params)
        b = Cell(id=1, position=(2.0, 0, 0), params=params)
        offset = a.compute_collision_offset({0: a, 1: b}, [1])
        np.testing.assert_allclose(offset, [0, 0, 0])
        assert a.collision_count == 1

    def test_self_in_collisions_is_ignored(self):
        a = Cell(id=0, position=(0, 0, 0))
        offset = a.compute_collision_offset({0: a}, [0])
        np.testing.assert_allclose(offset, [0, 0, 0])
        assert a.collision_count == 0


class TestUpdateAndTick:
    """Tests for the double-buffered update/commit cycle."""

    def test_update_blends_targets(self):
        """next_position is the weighted sum of the target offsets."""
        params = CellParams(
            link_rest_length=1.0,
            spring_factor=0.2,
            planar_factor=0.3,
            bulge_factor=0.4,
            repulsion_strength=0.0,
            roi=2.0,
        )
        cells, center = _arena((0.1, 0.0, 0.0), _ring(0.8), params=params)
        center.update(cells, collisions=[])

        p = center.position
        expected = (
            p
            + 0.2 * (center.spring_target - p)
            + 0.3 * (center.planar_target - p)
            + 0.4 * (center.bulge_target - p)
        )
        np.testing.assert_allclose(center.next_position, expected)

    def test_update_does_not_move_until_tick(self):
        cells, center = _arena((0.3, 0.0, 0.0), _ring(1.0))
        before = center.position.copy()
        center.update(cells)
        np.testing.assert_allclose(center.position, before)
        center.tick()
        np.testing.assert_allclose(center.position, center.next_position)

    def test_update_increments_age(self):
        cells, center = _arena((0, 0, 0), _ring(1.0))
        center.update(cells)
        center.update(cells)
        assert center.age == 2

    def test_update_normalizes_normal(self):
        cells, center = _arena((0, 0, 0), _ring(1.0), normal=(0, 0, 5.0))
        center.update(cells)
        np.testing.assert_allclose(center.normal, [0, 0, 1.0])

    def test_frozen_cell_does_not_move(self):
        cells, center = _arena((0.3, 0.0, 0.0), _ring(1.0))
        center.frozen = True
        center.update(cells)
        center.tick()
        np.testing.assert_allclose(center.position, [0.3, 0.0, 0.0])

    def test_food_visible_only_after_tick(self):
        cell = Cell(id=0, position=(0, 0, 0))
        cell.add_food(2.5)
        assert cell.food == 0.0
        cell.tick()
        assert cell.food == 2.5
        assert cell.pending_food == 0.0
