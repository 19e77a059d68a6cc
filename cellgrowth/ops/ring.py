"""
Neighbor ordering: recovering a cell's cyclic ring from its unordered links.

Locally the mesh is assumed to be a fan of triangles around every cell, so
two consecutive ring members always share exactly one further neighbor with
the center. Walking that relation from any starting neighbor visits the ring
in order and returns to the start. Cells that break the fan assumption
(boundaries, pinched or inconsistent topology) raise TopologyError.
"""

from typing import List, Mapping, Optional, Tuple

from ..core.cell import Cell
from ..core.errors import TopologyError

MAX_RING_SIZE = 10000


def find_next(
    cells: Mapping[int, Cell],
    center: Cell,
    current: int,
    previous: int,
) -> int:
    """
    Find the neighbor of ``current`` that is also a neighbor of ``center``,
    excluding ``center`` itself and ``previous``.

    Candidates are checked in ``current``'s connection order; the first match
    wins.

    Raises
    ------
    TopologyError
        If no candidate qualifies.
    """
    for candidate in cells[current].connections:
        if candidate == center.id or candidate == previous:
            continue
        if center.is_connected(candidate):
            return candidate
    raise TopologyError(
        f"no common neighbor after {current} (previous {previous})",
        cell_id=center.id,
        operation="find_next",
    )


def order_neighbors(
    cells: Mapping[int, Cell],
    center: Cell,
    start: Optional[int] = None,
) -> List[int]:
    """
    Return the ids of ``center``'s neighbors in cyclic order.

    Parameters
    ----------
    cells : Mapping[int, Cell]
        Cell arena
    center : Cell
        Cell whose ring is recovered
    start : int, optional
        Ring member to start from (default: the first connection)

    Returns
    -------
    List[int]
        Each ring member exactly once, starting at ``start``.

    Raises
    ------
    TopologyError
        If the walk cannot continue, revisits a member before closing, or
        grows past MAX_RING_SIZE.
    """
    if not center.connections:
        raise TopologyError("cell has no connections", cell_id=center.id, operation="order_neighbors")
    if start is None:
        start = center.connections[0]
    elif not center.is_connected(start):
        raise TopologyError(
            f"start {start} is not a neighbor", cell_id=center.id, operation="order_neighbors"
        )

    ring = [start]
    seen = {start}
    previous = center.id
    while True:
        current = find_next(cells, center, ring[-1], previous)
        if current == start:
            break
        if current in seen:
            raise TopologyError(
                f"walk re-entered the ring at {current} without closing",
                cell_id=center.id,
                operation="order_neighbors",
            )
        previous = ring[-1]
        ring.append(current)
        seen.add(current)
        if len(ring) > MAX_RING_SIZE:
            raise TopologyError(
                f"ring exceeded {MAX_RING_SIZE} members",
                cell_id=center.id,
                operation="order_neighbors",
            )
    return ring


def select_split_axis(cells: Mapping[int, Cell], ring: List[int]) -> Tuple[int, int]:
    """
    Choose the two ring indices that serve as split anchors.

    Scans pairs (i, i + n/2) over the first half of the ring and returns the
    pair with the largest squared distance; the first maximum wins.
    """
    n = len(ring)
    if n < 2:
        raise TopologyError(f"ring of {n} has no split axis", operation="select_split_axis")

    half = n // 2
    best = (0, half % n)
    best_dist = -1.0
    for i in range(max(half, 1)):
        j = (i + half) % n
        delta = cells[ring[i]].position - cells[ring[j]].position
        dist = float(delta @ delta)
        if dist > best_dist:
            best_dist = dist
            best = (i, j)
    return best


def is_closable(cells: Mapping[int, Cell], center: Cell) -> bool:
    """Whether ``center``'s neighbors form a ring that covers all of them."""
    try:
        ring = order_neighbors(cells, center)
    except TopologyError:
        return False
    return len(ring) == len(center.connections)


__all__ = [
    "MAX_RING_SIZE",
    "find_next",
    "order_neighbors",
    "select_split_axis",
    "is_closable",
]
