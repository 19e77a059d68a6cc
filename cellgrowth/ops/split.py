"""
Cell splitting: inserting a new cell and rewiring the local fan.

The parent's ring is cut along its longest diametric axis. The ring members
strictly between the two anchors (walking in ring order) move to the child;
the anchors stay linked to both halves and parent and child are linked to
each other, so the seam stays closed.

Every topology query happens before the first mutation, so a split that
raises TopologyError leaves the graph exactly as it was.
"""

from typing import List, MutableMapping
import logging

from ..core.cell import Cell, connect, disconnect
from ..core.errors import TopologyError
from .ring import find_next, order_neighbors, select_split_axis

logger = logging.getLogger(__name__)

MIN_SPLIT_RING = 4


def _walk_arc(
    cells: MutableMapping[int, Cell],
    cell: Cell,
    ring: List[int],
    i: int,
    j: int,
) -> List[int]:
    """Ring members strictly between anchors ring[i] and ring[j], in ring direction."""
    anchor1, anchor2 = ring[i], ring[j]
    previous = ring[i - 1]
    current = find_next(cells, cell, anchor1, previous)
    previous = anchor1

    arc = []
    while current != anchor2:
        arc.append(current)
        if len(arc) > len(ring):
            raise TopologyError(
                f"arc from {anchor1} never reached anchor {anchor2}",
                cell_id=cell.id,
                operation="split",
            )
        following = find_next(cells, cell, current, previous)
        previous = current
        current = following
    return arc


def split_cell(cells: MutableMapping[int, Cell], cell: Cell, new_id: int) -> Cell:
    """
    Split ``cell`` in two and insert the child into ``cells``.

    Parameters
    ----------
    cells : MutableMapping[int, Cell]
        Cell arena; the child is added under ``new_id``
    cell : Cell
        Cell to split; its food and age are reset
    new_id : int
        Id for the child

    Returns
    -------
    Cell
        The child, linked to its arc of the ring, both anchors and ``cell``.

    Raises
    ------
    TopologyError
        If the ring cannot be closed, does not cover every neighbor, or has
        fewer than MIN_SPLIT_RING members.
    """
    if new_id in cells:
        raise ValueError(f"Cell id {new_id} already in use")

    ring = order_neighbors(cells, cell)
    if len(ring) != cell.degree:
        raise TopologyError(
            f"ring covers {len(ring)} of {cell.degree} neighbors",
            cell_id=cell.id,
            operation="split",
        )
    if len(ring) < MIN_SPLIT_RING:
        raise TopologyError(
            f"ring of {len(ring)} is too small to split",
            cell_id=cell.id,
            operation="split",
        )

    i, j = select_split_axis(cells, ring)
    anchor1, anchor2 = ring[i], ring[j]
    arc = _walk_arc(cells, cell, ring, i, j)

    cell.reset_food()
    cell.age = 0

    child = Cell(
        id=new_id,
        position=cell.position,
        normal=cell.normal,
        params=cell.params,
        original=False,
        u=cell.u,
        v=cell.v,
    )
    cells[new_id] = child

    for member_id in arc:
        member = cells[member_id]
        connect(child, member)
        disconnect(cell, member)

    connect(child, cell)
    connect(child, cells[anchor1])
    connect(child, cells[anchor2])

    logger.debug(
        f"Split cell {cell.id} -> {new_id}: anchors ({anchor1}, {anchor2}), "
        f"arc of {len(arc)}, ring of {len(ring)}"
    )
    return child


__all__ = [
    "MIN_SPLIT_RING",
    "split_cell",
]
