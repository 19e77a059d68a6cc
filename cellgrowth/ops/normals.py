"""
Surface normal estimation from the ordered neighbor ring.

The default frame loop takes each cell's normal as given and only
re-normalizes it. When ``SimulationPolicy.recompute_normals`` is set, normals
are re-derived every frame from the fan of triangles around the cell.
"""

from typing import Mapping, Optional
import numpy as np

from ..core.cell import Cell
from ..core.errors import TopologyError
from .ring import order_neighbors


def estimate_normal(
    cells: Mapping[int, Cell],
    cell: Cell,
    reference: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Average of the unit normals of the fan triangles around ``cell``.

    The result is oriented to agree with the cell's current normal; when the
    cell has no usable normal yet, it points away from ``reference``
    (default: the origin). Cells whose ring cannot be recovered keep their
    current normal.
    """
    try:
        ring = order_neighbors(cells, cell)
    except TopologyError:
        return cell.normal.copy()

    total = np.zeros(3)
    previous = cells[ring[-1]].position - cell.position
    for member in ring:
        current = cells[member].position - cell.position
        cross = np.cross(current, previous)
        length = float(np.linalg.norm(cross))
        if length > 0.0:
            total += cross / length
        previous = current

    length = float(np.linalg.norm(total))
    if length == 0.0:
        return cell.normal.copy()
    estimate = total / length

    if float(np.linalg.norm(cell.normal)) > 0.0:
        if float(np.dot(cell.normal, estimate)) < 0.0:
            estimate = -estimate
    else:
        outward = cell.position - (np.zeros(3) if reference is None else reference)
        if float(np.dot(outward, estimate)) < 0.0:
            estimate = -estimate
    return estimate


__all__ = ["estimate_normal"]
