"""
KD-tree proximity index over committed cell positions.
"""

from typing import Iterable, List, Mapping, Optional
import numpy as np
from scipy.spatial import cKDTree

from ..core.cell import Cell


class KDTreeIndex:
    """
    Snapshot of cell positions in a scipy cKDTree.

    Like PointGridIndex, ``rebuild()`` must be called after positions are
    committed; queries see the positions as of the last rebuild.
    """

    def __init__(self):
        self._ids: List[int] = []
        self._points = np.zeros((0, 3))
        self._tree: Optional[cKDTree] = None

    def rebuild(self, cells: Mapping[int, Cell], cell_size: Optional[float] = None) -> None:
        """
        Re-index every cell from its committed position.

        ``cell_size`` is accepted for interface parity with PointGridIndex
        and ignored.
        """
        self._ids = sorted(cells)
        if not self._ids:
            self._points = np.zeros((0, 3))
            self._tree = None
            return
        self._points = np.array([cells[cid].position for cid in self._ids], dtype=np.float64)
        self._tree = cKDTree(self._points)

    def query(
        self,
        position: np.ndarray,
        radius: float,
        exclude: Optional[Iterable[int]] = None,
    ) -> List[int]:
        """Ids of indexed points strictly closer than ``radius``, ascending."""
        if self._tree is None or radius <= 0:
            return []
        position = np.asarray(position, dtype=np.float64)
        excluded = set(exclude) if exclude is not None else set()

        # query_ball_point is inclusive at the radius
        found = []
        for i in self._tree.query_ball_point(position, radius):
            cid = self._ids[i]
            if cid in excluded:
                continue
            delta = self._points[i] - position
            if float(delta @ delta) < radius * radius:
                found.append(cid)
        found.sort()
        return found

    @property
    def point_count(self) -> int:
        return len(self._ids)


__all__ = ["KDTreeIndex"]
