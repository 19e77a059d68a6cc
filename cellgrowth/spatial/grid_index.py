"""
Uniform grid-based spatial index for fast cell proximity queries.
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple
import numpy as np

from ..core.cell import Cell


class PointGridIndex:
    """
    Uniform 3D hash grid over cell positions.

    The index is a snapshot: ``rebuild()`` must be called after positions are
    committed and before queries are made for the next frame.

    If cell_size is None it is taken from the query radius used most often
    by the frame loop (the region of influence), so each query touches at
    most 27 buckets.
    """

    def __init__(self, cell_size: Optional[float] = None):
        """
        Initialize spatial index.

        Parameters
        ----------
        cell_size : float, optional
            Edge length of grid buckets. If None, set from the first
            ``rebuild()`` call's ``cell_size`` argument, falling back to 1.0.
        """
        self.cell_size = cell_size
        self.grid: Dict[Tuple[int, int, int], Set[int]] = defaultdict(set)
        self._positions: Dict[int, np.ndarray] = {}

    def clear(self) -> None:
        """Drop every indexed point."""
        self.grid.clear()
        self._positions.clear()

    def _get_cell_coords(self, point: np.ndarray) -> Tuple[int, int, int]:
        """Convert world coordinates to grid cell coordinates."""
        inv = 1.0 / self.cell_size
        return (
            int(np.floor(point[0] * inv)),
            int(np.floor(point[1] * inv)),
            int(np.floor(point[2] * inv)),
        )

    def insert(self, point_id: int, position: np.ndarray) -> None:
        """Index one point."""
        if self.cell_size is None:
            self.cell_size = 1.0
        position = np.asarray(position, dtype=np.float64)
        self._positions[point_id] = position
        self.grid[self._get_cell_coords(position)].add(point_id)

    def rebuild(self, cells: Mapping[int, Cell], cell_size: Optional[float] = None) -> None:
        """
        Re-index every cell from its committed position.

        Parameters
        ----------
        cells : Mapping[int, Cell]
            Cell arena
        cell_size : float, optional
            Replace the bucket size before indexing
        """
        if cell_size is not None and cell_size > 0:
            self.cell_size = cell_size
        elif self.cell_size is None:
            self.cell_size = 1.0
        self.clear()
        for cid, cell in cells.items():
            self.insert(cid, cell.position)

    def query(
        self,
        position: np.ndarray,
        radius: float,
        exclude: Optional[Iterable[int]] = None,
    ) -> List[int]:
        """
        Ids of indexed points strictly closer than ``radius`` to ``position``.

        Parameters
        ----------
        position : np.ndarray
            Query point
        radius : float
            Search radius
        exclude : iterable of int, optional
            Ids to leave out of the result (typically the querying cell)

        Returns
        -------
        List[int]
            Matching ids in ascending order
        """
        if not self._positions or radius <= 0:
            return []
        position = np.asarray(position, dtype=np.float64)
        excluded = set(exclude) if exclude is not None else set()

        cell_radius = int(np.ceil(radius / self.cell_size))
        center = self._get_cell_coords(position)
        r2 = radius * radius

        found = []
        for di in range(-cell_radius, cell_radius + 1):
            for dj in range(-cell_radius, cell_radius + 1):
                for dk in range(-cell_radius, cell_radius + 1):
                    bucket = self.grid.get((center[0] + di, center[1] + dj, center[2] + dk))
                    if not bucket:
                        continue
                    for pid in bucket:
                        if pid in excluded:
                            continue
                        delta = self._positions[pid] - position
                        if float(delta @ delta) < r2:
                            found.append(pid)
        found.sort()
        return found

    @property
    def point_count(self) -> int:
        """Return the number of indexed points."""
        return len(self._positions)


__all__ = ["PointGridIndex"]
