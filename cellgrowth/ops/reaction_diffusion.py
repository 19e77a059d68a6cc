"""
Gray-Scott reaction-diffusion over the cell connection graph.

Each cell carries two concentrations, ``u`` (substrate) and ``v``
(activator). The graph stands in for the discretized domain: the Laplacian
at a cell is the mean of its neighbors minus its own value, which keeps the
explicit update stable for ``ra * dt <= 1`` regardless of cell degree.

Concentrations live on the cells, so a split child simply inherits its
parent's values.
"""

from typing import List, Mapping, Optional, Tuple
import logging
import numpy as np
from scipy import sparse

from growth_policies import ReactionDiffusionPolicy

from ..core.cell import Cell

logger = logging.getLogger(__name__)


def adjacency_matrix(cells: Mapping[int, Cell]) -> Tuple[List[int], sparse.csr_matrix]:
    """
    Sparse symmetric adjacency of the connection graph.

    Returns
    -------
    ids : List[int]
        Cell id of each row, ascending
    adjacency : scipy.sparse.csr_matrix
        (N, N) matrix with 1.0 where two cells are linked
    """
    ids = sorted(cells)
    index = {cid: i for i, cid in enumerate(ids)}
    rows, cols = [], []
    for cid in ids:
        i = index[cid]
        for other in cells[cid].connections:
            rows.append(i)
            cols.append(index[other])
    data = np.ones(len(rows))
    adjacency = sparse.csr_matrix(
        (data, (np.array(rows, dtype=int), np.array(cols, dtype=int))),
        shape=(len(ids), len(ids)),
    )
    return ids, adjacency


def graph_laplacian(adjacency: sparse.csr_matrix, values: np.ndarray) -> np.ndarray:
    """Mean of each row's neighbors minus the row's own value (0 for isolated rows)."""
    degree = np.asarray(adjacency.sum(axis=1)).ravel()
    neighbor_sum = adjacency @ values
    mean = np.divide(neighbor_sum, degree, out=values.copy(), where=degree > 0)
    return mean - values


class ReactionDiffusion:
    """
    Two-species Gray-Scott system advanced once per frame.

    Parameters
    ----------
    policy : ReactionDiffusionPolicy, optional
        Feed/kill rates, diffusion rates, time step and seeding fraction
    """

    def __init__(self, policy: Optional[ReactionDiffusionPolicy] = None):
        self.policy = policy or ReactionDiffusionPolicy()
        self.steps = 0

    def set_values(self, feed: float, kill: float, ra: float, rb: float) -> None:
        self.policy.feed = feed
        self.policy.kill = kill
        self.policy.ra = ra
        self.policy.rb = rb

    def seed(self, cells: Mapping[int, Cell], rng: Optional[np.random.Generator] = None) -> List[int]:
        """
        Reset every cell to the rest state u = 1, v = 0, then perturb a
        random ``seed_fraction`` of them to u = 0.5, v = 0.25.

        Returns the ids of the perturbed cells.
        """
        for cell in cells.values():
            cell.u = 1.0
            cell.v = 0.0

        if self.policy.seed_fraction <= 0.0 or not cells:
            return []

        rng = rng if rng is not None else np.random.default_rng()
        ids = sorted(cells)
        count = max(1, int(round(self.policy.seed_fraction * len(ids))))
        chosen = sorted(int(i) for i in rng.choice(ids, size=min(count, len(ids)), replace=False))
        for cid in chosen:
            cells[cid].u = 0.5
            cells[cid].v = 0.25
        logger.debug(f"Seeded reaction-diffusion at {len(chosen)} of {len(ids)} cells")
        return chosen

    def step(self, cells: Mapping[int, Cell]) -> None:
        """
        Advance every cell's concentrations by one explicit step.

        With feed and kill both zero the system is switched off: the step is
        counted but no concentration changes.
        """
        p = self.policy
        if p.feed == 0.0 and p.kill == 0.0:
            self.steps += 1
            return
        if not cells:
            return
        ids, adjacency = adjacency_matrix(cells)
        u = np.array([cells[cid].u for cid in ids])
        v = np.array([cells[cid].v for cid in ids])

        uvv = u * v * v
        du = p.ra * graph_laplacian(adjacency, u) - uvv + p.feed * (1.0 - u)
        dv = p.rb * graph_laplacian(adjacency, v) + uvv - (p.feed + p.kill) * v

        u = np.clip(u + p.dt * du, 0.0, 1.0)
        v = np.clip(v + p.dt * dv, 0.0, 1.0)
        for cid, ui, vi in zip(ids, u, v):
            cells[cid].u = float(ui)
            cells[cid].v = float(vi)
        self.steps += 1

    @staticmethod
    def concentrations(cells: Mapping[int, Cell]) -> Tuple[List[int], np.ndarray, np.ndarray]:
        """Ids and (u, v) arrays in ascending id order."""
        ids = sorted(cells)
        return (
            ids,
            np.array([cells[cid].u for cid in ids]),
            np.array([cells[cid].v for cid in ids]),
        )


__all__ = [
    "ReactionDiffusion",
    "adjacency_matrix",
    "graph_laplacian",
]
