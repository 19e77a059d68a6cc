"""
Simulation: owns the cell population and drives the frame loop.

One ``update()`` call runs a whole frame:

1. (optional) re-derive normals from the pre-frame geometry
2. rebuild the spatial index from committed positions
3. every cell computes its targets against that snapshot
4. every cell commits position and queued food
5. the food policy queues the next round of food
6. every cell whose committed food exceeds the split threshold splits
7. the face set is rebuilt from the new graph

Readers (renderers, exporters) must only inspect the state between
``update()`` calls.
"""

from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
import logging
import numpy as np
from tqdm import tqdm

from growth_policies import (
    FoodMode,
    FoodPolicy,
    OperationReport,
    ReactionDiffusionPolicy,
    SimulationPolicy,
    coerce_float,
    validate_policy,
)

from ..geometry.icosphere import subdivided_icosahedron
from ..ops.food import distribute_food, farthest_cell
from ..ops.normals import estimate_normal
from ..ops.reaction_diffusion import ReactionDiffusion
from ..ops.split import split_cell
from ..spatial.kdtree_index import KDTreeIndex
from .cell import Cell, CellParams, connect
from .errors import TopologyError
from .face import FaceSet, build_faces

logger = logging.getLogger(__name__)


class Simulation:
    """
    Cellular growth simulation over a triangulated mesh of cells.

    Parameters
    ----------
    policy : SimulationPolicy, optional
        Global tunables for the force model and frame loop
    food_policy : FoodPolicy, optional
        Food distribution strategy and its parameters
    rd_policy : ReactionDiffusionPolicy, optional
        Gray-Scott constants (used by the reaction_diffusion food mode)
    spatial_index : optional
        Proximity index with ``rebuild(cells, cell_size)`` and
        ``query(position, radius, exclude)``; defaults to KDTreeIndex (PointGridIndex is a
        drop-in alternative)
    """

    def __init__(
        self,
        policy: Optional[SimulationPolicy] = None,
        food_policy: Optional[FoodPolicy] = None,
        rd_policy: Optional[ReactionDiffusionPolicy] = None,
        spatial_index=None,
    ):
        self.policy = policy or SimulationPolicy()
        self.food_policy = food_policy or FoodPolicy()
        rd_policy = rd_policy or ReactionDiffusionPolicy()

        errors = (
            validate_policy(self.policy)
            + validate_policy(self.food_policy)
            + validate_policy(rd_policy)
        )
        if errors:
            raise ValueError("Invalid simulation configuration: " + "; ".join(errors))

        self.reaction_diffusion = ReactionDiffusion(rd_policy)
        self.spatial_index = spatial_index if spatial_index is not None else KDTreeIndex()
        self.rng = np.random.default_rng(self.policy.seed)

        self._cells: Dict[int, Cell] = {}
        self._next_id = 0
        self.faces = FaceSet()
        self.frame_num = 0
        self.farthest: Optional[int] = None

    # --- accessors ---------------------------------------------------------

    @property
    def cells(self) -> Mapping[int, Cell]:
        """Read-only id -> Cell view of the population."""
        return MappingProxyType(self._cells)

    def get_cells(self) -> List[Cell]:
        """Cells in ascending id order."""
        return [self._cells[cid] for cid in sorted(self._cells)]

    @property
    def population(self) -> int:
        return len(self._cells)

    @property
    def edge_count(self) -> int:
        return sum(c.degree for c in self._cells.values()) // 2

    def set_split_threshold(self, split_threshold: float) -> None:
        self.policy.split_threshold = coerce_float(split_threshold, self.policy.split_threshold)

    def set_rd_values(self, feed: float, kill: float, ra: float, rb: float) -> None:
        self.reaction_diffusion.set_values(
            coerce_float(feed), coerce_float(kill), coerce_float(ra), coerce_float(rb)
        )

    # --- population --------------------------------------------------------

    def _issue_id(self) -> int:
        cid = self._next_id
        self._next_id += 1
        return cid

    def add_cell(
        self,
        position: Sequence[float],
        normal: Optional[Sequence[float]] = None,
        params: Optional[CellParams] = None,
    ) -> Cell:
        """Add an unlinked cell with the global tunables (or ``params``)."""
        cell = Cell(
            id=self._issue_id(),
            position=np.asarray(position, dtype=float),
            normal=np.zeros(3) if normal is None else np.asarray(normal, dtype=float),
            params=params or self.policy.cell_params(),
        )
        self._cells[cell.id] = cell
        return cell

    def link(self, a: int, b: int) -> None:
        connect(self._cells[a], self._cells[b])

    def seed_from_mesh(
        self,
        vertices: np.ndarray,
        edges: Iterable[Tuple[int, int]],
        normals: Optional[np.ndarray] = None,
    ) -> List[int]:
        """
        Replace the population with one cell per vertex and a link per edge.

        Parameters
        ----------
        vertices : np.ndarray
            (V, 3) positions
        edges : iterable of (int, int)
            Vertex index pairs to link
        normals : np.ndarray, optional
            (V, 3) initial normals; zero vectors if omitted

        Returns
        -------
        List[int]
            Cell id of each vertex row
        """
        self._cells.clear()
        self._next_id = 0
        self.frame_num = 0

        vertices = np.asarray(vertices, dtype=float).reshape(-1, 3)
        ids = []
        for i, position in enumerate(vertices):
            normal = None if normals is None else normals[i]
            ids.append(self.add_cell(position, normal).id)
        for i, j in edges:
            self.link(ids[i], ids[j])

        if self.food_policy.mode == FoodMode.REACTION_DIFFUSION:
            self.reaction_diffusion.seed(self._cells, self.rng)

        self.faces = build_faces(self._cells)
        self.farthest = None
        logger.info(
            f"Seeded {self.population} cells, {self.edge_count} links, {len(self.faces)} faces"
        )
        return ids

    def initialize(self) -> None:
        """Seed the population with a subdivided icosahedron."""
        vertices, edges = subdivided_icosahedron(
            self.policy.icosphere_levels, self.policy.icosphere_radius
        )
        normals = vertices / np.linalg.norm(vertices, axis=1)[:, None]
        self.seed_from_mesh(vertices, edges, normals)

    def reset(self) -> None:
        """Discard the population and re-seed from scratch."""
        self.rng = np.random.default_rng(self.policy.seed)
        self.reaction_diffusion.steps = 0
        self.initialize()

    # --- frame loop --------------------------------------------------------

    def _recompute_normals(self) -> None:
        centroid = np.mean([c.position for c in self._cells.values()], axis=0)
        normals = {
            cid: estimate_normal(self._cells, cell, reference=centroid)
            for cid, cell in self._cells.items()
        }
        for cid, normal in normals.items():
            self._cells[cid].normal = normal

    def _compute_targets(self) -> None:
        if not self.policy.collisions_enabled:
            for cell in self._cells.values():
                cell.update(self._cells)
            return

        self.spatial_index.rebuild(self._cells, cell_size=self.policy.roi)
        for cid, cell in self._cells.items():
            collisions = self.spatial_index.query(cell.position, cell.params.roi, exclude=(cid,))
            cell.update(self._cells, collisions)

    def _recenter(self) -> None:
        centroid = np.mean([c.position for c in self._cells.values()], axis=0)
        for cell in self._cells.values():
            cell.position = cell.position - centroid

    def split(self, cell_id: int) -> Cell:
        """Split one cell and add its child to the population."""
        return split_cell(self._cells, self._cells[cell_id], self._issue_id())

    def _split_eligible(self, report: OperationReport) -> Tuple[List[int], List[int]]:
        threshold = self.policy.split_threshold
        children = []
        skipped = []
        for cid in sorted(self._cells):
            cell = self._cells[cid]
            if cell.food <= threshold:
                continue
            try:
                child = self.split(cid)
            except TopologyError as e:
                if self.policy.on_topology_error == "raise":
                    raise
                message = f"Skipped split of cell {cid}: {e}"
                logger.warning(message)
                report.add_warning(message)
                skipped.append(cid)
                continue
            children.append(child.id)
        return children, skipped

    def update(self) -> OperationReport:
        """
        Advance the simulation by one frame.

        Returns
        -------
        OperationReport
            Frame metrics (population, splits, skipped splits, food queued)

        Raises
        ------
        TopologyError
            Only when ``policy.on_topology_error == "raise"``.
        """
        report = OperationReport(
            operation="update",
            requested_policy=self.policy.to_dict(),
            effective_policy=self.policy.to_dict(),
        )
        if not self._cells:
            report.add_warning("Simulation has no cells; call initialize() first")
            return report

        if self.policy.recompute_normals:
            self._recompute_normals()

        self._compute_targets()
        for cell in self._cells.values():
            cell.tick()

        if self.policy.recenter:
            self._recenter()

        seed_ids = self.food_policy.seed_ids
        if self.food_policy.mode == FoodMode.BREADTH and not seed_ids:
            self.farthest = farthest_cell(self._cells)
            seed_ids = [self.farthest]

        queued = distribute_food(
            self._cells,
            self.food_policy,
            seed_ids=seed_ids,
            faces=self.faces,
            field=self.reaction_diffusion,
            rng=self.rng,
        )

        children, skipped = self._split_eligible(report)
        self.faces = build_faces(self._cells)
        self.frame_num += 1

        report.metrics.update({
            "frame": self.frame_num,
            "population": self.population,
            "edges": self.edge_count,
            "faces": len(self.faces),
            "splits": len(children),
            "skipped_splits": len(skipped),
            "food_queued": float(sum(queued.values())),
        })
        logger.debug(
            f"Frame {self.frame_num}: {self.population} cells, "
            f"{len(children)} splits, {len(skipped)} skipped"
        )
        return report

    def run(self, frames: int, progress: bool = False) -> List[OperationReport]:
        """Run ``frames`` updates, optionally with a progress bar."""
        reports = []
        pbar = tqdm(total=frames, desc="Cellular growth", unit="frame", disable=not progress)
        for _ in range(frames):
            reports.append(self.update())
            pbar.update(1)
            pbar.set_postfix(cells=self.population)
        pbar.close()
        return reports


__all__ = ["Simulation"]
