"""
Cell: a point-mass node of the growth mesh.

A cell owns its position, its link list, and the per-frame target
computations of the relaxation model. Cells refer to each other only by
integer id; every method that needs neighbor positions takes the id -> Cell
mapping owned by the simulation.

Each frame is double-buffered: ``update()`` reads the committed positions of
all neighbors and writes only ``next_position``, then ``tick()`` commits.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Optional
import numpy as np

TRIWEIGHT_SCALE = 35.0 / 32.0


@dataclass(frozen=True)
class CellParams:
    """
    Per-cell copy of the force-model tunables.

    Frozen so a lineage can only diverge by swapping in a new instance
    (``dataclasses.replace``); a split child shares its parent's instance.
    """
    link_rest_length: float = 1.0
    spring_factor: float = 0.1
    planar_factor: float = 0.1
    bulge_factor: float = 0.1
    repulsion_strength: float = 0.5
    roi: float = 2.0


def triweight(distance: float, roi: float) -> float:
    """
    Triweight kernel weight for a separation of ``distance``.

    (35/32) * (1 - (d/roi)^2)^3 inside the region of influence, 0 outside.
    """
    distance = abs(distance)
    if roi <= 0.0 or distance >= roi:
        return 0.0
    u = distance / roi
    return TRIWEIGHT_SCALE * (1.0 - u * u) ** 3


def triweight_falloff(distance: float, roi: float) -> float:
    """Triweight kernel normalized to 1.0 at zero separation."""
    return triweight(distance, roi) / TRIWEIGHT_SCALE


def _normalize(v: np.ndarray) -> np.ndarray:
    n = float(np.linalg.norm(v))
    if n == 0.0 or not np.isfinite(n):
        return np.zeros(3)
    return v / n


@dataclass
class Cell:
    """
    Node in the growth mesh.

    ``connections`` holds neighbor ids. The graph is kept symmetric by
    ``connect()``/``disconnect()``; ``add_link``/``remove_link`` only touch
    this side and are meant for surgery code that fixes both ends.
    """

    id: int
    position: np.ndarray
    normal: np.ndarray = field(default_factory=lambda: np.zeros(3))
    params: CellParams = field(default_factory=CellParams)
    connections: List[int] = field(default_factory=list)
    age: int = 0
    food: float = 0.0
    pending_food: float = 0.0
    frozen: bool = False
    original: bool = True
    u: float = 1.0
    v: float = 0.0

    def __post_init__(self):
        self.position = np.asarray(self.position, dtype=float).reshape(3).copy()
        self.normal = np.asarray(self.normal, dtype=float).reshape(3).copy()
        self.next_position = self.position.copy()
        self.spring_target = self.position.copy()
        self.planar_target = self.position.copy()
        self.bulge_target = self.position.copy()
        self.collision_offset = np.zeros(3)
        self.collision_count = 0

    # --- links -------------------------------------------------------------

    @property
    def degree(self) -> int:
        return len(self.connections)

    def is_connected(self, other_id: int) -> bool:
        return other_id in self.connections

    def add_link(self, other_id: int) -> None:
        """Add a one-sided link; self loops and duplicates are ignored."""
        if other_id == self.id or other_id in self.connections:
            return
        self.connections.append(other_id)

    def remove_link(self, other_id: int) -> None:
        self.connections = [c for c in self.connections if c != other_id]

    def neighbor_positions(self, cells: Mapping[int, "Cell"]) -> np.ndarray:
        if not self.connections:
            return np.zeros((0, 3))
        return np.array([cells[c].position for c in self.connections])

    # --- food --------------------------------------------------------------

    def add_food(self, amount: float) -> None:
        """Queue food; it becomes visible on the next tick()."""
        self.pending_food += amount

    def reset_food(self) -> None:
        """Clear committed food; food queued this frame still lands on tick()."""
        self.food = 0.0

    # --- targets -----------------------------------------------------------

    def compute_spring_target(self, cells: Mapping[int, "Cell"]) -> np.ndarray:
        """
        Average of the positions that would put each neighbor at exactly
        the rest length along the current separation direction.
        """
        if not self.connections:
            return self.position.copy()

        rest = self.params.link_rest_length
        total = np.zeros(3)
        for cid in self.connections:
            other = cells[cid].position
            delta = _normalize(self.position - other) * rest
            delta += other - self.position
            total += delta
        return self.position + total / len(self.connections)

    def compute_planar_target(self, cells: Mapping[int, "Cell"]) -> np.ndarray:
        """Unweighted centroid of the neighbors."""
        if not self.connections:
            return self.position.copy()
        return self.neighbor_positions(cells).mean(axis=0)

    def compute_bulge_target(self, cells: Mapping[int, "Cell"]) -> np.ndarray:
        """
        Point along the normal that puts every neighbor on a spherical cap
        of radius ``link_rest_length``.

        For each neighbor the triangle (self, neighbor, projected point) is
        solved with the law of sines and cosines. Neighbors whose triangle
        is degenerate (an angle comes out NaN) are skipped, but the sum is
        still divided by the full neighbor count.
        """
        if not self.connections:
            return self.position.copy()

        rest = self.params.link_rest_length
        total = 0.0
        with np.errstate(invalid="ignore", divide="ignore"):
            for cid in self.connections:
                d = cells[cid].position - self.position
                d_len = float(np.linalg.norm(d))
                if d_len == 0.0:
                    continue
                theta_l = np.arccos(np.dot(d, self.normal) / d_len)
                theta_d = np.arcsin(d_len * np.sin(theta_l) / rest)
                theta_c = np.pi - theta_d - theta_l
                if np.isnan(theta_c):
                    continue
                radicand = rest ** 2 + d_len ** 2 - 2.0 * d_len * rest * np.cos(theta_c)
                total += float(np.sqrt(max(radicand, 0.0)))

        bulge_distance = total / len(self.connections)
        return self.position + self.normal * bulge_distance

    def compute_collision_offset(
        self,
        cells: Mapping[int, "Cell"],
        collisions: Iterable[int],
    ) -> np.ndarray:
        """
        Repulsion from every cell in ``collisions``, each weighted by the
        normalized triweight falloff (1.0 at zero separation).
        """
        collisions = [c for c in collisions if c != self.id]
        self.collision_count = len(collisions)
        if not collisions:
            return np.zeros(3)

        roi = self.params.roi
        offset = np.zeros(3)
        for cid in collisions:
            away = self.position - cells[cid].position
            dist = float(np.linalg.norm(away))
            offset += _normalize(away) * triweight_falloff(dist, roi)
        offset /= len(collisions)
        return offset * self.params.repulsion_strength

    def update(
        self,
        cells: Mapping[int, "Cell"],
        collisions: Optional[Iterable[int]] = None,
    ) -> np.ndarray:
        """
        Compute all targets and blend them into ``next_position``.

        Passing ``collisions=None`` skips the repulsion term entirely.
        Reads only committed positions, so cells can be updated in any order.
        """
        self.normal = _normalize(self.normal)

        self.spring_target = self.compute_spring_target(cells)
        self.planar_target = self.compute_planar_target(cells)
        self.bulge_target = self.compute_bulge_target(cells)
        if collisions is None:
            self.collision_offset = np.zeros(3)
        else:
            self.collision_offset = self.compute_collision_offset(cells, collisions)

        p = self.params
        self.next_position = (
            self.position
            + p.spring_factor * (self.spring_target - self.position)
            + p.planar_factor * (self.planar_target - self.position)
            + p.bulge_factor * (self.bulge_target - self.position)
            + self.collision_offset
        )
        self.age += 1
        return self.next_position

    def tick(self) -> None:
        """Commit the pending position and food."""
        if not self.frozen:
            self.position = self.next_position.copy()
        self.food += self.pending_food
        self.pending_food = 0.0


def connect(a: Cell, b: Cell) -> None:
    """Link two cells symmetrically."""
    if a.id == b.id:
        raise ValueError(f"Cannot link cell {a.id} to itself")
    a.add_link(b.id)
    b.add_link(a.id)


def disconnect(a: Cell, b: Cell) -> None:
    """Remove the link between two cells on both sides."""
    a.remove_link(b.id)
    b.remove_link(a.id)


__all__ = [
    "Cell",
    "CellParams",
    "connect",
    "disconnect",
    "triweight",
    "triweight_falloff",
    "TRIWEIGHT_SCALE",
]
