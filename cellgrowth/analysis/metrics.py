"""
Mesh metrics for a growth simulation.

This module provides a summary of population, link lengths and surface
statistics for logging and for hosts that track growth over time.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, TYPE_CHECKING
import numpy as np

if TYPE_CHECKING:
    from ..core.simulation import Simulation


@dataclass
class MeshMetrics:
    """
    Computed metrics for a growth mesh.

    Lengths are in the same units as cell positions.
    """
    frame: int = 0
    population: int = 0
    edge_count: int = 0
    face_count: int = 0

    mean_link_length: float = 0.0
    min_link_length: float = 0.0
    max_link_length: float = 0.0
    mean_degree: float = 0.0

    total_area: float = 0.0
    total_food: float = 0.0

    bounding_box: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "frame": self.frame,
            "population": self.population,
            "edge_count": self.edge_count,
            "face_count": self.face_count,
            "mean_link_length": self.mean_link_length,
            "min_link_length": self.min_link_length,
            "max_link_length": self.max_link_length,
            "mean_degree": self.mean_degree,
            "total_area": self.total_area,
            "total_food": self.total_food,
            "bounding_box": self.bounding_box,
        }


def compute_mesh_metrics(sim: "Simulation") -> MeshMetrics:
    """
    Compute summary metrics for the simulation's current state.

    Parameters
    ----------
    sim : Simulation
        Simulation to analyze

    Returns
    -------
    MeshMetrics
        Computed metrics
    """
    cells = sim.cells
    metrics = MeshMetrics(
        frame=sim.frame_num,
        population=len(cells),
        edge_count=sim.edge_count,
        face_count=len(sim.faces),
        total_area=sim.faces.total_area(),
    )
    if not cells:
        return metrics

    lengths = []
    for cid, cell in cells.items():
        for other in cell.connections:
            if cid < other:
                lengths.append(float(np.linalg.norm(cell.position - cells[other].position)))
    if lengths:
        metrics.mean_link_length = float(np.mean(lengths))
        metrics.min_link_length = float(np.min(lengths))
        metrics.max_link_length = float(np.max(lengths))

    metrics.mean_degree = float(np.mean([c.degree for c in cells.values()]))
    metrics.total_food = float(sum(c.food for c in cells.values()))

    positions = np.array([c.position for c in cells.values()])
    lo = positions.min(axis=0)
    hi = positions.max(axis=0)
    metrics.bounding_box = {
        "x_min": float(lo[0]), "x_max": float(hi[0]),
        "y_min": float(lo[1]), "y_max": float(hi[1]),
        "z_min": float(lo[2]), "z_max": float(hi[2]),
    }
    return metrics


__all__ = [
    "MeshMetrics",
    "compute_mesh_metrics",
]
