"""Analysis of growth meshes: topology validation and summary metrics."""

from .metrics import MeshMetrics, compute_mesh_metrics
from .topology import validate_topology

__all__ = [
    "MeshMetrics",
    "compute_mesh_metrics",
    "validate_topology",
]
