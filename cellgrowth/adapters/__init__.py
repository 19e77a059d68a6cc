"""Adapters converting simulation state to third-party graph and mesh types."""

from .networkx_adapter import to_networkx_graph
from .trimesh_adapter import to_trimesh

__all__ = [
    "to_networkx_graph",
    "to_trimesh",
]
