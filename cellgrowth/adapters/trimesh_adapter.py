"""
Conversion of the derived face set to a trimesh.Trimesh for rendering.

No file I/O happens here; callers that want a file use trimesh's own export.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import trimesh
    from ..core.simulation import Simulation


def to_trimesh(sim: "Simulation") -> "trimesh.Trimesh":
    """
    Build a Trimesh from the simulation's current faces.

    Vertex rows follow ascending cell id. The cell id of every vertex is
    stored in ``mesh.metadata["cell_ids"]``. Vertices are not merged or
    reordered (``process=False``) so rows stay aligned with cell ids.
    """
    import trimesh

    vertices, faces, ids = sim.faces.as_arrays(sim.cells)
    mesh = trimesh.Trimesh(vertices=vertices, faces=faces, process=False)
    mesh.metadata["cell_ids"] = ids.tolist()
    mesh.metadata["frame"] = sim.frame_num
    return mesh


__all__ = ["to_trimesh"]
