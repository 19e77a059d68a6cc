"""Core data structures for cellular growth meshes."""

from .cell import Cell, CellParams, connect, disconnect, triweight, triweight_falloff
from .errors import TopologyError
from .face import Face, FaceSet, build_faces, face_key
from .simulation import Simulation

__all__ = [
    "Cell",
    "CellParams",
    "connect",
    "disconnect",
    "triweight",
    "triweight_falloff",
    "TopologyError",
    "Face",
    "FaceSet",
    "build_faces",
    "face_key",
    "Simulation",
]
