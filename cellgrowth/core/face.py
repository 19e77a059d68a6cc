"""
Faces derived from the connection graph.

A face is a snapshot: three cell ids plus the normal and area computed from
the positions at the time it was built. Faces are identified by their
canonical (sorted) id triple, so a triangle is the same face regardless of
winding or starting vertex.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Mapping, Tuple, Union
import numpy as np

from .cell import Cell

FaceKey = Tuple[int, int, int]


def face_key(a: int, b: int, c: int) -> FaceKey:
    """Canonical key for a triangle: its ids in ascending order."""
    return tuple(sorted((a, b, c)))


@dataclass(eq=False)
class Face:
    """
    Triangle of three cell ids with its normal and area.

    Equality, hashing and ordering use ``key`` only.
    """

    a: int
    b: int
    c: int
    normal: np.ndarray
    area: float

    @classmethod
    def from_cells(cls, cells: Mapping[int, Cell], a: int, b: int, c: int) -> "Face":
        """Build a face and compute its normal and area from current positions."""
        pa = cells[a].position
        pb = cells[b].position
        pc = cells[c].position
        normal = np.cross(pa - pb, pc - pb)
        length = float(np.linalg.norm(normal))
        area = 0.5 * length
        if length > 0.0:
            normal = normal / length
        return cls(a=a, b=b, c=c, normal=normal, area=area)

    @property
    def key(self) -> FaceKey:
        return face_key(self.a, self.b, self.c)

    @property
    def ids(self) -> Tuple[int, int, int]:
        return (self.a, self.b, self.c)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Face):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __lt__(self, other: "Face") -> bool:
        return self.key < other.key


class FaceSet:
    """
    Deduplicated collection of faces keyed by canonical id triple.

    The first face inserted for a triangle is kept; later duplicates (any
    winding) are ignored.
    """

    def __init__(self, faces: Iterable[Face] = ()):
        self._faces: Dict[FaceKey, Face] = {}
        for face in faces:
            self.add(face)

    def add(self, face: Face) -> bool:
        """Insert ``face``; return False if an equal face was already present."""
        key = face.key
        if key in self._faces:
            return False
        self._faces[key] = face
        return True

    def clear(self) -> None:
        self._faces.clear()

    def __len__(self) -> int:
        return len(self._faces)

    def __iter__(self) -> Iterator[Face]:
        return iter(self._faces.values())

    def __contains__(self, item: Union[Face, Tuple[int, int, int]]) -> bool:
        if isinstance(item, Face):
            return item.key in self._faces
        return face_key(*item) in self._faces

    def sorted(self) -> List[Face]:
        """Faces in ascending canonical-key order."""
        return [self._faces[k] for k in sorted(self._faces)]

    def total_area(self) -> float:
        return float(sum(f.area for f in self._faces.values()))

    def as_arrays(self, cells: Mapping[int, Cell]) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Flatten to index arrays for rendering collaborators.

        Returns
        -------
        vertices : np.ndarray
            (V, 3) positions of every cell, in ascending id order
        faces : np.ndarray
            (F, 3) vertex indices, one row per face in canonical-key order,
            wound as the face was first inserted
        ids : np.ndarray
            (V,) cell id of each vertex row
        """
        ids = np.array(sorted(cells), dtype=int)
        index = {cid: i for i, cid in enumerate(ids)}
        vertices = (
            np.array([cells[cid].position for cid in ids])
            if len(ids) else np.zeros((0, 3))
        )
        faces = np.array(
            [[index[f.a], index[f.b], index[f.c]] for f in self.sorted()],
            dtype=int,
        ).reshape(-1, 3)
        return vertices, faces, ids


def build_faces(cells: Mapping[int, Cell]) -> FaceSet:
    """
    Enumerate every triangle implied by the connection graph.

    Two neighbors of a cell that are linked to each other close a triangle
    with it. Each triangle is found once per corner; the set keeps one.
    """
    face_set = FaceSet()
    for cid in sorted(cells):
        cell = cells[cid]
        conns = cell.connections
        for i in range(len(conns)):
            a = conns[i]
            for j in range(i + 1, len(conns)):
                b = conns[j]
                if face_key(cid, a, b) in face_set:
                    continue
                if cells[a].is_connected(b):
                    face_set.add(Face.from_cells(cells, cid, a, b))
    return face_set


__all__ = [
    "Face",
    "FaceKey",
    "FaceSet",
    "build_faces",
    "face_key",
]
