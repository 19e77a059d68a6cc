"""
Seed geometry: a subdivided icosahedron of point nodes.

Subdivision works on a flat queue of triangles (each a (3, 3) array of
corner positions), so shared corners are duplicated while subdividing and
merged afterwards with a tolerance-bucketed lookup rather than exact float
comparison.
"""

from collections import defaultdict, deque
from typing import Deque, Dict, List, Set, Tuple
import math
import numpy as np

_PHI = (1.0 + math.sqrt(5.0)) / 2.0

ICOSA_VERTICES = [
    (-1, _PHI, 0),
    (1, _PHI, 0),
    (-1, -_PHI, 0),
    (1, -_PHI, 0),
    (0, -1, _PHI),
    (0, 1, _PHI),
    (0, -1, -_PHI),
    (0, 1, -_PHI),
    (_PHI, 0, -1),
    (_PHI, 0, 1),
    (-_PHI, 0, -1),
    (-_PHI, 0, 1),
]

ICOSA_FACES = [
    (0, 11, 5),
    (0, 5, 1),
    (0, 1, 7),
    (0, 7, 10),
    (0, 10, 11),
    (1, 5, 9),
    (5, 11, 4),
    (11, 10, 2),
    (10, 7, 6),
    (7, 1, 8),
    (3, 9, 4),
    (3, 4, 2),
    (3, 2, 6),
    (3, 6, 8),
    (3, 8, 9),
    (4, 9, 5),
    (2, 4, 11),
    (6, 2, 10),
    (8, 6, 7),
    (9, 8, 1),
]


def icosa_triangles(radius: float = 1.0) -> Deque[np.ndarray]:
    """The 20 icosahedron faces as corner triples on a sphere of ``radius``."""
    verts = np.array(ICOSA_VERTICES, dtype=float)
    verts *= radius / np.linalg.norm(verts, axis=1)[:, None]
    return deque(verts[list(face)].copy() for face in ICOSA_FACES)


def subdivide_iteration(triangles: Deque[np.ndarray], radius: float) -> Deque[np.ndarray]:
    """Replace every triangle by four, pushing edge midpoints onto the sphere."""
    out: Deque[np.ndarray] = deque()
    while triangles:
        a, b, c = triangles.popleft()
        ab, bc, ca = (a + b) / 2.0, (b + c) / 2.0, (c + a) / 2.0
        ab *= radius / np.linalg.norm(ab)
        bc *= radius / np.linalg.norm(bc)
        ca *= radius / np.linalg.norm(ca)
        out.append(np.array([a, ab, ca]))
        out.append(np.array([b, bc, ab]))
        out.append(np.array([c, ca, bc]))
        out.append(np.array([ab, bc, ca]))
    return out


def remove_duplicates(
    points: np.ndarray,
    tolerance: float = 1e-6,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Merge points closer than ``tolerance``.

    Points are bucketed on a grid of pitch ``tolerance``; each point is
    compared against the 27 buckets around it, so near-equal points that
    straddle a bucket boundary still merge.

    Returns
    -------
    unique : np.ndarray
        (U, 3) merged points in first-seen order
    index : np.ndarray
        (N,) index into ``unique`` for every input point
    """
    buckets: Dict[Tuple[int, int, int], List[int]] = defaultdict(list)
    unique: List[np.ndarray] = []
    index = np.empty(len(points), dtype=int)
    tol2 = tolerance * tolerance

    for n, p in enumerate(points):
        key = tuple(int(k) for k in np.floor(p / tolerance))
        match = -1
        for di in (-1, 0, 1):
            for dj in (-1, 0, 1):
                for dk in (-1, 0, 1):
                    for u in buckets.get((key[0] + di, key[1] + dj, key[2] + dk), ()):
                        delta = unique[u] - p
                        if float(delta @ delta) <= tol2:
                            match = u
                            break
                    if match >= 0:
                        break
                if match >= 0:
                    break
        if match < 0:
            match = len(unique)
            unique.append(np.asarray(p, dtype=float))
            buckets[key].append(match)
        index[n] = match

    return np.array(unique).reshape(-1, 3), index


def subdivided_icosahedron(
    levels: int,
    radius: float = 1.0,
    tolerance: float = 1e-6,
) -> Tuple[np.ndarray, List[Tuple[int, int]]]:
    """
    Vertices and edges of an icosahedron subdivided ``levels`` times.

    Parameters
    ----------
    levels : int
        Number of midpoint subdivision passes (0 gives the icosahedron)
    radius : float
        Sphere radius the vertices lie on
    tolerance : float
        Merge distance for duplicate corners, relative to ``radius``

    Returns
    -------
    vertices : np.ndarray
        (V, 3) unique vertex positions; V = 10 * 4**levels + 2
    edges : List[Tuple[int, int]]
        Unique undirected edges (i < j) along triangle sides
    """
    if levels < 0:
        raise ValueError(f"levels must be >= 0, got {levels}")
    if radius <= 0:
        raise ValueError(f"radius must be positive, got {radius}")

    triangles = icosa_triangles(radius)
    for _ in range(levels):
        triangles = subdivide_iteration(triangles, radius)

    corners = np.concatenate(list(triangles), axis=0)
    vertices, index = remove_duplicates(corners, tolerance * radius)

    edges: Set[Tuple[int, int]] = set()
    for t in range(len(triangles)):
        i, j, k = index[3 * t:3 * t + 3]
        for u, v in ((i, j), (j, k), (k, i)):
            edges.add((int(min(u, v)), int(max(u, v))))

    return vertices, sorted(edges)


__all__ = [
    "ICOSA_VERTICES",
    "ICOSA_FACES",
    "icosa_triangles",
    "subdivide_iteration",
    "remove_duplicates",
    "subdivided_icosahedron",
]
