"""
Cellular Growth - procedural growth of triangulated surfaces.

A mesh of point-mass cells joined by elastic links relaxes every frame under
spring, planar-smoothing, bulge and collision forces. Cells accumulate food
from a pluggable distribution policy and split once they cross a threshold,
inserting a new node and rewiring the local fan of triangles. The result is
an organic, coral- or membrane-like surface.

Main Entry Points:
    - Simulation: owns the population and runs the frame loop
    - split_cell(): mesh surgery on a single cell
    - validate_topology(): check graph invariants and the fan precondition
    - to_trimesh(): hand the current surface to a renderer

Example:
    >>> from cellgrowth import Simulation
    >>> from growth_policies import SimulationPolicy, FoodPolicy, FoodMode
    >>>
    >>> sim = Simulation(
    ...     SimulationPolicy(split_threshold=5.0, seed=0),
    ...     FoodPolicy(mode=FoodMode.BREADTH, amount=1.0, decay=0.7),
    ... )
    >>> sim.initialize()
    >>> reports = sim.run(100)
    >>> sim.population >= 162
    True
"""

from .core import (
    Cell,
    CellParams,
    Face,
    FaceSet,
    Simulation,
    TopologyError,
    build_faces,
    triweight,
    triweight_falloff,
)
from .ops import order_neighbors, select_split_axis, split_cell, distribute_food
from .geometry import subdivided_icosahedron
from .spatial import KDTreeIndex, PointGridIndex
from .analysis import validate_topology, compute_mesh_metrics, MeshMetrics
from .adapters import to_networkx_graph, to_trimesh

__all__ = [
    # Core types
    "Cell",
    "CellParams",
    "Face",
    "FaceSet",
    "Simulation",
    "TopologyError",
    # Operations
    "build_faces",
    "triweight",
    "triweight_falloff",
    "order_neighbors",
    "select_split_axis",
    "split_cell",
    "distribute_food",
    # Geometry / spatial
    "subdivided_icosahedron",
    "KDTreeIndex",
    "PointGridIndex",
    # Analysis
    "validate_topology",
    "compute_mesh_metrics",
    "MeshMetrics",
    # Adapters
    "to_networkx_graph",
    "to_trimesh",
]
