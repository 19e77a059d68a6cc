"""
Operations on the cell graph: neighbor ordering, splitting, normals, and
food distribution.
"""

from .ring import MAX_RING_SIZE, find_next, order_neighbors, select_split_axis, is_closable
from .split import MIN_SPLIT_RING, split_cell
from .normals import estimate_normal
from .reaction_diffusion import ReactionDiffusion, adjacency_matrix, graph_laplacian
from .food import (
    farthest_cell,
    constant_food,
    breadth_food,
    density_food,
    x_axis_density_food,
    planar_food,
    face_food,
    reaction_diffusion_food,
    distribute_food,
)

__all__ = [
    # Ring
    "MAX_RING_SIZE",
    "find_next",
    "order_neighbors",
    "select_split_axis",
    "is_closable",
    # Split
    "MIN_SPLIT_RING",
    "split_cell",
    # Normals
    "estimate_normal",
    # Reaction-diffusion
    "ReactionDiffusion",
    "adjacency_matrix",
    "graph_laplacian",
    # Food
    "farthest_cell",
    "constant_food",
    "breadth_food",
    "density_food",
    "x_axis_density_food",
    "planar_food",
    "face_food",
    "reaction_diffusion_food",
    "distribute_food",
]
