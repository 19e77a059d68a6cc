"""Spatial indexing for proximity queries."""

from .grid_index import PointGridIndex
from .kdtree_index import KDTreeIndex

__all__ = ["KDTreeIndex", "PointGridIndex"]
